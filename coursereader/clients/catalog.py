"""Catalog service client: course structure lookup."""

from typing import Optional, Protocol

from coursereader.schemas import Course, CourseData

from .http import ApiClient, RemoteError


class Catalog(Protocol):
    def get_course(self, course_id: str) -> Optional[Course]: ...


class CatalogClient:
    def __init__(self, api: ApiClient):
        self.api = api

    def get_course(self, course_id: str) -> Optional[Course]:
        """
        Fetch a course with its topics.

        Returns:
            The course, or None when the catalog does not know it (404 or null)

        Raises:
            RemoteError: On network failure or a malformed payload
        """
        try:
            data = self.api.get(f"/courses/{course_id}")
        except RemoteError as e:
            if e.status_code == 404:
                return None
            raise
        return ApiClient.parse(CourseData, data).course
