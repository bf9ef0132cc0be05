"""
Progress store client - best-effort remote copy of reading state.

All operations may raise RemoteError; callers are expected to fall back to
the local cache rather than propagate.
"""

from typing import Optional, Protocol

from coursereader.schemas import (
    Bookmark,
    BookmarkData,
    NotesData,
    ProgressData,
    ProgressPayload,
)

from .http import ApiClient


class ProgressStore(Protocol):
    def get_progress(self, course_id: str) -> dict[str, float]: ...

    def post_progress(self, course_id: str, payload: ProgressPayload) -> None: ...

    def complete_topic(self, course_id: str, topic_id: str) -> None: ...

    def get_bookmark(self, course_id: str) -> Optional[Bookmark]: ...

    def post_bookmark(self, course_id: str, bookmark: Bookmark) -> None: ...

    def get_notes(self, course_id: str) -> dict[str, dict[int, str]]: ...

    def post_note(self, course_id: str, topic_id: str, page_index: int, text: str) -> None: ...


class ProgressStoreClient:
    """ProgressStore backed by the course API (`/courses/{id}/...`)."""

    def __init__(self, api: ApiClient):
        self.api = api

    # -------------------------------------------------------------------------
    # Progress
    # -------------------------------------------------------------------------

    def get_progress(self, course_id: str) -> dict[str, float]:
        """Recorded percent per topic id."""
        data = self.api.get(f"/courses/{course_id}/progress")
        return ApiClient.parse(ProgressData, data).progress

    def post_progress(self, course_id: str, payload: ProgressPayload) -> None:
        self.api.post(f"/courses/{course_id}/progress", payload.to_wire())

    def complete_topic(self, course_id: str, topic_id: str) -> None:
        self.api.post(f"/courses/{course_id}/topics/{topic_id}/complete")

    # -------------------------------------------------------------------------
    # Bookmark
    # -------------------------------------------------------------------------

    def get_bookmark(self, course_id: str) -> Optional[Bookmark]:
        data = self.api.get(f"/courses/{course_id}/bookmark")
        return ApiClient.parse(BookmarkData, data).bookmark

    def post_bookmark(self, course_id: str, bookmark: Bookmark) -> None:
        self.api.post(f"/courses/{course_id}/bookmark", bookmark.to_wire())

    # -------------------------------------------------------------------------
    # Notes
    # -------------------------------------------------------------------------

    def get_notes(self, course_id: str) -> dict[str, dict[int, str]]:
        data = self.api.get(f"/courses/{course_id}/notes")
        return ApiClient.parse(NotesData, data).notes

    def post_note(self, course_id: str, topic_id: str, page_index: int, text: str) -> None:
        self.api.post(
            f"/courses/{course_id}/topics/{topic_id}/images/{page_index}/note",
            {"note": text},
        )
