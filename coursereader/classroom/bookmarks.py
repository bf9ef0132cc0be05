"""
BookmarkManager - Persist and restore the last reading position.

Saving is remote-first with a local-cache fallback; loading tries the
remote store, then the cache. Only the latest save matters (no history).
"""

import logging
from concurrent.futures import Future
from typing import Optional

from pydantic import ValidationError

from coursereader.clients import ProgressStore, RemoteError
from coursereader.schemas import Bookmark, Course

from .cache import CacheKind, LocalCache, cache_key, read_json
from .sync import SyncCoordinator, SyncOutcome

logger = logging.getLogger(__name__)


class BookmarkManager:
    def __init__(
        self,
        course_id: str,
        store: ProgressStore,
        cache: LocalCache,
        coordinator: SyncCoordinator,
    ):
        self.course_id = course_id
        self.store = store
        self.cache = cache
        self.coordinator = coordinator

    def save_bookmark(self, topic_id: str, page_index: int) -> "Future[SyncOutcome]":
        """Mirror the current position; falls back to the cache if the remote write fails."""
        bookmark = Bookmark(topic_id=topic_id, page_index=max(0, page_index))
        course_id = self.course_id
        return self.coordinator.dispatch(
            "bookmark",
            course_id,
            lambda: self.store.post_bookmark(course_id, bookmark),
            CacheKind.BOOKMARK,
            bookmark.to_wire(),
        )

    def load_bookmark(self, course: Course) -> Optional[Bookmark]:
        """
        Restore the saved position for a course.

        The remote store is asked first; if it fails or has nothing, the
        local cache is used. A bookmark whose topic is not part of the course
        is treated as absent, and its page index is clamped to the topic.
        """
        bookmark = self._fetch_remote()
        if bookmark is None:
            bookmark = self._read_local()
        if bookmark is None:
            return None

        topic = course.get_topic(bookmark.topic_id)
        if topic is None:
            logger.info(f"Ignoring bookmark for unknown topic {bookmark.topic_id} in course {course.id}")
            return None

        page_index = min(bookmark.page_index, max(topic.last_page_index, 0))
        if page_index != bookmark.page_index:
            return Bookmark(topic_id=bookmark.topic_id, page_index=page_index)
        return bookmark

    def _fetch_remote(self) -> Optional[Bookmark]:
        try:
            return self.store.get_bookmark(self.course_id)
        except RemoteError as e:
            logger.warning(f"Could not fetch bookmark for course {self.course_id}, trying local copy: {e}")
            return None

    def _read_local(self) -> Optional[Bookmark]:
        data = read_json(self.cache, cache_key(CacheKind.BOOKMARK, self.course_id))
        if data is None:
            return None
        try:
            return Bookmark.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Ignoring cached bookmark for course {self.course_id}: {e}")
            return None
