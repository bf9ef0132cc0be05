"""
ProgressTracker - Per-page view tracking and weighted course progress.

Tracks, for the open course:
- Which pages of each topic have been viewed (sets of page indices)
- Which topics are complete
- Recorded per-topic percents (remote values, 100 once complete)
- Weighted overall progress: viewed pages / all pages in the course

Every mutation is applied locally first, written through to the local
cache, then mirrored to the remote store via the SyncCoordinator.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from coursereader.clients import ProgressStore, RemoteError
from coursereader.schemas import (
    Course,
    ProgressPayload,
    Topic,
    ViewState,
    decode_completed_topics,
    decode_viewed_pages,
    encode_viewed_pages,
)

from .cache import DASHBOARD_PROGRESS_KEY, CacheKind, LocalCache, cache_key, read_json, write_json
from .sync import SyncCoordinator

logger = logging.getLogger(__name__)


def percent(part: int, whole: int) -> int:
    """Integer percentage rounded half up; 0 when there is nothing to count."""
    if whole <= 0:
        return 0
    return int(math.floor(100 * part / whole + 0.5))


@dataclass(frozen=True)
class TopicCompletion:
    """Result of an explicit "mark complete" action."""
    topic_id: str
    next_topic_index: Optional[int]  # None when the completed topic was the last one

    @property
    def course_completed(self) -> bool:
        return self.next_topic_index is None


class ProgressTracker:
    """
    Maintain view state for one course.

    Combines the resolved Course (structure) with a ViewState (user state).
    None of the public operations raise; invalid topic ids or page indices
    are ignored.
    """

    def __init__(
        self,
        course: Course,
        state: ViewState,
        cache: LocalCache,
        coordinator: SyncCoordinator,
        store: ProgressStore,
    ):
        self.course = course
        self.state = state
        self.cache = cache
        self.coordinator = coordinator
        self.store = store

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load_state(self) -> ViewState:
        """
        Populate the view state from the stores at course-open time.

        Viewed pages and completion flags come from the local cache; recorded
        per-topic percents from the remote store (else the cached copy of the
        last progress sync). Topics recorded at 100% are merged as complete.
        """
        counts = self.course.page_counts()
        course_id = self.course.id

        viewed = decode_viewed_pages(
            read_json(self.cache, cache_key(CacheKind.VIEWED_PAGES, course_id)), counts
        )
        completed = {
            topic_id: done
            for topic_id, done in decode_completed_topics(
                read_json(self.cache, cache_key(CacheKind.COMPLETED_TOPICS, course_id))
            ).items()
            if topic_id in counts
        }
        recorded = self._load_recorded_progress()

        for topic in self.course.topics:
            if recorded.get(topic.id, 0) >= 100:
                completed[topic.id] = True
            if completed.get(topic.id):
                viewed[topic.id] = topic.page_range()
                recorded[topic.id] = 100

        self.state.viewed_pages = viewed
        self.state.completed_topics = completed
        self.state.topic_progress = recorded
        return self.state

    def _load_recorded_progress(self) -> dict[str, int]:
        counts = self.course.page_counts()
        try:
            remote = self.store.get_progress(self.course.id)
            return {
                topic_id: max(0, min(100, int(math.floor(value + 0.5))))
                for topic_id, value in remote.items()
                if topic_id in counts and math.isfinite(value)
            }
        except RemoteError as e:
            logger.warning(f"Could not fetch progress for course {self.course.id}, using local copy: {e}")

        cached = read_json(self.cache, cache_key(CacheKind.PROGRESS, self.course.id))
        if cached is None:
            return {}
        try:
            payload = ProgressPayload.model_validate(cached)
        except ValidationError as e:
            logger.warning(f"Ignoring cached progress for course {self.course.id}: {e}")
            return {}
        return {topic_id: value for topic_id, value in payload.per_topic.items() if topic_id in counts}

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def weighted_progress(self) -> int:
        """Viewed pages over all pages in the course, as a rounded percent."""
        viewed = sum(self.state.viewed_count(topic.id) for topic in self.course.topics)
        return percent(viewed, self.course.total_pages)

    def topic_percent(self, topic_id: str) -> int:
        """Display percent for a topic: recorded value or viewed ratio, whichever is higher."""
        topic = self.course.get_topic(topic_id)
        if topic is None:
            return 0
        if self.state.is_completed(topic_id):
            return 100
        viewed_ratio = percent(self.state.viewed_count(topic_id), topic.page_count)
        return max(self.state.topic_progress.get(topic_id, 0), viewed_ratio)

    def topic_percents(self) -> dict[str, int]:
        return {topic.id: self.topic_percent(topic.id) for topic in self.course.topics}

    def is_topic_complete(self, topic_id: str) -> bool:
        return self.state.is_completed(topic_id)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def mark_page_viewed(self, topic_id: str, page_index: int) -> bool:
        """
        Record a page as viewed. Idempotent.

        Returns:
            True if the page was newly recorded
        """
        topic = self.course.get_topic(topic_id)
        if topic is None or not topic.contains_page(page_index):
            logger.debug(f"Ignoring view of {topic_id}[{page_index}]: not in course {self.course.id}")
            return False

        pages = self.state.viewed_pages.setdefault(topic_id, set())
        if page_index in pages:
            return False
        pages.add(page_index)

        self._write_viewed_pages()
        self._progress_changed()
        return True

    def mark_topic_complete(self, topic_id: str) -> Optional[TopicCompletion]:
        """
        Explicitly complete a topic: every page counts as viewed.

        Returns:
            TopicCompletion naming the topic to advance to (None if the
            topic id is unknown)
        """
        idx = self.course.topic_index(topic_id)
        if idx is None:
            logger.warning(f"Cannot complete unknown topic {topic_id} in course {self.course.id}")
            return None

        self._complete(self.course.topics[idx])

        next_idx = idx + 1 if idx + 1 < len(self.course.topics) else None
        if next_idx is None:
            logger.info(f"Course {self.course.id} completed")
        return TopicCompletion(topic_id=topic_id, next_topic_index=next_idx)

    def maybe_auto_complete(self, topic_id: str, page_index: int) -> bool:
        """
        Complete a topic when its last page is reached and it is not yet
        recorded at 100%. Does not advance to the next topic.

        Returns:
            True if the topic was auto-completed by this call
        """
        topic = self.course.get_topic(topic_id)
        if topic is None or page_index != topic.last_page_index:
            return False
        if self.state.topic_progress.get(topic_id, 0) >= 100:
            return False

        logger.info(f"Auto-completing topic {topic_id} of course {self.course.id}")
        self._complete(topic)
        return True

    def _complete(self, topic: Topic) -> None:
        course_id = self.course.id

        self.state.topic_progress[topic.id] = 100
        self.state.completed_topics[topic.id] = True
        completed_snapshot = dict(self.state.completed_topics)
        write_json(self.cache, cache_key(CacheKind.COMPLETED_TOPICS, course_id), completed_snapshot)

        self.state.viewed_pages[topic.id] = topic.page_range()
        self._write_viewed_pages()

        self.coordinator.dispatch(
            "topic completion",
            course_id,
            lambda: self.store.complete_topic(course_id, topic.id),
        )
        self._progress_changed()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _write_viewed_pages(self) -> None:
        write_json(
            self.cache,
            cache_key(CacheKind.VIEWED_PAGES, self.course.id),
            encode_viewed_pages(self.state.viewed_pages),
        )

    def _progress_changed(self) -> None:
        """Write overall progress locally and mirror the progress payload remotely."""
        course_id = self.course.id
        overall = self.weighted_progress()

        self.cache.set(cache_key(CacheKind.OVERALL_PROGRESS, course_id), str(overall))
        dashboard = read_json(self.cache, DASHBOARD_PROGRESS_KEY)
        if not isinstance(dashboard, dict):
            dashboard = {}
        dashboard[course_id] = overall
        write_json(self.cache, DASHBOARD_PROGRESS_KEY, dashboard)

        payload = ProgressPayload(overall=overall, per_topic=self.topic_percents())
        self.coordinator.dispatch(
            "progress",
            course_id,
            lambda: self.store.post_progress(course_id, payload),
            CacheKind.PROGRESS,
            payload.to_wire(),
        )


def get_dashboard_progress(cache: LocalCache) -> dict[str, int]:
    """Overall percent per course, as last recorded on this device."""
    data = read_json(cache, DASHBOARD_PROGRESS_KEY)
    if not isinstance(data, dict):
        return {}
    return {str(k): v for k, v in data.items() if isinstance(v, int)}
