"""
ReaderSession - View-model of the paginated course reader.

Combines ContentResolver (structure), ProgressTracker (view state) and
BookmarkManager (resume position) for one open course, and reacts to
navigation events:
- every page change saves the bookmark and records the page as viewed
- arriving at a topic's last page auto-completes it (without advancing)
- "mark complete" completes the topic and advances to the next one

All state shown to the user is local; remote writes happen in the
background and never block or undo a local change.
"""

import logging
from collections import deque
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Optional

from coursereader.clients import AuthService, ProgressStore, RemoteError
from coursereader.schemas import Bookmark, Course, Topic, User, ViewState, decode_notes, encode_notes

from .bookmarks import BookmarkManager
from .cache import CacheKind, LocalCache, cache_key, read_json, write_json
from .loader import ContentResolver
from .progress import ProgressTracker, TopicCompletion
from .sync import SyncCoordinator, SyncOutcome

logger = logging.getLogger(__name__)


class LoginRequired(Exception):
    """Raised by ReaderSession.open() when nobody is signed in."""


@dataclass(frozen=True)
class Notice:
    """Transient user-facing message (rendered as a toast)."""
    title: str
    message: str


class ReaderSession:
    """
    Reader state for the currently open course.

    Usage::

        session = ReaderSession(auth, resolver, store, cache, coordinator)
        session.open("option-analysis-strategy")
        session.begin_reading()          # landing page is on screen
        session.next_page()
        session.mark_topic_complete()
    """

    def __init__(
        self,
        auth: AuthService,
        resolver: ContentResolver,
        store: ProgressStore,
        cache: LocalCache,
        coordinator: SyncCoordinator,
    ):
        self.auth = auth
        self.resolver = resolver
        self.store = store
        self.cache = cache
        self.coordinator = coordinator

        self.user: Optional[User] = None
        self.course: Optional[Course] = None
        self.state = ViewState()
        self.tracker: Optional[ProgressTracker] = None
        self.bookmarks: Optional[BookmarkManager] = None

        self.active_topic_index = 0
        self.current_page = 0
        self.course_completed = False
        self._notices: deque[Notice] = deque()

    # -------------------------------------------------------------------------
    # Opening
    # -------------------------------------------------------------------------

    def open(self, course_id: str) -> Course:
        """
        Load a course and restore the user's state and position.

        Restoring the bookmark does not record a page view; call
        begin_reading() once the landing page is displayed.

        Raises:
            LoginRequired: If the auth service reports no signed-in user
        """
        user = self.auth.current_user()
        if user is None:
            raise LoginRequired("Sign in to open the course reader")
        self.user = user

        course = self.resolver.load_course(course_id)
        self.course = course
        self.state = ViewState()
        self.course_completed = False

        self.tracker = ProgressTracker(course, self.state, self.cache, self.coordinator, self.store)
        self.tracker.load_state()
        self.state.notes = self._load_notes(course)

        self.bookmarks = BookmarkManager(course.id, self.store, self.cache, self.coordinator)
        bookmark = self.bookmarks.load_bookmark(course)
        self.state.bookmark = bookmark

        if bookmark is not None:
            self.active_topic_index = course.topic_index(bookmark.topic_id) or 0
            self.current_page = bookmark.page_index
        else:
            self.active_topic_index = 0
            self.current_page = 0

        logger.info(
            f"Opened course {course.id} for {user.email or user.id}: "
            f"{len(course.topics)} topics, {course.total_pages} pages, "
            f"{self.tracker.weighted_progress()}% complete"
        )
        return course

    def _load_notes(self, course: Course) -> dict[str, dict[int, str]]:
        try:
            notes = self.store.get_notes(course.id)
        except RemoteError as e:
            logger.warning(f"Could not fetch notes for course {course.id}, using local copy: {e}")
            notes = decode_notes(read_json(self.cache, cache_key(CacheKind.NOTES, course.id)))

        counts = course.page_counts()
        return {
            topic_id: {idx: text for idx, text in pages.items() if 0 <= idx < counts[topic_id]}
            for topic_id, pages in notes.items()
            if topic_id in counts
        }

    def _require_open(self) -> tuple[Course, ProgressTracker, BookmarkManager]:
        if self.course is None or self.tracker is None or self.bookmarks is None:
            raise RuntimeError("No course is open; call open() first")
        return self.course, self.tracker, self.bookmarks

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def active_topic(self) -> Optional[Topic]:
        if self.course is None or not self.course.topics:
            return None
        return self.course.topics[self.active_topic_index]

    @property
    def page_count(self) -> int:
        topic = self.active_topic
        return topic.page_count if topic else 0

    @property
    def current_page_url(self) -> Optional[str]:
        topic = self.active_topic
        if topic is None or not topic.contains_page(self.current_page):
            return None
        return topic.pages[self.current_page]

    @property
    def is_locked(self) -> bool:
        """True when the catalog says the user has not purchased the course."""
        return self.course is not None and self.course.user_has_access is False

    @property
    def is_last_page(self) -> bool:
        return self.current_page == self.page_count - 1

    @property
    def can_go_next_topic(self) -> bool:
        return (
            self.course is not None
            and self.is_last_page
            and self.active_topic_index < len(self.course.topics) - 1
        )

    def weighted_progress(self) -> int:
        _, tracker, _ = self._require_open()
        return tracker.weighted_progress()

    def topic_percents(self) -> dict[str, int]:
        _, tracker, _ = self._require_open()
        return tracker.topic_percents()

    def current_note(self) -> str:
        topic = self.active_topic
        return self.state.get_note(topic.id, self.current_page) if topic else ""

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def begin_reading(self) -> None:
        """Record the landing page once it is on screen."""
        self._page_changed()

    def go_to_page(self, page_index: int) -> int:
        """Move within the active topic; the index is clamped to the topic's pages."""
        self._require_open()
        self.current_page = max(0, min(page_index, self.page_count - 1))
        self._page_changed()
        return self.current_page

    def next_page(self) -> int:
        return self.go_to_page(self.current_page + 1)

    def previous_page(self) -> int:
        return self.go_to_page(self.current_page - 1)

    def select_topic(self, topic_index: int) -> bool:
        """Jump to the first page of a topic. Returns False for an invalid index."""
        course, _, _ = self._require_open()
        if not 0 <= topic_index < len(course.topics):
            logger.debug(f"Ignoring selection of topic #{topic_index} in course {course.id}")
            return False
        self.active_topic_index = topic_index
        self.current_page = 0
        self._page_changed()
        return True

    def next_topic(self) -> bool:
        """Continue to the next topic from the last page of the current one."""
        if not self.can_go_next_topic:
            return False
        return self.select_topic(self.active_topic_index + 1)

    def mark_topic_complete(self, topic_id: Optional[str] = None) -> Optional[TopicCompletion]:
        """
        Complete a topic (default: the active one) and advance to the next.

        On the final topic nothing advances; course_completed is set instead.
        """
        course, tracker, _ = self._require_open()
        topic = course.get_topic(topic_id) if topic_id else self.active_topic
        if topic is None:
            return None

        result = tracker.mark_topic_complete(topic.id)
        if result is None:
            return None
        self._notify("Topic Completed", f"{topic.title or 'Topic'} marked complete.")

        if result.next_topic_index is not None:
            self.select_topic(result.next_topic_index)
        else:
            self.course_completed = True
            self._notify("Course Completed", "You have finished all topics in this course.")
        return result

    def _page_changed(self) -> None:
        _, tracker, bookmarks = self._require_open()
        topic = self.active_topic
        if topic is None or not topic.contains_page(self.current_page):
            return

        self.state.bookmark = Bookmark(topic_id=topic.id, page_index=self.current_page)
        bookmarks.save_bookmark(topic.id, self.current_page)
        tracker.mark_page_viewed(topic.id, self.current_page)
        if tracker.maybe_auto_complete(topic.id, self.current_page):
            self._notify("Topic Completed", f"{topic.title or 'Topic'} auto-marked as complete.")

    # -------------------------------------------------------------------------
    # Notes
    # -------------------------------------------------------------------------

    def update_note(self, text: str, topic_id: Optional[str] = None, page_index: Optional[int] = None) -> bool:
        """
        Edit the note for a page (default: the current page) and keep a local copy.

        Returns:
            False if the topic or page does not exist
        """
        course, _, _ = self._require_open()
        topic = course.get_topic(topic_id) if topic_id else self.active_topic
        page = self.current_page if page_index is None else page_index
        if topic is None or not topic.contains_page(page):
            return False

        self.state.notes.setdefault(topic.id, {})[page] = text
        write_json(self.cache, cache_key(CacheKind.NOTES, course.id), encode_notes(self.state.notes))
        return True

    def save_note(self, topic_id: Optional[str] = None, page_index: Optional[int] = None) -> Optional["Future[SyncOutcome]"]:
        """
        Send a page note to the remote store.

        The note is already in the local cache (see update_note), so a failed
        remote write only changes the reported outcome.
        """
        course, _, _ = self._require_open()
        topic = course.get_topic(topic_id) if topic_id else self.active_topic
        page = self.current_page if page_index is None else page_index
        if topic is None or not topic.contains_page(page):
            return None

        text = self.state.get_note(topic.id, page)
        future = self.coordinator.dispatch(
            "note",
            course.id,
            lambda: self.store.post_note(course.id, topic.id, page, text),
        )
        future.add_done_callback(self._note_saved)
        return future

    def _note_saved(self, future: "Future[SyncOutcome]") -> None:
        if future.result() is SyncOutcome.REMOTE:
            self._notify("Saved", "Note saved to server.")
        else:
            self._notify("Saved locally", "Note saved locally.")

    # -------------------------------------------------------------------------
    # Notices
    # -------------------------------------------------------------------------

    def _notify(self, title: str, message: str) -> None:
        self._notices.append(Notice(title=title, message=message))

    def drain_notices(self) -> list[Notice]:
        """Return and clear pending notices."""
        notices = []
        while self._notices:
            notices.append(self._notices.popleft())
        return notices
