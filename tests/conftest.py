"""
Shared fixtures and in-memory fakes for the course reader tests.
"""

import threading
from typing import Optional

import pytest

from coursereader.classroom import ContentResolver, MemoryCache, ReaderSession, SyncCoordinator
from coursereader.clients import RemoteError
from coursereader.schemas import Bookmark, Course, ProgressPayload, Topic, User


# -----------------------------------------------------------------------------
# Fakes
# -----------------------------------------------------------------------------

class FakeProgressStore:
    """In-memory ProgressStore. With `online=False` every call raises RemoteError."""

    def __init__(self, online: bool = True):
        self.online = online
        self.progress: dict[str, float] = {}
        self.bookmark: Optional[Bookmark] = None
        self.notes: dict[str, dict[int, str]] = {}
        self.completed: list[str] = []
        self.posted_progress: list[ProgressPayload] = []
        self.calls: list[str] = []
        self.gate: Optional[threading.Event] = None  # when set, calls block until the event fires
        self._lock = threading.Lock()

    def _call(self, name: str) -> None:
        with self._lock:
            self.calls.append(name)
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if not self.online:
            raise RemoteError(f"{name}: connection refused")

    def get_progress(self, course_id: str) -> dict[str, float]:
        self._call("get_progress")
        return dict(self.progress)

    def post_progress(self, course_id: str, payload: ProgressPayload) -> None:
        self._call("post_progress")
        with self._lock:
            self.posted_progress.append(payload)

    def complete_topic(self, course_id: str, topic_id: str) -> None:
        self._call("complete_topic")
        with self._lock:
            self.completed.append(topic_id)

    def get_bookmark(self, course_id: str) -> Optional[Bookmark]:
        self._call("get_bookmark")
        return self.bookmark

    def post_bookmark(self, course_id: str, bookmark: Bookmark) -> None:
        self._call("post_bookmark")
        self.bookmark = bookmark

    def get_notes(self, course_id: str) -> dict[str, dict[int, str]]:
        self._call("get_notes")
        return {topic_id: dict(pages) for topic_id, pages in self.notes.items()}

    def post_note(self, course_id: str, topic_id: str, page_index: int, text: str) -> None:
        self._call("post_note")
        with self._lock:
            self.notes.setdefault(topic_id, {})[page_index] = text


class FakeCatalog:
    def __init__(self, course: Optional[Course] = None, error: Optional[Exception] = None):
        self.course = course
        self.error = error

    def get_course(self, course_id: str) -> Optional[Course]:
        if self.error is not None:
            raise self.error
        return self.course


class FakeAuth:
    def __init__(self, user: Optional[User] = None):
        self.user = user

    def current_user(self) -> Optional[User]:
        return self.user

    def login(self, email: str, password: str) -> User:
        self.user = User(id="u1", email=email)
        return self.user

    def logout(self) -> None:
        self.user = None


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def sample_course() -> Course:
    """Three topics with 3, 2 and 4 pages (9 in total)."""
    return Course(
        id="c1",
        title="Sample Course",
        topics=(
            Topic(id="a", title="Alpha", pages=("a0", "a1", "a2")),
            Topic(id="b", title="Beta", pages=("b0", "b1")),
            Topic(id="c", title="Gamma", pages=("c0", "c1", "c2", "c3")),
        ),
        user_has_access=True,
    )


@pytest.fixture
def cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def coordinator(cache):
    coordinator = SyncCoordinator(cache, max_workers=2)
    yield coordinator
    coordinator.close()


@pytest.fixture
def store() -> FakeProgressStore:
    return FakeProgressStore()


@pytest.fixture
def offline_store() -> FakeProgressStore:
    return FakeProgressStore(online=False)


@pytest.fixture
def student() -> User:
    return User(id="u1", name="Student", email="student@example.com")


@pytest.fixture
def make_reader(cache, coordinator, student):
    """Build a ReaderSession over the shared cache and coordinator."""

    def _make(store, catalog=None, user=student) -> ReaderSession:
        return ReaderSession(
            auth=FakeAuth(user),
            resolver=ContentResolver(catalog),
            store=store,
            cache=cache,
            coordinator=coordinator,
        )

    return _make
