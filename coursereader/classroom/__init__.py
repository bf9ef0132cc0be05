"""
Course reader classroom - Runtime components for reading a course.

This module provides:
- ContentResolver: Resolve course structure (with fallback topics)
- ProgressTracker: Track viewed pages, completion and weighted progress
- BookmarkManager: Persist and restore the reading position
- SyncCoordinator: Best-effort remote mirror with local-cache fallback
- ReaderSession: Navigation view-model tying the above together
"""

from .cache import (
    CacheKind,
    LocalCache,
    SQLiteCache,
    MemoryCache,
    DASHBOARD_PROGRESS_KEY,
    cache_key,
    read_json,
    write_json,
)

from .loader import (
    ContentResolver,
    FALLBACK_TOPIC_RANGES,
    build_fallback_course,
    build_fallback_topics,
    page_url,
)

from .sync import (
    SyncCoordinator,
    SyncOutcome,
)

from .progress import (
    ProgressTracker,
    TopicCompletion,
    get_dashboard_progress,
    percent,
)

from .bookmarks import BookmarkManager

from .reader import (
    ReaderSession,
    LoginRequired,
    Notice,
)

__all__ = [
    # Cache
    "CacheKind",
    "LocalCache",
    "SQLiteCache",
    "MemoryCache",
    "DASHBOARD_PROGRESS_KEY",
    "cache_key",
    "read_json",
    "write_json",
    # Loader
    "ContentResolver",
    "FALLBACK_TOPIC_RANGES",
    "build_fallback_course",
    "build_fallback_topics",
    "page_url",
    # Sync
    "SyncCoordinator",
    "SyncOutcome",
    # Progress
    "ProgressTracker",
    "TopicCompletion",
    "get_dashboard_progress",
    "percent",
    # Bookmarks
    "BookmarkManager",
    # Reader
    "ReaderSession",
    "LoginRequired",
    "Notice",
]
