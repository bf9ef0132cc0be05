"""
LocalCache - Durable key/value mirror of reading state in ~/.coursereader/cache.db.

Stores JSON strings under deterministic keys:
- viewedPages_{course}, completedTopics_{course}, notes_{course}
- bookmark_{course}, overallProgress_{course}, progress_{course}
- course_progress (dashboard map of course id -> overall percent)

The cache is a fallback read source, not a queue: nothing is drained or
reconciled after a successful remote write.
"""

import json
import logging
import sqlite3
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Protocol

from coursereader.config import DEFAULT_CACHE_PATH

logger = logging.getLogger(__name__)


class CacheKind(str, Enum):
    """Namespaces of the local cache."""
    VIEWED_PAGES = "viewedPages"
    COMPLETED_TOPICS = "completedTopics"
    BOOKMARK = "bookmark"
    NOTES = "notes"
    OVERALL_PROGRESS = "overallProgress"
    PROGRESS = "progress"


DASHBOARD_PROGRESS_KEY = "course_progress"


def cache_key(kind: CacheKind, course_id: str) -> str:
    """Composite key for a course-scoped entry, e.g. `bookmark_abc123`."""
    return f"{kind.value}_{course_id}"


class LocalCache(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


# -----------------------------------------------------------------------------
# JSON helpers
# -----------------------------------------------------------------------------

def read_json(cache: LocalCache, key: str) -> Any:
    """Decode a cached JSON value; missing or corrupt entries read as None."""
    raw = cache.get(key)
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Discarding corrupt cache entry {key}: {e}")
        return None


def write_json(cache: LocalCache, key: str, value: Any) -> None:
    cache.set(key, json.dumps(value, ensure_ascii=False, sort_keys=True))


# -----------------------------------------------------------------------------
# Implementations
# -----------------------------------------------------------------------------

class SQLiteCache:
    """
    SQLite-backed cache.

    Each call opens its own connection, so background sync threads can write
    while the reader thread reads.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize the cache.

        Args:
            db_path: Path to cache.db (default: ~/.coursereader/cache.db)
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_CACHE_PATH
        self._ensure_database()

    def _ensure_database(self):
        """Create database and table if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(self.db_path))
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path), timeout=5.0)
        conn.row_factory = sqlite3.Row
        return conn

    def get(self, key: str) -> Optional[str]:
        conn = self._get_connection()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def set(self, key: str, value: str) -> None:
        conn = self._get_connection()
        try:
            conn.execute(
                """INSERT INTO kv (key, value, updated_at)
                   VALUES (?, ?, CURRENT_TIMESTAMP)
                   ON CONFLICT(key) DO UPDATE SET
                     value = excluded.value,
                     updated_at = CURRENT_TIMESTAMP""",
                (key, value)
            )
            conn.commit()
        finally:
            conn.close()

    def keys(self) -> list[str]:
        conn = self._get_connection()
        try:
            return [row["key"] for row in conn.execute("SELECT key FROM kv ORDER BY key")]
        finally:
            conn.close()


class MemoryCache:
    """Process-local cache, for tests and throwaway sessions."""

    def __init__(self):
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)
