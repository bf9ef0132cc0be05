"""
SyncCoordinator - Best-effort remote mirror of local reading state.

Policy, applied to progress, completion, notes and bookmark writes:
1. The caller has already applied its local, in-memory mutation.
2. One remote attempt runs on a background thread (no retry, no backoff).
3. If it fails for any reason, the same payload is written to the local
   cache under `{kind}_{course_id}`. Writes whose state the caller has
   already persisted pass no fallback and only report the outcome.
4. A successful remote write leaves the local cache as it is.

Payloads are serialized on the calling thread, so background tasks never
see live state. Remote writes issued in quick succession may complete out
of order; a fallback never replaces one from a later dispatch for the same
key.
"""

import json
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait as wait_futures
from enum import Enum
from typing import Any, Callable, Optional

from coursereader.config import DEFAULT_SYNC_WORKERS

from .cache import CacheKind, LocalCache, cache_key

logger = logging.getLogger(__name__)


class SyncOutcome(str, Enum):
    """Where a mirrored write ended up."""
    REMOTE = "remote"
    LOCAL = "local"


class SyncCoordinator:
    """Dispatch detached remote writes with a local-cache fallback."""

    def __init__(self, cache: LocalCache, max_workers: int = DEFAULT_SYNC_WORKERS):
        self.cache = cache
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="coursereader-sync",
        )
        self._pending: set[Future] = set()
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._closed = False
        self._issued: dict[str, int] = {}   # key -> sequence of the latest dispatch
        self._written: dict[str, int] = {}  # key -> sequence of the latest fallback write

    def __enter__(self) -> "SyncCoordinator":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def dispatch(
        self,
        operation: str,
        course_id: str,
        remote_call: Callable[[], Any],
        fallback_kind: Optional[CacheKind] = None,
        fallback_payload: Any = None,
    ) -> "Future[SyncOutcome]":
        """
        Mirror a local mutation to the remote store without blocking.

        Args:
            operation: Short name for logs (e.g. "bookmark")
            course_id: Course the payload belongs to
            remote_call: Zero-argument callable performing the single remote attempt
            fallback_kind: Cache namespace written if the remote attempt fails;
                None when the caller has already written its state locally
            fallback_payload: JSON-serializable payload for the fallback write

        Returns:
            Future resolving to the SyncOutcome; it never raises
        """
        key = cache_key(fallback_kind, course_id) if fallback_kind is not None else None
        snapshot = json.dumps(fallback_payload, ensure_ascii=False, sort_keys=True) if key else None

        with self._lock:
            seq = self._issued.get(key, 0) + 1 if key else 0
            if key:
                self._issued[key] = seq
            closed = self._closed
            if not closed:
                future = self._executor.submit(self._run, operation, course_id, remote_call, key, snapshot, seq)
                self._pending.add(future)

        if not closed:
            # Outside the lock: a finished future runs the callback right here
            future.add_done_callback(self._forget)
            return future

        logger.info(f"Sync coordinator closed, saving {operation} for course {course_id} locally")
        done: Future = Future()
        done.set_result(self._write_fallback(key, snapshot, seq))
        return done

    def _run(
        self,
        operation: str,
        course_id: str,
        remote_call: Callable[[], Any],
        key: Optional[str],
        snapshot: Optional[str],
        seq: int,
    ) -> SyncOutcome:
        try:
            remote_call()
            logger.debug(f"Synced {operation} for course {course_id}")
            return SyncOutcome.REMOTE
        except Exception as e:
            logger.warning(f"Remote {operation} failed for course {course_id}, keeping local copy: {e}")
        return self._write_fallback(key, snapshot, seq)

    def _write_fallback(self, key: Optional[str], snapshot: Optional[str], seq: int) -> SyncOutcome:
        if key is None:
            return SyncOutcome.LOCAL

        with self._write_lock:
            if seq < self._written.get(key, 0):
                logger.debug(f"Skipping stale fallback for {key}")
                return SyncOutcome.LOCAL
            self._written[key] = seq
            try:
                self.cache.set(key, snapshot)
            except Exception as e:
                logger.error(f"Local fallback write failed for {key}: {e}")
        return SyncOutcome.LOCAL

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until all in-flight writes have finished.

        Returns:
            True if nothing is left pending
        """
        with self._lock:
            pending = list(self._pending)
        _, not_done = wait_futures(pending, timeout=timeout)
        return not not_done

    def close(self, wait: bool = True) -> None:
        """Stop accepting background work; later dispatches write locally."""
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)
