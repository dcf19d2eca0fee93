from __future__ import annotations

import logging
import threading
import uuid

logger = logging.getLogger(__name__)


class LockTable:
    """
    Advisory per-document lock bookkeeping.

    `acquire` never blocks: it issues a fresh token and records it as the
    current holder, replacing any outstanding record for the same name.
    Mutual exclusion relies on callers bracketing their work with
    acquire/release. Only the process that owns the table is covered.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._holders: dict[str, str] = {}

    def acquire(self, name: str) -> str:
        token = uuid.uuid4().hex
        with self._guard:
            previous = self._holders.get(name)
            self._holders[name] = token
        if previous is not None:
            logger.warning("Lock for %s superseded while still held (advisory locking)", name)
        return token

    def release(self, name: str, token: str) -> None:
        with self._guard:
            if self._holders.get(name) == token:
                del self._holders[name]
                return
        logger.debug("Ignoring release of %s with a non-matching token", name)

    def holder(self, name: str) -> str | None:
        with self._guard:
            return self._holders.get(name)

    def is_locked(self, name: str) -> bool:
        return self.holder(name) is not None

    def __len__(self) -> int:
        with self._guard:
            return len(self._holders)


class DocumentMutexRegistry:
    """
    Provides a stable reentrant lock per document name.

    Unlike LockTable these locks block, so file I/O on the same document from
    worker threads never overlaps. Reentrant because a read may seed the
    document through a write while already holding it.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def lock_for(self, name: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(name)
            if lock is None:
                lock = threading.RLock()
                self._locks[name] = lock
            return lock
