from __future__ import annotations

import os
from typing import ContextManager, Protocol

from .json_store import Document


class DocumentStore(Protocol):
    """
    Minimal store interface: whole JSON documents persisted under a logical name.
    """

    def acquire_lock(self, name: str) -> str:
        """Record a lock for `name` and return its token (never blocks)."""
        ...

    def release_lock(self, name: str, token: str) -> None:
        """Release the lock for `name` if `token` matches the current holder."""
        ...

    def locked(self, name: str) -> ContextManager[str]:
        """Hold `name` exclusively for a read-modify-write sequence."""
        ...

    def read_json(self, name: str) -> Document:
        """Load and return the full document (never None)."""
        ...

    def write_json(self, name: str, document: Document) -> None:
        """Persist the full document atomically."""
        ...

    def file_exists(self, name: str) -> bool:
        ...

    def get_file_stats(self, name: str) -> os.stat_result:
        ...
