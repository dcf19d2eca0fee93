from __future__ import annotations

import asyncio
import contextlib
import os
from typing import Any, AsyncIterator, Callable, Generic, Mapping

from .disk_store import FileManager
from .json_store import Document
from .records import R, RecordRepository, RepositoryStats


class AsyncFileManager:
    """
    Coroutine facade over a FileManager for event-loop callers.

    Document reads and writes run on worker threads, where the file manager's
    per-document mutex keeps them from overlapping. `locked()` serializes
    coroutines on an asyncio.Lock per name instead, since a thread lock held
    across an await would starve those same worker threads.
    """

    def __init__(self, manager: FileManager) -> None:
        self._manager = manager
        self._async_locks: dict[str, asyncio.Lock] = {}

    @property
    def manager(self) -> FileManager:
        return self._manager

    def acquire_lock(self, name: str) -> str:
        return self._manager.acquire_lock(name)

    def release_lock(self, name: str, token: str) -> None:
        self._manager.release_lock(name, token)

    @contextlib.asynccontextmanager
    async def locked(self, name: str) -> AsyncIterator[str]:
        lock = self._async_locks.setdefault(name, asyncio.Lock())
        async with lock:
            token = self._manager.acquire_lock(name)
            try:
                yield token
            finally:
                self._manager.release_lock(name, token)

    async def read_json(self, name: str) -> Document:
        return await asyncio.to_thread(self._manager.read_json, name)

    async def write_json(self, name: str, document: Document) -> None:
        await asyncio.to_thread(self._manager.write_json, name, document)

    async def file_exists(self, name: str) -> bool:
        return await asyncio.to_thread(self._manager.file_exists, name)

    async def get_file_stats(self, name: str) -> os.stat_result:
        return await asyncio.to_thread(self._manager.get_file_stats, name)


class AsyncRecordRepository(Generic[R]):
    """Runs each RecordRepository call on a worker thread; the repository does its own locking."""

    def __init__(self, repo: RecordRepository[R]) -> None:
        self._repo = repo

    async def find_all(self, use_cache: bool = True) -> list[R]:
        return await asyncio.to_thread(self._repo.find_all, use_cache)

    async def find_by_id(self, record_id: str | int) -> R | None:
        return await asyncio.to_thread(self._repo.find_by_id, record_id)

    async def find_where(self, predicate: Callable[[R], bool]) -> list[R]:
        return await asyncio.to_thread(self._repo.find_where, predicate)

    async def find_one(self, predicate: Callable[[R], bool]) -> R | None:
        return await asyncio.to_thread(self._repo.find_one, predicate)

    async def count(self) -> int:
        return await asyncio.to_thread(self._repo.count)

    async def exists(self, record_id: str | int) -> bool:
        return await asyncio.to_thread(self._repo.exists, record_id)

    async def create(self, data: Mapping[str, Any]) -> R:
        return await asyncio.to_thread(self._repo.create, data)

    async def update(self, record_id: str | int, data: Mapping[str, Any]) -> R | None:
        return await asyncio.to_thread(self._repo.update, record_id, data)

    async def delete(self, record_id: str | int) -> bool:
        return await asyncio.to_thread(self._repo.delete, record_id)

    async def clear(self) -> None:
        await asyncio.to_thread(self._repo.clear)

    def clear_cache(self) -> None:
        self._repo.clear_cache()

    async def get_stats(self) -> RepositoryStats:
        return await asyncio.to_thread(self._repo.get_stats)
