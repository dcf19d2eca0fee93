from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Generic, Literal, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict

from .disk_store import FileManager
from .documents import TypedDocument

if TYPE_CHECKING:
    from settings import Settings

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Record(BaseModel):
    """
    Base shape for elements of an array document. Extra fields are kept as-is.

    Generated ids are uuid4 strings; integer ids and records without
    timestamps, as written by other tools, are accepted.
    """

    model_config = ConfigDict(extra="allow")

    id: str | int
    createdAt: str | None = None
    updatedAt: str | None = None


class RepositoryStats(BaseModel):
    total_records: int
    cache_status: Literal["valid", "invalid"]
    file_exists: bool
    file_size: int = 0
    last_modified: datetime | None = None


R = TypeVar("R", bound=Record)


class RecordRepository(Generic[R]):
    """
    CRUD over an array-of-records document.

    Reads may be served from an in-memory cache for `cache_ttl` seconds.
    Reads that miss the cache and all writes run inside `FileManager.locked()`,
    which is exclusive per document within the process. Writes reload from
    disk first and refresh the cache with what was committed.
    """

    def __init__(
        self,
        manager: FileManager,
        name: str,
        record_type: type[R] = Record,  # type: ignore[assignment]
        *,
        cache_ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._manager = manager
        self._name = name
        self._record_type = record_type
        self._document: TypedDocument[list[R]] = TypedDocument(manager, name, list[record_type])
        self._cache_ttl = cache_ttl
        self._clock = clock
        self._cache: list[R] | None = None
        self._cache_timestamp: float | None = None

    @classmethod
    def from_settings(
        cls,
        manager: FileManager,
        name: str,
        record_type: type[R] = Record,  # type: ignore[assignment]
        *,
        settings: "Settings",
    ) -> "RecordRepository[R]":
        return cls(manager, name, record_type, cache_ttl=float(settings.cache_ttl_seconds))

    @property
    def name(self) -> str:
        return self._name

    # Reads

    def find_all(self, use_cache: bool = True) -> list[R]:
        if use_cache and self.is_cache_valid():
            return self._copy(self._cache or [])
        with self._manager.locked(self._name):
            records = self._document.load()
            self._update_cache(records)
        return self._copy(records)

    def find_by_id(self, record_id: str | int) -> R | None:
        return self.find_one(lambda r: r.id == record_id)

    def find_where(self, predicate: Callable[[R], bool]) -> list[R]:
        return [r for r in self.find_all() if predicate(r)]

    def find_one(self, predicate: Callable[[R], bool]) -> R | None:
        for r in self.find_all():
            if predicate(r):
                return r
        return None

    def count(self) -> int:
        return len(self.find_all())

    def exists(self, record_id: str | int) -> bool:
        return self.find_by_id(record_id) is not None

    # Writes

    def create(self, data: Mapping[str, Any]) -> R:
        now = _utc_now()
        payload = {"id": str(uuid.uuid4()), **data, "createdAt": now, "updatedAt": now}
        record = self._record_type.model_validate(payload)
        with self._manager.locked(self._name):
            records = self._document.load()
            records.append(record)
            self._document.save(records)
            self._update_cache(records)
        return record.model_copy(deep=True)

    def update(self, record_id: str | int, data: Mapping[str, Any]) -> R | None:
        with self._manager.locked(self._name):
            records = self._document.load()
            index = next((i for i, r in enumerate(records) if r.id == record_id), None)
            if index is None:
                return None
            merged = {**records[index].model_dump(mode="json"), **data, "updatedAt": _utc_now()}
            updated = self._record_type.model_validate(merged)
            records[index] = updated
            self._document.save(records)
            self._update_cache(records)
        return updated.model_copy(deep=True)

    def delete(self, record_id: str | int) -> bool:
        with self._manager.locked(self._name):
            records = self._document.load()
            remaining = [r for r in records if r.id != record_id]
            if len(remaining) == len(records):
                return False
            self._document.save(remaining)
            self._update_cache(remaining)
        return True

    def clear(self) -> None:
        with self._manager.locked(self._name):
            self._document.save([])
            self._update_cache([])
        logger.info("Cleared all records in %s", self._name)

    # Cache

    def is_cache_valid(self) -> bool:
        return (
            self._cache is not None
            and self._cache_timestamp is not None
            and (self._clock() - self._cache_timestamp) < self._cache_ttl
        )

    def clear_cache(self) -> None:
        self._cache = None
        self._cache_timestamp = None

    def _update_cache(self, records: list[R]) -> None:
        self._cache = self._copy(records)
        self._cache_timestamp = self._clock()

    @staticmethod
    def _copy(records: list[R]) -> list[R]:
        # Callers get copies so in-place edits never leak into the cache.
        return [r.model_copy(deep=True) for r in records]

    # Stats

    def get_stats(self) -> RepositoryStats:
        records = self.find_all()
        exists = self._manager.file_exists(self._name)
        st = self._manager.get_file_stats(self._name) if exists else None
        return RepositoryStats(
            total_records=len(records),
            cache_status="valid" if self.is_cache_valid() else "invalid",
            file_exists=exists,
            file_size=st.st_size if st else 0,
            last_modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc) if st else None,
        )
