from __future__ import annotations

from .disk_store import FileManager
from .documents import TypedDocument
from .errors import (
    CorruptionError,
    ErrorKind,
    FileStoreError,
    SchemaError,
    StructureError,
    ValidationError,
    WriteError,
)
from .json_store import Document, validate_json
from .locks import LockTable
from .records import Record, RecordRepository, RepositoryStats
from .repositories import AsyncFileManager, AsyncRecordRepository

__all__ = [
    "FileManager",
    "AsyncFileManager",
    "LockTable",
    "Document",
    "validate_json",
    "TypedDocument",
    "Record",
    "RecordRepository",
    "AsyncRecordRepository",
    "RepositoryStats",
    "ErrorKind",
    "FileStoreError",
    "ValidationError",
    "StructureError",
    "CorruptionError",
    "WriteError",
    "SchemaError",
]
