from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    STRUCTURE = "structure"
    CORRUPTION = "corruption"
    WRITE = "write"
    SCHEMA = "schema"


class FileStoreError(Exception):
    """
    Base class for errors raised by the file store.

    Call sites branch on `kind` (or the subclass) rather than on messages.
    OS-level failures such as PermissionError are not wrapped and reach the
    caller unchanged.
    """

    kind: ErrorKind

    def __init__(self, message: str, *, name: str | None = None):
        super().__init__(message)
        self.name = name


class ValidationError(FileStoreError):
    """Content is not syntactically valid JSON."""

    kind = ErrorKind.VALIDATION


class StructureError(ValidationError):
    """Content is valid JSON but the top-level value is not an array or object."""

    kind = ErrorKind.STRUCTURE


class CorruptionError(FileStoreError):
    kind = ErrorKind.CORRUPTION

    def __init__(self, name: str, original: Exception, backup_error: Exception):
        super().__init__(
            f"{name} is corrupted ({original}) and its backup could not be used ({backup_error})",
            name=name,
        )
        self.original = original
        self.backup_error = backup_error


class WriteError(FileStoreError):
    kind = ErrorKind.WRITE


class SchemaError(FileStoreError):
    """Document is a valid collection but does not match the expected record shape."""

    kind = ErrorKind.SCHEMA
