from __future__ import annotations

import json
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

from .errors import CorruptionError, ValidationError, WriteError
from .interfaces import DocumentStore
from .json_store import Document, atomic_copy, serialize_json, validate_json, write_text_durable
from .locks import DocumentMutexRegistry, LockTable
from .paths import DataPaths, ensure_data_directory, resolve_data_root

if TYPE_CHECKING:
    from settings import Settings

logger = logging.getLogger(__name__)


class FileManager(DocumentStore):
    """
    Stores JSON documents as files under a single data root.

    - Reads seed missing documents with `[]` and fall back to the backup copy
      when the canonical file is corrupted.
    - Writes refresh `<name>.backup`, stage into `<name>.tmp`, verify the staged
      bytes, then rename over the canonical file.
    - Each read and write holds a per-document mutex, so calls from worker
      threads never overlap on the same files.
    - The token table behind acquire_lock/release_lock is advisory and never
      blocks. `locked()` takes the mutex as well, so read-modify-write
      sequences inside it are exclusive within the process.
    """

    def __init__(
        self,
        data_path: str | Path = "data",
        *,
        anchor: Path | None = None,
        backup_suffix: str = ".backup",
        temp_suffix: str = ".tmp",
        indent: int = 2,
        locks: LockTable | None = None,
    ):
        self._paths = DataPaths(resolve_data_root(data_path, anchor), backup_suffix, temp_suffix)
        self._locks = locks if locks is not None else LockTable()
        self._mutexes = DocumentMutexRegistry()
        self._indent = indent

    @classmethod
    def from_settings(cls, settings: "Settings", *, anchor: Path | None = None) -> "FileManager":
        return cls(
            settings.data_path,
            anchor=anchor,
            backup_suffix=settings.backup_suffix,
            temp_suffix=settings.temp_suffix,
            indent=settings.json_indent,
        )

    @property
    def data_path(self) -> Path:
        return self._paths.root

    @property
    def paths(self) -> DataPaths:
        return self._paths

    @property
    def locks(self) -> LockTable:
        return self._locks

    # Locking

    def acquire_lock(self, name: str) -> str:
        return self._locks.acquire(name)

    def release_lock(self, name: str, token: str) -> None:
        self._locks.release(name, token)

    @contextmanager
    def locked(self, name: str) -> Iterator[str]:
        with self._mutexes.lock_for(name):
            token = self.acquire_lock(name)
            try:
                yield token
            finally:
                self.release_lock(name, token)

    # Paths

    def get_file_path(self, name: str) -> Path:
        return self._paths.file(name)

    def backup_path(self, name: str) -> Path:
        return self._paths.backup(name)

    def temp_path(self, name: str) -> Path:
        return self._paths.temp(name)

    def ensure_data_directory(self) -> None:
        ensure_data_directory(self._paths.root)

    # Reads

    def read_json(self, name: str) -> Document:
        self.ensure_data_directory()
        path = self.get_file_path(name)

        with self._mutexes.lock_for(name):
            try:
                raw = path.read_bytes()
            except FileNotFoundError:
                logger.info("Document %s does not exist, seeding it with an empty array", name)
                self.write_json(name, [])
                return []

            if not raw.strip():
                return []

            try:
                return validate_json(raw, name=name)
            except ValidationError as e:
                logger.warning("Corrupted JSON detected in %s, attempting recovery: %s", name, e)
                return self._restore_from_backup(name, e)

    def _restore_from_backup(self, name: str, original: ValidationError) -> Document:
        path = self.get_file_path(name)
        backup = self.backup_path(name)

        # Check the backup before it replaces anything.
        try:
            validate_json(backup.read_bytes(), name=backup.name)
        except (OSError, ValidationError) as e:
            logger.error("No usable backup for %s: %s", name, e)
            raise CorruptionError(name, original, e) from original

        try:
            atomic_copy(backup, path)
            recovered = validate_json(path.read_bytes(), name=name)
        except (OSError, ValidationError) as e:
            logger.error("Restoring %s from backup failed: %s", name, e)
            raise CorruptionError(name, original, e) from e
        logger.info("Successfully restored %s from backup", name)
        return recovered

    # Writes

    def write_json(self, name: str, document: Document) -> None:
        self.ensure_data_directory()

        with self._mutexes.lock_for(name):
            self._create_backup(name)

            path = self.get_file_path(name)
            tmp_path = self.temp_path(name)
            try:
                try:
                    content = serialize_json(document, indent=self._indent)
                except (TypeError, ValueError) as e:
                    raise WriteError(f"Could not serialize {name}: {e}", name=name) from e
                write_text_durable(tmp_path, content)
                self._verify_staged(name, tmp_path, content)
                os.replace(tmp_path, path)
            except Exception:
                self._discard_temp(tmp_path)
                raise
        logger.debug("Committed %s (%d bytes)", name, len(content.encode("utf-8")))

    def _create_backup(self, name: str) -> None:
        try:
            atomic_copy(self.get_file_path(name), self.backup_path(name))
        except FileNotFoundError:
            # First write: nothing to back up yet.
            return

    def _verify_staged(self, name: str, tmp_path: Path, content: str) -> None:
        staged = validate_json(tmp_path.read_bytes(), name=tmp_path.name)
        if staged != json.loads(content):
            raise WriteError(f"Verification of staged content for {name} failed", name=name)

    def _discard_temp(self, tmp_path: Path) -> None:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Failed to remove temp file %s: %r", tmp_path, e)

    # Accessors

    def file_exists(self, name: str) -> bool:
        try:
            self.get_file_path(name).stat()
        except FileNotFoundError:
            return False
        return True

    def get_file_stats(self, name: str) -> os.stat_result:
        return self.get_file_path(name).stat()
