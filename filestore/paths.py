from __future__ import annotations

import logging
import stat
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


def project_root() -> Path:
    # filestore/paths.py -> filestore -> project root
    return Path(__file__).resolve().parents[1]


def resolve_data_root(data_path: str | Path, anchor: Path | None = None) -> Path:
    root = Path(data_path).expanduser()
    if not root.is_absolute():
        root = (anchor if anchor is not None else project_root()) / root
    return root.resolve()


@dataclass(frozen=True)
class DataPaths:
    """Maps logical document names to the canonical, backup and temp paths under the data root."""

    root: Path
    backup_suffix: str = ".backup"
    temp_suffix: str = ".tmp"

    def file(self, name: str) -> Path:
        return self.root / name

    def backup(self, name: str) -> Path:
        return self.root / f"{name}{self.backup_suffix}"

    def temp(self, name: str) -> Path:
        return self.root / f"{name}{self.temp_suffix}"


def ensure_data_directory(root: Path) -> Path:
    """
    Create the data root if it is absent.

    Failures other than "does not exist" (e.g. PermissionError) propagate unchanged.
    """
    try:
        st = root.stat()
    except FileNotFoundError:
        root.mkdir(parents=True, exist_ok=True)
        logger.info("Created data directory %s", root)
        return root
    if not stat.S_ISDIR(st.st_mode):
        raise NotADirectoryError(f"data root {root} is not a directory")
    return root
