from __future__ import annotations

from pathlib import Path
import sys


import pytest


# `filestore`, `settings` and `app` live at the repo root; make them importable
# when the project is not installed.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """
    Data directory inside a temp project so tests never touch the real ./data.
    """
    return tmp_path / "data"


@pytest.fixture
def file_manager(data_root: Path):
    from filestore import FileManager

    return FileManager(data_root)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for var in ("DATA_PATH", "BACKUP_SUFFIX", "TEMP_SUFFIX", "JSON_INDENT", "CACHE_TTL_SECONDS", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
