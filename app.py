from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv

from filestore import FileManager
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def create_file_manager(settings: Settings | None = None, *, anchor: Path | None = None) -> FileManager:
    """
    Build the process-wide file manager.

    Application code should create one instance and pass it to every consumer
    so they share the same lock table.
    """
    if settings is None:
        load_dotenv("local.env")
        settings = get_settings()

    configure_logging(settings.log_level)

    manager = FileManager.from_settings(settings, anchor=anchor)
    manager.ensure_data_directory()
    logger.info("File store rooted at %s", manager.data_path)
    return manager
