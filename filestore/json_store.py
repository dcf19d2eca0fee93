from __future__ import annotations

import json
import os
import shutil
from pathlib import Path
from typing import Any, Union

from .errors import StructureError, ValidationError

# A stored document is always a collection at the top level.
Document = Union[list[Any], dict[str, Any]]


def validate_json(content: str | bytes, *, name: str | None = None) -> Document:
    """
    Parse JSON text and require an array or object at the top level.

    Raises ValidationError for undecodable or malformed content and
    StructureError for bare primitives (string, number, boolean, null).
    """
    label = name or "<content>"
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValidationError(f"JSON validation failed for {label}: {e}", name=name) from e
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValidationError(f"JSON validation failed for {label}: {e}", name=name) from e
    if not isinstance(parsed, (list, dict)):
        raise StructureError(
            f"Invalid JSON structure in {label}: must be array or object, got {type(parsed).__name__}",
            name=name,
        )
    return parsed


def serialize_json(payload: Any, *, indent: int = 2, sort_keys: bool = False) -> str:
    # allow_nan=False keeps the output strict JSON so the verification read can compare it.
    return json.dumps(payload, indent=indent, sort_keys=sort_keys, ensure_ascii=False, allow_nan=False) + "\n"


def write_text_durable(path: Path, text: str) -> None:
    """Write text and fsync it before returning."""
    with path.open("w", encoding="utf-8") as f:
        f.write(text)
        f.flush()
        os.fsync(f.fileno())


def atomic_copy(src: Path, dst: Path) -> None:
    """
    Copy src over dst so that dst is either the old file or a full copy.

    FileNotFoundError is raised unchanged when src is missing.
    """
    staging = dst.with_name(dst.name + ".partial")
    try:
        shutil.copyfile(src, staging)
        os.replace(staging, dst)
    except OSError:
        staging.unlink(missing_ok=True)
        raise
