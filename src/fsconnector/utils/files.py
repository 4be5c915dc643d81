"""Utility helpers for working with files."""

from __future__ import annotations

import mimetypes
import os
from pathlib import Path
from typing import BinaryIO

DEFAULT_MIME_TYPE = "application/octet-stream"


def guess_mime_type(file_name: str) -> str:
    """Map a file name to a MIME type by extension."""
    mime_type, _ = mimetypes.guess_type(file_name, strict=False)
    return mime_type or DEFAULT_MIME_TYPE


def ensure_file_exists(path: Path) -> Path:
    """Create parent directories and an empty file when missing."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OSError(f"Failed to create directories: {path.parent}") from exc
    try:
        path.touch(exist_ok=True)
    except OSError as exc:
        raise OSError(f"Failed to create file: {path}") from exc
    return path


def force_sync(handle: BinaryIO) -> None:
    """Flush Python buffers and force the data to disk."""
    handle.flush()
    os.fsync(handle.fileno())
