"""Path string normalization for the wire protocol and output layout."""

from __future__ import annotations

import os
import re
from pathlib import Path

_TRAILING_SEPARATORS = re.compile(r"[:/]+$")


def sanitize_path(path: str) -> str:
    """Drop trailing ``/`` or ``:`` runs and turn remaining colons into ``/``.

    >>> sanitize_path("a:b/c/d.jpg/")
    'a/b/c/d.jpg'
    """
    path = _TRAILING_SEPARATORS.sub("", path)
    return path.replace(":", "/")


def strip_root(path: str | os.PathLike[str]) -> str:
    """Return the parent of ``path`` without its root or drive prefix.

    The result always starts with exactly one ``os.sep``, so the top of the
    tree is reported as ``os.sep`` rather than an empty string.
    """
    parent = os.path.dirname(os.fspath(path))
    _, tail = os.path.splitdrive(parent)
    separators = os.sep + (os.altsep or "")
    return os.sep + tail.lstrip(separators)


def destination_path(output_dir: str | os.PathLike[str], parent_path: str, name: str) -> Path:
    """Build ``<output_dir>/<sanitized parent>/<name>``.

    Empty, ``.`` and ``..`` segments are dropped from the parent and ``name``
    is reduced to its final component, so the result stays under
    ``output_dir`` even for absolute or hostile input. A name with no usable
    component raises ``ValueError``.
    """
    segments = [
        segment
        for segment in sanitize_path(parent_path).split("/")
        if segment not in ("", ".", "..")
    ]
    leaf = Path(name).name
    if leaf in ("", ".", ".."):
        raise ValueError(f"Invalid document name: {name!r}")
    return Path(output_dir).joinpath(*segments, leaf)
