"""Directory enumeration producing document descriptors."""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, Iterator

from fsconnector.config import DateFilter
from fsconnector.models import Document
from fsconnector.utils.files import guess_mime_type
from fsconnector.utils.paths import strip_root

LOGGER = logging.getLogger(__name__)

_NO_FILTER = DateFilter()


def _to_datetime(timestamp: float) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def _creation_time(stat: os.stat_result) -> float:
    # st_birthtime is only reported on macOS, BSD and recent Windows builds
    return getattr(stat, "st_birthtime", stat.st_ctime)


def document_from_path(path: str | os.PathLike[str], date_filter: DateFilter = _NO_FILTER) -> Document | None:
    """Probe ``path`` and build its descriptor.

    Returns ``None`` when the modification time falls outside ``date_filter``.
    Any ``OSError`` from the attribute probe is propagated.
    """
    doc_id = os.fspath(path)
    stat = os.stat(doc_id)

    modified_ms = stat.st_mtime_ns // 1_000_000
    if not date_filter.contains(modified_ms):
        LOGGER.debug("Skipping %s: modified at %d is outside the date filter", doc_id, modified_ms)
        return None

    name = Path(doc_id).name
    return Document(
        id=doc_id,
        name=name,
        created=_to_datetime(_creation_time(stat)),
        modified=_to_datetime(stat.st_mtime),
        mime_type=guess_mime_type(name),
        size=stat.st_size,
        parent_path=strip_root(doc_id),
    )


def iter_documents(source_path: str | os.PathLike[str], date_filter: DateFilter = _NO_FILTER) -> Iterator[Document]:
    """Yield descriptors for ``source_path`` or its immediate children.

    The directory handle is held for the lifetime of the generator and closed
    on exhaustion, on error, or when the generator is closed early.
    """
    source = os.fspath(source_path)
    if not os.path.isdir(source):
        document = document_from_path(source, date_filter)
        if document is not None:
            yield document
        return

    with os.scandir(source) as entries:
        for entry in entries:
            document = document_from_path(os.path.join(source, entry.name), date_filter)
            if document is not None:
                yield document


async def aiter_documents(
    source_path: str | os.PathLike[str], date_filter: DateFilter = _NO_FILTER
) -> AsyncIterator[Document]:
    """Async view of :func:`iter_documents` driven from worker threads."""
    documents = iter_documents(source_path, date_filter)
    try:
        while True:
            document = await asyncio.to_thread(next, documents, None)
            if document is None:
                break
            yield document
    finally:
        await asyncio.to_thread(documents.close)
