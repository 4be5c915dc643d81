"""Read and delete operations exposed to the repository host."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import BinaryIO, Iterator

from fsconnector.config import ConnectorParameters
from fsconnector.models import BinaryDetails, Document, LongValue, Metadata, StringValue
from fsconnector.repository.cache import DocumentCache, LazyBinary
from fsconnector.repository.enumerator import document_from_path, iter_documents
from fsconnector.utils.files import guess_mime_type

LOGGER = logging.getLogger(__name__)


def file_metadata(path: Path, size: int | None = None) -> Metadata:
    """Metadata published for every file: its name and size in bytes."""
    if size is None:
        size = path.stat().st_size
    return {
        "fileName": StringValue(path.name),
        "fileSize": LongValue(size),
    }


class FileSystemReader:
    """Serves documents straight from the filesystem on every call."""

    def init(self, parameters: ConnectorParameters) -> None:
        """Nothing to prepare for a plain directory."""

    def get_document(self, doc_id: str, parameters: ConnectorParameters) -> Document | None:
        return document_from_path(doc_id, parameters.date_filter)

    def get_documents(self, parameters: ConnectorParameters) -> Iterator[Document]:
        return iter_documents(parameters.file_path, parameters.date_filter)

    def get_document_metadata(self, doc_id: str, parameters: ConnectorParameters) -> Metadata:
        return file_metadata(Path(doc_id))

    def get_document_binary(self, doc_id: str, parameters: ConnectorParameters) -> BinaryDetails:
        path = Path(doc_id)
        mime_type = guess_mime_type(path.name)
        try:
            stream = self.open_file(doc_id)
        except FileNotFoundError as exc:
            LOGGER.error(
                "Error accessing %s when getting binary details, returning an empty stream: %s",
                doc_id,
                exc,
            )
            stream = io.BytesIO()
        return BinaryDetails(document_id=doc_id, stream=stream, mime_type=mime_type)

    def delete_document(self, doc_id: str, parameters: ConnectorParameters) -> None:
        LOGGER.info("Attempting to delete %s", doc_id)
        # The host always sends this flag; a plain directory has no versions.
        LOGGER.debug("Delete all versions: %s", parameters.delete_all_versions)
        path = Path(doc_id)
        try:
            if path.is_dir() and not path.is_symlink():
                path.rmdir()
            else:
                path.unlink()
        except OSError as exc:
            LOGGER.error("Could not delete %s: %s", doc_id, exc)
            raise
        LOGGER.debug("Deleted %s", doc_id)

    def open_file(self, doc_id: str) -> BinaryIO:
        return open(doc_id, "rb")


class CachingFileSystemReader(FileSystemReader):
    """Reader that scans the directory once and serves fetches from a cache.

    Enumeration records each document's metadata (and, when binaries are
    requested, a content placeholder) in ``cache`` under the source path.
    Each entry can be fetched once.
    """

    def __init__(self, cache: DocumentCache | None = None) -> None:
        self.cache = cache if cache is not None else DocumentCache()

    def get_documents(self, parameters: ConnectorParameters) -> Iterator[Document]:
        scope = parameters.file_path
        include_binaries = parameters.include_binaries
        for document in iter_documents(scope, parameters.date_filter):
            path = Path(document.id)
            self.cache.put_metadata(scope, document.id, file_metadata(path, document.size))
            if include_binaries:
                self.cache.put_binary(scope, document.id, LazyBinary(path))
            yield document

    def get_document_metadata(self, doc_id: str, parameters: ConnectorParameters) -> Metadata:
        return self.cache.pop_metadata(parameters.file_path, doc_id)

    def get_document_binary(self, doc_id: str, parameters: ConnectorParameters) -> BinaryDetails:
        binary = self.cache.pop_binary(parameters.file_path, doc_id)
        mime_type = guess_mime_type(binary.path.name)
        try:
            stream = binary.open()
        except FileNotFoundError as exc:
            LOGGER.error("Cached document %s disappeared, returning an empty stream: %s", doc_id, exc)
            stream = io.BytesIO()
        return BinaryDetails(document_id=doc_id, stream=stream, mime_type=mime_type)
