"""Asynchronous document writer with sidecar metadata."""

from __future__ import annotations

import asyncio
import logging
from contextlib import aclosing
from dataclasses import replace
from pathlib import Path
from typing import AsyncIterable, AsyncIterator, BinaryIO, Iterable, Union

from fsconnector.config import ConnectorParameters
from fsconnector.metadata.sidecar import write_sidecar
from fsconnector.models import Document, Metadata
from fsconnector.utils.files import ensure_file_exists, force_sync
from fsconnector.utils.paths import destination_path

LOGGER = logging.getLogger(__name__)

Content = Union[AsyncIterable[bytes], Iterable[bytes]]


_EXHAUSTED = object()


async def _iter_chunks(content: Content) -> AsyncIterator[bytes]:
    """Yield chunks from ``content`` and close the source when done or abandoned."""
    if hasattr(content, "__aiter__"):
        try:
            async for chunk in content:  # type: ignore[union-attr]
                yield chunk
        finally:
            aclose = getattr(content, "aclose", None)
            if aclose is not None:
                await aclose()
        return
    # plain iterables may be backed by blocking reads
    chunks = iter(content)  # type: ignore[arg-type]
    try:
        while True:
            chunk = await asyncio.to_thread(next, chunks, _EXHAUSTED)
            if chunk is _EXHAUSTED:
                break
            yield chunk
    finally:
        close = getattr(chunks, "close", None)
        if close is not None:
            await asyncio.to_thread(close)


class FileSystemWriter:
    """Materializes incoming documents under the configured output directory."""

    def output_path(self, document: Document, parameters: ConnectorParameters) -> Path:
        return destination_path(parameters.file_path, document.parent_path, document.name)

    async def write_document(
        self,
        document: Document,
        metadata: Metadata,
        content: Content,
        parameters: ConnectorParameters,
    ) -> Document:
        """Write ``content`` and its sidecar, returning the relocated descriptor.

        The sidecar is attempted even when the content write fails, and the
        file handle is always closed. The first error raised along the way is
        propagated after both steps have run.
        """
        output_file = self.output_path(document, parameters)
        as_xml = parameters.metadata_as_xml

        try:
            await asyncio.to_thread(ensure_file_exists, output_file)
            handle = await asyncio.to_thread(output_file.open, "wb")
        except OSError:
            LOGGER.exception("Error processing file: %s", output_file)
            raise

        error: BaseException | None = None
        try:
            try:
                await self._write_content(handle, content)
            except Exception as exc:
                LOGGER.error("Error writing to file %s: %s", output_file, exc)
                error = exc

            try:
                await asyncio.to_thread(write_sidecar, output_file, metadata, as_xml=as_xml)
            except Exception as exc:
                LOGGER.error("Failed to write metadata for %s: %s", output_file, exc)
                if error is None:
                    error = exc
        finally:
            await asyncio.to_thread(self._close, handle, output_file)

        if error is not None:
            raise error

        absolute = output_file.absolute()
        return replace(document, id=str(absolute), parent_path=str(absolute.parent))

    async def _write_content(self, handle: BinaryIO, content: Content) -> None:
        async with aclosing(_iter_chunks(content)) as chunks:
            async for chunk in chunks:
                await asyncio.to_thread(handle.write, chunk)
        await asyncio.to_thread(force_sync, handle)

    @staticmethod
    def _close(handle: BinaryIO, output_file: Path) -> None:
        try:
            handle.close()
        except OSError as exc:
            LOGGER.error("Error closing %s: %s", output_file, exc)
