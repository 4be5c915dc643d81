"""FastAPI application exposing the connector operations to the host."""

from __future__ import annotations

import asyncio
import errno
import json
import logging
from pathlib import Path
from typing import Any, AsyncIterator, BinaryIO, Dict, Iterator

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import StreamingResponse
from pydantic import ValidationError

from fsconnector.config import (
    ALL_VERSIONS,
    END_TIME,
    FILE_PATH,
    INCLUDE_BINARIES,
    METADATA_AS_XML,
    START_TIME,
    AppConfig,
    ConnectorParameters,
)
from fsconnector.repository.cache import DocumentCache, DocumentNotCachedError
from fsconnector.repository.reader import CachingFileSystemReader, FileSystemReader
from fsconnector.repository.writer import FileSystemWriter
from fsconnector.web.form import router as form_router
from fsconnector.web.schemas import (
    DocumentModel,
    DocumentsResponse,
    ListPayload,
    MetadataEntry,
    MetadataResponse,
    WriteResponse,
    metadata_from_json,
    metadata_to_json,
)

LOGGER = logging.getLogger(__name__)

CHUNK_SIZE = 1 << 16


def _parameters(request: Request, overrides: Dict[str, Any]) -> ConnectorParameters:
    config: AppConfig = request.app.state.config
    return config.to_parameters(Path.cwd(), overrides)


def _require_file_path(parameters: ConnectorParameters) -> str:
    try:
        return parameters.file_path
    except KeyError as exc:
        raise HTTPException(status_code=400, detail="No file path configured") from exc


def _http_error(exc: OSError) -> HTTPException:
    if isinstance(exc, FileNotFoundError):
        return HTTPException(status_code=404, detail=f"Not found: {exc.filename}")
    if isinstance(exc, PermissionError):
        return HTTPException(status_code=403, detail=f"Permission denied: {exc.filename}")
    if exc.errno in (errno.ENOTEMPTY, errno.EEXIST):
        return HTTPException(status_code=409, detail=f"Directory not empty: {exc.filename}")
    return HTTPException(status_code=500, detail=str(exc))


def _iter_stream(stream: BinaryIO) -> Iterator[bytes]:
    try:
        for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
            yield chunk
    finally:
        stream.close()


async def _iter_upload(upload: UploadFile) -> AsyncIterator[bytes]:
    while True:
        chunk = await upload.read(CHUNK_SIZE)
        if not chunk:
            break
        yield chunk


def create_app(config: AppConfig | None = None) -> FastAPI:
    config = config or AppConfig()
    app = FastAPI(title="fsconnector", version="0.1.0")
    app.state.config = config
    app.state.cache = DocumentCache()
    app.state.reader = (
        CachingFileSystemReader(app.state.cache) if config.use_cache else FileSystemReader()
    )
    app.state.writer = FileSystemWriter()
    app.include_router(form_router)

    @app.on_event("startup")
    async def startup_event() -> None:
        logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    @app.get("/healthz")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/documents")
    async def list_documents(payload: ListPayload, request: Request) -> DocumentsResponse:
        parameters = _parameters(
            request,
            {
                FILE_PATH: payload.file_path,
                START_TIME: payload.start_time,
                END_TIME: payload.end_time,
                INCLUDE_BINARIES: payload.include_binaries,
            },
        )
        _require_file_path(parameters)
        reader = request.app.state.reader
        try:
            documents = await asyncio.to_thread(lambda: list(reader.get_documents(parameters)))
        except OSError as exc:
            LOGGER.error("Enumeration of %s failed: %s", parameters.file_path, exc)
            raise _http_error(exc) from exc
        return DocumentsResponse(documents=[DocumentModel.from_document(doc) for doc in documents])

    @app.get("/documents/metadata")
    async def document_metadata(
        doc_id: str, request: Request, file_path: str | None = None
    ) -> MetadataResponse:
        parameters = _parameters(request, {FILE_PATH: file_path})
        reader = request.app.state.reader
        try:
            metadata = await asyncio.to_thread(reader.get_document_metadata, doc_id, parameters)
        except DocumentNotCachedError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except KeyError as exc:
            raise HTTPException(status_code=400, detail="No file path configured") from exc
        except OSError as exc:
            raise _http_error(exc) from exc
        return MetadataResponse(doc_id=doc_id, metadata=metadata_to_json(metadata))

    @app.get("/documents/binary")
    async def document_binary(
        doc_id: str, request: Request, file_path: str | None = None
    ) -> StreamingResponse:
        parameters = _parameters(request, {FILE_PATH: file_path})
        reader = request.app.state.reader
        try:
            details = await asyncio.to_thread(reader.get_document_binary, doc_id, parameters)
        except DocumentNotCachedError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except KeyError as exc:
            raise HTTPException(status_code=400, detail="No file path configured") from exc
        except OSError as exc:
            raise _http_error(exc) from exc
        return StreamingResponse(_iter_stream(details.stream), media_type=details.mime_type)

    @app.delete("/documents")
    async def delete_document(
        doc_id: str, request: Request, all_versions: bool = False
    ) -> Dict[str, str]:
        parameters = _parameters(request, {ALL_VERSIONS: all_versions})
        reader = request.app.state.reader
        try:
            await asyncio.to_thread(reader.delete_document, doc_id, parameters)
        except OSError as exc:
            raise _http_error(exc) from exc
        return {"status": "ok", "deleted_id": doc_id}

    @app.post("/documents/write")
    async def write_document(
        request: Request,
        document: str = Form(..., description="JSON encoded document descriptor"),
        metadata: str = Form("{}", description="JSON object of tagged metadata entries"),
        content: UploadFile = File(...),
        file_path: str | None = Form(None),
        metadata_as_xml: bool | None = Form(None),
    ) -> WriteResponse:
        try:
            descriptor = DocumentModel.model_validate_json(document).to_document()
            entries = {
                key: MetadataEntry.model_validate(value)
                for key, value in _load_object(metadata).items()
            }
            metadata_values = metadata_from_json(entries)
        except (ValidationError, ValueError, TypeError, KeyError) as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        parameters = _parameters(request, {FILE_PATH: file_path, METADATA_AS_XML: metadata_as_xml})
        _require_file_path(parameters)
        writer: FileSystemWriter = request.app.state.writer
        try:
            writer.output_path(descriptor, parameters)
        except ValueError as exc:
            await content.close()
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        try:
            written = await writer.write_document(
                descriptor, metadata_values, _iter_upload(content), parameters
            )
        except OSError as exc:
            raise _http_error(exc) from exc
        finally:
            await content.close()
        return WriteResponse(document=DocumentModel.from_document(written))

    return app


def _load_object(raw: str) -> Dict[str, Any]:
    value = json.loads(raw)
    if not isinstance(value, dict):
        raise ValueError("metadata must be a JSON object")
    return value


app = create_app()
