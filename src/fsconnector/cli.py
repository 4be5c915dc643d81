"""Command line interface for fsconnector."""

from __future__ import annotations

import asyncio
import logging
import shutil
from dataclasses import replace
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.table import Table

from fsconnector.config import ALL_VERSIONS, END_TIME, START_TIME, AppConfig
from fsconnector.metadata.codec import encode_metadata
from fsconnector.repository.enumerator import document_from_path
from fsconnector.repository.reader import FileSystemReader, file_metadata
from fsconnector.repository.writer import FileSystemWriter

console = Console()
app = typer.Typer(help="fsconnector - expose a local directory as a document repository")

CHUNK_SIZE = 1 << 20


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _iter_file_chunks(path: Path) -> Iterator[bytes]:
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
            yield chunk


@app.command("list")
def list_documents(
    source: Path = typer.Argument(..., help="Directory (or single file) to enumerate."),
    start: Optional[int] = typer.Option(None, help="Earliest modification time, epoch ms"),
    end: Optional[int] = typer.Option(None, help="Latest modification time, epoch ms"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """List the documents exposed for a source path."""
    _setup_logging(verbose)
    parameters = AppConfig(file_path=source).to_parameters(
        Path.cwd(), {START_TIME: start, END_TIME: end}
    )

    try:
        documents = list(FileSystemReader().get_documents(parameters))
    except OSError as exc:
        console.print(f"[red]Cannot read {source}: {exc}[/red]")
        raise typer.Exit(code=1) from exc

    if not documents:
        console.print("[yellow]No documents found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Name")
    table.add_column("Size", justify="right")
    table.add_column("MIME type")
    table.add_column("Modified")
    table.add_column("Parent")
    for document in documents:
        table.add_row(
            document.name,
            str(document.size),
            document.mime_type,
            document.modified.isoformat(timespec="seconds"),
            document.parent_path,
        )
    console.print(table)


@app.command()
def metadata(
    doc_id: str = typer.Argument(..., help="Document id (its filesystem path)"),
) -> None:
    """Show the metadata published for a document."""
    try:
        raw = FileSystemReader().get_document_metadata(doc_id, AppConfig().to_parameters())
    except OSError as exc:
        raise typer.BadParameter(f"Cannot read {doc_id}: {exc}") from exc
    values = encode_metadata(raw)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Key")
    table.add_column("Value")
    for key, value in values.items():
        table.add_row(key, value)
    console.print(table)


@app.command()
def fetch(
    doc_id: str = typer.Argument(..., help="Document id (its filesystem path)"),
    out: Path = typer.Option(..., "--out", "-o", help="Where to copy the content"),
) -> None:
    """Copy a document's binary content to a local file."""
    try:
        details = FileSystemReader().get_document_binary(doc_id, AppConfig().to_parameters())
        with details.stream as stream, out.open("wb") as target:
            shutil.copyfileobj(stream, target)
    except OSError as exc:
        console.print(f"[red]Could not fetch {doc_id}: {exc}[/red]")
        raise typer.Exit(code=1) from exc
    console.print(f"Copied {out.stat().st_size} bytes ({details.mime_type}) to [bold]{out}[/bold]")


@app.command()
def delete(
    doc_id: str = typer.Argument(..., help="Document id (its filesystem path)"),
    all_versions: bool = typer.Option(False, "--all-versions", help="Delete all versions"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Delete a document."""
    _setup_logging(verbose)
    parameters = AppConfig().to_parameters(overrides={ALL_VERSIONS: all_versions})
    try:
        FileSystemReader().delete_document(doc_id, parameters)
    except OSError as exc:
        console.print(f"[red]Could not delete {doc_id}: {exc}[/red]")
        raise typer.Exit(code=1) from exc
    console.print(f"Deleted [bold]{doc_id}[/bold]")


@app.command()
def write(
    source: Path = typer.Argument(..., help="File to copy into the output repository", exists=True, dir_okay=False),
    output: Path = typer.Option(..., "--output", "-o", help="Output root directory"),
    parent_path: Optional[str] = typer.Option(None, help="Parent path recorded for the document"),
    xml: bool = typer.Option(True, "--xml/--properties", help="Sidecar metadata format"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Write a local file plus its metadata sidecar into an output directory."""
    _setup_logging(verbose)
    document = document_from_path(source)
    if document is None:  # pragma: no cover - no filter applied
        raise typer.BadParameter(f"Cannot read {source}")
    if parent_path is not None:
        document = replace(document, parent_path=parent_path)

    parameters = AppConfig(file_path=output, metadata_as_xml=xml).to_parameters(Path.cwd())
    try:
        written = asyncio.run(
            FileSystemWriter().write_document(
                document, file_metadata(source), _iter_file_chunks(source), parameters
            )
        )
    except OSError as exc:
        console.print(f"[red]Could not write {source}: {exc}[/red]")
        raise typer.Exit(code=1) from exc
    console.print(f"Wrote [bold]{written.id}[/bold]")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    file_path: Optional[Path] = typer.Option(None, "--file-path", help="Default source/output directory"),
    cache: bool = typer.Option(False, "--cache", help="Serve fetches from the enumeration cache"),
    xml: bool = typer.Option(True, "--xml/--properties", help="Sidecar metadata format"),
) -> None:
    """Start the connector web API."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    from fsconnector.web.app import create_app

    config = AppConfig(file_path=file_path, metadata_as_xml=xml, use_cache=cache)
    console.print(f"Starting connector on http://{host}:{port} (file path: {config.resolve_file_path(Path.cwd())})")
    uvicorn.run(create_app(config), host=host, port=port, reload=False, log_level="info")
