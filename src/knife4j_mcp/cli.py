"""CLI entry point for knife4j-mcp."""

import asyncio
from pathlib import Path

import click
from pydantic import ValidationError

from knife4j_mcp.config import SUPPORTED_LANGS, Settings
from knife4j_mcp.errors import Knife4jMcpError
from knife4j_mcp.fetch import HttpFetcher
from knife4j_mcp.formatting import format_query_result
from knife4j_mcp.log import setup_logging
from knife4j_mcp.parser.detect import load_document
from knife4j_mcp.parser.markdown import extract_modules
from knife4j_mcp.parser.tolerant import convert_to_markdown
from knife4j_mcp.search import MODES, query_apis
from knife4j_mcp.server import create_server
from knife4j_mcp.store import DocumentStore


def _load_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e


def _build_store(settings: Settings) -> DocumentStore:
    """Create the document store for the configured sources."""
    try:
        urls = settings.source_urls
    except Knife4jMcpError as e:
        raise click.ClickException(str(e)) from e
    return DocumentStore(urls, HttpFetcher(timeout=settings.fetch_timeout), lang=settings.docs_lang)


@click.group()
def main():
    """knife4j-mcp: serve OpenAPI documentation to LLM agents over MCP."""
    pass


@main.command()
@click.option("--sse", is_flag=True, help="Serve over HTTP/SSE instead of stdio.")
@click.option("--port", default=None, type=int, help="SSE port (default: PORT or 3000).")
def serve(sse: bool, port: int | None):
    """Run the MCP server."""
    settings = _load_settings()
    setup_logging(settings.log_level)
    store = _build_store(settings)

    port = port or settings.port
    server = create_server(store, port=port)
    if sse:
        click.echo(f"SSE server running at: http://localhost:{port}/sse", err=True)
        server.run(transport="sse")
    else:
        server.run(transport="stdio")


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file for the Markdown (default: stdout).")
@click.option("--lang", default="zhCN", type=click.Choice(SUPPORTED_LANGS), help="Label language.")
def convert(doc_path: Path, output: Path | None, lang: str):
    """Convert a local OpenAPI document to Markdown."""
    click.echo(f"Converting {doc_path}...", err=True)
    document = load_document(doc_path)
    markdown = convert_to_markdown(document, lang=lang)

    modules = extract_modules(markdown)
    click.echo(f"Found {len(modules)} modules, {sum(len(m.apis) for m in modules)} APIs.", err=True)

    if output is None:
        click.echo(markdown)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(markdown, encoding="utf-8")
    click.echo(f"Markdown saved to {output}", err=True)


@main.command()
@click.argument("q")
@click.option("--mode", default="auto", type=click.Choice(MODES), help="Display mode.")
@click.option("--limit", default=10, type=click.IntRange(1, 50), help="Max number of results.")
def query(q: str, mode: str, limit: int):
    """Search the configured documentation sources."""
    settings = _load_settings()
    setup_logging(settings.log_level)
    store = _build_store(settings)

    async def _run() -> str:
        await store.ensure_initialized()
        return format_query_result(query_apis(store, q, mode=mode, limit=limit))

    try:
        text = asyncio.run(_run())
    except Knife4jMcpError as e:
        raise click.ClickException(str(e)) from e
    click.echo(text)
