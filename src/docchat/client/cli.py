"""Command-line interface for docchat using Click."""

import asyncio
from pathlib import Path

import click

from docchat.client.cli_helpers import format_report, format_search_result, load_app_context
from docchat.config import configure_logging
from docchat.errors import ConfigurationError, DocChatError, StoreError, SynthesisError
from docchat.service.context import AppContext
from docchat.service.database import KeywordQuery
from docchat.service.indexer import IdPolicy

configure_logging()


def _context_or_abort(**overrides) -> AppContext:
    try:
        return load_app_context(**overrides)
    except ConfigurationError as e:
        click.echo(f"✗ Configuration error: {e}", err=True)
        raise click.Abort()


@click.command()
@click.argument(
    "directory",
    required=False,
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
)
@click.option(
    "--reset",
    is_flag=True,
    default=False,
    help="Delete and recreate the collection before indexing",
)
@click.option(
    "--id-policy",
    type=click.Choice([p.value for p in IdPolicy]),
    default=None,
    help="Record id scheme (default: from INDEX_ID_POLICY or 'append')",
)
@click.option("--collection", type=str, default=None, help="Collection to index into")
@click.option(
    "--embedding-model",
    type=str,
    default=None,
    help="Ollama embedding model (default: from EMBEDDING_MODEL or 'nomic-embed-text')",
)
def index(
    directory: Path | None,
    reset: bool,
    id_policy: str | None,
    collection: str | None,
    embedding_model: str | None,
) -> None:
    """Index the documents in DIRECTORY (default: DOCUMENTS_DIR).

    Example:
        docchat-index documents/
        docchat-index documents/ --reset
        docchat-index --id-policy content-hash
    """
    context = _context_or_abort(collection=collection, embedding_model=embedding_model)
    directory = directory or context.settings.documents_dir

    click.echo(f"📚 Indexing documents from '{directory}'")
    click.echo(f"Using embedding model: {context.embedder.model}")
    click.echo(f"Collection: {context.settings.collection_name}\n")

    try:
        pipeline = context.indexing_pipeline(id_policy)
        report = asyncio.run(pipeline.index(directory, reset=reset))
    except (StoreError, ConfigurationError) as e:
        click.echo(f"✗ Indexing aborted: {e}", err=True)
        raise click.Abort()

    if report.documents_found == 0:
        click.echo(f"No supported documents found in '{directory}'")
        return

    click.echo(format_report(report))


@click.command()
@click.argument("query", type=str)
@click.option("--limit", type=int, default=None, help="Number of results (default: SEARCH_LIMIT)")
@click.option(
    "--keyword",
    is_flag=True,
    default=False,
    help="Use keyword matching instead of semantic search",
)
def search(query: str, limit: int | None, keyword: bool) -> None:
    """Search the indexed documents.

    QUERY is the text to search for.

    Example:
        docchat-search "Kündigungsfrist"
        docchat-search "Kündigungsfrist" --keyword --limit 3
    """
    context = _context_or_abort()
    settings = context.settings
    limit = limit or settings.search_limit

    click.echo(f"🔍 Searching for: '{query}' ({'keyword' if keyword else 'semantic'} mode)\n")

    try:
        if not context.store.collection_exists(settings.collection_name):
            click.echo(f"Collection '{settings.collection_name}' does not exist. Run docchat-index first.")
            return

        if keyword:
            hits = context.store.search(
                settings.collection_name, KeywordQuery.from_text(query), limit
            )
        else:
            vector = asyncio.run(context.embedder.embed(query))
            hits = context.store.search(
                settings.collection_name, vector, limit, settings.min_score
            )
    except DocChatError as e:
        click.echo(f"✗ Search failed: {e}", err=True)
        click.echo("\nPlease ensure Ollama and Chroma are running.", err=True)
        raise click.Abort()

    if not hits:
        click.echo("No results found.")
        return

    click.echo(f"✅ Found {len(hits)} result(s):\n")
    for i, hit in enumerate(hits, 1):
        click.echo(format_search_result(i, hit))


@click.command()
@click.argument("question", type=str)
def ask(question: str) -> None:
    """Answer QUESTION from the indexed documents with the local model.

    Example:
        docchat-ask "Welche Kündigungsfrist gilt?"
    """
    context = _context_or_abort()

    async def _answer():
        await context.init()
        return await context.chat_service().answer(question)

    try:
        answer = asyncio.run(_answer())
    except SynthesisError as e:
        click.echo(f"✗ The local model did not answer: {e}", err=True)
        raise click.Abort()
    except DocChatError as e:
        click.echo(f"✗ Error: {e}", err=True)
        raise click.Abort()

    click.echo(answer.reply)
    if answer.sources:
        click.echo("\nSources:")
        for source in answer.sources:
            click.echo(f"  • {source.document}, page {source.page}")


@click.command()
def stats() -> None:
    """Show record count and dimensionality of the collection.

    Example:
        docchat-stats
    """
    context = _context_or_abort()
    try:
        collection_stats = context.store.stats(context.settings.collection_name)
    except StoreError as e:
        click.echo(f"✗ Error reading stats: {e}", err=True)
        raise click.Abort()

    if not collection_stats.exists:
        click.echo(f"Collection '{collection_stats.name}' does not exist")
        return

    click.echo(f"📊 Collection '{collection_stats.name}'")
    click.echo(f"   Records:    {collection_stats.count}")
    click.echo(f"   Dimensions: {collection_stats.dimensions}")
    click.echo(f"   Model:      {collection_stats.embedding_model or 'unknown'}")


@click.command()
@click.option("--yes", "-y", is_flag=True, default=False, help="Skip confirmation prompt")
def reset(yes: bool) -> None:
    """Delete every record in the collection and recreate it empty.

    WARNING: This is irreversible; all documents must be indexed again.

    Example:
        docchat-reset          # Will prompt for confirmation
        docchat-reset --yes    # Skip confirmation
    """
    context = _context_or_abort()
    name = context.settings.collection_name

    if not yes:
        click.echo(f"⚠️  WARNING: You are about to delete all records in '{name}'")
        if not click.confirm("Are you sure you want to proceed?", default=False):
            click.echo("Reset cancelled.")
            return

    try:
        context.store.reset(name, context.settings.embedding_dimensions)
    except DocChatError as e:
        click.echo(f"✗ Error resetting collection: {e}", err=True)
        raise click.Abort()

    click.echo(f"✓ Collection '{name}' reset")


if __name__ == "__main__":
    index()
