"""Helper functions for CLI commands."""

from docchat.config import Settings
from docchat.service.context import AppContext
from docchat.service.database import SearchHit
from docchat.service.indexer import IndexReport


def load_app_context(
    collection: str | None = None,
    embedding_model: str | None = None,
) -> AppContext:
    """Build an application context from the environment with CLI overrides.

    Args:
        collection: Collection name overriding COLLECTION_NAME
        embedding_model: Embedding model overriding EMBEDDING_MODEL

    Returns:
        AppContext: Context with clients created but not yet initialized
    """
    settings = Settings.from_env()
    if collection:
        settings.collection_name = collection
    if embedding_model:
        settings.embedding_model = embedding_model
    return AppContext.from_settings(settings)


def format_search_result(index: int, hit: SearchHit, max_length: int = 200) -> str:
    """Format a search result for display.

    Args:
        index: Result number (1-based)
        hit: Search hit
        max_length: Maximum content length before truncation

    Returns:
        Formatted string for display
    """
    score = "n/a" if hit.score is None else f"{hit.score:.4f}"
    content = hit.content.replace("\n", " ")
    display_content = content[:max_length] + "..." if len(content) > max_length else content

    lines = [
        f"{index}. [{hit.document_name} - page {hit.page_number}] (score: {score})",
        f"   {display_content}",
        "",
    ]
    return "\n".join(lines)


def format_report(report: IndexReport) -> str:
    """Summarize an indexing run for display."""
    lines = [
        f"Documents found:   {report.documents_found}",
        f"Documents indexed: {report.documents_indexed}",
        f"Documents skipped: {report.documents_skipped}",
        f"Documents failed:  {report.documents_failed}",
        f"Chunks stored:     {report.chunks_stored}",
    ]
    for name, error in report.errors.items():
        lines.append(f"  ✗ {name}: {error}")
    return "\n".join(lines)
