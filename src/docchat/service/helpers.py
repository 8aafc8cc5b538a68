"""Helpers for calling the async core from sync code and checking backends.

Flask routes are synchronous, so they bridge into the async pipeline with
`run_async`. The status checks back the health endpoints and the CLI.
"""

import asyncio
import logging
from typing import Any

from docchat.llm.base import LLMService
from docchat.service.database import VectorStore

logger = logging.getLogger(__name__)


def run_async(coro: Any) -> Any:
    """Run an async coroutine in a new event loop.

    This is useful for calling async functions from synchronous Flask routes.
    Creates a new event loop, runs the coroutine, and properly cleans up.

    Args:
        coro: An awaitable coroutine to execute

    Returns:
        The result of the coroutine

    Note:
        For CLI commands, prefer using asyncio.run() directly.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


async def check_ollama(llm_service: LLMService, timeout: float = 5.0) -> dict[str, Any]:
    """Check if the Ollama daemon is reachable and list its models.

    Args:
        llm_service: Backend to query
        timeout: Seconds to wait for the model list (default 5.0)

    Returns:
        Dict containing:
        - status: "ok" or "error"
        - models: Installed model names (if reachable)
        - recommended: The configured chat model
        - error: Error message (if unreachable)
    """
    try:
        async with asyncio.timeout(timeout):
            models = await llm_service.list_models()
        return {"status": "ok", "models": models, "recommended": llm_service.model}
    except asyncio.TimeoutError:
        logger.warning(f"⚠️ Timeout connecting to Ollama after {timeout}s")
        return {
            "status": "error",
            "recommended": llm_service.model,
            "error": f"Connection timeout ({timeout}s)",
        }
    except Exception as e:
        logger.warning(f"⚠️ Failed to connect to Ollama: {e}")
        return {"status": "error", "recommended": llm_service.model, "error": str(e)}


def check_vector_store(store: VectorStore, collection: str) -> dict[str, Any]:
    """Check if the vector store is reachable and whether `collection` exists.

    Returns:
        Dict containing:
        - status: "ok" or "error"
        - collections: All collection names (if reachable)
        - currentCollection: The configured collection
        - collectionExists: Whether it exists (if reachable)
        - error: Error message (if unreachable)
    """
    try:
        collections = store.list_collections()
    except Exception as e:
        logger.warning(f"⚠️ Failed to connect to the vector store: {e}")
        return {"status": "error", "currentCollection": collection, "error": str(e)}

    return {
        "status": "ok",
        "collections": collections,
        "currentCollection": collection,
        "collectionExists": collection in collections,
    }
