"""Ollama LLM service implementation."""

import asyncio
import logging
from typing import Any

import ollama

logger = logging.getLogger(__name__)


class OllamaService:
    """Ollama LLM service implementation.

    This service uses the Ollama API to generate responses and embeddings
    from locally hosted models. The client is synchronous and every call runs
    in a worker thread, so one instance can be awaited from any event loop,
    including the short-lived loops Flask routes open per request.
    """

    def __init__(self, host: str, model: str) -> None:
        """Initialize the Ollama service.

        Args:
            host: The Ollama server host URL (e.g., "http://localhost:11434")
            model: The chat model name to use (e.g., "mistral")
        """
        self.host = host
        self.model = model
        logger.info(f"🤖 Initializing OllamaService: host={host}, model={model}")
        self.client = ollama.Client(host=host)

    async def generate_response(
        self, messages: list[dict], options: dict[str, Any] | None = None
    ) -> str:
        """Generate a response using Ollama.

        Args:
            messages: List of message dictionaries with 'role' and 'content' keys.
            options: Optional generation options passed through to Ollama
                     (e.g. {"temperature": 0.1, "num_predict": 4000}).

        Returns:
            str: The generated response content from the model.
        """
        logger.info(f"🗣️  Generating response with {self.model}")
        logger.debug(f"Messages: {len(messages)} messages")
        for i, msg in enumerate(messages):
            role = msg.get("role", "unknown")
            content_preview = msg.get("content", "")[:100]
            logger.debug(f"  Message {i + 1} ({role}): {content_preview}...")

        chat_kwargs: dict[str, Any] = {"model": self.model, "messages": messages}
        if options:
            chat_kwargs["options"] = options

        try:
            response = await asyncio.to_thread(self.client.chat, **chat_kwargs)
        except Exception as e:
            logger.error(f"❌ Ollama API error: {e}", exc_info=True)
            raise

        content = response.message.content or ""
        logger.info(f"✅ Response generated: {len(content)} characters")
        return content

    async def generate_embeddings(self, texts: list[str], model: str) -> list[list[float]]:
        """Generate embeddings for a list of texts using Ollama.

        One request is made per text, sequentially.

        Args:
            texts: List of text strings to embed
            model: Embedding model name

        Returns:
            list[list[float]]: List of embedding vectors
        """
        embeddings = []

        for text in texts:
            response = await asyncio.to_thread(self.client.embed, model=model, input=text)
            embeddings.append(list(response["embeddings"][0]))

        logger.debug(f"Generated {len(embeddings)} embeddings with {model}")
        return embeddings

    async def list_models(self) -> list[str]:
        """List the names of models installed on the Ollama daemon.

        Returns:
            list[str]: Model names, e.g. ["mistral:latest", "nomic-embed-text:latest"]
        """
        response = await asyncio.to_thread(self.client.list)
        return [m.model for m in response.models if m.model]

    async def pull_model(self, name: str) -> str:
        """Download a model from the Ollama registry.

        Blocks until the download finishes.

        Args:
            name: Model name, e.g. "llama3:8b"

        Returns:
            str: Final status reported by Ollama (normally "success")
        """
        logger.info(f"⬇️  Pulling model {name}")
        response = await asyncio.to_thread(self.client.pull, model=name)
        logger.info(f"✅ Pulled model {name}: {response.status}")
        return response.status or ""

    async def delete_model(self, name: str) -> None:
        """Remove a model from the Ollama daemon."""
        logger.info(f"🗑️  Deleting model {name}")
        await asyncio.to_thread(self.client.delete, model=name)
