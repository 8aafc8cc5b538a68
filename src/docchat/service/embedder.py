"""Text embedding backed by the local Ollama daemon."""

import logging
from typing import Protocol

from docchat.errors import ConfigurationError, EmbeddingError
from docchat.llm.base import LLMService
from docchat.service.database.utils import l2_normalize

logger = logging.getLogger(__name__)


class Embedder(Protocol):
    """Maps text to a fixed-length, unit-length vector."""

    model: str
    dimensions: int

    async def embed(self, text: str) -> list[float]:
        ...


class OllamaEmbedder:
    """Embedder that calls an Ollama embedding model and L2-normalizes the result."""

    def __init__(self, llm_service: LLMService, model: str, dimensions: int) -> None:
        """Initialize the embedder.

        Args:
            llm_service: Backend used to compute raw embeddings
            model: Embedding model name (e.g. "nomic-embed-text")
            dimensions: Expected vector length; must match the collection
        """
        self.llm_service = llm_service
        self.model = model
        self.dimensions = dimensions

    async def embed(self, text: str) -> list[float]:
        """Embed one text.

        Args:
            text: The text to embed

        Returns:
            list[float]: Unit-length vector of length `dimensions`

        Raises:
            EmbeddingError: If the backend call fails or returns nothing
            ConfigurationError: If the model's dimensionality differs from
                the configured one
        """
        try:
            vectors = await self.llm_service.generate_embeddings([text], self.model)
        except Exception as e:
            raise EmbeddingError(f"Embedding with {self.model} failed: {e}", e) from e

        if not vectors or not vectors[0]:
            raise EmbeddingError(f"Embedding model {self.model} returned no vector")

        vector = vectors[0]
        if len(vector) != self.dimensions:
            raise ConfigurationError(
                f"Embedding model {self.model} produced {len(vector)} dimensions, "
                f"expected {self.dimensions} (set EMBEDDING_DIMENSIONS and reset the collection)"
            )
        return l2_normalize(vector)

    async def is_available(self) -> bool:
        """Embed a short text to check the backend; False if embedding fails."""
        try:
            await self.embed("ping")
            return True
        except EmbeddingError as e:
            logger.warning(f"⚠️ Embedding model {self.model} unavailable: {e}")
            return False
