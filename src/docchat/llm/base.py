"""Protocol for language-model backends."""

from typing import Any, Protocol


class LLMService(Protocol):
    """Protocol defining the interface for LLM services.

    This protocol ensures type safety and allows the core pipeline to run
    against any backend exposing chat, embedding and model listing.
    """

    model: str

    async def generate_response(
        self, messages: list[dict], options: dict[str, Any] | None = None
    ) -> str:
        """Generate a response from the LLM based on the provided messages.

        Args:
            messages: List of message dictionaries with 'role' and 'content' keys.
                     Example: [{"role": "user", "content": "Hello"}]
            options: Backend generation options such as temperature and
                     num_predict.

        Returns:
            str: The generated response content from the LLM.
        """
        ...

    async def generate_embeddings(self, texts: list[str], model: str) -> list[list[float]]:
        """Generate one embedding per text, in input order.

        Args:
            texts: List of text strings to embed
            model: Embedding model name

        Returns:
            list[list[float]]: List of embedding vectors
        """
        ...

    async def list_models(self) -> list[str]:
        """Return the names of the models available on the backend."""
        ...

    async def pull_model(self, name: str) -> str:
        """Download a model onto the backend and return the final status."""
        ...

    async def delete_model(self, name: str) -> None:
        """Remove a model from the backend."""
        ...
