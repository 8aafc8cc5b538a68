"""Local language-model backend for docchat.

This package wraps the Ollama daemon behind the LLMService protocol so the
embedder and the answer synthesizer can be tested against fakes.

Usage:
    from docchat.llm import get_llm_service

    # Create service from environment config
    service = get_llm_service()

    # Or with explicit config
    service = get_llm_service({"host": "http://localhost:11434", "model": "mistral"})
"""

from docchat.llm.base import LLMService
from docchat.llm.factory import get_llm_service
from docchat.llm.ollama import OllamaService

__all__ = [
    "LLMService",
    "OllamaService",
    "get_llm_service",
]
