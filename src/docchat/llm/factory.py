"""Factory function for creating LLM service instances."""

import logging
import os

from dotenv import load_dotenv

from docchat.constants import DEFAULT_CHAT_MODEL, DEFAULT_OLLAMA_HOST
from docchat.llm.base import LLMService
from docchat.llm.ollama import OllamaService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Backends reachable without leaving the machine
LOCAL_SERVICES = {"ollama": OllamaService}


def get_llm_service(config: dict | None = None) -> LLMService:
    """Create the local LLM backend.

    Args:
        config: Optional overrides. Missing keys fall back to the environment:
                - 'service': Backend name (default: "ollama")
                - 'host': Daemon URL (default: OLLAMA_HOST)
                - 'model': Chat model (default: OLLAMA_MODEL)

    Returns:
        LLMService: An instance implementing the LLMService protocol.

    Raises:
        ValueError: If the backend is not a local service
    """
    config = config or {}
    service_type = config.get("service", "ollama")

    service_cls = LOCAL_SERVICES.get(service_type)
    if service_cls is None:
        raise ValueError(
            f"Unsupported service type: {service_type} (available: {', '.join(LOCAL_SERVICES)})"
        )

    host = config.get("host") or os.getenv("OLLAMA_HOST", DEFAULT_OLLAMA_HOST)
    model = config.get("model") or os.getenv("OLLAMA_MODEL", DEFAULT_CHAT_MODEL)
    logger.debug(f"Creating {service_type} service for {model} at {host}")
    return service_cls(host=host, model=model)
