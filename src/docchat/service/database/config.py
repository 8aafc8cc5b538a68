"""Configuration and client creation for the Chroma vector backend."""

import logging
import os
from urllib.parse import urlparse

import chromadb
from chromadb.api import ClientAPI
from dotenv import load_dotenv

from docchat.constants import DEFAULT_CHROMA_URL

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class ChromaConfig:
    """Configuration class for Chroma connection details."""

    @staticmethod
    def get_url() -> str:
        """Get the Chroma server URL from environment variables.

        Returns:
            str: Chroma server URL (default: http://localhost:8000)
        """
        return os.getenv("CHROMA_URL", DEFAULT_CHROMA_URL)

    @staticmethod
    def get_path() -> str | None:
        """Get the embedded Chroma storage path, if configured.

        Returns:
            str | None: Directory for a local persistent store, or None to use
            the HTTP server at CHROMA_URL
        """
        return os.getenv("CHROMA_PATH") or None


def create_chroma_client(url: str | None = None, path: str | None = None) -> ClientAPI:
    """Create a Chroma client.

    A local persistent client is used when `path` is given (or CHROMA_PATH is
    set); otherwise an HTTP client for `url`.

    Args:
        url: Chroma server URL (defaults to ChromaConfig.get_url())
        path: Directory for an embedded persistent store

    Returns:
        ClientAPI: Connected Chroma client
    """
    if path is None and url is None:
        path = ChromaConfig.get_path()

    if path:
        logger.info(f"🗄️  Opening embedded Chroma store at {path}")
        return chromadb.PersistentClient(path=path)

    if url is None:
        url = ChromaConfig.get_url()

    parsed = urlparse(url)
    host = parsed.hostname or "localhost"
    ssl = parsed.scheme == "https"
    port = parsed.port or (443 if ssl else 8000)
    logger.info(f"🗄️  Connecting to Chroma at {host}:{port}")
    return chromadb.HttpClient(host=host, port=port, ssl=ssl)
