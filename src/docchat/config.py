"""Environment-driven configuration for docchat."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from docchat.constants import (
    DEFAULT_CHAT_MODEL,
    DEFAULT_CHROMA_URL,
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_COLLECTION,
    DEFAULT_DOCUMENTS_DIR,
    DEFAULT_EMBEDDING_DIMENSIONS,
    DEFAULT_EMBEDDING_MODEL,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MIN_SCORE,
    DEFAULT_OLLAMA_HOST,
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_TEMPERATURE,
    MAX_CONTEXT_TOKENS,
    MAX_TOKENS_PER_RESULT,
)
from docchat.errors import ConfigurationError

# Load environment variables
load_dotenv()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
ID_POLICIES = ("append", "content-hash")


def configure_logging(level: str | None = None) -> None:
    """Configure root logging from LOG_LEVEL (default: INFO)."""
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}", e) from e


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}", e) from e


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Runtime settings for the indexing and query pipelines.

    Every field maps to one environment variable; see `from_env` for names.
    """

    documents_dir: Path = Path(DEFAULT_DOCUMENTS_DIR)
    chunk_size: int = DEFAULT_CHUNK_SIZE
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP
    collection_name: str = DEFAULT_COLLECTION
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    embedding_dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS
    chroma_url: str = DEFAULT_CHROMA_URL
    chroma_path: str | None = None
    ollama_host: str = DEFAULT_OLLAMA_HOST
    ollama_model: str = DEFAULT_CHAT_MODEL
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    search_limit: int = DEFAULT_SEARCH_LIMIT
    min_score: float = DEFAULT_MIN_SCORE
    max_context_tokens: int = MAX_CONTEXT_TOKENS
    max_tokens_per_result: int = MAX_TOKENS_PER_RESULT
    semantic_search: bool = True
    id_policy: str = "append"

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ConfigurationError(f"CHUNK_SIZE must be positive, got {self.chunk_size}")
        if self.chunk_overlap < 0:
            raise ConfigurationError(
                f"CHUNK_OVERLAP must not be negative, got {self.chunk_overlap}"
            )
        if self.chunk_overlap >= self.chunk_size:
            raise ConfigurationError(
                f"CHUNK_OVERLAP ({self.chunk_overlap}) must be smaller than "
                f"CHUNK_SIZE ({self.chunk_size})"
            )
        if self.embedding_dimensions <= 0:
            raise ConfigurationError(
                f"EMBEDDING_DIMENSIONS must be positive, got {self.embedding_dimensions}"
            )
        if self.id_policy not in ID_POLICIES:
            raise ConfigurationError(
                f"INDEX_ID_POLICY must be one of {ID_POLICIES}, got {self.id_policy!r}"
            )

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables (and `.env`).

        Returns:
            Settings: populated settings, defaults applied for unset variables

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed or a
                value is out of range
        """
        return cls(
            documents_dir=Path(os.getenv("DOCUMENTS_DIR", DEFAULT_DOCUMENTS_DIR)),
            chunk_size=_env_int("CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
            chunk_overlap=_env_int("CHUNK_OVERLAP", DEFAULT_CHUNK_OVERLAP),
            collection_name=os.getenv("COLLECTION_NAME", DEFAULT_COLLECTION),
            embedding_model=os.getenv("EMBEDDING_MODEL", DEFAULT_EMBEDDING_MODEL),
            embedding_dimensions=_env_int("EMBEDDING_DIMENSIONS", DEFAULT_EMBEDDING_DIMENSIONS),
            chroma_url=os.getenv("CHROMA_URL", DEFAULT_CHROMA_URL),
            chroma_path=os.getenv("CHROMA_PATH") or None,
            ollama_host=os.getenv("OLLAMA_HOST", DEFAULT_OLLAMA_HOST),
            ollama_model=os.getenv("OLLAMA_MODEL", DEFAULT_CHAT_MODEL),
            system_prompt=os.getenv("SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT),
            temperature=_env_float("TEMPERATURE", DEFAULT_TEMPERATURE),
            max_tokens=_env_int("MAX_TOKENS", DEFAULT_MAX_TOKENS),
            search_limit=_env_int("SEARCH_LIMIT", DEFAULT_SEARCH_LIMIT),
            min_score=_env_float("MIN_SCORE", DEFAULT_MIN_SCORE),
            max_context_tokens=_env_int("MAX_CONTEXT_TOKENS", MAX_CONTEXT_TOKENS),
            max_tokens_per_result=_env_int("MAX_TOKENS_PER_RESULT", MAX_TOKENS_PER_RESULT),
            semantic_search=_env_bool("SEMANTIC_SEARCH", True),
            id_policy=os.getenv("INDEX_ID_POLICY", "append").strip().lower(),
        )
