"""Vector store access for docchat.

This package provides a unified interface for vector storage:
- Configuration management (ChromaConfig, create_chroma_client)
- The VectorStore protocol and its Chroma implementation
- Record and search result models
- Vector utilities (normalization, batching)

Usage:
    from docchat.service.database import (
        ChromaVectorStore,
        create_chroma_client,
    )

    store = ChromaVectorStore(create_chroma_client(), dimensions=768)
"""

# Re-export public API
from docchat.service.database.base import VectorStore
from docchat.service.database.config import ChromaConfig, create_chroma_client
from docchat.service.database.models import (
    CollectionStats,
    DocumentChunk,
    KeywordQuery,
    SearchHit,
    VectorRecord,
)
from docchat.service.database.operations import ChromaVectorStore
from docchat.service.database.utils import batched, l2_normalize

__all__ = [
    # Config
    "ChromaConfig",
    "create_chroma_client",
    # Store
    "VectorStore",
    "ChromaVectorStore",
    # Models
    "CollectionStats",
    "DocumentChunk",
    "KeywordQuery",
    "SearchHit",
    "VectorRecord",
    # Utils
    "batched",
    "l2_normalize",
]
