"""Vector store protocol."""

from collections.abc import Sequence
from typing import Protocol

from docchat.service.database.models import (
    CollectionStats,
    KeywordQuery,
    SearchHit,
    VectorRecord,
)


class VectorStore(Protocol):
    """Named collections of (vector, text, metadata) records with cosine search.

    Every method raises StoreError on backend failure, except that
    `ensure_collection` raises ConfigurationError on a dimensionality mismatch.
    """

    def collection_exists(self, name: str) -> bool:
        ...

    def list_collections(self) -> list[str]:
        ...

    def ensure_collection(
        self, name: str, dimensions: int, distance: str = "cosine"
    ) -> None:
        ...

    def upsert(self, name: str, records: Sequence[VectorRecord]) -> int:
        ...

    def search(
        self,
        name: str,
        query: list[float] | KeywordQuery,
        limit: int,
        min_score: float | None = None,
    ) -> list[SearchHit]:
        ...

    def reset(self, name: str, dimensions: int | None = None) -> None:
        ...

    def stats(self, name: str) -> CollectionStats:
        ...
