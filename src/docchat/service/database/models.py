"""Data models for vector store records and query results."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DocumentChunk:
    """A contiguous span of extracted text from one source document.

    Attributes:
        content: Chunk text
        document_name: Original document filename
        source_path: Path of the document at import time
        chunk_index: Position of this chunk in the document (0-based)
        estimated_page_number: Page estimate (1-based)
    """

    content: str
    document_name: str
    source_path: str
    chunk_index: int
    estimated_page_number: int = 1


@dataclass(frozen=True)
class VectorRecord:
    """A persisted unit in the vector store.

    Attributes:
        id: Unique id within the collection; writing an existing id replaces it
        vector: Unit-length embedding
        content: Text the embedding was computed from
        document_name: Original document filename
        page_number: Page the content was found on (estimated)
        source_path: Path of the document at import time, if known
        created_at: Time the record was built
    """

    id: str
    vector: list[float]
    content: str
    document_name: str
    page_number: int = 1
    source_path: str | None = None
    created_at: datetime = field(default_factory=_utcnow)

    def payload(self) -> dict:
        """Metadata stored alongside the vector."""
        metadata = {
            "document_name": self.document_name,
            "page_number": self.page_number,
            "created_at": self.created_at.isoformat(),
        }
        # Chroma metadata values cannot be None
        if self.source_path is not None:
            metadata["source_path"] = self.source_path
        return metadata


@dataclass(frozen=True)
class KeywordQuery:
    """Whitespace-delimited tokens matched with boolean OR (degraded search mode)."""

    tokens: tuple[str, ...]

    @classmethod
    def from_text(cls, text: str) -> "KeywordQuery":
        return cls(tuple(text.split()))


@dataclass(frozen=True)
class SearchHit:
    """One search result.

    `score` is cosine similarity in semantic mode and None in keyword mode,
    where results are not ranked by relevance.
    """

    id: str
    content: str
    document_name: str
    page_number: int
    score: float | None = None
    source_path: str | None = None


@dataclass(frozen=True)
class CollectionStats:
    """Existence, size and dimensionality of a collection."""

    name: str
    exists: bool
    count: int = 0
    dimensions: int | None = None
    embedding_model: str | None = None

    def to_dict(self) -> dict:
        return {
            "collection": self.name,
            "exists": self.exists,
            "count": self.count,
            "dimensions": self.dimensions,
            "model": self.embedding_model,
        }
