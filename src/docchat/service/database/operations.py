"""Vector store operations on Chroma - collections, upserts and search."""

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from chromadb.api import ClientAPI
from chromadb.api.models.Collection import Collection

from docchat.constants import (
    DEFAULT_EMBEDDING_DIMENSIONS,
    DEFAULT_MIN_SCORE,
    DISTANCE_METRIC,
    UNKNOWN_DOCUMENT,
    UPSERT_BATCH_SIZE,
)
from docchat.errors import ConfigurationError, DocChatError, StoreError
from docchat.service.database.models import (
    CollectionStats,
    KeywordQuery,
    SearchHit,
    VectorRecord,
)
from docchat.service.database.utils import batched

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    """Wrap backend exceptions in StoreError, keeping our own errors as-is."""
    try:
        yield
    except DocChatError:
        raise
    except Exception as e:
        logger.error(f"❌ Vector store error while {action}: {e}")
        raise StoreError(f"Vector store error while {action}: {e}", e) from e


def _to_hit(
    record_id: str, document: str | None, metadata: dict | None, score: float | None
) -> SearchHit:
    metadata = metadata or {}
    return SearchHit(
        id=record_id,
        content=document or "",
        document_name=metadata.get("document_name") or UNKNOWN_DOCUMENT,
        page_number=int(metadata.get("page_number") or 1),
        score=score,
        source_path=metadata.get("source_path"),
    )


def _collection_space(collection: Collection) -> str | None:
    """Return the distance metric of a collection, or None if it cannot be told."""
    metadata = collection.metadata or {}
    if metadata.get("distance"):
        return metadata["distance"]
    if metadata.get("hnsw:space"):
        return metadata["hnsw:space"]
    configuration = getattr(collection, "configuration", None)
    if isinstance(configuration, dict):
        return (configuration.get("hnsw") or {}).get("space")
    return None


class ChromaVectorStore:
    """VectorStore implementation backed by a Chroma client.

    Each collection records its dimensionality and embedding model in its
    metadata so a later `ensure_collection` can detect a model change.
    """

    def __init__(
        self,
        client: ClientAPI,
        dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS,
        embedding_model: str | None = None,
        batch_size: int = UPSERT_BATCH_SIZE,
    ) -> None:
        """Initialize the store.

        Args:
            client: Chroma client (HTTP or embedded)
            dimensions: Dimensionality used when `reset` recreates a collection
            embedding_model: Model name recorded in new collections' metadata
            batch_size: Maximum records per upsert call (capped at 100)
        """
        self.client = client
        self.dimensions = dimensions
        self.embedding_model = embedding_model
        self.batch_size = min(batch_size, UPSERT_BATCH_SIZE)

    def _collection(self, name: str) -> Collection:
        return self.client.get_collection(name=name, embedding_function=None)

    def list_collections(self) -> list[str]:
        """Return the names of all collections on the backend."""
        with _store_errors("listing collections"):
            return [collection.name for collection in self.client.list_collections()]

    def collection_exists(self, name: str) -> bool:
        """Check whether a collection exists."""
        return name in self.list_collections()

    def ensure_collection(
        self, name: str, dimensions: int, distance: str = DISTANCE_METRIC
    ) -> None:
        """Create the collection if it does not exist yet.

        An existing collection must record the same dimensionality and use the
        same distance metric; collections created outside docchat, which lack
        the `dimensions` entry, are rejected.

        Args:
            name: Collection name
            dimensions: Vector dimensionality of the collection
            distance: Distance metric (only "cosine" is used by docchat)

        Raises:
            ConfigurationError: If the collection exists with another
                dimensionality or distance metric, or without a recorded
                dimensionality
            StoreError: If the backend call fails
        """
        with _store_errors(f"ensuring collection '{name}'"):
            if self.collection_exists(name):
                collection = self._collection(name)
                existing = (collection.metadata or {}).get("dimensions")
                if existing is None:
                    raise ConfigurationError(
                        f"Collection '{name}' does not record its dimensionality; "
                        "it was not created by docchat, reset it or pick another COLLECTION_NAME"
                    )
                if int(existing) != dimensions:
                    raise ConfigurationError(
                        f"Collection '{name}' has {existing} dimensions, "
                        f"requested {dimensions}; reset the collection to change models"
                    )
                space = _collection_space(collection)
                if space is not None and space != distance:
                    raise ConfigurationError(
                        f"Collection '{name}' uses {space} distance, requested {distance}; "
                        "reset the collection"
                    )
                logger.info(f"Collection {name} already exists")
                return

            logger.info(f"📁 Creating collection: {name} ({dimensions} dims, {distance})")
            metadata: dict[str, Any] = {"dimensions": dimensions, "distance": distance}
            if self.embedding_model:
                metadata["embedding_model"] = self.embedding_model
            self.client.create_collection(
                name=name,
                metadata=metadata,
                configuration={"hnsw": {"space": distance}},
                embedding_function=None,
            )
            logger.info(f"✅ Collection {name} created")

    def upsert(self, name: str, records: Sequence[VectorRecord]) -> int:
        """Write records in batches of at most `batch_size`.

        Existing records with the same id are overwritten.

        Args:
            name: Collection name
            records: Records to write

        Returns:
            int: Number of records written
        """
        if not records:
            return 0

        with _store_errors(f"upserting into '{name}'"):
            collection = self._collection(name)
            stored = 0
            for batch in batched(records, self.batch_size):
                collection.upsert(
                    ids=[r.id for r in batch],
                    embeddings=[r.vector for r in batch],
                    documents=[r.content for r in batch],
                    metadatas=[r.payload() for r in batch],
                )
                stored += len(batch)
                logger.info(f"💾 Stored batch of {len(batch)} ({stored}/{len(records)})")
            return stored

    def search(
        self,
        name: str,
        query: list[float] | KeywordQuery,
        limit: int,
        min_score: float | None = None,
    ) -> list[SearchHit]:
        """Search a collection.

        Semantic mode (query is a vector) ranks by cosine similarity and drops
        hits scoring below `min_score` (default 0.2). Keyword mode (query is a
        KeywordQuery) returns records containing any token, unranked and
        without a score.

        Args:
            name: Collection name
            query: Query vector or keyword set
            limit: Maximum number of hits
            min_score: Similarity threshold for semantic mode

        Returns:
            list[SearchHit]: Hits, best first in semantic mode
        """
        if isinstance(query, KeywordQuery):
            return self._keyword_search(name, query, limit)
        return self._semantic_search(name, query, limit, min_score)

    def _semantic_search(
        self, name: str, vector: list[float], limit: int, min_score: float | None
    ) -> list[SearchHit]:
        threshold = DEFAULT_MIN_SCORE if min_score is None else min_score

        with _store_errors(f"searching '{name}'"):
            collection = self._collection(name)
            count = collection.count()
            if count == 0:
                return []
            result = collection.query(
                query_embeddings=[vector],
                n_results=min(limit, count),
                include=["documents", "metadatas", "distances"],
            )

        hits = []
        for record_id, document, metadata, distance in zip(
            result["ids"][0],
            result["documents"][0],
            result["metadatas"][0],
            result["distances"][0],
        ):
            # Chroma cosine distance is 1 - similarity
            score = 1.0 - float(distance)
            if score >= threshold:
                hits.append(_to_hit(record_id, document, metadata, score))

        logger.info(f"🔍 Semantic search returned {len(hits)} results")
        return hits

    def _keyword_search(self, name: str, query: KeywordQuery, limit: int) -> list[SearchHit]:
        if not query.tokens:
            logger.warning("⚠️ No keywords in query")
            return []

        if len(query.tokens) == 1:
            where_document: dict[str, Any] = {"$contains": query.tokens[0]}
        else:
            where_document = {"$or": [{"$contains": token} for token in query.tokens]}

        with _store_errors(f"keyword search in '{name}'"):
            result = self._collection(name).get(
                where_document=where_document,
                limit=limit,
                include=["documents", "metadatas"],
            )

        hits = [
            _to_hit(record_id, document, metadata, None)
            for record_id, document, metadata in zip(
                result["ids"], result["documents"], result["metadatas"]
            )
        ]
        logger.info(f"🔍 Keyword search returned {len(hits)} results")
        return hits

    def reset(self, name: str, dimensions: int | None = None) -> None:
        """Delete the collection and recreate it empty.

        WARNING: This removes every record in the collection.

        Args:
            name: Collection name
            dimensions: Dimensionality of the new collection (default: the
                store's configured dimensionality)
        """
        with _store_errors(f"resetting '{name}'"):
            if self.collection_exists(name):
                self.client.delete_collection(name=name)
                logger.info(f"🗑️  Collection {name} deleted")
        self.ensure_collection(name, dimensions or self.dimensions)

    def stats(self, name: str) -> CollectionStats:
        """Return existence, record count and dimensionality of a collection."""
        with _store_errors(f"reading stats of '{name}'"):
            if not self.collection_exists(name):
                return CollectionStats(name=name, exists=False)

            collection = self._collection(name)
            metadata = collection.metadata or {}
            dimensions = metadata.get("dimensions")
            return CollectionStats(
                name=name,
                exists=True,
                count=collection.count(),
                dimensions=int(dimensions) if dimensions is not None else None,
                embedding_model=metadata.get("embedding_model"),
            )
