"""Retrieval and context assembly for the answer synthesizer."""

import logging
import math
from dataclasses import dataclass, field

from docchat.constants import (
    CHARS_PER_TOKEN,
    DEFAULT_MIN_SCORE,
    DEFAULT_SEARCH_LIMIT,
    MAX_CONTEXT_TOKENS,
    MAX_TOKENS_PER_RESULT,
    TRUNCATION_MARKER,
)
from docchat.errors import EmbeddingError, StoreError
from docchat.service.database import KeywordQuery, SearchHit, VectorStore
from docchat.service.embedder import Embedder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentExcerpt:
    """A retrieved passage as it appears in the context block."""

    content: str
    document_name: str
    page_number: int
    score: float | None = None

    def to_dict(self) -> dict:
        return {
            "content": self.content,
            "documentName": self.document_name,
            "pageNumber": self.page_number,
            "score": self.score,
        }


@dataclass
class RetrievalResult:
    """Context block plus the excerpts it was built from."""

    context_text: str = ""
    documents: list[DocumentExcerpt] = field(default_factory=list)
    token_count: int = 0
    mode: str = "semantic"

    @property
    def is_empty(self) -> bool:
        return not self.documents


def estimate_tokens(text: str) -> int:
    """Estimate tokens as one per four characters, rounded up."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def format_excerpt(excerpt: DocumentExcerpt) -> str:
    """Render one excerpt as the three-line block used in prompts."""
    return (
        f"Dokument: {excerpt.document_name}\n"
        f"Seite: {excerpt.page_number}\n"
        f"Inhalt: {excerpt.content}\n\n"
    )


def assemble_context(
    hits: list[SearchHit],
    max_tokens: int = MAX_CONTEXT_TOKENS,
    max_tokens_per_result: int = MAX_TOKENS_PER_RESULT,
) -> RetrievalResult:
    """Fit hits into the token budget, keeping the store's order.

    Accumulation stops at the first hit that would push the running estimate
    past `max_tokens`; later hits are dropped. A hit whose own estimate
    exceeds `max_tokens_per_result` is cut to that many tokens' worth of
    characters and marked as truncated. The budget is charged with the
    estimate of the untruncated content.

    Args:
        hits: Search hits in ranking order
        max_tokens: Budget for the whole context block
        max_tokens_per_result: Cap for a single excerpt

    Returns:
        RetrievalResult: Rendered context and included excerpts
    """
    result = RetrievalResult()
    blocks = []

    for hit in hits:
        content = hit.content or ""
        estimated = estimate_tokens(content)

        if result.token_count + estimated > max_tokens:
            logger.warning("⚠️ Token budget reached, skipping remaining documents")
            break

        if estimated > max_tokens_per_result:
            content = content[: max_tokens_per_result * CHARS_PER_TOKEN] + TRUNCATION_MARKER
            logger.warning(f"⚠️ Truncated large excerpt from {hit.document_name}")

        excerpt = DocumentExcerpt(
            content=content,
            document_name=hit.document_name,
            page_number=hit.page_number,
            score=hit.score,
        )
        blocks.append(format_excerpt(excerpt))
        result.documents.append(excerpt)
        result.token_count += estimated

    result.context_text = "".join(blocks)
    return result


class ContextBuilder:
    """Builds the context block for a query.

    Uses semantic search when an embedder is available. Without one it falls
    back to keyword matching, which is a degraded mode: results are unranked
    and carry no score.
    """

    def __init__(
        self,
        store: VectorStore,
        collection: str,
        embedder: Embedder | None = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
        min_score: float = DEFAULT_MIN_SCORE,
        max_tokens: int = MAX_CONTEXT_TOKENS,
        max_tokens_per_result: int = MAX_TOKENS_PER_RESULT,
    ) -> None:
        self.store = store
        self.collection = collection
        self.embedder = embedder
        self.limit = limit
        self.min_score = min_score
        self.max_tokens = max_tokens
        self.max_tokens_per_result = max_tokens_per_result

    @property
    def mode(self) -> str:
        return "semantic" if self.embedder is not None else "keyword"

    async def build_context(self, query: str) -> RetrievalResult:
        """Retrieve passages for `query` and render them into a context block.

        Never raises for a missing collection or a backend failure; both yield
        an empty result so the caller can answer without documents.

        Args:
            query: User question

        Returns:
            RetrievalResult: Context text and excerpts, empty if nothing was found
        """
        logger.debug(f"Searching relevant documents for: '{query[:100]}'")

        try:
            if not self.store.collection_exists(self.collection):
                logger.warning(
                    f"⚠️ Collection {self.collection} does not exist. Index documents first."
                )
                return RetrievalResult(mode=self.mode)
            hits = await self._search(query)
        except (StoreError, EmbeddingError) as e:
            logger.error(f"❌ Document search failed: {e}")
            return RetrievalResult(mode=self.mode)

        if not hits:
            logger.info("No relevant documents found in the vector store")
            return RetrievalResult(mode=self.mode)

        result = assemble_context(hits, self.max_tokens, self.max_tokens_per_result)
        result.mode = self.mode
        logger.info(f"📑 {len(result.documents)} relevant passages found ({self.mode} search)")
        logger.debug(f"Estimated token count: {result.token_count}")
        return result

    async def _search(self, query: str) -> list[SearchHit]:
        if self.embedder is None:
            logger.warning("⚠️ No embedding model available, using keyword search (degraded)")
            return self.store.search(
                self.collection, KeywordQuery.from_text(query), self.limit
            )

        vector = await self.embedder.embed(query)
        return self.store.search(self.collection, vector, self.limit, self.min_score)
