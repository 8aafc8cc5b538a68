"""Tests for retrieval and context assembly."""

from unittest.mock import MagicMock

import pytest

from conftest import TEST_COLLECTION, TEST_DIMENSIONS
from docchat.constants import TRUNCATION_MARKER
from docchat.errors import EmbeddingError, StoreError
from docchat.service.database import SearchHit
from docchat.service.retrieval import (
    ContextBuilder,
    DocumentExcerpt,
    assemble_context,
    estimate_tokens,
    format_excerpt,
)


def _hit(content: str, name: str = "a.txt", page: int = 1, score: float | None = 0.9) -> SearchHit:
    return SearchHit(id=name, content=content, document_name=name, page_number=page, score=score)


class BrokenEmbedder:
    model = "broken"
    dimensions = TEST_DIMENSIONS

    async def embed(self, text: str) -> list[float]:
        raise EmbeddingError("model not loaded")


class TestTokenEstimate:
    """Tests for estimate_tokens and format_excerpt."""

    @pytest.mark.parametrize("text,expected", [("", 0), ("abcd", 1), ("abcde", 2), ("x" * 8000, 2000)])
    def test_estimate_tokens(self, text, expected):
        assert estimate_tokens(text) == expected

    def test_format_excerpt(self):
        excerpt = DocumentExcerpt(content="Inhalt hier", document_name="vertrag.pdf", page_number=2)
        assert format_excerpt(excerpt) == "Dokument: vertrag.pdf\nSeite: 2\nInhalt: Inhalt hier\n\n"

    def test_excerpt_to_dict(self):
        excerpt = DocumentExcerpt("c", "d.txt", 1, 0.5)
        assert excerpt.to_dict() == {
            "content": "c",
            "documentName": "d.txt",
            "pageNumber": 1,
            "score": 0.5,
        }


class TestAssembleContext:
    """Tests for assemble_context."""

    def test_empty_hits(self):
        result = assemble_context([])

        assert result.is_empty
        assert result.context_text == ""
        assert result.token_count == 0

    def test_budget_limits_included_hits(self):
        hits = [_hit("x" * 4000, f"doc{i}.txt") for i in range(15)]

        result = assemble_context(hits, max_tokens=10_000, max_tokens_per_result=2_000)

        assert len(result.documents) == 10
        assert result.token_count == 10_000
        assert [d.document_name for d in result.documents] == [f"doc{i}.txt" for i in range(10)]

    def test_stops_at_first_hit_over_budget(self):
        hits = [_hit("a" * 36_000, "big.txt"), _hit("b" * 8_000, "mid.txt"), _hit("c" * 40, "tiny.txt")]

        result = assemble_context(hits, max_tokens=10_000, max_tokens_per_result=2_000)

        assert [d.document_name for d in result.documents] == ["big.txt"]

    def test_large_excerpt_is_truncated(self):
        result = assemble_context([_hit("y" * 12_000)], max_tokens=10_000, max_tokens_per_result=2_000)

        content = result.documents[0].content
        assert content == "y" * 8_000 + TRUNCATION_MARKER
        assert result.token_count == 3_000

    def test_excerpt_at_cap_is_not_truncated(self):
        result = assemble_context([_hit("z" * 8_000)], max_tokens=10_000, max_tokens_per_result=2_000)

        assert result.documents[0].content == "z" * 8_000

    def test_context_text_concatenates_blocks(self):
        hits = [_hit("Erster.", "a.txt", 1), _hit("Zweiter.", "b.pdf", 4)]

        result = assemble_context(hits)

        assert result.context_text == (
            "Dokument: a.txt\nSeite: 1\nInhalt: Erster.\n\n"
            "Dokument: b.pdf\nSeite: 4\nInhalt: Zweiter.\n\n"
        )

    def test_growing_budget_never_removes_hits(self):
        hits = [_hit("w" * (400 * (i + 1)), f"d{i}.txt") for i in range(8)]

        included = [
            len(assemble_context(hits, max_tokens=budget).documents)
            for budget in (100, 500, 1_000, 3_000, 10_000)
        ]

        assert included == sorted(included)


class TestContextBuilder:
    """Tests for ContextBuilder.build_context."""

    @pytest.mark.asyncio
    async def test_missing_collection_returns_empty(self, vector_store, embedder):
        builder = ContextBuilder(vector_store, "no-such-collection", embedder)

        result = await builder.build_context("Frage")

        assert result.is_empty
        assert result.mode == "semantic"

    @pytest.mark.asyncio
    async def test_store_failure_returns_empty(self, embedder):
        store = MagicMock()
        store.collection_exists.side_effect = StoreError("unreachable")

        result = await ContextBuilder(store, TEST_COLLECTION, embedder).build_context("Frage")

        assert result.is_empty

    @pytest.mark.asyncio
    async def test_embedding_failure_returns_empty(self, vector_store):
        vector_store.ensure_collection(TEST_COLLECTION, TEST_DIMENSIONS)

        result = await ContextBuilder(vector_store, TEST_COLLECTION, BrokenEmbedder()).build_context(
            "Frage"
        )

        assert result.is_empty

    @pytest.mark.asyncio
    async def test_semantic_context(self, vector_store, embedder, create_test_record):
        vector_store.ensure_collection(TEST_COLLECTION, TEST_DIMENSIONS)
        vector_store.upsert(
            TEST_COLLECTION,
            [
                create_test_record("a", "Die Kaution beträgt drei Monatsmieten.", "vertrag.pdf", 2),
                create_test_record("b", "Der Garten wird im Frühling gepflegt.", "garten.txt"),
            ],
        )

        result = await ContextBuilder(vector_store, TEST_COLLECTION, embedder).build_context(
            "Die Kaution beträgt drei Monatsmieten."
        )

        assert result.mode == "semantic"
        assert result.documents[0].document_name == "vertrag.pdf"
        assert result.context_text.startswith(
            "Dokument: vertrag.pdf\nSeite: 2\nInhalt: Die Kaution beträgt drei Monatsmieten.\n\n"
        )

    @pytest.mark.asyncio
    async def test_keyword_mode_without_embedder(self, vector_store, create_test_record):
        vector_store.ensure_collection(TEST_COLLECTION, TEST_DIMENSIONS)
        vector_store.upsert(
            TEST_COLLECTION,
            [
                create_test_record("a", "Die Kaution beträgt drei Monatsmieten."),
                create_test_record("b", "Der Garten wird im Frühling gepflegt."),
            ],
        )
        builder = ContextBuilder(vector_store, TEST_COLLECTION, embedder=None)

        result = await builder.build_context("Kaution")

        assert builder.mode == "keyword"
        assert result.mode == "keyword"
        assert len(result.documents) == 1
        assert result.documents[0].score is None

    @pytest.mark.asyncio
    async def test_limit_is_passed_to_store(self, embedder):
        store = MagicMock()
        store.collection_exists.return_value = True
        store.search.return_value = []
        builder = ContextBuilder(store, TEST_COLLECTION, embedder, limit=3, min_score=0.5)

        result = await builder.build_context("Frage")

        assert result.is_empty
        args = store.search.call_args.args
        assert args[0] == TEST_COLLECTION
        assert args[2:] == (3, 0.5)
