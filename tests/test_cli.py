"""Tests for the CLI module."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from conftest import TEST_COLLECTION, TEST_DIMENSIONS
from docchat.client.cli import ask, index, reset, search, stats
from docchat.client.cli_helpers import format_report, format_search_result, load_app_context
from docchat.errors import ConfigurationError, StoreError
from docchat.service.database import SearchHit
from docchat.service.indexer import IndexReport

CONTRACT_TEXT = (
    "Der Mietvertrag beginnt am ersten Januar. "
    "Die Kündigungsfrist beträgt drei Monate."
)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def patched_context(app_context):
    """Make every CLI command use the test application context."""
    with patch("docchat.client.cli.load_app_context", return_value=app_context):
        yield app_context


class TestIndexCLI:
    """Tests for the index command."""

    def test_index_directory(self, runner, patched_context, documents_dir):
        (documents_dir / "vertrag.txt").write_text(CONTRACT_TEXT, encoding="utf-8")

        result = runner.invoke(index, [str(documents_dir)])

        assert result.exit_code == 0
        assert "Documents indexed: 1" in result.output
        assert "Chunks stored:     1" in result.output
        assert patched_context.store.stats(TEST_COLLECTION).count == 1

    def test_index_defaults_to_documents_dir(self, runner, patched_context):
        documents_dir = patched_context.settings.documents_dir
        documents_dir.mkdir()
        (documents_dir / "notiz.md").write_text("Eine Notiz.")

        result = runner.invoke(index, [])

        assert result.exit_code == 0
        assert "Documents indexed: 1" in result.output

    def test_index_empty_directory(self, runner, patched_context, documents_dir):
        result = runner.invoke(index, [str(documents_dir)])

        assert result.exit_code == 0
        assert "No supported documents found" in result.output

    def test_index_reports_failures(self, runner, patched_context, documents_dir):
        (documents_dir / "kaputt.pdf").write_bytes(b"not a pdf")

        result = runner.invoke(index, [str(documents_dir)])

        assert result.exit_code == 0
        assert "Documents failed:  1" in result.output
        assert "kaputt.pdf" in result.output

    def test_index_reset_and_id_policy(self, runner, patched_context, documents_dir):
        (documents_dir / "vertrag.txt").write_text(CONTRACT_TEXT, encoding="utf-8")

        for _ in range(2):
            result = runner.invoke(index, [str(documents_dir), "--id-policy", "content-hash"])
            assert result.exit_code == 0
        assert patched_context.store.stats(TEST_COLLECTION).count == 1

        result = runner.invoke(index, [str(documents_dir), "--reset"])
        assert result.exit_code == 0
        assert patched_context.store.stats(TEST_COLLECTION).count == 1

    def test_index_invalid_id_policy(self, runner, patched_context, documents_dir):
        result = runner.invoke(index, [str(documents_dir), "--id-policy", "random"])

        assert result.exit_code != 0

    def test_index_store_unreachable(self, runner, patched_context, documents_dir):
        patched_context.store = MagicMock()
        patched_context.store.reset.side_effect = StoreError("connection refused")
        patched_context.store.ensure_collection.side_effect = StoreError("connection refused")

        result = runner.invoke(index, [str(documents_dir)])

        assert result.exit_code == 1
        assert "Indexing aborted" in result.output

    def test_index_configuration_error(self, runner, documents_dir):
        with patch(
            "docchat.client.cli.load_app_context",
            side_effect=ConfigurationError("CHUNK_SIZE must be an integer"),
        ):
            result = runner.invoke(index, [str(documents_dir)])

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_index_passes_overrides(self, runner, app_context, documents_dir):
        with patch("docchat.client.cli.load_app_context", return_value=app_context) as mock_load:
            runner.invoke(
                index,
                [str(documents_dir), "--collection", "other", "--embedding-model", "m"],
            )

        mock_load.assert_called_once_with(collection="other", embedding_model="m")


class TestSearchCLI:
    """Tests for the search command."""

    @pytest.fixture
    def indexed(self, runner, patched_context, documents_dir):
        (documents_dir / "vertrag.txt").write_text(CONTRACT_TEXT, encoding="utf-8")
        patched_context.settings.chunk_size = 45
        patched_context.settings.chunk_overlap = 0
        runner.invoke(index, [str(documents_dir)])
        return patched_context

    def test_semantic_search(self, runner, indexed):
        result = runner.invoke(search, ["Die Kündigungsfrist beträgt drei Monate."])

        assert result.exit_code == 0
        assert "semantic mode" in result.output
        assert "1. [vertrag.txt - page 1]" in result.output
        assert "Kündigungsfrist" in result.output

    def test_keyword_search(self, runner, indexed):
        result = runner.invoke(search, ["Mietvertrag", "--keyword", "--limit", "5"])

        assert result.exit_code == 0
        assert "Found 1 result(s)" in result.output
        assert "score: n/a" in result.output

    def test_no_results(self, runner, indexed):
        result = runner.invoke(search, ["Haustiere", "--keyword"])

        assert result.exit_code == 0
        assert "No results found." in result.output

    def test_missing_collection(self, runner, patched_context):
        result = runner.invoke(search, ["Frage"])

        assert result.exit_code == 0
        assert "does not exist" in result.output

    def test_search_store_failure(self, runner, patched_context):
        patched_context.store = MagicMock()
        patched_context.store.collection_exists.side_effect = StoreError("refused")

        result = runner.invoke(search, ["Frage"])

        assert result.exit_code == 1
        assert "Search failed" in result.output


class TestAskCLI:
    """Tests for the ask command."""

    def test_ask_prints_reply_and_sources(self, runner, patched_context):
        patched_context.llm_service.generate_response = AsyncMock(
            return_value="Drei Monate (Quelle: vertrag.txt, Seite 1)."
        )

        result = runner.invoke(ask, ["Welche Kündigungsfrist gilt?"])

        assert result.exit_code == 0
        assert "Drei Monate" in result.output
        assert "Sources:" in result.output
        assert "vertrag.txt, page 1" in result.output
        assert patched_context.store.collection_exists(TEST_COLLECTION)

    def test_ask_without_sources(self, runner, patched_context):
        result = runner.invoke(ask, ["Frage"])

        assert result.exit_code == 0
        assert "Sources:" not in result.output

    def test_ask_llm_failure(self, runner, patched_context):
        patched_context.llm_service.generate_response = AsyncMock(
            side_effect=ConnectionError("refused")
        )

        result = runner.invoke(ask, ["Frage"])

        assert result.exit_code == 1
        assert "did not answer" in result.output


class TestStatsCLI:
    """Tests for the stats command."""

    def test_stats_missing_collection(self, runner, patched_context):
        result = runner.invoke(stats, [])

        assert result.exit_code == 0
        assert "does not exist" in result.output

    def test_stats(self, runner, patched_context):
        patched_context.store.ensure_collection(TEST_COLLECTION, TEST_DIMENSIONS)

        result = runner.invoke(stats, [])

        assert result.exit_code == 0
        assert "Records:    0" in result.output
        assert f"Dimensions: {TEST_DIMENSIONS}" in result.output

    def test_stats_store_failure(self, runner, patched_context):
        patched_context.store = MagicMock()
        patched_context.store.stats.side_effect = StoreError("refused")

        result = runner.invoke(stats, [])

        assert result.exit_code == 1


class TestResetCLI:
    """Tests for the reset command."""

    def test_reset_with_yes(self, runner, patched_context, create_test_record):
        patched_context.store.ensure_collection(TEST_COLLECTION, TEST_DIMENSIONS)
        patched_context.store.upsert(TEST_COLLECTION, [create_test_record()])

        result = runner.invoke(reset, ["--yes"])

        assert result.exit_code == 0
        assert "reset" in result.output
        assert patched_context.store.stats(TEST_COLLECTION).count == 0

    def test_reset_cancelled(self, runner, patched_context, create_test_record):
        patched_context.store.ensure_collection(TEST_COLLECTION, TEST_DIMENSIONS)
        patched_context.store.upsert(TEST_COLLECTION, [create_test_record()])

        result = runner.invoke(reset, [], input="n\n")

        assert result.exit_code == 0
        assert "Reset cancelled." in result.output
        assert patched_context.store.stats(TEST_COLLECTION).count == 1

    def test_reset_confirmed(self, runner, patched_context):
        result = runner.invoke(reset, [], input="y\n")

        assert result.exit_code == 0
        assert patched_context.store.collection_exists(TEST_COLLECTION)


class TestCLIHelpers:
    """Tests for CLI helper functions."""

    def test_format_search_result(self):
        hit = SearchHit(id="1", content="Zeile eins\nZeile zwei", document_name="a.pdf", page_number=3, score=0.87654)

        output = format_search_result(1, hit)

        assert "1. [a.pdf - page 3] (score: 0.8765)" in output
        assert "Zeile eins Zeile zwei" in output

    def test_format_search_result_truncates(self):
        hit = SearchHit(id="1", content="x" * 300, document_name="a.txt", page_number=1)

        output = format_search_result(2, hit, max_length=50)

        assert "score: n/a" in output
        assert "x" * 50 + "..." in output
        assert "x" * 51 not in output

    def test_format_report(self):
        report = IndexReport(
            documents_found=2,
            documents_indexed=1,
            documents_failed=1,
            chunks_stored=4,
            errors={"b.pdf": "corrupt"},
        )

        output = format_report(report)

        assert "Documents found:   2" in output
        assert "Chunks stored:     4" in output
        assert "b.pdf: corrupt" in output

    def test_load_app_context_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CHROMA_PATH", str(tmp_path / "chroma"))
        monkeypatch.setenv("COLLECTION_NAME", "from-env")

        context = load_app_context(collection="override", embedding_model="mxbai-embed-large")

        assert context.settings.collection_name == "override"
        assert context.embedder.model == "mxbai-embed-large"

    def test_load_app_context_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CHROMA_PATH", str(tmp_path / "chroma"))
        monkeypatch.setenv("COLLECTION_NAME", "from-env")

        assert load_app_context().settings.collection_name == "from-env"
