"""Pytest configuration and shared fixtures for the test suite."""

import hashlib
import json
import math
import re
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import chromadb
import pytest
import requests

from docchat.config import Settings
from docchat.service.context import AppContext
from docchat.service.database import ChromaVectorStore, VectorRecord

TEST_DIMENSIONS = 64
TEST_COLLECTION = "test-collection"
TEST_EMBEDDING_MODEL = "hashing-test"


# Service availability checks
def ollama_available() -> bool:
    """Check if Ollama server is running and accessible.

    Returns:
        True if Ollama is available, False otherwise
    """
    try:
        response = requests.get("http://localhost:11434/api/tags", timeout=2)
        return response.status_code == 200
    except requests.RequestException:
        return False


class HashingEmbedder:
    """Deterministic bag-of-words embedder for tests.

    Each lowercase word is hashed into one of `dimensions` buckets, so texts
    sharing words have positive cosine similarity and identical texts score 1.
    """

    def __init__(self, dimensions: int = TEST_DIMENSIONS, model: str = TEST_EMBEDDING_MODEL):
        self.dimensions = dimensions
        self.model = model

    def vector(self, text: str) -> list[float]:
        vector = [0.0] * self.dimensions
        for word in re.findall(r"\w+", text.lower()):
            bucket = int(hashlib.md5(word.encode("utf-8")).hexdigest(), 16) % self.dimensions
            vector[bucket] += 1.0
        norm = math.sqrt(sum(v * v for v in vector))
        if norm == 0:
            vector[0] = 1.0
            return vector
        return [v / norm for v in vector]

    async def embed(self, text: str) -> list[float]:
        return self.vector(text)

    async def is_available(self) -> bool:
        return True


def unit_vector(axis: int, dimensions: int = TEST_DIMENSIONS) -> list[float]:
    """Return the unit vector along `axis`."""
    vector = [0.0] * dimensions
    vector[axis] = 1.0
    return vector


# Service fixtures with skip markers
@pytest.fixture
def ollama_service():
    """Provide OllamaService instance, skip if Ollama not available."""
    if not ollama_available():
        pytest.skip("Ollama server not running on localhost:11434")

    from docchat.llm import OllamaService

    return OllamaService(host="http://localhost:11434", model="mistral")


STUB_DIMENSIONS = 4
STUB_REPLY = "Die Frist beträgt drei Monate (Quelle: vertrag.txt, Seite 1)."


class OllamaStubHandler(BaseHTTPRequestHandler):
    """Answers the subset of the Ollama REST API docchat uses.

    Speaks HTTP/1.1 so clients keep their connections open between requests,
    like the real daemon.
    """

    protocol_version = "HTTP/1.1"

    def _send_json(self, payload: dict) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _read_json(self) -> dict:
        length = int(self.headers.get("Content-Length", 0))
        return json.loads(self.rfile.read(length) or b"{}")

    def do_GET(self):
        self.server.requests.append(self.path)
        if self.path == "/api/tags":
            self._send_json({"models": [{"model": "mistral:latest", "name": "mistral:latest"}]})
        else:
            self.send_error(404)

    def do_POST(self):
        self.server.requests.append(self.path)
        payload = self._read_json()
        if self.path == "/api/embed":
            texts = payload.get("input")
            count = len(texts) if isinstance(texts, list) else 1
            vector = [1.0] + [0.0] * (STUB_DIMENSIONS - 1)
            self._send_json({"model": payload.get("model"), "embeddings": [vector] * count})
        elif self.path == "/api/chat":
            self._send_json(
                {
                    "model": payload.get("model"),
                    "created_at": "2024-01-01T00:00:00Z",
                    "message": {"role": "assistant", "content": STUB_REPLY},
                    "done": True,
                }
            )
        else:
            self.send_error(404)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def ollama_stub():
    """Run a local Ollama stand-in on a free port.

    Yields the server; `server.url` is its base URL and `server.requests`
    lists the request paths it has answered.
    """
    server = ThreadingHTTPServer(("127.0.0.1", 0), OllamaStubHandler)
    server.daemon_threads = True
    server.requests = []
    server.url = f"http://127.0.0.1:{server.server_address[1]}"
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


@pytest.fixture
def embedder() -> HashingEmbedder:
    """Provide a deterministic embedder."""
    return HashingEmbedder()


@pytest.fixture
def chroma_client(tmp_path):
    """Provide an embedded Chroma client isolated in a temporary directory."""
    return chromadb.PersistentClient(path=str(tmp_path / "chroma"))


@pytest.fixture
def vector_store(chroma_client) -> ChromaVectorStore:
    """Provide a Chroma vector store using the test dimensionality."""
    return ChromaVectorStore(
        chroma_client, dimensions=TEST_DIMENSIONS, embedding_model=TEST_EMBEDDING_MODEL
    )


@pytest.fixture
def fake_llm():
    """Provide a mock LLM service with async methods."""
    llm = MagicMock()
    llm.model = "test-model"
    llm.generate_response = AsyncMock(return_value="Keine Angaben.")
    llm.generate_embeddings = AsyncMock(return_value=[[1.0] + [0.0] * (TEST_DIMENSIONS - 1)])
    llm.list_models = AsyncMock(return_value=["mistral:latest", "nomic-embed-text:latest"])
    return llm


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Provide settings pointing at temporary directories."""
    return Settings(
        documents_dir=tmp_path / "documents",
        chroma_path=str(tmp_path / "chroma"),
        collection_name=TEST_COLLECTION,
        embedding_model=TEST_EMBEDDING_MODEL,
        embedding_dimensions=TEST_DIMENSIONS,
    )


@pytest.fixture
def app_context(settings, fake_llm, vector_store, embedder) -> AppContext:
    """Provide an application context wired to test doubles and a real store."""
    return AppContext(
        settings=settings,
        llm_service=fake_llm,
        store=vector_store,
        embedder=embedder,
    )


@pytest.fixture
def documents_dir(tmp_path) -> Path:
    """Provide an empty documents directory."""
    path = tmp_path / "documents"
    path.mkdir()
    return path


# Test data generators
@pytest.fixture
def create_test_record():
    """Factory fixture to create vector records.

    Returns:
        Function that creates a record with custom parameters
    """

    def _create_record(
        record_id: str = "test_record_0",
        content: str = "Test chunk text.",
        document_name: str = "test.txt",
        page_number: int = 1,
        vector: list[float] | None = None,
    ) -> VectorRecord:
        return VectorRecord(
            id=record_id,
            vector=vector if vector is not None else HashingEmbedder().vector(content),
            content=content,
            document_name=document_name,
            page_number=page_number,
            source_path=f"documents/{document_name}",
        )

    return _create_record
