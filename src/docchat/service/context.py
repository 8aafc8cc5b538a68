"""Explicitly constructed shared state for the indexing and query pipelines."""

import logging
from dataclasses import dataclass

from docchat.config import Settings
from docchat.constants import DISTANCE_METRIC
from docchat.llm import LLMService, get_llm_service
from docchat.service.chat import ChatService
from docchat.service.database import ChromaVectorStore, VectorStore, create_chroma_client
from docchat.service.embedder import Embedder, OllamaEmbedder
from docchat.service.indexer import IdPolicy, IndexingPipeline
from docchat.service.retrieval import ContextBuilder
from docchat.service.synthesis import AnswerSynthesizer

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Long-lived clients shared by every request for the process lifetime.

    Build it once at startup with `from_settings`, call `init()`, and pass it
    to whatever needs the pipelines. There is no teardown.

    Attributes:
        settings: Runtime settings
        llm_service: Chat/embedding backend
        store: Vector store
        embedder: Embedder used for indexing and semantic search
        semantic_search: False when queries must use keyword matching
    """

    settings: Settings
    llm_service: LLMService
    store: VectorStore
    embedder: Embedder
    semantic_search: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        """Create backend clients for `settings` without contacting them."""
        llm_service = get_llm_service(
            {"host": settings.ollama_host, "model": settings.ollama_model}
        )
        client = create_chroma_client(url=settings.chroma_url, path=settings.chroma_path)
        store = ChromaVectorStore(
            client,
            dimensions=settings.embedding_dimensions,
            embedding_model=settings.embedding_model,
        )
        embedder = OllamaEmbedder(
            llm_service, settings.embedding_model, settings.embedding_dimensions
        )
        return cls(
            settings=settings,
            llm_service=llm_service,
            store=store,
            embedder=embedder,
            semantic_search=settings.semantic_search,
        )

    async def init(self) -> None:
        """Ensure the collection exists and check the embedding model.

        If the embedding model cannot be reached, queries fall back to
        keyword search.

        Raises:
            StoreError: If the vector store is unreachable
            ConfigurationError: If the collection dimensionality does not
                match the configured embedding model
        """
        logger.info("🔧 Initializing services...")
        self.store.ensure_collection(
            self.settings.collection_name,
            self.settings.embedding_dimensions,
            DISTANCE_METRIC,
        )

        if self.semantic_search:
            self.semantic_search = await self.embedder.is_available()
        if not self.semantic_search:
            logger.warning("⚠️ Semantic search disabled; queries use keyword matching")

        logger.info("✅ Services initialized")

    def context_builder(self) -> ContextBuilder:
        return ContextBuilder(
            store=self.store,
            collection=self.settings.collection_name,
            embedder=self.embedder if self.semantic_search else None,
            limit=self.settings.search_limit,
            min_score=self.settings.min_score,
            max_tokens=self.settings.max_context_tokens,
            max_tokens_per_result=self.settings.max_tokens_per_result,
        )

    def synthesizer(self) -> AnswerSynthesizer:
        return AnswerSynthesizer(
            self.llm_service,
            system_prompt=self.settings.system_prompt,
            temperature=self.settings.temperature,
            max_tokens=self.settings.max_tokens,
        )

    def chat_service(self) -> ChatService:
        return ChatService(self.context_builder(), self.synthesizer())

    def indexing_pipeline(self, id_policy: str | None = None) -> IndexingPipeline:
        return IndexingPipeline(
            store=self.store,
            embedder=self.embedder,
            collection=self.settings.collection_name,
            chunk_size=self.settings.chunk_size,
            chunk_overlap=self.settings.chunk_overlap,
            id_policy=IdPolicy(id_policy or self.settings.id_policy),
        )
