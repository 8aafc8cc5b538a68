"""Indexing pipeline: documents directory -> text -> chunks -> vectors -> store."""

import hashlib
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from docchat.constants import CHUNKS_PER_PDF_PAGE, DISTANCE_METRIC
from docchat.errors import EmbeddingError, ExtractionError, UnsupportedFormatError
from docchat.service.chunking import chunk_text
from docchat.service.database import DocumentChunk, VectorRecord, VectorStore
from docchat.service.embedder import Embedder
from docchat.service.extract import DocumentFormat, extract_text_from_file, is_supported

logger = logging.getLogger(__name__)


class IdPolicy(Enum):
    """How record ids are derived.

    APPEND: ids include the import time, so re-running the indexer adds new
        records next to the old ones unless the collection is reset first.
    CONTENT_HASH: ids hash the document name, chunk index and content, so
        re-running overwrites unchanged chunks in place.
    """

    APPEND = "append"
    CONTENT_HASH = "content-hash"


@dataclass
class IndexReport:
    """Outcome of one indexing run."""

    documents_found: int = 0
    documents_indexed: int = 0
    documents_skipped: int = 0
    documents_failed: int = 0
    chunks_stored: int = 0
    errors: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "documents_found": self.documents_found,
            "documents_indexed": self.documents_indexed,
            "documents_skipped": self.documents_skipped,
            "documents_failed": self.documents_failed,
            "chunks_stored": self.chunks_stored,
            "errors": dict(self.errors),
        }


def estimate_page_number(chunk_index: int, is_pdf: bool) -> int:
    """Estimate the page a chunk came from.

    PDFs are assumed to hold about five chunks per page; other formats have
    no page structure and always report page 1.
    """
    if is_pdf:
        return chunk_index // CHUNKS_PER_PDF_PAGE + 1
    return 1


def make_record_id(policy: IdPolicy, import_ms: int, chunk: DocumentChunk) -> str:
    """Build a record id for a chunk under the given policy."""
    if policy is IdPolicy.CONTENT_HASH:
        digest = hashlib.sha1()
        digest.update(chunk.document_name.encode("utf-8"))
        digest.update(b"\0")
        digest.update(str(chunk.chunk_index).encode("ascii"))
        digest.update(b"\0")
        digest.update(chunk.content.encode("utf-8"))
        return digest.hexdigest()
    return f"{import_ms}_{chunk.document_name}_{chunk.chunk_index}"


def list_documents(directory: Path) -> list[Path]:
    """List supported files directly inside `directory` (non-recursive), sorted by name."""
    return sorted(p for p in directory.iterdir() if p.is_file() and is_supported(p))


class IndexingPipeline:
    """Indexes a directory of documents into a vector store collection.

    Documents are processed one at a time and each chunk is embedded with its
    own call. A failure in one document is logged and the run continues;
    vector store failures abort the run.
    """

    def __init__(
        self,
        store: VectorStore,
        embedder: Embedder,
        collection: str,
        chunk_size: int,
        chunk_overlap: int,
        id_policy: IdPolicy = IdPolicy.APPEND,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.collection = collection
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.id_policy = id_policy

    async def index(self, directory: Path, reset: bool = False) -> IndexReport:
        """Index every supported document in `directory`.

        Args:
            directory: Folder to scan (created if missing)
            reset: Delete and recreate the collection before indexing

        Returns:
            IndexReport: Counts of found, indexed, skipped and failed documents

        Raises:
            StoreError: If the vector store cannot be reached
            ConfigurationError: If the collection's dimensionality does not
                match the embedder
        """
        report = IndexReport()
        logger.info(f"📚 Starting document indexing in {directory}")

        if not directory.exists():
            logger.info(f"Creating directory: {directory}")
            directory.mkdir(parents=True, exist_ok=True)

        if reset:
            self.store.reset(self.collection, self.embedder.dimensions)
        else:
            self.store.ensure_collection(
                self.collection, self.embedder.dimensions, DISTANCE_METRIC
            )

        paths = list_documents(directory)
        report.documents_found = len(paths)
        if not paths:
            logger.warning(f"⚠️ No documents found in {directory}")
            return report

        logger.info(f"Found {len(paths)} documents to index")
        import_ms = int(time.time() * 1000)

        for path in paths:
            logger.info(f"📄 Processing document: {path.name}")
            try:
                stored = await self.index_document(path, import_ms)
            except (UnsupportedFormatError, ExtractionError, EmbeddingError) as e:
                logger.error(f"❌ Error processing {path.name}: {e}", exc_info=True)
                report.documents_failed += 1
                report.errors[path.name] = str(e)
                continue

            if stored == 0:
                report.documents_skipped += 1
            else:
                report.documents_indexed += 1
                report.chunks_stored += stored

        logger.info(
            f"✅ Indexing complete: {report.documents_indexed} indexed, "
            f"{report.documents_skipped} skipped, {report.documents_failed} failed, "
            f"{report.chunks_stored} chunks stored"
        )
        return report

    async def index_document(self, path: Path, import_ms: int) -> int:
        """Extract, chunk, embed and store one document.

        Args:
            path: Document to index
            import_ms: Import timestamp (milliseconds) shared by the run

        Returns:
            int: Number of records stored; 0 if the document had no text
        """
        is_pdf = DocumentFormat.from_path(path) is DocumentFormat.PDF
        text = extract_text_from_file(path)

        if not text.strip():
            logger.warning(f"⚠️ No text extracted from document: {path.name}")
            return 0
        logger.info(f"  Extracted {len(text)} characters")

        pieces = chunk_text(text, self.chunk_size, self.chunk_overlap)
        logger.info(f"  Split into {len(pieces)} chunks")

        chunks = [
            DocumentChunk(
                content=content,
                document_name=path.name,
                source_path=str(path),
                chunk_index=i,
                estimated_page_number=estimate_page_number(i, is_pdf),
            )
            for i, content in enumerate(pieces)
        ]

        records = []
        for chunk in chunks:
            vector = await self.embedder.embed(chunk.content)
            records.append(
                VectorRecord(
                    id=make_record_id(self.id_policy, import_ms, chunk),
                    vector=vector,
                    content=chunk.content,
                    document_name=chunk.document_name,
                    page_number=chunk.estimated_page_number,
                    source_path=chunk.source_path,
                )
            )

        stored = self.store.upsert(self.collection, records)
        logger.info(f"  ✓ Indexed {stored} chunks from {path.name}")
        return stored
