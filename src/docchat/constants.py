"""Application-wide constants and defaults for docchat.

This module provides a single source of truth for configuration defaults,
magic numbers, and other constants used throughout the application.
"""

# =============================================================================
# Chunking
# =============================================================================
DEFAULT_CHUNK_SIZE = 500  # Characters per chunk (soft bound)
DEFAULT_CHUNK_OVERLAP = 50  # Characters carried over into the next chunk
CHUNKS_PER_PDF_PAGE = 5  # Used to estimate page numbers for PDF chunks

# =============================================================================
# Vector Store
# =============================================================================
UPSERT_BATCH_SIZE = 100  # Hard ceiling of records per upsert call
DEFAULT_COLLECTION = "knowledge-collection"
DISTANCE_METRIC = "cosine"

# =============================================================================
# Retrieval
# =============================================================================
DEFAULT_SEARCH_LIMIT = 10
DEFAULT_MIN_SCORE = 0.2
MAX_CONTEXT_TOKENS = 10_000  # Token budget for the whole context block
MAX_TOKENS_PER_RESULT = 2_000  # Larger results are truncated
CHARS_PER_TOKEN = 4  # Rough estimate used for token budgeting
TRUNCATION_MARKER = "... [Dokument gekürzt wegen Größe]"
UNKNOWN_DOCUMENT = "Unbekanntes Dokument"

# =============================================================================
# Display Settings
# =============================================================================
CONTENT_PREVIEW_LENGTH = 200  # Characters to show in content previews

# =============================================================================
# Default URLs and Hosts
# =============================================================================
DEFAULT_OLLAMA_HOST = "http://localhost:11434"
DEFAULT_CHROMA_URL = "http://localhost:8000"
DEFAULT_DOCUMENTS_DIR = "./documents"

# =============================================================================
# Model Defaults
# =============================================================================
DEFAULT_CHAT_MODEL = "mistral"
DEFAULT_EMBEDDING_MODEL = "nomic-embed-text"
DEFAULT_EMBEDDING_DIMENSIONS = 768
DEFAULT_TEMPERATURE = 0.1
DEFAULT_MAX_TOKENS = 4000

# =============================================================================
# Prompts
# =============================================================================
CITATION_FORMAT = "(Quelle: {document}, Seite {page})"
GENERAL_KNOWLEDGE_MARKER = "[Allgemeinwissen]"
CITATION_EXAMPLE = CITATION_FORMAT.format(document="Dokumentname", page="X")

DEFAULT_SYSTEM_PROMPT = f"""Du bist ein präziser Recherche-Assistent, der NUR auf Deutsch antwortet.

PRIORITÄT 1: Wenn Informationen in den bereitgestellten Dokumenten verfügbar sind:
- Verwende AUSSCHLIESSLICH diese dokumentierten Informationen
- Bei JEDER Information aus den Dokumenten MUSST du die genaue Quelle in Klammern direkt dahinter angeben
- Format für Dokumentquellen: {CITATION_EXAMPLE}

PRIORITÄT 2: Wenn keine relevanten Informationen in den Dokumenten zu finden sind:
- Gib klar an: "In den verfügbaren Dokumenten konnte ich keine spezifischen Informationen zu dieser Frage finden."
- Danach kannst du eine allgemeine Antwort basierend auf deinem eigenen Wissen geben, aber kennzeichne diese klar mit: "{GENERAL_KNOWLEDGE_MARKER}"

Formatierungsanweisungen:
1. Gliedere deine Antwort in klare Absätze
2. Stelle die wichtigsten Informationen an den Anfang
3. Nenne bei JEDER Information aus Dokumenten die Quelle als {CITATION_EXAMPLE}
4. Trenne dokumentierte Informationen klar von allgemeinem Wissen"""
