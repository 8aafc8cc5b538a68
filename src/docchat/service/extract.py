"""Text extraction from PDF, Word and plain text/markup documents."""

import io
import logging
from enum import Enum
from pathlib import Path

import docx
import fitz  # PyMuPDF

from docchat.errors import ExtractionError, UnsupportedFormatError

logger = logging.getLogger(__name__)


class DocumentFormat(Enum):
    """Supported document formats."""

    PDF = "pdf"
    OFFICE = "office"
    TEXT = "text"

    @classmethod
    def from_extension(cls, extension: str) -> "DocumentFormat":
        """Map a file extension (with or without the dot) to a format.

        Raises:
            UnsupportedFormatError: If the extension is not supported
        """
        ext = extension.lower()
        if not ext.startswith("."):
            ext = f".{ext}"
        try:
            return _EXTENSIONS[ext]
        except KeyError:
            raise UnsupportedFormatError(f"Unsupported document format: {extension!r}") from None

    @classmethod
    def from_path(cls, path: Path) -> "DocumentFormat":
        """Map a file path to its format by suffix."""
        return cls.from_extension(path.suffix)


_EXTENSIONS = {
    ".pdf": DocumentFormat.PDF,
    ".docx": DocumentFormat.OFFICE,
    ".txt": DocumentFormat.TEXT,
    ".md": DocumentFormat.TEXT,
    ".html": DocumentFormat.TEXT,
}

SUPPORTED_EXTENSIONS = frozenset(_EXTENSIONS)


def is_supported(path: Path) -> bool:
    """Check whether a file has a supported extension."""
    return path.suffix.lower() in SUPPORTED_EXTENSIONS


def _extract_pdf(data: bytes) -> str:
    with fitz.open(stream=data, filetype="pdf") as doc:
        return "".join(page.get_text() for page in doc)


def _extract_office(data: bytes) -> str:
    document = docx.Document(io.BytesIO(data))
    text_parts = [p.text for p in document.paragraphs if p.text.strip()]

    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                text_parts.append(" | ".join(cells))

    return "\n".join(text_parts)


def _extract_plain(data: bytes) -> str:
    return data.decode("utf-8")


_HANDLERS = {
    DocumentFormat.PDF: _extract_pdf,
    DocumentFormat.OFFICE: _extract_office,
    DocumentFormat.TEXT: _extract_plain,
}


def extract_text(data: bytes, fmt: DocumentFormat) -> str:
    """Convert raw document bytes into plain text.

    PDF pages are concatenated, Word documents lose their styling, and
    text/markdown/HTML is decoded as UTF-8 without stripping markup.

    Args:
        data: Raw file contents
        fmt: Format of the document

    Returns:
        str: Extracted text (may be empty)

    Raises:
        UnsupportedFormatError: If `fmt` is not a DocumentFormat
        ExtractionError: If the underlying parser fails
    """
    handler = _HANDLERS.get(fmt)
    if handler is None:
        raise UnsupportedFormatError(f"Unsupported document format: {fmt!r}")

    try:
        return handler(data)
    except Exception as e:
        raise ExtractionError(f"Failed to extract {fmt.value} document: {e}", e) from e


def extract_text_from_file(path: Path) -> str:
    """Read a file and extract its text based on the file extension.

    Args:
        path: Path to the document

    Returns:
        str: Extracted text

    Raises:
        UnsupportedFormatError: If the extension is not supported
        ExtractionError: If the file cannot be read or parsed
    """
    fmt = DocumentFormat.from_path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ExtractionError(f"Failed to read {path}: {e}", e) from e

    text = extract_text(data, fmt)
    logger.debug(f"Extracted {len(text)} characters from {path.name}")
    return text
