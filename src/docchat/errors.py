"""Exception hierarchy for docchat.

Indexing isolates `UnsupportedFormatError`, `ExtractionError` and
`EmbeddingError` per document. Query-time retrieval degrades `StoreError`
and `EmbeddingError` to an empty context. `SynthesisError` and
`ConfigurationError` always reach the caller.
"""


class DocChatError(Exception):
    """Base class for all docchat errors."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class UnsupportedFormatError(DocChatError):
    """The file type tag is not one of the supported document formats."""


class ExtractionError(DocChatError):
    """A document could not be parsed into text."""


class EmbeddingError(DocChatError):
    """The embedding backend failed to produce a vector."""


class StoreError(DocChatError):
    """The vector backend was unreachable or rejected a request."""


class ConfigurationError(DocChatError):
    """Settings are invalid or inconsistent with existing state."""


class SynthesisError(DocChatError):
    """The language model completion call failed."""
