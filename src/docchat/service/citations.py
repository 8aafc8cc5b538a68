"""Extraction of inline source citations from model replies."""

import re
from dataclasses import dataclass

# (Quelle: <document>, Seite <page>) - the document name cannot contain a comma
CITATION_RE = re.compile(r"\(Quelle: ([^,]+), Seite (\d+)\)")


@dataclass(frozen=True)
class Citation:
    """A (document, page) reference found in a reply."""

    document: str
    page: int

    def to_dict(self) -> dict:
        return {"document": self.document, "page": self.page}


def extract_citations(text: str) -> list[Citation]:
    """Find all citations in `text`, de-duplicated in first-seen order.

    Args:
        text: Model reply

    Returns:
        list[Citation]: Unique citations; empty if none are present
    """
    citations: list[Citation] = []
    seen: set[Citation] = set()

    for match in CITATION_RE.finditer(text or ""):
        citation = Citation(document=match.group(1).strip(), page=int(match.group(2)))
        if citation not in seen:
            seen.add(citation)
            citations.append(citation)

    return citations
