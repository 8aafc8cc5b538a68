"""Sentence-aligned text chunking with character overlap."""

import re

from docchat.constants import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE

# A sentence is a run of non-terminators followed by one or more of .!?
# A trailing fragment without a terminator is kept as its own sentence.
_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+|[^.!?]+$")


def split_sentences(text: str) -> list[str]:
    """Split text into sentences, keeping terminators and whitespace.

    Args:
        text: The text to split

    Returns:
        list[str]: Sentences in order. Joining them reproduces `text` except
        for runs of terminators with no preceding content. Text without any
        terminator is returned as a single sentence.
    """
    sentences = _SENTENCE_RE.findall(text)
    return sentences or [text]


def chunk_text(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> list[str]:
    """Split text into overlapping chunks aligned to sentence boundaries.

    Sentences are accumulated greedily. When the next sentence would push the
    buffer past `chunk_size`, the buffer is emitted (trimmed) and a new buffer
    starts with the last `chunk_overlap` characters of the old one. A sentence
    is never split, so a single sentence longer than `chunk_size` produces an
    oversized chunk.

    Args:
        text: The text to chunk
        chunk_size: Target maximum characters per chunk (default: 500)
        chunk_overlap: Characters carried over between chunks (default: 50)

    Returns:
        list[str]: Chunks in document order; empty for blank input
    """
    if not text.strip():
        return []

    chunks: list[str] = []
    buffer = ""

    for sentence in split_sentences(text):
        if len(buffer) + len(sentence) > chunk_size:
            if buffer:
                chunks.append(buffer.strip())
            if len(buffer) > chunk_overlap:
                buffer = buffer[len(buffer) - chunk_overlap:]
            buffer += sentence
        else:
            buffer += sentence

    if buffer.strip():
        chunks.append(buffer.strip())

    return [chunk for chunk in chunks if chunk]
