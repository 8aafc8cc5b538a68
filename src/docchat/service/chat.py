"""Online query flow: retrieve context, synthesize a reply, extract citations."""

import logging
from dataclasses import dataclass, field

from docchat.constants import CONTENT_PREVIEW_LENGTH
from docchat.service.citations import Citation, extract_citations
from docchat.service.retrieval import ContextBuilder, DocumentExcerpt
from docchat.service.synthesis import AnswerSynthesizer

logger = logging.getLogger(__name__)


@dataclass
class ChatAnswer:
    """A reply with the citations found in it and the excerpts it was based on."""

    reply: str
    sources: list[Citation] = field(default_factory=list)
    documents: list[DocumentExcerpt] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "reply": self.reply,
            "sources": [source.to_dict() for source in self.sources],
        }


class ChatService:
    """Answers questions against the indexed documents."""

    def __init__(self, context_builder: ContextBuilder, synthesizer: AnswerSynthesizer) -> None:
        self.context_builder = context_builder
        self.synthesizer = synthesizer

    async def answer(self, message: str) -> ChatAnswer:
        """Answer a user message.

        Retrieval problems degrade to an answer without documents; a failing
        language model raises SynthesisError.

        Args:
            message: User question

        Returns:
            ChatAnswer: Reply text, citations and the excerpts used
        """
        logger.info(f"📨 New user question: '{message[:100]}'")
        retrieval = await self.context_builder.build_context(message)

        if retrieval.is_empty:
            logger.info("No relevant documents found")

        reply = await self.synthesizer.synthesize(message, retrieval.context_text)
        sources = extract_citations(reply)
        logger.info(f"✅ {len(sources)} unique sources extracted")
        return ChatAnswer(reply=reply, sources=sources, documents=retrieval.documents)

    async def search_preview(self, query: str) -> dict:
        """Run retrieval only and summarize the excerpts for inspection."""
        retrieval = await self.context_builder.build_context(query)
        return {
            "query": query,
            "mode": retrieval.mode,
            "documentCount": len(retrieval.documents),
            "documents": [
                {
                    "name": doc.document_name,
                    "page": doc.page_number,
                    "score": doc.score,
                    "preview": doc.content[:CONTENT_PREVIEW_LENGTH] + "...",
                }
                for doc in retrieval.documents
            ],
        }
