"""Answer synthesis with the local language model."""

import logging

from docchat.constants import (
    CITATION_EXAMPLE,
    DEFAULT_MAX_TOKENS,
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_TEMPERATURE,
    GENERAL_KNOWLEDGE_MARKER,
)
from docchat.errors import SynthesisError
from docchat.llm.base import LLMService

logger = logging.getLogger(__name__)


def build_user_prompt(query: str, context: str) -> str:
    """Build the user message for a question.

    With an empty context the model is told that no documents matched and
    must label any general-knowledge answer. Otherwise it must answer from
    the excerpts only and cite each fact as (Quelle: <Dokument>, Seite <N>).

    Args:
        query: User question
        context: Rendered context block, or "" if nothing was retrieved

    Returns:
        str: Prompt text
    """
    if not context.strip():
        return (
            "Zu folgender Frage wurden keine relevanten Informationen in den Dokumenten "
            f'gefunden: "{query}"\n\n'
            "Bitte antworte wie folgt:\n"
            "1. Erwähne zuerst, dass keine spezifischen Informationen in den Dokumenten "
            "gefunden wurden\n"
            "2. Gib dann eine allgemeine Antwort basierend auf deinem Wissen, deutlich mit "
            f'"{GENERAL_KNOWLEDGE_MARKER}:" gekennzeichnet'
        )

    return (
        "Beantworte folgende Frage basierend auf den gegebenen Dokumentausschnitten. "
        "Verwende NUR Informationen aus diesen Ausschnitten und gib für jede Information "
        f"die Quelle im Format {CITATION_EXAMPLE} an.\n\n"
        f"Frage: {query}\n\n"
        "Hier sind die relevanten Dokumentausschnitte:\n\n"
        f"{context}"
    )


class AnswerSynthesizer:
    """Sends the system instruction and the user prompt to the chat model."""

    def __init__(
        self,
        llm_service: LLMService,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> None:
        self.llm_service = llm_service
        self.system_prompt = system_prompt
        self.temperature = temperature
        self.max_tokens = max_tokens

    def build_messages(self, query: str, context: str) -> list[dict]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": build_user_prompt(query, context)},
        ]

    async def synthesize(self, query: str, context: str = "") -> str:
        """Generate a reply for `query` grounded in `context`.

        Args:
            query: User question
            context: Rendered context block ("" when nothing was retrieved)

        Returns:
            str: Raw model reply

        Raises:
            SynthesisError: If the completion call fails
        """
        messages = self.build_messages(query, context)
        options = {"temperature": self.temperature, "num_predict": self.max_tokens}
        logger.info(f"🤖 Sending request to model {self.llm_service.model}")

        try:
            reply = await self.llm_service.generate_response(messages, options=options)
        except Exception as e:
            logger.error(f"❌ Completion failed: {e}")
            raise SynthesisError(f"Language model request failed: {e}", e) from e

        logger.info(f"Model reply: '{reply[:100]}...'")
        return reply
