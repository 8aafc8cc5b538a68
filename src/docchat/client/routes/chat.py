"""Chat and search API routes using the RAG pipeline."""

import logging

from flask import Blueprint, jsonify, request

from docchat.client.routes.config import get_config
from docchat.errors import SynthesisError
from docchat.service.helpers import run_async

logger = logging.getLogger(__name__)

chat_bp = Blueprint("chat", __name__)


def _not_initialized():
    logger.error("❌ Request received before services were initialized")
    return jsonify({"error": "Services not initialized"}), 503


@chat_bp.route("/api/chat", methods=["POST"])
def chat():
    """Answer a question from the indexed documents.

    Request:
        {"message": "Was regelt § 5?"}

    Response:
        {
            "reply": "... (Quelle: vertrag.pdf, Seite 2) ...",
            "sources": [{"document": "vertrag.pdf", "page": 2}]
        }

    Returns:
        JSON response with the reply and its de-duplicated citations
    """
    config = get_config()
    logger.info("📨 Received chat request")

    data = request.get_json(silent=True) or {}
    message = data.get("message")
    if not message:
        logger.warning("❌ Missing 'message' field in request")
        return jsonify({"error": "Message is required"}), 400

    if config.app_context is None:
        return _not_initialized()

    try:
        answer = run_async(config.app_context.chat_service().answer(message))
    except SynthesisError as e:
        logger.error(f"❌ Error talking to the local LLM: {e}")
        return jsonify({"error": "Fehler bei der Antwort vom lokalen LLM", "details": str(e)}), 500
    except Exception as e:
        logger.error(f"❌ Error processing chat request: {e}", exc_info=True)
        return jsonify({"error": "Internal server error", "details": str(e)}), 500

    logger.info("✅ Chat request completed successfully")
    return jsonify(answer.to_dict())


@chat_bp.route("/api/test-search", methods=["GET"])
def test_search():
    """Run retrieval only and return document previews.

    Query parameters:
        q: Search text (default: "test query")
    """
    config = get_config()
    query = request.args.get("q", "test query")

    if config.app_context is None:
        return _not_initialized()

    try:
        preview = run_async(config.app_context.chat_service().search_preview(query))
    except Exception as e:
        logger.error(f"❌ Error testing search: {e}", exc_info=True)
        return jsonify({"error": "Error testing search", "details": str(e)}), 500

    return jsonify(preview)
