"""Health check and backend status API routes."""

import logging
from datetime import datetime, timezone

from flask import Blueprint, jsonify

from docchat.client.routes.config import get_config
from docchat.service.helpers import check_ollama, check_vector_store, run_async

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint.

    Returns:
        JSON with service status
    """
    app_context = get_config().app_context
    return jsonify(
        {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "services": "initialized" if app_context else "not initialized",
        }
    )


@health_bp.route("/api/check-ollama", methods=["GET"])
def get_ollama_status():
    """Check that the Ollama daemon is running and list its models."""
    app_context = get_config().app_context
    if app_context is None:
        return jsonify({"status": "error", "message": "Services not initialized"}), 503

    logger.info("🔌 Checking Ollama status...")
    result = run_async(check_ollama(app_context.llm_service))
    if result["status"] != "ok":
        return jsonify(
            {
                "status": "error",
                "message": "Ollama is not reachable. Make sure Ollama is running.",
                "details": result.get("error"),
            }
        ), 500
    return jsonify(result)


@health_bp.route("/api/check-vectorstore", methods=["GET"])
def get_vector_store_status():
    """Check that the vector store is running and the collection exists."""
    app_context = get_config().app_context
    if app_context is None:
        return jsonify({"status": "error", "message": "Services not initialized"}), 503

    logger.info("🔌 Checking vector store status...")
    result = check_vector_store(app_context.store, app_context.settings.collection_name)
    if result["status"] != "ok":
        return jsonify(
            {
                "status": "error",
                "message": "The vector store is not reachable. Make sure Chroma is running.",
                "details": result.get("error"),
            }
        ), 500
    return jsonify(result)


@health_bp.route("/api/stats", methods=["GET"])
def get_collection_stats():
    """Return record count and dimensionality of the configured collection."""
    app_context = get_config().app_context
    if app_context is None:
        return jsonify({"status": "error", "message": "Services not initialized"}), 503

    try:
        stats = app_context.store.stats(app_context.settings.collection_name)
    except Exception as e:
        logger.error(f"❌ Error reading collection stats: {e}")
        return jsonify({"exists": False, "count": 0, "error": str(e)}), 500

    return jsonify(stats.to_dict())
