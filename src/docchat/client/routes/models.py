"""Model management API routes for the local Ollama daemon."""

import logging
import os

from dotenv import find_dotenv, set_key
from flask import Blueprint, jsonify, request

from docchat.client.routes.config import get_config
from docchat.service.helpers import run_async

logger = logging.getLogger(__name__)

models_bp = Blueprint("models", __name__, url_prefix="/api/models")


def persist_active_model(name: str) -> None:
    """Write OLLAMA_MODEL to the .env file so the choice survives a restart."""
    env_path = find_dotenv(usecwd=True) or os.path.join(os.getcwd(), ".env")
    set_key(env_path, "OLLAMA_MODEL", name, quote_mode="never")
    logger.info(f"💾 Saved OLLAMA_MODEL={name} to {env_path}")


def _model_name():
    data = request.get_json(silent=True) or {}
    return data.get("modelName")


@models_bp.route("/installed", methods=["GET"])
def installed_models():
    """List installed models and the active one.

    Response:
        {"models": ["mistral:latest", ...], "activeModel": "mistral"}
    """
    app_context = get_config().app_context
    if app_context is None:
        return jsonify({"error": "Services not initialized"}), 503

    try:
        models = run_async(app_context.llm_service.list_models())
    except Exception as e:
        logger.error(f"❌ Error listing models: {e}")
        return jsonify({"error": "Failed to get installed models", "details": str(e)}), 500

    return jsonify({"models": models, "activeModel": app_context.llm_service.model})


@models_bp.route("/install", methods=["POST"])
def install_model():
    """Pull a model onto the daemon.

    Request:
        {"modelName": "llama3:8b"}
    """
    app_context = get_config().app_context
    name = _model_name()
    if not name:
        return jsonify({"error": "Model name is required"}), 400
    if app_context is None:
        return jsonify({"error": "Services not initialized"}), 503

    try:
        status = run_async(app_context.llm_service.pull_model(name))
    except Exception as e:
        logger.error(f"❌ Error installing model {name}: {e}")
        return jsonify({"error": "Failed to install model", "details": str(e)}), 500

    return jsonify({"success": True, "message": f"Modell {name} installiert", "status": status})


@models_bp.route("/activate", methods=["POST"])
def activate_model():
    """Switch the chat model used for answers.

    The model must already be installed. The choice applies immediately and
    is saved to `.env`.
    """
    app_context = get_config().app_context
    name = _model_name()
    if not name:
        return jsonify({"error": "Model name is required"}), 400
    if app_context is None:
        return jsonify({"error": "Services not initialized"}), 503

    try:
        installed = run_async(app_context.llm_service.list_models())
    except Exception as e:
        logger.error(f"❌ Error listing models: {e}")
        return jsonify({"error": "Failed to activate model", "details": str(e)}), 500

    # Ollama reports "mistral" as "mistral:latest"
    if name not in installed and f"{name}:latest" not in installed:
        return jsonify({"error": f"Model {name} is not installed"}), 404

    app_context.llm_service.model = name
    app_context.settings.ollama_model = name
    persist_active_model(name)
    logger.info(f"🤖 Active model is now {name}")

    return jsonify(
        {
            "success": True,
            "message": f"Modell {name} wurde erfolgreich aktiviert",
            "activeModel": name,
        }
    )


@models_bp.route("/delete", methods=["POST"])
def delete_model():
    """Remove an installed model. The active model cannot be deleted."""
    app_context = get_config().app_context
    name = _model_name()
    if not name:
        return jsonify({"error": "Model name is required"}), 400
    if app_context is None:
        return jsonify({"error": "Services not initialized"}), 503

    if name == app_context.llm_service.model:
        return jsonify(
            {
                "error": "Cannot delete the active model",
                "message": "Das aktive Modell kann nicht gelöscht werden. "
                "Bitte aktivieren Sie zuerst ein anderes Modell.",
            }
        ), 400

    try:
        run_async(app_context.llm_service.delete_model(name))
    except Exception as e:
        logger.error(f"❌ Error deleting model {name}: {e}")
        return jsonify({"error": "Failed to delete model", "details": str(e)}), 500

    return jsonify({"success": True, "message": f"Modell {name} erfolgreich gelöscht"})
