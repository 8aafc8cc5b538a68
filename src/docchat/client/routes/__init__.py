"""Flask route blueprints for the docchat application."""

from docchat.client.routes.chat import chat_bp
from docchat.client.routes.config import get_config, init_config
from docchat.client.routes.health import health_bp
from docchat.client.routes.models import models_bp

__all__ = [
    "chat_bp",
    "health_bp",
    "models_bp",
    "init_config",
    "get_config",
]
