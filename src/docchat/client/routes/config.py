"""Shared configuration for route modules."""

from dataclasses import dataclass

from docchat.service.context import AppContext


@dataclass
class RouteConfig:
    """Configuration container for Flask route dependencies.

    Routes read the application context from here instead of module globals,
    so tests can swap it out.
    """

    app_context: AppContext | None = None


# Single shared config instance
_config = RouteConfig()


def get_config() -> RouteConfig:
    """Get the shared route configuration.

    Returns:
        RouteConfig instance with current settings
    """
    return _config


def init_config(app_context: AppContext | None = None) -> None:
    """Initialize the shared route configuration.

    Args:
        app_context: Initialized application context
    """
    if app_context is not None:
        _config.app_context = app_context
