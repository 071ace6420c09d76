"""Configuration package for the interview session engine."""
from .routes import LlmRoute, ProviderConfig, load_provider_config
from .settings import Settings, settings

__all__ = [
    "LlmRoute",
    "ProviderConfig",
    "load_provider_config",
    "Settings",
    "settings",
]
