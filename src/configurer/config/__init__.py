"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .rest import RestConfig
from .settings import AgentSettings, get_agent_settings

__all__ = [
    "AgentSettings",
    "ConfigurationError",
    "MissingConfigurationError",
    "RestConfig",
    "get_agent_settings",
    "require_env_vars",
]
