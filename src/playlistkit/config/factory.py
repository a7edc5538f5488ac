"""Configuration factory module."""

# Standard library imports
from typing import Optional

# Local imports
from .base import ClientConfig

_instance: Optional[ClientConfig] = None


def get_config(force_refresh: bool = False) -> ClientConfig:
    """Get the cached client configuration.

    Args:
        force_refresh: If True, re-read the environment into a new instance

    Returns:
        ClientConfig instance
    """
    global _instance
    if force_refresh or _instance is None:
        _instance = ClientConfig()
    return _instance


def clear_config() -> None:
    """Drop the cached configuration instance."""
    global _instance
    _instance = None
