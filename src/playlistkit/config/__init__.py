# playlistkit/config/__init__.py
"""Configuration management."""

# Local imports
from .base import ClientConfig
from .factory import clear_config, get_config

__all__ = ["ClientConfig", "clear_config", "get_config"]
