"""
Core types shared by the playlistkit service and client.
"""

from .exceptions import (
    Conflict,
    Forbidden,
    InternalError,
    NotFound,
    PlaylistKitError,
    Unauthorized,
    ValidationError,
    error_for_status,
)

__all__ = [
    "Conflict",
    "Forbidden",
    "InternalError",
    "NotFound",
    "PlaylistKitError",
    "Unauthorized",
    "ValidationError",
    "error_for_status",
]
