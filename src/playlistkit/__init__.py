"""
playlistkit - playlists over a shared music catalog.

Holds the parts shared by the playlist service and its clients: the error
taxonomy, the record types, logging helpers, the API client with the search
interaction state, and the command line interface.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("playlistkit")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = ["__version__"]
