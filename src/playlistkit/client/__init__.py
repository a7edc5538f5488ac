"""
Client side of playlistkit: API access and the search interaction state.
"""

from .actions import (
    ActionDispatcher,
    AddOutcome,
    ArtistLink,
    CopyReport,
    PlaylistDialog,
    TrackDialog,
    copy_into_new_playlist,
    copy_tracks,
)
from .api import PlaylistApiClient
from .state import (
    Key,
    ResultItem,
    ResultKind,
    SearchController,
    SearchState,
    flatten_results,
)

__all__ = [
    "ActionDispatcher",
    "AddOutcome",
    "ArtistLink",
    "CopyReport",
    "Key",
    "PlaylistApiClient",
    "PlaylistDialog",
    "ResultItem",
    "ResultKind",
    "SearchController",
    "SearchState",
    "TrackDialog",
    "copy_into_new_playlist",
    "copy_tracks",
    "flatten_results",
]
