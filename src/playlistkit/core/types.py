"""
Record types exchanged between the playlistkit service and its clients.

All models ignore unknown fields so that a client built against an older
service keeps decoding newer responses.
"""

# Standard library imports
from typing import List, Optional

# Third-party imports
from pydantic import BaseModel, Field

# Local/package imports
from playlistkit.utils.storage import load_json_value


class Artist(BaseModel):
    id: str
    name: str

    model_config = {"extra": "ignore"}


class Album(BaseModel):
    id: str
    title: str
    year: Optional[int] = None
    artist_id: str

    model_config = {"extra": "ignore"}


class Track(BaseModel):
    id: str
    title: str
    duration_seconds: int = Field(default=0, ge=0)
    album_id: Optional[str] = None

    model_config = {"extra": "ignore"}


class Playlist(BaseModel):
    """A playlist record as seen by its owner."""

    id: str
    owner_id: str
    name: str
    is_public: bool = False
    created_at: str
    updated_at: str

    model_config = {"extra": "ignore"}


class PlaylistSummary(BaseModel):
    """A playlist as listed publicly or in search results (no owner id)."""

    id: str
    name: str
    is_public: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = {"extra": "ignore"}


class MembershipRow(BaseModel):
    playlist_id: str
    track_id: str
    position: Optional[int] = None
    added_at: Optional[str] = None

    model_config = {"extra": "ignore"}


class OrderedTrack(Track):
    position: Optional[int] = None
    added_at: Optional[str] = None


class PlaylistDetail(Playlist):
    tracks: List[OrderedTrack] = Field(default_factory=list)


class ExportTrack(BaseModel):
    id: str
    title: str
    duration_seconds: int = Field(default=0, ge=0)

    model_config = {"extra": "ignore"}


class ExportDocument(BaseModel):
    """Portable playlist document; field order is part of the format."""

    id: str
    name: str
    is_public: bool
    tracks: List[ExportTrack] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @property
    def filename(self) -> str:
        return f"playlist-{self.id}.json"


class SearchResponse(BaseModel):
    artists: List[Artist] = Field(default_factory=list)
    tracks: List[Track] = Field(default_factory=list)
    playlists_public: List[PlaylistSummary] = Field(default_factory=list)
    playlists_me: List[PlaylistSummary] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    def is_empty(self) -> bool:
        return not (self.artists or self.tracks or self.playlists_public or self.playlists_me)


def parse_export_document(raw) -> ExportDocument:
    """Validate an export document given as JSON text, bytes or a decoded dict."""
    return ExportDocument.model_validate(load_json_value(raw))
