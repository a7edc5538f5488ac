"""
What happens when a search result is activated.

Tracks open a dialog that adds the track to one of the caller's playlists or
to a new one. Playlists open a dialog built from their export document: the
owner may open it in the editor, anyone else may copy its tracks. Artists
resolve to a catalog deep link.

Multi-step mutations are best effort. Create-then-add keeps the created
playlist when the add fails, and copying adds tracks one by one without
rolling back what was already added; both report what actually happened.
"""

# Standard library imports
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Union
from urllib.parse import quote

# Local/package imports
from playlistkit.core.exceptions import Conflict, Forbidden, PlaylistKitError
from playlistkit.core.types import ExportDocument, Playlist, PlaylistDetail
from playlistkit.utils.logger import get_logger

from .state import ResultItem, ResultKind

logger = get_logger(__name__)

CATALOG_ARTIST_URL = "/catalog.html?artist_id={artist_id}"


@dataclass
class AddOutcome:
    """Result of adding one track from the track dialog."""

    playlist_id: str
    track_id: str
    created: Optional[Playlist] = None
    added: bool = False
    already_present: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.added or self.already_present


@dataclass
class CopyReport:
    """Per-track results of a best-effort copy."""

    target_id: str
    created: Optional[Playlist] = None
    added: List[str] = field(default_factory=list)
    already_present: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.added) + len(self.already_present) + len(self.failed)

    @property
    def complete(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        return (
            f"{len(self.added)} added, {len(self.already_present)} already present, "
            f"{len(self.failed)} failed"
        )


@dataclass(frozen=True)
class ArtistLink:
    artist_id: str
    url: str


async def copy_tracks(client, target_id: str, track_ids: Iterable[str]) -> CopyReport:
    """Add each track in order; a duplicate counts as already present."""
    report = CopyReport(target_id=target_id)
    for track_id in track_ids:
        try:
            await client.add_track(target_id, track_id)
        except Conflict:
            report.already_present.append(track_id)
        except PlaylistKitError as e:
            logger.warning("Copying track %s into %s failed: %s", track_id, target_id, e)
            report.failed[track_id] = e.message
        else:
            report.added.append(track_id)
    return report


async def copy_into_new_playlist(client, name: str, track_ids: Iterable[str]) -> CopyReport:
    created = await client.create_playlist(name)
    report = await copy_tracks(client, created.id, track_ids)
    report.created = created
    return report


class TrackDialog:
    """Add a single track to an owned playlist, or to a new one."""

    def __init__(self, client, item: ResultItem, playlists: List[Playlist]):
        self._client = client
        self.item = item
        self.playlists = playlists

    @property
    def options(self) -> List[tuple]:
        return [(p.id, p.name) for p in self.playlists]

    @property
    def suggests_new(self) -> bool:
        return not self.playlists

    async def add_to_existing(self, playlist_id: str) -> AddOutcome:
        outcome = AddOutcome(playlist_id=playlist_id, track_id=self.item.id)
        try:
            await self._client.add_track(playlist_id, self.item.id)
        except Conflict:
            outcome.already_present = True
        except PlaylistKitError as e:
            outcome.error = e.message
        else:
            outcome.added = True
        return outcome

    async def create_and_add(self, name: str) -> AddOutcome:
        """Create ``name`` and add the track; creation errors propagate."""
        created = await self._client.create_playlist(name)
        self.playlists.insert(0, created)
        outcome = await self.add_to_existing(created.id)
        outcome.created = created
        if outcome.error:
            logger.warning(
                "Playlist %s was created but adding %s failed: %s",
                created.id, self.item.id, outcome.error,
            )
        return outcome


class PlaylistDialog:
    """Actions on a playlist result, built from its export document."""

    def __init__(self, client, item: ResultItem, document: ExportDocument, owned: bool):
        self._client = client
        self.item = item
        self.document = document
        self.owned = owned

    @property
    def track_ids(self) -> List[str]:
        return [t.id for t in self.document.tracks]

    @property
    def can_open_in_editor(self) -> bool:
        return self.owned

    @property
    def can_copy(self) -> bool:
        return not self.owned

    async def open_in_editor(self) -> PlaylistDetail:
        if not self.owned:
            raise Forbidden("Only the owner can edit this playlist")
        return await self._client.playlist_detail(self.document.id)

    async def copy_into(self, target_id: str) -> CopyReport:
        return await copy_tracks(self._client, target_id, self.track_ids)

    async def copy_into_new(self, name: Optional[str] = None) -> CopyReport:
        return await copy_into_new_playlist(self._client, name or self.document.name, self.track_ids)


Activation = Union[TrackDialog, PlaylistDialog, ArtistLink]


class ActionDispatcher:
    """Turns an activated ``ResultItem`` into its dialog or link."""

    def __init__(self, client):
        self._client = client

    async def activate(
        self, item: ResultItem, owned_playlists: Optional[List[Playlist]] = None
    ) -> Activation:
        if item.kind == ResultKind.TRACK:
            if owned_playlists is None:
                owned_playlists = await self._owned_playlists()
            return TrackDialog(self._client, item, list(owned_playlists))

        if item.kind == ResultKind.PLAYLIST:
            document = await self._client.export(item.id)
            owned = item.mine
            if not owned and owned_playlists is not None:
                owned = any(p.id == item.id for p in owned_playlists)
            return PlaylistDialog(self._client, item, document, owned)

        if item.kind == ResultKind.ARTIST:
            return ArtistLink(item.id, CATALOG_ARTIST_URL.format(artist_id=quote(item.id, safe="")))

        raise ValueError(f"Unknown result kind: {item.kind}")

    async def _owned_playlists(self) -> List[Playlist]:
        if not getattr(self._client, "authenticated", False):
            return []
        return await self._client.list_mine()
