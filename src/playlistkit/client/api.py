"""HTTP client for the playlistkit service."""

# Standard library imports
import asyncio
import json
from typing import Any, Dict, List, Optional

# Third-party imports
import aiohttp

# Local/package imports
from playlistkit.config import ClientConfig, get_config
from playlistkit.core.exceptions import InternalError, error_for_status
from playlistkit.core.types import (
    Album,
    Artist,
    ExportDocument,
    MembershipRow,
    Playlist,
    PlaylistDetail,
    PlaylistSummary,
    SearchResponse,
    Track,
)
from playlistkit.utils.logger import get_logger

logger = get_logger(__name__)


def _decode(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


def _error_message(data: Any, text: str) -> str:
    if isinstance(data, dict):
        message = data.get("message") or data.get("error")
        if isinstance(message, str):
            return message
    return text or "Request failed"


class PlaylistApiClient:
    """One coroutine per service endpoint.

    Error responses are raised as the matching ``playlistkit`` exception with
    the server's message. Connection problems and timeouts raise InternalError.
    The bearer token, when set, is sent on every request; optional-auth
    endpoints (search, export) then answer for the identified caller.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
        config: Optional[ClientConfig] = None,
    ):
        config = config or get_config()
        self.base_url = (base_url or config.base_url).rstrip("/")
        self.token = token if token is not None else config.token
        self._timeout = aiohttp.ClientTimeout(total=timeout or config.request_timeout)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "PlaylistApiClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _ensure_session(self) -> None:
        """Ensure aiohttp session exists."""
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    @property
    def authenticated(self) -> bool:
        return bool(self.token)

    async def _request(
        self,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        await self._ensure_session()
        try:
            async with self._session.request(
                method,
                f"{self.base_url}{path}",
                json=json_body,
                params=params,
                headers=headers,
            ) as response:
                text = await response.text()
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise InternalError(f"Request to {path} failed: {e}", cause=e) from e

        data = _decode(text)
        if status >= 400:
            raise error_for_status(status, _error_message(data, text))
        return data

    # --- catalog ---

    async def list_artists(self) -> List[Artist]:
        data = await self._request("GET", "/catalog/artists")
        return [Artist.model_validate(a) for a in data or []]

    async def list_albums(self, artist_id: Optional[str] = None) -> List[Album]:
        params = {"artist_id": artist_id} if artist_id else None
        data = await self._request("GET", "/catalog/albums", params=params)
        return [Album.model_validate(a) for a in data or []]

    async def list_tracks(self, album_id: Optional[str] = None) -> List[Track]:
        params = {"album_id": album_id} if album_id else None
        data = await self._request("GET", "/catalog/tracks", params=params)
        return [Track.model_validate(t) for t in data or []]

    # --- search & public playlists ---

    async def search(self, term: str) -> SearchResponse:
        data = await self._request("GET", "/search", params={"q": term})
        return SearchResponse.model_validate(data or {})

    async def list_public(self) -> List[PlaylistSummary]:
        data = await self._request("GET", "/playlists/public")
        return [PlaylistSummary.model_validate(p) for p in data or []]

    async def export(self, playlist_id: str) -> ExportDocument:
        data = await self._request("GET", f"/playlists/{playlist_id}/export")
        return ExportDocument.model_validate(data)

    # --- owner playlists ---

    async def list_mine(self) -> List[Playlist]:
        data = await self._request("GET", "/playlists/me/playlists")
        return [Playlist.model_validate(p) for p in data or []]

    async def create_playlist(self, name: str) -> Playlist:
        data = await self._request("POST", "/playlists/me/playlists", json_body={"name": name})
        return Playlist.model_validate(data)

    async def update_playlist(
        self,
        playlist_id: str,
        name: Optional[str] = None,
        is_public: Optional[bool] = None,
    ) -> Playlist:
        body: Dict[str, Any] = {}
        if name is not None:
            body["name"] = name
        if is_public is not None:
            body["is_public"] = is_public
        data = await self._request("PATCH", f"/playlists/me/playlists/{playlist_id}", json_body=body)
        return Playlist.model_validate(data)

    async def publish(self, playlist_id: str, is_public: bool = True) -> Playlist:
        data = await self._request(
            "POST",
            f"/playlists/me/playlists/{playlist_id}/publish",
            json_body={"is_public": is_public},
        )
        return Playlist.model_validate(data)

    async def delete_playlist(self, playlist_id: str) -> None:
        await self._request("DELETE", f"/playlists/me/playlists/{playlist_id}")

    async def playlist_detail(self, playlist_id: str) -> PlaylistDetail:
        data = await self._request("GET", f"/playlists/me/playlists/{playlist_id}/detail")
        return PlaylistDetail.model_validate(data)

    async def add_track(
        self, playlist_id: str, track_id: str, position: Optional[int] = None
    ) -> MembershipRow:
        body: Dict[str, Any] = {"track_id": track_id}
        if position is not None:
            body["position"] = position
        data = await self._request(
            "POST", f"/playlists/me/playlists/{playlist_id}/tracks", json_body=body
        )
        return MembershipRow.model_validate(data)

    async def remove_track(self, playlist_id: str, track_id: str) -> None:
        await self._request("DELETE", f"/playlists/me/playlists/{playlist_id}/tracks/{track_id}")
