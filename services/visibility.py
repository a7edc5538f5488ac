from typing import Optional

from playlistkit.core.exceptions import Forbidden, NotFound, Unauthorized
from playlistkit.core.types import ExportDocument, Playlist
from playlistkit.utils.logger import get_logger
from services.exporter import build_export

logger = get_logger(__name__)


def check_read_access(playlist: Playlist, identity: Optional[str]) -> None:
    """Raises unless ``identity`` may read the playlist's content.

    Public playlists are readable by anyone. A private playlist answers an
    anonymous caller with Unauthorized (signing in might help) and an
    identified non-owner with Forbidden.
    """
    if playlist.is_public:
        return
    if identity is None:
        raise Unauthorized("Playlist is private")
    if identity != playlist.owner_id:
        raise Forbidden("Playlist is private")


def load_export(store, playlist_id: str, identity: Optional[str]) -> ExportDocument:
    playlist = store.get(playlist_id)
    if playlist is None:
        raise NotFound("Playlist not found")
    try:
        check_read_access(playlist, identity)
    except (Unauthorized, Forbidden) as exc:
        logger.info("Export of %s denied (%s)", playlist_id, exc.status_code)
        raise
    return build_export(playlist, store.ordered_tracks(playlist_id))
