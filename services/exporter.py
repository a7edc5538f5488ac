from typing import Dict, Iterable, Tuple

from playlistkit.core.types import ExportDocument, ExportTrack, Playlist, Track
from playlistkit.utils.storage import dump_json

EXPORT_CONTENT_TYPE = "application/json; charset=utf-8"


def build_export(playlist: Playlist, tracks: Iterable[Track]) -> ExportDocument:
    """Renders an already authorized playlist and its ordered tracks."""
    return ExportDocument(
        id=playlist.id,
        name=playlist.name,
        is_public=playlist.is_public,
        tracks=[
            ExportTrack(id=t.id, title=t.title, duration_seconds=t.duration_seconds)
            for t in tracks
        ],
    )


def render_export(document: ExportDocument) -> Tuple[str, Dict[str, str]]:
    """Body and headers that offer the document as a download."""
    headers = {
        "Content-Type": EXPORT_CONTENT_TYPE,
        "Content-Disposition": f'attachment; filename="{document.filename}"',
    }
    return dump_json(document.model_dump()), headers