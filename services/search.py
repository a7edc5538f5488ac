from typing import Optional

import database
from config import SEARCH_RESULT_LIMIT
from playlistkit.core.types import Artist, SearchResponse, Track
from playlistkit.utils.logger import get_logger

logger = get_logger(__name__)


class SearchAggregator:
    """Runs one term against artists, tracks, public playlists and the caller's own."""

    def __init__(self, store, catalog=database, limit: int = SEARCH_RESULT_LIMIT):
        self._store = store
        self._catalog = catalog
        self.limit = limit

    def search(self, term: Optional[str], caller_id: Optional[str] = None) -> SearchResponse:
        term = (term or "").strip()
        if not term:
            return SearchResponse()

        # any failing sub-query fails the whole search
        artists = self._catalog.search_artists(term, self.limit)
        tracks = self._catalog.search_tracks(term, self.limit)
        playlists_public = self._store.search_public(term, self.limit)
        playlists_me = []
        if caller_id:
            playlists_me = self._store.search_owned(caller_id, term, self.limit)

        logger.debug(
            "search %r: %d artists, %d tracks, %d public, %d mine",
            term, len(artists), len(tracks), len(playlists_public), len(playlists_me),
        )
        return SearchResponse(
            artists=[Artist.model_validate(a) for a in artists],
            tracks=[Track.model_validate(t) for t in tracks],
            playlists_public=playlists_public,
            playlists_me=playlists_me,
        )
