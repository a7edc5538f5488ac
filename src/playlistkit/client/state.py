"""
Search interaction state.

``SearchState`` is the whole state of the search popover: the query, the
flattened result list, the active index and the token of the request whose
answer is awaited. ``SearchController`` drives it from keystrokes with a
debounce timer. A response is applied only if it carries the current token,
so a slow answer to an old query can never overwrite a newer one.
"""

# Standard library imports
import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Set

# Local/package imports
from playlistkit.config import get_config
from playlistkit.core.exceptions import PlaylistKitError
from playlistkit.core.types import SearchResponse
from playlistkit.utils.logger import get_logger

logger = get_logger(__name__)


class ResultKind(str, Enum):
    TRACK = "track"
    PLAYLIST = "playlist"
    ARTIST = "artist"


class Key(str, Enum):
    ARROW_DOWN = "ArrowDown"
    ARROW_UP = "ArrowUp"
    ENTER = "Enter"
    ESCAPE = "Escape"


@dataclass(frozen=True)
class ResultItem:
    """One addressable row of the flattened result list."""

    kind: ResultKind
    id: str
    label: str
    duration_seconds: Optional[int] = None
    mine: bool = False
    is_public: bool = False


def flatten_results(response: SearchResponse) -> List[ResultItem]:
    """Tracks, then playlists (the caller's own first), then artists."""
    items: List[ResultItem] = [
        ResultItem(ResultKind.TRACK, t.id, t.title, duration_seconds=t.duration_seconds)
        for t in response.tracks
    ]

    seen = set()
    for playlist in response.playlists_me:
        seen.add(playlist.id)
        items.append(
            ResultItem(ResultKind.PLAYLIST, playlist.id, playlist.name, mine=True, is_public=playlist.is_public)
        )
    for playlist in response.playlists_public:
        if playlist.id in seen:
            continue
        items.append(
            ResultItem(ResultKind.PLAYLIST, playlist.id, playlist.name, is_public=playlist.is_public)
        )

    items.extend(ResultItem(ResultKind.ARTIST, a.id, a.name) for a in response.artists)
    return items


@dataclass
class SearchState:
    query: str = ""
    results: List[ResultItem] = field(default_factory=list)
    active_index: int = -1
    pending_token: int = 0

    def begin(self, query: str) -> int:
        """Record a dispatch for ``query`` and return its token."""
        self.query = query
        self.pending_token += 1
        return self.pending_token

    def accept(self, token: int, response: SearchResponse) -> bool:
        if token != self.pending_token:
            logger.debug("Dropping stale search response %d (current %d)", token, self.pending_token)
            return False
        self.results = flatten_results(response)
        self.active_index = 0 if self.results else -1
        return True

    def fail(self, token: int) -> bool:
        if token != self.pending_token:
            return False
        self.results = []
        self.active_index = -1
        return True

    def clear(self) -> None:
        # also invalidates whatever request is still in flight
        self.results = []
        self.active_index = -1
        self.pending_token += 1

    def move(self, step: int) -> None:
        if not self.results:
            return
        self.active_index = (self.active_index + step) % len(self.results)

    @property
    def active_item(self) -> Optional[ResultItem]:
        if 0 <= self.active_index < len(self.results):
            return self.results[self.active_index]
        return None

    def handle_key(self, key: str) -> Optional[ResultItem]:
        """Apply a navigation key; returns the item to activate on Enter."""
        if key == Key.ARROW_DOWN:
            self.move(1)
        elif key == Key.ARROW_UP:
            self.move(-1)
        elif key == Key.ENTER:
            return self.active_item
        elif key == Key.ESCAPE:
            self.clear()
        return None


class SearchController:
    """Debounced search dispatch on top of a ``SearchState``."""

    def __init__(
        self,
        client,
        state: Optional[SearchState] = None,
        debounce_seconds: Optional[float] = None,
        on_update: Optional[Callable[[SearchState], None]] = None,
    ):
        self._client = client
        self.state = state or SearchState()
        if debounce_seconds is None:
            debounce_seconds = get_config().debounce_seconds
        self.debounce_seconds = debounce_seconds
        self._on_update = on_update
        self._debounce_task: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()

    def on_input(self, text: str) -> None:
        """Restart the debounce timer for the latest input."""
        query = (text or "").strip()
        self._cancel_debounce()
        if not query:
            self.state.query = ""
            self.state.clear()
            self._notify()
            return
        self._debounce_task = asyncio.get_running_loop().create_task(self._debounced(query))

    def on_key(self, key: str) -> Optional[ResultItem]:
        item = self.state.handle_key(key)
        if key == Key.ESCAPE:
            self._cancel_debounce()
        self._notify()
        return item

    async def dispatch(self, query: str) -> bool:
        """Search now; returns whether the response was applied."""
        token = self.state.begin(query)
        try:
            response = await self._client.search(query)
        except PlaylistKitError as e:
            logger.warning("Search for %r failed: %s", query, e)
            applied = self.state.fail(token)
        else:
            applied = self.state.accept(token, response)
        if applied:
            self._notify()
        return applied

    async def wait_idle(self) -> None:
        """Wait for the pending debounce timer and every in-flight dispatch."""
        if self._debounce_task is not None:
            try:
                await self._debounce_task
            except asyncio.CancelledError:
                pass
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def _debounced(self, query: str) -> None:
        await asyncio.sleep(self.debounce_seconds)
        # the request itself is never cancelled, late answers are dropped by token
        task = asyncio.ensure_future(self.dispatch(query))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    def _cancel_debounce(self) -> None:
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = None

    def _notify(self) -> None:
        if self._on_update is not None:
            self._on_update(self.state)
