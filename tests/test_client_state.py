import asyncio
from unittest.mock import AsyncMock

import pytest

from playlistkit.client.state import (
    Key,
    ResultKind,
    SearchController,
    SearchState,
    flatten_results,
)
from playlistkit.core.exceptions import InternalError
from playlistkit.core.types import SearchResponse


def _response(prefix="bad"):
    return SearchResponse.model_validate(
        {
            "artists": [{"id": "ar-1", "name": f"{prefix} artist"}],
            "tracks": [
                {"id": "t1", "title": f"{prefix} one", "duration_seconds": 60},
                {"id": "t2", "title": f"{prefix} two", "duration_seconds": 90},
            ],
            "playlists_public": [
                {"id": "p-shared", "name": "shared", "is_public": True},
                {"id": "p-mine-public", "name": "mine public", "is_public": True},
            ],
            "playlists_me": [{"id": "p-mine-public", "name": "mine public", "is_public": True}],
        }
    )


def test_flatten_orders_tracks_playlists_artists():
    items = flatten_results(_response())

    assert [(i.kind, i.id) for i in items] == [
        (ResultKind.TRACK, "t1"),
        (ResultKind.TRACK, "t2"),
        (ResultKind.PLAYLIST, "p-mine-public"),
        (ResultKind.PLAYLIST, "p-shared"),
        (ResultKind.ARTIST, "ar-1"),
    ]
    assert items[2].mine is True
    assert items[3].mine is False
    assert items[0].duration_seconds == 60


def test_flatten_empty_response():
    assert flatten_results(SearchResponse()) == []


def test_navigation_wraps_around():
    state = SearchState()
    token = state.begin("bad")
    state.accept(token, _response())
    assert state.active_index == 0

    state.handle_key(Key.ARROW_UP)
    assert state.active_item.id == "ar-1"

    state.handle_key(Key.ARROW_DOWN)
    assert state.active_index == 0

    state.handle_key(Key.ARROW_DOWN)
    assert state.handle_key(Key.ENTER).id == "t2"


def test_navigation_on_empty_results_is_noop():
    state = SearchState()
    state.handle_key("ArrowDown")
    assert state.active_index == -1
    assert state.handle_key("Enter") is None


def test_escape_clears_and_invalidates_pending_request():
    state = SearchState()
    token = state.begin("bad")
    state.handle_key(Key.ESCAPE)

    assert state.accept(token, _response()) is False
    assert state.results == []
    assert state.active_item is None


def test_stale_response_is_dropped():
    state = SearchState()
    old = state.begin("ba")
    new = state.begin("bad")

    assert state.accept(new, _response("new")) is True
    assert state.accept(old, _response("old")) is False
    assert state.results[0].label == "new one"


def test_failure_clears_only_for_current_token():
    state = SearchState()
    old = state.begin("ba")
    new = state.begin("bad")
    state.accept(new, _response())

    assert state.fail(old) is False
    assert len(state.results) == 5
    assert state.fail(new) is True
    assert state.results == []


@pytest.mark.asyncio
async def test_controller_debounces_keystrokes():
    client = AsyncMock()
    client.search.return_value = _response()
    controller = SearchController(client, debounce_seconds=0.01)

    for text in ("b", "ba", "bad"):
        controller.on_input(text)
    await controller.wait_idle()

    client.search.assert_awaited_once_with("bad")
    assert controller.state.query == "bad"
    assert len(controller.state.results) == 5


@pytest.mark.asyncio
async def test_controller_drops_slow_older_response():
    release_old = asyncio.Event()

    async def search(term):
        if term == "ba":
            await release_old.wait()
            return _response("old")
        return _response("new")

    client = AsyncMock()
    client.search.side_effect = search
    controller = SearchController(client, debounce_seconds=0)

    slow = asyncio.ensure_future(controller.dispatch("ba"))
    await asyncio.sleep(0)
    assert await controller.dispatch("bad") is True
    release_old.set()
    assert await slow is False

    assert controller.state.results[0].label == "new one"


@pytest.mark.asyncio
async def test_controller_blank_input_clears_without_request():
    client = AsyncMock()
    updates = []
    controller = SearchController(client, debounce_seconds=0.01, on_update=updates.append)

    controller.on_input("   ")
    await controller.wait_idle()

    client.search.assert_not_awaited()
    assert updates and updates[-1].results == []


@pytest.mark.asyncio
async def test_controller_escape_cancels_pending_debounce():
    client = AsyncMock()
    client.search.return_value = _response()
    controller = SearchController(client, debounce_seconds=0.05)

    controller.on_input("bad")
    controller.on_key(Key.ESCAPE)
    await controller.wait_idle()

    client.search.assert_not_awaited()
    assert controller.state.results == []


@pytest.mark.asyncio
async def test_controller_failed_search_empties_results():
    client = AsyncMock()
    client.search.side_effect = InternalError("connection refused")
    controller = SearchController(client, debounce_seconds=0)

    assert await controller.dispatch("bad") is True
    assert controller.state.results == []
