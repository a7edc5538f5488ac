from unittest.mock import Mock

import pytest

from playlistkit.core.exceptions import Forbidden, NotFound, Unauthorized
from playlistkit.core.types import OrderedTrack, Playlist
from services.visibility import check_read_access, load_export


def _playlist(is_public):
    return Playlist(
        id="p1",
        owner_id="alice",
        name="Mix",
        is_public=is_public,
        created_at="2024-01-01T00:00:00+00:00",
        updated_at="2024-01-01T00:00:00+00:00",
    )


@pytest.mark.parametrize("identity", [None, "alice", "bob"])
def test_public_playlists_are_readable_by_anyone(identity):
    check_read_access(_playlist(True), identity)


def test_private_playlist_for_anonymous_is_unauthorized():
    with pytest.raises(Unauthorized):
        check_read_access(_playlist(False), None)


def test_private_playlist_for_other_user_is_forbidden():
    with pytest.raises(Forbidden):
        check_read_access(_playlist(False), "bob")


def test_private_playlist_for_owner_is_readable():
    check_read_access(_playlist(False), "alice")


def test_load_export_missing_playlist_is_not_found():
    store = Mock()
    store.get.return_value = None

    with pytest.raises(NotFound):
        load_export(store, "nope", "alice")
    store.ordered_tracks.assert_not_called()


def test_load_export_denied_does_not_read_tracks():
    store = Mock()
    store.get.return_value = _playlist(False)

    with pytest.raises(Forbidden):
        load_export(store, "p1", "bob")
    store.ordered_tracks.assert_not_called()


def test_load_export_builds_document_in_track_order():
    store = Mock()
    store.get.return_value = _playlist(True)
    store.ordered_tracks.return_value = [
        OrderedTrack(id="t2", title="Last Time", duration_seconds=259, position=1),
        OrderedTrack(id="t1", title="Bad Kingdom", duration_seconds=241),
    ]

    document = load_export(store, "p1", None)

    assert document.id == "p1"
    assert document.is_public is True
    assert [t.id for t in document.tracks] == ["t2", "t1"]
