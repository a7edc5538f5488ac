import pytest

import database
from playlistkit.core.exceptions import Conflict, NotFound, ValidationError


def test_create_starts_private_and_empty(store):
    playlist = store.create("alice", "  Night Drive  ")

    assert playlist.name == "Night Drive"
    assert playlist.owner_id == "alice"
    assert playlist.is_public is False
    assert playlist.created_at == playlist.updated_at
    assert store.detail("alice", playlist.id).tracks == []


@pytest.mark.parametrize("name", ["", "   ", None, 42])
def test_create_rejects_blank_or_non_string_name(store, name):
    with pytest.raises(ValidationError):
        store.create("alice", name)


def test_list_owned_only_returns_own_playlists_newest_first(store):
    first = store.create("alice", "First")
    second = store.create("alice", "Second")
    store.create("bob", "Bob's")

    assert [p.id for p in store.list_owned("alice")] == [second.id, first.id]

    store.rename("alice", first.id, "First again")
    assert [p.id for p in store.list_owned("alice")] == [first.id, second.id]


def test_rename_refreshes_updated_at(store):
    playlist = store.create("alice", "Old")
    renamed = store.rename("alice", playlist.id, "New")

    assert renamed.name == "New"
    assert renamed.updated_at > playlist.updated_at
    assert renamed.created_at == playlist.created_at


def test_update_only_changes_given_fields(store):
    playlist = store.create("alice", "Mix")

    updated = store.update("alice", playlist.id, is_public=True)
    assert updated.is_public is True
    assert updated.name == "Mix"

    updated = store.update("alice", playlist.id, name="Mix 2")
    assert updated.is_public is True
    assert updated.name == "Mix 2"


def test_set_public_is_idempotent(store):
    playlist = store.create("alice", "Mix")
    once = store.set_public("alice", playlist.id, True)
    twice = store.set_public("alice", playlist.id, True)

    assert once.is_public is twice.is_public is True
    assert twice.updated_at >= once.updated_at


def test_non_owner_mutations_look_like_missing_playlists(store):
    playlist = store.create("alice", "Mine")

    with pytest.raises(NotFound):
        store.rename("bob", playlist.id, "Hijacked")
    with pytest.raises(NotFound):
        store.set_public("bob", playlist.id, True)
    with pytest.raises(NotFound):
        store.delete("bob", playlist.id)
    with pytest.raises(NotFound):
        store.add_track("bob", playlist.id, "t1")
    with pytest.raises(NotFound):
        store.detail("bob", playlist.id)

    unchanged = store.get(playlist.id)
    assert unchanged.name == "Mine"
    assert unchanged.is_public is False


def test_add_track_twice_conflicts_and_keeps_one_membership(store):
    playlist = store.create("alice", "Mix")
    row = store.add_track("alice", playlist.id, "t1")
    assert row.track_id == "t1"
    assert row.position is None

    with pytest.raises(Conflict):
        store.add_track("alice", playlist.id, "t1")

    assert [t.id for t in store.ordered_tracks(playlist.id)] == ["t1"]


def test_add_unknown_track_is_not_found(store):
    playlist = store.create("alice", "Mix")
    with pytest.raises(NotFound):
        store.add_track("alice", playlist.id, "does-not-exist")


@pytest.mark.parametrize("position", ["1", 1.5, True])
def test_add_track_rejects_non_integer_position(store, position):
    playlist = store.create("alice", "Mix")
    with pytest.raises(ValidationError):
        store.add_track("alice", playlist.id, "t1", position)


def test_ordering_by_position_then_insertion(store):
    playlist = store.create("alice", "Mix")
    store.add_track("alice", playlist.id, "t3")
    store.add_track("alice", playlist.id, "t1", 2)
    store.add_track("alice", playlist.id, "t4")
    store.add_track("alice", playlist.id, "t2", 1)

    assert [t.id for t in store.ordered_tracks(playlist.id)] == ["t2", "t1", "t3", "t4"]


def test_remove_track_then_remove_again_is_not_found(store):
    playlist = store.create("alice", "Mix")
    store.add_track("alice", playlist.id, "t1")

    store.remove_track("alice", playlist.id, "t1")
    assert store.ordered_tracks(playlist.id) == []

    with pytest.raises(NotFound):
        store.remove_track("alice", playlist.id, "t1")


def test_remove_track_by_non_owner_is_not_found(store):
    playlist = store.create("alice", "Mix")
    store.add_track("alice", playlist.id, "t1")

    with pytest.raises(NotFound):
        store.remove_track("bob", playlist.id, "t1")
    assert len(store.ordered_tracks(playlist.id)) == 1


def test_delete_cascades_memberships(store):
    playlist = store.create("alice", "Mix")
    store.add_track("alice", playlist.id, "t1")
    store.delete("alice", playlist.id)

    assert store.get(playlist.id) is None
    conn = database.get_conn()
    try:
        count = conn.execute(
            "SELECT COUNT(*) FROM playlist_tracks WHERE playlist_id = ?", (playlist.id,)
        ).fetchone()[0]
    finally:
        conn.close()
    assert count == 0


def test_list_public_excludes_private_and_respects_limit(store):
    for i in range(3):
        playlist = store.create("alice", f"Public {i}")
        store.set_public("alice", playlist.id, True)
    store.create("alice", "Private")

    public = store.list_public(limit=2)
    assert len(public) == 2
    assert all(p.is_public for p in public)
    assert [p.name for p in store.list_public(limit=100)] == ["Public 2", "Public 1", "Public 0"]


def test_search_treats_wildcards_literally(store):
    store.set_public("alice", store.create("alice", "100% Techno").id, True)
    store.set_public("alice", store.create("alice", "1000 Techno").id, True)

    assert [p.name for p in store.search_public("100%", 20)] == ["100% Techno"]
    assert store.search_public("_", 20) == []
    assert [p.name for p in store.search_owned("alice", "techno", 20)] == [
        "1000 Techno",
        "100% Techno",
    ]


def test_reseeding_catalog_keeps_memberships(store, catalog):
    playlist = store.create("alice", "Mix")
    store.add_track("alice", playlist.id, "t1")
    database.seed_catalog(catalog)

    assert [t.id for t in store.ordered_tracks(playlist.id)] == ["t1"]


def test_membership_changes_keep_updated_at(store):
    older = store.create("alice", "Older")
    newer = store.create("alice", "Newer")
    before = store.get(older.id).updated_at

    store.add_track("alice", older.id, "t1")
    assert store.get(older.id).updated_at == before
    assert [p.id for p in store.list_owned("alice")] == [newer.id, older.id]

    store.remove_track("alice", older.id, "t1")
    assert store.get(older.id).updated_at == before
    assert [p.id for p in store.list_owned("alice")] == [newer.id, older.id]


def test_update_without_fields_is_rejected(store):
    playlist = store.create("alice", "Mix")

    with pytest.raises(ValidationError):
        store.update("alice", playlist.id)
    assert store.get(playlist.id).updated_at == playlist.updated_at


@pytest.mark.parametrize("position", [2 ** 63, -(2 ** 63) - 1])
def test_add_track_rejects_position_outside_integer_range(store, position):
    playlist = store.create("alice", "Mix")

    with pytest.raises(ValidationError):
        store.add_track("alice", playlist.id, "t1", position)
    assert store.ordered_tracks(playlist.id) == []


def test_add_track_accepts_integer_range_bounds(store):
    playlist = store.create("alice", "Mix")
    store.add_track("alice", playlist.id, "t1", 2 ** 63 - 1)
    store.add_track("alice", playlist.id, "t2", -(2 ** 63))

    assert [t.id for t in store.ordered_tracks(playlist.id)] == ["t2", "t1"]


def test_search_folds_accented_names(store):
    playlist = store.create("alice", "Música Ótima")
    store.set_public("alice", playlist.id, True)

    assert [p.id for p in store.search_owned("alice", "MÚSICA", 20)] == [playlist.id]
    assert [p.id for p in store.search_public("ótima", 20)] == [playlist.id]
    assert store.search_public("musica", 20) == []
