import sqlite3
from typing import List, Optional

import database
from playlistkit.core.exceptions import Conflict, NotFound, ValidationError
from playlistkit.core.types import (
    MembershipRow,
    OrderedTrack,
    Playlist,
    PlaylistDetail,
    PlaylistSummary,
)
from playlistkit.utils.logger import get_logger

logger = get_logger(__name__)

PLAYLIST_COLUMNS = "id, owner_id, name, is_public, created_at, updated_at"
SUMMARY_COLUMNS = "id, name, is_public, created_at, updated_at"


def _validate_name(name) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError('Field "name" is required', field="name")
    return name.strip()


def _is_unique_violation(exc: sqlite3.IntegrityError) -> bool:
    errorname = getattr(exc, "sqlite_errorname", "")
    if errorname:
        return errorname in ("SQLITE_CONSTRAINT_PRIMARYKEY", "SQLITE_CONSTRAINT_UNIQUE")
    return "UNIQUE constraint failed" in str(exc)


def _playlist(row) -> Playlist:
    data = dict(row)
    data["is_public"] = bool(data["is_public"])
    return Playlist.model_validate(data)


def _summary(row) -> PlaylistSummary:
    data = dict(row)
    data["is_public"] = bool(data["is_public"])
    return PlaylistSummary.model_validate(data)


class PlaylistStore:
    """Playlists and their track membership.

    Every owner-facing query filters on ``(id, owner_id)`` together, so a
    playlist owned by someone else is indistinguishable from a missing one.
    """

    def __init__(self, connect=None):
        self._connect = connect or database.get_conn

    # --- owner-scoped reads ---

    def list_owned(self, owner_id: str) -> List[Playlist]:
        conn = self._connect()
        try:
            rows = conn.execute(
                f"""
                SELECT {PLAYLIST_COLUMNS} FROM playlists
                WHERE owner_id = ?
                ORDER BY updated_at DESC, rowid DESC
                """,
                (owner_id,),
            ).fetchall()
        finally:
            conn.close()
        return [_playlist(r) for r in rows]

    def detail(self, owner_id: str, playlist_id: str) -> PlaylistDetail:
        conn = self._connect()
        try:
            row = self._owned_row(conn, owner_id, playlist_id)
            tracks = self._ordered_tracks(conn, playlist_id)
        finally:
            conn.close()
        playlist = _playlist(row)
        return PlaylistDetail(**playlist.model_dump(), tracks=tracks)

    # --- owner-scoped mutations ---

    def create(self, owner_id: str, name) -> Playlist:
        name = _validate_name(name)
        now = database.utc_now()
        playlist = Playlist(
            id=database.new_id(),
            owner_id=owner_id,
            name=name,
            is_public=False,
            created_at=now,
            updated_at=now,
        )
        conn = self._connect()
        try:
            conn.execute(
                f"INSERT INTO playlists ({PLAYLIST_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                (playlist.id, owner_id, name, 0, now, now),
            )
            conn.commit()
        finally:
            conn.close()
        logger.info("Playlist %s created by %s", playlist.id, owner_id)
        return playlist

    def update(
        self,
        owner_id: str,
        playlist_id: str,
        name: Optional[str] = None,
        is_public: Optional[bool] = None,
    ) -> Playlist:
        """Change the provided fields and refresh ``updated_at``."""
        if name is None and is_public is None:
            raise ValidationError('Provide "name" or "is_public"')
        if name is not None:
            name = _validate_name(name)
        public_flag = None if is_public is None else int(bool(is_public))

        conn = self._connect()
        try:
            cur = conn.execute(
                """
                UPDATE playlists
                SET name = COALESCE(?, name),
                    is_public = COALESCE(?, is_public),
                    updated_at = ?
                WHERE id = ? AND owner_id = ?
                """,
                (name, public_flag, database.utc_now(), playlist_id, owner_id),
            )
            if cur.rowcount == 0:
                conn.rollback()
                raise NotFound("Playlist not found")
            row = self._owned_row(conn, owner_id, playlist_id)
            conn.commit()
        finally:
            conn.close()
        logger.info("Playlist %s updated by %s", playlist_id, owner_id)
        return _playlist(row)

    def rename(self, owner_id: str, playlist_id: str, name) -> Playlist:
        return self.update(owner_id, playlist_id, name=_validate_name(name))

    def set_public(self, owner_id: str, playlist_id: str, is_public: bool) -> Playlist:
        return self.update(owner_id, playlist_id, is_public=bool(is_public))

    def delete(self, owner_id: str, playlist_id: str) -> None:
        conn = self._connect()
        try:
            cur = conn.execute(
                "DELETE FROM playlists WHERE id = ? AND owner_id = ?",
                (playlist_id, owner_id),
            )
            if cur.rowcount == 0:
                raise NotFound("Playlist not found")
            conn.commit()
        finally:
            conn.close()
        logger.info("Playlist %s deleted by %s", playlist_id, owner_id)

    def add_track(
        self,
        owner_id: str,
        playlist_id: str,
        track_id: str,
        position: Optional[int] = None,
    ) -> MembershipRow:
        if not isinstance(track_id, str) or not track_id.strip():
            raise ValidationError('Field "track_id" is required', field="track_id")
        if position is not None and (isinstance(position, bool) or not isinstance(position, int)):
            raise ValidationError('Field "position" must be an integer', field="position")
        if position is not None and not database.INTEGER_MIN <= position <= database.INTEGER_MAX:
            raise ValidationError('Field "position" is out of range', field="position")

        added_at = database.utc_now()
        conn = self._connect()
        try:
            self._owned_row(conn, owner_id, playlist_id)
            track = conn.execute("SELECT 1 FROM tracks WHERE id = ?", (track_id,)).fetchone()
            if track is None:
                raise NotFound("Track not found")
            try:
                conn.execute(
                    """
                    INSERT INTO playlist_tracks (playlist_id, track_id, position, added_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (playlist_id, track_id, position, added_at),
                )
            except sqlite3.IntegrityError as exc:
                if _is_unique_violation(exc):
                    raise Conflict("Track already in playlist", cause=exc) from exc
                raise NotFound("Track not found", cause=exc) from exc
            conn.commit()
        finally:
            conn.close()
        logger.info("Track %s added to playlist %s", track_id, playlist_id)
        return MembershipRow(
            playlist_id=playlist_id,
            track_id=track_id,
            position=position,
            added_at=added_at,
        )

    def remove_track(self, owner_id: str, playlist_id: str, track_id: str) -> None:
        conn = self._connect()
        try:
            cur = conn.execute(
                """
                DELETE FROM playlist_tracks
                WHERE playlist_id = ? AND track_id = ?
                  AND playlist_id IN (SELECT id FROM playlists WHERE id = ? AND owner_id = ?)
                """,
                (playlist_id, track_id, playlist_id, owner_id),
            )
            if cur.rowcount == 0:
                raise NotFound("Track not in playlist")
            conn.commit()
        finally:
            conn.close()
        logger.info("Track %s removed from playlist %s", track_id, playlist_id)

    # --- public reads ---

    def list_public(self, limit: int) -> List[PlaylistSummary]:
        conn = self._connect()
        try:
            rows = conn.execute(
                f"""
                SELECT {SUMMARY_COLUMNS} FROM playlists
                WHERE is_public = 1
                ORDER BY updated_at DESC, rowid DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
        finally:
            conn.close()
        return [_summary(r) for r in rows]

    def search_public(self, term: str, limit: int) -> List[PlaylistSummary]:
        conn = self._connect()
        try:
            rows = conn.execute(
                f"""
                SELECT {SUMMARY_COLUMNS} FROM playlists
                WHERE is_public = 1 AND instr(casefold(name), casefold(?)) > 0
                ORDER BY updated_at DESC, rowid DESC
                LIMIT ?
                """,
                (term, limit),
            ).fetchall()
        finally:
            conn.close()
        return [_summary(r) for r in rows]

    def search_owned(self, owner_id: str, term: str, limit: int) -> List[PlaylistSummary]:
        conn = self._connect()
        try:
            rows = conn.execute(
                f"""
                SELECT {SUMMARY_COLUMNS} FROM playlists
                WHERE owner_id = ? AND instr(casefold(name), casefold(?)) > 0
                ORDER BY updated_at DESC, rowid DESC
                LIMIT ?
                """,
                (owner_id, term, limit),
            ).fetchall()
        finally:
            conn.close()
        return [_summary(r) for r in rows]

    # --- unscoped reads, for the visibility policy only ---

    def get(self, playlist_id: str) -> Optional[Playlist]:
        conn = self._connect()
        try:
            row = conn.execute(
                f"SELECT {PLAYLIST_COLUMNS} FROM playlists WHERE id = ?", (playlist_id,)
            ).fetchone()
        finally:
            conn.close()
        return _playlist(row) if row else None

    def ordered_tracks(self, playlist_id: str) -> List[OrderedTrack]:
        conn = self._connect()
        try:
            return self._ordered_tracks(conn, playlist_id)
        finally:
            conn.close()

    # --- helpers ---

    @staticmethod
    def _owned_row(conn, owner_id: str, playlist_id: str):
        row = conn.execute(
            f"SELECT {PLAYLIST_COLUMNS} FROM playlists WHERE id = ? AND owner_id = ?",
            (playlist_id, owner_id),
        ).fetchone()
        if row is None:
            raise NotFound("Playlist not found")
        return row

    @staticmethod
    def _ordered_tracks(conn, playlist_id: str) -> List[OrderedTrack]:
        # position ascending, unpositioned rows last, then insertion order
        rows = conn.execute(
            """
            SELECT t.id, t.title, t.duration_seconds, t.album_id, pt.position, pt.added_at
            FROM playlist_tracks pt
            JOIN tracks t ON t.id = pt.track_id
            WHERE pt.playlist_id = ?
            ORDER BY pt.position IS NULL, pt.position, pt.rowid
            """,
            (playlist_id,),
        ).fetchall()
        return [OrderedTrack.model_validate(dict(r)) for r in rows]
