import sqlite3
import uuid
import datetime

import config

# SQLite INTEGER range
INTEGER_MIN = -(2 ** 63)
INTEGER_MAX = 2 ** 63 - 1


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


def get_conn():
    conn = sqlite3.connect(config.DB_PATH, timeout=config.DB_TIMEOUT, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    # Unicode-aware folding for substring search
    conn.create_function("casefold", 1, _casefold, deterministic=True)
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def utc_now():
    return datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="microseconds")


def new_id():
    return str(uuid.uuid4())


def init_db():
    conn = get_conn()

    # --- 1. PERFORMANCE TUNING ---
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")

    cur = conn.cursor()

    # --- 2. CATALOG (read-only for the playlist core) ---
    cur.execute("""
        CREATE TABLE IF NOT EXISTS artists (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL
        )
    """)

    cur.execute("""
        CREATE TABLE IF NOT EXISTS albums (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            year INTEGER,
            artist_id TEXT NOT NULL,
            FOREIGN KEY (artist_id) REFERENCES artists(id)
        )
    """)

    cur.execute("""
        CREATE TABLE IF NOT EXISTS tracks (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            duration_seconds INTEGER NOT NULL DEFAULT 0 CHECK (duration_seconds >= 0),
            album_id TEXT NOT NULL,
            FOREIGN KEY (album_id) REFERENCES albums(id)
        )
    """)

    # --- 3. PLAYLISTS & MEMBERSHIP ---
    cur.execute("""
        CREATE TABLE IF NOT EXISTS playlists (
            id TEXT PRIMARY KEY,
            owner_id TEXT NOT NULL,
            name TEXT NOT NULL,
            is_public INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """)

    cur.execute("""
        CREATE TABLE IF NOT EXISTS playlist_tracks (
            playlist_id TEXT NOT NULL,
            track_id TEXT NOT NULL,
            position INTEGER,
            added_at TEXT NOT NULL,
            PRIMARY KEY (playlist_id, track_id),
            FOREIGN KEY (playlist_id) REFERENCES playlists(id) ON DELETE CASCADE,
            FOREIGN KEY (track_id) REFERENCES tracks(id) ON DELETE CASCADE
        )
    """)

    # --- 4. INDEXES ---
    cur.execute("CREATE INDEX IF NOT EXISTS idx_albums_artist ON albums(artist_id)")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_tracks_album ON tracks(album_id)")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_playlists_owner ON playlists(owner_id, updated_at)")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_playlists_public ON playlists(is_public, updated_at)")

    conn.commit()
    conn.close()


# --- CATALOG BROWSE ---
def list_artists():
    conn = get_conn()
    rows = conn.execute("SELECT id, name FROM artists ORDER BY name COLLATE NOCASE, id").fetchall()
    conn.close()
    return [dict(r) for r in rows]


def list_albums(artist_id=None):
    conn = get_conn()
    if artist_id:
        rows = conn.execute(
            "SELECT * FROM albums WHERE artist_id = ? ORDER BY title COLLATE NOCASE, id", (artist_id,)
        ).fetchall()
    else:
        rows = conn.execute("SELECT * FROM albums ORDER BY title COLLATE NOCASE, id").fetchall()
    conn.close()
    return [dict(r) for r in rows]


def list_tracks(album_id=None):
    conn = get_conn()
    if album_id:
        rows = conn.execute(
            "SELECT * FROM tracks WHERE album_id = ? ORDER BY title COLLATE NOCASE, id", (album_id,)
        ).fetchall()
    else:
        rows = conn.execute("SELECT * FROM tracks ORDER BY title COLLATE NOCASE, id").fetchall()
    conn.close()
    return [dict(r) for r in rows]


# --- CATALOG SEARCH ---
def search_artists(term, limit):
    conn = get_conn()
    rows = conn.execute(
        """
        SELECT id, name FROM artists
        WHERE instr(casefold(name), casefold(?)) > 0
        ORDER BY name COLLATE NOCASE, id
        LIMIT ?
        """,
        (term, limit),
    ).fetchall()
    conn.close()
    return [dict(r) for r in rows]


def search_tracks(term, limit):
    conn = get_conn()
    rows = conn.execute(
        """
        SELECT id, title, duration_seconds, album_id FROM tracks
        WHERE instr(casefold(title), casefold(?)) > 0
        ORDER BY title COLLATE NOCASE, id
        LIMIT ?
        """,
        (term, limit),
    ).fetchall()
    conn.close()
    return [dict(r) for r in rows]


# --- CATALOG LOADING ---
def seed_catalog(data):
    """Loads artists with nested albums and tracks.

    Expected shape: {"artists": [{"id"?, "name", "albums": [{"id"?, "title", "year"?,
    "tracks": [{"id"?, "title", "duration_seconds"}]}]}]}. Existing ids are updated in place.
    Returns the number of rows written per table.
    """
    counts = {"artists": 0, "albums": 0, "tracks": 0}
    conn = get_conn()
    try:
        for artist in data.get("artists", []):
            artist_id = artist.get("id") or new_id()
            conn.execute(
                "INSERT INTO artists (id, name) VALUES (?, ?) "
                "ON CONFLICT(id) DO UPDATE SET name = excluded.name",
                (artist_id, artist["name"]),
            )
            counts["artists"] += 1
            for album in artist.get("albums", []):
                album_id = album.get("id") or new_id()
                conn.execute(
                    """
                    INSERT INTO albums (id, title, year, artist_id) VALUES (?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        title = excluded.title, year = excluded.year, artist_id = excluded.artist_id
                    """,
                    (album_id, album["title"], album.get("year"), artist_id),
                )
                counts["albums"] += 1
                for track in album.get("tracks", []):
                    conn.execute(
                        """
                        INSERT INTO tracks (id, title, duration_seconds, album_id)
                        VALUES (?, ?, ?, ?)
                        ON CONFLICT(id) DO UPDATE SET
                            title = excluded.title,
                            duration_seconds = excluded.duration_seconds,
                            album_id = excluded.album_id
                        """,
                        (track.get("id") or new_id(), track["title"],
                         int(track.get("duration_seconds") or 0), album_id),
                    )
                    counts["tracks"] += 1
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
    return counts
