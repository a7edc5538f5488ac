import os
import tempfile

import pytest

# app.py initialises the database at import time
os.environ.setdefault(
    "PLAYLISTKIT_DB_PATH", os.path.join(tempfile.mkdtemp(prefix="playlistkit-"), "import.db")
)

import config  # noqa: E402
import database  # noqa: E402
from services.playlist_store import PlaylistStore  # noqa: E402

CATALOG = {
    "artists": [
        {
            "id": "ar-1",
            "name": "Moderat",
            "albums": [
                {
                    "id": "al-1",
                    "title": "II",
                    "year": 2013,
                    "tracks": [
                        {"id": "t1", "title": "Bad Kingdom", "duration_seconds": 241},
                        {"id": "t2", "title": "Last Time", "duration_seconds": 259},
                        {"id": "t3", "title": "Gita", "duration_seconds": 318},
                    ],
                }
            ],
        },
        {
            "id": "ar-2",
            "name": "Kiasmos",
            "albums": [
                {
                    "id": "al-2",
                    "title": "Kiasmos",
                    "year": 2014,
                    "tracks": [
                        {"id": "t4", "title": "Looped", "duration_seconds": 347},
                        {"id": "t5", "title": "100%_Bad", "duration_seconds": 120},
                    ],
                }
            ],
        },
    ]
}


@pytest.fixture
def db(tmp_path, monkeypatch):
    """Fresh database with a small seeded catalog."""
    monkeypatch.setattr(config, "DB_PATH", str(tmp_path / "playlistkit.db"))
    database.init_db()
    database.seed_catalog(CATALOG)
    return config.DB_PATH


@pytest.fixture
def store(db):
    return PlaylistStore()


@pytest.fixture
def catalog():
    return CATALOG
