import os

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Database
DB_PATH = os.getenv("PLAYLISTKIT_DB_PATH", os.path.join(BASE_DIR, "playlistkit.db"))
DB_TIMEOUT = float(os.getenv("PLAYLISTKIT_DB_TIMEOUT", "10"))

# Bearer tokens (signed by the identity provider stand-in)
TOKEN_SECRET = os.getenv("PLAYLISTKIT_TOKEN_SECRET", "dev-token-secret")
TOKEN_SALT = "playlistkit-identity"
TOKEN_MAX_AGE = int(os.getenv("PLAYLISTKIT_TOKEN_MAX_AGE", "3600"))

# Result caps
SEARCH_RESULT_LIMIT = int(os.getenv("PLAYLISTKIT_SEARCH_RESULT_LIMIT", "20"))
PUBLIC_PLAYLIST_LIMIT = int(os.getenv("PLAYLISTKIT_PUBLIC_PLAYLIST_LIMIT", "100"))

# Logging
LOG_LEVEL = os.getenv("PLAYLISTKIT_LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("PLAYLISTKIT_LOG_DIR")
