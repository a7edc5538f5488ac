import os
from pathlib import Path
from typing import Optional

from flask import Blueprint, Flask, Response, g, jsonify, request
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Internal Modules
import config
import database
from backend.models import (
    PlaylistCreateRequest,
    PlaylistPatchRequest,
    PublishRequest,
    TrackAddRequest,
)
from services.exporter import render_export
from services.identity import SignedTokenVerifier, parse_bearer
from services.playlist_store import PlaylistStore
from services.search import SearchAggregator
from services.visibility import load_export
from playlistkit.core.exceptions import PlaylistKitError, Unauthorized, ValidationError
from playlistkit.utils.logger import get_logger, set_logger

logger = get_logger(__name__)

# Initialize Database
database.init_db()

app = Flask(__name__)
app.json.sort_keys = False

# Blueprints
catalog_api = Blueprint("catalog_api", __name__, url_prefix="/catalog")
search_api = Blueprint("search_api", __name__, url_prefix="/search")
playlists_api = Blueprint("playlists_api", __name__, url_prefix="/playlists")
me_api = Blueprint("me_api", __name__, url_prefix="/playlists/me")

# Collaborators
identity_verifier = SignedTokenVerifier()
playlist_store = PlaylistStore()
search_aggregator = SearchAggregator(playlist_store)

# --- Helper Functions ---

def current_identity() -> Optional[str]:
    """Subject for optional-auth routes. Missing or bad credentials mean anonymous."""
    token = parse_bearer(request.headers.get("Authorization"))
    return identity_verifier.verify(token)


def require_identity() -> str:
    """Subject for owner routes; raises Unauthorized without a valid credential."""
    token = parse_bearer(request.headers.get("Authorization"))
    if token is None:
        raise Unauthorized("Authorization header missing or invalid")
    subject = identity_verifier.verify(token)
    if subject is None:
        raise Unauthorized("Invalid or expired token")
    return subject


def _describe_errors(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "body"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def parse_body(model_cls, required: bool = True):
    """Parses JSON body against a Pydantic model.

    With ``required=False`` only an empty body falls back to the model
    defaults; a body that is present but unreadable is still rejected.
    """
    if not required and not request.get_data():
        data = {}
    else:
        data = request.get_json(silent=True)
        if data is None:
            raise ValidationError("Request body must be JSON")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(_describe_errors(exc), cause=exc) from exc


# --- API: Health ---

@app.route("/health")
def health():
    return jsonify({"ok": True})


# --- API: Catalog ---

@catalog_api.route("/artists")
def list_artists():
    return jsonify(database.list_artists())


@catalog_api.route("/albums")
def list_albums():
    return jsonify(database.list_albums(request.args.get("artist_id")))


@catalog_api.route("/tracks")
def list_tracks():
    return jsonify(database.list_tracks(request.args.get("album_id")))


# --- API: Search ---

@search_api.route("", strict_slashes=False)
def search():
    result = search_aggregator.search(request.args.get("q", ""), current_identity())
    return jsonify(result.model_dump())


# --- API: Public playlists ---

@playlists_api.route("/public")
def list_public_playlists():
    playlists = playlist_store.list_public(config.PUBLIC_PLAYLIST_LIMIT)
    return jsonify([p.model_dump() for p in playlists])


@playlists_api.route("/<playlist_id>/export")
def export_playlist(playlist_id):
    document = load_export(playlist_store, playlist_id, current_identity())
    body, headers = render_export(document)
    return Response(body, status=200, headers=headers)


# --- API: Owner playlists ---

@me_api.before_request
def authenticate_owner():
    if request.method == "OPTIONS":
        return None
    g.identity = require_identity()
    return None


@me_api.route("/playlists", methods=["GET"])
def list_my_playlists():
    return jsonify([p.model_dump() for p in playlist_store.list_owned(g.identity)])


@me_api.route("/playlists", methods=["POST"])
def create_playlist():
    payload = parse_body(PlaylistCreateRequest)
    playlist = playlist_store.create(g.identity, payload.name)
    return jsonify(playlist.model_dump()), 201


@me_api.route("/playlists/<playlist_id>", methods=["PATCH"])
def update_playlist(playlist_id):
    payload = parse_body(PlaylistPatchRequest)
    playlist = playlist_store.update(
        g.identity, playlist_id, name=payload.name, is_public=payload.is_public
    )
    return jsonify(playlist.model_dump())


@me_api.route("/playlists/<playlist_id>", methods=["DELETE"])
def delete_playlist(playlist_id):
    playlist_store.delete(g.identity, playlist_id)
    return "", 204


@me_api.route("/playlists/<playlist_id>/detail", methods=["GET"])
def playlist_detail(playlist_id):
    return jsonify(playlist_store.detail(g.identity, playlist_id).model_dump())


@me_api.route("/playlists/<playlist_id>/tracks", methods=["POST"])
def add_playlist_track(playlist_id):
    payload = parse_body(TrackAddRequest)
    row = playlist_store.add_track(g.identity, playlist_id, payload.track_id, payload.position)
    return jsonify(row.model_dump()), 201


@me_api.route("/playlists/<playlist_id>/tracks/<track_id>", methods=["DELETE"])
def remove_playlist_track(playlist_id, track_id):
    playlist_store.remove_track(g.identity, playlist_id, track_id)
    return "", 204


@me_api.route("/playlists/<playlist_id>/publish", methods=["POST"])
def publish_playlist(playlist_id):
    payload = parse_body(PublishRequest, required=False)
    playlist = playlist_store.set_public(g.identity, playlist_id, payload.is_public)
    return jsonify(playlist.model_dump())


# Register blueprints
app.register_blueprint(me_api)
app.register_blueprint(catalog_api)
app.register_blueprint(search_api)
app.register_blueprint(playlists_api)


# --- Error Handling ---

@app.errorhandler(Exception)
def handle_exception(error):
    if isinstance(error, PlaylistKitError):
        code = error.status_code
        message = error.message
        if code >= 500:
            logger.error("Request failed: %s", error, exc_info=error)
    elif isinstance(error, HTTPException):
        code = error.code or 500
        message = getattr(error, "description", str(error))
    else:
        # store and programming errors stay in the log, never in the response
        logger.error("Unhandled error on %s %s", request.method, request.path, exc_info=error)
        code = 500
        message = "Internal Server Error"

    return jsonify({"error": True, "message": message, "code": code}), code


def configure_logging(debug: bool = False) -> None:
    log_file = Path(config.LOG_DIR) / "playlistkit.log" if config.LOG_DIR else None
    set_logger(config.LOG_LEVEL, log_file=log_file, debug=debug)


if __name__ == "__main__":
    configure_logging(debug=True)
    port = int(os.getenv("PORT", "5000"))
    logger.warning("Starting playlistkit on http://127.0.0.1:%d", port)
    app.run(host="0.0.0.0", port=port, debug=True)
