"""
Command line entry point.

Server commands (``init-db``, ``seed``, ``issue-token``, ``serve``) operate on
the local service modules; client commands talk to a running service
through ``PlaylistApiClient``.
"""

# Standard library imports
import asyncio
from pathlib import Path
from typing import Optional

# Third-party imports
import click
from dotenv import load_dotenv

# Local/package imports
from .client.actions import copy_into_new_playlist
from .client.api import PlaylistApiClient
from .config import get_config
from .core.exceptions import PlaylistKitError
from .core.types import parse_export_document
from .utils.logger import get_logger, set_logger
from .utils.storage import dump_json, load_json_file, save_json_atomically

logger = get_logger(__name__)


def _fail(error: Exception) -> None:
    logger.debug("Command failed", exc_info=error)
    click.secho(f"✗ {error}", fg="red", err=True)
    raise click.Abort() from error


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--verbose", is_flag=True, help="Enable info logging")
@click.option("--log-dir", type=click.Path(file_okay=False), help="Directory for log files")
def cli(debug: bool = False, verbose: bool = False, log_dir: Optional[str] = None):
    """playlistkit service and client tools."""
    load_dotenv()
    config = get_config(force_refresh=True)
    log_root = Path(log_dir) if log_dir else config.log_dir
    set_logger(
        log_file=log_root / "playlistkit-cli.log" if log_root else None,
        verbose=verbose or config.verbose,
        debug=debug or config.debug,
    )


# --- server commands ---

@cli.command("init-db")
def init_db():
    """Create the database tables."""
    import config as server_config
    import database

    database.init_db()
    click.echo(f"Database ready at {server_config.DB_PATH}")


@cli.command()
@click.argument("catalog_file", type=click.Path(exists=True, dir_okay=False))
def seed(catalog_file: str):
    """Load artists, albums and tracks from CATALOG_FILE."""
    import database

    database.init_db()
    try:
        counts = database.seed_catalog(load_json_file(catalog_file))
    except (KeyError, ValueError, TypeError) as e:
        _fail(ValueError(f"Invalid catalog file: {e}"))
    click.echo(
        f"Loaded {counts['artists']} artists, {counts['albums']} albums, {counts['tracks']} tracks"
    )


@cli.command("issue-token")
@click.argument("subject")
def issue_token(subject: str):
    """Mint a development bearer token for SUBJECT."""
    from services.identity import SignedTokenVerifier

    click.echo(SignedTokenVerifier().issue(subject))


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=5000, show_default=True, type=int)
@click.option("--debug", "flask_debug", is_flag=True, help="Run Flask in debug mode")
def serve(host: str, port: int, flask_debug: bool):
    """Run the HTTP service."""
    from app import app, configure_logging

    configure_logging(debug=flask_debug)
    app.run(host=host, port=port, debug=flask_debug)


# --- client commands ---

def _client(token: Optional[str]) -> PlaylistApiClient:
    return PlaylistApiClient(token=token)


@cli.command()
@click.argument("term")
@click.option("--token", envvar="PLAYLISTKIT_TOKEN", help="Bearer token")
def search(term: str, token: Optional[str]):
    """Search artists, tracks and playlists for TERM."""

    async def _run():
        async with _client(token) as client:
            return await client.search(term)

    try:
        result = asyncio.run(_run())
    except PlaylistKitError as e:
        _fail(e)
    click.echo(dump_json(result.model_dump()))


@cli.command()
@click.argument("playlist_id")
@click.option("--out", "out_path", type=click.Path(dir_okay=False), help="Write to this file")
@click.option("--token", envvar="PLAYLISTKIT_TOKEN", help="Bearer token")
def export(playlist_id: str, out_path: Optional[str], token: Optional[str]):
    """Download the export document of PLAYLIST_ID."""

    async def _run():
        async with _client(token) as client:
            return await client.export(playlist_id)

    try:
        document = asyncio.run(_run())
    except PlaylistKitError as e:
        _fail(e)

    if out_path is None:
        out_path = document.filename
    save_json_atomically(out_path, document.model_dump())
    click.echo(f"Saved {len(document.tracks)} tracks to {out_path}")


@cli.command()
@click.argument("export_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--name", help="Name of the new playlist (defaults to the exported name)")
@click.option("--token", envvar="PLAYLISTKIT_TOKEN", required=True, help="Bearer token")
def copy(export_file: str, name: Optional[str], token: str):
    """Copy the tracks of an exported playlist into a new playlist."""
    try:
        document = parse_export_document(Path(export_file).read_bytes())
    except ValueError as e:
        _fail(ValueError(f"Invalid export document: {e}"))

    async def _run():
        async with _client(token) as client:
            return await copy_into_new_playlist(
                client, name or document.name, [t.id for t in document.tracks]
            )

    try:
        report = asyncio.run(_run())
    except PlaylistKitError as e:
        _fail(e)

    click.echo(f"Playlist {report.target_id}: {report.summary()}")
    for track_id, message in report.failed.items():
        click.secho(f"  {track_id}: {message}", fg="yellow", err=True)


if __name__ == "__main__":
    cli()
