"""
Command-line interface for lavaspot.

This module implements the CLI using Click. rich-click is used for the
help output colors.

Commands:
    lavaspot <reference>                     List the Spotify tracks
    lavaspot <reference> --convert           Match every track on the node
    lavaspot <reference> --convert --smart   Match with the similarity policy

Options:
    --prioritize-duration / --no-prioritize-duration
                                Take the first candidate within 1.5s of
                                the Spotify duration before filter/sort
    --config <path>             Path to config.yaml
    --verbose                   Show matching decisions (DEBUG)

Usage:
    lavaspot "https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M"
    lavaspot "spotify:album:1DFixLWuPkv3KT3TnV35m3" --convert --smart

Configuration:
    Reads config.yaml from the current directory (or --config) with the
    Spotify credentials and the Lavalink node. Credentials can also come
    from SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET / LAVALINK_* variables.
"""

import asyncio
import sys
from pathlib import Path

import rich_click as click

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.MAX_WIDTH = 100

from lavaspot.core import (
    Config,
    LavaspotError,
    get_logger,
    load_config,
    log_match_failure,
    setup_logging,
    shutdown_logging,
)
from lavaspot.core.logger import format_matched_message, format_no_match_message
from lavaspot.lavalink import Node, SelectionPolicy, similarity_policy
from lavaspot.resolver import TrackResolver
from lavaspot.spotify import CatalogTrack
from lavaspot.utils import format_duration

logger = get_logger(__name__)


__version__ = "0.1.0"


@click.command()
@click.argument("reference", required=False, metavar="<spotify-url-or-uri>")
@click.option(
    "--convert",
    is_flag=True,
    help="Match every track on the Lavalink node"
)
@click.option(
    "--prioritize-duration/--no-prioritize-duration",
    default=None,
    help="Prefer the first candidate with the same duration (±1.5s)"
)
@click.option(
    "--smart/--no-smart",
    default=None,
    help="Rank candidates by title/artist similarity"
)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default: ./config.yaml)"
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show matching details"
)
@click.option(
    "--version",
    is_flag=True,
    help="Show version and exit."
)
def cli(
    reference: str | None,
    convert: bool,
    prioritize_duration: bool | None,
    smart: bool | None,
    config_path: Path | None,
    verbose: bool,
    version: bool
) -> None:
    """
    [bold]lavaspot[/bold] - Resolve Spotify tracks, albums and playlists on a Lavalink node.
    """
    if version:
        click.echo(f"lavaspot {__version__}")
        return

    if not reference:
        raise click.UsageError("Missing Spotify URL or URI.")

    try:
        config = load_config(config_path)
        setup_logging(config.log_directory, verbose=verbose)

        policy = _build_policy(config, prioritize_duration, smart)
        asyncio.run(_run(config, reference, convert, policy))

    except LavaspotError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.debug(f"Details: {e.details}")
        sys.exit(1)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)

    finally:
        shutdown_logging()


def _build_policy(
    config: Config,
    prioritize_duration: bool | None,
    smart: bool | None
) -> SelectionPolicy:
    """
    Combine CLI flags with configuration defaults.

    Flags that were not given on the command line (None) fall back to the
    matching section of the configuration.
    """
    if prioritize_duration is None:
        prioritize_duration = config.matching.prioritize_same_duration
    if smart is None:
        smart = config.matching.smart

    if smart:
        return similarity_policy(prioritize_same_duration=prioritize_duration)
    return SelectionPolicy(prioritize_same_duration=prioritize_duration)


async def _run(
    config: Config,
    reference: str,
    convert: bool,
    policy: SelectionPolicy
) -> None:
    node = Node(
        host=config.lavalink.host,
        port=config.lavalink.port,
        password=config.lavalink.password
    )

    async with TrackResolver(
        node,
        config.spotify.client_id,
        config.spotify.client_secret,
        requests_per_second=config.lavalink.requests_per_second,
        timeout=config.http_timeout
    ) as resolver:
        result = await resolver.resolve(reference)
        tracks = result if isinstance(result, list) else [result]

        if not convert:
            for position, track in enumerate(tracks, start=1):
                click.echo(_format_track_line(position, track))
            return

        logger.info(f"Matching {len(tracks)} tracks on {node.address}")
        candidates = await resolver.convert_tracks(tracks, policy)

    matched = 0
    for track, candidate in zip(tracks, candidates):
        if track is None:
            continue
        if candidate is None:
            log_match_failure(
                logger,
                track_name=track.name or "",
                artist=track.primary_artist,
                track_ref=track.spotify_uri,
                reason="no candidate selected"
            )
            click.echo(format_no_match_message(track.primary_artist, track.name, "no candidate selected"))
            continue
        matched += 1
        click.echo(format_matched_message(track.primary_artist, track.name, candidate.uri))

    logger.info(f"Matched {matched}/{len(tracks)} tracks")


def _format_track_line(position: int, track: CatalogTrack | None) -> str:
    if track is None:
        return f"{position:>4}. (unavailable)"
    return (
        f"{position:>4}. {track.primary_artist} - {track.name} "
        f"({format_duration(track.duration_ms)})"
    )


def main() -> None:
    """Entry point for the `lavaspot` console script."""
    cli()


if __name__ == "__main__":
    main()
