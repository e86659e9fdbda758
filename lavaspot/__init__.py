"""
lavaspot: Resolve Spotify tracks, albums and playlists into Lavalink tracks.

This package reads track metadata from the Spotify Web API and finds a
playable equivalent for each track on a Lavalink audio node, using a
pluggable candidate selection policy.

Architecture:
    spotify/    - Client-credentials token renewal, catalog client, models
    lavalink/   - Node search client, matcher, selection policies, models
    resolver.py - TrackResolver, the public entry point
    core/       - Configuration, logging, exceptions
    utils/      - Spotify URL/URI parsing, formatting helpers
    cli.py      - Command-line interface

Usage:
    Python API:
        import asyncio
        from lavaspot import Node, SelectionPolicy, TrackResolver

        async def main():
            node = Node(host="localhost", port=2333, password="youshallnotpass")
            async with TrackResolver(node, client_id, client_secret) as resolver:
                candidates = await resolver.get_playlist_tracks(
                    "37i9dQZF1DXcBWIGoYBM5M",
                    convert=True,
                    policy=SelectionPolicy(prioritize_same_duration=True)
                )
                for candidate in candidates:
                    if candidate is not None:
                        print(candidate.info.title, candidate.track)

        asyncio.run(main())

    Command Line:
        lavaspot "https://open.spotify.com/playlist/..." --convert

Dependencies:
    - aiohttp: HTTP client for both APIs
    - asyncio-throttle: Optional node search throttling
    - rapidfuzz: Similarity scoring for the bundled policy
    - pyyaml, python-dotenv: Configuration
    - rich-click: CLI
    - tqdm: Console logging alongside progress output
"""

__version__ = "0.1.0"
__author__ = "lavaspot"
__license__ = "MIT"

# Convenience imports for common usage
from lavaspot.core import (
    Config,
    ConfigError,
    InvalidReferenceError,
    InvalidTypeError,
    LavalinkError,
    LavaspotError,
    MissingReferenceError,
    ResolverStateError,
    SpotifyError,
    get_logger,
    load_config,
    setup_logging,
)
from lavaspot.lavalink import (
    DEFAULT_POLICY,
    Matcher,
    Node,
    SearchCandidate,
    SelectionPolicy,
    TrackInfo,
    closest_duration,
    similarity_policy,
)
from lavaspot.resolver import TrackResolver
from lavaspot.spotify import Artist, CatalogTrack

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "setup_logging",
    "get_logger",
    # Exceptions
    "LavaspotError",
    "ConfigError",
    "MissingReferenceError",
    "InvalidTypeError",
    "InvalidReferenceError",
    "SpotifyError",
    "LavalinkError",
    "ResolverStateError",
    # Models
    "Artist",
    "CatalogTrack",
    "Node",
    "SearchCandidate",
    "TrackInfo",
    # Matching
    "Matcher",
    "SelectionPolicy",
    "DEFAULT_POLICY",
    "closest_duration",
    "similarity_policy",
    # Resolver
    "TrackResolver",
]
