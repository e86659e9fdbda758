"""
Lavalink integration module for lavaspot.

This module provides matching of Spotify tracks to search results of a
Lavalink audio node:
    - Node, SearchCandidate, TrackInfo: data models
    - NodeClient: async client for the node's search endpoint
    - Matcher: picks the best candidate for a Spotify track
    - SelectionPolicy and bundled policies

Usage:
    from lavaspot.lavalink import Matcher, Node, NodeClient, SelectionPolicy

    node_client = NodeClient(session, Node("localhost", 2333, "youshallnotpass"))
    matcher = Matcher(node_client)
    candidate = await matcher.fetch_track(track, SelectionPolicy(prioritize_same_duration=True))
"""

from lavaspot.lavalink.client import NodeClient
from lavaspot.lavalink.matcher import (
    SAME_DURATION_TOLERANCE_MS,
    Matcher,
    build_search_query,
    select_candidate,
    validate_catalog_track,
)
from lavaspot.lavalink.models import Node, SearchCandidate, TrackInfo
from lavaspot.lavalink.policy import (
    DEFAULT_POLICY,
    SelectionPolicy,
    accept_all,
    closest_duration,
    keep_order,
    similarity_policy,
)

__all__ = [
    # Models
    "Node",
    "SearchCandidate",
    "TrackInfo",
    # Client
    "NodeClient",
    # Matcher
    "Matcher",
    "SAME_DURATION_TOLERANCE_MS",
    "build_search_query",
    "select_candidate",
    "validate_catalog_track",
    # Policies
    "SelectionPolicy",
    "DEFAULT_POLICY",
    "accept_all",
    "keep_order",
    "closest_duration",
    "similarity_policy",
]
