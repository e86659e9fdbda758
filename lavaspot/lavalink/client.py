"""
Async client for a Lavalink node's search endpoint.

The node is consumed as an opaque ranked-list API: a query string goes in,
an ordered list of candidate tracks comes out. Only the YouTube search
prefix is used.

Request:
    GET http://{host}:{port}/loadtracks?identifier=ytsearch: <query>
    Authorization: <node password>

Response (Lavalink v3):
    {"loadType": "SEARCH_RESULT", "tracks": [{"track": "...", "info": {...}}]}

Throttling:
    When requests_per_second is set, every search passes through an
    asyncio-throttle Throttler so bulk conversions don't flood the node
    (and the node doesn't flood YouTube).
"""

import asyncio
from typing import Any

import aiohttp
from asyncio_throttle import Throttler

from lavaspot.core.exceptions import LavalinkError
from lavaspot.core.logger import get_logger
from lavaspot.lavalink.models import Node, SearchCandidate

logger = get_logger(__name__)


SEARCH_PREFIX = "ytsearch: "
LOAD_FAILED = "LOAD_FAILED"


class NodeClient:
    """
    Search client bound to a single Lavalink node.

    Attributes:
        node: The node searched by this client.
        _session: Shared aiohttp session.
        _throttler: Optional rate limiter for search requests.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        node: Node,
        requests_per_second: float | None = None
    ) -> None:
        self.node = node
        self._session = session
        self._throttler = (
            Throttler(rate_limit=requests_per_second, period=1.0)
            if requests_per_second else None
        )

    async def load_tracks(self, query: str) -> list[SearchCandidate]:
        """
        Search the node and return its candidates in provider order.

        Args:
            query: Free-text search query (without the ytsearch prefix).

        Returns:
            List of SearchCandidate, possibly empty.

        Raises:
            LavalinkError: On connection failure, timeout, non-2xx status,
                           non-JSON body, a payload without a 'tracks' list,
                           or a LOAD_FAILED result.
        """
        if self._throttler is None:
            payload = await self._request(query)
        else:
            async with self._throttler:
                payload = await self._request(query)

        details = {"query": query, "node": self.node.address}

        if payload.get("loadType") == LOAD_FAILED:
            exception = payload.get("exception") or {}
            message = exception.get("message", "unknown error") if isinstance(exception, dict) else str(exception)
            raise LavalinkError(
                f"Lavalink search failed: {message}",
                details=dict(details, load_type=LOAD_FAILED)
            )

        tracks = payload.get("tracks")
        if not isinstance(tracks, list):
            raise LavalinkError(
                "Malformed Lavalink response: missing 'tracks' list",
                details=details
            )

        return [
            SearchCandidate.from_lavalink_api(item)
            for item in tracks
            if isinstance(item, dict)
        ]

    async def _request(self, query: str) -> dict[str, Any]:
        url = f"{self.node.base_url}/loadtracks"
        details = {"query": query, "node": self.node.address}

        try:
            async with self._session.get(
                url,
                params={"identifier": f"{SEARCH_PREFIX}{query}"},
                headers={"Authorization": self.node.password}
            ) as response:
                if response.status >= 400:
                    raise LavalinkError(
                        f"Lavalink node returned HTTP {response.status}",
                        details=dict(details, http_status=response.status)
                    )
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise LavalinkError(
                f"Lavalink request failed: {e}",
                details=dict(details, original_error=str(e))
            ) from e

        if not isinstance(payload, dict):
            raise LavalinkError(
                "Malformed Lavalink response: expected a JSON object",
                details=details
            )
        return payload
