"""Fake aiohttp objects and payload builders shared by the tests"""

from lavaspot.lavalink.models import SearchCandidate, TrackInfo


class FakeResponse:
    """Stand-in for an aiohttp response used as `async with session.get(...)`"""

    def __init__(self, status=200, payload=None, text="", json_error=None):
        self.status = status
        self.payload = payload
        self._text = text
        self.json_error = json_error

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def json(self, content_type="application/json"):
        if self.json_error is not None:
            raise self.json_error
        return self.payload

    async def text(self):
        return self._text


class FakeSession:
    """
    Stand-in for aiohttp.ClientSession.

    Responses are either queued in order, or produced by a handler called
    with (method, url, kwargs). A queued exception is raised at call time,
    like a connection error would be.
    """

    def __init__(self, responses=None, handler=None):
        self.responses = list(responses or [])
        self.handler = handler
        self.calls = []
        self.closed = False

    def _next(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.handler is not None:
            response = self.handler(method, url, kwargs)
        else:
            response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)

    async def close(self):
        self.closed = True


def make_candidate(title="Song X", author="Artist A - Topic", length=200000, identifier="abc"):
    """Build a SearchCandidate with the given metadata"""
    return SearchCandidate(
        track=f"QAAA{identifier}",
        info=TrackInfo(
            identifier=identifier,
            is_seekable=True,
            author=author,
            length=length,
            is_stream=False,
            position=0,
            title=title,
            uri=f"https://www.youtube.com/watch?v={identifier}",
        ),
    )


def lavalink_track(title="Song X", author="Artist A - Topic", length=200000, identifier="abc"):
    """Raw /loadtracks entry as returned by a Lavalink v3 node"""
    return {
        "track": f"QAAA{identifier}",
        "info": {
            "identifier": identifier,
            "isSeekable": True,
            "author": author,
            "length": length,
            "isStream": False,
            "position": 0,
            "title": title,
            "uri": f"https://www.youtube.com/watch?v={identifier}",
        },
    }


def spotify_track(name="Song X", artist="Artist A", duration_ms=200000, track_id="track1"):
    """Raw Spotify track object"""
    return {
        "id": track_id,
        "name": name,
        "artists": [{"id": f"{artist}-id", "name": artist}],
        "duration_ms": duration_ms,
    }


