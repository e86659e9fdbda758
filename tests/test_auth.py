"""Test Spotify token management"""

import asyncio
import base64

import aiohttp
import pytest

from lavaspot.core.exceptions import SpotifyError
from lavaspot.spotify import auth
from lavaspot.spotify.auth import TOKEN_URL, Credential, CredentialManager
from tests.helpers import FakeResponse, FakeSession


def token_response(token="tok", expires_in=3600):
    return FakeResponse(payload={"access_token": token, "token_type": "Bearer", "expires_in": expires_in})


def sequence_handler(*responses):
    """Handler returning the given responses, repeating the last one forever"""
    remaining = list(responses)

    def handler(method, url, kwargs):
        if len(remaining) > 1:
            return remaining.pop(0)
        return remaining[0]

    return handler


async def let_task_run(iterations=10):
    for _ in range(iterations):
        await asyncio.sleep(0)


class TestCredential:
    """Test the token value object"""

    def test_header_value(self):
        """Header is the raw token with the Bearer scheme"""
        assert Credential("abc", 0).header_value == "Bearer abc"


class TestRenewToken:
    """Test the client-credentials exchange"""

    @pytest.mark.asyncio
    async def test_exchange_request(self):
        """Client id and secret are sent as HTTP Basic auth"""
        session = FakeSession([token_response()])
        manager = CredentialManager(session, "my_id", "my_secret")

        await manager.renew_token()

        method, url, kwargs = session.calls[0]
        expected = base64.b64encode(b"my_id:my_secret").decode("ascii")
        assert method == "POST"
        assert url == TOKEN_URL
        assert kwargs["data"] == "grant_type=client_credentials"
        assert kwargs["headers"]["Authorization"] == f"Basic {expected}"
        assert kwargs["headers"]["Content-Type"] == "application/x-www-form-urlencoded"

    @pytest.mark.asyncio
    async def test_success(self):
        """Token is stored and the validity window returned in ms"""
        manager = CredentialManager(FakeSession([token_response("tok", 3600)]), "id", "secret")

        delay_ms = await manager.renew_token()

        assert delay_ms == 3600000
        assert manager.credential.raw_token == "tok"
        assert manager.authorization_header == "Bearer tok"

    @pytest.mark.asyncio
    async def test_invalid_client(self):
        """No access token means invalid credentials"""
        response = FakeResponse(status=400, payload={"error": "invalid_client"})
        manager = CredentialManager(FakeSession([response]), "id", "bad")

        with pytest.raises(SpotifyError, match="Invalid Spotify client.") as exc_info:
            await manager.renew_token()

        assert exc_info.value.is_auth_error

    @pytest.mark.asyncio
    async def test_transport_error(self):
        """Connection failures are not auth errors"""
        manager = CredentialManager(
            FakeSession([aiohttp.ClientConnectionError("down")]), "id", "secret"
        )

        with pytest.raises(SpotifyError) as exc_info:
            await manager.renew_token()

        assert not exc_info.value.is_auth_error

    @pytest.mark.asyncio
    async def test_missing_expires_in(self):
        """A response without expires_in gives a zero validity window"""
        response = FakeResponse(payload={"access_token": "tok", "token_type": "Bearer"})
        manager = CredentialManager(FakeSession([response]), "id", "secret")

        assert await manager.renew_token() == 0
        assert manager.authorization_header == "Bearer tok"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("expires_in", ["soon", None, [3600]])
    async def test_invalid_expires_in(self, expires_in):
        """A non-numeric expires_in is a SpotifyError, not a ValueError"""
        manager = CredentialManager(FakeSession([token_response(expires_in=expires_in)]), "id", "secret")

        with pytest.raises(SpotifyError, match="expires_in") as exc_info:
            await manager.renew_token()

        assert not exc_info.value.is_auth_error
        assert exc_info.value.details["expires_in"] == expires_in

    def test_header_before_first_token(self):
        """Reading the header before start() fails"""
        manager = CredentialManager(FakeSession(), "id", "secret")

        with pytest.raises(SpotifyError):
            manager.authorization_header


class TestRenewalTask:
    """Test the background renewal lifecycle"""

    @pytest.mark.asyncio
    async def test_start_and_close(self):
        """start() runs one renewal task, close() cancels it"""
        manager = CredentialManager(FakeSession([token_response()]), "id", "secret")

        await manager.start()
        task = manager._renewal_task

        assert task is not None and not task.done()
        assert manager.authorization_header == "Bearer tok"

        await manager.close()

        assert task.cancelled()
        assert manager._renewal_task is None
        await manager.close()

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self):
        """A second start() neither renews nor spawns another task"""
        session = FakeSession([token_response()])
        manager = CredentialManager(session, "id", "secret")

        await manager.start()
        task = manager._renewal_task
        await manager.start()

        assert manager._renewal_task is task
        assert len(session.calls) == 1
        await manager.close()

    @pytest.mark.asyncio
    async def test_start_failure_starts_no_task(self):
        """Bad credentials raise from start() and no task is left running"""
        manager = CredentialManager(FakeSession([FakeResponse(payload={})]), "id", "bad")

        with pytest.raises(SpotifyError):
            await manager.start()

        assert manager._renewal_task is None

    @pytest.mark.asyncio
    async def test_renews_at_expiry(self, monkeypatch):
        """The token is replaced once the validity window elapses"""
        monkeypatch.setattr(auth, "RENEWAL_RETRY_SECONDS", 0)
        session = FakeSession(handler=sequence_handler(
            token_response("first", expires_in=0),
            token_response("second", expires_in=3600),
        ))
        manager = CredentialManager(session, "id", "secret")

        await manager.start()
        await let_task_run()

        assert manager.authorization_header == "Bearer second"
        assert len(session.calls) == 2
        await manager.close()

    @pytest.mark.asyncio
    async def test_transport_failure_is_retried(self, monkeypatch):
        """A failed renewal is retried and the old token keeps working meanwhile"""
        monkeypatch.setattr(auth, "RENEWAL_RETRY_SECONDS", 0)
        session = FakeSession(handler=sequence_handler(
            token_response("first", expires_in=0),
            aiohttp.ClientConnectionError("down"),
            token_response("third", expires_in=3600),
        ))
        manager = CredentialManager(session, "id", "secret")

        await manager.start()
        await let_task_run()

        assert manager.authorization_header == "Bearer third"
        await manager.close()

    @pytest.mark.asyncio
    async def test_auth_failure_is_fatal(self, monkeypatch):
        """A rejected renewal stops the loop and poisons the header"""
        monkeypatch.setattr(auth, "RENEWAL_RETRY_SECONDS", 0)
        session = FakeSession(handler=sequence_handler(
            token_response("first", expires_in=0),
            FakeResponse(payload={"error": "invalid_client"}),
        ))
        manager = CredentialManager(session, "id", "secret")

        await manager.start()
        await let_task_run()

        assert manager._renewal_task.done()
        with pytest.raises(SpotifyError) as exc_info:
            manager.authorization_header
        assert exc_info.value.is_auth_error
        await manager.close()

    @pytest.mark.asyncio
    async def test_zero_expiry_waits_retry_delay(self):
        """A token without a validity window is not renewed in a tight loop"""
        session = FakeSession(handler=sequence_handler(
            FakeResponse(payload={"access_token": "tok"}),
        ))
        manager = CredentialManager(session, "id", "secret")

        await manager.start()
        await let_task_run()

        assert len(session.calls) == 1
        assert not manager._renewal_task.done()
        await manager.close()

    @pytest.mark.asyncio
    async def test_invalid_expires_in_is_retried(self, monkeypatch):
        """A malformed renewal response is retried like a transport failure"""
        monkeypatch.setattr(auth, "RENEWAL_RETRY_SECONDS", 0)
        session = FakeSession(handler=sequence_handler(
            token_response("first", expires_in=0),
            token_response("second", expires_in="soon"),
            token_response("third", expires_in=3600),
        ))
        manager = CredentialManager(session, "id", "secret")

        await manager.start()
        await let_task_run()

        assert manager.authorization_header == "Bearer third"
        assert not manager._renewal_task.done()
        await manager.close()
