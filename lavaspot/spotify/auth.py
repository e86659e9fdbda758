"""
Spotify client-credentials token management.

The catalog API needs a bearer token obtained by exchanging the
application's client id and secret at the accounts service. Tokens expire
(usually after one hour), so CredentialManager keeps one renewal task
running for as long as its owner lives: the task renews the token, sleeps
until the expiry boundary returned by Spotify, and renews again.

Lifecycle:
    manager = CredentialManager(session, client_id, client_secret)
    await manager.start()     # first renewal, raises on bad credentials
    header = manager.authorization_header   # "Bearer ..."
    ...
    await manager.close()     # cancels the renewal task

Failure Handling:
    - No access token in the response: the credentials are invalid. This
      is fatal; start() raises it, and when it happens inside the renewal
      loop it is stored and re-raised by every later header read.
    - Transport errors inside the loop: logged, retried after
      RENEWAL_RETRY_SECONDS. The previous token keeps being served.
    - A missing or zero expires_in never makes the loop spin: renewals
      are spaced at least RENEWAL_RETRY_SECONDS apart.
"""

import asyncio
import base64
import time
from dataclasses import dataclass

import aiohttp

from lavaspot.core.exceptions import SpotifyError
from lavaspot.core.logger import get_logger

logger = get_logger(__name__)


TOKEN_URL = "https://accounts.spotify.com/api/token"

# Delay before retrying a renewal that failed for a non-auth reason
RENEWAL_RETRY_SECONDS = 30.0


@dataclass(frozen=True)
class Credential:
    """
    A catalog API bearer token.

    Attributes:
        raw_token: The access token as returned by Spotify.
        expires_at_epoch_ms: Wall-clock expiry, in epoch milliseconds.
    """

    raw_token: str
    expires_at_epoch_ms: int

    @property
    def header_value(self) -> str:
        return f"Bearer {self.raw_token}"


class CredentialManager:
    """
    Holds the catalog bearer token and renews it at expiry.

    Attributes:
        _session: aiohttp session used for the token exchange.
        _authorization: base64("client_id:client_secret").
        _credential: Latest token, None before the first renewal.
        _fatal_error: Auth error raised by the renewal loop, if any.
        _renewal_task: The single background renewal task.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        client_id: str,
        client_secret: str,
        token_url: str = TOKEN_URL
    ) -> None:
        self._session = session
        self._token_url = token_url
        self._authorization = base64.b64encode(
            f"{client_id}:{client_secret}".encode("utf-8")
        ).decode("ascii")
        self._credential: Credential | None = None
        self._fatal_error: SpotifyError | None = None
        self._renewal_task: asyncio.Task | None = None

    @property
    def credential(self) -> Credential | None:
        return self._credential

    @property
    def authorization_header(self) -> str:
        """
        Value for the Authorization header of catalog requests.

        Read at request-send time so requests always use the latest token.

        Raises:
            SpotifyError: If the renewal loop hit an auth failure, or if no
                          token has been obtained yet.
        """
        if self._fatal_error is not None:
            raise self._fatal_error
        if self._credential is None:
            raise SpotifyError(
                "No Spotify access token available. Call start() first.",
                is_auth_error=True
            )
        return self._credential.header_value

    async def renew_token(self) -> int:
        """
        Exchange the client credentials for a new bearer token.

        Returns:
            The token's validity window in milliseconds.

        Raises:
            SpotifyError: With is_auth_error=True if the response has no
                          access token (invalid client). With
                          is_auth_error=False on transport or decoding
                          failures.
        """
        headers = {
            "Authorization": f"Basic {self._authorization}",
            "Content-Type": "application/x-www-form-urlencoded",
        }

        try:
            async with self._session.post(
                self._token_url,
                data="grant_type=client_credentials",
                headers=headers
            ) as response:
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise SpotifyError(
                f"Spotify token request failed: {e}",
                details={"url": self._token_url, "original_error": str(e)}
            ) from e

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not access_token:
            raise SpotifyError(
                "Invalid Spotify client.",
                details={"url": self._token_url, "response": payload},
                is_auth_error=True
            )

        try:
            expires_in_ms = int(payload.get("expires_in", 0)) * 1000
        except (TypeError, ValueError) as e:
            raise SpotifyError(
                f"Spotify token response has an invalid expires_in: {e}",
                details={"url": self._token_url, "expires_in": payload.get("expires_in")}
            ) from e
        self._credential = Credential(
            raw_token=access_token,
            expires_at_epoch_ms=int(time.time() * 1000) + expires_in_ms
        )
        logger.debug(f"Spotify token renewed, valid for {expires_in_ms // 1000}s")

        return expires_in_ms

    async def start(self) -> None:
        """
        Obtain the first token and start the renewal task.

        Raises:
            SpotifyError: If the first renewal fails. No task is started.
        """
        if self._renewal_task is not None:
            return

        delay_ms = await self.renew_token()
        self._renewal_task = asyncio.create_task(self._renew_forever(delay_ms))

    async def close(self) -> None:
        """Cancel the renewal task. Safe to call multiple times."""
        task, self._renewal_task = self._renewal_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _renew_forever(self, delay_ms: int) -> None:
        while True:
            # Never renew more often than the retry delay
            await asyncio.sleep(max(delay_ms / 1000, RENEWAL_RETRY_SECONDS))
            try:
                delay_ms = await self.renew_token()
            except SpotifyError as e:
                if e.is_auth_error:
                    logger.error(f"Spotify token renewal rejected: {e}")
                    self._fatal_error = e
                    return
                logger.warning(
                    f"Spotify token renewal failed: {e}. "
                    f"Retrying in {RENEWAL_RETRY_SECONDS:.0f}s"
                )
                delay_ms = int(RENEWAL_RETRY_SECONDS * 1000)
