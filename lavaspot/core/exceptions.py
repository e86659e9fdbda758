"""
Exception classes for lavaspot.

This module defines all custom exceptions used throughout the library.
Each exception carries a human-readable message and an optional
details dictionary, so callers can log structured context.

Exception Hierarchy:
    LavaspotError (base)
        ConfigError - Configuration file or environment issues
        MissingReferenceError - A required id, track or field was not provided
        InvalidTypeError - An id, track or field has the wrong type
        InvalidReferenceError - A Spotify URL/URI could not be parsed
        SpotifyError - Spotify Web API or token endpoint issues
        LavalinkError - Audio node search issues
        ResolverStateError - Resolver used before start() or after close()

Caller-input errors (MissingReferenceError, InvalidTypeError,
InvalidReferenceError) also inherit from the matching builtin
(ValueError / TypeError) so plain ``except TypeError`` keeps working.
"""


class LavaspotError(Exception):
    """
    Base exception for all lavaspot errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (ids, URLs,
                 HTTP status codes, the wrapped error).

    Example:
        try:
            await resolver.get_track(track_id, convert=True)
        except LavaspotError as e:
            logger.error(f"Resolution failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional context.
                     Common keys include:
                     - 'track_id' / 'album_id' / 'playlist_id'
                     - 'url': URL that caused the error
                     - 'http_status': Status code returned by the remote API
                     - 'original_error': The underlying exception message
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(LavaspotError):
    """
    Raised when there's an issue with the configuration.

    This is a CRITICAL error that should stop program execution.

    Common causes:
        - config.yaml has invalid YAML syntax
        - Required fields missing from both the file and the environment
        - Invalid field values (e.g., a non-numeric port)
    """
    pass


class MissingReferenceError(LavaspotError, ValueError):
    """
    Raised when a required identifier, track or track field is missing.

    Always raised before any network call is made. Never retried.

    Example:
        raise MissingReferenceError(
            "The playlist ID was not provided",
            details={"kind": "playlist"}
        )
    """
    pass


class InvalidTypeError(LavaspotError, TypeError):
    """
    Raised when an identifier, track or track field has the wrong type.

    Always raised before any network call is made. Never retried.
    """
    pass


class InvalidReferenceError(LavaspotError, ValueError):
    """Raised when a Spotify URL or URI cannot be mapped to a supported entity."""
    pass


class SpotifyError(LavaspotError):
    """
    Raised when there's an issue with the Spotify Web API.

    Can be CRITICAL (auth failure) or NON-CRITICAL (single request failure).

    Common causes:
        - Invalid client credentials, no access token returned (CRITICAL)
        - Rate limiting (HTTP 429)
        - Track/album/playlist not found or private
        - Network connectivity issues
        - Malformed (non-JSON) response body

    Attributes:
        is_auth_error: True if this is an authentication error (CRITICAL).
        is_rate_limit: True if this is a rate limit error.
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        is_auth_error: bool = False,
        is_rate_limit: bool = False
    ) -> None:
        """
        Initialize Spotify error with additional flags.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
            is_auth_error: Set to True if this is an authentication failure.
                          Authentication errors are fatal to the resolver.
            is_rate_limit: Set to True if this is a rate limit error.
        """
        super().__init__(message, details)
        self.is_auth_error = is_auth_error
        self.is_rate_limit = is_rate_limit


class LavalinkError(LavaspotError):
    """
    Raised when there's an issue searching the Lavalink audio node.

    NON-CRITICAL for bulk conversions: the failing item resolves to None
    and the other items carry on. Single-track conversions propagate it.

    Common causes:
        - Node unreachable or wrong host/port
        - Wrong node password (HTTP 401/403)
        - Node returned a LOAD_FAILED result
        - Malformed response body

    Example:
        raise LavalinkError(
            "Lavalink search failed: LOAD_FAILED",
            details={"query": query, "node": "localhost:2333"}
        )
    """
    pass


class ResolverStateError(LavaspotError):
    """
    Raised when a TrackResolver is used before start() or after close().

    A programming error in the caller. No request has been made.
    """
    pass
