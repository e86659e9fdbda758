"""
Core module for lavaspot.

This module provides the foundational components used throughout the library:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with console and file outputs

Usage:
    from lavaspot.core import (
        Config, load_config,
        setup_logging, get_logger,
        LavaspotError, SpotifyError, LavalinkError
    )
"""

from lavaspot.core.config import (
    Config,
    LavalinkConfig,
    MatchingConfig,
    SpotifyConfig,
    load_config,
)
from lavaspot.core.exceptions import (
    ConfigError,
    InvalidReferenceError,
    InvalidTypeError,
    LavalinkError,
    LavaspotError,
    MissingReferenceError,
    ResolverStateError,
    SpotifyError,
)
from lavaspot.core.logger import (
    get_logger,
    log_match_failure,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "SpotifyConfig",
    "LavalinkConfig",
    "MatchingConfig",
    "load_config",
    # Exceptions
    "LavaspotError",
    "ConfigError",
    "MissingReferenceError",
    "InvalidTypeError",
    "InvalidReferenceError",
    "SpotifyError",
    "LavalinkError",
    "ResolverStateError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_match_failure",
    "shutdown_logging",
]
