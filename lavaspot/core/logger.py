"""
Logging configuration for lavaspot.

This module sets up the logging system with multiple outputs:
    - Console: Colored, tqdm-compatible messages
    - log_full_{timestamp}.log: Complete log of all events (DEBUG and above)
    - log_errors_{timestamp}.log: Only ERROR and CRITICAL level messages
    - match_failures_{timestamp}.log: Spotify tracks without a Lavalink match

File outputs are only created when a log directory is configured; the
library itself never calls setup_logging(), it only obtains loggers.

Usage:
    from lavaspot.core.logger import setup_logging, get_logger

    setup_logging(log_dir)  # Call once at startup (CLI does this)
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Resolving playlist")
    log_match_failure(logger, "Song", "Artist", "spotify:track:xxx", "No results")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


# Log file name prefixes (created in the log directory)
LOG_FULL_PREFIX = "log_full"
LOG_ERRORS_PREFIX = "log_errors"
MATCH_FAILURES_PREFIX = "match_failures"

# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty at DEBUG
NOISY_LOGGERS = ("aiohttp.access", "aiohttp.client", "asyncio")


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Formatter that colors the level name of console output.

    Colors:
        - DEBUG: Blue
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bold Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        colored_levelname = f"{color}{record.levelname}{Colors.RESET}"
        return f"{colored_levelname}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to console without breaking tqdm progress bars.

    tqdm progress bars redraw in place on stderr; writing through
    tqdm.write() makes messages appear above any active bar.

    Attributes:
        stream: The output stream (defaults to sys.stderr).
    """

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


class MatchFailedTrackHandler(logging.Handler):
    """
    Handler that captures tracks without a match for the failure report file.

    Writes records logged through log_match_failure() to
    match_failures_{timestamp}.log in a simple, human-readable format:

        Artist Name - Song Title
        spotify:track:xxxxx
        Reason: No candidates returned by the node

    The handler looks for specific extra fields in log records:
        - 'match_failed_track_name': The name of the track
        - 'match_failed_track_artist': The artist name
        - 'match_failed_track_ref': The Spotify id/URL/URI (may be empty)
        - 'match_failed_reason': Why no candidate was selected

    Only records containing these fields are written to the report.

    Attributes:
        report_path: Path to the report file.
        report_file: Open file handle (None until open() is called).
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """Open the report file for writing (overwrites existing content)."""
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        if not hasattr(record, "match_failed_track_name"):
            return

        if self.report_file is None:
            return

        try:
            track_name = getattr(record, "match_failed_track_name", "Unknown")
            artist = getattr(record, "match_failed_track_artist", "Unknown")
            ref = getattr(record, "match_failed_track_ref", "")
            reason = getattr(record, "match_failed_reason", "")

            self.report_file.write(f"{artist} - {track_name}\n")
            if ref:
                self.report_file.write(f"{ref}\n")
            self.report_file.write(f"Reason: {reason}\n\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """Close the report file handle. Safe to call multiple times."""
        if self.report_file is not None:
            try:
                self.report_file.close()
            except OSError:
                pass
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """
    Filter that only allows ERROR and CRITICAL level records.

    Used by the error log file handler to exclude DEBUG, INFO, and WARNING.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(log_dir: Path | None = None, verbose: bool = False) -> None:
    """
    Configure the logging system for the application.

    This function should be called ONCE at application startup, after
    the configuration is loaded. Library users embedding lavaspot are free
    to configure logging their own way instead.

    Args:
        log_dir: Directory where log files will be created, or None to log
                 to the console only. Created if it doesn't exist.
        verbose: If True, the console shows DEBUG messages (matching
                 decisions, search queries). Otherwise INFO and above.

    Behavior:
        1. Configure root logger level to DEBUG and remove old handlers
        2. Add the colored tqdm-compatible console handler
        3. If log_dir is given, add timestamped full/error log files and
           the match failures report
        4. Quiet chatty third-party loggers
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if log_dir is None:
        return

    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    # Full log file handler
    full_handler = logging.FileHandler(
        log_dir / f"{LOG_FULL_PREFIX}_{timestamp}.log", mode="w", encoding="utf-8"
    )
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    root_logger.addHandler(full_handler)

    # Error-only log file handler
    error_handler = logging.FileHandler(
        log_dir / f"{LOG_ERRORS_PREFIX}_{timestamp}.log", mode="w", encoding="utf-8"
    )
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    # Match failures report
    match_handler = MatchFailedTrackHandler(
        log_dir / f"{MATCH_FAILURES_PREFIX}_{timestamp}.log"
    )
    match_handler.open()
    root_logger.addHandler(match_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.
              This creates a hierarchy like 'lavaspot.lavalink.matcher'.

    Returns:
        logging.Logger: A logger instance configured by setup_logging().
    """
    return logging.getLogger(name)


def format_matched_message(artist: str, name: str, uri: str) -> str:
    """Format a colored 'Matched' console line."""
    return (
        f"{Colors.GREEN}Matched{Colors.RESET}: "
        f"{artist} - {name} -> "
        f"{Colors.CYAN}{uri}{Colors.RESET}"
    )


def format_no_match_message(artist: str, name: str, reason: str) -> str:
    """Format a colored 'No match' console line."""
    return (
        f"{Colors.RED}No match{Colors.RESET}: "
        f"{artist} - {name} ({reason})"
    )


def log_match_failure(
    logger: logging.Logger,
    track_name: str,
    artist: str,
    track_ref: str,
    reason: str
) -> None:
    """
    Log a Spotify track for which no Lavalink candidate was selected.

    Logs a WARNING and attaches the extra fields MatchFailedTrackHandler
    uses to write to match_failures_{timestamp}.log.

    Args:
        logger: The logger to use for the message.
        track_name: The name of the Spotify track.
        artist: The primary artist name.
        track_ref: Spotify id, URL or URI of the track ("" if unknown).
        reason: Why no match was returned.

    Example:
        log_match_failure(
            logger,
            track_name="Song X",
            artist="Artist A",
            track_ref="spotify:track:xxx",
            reason="No candidates returned by the node"
        )
    """
    logger.warning(
        f"No match for: {artist} - {track_name} ({reason})",
        extra={
            "match_failed_track_name": track_name,
            "match_failed_track_artist": artist,
            "match_failed_track_ref": track_ref,
            "match_failed_reason": reason,
        }
    )


def shutdown_logging() -> None:
    """
    Flush, close and remove every handler on the root logger.

    Typically called in a finally block at application exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except (OSError, ValueError):
            pass
        root_logger.removeHandler(handler)
