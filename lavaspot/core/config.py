"""
Configuration management for lavaspot.

This module handles loading, validating, and providing access to the
configuration stored in config.yaml, with environment variable overrides
for credentials.

The configuration contains:
    - Spotify API credentials (client_id, client_secret)
    - The Lavalink node to search (host, port, password)
    - Default matching behavior
    - HTTP timeout
    - Optional log directory

Configuration Sources (highest precedence first):
    1. Environment variables (a .env file in the working directory is
       loaded first via python-dotenv)
    2. config.yaml (explicit path, or the current working directory)

Example config.yaml:
    spotify:
      client_id: "your_client_id_here"
      client_secret: "your_client_secret_here"

    lavalink:
      host: "localhost"
      port: 2333
      password: "youshallnotpass"
      requests_per_second: null  # Optional search throttle

    matching:
      prioritize_same_duration: true
      smart: false

    http:
      timeout: 30

    logging:
      directory: null  # Optional: write log files here
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from lavaspot.core.exceptions import ConfigError


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "config.yaml"

# Environment variables that override file values
ENV_OVERRIDES = {
    "SPOTIFY_CLIENT_ID": ("spotify", "client_id"),
    "SPOTIFY_CLIENT_SECRET": ("spotify", "client_secret"),
    "LAVALINK_HOST": ("lavalink", "host"),
    "LAVALINK_PORT": ("lavalink", "port"),
    "LAVALINK_PASSWORD": ("lavalink", "password"),
}

DEFAULT_HTTP_TIMEOUT = 30.0


@dataclass(frozen=True)
class SpotifyConfig:
    """
    Spotify API credentials configuration.

    These credentials are obtained from the Spotify Developer Dashboard:
    https://developer.spotify.com/dashboard

    Attributes:
        client_id: The Spotify application client ID.
        client_secret: The Spotify application client secret.
    """
    client_id: str
    client_secret: str


@dataclass(frozen=True)
class LavalinkConfig:
    """
    Lavalink node configuration.

    Attributes:
        host: Hostname or IP address of the node.
        port: HTTP port of the node (Lavalink defaults to 2333).
        password: The node's password, sent verbatim as the
                  Authorization header of every search.
        requests_per_second: Optional cap on search requests per second.
                             None disables throttling.
    """
    host: str
    port: int
    password: str
    requests_per_second: float | None = None


@dataclass(frozen=True)
class MatchingConfig:
    """
    Default matching behavior for the CLI.

    Attributes:
        prioritize_same_duration: Return the first candidate within the
                                  duration tolerance before filtering/sorting.
        smart: Use the bundled similarity policy instead of provider order.
    """
    prioritize_same_duration: bool = False
    smart: bool = False


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Created by load_config() and treated as immutable.

    Attributes:
        spotify: Spotify API credentials.
        lavalink: Audio node settings.
        matching: Matching defaults.
        http_timeout: Total timeout in seconds for each HTTP request.
        log_directory: Directory for log files, or None for console only.
    """
    spotify: SpotifyConfig
    lavalink: LavalinkConfig
    matching: MatchingConfig
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    log_directory: Path | None = None


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml and the environment.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in the current working
                     directory; a missing default file is not an error as
                     long as the environment supplies the required values.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If an explicit config file is not found, has invalid
                     YAML syntax, or if required fields are missing or
                     invalid after environment overrides are applied.

    Example:
        try:
            config = load_config()
        except ConfigError as e:
            print(f"Configuration error: {e.message}")
            sys.exit(1)
    """
    load_dotenv()

    explicit = config_path is not None
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    raw_config: dict[str, Any] = {}
    if config_path.exists():
        raw_config = _read_config_file(config_path)
    elif explicit:
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            details={"file_path": str(config_path)}
        )

    _apply_environment(raw_config)

    for section in ("spotify", "lavalink"):
        if not isinstance(raw_config.get(section), dict):
            raise ConfigError(
                f"Missing required section: '{section}'",
                details={"missing_section": section}
            )

    return Config(
        spotify=_parse_spotify_config(raw_config["spotify"]),
        lavalink=_parse_lavalink_config(raw_config["lavalink"]),
        matching=_parse_matching_config(raw_config.get("matching")),
        http_timeout=_parse_http_timeout(raw_config.get("http")),
        log_directory=_parse_log_directory(raw_config.get("logging")),
    )


def _read_config_file(config_path: Path) -> dict[str, Any]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except IOError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    # An empty file parses to None
    if raw_config is None:
        return {}

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    return raw_config


def _apply_environment(raw_config: dict[str, Any]) -> None:
    """
    Overlay environment variables onto the raw configuration in place.

    Only non-empty variables are applied. A section that exists in the
    file but is not a dictionary is left alone so validation reports it.
    """
    for env_var, (section, key) in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if not value:
            continue
        target = raw_config.setdefault(section, {})
        if isinstance(target, dict):
            target[key] = value


def _require_string(section: dict[str, Any], section_name: str, key: str) -> str:
    value = section.get(key, "")
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(
            f"'{section_name}.{key}' must be a non-empty string",
            details={"field": f"{section_name}.{key}"}
        )
    return value.strip()


def _parse_spotify_config(spotify_section: dict[str, Any]) -> SpotifyConfig:
    """
    Parse and validate the Spotify configuration section.

    Raises:
        ConfigError: If client_id or client_secret is missing or empty.
    """
    return SpotifyConfig(
        client_id=_require_string(spotify_section, "spotify", "client_id"),
        client_secret=_require_string(spotify_section, "spotify", "client_secret")
    )


def _parse_lavalink_config(lavalink_section: dict[str, Any]) -> LavalinkConfig:
    """
    Parse and validate the Lavalink node section.

    The port may come from YAML as an int or from the environment as a
    string; both are accepted as long as they describe a valid TCP port.

    Raises:
        ConfigError: If host/password are missing, the port is not an
                     integer in 1-65535, or requests_per_second is not
                     a positive number.
    """
    host = _require_string(lavalink_section, "lavalink", "host")

    # The password may legitimately be any string, but it must exist
    password = lavalink_section.get("password")
    if not isinstance(password, str) or not password:
        raise ConfigError(
            "'lavalink.password' must be a non-empty string",
            details={"field": "lavalink.password"}
        )

    raw_port = lavalink_section.get("port")
    try:
        if isinstance(raw_port, bool):
            raise ValueError(raw_port)
        port = int(raw_port)
    except (TypeError, ValueError):
        raise ConfigError(
            "'lavalink.port' must be an integer",
            details={"field": "lavalink.port", "value": raw_port}
        ) from None
    if not 1 <= port <= 65535:
        raise ConfigError(
            "'lavalink.port' must be between 1 and 65535",
            details={"field": "lavalink.port", "value": port}
        )

    rate = lavalink_section.get("requests_per_second")
    if rate is not None:
        if isinstance(rate, bool) or not isinstance(rate, (int, float)) or rate <= 0:
            raise ConfigError(
                "'lavalink.requests_per_second' must be a positive number or null",
                details={"field": "lavalink.requests_per_second", "value": rate}
            )
        rate = float(rate)

    return LavalinkConfig(
        host=host,
        port=port,
        password=password,
        requests_per_second=rate
    )


def _parse_matching_config(matching_section: dict[str, Any] | None) -> MatchingConfig:
    if matching_section is None:
        return MatchingConfig()
    if not isinstance(matching_section, dict):
        raise ConfigError(
            "Section 'matching' must be a dictionary",
            details={"section": "matching"}
        )

    values = {}
    for key in ("prioritize_same_duration", "smart"):
        raw = matching_section.get(key)
        if raw is None:
            continue
        if not isinstance(raw, bool):
            raise ConfigError(
                f"'matching.{key}' must be true or false",
                details={"field": f"matching.{key}", "value": raw}
            )
        values[key] = raw

    return MatchingConfig(**values)


def _parse_http_timeout(http_section: dict[str, Any] | None) -> float:
    if http_section is None:
        return DEFAULT_HTTP_TIMEOUT
    if not isinstance(http_section, dict):
        raise ConfigError(
            "Section 'http' must be a dictionary",
            details={"section": "http"}
        )

    timeout = http_section.get("timeout", DEFAULT_HTTP_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError(
            "'http.timeout' must be a positive number",
            details={"field": "http.timeout", "value": timeout}
        )
    return float(timeout)


def _parse_log_directory(logging_section: dict[str, Any] | None) -> Path | None:
    """Expand ~ in the log directory. The directory is created by setup_logging()."""
    if logging_section is None:
        return None
    if not isinstance(logging_section, dict):
        raise ConfigError(
            "Section 'logging' must be a dictionary",
            details={"section": "logging"}
        )

    directory = logging_section.get("directory")
    if directory is None:
        return None
    if not isinstance(directory, str) or not directory.strip():
        raise ConfigError(
            "'logging.directory' must be a non-empty string or null",
            details={"field": "logging.directory"}
        )
    return Path(directory.strip()).expanduser().resolve()
