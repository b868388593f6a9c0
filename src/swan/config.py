"""Configuration for the SWAN relay.

Reads from config/swan.ini if present, environment variables override.
Access keys, SID secrets and creator seeds never checked into version control.
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass, field
from pathlib import Path

_CONFIG_FILE = Path(__file__).resolve().parent.parent.parent / "config" / "swan.ini"

_TRUE = {"1", "true", "yes", "on"}

# 90 days
DEFAULT_TIMEOUT = 90 * 24 * 60 * 60


@dataclass(frozen=True)
class SwanConfig:
    """Relay configuration. Immutable once loaded."""

    scheme: str = "https"
    network: str = "swan"
    access_key: str = ""
    access_node: str = ""
    timeout: int = DEFAULT_TIMEOUT
    http_timeout: float = 10.0
    debug: bool = False
    sid_algorithm: str = "hmac-sha256"
    sid_secret: str = ""
    api_key: str = ""
    host: str = "127.0.0.1"
    port: int = 8000
    creators: dict[str, str] = field(default_factory=dict)


_INI_SECTIONS = {
    "swan": ("scheme", "network", "timeout", "debug", "sid_algorithm", "sid_secret"),
    "swift": ("access_key", "access_node", "http_timeout"),
    "gateway": ("api_key", "host", "port"),
}

_ENV_MAP = {
    "SWAN_SCHEME": "scheme",
    "SWAN_NETWORK": "network",
    "SWAN_TIMEOUT": "timeout",
    "SWAN_DEBUG": "debug",
    "SWAN_SID_ALGORITHM": "sid_algorithm",
    "SWAN_SID_SECRET": "sid_secret",
    "SWAN_ACCESS_KEY": "access_key",
    "SWAN_ACCESS_NODE": "access_node",
    "SWAN_HTTP_TIMEOUT": "http_timeout",
    "SWAN_API_KEY": "api_key",
    "SWAN_HOST": "host",
    "SWAN_PORT": "port",
}


def _convert(config_key: str, val: str):
    if config_key in ("timeout", "port"):
        return int(val)
    if config_key == "http_timeout":
        return float(val)
    if config_key == "debug":
        return val.strip().lower() in _TRUE
    return val


def load_config(config_path: Path | None = None) -> SwanConfig:
    """Load config from INI file, then override with environment variables."""
    path = config_path or _CONFIG_FILE
    kwargs: dict = {}

    if path.exists():
        parser = configparser.ConfigParser()
        parser.read(path)
        for section, keys in _INI_SECTIONS.items():
            for key in keys:
                val = parser.get(section, key, fallback=None)
                if val is not None:
                    kwargs[key] = _convert(key, val)
        if parser.has_section("creators"):
            kwargs["creators"] = dict(parser.items("creators"))

    for env_key, config_key in _ENV_MAP.items():
        val = os.getenv(env_key)
        if val is not None:
            kwargs[config_key] = _convert(config_key, val)

    return SwanConfig(**kwargs)
