"""Validation and runtime guardrails."""

from __future__ import annotations

from urllib.parse import urlparse

from .errors import ConfigError


def is_supported_url(url: str) -> bool:
    """Allow only absolute HTTP(S) URLs with a hostname."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in {"http", "https"} and bool(parsed.hostname)


def validate_runtime_constraints(
    *,
    download_dir: str,
    upload_dir: str,
    navigation_timeout: float,
    port: int,
) -> None:
    """Validate CLI/runtime configuration and raise ConfigError on invalid values."""
    if not download_dir or not upload_dir:
        raise ConfigError("--download-dir and --upload-dir must not be empty.")
    if navigation_timeout <= 0:
        raise ConfigError("--timeout must be > 0.")
    if not 1 <= port <= 65535:
        raise ConfigError("--port must be between 1 and 65535.")
