"""Runtime configuration model."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .validation import validate_runtime_constraints

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_NAVIGATION_TIMEOUT = 30.0
DEFAULT_DOWNLOAD_DIR = "downloads"
DEFAULT_UPLOAD_DIR = "uploads"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5000


@dataclass(frozen=True)
class ScrapeConfig:
    """Validated configuration shared by the CLI, server and run controller."""

    download_dir: str = DEFAULT_DOWNLOAD_DIR
    upload_dir: str = DEFAULT_UPLOAD_DIR
    user_agent: str = DEFAULT_USER_AGENT
    navigation_timeout: float = DEFAULT_NAVIGATION_TIMEOUT
    headless: bool = True
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    show_progress: bool = False

    def __post_init__(self) -> None:
        validate_runtime_constraints(
            download_dir=self.download_dir,
            upload_dir=self.upload_dir,
            navigation_timeout=self.navigation_timeout,
            port=self.port,
        )


def ensure_directories(config: ScrapeConfig) -> None:
    """Create upload and download directories if missing."""
    Path(config.upload_dir).mkdir(parents=True, exist_ok=True)
    Path(config.download_dir).mkdir(parents=True, exist_ok=True)
