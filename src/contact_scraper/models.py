"""Protocols and lightweight model types."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

Record = Mapping[str, str]


class Fetcher(Protocol):
    """Contract for browser-backed page loaders."""

    def fetch(self, url: str) -> str:
        """Return HTML for a loaded URL or raise FetchError."""


class PageProber(Protocol):
    """Contract for email discovery on a site and its contact pages."""

    def probe(self, url: str) -> list[str]:
        """Return distinct addresses found on ``url``; never raises."""

    def probe_contact_pages(self, base_url: str) -> list[str]:
        """Return the first non-empty result across contact sub-paths."""


class ProgressObserver(Protocol):
    """A subscriber receiving progress text."""

    def is_open(self) -> bool:
        """Return False once the underlying transport has closed."""

    def send(self, message: str) -> None:
        """Deliver one message without blocking."""


@dataclass(frozen=True)
class EmailMatch:
    """One input record paired with one discovered address."""

    record: Record
    email: str


@dataclass(frozen=True)
class RunSummary:
    """Outcome of one run over an input file."""

    matched_path: str
    unmatched_path: str
    total: int
    matched: int = 0
    unmatched: int = 0
    skipped: int = 0
    cancelled: bool = False
