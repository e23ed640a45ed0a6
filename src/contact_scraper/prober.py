"""Per-site email probing with contact-page fallback."""

from __future__ import annotations

import logging
from urllib.parse import urljoin

from .errors import FetchError
from .extraction import extract_mailto_addresses
from .models import Fetcher

CONTACT_PATHS = (
    "/contact",
    "/contactus",
    "/contact-us",
    "/support",
    "/help",
    "/customer-service",
    "/get-in-touch",
    "/reach-us",
    "/about",
    "/about-us",
)


class SiteProber:
    """Load pages through a fetcher and collect their ``mailto:`` addresses."""

    def __init__(
        self,
        *,
        fetcher: Fetcher,
        logger: logging.Logger,
        contact_paths: tuple[str, ...] = CONTACT_PATHS,
    ) -> None:
        self._fetcher = fetcher
        self._logger = logger
        self._contact_paths = contact_paths

    def probe(self, url: str) -> list[str]:
        """Return distinct addresses on ``url``; any failure yields an empty list."""
        try:
            html = self._fetcher.fetch(url)
        except FetchError as exc:
            self._logger.info("Failed to load %s: %s", url, exc)
            return []
        try:
            emails = extract_mailto_addresses(html)
        except Exception as exc:  # pragma: no cover - parser failure
            self._logger.warning("Error scraping %s: %s", url, exc)
            return []
        if emails:
            self._logger.info("Emails found on %s: %s", url, ", ".join(emails))
        else:
            self._logger.debug("No emails on %s", url)
        return emails

    def probe_contact_pages(self, base_url: str) -> list[str]:
        """Probe contact sub-paths in order and stop at the first hit."""
        for path in self._contact_paths:
            emails = self.probe(urljoin(base_url, path))
            if emails:
                return emails
        return []
