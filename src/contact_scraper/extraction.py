"""Pure extraction and URL normalization utilities."""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from .errors import InvalidURLError
from .validation import is_supported_url

MAILTO_PREFIX = "mailto:"


def dedupe_preserve_order(items: Iterable[str]) -> list[str]:
    """Dedupe values by exact equality while preserving first-seen order."""
    output: list[str] = []
    seen: set[str] = set()
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        output.append(item)
    return output


def extract_mailto_addresses(html: str) -> list[str]:
    """Return distinct addresses from anchors linking to ``mailto:``.

    The prefix is stripped and the value trimmed; no syntax check is done here.
    """
    addresses: list[str] = []
    soup = BeautifulSoup(html or "", "html.parser")
    for anchor in soup.find_all("a", href=True):
        href = str(anchor["href"]).strip()
        if not href.startswith(MAILTO_PREFIX):
            continue
        address = href[len(MAILTO_PREFIX) :].strip()
        if address:
            addresses.append(address)
    return dedupe_preserve_order(addresses)


def clean_email(address: str) -> str:
    """Drop any query suffix (``?subject=...``) and surrounding whitespace."""
    return address.split("?", maxsplit=1)[0].strip()


def filter_addresses(addresses: Iterable[str]) -> list[str]:
    """Clean addresses and keep only those containing ``@``."""
    cleaned = (clean_email(address) for address in addresses)
    return dedupe_preserve_order(address for address in cleaned if "@" in address)


def domain_from_url(url: str) -> str:
    """Return the lowercase hostname of ``url`` without a leading ``www.``."""
    if not is_supported_url(url):
        raise InvalidURLError(f"Not an absolute HTTP(S) URL: {url!r}")
    hostname = urlparse(url).hostname or ""
    if hostname.startswith("www."):
        hostname = hostname[len("www.") :]
    return hostname
