"""Custom exceptions for the scraper domain."""


class ScraperError(Exception):
    """Base exception for this project."""


class ConfigError(ScraperError):
    """Raised when runtime configuration is invalid."""


class InputError(ScraperError):
    """Raised when the input CSV cannot be read."""


class OutputError(ScraperError):
    """Raised when a result file cannot be written."""


class FetchError(ScraperError):
    """Raised when the browser fails to start or load a URL."""


class InvalidURLError(ScraperError):
    """Raised when a site value is not an absolute HTTP(S) URL."""


class RunInProgressError(ScraperError):
    """Raised when a run is requested while another one is active."""
