"""Run lifecycle: the one handle on the current (or last) run."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from threading import Lock

from .config import ScrapeConfig
from .errors import RunInProgressError
from .fetchers import SeleniumFetcher
from .io_csv import ResultSinks
from .models import Fetcher, Record, RunSummary
from .pipeline import ScrapeRun
from .progress import ProgressBroadcaster
from .prober import SiteProber

FetcherFactory = Callable[[], Fetcher]


def selenium_fetcher_factory(config: ScrapeConfig, logger: logging.Logger) -> FetcherFactory:
    """Return a factory launching one Chrome session per run."""

    def factory() -> Fetcher:
        return SeleniumFetcher(
            user_agent=config.user_agent,
            timeout=config.navigation_timeout,
            headless=config.headless,
            logger=logger,
        )

    return factory


class RunManager:
    """Start, stop and inspect runs; at most one run is active at a time.

    Starting a run before the previous one has finished executing raises
    ``RunInProgressError``, even if that run was already asked to stop.
    """

    def __init__(
        self,
        *,
        config: ScrapeConfig,
        broadcaster: ProgressBroadcaster,
        fetcher_factory: FetcherFactory,
        logger: logging.Logger,
    ) -> None:
        self._config = config
        self._broadcaster = broadcaster
        self._fetcher_factory = fetcher_factory
        self._logger = logger
        self._lock = Lock()
        self._current: ScrapeRun | None = None

    @property
    def current(self) -> ScrapeRun | None:
        with self._lock:
            return self._current

    @property
    def is_active(self) -> bool:
        run = self.current
        return run is not None and run.active

    def begin(self, records: Sequence[Record]) -> ScrapeRun:
        """Register a new active run with fresh result files."""
        with self._lock:
            if self._current is not None and not self._current.finished:
                raise RunInProgressError("A scraping run is already in progress.")
            sinks = ResultSinks.create(self._config.download_dir)
            run = ScrapeRun(
                records,
                sinks=sinks,
                broadcaster=self._broadcaster,
                logger=self._logger,
                show_progress=self._config.show_progress,
            )
            self._current = run
        self._logger.info("Started run with %d records -> %s", len(records), sinks.matched_path)
        return run

    def execute(self, run: ScrapeRun) -> RunSummary:
        """Drive ``run`` with a fresh browser and release it afterwards."""
        try:
            fetcher = self._fetcher_factory()
        except Exception as exc:
            run.abort(f"Scraping failed: browser could not start ({exc})")
            raise
        try:
            return run.execute(SiteProber(fetcher=fetcher, logger=self._logger))
        finally:
            close_fn = getattr(fetcher, "close", None)
            if callable(close_fn):
                close_fn()

    def run(self, records: Sequence[Record]) -> RunSummary:
        return self.execute(self.begin(records))

    def stop(self) -> bool:
        """Request cancellation; return True if a run was active."""
        run = self.current
        if run is None or not run.active:
            return False
        run.stop()
        self._logger.info("Stop requested for %s", run.sinks.matched_path)
        return True

    def latest_files(self) -> tuple[str, str]:
        """Base names of the latest matched and not-found artifacts."""
        run = self.current
        if run is None:
            return "", ""
        return Path(run.sinks.matched_path).name, Path(run.sinks.unmatched_path).name
