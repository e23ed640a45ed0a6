"""Core orchestration: one sequential, cancellable pass over input records."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from threading import Event

from tqdm import tqdm

from .errors import InvalidURLError
from .extraction import domain_from_url, filter_addresses
from .io_csv import WEBSITE_FIELD, ResultSinks
from .models import EmailMatch, PageProber, Record, RunSummary
from .progress import ProgressBroadcaster

COMPLETE_MESSAGE = "Scraping complete."

MATCHED = "matched"
UNMATCHED = "unmatched"
SKIPPED = "skipped"


def progress_message(site: str, index: int, total: int) -> str:
    return f"Scraping: {site} ({index + 1}/{total})"


class ScrapeRun:
    """A single run over ``records`` writing into ``sinks``.

    The run is active from construction. ``stop()`` may be called from any
    thread; it is honoured before the next record starts, never mid-probe.
    Whatever ends the loop, the run becomes inactive and observers receive
    ``COMPLETE_MESSAGE``; only then is it ``finished``. A stopped run may
    still be working on its last record until ``finished`` is true.
    """

    def __init__(
        self,
        records: Sequence[Record],
        *,
        sinks: ResultSinks,
        broadcaster: ProgressBroadcaster,
        logger: logging.Logger,
        show_progress: bool = False,
    ) -> None:
        self._records = list(records)
        self._sinks = sinks
        self._broadcaster = broadcaster
        self._logger = logger
        self._show_progress = show_progress
        self._active = Event()
        self._active.set()
        self._finished = Event()

    @property
    def active(self) -> bool:
        return self._active.is_set()

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    @property
    def sinks(self) -> ResultSinks:
        return self._sinks

    def stop(self) -> None:
        """Request cancellation at the next record boundary."""
        self._active.clear()

    def abort(self, reason: str) -> None:
        """End a run that never started processing, telling observers why."""
        self._logger.error("Run aborted: %s", reason)
        self._active.clear()
        try:
            self._broadcaster.publish(reason)
        finally:
            self._finish()

    def _finish(self) -> None:
        self._active.clear()
        try:
            self._broadcaster.publish(COMPLETE_MESSAGE)
        finally:
            self._finished.set()

    def execute(self, prober: PageProber) -> RunSummary:
        """Process records in order until exhausted or stopped."""
        total = len(self._records)
        counts = {MATCHED: 0, UNMATCHED: 0, SKIPPED: 0}
        cancelled = False
        iterator: Iterable[tuple[int, Record]] = enumerate(self._records)
        progress_bar = None
        if self._show_progress:
            progress_bar = tqdm(iterator, total=total, desc="scraping sites")
            iterator = progress_bar
        try:
            for index, record in iterator:
                if not self._active.is_set():
                    cancelled = True
                    self._logger.info("Run stopped before record %d/%d", index + 1, total)
                    break
                outcome = self._process_record(index, total, record, prober)
                counts[outcome] += 1
        finally:
            if progress_bar is not None:
                progress_bar.close()
            self._finish()

        self._logger.info(
            "Run finished: %d matched, %d not found, %d skipped",
            counts[MATCHED],
            counts[UNMATCHED],
            counts[SKIPPED],
        )
        return RunSummary(
            matched_path=self._sinks.matched_path,
            unmatched_path=self._sinks.unmatched_path,
            total=total,
            matched=counts[MATCHED],
            unmatched=counts[UNMATCHED],
            skipped=counts[SKIPPED],
            cancelled=cancelled,
        )

    def _process_record(
        self, index: int, total: int, record: Record, prober: PageProber
    ) -> str:
        site = (record.get(WEBSITE_FIELD) or "").strip()
        if not site:
            return SKIPPED

        domain: str | None
        try:
            domain = domain_from_url(site)
        except InvalidURLError as exc:
            self._logger.warning("Skipping probe for record %d: %s", index + 1, exc)
            domain = None

        self._broadcaster.publish(progress_message(site, index, total))
        if domain is None:
            self._sinks.write_unmatched(site)
            return UNMATCHED

        emails = prober.probe(site)
        if not emails:
            emails = prober.probe_contact_pages(site)

        if emails:
            addresses = filter_addresses(emails)
            written = self._sinks.write_matches(
                EmailMatch(record=record, email=address) for address in addresses
            )
            if not written:
                self._logger.info("No usable addresses for %s among %s", site, emails)
            return MATCHED

        self._sinks.write_unmatched(domain)
        return UNMATCHED
