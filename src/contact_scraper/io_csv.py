"""CSV input reader and append-only result sinks."""

from __future__ import annotations

import csv
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .errors import InputError, OutputError
from .models import EmailMatch, Record

WEBSITE_FIELD = "Website"
CSV_FIELDS = [
    "Business Name",
    "Category",
    "Address",
    "Postal Code",
    "Phone Number",
    "Website",
    "Email",
]


def read_records(path: str) -> list[dict[str, str]]:
    """Read input rows in file order, keeping every value as a string."""
    try:
        with Path(path).open("r", newline="", encoding="utf-8-sig") as file_obj:
            reader = csv.DictReader(file_obj)
            if WEBSITE_FIELD not in (reader.fieldnames or []):
                raise InputError(f"Input file has no {WEBSITE_FIELD!r} column: {path}")
            return [dict(row) for row in reader]
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise InputError(f"Cannot read input file {path}: {exc}") from exc


def run_timestamp(now: datetime | None = None) -> str:
    """Filesystem-safe UTC timestamp used to name a run's artifacts."""
    moment = now or datetime.now(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H-%M-%S-%fZ")


def _match_row(match: EmailMatch) -> list[str]:
    record = match.record
    return [
        record.get("Business Name") or "",
        record.get("Category") or "",
        record.get("Address") or "No",
        record.get("Postal Code") or "",
        record.get("Phone Number") or "",
        record.get(WEBSITE_FIELD) or "",
        match.email,
    ]


@dataclass(frozen=True)
class ResultSinks:
    """Matched-email CSV and not-found domain list for one run."""

    matched_path: str
    unmatched_path: str

    @classmethod
    def create(cls, directory: str, timestamp: str | None = None) -> ResultSinks:
        """Create both artifacts; the matched file starts with its header row."""
        stamp = timestamp or run_timestamp()
        base = Path(directory)
        sinks = cls(
            matched_path=str(base / f"Emails_{stamp}.csv"),
            unmatched_path=str(base / f"Notfound_{stamp}.txt"),
        )
        try:
            base.mkdir(parents=True, exist_ok=True)
            with Path(sinks.matched_path).open("w", newline="", encoding="utf-8") as file_obj:
                csv.writer(file_obj).writerow(CSV_FIELDS)
            Path(sinks.unmatched_path).touch()
        except OSError as exc:
            raise OutputError(f"Cannot create result files in {directory}: {exc}") from exc
        return sinks

    def write_matches(self, matches: Iterable[EmailMatch]) -> int:
        """Append one row per match and return how many were written."""
        rows = [_match_row(match) for match in matches]
        if not rows:
            return 0
        try:
            with Path(self.matched_path).open("a", newline="", encoding="utf-8") as file_obj:
                csv.writer(file_obj).writerows(rows)
        except OSError as exc:
            raise OutputError(f"Cannot append to {self.matched_path}: {exc}") from exc
        return len(rows)

    def write_unmatched(self, domain: str) -> None:
        """Append one domain line to the not-found list."""
        try:
            with Path(self.unmatched_path).open("a", encoding="utf-8") as file_obj:
                file_obj.write(domain + "\n")
        except OSError as exc:
            raise OutputError(f"Cannot append to {self.unmatched_path}: {exc}") from exc
