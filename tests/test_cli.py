import logging
from pathlib import Path

import pytest

from contact_scraper import cli
from contact_scraper.errors import InputError
from contact_scraper.models import RunSummary


class DummyFetcher:
    def fetch(self, url: str) -> str:
        if url == "https://a.example":
            return '<a href="mailto:a@a.example">a</a>'
        return ""

    def close(self) -> None:
        return None


def test_parse_args_scrape() -> None:
    args = cli.parse_args(["scrape", "sites.csv", "--timeout", "10", "--no-progress"])
    assert args.command == "scrape"
    assert args.input == "sites.csv"
    assert args.timeout == 10.0


def test_parse_args_requires_command() -> None:
    with pytest.raises(SystemExit):
        cli.parse_args([])


def test_serve_port_falls_back_to_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "8123")
    config = cli.namespace_to_config(cli.parse_args(["serve"]))
    assert config.port == 8123
    assert cli.namespace_to_config(cli.parse_args(["serve", "--port", "9000"])).port == 9000


def test_run_scrape_writes_both_artifacts(tmp_path: Path) -> None:
    source = tmp_path / "sites.csv"
    source.write_text("Website\nhttps://a.example\nhttps://b.example\n", encoding="utf-8")
    config = cli.namespace_to_config(
        cli.parse_args(["scrape", str(source), "--download-dir", str(tmp_path), "--no-progress"])
    )

    summary = cli.run_scrape(
        config, str(source), logger=logging.getLogger("test"), fetcher_factory=DummyFetcher
    )

    assert summary.matched == 1
    assert summary.unmatched == 1
    assert Path(summary.unmatched_path).read_text(encoding="utf-8") == "b.example\n"


def test_main_returns_zero_on_success(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def fake_run_scrape(config, input_path, *, logger):
        return RunSummary(matched_path="Emails.csv", unmatched_path="Notfound.txt", total=0)

    monkeypatch.setattr(cli, "run_scrape", fake_run_scrape)
    assert cli.main(["scrape", "sites.csv", "--download-dir", str(tmp_path)]) == 0


def test_main_returns_two_on_invalid_config() -> None:
    assert cli.main(["scrape", "sites.csv", "--timeout", "0"]) == 2


def test_main_returns_two_on_unreadable_input(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run_scrape(config, input_path, *, logger):
        raise InputError("Cannot read input file")

    monkeypatch.setattr(cli, "run_scrape", fake_run_scrape)
    assert cli.main(["scrape", "missing.csv"]) == 2


def test_main_serve_starts_uvicorn(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls: dict[str, object] = {}
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.update(kwargs))
    exit_code = cli.main(
        [
            "serve",
            "--port",
            "5055",
            "--download-dir",
            str(tmp_path / "d"),
            "--upload-dir",
            str(tmp_path / "u"),
        ]
    )
    assert exit_code == 0
    assert calls["port"] == 5055
