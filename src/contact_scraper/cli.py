"""CLI entrypoint for contact-scraper."""

from __future__ import annotations

import argparse
import logging
import os
import signal
import threading
from collections.abc import Sequence

import uvicorn

from .config import (
    DEFAULT_DOWNLOAD_DIR,
    DEFAULT_HOST,
    DEFAULT_NAVIGATION_TIMEOUT,
    DEFAULT_PORT,
    DEFAULT_UPLOAD_DIR,
    DEFAULT_USER_AGENT,
    ScrapeConfig,
)
from .control import FetcherFactory, RunManager, selenium_fetcher_factory
from .errors import ConfigError, FetchError, InputError, OutputError
from .io_csv import read_records
from .logging_utils import configure_logging, get_logger
from .models import RunSummary
from .progress import LoggingObserver, ProgressBroadcaster
from .server import create_app


def _add_browser_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--download-dir", default=DEFAULT_DOWNLOAD_DIR, help="Directory for result files."
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_NAVIGATION_TIMEOUT,
        help="Page load timeout in seconds.",
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="Browser user agent.")
    parser.add_argument("--headful", action="store_true", help="Show the Chrome window.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(
        description="Contact Scraper - collect mailto addresses from websites listed in a CSV."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    scrape_parser = commands.add_parser("scrape", help="Scrape one CSV in the foreground.")
    scrape_parser.add_argument("input", help="CSV file with a Website column.")
    scrape_parser.add_argument(
        "--no-progress", action="store_true", help="Disable tqdm progress bars."
    )
    _add_browser_arguments(scrape_parser)

    serve_parser = commands.add_parser("serve", help="Run the HTTP upload server.")
    serve_parser.add_argument("--host", default=DEFAULT_HOST, help="Bind address.")
    serve_parser.add_argument(
        "--port", type=int, help=f"Bind port (default: $PORT or {DEFAULT_PORT})."
    )
    serve_parser.add_argument(
        "--upload-dir", default=DEFAULT_UPLOAD_DIR, help="Directory for uploaded CSV files."
    )
    _add_browser_arguments(serve_parser)
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI input."""
    return build_parser().parse_args(argv)


def _resolve_port(args: argparse.Namespace) -> int:
    if getattr(args, "port", None) is not None:
        return int(args.port)
    raw = os.getenv("PORT")
    if not raw:
        return DEFAULT_PORT
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"PORT must be an integer, got {raw!r}.") from exc


def namespace_to_config(args: argparse.Namespace) -> ScrapeConfig:
    """Convert CLI args to validated ScrapeConfig."""
    return ScrapeConfig(
        download_dir=args.download_dir,
        upload_dir=getattr(args, "upload_dir", DEFAULT_UPLOAD_DIR),
        user_agent=args.user_agent,
        navigation_timeout=args.timeout,
        headless=not args.headful,
        host=getattr(args, "host", DEFAULT_HOST),
        port=_resolve_port(args),
        show_progress=not getattr(args, "no_progress", True),
    )


def run_scrape(
    config: ScrapeConfig,
    input_path: str,
    *,
    logger: logging.Logger,
    fetcher_factory: FetcherFactory | None = None,
) -> RunSummary:
    """Scrape ``input_path`` once, logging progress; Ctrl-C stops after the current site."""
    records = read_records(input_path)
    broadcaster = ProgressBroadcaster(logger)
    broadcaster.subscribe(LoggingObserver(logger))
    manager = RunManager(
        config=config,
        broadcaster=broadcaster,
        fetcher_factory=fetcher_factory or selenium_fetcher_factory(config, logger),
        logger=logger,
    )
    run = manager.begin(records)

    if threading.current_thread() is not threading.main_thread():
        return manager.execute(run)

    previous = signal.getsignal(signal.SIGINT)

    def _request_stop(_signum: int, _frame: object) -> None:
        logger.warning("Interrupt received; stopping after the current site.")
        run.stop()
        # A second Ctrl-C falls back to the default handler.
        signal.signal(signal.SIGINT, previous)

    signal.signal(signal.SIGINT, _request_stop)
    try:
        return manager.execute(run)
    finally:
        signal.signal(signal.SIGINT, previous)


def serve(config: ScrapeConfig, *, logger: logging.Logger) -> int:
    """Run the HTTP server until interrupted."""
    app = create_app(config, logger=logger)
    logger.info("Server running on http://%s:%d", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_level="info")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    args = parse_args(argv)
    configure_logging(args.verbose)
    logger = get_logger()
    try:
        config = namespace_to_config(args)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    if args.command == "serve":
        return serve(config, logger=logger)

    try:
        summary = run_scrape(config, args.input, logger=logger)
    except InputError as exc:
        logger.error("%s", exc)
        return 2
    except (OutputError, FetchError) as exc:
        logger.error("Run failed: %s", exc)
        return 1
    logger.info("Wrote emails to %s", summary.matched_path)
    logger.info("Wrote not-found domains to %s", summary.unmatched_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
