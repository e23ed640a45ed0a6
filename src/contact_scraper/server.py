"""HTTP control surface and progress WebSocket."""

from __future__ import annotations

import asyncio
import json
import logging
import shutil
from concurrent.futures import Future
from pathlib import Path
from uuid import uuid4

from fastapi import FastAPI, File, UploadFile, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse, JSONResponse
from fastapi.websockets import WebSocketState

from .config import ScrapeConfig, ensure_directories
from .control import FetcherFactory, RunManager, selenium_fetcher_factory
from .errors import FetchError, InputError, OutputError, RunInProgressError
from .io_csv import read_records
from .logging_utils import get_logger
from .progress import ProgressBroadcaster

START_MESSAGE = "Starting scraping process..."
STOP_MESSAGE = "Scraping stopped by user."


class WebSocketObserver:
    """Forward progress messages to one WebSocket client as JSON."""

    def __init__(
        self, websocket: WebSocket, loop: asyncio.AbstractEventLoop, logger: logging.Logger
    ) -> None:
        self._websocket = websocket
        self._loop = loop
        self._logger = logger

    def is_open(self) -> bool:
        return (
            self._websocket.client_state == WebSocketState.CONNECTED
            and self._websocket.application_state == WebSocketState.CONNECTED
            and not self._loop.is_closed()
        )

    def send(self, message: str) -> None:
        payload = json.dumps({"message": message})
        future = asyncio.run_coroutine_threadsafe(self._websocket.send_text(payload), self._loop)
        future.add_done_callback(self._log_failure)

    def _log_failure(self, future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self._logger.debug("WebSocket send failed: %s", exc)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(
    config: ScrapeConfig,
    *,
    logger: logging.Logger | None = None,
    fetcher_factory: FetcherFactory | None = None,
    broadcaster: ProgressBroadcaster | None = None,
) -> FastAPI:
    """Build the FastAPI app around a single RunManager."""
    logger = logger or get_logger()
    ensure_directories(config)
    broadcaster = broadcaster or ProgressBroadcaster(logger)
    manager = RunManager(
        config=config,
        broadcaster=broadcaster,
        fetcher_factory=fetcher_factory or selenium_fetcher_factory(config, logger),
        logger=logger,
    )

    app = FastAPI(title="contact-scraper")
    app.state.config = config
    app.state.broadcaster = broadcaster
    app.state.run_manager = manager

    @app.post("/upload")
    def upload(file: UploadFile | None = File(None)):
        if file is None:
            return _error(400, "No file uploaded")
        upload_path = Path(config.upload_dir) / f"{uuid4().hex}.csv"
        with upload_path.open("wb") as file_obj:
            shutil.copyfileobj(file.file, file_obj)
        logger.info("Stored upload %s as %s", file.filename, upload_path)

        try:
            records = read_records(str(upload_path))
            run = manager.begin(records)
        except InputError as exc:
            logger.warning("Rejected upload: %s", exc)
            upload_path.unlink(missing_ok=True)
            return _error(400, str(exc))
        except RunInProgressError as exc:
            upload_path.unlink(missing_ok=True)
            return _error(409, str(exc))
        except OutputError as exc:
            logger.error("Cannot prepare result files: %s", exc)
            upload_path.unlink(missing_ok=True)
            return _error(500, str(exc))

        broadcaster.publish(START_MESSAGE)
        try:
            summary = manager.execute(run)
        except (OutputError, FetchError) as exc:
            logger.error("Run failed: %s", exc)
            return _error(500, str(exc))
        return {
            "success": True,
            "downloadUrl": f"/download/{Path(summary.matched_path).name}",
        }

    @app.post("/stop")
    def stop():
        manager.stop()
        broadcaster.publish(STOP_MESSAGE)
        return {"success": True, "message": "Scraping process stopped."}

    @app.get("/scraping-status")
    def scraping_status():
        return {"isScraping": manager.is_active}

    @app.get("/latest-file")
    def latest_file():
        matched, _ = manager.latest_files()
        return {"success": True, "filename": matched}

    @app.get("/notfound-file")
    def notfound_file():
        _, unmatched = manager.latest_files()
        return {"success": True, "filename": unmatched}

    @app.get("/download/{filename}")
    def download(filename: str):
        path = Path(config.download_dir) / Path(filename).name
        if not path.is_file():
            return _error(404, "File not found")
        return FileResponse(path, filename=path.name)

    @app.websocket("/ws")
    async def progress_socket(websocket: WebSocket) -> None:
        await websocket.accept()
        observer = WebSocketObserver(websocket, asyncio.get_running_loop(), logger)
        broadcaster.subscribe(observer)
        logger.info("WebSocket connected (clients=%d)", broadcaster.observer_count)
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            logger.info("WebSocket disconnected")
        finally:
            broadcaster.unsubscribe(observer)

    return app
