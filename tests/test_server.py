import logging
import time
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from contact_scraper.config import ScrapeConfig
from contact_scraper.pipeline import COMPLETE_MESSAGE
from contact_scraper.server import START_MESSAGE, create_app

CSV_TEXT = (
    "Business Name,Category,Address,Postal Code,Phone Number,Website\n"
    "Acme,Tools,1 Main St,01234,555,https://acme.example\n"
    "Quiet,Books,,00000,,https://www.quiet.example\n"
)


class DummyFetcher:
    pages = {"https://acme.example": '<a href="mailto:hi@acme.example?subject=x">mail</a>'}

    def fetch(self, url: str) -> str:
        return self.pages.get(url, "")

    def close(self) -> None:
        return None


@pytest.fixture()
def client(tmp_path: Path) -> TestClient:
    config = ScrapeConfig(
        download_dir=str(tmp_path / "downloads"), upload_dir=str(tmp_path / "uploads")
    )
    app = create_app(config, logger=logging.getLogger("test"), fetcher_factory=DummyFetcher)
    return TestClient(app)


def _upload(client: TestClient, text: str = CSV_TEXT):
    return client.post("/upload", files={"file": ("sites.csv", text.encode("utf-8"), "text/csv")})


def _stored_uploads(client: TestClient) -> list[Path]:
    upload_dir = Path(client.app.state.config.upload_dir)  # type: ignore[attr-defined]
    return sorted(upload_dir.iterdir())


def test_upload_runs_scrape_and_serves_results(client: TestClient) -> None:
    response = _upload(client)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["downloadUrl"].startswith("/download/Emails_")

    latest = client.get("/latest-file").json()["filename"]
    assert body["downloadUrl"] == f"/download/{latest}"
    matched = client.get(body["downloadUrl"])
    assert matched.status_code == 200
    assert "Acme,Tools,1 Main St,01234,555,https://acme.example,hi@acme.example" in matched.text

    notfound = client.get("/notfound-file").json()["filename"]
    assert notfound.startswith("Notfound_")
    assert client.get(f"/download/{notfound}").text == "quiet.example\n"
    assert client.get("/scraping-status").json() == {"isScraping": False}


def test_upload_without_file_is_rejected(client: TestClient) -> None:
    response = client.post("/upload")
    assert response.status_code == 400
    assert response.json() == {"error": "No file uploaded"}


def test_upload_with_unreadable_csv_is_rejected_before_any_progress(client: TestClient) -> None:
    published: list[str] = []
    broadcaster = client.app.state.broadcaster  # type: ignore[attr-defined]

    class Recorder:
        def is_open(self) -> bool:
            return True

        def send(self, message: str) -> None:
            published.append(message)

    broadcaster.subscribe(Recorder())
    response = _upload(client, "Name,Url\nAcme,https://acme.example\n")

    assert response.status_code == 400
    assert "Website" in response.json()["error"]
    assert published == []
    assert client.get("/latest-file").json() == {"success": True, "filename": ""}
    assert _stored_uploads(client) == []


def test_upload_is_rejected_while_a_run_is_active(client: TestClient) -> None:
    manager = client.app.state.run_manager  # type: ignore[attr-defined]
    manager.begin([{"Website": "https://acme.example"}])

    response = _upload(client)

    assert response.status_code == 409
    assert _stored_uploads(client) == []
    assert client.get("/scraping-status").json() == {"isScraping": True}
    stop = client.post("/stop")
    assert stop.json() == {"success": True, "message": "Scraping process stopped."}
    assert client.get("/scraping-status").json() == {"isScraping": False}


def test_download_unknown_file_returns_404(client: TestClient) -> None:
    response = client.get("/download/nope.csv")
    assert response.status_code == 404
    assert response.json() == {"error": "File not found"}


def test_websocket_receives_progress_messages(client: TestClient) -> None:
    broadcaster = client.app.state.broadcaster  # type: ignore[attr-defined]
    with client.websocket_connect("/ws") as websocket:
        deadline = time.monotonic() + 5
        while broadcaster.observer_count == 0 and time.monotonic() < deadline:
            time.sleep(0.01)

        broadcaster.publish(START_MESSAGE)
        broadcaster.publish(COMPLETE_MESSAGE)

        assert websocket.receive_json() == {"message": START_MESSAGE}
        assert websocket.receive_json() == {"message": COMPLETE_MESSAGE}
