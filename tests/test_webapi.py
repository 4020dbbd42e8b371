import io

import pytest
from fastapi.testclient import TestClient

from docs_common import webapi
from docs_common.conversion import LicenseGuard


@pytest.fixture
def client():
    with TestClient(webapi.app) as c:
        yield c


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_license_evaluation_mode(client, monkeypatch):
    guard = LicenseGuard(lambda: None, object, lambda lic, s: None, lambda e: None)
    monkeypatch.setattr(webapi, "GUARD", guard)
    resp = client.get("/license")
    assert resp.json() == {"licensed": False, "fingerprint": None}


def test_license_loaded(client, monkeypatch, tmp_path):
    from docs_common.conversion.adapters import FileLicenseConfiguration

    lic = tmp_path / "docs.lic"
    lic.write_bytes(b"key")
    guard = LicenseGuard.from_configuration(FileLicenseConfiguration(str(lic)))
    guard.load_license()
    monkeypatch.setattr(webapi, "GUARD", guard)

    body = client.get("/license").json()
    assert body["licensed"] is True
    assert body["fingerprint"] == guard.license.fingerprint


def test_convert_text(client):
    files = {"file": ("notes.txt", io.BytesIO(b"Test document content"), "text/plain")}
    resp = client.post("/convert", params={"format": "text"}, files=files)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")
    assert resp.content == b"Test document content"


def test_convert_markdown_to_pdf(client):
    files = {"file": ("notes.md", io.BytesIO(b"# Heading\n\nBody"), "text/markdown")}
    resp = client.post("/convert", files=files)
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF")


def test_convert_unknown_format(client):
    files = {"file": ("notes.txt", io.BytesIO(b"x"), "text/plain")}
    resp = client.post("/convert", params={"format": "docx"}, files=files)
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "unsupported_format"


def test_convert_failure(client):
    files = {"file": ("notes.txt", io.BytesIO(b"\xff\xfe\xfa"), "text/plain")}
    resp = client.post("/convert", params={"format": "text"}, files=files)
    assert resp.status_code == 422
    assert resp.json()["detail"] == {"code": "conversion_failed", "message": "Failed to load document from byte array"}


def test_convert_too_large(client, monkeypatch):
    monkeypatch.setattr(webapi, "MAX_UPLOAD_MB", 0)
    files = {"file": ("notes.txt", io.BytesIO(b"x"), "text/plain")}
    resp = client.post("/convert", params={"format": "text"}, files=files)
    assert resp.status_code == 413


def test_convert_keeps_event_loop_responsive(monkeypatch):
    import asyncio
    import time

    from starlette.datastructures import UploadFile

    from docs_common.conversion.adapters import PlainTextStrategy

    original = PlainTextStrategy.save_to_stream

    def slow_save(self, document, sink, fmt):
        time.sleep(0.5)
        original(self, document, sink, fmt)

    monkeypatch.setattr(PlainTextStrategy, "save_to_stream", slow_save)

    async def scenario():
        gaps = []
        done = asyncio.Event()

        async def ticker():
            last = time.monotonic()
            while not done.is_set():
                await asyncio.sleep(0.05)
                now = time.monotonic()
                gaps.append(now - last)
                last = now

        tick = asyncio.create_task(ticker())
        upload = UploadFile(file=io.BytesIO(b"slow document"), filename="notes.txt")
        resp = await webapi.convert(file=upload, format="text")
        done.set()
        await tick
        return resp, gaps

    resp, gaps = asyncio.run(scenario())

    assert resp.body == b"slow document"
    assert max(gaps) < 0.3
