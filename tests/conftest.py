import re
from typing import Any

import httpx
import pytest

from mathdoc.config.settings import Settings
from mathdoc.jobs.models import UploadFile

_STATUS_PATH = re.compile(r"/pdf/(?P<job_id>[^/.]+)$")
_DOWNLOAD_PATH = re.compile(r"/pdf/(?P<job_id>[^/.]+)\.(?P<ext>.+)$")


class FakeMathpix:
    """Scripted stand-in for the conversion service, served via httpx.MockTransport.

    Status responses are consumed in order; the last one repeats.
    """

    def __init__(
        self,
        statuses: list[dict[str, Any]] | None = None,
        upload_response: dict[str, Any] | None = None,
        files: dict[str, str | bytes] | None = None,
        lines: dict[str, Any] | None = None,
        text_response: dict[str, Any] | None = None,
    ) -> None:
        self.statuses = list(statuses or [{"status": "completed"}])
        self.upload_response = upload_response if upload_response is not None else {
            "pdf_id": "job-123"
        }
        self.files = files or {}
        self.lines = lines
        self.text_response = text_response or {"text": "\\( x^2 \\)", "confidence": 0.9}
        self.requests: list[httpx.Request] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def status_calls(self) -> int:
        return sum(
            1
            for request in self.requests
            if request.method == "GET" and _STATUS_PATH.search(request.url.path)
        )

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "POST" and path.endswith("/pdf"):
            return httpx.Response(200, json=self.upload_response)
        if request.method == "POST" and path.endswith("/text"):
            return httpx.Response(200, json=self.text_response)
        if path.endswith(".lines.json"):
            if self.lines is None:
                return httpx.Response(404, text="lines not found")
            return httpx.Response(200, json=self.lines)
        if _STATUS_PATH.search(path):
            status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
            return httpx.Response(200, json=status)
        match = _DOWNLOAD_PATH.search(path)
        if match and match.group("ext") in self.files:
            content = self.files[match.group("ext")]
            if isinstance(content, bytes):
                return httpx.Response(200, content=content)
            return httpx.Response(200, text=content)
        return httpx.Response(404, text=f"no route for {path}")


@pytest.fixture()
def settings() -> Settings:
    """Settings with credentials and a short polling schedule."""
    return Settings(
        app_id="test-app",
        app_key="secret-key-9876",
        api_base="https://ocr.example.test/v3",
        poll_interval_seconds=0.0,
        max_status_polls=5,
        backoff_after_polls=2,
        backoff_multiplier=1.5,
    )


@pytest.fixture()
def fake_service() -> type[FakeMathpix]:
    return FakeMathpix


@pytest.fixture()
def pdf_upload() -> UploadFile:
    return UploadFile(
        filename="paper.pdf",
        mime_type="application/pdf",
        content=b"%PDF-1.4\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF",
    )


@pytest.fixture()
def png_upload() -> UploadFile:
    return UploadFile(
        filename="equation.png",
        mime_type="image/png",
        content=b"\x89PNG\r\n\x1a\n" + b"\x00" * 64,
    )


@pytest.fixture()
def lines_payload() -> dict[str, Any]:
    """Two pages of line data with mixed content types."""
    return {
        "pages": [
            {
                "page": 1,
                "page_width": 1200,
                "page_height": 1600,
                "image_id": "img-1",
                "lines": [
                    {"type": "text", "text": "Proof by induction", "confidence": 0.98,
                     "is_printed": True},
                    {"type": "math", "text": "\\( \\sum_{k=1}^{n} k \\)", "confidence": 0.9,
                     "is_printed": True},
                    {"type": "table", "text": "a\tb", "confidence": 0.6,
                     "is_handwritten": True},
                ],
            },
            {
                "page": 2,
                "page_width": 1200,
                "page_height": 1600,
                "lines": [
                    {"type": "diagram", "text": "", "is_printed": True},
                    {"text": "where $x = 1$", "confidence": 0.8, "is_handwritten": True},
                ],
            },
        ]
    }
