import asyncio
import io
import os

import pymupdf as fitz
import pytest
from fastapi.testclient import TestClient
from PIL import Image

# api.main builds a module-level app from the environment on import
os.environ.setdefault("GEMINI_API_KEY", "import-time-key")

from api.main import create_app  # noqa: E402
from config.env_config import Settings  # noqa: E402

TRANSCRIPTION = "Medicine Name: Paracetamol\nDosage: 500mg twice daily\nPurpose: Fever\n"
TEST_SECRET = "sk-test-secret-value"


class FakeBackend:
    """Stands in for the vision model; records every call"""

    name = "fake"
    model = "fake-vision-1"

    def __init__(self, reply=TRANSCRIPTION, error=None, delay=0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.calls = []

    async def infer(self, prompt, image):
        self.calls.append((prompt, image))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


def make_image(fmt="JPEG", size=(64, 32), color="red") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


def pdf_pages(data: bytes) -> int:
    with fitz.open(stream=data, filetype="pdf") as doc:
        return doc.page_count


def pdf_text(data: bytes, page: int = 0) -> str:
    with fitz.open(stream=data, filetype="pdf") as doc:
        return doc[page].get_text()


@pytest.fixture
def jpeg_bytes():
    return make_image("JPEG")


@pytest.fixture
def png_bytes():
    return make_image("PNG")


@pytest.fixture
def settings():
    return Settings(
        gemini_api_key=TEST_SECRET,
        inference_timeout_s=2.0,
        max_upload_bytes=1024 * 1024,
        max_report_body_bytes=2 * 1024 * 1024,
    )


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def app(settings, backend):
    return create_app(settings, backend=backend)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
