"""
QR Bridge — Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures:
    ├── sample_record: The record used by most pipeline tests
    ├── qr_png: Factory rendering arbitrary text as a 200x200 QR PNG
    ├── blank_png: A valid PNG containing no QR code
    ├── not_an_image: Plain text bytes
    └── test_client: HTTPX AsyncClient bound to the FastAPI app
"""

import io
import os

# Override settings before any qrbridge imports read them
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["MATRIX_WIDTH"] = "200"
os.environ["MATRIX_HEIGHT"] = "200"
os.environ["IMAGE_FORMAT"] = "PNG"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from PIL import Image

from qrbridge.schemas.record import Record
from qrbridge.services.image_codec import PillowImageCodec
from qrbridge.services.matrix_codec import QrMatrixCodec


@pytest.fixture
def sample_record():
    return Record(
        title="Test QR",
        message="This is a test payload",
        generated_by_name="JUnit",
        generated_for_name="Test Target",
    )


@pytest.fixture
def qr_png():
    """
    Factory: renders `text` as a QR code PNG, independent of TranscodingService.

    Usage:
        def test_x(qr_png):
            data = qr_png("hello")
    """
    def render(text: str, width: int = 200, height: int = 200) -> bytes:
        matrix = QrMatrixCodec().encode(text, width, height)
        return PillowImageCodec().rasterize(matrix, "PNG").data

    return render


@pytest.fixture
def blank_png():
    """A 100x100 all-black RGB PNG: a valid image with no QR code in it."""
    buffer = io.BytesIO()
    Image.new("RGB", (100, 100)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def not_an_image():
    return b"This is not an image"


@pytest_asyncio.fixture
async def test_client():
    """
    HTTPX AsyncClient routed straight into the ASGI app (no server).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    from qrbridge.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
