"""
QR Bridge — Pillow Image Codec Unit Tests
===========================================

What we test:
    ✅ Rasterized output is a PNG of the matrix size with the right MIME type
    ✅ Dark modules are black, light modules white
    ✅ Unsupported or lossy output formats raise CodecFaultError
    ✅ Parsing returns a 2-D grayscale grid for PNG/JPEG/RGB input
    ✅ Text bytes and truncated files raise UnsupportedImageError
    ✅ Stream read errors propagate as OSError
"""

import io

import numpy as np
import pytest
from PIL import Image

from qrbridge.exceptions import CodecFaultError, UnsupportedImageError
from qrbridge.services.codec_base import SymbolMatrix
from qrbridge.services.image_codec import PillowImageCodec


class FailingReader(io.RawIOBase):
    """Readable stream whose every read fails at the OS level."""

    def readable(self):
        return True

    def readinto(self, buffer):
        raise OSError("disk read failure")


def checkerboard(width: int = 8, height: int = 6) -> SymbolMatrix:
    modules = (np.indices((height, width)).sum(axis=0) % 2).astype(bool)
    return SymbolMatrix(width=width, height=height, modules=modules)


class TestRasterize:

    def setup_method(self):
        self.codec = PillowImageCodec()

    def test_rasterize_png(self):
        image = self.codec.rasterize(checkerboard(), "PNG")
        assert image.data.startswith(b"\x89PNG\r\n\x1a\n")
        assert image.image_format == "PNG"
        assert image.mime_type == "image/png"

    def test_rasterize_format_is_case_insensitive(self):
        assert self.codec.rasterize(checkerboard(), "bmp").mime_type == "image/bmp"

    def test_rasterize_pixels_follow_modules(self):
        matrix = checkerboard()
        image = self.codec.rasterize(matrix, "PNG")
        with Image.open(io.BytesIO(image.data)) as decoded:
            assert decoded.size == (8, 6)
            pixels = np.array(decoded.convert("L"))
        assert np.array_equal(pixels == 0, matrix.modules)

    def test_rasterize_unsupported_format_raises(self):
        with pytest.raises(CodecFaultError, match="not supported"):
            self.codec.rasterize(checkerboard(), "TIFF")

    def test_rasterize_jpeg_rejected(self):
        with pytest.raises(CodecFaultError, match="not supported"):
            self.codec.rasterize(checkerboard(), "JPEG")

    def test_symbol_matrix_shape_checked(self):
        with pytest.raises(ValueError):
            SymbolMatrix(width=3, height=3, modules=np.zeros((2, 3), dtype=bool))


class TestParse:

    def setup_method(self):
        self.codec = PillowImageCodec()

    def test_parse_rasterized_png(self):
        matrix = checkerboard()
        data = self.codec.rasterize(matrix, "PNG").data
        grid = self.codec.parse(io.BytesIO(data))
        assert grid.shape == (6, 8)
        assert grid.dtype == np.uint8
        assert np.array_equal(grid, np.where(matrix.modules, 0, 255))

    def test_parse_rgb_png_is_grayscale(self, blank_png):
        grid = self.codec.parse(io.BytesIO(blank_png))
        assert grid.shape == (100, 100)
        assert not grid.any()

    def test_parse_jpeg(self):
        buffer = io.BytesIO()
        Image.new("RGB", (40, 30), color="white").save(buffer, format="JPEG")
        buffer.seek(0)
        grid = self.codec.parse(buffer)
        assert grid.shape == (30, 40)

    def test_parse_text_bytes_raises(self, not_an_image):
        with pytest.raises(UnsupportedImageError):
            self.codec.parse(io.BytesIO(not_an_image))

    def test_parse_empty_stream_raises(self):
        with pytest.raises(UnsupportedImageError):
            self.codec.parse(io.BytesIO(b""))

    def test_parse_truncated_png_raises(self, qr_png):
        data = qr_png("truncate me")
        with pytest.raises(UnsupportedImageError, match="corrupt or truncated"):
            self.codec.parse(io.BytesIO(data[: len(data) // 2]))

    def test_parse_stream_failure_is_not_an_image_error(self):
        with pytest.raises(OSError, match="disk read failure"):
            self.codec.parse(FailingReader())
