"""
QR Bridge — QR Matrix Codec Unit Tests
========================================

What we test:
    ✅ Output size, centring and quiet zone of encoded symbols
    ✅ Oversized symbols grow past the requested size
    ✅ Empty and overlong payloads raise CodecFaultError
    ✅ Decoding rendered symbols, including small upscaled ones
    ✅ Blank grids raise SymbolNotFoundError
"""

import numpy as np
import pytest

from qrbridge.exceptions import CodecFaultError, SymbolNotFoundError
from qrbridge.services.matrix_codec import QrMatrixCodec


def to_grid(modules: np.ndarray) -> np.ndarray:
    return np.where(modules, 0, 255).astype(np.uint8)


class TestQrEncode:

    def setup_method(self):
        self.codec = QrMatrixCodec()

    def test_encode_fills_requested_size(self):
        matrix = self.codec.encode("hello", 200, 200)
        assert (matrix.width, matrix.height) == (200, 200)
        assert matrix.modules.shape == (200, 200)
        assert matrix.modules.dtype == bool

    def test_encode_centres_symbol_with_quiet_zone(self):
        # "hello" → version 1 (21 modules); 21 + 8 = 29 → factor 6 → 126px
        matrix = self.codec.encode("hello", 200, 200)
        offset = (200 - 21 * 6) // 2
        assert not matrix.modules[:offset, :].any()
        assert not matrix.modules[:, :offset].any()
        assert not matrix.modules[offset + 126:, :].any()
        # top-left finder pattern starts exactly at the offset
        assert matrix.modules[offset, offset]
        assert not matrix.modules[offset + 6, offset + 6]
        assert matrix.modules[offset + 18, offset + 18]

    def test_encode_grows_when_request_too_small(self):
        matrix = self.codec.encode("hello", 10, 10)
        assert (matrix.width, matrix.height) == (29, 29)

    def test_encode_non_square_request(self):
        matrix = self.codec.encode("hello", 300, 100)
        assert matrix.modules.shape == (100, 300)

    def test_encode_empty_text_raises(self):
        with pytest.raises(CodecFaultError, match="empty"):
            self.codec.encode("", 200, 200)

    def test_encode_overlong_text_raises(self):
        with pytest.raises(CodecFaultError):
            self.codec.encode("x" * 4000, 200, 200)


class TestQrDecode:

    def setup_method(self):
        self.codec = QrMatrixCodec()

    def test_decode_encoded_text(self):
        text = '{"title":"Test QR","message":"hello"}'
        matrix = self.codec.encode(text, 200, 200)
        assert self.codec.decode(to_grid(matrix.modules)) == text

    def test_decode_small_symbol(self):
        # 1px modules, no room to spare
        matrix = self.codec.encode("small", 29, 29)
        assert self.codec.decode(to_grid(matrix.modules)) == "small"

    # Byte-mode capacities at level L span versions 1 to 40; version 40
    # (177 modules + quiet zone) still fits in 200px at 1px per module
    @pytest.mark.parametrize("length", [1, 50, 160, 360, 400, 800, 1500, 2200, 2950])
    def test_decode_round_trip_at_200px(self, length):
        text = "x" * length
        matrix = self.codec.encode(text, 200, 200)
        assert (matrix.width, matrix.height) == (200, 200)
        assert self.codec.decode(to_grid(matrix.modules)) == text

    def test_decode_blank_white_grid_raises(self):
        with pytest.raises(SymbolNotFoundError):
            self.codec.decode(np.full((100, 100), 255, dtype=np.uint8))

    def test_decode_blank_black_grid_raises(self):
        with pytest.raises(SymbolNotFoundError) as exc_info:
            self.codec.decode(np.zeros((100, 120), dtype=np.uint8))
        assert exc_info.value.context == {"width": 120, "height": 100}
