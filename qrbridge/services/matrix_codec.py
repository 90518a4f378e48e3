"""
QR Bridge — QR Matrix Codec
=============================

What:  MatrixCodec implementation for QR codes.
How:   Encoding uses the `qrcode` library to build the module grid, then
       scales it with numpy to the requested pixel size. Decoding uses
       zxing-cpp (the C++ port of ZXing) over a short list of image
       preparations built with numpy.
Who:   Called by TranscodingService in both pipelines.

Scaling rule (encode):
    The symbol plus a 4-module quiet zone is scaled by the largest integer
    factor that fits in width x height and centred. If the symbol is larger
    than the request, the output grows to the symbol's natural size.

    Example: 37-module symbol (version 5), request 200x200
        37 + 2*4 = 45 → factor 200 // 45 = 4 → 148px symbol, 26px padding
"""

import logging
from typing import Iterator, Tuple

import numpy as np
import qrcode
import zxingcpp
from qrcode.exceptions import DataOverflowError

from qrbridge.exceptions import CodecFaultError, SymbolNotFoundError
from qrbridge.services.codec_base import MatrixCodec, PixelGrid, SymbolMatrix

logger = logging.getLogger(__name__)

QUIET_ZONE_MODULES = 4

# Grids smaller than this (longest side, px) are also tried upscaled
UPSCALE_TARGET_PX = 800


class QrMatrixCodec(MatrixCodec):
    """
    QR encode/decode. Stateless; safe to share between threads.

    Args:
        error_correction: qrcode error-correction constant (default level L)
    """

    def __init__(self, error_correction: int = qrcode.constants.ERROR_CORRECT_L):
        self.error_correction = error_correction

    # ── Encode ────────────────────────────────────────────────────────────

    def encode(self, text: str, width: int, height: int) -> SymbolMatrix:
        if not text:
            raise CodecFaultError(message="Cannot encode empty contents")
        if width < 0 or height < 0:
            raise CodecFaultError(
                message="Requested dimensions are negative",
                context={"width": width, "height": height},
            )

        qr = qrcode.QRCode(
            version=None,
            error_correction=self.error_correction,
            box_size=1,
            border=0,
        )
        try:
            qr.add_data(text)
            qr.make(fit=True)
        except (DataOverflowError, ValueError) as e:
            logger.error("QR encoder failed for %d chars: %s", len(text), str(e))
            raise CodecFaultError(
                message="Payload cannot be encoded as a QR code",
                context={"length": len(text), "error": str(e)},
            ) from e

        core = np.array(qr.get_matrix(), dtype=bool)
        modules, out_w, out_h = self._scale(core, width, height)

        logger.debug(
            "Encoded %d chars as QR version %d (%d modules) into %dx%d",
            len(text), qr.version, core.shape[0], out_w, out_h,
        )
        return SymbolMatrix(width=out_w, height=out_h, modules=modules)

    @staticmethod
    def _scale(core: np.ndarray, width: int, height: int) -> Tuple[np.ndarray, int, int]:
        """Scales the bare symbol into a centred, quiet-zoned width x height grid."""
        size = core.shape[0]
        padded = size + 2 * QUIET_ZONE_MODULES
        out_w = max(width, padded)
        out_h = max(height, padded)
        factor = min(out_w // padded, out_h // padded)

        scaled = np.repeat(np.repeat(core, factor, axis=0), factor, axis=1)
        left = (out_w - size * factor) // 2
        top = (out_h - size * factor) // 2

        modules = np.zeros((out_h, out_w), dtype=bool)
        modules[top:top + scaled.shape[0], left:left + scaled.shape[1]] = scaled
        return modules, out_w, out_h

    # ── Decode ────────────────────────────────────────────────────────────

    def decode(self, grid: PixelGrid) -> str:
        for name, candidate in self._candidates(grid):
            results = zxingcpp.read_barcodes(candidate, formats=zxingcpp.BarcodeFormat.QRCode)
            for result in results:
                if result.text:
                    logger.debug("QR decoded using %s strategy (%d chars)", name, len(result.text))
                    return result.text

        logger.info("No QR code found in %dx%d image", grid.shape[1], grid.shape[0])
        raise SymbolNotFoundError(
            context={"width": int(grid.shape[1]), "height": int(grid.shape[0])},
        )

    @staticmethod
    def _candidates(grid: PixelGrid) -> Iterator[Tuple[str, np.ndarray]]:
        """
        Yields progressively more processed versions of the grid.

        1. As uploaded
        2. White border added and upscaled (nearest neighbour keeps edges sharp)
        3. Same, thresholded at mid-grey (recovers low-contrast or anti-aliased codes)
        """
        yield "original", np.ascontiguousarray(grid, dtype=np.uint8)

        longest = max(grid.shape[0], grid.shape[1])
        factor = max(1, -(-UPSCALE_TARGET_PX // longest))
        margin = max(8, longest // 10)
        bordered = np.pad(grid, margin, mode="constant", constant_values=255)
        enlarged = np.repeat(np.repeat(bordered, factor, axis=0), factor, axis=1)
        yield "upscaled", np.ascontiguousarray(enlarged, dtype=np.uint8)

        binary = np.where(enlarged > 128, 255, 0).astype(np.uint8)
        yield "binarized", binary
