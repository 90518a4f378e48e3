"""
QR Bridge — Pillow Image Codec
================================

What:  ImageCodec implementation backed by Pillow.
How:   rasterize() paints a SymbolMatrix as an 8-bit grayscale image (dark
       modules black, light modules white) and saves it in the requested
       container. parse() opens any container Pillow recognises and returns
       an 8-bit grayscale numpy grid.
Who:   Called by TranscodingService.

"No image" is an explicit failure here: anything Pillow cannot identify or
fully load raises UnsupportedImageError, so later stages never see None.
"""

import io
import logging
from typing import BinaryIO

import numpy as np
from PIL import Image, UnidentifiedImageError

from qrbridge.exceptions import CodecFaultError, UnsupportedImageError
from qrbridge.services.codec_base import ImageCodec, PixelGrid, RasterImage, SymbolMatrix

logger = logging.getLogger(__name__)

# Pillow format name → MIME type of containers we can emit.
# Lossless only; JPEG uploads are read by parse() but never written.
MIME_TYPES = {
    "PNG": "image/png",
    "BMP": "image/bmp",
    "GIF": "image/gif",
}

DARK = 0
LIGHT = 255


class PillowImageCodec(ImageCodec):
    """Raster image read/write using Pillow. Stateless."""

    def rasterize(self, matrix: SymbolMatrix, image_format: str = "PNG") -> RasterImage:
        fmt = image_format.upper()
        mime_type = MIME_TYPES.get(fmt)
        if mime_type is None:
            raise CodecFaultError(
                message=f"Image format '{image_format}' is not supported",
                context={"allowed": sorted(MIME_TYPES)},
            )

        pixels = np.where(matrix.modules, DARK, LIGHT).astype(np.uint8)
        image = Image.fromarray(pixels)

        buffer = io.BytesIO()
        image.save(buffer, format=fmt)
        data = buffer.getvalue()

        logger.debug("Rasterized %dx%d matrix to %d bytes of %s", matrix.width, matrix.height, len(data), fmt)
        return RasterImage(data=data, image_format=fmt, mime_type=mime_type)

    def parse(self, stream: BinaryIO) -> PixelGrid:
        # Stream failures propagate as OSError; only the bytes are judged below
        data = stream.read()

        try:
            with Image.open(io.BytesIO(data)) as image:
                # Image.open is lazy; load() forces a full decode so truncated
                # files fail here and not inside the QR detector
                image.load()
                detected = image.format
                grid = np.array(image.convert("L"), dtype=np.uint8)
        except UnidentifiedImageError as e:
            logger.warning("Upload is not a recognisable image")
            raise UnsupportedImageError(context={"error": str(e)}) from e
        except (OSError, SyntaxError, Image.DecompressionBombError) as e:
            # Pillow raises OSError/SyntaxError for truncated or corrupt data
            logger.warning("Image could not be decoded: %s", str(e))
            raise UnsupportedImageError(
                message="The uploaded image is corrupt or truncated",
                context={"error": str(e)},
            ) from e

        logger.debug("Parsed %s image %dx%d", detected, grid.shape[1], grid.shape[0])
        return grid
