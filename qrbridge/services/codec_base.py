"""
QR Bridge — Abstract Codec Interfaces
=======================================

What:  Abstract base classes for the three transformation boundaries of the
       transcoding pipelines, plus the value types passed between them.
How:   Concrete codecs inherit from RecordCodec, MatrixCodec or ImageCodec.
       TranscodingService depends only on these interfaces, so a codec can be
       replaced (another serialization, symbology or image library) without
       touching the orchestration.
Who:   Implemented by record_codec.py, matrix_codec.py and image_codec.py.

Data flow:
    Record ──RecordCodec.encode──▶ str ──MatrixCodec.encode──▶ SymbolMatrix
           ──ImageCodec.rasterize──▶ RasterImage

    bytes ──ImageCodec.parse──▶ PixelGrid ──MatrixCodec.decode──▶ str
          ──RecordCodec.decode──▶ Record
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO, Optional

import numpy as np

from qrbridge.schemas.record import Record

# 2-D uint8 grayscale image, shape (height, width), 0 = black, 255 = white
PixelGrid = np.ndarray


@dataclass(frozen=True)
class SymbolMatrix:
    """
    A scaled 2-D barcode: `modules[y, x]` is True where the pixel is dark.

    The quiet zone is part of the matrix; width and height are the final
    pixel dimensions handed to the rasterizer.
    """
    width: int
    height: int
    modules: np.ndarray

    def __post_init__(self):
        if self.modules.shape != (self.height, self.width):
            raise ValueError(
                f"modules shape {self.modules.shape} does not match "
                f"{self.height}x{self.width}"
            )


@dataclass(frozen=True)
class RasterImage:
    """Encoded image bytes together with their container format and MIME type."""
    data: bytes
    image_format: str
    mime_type: str


class RecordCodec(ABC):
    """
    Serializes a Record to text and back.

    Contract:
        - decode(encode(r)) == r for every record r
        - encode(None) raises MissingInputError
        - decode() raises MalformedRecordError for anything that is not a record
    """

    @abstractmethod
    def encode(self, record: Optional[Record]) -> str:
        ...

    @abstractmethod
    def decode(self, text: str) -> Record:
        ...


class MatrixCodec(ABC):
    """
    Encodes text into a 2-D symbol and locates/decodes a symbol in a pixel grid.

    Contract:
        - encode() raises CodecFaultError on internal encoder failure
        - decode() raises SymbolNotFoundError when the grid holds no readable symbol
    """

    @abstractmethod
    def encode(self, text: str, width: int, height: int) -> SymbolMatrix:
        ...

    @abstractmethod
    def decode(self, grid: PixelGrid) -> str:
        ...


class ImageCodec(ABC):
    """
    Rasterizes a SymbolMatrix into an image container and parses bytes into pixels.

    Contract:
        - parse() raises UnsupportedImageError when the bytes are not a
          decodable image; it never returns None
    """

    @abstractmethod
    def rasterize(self, matrix: SymbolMatrix, image_format: str) -> RasterImage:
        ...

    @abstractmethod
    def parse(self, stream: BinaryIO) -> PixelGrid:
        ...
