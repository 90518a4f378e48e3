"""
QR Bridge — Transcoding Service (Pipeline Orchestrator)
=========================================================

What:  Orchestrates the two pipelines between records and QR code images.
How:   Composes a RecordCodec, a MatrixCodec and an ImageCodec behind their
       abstract interfaces; it owns no codec logic itself.
Who:   Called by the /api/qr route handlers (through a FastAPI dependency).
When:  Once per generate or read request.

Pipelines:
    generate(record, sink)
        ┌────────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────┐
        │ RecordCodec│───▶│ MatrixCodec │───▶│  ImageCodec  │───▶│   Sink   │
        │  .encode   │    │  .encode    │    │  .rasterize  │    │ headers  │
        └────────────┘    └─────────────┘    └──────────────┘    │ + bytes  │
                                                                 └──────────┘
    read(upload)
        ┌────────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────────┐
        │   Upload   │───▶│ ImageCodec  │───▶│ MatrixCodec  │───▶│ RecordCodec  │
        │  .stream   │    │  .parse     │    │  .decode     │    │  .decode     │
        └────────────┘    └─────────────┘    └──────────────┘    └──────────────┘

Failure at any stage aborts the request with a typed QrBridgeError:
    absent record      → MissingInputError     (nothing written to the sink)
    stream unusable    → IOFailureError
    not an image       → UnsupportedImageError
    no QR code         → SymbolNotFoundError
    not a record       → MalformedRecordError
    encoder failure    → CodecFaultError

The service is stateless: every call builds its own buffers, matrix and
image, so one instance is shared by all requests and worker threads.
"""

import logging
from typing import Optional
from urllib.parse import quote

from qrbridge.config import settings
from qrbridge.exceptions import IOFailureError
from qrbridge.schemas.record import Record, TranscodeResponse
from qrbridge.services.codec_base import ImageCodec, MatrixCodec, RecordCodec
from qrbridge.services.image_codec import PillowImageCodec
from qrbridge.services.matrix_codec import QrMatrixCodec
from qrbridge.services.record_codec import JsonRecordCodec
from qrbridge.services.streams import DownloadSink, UploadSource

logger = logging.getLogger(__name__)

CONTENT_DISPOSITION = "Content-Disposition"


def derive_filename(title: Optional[str], extension: str = ".png") -> str:
    """
    Download filename for a record title.

    Every space becomes an underscore and the extension is appended; an
    empty or absent title yields the bare extension.

        >>> derive_filename("Test QR")
        'Test_QR.png'
        >>> derive_filename("")
        '.png'
    """
    return (title or "").replace(" ", "_") + extension


def content_disposition(filename: str) -> str:
    """
    Attachment header value for a download filename.

    Names that fit in Latin-1 (the HTTP header charset) are sent verbatim as
    `attachment;filename=<name>`. Anything else is percent-encoded as an
    RFC 5987 `filename*` parameter.

        >>> content_disposition("Test_QR.png")
        'attachment;filename=Test_QR.png'
        >>> content_disposition("日本.png")
        "attachment;filename*=UTF-8''%E6%97%A5%E6%9C%AC.png"
    """
    try:
        filename.encode("latin-1")
    except UnicodeEncodeError:
        return f"attachment;filename*=UTF-8''{quote(filename)}"
    return f"attachment;filename={filename}"


class TranscodingService:
    """
    Record ⇄ QR image transcoding.

    Args:
        record_codec: Record serialization (default: JSON)
        matrix_codec: 2-D symbology (default: QR)
        image_codec:  Raster container I/O (default: Pillow)
        width, height: Symbol size in pixels; defaults from settings (200x200)
        image_format: Output container; default from settings (PNG)
    """

    def __init__(
        self,
        record_codec: Optional[RecordCodec] = None,
        matrix_codec: Optional[MatrixCodec] = None,
        image_codec: Optional[ImageCodec] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        image_format: Optional[str] = None,
    ):
        self.record_codec = record_codec or JsonRecordCodec()
        self.matrix_codec = matrix_codec or QrMatrixCodec()
        self.image_codec = image_codec or PillowImageCodec()
        self.width = width or settings.matrix_width
        self.height = height or settings.matrix_height
        self.image_format = (image_format or settings.image_format).upper()

    def generate(self, record: Optional[Record], sink: DownloadSink) -> None:
        """
        Encode a record as a QR image and write it to the sink as a download.

        Steps:
            1. Serialize the record (absent record → MissingInputError)
            2. Encode the text as a width x height symbol matrix
            3. Rasterize the matrix into the configured container
            4. Set Content-Disposition (derived filename) and content type
            5. Write the image bytes to the sink stream

        Raises:
            MissingInputError, CodecFaultError, IOFailureError
        """
        payload = self.record_codec.encode(record)
        matrix = self.matrix_codec.encode(payload, self.width, self.height)
        image = self.image_codec.rasterize(matrix, self.image_format)

        filename = derive_filename(record.title, "." + image.image_format.lower())
        sink.set_header(CONTENT_DISPOSITION, content_disposition(filename))
        sink.content_type = image.mime_type

        try:
            with sink.open_stream() as out:
                out.write(image.data)
        except OSError as e:
            logger.error("Failed to write %d image bytes: %s", len(image.data), str(e))
            raise IOFailureError(
                message="Failed to write the generated image",
                context={"os_error": str(e)},
            ) from e

        logger.info(
            "Generated QR download %s (%dx%d, %d bytes)",
            filename, matrix.width, matrix.height, len(image.data),
        )

    def read(self, upload: UploadSource) -> TranscodeResponse:
        """
        Decode the QR code in an uploaded image back into a record.

        Steps:
            1. Open the upload stream (OSError → IOFailureError)
            2. Parse the bytes into a pixel grid (not an image → UnsupportedImageError)
            3. Locate and decode the QR code (none → SymbolNotFoundError)
            4. Deserialize the text (not a record → MalformedRecordError)

        Returns:
            TranscodeResponse with status 200 and the reconstructed record.
        """
        try:
            with upload.open_stream() as stream:
                grid = self.image_codec.parse(stream)
        except OSError as e:
            logger.error("Could not open upload %s: %s", upload.filename or "<unnamed>", str(e))
            raise IOFailureError(
                message="Failed to read the uploaded file",
                context={"filename": upload.filename, "os_error": str(e)},
            ) from e

        text = self.matrix_codec.decode(grid)
        record = self.record_codec.decode(text)

        logger.info("Read record from QR upload %s", upload.filename or "<unnamed>")
        return TranscodeResponse(status_code=200, body=record)


# ── Singleton Instance ────────────────────────────────────────────────────
transcoding_service = TranscodingService()


def get_transcoding_service() -> TranscodingService:
    """FastAPI dependency returning the shared service (overridable in tests)."""
    return transcoding_service
