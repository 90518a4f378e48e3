"""
QR Bridge — Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for each stage of the transcoding pipelines.
How:   Each exception carries a user-facing message and an optional context dict.
       Global exception handlers (registered in main.py) map them to HTTP
       status codes and structured JSON error responses.
Who:   Raised by the codecs and TranscodingService; caught by global handlers.
When:  Whenever a generate/read request cannot complete. Nothing is recovered
       locally and nothing is retried.

Exception Hierarchy:
    QrBridgeError (base)
    ├── ValidationError          → 400 Bad Request (upload rejected before decoding)
    ├── MissingInputError        → 400 Bad Request (no record to encode)
    ├── MalformedRecordError     → 422 Unprocessable Entity (decoded text is not a record)
    ├── UnsupportedImageError    → 422 Unprocessable Entity (bytes are not an image)
    ├── SymbolNotFoundError      → 422 Unprocessable Entity (image holds no QR code)
    ├── CodecFaultError          → 500 Internal Server Error (encoder failure)
    └── IOFailureError           → 500 Internal Server Error (stream could not be used)
"""

from typing import Any, Dict, Optional


class QrBridgeError(Exception):
    """
    Base exception for all QR Bridge application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(QrBridgeError):
    """
    Raised when an upload fails HTTP-level checks (empty or oversized file).

    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class MissingInputError(QrBridgeError):
    """
    Raised when generate() is called without a record.

    What:    The record codec refuses to serialize an absent record.
    When:    Before any matrix, image or output bytes are produced.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "No record was supplied to encode",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MalformedRecordError(QrBridgeError):
    """
    Raised when decoded QR text does not deserialize into a record.

    When:    Plain text, invalid JSON, JSON of the wrong shape or with unknown keys.
    HTTP:    422 Unprocessable Entity
    """

    def __init__(
        self,
        message: str = "The QR code does not contain a valid record",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnsupportedImageError(QrBridgeError):
    """
    Raised when uploaded bytes cannot be parsed as a raster image.

    What:    The image decoder did not recognise any supported container,
             or the container was truncated/corrupt.
    HTTP:    422 Unprocessable Entity
    """

    def __init__(
        self,
        message: str = "The uploaded file is not a supported image",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class SymbolNotFoundError(QrBridgeError):
    """
    Raised when a valid image contains no locatable, decodable QR code.

    HTTP:    422 Unprocessable Entity
    """

    def __init__(
        self,
        message: str = "No QR code could be found in the image",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class CodecFaultError(QrBridgeError):
    """
    Raised when the QR encoder or rasterizer fails internally.

    When:    Payload too large for any QR version, empty payload, or an
             unsupported output container. Not expected in normal operation.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Failed to encode the QR code",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class IOFailureError(QrBridgeError):
    """
    Raised when an input or output stream cannot be opened, read or written.

    What:    Wraps the underlying OSError (available as __cause__).
    HTTP:    500 Internal Server Error

    Security Note:
        The OS error text goes into context (logged server-side only).
    """

    def __init__(
        self,
        message: str = "Failed to read or write the image stream",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
