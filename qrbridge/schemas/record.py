"""
QR Bridge — Pydantic Record & Response Schemas
================================================

What:  Pydantic models for the transcoded record and the API envelopes.
How:   `Record` is both the JSON request body of POST /api/qr/generate and the
       payload serialized into the QR code. Wire names are camelCase aliases
       (title, message, generatedByName, generatedForName); Python code uses
       snake_case attributes.
Who:   Used by JsonRecordCodec, TranscodingService and the route handlers.
"""

from typing import Optional

from pydantic import BaseModel, Field


class Record(BaseModel):
    """
    What:  The structured payload carried inside a QR code.
    When:  Built by the caller of generate(); rebuilt by read().

    All fields are optional text. `title` also names the downloaded file.
    Instances are immutable; unknown keys are rejected when decoding.
    """
    title: Optional[str] = Field(default=None, description="Title; drives the download filename")
    message: Optional[str] = Field(default=None, description="Free-form message body")
    generated_by_name: Optional[str] = Field(
        default=None,
        alias="generatedByName",
        description="Name of the person generating the code",
    )
    generated_for_name: Optional[str] = Field(
        default=None,
        alias="generatedForName",
        description="Name of the intended recipient",
    )

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "extra": "forbid",
    }


class TranscodeResponse(BaseModel):
    """
    What:  HTTP-style result of TranscodingService.read().
    How:   The route handler turns it into a JSONResponse with `status_code`.
    """
    status_code: int = Field(default=200, description="HTTP status code for the response")
    body: Record = Field(description="Record reconstructed from the QR code")

    model_config = {"frozen": True}


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "symbol_not_found",
            "message": "No QR code could be found in the image",
            "details": null,
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response with the active generation defaults."""
    status: str = Field(description="Overall service status")
    version: str = Field(description="Application version")
    matrix_size: str = Field(description="Configured symbol size, e.g. 200x200")
    image_format: str = Field(description="Configured raster container, e.g. PNG")
    uptime_seconds: float = Field(description="Seconds since service started")
