"""
QR Bridge — QR Route Handlers
===============================

What:  POST /api/qr/generate (record → PNG download) and
       POST /api/qr/read (image upload → record JSON).
How:   Thin adapters: build a DownloadSink / UploadSource, run the
       TranscodingService in the worker thread pool, translate the result
       into an HTTP response. Errors propagate to the global handlers.
Who:   Called by any HTTP client; the OpenAPI docs live at /docs.

Request Flow (read):
    1. Client sends multipart/form-data with a 'file' field
    2. Upload size is checked (empty or > max_upload_size → 400)
    3. TranscodingService.read() decodes the QR code into a Record
    4. Return 200 with the record as camelCase JSON
    5. The upload is closed in all cases
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Request, UploadFile
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from qrbridge.config import settings
from qrbridge.exceptions import ValidationError
from qrbridge.schemas.record import ErrorResponse, Record
from qrbridge.services.streams import DownloadSink, FileUpload
from qrbridge.services.transcoding_service import (
    TranscodingService,
    get_transcoding_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/qr", tags=["QR"])


@router.post(
    "/generate",
    response_class=Response,
    responses={
        200: {"description": "QR code image download", "content": {"image/png": {}}},
        400: {"description": "No record supplied", "model": ErrorResponse},
        500: {"description": "Encoding failed", "model": ErrorResponse},
    },
    summary="Generate a QR code image for a record",
    description=(
        "Serializes the record as JSON, encodes it into a 200x200 QR code and "
        "returns it as a PNG attachment named after the record title."
    ),
)
async def generate_qr(
    record: Optional[Record] = Body(default=None),
    service: TranscodingService = Depends(get_transcoding_service),
) -> Response:
    sink = DownloadSink()
    await run_in_threadpool(service.generate, record, sink)
    return Response(
        content=sink.getvalue(),
        media_type=sink.content_type,
        headers=sink.headers,
    )


@router.post(
    "/read",
    response_model=Record,
    responses={
        200: {"description": "Record decoded from the QR code", "model": Record},
        400: {"description": "Empty or oversized upload", "model": ErrorResponse},
        422: {"description": "Not an image, no QR code, or not a record", "model": ErrorResponse},
        500: {"description": "Upload could not be read", "model": ErrorResponse},
    },
    summary="Read the record stored in a QR code image",
)
async def read_qr(
    request: Request,
    file: UploadFile = File(..., description="Image containing exactly one QR code"),
    service: TranscodingService = Depends(get_transcoding_service),
) -> JSONResponse:
    """
    Decode an uploaded QR image back into the record it carries.

    Error responses (handled by global exception handlers):
        HTTP 400: Empty or oversized upload (ValidationError)
        HTTP 422: UnsupportedImageError / SymbolNotFoundError / MalformedRecordError
        HTTP 500: IOFailureError
    """
    request.state.upload_filename = file.filename or "unknown"
    try:
        size = _upload_size(file)
        logger.info(
            "Received read request: filename=%s, size=%d bytes",
            file.filename or "unknown",
            size,
        )
        _validate_size(size)

        result = await run_in_threadpool(service.read, FileUpload(file.file, file.filename))
        return JSONResponse(
            status_code=result.status_code,
            content=result.body.model_dump(by_alias=True),
        )
    finally:
        await file.close()


def _upload_size(file: UploadFile) -> int:
    """Size reported by the multipart parser, or measured by seeking."""
    if file.size is not None:
        return file.size
    file.file.seek(0, 2)
    size = file.file.tell()
    file.file.seek(0)
    return size


def _validate_size(size: int) -> None:
    max_mb = settings.max_upload_size / (1024 * 1024)
    if size == 0:
        raise ValidationError(message="The uploaded file is empty.", field="file")
    if size > settings.max_upload_size:
        raise ValidationError(
            message=f"File size ({size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
            field="file",
            context={"max_size_mb": max_mb, "actual_size": size},
        )
