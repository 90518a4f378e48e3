"""
QR Bridge — JSON Record Codec
===============================

What:  RecordCodec implementation that stores a Record as compact JSON text.
How:   Pydantic does both directions: model_dump_json(by_alias=True) on the
       way in, model_validate_json() on the way out. Any pydantic validation
       failure becomes MalformedRecordError.

Wire format example:
    {"title":"Test QR","message":"Hi","generatedByName":"Ann","generatedForName":"Bo"}
"""

import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from qrbridge.exceptions import MalformedRecordError, MissingInputError
from qrbridge.schemas.record import Record
from qrbridge.services.codec_base import RecordCodec

logger = logging.getLogger(__name__)


class JsonRecordCodec(RecordCodec):
    """Record <-> JSON text. Stateless."""

    def encode(self, record: Optional[Record]) -> str:
        if record is None:
            raise MissingInputError()
        return record.model_dump_json(by_alias=True)

    def decode(self, text: str) -> Record:
        try:
            return Record.model_validate_json(text)
        except PydanticValidationError as e:
            logger.warning("Decoded text is not a record: %d error(s)", e.error_count())
            raise MalformedRecordError(
                context={
                    "errors": [err["type"] for err in e.errors()],
                    "text_length": len(text),
                },
            ) from e
