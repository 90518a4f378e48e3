"""
QR Bridge — JSON Record Codec Unit Tests
==========================================

What we test:
    ✅ Encoding uses camelCase wire names and is deterministic
    ✅ decode(encode(r)) == r, including absent fields
    ✅ None is rejected with MissingInputError
    ✅ Plain text, wrong JSON shapes and unknown keys raise MalformedRecordError
"""

import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from qrbridge.exceptions import MalformedRecordError, MissingInputError
from qrbridge.schemas.record import Record
from qrbridge.services.record_codec import JsonRecordCodec


class TestJsonRecordEncode:

    def setup_method(self):
        self.codec = JsonRecordCodec()

    def test_encode_uses_wire_names(self, sample_record):
        payload = json.loads(self.codec.encode(sample_record))
        assert payload == {
            "title": "Test QR",
            "message": "This is a test payload",
            "generatedByName": "JUnit",
            "generatedForName": "Test Target",
        }

    def test_encode_is_deterministic(self, sample_record):
        assert self.codec.encode(sample_record) == self.codec.encode(sample_record)

    def test_encode_none_raises_missing_input(self):
        with pytest.raises(MissingInputError):
            self.codec.encode(None)

    def test_encode_keeps_absent_fields_as_null(self):
        payload = json.loads(self.codec.encode(Record(title="only title")))
        assert payload["message"] is None
        assert payload["generatedForName"] is None


class TestJsonRecordDecode:

    def setup_method(self):
        self.codec = JsonRecordCodec()

    def test_round_trip(self, sample_record):
        assert self.codec.decode(self.codec.encode(sample_record)) == sample_record

    def test_round_trip_unicode_and_empty(self):
        record = Record(title="", message="Grüße ✓", generated_by_name="Zoë")
        assert self.codec.decode(self.codec.encode(record)) == record

    def test_decode_accepts_missing_keys(self):
        record = self.codec.decode('{"title": "Hello"}')
        assert record.title == "Hello"
        assert record.message is None

    def test_decode_plain_text_rejected(self):
        with pytest.raises(MalformedRecordError):
            self.codec.decode("Just some plain text, not JSON")

    @pytest.mark.parametrize("text", ["null", "[]", "42", '"title"'])
    def test_decode_non_object_json_rejected(self, text):
        with pytest.raises(MalformedRecordError):
            self.codec.decode(text)

    def test_decode_unknown_key_rejected(self):
        with pytest.raises(MalformedRecordError) as exc_info:
            self.codec.decode('{"title": "x", "payload": "y"}')
        assert "extra_forbidden" in exc_info.value.context["errors"]

    def test_decode_wrong_field_type_rejected(self):
        with pytest.raises(MalformedRecordError):
            self.codec.decode('{"title": 123}')


class TestRecordModel:

    def test_record_is_immutable(self, sample_record):
        with pytest.raises(PydanticValidationError):
            sample_record.title = "changed"

    def test_record_accepts_both_field_names(self):
        by_alias = Record.model_validate({"generatedByName": "A"})
        by_name = Record.model_validate({"generated_by_name": "A"})
        assert by_alias == by_name
