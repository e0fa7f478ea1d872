"""
Upload decoding tests.

Run with: pytest tests/unit/test_upload_decoder.py -v
"""

import pytest

from models.imports import UploadFormat
from services.upload_decoder import (
    decode_csv,
    decode_json,
    decode_upload,
    format_for_content_type,
)
from utils.error_handling import MalformedInputError


class TestContentType:
    """Test Content-Type to format mapping."""

    @pytest.mark.parametrize(
        "content_type, expected",
        [
            ("application/json", UploadFormat.JSON),
            ("application/json; charset=utf-8", UploadFormat.JSON),
            ("text/csv", UploadFormat.CSV),
            ("TEXT/CSV", UploadFormat.CSV),
            ("application/vnd.ms-excel", UploadFormat.CSV),
        ],
    )
    def test_known_types(self, content_type, expected):
        assert format_for_content_type(content_type) is expected

    @pytest.mark.parametrize("content_type", ["", "text/plain", "multipart/form-data"])
    def test_unknown_types_raise(self, content_type):
        with pytest.raises(ValueError):
            format_for_content_type(content_type)


class TestDecodeJson:
    """Test JSON uploads."""

    def test_array_of_objects(self):
        records = decode_json(b'[{"name": "A"}, {"name": "B"}]')
        assert records == [{"name": "A"}, {"name": "B"}]

    def test_top_level_object_is_rejected(self):
        """An object instead of an array rejects the batch before it starts."""
        with pytest.raises(MalformedInputError) as exc_info:
            decode_json(b'{"name": "A"}', entity="customer")
        assert str(exc_info.value) == (
            "Invalid JSON: JSON file must contain an array of customer objects"
        )
        assert exc_info.value.status_code == 400

    def test_syntax_error_is_rejected(self):
        with pytest.raises(MalformedInputError) as exc_info:
            decode_json(b'[{"name": ')
        assert str(exc_info.value).startswith("Invalid JSON")

    def test_invalid_utf8_is_rejected(self):
        with pytest.raises(MalformedInputError):
            decode_json(b"\xff\xfe[]")


class TestDecodeCsv:
    """Test delimited-text uploads."""

    def test_header_row_names_fields(self):
        payload = (
            b"name,email,organization,topicsOfInterest\r\n"
            b'Ada,ada@example.com,Engines,"compute, math"\r\n'
        )
        assert decode_csv(payload) == [
            {
                "name": "Ada",
                "email": "ada@example.com",
                "organization": "Engines",
                "topicsOfInterest": "compute, math",
            }
        ]

    def test_empty_cells_are_absent(self):
        payload = b"customerEmail,customerId,meetingDate\na@x.com,,2025-01-01\n"
        assert decode_csv(payload) == [{"customerEmail": "a@x.com", "meetingDate": "2025-01-01"}]

    def test_header_whitespace_and_bom_are_stripped(self):
        payload = "\ufeff name , email \nA,a@x.com\n".encode("utf-8")
        assert decode_csv(payload) == [{"name": "A", "email": "a@x.com"}]

    def test_extra_cells_without_header_are_dropped(self):
        assert decode_csv(b"name\nA,extra\n") == [{"name": "A"}]

    def test_header_only_yields_no_records(self):
        assert decode_csv(b"name,email\n") == []

    def test_decode_upload_dispatches_on_format(self):
        assert decode_upload(b"name\nA\n", UploadFormat.CSV) == [{"name": "A"}]
        assert decode_upload(b'[{"name": "A"}]', UploadFormat.JSON) == [{"name": "A"}]
