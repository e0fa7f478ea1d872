"""
Bulk-import record validation tests.

Run with: pytest tests/unit/test_validators.py -v
"""

from datetime import datetime, timezone

import pytest

from models.imports import FailureKind, UploadFormat
from utils.validators import (
    CUSTOMER_REQUIRED_MESSAGE,
    RecordRejected,
    coerce_flag,
    normalize_customer,
    normalize_meeting,
    split_topics,
    text_value,
)

JSON = UploadFormat.JSON
CSV = UploadFormat.CSV


class TestFieldHelpers:
    """Test raw value coercion."""

    @pytest.mark.parametrize(
        "value, fmt, expected",
        [
            (True, JSON, True),
            ("true", JSON, True),
            ("true", CSV, True),
            ("yes", CSV, True),
            ("yes", JSON, False),
            ("TRUE", CSV, False),
            ("Yes", CSV, False),
            (False, JSON, False),
            (None, CSV, False),
            ("1", CSV, False),
        ],
    )
    def test_coerce_flag(self, value, fmt, expected):
        """Only exact lowercase truthy spellings count."""
        assert coerce_flag(value, fmt) is expected

    def test_split_topics_trims_and_drops_empty_segments(self):
        assert split_topics(" AI, billing ,,security ") == ["AI", "billing", "security"]

    def test_split_topics_passes_lists_through(self):
        assert split_topics(["AI", "billing"]) == ["AI", "billing"]

    def test_split_topics_absent(self):
        assert split_topics(None) == []
        assert split_topics("") == []

    def test_text_value_stringifies_scalars(self):
        assert text_value(42) == "42"
        assert text_value("") is None
        assert text_value(["a"]) is None


class TestNormalizeCustomer:
    """Test customer record normalization."""

    def test_valid_csv_row(self):
        customer = normalize_customer(
            {
                "name": "Ada",
                "email": "ada@example.com",
                "organization": "Engines",
                "topicsOfInterest": "compute, math",
                "interestedInFeedback": "yes",
                "interestedInPrivateBetas": "no",
            },
            CSV,
        )
        assert customer.topics_of_interest == ["compute", "math"]
        assert customer.interested_in_feedback is True
        assert customer.interested_in_private_betas is False
        assert customer.date_of_last_meeting is None

    @pytest.mark.parametrize("missing", ["name", "email", "organization"])
    def test_missing_required_field(self, missing):
        raw = {"name": "A", "email": "a@x.com", "organization": "O"}
        raw.pop(missing)
        with pytest.raises(RecordRejected) as exc_info:
            normalize_customer(raw, JSON)
        assert exc_info.value.kind is FailureKind.MISSING_FIELD
        assert str(exc_info.value) == CUSTOMER_REQUIRED_MESSAGE

    def test_blank_required_field_counts_as_missing(self):
        with pytest.raises(RecordRejected):
            normalize_customer({"name": "", "email": "a@x.com", "organization": "O"}, JSON)

    def test_non_object_record_is_missing_fields(self):
        with pytest.raises(RecordRejected) as exc_info:
            normalize_customer("just a string", JSON)
        assert exc_info.value.kind is FailureKind.MISSING_FIELD

    def test_seeded_last_meeting_date_is_parsed(self):
        customer = normalize_customer(
            {"name": "A", "email": "a@x.com", "organization": "O", "dateOfLastMeeting": "2025-02-01"},
            JSON,
        )
        assert customer.date_of_last_meeting == datetime(2025, 2, 1, tzinfo=timezone.utc)

    def test_unparseable_seed_is_invalid(self):
        with pytest.raises(RecordRejected) as exc_info:
            normalize_customer(
                {"name": "A", "email": "a@x.com", "organization": "O", "dateOfLastMeeting": "soon"},
                JSON,
            )
        assert exc_info.value.kind is FailureKind.INVALID_FIELD


class TestNormalizeMeeting:
    """Test meeting record normalization."""

    def test_valid_record(self):
        meeting = normalize_meeting(
            {"customerEmail": "a@x.com", "meetingDate": "2025-03-01", "notes": "kickoff"}, CSV
        )
        assert meeting.customer_email == "a@x.com"
        assert meeting.customer_id is None
        assert meeting.meeting_date == datetime(2025, 3, 1, tzinfo=timezone.utc)
        assert meeting.notes == "kickoff"
        assert meeting.notes_link == ""

    def test_requires_a_customer_reference(self):
        with pytest.raises(RecordRejected) as exc_info:
            normalize_meeting({"meetingDate": "2025-03-01"}, JSON)
        assert exc_info.value.kind is FailureKind.MISSING_FIELD
        assert str(exc_info.value) == "Meeting must have either customerEmail or customerId"

    def test_requires_meeting_date(self):
        with pytest.raises(RecordRejected) as exc_info:
            normalize_meeting({"customerId": "c1"}, JSON)
        assert str(exc_info.value) == "Meeting must have a meetingDate"

    def test_invalid_meeting_date(self):
        with pytest.raises(RecordRejected) as exc_info:
            normalize_meeting({"customerId": "c1", "meetingDate": "next tuesday"}, JSON)
        assert exc_info.value.kind is FailureKind.INVALID_FIELD


class TestWhitespaceValues:
    """Whitespace-only text is treated as absent."""

    def test_text_value_blank(self):
        assert text_value("   ") is None
        assert text_value(" a ") == " a "

    @pytest.mark.parametrize("fmt", [JSON, CSV])
    def test_whitespace_required_field_is_missing(self, fmt):
        with pytest.raises(RecordRejected) as exc_info:
            normalize_customer({"name": "  ", "email": "a@x.com", "organization": "O"}, fmt)
        assert exc_info.value.kind is FailureKind.MISSING_FIELD
