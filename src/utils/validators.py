"""
Entity validation for bulk-import records.

Raw records come from JSON arrays or CSV rows, so values may be strings,
booleans, numbers, lists or missing. These helpers are the only place that
sees raw values; everything downstream works with normalized models.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from models.common import parse_timestamp
from models.customer import CustomerImport
from models.imports import FailureKind, RawRecord, RawValue, UploadFormat
from models.meeting import MeetingImport

CUSTOMER_REQUIRED_MESSAGE = "Missing required fields (name, email, or organization)"


class RecordRejected(Exception):
    """A single record failed validation; the batch carries on."""

    def __init__(self, kind: FailureKind, message: str):
        super().__init__(message)
        self.kind = kind


def text_value(value: RawValue) -> Optional[str]:
    """Scalar raw value as text; blank or whitespace-only text and containers count as absent."""
    if value is None or isinstance(value, (list, tuple, dict)):
        return None
    text = value if isinstance(value, str) else str(value)
    return text if text.strip() else None


def coerce_flag(value: RawValue, fmt: UploadFormat) -> bool:
    """True for boolean true, "true", or "yes" in CSV uploads. Case-sensitive."""
    if value is True or value == "true":
        return True
    return fmt is UploadFormat.CSV and value == "yes"


def split_topics(value: RawValue) -> List[str]:
    """Comma-delimited text becomes a trimmed list; lists pass through."""
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return [str(topic) for topic in value if topic is not None]
    segments = str(value).split(",")
    return [segment.strip() for segment in segments if segment.strip()]


def _as_mapping(raw: Any) -> Mapping[str, RawValue]:
    return raw if isinstance(raw, Mapping) else {}


def normalize_customer(raw: RawRecord, fmt: UploadFormat) -> CustomerImport:
    """Validate and normalize one customer record."""
    raw = _as_mapping(raw)
    name = text_value(raw.get("name"))
    email = text_value(raw.get("email"))
    organization = text_value(raw.get("organization"))
    if not (name and email and organization):
        raise RecordRejected(FailureKind.MISSING_FIELD, CUSTOMER_REQUIRED_MESSAGE)

    seed = None
    seed_raw = raw.get("dateOfLastMeeting")
    if seed_raw not in (None, ""):
        seed = parse_timestamp(seed_raw)
        if seed is None:
            raise RecordRejected(
                FailureKind.INVALID_FIELD, f"Invalid dateOfLastMeeting: {seed_raw}"
            )

    return CustomerImport(
        name=name,
        email=email,
        organization=organization,
        topics_of_interest=split_topics(raw.get("topicsOfInterest")),
        interested_in_feedback=coerce_flag(raw.get("interestedInFeedback"), fmt),
        interested_in_private_betas=coerce_flag(raw.get("interestedInPrivateBetas"), fmt),
        date_of_last_meeting=seed,
    )


def normalize_meeting(raw: RawRecord, fmt: UploadFormat) -> MeetingImport:
    """Validate and normalize one meeting record."""
    raw = _as_mapping(raw)
    customer_email = text_value(raw.get("customerEmail"))
    customer_id = text_value(raw.get("customerId"))
    if not customer_email and not customer_id:
        raise RecordRejected(
            FailureKind.MISSING_FIELD, "Meeting must have either customerEmail or customerId"
        )

    date_raw = raw.get("meetingDate")
    if date_raw in (None, ""):
        raise RecordRejected(FailureKind.MISSING_FIELD, "Meeting must have a meetingDate")
    meeting_date = parse_timestamp(date_raw)
    if meeting_date is None:
        raise RecordRejected(FailureKind.INVALID_FIELD, f"Invalid meetingDate: {date_raw}")

    return MeetingImport(
        customer_id=customer_id,
        customer_email=customer_email,
        meeting_date=meeting_date,
        notes_link=text_value(raw.get("notesLink")) or "",
        notes=text_value(raw.get("notes")) or "",
    )
