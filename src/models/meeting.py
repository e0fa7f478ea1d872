"""Meeting models."""

from __future__ import annotations

from typing import Optional

from pydantic import field_validator

from models.common import CamelModel, Timestamp
from models.customer import CustomerSummary


class Meeting(CamelModel):
    """A stored meeting record; `customer` holds the customer id."""

    id: str
    customer: str
    meeting_date: Timestamp
    notes_link: str = ""
    notes: str = ""
    created_at: Optional[Timestamp] = None
    updated_at: Optional[Timestamp] = None


class MeetingDetail(CamelModel):
    """Meeting with its customer embedded, as returned by the meeting endpoints."""

    id: str
    customer: Optional[CustomerSummary] = None
    meeting_date: Timestamp
    notes_link: str = ""
    notes: str = ""
    created_at: Optional[Timestamp] = None
    updated_at: Optional[Timestamp] = None


class MeetingCreate(CamelModel):
    """Payload for POST /api/meetings."""

    customer: str
    meeting_date: Timestamp
    notes_link: str = ""
    notes: str = ""

    @field_validator("customer")
    @classmethod
    def validate_customer(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("customer is required")
        return value


class MeetingUpdate(CamelModel):
    """Partial payload for PUT /api/meetings/{id}."""

    customer: Optional[str] = None
    meeting_date: Optional[Timestamp] = None
    notes_link: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("customer", "meeting_date")
    @classmethod
    def reject_null(cls, value):
        """customer and meetingDate may be omitted but never cleared."""
        if value is None or value == "":
            raise ValueError("cannot be empty")
        return value

    @field_validator("notes_link", "notes")
    @classmethod
    def reject_null_text(cls, value):
        """Notes may be emptied with "" but not set to null."""
        if value is None:
            raise ValueError("cannot be null")
        return value


class MeetingImport(CamelModel):
    """A normalized bulk-import meeting record."""

    customer_id: Optional[str] = None
    customer_email: Optional[str] = None
    meeting_date: Timestamp
    notes_link: str = ""
    notes: str = ""
