"""Customer models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field, field_validator

from models.common import CamelModel, Timestamp


def _require_text(value: Optional[str]) -> str:
    if value is None or not str(value).strip():
        raise ValueError("must be a non-empty string")
    return value


class Customer(CamelModel):
    """A stored customer record."""

    id: str
    name: str
    email: str
    organization: str
    topics_of_interest: List[str] = Field(default_factory=list)
    interested_in_feedback: bool = False
    interested_in_private_betas: bool = False
    # Derived from the customer's meetings; see services.last_meeting.
    date_of_last_meeting: Optional[Timestamp] = None
    created_at: Optional[Timestamp] = None
    updated_at: Optional[Timestamp] = None


class CustomerCreate(CamelModel):
    """Payload for POST /api/customers. dateOfLastMeeting is not accepted here."""

    name: str
    email: str
    organization: str
    topics_of_interest: List[str] = Field(default_factory=list)
    interested_in_feedback: bool = False
    interested_in_private_betas: bool = False

    @field_validator("name", "email", "organization")
    @classmethod
    def validate_required(cls, value: str) -> str:
        return _require_text(value)


class CustomerUpdate(CamelModel):
    """Partial payload for PUT /api/customers/{id}."""

    name: Optional[str] = None
    email: Optional[str] = None
    organization: Optional[str] = None
    topics_of_interest: Optional[List[str]] = None
    interested_in_feedback: Optional[bool] = None
    interested_in_private_betas: Optional[bool] = None

    @field_validator("name", "email", "organization")
    @classmethod
    def validate_required(cls, value: Optional[str]) -> str:
        """Fields may be omitted, but not blanked."""
        return _require_text(value)

    @field_validator("topics_of_interest", "interested_in_feedback", "interested_in_private_betas")
    @classmethod
    def reject_null(cls, value):
        """Fields may be omitted, but not set to null."""
        if value is None:
            raise ValueError("cannot be null")
        return value


class CustomerImport(CustomerCreate):
    """A normalized bulk-import record, which may seed dateOfLastMeeting."""

    date_of_last_meeting: Optional[Timestamp] = None


class CustomerSummary(CamelModel):
    """Customer fields embedded in meeting listings."""

    id: str
    name: str
    email: str
    organization: str
