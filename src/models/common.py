"""Shared pydantic building blocks: timestamps and camelCase aliasing."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, PlainSerializer, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def iso_timestamp(value: datetime) -> str:
    """
    Render a fixed-width ISO-8601 UTC string with milliseconds.

    Fixed width keeps lexicographic order equal to chronological order, which
    the stores rely on when sorting by date fields.
    """
    value = as_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


Timestamp = Annotated[
    datetime,
    AfterValidator(as_utc),
    PlainSerializer(iso_timestamp, return_type=str, when_used="json"),
]

_timestamp_adapter = TypeAdapter(Timestamp)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a date, datetime or epoch value; return None when it is not one."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return _timestamp_adapter.validate_python(value)
    except PydanticValidationError:
        return None


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire and in the store."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self, **kwargs: Any) -> dict:
        """Dump to a JSON-compatible dict keyed by the camelCase aliases."""
        return self.model_dump(mode="json", by_alias=True, **kwargs)
