"""Bulk-import models: raw records, per-record failures and the batch summary."""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, Field

# A value as it arrives from a decoded upload, before normalization.
RawValue = Union[str, bool, int, float, List[str], None]
RawRecord = Mapping[str, RawValue]


class UploadFormat(str, Enum):
    """Encodings accepted by the bulk-upload endpoints."""

    JSON = "json"
    CSV = "csv"


class FailureKind(str, Enum):
    """Why a single record was rejected."""

    MISSING_FIELD = "MissingField"
    INVALID_FIELD = "InvalidField"
    DUPLICATE_EMAIL = "DuplicateEmail"
    CUSTOMER_NOT_FOUND = "CustomerNotFound"
    STORE_ERROR = "StoreError"


class ImportRecordError(BaseModel):
    """
    Error descriptor for one rejected record.

    JSON uploads are keyed by 1-based row; CSV uploads by the identifying
    field(s) of the row. Unused keys are dropped when serialized.
    """

    model_config = {"populate_by_name": True}

    row: Optional[int] = None
    email: Optional[str] = None
    customer_email: Optional[str] = Field(default=None, alias="customerEmail")
    customer_id: Optional[str] = Field(default=None, alias="customerId")
    error: str
    kind: FailureKind


class ImportSummary(BaseModel):
    """Result of one bulk-import batch."""

    model_config = {"populate_by_name": True}

    message: str
    success_count: int = Field(alias="successCount")
    error_count: int = Field(alias="errorCount")
    results: List[dict] = Field(default_factory=list)
    errors: List[ImportRecordError] = Field(default_factory=list)

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
