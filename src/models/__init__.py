"""Pydantic models for API payloads and stored records."""

from models.common import CamelModel, Timestamp, iso_timestamp, parse_timestamp  # noqa: F401
from models.customer import (  # noqa: F401
    Customer,
    CustomerCreate,
    CustomerImport,
    CustomerSummary,
    CustomerUpdate,
)
from models.imports import (  # noqa: F401
    FailureKind,
    ImportRecordError,
    ImportSummary,
    RawRecord,
    RawValue,
    UploadFormat,
)
from models.meeting import (  # noqa: F401
    Meeting,
    MeetingCreate,
    MeetingDetail,
    MeetingImport,
    MeetingUpdate,
)
