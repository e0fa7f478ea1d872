"""
Bulk import of customers and meetings.

Each batch is walked strictly in input order, one record at a time. A record
ends as either the created document or a RecordFailure; failures are reported
in the summary and never stop the batch. Only an undecodable upload
(MalformedInputError from the decoder) rejects a batch as a whole.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from models.imports import (
    FailureKind,
    ImportRecordError,
    ImportSummary,
    RawRecord,
    UploadFormat,
)
from models.meeting import Meeting, MeetingCreate, MeetingImport
from repositories.base import Document, DuplicateKeyError, RecordStore, StoreError, find_one
from services.last_meeting import LastMeetingSynchronizer
from services.upload_decoder import decode_upload
from utils.error_handling import ValidationError
from utils.logging_config import get_logger
from utils.validators import RecordRejected, normalize_customer, normalize_meeting, text_value

logger = get_logger(__name__)

CUSTOMERS = "customers"
MEETINGS = "meetings"


@dataclass
class RecordFailure:
    """Why one record was not imported."""

    kind: FailureKind
    message: str


RecordOutcome = Union[Document, RecordFailure]


def _customer_key(position: int, raw: RawRecord, fmt: UploadFormat) -> Dict[str, Any]:
    if fmt is UploadFormat.JSON:
        return {"row": position}
    return {"email": text_value(raw.get("email"))}


def _meeting_key(position: int, raw: RawRecord, fmt: UploadFormat) -> Dict[str, Any]:
    if fmt is UploadFormat.JSON:
        return {"row": position}
    return {
        "customer_email": text_value(raw.get("customerEmail")) or "N/A",
        "customer_id": text_value(raw.get("customerId")) or "N/A",
    }


class ImportService:
    """Reconciles decoded upload records against the record store."""

    def __init__(self, store: RecordStore, synchronizer: LastMeetingSynchronizer):
        self.store = store
        self.synchronizer = synchronizer

    def import_upload(self, entity: str, payload: bytes, fmt: UploadFormat) -> ImportSummary:
        """Decode an upload completely, then import it."""
        singular = entity[:-1]
        records = decode_upload(payload, fmt, entity=singular)
        if entity == CUSTOMERS:
            return self.import_customers(records, fmt)
        if entity == MEETINGS:
            return self.import_meetings(records, fmt)
        raise ValueError(f"Unknown import entity: {entity}")

    def import_customers(self, records: Sequence[RawRecord], fmt: UploadFormat) -> ImportSummary:
        return self._run(CUSTOMERS, records, fmt, self._import_customer, _customer_key)

    def import_meetings(self, records: Sequence[RawRecord], fmt: UploadFormat) -> ImportSummary:
        return self._run(MEETINGS, records, fmt, self._import_meeting, _meeting_key)

    def _run(
        self,
        entity: str,
        records: Sequence[RawRecord],
        fmt: UploadFormat,
        reconcile: Callable[[RawRecord, UploadFormat], Document],
        key: Callable[[int, RawRecord, UploadFormat], Dict[str, Any]],
    ) -> ImportSummary:
        results: List[Document] = []
        errors: List[ImportRecordError] = []

        for position, raw in enumerate(records, start=1):
            outcome = self._outcome(reconcile, raw, fmt)
            if isinstance(outcome, RecordFailure):
                record_key = key(position, raw if isinstance(raw, dict) else {}, fmt)
                errors.append(
                    ImportRecordError(**record_key, error=outcome.message, kind=outcome.kind)
                )
                logger.info(
                    "Import record rejected",
                    extra={"entity": entity, "position": position, "kind": outcome.kind.value},
                )
            else:
                results.append(outcome)

        logger.info(
            "Bulk import finished",
            extra={
                "entity": entity,
                "format": fmt.value,
                "success_count": len(results),
                "error_count": len(errors),
            },
        )
        return ImportSummary(
            message=f"Processed {len(results)} {entity} successfully with {len(errors)} errors",
            success_count=len(results),
            error_count=len(errors),
            results=results,
            errors=errors,
        )

    @staticmethod
    def _outcome(
        reconcile: Callable[[RawRecord, UploadFormat], Document],
        raw: RawRecord,
        fmt: UploadFormat,
    ) -> RecordOutcome:
        try:
            return reconcile(raw, fmt)
        except RecordRejected as exc:
            return RecordFailure(exc.kind, str(exc))
        except PydanticValidationError as exc:
            return RecordFailure(FailureKind.INVALID_FIELD, str(ValidationError.from_pydantic(exc)))
        except StoreError as exc:
            logger.warning("Store failure during import record", extra={"error": str(exc)})
            return RecordFailure(FailureKind.STORE_ERROR, str(exc))

    def _import_customer(self, raw: RawRecord, fmt: UploadFormat) -> Document:
        customer = normalize_customer(raw, fmt)
        duplicate = RecordRejected(
            FailureKind.DUPLICATE_EMAIL, f"Customer with email {customer.email} already exists"
        )

        # Existing customers are never updated by an import.
        if find_one(self.store.customers, {"email": customer.email}):
            raise duplicate
        try:
            return self.store.customers.insert(customer.to_document())
        except DuplicateKeyError:
            raise duplicate from None

    def _import_meeting(self, raw: RawRecord, fmt: UploadFormat) -> Document:
        meeting = normalize_meeting(raw, fmt)
        customer = self._resolve_customer(meeting)
        if customer is None:
            raise RecordRejected(
                FailureKind.CUSTOMER_NOT_FOUND,
                f"Customer not found for email: {meeting.customer_email or 'N/A'} "
                f"or id: {meeting.customer_id or 'N/A'}",
            )

        draft = MeetingCreate(
            customer=customer["id"],
            meeting_date=meeting.meeting_date,
            notes_link=meeting.notes_link,
            notes=meeting.notes,
        )
        created = self.store.meetings.insert(draft.to_document())
        # `customer` was read in this iteration, so it reflects every earlier record.
        self.synchronizer.meeting_added(customer, Meeting.model_validate(created))
        return created

    def _resolve_customer(self, meeting: MeetingImport) -> Optional[Document]:
        """customerId wins over customerEmail when both are given."""
        if meeting.customer_id:
            return self.store.customers.get(meeting.customer_id)
        return find_one(self.store.customers, {"email": meeting.customer_email})
