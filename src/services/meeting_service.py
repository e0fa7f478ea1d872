"""
Meeting Service.

CRUD for meetings. Every mutation hands off to the LastMeetingSynchronizer
before returning so the owning customer's dateOfLastMeeting stays derived
from its meetings.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from models.customer import CustomerSummary
from models.meeting import Meeting, MeetingCreate, MeetingDetail, MeetingUpdate
from repositories.base import Document, RecordStore
from services.last_meeting import LastMeetingSynchronizer
from utils.error_handling import CustomerNotFoundError, NotFoundError, ValidationError
from utils.logging_config import get_logger

logger = get_logger(__name__)


class MeetingService:
    """Service for meeting records."""

    def __init__(self, store: RecordStore, synchronizer: LastMeetingSynchronizer):
        self.store = store
        self.synchronizer = synchronizer

    def list_meetings(self) -> List[MeetingDetail]:
        """All meetings, most recent first, each with its customer embedded."""
        items = self.store.meetings.find(sort_by="meetingDate", descending=True)
        customers: Dict[str, Optional[Document]] = {}
        for item in items:
            if item["customer"] not in customers:
                customers[item["customer"]] = self.store.customers.get(item["customer"])
        return [self._detail(item, customers[item["customer"]]) for item in items]

    def get_meeting(self, meeting_id: str) -> MeetingDetail:
        item = self.store.meetings.get(meeting_id)
        if item is None:
            raise NotFoundError("Meeting not found")
        return self._detail(item, self.store.customers.get(item["customer"]))

    def create_meeting(self, payload: dict) -> Meeting:
        try:
            draft = MeetingCreate.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc

        customer = self.store.customers.get(draft.customer)
        if customer is None:
            raise CustomerNotFoundError()

        meeting = Meeting.model_validate(self.store.meetings.insert(draft.to_document()))
        self.synchronizer.meeting_added(customer, meeting)
        logger.info(
            "Meeting created",
            extra={"meeting_id": meeting.id, "customer_id": meeting.customer},
        )
        return meeting

    def update_meeting(self, meeting_id: str, payload: dict) -> Meeting:
        try:
            update = MeetingUpdate.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc
        changes = update.to_document(exclude_unset=True)

        # The new customer is checked before the meeting itself.
        if update.customer is not None and self.store.customers.get(update.customer) is None:
            raise CustomerNotFoundError()

        previous = self.store.meetings.get(meeting_id)
        if previous is None:
            raise NotFoundError("Meeting not found")

        item = self.store.meetings.update(meeting_id, changes) if changes else previous
        if item is None:
            raise NotFoundError("Meeting not found")
        meeting = Meeting.model_validate(item)

        if update.customer is not None and update.customer != previous["customer"]:
            self.synchronizer.meeting_reassigned(previous["customer"], meeting)
        if update.meeting_date is not None:
            self.synchronizer.meeting_rescheduled(meeting)

        logger.info("Meeting updated", extra={"meeting_id": meeting_id, "fields": sorted(changes)})
        return meeting

    def delete_meeting(self, meeting_id: str) -> None:
        item = self.store.meetings.get(meeting_id)
        if item is None:
            raise NotFoundError("Meeting not found")

        self.store.meetings.delete(meeting_id)
        self.synchronizer.meeting_removed(item["customer"], meeting_id)
        logger.info("Meeting deleted", extra={"meeting_id": meeting_id, "customer_id": item["customer"]})

    @staticmethod
    def _detail(item: Document, customer: Optional[Document]) -> MeetingDetail:
        summary = CustomerSummary.model_validate(customer) if customer else None
        return MeetingDetail.model_validate({**item, "customer": summary})
