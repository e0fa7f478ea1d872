"""
Last-meeting synchronizer.

Keeps Customer.dateOfLastMeeting in step with the customer's meetings. Every
meeting mutation calls one of the hooks below before the request completes.

Two strategies exist:

- "forward" (default): new meetings only ever move the date forward, which
  matches how the field has always behaved. A back-dated meeting added after a
  later one leaves the date alone. Reschedules and deletions rescan.
- "rescan": every hook recomputes the maximum over all of the customer's
  meetings, including both customers when a meeting is reassigned.

Rescans are computed in Python from the customer's meeting list, overriding the
row just written or removed, so a lagging secondary index cannot produce a
stale maximum.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from models.common import iso_timestamp, parse_timestamp
from models.meeting import Meeting
from repositories.base import Document, RecordStore
from utils.logging_config import get_logger
from utils.settings import FORWARD_ONLY, FULL_RESCAN

logger = get_logger(__name__)


def latest_meeting(meetings: Iterable[Document]) -> Optional[Document]:
    """Meeting with the greatest meetingDate; earliest in input order on ties."""
    latest = None
    latest_date = None
    for meeting in meetings:
        meeting_date = parse_timestamp(meeting.get("meetingDate"))
        if meeting_date is None:
            continue
        if latest_date is None or meeting_date > latest_date:
            latest, latest_date = meeting, meeting_date
    return latest


class LastMeetingSynchronizer:
    """Maintains the derived dateOfLastMeeting field on customers."""

    def __init__(self, store: RecordStore, strategy: str = FORWARD_ONLY):
        if strategy not in (FORWARD_ONLY, FULL_RESCAN):
            raise ValueError(f"Unknown last-meeting strategy: {strategy}")
        self.store = store
        self.strategy = strategy

    def meeting_added(self, customer: Document, meeting: Meeting) -> None:
        """
        `meeting` was created for `customer` (direct create or bulk import).

        `customer` must be the document as read in this request; the forward
        comparison is made against its stored dateOfLastMeeting.
        """
        if self.strategy == FULL_RESCAN:
            self.recompute(customer["id"], written=meeting)
            return

        current = parse_timestamp(customer.get("dateOfLastMeeting"))
        if current is None or meeting.meeting_date > current:
            self._set(customer["id"], meeting.meeting_date)

    def meeting_rescheduled(self, meeting: Meeting) -> None:
        """meetingDate of `meeting` changed; it is stored already."""
        if self.strategy == FULL_RESCAN:
            self.recompute(meeting.customer, written=meeting)
            return

        meetings = self._meetings_for(meeting.customer, written=meeting)
        latest = latest_meeting(meetings)
        if latest is not None and latest["id"] == meeting.id:
            self._set(meeting.customer, meeting.meeting_date)

    def meeting_reassigned(self, previous_customer_id: str, meeting: Meeting) -> None:
        """The meeting moved from `previous_customer_id` to `meeting.customer`."""
        if self.strategy != FULL_RESCAN:
            logger.info(
                "Meeting reassigned without re-deriving last meeting date",
                extra={"meeting_id": meeting.id, "previous_customer_id": previous_customer_id},
            )
            return
        self.recompute(previous_customer_id, removed_id=meeting.id)
        self.recompute(meeting.customer, written=meeting)

    def meeting_removed(self, customer_id: str, meeting_id: str) -> None:
        """The meeting was deleted; always rescans."""
        self.recompute(customer_id, removed_id=meeting_id)

    def recompute(
        self,
        customer_id: str,
        written: Optional[Meeting] = None,
        removed_id: Optional[str] = None,
    ) -> Optional[datetime]:
        """Set dateOfLastMeeting to the max meetingDate of the customer, or None."""
        meetings = self._meetings_for(customer_id, written=written, removed_id=removed_id)
        latest = latest_meeting(meetings)
        latest_date = parse_timestamp(latest["meetingDate"]) if latest else None
        self._set(customer_id, latest_date)
        return latest_date

    def _meetings_for(
        self,
        customer_id: str,
        written: Optional[Meeting] = None,
        removed_id: Optional[str] = None,
    ) -> List[Document]:
        meetings = [
            m
            for m in self.store.meetings.find({"customer": customer_id})
            if m["id"] != removed_id and (written is None or m["id"] != written.id)
        ]
        if written is not None and written.customer == customer_id:
            # Ties on meetingDate resolve to the written meeting.
            meetings.insert(0, written.to_document())
        return meetings

    def _set(self, customer_id: str, value: Optional[datetime]) -> None:
        rendered = iso_timestamp(value) if value else None
        updated = self.store.customers.update(customer_id, {"dateOfLastMeeting": rendered})
        if updated is None:
            logger.warning("Customer vanished before last meeting update", extra={"customer_id": customer_id})
            return
        logger.info(
            "Last meeting date updated",
            extra={"customer_id": customer_id, "date_of_last_meeting": rendered},
        )
