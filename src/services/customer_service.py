"""
Customer Service.

CRUD for customers. dateOfLastMeeting is derived from meetings, so neither
create nor update accepts it; deleting a customer removes its meetings first
so no meeting is left pointing at a missing customer.
"""

from __future__ import annotations

from typing import List

from pydantic import ValidationError as PydanticValidationError

from models.customer import Customer, CustomerCreate, CustomerUpdate
from models.meeting import Meeting
from repositories.base import DuplicateKeyError, RecordStore, find_one
from utils.error_handling import DuplicateEmailError, NotFoundError, ValidationError
from utils.logging_config import get_logger

logger = get_logger(__name__)


class CustomerService:
    """Service for customer records."""

    def __init__(self, store: RecordStore):
        self.store = store

    def list_customers(self) -> List[Customer]:
        """All customers ordered by name."""
        items = self.store.customers.find(sort_by="name")
        return [Customer.model_validate(item) for item in items]

    def get_customer(self, customer_id: str) -> Customer:
        item = self.store.customers.get(customer_id)
        if item is None:
            raise NotFoundError("Customer not found")
        return Customer.model_validate(item)

    def create_customer(self, payload: dict) -> Customer:
        try:
            draft = CustomerCreate.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc

        if find_one(self.store.customers, {"email": draft.email}):
            raise DuplicateEmailError(draft.email)
        try:
            item = self.store.customers.insert(draft.to_document())
        except DuplicateKeyError as exc:
            raise DuplicateEmailError(draft.email) from exc

        logger.info("Customer created", extra={"customer_id": item["id"]})
        return Customer.model_validate(item)

    def update_customer(self, customer_id: str, payload: dict) -> Customer:
        try:
            changes = CustomerUpdate.model_validate(payload).to_document(exclude_unset=True)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc

        email = changes.get("email")
        if email:
            holder = find_one(self.store.customers, {"email": email})
            if holder and holder["id"] != customer_id:
                raise DuplicateEmailError(email)

        try:
            item = (
                self.store.customers.update(customer_id, changes)
                if changes
                else self.store.customers.get(customer_id)
            )
        except DuplicateKeyError as exc:
            raise DuplicateEmailError(email) from exc
        if item is None:
            raise NotFoundError("Customer not found")

        logger.info("Customer updated", extra={"customer_id": customer_id, "fields": sorted(changes)})
        return Customer.model_validate(item)

    def delete_customer(self, customer_id: str) -> None:
        """Delete the customer and, before it, every meeting that references it."""
        if self.store.customers.get(customer_id) is None:
            raise NotFoundError("Customer not found")

        removed = self.store.meetings.delete_many({"customer": customer_id})
        self.store.customers.delete(customer_id)
        logger.info(
            "Customer deleted",
            extra={"customer_id": customer_id, "meetings_deleted": removed},
        )

    def list_customer_meetings(self, customer_id: str) -> List[Meeting]:
        """Meetings of one customer, most recent first."""
        items = self.store.meetings.find(
            {"customer": customer_id}, sort_by="meetingDate", descending=True
        )
        return [Meeting.model_validate(item) for item in items]
