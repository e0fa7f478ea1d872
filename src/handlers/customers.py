"""Handlers for /api/customers routes."""

from __future__ import annotations

from typing import Dict

from handlers.dependencies import get_customer_service
from utils.http import json_body, json_response, path_param, respond
from utils.logging_config import get_logger

logger = get_logger(__name__)


def list_customers(event, context) -> Dict:
    """GET /api/customers"""

    def run():
        customers = get_customer_service().list_customers()
        return json_response(200, [c.to_document() for c in customers])

    return respond("List customers", run, logger)


def get_customer(event, context) -> Dict:
    """GET /api/customers/{id}"""

    def run():
        customer = get_customer_service().get_customer(path_param(event, "id"))
        return json_response(200, customer.to_document())

    return respond("Get customer", run, logger)


def create_customer(event, context) -> Dict:
    """POST /api/customers"""

    def run():
        customer = get_customer_service().create_customer(json_body(event))
        return json_response(201, customer.to_document())

    return respond("Create customer", run, logger)


def update_customer(event, context) -> Dict:
    """PUT /api/customers/{id}"""

    def run():
        customer = get_customer_service().update_customer(
            path_param(event, "id"), json_body(event)
        )
        return json_response(200, customer.to_document())

    return respond("Update customer", run, logger)


def delete_customer(event, context) -> Dict:
    """DELETE /api/customers/{id}; the customer's meetings go with it."""

    def run():
        get_customer_service().delete_customer(path_param(event, "id"))
        return json_response(
            200, {"message": "Customer and associated meetings deleted successfully"}
        )

    return respond("Delete customer", run, logger)


def list_customer_meetings(event, context) -> Dict:
    """GET /api/customers/{id}/meetings"""

    def run():
        meetings = get_customer_service().list_customer_meetings(path_param(event, "id"))
        return json_response(200, [m.to_document() for m in meetings])

    return respond("List customer meetings", run, logger)
