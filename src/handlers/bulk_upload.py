"""
Bulk upload handlers for POST /api/bulk-upload/{customers,meetings}.

The request body is the uploaded file itself (JSON array or CSV with a header
row), selected by Content-Type. The batch summary comes back with 200 even
when every record failed; only an undecodable file is rejected outright.
"""

from __future__ import annotations

from typing import Dict

from handlers.dependencies import get_import_service, get_settings
from services.import_service import CUSTOMERS, MEETINGS
from services.upload_decoder import format_for_content_type
from utils.error_handling import PayloadTooLargeError, UnsupportedMediaError, ValidationError
from utils.http import header, json_response, raw_body, respond
from utils.logging_config import get_logger

logger = get_logger(__name__)


def _import(event, entity: str) -> Dict:
    payload = raw_body(event)
    if not payload:
        raise ValidationError("No file uploaded")

    limit = get_settings().max_upload_bytes
    if len(payload) > limit:
        raise PayloadTooLargeError(limit)

    try:
        fmt = format_for_content_type(header(event, "content-type"))
    except ValueError as exc:
        raise UnsupportedMediaError() from exc

    logger.info(
        "Bulk upload received",
        extra={"entity": entity, "format": fmt.value, "bytes": len(payload)},
    )
    summary = get_import_service().import_upload(entity, payload, fmt)
    return json_response(200, summary.to_body())


def upload_customers(event, context) -> Dict:
    """Import customers; existing emails are rejected, never updated."""
    return respond(
        "Customer bulk upload",
        lambda: _import(event, CUSTOMERS),
        logger,
        failure_message="Error processing upload",
    )


def upload_meetings(event, context) -> Dict:
    """Import meetings for existing customers, advancing their last meeting dates."""
    return respond(
        "Meeting bulk upload",
        lambda: _import(event, MEETINGS),
        logger,
        failure_message="Error processing upload",
    )
