"""Handlers for /api/meetings routes."""

from __future__ import annotations

from typing import Dict

from handlers.dependencies import get_meeting_service
from utils.http import json_body, json_response, path_param, respond
from utils.logging_config import get_logger

logger = get_logger(__name__)


def list_meetings(event, context) -> Dict:
    """GET /api/meetings, most recent first, with customer details."""

    def run():
        meetings = get_meeting_service().list_meetings()
        return json_response(200, [m.to_document() for m in meetings])

    return respond("List meetings", run, logger)


def get_meeting(event, context) -> Dict:
    """GET /api/meetings/{id}"""

    def run():
        meeting = get_meeting_service().get_meeting(path_param(event, "id"))
        return json_response(200, meeting.to_document())

    return respond("Get meeting", run, logger)


def create_meeting(event, context) -> Dict:
    """POST /api/meetings"""

    def run():
        meeting = get_meeting_service().create_meeting(json_body(event))
        return json_response(201, meeting.to_document())

    return respond("Create meeting", run, logger)


def update_meeting(event, context) -> Dict:
    """PUT /api/meetings/{id}"""

    def run():
        meeting = get_meeting_service().update_meeting(path_param(event, "id"), json_body(event))
        return json_response(200, meeting.to_document())

    return respond("Update meeting", run, logger)


def delete_meeting(event, context) -> Dict:
    """DELETE /api/meetings/{id}"""

    def run():
        get_meeting_service().delete_meeting(path_param(event, "id"))
        return json_response(200, {"message": "Meeting deleted successfully"})

    return respond("Delete meeting", run, logger)
