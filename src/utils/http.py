"""Helpers for API Gateway HTTP API (payload 2.0) events and responses."""

from __future__ import annotations

import base64
import binascii
import json
import logging
import uuid
from typing import Any, Callable, Dict, Optional

from utils.error_handling import AppError, ValidationError, to_response


def json_response(status: int, body: Any) -> Dict[str, Any]:
    """Format a JSON API Gateway HTTP API response."""
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }


def header(event: Dict[str, Any], name: str) -> str:
    """Case-insensitive header lookup."""
    headers = event.get("headers") or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value or ""
    return ""


def raw_body(event: Dict[str, Any]) -> bytes:
    """Request body as bytes, undoing API Gateway's base64 encoding."""
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body, validate=True)
        except binascii.Error as exc:
            raise ValidationError("Request body is not valid base64") from exc
    return body.encode("utf-8")


def json_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """Parse a JSON object body; anything else is a 400."""
    try:
        payload = json.loads(raw_body(event) or b"{}")
    except ValueError as exc:
        raise ValidationError(f"Request body is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def path_param(event: Dict[str, Any], name: str) -> str:
    return (event.get("pathParameters") or {}).get(name, "")


def respond(
    action: str,
    call: Callable[[], Dict[str, Any]],
    logger: logging.Logger,
    failure_message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Run a handler body, mapping errors to responses.

    AppErrors carry their own status code; anything else is logged with its
    traceback and becomes a 500.
    """
    correlation_id = str(uuid.uuid4())
    try:
        return call()
    except AppError as exc:
        logger.info(
            f"{action} rejected",
            extra={"correlation_id": correlation_id, "status": exc.status_code, "error": str(exc)},
        )
        return to_response(exc, correlation_id)
    except Exception:
        logger.exception(f"{action} failed", extra={"correlation_id": correlation_id})
        return json_response(
            500,
            {"message": failure_message or f"{action} failed", "correlation_id": correlation_id},
        )
