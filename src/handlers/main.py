"""
Single entrypoint Lambda that routes HTTP API requests to thin handler modules.

Why one Lambda?
- Keeps the record store client and services warm across routes.
- Simpler to deploy while still keeping code organized by delegating to modules.
"""

import re
from typing import Callable, Dict, Optional, Pattern, Tuple

from . import bulk_upload, customers, health_check, meetings
from utils.http import json_response


def _compile(template: str) -> Pattern:
    """Turn '/api/customers/{id}' into a regex with named groups."""
    pattern = re.sub(r"\{(\w+)\}", r"(?P<\1>[^/]+)", template)
    return re.compile(f"^{pattern}/?$")


# (method, path template, handler attribute). Handlers are looked up on their
# module at dispatch time so tests can monkeypatch them.
ROUTES: Tuple[Tuple[str, str, object, str], ...] = (
    ("GET", "/health", health_check, "lambda_handler"),
    ("GET", "/api/customers", customers, "list_customers"),
    ("POST", "/api/customers", customers, "create_customer"),
    ("GET", "/api/customers/{id}/meetings", customers, "list_customer_meetings"),
    ("GET", "/api/customers/{id}", customers, "get_customer"),
    ("PUT", "/api/customers/{id}", customers, "update_customer"),
    ("DELETE", "/api/customers/{id}", customers, "delete_customer"),
    ("GET", "/api/meetings", meetings, "list_meetings"),
    ("POST", "/api/meetings", meetings, "create_meeting"),
    ("GET", "/api/meetings/{id}", meetings, "get_meeting"),
    ("PUT", "/api/meetings/{id}", meetings, "update_meeting"),
    ("DELETE", "/api/meetings/{id}", meetings, "delete_meeting"),
    ("POST", "/api/bulk-upload/customers", bulk_upload, "upload_customers"),
    ("POST", "/api/bulk-upload/meetings", bulk_upload, "upload_meetings"),
)

_COMPILED = tuple((method, _compile(path), module, name) for method, path, module, name in ROUTES)


def resolve(method: str, path: str) -> Tuple[Optional[Callable], Dict[str, str]]:
    """Find the handler and path parameters for a request, or (None, {})."""
    for route_method, pattern, module, name in _COMPILED:
        if route_method != method:
            continue
        match = pattern.match(path)
        if match:
            return getattr(module, name), match.groupdict()
    return None, {}


def lambda_handler(event, context):
    """
    Entry point invoked by API Gateway HTTP API.

    The event contains the HTTP method and path; we route it to the correct
    handler and fill in pathParameters when the integration did not.
    """
    method = event.get("requestContext", {}).get("http", {}).get("method", "")
    path = event.get("requestContext", {}).get("http", {}).get("path", "")
    route_key = f"{method.upper()} {path}"

    handler, params = resolve(method.upper(), path)
    if handler is None:
        return json_response(404, {"message": "Route not found", "route": route_key})

    if params:
        event = {**event, "pathParameters": {**params, **(event.get("pathParameters") or {})}}
    return handler(event, context)
