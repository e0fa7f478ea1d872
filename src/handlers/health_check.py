"""Lightweight health check handler."""

import json
from datetime import datetime, timezone

from handlers.dependencies import get_settings


def lambda_handler(event, context):
    """Return a simple 200 response to verify the API is alive."""
    settings = get_settings()
    return {
        "statusCode": 200,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(
            {
                "status": "ok",
                "service": "Customer Meetings API",
                "environment": settings.environment,
                "store": settings.store_backend,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        ),
    }
