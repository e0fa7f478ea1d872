"""
Pytest configuration to ensure paths are set up correctly for tests.

This allows imports like `from handlers import health_check` to work
when running tests, simulating the Lambda environment where code
is deployed from the src/ directory.
"""

import base64
import json
import os
import sys
from pathlib import Path

import boto3
import pytest


def _ensure_paths_on_sys_path() -> None:
    """Add repository root AND src/ to sys.path if missing.

    The src/ directory is added to simulate Lambda's import behavior,
    where Code.from_asset("src") makes src/ the root of the package.
    """
    repo_root = Path(__file__).resolve().parents[1]
    src_root = repo_root / "src"

    # Add repo root first (for imports like infrastructure.*)
    root_str = str(repo_root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)

    # Add src/ for Lambda-style imports (from handlers import ...)
    src_str = str(src_root)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


_ensure_paths_on_sys_path()

# Ensure boto3 has offline-friendly defaults so tests do not require AWS access.
os.environ.setdefault("AWS_REGION", "eu-west-2")
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-2")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")
os.environ.setdefault("AWS_SESSION_TOKEN", "test")
os.environ.setdefault("ENVIRONMENT", "dev")

# Lambda environment variables used by handlers
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("CUSTOMERS_TABLE", "test-customers")
os.environ.setdefault("MEETINGS_TABLE", "test-meetings")
os.environ.setdefault("CUSTOMER_EMAILS_TABLE", "test-customer-emails")
os.environ.setdefault("LAST_MEETING_STRATEGY", "forward")

# Create a default boto3 session so resources/clients do not error during import.
boto3.setup_default_session(region_name="eu-west-2")


@pytest.fixture
def store():
    """Fresh in-memory record store."""
    from repositories.memory_repo import build_memory_store

    return build_memory_store()


@pytest.fixture
def synchronizer(store):
    from services.last_meeting import LastMeetingSynchronizer

    return LastMeetingSynchronizer(store)


@pytest.fixture
def rescan_synchronizer(store):
    from services.last_meeting import LastMeetingSynchronizer
    from utils.settings import FULL_RESCAN

    return LastMeetingSynchronizer(store, strategy=FULL_RESCAN)


@pytest.fixture
def customer_service(store):
    from services.customer_service import CustomerService

    return CustomerService(store)


@pytest.fixture
def meeting_service(store, synchronizer):
    from services.meeting_service import MeetingService

    return MeetingService(store, synchronizer)


@pytest.fixture
def import_service(store, synchronizer):
    from services.import_service import ImportService

    return ImportService(store, synchronizer)


@pytest.fixture
def api(store):
    """Route handler calls to the in-memory store for the duration of a test."""
    from handlers import dependencies
    from utils.settings import AppSettings

    dependencies.install(store, AppSettings(environment="test", store_backend="memory"))
    yield store
    dependencies.reset()


def make_event(method, path, body=None, content_type="application/json", base64_body=False):
    """Build an API Gateway HTTP API (payload 2.0) event."""
    if isinstance(body, (dict, list)):
        body = json.dumps(body)
    if isinstance(body, bytes):
        body = base64.b64encode(body).decode("ascii") if base64_body else body.decode("utf-8")
    elif base64_body and body is not None:
        body = base64.b64encode(body.encode("utf-8")).decode("ascii")
    return {
        "version": "2.0",
        "requestContext": {"http": {"method": method, "path": path}},
        "headers": {"content-type": content_type} if content_type else {},
        "body": body,
        "isBase64Encoded": base64_body,
    }


@pytest.fixture
def event():
    return make_event
