"""
Runtime configuration for the API Lambda.

Values come from environment variables set by the CDK stack; the defaults are
what a local run against DynamoDB Local or the in-memory store expects.
"""

from dataclasses import dataclass
import os

FORWARD_ONLY = "forward"
FULL_RESCAN = "rescan"


@dataclass
class AppSettings:
    """Settings read once per warm container."""

    environment: str = "dev"

    # Record store
    store_backend: str = "dynamodb"  # dynamodb | memory
    customers_table: str = "customers"
    meetings_table: str = "meetings"
    customer_emails_table: str = "customer-emails"

    # How meeting creation maintains Customer.dateOfLastMeeting
    last_meeting_strategy: str = FORWARD_ONLY

    # Bulk upload
    max_upload_bytes: int = 10 * 1024 * 1024

    @classmethod
    def from_environment(cls) -> "AppSettings":
        """Load settings from environment variables."""
        strategy = os.environ.get("LAST_MEETING_STRATEGY", FORWARD_ONLY).lower()
        if strategy not in (FORWARD_ONLY, FULL_RESCAN):
            raise ValueError(f"Unknown LAST_MEETING_STRATEGY: {strategy}")

        return cls(
            environment=os.environ.get("ENVIRONMENT", "dev"),
            store_backend=os.environ.get("STORE_BACKEND", "dynamodb").lower(),
            customers_table=os.environ.get("CUSTOMERS_TABLE", "customers"),
            meetings_table=os.environ.get("MEETINGS_TABLE", "meetings"),
            customer_emails_table=os.environ.get("CUSTOMER_EMAILS_TABLE", "customer-emails"),
            last_meeting_strategy=strategy,
            max_upload_bytes=int(os.environ.get("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))),
        )
