"""
Environment-specific deployment settings.

Cost-optimized defaults for development/testing.
"""

from dataclasses import dataclass
import os


@dataclass
class Settings:
    """Deployment settings with cost-optimized defaults."""

    # Environment
    environment: str = "dev"
    aws_region: str = "eu-west-2"  # Default AWS region

    # Keep "forward" unless every meeting path should rescan (see services.last_meeting).
    last_meeting_strategy: str = "forward"

    # Bulk upload limit; API Gateway caps payloads at 10 MB regardless.
    max_upload_bytes: int = 10 * 1024 * 1024

    # DynamoDB
    point_in_time_recovery: bool = False

    # Lambda Configuration
    lambda_memory_mb: int = 512
    lambda_timeout_seconds: int = 30
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "Settings":
        """Load settings from environment variables."""
        env = os.environ.get("ENVIRONMENT", "dev")
        strategy = os.environ.get("LAST_MEETING_STRATEGY", "forward")
        region = os.environ.get("AWS_REGION", "eu-west-2")

        # Production overrides
        if env == "prod":
            return cls(
                environment="prod",
                aws_region=region,
                last_meeting_strategy=strategy,
                point_in_time_recovery=True,
                lambda_memory_mb=1024,
                lambda_timeout_seconds=60,
            )

        return cls(environment=env, aws_region=region, last_meeting_strategy=strategy)
