"""Custom exceptions and helpers for consistent error responses."""

import json
from typing import Any, Dict, Optional


class AppError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(AppError):
    """Raised when a requested resource is missing."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class CustomerNotFoundError(NotFoundError):
    """Raised when a meeting references a customer that does not exist."""

    def __init__(self, message: str = "Customer not found"):
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, status_code=400)

    @classmethod
    def from_pydantic(cls, exc) -> "ValidationError":
        """Flatten a pydantic ValidationError into one readable message."""
        return cls(
            "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
                for err in exc.errors()
            )
        )


class DuplicateEmailError(AppError):
    """Raised when a customer email is already taken."""

    def __init__(self, email: str):
        super().__init__(f"Customer with email {email} already exists", status_code=409)
        self.email = email


class MalformedInputError(AppError):
    """Raised when an upload cannot be decoded into a list of records."""

    def __init__(self, message: str = "Invalid upload"):
        super().__init__(message, status_code=400)


class UnsupportedMediaError(AppError):
    """Raised when an upload is neither CSV nor JSON."""

    def __init__(self, message: str = "Only CSV and JSON files are allowed"):
        super().__init__(message, status_code=400)


class PayloadTooLargeError(AppError):
    """Raised when an upload exceeds the configured size limit."""

    def __init__(self, limit: int):
        super().__init__(f"File exceeds the {limit} byte upload limit", status_code=413)


def to_response(error: AppError, correlation_id: Optional[str] = None) -> Dict[str, Any]:
    """Convert an AppError into a Lambda proxy integration response."""
    body = {"message": str(error), "status": "error"}
    if correlation_id:
        body["correlation_id"] = correlation_id
    return {
        "statusCode": error.status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }
