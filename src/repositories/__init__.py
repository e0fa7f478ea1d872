"""Record store backends. DynamoDB is imported lazily so local runs skip boto3 setup."""

from repositories.base import RecordStore
from repositories.memory_repo import build_memory_store


def build_record_store(settings) -> RecordStore:
    """Create the store selected by AppSettings.store_backend."""
    if settings.store_backend == "memory":
        return build_memory_store()
    if settings.store_backend == "dynamodb":
        from repositories.dynamodb_repo import build_dynamodb_store

        return build_dynamodb_store(settings)
    raise ValueError(f"Unknown STORE_BACKEND: {settings.store_backend}")
