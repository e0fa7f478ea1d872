"""
Lazily built services shared by every handler in a warm container.

Services receive the record store explicitly; this module is the only place
that holds them between invocations. Tests call `reset()` or `install()` to
swap in an in-memory store.
"""

from __future__ import annotations

from typing import Optional

from repositories.base import RecordStore
from utils.logging_config import get_logger
from utils.settings import AppSettings

logger = get_logger(__name__)

_settings: Optional[AppSettings] = None
_store: Optional[RecordStore] = None
_services: dict = {}


def get_settings() -> AppSettings:
    global _settings
    if _settings is None:
        _settings = AppSettings.from_environment()
    return _settings


def get_store() -> RecordStore:
    """Build the record store on first use, avoiding import-time AWS calls."""
    global _store
    if _store is None:
        from repositories import build_record_store

        settings = get_settings()
        _store = build_record_store(settings)
        logger.info("Record store ready", extra={"backend": settings.store_backend})
    return _store


def _synchronizer():
    if "synchronizer" not in _services:
        from services.last_meeting import LastMeetingSynchronizer

        _services["synchronizer"] = LastMeetingSynchronizer(
            get_store(), strategy=get_settings().last_meeting_strategy
        )
    return _services["synchronizer"]


def get_customer_service():
    if "customers" not in _services:
        from services.customer_service import CustomerService

        _services["customers"] = CustomerService(get_store())
    return _services["customers"]


def get_meeting_service():
    if "meetings" not in _services:
        from services.meeting_service import MeetingService

        _services["meetings"] = MeetingService(get_store(), _synchronizer())
    return _services["meetings"]


def get_import_service():
    if "imports" not in _services:
        from services.import_service import ImportService

        _services["imports"] = ImportService(get_store(), _synchronizer())
    return _services["imports"]


def install(store: RecordStore, settings: Optional[AppSettings] = None) -> None:
    """Use `store` (and optionally `settings`) for subsequent requests."""
    global _store, _settings
    reset()
    _store = store
    _settings = settings


def reset() -> None:
    global _store, _settings
    _store = None
    _settings = None
    _services.clear()
