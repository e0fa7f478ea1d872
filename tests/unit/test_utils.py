"""
Utility tests: settings, HTTP helpers and error responses.

Run with: pytest tests/unit/test_utils.py -v
"""

import base64
import json
from unittest.mock import MagicMock

import pytest

from utils.error_handling import (
    AppError,
    DuplicateEmailError,
    NotFoundError,
    PayloadTooLargeError,
    ValidationError,
    to_response,
)
from utils.http import header, json_body, path_param, raw_body, respond
from utils.settings import FULL_RESCAN, AppSettings


class TestAppSettings:
    """Test environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        for name in ("STORE_BACKEND", "LAST_MEETING_STRATEGY", "MAX_UPLOAD_BYTES", "CUSTOMERS_TABLE"):
            monkeypatch.delenv(name, raising=False)
        settings = AppSettings.from_environment()
        assert settings.store_backend == "dynamodb"
        assert settings.last_meeting_strategy == "forward"
        assert settings.max_upload_bytes == 10 * 1024 * 1024
        assert settings.customers_table == "customers"

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("STORE_BACKEND", "MEMORY")
        monkeypatch.setenv("LAST_MEETING_STRATEGY", "Rescan")
        monkeypatch.setenv("MAX_UPLOAD_BYTES", "1024")
        settings = AppSettings.from_environment()
        assert settings.store_backend == "memory"
        assert settings.last_meeting_strategy == FULL_RESCAN
        assert settings.max_upload_bytes == 1024

    def test_unknown_strategy(self, monkeypatch):
        monkeypatch.setenv("LAST_MEETING_STRATEGY", "eventually")
        with pytest.raises(ValueError):
            AppSettings.from_environment()

    def test_unknown_backend(self):
        from repositories import build_record_store

        with pytest.raises(ValueError):
            build_record_store(AppSettings(store_backend="postgres"))


class TestHttpHelpers:
    """Test event parsing helpers."""

    def test_header_is_case_insensitive(self):
        event = {"headers": {"Content-Type": "text/csv"}}
        assert header(event, "content-type") == "text/csv"
        assert header({}, "content-type") == ""

    def test_raw_body_decodes_base64(self):
        event = {"body": base64.b64encode(b"name\nA\n").decode(), "isBase64Encoded": True}
        assert raw_body(event) == b"name\nA\n"

    def test_raw_body_rejects_bad_base64(self):
        with pytest.raises(ValidationError):
            raw_body({"body": "***", "isBase64Encoded": True})

    def test_json_body_requires_an_object(self):
        assert json_body({"body": '{"a": 1}'}) == {"a": 1}
        assert json_body({}) == {}
        with pytest.raises(ValidationError):
            json_body({"body": "[1, 2]"})

    def test_path_param(self):
        assert path_param({"pathParameters": {"id": "c1"}}, "id") == "c1"
        assert path_param({"pathParameters": None}, "id") == ""

    def test_respond_maps_app_errors(self):
        logger = MagicMock()

        def fail():
            raise NotFoundError("Meeting not found")

        resp = respond("Get meeting", fail, logger)

        assert resp["statusCode"] == 404
        body = json.loads(resp["body"])
        assert body["message"] == "Meeting not found"
        assert body["correlation_id"]
        logger.exception.assert_not_called()

    def test_respond_hides_unexpected_errors(self):
        logger = MagicMock()

        def fail():
            raise KeyError("secret")

        resp = respond("Upload", fail, logger, failure_message="Error processing upload")

        assert resp["statusCode"] == 500
        assert json.loads(resp["body"])["message"] == "Error processing upload"
        logger.exception.assert_called_once()


class TestErrorResponses:
    """Test error-to-response conversion."""

    @pytest.mark.parametrize(
        "error, status",
        [
            (AppError("bad"), 400),
            (ValidationError(), 400),
            (NotFoundError(), 404),
            (DuplicateEmailError("a@x.com"), 409),
            (PayloadTooLargeError(10), 413),
        ],
    )
    def test_status_codes(self, error, status):
        resp = to_response(error)
        assert resp["statusCode"] == status
        body = json.loads(resp["body"])
        assert body["status"] == "error"
        assert "correlation_id" not in body

    def test_validation_error_from_pydantic(self):
        from models.customer import CustomerCreate
        from pydantic import ValidationError as PydanticValidationError

        with pytest.raises(PydanticValidationError) as exc_info:
            CustomerCreate.model_validate({"name": "A"})
        error = ValidationError.from_pydantic(exc_info.value)
        assert "email" in str(error)
        assert "organization" in str(error)
