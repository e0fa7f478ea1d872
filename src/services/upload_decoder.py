"""
Decode an uploaded file into an ordered list of raw records.

The whole upload is decoded before any record is processed, so the reconciler
always walks a finished list in input order.
"""

from __future__ import annotations

import csv
import io
import json
from typing import List

from models.imports import RawRecord, UploadFormat
from utils.error_handling import MalformedInputError

JSON_CONTENT_TYPES = ("application/json",)
CSV_CONTENT_TYPES = ("text/csv", "application/vnd.ms-excel")


def format_for_content_type(content_type: str) -> UploadFormat:
    """Map a Content-Type header to an upload format. Unknown types raise ValueError."""
    media_type = (content_type or "").split(";")[0].strip().lower()
    if media_type in JSON_CONTENT_TYPES:
        return UploadFormat.JSON
    if media_type in CSV_CONTENT_TYPES:
        return UploadFormat.CSV
    raise ValueError(f"Unsupported content type: {content_type}")


def _text(payload: bytes) -> str:
    try:
        return payload.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise MalformedInputError(f"Upload is not valid UTF-8: {exc}") from exc


def decode_json(payload: bytes, entity: str = "record") -> List[RawRecord]:
    """Parse a JSON array; anything else rejects the whole batch."""
    try:
        data = json.loads(_text(payload))
    except json.JSONDecodeError as exc:
        raise MalformedInputError(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise MalformedInputError(
            f"Invalid JSON: JSON file must contain an array of {entity} objects"
        )
    return data


def decode_csv(payload: bytes) -> List[RawRecord]:
    """Read a header row plus data rows; empty cells become absent values."""
    reader = csv.DictReader(io.StringIO(_text(payload), newline=""))
    records = []
    try:
        for row in reader:
            records.append(
                {
                    key.strip(): value
                    for key, value in row.items()
                    if key is not None and value not in (None, "")
                }
            )
    except csv.Error as exc:
        raise MalformedInputError(f"Invalid CSV: {exc}") from exc
    return records


def decode_upload(payload: bytes, fmt: UploadFormat, entity: str = "record") -> List[RawRecord]:
    """Decode `payload` in the given format."""
    if fmt is UploadFormat.JSON:
        return decode_json(payload, entity)
    return decode_csv(payload)
