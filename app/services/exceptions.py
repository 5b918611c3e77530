"""
Exceptions raised by the revenue engine.

Record-level errors never escape the aggregation loop; collection-level read
errors travel up to the reporting boundary which turns them into the
zero-filled response payload.
"""
from __future__ import annotations

from typing import Any


class RevenueEngineError(Exception):
    """Base exception for all revenue engine errors."""

    pass


class ShopRecordError(RevenueEngineError):
    """A single shop record is malformed (bad date, non-numeric amount, unknown plan)."""

    def __init__(
        self,
        message: str,
        record_id: Any | None = None,
        field: str | None = None,
        value: Any | None = None,
    ):
        self.record_id = record_id
        self.field = field
        self.value = value

        error_parts = [message]
        if record_id is not None:
            error_parts.append(f"Record: {record_id}")
        if field:
            error_parts.append(f"Field: {field}")
        if value is not None:
            error_parts.append(f"Value: {value!r}")

        super().__init__(" | ".join(error_parts))


class DataStoreUnavailable(RevenueEngineError):
    """Bulk read of a shop collection failed."""

    def __init__(self, source: str, original_error: Exception | None = None):
        self.source = source
        self.original_error = original_error
        message = f"Failed to read {source} shops"
        if original_error:
            message = f"{message} (Original error: {original_error})"
        super().__init__(message)


class SnapshotPersistenceError(RevenueEngineError):
    """Upserting a revenue snapshot failed."""

    def __init__(self, district: str, date_bucket: str, original_error: Exception | None = None):
        self.district = district
        self.date_bucket = date_bucket
        self.original_error = original_error
        message = f"Failed to persist snapshot ({district}, {date_bucket})"
        if original_error:
            message = f"{message} (Original error: {original_error})"
        super().__init__(message)


class InvalidPeriodError(RevenueEngineError):
    """Explicit start/end dates could not be parsed or are out of order."""

    pass


__all__ = [
    "RevenueEngineError",
    "ShopRecordError",
    "DataStoreUnavailable",
    "SnapshotPersistenceError",
    "InvalidPeriodError",
]
