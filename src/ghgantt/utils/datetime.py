"""Utilities for datetime handling."""

from datetime import UTC, date, datetime


def now_iso() -> str:
    """Current UTC time as an ISO 8601 string with a Z suffix."""
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def to_calendar_date(value: str | None) -> date | None:
    """Reduce a GitHub date or timestamp ("2026-05-31T00:00:00Z") to a date."""
    if not value:
        return None
    return date.fromisoformat(value[:10])
