"""Row parsing helpers shared by the Supabase repositories."""

from datetime import datetime


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO timestamp column, keeping None for SQL nulls."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None


def as_rows(data: object) -> list[dict[str, object]]:
    """Normalize PostgREST payloads (object or array) to a list of rows."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return [data]
    return []
