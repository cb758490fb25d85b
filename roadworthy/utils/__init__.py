"""
Shared utilities for Roadworthy Inspections.
"""
import uuid
from datetime import datetime, timedelta, timezone

from flask import request

from roadworthy.errors import ValidationError


def generate_id(prefix=None):
    """Generate a UUID4 string for database records.

    Args:
        prefix: Optional prefix for the ID (e.g., 'set')

    Returns:
        String ID like 'set-1b9d6bcd-...' or just the UUID if no prefix
    """
    value = str(uuid.uuid4())
    if prefix:
        return f"{prefix}-{value}"
    return value


def utcnow():
    return datetime.now(timezone.utc)


def to_iso(value):
    return value.isoformat(timespec='microseconds')


def now_iso():
    return to_iso(utcnow())


def next_timestamp(previous=None):
    """ISO timestamp for a write, strictly later than `previous` (ISO string)."""
    now = utcnow()
    if previous:
        try:
            prev = datetime.fromisoformat(previous)
        except ValueError:
            prev = None
        if prev is not None:
            if prev.tzinfo is None:
                prev = prev.replace(tzinfo=timezone.utc)
            if now <= prev:
                now = prev + timedelta(microseconds=1)
    return to_iso(now)


def json_body():
    """Parsed JSON request body; a missing or unreadable body is empty."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
