"""Shared constants and helpers for tests."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

PACIFIC = ZoneInfo("America/Los_Angeles")

# Noon Pacific (PDT) on 2025-08-15
NOW = datetime(2025, 8, 15, 19, 0, tzinfo=timezone.utc)


def at(day: int, hour: int = 17, minute: int = 0, month: int = 8) -> datetime:
    """A UTC instant in 2025. 17:00 UTC is 10:00 Pacific on the same date."""
    return datetime(2025, month, day, hour, minute, tzinfo=timezone.utc)
