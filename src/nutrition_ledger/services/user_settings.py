"""User settings service."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from nutrition_ledger.domain.errors import ValidationError


class UserSettingsRepository(Protocol):
    """Persistence interface for user settings."""

    def get_timezone(self, user_id: UUID) -> str | None:
        """Return the user's timezone if set."""

    def set_timezone(self, user_id: UUID, timezone: str) -> None:
        """Update the user's timezone."""


@dataclass(frozen=True)
class DayWindow:
    """Half-open UTC interval covering one calendar day in a timezone."""

    day: date
    start: datetime
    end: datetime


@dataclass
class UserSettingsService:
    """Service for user settings and calendar-day boundaries."""

    repository: UserSettingsRepository
    default_timezone: str = "UTC"

    def get_timezone(self, user_id: UUID) -> str:
        """Return the user timezone or the default if unset."""
        return self.repository.get_timezone(user_id) or self.default_timezone

    def set_timezone(self, user_id: UUID, timezone: str) -> None:
        """Persist a user's timezone after checking it exists."""
        if not is_valid_timezone(timezone):
            raise ValidationError(f"Unknown timezone: {timezone}")
        self.repository.set_timezone(user_id, timezone)

    def today(self, user_id: UUID) -> date:
        """Return the current calendar day in the user's timezone."""
        tz = ZoneInfo(self.get_timezone(user_id))
        return datetime.now(tz=tz).date()

    def day_window(self, user_id: UUID, day: date | None = None) -> DayWindow:
        """Return [start_of_day, start_of_day + 24h) for the day in UTC."""
        tz = ZoneInfo(self.get_timezone(user_id))
        resolved = day or datetime.now(tz=tz).date()
        start = datetime.combine(resolved, time.min, tzinfo=tz)
        end = start + timedelta(days=1)
        return DayWindow(
            day=resolved, start=start.astimezone(UTC), end=end.astimezone(UTC)
        )


def is_valid_timezone(value: str) -> bool:
    """Return True when value names an IANA timezone."""
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def require_ordered_range(start: date, end: date) -> None:
    """Reject day ranges whose end precedes their start."""
    if end < start:
        raise ValidationError("end must not be before start")
