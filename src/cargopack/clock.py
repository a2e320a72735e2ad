"""Injectable time source used to stamp layer metadata."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class Clock:
    now_fn: Callable[[], datetime] = field(default=_utcnow)

    @classmethod
    def frozen(cls, value: datetime) -> Clock:
        """Return a clock that always reports *value*."""
        return cls(now_fn=lambda: value)

    def now(self) -> datetime:
        value = self.now_fn()
        if value.tzinfo is None:
            # Naive values are interpreted in the local zone.
            value = value.astimezone()
        return value


def format_timestamp(value: datetime) -> str:
    """Format *value* as an ISO 8601 timestamp with microseconds and offset."""
    if value.tzinfo is None:
        value = value.astimezone()
    return value.isoformat(timespec="microseconds")
