"""System clock implementation using Python's datetime."""

from datetime import UTC, datetime

from ..ports.clock import ClockPort


class SystemClock(ClockPort):
    """Default clock returning the current time in UTC."""

    def now(self) -> datetime:
        """Get the current UTC time."""
        return datetime.now(UTC)
