"""Clock port used by date settings."""

from abc import ABC, abstractmethod
from datetime import datetime


class ClockPort(ABC):
    """Abstract clock interface.

    Lets ``DateSetting.set_now`` be driven by a fixed clock in tests.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time.

        Note:
            Implementations MUST return timezone-aware datetimes.
        """
        ...
