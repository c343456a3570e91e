"""Simple logger implementation over Python's standard logging."""

import logging
from typing import Any

from ..ports.logger import LoggerPort

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class SimpleLogger(LoggerPort):
    """Logger adapter writing to a named standard library logger.

    Keyword context is appended to the message as ``key=value`` pairs so the
    line stays readable without a structured handler, and is also attached to
    the record through ``extra``.
    """

    def __init__(self, name: str = "typed_prefs", level: int = logging.INFO):
        """Initialize the logger.

        Args:
            name: Logger name (default: "typed_prefs")
            level: Logging level (default: INFO)
        """
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)

        if not self._logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
            self._logger.addHandler(handler)

    @property
    def name(self) -> str:
        return self._logger.name

    @staticmethod
    def _render(message: str, context: dict[str, Any]) -> str:
        if not context:
            return message
        pairs = " ".join(f"{field}={value!r}" for field, value in context.items())
        return f"{message} [{pairs}]"

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log a debug message."""
        self._logger.debug(self._render(message, kwargs), extra=kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log an info message."""
        self._logger.info(self._render(message, kwargs), extra=kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a warning message."""
        self._logger.warning(self._render(message, kwargs), extra=kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log an error message."""
        self._logger.error(self._render(message, kwargs), extra=kwargs)

    def exception(self, message: str, exc_info: Exception | None = None, **kwargs: Any) -> None:
        """Log an exception with traceback."""
        self._logger.exception(
            self._render(message, kwargs), exc_info=exc_info or True, extra=kwargs
        )
