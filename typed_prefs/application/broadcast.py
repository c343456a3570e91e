"""Latest-value broadcast used to notify setting subscribers."""

from __future__ import annotations

import itertools
import threading
import weakref
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from ..infrastructure.simple_logger import SimpleLogger
from ..ports.logger import LoggerPort

T = TypeVar("T")

_UNSET: Any = object()


class Subscription:
    """Handle returned by ``CurrentValueBroadcast.subscribe``.

    Cancelling detaches the callback. A handle that is garbage collected
    without being cancelled detaches as well, so callers must keep a
    reference for as long as they want updates.
    """

    def __init__(self, broadcast: CurrentValueBroadcast[Any], token: int):
        self._token = token
        self._cancelled = threading.Event()
        self._finalizer = weakref.finalize(self, broadcast._detach, token)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Stop receiving values. Calling more than once has no effect."""
        self._cancelled.set()
        self._finalizer()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc: object) -> None:
        self.cancel()


class _Subscriber:
    __slots__ = ("callback", "cancelled")

    def __init__(self, callback: Callable[[Any], None], cancelled: threading.Event):
        self.callback = callback
        self.cancelled = cancelled


class CurrentValueBroadcast(Generic[T]):
    """Single-slot broadcast that replays its current value to new subscribers.

    The slot is filled lazily from ``loader`` on first access. Values are
    delivered synchronously on the sending thread, in subscription order.
    A callback that raises is logged and does not affect other subscribers.
    """

    def __init__(
        self,
        loader: Callable[[], T],
        logger: LoggerPort | None = None,
        name: str = "broadcast",
    ):
        self._loader = loader
        self._logger = logger or SimpleLogger("typed_prefs.broadcast")
        self._name = name
        self._lock = threading.RLock()
        self._value: T = _UNSET
        self._subscribers: dict[int, _Subscriber] = {}
        self._tokens = itertools.count()

    @property
    def value(self) -> T:
        """The latest value, loading it on first access."""
        with self._lock:
            if self._value is _UNSET:
                self._value = self._loader()
            return self._value

    @property
    def is_loaded(self) -> bool:
        return self._value is not _UNSET

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def send(self, value: T) -> None:
        """Replace the current value and deliver it to every subscriber."""
        with self._lock:
            self._value = value
            subscribers = list(self._subscribers.values())
        for subscriber in subscribers:
            self._deliver(subscriber, value)

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        """Register a callback and immediately deliver the current value to it."""
        with self._lock:
            token = next(self._tokens)
            subscription = Subscription(self, token)
            subscriber = _Subscriber(callback, subscription._cancelled)
            self._subscribers[token] = subscriber
            current = self.value
        self._deliver(subscriber, current)
        return subscription

    def _deliver(self, subscriber: _Subscriber, value: T) -> None:
        if subscriber.cancelled.is_set():
            return
        try:
            subscriber.callback(value)
        except Exception as e:
            self._logger.exception(f"Subscriber callback failed for {self._name}", exc_info=e)

    def _detach(self, token: int) -> None:
        with self._lock:
            self._subscribers.pop(token, None)
