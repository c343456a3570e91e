"""Tests for the latest-value broadcast."""

import gc
import threading
from unittest.mock import MagicMock

from typed_prefs.application.broadcast import CurrentValueBroadcast, Subscription


class TestCurrentValueBroadcast:
    """Test cases for CurrentValueBroadcast."""

    def test_value_is_loaded_lazily(self):
        """Test that the loader runs on first access only."""
        loader = MagicMock(return_value=5)
        broadcast = CurrentValueBroadcast(loader)

        assert not broadcast.is_loaded
        loader.assert_not_called()

        assert broadcast.value == 5
        assert broadcast.value == 5
        loader.assert_called_once()

    def test_subscribe_replays_current_value(self):
        """Test that a new subscriber immediately receives the current value."""
        broadcast = CurrentValueBroadcast(lambda: "initial")
        received = []

        subscription = broadcast.subscribe(received.append)

        assert received == ["initial"]
        assert isinstance(subscription, Subscription)

    def test_send_delivers_in_order(self):
        """Test that sent values arrive in send order without duplicates."""
        broadcast = CurrentValueBroadcast(lambda: 0)
        received = []
        subscription = broadcast.subscribe(received.append)

        for value in (1, 2, 3):
            broadcast.send(value)

        assert received == [0, 1, 2, 3]
        assert broadcast.value == 3
        subscription.cancel()

    def test_send_before_load_skips_loader(self):
        """Test that a send fills the slot without loading."""
        loader = MagicMock(return_value=0)
        broadcast = CurrentValueBroadcast(loader)

        broadcast.send(9)

        assert broadcast.value == 9
        loader.assert_not_called()

    def test_late_subscriber_gets_latest_value(self):
        """Test replay of the most recent value only."""
        broadcast = CurrentValueBroadcast(lambda: 0)
        broadcast.send(1)
        broadcast.send(2)
        received = []

        subscription = broadcast.subscribe(received.append)

        assert received == [2]
        subscription.cancel()

    def test_subscribers_notified_in_subscription_order(self):
        """Test delivery order across subscribers."""
        broadcast = CurrentValueBroadcast(lambda: 0)
        calls = []
        first = broadcast.subscribe(lambda v: calls.append(("first", v)))
        second = broadcast.subscribe(lambda v: calls.append(("second", v)))
        calls.clear()

        broadcast.send(1)

        assert calls == [("first", 1), ("second", 1)]
        first.cancel()
        second.cancel()

    def test_cancel_stops_delivery(self):
        """Test that a cancelled subscriber receives nothing further."""
        broadcast = CurrentValueBroadcast(lambda: 0)
        cancelled_values = []
        other_values = []
        cancelled = broadcast.subscribe(cancelled_values.append)
        other = broadcast.subscribe(other_values.append)

        cancelled.cancel()
        broadcast.send(1)

        assert cancelled.cancelled
        assert cancelled_values == [0]
        assert other_values == [0, 1]
        assert broadcast.subscriber_count == 1
        other.cancel()

    def test_cancel_is_idempotent(self):
        """Test that cancelling twice is harmless."""
        broadcast = CurrentValueBroadcast(lambda: 0)
        subscription = broadcast.subscribe(lambda v: None)

        subscription.cancel()
        subscription.cancel()

        assert broadcast.subscriber_count == 0

    def test_context_manager_cancels(self):
        """Test using a subscription as a context manager."""
        broadcast = CurrentValueBroadcast(lambda: 0)
        received = []

        with broadcast.subscribe(received.append):
            broadcast.send(1)
        broadcast.send(2)

        assert received == [0, 1]

    def test_dropped_subscription_detaches(self):
        """Test that a garbage-collected handle stops delivery."""
        broadcast = CurrentValueBroadcast(lambda: 0)
        received = []

        subscription = broadcast.subscribe(received.append)
        assert broadcast.subscriber_count == 1

        del subscription
        gc.collect()
        broadcast.send(1)

        assert broadcast.subscriber_count == 0
        assert received == [0]

    def test_cancel_during_delivery(self):
        """Test that a subscriber cancelled by an earlier callback is skipped."""
        broadcast = CurrentValueBroadcast(lambda: 0)
        second_values = []
        handles = {}

        def first(value):
            if value == 1:
                handles["second"].cancel()

        handles["first"] = broadcast.subscribe(first)
        handles["second"] = broadcast.subscribe(second_values.append)
        broadcast.send(1)

        assert second_values == [0]

    def test_failing_callback_is_logged(self, mock_logger):
        """Test that an exception in one callback does not stop the others."""
        broadcast = CurrentValueBroadcast(lambda: 0, logger=mock_logger, name="int:retries")
        received = []

        def explode(value):
            raise RuntimeError("boom")

        bad = broadcast.subscribe(explode)
        good = broadcast.subscribe(received.append)
        broadcast.send(1)

        assert received == [0, 1]
        assert mock_logger.exception.call_count == 2
        message = mock_logger.exception.call_args.args[0]
        assert message == "Subscriber callback failed for int:retries"
        bad.cancel()
        good.cancel()

    def test_failing_callback_with_default_logger(self, caplog):
        """Test that callback failures go to the default logger."""
        broadcast = CurrentValueBroadcast(lambda: 0)

        def explode(value):
            raise RuntimeError("boom")

        subscription = broadcast.subscribe(explode)
        broadcast.send(1)

        assert broadcast.value == 1
        assert "Subscriber callback failed for broadcast" in caplog.text
        subscription.cancel()

    def test_concurrent_senders(self):
        """Test that every value from concurrent senders is delivered once."""
        broadcast = CurrentValueBroadcast(lambda: -1)
        received = []
        lock = threading.Lock()

        def record(value):
            with lock:
                received.append(value)

        subscription = broadcast.subscribe(record)

        def sender(offset):
            for i in range(100):
                broadcast.send(offset + i)

        threads = [threading.Thread(target=sender, args=(n * 1000,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(received) == 401
        assert len(set(received)) == 401
        subscription.cancel()
