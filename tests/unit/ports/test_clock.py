"""Tests for the clock port."""

from abc import ABC

import pytest

from typed_prefs.ports.clock import ClockPort


class TestClockPort:
    """Test cases for ClockPort."""

    def test_clock_port_is_abstract(self):
        """Test that ClockPort cannot be instantiated directly."""
        assert issubclass(ClockPort, ABC)
        with pytest.raises(TypeError):
            ClockPort()

    def test_subclass_must_implement_now(self):
        """Test that a subclass without now() stays abstract."""

        class Incomplete(ClockPort):
            pass

        with pytest.raises(TypeError):
            Incomplete()
