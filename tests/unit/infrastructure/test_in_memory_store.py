"""Tests for the in-memory settings store."""

import threading
from datetime import datetime

import pytest

from typed_prefs.domain.exceptions import UnsupportedValueError
from typed_prefs.infrastructure.in_memory_store import InMemorySettingsStore
from typed_prefs.ports.settings_store import SettingsStorePort


class TestInMemorySettingsStore:
    """Test cases for InMemorySettingsStore."""

    def test_implements_port(self):
        """Test that the store implements SettingsStorePort."""
        assert isinstance(InMemorySettingsStore(), SettingsStorePort)

    def test_set_then_get(self, store):
        """Test that writes are visible immediately."""
        store.set("theme", "dark")

        assert store.get("theme") == "dark"
        assert store.contains("theme")

    def test_missing_key_reads_none(self, store):
        """Test that a missing key is absent, not an error."""
        assert store.get("missing") is None

    def test_remove(self, store):
        """Test that remove deletes the key."""
        store.set("count", 3)
        store.remove("count")

        assert store.get("count") is None
        assert store.keys() == []

    def test_remove_missing_key_is_noop(self, store):
        """Test removing a key that was never set."""
        store.remove("missing")

        assert store.keys() == []

    def test_seeded_values(self):
        """Test creating a store with initial contents."""
        store = InMemorySettingsStore({"a": 1, "b": "two"})

        assert store.dictionary_representation() == {"a": 1, "b": "two"}

    def test_seeded_values_are_validated(self):
        """Test that seeding rejects non-primitive values."""
        with pytest.raises(UnsupportedValueError):
            InMemorySettingsStore({"a": {"nested": True}})

    def test_rejects_unsupported_value(self, store):
        """Test that non-primitive values raise."""
        with pytest.raises(UnsupportedValueError):
            store.set("profile", {"name": "x"})

        assert store.get("profile") is None

    def test_keeps_exact_primitive_types(self, store):
        """Test that bool, int, float, bytes and datetime are kept distinct."""
        when = datetime(2025, 1, 1, 8, 0)
        store.set("flag", True)
        store.set("count", 1)
        store.set("ratio", 1.0)
        store.set("blob", b"\x00")
        store.set("when", when)

        snapshot = store.dictionary_representation()
        assert type(snapshot["flag"]) is bool
        assert type(snapshot["count"]) is int
        assert type(snapshot["ratio"]) is float
        assert snapshot["blob"] == b"\x00"
        assert snapshot["when"] == when

    def test_snapshot_is_a_copy(self, store):
        """Test that mutating the snapshot leaves the store untouched."""
        store.set("a", 1)
        snapshot = store.dictionary_representation()
        snapshot["a"] = 2
        snapshot["b"] = 3

        assert store.get("a") == 1
        assert store.get("b") is None

    def test_lists_are_copied(self, store):
        """Test that stored lists cannot be mutated from outside."""
        values = ["a", "b"]
        store.set("names", values)
        values.append("c")
        store.get("names").append("d")

        assert store.get("names") == ["a", "b"]

    def test_wipe(self, store):
        """Test removing every key."""
        store.set("a", 1)
        store.set("b", 2)
        store.wipe()

        assert store.keys() == []

    def test_concurrent_writes_to_distinct_keys(self, store):
        """Test that concurrent writers do not lose keys."""

        def writer(prefix):
            for i in range(200):
                store.set(f"{prefix}_{i}", i)

        threads = [threading.Thread(target=writer, args=(f"t{n}",)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(store.keys()) == 800
