"""
Tests for SubscriberRegistry.
"""

import json

from near_monitor.db import SubscriberRegistry, write_snapshot


class TestSubscriberRegistry:
    """Test the non-decreasing subscriber set."""

    def test_register_new(self, registry, users_file):
        """Should add and persist a new subscriber."""
        assert registry.register(42) is True
        assert 42 in registry
        assert json.loads(users_file.read_text()) == [42]

    def test_register_existing(self, registry, users_file):
        """Should return False and not rewrite the file for a known subscriber."""
        registry.register(42)
        users_file.write_text("[42] ")

        assert registry.register(42) is False
        assert users_file.read_text() == "[42] "
        assert len(registry) == 1

    def test_negative_group_ids(self, registry):
        """Should accept negative chat ids used by Telegram groups."""
        assert registry.register(-1001234567890) is True
        assert -1001234567890 in registry.all()

    def test_load_round_trip(self, registry, users_file):
        """Should restore every registered id."""
        for chat_id in (3, 1, 2):
            registry.register(chat_id)

        reloaded = SubscriberRegistry.load(users_file)
        assert sorted(reloaded.all()) == [1, 2, 3]

    def test_load_skips_invalid_ids(self, users_file):
        """Should ignore entries that are not integers."""
        write_snapshot(users_file, [1, "2", True, None, 3])
        assert sorted(SubscriberRegistry.load(users_file).all()) == [1, 3]

    def test_load_corrupt_file(self, users_file):
        """Should start empty on invalid JSON."""
        users_file.parent.mkdir(parents=True, exist_ok=True)
        users_file.write_text("not json")
        assert len(SubscriberRegistry.load(users_file)) == 0

    def test_load_not_a_list(self, users_file):
        """Should start empty when the file holds an object."""
        write_snapshot(users_file, {"users": [1]})
        assert len(SubscriberRegistry.load(users_file)) == 0
