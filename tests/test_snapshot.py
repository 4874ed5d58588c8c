"""
Tests for JSON snapshot persistence.

Tests cover:
- Round trip of the persisted watchlist format
- Missing and corrupt files
- Atomic replace (crash and failure simulation)
"""

import json

from near_monitor.db import snapshot
from near_monitor.db.snapshot import read_snapshot, temp_path_for, write_snapshot


class TestReadWrite:
    """Test basic snapshot reads and writes."""

    def test_round_trip(self, tmp_path):
        """Should read back exactly what was written, including None and huge ints."""
        path = tmp_path / "accounts.json"
        payload = [
            {"account_id": "a.near", "last_balance": None, "chat_id": 1},
            {"account_id": "b.near", "last_balance": 2 ** 100, "chat_id": -100123},
        ]

        assert write_snapshot(path, payload) is True
        assert read_snapshot(path) == payload

    def test_balances_are_written_as_integers(self, tmp_path):
        """Should never write balances in float notation."""
        path = tmp_path / "accounts.json"
        big = 123456789012345678901234567890
        write_snapshot(path, [{"account_id": "a.near", "last_balance": big, "chat_id": 1}])

        text = path.read_text()
        assert str(big) in text
        assert "e+" not in text

    def test_creates_parent_directories(self, tmp_path):
        """Should create missing parent directories."""
        path = tmp_path / "nested" / "dir" / "users.json"
        assert write_snapshot(path, [1, 2]) is True
        assert json.loads(path.read_text()) == [1, 2]

    def test_missing_file_returns_default(self, tmp_path):
        """Should return the default when the file does not exist."""
        assert read_snapshot(tmp_path / "nope.json", default=[]) == []

    def test_corrupt_file_returns_default(self, tmp_path):
        """Should return the default when the file is not valid JSON."""
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        assert read_snapshot(path, default=[]) == []

    def test_unserializable_payload(self, tmp_path):
        """Should return False and leave no file for unserializable data."""
        path = tmp_path / "x.json"
        assert write_snapshot(path, {"bad": object()}) is False
        assert not path.exists()


class TestAtomicity:
    """Test that a failed or interrupted write never damages the previous file."""

    def test_leftover_temp_file_is_ignored(self, tmp_path):
        """Should read the old state when a crash left a partial temp file behind."""
        path = tmp_path / "accounts.json"
        old = [{"account_id": "a.near", "last_balance": 5, "chat_id": 1}]
        write_snapshot(path, old)

        # Crash between temp write and rename
        temp_path_for(path).write_text('[{"account_id": "b.ne')

        assert read_snapshot(path) == old

    def test_next_write_overwrites_leftover_temp(self, tmp_path):
        """Should succeed after a crash left a temp file behind."""
        path = tmp_path / "accounts.json"
        temp_path_for(path).write_text("garbage")

        assert write_snapshot(path, [1]) is True
        assert read_snapshot(path) == [1]
        assert not temp_path_for(path).exists()

    def test_replace_failure_keeps_old_file(self, tmp_path, monkeypatch):
        """Should keep the old file intact and remove the temp file when rename fails."""
        path = tmp_path / "accounts.json"
        write_snapshot(path, ["old"])

        def failing_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(snapshot.os, "replace", failing_replace)

        assert write_snapshot(path, ["new"]) is False
        assert read_snapshot(path) == ["old"]
        assert not temp_path_for(path).exists()

    def test_temp_write_failure(self, tmp_path, monkeypatch):
        """Should return False without touching the target when the temp write fails."""
        path = tmp_path / "accounts.json"
        write_snapshot(path, ["old"])

        def failing_fsync(fd):
            raise OSError("io error")

        monkeypatch.setattr(snapshot.os, "fsync", failing_fsync)

        assert write_snapshot(path, ["new"]) is False
        assert read_snapshot(path) == ["old"]

    def test_temp_path_is_sibling(self, tmp_path):
        """Should place the temp file next to the target."""
        path = tmp_path / "users.json"
        assert temp_path_for(path) == tmp_path / "users.json.tmp"
        assert temp_path_for(str(path)).parent == path.parent
