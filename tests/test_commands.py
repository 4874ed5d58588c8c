"""
Tests for the bot command handlers.

Tests cover:
- Replies for every command
- Subscriber scoping
- Upstream errors turned into replies
"""

import pytest

from near_monitor.bot import HELP_TEXT, WatchlistCommands
from near_monitor.errors import NearAPIError
from near_monitor.models import Transaction

from conftest import FakeNearClient


@pytest.fixture
def commands(store, fake_client):
    return WatchlistCommands(store, fake_client)


class TestWatchlistCommands:
    """Test add / remove / edit / list."""

    def test_start_and_help(self, commands):
        """Should greet and list every command."""
        assert "Welcome" in commands.start(1)
        assert commands.help(1) == HELP_TEXT
        for name in ("balance", "add", "remove", "delete", "edit", "list", "trxs"):
            assert f"/{name}" in HELP_TEXT

    def test_add(self, commands, store):
        """Should add the account for the invoking subscriber."""
        assert commands.add(1, "a.near") == "Added a.near to monitoring list."
        assert store.get("a.near", 1) is not None

    def test_add_duplicate(self, commands):
        """Should report an already monitored account."""
        commands.add(1, "a.near")
        assert commands.add(1, "a.near") == "a.near is already being monitored."

    def test_add_without_account(self, commands, store):
        """Should ask for an account id."""
        assert commands.add(1, "  ") == "Please provide an account ID."
        assert len(store) == 0

    def test_remove(self, commands, store):
        """Should remove only the caller's entry."""
        commands.add(1, "a.near")
        commands.add(2, "a.near")

        assert commands.remove(1, "a.near") == "Removed a.near from monitoring list."
        assert store.get("a.near", 2) is not None

    def test_remove_missing(self, commands):
        """Should report an unknown account."""
        assert commands.remove(1, "a.near") == "Account a.near was not found."

    def test_remove_other_subscribers_entry(self, commands):
        """Should not let one subscriber remove another's entry."""
        commands.add(2, "a.near")
        assert commands.remove(1, "a.near") == "Account a.near was not found."

    def test_edit(self, commands, store):
        """Should rename the entry and reset its balance."""
        commands.add(1, "a.near")
        store.update_balance("a.near", 1, 5)

        assert commands.edit(1, "a.near b.near") == "Updated a.near to b.near."
        assert store.get("b.near", 1).last_balance is None

    def test_edit_usage(self, commands):
        """Should explain usage when not given exactly two ids."""
        assert commands.edit(1, "a.near") == "Usage: /edit <old_id> <new_id>"
        assert commands.edit(1, "") == "Usage: /edit <old_id> <new_id>"

    def test_edit_missing(self, commands):
        """Should report an unknown old account."""
        assert commands.edit(1, "a.near b.near") == "Account a.near was not found."

    def test_edit_onto_existing(self, commands):
        """Should refuse to rename onto an account already watched."""
        commands.add(1, "a.near")
        commands.add(1, "b.near")
        assert commands.edit(1, "a.near b.near") == "b.near is already being monitored."

    def test_list(self, commands):
        """Should list only the caller's accounts."""
        assert commands.list(1) == "You are not monitoring any accounts."

        commands.add(1, "a.near")
        commands.add(1, "b.near")
        commands.add(2, "c.near")

        assert commands.list(1) == "Monitoring:\na.near\nb.near"


class TestDirectQueries:
    """Test balance and trxs, which bypass the store."""

    async def test_balance(self, store):
        """Should format the fetched balance."""
        commands = WatchlistCommands(store, FakeNearClient({"a.near": 15 * 10 ** 23}))
        assert await commands.balance(1, "a.near") == "Balance for a.near: 1.5000 NEAR"
        assert len(store) == 0

    async def test_balance_error(self, store):
        """Should reply with the upstream error text."""
        client = FakeNearClient({"a.near": NearAPIError("HTTP 503: unavailable")})
        reply = await WatchlistCommands(store, client).balance(1, "a.near")
        assert reply == "Error fetching balance: HTTP 503: unavailable"

    async def test_balance_without_account(self, commands):
        """Should explain usage."""
        assert "Usage: /balance" in await commands.balance(1, "")

    async def test_trxs(self, store, fake_client):
        """Should render each transaction."""
        fake_client.transactions["a.near"] = [
            Transaction("HASH1234567890", "a.near", "b.near", "1700000000000000000", 10 ** 24),
        ]
        reply = await WatchlistCommands(store, fake_client).trxs(1, "a.near")

        assert reply.startswith("Last 10 transactions for a.near:")
        assert "Hash: HASH123456..." in reply
        assert "From: a.near" in reply
        assert "To: b.near" in reply
        assert "Amount: 1.0000 NEAR" in reply

    async def test_trxs_empty(self, commands):
        """Should say when there are no transactions."""
        assert await commands.trxs(1, "a.near") == "No transactions found for a.near."

    async def test_trxs_error(self, store, fake_client):
        """Should reply with the upstream error text."""
        fake_client.transactions["a.near"] = NearAPIError("HTTP 500: oops")
        reply = await WatchlistCommands(store, fake_client).trxs(1, "a.near")
        assert reply == "Error fetching transactions: HTTP 500: oops"

    async def test_trxs_without_account(self, commands):
        """Should ask for an account id."""
        assert "Please provide an account ID" in await commands.trxs(1, " ")
