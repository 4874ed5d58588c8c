"""
NEAR Monitor Test Configuration

Shared fixtures: temp data files, a fake data source and a recording
notification dispatcher. No test talks to the network.
"""

import threading
from pathlib import Path
from typing import Dict, List, Tuple, Union

import pytest

from near_monitor.alerts import format_balance_change
from near_monitor.db import SubscriberRegistry, WatchlistStore
from near_monitor.errors import NearAPIError
from near_monitor.models import Transaction


class FakeNearClient:
    """
    In-memory stand-in for NearClient.

    balances maps account_id to a balance or to an exception to raise.
    """

    def __init__(self, balances: Dict[str, Union[int, Exception]] = None):
        self.balances: Dict[str, Union[int, Exception]] = dict(balances or {})
        self.transactions: Dict[str, Union[List[Transaction], Exception]] = {}
        self.balance_calls: List[str] = []
        self.closed = False

    async def fetch_balance(self, account_id: str) -> int:
        self.balance_calls.append(account_id)
        value = self.balances.get(account_id)
        if value is None:
            raise NearAPIError(f"unknown account {account_id}", account_id=account_id)
        if isinstance(value, Exception):
            raise value
        return value

    async def fetch_transactions(self, account_id: str) -> List[Transaction]:
        value = self.transactions.get(account_id, [])
        if isinstance(value, Exception):
            raise value
        return value

    async def close(self):
        self.closed = True


class RecordingAlerts:
    """Dispatcher that records deliveries instead of sending them."""

    def __init__(self, fail_for: Tuple[int, ...] = ()):
        self.sent: List[Tuple[int, str]] = []
        self.fail_for = set(fail_for)
        self._lock = threading.Lock()

    def deliver(self, subscriber_id: int, text: str) -> bool:
        with self._lock:
            self.sent.append((subscriber_id, text))
        return subscriber_id not in self.fail_for

    def send_balance_alert(self, subscriber_id, account_id, old_balance, new_balance) -> bool:
        return self.deliver(subscriber_id, format_balance_change(account_id, old_balance, new_balance))

    def broadcast(self, subscriber_ids, text: str):
        results = [self.deliver(s, text) for s in subscriber_ids]
        return sum(results), len(results) - sum(results)


# Temporary data files
@pytest.fixture
def accounts_file(tmp_path) -> Path:
    return tmp_path / "data" / "monitored_accounts.json"


@pytest.fixture
def users_file(tmp_path) -> Path:
    return tmp_path / "data" / "users.json"


@pytest.fixture
def store(accounts_file) -> WatchlistStore:
    return WatchlistStore.load(accounts_file)


@pytest.fixture
def registry(users_file) -> SubscriberRegistry:
    return SubscriberRegistry.load(users_file)


@pytest.fixture
def fake_client() -> FakeNearClient:
    return FakeNearClient()


@pytest.fixture
def alerts() -> RecordingAlerts:
    return RecordingAlerts()
