"""
Exceptions
==========

Errors raised by the data source client and the watchlist store.
"""


class NearMonitorError(Exception):
    """Base class for all NEAR monitor errors."""


class NearAPIError(NearMonitorError):
    """Upstream data source failed (HTTP, RPC or parse error)."""

    def __init__(self, message: str, account_id: str = None):
        super().__init__(message)
        self.account_id = account_id


class EntryNotFoundError(NearMonitorError):
    """No watchlist entry matches the (account, subscriber) key."""

    def __init__(self, account_id: str, subscriber_id: int):
        super().__init__(f"Account {account_id} not found")
        self.account_id = account_id
        self.subscriber_id = subscriber_id


class DuplicateEntryError(NearMonitorError):
    """The target (account, subscriber) key is already in the watchlist."""

    def __init__(self, account_id: str, subscriber_id: int):
        super().__init__(f"Account {account_id} is already being monitored")
        self.account_id = account_id
        self.subscriber_id = subscriber_id
