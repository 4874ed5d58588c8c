"""
Watchlist Models
================

Dataclasses for watchlist entries.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


def validate_account_id(account_id) -> str:
    """Return account_id, or raise ValueError if it is not a non-empty string."""
    if not isinstance(account_id, str) or not account_id:
        raise ValueError(f"Invalid account_id: {account_id!r}")
    return account_id


def validate_balance(balance) -> int:
    """Return balance, or raise ValueError unless it is a non-negative int (yoctoNEAR)."""
    if isinstance(balance, bool) or not isinstance(balance, int):
        raise ValueError(f"Invalid balance: {balance!r}")
    if balance < 0:
        raise ValueError(f"Negative balance: {balance}")
    return balance


@dataclass
class MonitorEntry:
    """
    A single (account, subscriber) monitoring relationship.

    last_balance is in yoctoNEAR; None means the account has not been
    sampled yet (fresh add or after a rename).
    """
    account_id: str
    subscriber_id: int
    last_balance: Optional[int] = None

    @property
    def key(self) -> Tuple[str, int]:
        """Unique key for this entry (account + subscriber)."""
        return (self.account_id, self.subscriber_id)

    def copy(self) -> "MonitorEntry":
        return MonitorEntry(
            account_id=self.account_id,
            subscriber_id=self.subscriber_id,
            last_balance=self.last_balance,
        )

    def to_dict(self) -> dict:
        """
        Serialize for the persisted watchlist file.

        Field names match the on-disk format: the subscriber is stored as
        chat_id and balances stay integers (never floats).
        """
        return {
            "account_id": self.account_id,
            "last_balance": self.last_balance,
            "chat_id": self.subscriber_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MonitorEntry":
        """
        Build an entry from a persisted record.

        Raises:
            KeyError, TypeError, ValueError: if the record is malformed
        """
        account_id = validate_account_id(data["account_id"])

        chat_id = data["chat_id"]
        if isinstance(chat_id, bool) or not isinstance(chat_id, int):
            raise TypeError(f"Invalid chat_id: {chat_id!r}")

        last_balance = data.get("last_balance")
        if last_balance is not None:
            validate_balance(last_balance)

        return cls(account_id=account_id, subscriber_id=chat_id, last_balance=last_balance)
