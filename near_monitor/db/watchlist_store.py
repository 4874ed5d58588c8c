"""
Watchlist Store

Holds every (account, subscriber) monitoring entry and persists the full
list to a JSON snapshot after each mutation (write-through).

All access goes through the methods below; each one runs under a single
lock so lookup + mutate + persist is one critical section. Callers only
ever receive copies of entries.
"""

import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..errors import DuplicateEntryError, EntryNotFoundError
from ..models import MonitorEntry
from ..models.entry import validate_account_id, validate_balance
from .snapshot import read_snapshot, write_snapshot

logger = logging.getLogger(__name__)


class WatchlistStore:
    """
    Durable watchlist of MonitorEntry values.

    Invariants:
    - No two entries share an (account_id, subscriber_id) key
    - Every successful mutation is persisted before the call returns
    - last_balance only resets to None through rename()
    """

    def __init__(self, file_path: Union[str, Path], entries: List[MonitorEntry] = None):
        self.file_path = Path(file_path)
        self._lock = threading.RLock()
        # Insertion-ordered; keyed for O(1) duplicate checks
        self._entries: Dict[Tuple[str, int], MonitorEntry] = {}
        for entry in entries or []:
            if entry.key in self._entries:
                logger.warning(
                    f"Dropping duplicate entry account={entry.account_id} "
                    f"chat_id={entry.subscriber_id}"
                )
                continue
            self._entries[entry.key] = entry.copy()

    @classmethod
    def load(cls, file_path: Union[str, Path]) -> "WatchlistStore":
        """
        Load monitored accounts from disk.

        A missing file starts empty. A file that is not a JSON array also
        starts empty; malformed records are skipped one by one with a warning.
        """
        file_path = Path(file_path)
        logger.info(f"Loading monitored accounts file={file_path}")

        data = read_snapshot(file_path, default=[])
        entries: List[MonitorEntry] = []

        if not isinstance(data, list):
            logger.warning(f"Monitored accounts file is not a JSON array, starting empty file={file_path}")
        else:
            for item in data:
                try:
                    entries.append(MonitorEntry.from_dict(item))
                except (KeyError, TypeError, ValueError, AttributeError) as e:
                    logger.warning(f"Skipping invalid monitored account record={item!r} file={file_path}: {e}")

        store = cls(file_path, entries)
        logger.info(f"Loaded {len(store)} monitored accounts from file={file_path}")
        return store

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(self, entry: MonitorEntry) -> bool:
        """
        Add an entry to the watchlist.

        The stored entry always starts unsampled (last_balance=None).

        Returns:
            True if added, False if the key already exists

        Raises:
            ValueError: if account_id is empty
        """
        validate_account_id(entry.account_id)
        with self._lock:
            if entry.key in self._entries:
                logger.debug(
                    f"Account already exists chat_id={entry.subscriber_id} account={entry.account_id}"
                )
                return False

            self._entries[entry.key] = MonitorEntry(
                account_id=entry.account_id,
                subscriber_id=entry.subscriber_id,
                last_balance=None,
            )
            logger.info(f"Account added chat_id={entry.subscriber_id} account={entry.account_id}")
            self._save()
            return True

    def remove(self, account_id: str, subscriber_id: int) -> bool:
        """
        Remove the entry for (account_id, subscriber_id).

        Returns:
            True if an entry was removed
        """
        with self._lock:
            removed = self._entries.pop((account_id, subscriber_id), None)
            if removed is None:
                logger.debug(
                    f"Account not found for removal chat_id={subscriber_id} account={account_id}"
                )
                return False

            logger.info(f"Account removed chat_id={subscriber_id} account={account_id}")
            self._save()
            return True

    def rename(self, old_account_id: str, subscriber_id: int, new_account_id: str) -> None:
        """
        Point an existing entry at a different account.

        Resets last_balance so the next poll cycle takes a fresh sample.

        Raises:
            EntryNotFoundError: no entry for (old_account_id, subscriber_id)
            DuplicateEntryError: (new_account_id, subscriber_id) already exists
            ValueError: if new_account_id is empty
        """
        validate_account_id(new_account_id)
        with self._lock:
            old_key = (old_account_id, subscriber_id)
            entry = self._entries.get(old_key)
            if entry is None:
                logger.debug(
                    f"Account not found for update chat_id={subscriber_id} account={old_account_id}"
                )
                raise EntryNotFoundError(old_account_id, subscriber_id)

            new_key = (new_account_id, subscriber_id)
            if new_key != old_key and new_key in self._entries:
                raise DuplicateEntryError(new_account_id, subscriber_id)

            del self._entries[old_key]
            self._entries[new_key] = MonitorEntry(
                account_id=new_account_id,
                subscriber_id=subscriber_id,
                last_balance=None,
            )

            logger.info(
                f"Account updated chat_id={subscriber_id} old={old_account_id} new={new_account_id}"
            )
            self._save()

    def update_balance(self, account_id: str, subscriber_id: int, balance: int) -> bool:
        """
        Record a freshly observed balance.

        Only writes to disk if the value actually changed.

        Returns:
            True if the entry exists, False otherwise

        Raises:
            ValueError: if balance is not a non-negative int
        """
        validate_balance(balance)
        with self._lock:
            entry = self._entries.get((account_id, subscriber_id))
            if entry is None:
                logger.warning(
                    f"Account not found for balance update chat_id={subscriber_id} account={account_id}"
                )
                return False

            if entry.last_balance != balance:
                logger.debug(
                    f"Balance updated account={account_id} chat_id={subscriber_id} balance={balance}"
                )
                entry.last_balance = balance
                self._save()
            return True

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get(self, account_id: str, subscriber_id: int) -> Optional[MonitorEntry]:
        """Copy of a single entry, or None."""
        with self._lock:
            entry = self._entries.get((account_id, subscriber_id))
            return entry.copy() if entry else None

    def list_for(self, subscriber_id: int) -> List[MonitorEntry]:
        """Copies of all entries belonging to one subscriber."""
        with self._lock:
            return [e.copy() for e in self._entries.values() if e.subscriber_id == subscriber_id]

    def snapshot_all(self) -> List[MonitorEntry]:
        """
        Point-in-time copy of every entry.

        Used by the poll scheduler so network calls never happen while the
        lock is held.
        """
        with self._lock:
            return [e.copy() for e in self._entries.values()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # -------------------------------------------------------------------------
    # Private Helpers
    # -------------------------------------------------------------------------

    def _save(self):
        """Persist all entries. Caller holds the lock."""
        payload = [e.to_dict() for e in self._entries.values()]
        if write_snapshot(self.file_path, payload):
            logger.debug(f"Saved {len(payload)} monitored accounts to file={self.file_path}")
