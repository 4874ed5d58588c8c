"""
Subscriber Registry (Non-Decreasing)

Stores every chat id that has ever sent the bot a command. Once added,
subscribers are never removed. Used for broadcast notices such as the
restart announcement.
"""

import logging
import threading
from pathlib import Path
from typing import List, Set, Union

from .snapshot import read_snapshot, write_snapshot

logger = logging.getLogger(__name__)


class SubscriberRegistry:
    """
    Durable set of subscriber ids, persisted as a JSON array.

    The registry is non-decreasing: ids are only added, never removed.
    """

    def __init__(self, file_path: Union[str, Path], subscribers: Set[int] = None):
        self.file_path = Path(file_path)
        self._subscribers: Set[int] = set(subscribers or ())
        self._lock = threading.RLock()

    @classmethod
    def load(cls, file_path: Union[str, Path]) -> "SubscriberRegistry":
        """
        Load the registry from disk.

        A missing or corrupt file yields an empty registry.
        """
        file_path = Path(file_path)
        logger.info(f"Loading subscriber registry file={file_path}")

        data = read_snapshot(file_path, default=[])
        subscribers: Set[int] = set()

        if isinstance(data, list):
            for item in data:
                if isinstance(item, int) and not isinstance(item, bool):
                    subscribers.add(item)
                else:
                    logger.warning(f"Skipping invalid subscriber id={item!r} file={file_path}")
        else:
            logger.warning(f"Subscriber file is not a JSON array, starting empty file={file_path}")

        logger.info(f"Subscriber registry loaded user_count={len(subscribers)} file={file_path}")
        return cls(file_path, subscribers)

    # -------------------------------------------------------------------------
    # Public Methods
    # -------------------------------------------------------------------------

    def register(self, subscriber_id: int) -> bool:
        """
        Record a subscriber.

        Returns:
            True if newly added (and persisted), False if already known
        """
        with self._lock:
            if subscriber_id in self._subscribers:
                logger.debug(f"User already exists chat_id={subscriber_id}")
                return False

            self._subscribers.add(subscriber_id)
            logger.info(f"User added chat_id={subscriber_id}")
            self._save()
            return True

    def all(self) -> List[int]:
        """Snapshot of all known subscriber ids."""
        with self._lock:
            return list(self._subscribers)

    def __contains__(self, subscriber_id: int) -> bool:
        with self._lock:
            return subscriber_id in self._subscribers

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)

    # -------------------------------------------------------------------------
    # Private Helpers
    # -------------------------------------------------------------------------

    def _save(self):
        """Persist the full set. Caller holds the lock."""
        if write_snapshot(self.file_path, sorted(self._subscribers)):
            logger.debug(
                f"User list saved user_count={len(self._subscribers)} file={self.file_path}"
            )
