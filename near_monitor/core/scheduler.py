"""
Poll Cycle Scheduler

Background loop that:
1. Waits for the next fixed-rate tick
2. Takes a point-in-time snapshot of the watchlist
3. Fetches the balance of every distinct account once (concurrently)
4. For each entry whose balance changed: sends an alert, then records the
   new balance in the store

A failed fetch only skips the entries for that account until the next
cycle. A failed delivery is logged and does not roll back the update.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Union

from ..config import config
from ..models import MonitorEntry

if TYPE_CHECKING:
    from ..alerts.telegram import TelegramAlerts
    from ..api.near import NearClient
    from ..db.watchlist_store import WatchlistStore

logger = logging.getLogger(__name__)


@dataclass
class CycleStats:
    """Counters for a single poll cycle."""
    entries: int = 0
    accounts_fetched: int = 0
    fetch_failures: int = 0
    skipped_entries: int = 0
    changes: int = 0
    notifications_failed: int = 0


class PollScheduler:
    """
    Fixed-rate poller for the shared watchlist.

    Ticks are fixed-rate, not fixed-delay: tick N is due at
    start + N * interval. A cycle that overruns makes the next one start
    as soon as it finishes; cycles never overlap.

    The store lock is never held across an await. The scheduler reads a
    snapshot, releases, fetches, then goes back through update_balance()
    for each change.
    """

    def __init__(
        self,
        store: "WatchlistStore",
        client: "NearClient",
        alerts: "TelegramAlerts",
        interval: float = None,
        heartbeat_every: int = None,
    ):
        """
        Initialize the scheduler.

        Args:
            store: Watchlist store shared with the command handlers
            client: Data source with an async fetch_balance(account_id)
            alerts: Dispatcher with a blocking send_balance_alert()
            interval: Seconds between cycle starts (default from config)
            heartbeat_every: Log a heartbeat every N cycles
        """
        self.store = store
        self.client = client
        self.alerts = alerts
        self.interval = interval if interval is not None else config.poll_interval_sec
        self.heartbeat_every = heartbeat_every or config.heartbeat_every

        self.cycle_count = 0
        self.last_stats: Optional[CycleStats] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._started_at: Optional[float] = None

    # -------------------------------------------------------------------------
    # Loop Control
    # -------------------------------------------------------------------------

    async def run(self):
        """
        Run cycles until stop() is called or the task is cancelled.

        Per-cycle errors are logged and never end the loop.
        """
        loop = asyncio.get_running_loop()
        self._stop_event = asyncio.Event()
        self._started_at = time.monotonic()
        next_tick = loop.time()

        logger.info(f"Background monitoring task started interval={self.interval}s")

        try:
            while not self._stop_event.is_set():
                delay = next_tick - loop.time()
                if delay > 0:
                    try:
                        await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
                        break  # stop() was called while waiting
                    except asyncio.TimeoutError:
                        pass

                next_tick += self.interval
                self.cycle_count += 1

                try:
                    self.last_stats = await self.run_cycle()
                except Exception as e:
                    logger.exception(f"Error in poll cycle cycle={self.cycle_count}: {e}")

                if self.cycle_count % self.heartbeat_every == 0:
                    self._log_heartbeat()

        except asyncio.CancelledError:
            logger.info(f"Background monitoring task cancelled after cycle={self.cycle_count}")
            raise

        logger.info(f"Background monitoring task stopped after cycle={self.cycle_count}")

    def stop(self):
        """Ask the loop to exit after the current cycle."""
        if self._stop_event is not None:
            self._stop_event.set()

    # -------------------------------------------------------------------------
    # Cycle
    # -------------------------------------------------------------------------

    async def run_cycle(self) -> CycleStats:
        """
        Execute one poll cycle over a snapshot of the watchlist.

        Returns:
            CycleStats for this cycle
        """
        entries = self.store.snapshot_all()
        stats = CycleStats(entries=len(entries))

        logger.debug(f"Background poll cycle account_count={len(entries)} cycle={self.cycle_count}")
        if not entries:
            return stats

        balances = await self._fetch_balances(entries)
        stats.accounts_fetched = len(balances)
        stats.fetch_failures = sum(1 for v in balances.values() if isinstance(v, Exception))

        for entry in entries:
            result = balances[entry.account_id]
            if isinstance(result, Exception):
                stats.skipped_entries += 1
                continue

            if entry.last_balance == result:
                continue

            stats.changes += 1
            logger.info(
                f"Balance change detected account={entry.account_id} chat_id={entry.subscriber_id} "
                f"old={entry.last_balance} new={result}"
            )

            if not await self._notify(entry, result):
                stats.notifications_failed += 1

            # Persist updated balance
            self.store.update_balance(entry.account_id, entry.subscriber_id, result)

        return stats

    # -------------------------------------------------------------------------
    # Private Helpers
    # -------------------------------------------------------------------------

    async def _fetch_balances(self, entries: List[MonitorEntry]) -> Dict[str, Union[int, Exception]]:
        """
        Fetch each distinct account once.

        Returns:
            Dict mapping account_id to its balance or the exception raised
        """
        account_ids = list(dict.fromkeys(e.account_id for e in entries))

        async def fetch_one(account_id: str):
            try:
                return await self.client.fetch_balance(account_id)
            except Exception as e:
                logger.error(f"Error fetching balance for {account_id}: {e}")
                return e

        results = await asyncio.gather(*(fetch_one(a) for a in account_ids))
        return dict(zip(account_ids, results))

    async def _notify(self, entry: MonitorEntry, new_balance: int) -> bool:
        """Deliver a balance alert without blocking the event loop."""
        try:
            delivered = await asyncio.to_thread(
                self.alerts.send_balance_alert,
                entry.subscriber_id,
                entry.account_id,
                entry.last_balance,
                new_balance,
            )
        except Exception as e:
            logger.error(f"Failed to send alert to {entry.subscriber_id}: {e}")
            return False

        if not delivered:
            logger.error(f"Failed to send alert to {entry.subscriber_id} account={entry.account_id}")
        return bool(delivered)

    def _log_heartbeat(self):
        uptime_mins = int((time.monotonic() - (self._started_at or time.monotonic())) / 60)
        logger.info(
            f"Background monitor heartbeat cycle={self.cycle_count} uptime_mins={uptime_mins} "
            f"active_accounts={len(self.store)}"
        )
