"""
Single-Account Monitor

Polls one account on a fixed interval and prints a line each time its
balance changes. No persistence: state lives only for the process.
"""

import asyncio
import logging
import sys
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from ..config import config
from ..utils.formatting import format_near, now_timestamp

if TYPE_CHECKING:
    from ..api.near import NearClient

logger = logging.getLogger(__name__)


def format_balance_line(account_id: str, balance: int) -> str:
    """[2026-02-15 10:30:45 EST] example.near — 1.0000 NEAR"""
    return f"[{now_timestamp()}] {account_id} — {format_near(balance)}"


@dataclass
class MonitorCounters:
    polls: int = 0
    successes: int = 0
    errors: int = 0


class AccountMonitor:
    """Continuous monitor for a single account."""

    def __init__(
        self,
        client: "NearClient",
        account_id: str,
        interval: float = None,
        output: Callable[[str], None] = print,
        heartbeat_every: int = None,
    ):
        self.client = client
        self.account_id = account_id
        self.interval = interval if interval is not None else config.monitor_interval_sec
        self.output = output
        self.heartbeat_every = heartbeat_every or config.heartbeat_every

        self.previous_balance: Optional[int] = None
        self.counters = MonitorCounters()
        self._started_at = time.monotonic()

    async def poll_once(self) -> bool:
        """
        Fetch the balance once and print it if it changed.

        Returns:
            True if a change was reported
        """
        self.counters.polls += 1
        logger.debug(f"Monitor poll account={self.account_id} poll_count={self.counters.polls}")

        try:
            balance = await self.client.fetch_balance(self.account_id)
        except Exception as e:
            self.counters.errors += 1
            logger.error(f"Monitor fetch failed account={self.account_id}: {e}")
            print(f"[{now_timestamp()}] Error: {e}", file=sys.stderr)
            return False

        self.counters.successes += 1
        if balance == self.previous_balance:
            return False

        logger.info(
            f"Balance changed account={self.account_id} old={self.previous_balance} new={balance}"
        )
        self.output(format_balance_line(self.account_id, balance))
        self.previous_balance = balance
        return True

    async def run(self, max_polls: int = None):
        """
        Poll at a fixed rate until cancelled (or max_polls is reached).
        """
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        self._started_at = time.monotonic()

        logger.info(f"Monitor started account={self.account_id} interval={self.interval}s")

        while max_polls is None or self.counters.polls < max_polls:
            delay = next_tick - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            next_tick += self.interval

            await self.poll_once()

            if self.counters.polls % self.heartbeat_every == 0:
                logger.info(
                    f"Monitor heartbeat account={self.account_id} "
                    f"uptime_secs={int(time.monotonic() - self._started_at)} "
                    f"polls={self.counters.polls} success={self.counters.successes} "
                    f"errors={self.counters.errors}"
                )
