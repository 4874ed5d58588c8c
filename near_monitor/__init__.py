"""
NEAR Balance Monitor
====================

Watches NEAR account balances on behalf of Telegram users and sends an
alert whenever a watched balance changes.

Subpackages:
- api: NearClient (RPC balances, NearBlocks transactions)
- db: WatchlistStore, SubscriberRegistry, atomic JSON snapshots
- core: PollScheduler, single-account AccountMonitor
- alerts: TelegramAlerts (outbound notifications)
- bot: Telegram command handling
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
