# Core monitoring logic
from .scheduler import CycleStats, PollScheduler
from .account_monitor import AccountMonitor, format_balance_line

__all__ = [
    "CycleStats",
    "PollScheduler",
    "AccountMonitor",
    "format_balance_line",
]
