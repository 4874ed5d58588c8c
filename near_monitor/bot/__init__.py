"""
Bot Package
===========

Inbound Telegram commands.

Components:
- commands.py: WatchlistCommands (one reply string per command)
- app.py: MonitorBot (python-telegram-bot Application, scheduler lifecycle)
"""

from .app import MonitorBot
from .commands import COMMAND_DESCRIPTIONS, HELP_TEXT, WatchlistCommands, format_transactions

__all__ = [
    "MonitorBot",
    "WatchlistCommands",
    "COMMAND_DESCRIPTIONS",
    "HELP_TEXT",
    "format_transactions",
]
