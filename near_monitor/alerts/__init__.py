"""
Alerts Package
==============

Outbound notification delivery.

Components:
- telegram.py: TelegramAlerts (Bot API sendMessage), message formatting
"""

from .telegram import (
    AlertConfig,
    TelegramAlerts,
    RESTART_MESSAGE,
    format_balance_change,
    send_test_alert,
)

__all__ = [
    "AlertConfig",
    "TelegramAlerts",
    "RESTART_MESSAGE",
    "format_balance_change",
    "send_test_alert",
]
