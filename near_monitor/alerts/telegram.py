"""
Telegram Alerts
===============

Outbound Telegram notifications for the balance monitor.

Alert types:
- Balance change alerts: Sent to a subscriber when a watched account changes
- Broadcasts: Sent to every known subscriber (e.g. restart notice)
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import requests

from ..utils.formatting import format_near

logger = logging.getLogger(__name__)

# Telegram allows ~30 messages/sec per bot
MIN_MESSAGE_INTERVAL_SECONDS = 0.05
TELEGRAM_MAX_MESSAGE_LENGTH = 4000
REQUEST_TIMEOUT_SECONDS = 10

RESTART_MESSAGE = "🚀 New version deployed and bot restarted!"


@dataclass
class AlertConfig:
    """Configuration for alert sending."""
    bot_token: str
    dry_run: bool = False
    max_message_length: int = TELEGRAM_MAX_MESSAGE_LENGTH
    min_message_interval: float = MIN_MESSAGE_INTERVAL_SECONDS
    timeout: float = REQUEST_TIMEOUT_SECONDS


def format_balance_change(account_id: str, old_balance: Optional[int], new_balance: int) -> str:
    """
    Build the balance change alert text.

    An unsampled previous balance (None) is shown as "Unknown".
    """
    old_str = format_near(old_balance) if old_balance is not None else "Unknown"
    return (
        f"🚨 Balance Update for {account_id}!\n\n"
        f"Old: {old_str}\n"
        f"New: {format_near(new_balance)}"
    )


class TelegramAlerts:
    """
    Telegram alert sender.

    deliver() is blocking (requests) and thread-safe; async callers run it
    through asyncio.to_thread. Failures are logged and reported as False,
    never raised.
    """

    def __init__(self, config: AlertConfig):
        """
        Initialize Telegram alerts.

        Args:
            config: AlertConfig with bot token and settings
        """
        self.config = config
        self._validate()

        self._last_message_time: float = 0
        self._send_lock = threading.Lock()

    @classmethod
    def from_env(cls, dry_run: bool = False) -> Optional["TelegramAlerts"]:
        """
        Create TelegramAlerts from environment variables.

        Returns:
            TelegramAlerts instance if configured (or dry run), None otherwise
        """
        from ..config import config

        bot_token = config.telegram_bot_token
        if not bot_token and not dry_run:
            logger.warning("Telegram not configured (set TELEGRAM_BOT_TOKEN)")
            return None

        return cls(AlertConfig(bot_token=bot_token or "", dry_run=dry_run))

    def _validate(self):
        """Validate configuration."""
        if not self.config.dry_run and not self.config.bot_token:
            raise ValueError("TELEGRAM_BOT_TOKEN is required (or use --dry-run)")

    def _enforce_message_interval(self):
        """Enforce minimum interval between messages. Caller holds _send_lock."""
        elapsed = time.time() - self._last_message_time
        if elapsed < self.config.min_message_interval:
            time.sleep(self.config.min_message_interval - elapsed)

    def _truncate_message(self, text: str) -> str:
        """Truncate message to Telegram's character limit."""
        if len(text) > self.config.max_message_length:
            return text[:self.config.max_message_length - 20] + "\n... (truncated)"
        return text

    # -------------------------------------------------------------------------
    # Public Methods
    # -------------------------------------------------------------------------

    def deliver(self, subscriber_id: int, text: str) -> bool:
        """
        Send a plain-text message to a subscriber's chat.

        Args:
            subscriber_id: Telegram chat id
            text: Message text

        Returns:
            True if Telegram accepted the message
        """
        text = self._truncate_message(text)

        if self.config.dry_run:
            logger.info(f"[DRY RUN] Would send Telegram message chat_id={subscriber_id}:\n{text}")
            print(f"\n{'='*60}")
            print(f"[DRY RUN] Telegram message to {subscriber_id}:")
            print("="*60)
            print(text)
            print("="*60 + "\n")
            return True

        url = f"https://api.telegram.org/bot{self.config.bot_token}/sendMessage"
        payload = {
            "chat_id": subscriber_id,
            "text": text,
        }

        with self._send_lock:
            self._enforce_message_interval()
            try:
                response = requests.post(url, json=payload, timeout=self.config.timeout)
                response.raise_for_status()
                self._last_message_time = time.time()

            except requests.exceptions.Timeout:
                logger.error(f"Telegram request timed out chat_id={subscriber_id}")
                return False
            except requests.exceptions.HTTPError as e:
                # Log status code without exposing token in URL
                status_code = e.response.status_code if e.response is not None else "unknown"
                logger.error(f"Telegram HTTP error chat_id={subscriber_id} status={status_code}")
                if status_code == 429:
                    logger.warning("Telegram rate limit hit (429) - backing off")
                return False
            except requests.exceptions.ConnectionError:
                logger.error(f"Telegram connection error chat_id={subscriber_id} - network issue")
                return False
            except requests.exceptions.RequestException:
                # Generic request error - don't log exception details which may contain URL/token
                logger.error(f"Telegram request failed chat_id={subscriber_id}")
                return False

        logger.debug(f"Telegram message sent chat_id={subscriber_id}")
        return True

    def send_balance_alert(
        self,
        subscriber_id: int,
        account_id: str,
        old_balance: Optional[int],
        new_balance: int,
    ) -> bool:
        """Send a balance change alert for one watchlist entry."""
        return self.deliver(subscriber_id, format_balance_change(account_id, old_balance, new_balance))

    def broadcast(self, subscriber_ids: Iterable[int], text: str) -> Tuple[int, int]:
        """
        Send the same message to many subscribers.

        Returns:
            (successful, failed) counts
        """
        success_count = 0
        fail_count = 0
        for subscriber_id in subscriber_ids:
            if self.deliver(subscriber_id, text):
                success_count += 1
            else:
                fail_count += 1
        return success_count, fail_count


def send_test_alert(chat_id: int, bot_token: str = None, dry_run: bool = False) -> bool:
    """
    Send a test alert to verify Telegram configuration.

    Args:
        chat_id: Telegram chat to send to
        bot_token: Telegram bot token (default: from env)
        dry_run: If True, print message instead of sending

    Returns:
        True if successful
    """
    from ..config import config

    if bot_token is None:
        bot_token = config.telegram_bot_token or ""

    alerts = TelegramAlerts(AlertConfig(bot_token=bot_token, dry_run=dry_run))
    return alerts.deliver(chat_id, "Test alert - NEAR balance monitor configuration verified.")
