"""
Configuration for NEAR Balance Monitor

All settings in one place for easy tuning.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import os

import pytz
from dotenv import load_dotenv

# Load .env file from project root
_project_root = Path(__file__).parent.parent
_env_path = _project_root / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass
class Config:
    """All configuration settings."""

    # -------------------------------------------------------------------------
    # API Settings
    # -------------------------------------------------------------------------
    near_rpc_url: str = field(default_factory=lambda: os.environ.get(
        "NEAR_RPC_URL", "https://rpc.mainnet.near.org"
    ))
    nearblocks_url: str = "https://api.nearblocks.io/v1"

    # Total timeout for a single HTTP request (seconds)
    request_timeout_sec: float = 15.0

    # Retry settings for transient failures
    max_retries: int = 2
    rate_limit_backoff_sec: float = 2.0

    # Concurrent requests during a poll cycle
    max_concurrent_requests: int = 5

    # NearBlocks returns duplicates across receipts - fetch more than we show
    transactions_fetch_limit: int = 25
    transactions_display_limit: int = 10

    # -------------------------------------------------------------------------
    # Polling (seconds)
    # -------------------------------------------------------------------------
    poll_interval_sec: int = field(
        default_factory=lambda: _env_int("POLL_INTERVAL_SECONDS", 60)
    )
    monitor_interval_sec: int = 10

    # Log a heartbeat every N cycles
    heartbeat_every: int = 10

    # -------------------------------------------------------------------------
    # Storage Paths
    # -------------------------------------------------------------------------
    data_dir: Path = field(default_factory=lambda: Path(
        os.environ.get("NEAR_MONITOR_DATA_DIR", str(_project_root / "data"))
    ))

    @property
    def accounts_file(self) -> Path:
        return self.data_dir / "monitored_accounts.json"

    @property
    def users_file(self) -> Path:
        return self.data_dir / "users.json"

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: str = field(default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO"))
    log_file: Path = field(default_factory=lambda: _project_root / "logs" / "near_monitor.log")

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------
    display_timezone_name: str = field(default_factory=lambda: os.environ.get(
        "DISPLAY_TIMEZONE", "America/New_York"
    ))

    @property
    def display_timezone(self):
        """Timezone used for rendering timestamps. Falls back to UTC if unknown."""
        try:
            return pytz.timezone(self.display_timezone_name)
        except pytz.UnknownTimeZoneError:
            return pytz.utc

    # -------------------------------------------------------------------------
    # Telegram Settings (from environment)
    # -------------------------------------------------------------------------
    @property
    def telegram_bot_token(self) -> Optional[str]:
        # TELOXIDE_TOKEN kept for existing systemd units
        return os.environ.get("TELEGRAM_BOT_TOKEN") or os.environ.get("TELOXIDE_TOKEN")


# Global config instance
config = Config()
