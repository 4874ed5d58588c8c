"""
Display Formatting
==================

Helpers for rendering yoctoNEAR balances and block timestamps.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from ..config import config

logger = logging.getLogger(__name__)

# 1 NEAR = 10^24 yoctoNEAR
YOCTO_PER_NEAR = 10 ** 24

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %Z"


def format_near(yocto: int) -> str:
    """
    Format a yoctoNEAR amount as "X.XXXX NEAR".

    Uses Decimal so 128-bit balances keep their precision.
    """
    near = Decimal(int(yocto)) / Decimal(YOCTO_PER_NEAR)
    return f"{near:.4f} NEAR"


def now_timestamp() -> str:
    """Current time in the display timezone."""
    return datetime.now(timezone.utc).astimezone(config.display_timezone).strftime(TIMESTAMP_FORMAT)


def format_timestamp(ns_str: str) -> str:
    """
    Format a nanosecond block timestamp in the display timezone.

    Returns "Invalid Timestamp" if the value cannot be parsed.
    """
    try:
        ns = int(ns_str)
    except (TypeError, ValueError) as e:
        logger.warning(f"Failed to parse timestamp timestamp={ns_str}: {e}")
        return "Invalid Timestamp"

    secs, nsecs = divmod(ns, 1_000_000_000)
    try:
        dt = datetime.fromtimestamp(secs, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        logger.warning(f"Failed to convert timestamp secs={secs} nsecs={nsecs}")
        return "Invalid Timestamp"

    return dt.astimezone(config.display_timezone).strftime(TIMESTAMP_FORMAT)


def short_hash(tx_hash: str, length: int = 10) -> str:
    """Shorten a transaction hash for display."""
    if len(tx_hash) <= length:
        return tx_hash
    return f"{tx_hash[:length]}..."
