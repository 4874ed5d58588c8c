# Shared helpers
from .formatting import format_near, format_timestamp, now_timestamp, short_hash
from .logging_setup import setup_logging

__all__ = [
    "format_near",
    "format_timestamp",
    "now_timestamp",
    "short_hash",
    "setup_logging",
]
