#!/usr/bin/env python3
"""
View the persisted watchlist and subscriber registry.

Usage:
    python3 scripts/view_watchlist.py                 # Show all entries
    python3 scripts/view_watchlist.py --chat 123456   # Only one subscriber
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from near_monitor.config import config
from near_monitor.db import SubscriberRegistry, WatchlistStore
from near_monitor.utils.formatting import format_near


def print_header(title: str):
    print("\n" + "=" * 80)
    print(f"  {title}")
    print("=" * 80)


def view_watchlist(chat_id: int = None):
    """Print every watchlist entry, optionally for one subscriber."""
    print_header("WATCHLIST")
    print(f"File: {config.accounts_file}")

    store = WatchlistStore.load(config.accounts_file)
    entries = store.list_for(chat_id) if chat_id is not None else store.snapshot_all()

    if not entries:
        print("No monitored accounts.")
        return

    print(f"\n{'Account':<44} {'Chat ID':<16} {'Last Balance':<24}")
    print("-" * 84)
    for entry in entries:
        balance = format_near(entry.last_balance) if entry.last_balance is not None else "Unknown"
        print(f"{entry.account_id:<44} {entry.subscriber_id:<16} {balance:<24}")

    print(f"\nTotal entries: {len(entries)}")
    print(f"Distinct accounts: {len({e.account_id for e in entries})}")


def view_subscribers():
    print_header("SUBSCRIBERS")
    print(f"File: {config.users_file}")

    registry = SubscriberRegistry.load(config.users_file)
    print(f"Known subscribers: {len(registry)}")


def main():
    parser = argparse.ArgumentParser(description="View persisted monitor data")
    parser.add_argument("--chat", type=int, help="Only show entries for this chat id")
    args = parser.parse_args()

    view_watchlist(args.chat)
    view_subscribers()


if __name__ == "__main__":
    main()
