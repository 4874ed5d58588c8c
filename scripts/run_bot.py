#!/usr/bin/env python3
"""
NEAR Balance Monitor Bot - Entry Script
=======================================

Runs the Telegram bot together with the background balance poller.

Architecture:
    - Watchlist and subscriber files loaded from data/ at startup
    - Restart notice broadcast to every known subscriber
    - Poll cycle every POLL_INTERVAL_SECONDS (default 60): each distinct
      account fetched once, one alert per subscriber whose balance changed
    - Telegram commands handled concurrently with the poller

Usage:
    # Start bot
    python scripts/run_bot.py

    # Dry run (alerts printed to console, commands still answered)
    python scripts/run_bot.py --dry-run

    # Test Telegram configuration
    python scripts/run_bot.py --test-telegram 123456789
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from near_monitor.alerts.telegram import send_test_alert
from near_monitor.bot.app import MonitorBot
from near_monitor.config import config
from near_monitor.utils.logging_setup import setup_logging


def main():
    parser = argparse.ArgumentParser(
        description='NEAR Balance Monitor Bot',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_bot.py                          # Start bot
  python scripts/run_bot.py --dry-run                # Console alerts only
  python scripts/run_bot.py --test-telegram CHAT_ID  # Test Telegram setup
  python scripts/run_bot.py --poll 30                # Poll every 30 seconds
        """
    )

    parser.add_argument(
        '--poll',
        type=int,
        default=config.poll_interval_sec,
        help=f'Balance poll interval in seconds (default: {config.poll_interval_sec})'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Print alerts to console instead of sending to Telegram'
    )

    parser.add_argument(
        '--test-telegram',
        type=int,
        metavar='CHAT_ID',
        help='Send a test alert to CHAT_ID to verify Telegram configuration'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=config.log_level.upper(),
        help=f'Log level (default: {config.log_level.upper()})'
    )

    args = parser.parse_args()

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    # Test Telegram mode
    if args.test_telegram is not None:
        print("Testing Telegram configuration...")
        success = send_test_alert(args.test_telegram, dry_run=args.dry_run)
        if success:
            print("Test alert sent successfully!")
            sys.exit(0)
        else:
            print("Failed to send test alert. Check your TELEGRAM_BOT_TOKEN and chat id.")
            sys.exit(1)

    if not config.telegram_bot_token:
        print("\nWARNING: TELEGRAM_BOT_TOKEN not set!")
        print("The bot needs a token even with --dry-run to receive commands.")
        print("To set: export TELEGRAM_BOT_TOKEN=your_token")
        sys.exit(1)

    # Print configuration
    print("\n" + "=" * 60)
    print("NEAR BALANCE MONITOR BOT")
    print("=" * 60)
    print(f"Poll interval:  {args.poll} seconds")
    print(f"Accounts file:  {config.accounts_file}")
    print(f"Users file:     {config.users_file}")
    print(f"Dry run:        {args.dry_run}")
    print(f"Log level:      {args.log_level}")
    print("=" * 60)

    try:
        bot = MonitorBot.from_config(dry_run=args.dry_run, poll_interval=args.poll)

        print("\nStarting bot...")
        print("Press Ctrl+C to stop\n")

        bot.run()

    except KeyboardInterrupt:
        print("\n\nBot stopped by user")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Bot error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
