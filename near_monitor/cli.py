"""
NEAR Balance Monitor - CLI
==========================

Usage:
    near-monitor balance example.near
    near-monitor monitor example.near --interval 5
    near-monitor txs example.near
    near-monitor bot
    near-monitor --dry-run bot          # alerts printed, commands still served
    near-monitor test-telegram 123456789
"""

import argparse
import asyncio
import logging
import sys

from . import __version__
from .api.near import NearClient
from .config import config
from .core.account_monitor import AccountMonitor, format_balance_line
from .errors import NearMonitorError
from .utils.logging_setup import setup_logging

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Subcommands
# -----------------------------------------------------------------------------

async def _balance(account_id: str):
    async with NearClient() as client:
        balance = await client.fetch_balance(account_id)
    print(format_balance_line(account_id, balance))


async def _monitor(account_id: str, interval: float):
    async with NearClient() as client:
        monitor = AccountMonitor(client, account_id, interval=interval)
        await monitor.run()


async def _txs(account_id: str):
    from .bot.commands import format_transactions

    async with NearClient() as client:
        txs = await client.fetch_transactions(account_id)

    if not txs:
        print(f"No transactions found for {account_id}.")
        return
    print(format_transactions(account_id, txs))


def _run_bot(dry_run: bool) -> int:
    from .bot.app import MonitorBot

    if not config.telegram_bot_token:
        print("ERROR: TELEGRAM_BOT_TOKEN not set!", file=sys.stderr)
        print("To set: export TELEGRAM_BOT_TOKEN=your_token", file=sys.stderr)
        return 1

    bot = MonitorBot.from_config(dry_run=dry_run)

    print("\n" + "=" * 60)
    print("NEAR BALANCE MONITOR BOT")
    print("=" * 60)
    print(f"Poll interval:  {bot.scheduler.interval} seconds")
    print(f"Watchlist:      {len(bot.store)} entries ({config.accounts_file})")
    print(f"Subscribers:    {len(bot.registry)} ({config.users_file})")
    print(f"Dry run:        {dry_run}")
    print("=" * 60)

    bot.run()
    return 0


def _test_telegram(chat_id: int, dry_run: bool) -> int:
    from .alerts.telegram import send_test_alert

    print("Testing Telegram configuration...")
    if send_test_alert(chat_id, dry_run=dry_run):
        print("Test alert sent successfully!")
        return 0
    print("Failed to send test alert. Check your TELEGRAM_BOT_TOKEN and chat id.")
    return 1


# -----------------------------------------------------------------------------
# Entry Point
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="near-monitor",
        description="NEAR account balance monitor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=config.log_level.upper(),
        help=f"Log level (default: {config.log_level.upper()})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print alerts to console instead of sending to Telegram",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_balance = subparsers.add_parser("balance", help="Print the current balance of an account")
    p_balance.add_argument("account_id")

    p_monitor = subparsers.add_parser("monitor", help="Print an account's balance whenever it changes")
    p_monitor.add_argument("account_id")
    p_monitor.add_argument(
        "--interval",
        type=float,
        default=config.monitor_interval_sec,
        help=f"Seconds between polls (default: {config.monitor_interval_sec})",
    )

    p_txs = subparsers.add_parser("txs", help="Print the most recent transactions of an account")
    p_txs.add_argument("account_id")

    subparsers.add_parser("bot", help="Run the Telegram bot and background poller")

    p_test = subparsers.add_parser("test-telegram", help="Send a test message to a chat")
    p_test.add_argument("chat_id", type=int)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    # One-shot commands only log to the console
    setup_logging(args.log_level, to_file=args.command in ("bot", "monitor"))

    try:
        if args.command == "balance":
            asyncio.run(_balance(args.account_id))
            exit_code = 0
        elif args.command == "monitor":
            asyncio.run(_monitor(args.account_id, args.interval))
            exit_code = 0
        elif args.command == "txs":
            asyncio.run(_txs(args.account_id))
            exit_code = 0
        elif args.command == "bot":
            exit_code = _run_bot(args.dry_run)
        else:
            exit_code = _test_telegram(args.chat_id, args.dry_run)

    except KeyboardInterrupt:
        print("\nStopped by user")
        exit_code = 0
    except NearMonitorError as e:
        logger.debug(f"Command failed command={args.command}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
