"""
Watchlist Commands
==================

Transport-independent command handlers for the bot.

Each method takes the invoking subscriber's id plus the raw argument text
and returns exactly one reply string. Store outcomes (duplicate, not found)
and upstream errors become user-visible replies; nothing here raises for a
bad input or a failed network call.
"""

import logging
from typing import TYPE_CHECKING, List

from ..config import config
from ..errors import DuplicateEntryError, EntryNotFoundError, NearAPIError
from ..models import MonitorEntry, Transaction
from ..utils.formatting import format_near, format_timestamp, short_hash

if TYPE_CHECKING:
    from ..api.near import NearClient
    from ..db.watchlist_store import WatchlistStore

logger = logging.getLogger(__name__)

WELCOME_TEXT = "Welcome to the NEAR Balance Monitor Bot! Use /help to see available commands."

# (command, description) in display order
COMMAND_DESCRIPTIONS = [
    ("help", "display this text."),
    ("start", "start the bot."),
    ("balance", "fetch balance of an account. Usage: /balance <account_id>"),
    ("add", "add an account to monitor."),
    ("remove", "remove an account from monitoring."),
    ("delete", "remove an account from monitoring."),
    ("edit", "edit an account ID. Usage: /edit <old_id> <new_id>"),
    ("list", "list monitored accounts."),
    ("trxs", "list last 10 transactions. Usage: /trxs <account_id>"),
]

HELP_TEXT = "These commands are supported:\n" + "\n".join(
    f"/{name} — {description}" for name, description in COMMAND_DESCRIPTIONS
)


def format_transactions(account_id: str, txs: List[Transaction]) -> str:
    """Render a transaction list as a single chat message."""
    lines = [f"Last {config.transactions_display_limit} transactions for {account_id}:"]
    for tx in txs:
        lines.append(
            f"\nTime: {format_timestamp(tx.block_timestamp)}\n"
            f"Hash: {short_hash(tx.hash)}\n"
            f"From: {tx.signer_id}\n"
            f"To: {tx.receiver_id}\n"
            f"Amount: {format_near(tx.deposit)}"
        )
    return "\n".join(lines)


class WatchlistCommands:
    """
    Command handlers scoped to the invoking subscriber's own entries.

    balance and trxs bypass the store and query the data source directly.
    """

    def __init__(self, store: "WatchlistStore", client: "NearClient"):
        self.store = store
        self.client = client

    def start(self, subscriber_id: int) -> str:
        logger.info(f"Start command chat_id={subscriber_id}")
        return WELCOME_TEXT

    def help(self, subscriber_id: int) -> str:
        logger.info(f"Help command chat_id={subscriber_id}")
        return HELP_TEXT

    async def balance(self, subscriber_id: int, args: str) -> str:
        account_id = args.strip()
        logger.info(f"Balance command chat_id={subscriber_id} account={account_id}")

        if not account_id:
            return "Please provide an account ID. Usage: /balance <account_id>"

        try:
            balance = await self.client.fetch_balance(account_id)
        except NearAPIError as e:
            logger.error(f"Balance command failed chat_id={subscriber_id} account={account_id}: {e}")
            return f"Error fetching balance: {e}"

        logger.info(
            f"Balance command completed chat_id={subscriber_id} account={account_id} balance={balance}"
        )
        return f"Balance for {account_id}: {format_near(balance)}"

    def add(self, subscriber_id: int, args: str) -> str:
        account_id = args.strip()
        logger.info(f"Add command chat_id={subscriber_id} account={account_id}")

        if not account_id:
            return "Please provide an account ID."

        entry = MonitorEntry(account_id=account_id, subscriber_id=subscriber_id)
        if self.store.add(entry):
            return f"Added {account_id} to monitoring list."

        logger.warning(f"Add command: already monitored chat_id={subscriber_id} account={account_id}")
        return f"{account_id} is already being monitored."

    def remove(self, subscriber_id: int, args: str) -> str:
        account_id = args.strip()
        logger.info(f"Remove command chat_id={subscriber_id} account={account_id}")

        if not account_id:
            return "Please provide an account ID."

        if self.store.remove(account_id, subscriber_id):
            return f"Removed {account_id} from monitoring list."

        logger.warning(f"Remove command: not found chat_id={subscriber_id} account={account_id}")
        return f"Account {account_id} was not found."

    def edit(self, subscriber_id: int, args: str) -> str:
        logger.info(f"Edit command chat_id={subscriber_id} args={args}")

        parts = args.split()
        if len(parts) != 2:
            return "Usage: /edit <old_id> <new_id>"

        old_id, new_id = parts
        try:
            self.store.rename(old_id, subscriber_id, new_id)
        except EntryNotFoundError:
            logger.warning(f"Edit command: not found chat_id={subscriber_id} old={old_id}")
            return f"Account {old_id} was not found."
        except DuplicateEntryError:
            logger.warning(f"Edit command: target already monitored chat_id={subscriber_id} new={new_id}")
            return f"{new_id} is already being monitored."

        return f"Updated {old_id} to {new_id}."

    def list(self, subscriber_id: int) -> str:
        accounts = [e.account_id for e in self.store.list_for(subscriber_id)]
        logger.info(f"List command chat_id={subscriber_id} account_count={len(accounts)}")

        if not accounts:
            return "You are not monitoring any accounts."
        return "Monitoring:\n" + "\n".join(accounts)

    async def trxs(self, subscriber_id: int, args: str) -> str:
        account_id = args.strip()
        logger.info(f"Trxs command chat_id={subscriber_id} account={account_id}")

        if not account_id:
            return "Please provide an account ID. Usage: /trxs <account_id>"

        try:
            txs = await self.client.fetch_transactions(account_id)
        except NearAPIError as e:
            logger.error(f"Trxs command failed chat_id={subscriber_id} account={account_id}: {e}")
            return f"Error fetching transactions: {e}"

        if not txs:
            return f"No transactions found for {account_id}."
        return format_transactions(account_id, txs)
