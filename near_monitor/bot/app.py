"""
Telegram Bot
============

Wires the watchlist engine to python-telegram-bot.

Architecture:
- WatchlistStore / SubscriberRegistry: shared state, persisted on every mutation
- PollScheduler: background task started in post_init, polls every
  config.poll_interval_sec and alerts on balance changes
- Command handlers: one per bot command, run concurrently; every update
  first records the sender in the SubscriberRegistry
"""

import asyncio
import logging
from typing import Optional

from telegram import BotCommand, Update
from telegram.error import TelegramError
from telegram.ext import Application, CommandHandler, ContextTypes

from ..alerts.telegram import RESTART_MESSAGE, TelegramAlerts
from ..api.near import NearClient
from ..config import config
from ..core.scheduler import PollScheduler
from ..db.subscriber_registry import SubscriberRegistry
from ..db.watchlist_store import WatchlistStore
from .commands import COMMAND_DESCRIPTIONS, WatchlistCommands

logger = logging.getLogger(__name__)


class MonitorBot:
    """
    Multi-user balance monitor bot.

    Owns the shared stores, the data source client, the alert dispatcher
    and the background scheduler task.
    """

    def __init__(
        self,
        token: str,
        store: WatchlistStore,
        registry: SubscriberRegistry,
        client: NearClient,
        alerts: TelegramAlerts,
        poll_interval: float = None,
    ):
        self.token = token
        self.store = store
        self.registry = registry
        self.client = client
        self.alerts = alerts
        self.commands = WatchlistCommands(store, client)
        self.scheduler = PollScheduler(store, client, alerts, interval=poll_interval)
        self._scheduler_task: Optional[asyncio.Task] = None

    @classmethod
    def from_config(cls, dry_run: bool = False, poll_interval: float = None) -> "MonitorBot":
        """
        Build the bot from config: load both stores and create the clients.

        Raises:
            ValueError: if no bot token is configured
        """
        token = config.telegram_bot_token
        if not token:
            raise ValueError("TELEGRAM_BOT_TOKEN is not set")

        alerts = TelegramAlerts.from_env(dry_run=dry_run)
        return cls(
            token=token,
            store=WatchlistStore.load(config.accounts_file),
            registry=SubscriberRegistry.load(config.users_file),
            client=NearClient(),
            alerts=alerts,
            poll_interval=poll_interval,
        )

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------

    def build_application(self) -> Application:
        """Create the python-telegram-bot Application with all handlers."""
        application = (
            Application.builder()
            .token(self.token)
            .concurrent_updates(True)
            .post_init(self._post_init)
            .post_shutdown(self._post_shutdown)
            .build()
        )

        for name, _ in COMMAND_DESCRIPTIONS:
            application.add_handler(CommandHandler(name, self._make_handler(name)))

        return application

    def run(self):
        """Start polling Telegram. Blocks until the process is stopped."""
        application = self.build_application()
        logger.info("Command handler started, bot ready")
        application.run_polling(allowed_updates=Update.ALL_TYPES)

    async def _post_init(self, application: Application):
        """Announce the restart, register the command menu and start polling."""
        subscribers = self.registry.all()
        logger.info(f"Broadcasting deployment notification user_count={len(subscribers)}")
        success_count, fail_count = await asyncio.to_thread(
            self.alerts.broadcast, subscribers, RESTART_MESSAGE
        )
        logger.info(f"Deployment notifications sent successful={success_count} failed={fail_count}")

        try:
            await application.bot.set_my_commands(
                [BotCommand(name, description) for name, description in COMMAND_DESCRIPTIONS]
            )
        except TelegramError as e:
            logger.warning(f"Could not register bot commands: {e}")

        self._scheduler_task = application.create_task(self.scheduler.run())

    async def _post_shutdown(self, application: Application):
        """Stop the scheduler and close HTTP sessions."""
        self.scheduler.stop()
        if self._scheduler_task is not None:
            self._scheduler_task.cancel()
            try:
                await self._scheduler_task
            except asyncio.CancelledError:
                pass
            self._scheduler_task = None
        await self.client.close()
        logger.info("Bot shut down")

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def _make_handler(self, name: str):
        async def handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
            chat = update.effective_chat
            message = update.effective_message
            if chat is None or message is None:
                return

            logger.debug(f"Received message chat_id={chat.id} command={name}")
            if self.registry.register(chat.id):
                logger.info(f"New user registered chat_id={chat.id}")

            args = " ".join(context.args or [])
            reply = await self.handle_command(name, chat.id, args)

            try:
                await message.reply_text(reply)
            except TelegramError as e:
                logger.error(f"Failed to send {name} response chat_id={chat.id}: {e}")

        return handler

    async def handle_command(self, name: str, subscriber_id: int, args: str = "") -> str:
        """Route a command to WatchlistCommands and return the reply text."""
        if name == "start":
            return self.commands.start(subscriber_id)
        if name == "help":
            return self.commands.help(subscriber_id)
        if name == "list":
            return self.commands.list(subscriber_id)
        if name == "balance":
            return await self.commands.balance(subscriber_id, args)
        if name == "trxs":
            return await self.commands.trxs(subscriber_id, args)
        if name == "add":
            return self.commands.add(subscriber_id, args)
        if name in ("remove", "delete"):
            return self.commands.remove(subscriber_id, args)
        if name == "edit":
            return self.commands.edit(subscriber_id, args)

        logger.warning(f"Unknown command={name} chat_id={subscriber_id}")
        return self.commands.help(subscriber_id)
