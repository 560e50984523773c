"""
Telegram bot handler: presentation layer over the progression engine
"""

import logging
from functools import wraps

from telegram import BotCommand, Update
from telegram.error import TelegramError
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from .config import get_database_path, get_settings
from .core.database.database_manager import DatabaseManager
from .core.handlers.command_handlers import CommandHandlers
from .core.handlers.message_handlers import MessageHandlers
from .core.locks.user_lock_manager import UserLockManager
from .core.session.engine_manager import EngineManager
from .vocabulary_loader import load_sentences, load_words

logger = logging.getLogger(__name__)


class BotHandler:
    """Main Telegram bot handler"""

    def __init__(self, settings=None, db_manager=None, words=None, sentences=None):
        self.settings = settings or get_settings()
        self.db_manager = db_manager or DatabaseManager(
            get_database_path(self.settings.database_url)
        )
        if words is None:
            words = load_words(self.settings.words_path)
        if sentences is None:
            sentences = load_sentences(self.settings.sentences_path)

        self.lock_manager = UserLockManager()
        self.engine_manager = EngineManager(
            db_manager=self.db_manager,
            words=words,
            sentences=sentences,
            settings=self.settings,
        )

        self.application = None

        self.command_handlers = CommandHandlers(
            engine_manager=self.engine_manager,
            lock_manager=self.lock_manager,
            safe_reply_callback=self._safe_reply,
        )
        self.message_handlers = MessageHandlers(
            engine_manager=self.engine_manager,
            lock_manager=self.lock_manager,
            safe_reply_callback=self._safe_reply,
        )

    def _is_user_authorized(self, user_id: int) -> bool:
        """Check if user is authorized to use the bot"""
        if not self.settings.allowed_users_list:
            return False
        return user_id in self.settings.allowed_users_list

    async def _check_authorization(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> bool:
        """Check if user is authorized and send unauthorized message if not"""
        user_id = update.effective_user.id

        if not self._is_user_authorized(user_id):
            await self._safe_reply(
                update,
                "❌ You do not have access to this bot. Contact the administrator.",
            )
            logger.warning(f"Unauthorized access attempt from user {user_id}")
            return False

        return True

    def require_authorization(self, func):
        """Decorator to require authorization for handler functions"""

        @wraps(func)
        async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE):
            if not await self._check_authorization(update, context):
                return
            return await func(update, context)

        return wrapper

    def run(self):
        """Run the bot (synchronous entry point, owns the event loop)"""
        if not self.settings.telegram_bot_token:
            raise ValueError("TELEGRAM_BOT_TOKEN is not configured")

        logger.info("Starting Flashdeck bot...")
        self.db_manager.init_database()

        self.application = (
            Application.builder()
            .token(self.settings.telegram_bot_token)
            .read_timeout(30)
            .write_timeout(30)
            .connect_timeout(30)
            .pool_timeout(30)
            .post_init(self.setup_bot_menu)
            .post_shutdown(self.shutdown)
            .build()
        )

        self._add_handlers()

        logger.info("Bot started successfully!")
        self.application.run_polling(
            poll_interval=self.settings.polling_interval,
            timeout=10,
            bootstrap_retries=3,
        )

    async def shutdown(self, application):
        """Stop background tasks when the application shuts down"""
        await self.lock_manager.stop()
        logger.info("Bot stopped gracefully")

    def _add_handlers(self):
        """Add command and message handlers"""
        app = self.application

        commands = {
            "start": self.command_handlers.start_command,
            "help": self.command_handlers.help_command,
            "open": self.command_handlers.open_command,
            "complete": self.command_handlers.complete_command,
            "sentence": self.command_handlers.sentence_command,
            "mode": self.command_handlers.mode_command,
            "stats": self.command_handlers.stats_command,
            "quit": self.command_handlers.quit_command,
        }
        for name, callback in commands.items():
            app.add_handler(CommandHandler(name, self.require_authorization(callback)))

        app.add_handler(
            MessageHandler(
                filters.TEXT & ~filters.COMMAND,
                self.require_authorization(self.message_handlers.handle_message),
            )
        )

        app.add_error_handler(self.error_handler)

    async def setup_bot_menu(self, application):
        """Setup bot menu with commands and start background tasks"""
        await self.lock_manager.start()

        commands = [
            BotCommand("open", "📚 Practise the open deck"),
            BotCommand("complete", "🎓 Review the complete deck"),
            BotCommand("sentence", "🗣 Translate a sentence"),
            BotCommand("mode", "🔁 Choose the translation direction"),
            BotCommand("stats", "📊 Show progress"),
            BotCommand("quit", "⏹ End the session"),
            BotCommand("help", "❓ Help"),
        ]

        try:
            await application.bot.set_my_commands(commands)
            logger.info("Bot menu commands set successfully")
        except TelegramError as e:
            logger.error(f"Failed to set bot menu commands: {e}")

    async def _safe_reply(self, update_or_message, text: str, **kwargs):
        """Safely send a reply message"""
        try:
            if hasattr(update_or_message, "message"):
                message = await update_or_message.message.reply_text(text, **kwargs)
            else:
                message = await update_or_message.reply_text(text, **kwargs)
            return message
        except TelegramError as e:
            logger.error(f"Error sending reply: {e}")
            logger.error(f"Failed text: {text[:100]}...")
            return None

    async def error_handler(self, update: object, context: ContextTypes.DEFAULT_TYPE):
        """Handle errors"""
        logger.error(f"Update {update} caused error {context.error}")
