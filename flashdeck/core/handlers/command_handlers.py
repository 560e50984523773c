"""
Command handlers for the Flashdeck bot
"""

import logging

from telegram import Update
from telegram.ext import ContextTypes

from ...utils import format_card_prompt, format_progress_stats, format_session_summary
from ..engine.models import DirectionMode, PracticeType
from ..locks.user_lock_manager import UserLockManager
from ..session.engine_manager import EngineManager

logger = logging.getLogger(__name__)

HELP_MESSAGE = """📖 <b>Flashdeck commands</b>

📚 <b>Practice:</b>
/open - Practise the open deck (weak words come up more often)
/complete - Review the complete deck
/sentence - Translate one unlocked sentence
/quit - End the current session

⚙️ <b>Settings:</b>
/mode source|target|mixed - Choose the translation direction

📊 <b>Progress:</b>
/stats - Decks, streaks and lock status

🎯 <b>How it works:</b>
Answer a word correctly 5 times in each direction to move it to the complete
deck. Every 50 complete words the open deck locks until you answer 100 complete
deck cards in a row correctly."""


class CommandHandlers:
    """Handles all bot commands"""

    def __init__(
        self,
        engine_manager: EngineManager,
        lock_manager: UserLockManager,
        safe_reply_callback,
    ):
        self.engine_manager = engine_manager
        self.lock_manager = lock_manager
        self._safe_reply = safe_reply_callback

    async def start_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /start command"""
        if not update.effective_user:
            return

        user = update.effective_user
        stats = self.engine_manager.stats(user.id)

        welcome_message = f"""🎉 Hi, {user.first_name}!

Welcome to Flashdeck 🇪🇸

Your open deck has <b>{stats.active}</b> words and <b>{stats.graduated}</b> words are complete.

Start with /open or see /help for all commands."""

        await self._safe_reply(update, welcome_message, parse_mode="HTML")

    async def help_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /help command"""
        if not update.effective_user:
            return
        await self._safe_reply(update, HELP_MESSAGE, parse_mode="HTML")

    async def open_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /open command"""
        await self._start_session(update, PracticeType.OPEN)

    async def complete_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /complete command"""
        await self._start_session(update, PracticeType.COMPLETE)

    async def sentence_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /sentence command"""
        await self._start_session(update, PracticeType.SENTENCE)

    async def _start_session(self, update: Update, practice_type: PracticeType):
        if not update.effective_user:
            return

        telegram_id = update.effective_user.id
        async with self.lock_manager.hold(telegram_id, f"start_{practice_type.value}"):
            result = self.engine_manager.start_session(telegram_id, practice_type)

        if not result.started:
            await self._safe_reply(update, result.message)
            return

        intro = f"▶️ {practice_type.value.capitalize()} session: {result.pool_size} cards\n\n"
        await self._safe_reply(
            update, intro + format_card_prompt(result.card), parse_mode="HTML"
        )

    async def mode_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /mode command"""
        if not update.effective_user:
            return

        telegram_id = update.effective_user.id
        args = context.args or []
        if not args:
            current = self.engine_manager.get_direction_mode(telegram_id)
            await self._safe_reply(
                update,
                f"Current mode: {current.value}\nUse /mode source, /mode target or /mode mixed",
            )
            return

        try:
            mode = DirectionMode(args[0].lower())
        except ValueError:
            await self._safe_reply(
                update, "❌ Unknown mode. Use source, target or mixed."
            )
            return

        self.engine_manager.set_direction_mode(telegram_id, mode)
        await self._safe_reply(update, f"✅ Mode set to {mode.value}")

    async def stats_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /stats command"""
        if not update.effective_user:
            return

        stats = self.engine_manager.stats(update.effective_user.id)
        await self._safe_reply(update, format_progress_stats(stats))

    async def quit_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /quit command"""
        if not update.effective_user:
            return

        telegram_id = update.effective_user.id
        async with self.lock_manager.hold(telegram_id, "quit"):
            summary = self.engine_manager.end_session(telegram_id)

        if summary is None:
            await self._safe_reply(update, "No session in progress.")
            return

        await self._safe_reply(
            update,
            format_session_summary(
                summary.correct_answers,
                summary.total_answers,
                summary.started_at,
                summary.ended_at,
            ),
            parse_mode="HTML",
        )
