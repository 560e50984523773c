"""
Message handlers for the Flashdeck bot
"""

import html
import logging

from telegram import Update
from telegram.ext import ContextTypes

from ...utils import (
    format_answer_feedback,
    format_card_prompt,
    format_new_card_notification,
    format_session_summary,
)
from ..locks.user_lock_manager import UserLockManager
from ..session.engine_manager import EngineManager

logger = logging.getLogger(__name__)


class MessageHandlers:
    """Handles text messages: answers to the current card"""

    def __init__(
        self,
        engine_manager: EngineManager,
        lock_manager: UserLockManager,
        safe_reply_callback,
    ):
        self.engine_manager = engine_manager
        self.lock_manager = lock_manager
        self._safe_reply = safe_reply_callback

    async def handle_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle text messages"""
        if not update.message or not update.effective_user:
            return

        text = update.message.text or ""
        telegram_id = update.effective_user.id

        async with self.lock_manager.hold(telegram_id, "answer"):
            outcome = self.engine_manager.submit_answer(telegram_id, text)

        if outcome is None:
            await self._safe_reply(
                update,
                "📝 No card is waiting for an answer.\n\n"
                "Start a session with /open, /complete or /sentence.",
            )
            return

        parts = [format_answer_feedback(outcome)]

        if outcome.promoted is not None:
            parts.append(
                f"🎓 <b>{html.escape(outcome.promoted.source_text)}</b> moved to the complete deck!"
            )
        if outcome.introduced is not None:
            parts.append(format_new_card_notification(outcome.introduced))
        if outcome.promoted is not None and outcome.locked:
            parts.append(
                "🔒 Open deck locked! Achieve "
                f"{self.engine_manager.settings.unlock_streak_required}-streak "
                "in the complete deck to unlock."
            )
        if outcome.unlocked:
            parts.append("🔓 Open deck unlocked! You achieved the required streak.")

        if outcome.next_card is not None:
            parts.append(format_card_prompt(outcome.next_card))
        elif outcome.summary is not None:
            summary = outcome.summary
            parts.append(
                format_session_summary(
                    summary.correct_answers,
                    summary.total_answers,
                    summary.started_at,
                    summary.ended_at,
                )
            )

        await self._safe_reply(update, "\n\n".join(parts), parse_mode="HTML")
