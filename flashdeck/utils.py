"""
Utility functions for the Flashdeck vocabulary trainer
"""

import html
import logging
from datetime import datetime

from .core.engine.models import (
    AnswerOutcome,
    Card,
    Direction,
    EngineStats,
    Item,
    PracticeType,
)

logger = logging.getLogger(__name__)


def session_elapsed_seconds(started_at: datetime, now: datetime) -> float:
    """Seconds since the session started, never negative"""
    return max(0.0, (now - started_at).total_seconds())


def cards_per_minute(cards_completed: int, started_at: datetime, now: datetime) -> float:
    """Answer throughput of a session"""
    elapsed = session_elapsed_seconds(started_at, now)
    if cards_completed <= 0 or elapsed <= 0:
        return 0.0
    return cards_completed / (elapsed / 60)


def calculate_success_rate(correct: int, total: int) -> float:
    """Calculate success rate as percentage"""
    if total == 0:
        return 0.0
    return (correct / total) * 100.0


def format_duration(seconds: int) -> str:
    """Format duration as mm:ss"""
    seconds = max(0, int(seconds))
    minutes, seconds = divmod(seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def format_card_prompt(card: Card) -> str:
    """Format the question shown for a card"""
    prompt = html.escape(card.prompt)
    if card.practice_type == PracticeType.SENTENCE:
        return f"🗣 <b>{prompt}</b>\n\nType the English translation."
    if card.direction == Direction.SOURCE_TO_TARGET:
        return f"🇪🇸 <b>{prompt}</b>\n\nType the English translation."
    return f"🇬🇧 <b>{prompt}</b>\n\nType the Spanish translation."


def format_new_card_notification(item: Item) -> str:
    """Format the notification for an item introduced from the reserve"""
    return (
        f"✨ New card added: <b>{html.escape(item.source_text)}</b> → "
        f"{html.escape(item.target_text)}"
    )


def format_answer_feedback(outcome: AnswerOutcome) -> str:
    """Format the verdict for a submitted answer"""
    if outcome.correct:
        text = "✅ Correct!"
    else:
        text = f"❌ Not quite. Correct answer: <b>{html.escape(outcome.expected)}</b>"

    text += f"\n🔥 Streak: {outcome.streaks.current} (best {outcome.streaks.best})"
    if outcome.locked and outcome.card.practice_type == PracticeType.COMPLETE:
        text += f"\n🔑 Unlock streak: {outcome.streaks.unlock}"
    return text


def format_progress_stats(stats: EngineStats) -> str:
    """Format engine progress statistics"""
    result = "📊 Your progress:\n\n"
    result += f"📚 Open deck: {stats.active}\n"
    result += f"📦 Waiting in reserve: {stats.reserve}\n"
    result += f"🎓 Complete deck: {stats.graduated}\n"
    result += f"🔄 Due for review: {stats.due_items}\n"
    result += f"🗣 Sentences unlocked: {stats.sentences_unlocked}\n"
    result += f"🏆 Sentences mastered: {stats.sentences_mastered}\n"
    result += f"🔥 Streak: {stats.current_streak} (best {stats.best_streak})\n"
    if stats.locked:
        result += f"🔒 Open deck locked, unlock streak: {stats.unlock_streak}\n"
    return result


def format_session_summary(
    correct: int, total: int, started_at: datetime, now: datetime
) -> str:
    """Format the summary shown when a session ends"""
    elapsed = session_elapsed_seconds(started_at, now)
    accuracy = calculate_success_rate(correct, total)
    return (
        "✅ <b>Session finished!</b>\n\n"
        f"• Correct answers: <b>{correct}/{total}</b>\n"
        f"• Accuracy: <b>{accuracy:.1f}%</b>\n"
        f"• Time: <b>{format_duration(int(elapsed))}</b>\n"
        f"• Pace: <b>{cards_per_minute(total, started_at, now):.1f} cards/min</b>"
    )
