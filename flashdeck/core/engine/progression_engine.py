"""
Progression engine: the single context object owning all learner state
"""

import logging
import random
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Any

from ...config import Settings, get_settings
from ...exceptions import SessionError, SnapshotFormatError
from ...spaced_repetition import SRSScheduler
from ...text_parser import get_text_parser
from ..database.snapshot_codec import (
    CURRENT_SCHEMA_VERSION,
    decode_mastery,
    decode_srs,
    decode_streaks,
    dict_field,
    encode_mastery,
    encode_srs,
    encode_streaks,
    list_field,
    upgrade_snapshot,
)
from ..session.practice_session import PracticeSession
from .deck_manager import DeckManager
from .lock_gate import LockGate
from .mastery_tracker import MasteryTracker
from .models import (
    AnswerCommand,
    AnswerOutcome,
    Card,
    DirectionMode,
    EngineStats,
    Item,
    PracticeType,
    Sentence,
    SessionStart,
    SessionSummary,
)
from .selection import UniformSampler, WeightedSampler
from .sentence_unlock import SentenceUnlockChecker
from .streak_controller import StreakController

logger = logging.getLogger(__name__)


class ProgressionEngine:
    """Deck pipeline, mastery, streaks, lock gate and sessions of one learner"""

    def __init__(
        self,
        words: list[Item],
        sentences: list[Sentence] | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
        on_item_introduced: Callable[[Item], Any] | None = None,
    ):
        self.settings = settings or get_settings()
        self.rng = rng or random.Random()
        self.clock = clock or datetime.now
        self.on_item_introduced = on_item_introduced

        self.words = list(words)
        self.sentences = list(sentences or [])
        self.text_parser = get_text_parser()

        self.mastery = MasteryTracker(self.settings.required_per_direction)
        self.srs = SRSScheduler(self.settings)
        self.deck = DeckManager(self.settings.open_deck_size)
        self.gate = LockGate(
            self.settings.lock_milestone, self.settings.unlock_streak_required
        )
        self.streaks = StreakController()
        self.sentence_checker = SentenceUnlockChecker(self.text_parser)

        self.sentence_mastery: dict[int, int] = {}
        self.completed_sentence_ids: set[int] = set()
        self.lockout_end_time: int | None = None
        self.session: PracticeSession | None = None

        self.deck.initialize(self.words)
        self._ensure_records()

    def _ensure_records(self) -> None:
        """Create mastery and SRS records for every pool item"""
        for item in self.words:
            self.mastery.get_record(item)
            self.srs.get_record(item)

    @property
    def is_locked(self) -> bool:
        return self.gate.is_locked(self.deck.graduated_count)

    @property
    def current_card(self) -> Card | None:
        if self.session is None:
            return None
        return self.session.current_card

    def unlocked_sentences(self) -> list[Sentence]:
        return self.sentence_checker.unlocked_sentences(
            self.sentences, self.deck.graduated_deck
        )

    def start_session(
        self,
        practice_type: PracticeType,
        direction_mode: DirectionMode = DirectionMode.MIXED,
    ) -> SessionStart:
        """
        Start a practice session, discarding any session in progress

        Args:
            practice_type: Pool to practise
            direction_mode: Direction policy for word cards

        Returns:
            SessionStart with the first card, or a rejection message
        """
        if self.session is not None:
            self.end_session()

        if practice_type == PracticeType.OPEN:
            if self.is_locked:
                return SessionStart(
                    started=False,
                    practice_type=practice_type,
                    message=(
                        "🔒 Open deck is locked! Achieve "
                        f"{self.settings.unlock_streak_required} consecutive correct "
                        "answers in the Complete Deck to unlock."
                    ),
                )
            sampler = WeightedSampler(self.deck.active_deck, self.mastery.weakness, self.rng)
        elif practice_type == PracticeType.COMPLETE:
            sampler = UniformSampler(self.deck.graduated_deck, self.rng)
        else:
            unlocked = self.unlocked_sentences()
            if not unlocked:
                return SessionStart(
                    started=False,
                    practice_type=practice_type,
                    message=(
                        "No unlocked sentences yet. Earn words into the complete "
                        "deck to unlock sentences."
                    ),
                )
            sampler = UniformSampler([self.rng.choice(unlocked)], self.rng)

        if len(sampler) == 0:
            return SessionStart(
                started=False,
                practice_type=practice_type,
                message="No cards in this deck.",
            )

        self.session = PracticeSession(
            practice_type=practice_type,
            direction_mode=direction_mode,
            sampler=sampler,
            started_at=self.clock(),
            rng=self.rng,
        )
        card = self.session.serve_next()
        logger.info(
            f"Started {practice_type.value} session with {self.session.original_size} cards"
        )
        return SessionStart(
            started=True,
            practice_type=practice_type,
            card=card,
            pool_size=self.session.original_size,
        )

    def submit_answer(self, command: AnswerCommand) -> AnswerOutcome:
        """
        Process an answer for the current card

        Args:
            command: Typed text plus the card and direction it answers

        Returns:
            AnswerOutcome with the verdict and the updated state

        Raises:
            SessionError: If no session is running or the card is not current
        """
        session = self.session
        if session is None or session.current_card is None:
            raise SessionError("No card is waiting for an answer")
        card = session.current_card
        if command.card != card or command.direction != card.direction:
            raise SessionError("Answer does not match the current card")

        correct = self.text_parser.is_correct(command.typed_text, card.expected)

        if card.practice_type == PracticeType.SENTENCE:
            outcome = self._answer_sentence(card, correct)
        else:
            outcome = self._answer_word(card, correct)

        session.record_answer(correct)
        if not session.finished:
            outcome.next_card = session.serve_next()
        if session.finished:
            outcome.summary = self.end_session()

        return outcome

    def _answer_word(self, card: Card, correct: bool) -> AnswerOutcome:
        item = card.item
        now = self.clock()

        record = self.mastery.record_answer(item, card.direction, correct)
        self.srs.update_srs(item, correct, now)
        streaks = self.streaks.record_answer(correct, card.practice_type, self.is_locked)

        unlocked = False
        if (
            correct
            and card.practice_type == PracticeType.COMPLETE
            and self.gate.can_unlock(self.deck.graduated_count, streaks.unlock)
        ):
            self.gate.unlock()
            self.streaks.reset_unlock_streak()
            unlocked = True

        promoted = None
        introduced = None
        if (
            correct
            and self.mastery.is_mastered(record)
            and self.deck.is_active(item)
            and not self.deck.is_graduated(item)
        ):
            introduced = self.deck.promote(item)
            promoted = item
            self.gate.on_promotion(self.deck.graduated_count)
            if introduced is not None:
                self.mastery.get_record(introduced)
                self.srs.get_record(introduced)
                self._notify_introduced(introduced)

        if not correct:
            logger.debug(f"Missed '{item.source_text}' ({card.direction.value})")

        return AnswerOutcome(
            correct=correct,
            expected=card.expected,
            card=card,
            mastery=replace(record),
            streaks=replace(self.streaks.state),
            locked=self.is_locked,
            promoted=promoted,
            introduced=introduced,
            unlocked=unlocked,
        )

    def _answer_sentence(self, card: Card, correct: bool) -> AnswerOutcome:
        sentence = card.sentence
        self.streaks.record_answer(correct, card.practice_type, self.is_locked)

        count = self.sentence_mastery.get(sentence.id, 0)
        if correct:
            count += 1
            self.sentence_mastery[sentence.id] = count
            if count >= self.settings.required_per_direction:
                self.completed_sentence_ids.add(sentence.id)

        return AnswerOutcome(
            correct=correct,
            expected=card.expected,
            card=card,
            mastery=None,
            streaks=replace(self.streaks.state),
            locked=self.is_locked,
            sentence_mastery=count,
        )

    def _notify_introduced(self, item: Item) -> None:
        if self.on_item_introduced is None:
            return
        try:
            self.on_item_introduced(item)
        except Exception as e:
            logger.error(f"New item notification failed: {e}")

    def end_session(self) -> SessionSummary | None:
        """End the running session and return its totals"""
        session = self.session
        if session is None:
            return None

        self.session = None
        summary = SessionSummary(
            practice_type=session.practice_type,
            correct_answers=session.correct_answers,
            total_answers=session.total_answers,
            cards_completed=session.cards_completed,
            started_at=session.started_at,
            ended_at=self.clock(),
        )
        logger.info(
            f"Ended {session.practice_type.value} session: "
            f"{summary.correct_answers}/{summary.total_answers} correct"
        )
        return summary

    def stats(self) -> EngineStats:
        """Progress counters for display"""
        state = self.streaks.state
        sentences_mastered = sum(
            1
            for count in self.sentence_mastery.values()
            if count >= self.settings.required_per_direction
        )
        return EngineStats(
            active=len(self.deck.active_deck),
            reserve=len(self.deck.reserve_queue),
            graduated=self.deck.graduated_count,
            sentences_unlocked=len(self.unlocked_sentences()),
            sentences_mastered=sentences_mastered,
            current_streak=state.current,
            best_streak=state.best,
            unlock_streak=state.unlock,
            locked=self.is_locked,
            due_items=len(self.srs.due_items(self.words, self.clock())),
        )

    def to_snapshot(self) -> dict[str, Any]:
        """Serialize the persistent state in the current schema"""
        return {
            "version": CURRENT_SCHEMA_VERSION,
            "active_deck": [item.source_text for item in self.deck.active_deck],
            "graduated_deck": [item.source_text for item in self.deck.graduated_deck],
            "mastery": {
                source: encode_mastery(record)
                for source, record in self.mastery.records.items()
            },
            "srs": {
                source: encode_srs(record) for source, record in self.srs.records.items()
            },
            "sentence_mastery": {
                str(sentence_id): count
                for sentence_id, count in self.sentence_mastery.items()
            },
            "completed_sentence_ids": sorted(self.completed_sentence_ids),
            "streaks": encode_streaks(self.streaks.state),
            "lock_override": self.gate.override_active,
            "lockout_end_time": self.lockout_end_time,
        }

    def load_snapshot(self, data: Any) -> bool:
        """
        Replace the learner state with a stored snapshot

        Older schema versions are upgraded first. An unreadable snapshot
        leaves the fresh state in place.

        Returns:
            True if the snapshot was applied
        """
        try:
            snapshot = upgrade_snapshot(data, self.settings.required_per_direction)
        except SnapshotFormatError as e:
            logger.warning(f"Ignoring stored snapshot: {e}")
            return False

        self.session = None
        self.deck.restore(
            self.words,
            _string_list(list_field(snapshot, "active_deck")),
            _string_list(list_field(snapshot, "graduated_deck")),
        )

        self.mastery.records = {}
        for source, raw in dict_field(snapshot, "mastery").items():
            record = decode_mastery(raw)
            if record is None:
                logger.warning(f"Resetting malformed mastery record for '{source}'")
                continue
            self.mastery.set_record(source, record)

        self.srs.records = {}
        for source, raw in dict_field(snapshot, "srs").items():
            record = decode_srs(raw, self.srs.min_ease, self.srs.max_ease)
            if record is None:
                logger.warning(f"Resetting malformed SRS record for '{source}'")
                continue
            self.srs.records[source] = record

        self.sentence_mastery = {}
        for sentence_id, count in dict_field(snapshot, "sentence_mastery").items():
            try:
                self.sentence_mastery[int(sentence_id)] = max(0, int(count))
            except (TypeError, ValueError, OverflowError):
                logger.warning(f"Skipping sentence mastery entry {sentence_id!r}")

        self.completed_sentence_ids = set()
        for sentence_id in list_field(snapshot, "completed_sentence_ids"):
            try:
                self.completed_sentence_ids.add(int(sentence_id))
            except (TypeError, ValueError, OverflowError):
                logger.warning(f"Skipping completed sentence id {sentence_id!r}")

        self.streaks.state = decode_streaks(snapshot.get("streaks"))
        self.gate.override_active = bool(snapshot.get("lock_override", False))
        self.lockout_end_time = snapshot.get("lockout_end_time")

        self._ensure_records()
        logger.info(
            f"Loaded snapshot: {self.deck.graduated_count} graduated, "
            f"locked={self.is_locked}"
        )
        return True


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, str)]
