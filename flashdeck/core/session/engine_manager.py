"""
Per-learner engine management with snapshot persistence
"""

import logging
import random
from collections.abc import Callable
from typing import Any

from ...config import Settings, get_settings
from ..database.database_manager import DatabaseManager
from ..engine.models import (
    AnswerCommand,
    AnswerOutcome,
    DirectionMode,
    EngineStats,
    Item,
    PracticeType,
    Sentence,
    SessionStart,
    SessionSummary,
)
from ..engine.progression_engine import ProgressionEngine

logger = logging.getLogger(__name__)


class EngineManager:
    """Keeps one progression engine per learner and persists it after every event"""

    def __init__(
        self,
        db_manager: DatabaseManager,
        words: list[Item],
        sentences: list[Sentence],
        settings: Settings | None = None,
        rng_factory: Callable[[], random.Random] | None = None,
        on_item_introduced: Callable[[int, Item], Any] | None = None,
    ):
        self.db_manager = db_manager
        self.words = words
        self.sentences = sentences
        self.settings = settings or get_settings()
        self.rng_factory = rng_factory or random.Random
        self.on_item_introduced = on_item_introduced
        self.engines: dict[int, ProgressionEngine] = {}
        self.direction_modes: dict[int, DirectionMode] = {}

    def get_engine(self, owner_id: int) -> ProgressionEngine:
        """Get the learner's engine, loading the stored snapshot on first use"""
        engine = self.engines.get(owner_id)
        if engine is not None:
            return engine

        engine = ProgressionEngine(
            self.words,
            self.sentences,
            settings=self.settings,
            rng=self.rng_factory(),
            on_item_introduced=self._introduced_callback(owner_id),
        )

        snapshot = self.db_manager.load_snapshot(owner_id)
        if snapshot is None:
            logger.info(f"No stored progress for owner {owner_id}, starting fresh")
        else:
            engine.load_snapshot(snapshot)

        self.engines[owner_id] = engine
        return engine

    def _introduced_callback(self, owner_id: int):
        if self.on_item_introduced is None:
            return None

        def notify(item: Item):
            self.on_item_introduced(owner_id, item)

        return notify

    def persist(self, owner_id: int) -> bool:
        """Write the learner's snapshot; in-memory state is kept on failure"""
        engine = self.engines.get(owner_id)
        if engine is None:
            return False
        saved = self.db_manager.save_snapshot(owner_id, engine.to_snapshot())
        if not saved:
            logger.warning(f"Progress of owner {owner_id} not saved, will retry on next event")
        return saved

    def get_direction_mode(self, owner_id: int) -> DirectionMode:
        mode = self.direction_modes.get(owner_id)
        if mode is not None:
            return mode
        try:
            return DirectionMode(self.settings.default_direction_mode)
        except ValueError:
            return DirectionMode.MIXED

    def set_direction_mode(self, owner_id: int, mode: DirectionMode) -> None:
        self.direction_modes[owner_id] = mode

    def start_session(self, owner_id: int, practice_type: PracticeType) -> SessionStart:
        engine = self.get_engine(owner_id)
        return engine.start_session(practice_type, self.get_direction_mode(owner_id))

    def has_session(self, owner_id: int) -> bool:
        engine = self.engines.get(owner_id)
        return engine is not None and engine.current_card is not None

    def submit_answer(self, owner_id: int, typed_text: str) -> AnswerOutcome | None:
        """Answer the learner's current card, None if no card is waiting"""
        engine = self.get_engine(owner_id)
        card = engine.current_card
        if card is None:
            return None

        outcome = engine.submit_answer(AnswerCommand(typed_text, card, card.direction))
        self.persist(owner_id)
        return outcome

    def end_session(self, owner_id: int) -> SessionSummary | None:
        engine = self.engines.get(owner_id)
        if engine is None:
            return None
        summary = engine.end_session()
        self.persist(owner_id)
        return summary

    def stats(self, owner_id: int) -> EngineStats:
        return self.get_engine(owner_id).stats()
