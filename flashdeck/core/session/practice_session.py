"""
Practice session state for the progression engine
"""

import logging
import random
from datetime import datetime

from ..engine.models import Card, Direction, DirectionMode, PracticeType
from ..engine.selection import UniformSampler, WeightedSampler

logger = logging.getLogger(__name__)


class PracticeSession:
    """Represents a single practice session"""

    def __init__(
        self,
        practice_type: PracticeType,
        direction_mode: DirectionMode,
        sampler: WeightedSampler | UniformSampler,
        started_at: datetime,
        rng: random.Random | None = None,
    ):
        self.practice_type = practice_type
        self.direction_mode = direction_mode
        self.sampler = sampler
        self.started_at = started_at
        self.rng = rng or random.Random()
        self.original_size = len(sampler)
        self.current_card: Card | None = None
        self.correct_answers = 0
        self.total_answers = 0
        self.finished = False

    def resolve_direction(self) -> Direction:
        """Mixed sessions pick a direction independently for every card"""
        if self.practice_type == PracticeType.SENTENCE:
            return Direction.SOURCE_TO_TARGET
        if self.direction_mode == DirectionMode.SOURCE:
            return Direction.SOURCE_TO_TARGET
        if self.direction_mode == DirectionMode.TARGET:
            return Direction.TARGET_TO_SOURCE
        if self.rng.random() < 0.5:
            return Direction.SOURCE_TO_TARGET
        return Direction.TARGET_TO_SOURCE

    def serve_next(self) -> Card | None:
        """Draw the next card, or finish the session when the pool is empty"""
        drawn = self.sampler.draw()
        if drawn is None:
            self.current_card = None
            self.finished = True
            return None

        direction = self.resolve_direction()
        if self.practice_type == PracticeType.SENTENCE:
            card = Card(self.practice_type, direction, sentence=drawn)
        else:
            card = Card(self.practice_type, direction, item=drawn)

        self.current_card = card
        return card

    def record_answer(self, correct: bool) -> None:
        """Record an answer for statistics and requeue missed open-deck items"""
        self.total_answers += 1
        if correct:
            self.correct_answers += 1
        elif self.current_card is not None and self.current_card.item is not None:
            self.sampler.return_item(self.current_card.item)
        self.current_card = None

        if self.practice_type == PracticeType.SENTENCE:
            self.finished = True

    @property
    def cards_remaining(self) -> int:
        return len(self.sampler)

    @property
    def cards_completed(self) -> int:
        """Cards drawn and answered correctly so far, excluding the current one"""
        in_flight = 1 if self.current_card is not None else 0
        return max(0, self.original_size - len(self.sampler) - in_flight)
