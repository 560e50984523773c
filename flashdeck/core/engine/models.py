"""
Engine models for the Flashdeck progression engine
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Direction(Enum):
    """Translation direction of a served card"""
    SOURCE_TO_TARGET = "source_to_target"
    TARGET_TO_SOURCE = "target_to_source"


class DirectionMode(Enum):
    """Direction policy chosen for a practice session"""
    SOURCE = "source"
    TARGET = "target"
    MIXED = "mixed"


class PracticeType(Enum):
    """Practice pools a session can draw from"""
    OPEN = "open"
    COMPLETE = "complete"
    SENTENCE = "sentence"


@dataclass(frozen=True)
class Item:
    """A translation pair from the frequency-ordered word pool"""

    id: int
    source_text: str
    target_text: str


@dataclass(frozen=True)
class Sentence:
    """A full sentence translation pair"""

    id: int
    source_text: str
    target_text: str


@dataclass
class MasteryRecord:
    """Correct-answer counters for both translation directions"""

    source_to_target: int = 0
    target_to_source: int = 0

    def total(self) -> int:
        return self.source_to_target + self.target_to_source


@dataclass
class SRSRecord:
    """Spaced repetition state of a single item"""

    last_review: datetime | None = None
    interval_days: int = 1
    ease_factor: float = 2.5


@dataclass
class StreakState:
    """Global, best-ever and unlock streak counters"""

    current: int = 0
    best: int = 0
    unlock: int = 0


@dataclass(frozen=True)
class Card:
    """A card served to the learner: an item or a sentence plus its direction"""

    practice_type: PracticeType
    direction: Direction
    item: Item | None = None
    sentence: Sentence | None = None

    @property
    def prompt(self) -> str:
        if self.sentence is not None:
            return self.sentence.source_text
        if self.direction == Direction.SOURCE_TO_TARGET:
            return self.item.source_text
        return self.item.target_text

    @property
    def expected(self) -> str:
        if self.sentence is not None:
            return self.sentence.target_text
        if self.direction == Direction.SOURCE_TO_TARGET:
            return self.item.target_text
        return self.item.source_text


@dataclass(frozen=True)
class AnswerCommand:
    """Answer submitted by the presentation layer"""

    typed_text: str
    card: Card
    direction: Direction


@dataclass
class SessionSummary:
    """Totals of a finished or abandoned session"""

    practice_type: PracticeType
    correct_answers: int
    total_answers: int
    cards_completed: int
    started_at: datetime
    ended_at: datetime


@dataclass
class AnswerOutcome:
    """Result of processing an answer, used by the presentation layer"""

    correct: bool
    expected: str
    card: Card
    mastery: MasteryRecord | None
    streaks: StreakState
    locked: bool
    promoted: Item | None = None
    introduced: Item | None = None
    unlocked: bool = False
    sentence_mastery: int | None = None
    next_card: Card | None = None
    summary: SessionSummary | None = None

    @property
    def session_finished(self) -> bool:
        return self.summary is not None


@dataclass
class SessionStart:
    """Result of a session start request"""

    started: bool
    practice_type: PracticeType
    message: str = ""
    card: Card | None = None
    pool_size: int = 0


@dataclass
class EngineStats:
    """Progress counters for display"""

    active: int
    reserve: int
    graduated: int
    sentences_unlocked: int
    sentences_mastered: int
    current_streak: int
    best_streak: int
    unlock_streak: int
    locked: bool
    due_items: int
