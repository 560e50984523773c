"""
Spaced repetition schedule kept per item, independent of deck placement
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from .config import Settings, get_settings
from .core.engine.models import Item, SRSRecord

logger = logging.getLogger(__name__)


@dataclass
class ReviewResult:
    """Result of a spaced repetition review"""

    new_interval: int
    new_ease_factor: float
    next_review_at: datetime


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives"""
    return int(math.floor(value + 0.5))


class SRSScheduler:
    """Interval/ease scheduler updated on every answer"""

    def __init__(self, settings: Settings | None = None):
        settings = settings or get_settings()
        self.default_ease = settings.default_ease_factor
        self.min_ease = settings.min_ease_factor
        self.max_ease = settings.max_ease_factor
        self.ease_bonus = settings.ease_bonus
        self.ease_penalty = settings.ease_penalty
        self.failure_multiplier = settings.failure_interval_multiplier
        self.records: dict[str, SRSRecord] = {}

    def new_record(self) -> SRSRecord:
        return SRSRecord(last_review=None, interval_days=1, ease_factor=self.default_ease)

    def get_record(self, item: Item) -> SRSRecord:
        """Get the SRS record of an item, creating it on first reference"""
        record = self.records.get(item.source_text)
        if record is None:
            record = self.new_record()
            self.records[item.source_text] = record
        return record

    def calculate_review(
        self, record: SRSRecord, correct: bool, now: datetime
    ) -> ReviewResult:
        """
        Calculate the next interval and ease for an answer

        Args:
            record: Current SRS state
            correct: Whether the answer was accepted
            now: Review time

        Returns:
            ReviewResult with new parameters
        """
        interval = record.interval_days
        ease = record.ease_factor

        if correct:
            if record.last_review is None:
                interval = 1
            else:
                interval = round_half_up(interval * ease)
                ease = min(self.max_ease, ease + self.ease_bonus)
        else:
            interval = max(1, round_half_up(interval * self.failure_multiplier))
            ease = max(self.min_ease, ease - self.ease_penalty)

        # Repeated +0.1/-0.15 steps drift in binary floats (2.1 - 0.15 = 1.9500000000000002)
        return ReviewResult(
            new_interval=interval,
            new_ease_factor=round(ease, 4),
            next_review_at=now + timedelta(days=interval),
        )

    def update_srs(self, item: Item, correct: bool, now: datetime | None = None) -> SRSRecord:
        """Apply an answer to the item's schedule and stamp the review time"""
        if now is None:
            now = datetime.now()

        record = self.get_record(item)
        result = self.calculate_review(record, correct, now)

        record.interval_days = result.new_interval
        record.ease_factor = result.new_ease_factor
        record.last_review = now

        logger.debug(
            f"SRS for '{item.source_text}': interval={record.interval_days}, "
            f"ease={record.ease_factor}"
        )
        return record

    def next_review_at(self, record: SRSRecord) -> datetime | None:
        """When the item is next due, None if it was never reviewed"""
        if record.last_review is None:
            return None
        return record.last_review + timedelta(days=record.interval_days)

    def is_due(self, record: SRSRecord, now: datetime | None = None) -> bool:
        """Reviewed items are due once their interval has elapsed"""
        next_review = self.next_review_at(record)
        if next_review is None:
            return False
        return next_review <= (now or datetime.now())

    def due_items(self, items: list[Item], now: datetime | None = None) -> list[Item]:
        """Items whose review is due, for reporting only"""
        now = now or datetime.now()
        return [item for item in items if self.is_due(self.get_record(item), now)]
