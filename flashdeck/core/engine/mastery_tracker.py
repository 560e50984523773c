"""
Per-item bidirectional mastery tracking
"""

import logging

from .models import Direction, Item, MasteryRecord

logger = logging.getLogger(__name__)

REQUIRED_PER_DIRECTION = 5


class MasteryTracker:
    """Tracks correct-answer counters per item and direction"""

    def __init__(self, required_per_direction: int = REQUIRED_PER_DIRECTION):
        self.required = required_per_direction
        self.records: dict[str, MasteryRecord] = {}

    def get_record(self, item: Item) -> MasteryRecord:
        """Get the mastery record of an item, creating it on first reference"""
        return self.get_record_by_source(item.source_text)

    def get_record_by_source(self, source_text: str) -> MasteryRecord:
        record = self.records.get(source_text)
        if record is None:
            record = MasteryRecord()
            self.records[source_text] = record
        return record

    def set_record(self, source_text: str, record: MasteryRecord) -> None:
        """Store a record, clamping both counters to the valid range"""
        self.records[source_text] = MasteryRecord(
            source_to_target=self._clamp(record.source_to_target),
            target_to_source=self._clamp(record.target_to_source),
        )

    def record_answer(
        self, item: Item, direction: Direction, correct: bool
    ) -> MasteryRecord:
        """
        Record an answer for one direction of an item

        Args:
            item: Answered item
            direction: Direction the card was served in
            correct: Whether the answer was accepted

        Returns:
            The updated mastery record
        """
        record = self.get_record(item)
        delta = 1 if correct else -1

        if direction == Direction.SOURCE_TO_TARGET:
            record.source_to_target = self._clamp(record.source_to_target + delta)
        else:
            record.target_to_source = self._clamp(record.target_to_source + delta)

        logger.debug(
            f"Mastery for '{item.source_text}': s2e={record.source_to_target}, "
            f"e2s={record.target_to_source}"
        )
        return record

    def is_mastered(self, record: MasteryRecord) -> bool:
        """An item is mastered when both directions reached the requirement"""
        return (
            record.source_to_target == self.required
            and record.target_to_source == self.required
        )

    def weakness(self, item: Item) -> int:
        """Inverse mastery score, higher means less mastered"""
        record = self.get_record(item)
        return 2 * self.required - record.total()

    def _clamp(self, value: int) -> int:
        return max(0, min(self.required, value))
