"""
Answer streak tracking
"""

import logging

from .models import PracticeType, StreakState

logger = logging.getLogger(__name__)


class StreakController:
    """Tracks the current, best and unlock streaks"""

    def __init__(self, state: StreakState | None = None):
        self.state = state or StreakState()

    def record_answer(
        self, correct: bool, practice_type: PracticeType, locked: bool
    ) -> StreakState:
        """
        Update streaks for one answer

        Args:
            correct: Whether the answer was accepted
            practice_type: Pool the answered card came from
            locked: Gate state at the time of the answer

        Returns:
            The updated streak state
        """
        if correct:
            self.state.current += 1
            self.state.best = max(self.state.best, self.state.current)
            if practice_type == PracticeType.COMPLETE and locked:
                self.state.unlock += 1
        else:
            self.state.current = 0
            if practice_type == PracticeType.COMPLETE:
                self.state.unlock = 0

        return self.state

    def reset_unlock_streak(self) -> None:
        self.state.unlock = 0
