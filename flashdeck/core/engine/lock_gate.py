"""
Milestone lock on active-deck practice
"""

import logging

logger = logging.getLogger(__name__)

LOCK_MILESTONE = 50
UNLOCK_STREAK_REQUIRED = 100


class LockGate:
    """
    Derives the locked/unlocked state from the graduated deck size

    The deck locks at every positive multiple of the milestone. Earning the
    unlock streak sets an override that keeps the gate open until the next
    promotion changes the graduated deck size.
    """

    def __init__(
        self,
        milestone: int = LOCK_MILESTONE,
        unlock_streak_required: int = UNLOCK_STREAK_REQUIRED,
    ):
        self.milestone = milestone
        self.unlock_streak_required = unlock_streak_required
        self.override_active = False

    def milestone_hit(self, graduated_count: int) -> bool:
        return graduated_count > 0 and graduated_count % self.milestone == 0

    def is_locked(self, graduated_count: int) -> bool:
        """Recomputed on every query, never stored"""
        return self.milestone_hit(graduated_count) and not self.override_active

    def can_unlock(self, graduated_count: int, unlock_streak: int) -> bool:
        return (
            self.is_locked(graduated_count)
            and unlock_streak >= self.unlock_streak_required
        )

    def unlock(self) -> None:
        """Open the gate until the next promotion"""
        self.override_active = True
        logger.info("Open deck unlocked by streak")

    def on_promotion(self, graduated_count: int) -> None:
        """Clear the override; log when the new size locks the gate"""
        self.override_active = False
        if self.is_locked(graduated_count):
            logger.info(f"Open deck locked at {graduated_count} graduated items")
