"""User lock manager serializing engine events per learner"""

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

logger = logging.getLogger(__name__)


@dataclass
class LockInfo:
    """Information about a user lock"""

    lock: asyncio.Lock
    last_used: datetime
    operation: str | None = None


class UserLockManager:
    """Gives every learner one critical section for state-changing events"""

    def __init__(self, idle_timeout_minutes: int = 30):
        """
        Initialize the user lock manager

        Args:
            idle_timeout_minutes: Minutes after which unused locks are dropped
        """
        self._locks: dict[int, LockInfo] = {}
        self._idle_timeout = timedelta(minutes=idle_timeout_minutes)
        self._cleanup_task: asyncio.Task | None = None

    async def start(self):
        """Start the lock manager and cleanup task"""
        logger.info("Starting UserLockManager")
        self._cleanup_task = asyncio.create_task(self._periodic_cleanup())

    async def stop(self):
        """Stop the lock manager and cleanup task"""
        logger.info("Stopping UserLockManager")
        if self._cleanup_task:
            self._cleanup_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._cleanup_task
        self._locks.clear()

    @contextlib.asynccontextmanager
    async def hold(self, user_id: int, operation: str):
        """
        Run a block inside the learner's critical section

        Args:
            user_id: Telegram user ID
            operation: Name of the operation, for diagnostics
        """
        info = self._locks.get(user_id)
        if info is None:
            info = LockInfo(lock=asyncio.Lock(), last_used=datetime.now())
            self._locks[user_id] = info

        async with info.lock:
            info.operation = operation
            info.last_used = datetime.now()
            logger.debug(f"Acquired lock for user {user_id}, operation: {operation}")
            try:
                yield
            finally:
                info.operation = None
                info.last_used = datetime.now()
                logger.debug(f"Released lock for user {user_id}, operation: {operation}")

    def is_locked(self, user_id: int) -> bool:
        """Check if an operation is currently running for the user"""
        info = self._locks.get(user_id)
        return info is not None and info.lock.locked()

    def get_active_locks_count(self) -> int:
        """Get number of currently held locks"""
        return sum(1 for info in self._locks.values() if info.lock.locked())

    def _cleanup_idle_locks(self):
        """Drop locks nobody has used for a while"""
        current_time = datetime.now()
        idle_users = [
            user_id
            for user_id, info in self._locks.items()
            if not info.lock.locked() and current_time - info.last_used > self._idle_timeout
        ]

        for user_id in idle_users:
            del self._locks[user_id]
            logger.debug(f"Idle lock removed for user {user_id}")

    async def _periodic_cleanup(self):
        """Periodic cleanup task that runs every minute"""
        while True:
            try:
                await asyncio.sleep(60)
                self._cleanup_idle_locks()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in periodic cleanup: {e}")
