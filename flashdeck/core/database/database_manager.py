"""
Database manager that coordinates the snapshot store
"""

import logging
from typing import Any

from .connection import DatabaseConnection
from .snapshot_repository import SnapshotRepository

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Database manager that coordinates repositories"""

    def __init__(self, db_path: str | None = None):
        self.db_connection = DatabaseConnection(db_path)
        self.snapshot_repo = SnapshotRepository(self.db_connection)

    def init_database(self) -> None:
        """Initialize database tables"""
        self.db_connection.init_database()

    def save_snapshot(self, owner_id: int, snapshot: dict[str, Any]) -> bool:
        return self.snapshot_repo.save_snapshot(owner_id, snapshot)

    def load_snapshot(self, owner_id: int) -> dict[str, Any] | None:
        return self.snapshot_repo.load_snapshot(owner_id)

    def delete_snapshot(self, owner_id: int) -> bool:
        return self.snapshot_repo.delete_snapshot(owner_id)

    def list_owner_ids(self) -> list[int]:
        return self.snapshot_repo.list_owner_ids()

    def get_connection(self):
        """Get database connection for direct SQL access in tests"""
        return self.db_connection.get_connection()


# Global instance
_db_manager = None


def get_db_manager(db_path: str | None = None) -> DatabaseManager:
    """Get global database manager instance"""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager(db_path)
    return _db_manager
