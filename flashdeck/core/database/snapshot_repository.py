"""
Snapshot repository: the engine state of each learner as one JSON blob
"""

import json
import logging
import sqlite3
from datetime import datetime
from typing import Any

from .connection import DatabaseConnection
from .snapshot_codec import CURRENT_SCHEMA_VERSION

logger = logging.getLogger(__name__)


class SnapshotRepository:
    """Repository for persisted engine snapshots"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def save_snapshot(self, owner_id: int, snapshot: dict[str, Any]) -> bool:
        """
        Write a learner's snapshot, replacing the previous one

        Failures are logged and reported through the return value; they are
        never raised so that a session can continue on in-memory state.
        """
        try:
            payload = json.dumps(snapshot, ensure_ascii=False)
            version = int(snapshot.get("version", CURRENT_SCHEMA_VERSION))
            with self.db_connection.get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO engine_snapshots (owner_id, schema_version, payload, updated_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(owner_id) DO UPDATE SET
                        schema_version = excluded.schema_version,
                        payload = excluded.payload,
                        updated_at = excluded.updated_at
                    """,
                    (owner_id, version, payload, datetime.now().isoformat()),
                )
                conn.commit()
            logger.debug(f"Saved snapshot for owner {owner_id}")
            return True
        except (sqlite3.Error, TypeError, ValueError) as e:
            logger.error(f"Error saving snapshot for owner {owner_id}: {e}")
            return False

    def load_snapshot(self, owner_id: int) -> dict[str, Any] | None:
        """Read a learner's snapshot, None if missing or unreadable"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    "SELECT payload FROM engine_snapshots WHERE owner_id = ?",
                    (owner_id,),
                )
                row = cursor.fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error loading snapshot for owner {owner_id}: {e}")
            return None

        if not row:
            return None

        try:
            return json.loads(row["payload"])
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt snapshot for owner {owner_id}: {e}")
            return None

    def delete_snapshot(self, owner_id: int) -> bool:
        """Remove a learner's snapshot"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    "DELETE FROM engine_snapshots WHERE owner_id = ?", (owner_id,)
                )
                conn.commit()
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            logger.error(f"Error deleting snapshot for owner {owner_id}: {e}")
            return False

    def list_owner_ids(self) -> list[int]:
        """All learners with a stored snapshot"""
        try:
            with self.db_connection.get_connection() as conn:
                cursor = conn.execute(
                    "SELECT owner_id FROM engine_snapshots ORDER BY owner_id"
                )
                return [row["owner_id"] for row in cursor.fetchall()]
        except sqlite3.Error as e:
            logger.error(f"Error listing snapshots: {e}")
            return []
