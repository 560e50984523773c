#!/usr/bin/env python3
"""
Export stored learner snapshots to JSON
"""

import json
import sys
from datetime import datetime
from pathlib import Path

from flashdeck.core.database.database_manager import DatabaseManager


def export_snapshots(db_path: str, output_path: str, owner_id: int | None = None) -> bool:
    """Export one learner's snapshot, or every stored snapshot"""
    try:
        db_manager = DatabaseManager(db_path)
        print(f"📖 Exporting snapshots from {db_path}")

        owner_ids = [owner_id] if owner_id is not None else db_manager.list_owner_ids()
        snapshots = {}
        for current_id in owner_ids:
            snapshot = db_manager.load_snapshot(current_id)
            if snapshot is None:
                print(f"  ⚠️  No readable snapshot for owner {current_id}")
                continue
            snapshots[str(current_id)] = snapshot
        print(f"  📝 Found {len(snapshots)} snapshots")

        if not snapshots:
            return False

        export_data = {
            "export_info": {
                "exported_at": datetime.now().isoformat(),
                "database_path": db_path,
            },
            "snapshots": snapshots,
        }

        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(export_data, f, indent=2, ensure_ascii=False)

        print(f"✅ Successfully exported data to {output_path}")
        return True

    except Exception as e:
        print(f"❌ Export failed: {e}")
        import traceback
        traceback.print_exc()
        return False


def main():
    """Main export function"""
    if len(sys.argv) not in (3, 4):
        print("Usage: python export_snapshot.py <database_path> <output_json_path> [owner_id]")
        print("Example: python export_snapshot.py data/flashdeck.db data/snapshot.json 12345")
        sys.exit(1)

    db_path = sys.argv[1]
    output_path = sys.argv[2]
    owner_id = int(sys.argv[3]) if len(sys.argv) == 4 else None

    if not Path(db_path).exists():
        print(f"❌ Database file not found: {db_path}")
        sys.exit(1)

    print(f"🚀 Starting export from {db_path} to {output_path}")

    if export_snapshots(db_path, output_path, owner_id):
        print("🎉 Export completed successfully!")
        sys.exit(0)
    else:
        print("💥 Export failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
