#!/usr/bin/env python3
"""
Import a browser flashcard state export into the snapshot store
"""

import json
import sys
from pathlib import Path

from flashdeck.config import Settings
from flashdeck.core.database.snapshot_codec import upgrade_snapshot
from flashdeck.core.engine.progression_engine import ProgressionEngine
from flashdeck.database import init_db
from flashdeck.vocabulary_loader import load_sentences, load_words


def import_snapshot(json_path: str, owner_id: int, db_path: str, words_path: str) -> bool:
    """Upgrade a stored browser state and save it for a learner"""
    try:
        with open(json_path, encoding="utf-8") as f:
            raw = json.load(f)

        settings = Settings()
        snapshot = upgrade_snapshot(raw, settings.required_per_direction)
        print(f"📖 Upgraded snapshot from {json_path}")

        # Reconcile with the current word pool before storing
        words = load_words(words_path)
        if not words:
            print(f"❌ No words loaded from {words_path}")
            return False
        engine = ProgressionEngine(words, load_sentences(settings.sentences_path), settings=settings)
        engine.load_snapshot(snapshot)

        db_manager = init_db(db_path)
        if not db_manager.save_snapshot(owner_id, engine.to_snapshot()):
            print("❌ Could not write snapshot")
            return False

        stats = engine.stats()
        print(f"✅ Successfully imported progress for owner {owner_id}")
        print("📊 Import summary:")
        print(f"   • Open deck: {stats.active}")
        print(f"   • Complete deck: {stats.graduated}")
        print(f"   • Best streak: {stats.best_streak}")
        return True

    except Exception as e:
        print(f"❌ Import failed: {e}")
        import traceback
        traceback.print_exc()
        return False


def main():
    """Main import function"""
    if len(sys.argv) not in (4, 5):
        print("Usage: python import_snapshot.py <state_json_path> <owner_id> <database_path> [words_json_path]")
        print("Example: python import_snapshot.py flashcardState.json 12345 data/flashdeck.db data/words.json")
        sys.exit(1)

    json_path = sys.argv[1]
    owner_id = int(sys.argv[2])
    db_path = sys.argv[3]
    words_path = sys.argv[4] if len(sys.argv) == 5 else "data/words.json"

    if not Path(json_path).exists():
        print(f"❌ JSON file not found: {json_path}")
        sys.exit(1)

    print(f"🚀 Starting import from {json_path} to {db_path}")

    if import_snapshot(json_path, owner_id, db_path, words_path):
        print("🎉 Import completed successfully!")
        sys.exit(0)
    else:
        print("💥 Import failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
