"""
Tests for snapshot encoding, schema upgrades and engine restore
"""

import json
import random
from datetime import datetime

import pytest

from flashdeck.core.database.snapshot_codec import (
    CURRENT_SCHEMA_VERSION,
    decode_mastery,
    decode_srs,
    decode_streaks,
    detect_version,
    upgrade_snapshot,
)
from flashdeck.core.engine.models import (
    AnswerCommand,
    DirectionMode,
    MasteryRecord,
    PracticeType,
    StreakState,
)
from flashdeck.core.engine.progression_engine import ProgressionEngine
from flashdeck.exceptions import SnapshotFormatError


class TestSchemaUpgrade:
    """Test upgrading stored browser state"""

    @pytest.fixture
    def v0_state(self):
        return {
            "openDeck": [{"spanish": "hola", "english": "hello"}],
            "completeDeck": [{"spanish": "adiós", "english": "goodbye"}],
            "mastery": {"hola": 3, "adiós": 9, "roto": "x"},
            "streak": 2,
            "bestStreak": 5,
        }

    @pytest.fixture
    def v1_state(self):
        return {
            "openDeck": [{"spanish": "hola", "english": "hello"}, "amigo", 7],
            "completeDeck": [{"spanish": "adiós", "english": "goodbye"}],
            "mastery": {"hola": {"s2e": 2, "e2s": 1}, "adiós": {"s2e": 5, "e2s": 5}},
            "srsData": {
                "hola": {"lastReview": 1700000000000, "interval": 3, "ease": 2.2},
                "adiós": {"lastReview": None, "interval": 1, "ease": 2.5},
            },
            "sentenceMastery": {"0": 2},
            "completedSentences": [3],
            "streak": 4,
            "bestStreak": 12,
            "unlockStreak": 4,
            "lockOverride": True,
            "lockoutEndTime": None,
        }

    def test_detect_version(self, v0_state, v1_state):
        assert detect_version(v0_state) == 0
        assert detect_version(v1_state) == 1
        assert detect_version({}) == 1
        assert detect_version({"version": 2}) == 2

    def test_upgrade_v0(self, v0_state):
        """Single counters become equal per-direction counters, clamped"""
        snapshot = upgrade_snapshot(v0_state, required_per_direction=5)

        assert snapshot["version"] == CURRENT_SCHEMA_VERSION
        assert snapshot["mastery"] == {
            "hola": {"source_to_target": 3, "target_to_source": 3},
            "adiós": {"source_to_target": 5, "target_to_source": 5},
        }
        assert snapshot["active_deck"] == ["hola"]
        assert snapshot["graduated_deck"] == ["adiós"]
        assert snapshot["streaks"] == {"current": 2, "best": 5, "unlock": 0}

    def test_upgrade_v1(self, v1_state):
        snapshot = upgrade_snapshot(v1_state, required_per_direction=5)

        assert snapshot["active_deck"] == ["hola", "amigo"]
        assert snapshot["mastery"]["hola"] == {"source_to_target": 2, "target_to_source": 1}
        assert snapshot["srs"]["hola"]["interval_days"] == 3
        assert snapshot["srs"]["hola"]["ease_factor"] == 2.2
        assert snapshot["srs"]["hola"]["last_review"] == datetime.fromtimestamp(
            1700000000
        ).isoformat()
        assert snapshot["srs"]["adiós"]["last_review"] is None
        assert snapshot["sentence_mastery"] == {"0": 2}
        assert snapshot["completed_sentence_ids"] == [3]
        assert snapshot["streaks"] == {"current": 4, "best": 12, "unlock": 4}
        assert snapshot["lock_override"] is True

    def test_upgrade_with_wrong_field_types(self):
        snapshot = upgrade_snapshot(
            {
                "openDeck": {"hola": 1},
                "mastery": [1, 2],
                "srsData": [1],
                "sentenceMastery": [1, 2],
                "completedSentences": 3,
            },
            required_per_direction=5,
        )

        assert snapshot["active_deck"] == []
        assert snapshot["mastery"] == {}
        assert snapshot["srs"] == {}
        assert snapshot["sentence_mastery"] == {}
        assert snapshot["completed_sentence_ids"] == []

    def test_current_version_untouched(self):
        data = {"version": 2, "active_deck": ["hola"]}
        assert upgrade_snapshot(data, 5) is data

    @pytest.mark.parametrize("data", [None, [], "snapshot", {"version": 99}, {"version": "x"}])
    def test_rejects_unreadable(self, data):
        with pytest.raises(SnapshotFormatError):
            upgrade_snapshot(data, 5)


class TestRecordDecoding:
    """Test decoding of individual records"""

    def test_decode_mastery(self):
        assert decode_mastery({"source_to_target": 2, "target_to_source": 4}) == MasteryRecord(2, 4)
        assert decode_mastery({"source_to_target": 2}) is None
        assert decode_mastery("2") is None

    def test_decode_srs_clamps(self):
        record = decode_srs(
            {"last_review": "2024-03-01T10:00:00", "interval_days": 0, "ease_factor": 9},
            1.3,
            2.5,
        )
        assert record.last_review == datetime(2024, 3, 1, 10)
        assert record.interval_days == 1
        assert record.ease_factor == 2.5

        assert decode_srs({"last_review": "yesterday"}, 1.3, 2.5) is None

    def test_decode_streaks(self):
        """Best streak is never below the current streak"""
        assert decode_streaks({"current": 7, "best": 3, "unlock": 2}) == StreakState(7, 7, 2)
        assert decode_streaks({"current": "x"}) == StreakState()
        assert decode_streaks(None) == StreakState()


class TestEngineSnapshots:
    """Test saving and restoring engine state"""

    @pytest.fixture
    def engine(self, settings, word_factory):
        return ProgressionEngine(word_factory(100), settings=settings, rng=random.Random(4))

    def _play(self, engine):
        for item in engine.deck.active_deck[:3]:
            engine.mastery.set_record(item.source_text, MasteryRecord(5, 4))
        engine.start_session(PracticeType.OPEN, DirectionMode.TARGET)
        for _ in range(6):
            card = engine.current_card
            engine.submit_answer(AnswerCommand(card.expected, card, card.direction))
        engine.sentence_mastery[1] = 2
        engine.gate.override_active = True

    def test_round_trip(self, settings, word_factory, engine):
        self._play(engine)
        snapshot = json.loads(json.dumps(engine.to_snapshot()))

        restored = ProgressionEngine(word_factory(100), settings=settings)
        assert restored.load_snapshot(snapshot)

        assert restored.deck.active_deck == engine.deck.active_deck
        assert restored.deck.graduated_deck == engine.deck.graduated_deck
        assert list(restored.deck.reserve_queue) == list(engine.deck.reserve_queue)
        assert restored.mastery.records == engine.mastery.records
        assert restored.srs.records == engine.srs.records
        assert restored.streaks.state == engine.streaks.state
        assert restored.sentence_mastery == {1: 2}
        assert restored.gate.override_active
        assert restored.to_snapshot() == snapshot

    def test_snapshot_has_no_session(self, engine):
        self._play(engine)
        assert "session" not in engine.to_snapshot()

        snapshot = engine.to_snapshot()
        engine.load_snapshot(snapshot)
        assert engine.current_card is None

    def test_unknown_items_dropped_and_deck_refilled(self, settings, word_factory):
        engine = ProgressionEngine(word_factory(100), settings=settings)
        loaded = engine.load_snapshot(
            {
                "version": 2,
                "active_deck": ["palabra0", "borrada"],
                "graduated_deck": ["palabra1", "olvidada"],
                "mastery": {"palabra0": {"source_to_target": 1, "target_to_source": "x"}},
            }
        )

        assert loaded
        assert [item.source_text for item in engine.deck.graduated_deck] == ["palabra1"]
        assert len(engine.deck.active_deck) == 80
        assert engine.deck.active_deck[0].source_text == "palabra0"
        assert engine.mastery.records["palabra0"] == MasteryRecord(0, 0)

    def test_load_browser_state(self, settings, spanish_words):
        engine = ProgressionEngine(spanish_words, settings=settings)
        loaded = engine.load_snapshot(
            {
                "openDeck": [{"spanish": "hola"}, {"spanish": "amigo"}],
                "completeDeck": [{"spanish": "adiós"}],
                "mastery": {"hola": 4},
                "bestStreak": 8,
            }
        )

        assert loaded
        assert engine.deck.is_graduated(spanish_words[4])
        assert engine.mastery.records["hola"] == MasteryRecord(4, 4)
        assert engine.streaks.state.best == 8

    @pytest.mark.parametrize(
        "data",
        [
            {"version": 2, "mastery": ["hola"]},
            {"version": 2, "srs": "hola"},
            {"version": 2, "sentence_mastery": [1, 2]},
            {"version": 2, "completed_sentence_ids": 5},
            {"version": 2, "active_deck": {"hola": 1}, "graduated_deck": 3},
            {"version": 2, "sentence_mastery": {"0": float("inf")}},
            {"mastery": [1, 2]},
            {"openDeck": [], "sentenceMastery": [1, 2]},
            {"openDeck": [], "completedSentences": 3},
            {"openDeck": [], "srsData": [1]},
            {"openDeck": 4, "completeDeck": "adiós"},
        ],
    )
    def test_wrong_field_types_reset_to_fresh_records(self, settings, spanish_words, data):
        """Fields of the wrong container type load as empty instead of raising"""
        engine = ProgressionEngine(spanish_words, settings=settings)

        assert engine.load_snapshot(data)
        assert engine.deck.active_deck == spanish_words
        assert engine.deck.graduated_deck == []
        assert engine.mastery.records["hola"] == MasteryRecord(0, 0)
        assert engine.sentence_mastery == {}
        assert engine.completed_sentence_ids == set()
        assert engine.srs.records["hola"].last_review is None

    def test_unreadable_snapshot_keeps_fresh_state(self, settings, word_factory):
        engine = ProgressionEngine(word_factory(10), settings=settings)
        assert not engine.load_snapshot({"version": 42})
        assert len(engine.deck.active_deck) == 10
