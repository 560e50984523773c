"""
Unit tests for the spaced repetition scheduler
"""

from datetime import datetime, timedelta

import pytest

from flashdeck.core.engine.models import Item, SRSRecord
from flashdeck.spaced_repetition import ReviewResult, SRSScheduler, round_half_up


class TestRoundHalfUp:
    """Test rounding used for interval growth"""

    def test_halves_round_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(1.5) == 2
        assert round_half_up(2.5) == 3

    def test_other_values(self):
        assert round_half_up(2.4) == 2
        assert round_half_up(5.6) == 6
        assert round_half_up(6.0) == 6


class TestSRSScheduler:
    """Test SRSScheduler class"""

    @pytest.fixture
    def srs(self, settings):
        """Create SRS instance for testing"""
        return SRSScheduler(settings)

    @pytest.fixture
    def now(self):
        return datetime(2024, 3, 1, 9, 30)

    @pytest.fixture
    def item(self):
        return Item(id=0, source_text="casa", target_text="house")

    def test_new_record_defaults(self, srs, item):
        record = srs.get_record(item)
        assert record.last_review is None
        assert record.interval_days == 1
        assert record.ease_factor == 2.5

    def test_first_correct_review(self, srs, now):
        """A never-reviewed item starts at a one day interval"""
        result = srs.calculate_review(srs.new_record(), True, now)

        assert isinstance(result, ReviewResult)
        assert result.new_interval == 1
        assert result.new_ease_factor == 2.5
        assert result.next_review_at == now + timedelta(days=1)

    def test_correct_review_grows_interval(self, srs, now):
        record = SRSRecord(last_review=now, interval_days=1, ease_factor=2.5)
        result = srs.calculate_review(record, True, now)
        assert result.new_interval == 3
        assert result.new_ease_factor == 2.5

        record = SRSRecord(last_review=now, interval_days=3, ease_factor=2.0)
        result = srs.calculate_review(record, True, now)
        assert result.new_interval == 6
        assert result.new_ease_factor == 2.1

    def test_incorrect_review_halves_interval(self, srs, now):
        record = SRSRecord(last_review=now, interval_days=6, ease_factor=2.1)
        result = srs.calculate_review(record, False, now)
        assert result.new_interval == 3
        assert result.new_ease_factor == 1.95

        record = SRSRecord(last_review=now, interval_days=3, ease_factor=2.0)
        assert srs.calculate_review(record, False, now).new_interval == 2

    def test_interval_never_below_one(self, srs, now):
        record = SRSRecord(last_review=now, interval_days=1, ease_factor=2.0)
        assert srs.calculate_review(record, False, now).new_interval == 1

    def test_ease_floor(self, srs, now):
        record = SRSRecord(last_review=now, interval_days=4, ease_factor=1.35)
        assert srs.calculate_review(record, False, now).new_ease_factor == 1.3

    def test_update_srs_stamps_review(self, srs, item, now):
        record = srs.update_srs(item, True, now)
        assert record.last_review == now
        assert record.interval_days == 1

        later = now + timedelta(days=1)
        record = srs.update_srs(item, True, later)
        assert record.last_review == later
        assert record.interval_days == 3

    def test_due_items(self, srs, item, now):
        other = Item(id=1, source_text="perro", target_text="dog")
        srs.update_srs(item, True, now)

        assert srs.next_review_at(srs.get_record(other)) is None
        assert not srs.is_due(srs.get_record(item), now)
        assert srs.due_items([item, other], now + timedelta(days=1)) == [item]
