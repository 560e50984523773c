"""
Unit tests for deck partitions and promotion
"""

import pytest

from flashdeck.core.engine.deck_manager import DeckManager


class TestDeckManager:
    """Test DeckManager class"""

    @pytest.fixture
    def pool(self, word_factory):
        return word_factory(100)

    @pytest.fixture
    def deck(self, pool):
        deck = DeckManager(active_size=80)
        deck.initialize(pool)
        return deck

    def test_initialize_splits_pool(self, deck, pool):
        assert deck.active_deck == pool[:80]
        assert list(deck.reserve_queue) == pool[80:]
        assert deck.graduated_deck == []

    def test_initialize_small_pool(self, word_factory):
        deck = DeckManager(active_size=80)
        deck.initialize(word_factory(10))
        assert len(deck.active_deck) == 10
        assert len(deck.reserve_queue) == 0

    def test_promote_introduces_next_reserve_item(self, deck, pool):
        """Promotion keeps the active deck full while the reserve lasts"""
        introduced = deck.promote(pool[5])

        assert introduced == pool[80]
        assert pool[5] in deck.graduated_deck
        assert pool[5] not in deck.active_deck
        assert deck.active_deck[-1] == pool[80]
        assert len(deck.active_deck) == 80
        assert len(deck.reserve_queue) == 19

    def test_promote_with_empty_reserve_shrinks_active(self, word_factory):
        pool = word_factory(3)
        deck = DeckManager(active_size=80)
        deck.initialize(pool)

        assert deck.promote(pool[0]) is None
        assert len(deck.active_deck) == 2
        assert deck.graduated_count == 1

    def test_promote_is_idempotent(self, deck, pool):
        deck.promote(pool[0])
        assert deck.promote(pool[0]) is None
        assert deck.graduated_count == 1

    def test_promote_rejects_reserve_item(self, deck, pool):
        assert deck.promote(pool[90]) is None
        assert deck.graduated_count == 0

    def test_partitions_stay_disjoint(self, deck, pool):
        for item in pool[:30]:
            deck.promote(item)

        sources = [item.source_text for item in deck.all_items()]
        assert len(sources) == len(set(sources)) == len(pool)

    def test_restore(self, pool):
        """Stored sources are resolved against the pool and the active deck refilled"""
        deck = DeckManager(active_size=5)
        deck.restore(
            pool,
            active_sources=["palabra3", "desconocida", "palabra1", "palabra2"],
            graduated_sources=["palabra0", "palabra2", "perdida"],
        )

        assert [item.source_text for item in deck.graduated_deck] == ["palabra0", "palabra2"]
        assert [item.source_text for item in deck.active_deck] == [
            "palabra3",
            "palabra1",
            "palabra4",
            "palabra5",
            "palabra6",
        ]
        assert deck.reserve_queue[0].source_text == "palabra7"
        assert deck.is_graduated(pool[2])
        assert not deck.is_active(pool[2])
