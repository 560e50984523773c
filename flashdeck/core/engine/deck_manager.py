"""
Reserve queue, active deck and graduated deck management
"""

import logging
from collections import deque

from .models import Item

logger = logging.getLogger(__name__)

OPEN_DECK_SIZE = 80


class DeckManager:
    """Owns the three disjoint deck partitions and the promotion rule"""

    def __init__(self, active_size: int = OPEN_DECK_SIZE):
        self.active_size = active_size
        self.reserve_queue: deque[Item] = deque()
        self.active_deck: list[Item] = []
        self.graduated_deck: list[Item] = []
        self._graduated_sources: set[str] = set()

    def initialize(self, pool: list[Item], active_size: int | None = None) -> None:
        """Split a frequency-ordered pool into the active deck and the reserve"""
        if active_size is not None:
            self.active_size = active_size

        self.active_deck = list(pool[: self.active_size])
        self.reserve_queue = deque(pool[self.active_size :])
        self.graduated_deck = []
        self._graduated_sources = set()

        logger.info(
            f"Deck initialized: {len(self.active_deck)} active, "
            f"{len(self.reserve_queue)} in reserve"
        )

    def restore(
        self,
        pool: list[Item],
        active_sources: list[str],
        graduated_sources: list[str],
    ) -> None:
        """
        Rebuild partitions from stored source texts

        Sources missing from the pool are dropped, a source stored in both
        decks stays graduated, and the active deck is refilled from the
        reserve in pool order.
        """
        by_source = {item.source_text: item for item in pool}

        self.graduated_deck = []
        self._graduated_sources = set()
        for source in graduated_sources:
            item = by_source.get(source)
            if item is None:
                logger.warning(f"Dropping unknown graduated item '{source}'")
                continue
            if source not in self._graduated_sources:
                self.graduated_deck.append(item)
                self._graduated_sources.add(source)

        self.active_deck = []
        seen_active: set[str] = set()
        for source in active_sources:
            item = by_source.get(source)
            if item is None:
                logger.warning(f"Dropping unknown active item '{source}'")
                continue
            if source in self._graduated_sources or source in seen_active:
                continue
            self.active_deck.append(item)
            seen_active.add(source)

        used = self._graduated_sources | seen_active
        self.reserve_queue = deque(
            item for item in pool if item.source_text not in used
        )

        while len(self.active_deck) < self.active_size and self.reserve_queue:
            self.active_deck.append(self.reserve_queue.popleft())

        logger.info(
            f"Deck restored: {len(self.active_deck)} active, "
            f"{len(self.graduated_deck)} graduated, {len(self.reserve_queue)} in reserve"
        )

    def is_active(self, item: Item) -> bool:
        return any(card.source_text == item.source_text for card in self.active_deck)

    def is_graduated(self, item: Item) -> bool:
        return item.source_text in self._graduated_sources

    def promote(self, item: Item) -> Item | None:
        """
        Move a mastered item from the active deck to the graduated deck

        Args:
            item: Item that just reached mastery in both directions

        Returns:
            The item introduced from the reserve queue, or None
        """
        if self.is_graduated(item) or not self.is_active(item):
            return None

        self.active_deck = [
            card for card in self.active_deck if card.source_text != item.source_text
        ]
        self.graduated_deck.append(item)
        self._graduated_sources.add(item.source_text)
        logger.info(
            f"Promoted '{item.source_text}' ({len(self.graduated_deck)} graduated)"
        )

        if not self.reserve_queue:
            return None

        introduced = self.reserve_queue.popleft()
        self.active_deck.append(introduced)
        logger.info(f"Introduced '{introduced.source_text}' into the active deck")
        return introduced

    @property
    def graduated_count(self) -> int:
        return len(self.graduated_deck)

    def all_items(self) -> list[Item]:
        return [*self.reserve_queue, *self.active_deck, *self.graduated_deck]
