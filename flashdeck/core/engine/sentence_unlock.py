"""
Sentence eligibility based on graduated vocabulary
"""

import logging

from ...text_parser import AnswerTextParser, get_text_parser
from .models import Item, Sentence

logger = logging.getLogger(__name__)


class SentenceUnlockChecker:
    """Decides which sentences can be practised"""

    def __init__(self, text_parser: AnswerTextParser | None = None):
        self.text_parser = text_parser or get_text_parser()

    def is_unlocked(self, sentence: Sentence, known_words: set[str]) -> bool:
        """Every word of the sentence must be a graduated item"""
        words = self.text_parser.extract_words(sentence.source_text)
        if not words:
            return False
        return all(self.text_parser.normalize(word) in known_words for word in words)

    def unlocked_sentences(
        self, sentences: list[Sentence], graduated_deck: list[Item]
    ) -> list[Sentence]:
        """
        Filter sentences down to the eligible ones

        Args:
            sentences: All sentences from the sentence source
            graduated_deck: Items currently in the graduated deck

        Returns:
            Sentences whose words are all graduated, in source order
        """
        known_words = {
            self.text_parser.normalize(item.source_text) for item in graduated_deck
        }
        unlocked = [
            sentence for sentence in sentences if self.is_unlocked(sentence, known_words)
        ]
        logger.debug(f"{len(unlocked)}/{len(sentences)} sentences unlocked")
        return unlocked
