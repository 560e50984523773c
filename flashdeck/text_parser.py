"""
Answer normalization and sentence tokenization
"""

import logging
import re
import unicodedata

logger = logging.getLogger(__name__)

ANSWER_SEPARATOR = ";"


class AnswerTextParser:
    """Normalizes typed answers, accepted answers and sentence tokens"""

    def __init__(self):
        self.punctuation_pattern = re.compile(r"[¿?¡!.,;:()\"'`\-]")
        self.sentence_punctuation_pattern = re.compile(r"[¿?¡!.,;]")
        self.whitespace_pattern = re.compile(r"\s+")

    def normalize(self, text: str | None) -> str:
        """
        Normalize text for comparison

        Lowercases, strips punctuation and diacritics and collapses
        whitespace. Applying it twice gives the same result as applying it once.
        """
        if not text:
            return ""

        text = text.lower().strip()
        # Decomposition can yield punctuation (U+037E becomes ';'), strip it afterwards
        text = self._strip_diacritics(text)
        text = self.punctuation_pattern.sub("", text)
        text = self.whitespace_pattern.sub(" ", text).strip()
        return text

    def _strip_diacritics(self, text: str) -> str:
        decomposed = unicodedata.normalize("NFD", text)
        return "".join(char for char in decomposed if not unicodedata.combining(char))

    def accepted_answers(self, expected: str) -> list[str]:
        """Split an expected answer into its normalized alternatives"""
        if not expected:
            return []
        alternatives = [self.normalize(part) for part in expected.split(ANSWER_SEPARATOR)]
        return [alternative for alternative in alternatives if alternative]

    def is_correct(self, typed: str, expected: str) -> bool:
        """Check a typed answer against the semicolon-separated expected answers"""
        normalized = self.normalize(typed)
        if not normalized:
            return False
        return normalized in self.accepted_answers(expected)

    def extract_words(self, sentence: str) -> list[str]:
        """
        Extract the raw words of a sentence

        Args:
            sentence: Sentence in the source language

        Returns:
            Whitespace-delimited tokens with sentence punctuation removed
        """
        if not sentence or not sentence.strip():
            return []
        cleaned = self.sentence_punctuation_pattern.sub("", sentence)
        return [token for token in cleaned.split() if token]


# Global instance
_text_parser = None


def get_text_parser() -> AnswerTextParser:
    """Get global text parser instance"""
    global _text_parser
    if _text_parser is None:
        _text_parser = AnswerTextParser()
    return _text_parser


def normalize(text: str | None) -> str:
    """Convenience function to normalize text"""
    return get_text_parser().normalize(text)
