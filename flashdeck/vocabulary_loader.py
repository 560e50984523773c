"""
Vocabulary and sentence loading from JSON files
"""

import json
import logging
from pathlib import Path
from typing import Any

from .core.engine.models import Item, Sentence

logger = logging.getLogger(__name__)


def _pair_texts(entry: Any) -> tuple[str, str] | None:
    """Read a translation pair in either the spanish/english or source/target shape"""
    if not isinstance(entry, dict):
        return None
    source = entry.get("spanish", entry.get("source"))
    target = entry.get("english", entry.get("target"))
    if not isinstance(source, str) or not isinstance(target, str):
        return None
    if not source.strip() or not target.strip():
        return None
    return source.strip(), target.strip()


def _read_json_array(path: str | Path) -> list[Any]:
    """Read a JSON array, any failure degrades to an empty list"""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning(f"Data file not found: {path}")
        return []
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Error loading data from {path}: {e}")
        return []

    if not isinstance(data, list):
        logger.error(f"Expected a JSON array in {path}, got {type(data).__name__}")
        return []
    return data


def parse_words(entries: list[Any]) -> list[Item]:
    """
    Build pool items from raw entries, keeping frequency order

    Malformed entries and repeated source texts are skipped.
    """
    items = []
    seen: set[str] = set()
    for entry in entries:
        pair = _pair_texts(entry)
        if pair is None:
            logger.warning(f"Skipping malformed word entry: {entry!r}")
            continue
        source, target = pair
        if source in seen:
            logger.warning(f"Skipping duplicate word '{source}'")
            continue
        seen.add(source)
        items.append(Item(id=len(items), source_text=source, target_text=target))
    return items


def parse_sentences(entries: list[Any]) -> list[Sentence]:
    """Build sentences from raw entries, the id is the entry's position"""
    sentences = []
    for index, entry in enumerate(entries):
        pair = _pair_texts(entry)
        if pair is None:
            logger.warning(f"Skipping malformed sentence entry at {index}")
            continue
        sentences.append(Sentence(id=index, source_text=pair[0], target_text=pair[1]))
    return sentences


def load_words(path: str | Path) -> list[Item]:
    """Load the frequency-ordered word pool"""
    words = parse_words(_read_json_array(path))
    logger.info(f"Loaded {len(words)} words from {path}")
    return words


def load_sentences(path: str | Path) -> list[Sentence]:
    """Load practice sentences"""
    sentences = parse_sentences(_read_json_array(path))
    logger.info(f"Loaded {len(sentences)} sentences from {path}")
    return sentences
