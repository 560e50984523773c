"""
Versioned snapshot format and schema upgrades

Version history:
    0: browser layout with a single mastery counter per word
    1: browser layout with per-direction counters (s2e/e2s)
    2: current layout keyed by source text with ISO-8601 timestamps
"""

import logging
from datetime import datetime
from typing import Any

from ...exceptions import SnapshotFormatError
from ..engine.models import MasteryRecord, SRSRecord, StreakState

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 2


def detect_version(data: dict[str, Any]) -> int:
    """Determine the schema version of a raw snapshot"""
    if "version" in data:
        try:
            return int(data["version"])
        except (TypeError, ValueError, OverflowError):
            raise SnapshotFormatError(f"Invalid snapshot version: {data['version']!r}") from None

    mastery = data.get("mastery")
    if isinstance(mastery, dict) and any(
        _is_plain_int(value) for value in mastery.values()
    ):
        return 0
    return 1


def upgrade_snapshot(data: Any, required_per_direction: int) -> dict[str, Any]:
    """
    Upgrade a raw snapshot to the current schema version

    Args:
        data: Decoded snapshot document
        required_per_direction: Mastery threshold used to clamp legacy counters

    Returns:
        Snapshot in the current layout

    Raises:
        SnapshotFormatError: If the document is not a snapshot or is newer
            than this code understands
    """
    if not isinstance(data, dict):
        raise SnapshotFormatError(f"Snapshot must be an object, got {type(data).__name__}")

    version = detect_version(data)
    if version > CURRENT_SCHEMA_VERSION or version < 0:
        raise SnapshotFormatError(f"Unsupported snapshot version {version}")

    while version < CURRENT_SCHEMA_VERSION:
        logger.info(f"Upgrading snapshot from version {version} to {version + 1}")
        data = UPGRADE_STEPS[version](data, required_per_direction)
        version += 1

    return data


def _upgrade_v0_to_v1(data: dict[str, Any], required_per_direction: int) -> dict[str, Any]:
    """Single counters become equal counts in both directions"""
    upgraded = dict(data)
    mastery = {}
    for source, value in dict_field(data, "mastery").items():
        if _is_plain_int(value):
            count = max(0, min(required_per_direction, value))
            mastery[source] = {"s2e": count, "e2s": count}
        elif isinstance(value, dict):
            mastery[source] = value
        else:
            logger.warning(f"Skipping mastery migration for '{source}': {value!r}")
    upgraded["mastery"] = mastery
    return upgraded


def _upgrade_v1_to_v2(data: dict[str, Any], required_per_direction: int) -> dict[str, Any]:
    """Browser camelCase layout to the current snake_case layout"""
    mastery = {}
    for source, value in dict_field(data, "mastery").items():
        if isinstance(value, dict) and "s2e" in value and "e2s" in value:
            mastery[source] = {
                "source_to_target": value["s2e"],
                "target_to_source": value["e2s"],
            }
        else:
            logger.warning(f"Skipping mastery migration for '{source}': {value!r}")

    srs = {}
    for source, value in dict_field(data, "srsData").items():
        if not isinstance(value, dict):
            logger.warning(f"Skipping SRS migration for '{source}': {value!r}")
            continue
        last_review = value.get("lastReview")
        srs[source] = {
            "last_review": _millis_to_iso(last_review),
            "interval_days": value.get("interval", 1),
            "ease_factor": value.get("ease", 2.5),
        }

    return {
        "version": 2,
        "active_deck": _deck_sources(list_field(data, "openDeck")),
        "graduated_deck": _deck_sources(list_field(data, "completeDeck")),
        "mastery": mastery,
        "srs": srs,
        "sentence_mastery": dict_field(data, "sentenceMastery"),
        "completed_sentence_ids": list_field(data, "completedSentences"),
        "streaks": {
            "current": data.get("streak", 0),
            "best": data.get("bestStreak", 0),
            "unlock": data.get("unlockStreak", 0),
        },
        "lock_override": bool(data.get("lockOverride", False)),
        "lockout_end_time": data.get("lockoutEndTime"),
    }


UPGRADE_STEPS = {
    0: _upgrade_v0_to_v1,
    1: _upgrade_v1_to_v2,
}


def _is_plain_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def dict_field(data: dict[str, Any], key: str) -> dict[Any, Any]:
    """Copy of an object-valued snapshot field, empty when missing or of another type"""
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        logger.warning(f"Resetting snapshot field '{key}': expected an object, got {type(value).__name__}")
        return {}
    return dict(value)


def list_field(data: dict[str, Any], key: str) -> list[Any]:
    """Copy of an array-valued snapshot field, empty when missing or of another type"""
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning(f"Resetting snapshot field '{key}': expected an array, got {type(value).__name__}")
        return []
    return list(value)


def _deck_sources(deck: list[Any]) -> list[str]:
    """Browser decks store whole word objects, keep their source text"""
    sources = []
    for entry in deck:
        if isinstance(entry, dict) and entry.get("spanish"):
            sources.append(entry["spanish"])
        elif isinstance(entry, str):
            sources.append(entry)
        else:
            logger.warning(f"Skipping malformed deck entry: {entry!r}")
    return sources


def _millis_to_iso(value: Any) -> str | None:
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(float(value) / 1000).isoformat()
    except (TypeError, ValueError, OverflowError, OSError):
        logger.warning(f"Dropping invalid review timestamp: {value!r}")
        return None


def encode_mastery(record: MasteryRecord) -> dict[str, int]:
    return {
        "source_to_target": record.source_to_target,
        "target_to_source": record.target_to_source,
    }


def decode_mastery(raw: Any) -> MasteryRecord | None:
    """Decode a stored mastery record, None when its shape is unexpected"""
    if not isinstance(raw, dict):
        return None
    try:
        return MasteryRecord(
            source_to_target=int(raw["source_to_target"]),
            target_to_source=int(raw["target_to_source"]),
        )
    except (KeyError, TypeError, ValueError, OverflowError):
        return None


def encode_srs(record: SRSRecord) -> dict[str, Any]:
    return {
        "last_review": record.last_review.isoformat() if record.last_review else None,
        "interval_days": record.interval_days,
        "ease_factor": record.ease_factor,
    }


def decode_srs(raw: Any, min_ease: float, max_ease: float) -> SRSRecord | None:
    """Decode a stored SRS record, None when its shape is unexpected"""
    if not isinstance(raw, dict):
        return None
    try:
        last_review = raw.get("last_review")
        return SRSRecord(
            last_review=datetime.fromisoformat(last_review) if last_review else None,
            interval_days=max(1, int(raw.get("interval_days", 1))),
            ease_factor=max(min_ease, min(max_ease, float(raw.get("ease_factor", max_ease)))),
        )
    except (TypeError, ValueError, OverflowError):
        return None


def encode_streaks(state: StreakState) -> dict[str, int]:
    return {"current": state.current, "best": state.best, "unlock": state.unlock}


def decode_streaks(raw: Any) -> StreakState:
    """Decode streak counters, missing or invalid values fall back to zero"""
    if not isinstance(raw, dict):
        return StreakState()

    def counter(key: str) -> int:
        try:
            return max(0, int(raw.get(key, 0)))
        except (TypeError, ValueError, OverflowError):
            return 0

    current = counter("current")
    return StreakState(
        current=current,
        best=max(counter("best"), current),
        unlock=counter("unlock"),
    )
