"""
Shared fixtures for Flashdeck tests
"""

import os
import tempfile
from datetime import datetime

import pytest

from flashdeck.config import Settings
from flashdeck.core.database.database_manager import DatabaseManager
from flashdeck.core.engine.models import Item, Sentence


def make_words(count: int) -> list[Item]:
    """Frequency-ordered pool of distinct items"""
    return [
        Item(id=i, source_text=f"palabra{i}", target_text=f"word{i}")
        for i in range(count)
    ]


@pytest.fixture
def settings():
    """Settings with the standard engine constants"""
    return Settings(telegram_bot_token="test_token", allowed_users="321")


@pytest.fixture
def fixed_clock():
    """Clock that always returns the same moment"""
    moment = datetime(2024, 3, 1, 12, 0, 0)
    return lambda: moment


@pytest.fixture
def temp_db():
    """Create temporary database for testing"""
    temp_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    temp_file.close()

    db_manager = DatabaseManager(temp_file.name)
    db_manager.init_database()

    yield db_manager

    # Cleanup, WAL mode leaves side files behind
    for suffix in ("", "-wal", "-shm"):
        path = temp_file.name + suffix
        if os.path.exists(path):
            os.unlink(path)


@pytest.fixture
def spanish_words():
    """A handful of real translation pairs"""
    pairs = [
        ("hola", "hello; hi"),
        ("amigo", "friend"),
        ("qué", "what"),
        ("tal", "such"),
        ("adiós", "goodbye"),
    ]
    return [Item(id=i, source_text=s, target_text=t) for i, (s, t) in enumerate(pairs)]


@pytest.fixture
def spanish_sentences():
    return [
        Sentence(id=0, source_text="Hola, amigo.", target_text="Hello, friend."),
        Sentence(id=1, source_text="¿Qué tal?", target_text="How are you?"),
        Sentence(id=2, source_text="Hola, señor.", target_text="Hello, sir."),
    ]


@pytest.fixture
def word_factory():
    """Build a pool of the requested size"""
    return make_words
