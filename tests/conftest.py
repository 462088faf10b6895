import os
import random
from unittest.mock import MagicMock

import pytest

from eduquest.application.srs.service import MasteryStore
from eduquest.infrastructure.storage.memory import InMemoryStorage

NOW = 1_700_000_000_000  # 2023-11-14T22:13:20Z in epoch ms


def fixed_rng(value: float) -> MagicMock:
    """A random source whose random() always returns ``value``."""
    rng = MagicMock(spec=random.Random)
    rng.random.return_value = value
    return rng


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage):
    """Store with a frozen clock and a seeded jitter source."""
    return MasteryStore(storage, rng=random.Random(42), clock=lambda: NOW)


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config and data
    monkeypatch.setenv("HOME", str(home))
    for var in [v for v in os.environ if v.startswith("EDUQUEST_")]:
        monkeypatch.delenv(var)
    return home


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_rng():
    return fixed_rng
