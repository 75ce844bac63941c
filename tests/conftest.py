"""
Shared fixtures for the Clos8 Outfit Service tests.
"""
import sys
import random
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from outfit_service.core.models import ClothingItem
from outfit_service.observability import reset_metrics


class FakeClock:
    """Manually advanced clock for TTL, window and cool-down tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def isolated_observability(monkeypatch):
    """No generation log files and fresh counters for every test."""
    monkeypatch.setenv("CLOS8_LOGGING_ENABLED", "false")
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def make_item():
    """Factory for wardrobe items with sensible defaults."""
    counter = {"n": 0}

    def _make(clothing_type: str, category_id: str, color: str, subcategory_id: str = "", item_id: str = None):
        counter["n"] += 1
        return ClothingItem(
            item_id=item_id or f"{clothing_type}-{counter['n']}",
            type=clothing_type,
            category_id=category_id,
            subcategory_id=subcategory_id,
            color=color,
        )

    return _make


@pytest.fixture
def white_tshirt(make_item):
    return make_item("upper", "cat-1", "#FFFFFF", "subcat-1", item_id="white-tshirt")


@pytest.fixture
def blue_jeans(make_item):
    return make_item("bottom", "cat-4", "#0000FF", "subcat-7", item_id="blue-jeans")


@pytest.fixture
def black_pants(make_item):
    return make_item("bottom", "cat-5", "#000000", "subcat-9", item_id="black-pants")
