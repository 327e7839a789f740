"""Shared fixtures for grusterylist tests."""

import pytest

from grusterylist.models import IngredientLine, Recipe
from grusterylist.store import Store


@pytest.fixture
def db_path(tmp_path):
    """Path to a fresh database file."""
    return tmp_path / "groceries.db"


@pytest.fixture
def store(db_path):
    """A store on a temporary database file, closed after the test."""
    store = Store(db_path)
    yield store
    store.close()


@pytest.fixture
def pasta() -> Recipe:
    """Recipe with counted, measured and unmeasured lines."""
    return Recipe(
        name="Pasta",
        ingredients=[
            IngredientLine(name="tomato", quantity=2, unit="unit"),
            IngredientLine(name="olive oil", quantity=1, unit="tbsp"),
        ],
    )


@pytest.fixture
def salad() -> Recipe:
    """Recipe sharing an ingredient with pasta under a plural name."""
    return Recipe(
        name="Salad",
        ingredients=[
            IngredientLine(name="tomatoes", quantity=3, unit="unit"),
            IngredientLine(name="basil"),
        ],
    )
