"""grusterylist - recipe catalog and shopping list builder."""

__version__ = "1.0.0"

from .models import GroceryItem, IngredientLine, Recipe
from .planner import consolidate, group_lines
from .store import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    StorageIOError,
    Store,
    StoreError,
    open_store,
)
from .units import CanonicalKey, normalize

__all__ = [
    "Recipe",
    "IngredientLine",
    "GroceryItem",
    "CanonicalKey",
    "normalize",
    "consolidate",
    "group_lines",
    "Store",
    "open_store",
    "StoreError",
    "NotFoundError",
    "ConflictError",
    "InvalidInputError",
    "StorageIOError",
]
