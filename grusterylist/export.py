"""Export and import the recipe catalog and grocery list as JSON."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from .models import GroceryItem, Recipe
from .store import Store

EXPORT_VERSION = 1


class ExportError(Exception):
    """Exception raised for export/import file errors."""

    pass


def store_to_dict(store: Store) -> dict[str, Any]:
    """
    Dump every recipe, grocery item and checklist entry, in insertion order.

    Recipes on the shopping list are given as positions in "recipes", since
    ids are not exported.
    """
    recipes = store.list_recipes()
    positions = {recipe.id: position for position, recipe in enumerate(recipes)}
    return {
        "version": EXPORT_VERSION,
        "exported_at": datetime.now().isoformat(),
        "recipes": [recipe.to_dict() for recipe in recipes],
        "items": [item.to_dict() for item in store.list_items()],
        "checklist": store.checklist(),
        "shopping_recipes": [positions[recipe.id] for recipe in store.shopping_recipes()],
    }


def export_store(store: Store, filepath: str | Path) -> dict[str, int]:
    """
    Export a store to a JSON file.

    Quantities are written as strings so no precision is lost; null
    quantities and units stay null.

    Args:
        store: Store to export
        filepath: Output file path

    Returns:
        Counts of exported recipes and items
    """
    data = store_to_dict(store)

    try:
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise ExportError(f"Failed to write {filepath}: {e}") from e

    return {"recipes": len(data["recipes"]), "items": len(data["items"])}


def _load(filepath: str | Path) -> dict[str, Any]:
    try:
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ExportError(f"Failed to read {filepath}: {e}") from e

    if not isinstance(data, dict):
        raise ExportError(f"{filepath} is not a grusterylist export")
    if data.get("version", EXPORT_VERSION) != EXPORT_VERSION:
        raise ExportError(f"Unsupported export version: {data.get('version')}")
    return data


def import_store(store: Store, filepath: str | Path) -> tuple[int, int]:
    """
    Import recipes, items and the checklist from a JSON export.

    Records get fresh ids. Everything is validated first and written in one
    transaction, so a bad file writes nothing.

    Args:
        store: Store to import into
        filepath: JSON file written by export_store

    Returns:
        Tuple of (recipes_imported, items_imported)

    Raises:
        ExportError: If the file cannot be read or has the wrong shape
        InvalidInputError: If a record fails validation
    """
    data = _load(filepath)

    try:
        recipes = [Recipe.from_dict(entry) for entry in data.get("recipes", [])]
        items = [GroceryItem.from_dict(entry) for entry in data.get("items", [])]
    except (KeyError, TypeError, ValueError) as e:
        raise ExportError(f"Malformed record in {filepath}: {e}") from e

    checklist = data.get("checklist", [])
    shopping = data.get("shopping_recipes", [])
    if not isinstance(checklist, list) or not isinstance(shopping, list):
        raise ExportError(f"Malformed checklist or shopping recipes in {filepath}")

    return store.import_records(recipes, items, checklist=checklist, shopping=shopping)
