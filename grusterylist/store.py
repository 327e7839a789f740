"""Recipe and grocery item storage backed by SQLite."""

import logging
import sqlite3
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from decimal import Decimal
from pathlib import Path
from typing import Any

from .config import get_db_path, section_rank
from .models import GroceryItem, IngredientLine, Recipe, to_quantity

logger = logging.getLogger(__name__)

RECIPE_FIELDS = frozenset({"name", "ingredients"})
ITEM_FIELDS = frozenset({"name", "quantity", "unit", "acquired", "section"})

RECIPE_SORTS = ("insertion", "name")
ITEM_SORTS = ("insertion", "name", "section")


class StoreError(Exception):
    """Base exception for storage errors."""

    pass


class NotFoundError(StoreError):
    """No record with the requested id (or name)."""

    pass


class ConflictError(StoreError):
    """A record with the explicitly requested id already exists."""

    pass


class InvalidInputError(StoreError):
    """A record failed validation; nothing was written."""

    pass


class StorageIOError(StoreError):
    """The underlying database failed."""

    pass


def _casefold(value: Any) -> Any:
    return value.casefold() if isinstance(value, str) else value


def get_connection(db_path: Path | str) -> sqlite3.Connection:
    """Get a database connection.

    Registers a ``casefold()`` SQL function; SQLite's ``lower()`` and
    ``NOCASE`` fold ASCII letters only.
    """
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.create_function("casefold", 1, _casefold, deterministic=True)
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """Initialize the database schema."""
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS recipes (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            seq INTEGER NOT NULL
        );

        CREATE TABLE IF NOT EXISTS ingredient_lines (
            recipe_id INTEGER NOT NULL,
            position INTEGER NOT NULL,
            name TEXT NOT NULL,
            quantity TEXT,
            unit TEXT,
            PRIMARY KEY (recipe_id, position),
            FOREIGN KEY (recipe_id) REFERENCES recipes(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS grocery_items (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            quantity TEXT,
            unit TEXT,
            acquired INTEGER NOT NULL DEFAULT 0,
            section TEXT,
            seq INTEGER NOT NULL
        );

        CREATE TABLE IF NOT EXISTS checklist (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            key TEXT NOT NULL UNIQUE
        );

        CREATE TABLE IF NOT EXISTS shopping_recipes (
            recipe_id INTEGER PRIMARY KEY,
            seq INTEGER NOT NULL,
            FOREIGN KEY (recipe_id) REFERENCES recipes(id) ON DELETE CASCADE
        );

        CREATE INDEX IF NOT EXISTS idx_recipes_seq ON recipes(seq);
        CREATE INDEX IF NOT EXISTS idx_grocery_items_seq ON grocery_items(seq);
    """)
    conn.commit()
    logger.debug("Schema ready")


# ============================================================================
# Validation
# ============================================================================


def _clean_name(name: Any, what: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidInputError(f"{what} name must be a non-empty string")
    return name.strip()


def _clean_id(value: Any, what: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{what} id must be an integer, got {value!r}")
    return value


def _clean_quantity(quantity: Any) -> Decimal | None:
    try:
        value = to_quantity(quantity)
    except ValueError as e:
        raise InvalidInputError(str(e)) from None

    if value is None:
        return None
    if not value.is_finite() or value <= 0:
        raise InvalidInputError(f"Quantity must be a positive number, got {quantity!r}")
    return value


def _clean_text(value: Any, what: str) -> str | None:
    """Optional text field: blank becomes None."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidInputError(f"{what} must be a string, got {value!r}")
    return value.strip() or None


def _clean_acquired(value: Any) -> bool:
    if not isinstance(value, bool):
        raise InvalidInputError(f"acquired must be true or false, got {value!r}")
    return value


def _clean_line(line: Any) -> IngredientLine:
    if isinstance(line, Mapping):
        if "name" not in line:
            raise InvalidInputError("Ingredient line is missing a name")
        name, quantity, unit = line["name"], line.get("quantity"), line.get("unit")
    elif isinstance(line, IngredientLine):
        name, quantity, unit = line.name, line.quantity, line.unit
    else:
        raise InvalidInputError(f"Not an ingredient line: {line!r}")

    return IngredientLine(
        name=_clean_name(name, "Ingredient"),
        quantity=_clean_quantity(quantity),
        unit=_clean_text(unit, "unit"),
    )


def _clean_lines(lines: Any) -> list[IngredientLine]:
    if lines is None:
        return []
    if isinstance(lines, str | bytes) or not isinstance(lines, Iterable):
        raise InvalidInputError("ingredients must be a list of ingredient lines")
    return [_clean_line(line) for line in lines]


def _check_patch(patch: Mapping[str, Any], allowed: frozenset[str]) -> None:
    unknown = set(patch) - allowed
    if unknown:
        raise InvalidInputError(f"Unknown field(s): {', '.join(sorted(unknown))}")


def _check_sort(sort: str | None, allowed: tuple[str, ...]) -> str:
    sort = sort or "insertion"
    if sort not in allowed:
        raise InvalidInputError(f"Unknown sort '{sort}'. Choose from: {', '.join(allowed)}")
    return sort


def _quantity_to_db(quantity: Decimal | None) -> str | None:
    return None if quantity is None else str(quantity)


def _quantity_from_db(value: str | None) -> Decimal | None:
    return None if value is None else Decimal(value)


# ============================================================================
# Store
# ============================================================================


class Store:
    """Persistent catalog of recipes and grocery items."""

    def __init__(self, db_path: Path | str | None = None) -> None:
        self.db_path = db_path if db_path is not None else get_db_path()
        self._conn: sqlite3.Connection | None = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            conn = None
            try:
                conn = get_connection(self.db_path)
                init_db(conn)
            except sqlite3.Error as e:
                if conn is not None:
                    conn.close()
                raise StorageIOError(f"Cannot open database {self.db_path}: {e}") from e
            self._conn = conn
        return self._conn

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Run a unit of work: commit on success, roll back on any error."""
        conn = self.conn
        try:
            with conn:
                yield conn
        except sqlite3.IntegrityError as e:
            raise ConflictError(str(e)) from e
        except sqlite3.Error as e:
            raise StorageIOError(str(e)) from e

    def _fetch(self, sql: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        try:
            return self.conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StorageIOError(str(e)) from e

    # ------------------------------------------------------------------------
    # Recipes
    # ------------------------------------------------------------------------

    def _load_lines(self, recipe_id: int) -> list[IngredientLine]:
        rows = self._fetch(
            """
            SELECT name, quantity, unit FROM ingredient_lines
            WHERE recipe_id = ?
            ORDER BY position
            """,
            (recipe_id,),
        )
        return [
            IngredientLine(
                name=row["name"],
                quantity=_quantity_from_db(row["quantity"]),
                unit=row["unit"],
            )
            for row in rows
        ]

    def _recipe_from_row(self, row: sqlite3.Row) -> Recipe:
        return Recipe(id=row["id"], name=row["name"], ingredients=self._load_lines(row["id"]))

    @staticmethod
    def _write_lines(
        conn: sqlite3.Connection, recipe_id: int, lines: list[IngredientLine]
    ) -> None:
        conn.executemany(
            """
            INSERT INTO ingredient_lines (recipe_id, position, name, quantity, unit)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                (recipe_id, position, line.name, _quantity_to_db(line.quantity), line.unit)
                for position, line in enumerate(lines)
            ],
        )

    def create_recipe(self, recipe: Recipe) -> Recipe:
        """
        Store a new recipe.

        Args:
            recipe: The recipe; if its id is set, that id is used

        Returns:
            The stored recipe with its id

        Raises:
            ConflictError: If the explicit id is taken
            InvalidInputError: If the name or any ingredient line is invalid
        """
        recipe_id = _clean_id(recipe.id, "Recipe")
        name = _clean_name(recipe.name, "Recipe")
        lines = _clean_lines(recipe.ingredients)

        with self._transaction() as conn:
            stored = self._insert_recipe(conn, Recipe(id=recipe_id, name=name, ingredients=lines))

        logger.debug("Created recipe %d (%s) with %d lines", stored.id, name, len(lines))
        return stored

    def _insert_recipe(self, conn: sqlite3.Connection, recipe: Recipe) -> Recipe:
        if recipe.id is not None and self._recipe_exists(conn, recipe.id):
            raise ConflictError(f"Recipe {recipe.id} already exists")
        cursor = conn.execute(
            """
            INSERT INTO recipes (id, name, seq)
            VALUES (?, ?, (SELECT COALESCE(MAX(seq), 0) + 1 FROM recipes))
            """,
            (recipe.id, recipe.name),
        )
        recipe_id = cursor.lastrowid if recipe.id is None else recipe.id
        self._write_lines(conn, recipe_id, recipe.ingredients)
        return Recipe(id=recipe_id, name=recipe.name, ingredients=recipe.ingredients)

    @staticmethod
    def _recipe_exists(conn: sqlite3.Connection, recipe_id: int) -> bool:
        row = conn.execute("SELECT 1 FROM recipes WHERE id = ?", (recipe_id,)).fetchone()
        return row is not None

    def get_recipe(self, recipe_id: int) -> Recipe:
        """
        Get a recipe by id.

        Raises:
            NotFoundError: If there is no such recipe
        """
        rows = self._fetch("SELECT id, name FROM recipes WHERE id = ?", (recipe_id,))
        if not rows:
            raise NotFoundError(f"Recipe {recipe_id} not found")
        return self._recipe_from_row(rows[0])

    def find_recipe(self, name: str) -> Recipe:
        """
        Get the first recipe whose name matches exactly, ignoring case.

        Raises:
            NotFoundError: If no recipe has that name
        """
        rows = self._fetch(
            "SELECT id, name FROM recipes WHERE casefold(name) = ? ORDER BY seq LIMIT 1",
            (name.strip().casefold(),),
        )
        if not rows:
            raise NotFoundError(f"Recipe '{name}' not found")
        return self._recipe_from_row(rows[0])

    def list_recipes(
        self, name_contains: str | None = None, sort: str | None = None
    ) -> list[Recipe]:
        """
        List recipes.

        Args:
            name_contains: Case-insensitive substring filter on the name
            sort: "insertion" (default) or "name"

        Returns:
            Matching recipes with their ingredient lines
        """
        sort = _check_sort(sort, RECIPE_SORTS)
        order = "seq" if sort == "insertion" else "casefold(name), seq"

        where = ""
        params: tuple[Any, ...] = ()
        if name_contains:
            where = "WHERE instr(casefold(name), ?) > 0"
            params = (name_contains.casefold(),)

        rows = self._fetch(f"SELECT id, name FROM recipes {where} ORDER BY {order}", params)

        return [self._recipe_from_row(row) for row in rows]

    def update_recipe(self, recipe_id: int, patch: Mapping[str, Any]) -> Recipe:
        """
        Change a recipe's name and/or replace its ingredient lines.

        Args:
            recipe_id: Recipe to change
            patch: Mapping with "name" and/or "ingredients"

        Returns:
            The updated recipe

        Raises:
            NotFoundError: If there is no such recipe
            InvalidInputError: If the patch is invalid (nothing is changed)
        """
        _check_patch(patch, RECIPE_FIELDS)
        name = _clean_name(patch["name"], "Recipe") if "name" in patch else None
        lines = _clean_lines(patch["ingredients"]) if "ingredients" in patch else None

        with self._transaction() as conn:
            if not self._recipe_exists(conn, recipe_id):
                raise NotFoundError(f"Recipe {recipe_id} not found")
            if name is not None:
                conn.execute("UPDATE recipes SET name = ? WHERE id = ?", (name, recipe_id))
            if lines is not None:
                conn.execute("DELETE FROM ingredient_lines WHERE recipe_id = ?", (recipe_id,))
                self._write_lines(conn, recipe_id, lines)

        logger.debug("Updated recipe %d: %s", recipe_id, ", ".join(sorted(patch)))
        return self.get_recipe(recipe_id)

    def delete_recipe(self, recipe_id: int) -> None:
        """
        Delete a recipe and its ingredient lines.

        Grocery items made from it are kept.

        Raises:
            NotFoundError: If there is no such recipe
        """
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM recipes WHERE id = ?", (recipe_id,))
            if cursor.rowcount == 0:
                raise NotFoundError(f"Recipe {recipe_id} not found")
        logger.debug("Deleted recipe %d", recipe_id)

    def recipe_count(self) -> int:
        """Get the number of stored recipes."""
        row = self._fetch("SELECT COUNT(*) as count FROM recipes")[0]
        return row["count"]

    # ------------------------------------------------------------------------
    # Grocery items
    # ------------------------------------------------------------------------

    @staticmethod
    def _item_from_row(row: sqlite3.Row) -> GroceryItem:
        return GroceryItem(
            id=row["id"],
            name=row["name"],
            quantity=_quantity_from_db(row["quantity"]),
            unit=row["unit"],
            acquired=bool(row["acquired"]),
            section=row["section"],
        )

    @staticmethod
    def _clean_item(item: GroceryItem) -> GroceryItem:
        return GroceryItem(
            id=_clean_id(item.id, "Item"),
            name=_clean_name(item.name, "Item"),
            quantity=_clean_quantity(item.quantity),
            unit=_clean_text(item.unit, "unit"),
            acquired=_clean_acquired(item.acquired),
            section=_clean_text(item.section, "section"),
        )

    @staticmethod
    def _insert_item(conn: sqlite3.Connection, item: GroceryItem) -> GroceryItem:
        if item.id is not None:
            row = conn.execute("SELECT 1 FROM grocery_items WHERE id = ?", (item.id,)).fetchone()
            if row is not None:
                raise ConflictError(f"Item {item.id} already exists")

        cursor = conn.execute(
            """
            INSERT INTO grocery_items (id, name, quantity, unit, acquired, section, seq)
            VALUES (?, ?, ?, ?, ?, ?, (SELECT COALESCE(MAX(seq), 0) + 1 FROM grocery_items))
            """,
            (
                item.id,
                item.name,
                _quantity_to_db(item.quantity),
                item.unit,
                int(item.acquired),
                item.section,
            ),
        )
        item_id = cursor.lastrowid if item.id is None else item.id
        return GroceryItem(
            id=item_id,
            name=item.name,
            quantity=item.quantity,
            unit=item.unit,
            acquired=item.acquired,
            section=item.section,
        )

    def create_item(self, item: GroceryItem) -> GroceryItem:
        """
        Store a new grocery item.

        Raises:
            ConflictError: If the explicit id is taken
            InvalidInputError: If any field is invalid
        """
        clean = self._clean_item(item)
        with self._transaction() as conn:
            stored = self._insert_item(conn, clean)
        logger.debug("Created item %d (%s)", stored.id, stored.name)
        return stored

    def save_items(
        self, items: Iterable[GroceryItem], recipe_ids: Iterable[int] = ()
    ) -> list[GroceryItem]:
        """
        Store several grocery items at once, e.g. a consolidated list.

        Either every item is stored or none is.

        Args:
            items: Items to store
            recipe_ids: Recipes the items were made from; they are put on
                the shopping list's recipes in the same transaction

        Returns:
            The stored items with their ids

        Raises:
            NotFoundError: If one of the recipes does not exist
        """
        cleaned = [self._clean_item(item) for item in items]
        ids = [_clean_id(recipe_id, "Recipe") for recipe_id in recipe_ids]
        with self._transaction() as conn:
            stored = [self._insert_item(conn, item) for item in cleaned]
            self._add_shopping_recipes(conn, ids)
        logger.debug("Saved %d items from %d recipes", len(stored), len(ids))
        return stored

    def get_item(self, item_id: int) -> GroceryItem:
        """
        Get a grocery item by id.

        Raises:
            NotFoundError: If there is no such item
        """
        rows = self._fetch("SELECT * FROM grocery_items WHERE id = ?", (item_id,))
        if not rows:
            raise NotFoundError(f"Item {item_id} not found")
        return self._item_from_row(rows[0])

    def list_items(
        self,
        name_contains: str | None = None,
        acquired: bool | None = None,
        section: str | None = None,
        sort: str | None = None,
    ) -> list[GroceryItem]:
        """
        List grocery items.

        Args:
            name_contains: Case-insensitive substring filter on the name
            acquired: Only items with this flag, if given
            section: Only items in this section (case-insensitive), if given
            sort: "insertion" (default), "name" or "section"

        Returns:
            Matching items
        """
        sort = _check_sort(sort, ITEM_SORTS)

        clauses: list[str] = []
        params: list[Any] = []
        if name_contains:
            clauses.append("instr(casefold(name), ?) > 0")
            params.append(name_contains.casefold())
        if acquired is not None:
            clauses.append("acquired = ?")
            params.append(int(acquired))
        if section:
            clauses.append("casefold(section) = ?")
            params.append(section.strip().casefold())

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        order = "casefold(name), seq" if sort == "name" else "seq"
        rows = self._fetch(f"SELECT * FROM grocery_items {where} ORDER BY {order}", tuple(params))
        items = [self._item_from_row(row) for row in rows]

        if sort == "section":
            # stable, so insertion order holds within a section
            items.sort(key=lambda item: section_rank(item.section))
        return items

    def update_item(self, item_id: int, patch: Mapping[str, Any]) -> GroceryItem:
        """
        Change fields of a grocery item.

        Args:
            item_id: Item to change
            patch: Mapping of field name to new value; None clears
                quantity, unit or section

        Returns:
            The updated item

        Raises:
            NotFoundError: If there is no such item
            InvalidInputError: If the patch is invalid (nothing is changed)
        """
        _check_patch(patch, ITEM_FIELDS)

        values: dict[str, Any] = {}
        if "name" in patch:
            values["name"] = _clean_name(patch["name"], "Item")
        if "quantity" in patch:
            values["quantity"] = _quantity_to_db(_clean_quantity(patch["quantity"]))
        if "unit" in patch:
            values["unit"] = _clean_text(patch["unit"], "unit")
        if "acquired" in patch:
            values["acquired"] = int(_clean_acquired(patch["acquired"]))
        if "section" in patch:
            values["section"] = _clean_text(patch["section"], "section")

        with self._transaction() as conn:
            row = conn.execute("SELECT 1 FROM grocery_items WHERE id = ?", (item_id,)).fetchone()
            if row is None:
                raise NotFoundError(f"Item {item_id} not found")
            if values:
                # column names come from ITEM_FIELDS, never from the caller
                assignments = ", ".join(f"{column} = ?" for column in values)
                conn.execute(
                    f"UPDATE grocery_items SET {assignments} WHERE id = ?",
                    (*values.values(), item_id),
                )

        logger.debug("Updated item %d: %s", item_id, ", ".join(sorted(patch)))
        return self.get_item(item_id)

    def delete_item(self, item_id: int) -> None:
        """
        Delete a grocery item.

        Raises:
            NotFoundError: If there is no such item
        """
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM grocery_items WHERE id = ?", (item_id,))
            if cursor.rowcount == 0:
                raise NotFoundError(f"Item {item_id} not found")
        logger.debug("Deleted item %d", item_id)

    def clear_acquired(self) -> int:
        """
        Remove every item marked as acquired.

        Returns:
            Number of items removed
        """
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM grocery_items WHERE acquired = 1")
        logger.debug("Cleared %d acquired items", cursor.rowcount)
        return cursor.rowcount

    # ------------------------------------------------------------------------
    # Shopping list recipes
    # ------------------------------------------------------------------------

    @staticmethod
    def _add_shopping_recipes(conn: sqlite3.Connection, recipe_ids: list[int]) -> None:
        for recipe_id in recipe_ids:
            if not Store._recipe_exists(conn, recipe_id):
                raise NotFoundError(f"Recipe {recipe_id} not found")
            conn.execute(
                """
                INSERT OR IGNORE INTO shopping_recipes (recipe_id, seq)
                VALUES (?, (SELECT COALESCE(MAX(seq), 0) + 1 FROM shopping_recipes))
                """,
                (recipe_id,),
            )

    def add_shopping_recipes(self, recipe_ids: Iterable[int]) -> None:
        """
        Record recipes as part of the current shopping list.

        Recipes already on the list keep their place.

        Raises:
            NotFoundError: If a recipe does not exist (nothing is recorded)
        """
        ids = [_clean_id(recipe_id, "Recipe") for recipe_id in recipe_ids]
        with self._transaction() as conn:
            self._add_shopping_recipes(conn, ids)
        logger.debug("Added %d recipes to the shopping list", len(ids))

    def shopping_recipes(self) -> list[Recipe]:
        """Get the recipes on the current shopping list, in the order added."""
        rows = self._fetch(
            """
            SELECT r.id, r.name FROM shopping_recipes s
            JOIN recipes r ON r.id = s.recipe_id
            ORDER BY s.seq
            """
        )
        return [self._recipe_from_row(row) for row in rows]

    def remove_shopping_recipe(self, recipe_id: int) -> None:
        """
        Take a recipe off the current shopping list.

        The recipe itself and any items made from it are kept.

        Raises:
            NotFoundError: If the recipe is not on the list
        """
        with self._transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM shopping_recipes WHERE recipe_id = ?", (recipe_id,)
            )
            if cursor.rowcount == 0:
                raise NotFoundError(f"Recipe {recipe_id} is not on the shopping list")
        logger.debug("Removed recipe %d from the shopping list", recipe_id)

    def clear_shopping_recipes(self) -> int:
        """Forget every recipe on the shopping list. Returns how many there were."""
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM shopping_recipes")
        logger.debug("Cleared %d shopping list recipes", cursor.rowcount)
        return cursor.rowcount

    # ------------------------------------------------------------------------
    # Checklist
    # ------------------------------------------------------------------------

    def add_checklist_item(self, name: str) -> bool:
        """
        Put an item on the checklist of things to look for at home.

        Names are matched ignoring case, so each item is listed once.

        Returns:
            False if the item was already on the checklist

        Raises:
            InvalidInputError: If the name is empty
        """
        name = _clean_name(name, "Checklist item")
        with self._transaction() as conn:
            cursor = conn.execute(
                "INSERT OR IGNORE INTO checklist (name, key) VALUES (?, ?)",
                (name, name.casefold()),
            )
        added = cursor.rowcount == 1
        if added:
            logger.debug("Added %s to the checklist", name)
        return added

    def checklist(self) -> list[str]:
        """Get the checklist item names, in the order added."""
        return [row["name"] for row in self._fetch("SELECT name FROM checklist ORDER BY id")]

    def delete_checklist_item(self, name: str) -> None:
        """
        Remove an item from the checklist, matching the name ignoring case.

        Raises:
            NotFoundError: If the item is not on the checklist
        """
        with self._transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM checklist WHERE key = ?", (str(name).strip().casefold(),)
            )
            if cursor.rowcount == 0:
                raise NotFoundError(f"'{name}' is not on the checklist")
        logger.debug("Deleted %s from the checklist", name)

    def clear_checklist(self) -> int:
        """Empty the checklist. Returns the number of items removed."""
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM checklist")
        logger.debug("Cleared %d checklist items", cursor.rowcount)
        return cursor.rowcount

    # ------------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------------

    def import_records(
        self,
        recipes: Iterable[Recipe],
        items: Iterable[GroceryItem],
        checklist: Iterable[str] = (),
        shopping: Iterable[int] = (),
    ) -> tuple[int, int]:
        """
        Store recipes and items together under fresh ids.

        Every record is validated first and all are written in one
        transaction, so a bad record leaves the store untouched.

        Args:
            recipes: Recipes to add
            items: Grocery items to add
            checklist: Checklist item names to add
            shopping: Positions in ``recipes`` of the recipes on the
                shopping list

        Returns:
            Tuple of (recipes_stored, items_stored)
        """
        clean_recipes = [
            Recipe(
                name=_clean_name(recipe.name, "Recipe"),
                ingredients=_clean_lines(recipe.ingredients),
            )
            for recipe in recipes
        ]
        clean_items = [self._clean_item(item) for item in items]
        for item in clean_items:
            item.id = None
        names = [_clean_name(name, "Checklist item") for name in checklist]
        positions = list(shopping)
        for position in positions:
            if (
                isinstance(position, bool)
                or not isinstance(position, int)
                or not 0 <= position < len(clean_recipes)
            ):
                raise InvalidInputError(f"No imported recipe at position {position!r}")

        with self._transaction() as conn:
            stored = [self._insert_recipe(conn, recipe) for recipe in clean_recipes]
            for item in clean_items:
                self._insert_item(conn, item)
            conn.executemany(
                "INSERT OR IGNORE INTO checklist (name, key) VALUES (?, ?)",
                [(name, name.casefold()) for name in names],
            )
            self._add_shopping_recipes(conn, [stored[position].id for position in positions])

        logger.debug("Imported %d recipes and %d items", len(clean_recipes), len(clean_items))
        return len(clean_recipes), len(clean_items)

    def item_count(self) -> int:
        """Get the number of stored grocery items."""
        row = self._fetch("SELECT COUNT(*) as count FROM grocery_items")[0]
        return row["count"]


@contextmanager
def open_store(db_path: Path | str | None = None) -> Iterator[Store]:
    """Open a store for one unit of work and always close it."""
    store = Store(db_path)
    try:
        yield store
    finally:
        store.close()
