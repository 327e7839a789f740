"""Shopping list planning: consolidate ingredient lines across recipes."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from .models import EXACT, GroceryItem, IngredientLine, Recipe
from .units import CanonicalKey, canonical_unit, normalize, to_canonical

logger = logging.getLogger(__name__)


@dataclass
class ConsolidatedGroup:
    """All ingredient lines that share one canonical key."""

    key: CanonicalKey
    lines: list[tuple[str, IngredientLine]] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        """Original name of the first line seen, kept human-readable."""
        return self.lines[0][1].name.strip()

    @property
    def sources(self) -> list[str]:
        """Names of contributing recipes, in first-seen order."""
        sources: list[str] = []
        for recipe_name, _line in self.lines:
            if recipe_name not in sources:
                sources.append(recipe_name)
        return sources

    @property
    def total_quantity(self) -> Decimal | None:
        """
        Exact sum in the family's canonical unit.

        None as soon as any contributing line has no quantity, or one that
        is not a finite number.
        """
        total = Decimal(0)
        for _recipe_name, line in self.lines:
            if line.quantity is None or not line.quantity.is_finite():
                return None
            converted, _ = to_canonical(line.quantity, line.unit)
            total = EXACT.add(total, converted)
        return total

    def to_grocery_item(self) -> GroceryItem:
        total = self.total_quantity
        return GroceryItem(
            name=self.display_name,
            quantity=total,
            unit=None if total is None else canonical_unit(self.key.family),
        )


def iter_lines(recipes: Iterable[Recipe]) -> Iterable[tuple[str, IngredientLine]]:
    """Flatten recipes into (recipe_name, line) pairs, keeping both orders."""
    for recipe in recipes:
        for line in recipe.ingredients:
            yield recipe.name, line


def group_lines(recipes: Iterable[Recipe]) -> list[ConsolidatedGroup]:
    """
    Group ingredient lines from several recipes by canonical key.

    Args:
        recipes: Recipes in the order the user picked them

    Returns:
        One group per key, in the order each key was first seen
    """
    # dicts keep insertion order, which is the output order
    groups: dict[CanonicalKey, ConsolidatedGroup] = {}
    line_count = 0

    for recipe_name, line in iter_lines(recipes):
        key = normalize(line.name, line.unit)
        if key not in groups:
            groups[key] = ConsolidatedGroup(key=key)
        groups[key].lines.append((recipe_name, line))
        line_count += 1

    logger.debug("Grouped %d ingredient lines into %d items", line_count, len(groups))
    return list(groups.values())


def consolidate(recipes: Sequence[Recipe]) -> list[GroceryItem]:
    """
    Merge the ingredient lines of several recipes into one grocery list.

    Lines merge when their name and unit family normalize to the same key.
    Quantities are summed exactly in the family's canonical unit; a single
    line without a quantity makes the merged quantity None.

    Args:
        recipes: Selected recipes

    Returns:
        Unsaved grocery items (id is None), in first-seen order
    """
    return [group.to_grocery_item() for group in group_lines(recipes)]


def consolidate_recipe(recipes: Iterable[Recipe], name: str = "Shopping list") -> Recipe:
    """Fold several recipes into one synthetic recipe with all their lines."""
    return Recipe(name=name, ingredients=[line for _name, line in iter_lines(recipes)])


def format_item(item: GroceryItem) -> str:
    """
    Format a grocery item for a one-line listing.

    Examples:
        "5 unit tomato", "1 tbsp olive oil", "basil"
    """
    text = str(item)
    if item.section:
        text = f"{text} [{item.section}]"
    return text
