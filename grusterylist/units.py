"""Ingredient name and unit normalization for merging shopping list lines."""

import re
from decimal import Decimal
from typing import Any, NamedTuple

from .models import EXACT

UNSPECIFIED = "unspecified"
COUNT = "count"
# Families of units outside the table start with this; built-in families never do
UNKNOWN_PREFIX = "unit:"


class CanonicalKey(NamedTuple):
    """Merge key: normalized ingredient name plus unit family."""

    name: str
    family: str


class UnitInfo(NamedTuple):
    """Where a unit synonym sits within its family."""

    family: str
    multiplier: Decimal  # how many canonical units one of this unit is
    canonical: str | None


# Canonical unit per family. Quantities are summed in this unit.
FAMILY_CANONICAL: dict[str, str | None] = {
    "mass-metric": "g",
    "mass-imperial": "oz",
    "volume-metric": "ml",
    "volume-us": "tbsp",
    # 1 tsp is a third of a tbsp, which has no exact decimal form
    "teaspoon": "tsp",
    COUNT: "unit",
    UNSPECIFIED: None,
}

_UNIT_TABLE: dict[str, tuple[str, str]] = {
    # Mass, metric -> grams
    "mg": ("mass-metric", "0.001"),
    "milligram": ("mass-metric", "0.001"),
    "milligrams": ("mass-metric", "0.001"),
    "g": ("mass-metric", "1"),
    "gr": ("mass-metric", "1"),
    "gram": ("mass-metric", "1"),
    "grams": ("mass-metric", "1"),
    "gramme": ("mass-metric", "1"),
    "grammes": ("mass-metric", "1"),
    "kg": ("mass-metric", "1000"),
    "kilo": ("mass-metric", "1000"),
    "kilos": ("mass-metric", "1000"),
    "kilogram": ("mass-metric", "1000"),
    "kilograms": ("mass-metric", "1000"),
    # Mass, imperial -> ounces
    "oz": ("mass-imperial", "1"),
    "ounce": ("mass-imperial", "1"),
    "ounces": ("mass-imperial", "1"),
    "lb": ("mass-imperial", "16"),
    "lbs": ("mass-imperial", "16"),
    "pound": ("mass-imperial", "16"),
    "pounds": ("mass-imperial", "16"),
    # Volume, metric -> milliliters
    "ml": ("volume-metric", "1"),
    "milliliter": ("volume-metric", "1"),
    "milliliters": ("volume-metric", "1"),
    "millilitre": ("volume-metric", "1"),
    "millilitres": ("volume-metric", "1"),
    "cl": ("volume-metric", "10"),
    "centiliter": ("volume-metric", "10"),
    "centiliters": ("volume-metric", "10"),
    "dl": ("volume-metric", "100"),
    "deciliter": ("volume-metric", "100"),
    "deciliters": ("volume-metric", "100"),
    "l": ("volume-metric", "1000"),
    "liter": ("volume-metric", "1000"),
    "liters": ("volume-metric", "1000"),
    "litre": ("volume-metric", "1000"),
    "litres": ("volume-metric", "1000"),
    # Volume, US customary -> tablespoons
    "tbsp": ("volume-us", "1"),
    "tbs": ("volume-us", "1"),
    "tablespoon": ("volume-us", "1"),
    "tablespoons": ("volume-us", "1"),
    "fl oz": ("volume-us", "2"),
    "fluid ounce": ("volume-us", "2"),
    "fluid ounces": ("volume-us", "2"),
    "cup": ("volume-us", "16"),
    "cups": ("volume-us", "16"),
    "pint": ("volume-us", "32"),
    "pints": ("volume-us", "32"),
    "quart": ("volume-us", "64"),
    "quarts": ("volume-us", "64"),
    "gallon": ("volume-us", "256"),
    "gallons": ("volume-us", "256"),
    # Teaspoons
    "tsp": ("teaspoon", "1"),
    "teaspoon": ("teaspoon", "1"),
    "teaspoons": ("teaspoon", "1"),
    # Count
    "": (COUNT, "1"),
    "unit": (COUNT, "1"),
    "units": (COUNT, "1"),
    "each": (COUNT, "1"),
    "ea": (COUNT, "1"),
    "piece": (COUNT, "1"),
    "pieces": (COUNT, "1"),
    "pc": (COUNT, "1"),
    "pcs": (COUNT, "1"),
    "whole": (COUNT, "1"),
    "count": (COUNT, "1"),
}

UNIT_INFO: dict[str, UnitInfo] = {
    unit: UnitInfo(family, Decimal(multiplier), FAMILY_CANONICAL[family])
    for unit, (family, multiplier) in _UNIT_TABLE.items()
}

# Ordered (suffix, replacement) rules, applied to the last word of a name.
# The first matching rule wins.
PLURAL_RULES: tuple[tuple[str, str], ...] = (
    ("ies", "y"),
    ("oes", "o"),
    ("ches", "ch"),
    ("shes", "sh"),
    ("sses", "ss"),
    ("xes", "x"),
    ("zes", "z"),
    ("s", ""),
)

# Words that end like plurals but are not
INVARIANT_WORDS: frozenset[str] = frozenset(
    {
        "asparagus",
        "couscous",
        "grits",
        "hummus",
        "molasses",
        "swiss",
        "series",
        "species",
    }
)

# "s" never comes off these endings (glass, citrus, anis)
_KEEP_S_ENDINGS = ("ss", "us", "is")

_WHITESPACE = re.compile(r"\s+")


def singularize(word: str) -> str:
    """
    Strip a plural suffix from a single lower-case word.

    Only the fixed rules in PLURAL_RULES are used; this is not inflection.

    Examples:
        "tomatoes" -> "tomato"
        "berries" -> "berry"
        "peaches" -> "peach"
        "onions" -> "onion"
        "hummus" -> "hummus"
    """
    if len(word) <= 3 or word in INVARIANT_WORDS:
        return word

    for suffix, replacement in PLURAL_RULES:
        if not word.endswith(suffix):
            continue
        if suffix == "s" and word.endswith(_KEEP_S_ENDINGS):
            return word
        return word[: -len(suffix)] + replacement

    return word


def normalize_name(name: Any) -> str:
    """Lower-case, trim, collapse whitespace and singularize the last word."""
    if not isinstance(name, str):
        name = "" if name is None else str(name)

    words = _WHITESPACE.sub(" ", name.strip().lower()).split(" ")
    if words and words[-1]:
        words[-1] = singularize(words[-1])
    return " ".join(words)


def _clean_unit(unit: str) -> str:
    return _WHITESPACE.sub(" ", unit.strip().lower()).rstrip(".")


def unit_info(unit: Any) -> UnitInfo:
    """
    Look up the family of a unit.

    None and blank units count as "each". Unknown units with letters become
    their own one-member family; anything else is UNSPECIFIED.
    """
    if unit is None:
        return UNIT_INFO[""]
    if not isinstance(unit, str):
        return UnitInfo(UNSPECIFIED, Decimal(1), None)

    cleaned = _clean_unit(unit)
    if cleaned in UNIT_INFO:
        return UNIT_INFO[cleaned]

    if any(ch.isalpha() for ch in cleaned):
        return UnitInfo(UNKNOWN_PREFIX + cleaned, Decimal(1), cleaned)

    return UnitInfo(UNSPECIFIED, Decimal(1), None)


def unit_family(unit: Any) -> str:
    """Get the family name of a unit."""
    return unit_info(unit).family


def canonical_unit(family: str) -> str | None:
    """Get the unit quantities of a family are summed in.

    Unknown units form one-member families ("unit:pinch" sums in "pinch").
    """
    if family.startswith(UNKNOWN_PREFIX):
        return family[len(UNKNOWN_PREFIX) :]
    return FAMILY_CANONICAL.get(family)


def normalize(name: Any, unit: Any) -> CanonicalKey:
    """
    Map an ingredient name and unit to its merge key.

    Never raises: odd input degrades to a looser key.

    Examples:
        ("Tomatoes", None) -> CanonicalKey("tomato", "count")
        ("flour", "grams") -> CanonicalKey("flour", "mass-metric")
        ("flour", "cups") -> CanonicalKey("flour", "volume-us")
        ("saffron", "pinch") -> CanonicalKey("saffron", "unit:pinch")
    """
    return CanonicalKey(normalize_name(name), unit_family(unit))


def to_canonical(quantity: Decimal, unit: Any) -> tuple[Decimal, str | None]:
    """
    Convert a quantity into its family's canonical unit.

    Args:
        quantity: The amount
        unit: The unit it is expressed in

    Returns:
        Tuple of (converted_quantity, canonical_unit)
    """
    info = unit_info(unit)
    return EXACT.multiply(quantity, info.multiplier), info.canonical


def can_merge(unit_a: Any, unit_b: Any) -> bool:
    """Check if two units belong to the same family."""
    return unit_family(unit_a) == unit_family(unit_b)
