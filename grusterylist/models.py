"""Recipe, ingredient line and grocery item records."""

from dataclasses import dataclass, field
from decimal import MAX_EMAX, MAX_PREC, MIN_EMIN, Context, Decimal, InvalidOperation
from typing import Any

Quantity = Decimal | None

# Addition and multiplication by a multiplier never round in this context
EXACT = Context(prec=MAX_PREC, Emax=MAX_EMAX, Emin=MIN_EMIN)


def to_quantity(value: Any) -> Quantity:
    """
    Coerce a quantity to Decimal.

    Floats go through their string form so ``0.1`` becomes ``Decimal("0.1")``
    rather than the binary approximation.

    Raises:
        ValueError: If the value cannot be read as a number
    """
    if value is None or isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a quantity: {value!r}")
    if isinstance(value, int | float):
        return Decimal(str(value))
    if isinstance(value, str):
        text = value.strip().replace(",", ".")
        if not text:
            return None
        try:
            return Decimal(text)
        except InvalidOperation:
            raise ValueError(f"Not a quantity: {value!r}") from None
    raise ValueError(f"Not a quantity: {value!r}")


def format_quantity(quantity: Quantity) -> str:
    """Render a quantity without exponent or trailing zeros ("1.5", "1000")."""
    if quantity is None:
        return ""
    if not quantity.is_finite():
        return str(quantity)
    return format(quantity.normalize(EXACT), "f")


@dataclass
class IngredientLine:
    """One ingredient entry within a recipe."""

    name: str
    quantity: Quantity = None
    unit: str | None = None

    def __post_init__(self) -> None:
        self.quantity = to_quantity(self.quantity)

    def __str__(self) -> str:
        parts = []
        if self.quantity is not None:
            parts.append(format_quantity(self.quantity))
        if self.unit:
            parts.append(self.unit)
        parts.append(self.name)
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "quantity": None if self.quantity is None else str(self.quantity),
            "unit": self.unit,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IngredientLine":
        return cls(
            name=data["name"],
            quantity=data.get("quantity"),
            unit=data.get("unit"),
        )


@dataclass
class Recipe:
    """A named collection of ingredient lines."""

    name: str
    ingredients: list[IngredientLine] = field(default_factory=list)
    id: int | None = None

    def __str__(self) -> str:
        return self.name

    def to_dict(self) -> dict[str, Any]:
        """Convert recipe to dictionary for serialization."""
        return {
            "name": self.name,
            "ingredients": [line.to_dict() for line in self.ingredients],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Recipe":
        """Create recipe from dictionary."""
        return cls(
            name=data["name"],
            ingredients=[IngredientLine.from_dict(d) for d in data.get("ingredients", [])],
        )


@dataclass
class GroceryItem:
    """A standalone shopping-list entry."""

    name: str
    quantity: Quantity = None
    unit: str | None = None
    acquired: bool = False
    section: str | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        self.quantity = to_quantity(self.quantity)

    def __str__(self) -> str:
        parts = []
        if self.quantity is not None:
            parts.append(format_quantity(self.quantity))
        if self.unit:
            parts.append(self.unit)
        parts.append(self.name)
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert item to dictionary for serialization."""
        return {
            "name": self.name,
            "quantity": None if self.quantity is None else str(self.quantity),
            "unit": self.unit,
            "acquired": self.acquired,
            "section": self.section,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GroceryItem":
        """Create item from dictionary."""
        return cls(
            name=data["name"],
            quantity=data.get("quantity"),
            unit=data.get("unit"),
            acquired=data.get("acquired", False),
            section=data.get("section"),
        )
