"""Tests for shopping list consolidation."""

from decimal import Decimal

from grusterylist.models import GroceryItem, IngredientLine, Recipe
from grusterylist.planner import (
    consolidate,
    consolidate_recipe,
    format_item,
    group_lines,
)
from grusterylist.units import normalize


def make_recipe(name: str, *lines: tuple) -> Recipe:
    """Helper to build a recipe from (name, quantity, unit) tuples."""
    return Recipe(
        name=name,
        ingredients=[IngredientLine(name=n, quantity=q, unit=u) for n, q, u in lines],
    )


def as_tuples(items: list[GroceryItem]) -> list[tuple]:
    return [(item.name, item.quantity, item.unit) for item in items]


class TestConsolidate:
    """Tests for consolidate function."""

    def test_end_to_end(self, pasta, salad):
        result = consolidate([pasta, salad])

        assert as_tuples(result) == [
            ("tomato", Decimal("5"), "unit"),
            ("olive oil", Decimal("1"), "tbsp"),
            ("basil", None, None),
        ]

    def test_output_items_are_unsaved(self, pasta):
        for item in consolidate([pasta]):
            assert item.id is None
            assert item.acquired is False

    def test_empty_input(self):
        assert consolidate([]) == []

    def test_empty_recipe_contributes_nothing(self, pasta):
        empty = Recipe(name="Nothing")
        assert consolidate([empty, pasta, empty]) == consolidate([pasta])

    def test_duplicate_lines_in_one_recipe(self):
        recipe = make_recipe("Twice", ("egg", 2, None), ("eggs", 1, None))
        assert as_tuples(consolidate([recipe])) == [("egg", Decimal("3"), "unit")]

    def test_first_seen_name_is_kept(self):
        a = make_recipe("A", ("  Red Onions ", 1, None))
        b = make_recipe("B", ("red onion", 2, None))
        result = consolidate([a, b])
        assert result[0].name == "Red Onions"

    def test_metric_mass_converted_to_grams(self):
        a = make_recipe("A", ("flour", 1, "kg"))
        b = make_recipe("B", ("flour", 250, "g"))
        assert as_tuples(consolidate([a, b])) == [("flour", Decimal("1250"), "g")]

    def test_cups_and_tablespoons_sum_in_tablespoons(self):
        a = make_recipe("A", ("milk", "0.5", "cup"))
        b = make_recipe("B", ("milk", 2, "tbsp"))
        assert as_tuples(consolidate([a, b])) == [("milk", Decimal("10"), "tbsp")]

    def test_unit_families_never_merge(self):
        a = make_recipe("A", ("flour", 2, "cups"))
        b = make_recipe("B", ("flour", 2, "g"))
        result = consolidate([a, b])

        assert as_tuples(result) == [
            ("flour", Decimal("32"), "tbsp"),
            ("flour", Decimal("2"), "g"),
        ]

    def test_null_quantity_propagates(self):
        a = make_recipe("A", ("onion", 1, None))
        b = make_recipe("B", ("onion", None, None))
        result = consolidate([a, b])

        assert len(result) == 1
        assert result[0].quantity is None
        assert result[0].unit is None

    def test_exact_decimal_sum(self):
        lines = [("sugar", "0.1", "g")] * 3
        result = consolidate([make_recipe("A", *lines)])
        assert result[0].quantity == Decimal("0.3")

    def test_float_quantities_do_not_drift(self):
        a = make_recipe("A", ("sugar", 0.1, "g"))
        b = make_recipe("B", ("sugar", 0.2, "g"))
        assert consolidate([a, b])[0].quantity == Decimal("0.3")

    def test_large_sums_are_exact(self):
        a = make_recipe("A", ("flour", "10000000000000000000000000000", "g"))
        b = make_recipe("B", ("flour", 1, "g"))
        result = consolidate([a, b])
        assert result[0].quantity == Decimal("10000000000000000000000000001")
        assert format_item(result[0]) == "10000000000000000000000000001 g flour"

    def test_many_digits_after_the_point(self):
        a = make_recipe("A", ("sugar", "0.0000000000000000000000000001", "kg"))
        b = make_recipe("B", ("sugar", 1000, "g"))
        result = consolidate([a, b])
        assert result[0].quantity == Decimal("1000.0000000000000000000000001")

    def test_non_finite_quantity_gives_unknown_total(self):
        recipe = make_recipe(
            "A",
            ("salt", "Infinity", "g"),
            ("salt", "-Infinity", "g"),
            ("pepper", "sNaN", None),
            ("sugar", "NaN", "g"),
        )
        assert as_tuples(consolidate([recipe])) == [
            ("salt", None, None),
            ("pepper", None, None),
            ("sugar", None, None),
        ]

    def test_unit_named_like_a_family_stays_apart(self):
        a = make_recipe("A", ("flour", 2, "mass-metric"))
        b = make_recipe("B", ("flour", 100, "g"))

        assert as_tuples(consolidate([a, b])) == [
            ("flour", Decimal("2"), "mass-metric"),
            ("flour", Decimal("100"), "g"),
        ]

    def test_unknown_units_merge_with_themselves_only(self):
        a = make_recipe("A", ("saffron", 1, "pinch"), ("parsley", 1, "bunch"))
        b = make_recipe("B", ("saffron", 2, "Pinch"), ("parsley", 1, "sprig"))

        assert as_tuples(consolidate([a, b])) == [
            ("saffron", Decimal("3"), "pinch"),
            ("parsley", Decimal("1"), "bunch"),
            ("parsley", Decimal("1"), "sprig"),
        ]

    def test_order_is_first_encounter(self):
        a = make_recipe("A", ("salt", None, None), ("pepper", None, None))
        b = make_recipe("B", ("garlic", 1, None), ("salt", None, None))
        assert [item.name for item in consolidate([a, b])] == ["salt", "pepper", "garlic"]

    def test_order_is_stable(self, pasta, salad):
        assert consolidate([pasta, salad]) == consolidate([pasta, salad])

    def test_inputs_not_mutated(self, pasta, salad):
        before = (pasta.to_dict(), salad.to_dict())
        consolidate([pasta, salad])
        assert (pasta.to_dict(), salad.to_dict()) == before


class TestConsolidationProperties:
    """Properties that hold for any recipe selection."""

    def recipes(self) -> list[Recipe]:
        return [
            make_recipe("A", ("Tomatoes", 2, None), ("flour", 1, "kg"), ("basil", None, None)),
            make_recipe("B", ("flour", 2, "cups"), ("tomato", 1, "each"), ("flour", 500, "g")),
            make_recipe("C"),
            make_recipe("D", ("basil", 1, "bunch"), ("salt", 1, "?")),
        ]

    def test_merging_as_one_recipe_gives_same_list(self):
        recipes = self.recipes()
        single = consolidate_recipe(recipes)
        assert consolidate([single]) == consolidate(recipes)

    def test_consolidating_output_again_is_a_fixed_point(self):
        # lines with a unit that has no letters come back as counts, so leave D out
        first = consolidate(self.recipes()[:3])
        again = consolidate(
            [
                Recipe(
                    name="Again",
                    ingredients=[
                        IngredientLine(name=i.name, quantity=i.quantity, unit=i.unit)
                        for i in first
                    ],
                )
            ]
        )
        assert again == first

    def test_every_line_lands_in_exactly_one_group(self):
        recipes = self.recipes()
        groups = group_lines(recipes)

        grouped = [id(line) for group in groups for _source, line in group.lines]
        inputs = [id(line) for recipe in recipes for line in recipe.ingredients]
        assert sorted(grouped) == sorted(inputs)

        for group in groups:
            for _source, line in group.lines:
                assert normalize(line.name, line.unit) == group.key


class TestGroupLines:
    """Tests for group_lines function."""

    def test_sources(self, pasta, salad):
        groups = group_lines([pasta, salad])
        assert groups[0].sources == ["Pasta", "Salad"]
        assert groups[1].sources == ["Pasta"]
        assert groups[2].sources == ["Salad"]

    def test_to_grocery_item(self, pasta, salad):
        group = group_lines([pasta, salad])[0]
        item = group.to_grocery_item()
        assert item == GroceryItem(name="tomato", quantity=Decimal("5"), unit="unit")


class TestFormatItem:
    """Tests for format_item function."""

    def test_with_quantity_and_unit(self):
        item = GroceryItem(name="tomato", quantity=Decimal("5"), unit="unit")
        assert format_item(item) == "5 unit tomato"

    def test_without_quantity(self):
        assert format_item(GroceryItem(name="basil")) == "basil"

    def test_trailing_zeros_dropped(self):
        assert format_item(GroceryItem(name="flour", quantity=Decimal("1250.0"), unit="g")) == (
            "1250 g flour"
        )

    def test_section_shown(self):
        item = GroceryItem(name="milk", quantity=1, unit="l", section="dairy")
        assert format_item(item) == "1 l milk [dairy]"
