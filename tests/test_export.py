"""Tests for JSON export and import."""

import json
from decimal import Decimal

import pytest

from grusterylist.export import ExportError, export_store, import_store, store_to_dict
from grusterylist.models import GroceryItem, Recipe
from grusterylist.store import InvalidInputError, Store


@pytest.fixture
def populated(store, pasta, salad):
    """A store with two recipes and a couple of grocery items."""
    store.create_recipe(pasta)
    store.create_recipe(salad)
    store.save_items(
        [
            GroceryItem(name="milk", quantity="1.5", unit="l", section="dairy"),
            GroceryItem(name="basil", acquired=True),
        ]
    )
    return store


class TestExport:
    """Tests for export_store function."""

    def test_export_writes_json(self, populated, tmp_path):
        output = tmp_path / "export.json"
        counts = export_store(populated, output)

        assert counts == {"recipes": 2, "items": 2}
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["version"] == 1
        assert [r["name"] for r in data["recipes"]] == ["Pasta", "Salad"]

    def test_quantities_are_strings_and_nulls_kept(self, populated):
        data = store_to_dict(populated)

        assert data["items"][0]["quantity"] == "1.5"
        assert data["items"][1]["quantity"] is None
        assert data["recipes"][1]["ingredients"][1] == {
            "name": "basil",
            "quantity": None,
            "unit": None,
        }

    def test_unwritable_path(self, populated, tmp_path):
        with pytest.raises(ExportError):
            export_store(populated, tmp_path / "no-such-dir" / "export.json")


class TestImport:
    """Tests for import_store function."""

    def test_round_trip_into_empty_store(self, populated, tmp_path):
        output = tmp_path / "export.json"
        export_store(populated, output)

        with Store(tmp_path / "copy.db") as copy:
            assert import_store(copy, output) == (2, 2)

            assert [r.to_dict() for r in copy.list_recipes()] == [
                r.to_dict() for r in populated.list_recipes()
            ]
            assert [i.to_dict() for i in copy.list_items()] == [
                i.to_dict() for i in populated.list_items()
            ]
            assert copy.list_items()[0].quantity == Decimal("1.5")

    def test_import_appends_with_fresh_ids(self, populated, tmp_path):
        output = tmp_path / "export.json"
        export_store(populated, output)

        import_store(populated, output)

        assert populated.recipe_count() == 4
        ids = [item.id for item in populated.list_items()]
        assert len(set(ids)) == 4

    def test_missing_file(self, store, tmp_path):
        with pytest.raises(ExportError):
            import_store(store, tmp_path / "missing.json")

    def test_invalid_json(self, store, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ExportError):
            import_store(store, path)

    def test_wrong_shape(self, store, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(ExportError):
            import_store(store, path)

    def test_unsupported_version(self, store, tmp_path):
        path = tmp_path / "future.json"
        path.write_text(json.dumps({"version": 99}), encoding="utf-8")

        with pytest.raises(ExportError):
            import_store(store, path)

    def test_record_missing_name(self, store, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text(json.dumps({"recipes": [{"ingredients": []}]}), encoding="utf-8")

        with pytest.raises(ExportError):
            import_store(store, path)

    def test_invalid_record_writes_nothing(self, store, tmp_path):
        path = tmp_path / "invalid.json"
        data = {
            "version": 1,
            "recipes": [Recipe(name="Fine").to_dict()],
            "items": [{"name": "milk", "quantity": "-1"}],
        }
        path.write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(InvalidInputError):
            import_store(store, path)

        assert store.recipe_count() == 0
        assert store.item_count() == 0


class TestChecklistAndShoppingRecipes:
    """Tests for exporting the checklist and the shopping list's recipes."""

    @pytest.fixture
    def planned(self, populated):
        salad = populated.find_recipe("Salad")
        populated.add_shopping_recipes([salad.id])
        populated.add_checklist_item("olive oil")
        populated.add_checklist_item("Æg")
        return populated

    def test_exported_as_names_and_positions(self, planned):
        data = store_to_dict(planned)

        assert data["checklist"] == ["olive oil", "Æg"]
        assert data["shopping_recipes"] == [1]

    def test_round_trip(self, planned, tmp_path):
        output = tmp_path / "export.json"
        export_store(planned, output)

        with Store(tmp_path / "copy.db") as copy:
            copy.create_recipe(Recipe(name="Already here"))
            import_store(copy, output)

            assert copy.checklist() == ["olive oil", "Æg"]
            assert [r.name for r in copy.shopping_recipes()] == ["Salad"]

    def test_older_exports_without_them(self, store, tmp_path):
        path = tmp_path / "old.json"
        path.write_text(json.dumps({"version": 1, "recipes": [{"name": "Soup"}]}))

        assert import_store(store, path) == (1, 0)
        assert store.checklist() == []
        assert store.shopping_recipes() == []

    def test_checklist_not_a_list(self, store, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"version": 1, "checklist": "salt"}))

        with pytest.raises(ExportError):
            import_store(store, path)

    @pytest.mark.parametrize("position", [5, -1, "0", True])
    def test_bad_shopping_position_writes_nothing(self, store, tmp_path, position):
        path = tmp_path / "bad.json"
        data = {"version": 1, "recipes": [{"name": "Soup"}], "shopping_recipes": [position]}
        path.write_text(json.dumps(data))

        with pytest.raises(InvalidInputError):
            import_store(store, path)

        assert store.recipe_count() == 0
