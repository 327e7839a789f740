"""CLI entry point for grusterylist."""

import logging
from typing import NoReturn

import click
from rapidfuzz import fuzz, process

from . import __version__
from .config import DB_ENV_VAR, SECTIONS
from .export import ExportError, export_store, import_store
from .models import GroceryItem, IngredientLine, Recipe
from .planner import format_item, group_lines
from .store import ITEM_SORTS, RECIPE_SORTS, NotFoundError, Store, StoreError, open_store


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    click.echo(f"✗ {message}", err=True)
    raise SystemExit(1)


def suggest_names(name: str, choices: list[str], limit: int = 3) -> list[str]:
    """Find stored names that look like a mistyped one."""
    matches = process.extract(
        name.lower(),
        {choice: choice.lower() for choice in choices},
        scorer=fuzz.token_set_ratio,
        limit=limit,
        score_cutoff=60,
    )
    return [key for _value, _score, key in matches]


def resolve_recipe(store: Store, ref: str) -> Recipe:
    """Find a recipe by name, or by id when given a number."""
    try:
        return store.find_recipe(ref)
    except NotFoundError:
        if ref.isdigit():
            return store.get_recipe(int(ref))
        suggestions = suggest_names(ref, [r.name for r in store.list_recipes()])
        hint = f" Did you mean: {', '.join(suggestions)}?" if suggestions else ""
        raise NotFoundError(f"Recipe '{ref}' not found.{hint}") from None


def parse_ingredient(text: str) -> IngredientLine:
    """
    Parse an ingredient option of the form "name[,quantity[,unit]]".

    Examples:
        "basil" -> basil, no quantity, no unit
        "tomatoes,3" -> 3 tomatoes
        "flour,2,cup" -> 2 cup flour
    """
    parts = [part.strip() for part in text.split(",")]
    if len(parts) > 3 or not parts[0]:
        raise ValueError(f"Expected name[,quantity[,unit]], got '{text}'")

    quantity = parts[1] if len(parts) > 1 and parts[1] else None
    unit = parts[2] if len(parts) > 2 and parts[2] else None
    return IngredientLine(name=parts[0], quantity=quantity, unit=unit)


def _ingredient_callback(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> list[IngredientLine]:
    try:
        return [parse_ingredient(value) for value in values]
    except ValueError as e:
        raise click.BadParameter(str(e)) from None


def echo_lines(lines: list[str]) -> None:
    """Print one entry per line followed by a blank line."""
    for line in lines:
        click.echo(line)
    click.echo()


# ============================================================================
# Main CLI Group
# ============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="grusterylist")
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False),
    help=f"Database file (default: ${DB_ENV_VAR} or ~/.grusterylist/groceries.db)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx: click.Context, db_path: str | None, verbose: bool):
    """Recipe catalog and shopping list builder.

    Keep your recipes and groceries in a local database and turn a
    handful of recipes into one merged shopping list.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"db_path": db_path}


# ============================================================================
# Recipe Commands
# ============================================================================


@cli.group()
def recipes():
    """Manage your recipes."""
    pass


@recipes.command("list")
@click.option("--name", "-n", "name_contains", help="Only recipes whose name contains this")
@click.option("--sort", type=click.Choice(RECIPE_SORTS), default="insertion")
@click.pass_obj
def recipes_list(obj: dict, name_contains: str | None, sort: str):
    """List recipe names, one per line."""
    try:
        with open_store(obj["db_path"]) as store:
            found = store.list_recipes(name_contains=name_contains, sort=sort)
    except StoreError as e:
        fail(str(e))

    echo_lines([recipe.name for recipe in found])


@recipes.command("show")
@click.argument("recipe")
@click.pass_obj
def recipes_show(obj: dict, recipe: str):
    """Show a recipe's ingredients."""
    try:
        with open_store(obj["db_path"]) as store:
            found = resolve_recipe(store, recipe)
    except StoreError as e:
        fail(str(e))

    click.echo(f"{found.name}:")
    echo_lines([str(line) for line in found.ingredients])


@recipes.command("add")
@click.argument("name")
@click.option(
    "--ingredient",
    "-i",
    "ingredients",
    multiple=True,
    callback=_ingredient_callback,
    help='Ingredient as "name[,quantity[,unit]]" (repeatable)',
)
@click.pass_obj
def recipes_add(obj: dict, name: str, ingredients: list[IngredientLine]):
    """Add a recipe.

    Examples:

        grusterylist recipes add "Pasta" -i "tomatoes,3" -i "olive oil,1,tbsp" -i basil
    """
    try:
        with open_store(obj["db_path"]) as store:
            stored = store.create_recipe(Recipe(name=name, ingredients=ingredients))
    except StoreError as e:
        fail(str(e))

    click.echo(f"✓ Recipe added: {stored.name} ({len(stored.ingredients)} ingredients)")


@recipes.command("delete")
@click.argument("recipe")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_obj
def recipes_delete(obj: dict, recipe: str, yes: bool):
    """Delete a recipe. Grocery items made from it are kept."""
    try:
        with open_store(obj["db_path"]) as store:
            found = resolve_recipe(store, recipe)
            if not yes and not click.confirm(f"Delete recipe '{found.name}'?"):
                click.echo("Cancelled.")
                return
            store.delete_recipe(found.id)
    except StoreError as e:
        fail(str(e))

    click.echo(f"✓ Recipe deleted: {found.name}")


# ============================================================================
# Grocery Item Commands
# ============================================================================


@cli.group()
def items():
    """Manage your grocery list."""
    pass


@items.command("list")
@click.option("--name", "-n", "name_contains", help="Only items whose name contains this")
@click.option("--pending", is_flag=True, help="Only items not yet acquired")
@click.option("--section", "-s", help="Only items in this section")
@click.option("--sort", type=click.Choice(ITEM_SORTS), default="insertion")
@click.option("--long", "-l", "long_format", is_flag=True, help="Show ids and acquired marks")
@click.pass_obj
def items_list(
    obj: dict,
    name_contains: str | None,
    pending: bool,
    section: str | None,
    sort: str,
    long_format: bool,
):
    """List grocery items, one per line."""
    try:
        with open_store(obj["db_path"]) as store:
            found = store.list_items(
                name_contains=name_contains,
                acquired=False if pending else None,
                section=section,
                sort=sort,
            )
    except StoreError as e:
        fail(str(e))

    if long_format:
        lines = [
            f"{item.id:>4}  [{'x' if item.acquired else ' '}] {format_item(item)}"
            for item in found
        ]
    else:
        lines = [format_item(item) for item in found]
    echo_lines(lines)


@items.command("add")
@click.argument("name")
@click.option("--quantity", "-q", help="Amount, e.g. 2 or 0.5")
@click.option("--unit", "-u", help="Unit, e.g. g or cup")
@click.option("--section", "-s", help=f"Store section ({', '.join(SECTIONS)}, or your own)")
@click.pass_obj
def items_add(
    obj: dict, name: str, quantity: str | None, unit: str | None, section: str | None
):
    """Add a grocery item."""
    try:
        item = GroceryItem(name=name, quantity=quantity, unit=unit, section=section)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--quantity") from None

    try:
        with open_store(obj["db_path"]) as store:
            stored = store.create_item(item)
    except StoreError as e:
        fail(str(e))

    click.echo(f"✓ Item added: {format_item(stored)} (id {stored.id})")


def _set_acquired(db_path: str | None, item_id: int, acquired: bool) -> GroceryItem:
    try:
        with open_store(db_path) as store:
            return store.update_item(item_id, {"acquired": acquired})
    except StoreError as e:
        fail(str(e))


@items.command("check")
@click.argument("item_id", type=int)
@click.pass_obj
def items_check(obj: dict, item_id: int):
    """Mark an item as acquired."""
    item = _set_acquired(obj["db_path"], item_id, True)
    click.echo(f"✓ Got it: {item.name}")


@items.command("uncheck")
@click.argument("item_id", type=int)
@click.pass_obj
def items_uncheck(obj: dict, item_id: int):
    """Mark an item as not yet acquired."""
    item = _set_acquired(obj["db_path"], item_id, False)
    click.echo(f"✓ Back on the list: {item.name}")


@items.command("delete")
@click.argument("item_id", type=int)
@click.pass_obj
def items_delete(obj: dict, item_id: int):
    """Delete a grocery item."""
    try:
        with open_store(obj["db_path"]) as store:
            store.delete_item(item_id)
    except StoreError as e:
        fail(str(e))

    click.echo(f"✓ Item {item_id} deleted")


@items.command("recipes")
@click.option("--clear", is_flag=True, help="Forget the recipes instead of listing them")
@click.pass_obj
def items_recipes(obj: dict, clear: bool):
    """List the recipes your grocery list was made from."""
    try:
        with open_store(obj["db_path"]) as store:
            if clear:
                removed = store.clear_shopping_recipes()
            else:
                found = store.shopping_recipes()
    except StoreError as e:
        fail(str(e))

    if clear:
        click.echo(f"✓ Forgot {removed} recipe(s)")
    else:
        echo_lines([recipe.name for recipe in found])


@items.command("clear")
@click.pass_obj
def items_clear(obj: dict):
    """Remove every acquired item from the list."""
    try:
        with open_store(obj["db_path"]) as store:
            removed = store.clear_acquired()
    except StoreError as e:
        fail(str(e))

    click.echo(f"✓ Removed {removed} acquired item(s)")


# ============================================================================
# Checklist Commands
# ============================================================================


@cli.group()
def checklist():
    """Things to check at home before you go shopping."""
    pass


@checklist.command("add")
@click.argument("name")
@click.pass_obj
def checklist_add(obj: dict, name: str):
    """Add an item to the checklist."""
    try:
        with open_store(obj["db_path"]) as store:
            added = store.add_checklist_item(name)
    except StoreError as e:
        fail(str(e))

    if added:
        click.echo(f"✓ Added to checklist: {name.strip()}")
    else:
        click.echo(f"Already on the checklist: {name.strip()}")


@checklist.command("list")
@click.pass_obj
def checklist_list(obj: dict):
    """List checklist items, one per line."""
    try:
        with open_store(obj["db_path"]) as store:
            names = store.checklist()
    except StoreError as e:
        fail(str(e))

    echo_lines(names)


@checklist.command("delete")
@click.argument("name")
@click.pass_obj
def checklist_delete(obj: dict, name: str):
    """Remove an item from the checklist."""
    try:
        with open_store(obj["db_path"]) as store:
            store.delete_checklist_item(name)
    except StoreError as e:
        fail(str(e))

    click.echo(f"✓ Removed from checklist: {name.strip()}")


@checklist.command("clear")
@click.pass_obj
def checklist_clear(obj: dict):
    """Empty the checklist."""
    try:
        with open_store(obj["db_path"]) as store:
            removed = store.clear_checklist()
    except StoreError as e:
        fail(str(e))

    click.echo(f"✓ Removed {removed} checklist item(s)")


# ============================================================================
# Shopping List Command
# ============================================================================


@cli.command("shop")
@click.argument("recipe_refs", nargs=-1, required=True)
@click.option("--save", is_flag=True, help="Add the merged items to your grocery list")
@click.option("--sources", is_flag=True, help="Show which recipes each item comes from")
@click.pass_obj
def shop(obj: dict, recipe_refs: tuple[str, ...], save: bool, sources: bool):
    """Build one merged shopping list from several recipes.

    Examples:

        grusterylist shop "Pasta" "Salad"

        grusterylist shop "Pasta" "Salad" --save
    """
    try:
        with open_store(obj["db_path"]) as store:
            selected = [resolve_recipe(store, ref) for ref in recipe_refs]
            groups = group_lines(selected)
            merged = [group.to_grocery_item() for group in groups]
            if save:
                store.save_items(merged, recipe_ids=[recipe.id for recipe in selected])
    except StoreError as e:
        fail(str(e))

    lines = []
    for group, item in zip(groups, merged, strict=True):
        line = format_item(item)
        if sources:
            line = f"{line}  (from: {', '.join(group.sources)})"
        lines.append(line)
    echo_lines(lines)

    if save:
        click.echo(f"✓ Saved {len(merged)} item(s) to your grocery list")


# ============================================================================
# Export / Import Commands
# ============================================================================


@cli.command("export")
@click.argument("output", type=click.Path(dir_okay=False))
@click.pass_obj
def export_cmd(obj: dict, output: str):
    """Export recipes and grocery items to a JSON file."""
    try:
        with open_store(obj["db_path"]) as store:
            counts = export_store(store, output)
    except (StoreError, ExportError) as e:
        fail(str(e))

    click.echo(f"✓ Exported {counts['recipes']} recipe(s) and {counts['items']} item(s) to {output}")


@cli.command("import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def import_cmd(obj: dict, source: str):
    """Import recipes and grocery items from a JSON export."""
    try:
        with open_store(obj["db_path"]) as store:
            recipe_count, item_count = import_store(store, source)
    except (StoreError, ExportError) as e:
        fail(str(e))

    click.echo(f"✓ Imported {recipe_count} recipe(s) and {item_count} item(s)")


# ============================================================================
# Entry Point
# ============================================================================


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
