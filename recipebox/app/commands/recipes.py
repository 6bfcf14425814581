# recipebox/app/commands/recipes.py
"""`recipebox recipes ...` subcommands."""
from __future__ import annotations

import argparse
from dataclasses import replace
from typing import Optional

from recipebox.app.commands.exit_codes import ExitCode
from recipebox.app.deps import AppContext
from recipebox.app.domain.errors import RecordNotFoundError
from recipebox.app.domain.models import Difficulty, Ingredient, Recipe
from recipebox.services.text import split_csv


def parse_ingredient(raw: str) -> Ingredient:
    """'flour:200 g' -> Ingredient('flour', '200 g'); the quantity is optional."""
    name, _, quantity = raw.partition(":")
    name = name.strip()
    if not name:
        raise argparse.ArgumentTypeError(f"ingredient needs a name: {raw!r}")
    return Ingredient(name=name, quantity=quantity.strip())


def parse_difficulty(raw: str) -> Difficulty:
    for difficulty in Difficulty:
        if difficulty.value.casefold() == raw.strip().casefold():
            return difficulty
    choices = ", ".join(d.value for d in Difficulty)
    raise argparse.ArgumentTypeError(f"difficulty must be one of {choices}")


def format_recipe_line(recipe: Recipe) -> str:
    tags = f" [{', '.join(recipe.tags)}]" if recipe.tags else ""
    return f"{recipe.id:>4}  {recipe.name} ({recipe.cooking_time} min, {recipe.difficulty.value}){tags}"


def print_recipes(recipes: list[Recipe], empty_message: str = "No recipes found.") -> None:
    if not recipes:
        print(empty_message)
        return
    for recipe in recipes:
        print(format_recipe_line(recipe))


def print_recipe_details(recipe: Recipe) -> None:
    print(f"ID: {recipe.id}")
    print(f"Name: {recipe.name}")
    print(f"Cooking time: {recipe.cooking_time} min")
    print(f"Difficulty: {recipe.difficulty.value}")
    print("Ingredients:")
    if not recipe.ingredients:
        print("  (none)")
    for ingredient in recipe.ingredients:
        quantity = f" ({ingredient.quantity})" if ingredient.quantity else ""
        print(f"  - {ingredient.name}{quantity}")
    print("Steps:")
    if not recipe.steps:
        print("  (none)")
    for number, step in enumerate(recipe.steps, start=1):
        print(f"  {number}. {step}")
    print(f"Tags: {', '.join(recipe.tags) if recipe.tags else '(none)'}")
    if recipe.nutritional_info:
        print(f"Nutritional info: {recipe.nutritional_info}")
    if recipe.image_url:
        print(f"Image: {recipe.image_url}")


def _add_recipe_fields(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--name", required=required)
    parser.add_argument(
        "--ingredient",
        action="append",
        type=parse_ingredient,
        metavar="NAME[:QUANTITY]",
        help="Repeat for each ingredient",
    )
    parser.add_argument("--step", action="append", help="Repeat for each step, in order")
    parser.add_argument("--time", type=int, metavar="MINUTES", help="Cooking time in minutes")
    parser.add_argument("--difficulty", type=parse_difficulty)
    parser.add_argument("--tags", help="Comma separated tags")
    parser.add_argument("--nutrition")
    parser.add_argument("--image-url")


def _list(args: argparse.Namespace, context: AppContext) -> int:
    print_recipes(context.recipes.get_all_recipes())
    return ExitCode.OK


def _show(args: argparse.Namespace, context: AppContext) -> int:
    recipe = context.recipes.find_recipe_by_id(args.id)
    if recipe is None:
        raise RecordNotFoundError("Recipe", args.id)
    print_recipe_details(recipe)
    return ExitCode.OK


def _add(args: argparse.Namespace, context: AppContext) -> int:
    recipe = Recipe(
        id=0,
        name=args.name,
        ingredients=args.ingredient or [],
        steps=args.step or [],
        cooking_time=args.time if args.time is not None else 0,
        difficulty=args.difficulty or Difficulty.EASY,
        tags=split_csv(args.tags),
        nutritional_info=args.nutrition,
        image_url=args.image_url,
    )
    stored = context.recipes.add_recipe(recipe)
    print(f"Added recipe {stored.id}: {stored.name}")
    return ExitCode.OK


def _update(args: argparse.Namespace, context: AppContext) -> int:
    existing = context.recipes.find_recipe_by_id(args.id)
    if existing is None:
        raise RecordNotFoundError("Recipe", args.id)

    changes: dict = {}
    if args.name is not None:
        changes["name"] = args.name
    if args.ingredient is not None:
        changes["ingredients"] = args.ingredient
    if args.step is not None:
        changes["steps"] = args.step
    if args.time is not None:
        changes["cooking_time"] = args.time
    if args.difficulty is not None:
        changes["difficulty"] = args.difficulty
    if args.tags is not None:
        changes["tags"] = split_csv(args.tags)
    if args.nutrition is not None:
        changes["nutritional_info"] = args.nutrition
    if args.image_url is not None:
        changes["image_url"] = args.image_url

    stored = context.recipes.update_recipe(replace(existing, **changes))
    print(f"Updated recipe {stored.id}: {stored.name}")
    return ExitCode.OK


def _delete(args: argparse.Namespace, context: AppContext) -> int:
    context.recipes.delete_recipe(args.id)
    print(f"Deleted recipe {args.id}")
    return ExitCode.OK


def _search(args: argparse.Namespace, context: AppContext) -> int:
    match_all = not args.any
    results: Optional[list[Recipe]] = None

    def narrow(found: list[Recipe]) -> list[Recipe]:
        if results is None:
            return found
        keep = {recipe.id for recipe in found}
        return [recipe for recipe in results if recipe.id in keep]

    if args.name:
        results = narrow(context.recipes.find_recipes_by_name(args.name, partial_match=args.partial))
    if args.tag:
        results = narrow(context.recipes.find_recipes_by_tags(args.tag, match_all=match_all))
    if args.ingredient:
        results = narrow(context.recipes.find_recipes_by_ingredients(args.ingredient, match_all=match_all))

    if results is None:
        print("Give at least one of --name, --tag or --ingredient.")
        return ExitCode.USAGE

    print_recipes(results)
    return ExitCode.OK


def register(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("recipes", help="Manage recipes")
    actions = parser.add_subparsers(dest="action", required=True)

    actions.add_parser("list", help="List all recipes").set_defaults(handler=_list)

    show = actions.add_parser("show", help="Show one recipe")
    show.add_argument("id", type=int)
    show.set_defaults(handler=_show)

    add = actions.add_parser("add", help="Add a recipe")
    _add_recipe_fields(add, required=True)
    add.set_defaults(handler=_add)

    update = actions.add_parser("update", help="Change fields of a recipe")
    update.add_argument("id", type=int)
    _add_recipe_fields(update, required=False)
    update.set_defaults(handler=_update)

    delete = actions.add_parser("delete", help="Delete a recipe")
    delete.add_argument("id", type=int)
    delete.set_defaults(handler=_delete)

    search = actions.add_parser("search", help="Find recipes by name, tags or ingredients")
    search.add_argument("--name")
    search.add_argument("--partial", action="store_true", help="Match part of the name")
    search.add_argument("--tag", action="append", help="Repeat for several tags")
    search.add_argument("--ingredient", action="append", help="Repeat for several ingredients")
    search.add_argument("--any", action="store_true", help="Match any tag/ingredient instead of all")
    search.set_defaults(handler=_search)
