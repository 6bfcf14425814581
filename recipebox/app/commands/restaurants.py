# recipebox/app/commands/restaurants.py
"""`recipebox restaurants ...` subcommands."""
from __future__ import annotations

import argparse
from dataclasses import replace

from recipebox.app.commands.exit_codes import ExitCode
from recipebox.app.commands.recipes import print_recipes
from recipebox.app.deps import AppContext
from recipebox.app.domain.errors import RecordNotFoundError
from recipebox.app.domain.models import Restaurant


def format_restaurant_line(restaurant: Restaurant) -> str:
    return f"{restaurant.id:>4}  {restaurant.name} - {restaurant.address} ({restaurant.contact})"


def _print_restaurants(restaurants: list[Restaurant]) -> None:
    if not restaurants:
        print("No restaurants found.")
        return
    for restaurant in restaurants:
        print(format_restaurant_line(restaurant))


def _list(args: argparse.Namespace, context: AppContext) -> int:
    _print_restaurants(context.restaurants.get_all_restaurants())
    return ExitCode.OK


def _show(args: argparse.Namespace, context: AppContext) -> int:
    restaurant = context.restaurants.find_restaurant_by_id(args.id)
    if restaurant is None:
        raise RecordNotFoundError("Restaurant", args.id)
    print(f"ID: {restaurant.id}")
    print(f"Name: {restaurant.name}")
    print(f"Address: {restaurant.address}")
    print(f"Contact: {restaurant.contact}")
    print(f"Opening hours: {restaurant.opening_hours or '(not set)'}")
    print("Featured recipes:")
    print_recipes(
        context.restaurants.get_featured_recipes(restaurant.id, context.recipes),
        empty_message="  (none)",
    )
    return ExitCode.OK


def _add(args: argparse.Namespace, context: AppContext) -> int:
    restaurant = Restaurant(
        id=0,
        name=args.name,
        address=args.address,
        contact=args.contact,
        opening_hours=args.hours or "",
    )
    stored = context.restaurants.add_restaurant(restaurant)
    print(f"Added restaurant {stored.id}: {stored.name}")
    return ExitCode.OK


def _update(args: argparse.Namespace, context: AppContext) -> int:
    existing = context.restaurants.find_restaurant_by_id(args.id)
    if existing is None:
        raise RecordNotFoundError("Restaurant", args.id)

    changes = {
        field: value
        for field, value in (
            ("name", args.name),
            ("address", args.address),
            ("contact", args.contact),
            ("opening_hours", args.hours),
        )
        if value is not None
    }
    stored = context.restaurants.update_restaurant(replace(existing, **changes))
    print(f"Updated restaurant {stored.id}: {stored.name}")
    return ExitCode.OK


def _delete(args: argparse.Namespace, context: AppContext) -> int:
    context.restaurants.delete_restaurant(args.id)
    print(f"Deleted restaurant {args.id}")
    return ExitCode.OK


def _search(args: argparse.Namespace, context: AppContext) -> int:
    _print_restaurants(context.restaurants.find_restaurants_by_name(args.name, partial_match=args.partial))
    return ExitCode.OK


def _feature(args: argparse.Namespace, context: AppContext) -> int:
    context.restaurants.add_featured_recipe(args.id, args.recipe_id, context.recipes)
    print(f"Recipe {args.recipe_id} featured at restaurant {args.id}")
    return ExitCode.OK


def _unfeature(args: argparse.Namespace, context: AppContext) -> int:
    context.restaurants.remove_featured_recipe(args.id, args.recipe_id)
    print(f"Recipe {args.recipe_id} removed from restaurant {args.id}")
    return ExitCode.OK


def _by_cuisine(args: argparse.Namespace, context: AppContext) -> int:
    _print_restaurants(context.restaurants.find_restaurants_by_cuisine(args.tag, context.recipes))
    return ExitCode.OK


def register(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("restaurants", help="Manage restaurants")
    actions = parser.add_subparsers(dest="action", required=True)

    actions.add_parser("list", help="List all restaurants").set_defaults(handler=_list)

    show = actions.add_parser("show", help="Show a restaurant and its featured recipes")
    show.add_argument("id", type=int)
    show.set_defaults(handler=_show)

    add = actions.add_parser("add", help="Add a restaurant")
    add.add_argument("--name", required=True)
    add.add_argument("--address", required=True)
    add.add_argument("--contact", required=True)
    add.add_argument("--hours", help="Opening hours")
    add.set_defaults(handler=_add)

    update = actions.add_parser("update", help="Change fields of a restaurant")
    update.add_argument("id", type=int)
    update.add_argument("--name")
    update.add_argument("--address")
    update.add_argument("--contact")
    update.add_argument("--hours")
    update.set_defaults(handler=_update)

    delete = actions.add_parser("delete", help="Delete a restaurant")
    delete.add_argument("id", type=int)
    delete.set_defaults(handler=_delete)

    search = actions.add_parser("search", help="Find restaurants by name")
    search.add_argument("name")
    search.add_argument("--partial", action="store_true")
    search.set_defaults(handler=_search)

    feature = actions.add_parser("feature", help="Feature a recipe at a restaurant")
    feature.add_argument("id", type=int)
    feature.add_argument("recipe_id", type=int)
    feature.set_defaults(handler=_feature)

    unfeature = actions.add_parser("unfeature", help="Stop featuring a recipe")
    unfeature.add_argument("id", type=int)
    unfeature.add_argument("recipe_id", type=int)
    unfeature.set_defaults(handler=_unfeature)

    cuisine = actions.add_parser("by-cuisine", help="Restaurants featuring recipes with a tag")
    cuisine.add_argument("tag")
    cuisine.set_defaults(handler=_by_cuisine)
