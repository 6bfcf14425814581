# recipebox/app/commands/encyclopedia.py
"""`recipebox encyclopedia ...` subcommands."""
from __future__ import annotations

import argparse

from recipebox.app.commands.exit_codes import ExitCode
from recipebox.app.commands.recipes import print_recipe_details, print_recipes
from recipebox.app.deps import AppContext
from recipebox.app.domain.errors import RecordNotFoundError
from recipebox.app.services.encyclopedia_service import EncyclopediaService


def _open(args: argparse.Namespace, context: AppContext) -> EncyclopediaService | None:
    path = args.file or context.settings.encyclopedia_file
    if path is None:
        print("No encyclopedia file: pass --file or set RECIPEBOX_ENCYCLOPEDIA_FILE.")
        return None
    service = EncyclopediaService()
    if not service.load(path):
        print(f"Could not load encyclopedia from {path}")
        return None
    return service


def _search(args: argparse.Namespace, context: AppContext) -> int:
    service = _open(args, context)
    if service is None:
        return ExitCode.NOINPUT
    print_recipes(service.search(args.term), empty_message=f"No encyclopedia recipes match '{args.term}'.")
    return ExitCode.OK


def _show(args: argparse.Namespace, context: AppContext) -> int:
    service = _open(args, context)
    if service is None:
        return ExitCode.NOINPUT
    recipe = service.get_recipe_by_id(args.id)
    if recipe is None:
        raise RecordNotFoundError("Encyclopedia recipe", args.id)
    print_recipe_details(recipe)
    return ExitCode.OK


def register(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("encyclopedia", help="Browse the bundled recipe encyclopedia")
    parser.add_argument("--file", help="Encyclopedia JSON file (overrides RECIPEBOX_ENCYCLOPEDIA_FILE)")
    actions = parser.add_subparsers(dest="action", required=True)

    search = actions.add_parser("search", help="Search by name, ingredient or tag")
    search.add_argument("term")
    search.set_defaults(handler=_search)

    show = actions.add_parser("show", help="Show one encyclopedia recipe")
    show.add_argument("id", type=int)
    show.set_defaults(handler=_show)
