# recipebox/app/main.py
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import find_dotenv, load_dotenv
from pydantic import ValidationError

from recipebox.app.commands import encyclopedia, recipes, restaurants, users
from recipebox.app.commands.exit_codes import ExitCode, exit_code_for
from recipebox.app.config import Settings, get_settings
from recipebox.app.deps import AppContext
from recipebox.app.domain.errors import ConfigurationError, RecipeBoxError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class CliArgumentParser(argparse.ArgumentParser):
    """Reports usage errors with EX_USAGE instead of argparse's default 2."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(ExitCode.USAGE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = CliArgumentParser(prog="recipebox", description="Manage recipes, restaurants and users")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    parser.add_argument("--data-dir", type=Path, help="Directory holding the JSON data files")
    groups = parser.add_subparsers(dest="group", required=True)
    recipes.register(groups)
    restaurants.register(groups)
    users.register(groups)
    encyclopedia.register(groups)
    return parser


def configure_logging(level: int) -> None:
    # Logs go to stderr so command output on stdout stays clean.
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def load_settings(args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.data_dir is not None:
        overrides["data_dir"] = args.data_dir
    try:
        settings = get_settings(**overrides)
    except ValidationError as error:
        raise ConfigurationError(
            [f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}" for item in error.errors()]
        ) from error

    problems = settings.validate_paths()
    if problems:
        raise ConfigurationError(problems)
    return settings


def main(argv: Optional[Sequence[str]] = None) -> int:
    env_path = find_dotenv(usecwd=True)
    if env_path:
        load_dotenv(dotenv_path=env_path)
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args)
        configure_logging(logging.DEBUG if args.verbose else settings.log_level_value)
        logger.debug("Data files: %s, %s, %s", settings.recipes_path, settings.restaurants_path, settings.users_path)
        context = AppContext.from_settings(settings)
        return int(args.handler(args, context))
    except RecipeBoxError as error:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {error}", file=sys.stderr)
        return int(exit_code_for(error))


if __name__ == "__main__":
    sys.exit(main())
