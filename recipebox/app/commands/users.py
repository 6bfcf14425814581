# recipebox/app/commands/users.py
"""`recipebox users ...` subcommands. All of them need --login."""
from __future__ import annotations

import argparse
import getpass
import logging
import os

from recipebox.app.commands.exit_codes import ExitCode
from recipebox.app.deps import AppContext
from recipebox.app.domain.errors import RecordNotFoundError, RecordValidationError
from recipebox.app.domain.models import User, UserRole

logger = logging.getLogger(__name__)

NEW_PASSWORD_ENV_VAR = "RECIPEBOX_NEW_PASSWORD"


def parse_role(raw: str) -> UserRole:
    for role in UserRole:
        if role.value.casefold() == raw.strip().casefold():
            return role
    raise argparse.ArgumentTypeError(f"role must be one of {', '.join(r.value for r in UserRole)}")


def _read_new_password() -> str:
    password = os.environ.get(NEW_PASSWORD_ENV_VAR)
    if password is not None:
        return password
    password = getpass.getpass("New password: ")
    if password != getpass.getpass("Repeat new password: "):
        raise RecordValidationError("password", "passwords do not match")
    return password


def _list(args: argparse.Namespace, context: AppContext, acting_user: User) -> int:
    for user in context.users.get_all_users():
        print(f"{user.id:>4}  {user.username} ({user.role.value})")
    return ExitCode.OK


def _add(args: argparse.Namespace, context: AppContext, acting_user: User) -> int:
    user = context.users.create_user(args.username, _read_new_password(), args.role, acting_user=acting_user)
    print(f"Created user {user.id}: {user.username} ({user.role.value})")
    return ExitCode.OK


def _delete(args: argparse.Namespace, context: AppContext, acting_user: User) -> int:
    context.users.delete_user(args.id, acting_user=acting_user)
    print(f"Deleted user {args.id}")
    return ExitCode.OK


def _set_role(args: argparse.Namespace, context: AppContext, acting_user: User) -> int:
    user = context.users.find_user_by_id(args.id)
    if user is None:
        raise RecordNotFoundError("User", args.id)
    user.role = args.role
    context.users.update_user(user, acting_user=acting_user)
    print(f"User {user.id} is now {user.role.value}")
    return ExitCode.OK


def _passwd(args: argparse.Namespace, context: AppContext, acting_user: User) -> int:
    user_id = args.id if args.id is not None else acting_user.id
    context.users.change_password(user_id, _read_new_password(), acting_user=acting_user)
    print(f"Password changed for user {user_id}")
    return ExitCode.OK


def _with_login(action):
    def handler(args: argparse.Namespace, context: AppContext) -> int:
        if not args.login:
            print("This command requires --login USERNAME.")
            return ExitCode.NOT_LOGGED_IN
        acting_user = context.login(args.login)
        logger.debug("Logged in as %s (%s)", acting_user.username, acting_user.role.value)
        return action(args, context, acting_user)

    return handler


def register(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("users", help="Manage user accounts")
    parser.add_argument(
        "--login",
        metavar="USERNAME",
        help="Account to act as; password from RECIPEBOX_PASSWORD or a prompt",
    )
    actions = parser.add_subparsers(dest="action", required=True)

    actions.add_parser("list", help="List users").set_defaults(handler=_with_login(_list))

    add = actions.add_parser("add", help="Create a user (admin only)")
    add.add_argument("username")
    add.add_argument("--role", type=parse_role, default=UserRole.NORMAL)
    add.set_defaults(handler=_with_login(_add))

    delete = actions.add_parser("delete", help="Delete a user (admin only)")
    delete.add_argument("id", type=int)
    delete.set_defaults(handler=_with_login(_delete))

    set_role = actions.add_parser("set-role", help="Change a user's role (admin only)")
    set_role.add_argument("id", type=int)
    set_role.add_argument("role", type=parse_role)
    set_role.set_defaults(handler=_with_login(_set_role))

    passwd = actions.add_parser("passwd", help="Change a password (your own unless admin)")
    passwd.add_argument("id", type=int, nargs="?")
    passwd.set_defaults(handler=_with_login(_passwd))
