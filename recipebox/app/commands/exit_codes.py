# recipebox/app/commands/exit_codes.py
"""
Process exit codes.
Generic failures follow sysexits.h; 80 and up are application specific.
"""
from __future__ import annotations

from enum import IntEnum

from recipebox.app.domain.errors import (
    AuthenticationError,
    BusinessRuleError,
    ConfigurationError,
    CorruptDataError,
    DuplicateNameError,
    LastAdminError,
    PermissionDeniedError,
    PersistenceError,
    RecipeBoxError,
    RecordNotFoundError,
    RecordValidationError,
)


class ExitCode(IntEnum):
    OK = 0
    USAGE = 64
    DATAERR = 65
    NOINPUT = 66
    IOERR = 74
    CONFIG = 78
    LOGIN_FAILED = 80
    NOT_LOGGED_IN = 81
    PERMISSION_DENIED = 82
    ITEM_NOT_FOUND = 83
    INVALID_INPUT = 84
    OPERATION_FAILED = 85
    ALREADY_EXISTS = 86


# Most specific first.
_ERROR_CODES: tuple[tuple[type[RecipeBoxError], ExitCode], ...] = (
    (RecordValidationError, ExitCode.INVALID_INPUT),
    (DuplicateNameError, ExitCode.ALREADY_EXISTS),
    (RecordNotFoundError, ExitCode.ITEM_NOT_FOUND),
    (PermissionDeniedError, ExitCode.PERMISSION_DENIED),
    (AuthenticationError, ExitCode.LOGIN_FAILED),
    (LastAdminError, ExitCode.OPERATION_FAILED),
    (BusinessRuleError, ExitCode.OPERATION_FAILED),
    (PersistenceError, ExitCode.IOERR),
    (ConfigurationError, ExitCode.CONFIG),
    (CorruptDataError, ExitCode.DATAERR),
)


def exit_code_for(error: RecipeBoxError) -> ExitCode:
    for error_type, code in _ERROR_CODES:
        if isinstance(error, error_type):
            return code
    return ExitCode.OPERATION_FAILED
