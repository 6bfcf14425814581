from __future__ import annotations


class RecipeBoxError(Exception):
    pass


class RecordValidationError(RecipeBoxError):
    def __init__(self, field: str, reason: str):
        super().__init__(f"Invalid {field}: {reason}")
        self.field = field
        self.reason = reason


class BusinessRuleError(RecipeBoxError):
    pass


class DuplicateNameError(BusinessRuleError):
    def __init__(self, kind: str, name: str):
        super().__init__(f"{kind} name '{name}' already exists")
        self.kind = kind
        self.name = name


class RecordNotFoundError(BusinessRuleError):
    def __init__(self, kind: str, record_id: int):
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id


class LastAdminError(BusinessRuleError):
    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} is the last admin and must remain an admin")
        self.user_id = user_id


class PermissionDeniedError(BusinessRuleError):
    def __init__(self, action: str):
        super().__init__(f"Permission denied: {action} requires an admin")
        self.action = action


class AuthenticationError(BusinessRuleError):
    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message)


class PersistenceError(RecipeBoxError):
    def __init__(self, operation: str, path: str):
        super().__init__(f"Failed to persist {operation} to {path}")
        self.operation = operation
        self.path = path


class ConfigurationError(RecipeBoxError):
    def __init__(self, errors: list[str]):
        super().__init__(f"Configuration errors: {', '.join(errors)}")
        self.errors = errors


class CorruptDataError(RecipeBoxError):
    def __init__(self, paths: list[str]):
        super().__init__(f"Could not parse data file(s): {', '.join(paths)}")
        self.paths = paths
