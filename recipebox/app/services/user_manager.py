# recipebox/app/services/user_manager.py
"""
User management service.
Handles accounts, login and the rule that at least one admin must remain.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from recipebox.app.domain.errors import (
    AuthenticationError,
    DuplicateNameError,
    LastAdminError,
    PermissionDeniedError,
    PersistenceError,
    RecordNotFoundError,
    RecordValidationError,
)
from recipebox.app.domain.models import User, UserRole
from recipebox.app.infra.db.base import SAVE_FAILED, UserRepository
from recipebox.app.services.recipe_manager import describe_repository
from recipebox.services.passwords import hash_password, needs_rehash, verify_password

logger = logging.getLogger(__name__)


def _require_admin(acting_user: Optional[User], action: str) -> None:
    # No acting user means a trusted internal caller (bootstrap, tests).
    if acting_user is not None and not acting_user.is_admin:
        raise PermissionDeniedError(action)


class UserManager:
    """
    Service for managing user accounts.

    Responsibilities:
    - Unique usernames (exact match)
    - Argon2 password storage, upgrading clear-text passwords on login
    - Never delete or demote the last admin
    """

    def __init__(self, repository: Optional[UserRepository] = None):
        if repository is None:
            from recipebox.app.config import get_settings
            from recipebox.app.infra.db.json_repos import JsonUserRepository

            repository = JsonUserRepository(get_settings().users_path)
        self._repo = repository

    def _save_or_raise(self, user: User) -> int:
        saved_id = self._repo.save(user)
        if saved_id == SAVE_FAILED:
            raise PersistenceError("user", describe_repository(self._repo))
        return saved_id

    def _admin_count(self) -> int:
        return sum(1 for user in self._repo.find_all() if user.is_admin)

    # -------------------------- mutations --------------------------
    def create_user(
        self,
        username: str,
        password: str,
        role: UserRole = UserRole.NORMAL,
        acting_user: Optional[User] = None,
    ) -> User:
        """
        Create an account with a hashed password.

        Args:
            username: Unique login name
            password: Clear-text password, hashed before storage
            role: Account role
            acting_user: Who is asking; must be an admin when given

        Returns:
            The stored user

        Raises:
            PermissionDeniedError: If acting_user is not an admin
            DuplicateNameError: If the username is taken
            RecordValidationError: If the password is empty
            PersistenceError: If the collection could not be saved
        """
        _require_admin(acting_user, "create user")
        if self._repo.find_by_username(username) is not None:
            raise DuplicateNameError("User", username)
        if not password:
            raise RecordValidationError("password", "password cannot be empty")

        user = User(id=0, username=username, password=hash_password(password), role=role)
        new_id = self._save_or_raise(user)
        stored = self._repo.find_by_id(new_id)
        if stored is None:
            raise PersistenceError("user", describe_repository(self._repo))

        logger.info("User created: id=%d, username=%s, role=%s", stored.id, stored.username, stored.role.value)
        return stored

    def update_user(self, user: User, acting_user: Optional[User] = None) -> User:
        """
        Replace username, role and optionally password of an existing account.

        An empty password, or the stored value passed back unchanged, keeps the
        current credential. Anything else is treated as a new password and hashed.

        Raises:
            PermissionDeniedError: If acting_user is not an admin
            RecordNotFoundError: If no user has this id
            DuplicateNameError: If the username belongs to another user
            LastAdminError: If this would demote the only admin
        """
        _require_admin(acting_user, "update user")
        existing = self._repo.find_by_id(user.id)
        if existing is None:
            raise RecordNotFoundError("User", user.id)

        holder = self._repo.find_by_username(user.username)
        if holder is not None and holder.id != user.id:
            raise DuplicateNameError("User", user.username)

        if existing.is_admin and not user.is_admin and self._admin_count() <= 1:
            raise LastAdminError(user.id)

        if not user.password or user.password == existing.password:
            password = existing.password
        else:
            password = hash_password(user.password)

        updated = replace(user, password=password)
        self._save_or_raise(updated)
        logger.info("User updated: id=%d", updated.id)
        return updated

    def change_password(self, user_id: int, new_password: str, acting_user: Optional[User] = None) -> User:
        """Users may change their own password; anyone else's requires an admin."""
        if acting_user is not None and acting_user.id != user_id:
            _require_admin(acting_user, "change another user's password")
        if not new_password:
            raise RecordValidationError("password", "password cannot be empty")

        user = self._repo.find_by_id(user_id)
        if user is None:
            raise RecordNotFoundError("User", user_id)

        user.password = hash_password(new_password)
        self._save_or_raise(user)
        logger.info("Password changed: id=%d", user_id)
        return user

    def delete_user(self, user_id: int, acting_user: Optional[User] = None) -> None:
        _require_admin(acting_user, "delete user")
        existing = self._repo.find_by_id(user_id)
        if existing is None:
            raise RecordNotFoundError("User", user_id)
        if existing.is_admin and self._admin_count() <= 1:
            raise LastAdminError(user_id)

        if not self._repo.remove(user_id):
            raise PersistenceError("user deletion", describe_repository(self._repo))
        logger.info("User deleted: id=%d", user_id)

    # -------------------------- login --------------------------
    def authenticate(self, username: str, password: str) -> User:
        """
        Check credentials.

        Returns:
            The logged-in user

        Raises:
            AuthenticationError: On unknown username or wrong password
        """
        user = self._repo.find_by_username(username)
        if user is None or not verify_password(password, user.password):
            logger.info("Login failed for %s", username)
            raise AuthenticationError()

        if needs_rehash(user.password):
            user.password = hash_password(password)
            if self._repo.save(user) == SAVE_FAILED:
                logger.warning("Could not store upgraded password hash for user %d", user.id)
            else:
                logger.info("Upgraded stored password for user %d", user.id)

        return user

    def ensure_admin(self, username: str, password: str) -> Optional[User]:
        """
        Make sure at least one admin exists.

        Creates `username` as admin, or promotes it when it already exists.

        Returns:
            The new admin, or None if one was already present
        """
        if self._admin_count() > 0:
            return None

        existing = self._repo.find_by_username(username)
        if existing is None:
            return self.create_user(username, password, role=UserRole.ADMIN)

        existing.role = UserRole.ADMIN
        self._save_or_raise(existing)
        logger.warning("No admin present, promoted existing user %s", username)
        return existing

    # -------------------------- queries --------------------------
    def get_all_users(self) -> list[User]:
        return self._repo.find_all()

    def find_user_by_id(self, user_id: int) -> Optional[User]:
        return self._repo.find_by_id(user_id)

    def find_user_by_username(self, username: str) -> Optional[User]:
        return self._repo.find_by_username(username)
