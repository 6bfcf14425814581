from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import pytest

from recipebox.app.domain.errors import (
    AuthenticationError,
    DuplicateNameError,
    LastAdminError,
    PermissionDeniedError,
    RecordNotFoundError,
    RecordValidationError,
)
from recipebox.app.domain.models import UserRole
from recipebox.app.infra.db.json_repos import JsonUserRepository
from recipebox.app.services.user_manager import UserManager
from recipebox.services.passwords import hash_password, is_hashed, verify_password


def _manager(tmp_path: Path) -> UserManager:
    return UserManager(JsonUserRepository(tmp_path / "users.json"))


class TestPasswords:
    def test_hash_and_verify(self) -> None:
        stored = hash_password("s3cret")

        assert is_hashed(stored)
        assert verify_password("s3cret", stored)
        assert not verify_password("wrong", stored)

    def test_clear_text_values(self) -> None:
        assert verify_password("plain", "plain")
        assert not verify_password("", "")
        assert not verify_password("plain", "other")

    def test_garbage_hash_does_not_verify(self) -> None:
        assert not verify_password("x", "argon2$not-a-hash")


class TestCreateUser:
    def test_password_is_hashed(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path)

        user = manager.create_user("alice", "pw")

        assert user.id == 1
        assert is_hashed(user.password)
        stored = json.loads((tmp_path / "users.json").read_text(encoding="utf-8"))["users"][0]["password"]
        assert stored != "pw"
        assert stored.startswith("argon2$")

    def test_duplicate_username(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path)
        manager.create_user("alice", "pw")

        with pytest.raises(DuplicateNameError):
            manager.create_user("alice", "other")
        # Usernames are case-sensitive.
        assert manager.create_user("Alice", "pw").id == 2

    def test_empty_password(self, tmp_path: Path) -> None:
        with pytest.raises(RecordValidationError):
            _manager(tmp_path).create_user("alice", "")

    def test_non_admin_cannot_create(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path)
        normal = manager.create_user("bob", "pw")

        with pytest.raises(PermissionDeniedError):
            manager.create_user("eve", "pw", acting_user=normal)


class TestLastAdmin:
    def test_sole_admin_protected(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path)
        admin = manager.create_user("root", "pw", role=UserRole.ADMIN)

        with pytest.raises(LastAdminError):
            manager.delete_user(admin.id)
        with pytest.raises(LastAdminError):
            manager.update_user(replace(admin, role=UserRole.NORMAL))

        assert manager.find_user_by_id(admin.id).is_admin

    def test_second_admin_allows_demote_and_delete(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path)
        first = manager.create_user("root", "pw", role=UserRole.ADMIN)
        second = manager.create_user("ops", "pw", role=UserRole.ADMIN)

        manager.update_user(replace(first, role=UserRole.NORMAL), acting_user=second)
        assert not manager.find_user_by_id(first.id).is_admin

        third = manager.create_user("sre", "pw", role=UserRole.ADMIN)
        manager.delete_user(second.id, acting_user=third)
        assert manager.find_user_by_id(second.id) is None


class TestUpdateUser:
    def test_empty_password_keeps_existing(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path)
        user = manager.create_user("alice", "pw")

        manager.update_user(replace(user, username="alicia", password=""))

        assert manager.authenticate("alicia", "pw").username == "alicia"

    def test_stored_hash_passed_back_keeps_existing(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path)
        user = manager.create_user("alice", "pw")

        manager.update_user(replace(user, role=UserRole.ADMIN))

        assert manager.authenticate("alice", "pw").is_admin

    def test_new_password_with_hash_prefix_is_hashed(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path)
        user = manager.create_user("alice", "pw")

        updated = manager.update_user(replace(user, password="argon2$plain"))

        assert updated.password != "argon2$plain"
        assert verify_password("argon2$plain", updated.password)
        assert manager.authenticate("alice", "argon2$plain").id == user.id
        with pytest.raises(AuthenticationError):
            manager.authenticate("alice", "pw")

    def test_username_collision(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path)
        manager.create_user("alice", "pw")
        bob = manager.create_user("bob", "pw")

        with pytest.raises(DuplicateNameError):
            manager.update_user(replace(bob, username="alice"))

    def test_unknown_user(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path)
        user = manager.create_user("alice", "pw")

        with pytest.raises(RecordNotFoundError):
            manager.update_user(replace(user, id=77))
        with pytest.raises(RecordNotFoundError):
            manager.delete_user(77)


class TestChangePassword:
    def test_own_password(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path)
        alice = manager.create_user("alice", "old")

        manager.change_password(alice.id, "new", acting_user=alice)

        assert manager.authenticate("alice", "new").id == alice.id
        with pytest.raises(AuthenticationError):
            manager.authenticate("alice", "old")

    def test_other_users_password_needs_admin(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path)
        alice = manager.create_user("alice", "pw")
        bob = manager.create_user("bob", "pw")

        with pytest.raises(PermissionDeniedError):
            manager.change_password(bob.id, "x", acting_user=alice)


class TestAuthenticate:
    def test_wrong_credentials(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path)
        manager.create_user("alice", "pw")

        with pytest.raises(AuthenticationError):
            manager.authenticate("alice", "nope")
        with pytest.raises(AuthenticationError):
            manager.authenticate("nobody", "pw")

    def test_clear_text_password_is_upgraded(self, tmp_path: Path) -> None:
        path = tmp_path / "users.json"
        path.write_text(
            json.dumps({"users": [{"id": 1, "username": "legacy", "password": "1234", "role": "Admin"}]}),
            encoding="utf-8",
        )
        manager = UserManager(JsonUserRepository(path))

        user = manager.authenticate("legacy", "1234")

        assert user.is_admin
        stored = json.loads(path.read_text(encoding="utf-8"))["users"][0]["password"]
        assert is_hashed(stored)
        assert UserManager(JsonUserRepository(path)).authenticate("legacy", "1234").id == 1


class TestEnsureAdmin:
    def test_creates_admin_once(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path)

        created = manager.ensure_admin("root", "pw")

        assert created is not None and created.is_admin
        assert manager.ensure_admin("other", "pw") is None
        assert len(manager.get_all_users()) == 1

    def test_promotes_existing_user(self, tmp_path: Path) -> None:
        manager = _manager(tmp_path)
        manager.create_user("root", "pw")

        promoted = manager.ensure_admin("root", "ignored")

        assert promoted.is_admin
        assert manager.find_user_by_username("root").is_admin
