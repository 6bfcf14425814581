# recipebox/app/deps.py
"""
Wiring of repositories and managers for one CLI invocation.
"""
from __future__ import annotations

import getpass
import logging
import os
from dataclasses import dataclass
from typing import Optional

from recipebox.app.config import Settings
from recipebox.app.domain.errors import CorruptDataError
from recipebox.app.domain.models import User
from recipebox.app.infra.db.json_repos import JsonRecipeRepository, JsonRestaurantRepository, JsonUserRepository
from recipebox.app.services.recipe_manager import RecipeManager
from recipebox.app.services.restaurant_manager import RestaurantManager
from recipebox.app.services.user_manager import UserManager

logger = logging.getLogger(__name__)

PASSWORD_ENV_VAR = "RECIPEBOX_PASSWORD"


@dataclass
class AppContext:
    settings: Settings
    recipes: RecipeManager
    restaurants: RestaurantManager
    users: UserManager

    @classmethod
    def from_settings(cls, settings: Settings) -> AppContext:
        recipe_repo = JsonRecipeRepository(settings.recipes_path)
        restaurant_repo = JsonRestaurantRepository(settings.restaurants_path)
        user_repo = JsonUserRepository(settings.users_path)

        broken = [
            str(repo.path)
            for repo in (recipe_repo, restaurant_repo, user_repo)
            if not repo.load_succeeded
        ]
        if broken:
            raise CorruptDataError(broken)

        users = UserManager(user_repo)
        if settings.admin_username and settings.admin_password:
            created = users.ensure_admin(settings.admin_username, settings.admin_password)
            if created is not None:
                logger.info("Bootstrap admin ready: %s", created.username)

        return cls(
            settings=settings,
            recipes=RecipeManager(recipe_repo),
            restaurants=RestaurantManager(restaurant_repo),
            users=users,
        )

    def login(self, username: str, password: Optional[str] = None) -> User:
        """Authenticate `username`, taking the password from the environment or a prompt."""
        if password is None:
            password = os.environ.get(PASSWORD_ENV_VAR)
        if password is None:
            password = getpass.getpass(f"Password for {username}: ")
        return self.users.authenticate(username, password)
