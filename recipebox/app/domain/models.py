# recipebox/app/domain/models.py
"""
Domain records for recipes, restaurants and users.
These are pure data structures with no infrastructure dependencies.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from recipebox.app.domain.errors import RecordValidationError


class Difficulty(str, Enum):
    """Difficulty level of a recipe."""
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class UserRole(str, Enum):
    """Role of a user account."""
    NORMAL = "Normal"
    ADMIN = "Admin"


def _unique(values: list) -> list:
    seen = set()
    result = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


@dataclass
class Ingredient:
    """An ingredient line of a recipe."""
    name: str
    quantity: str = ""


@dataclass
class Recipe:
    """
    A recipe owned by the local user.

    Tags are case-sensitive; empty and repeated tags are dropped on
    construction, keeping the first occurrence.
    """
    id: int
    name: str
    ingredients: list[Ingredient] = field(default_factory=list)
    steps: list[str] = field(default_factory=list)
    cooking_time: int = 0  # minutes
    difficulty: Difficulty = Difficulty.EASY
    tags: list[str] = field(default_factory=list)
    nutritional_info: Optional[str] = None
    image_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise RecordValidationError("name", "recipe name cannot be empty")
        if self.cooking_time < 0:
            raise RecordValidationError("cooking_time", "cooking time cannot be negative")
        try:
            self.difficulty = Difficulty(self.difficulty)
        except ValueError as error:
            raise RecordValidationError("difficulty", str(error)) from error
        self.tags = _unique([tag for tag in self.tags if tag])
        self.nutritional_info = self.nutritional_info or None
        self.image_url = self.image_url or None

    def add_tag(self, tag: str) -> None:
        if tag and tag not in self.tags:
            self.tags.append(tag)

    def remove_tag(self, tag: str) -> None:
        self.tags = [existing for existing in self.tags if existing != tag]

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def ingredient_names(self) -> list[str]:
        return [ingredient.name for ingredient in self.ingredients]


@dataclass
class Restaurant:
    """A restaurant and the recipes it features."""
    id: int
    name: str
    address: str
    contact: str
    opening_hours: str = ""
    featured_recipe_ids: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise RecordValidationError("name", "restaurant name cannot be empty")
        if not self.address:
            raise RecordValidationError("address", "restaurant address cannot be empty")
        if not self.contact:
            raise RecordValidationError("contact", "restaurant contact cannot be empty")
        self.featured_recipe_ids = _unique(list(self.featured_recipe_ids))

    def add_featured_recipe(self, recipe_id: int) -> None:
        if recipe_id not in self.featured_recipe_ids:
            self.featured_recipe_ids.append(recipe_id)

    def remove_featured_recipe(self, recipe_id: int) -> None:
        self.featured_recipe_ids = [rid for rid in self.featured_recipe_ids if rid != recipe_id]


@dataclass
class User:
    """
    A user account.

    `password` holds the stored credential, normally an Argon2 hash
    (see recipebox.services.passwords).
    """
    id: int
    username: str
    password: str = ""
    role: UserRole = UserRole.NORMAL

    def __post_init__(self) -> None:
        if not self.username or not self.username.strip():
            raise RecordValidationError("username", "username cannot be empty")
        try:
            self.role = UserRole(self.role)
        except ValueError as error:
            raise RecordValidationError("role", str(error)) from error

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
