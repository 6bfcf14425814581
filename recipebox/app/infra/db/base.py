# recipebox/app/infra/db/base.py
"""
Abstract repository interfaces for recipes, restaurants and users.
Managers depend on these so the JSON backend can be swapped or stubbed.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from recipebox.app.domain.models import Recipe, Restaurant, User

# Returned by save() when the collection could not be persisted.
SAVE_FAILED = -1


class RecipeRepository(ABC):
    """
    Abstract interface for recipe storage.

    Implementations:
    - JsonRecipeRepository: whole collection in one JSON file
    """

    @abstractmethod
    def load(self) -> bool:
        """
        (Re)load the collection from its backing store.

        Returns:
            False if the stored document could not be parsed
        """
        pass

    @abstractmethod
    def find_by_id(self, recipe_id: int) -> Optional[Recipe]:
        """
        Get a recipe by id.

        Args:
            recipe_id: The recipe id; non-positive ids never match

        Returns:
            A copy of the recipe, or None if not found
        """
        pass

    @abstractmethod
    def find_all(self) -> list[Recipe]:
        """
        Get every recipe in insertion order.

        Returns:
            Copies of all recipes
        """
        pass

    @abstractmethod
    def save(self, recipe: Recipe) -> int:
        """
        Insert or replace a recipe.

        A recipe with id <= 0 gets the next free id. A positive id replaces the
        stored recipe with that id, or is inserted as-is when absent.

        Args:
            recipe: The recipe to store

        Returns:
            The stored id, or SAVE_FAILED if it could not be persisted
        """
        pass

    @abstractmethod
    def remove(self, recipe_id: int) -> bool:
        """
        Delete a recipe.

        Args:
            recipe_id: The recipe to delete

        Returns:
            True if it existed and the deletion was persisted
        """
        pass

    @abstractmethod
    def get_next_id(self) -> int:
        pass

    @abstractmethod
    def set_next_id(self, next_id: int) -> None:
        pass

    @abstractmethod
    def find_by_name(self, name: str, partial_match: bool = False) -> list[Recipe]:
        """
        Find recipes by name, ignoring case.

        Args:
            name: Name to look for
            partial_match: Match substrings instead of the whole name

        Returns:
            Matching recipes
        """
        pass

    @abstractmethod
    def find_by_tag(self, tag: str) -> list[Recipe]:
        pass

    @abstractmethod
    def find_by_tags(self, tags: Sequence[str], match_all: bool) -> list[Recipe]:
        """
        Find recipes by tags, ignoring case.

        Args:
            tags: Tags to look for
            match_all: Require every tag when True, any one of them otherwise

        Returns:
            Matching recipes, empty when no tags are given
        """
        pass

    @abstractmethod
    def find_by_ingredients(self, names: Sequence[str], match_all: bool) -> list[Recipe]:
        """
        Find recipes by ingredient names, ignoring case.

        Args:
            names: Ingredient names to look for
            match_all: Require every ingredient when True, any one of them otherwise

        Returns:
            Matching recipes, empty when no names are given
        """
        pass

    @abstractmethod
    def find_many_by_ids(self, ids: Sequence[int]) -> list[Recipe]:
        """
        Get several recipes at once.

        Args:
            ids: Recipe ids; unknown ids are ignored

        Returns:
            Found recipes in collection order
        """
        pass


class RestaurantRepository(ABC):
    """
    Abstract interface for restaurant storage.
    """

    @abstractmethod
    def load(self) -> bool:
        pass

    @abstractmethod
    def find_by_id(self, restaurant_id: int) -> Optional[Restaurant]:
        pass

    @abstractmethod
    def find_all(self) -> list[Restaurant]:
        pass

    @abstractmethod
    def save(self, restaurant: Restaurant) -> int:
        """
        Insert or replace a restaurant (same id rules as RecipeRepository.save).

        Returns:
            The stored id, or SAVE_FAILED if it could not be persisted
        """
        pass

    @abstractmethod
    def remove(self, restaurant_id: int) -> bool:
        pass

    @abstractmethod
    def get_next_id(self) -> int:
        pass

    @abstractmethod
    def set_next_id(self, next_id: int) -> None:
        pass

    @abstractmethod
    def find_by_name(self, name: str, partial_match: bool = False) -> list[Restaurant]:
        pass


class UserRepository(ABC):
    """
    Abstract interface for user storage.
    """

    @abstractmethod
    def load(self) -> bool:
        pass

    @abstractmethod
    def find_by_id(self, user_id: int) -> Optional[User]:
        pass

    @abstractmethod
    def find_all(self) -> list[User]:
        pass

    @abstractmethod
    def save(self, user: User) -> int:
        """
        Insert or replace a user (same id rules as RecipeRepository.save).

        Returns:
            The stored id, or SAVE_FAILED if it could not be persisted
        """
        pass

    @abstractmethod
    def remove(self, user_id: int) -> bool:
        pass

    @abstractmethod
    def get_next_id(self) -> int:
        pass

    @abstractmethod
    def set_next_id(self, next_id: int) -> None:
        pass

    @abstractmethod
    def find_by_username(self, username: str) -> Optional[User]:
        """
        Get a user by exact, case-sensitive username.

        Returns:
            A copy of the user, or None if not found
        """
        pass
