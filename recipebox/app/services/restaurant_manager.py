# recipebox/app/services/restaurant_manager.py
"""
Restaurant management service.
Enforces unique restaurant names and manages featured recipes.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from recipebox.app.domain.errors import DuplicateNameError, PersistenceError, RecordNotFoundError
from recipebox.app.domain.models import Recipe, Restaurant
from recipebox.app.infra.db.base import SAVE_FAILED, RestaurantRepository
from recipebox.app.services.recipe_manager import RecipeManager, describe_repository
from recipebox.services.text import normalize

logger = logging.getLogger(__name__)


class RestaurantManager:
    """
    Service for managing restaurants.

    Responsibilities:
    - Reject duplicate restaurant names (case-insensitive)
    - Feature existing recipes at a restaurant
    - Find restaurants by the tags of their featured recipes
    """

    def __init__(self, repository: Optional[RestaurantRepository] = None):
        if repository is None:
            from recipebox.app.config import get_settings
            from recipebox.app.infra.db.json_repos import JsonRestaurantRepository

            repository = JsonRestaurantRepository(get_settings().restaurants_path)
        self._repo = repository
        self._name_index: dict[str, int] = {}
        self.rebuild_indexes()

    def rebuild_indexes(self) -> None:
        self._name_index.clear()
        for restaurant in self._repo.find_all():
            self._name_index.setdefault(normalize(restaurant.name), restaurant.id)

    def _save_or_raise(self, restaurant: Restaurant, operation: str) -> int:
        saved_id = self._repo.save(restaurant)
        if saved_id == SAVE_FAILED:
            raise PersistenceError(operation, describe_repository(self._repo))
        return saved_id

    # -------------------------- mutations --------------------------
    def add_restaurant(self, restaurant: Restaurant) -> Restaurant:
        """
        Store a new restaurant under a fresh id.

        Raises:
            DuplicateNameError: If another restaurant already has this name
            PersistenceError: If the collection could not be saved
        """
        if normalize(restaurant.name) in self._name_index:
            raise DuplicateNameError("Restaurant", restaurant.name)

        new_id = self._save_or_raise(replace(restaurant, id=0), "restaurant")
        stored = self._repo.find_by_id(new_id)
        if stored is None:
            raise PersistenceError("restaurant", describe_repository(self._repo))

        self._name_index[normalize(stored.name)] = stored.id
        logger.info("Restaurant added: id=%d, name=%s", stored.id, stored.name)
        return stored

    def update_restaurant(self, restaurant: Restaurant) -> Restaurant:
        previous = self._repo.find_by_id(restaurant.id)
        if previous is None:
            raise RecordNotFoundError("Restaurant", restaurant.id)

        key = normalize(restaurant.name)
        owner = self._name_index.get(key)
        if owner is not None and owner != restaurant.id:
            raise DuplicateNameError("Restaurant", restaurant.name)

        self._save_or_raise(restaurant, "restaurant")

        old_key = normalize(previous.name)
        if old_key != key and self._name_index.get(old_key) == restaurant.id:
            del self._name_index[old_key]
        self._name_index[key] = restaurant.id
        logger.info("Restaurant updated: id=%d", restaurant.id)
        return self._repo.find_by_id(restaurant.id) or restaurant

    def delete_restaurant(self, restaurant_id: int) -> None:
        existing = self._repo.find_by_id(restaurant_id)
        if existing is None:
            raise RecordNotFoundError("Restaurant", restaurant_id)

        if not self._repo.remove(restaurant_id):
            raise PersistenceError("restaurant deletion", describe_repository(self._repo))

        key = normalize(existing.name)
        if self._name_index.get(key) == restaurant_id:
            del self._name_index[key]
        logger.info("Restaurant deleted: id=%d", restaurant_id)

    def add_featured_recipe(self, restaurant_id: int, recipe_id: int, recipe_manager: RecipeManager) -> Restaurant:
        """
        Feature a recipe at a restaurant. Adding an already featured recipe is a no-op.

        Raises:
            RecordNotFoundError: If the restaurant or the recipe does not exist
            PersistenceError: If the collection could not be saved
        """
        restaurant = self._repo.find_by_id(restaurant_id)
        if restaurant is None:
            raise RecordNotFoundError("Restaurant", restaurant_id)
        if recipe_manager.find_recipe_by_id(recipe_id) is None:
            raise RecordNotFoundError("Recipe", recipe_id)

        if recipe_id in restaurant.featured_recipe_ids:
            return restaurant

        restaurant.add_featured_recipe(recipe_id)
        self._save_or_raise(restaurant, "restaurant")
        logger.info("Recipe %d featured at restaurant %d", recipe_id, restaurant_id)
        return restaurant

    def remove_featured_recipe(self, restaurant_id: int, recipe_id: int) -> Restaurant:
        restaurant = self._repo.find_by_id(restaurant_id)
        if restaurant is None:
            raise RecordNotFoundError("Restaurant", restaurant_id)

        if recipe_id not in restaurant.featured_recipe_ids:
            return restaurant

        restaurant.remove_featured_recipe(recipe_id)
        self._save_or_raise(restaurant, "restaurant")
        logger.info("Recipe %d no longer featured at restaurant %d", recipe_id, restaurant_id)
        return restaurant

    # -------------------------- queries --------------------------
    def find_restaurant_by_id(self, restaurant_id: int) -> Optional[Restaurant]:
        return self._repo.find_by_id(restaurant_id)

    def find_restaurants_by_name(self, name: str, partial_match: bool = False) -> list[Restaurant]:
        return self._repo.find_by_name(name, partial_match)

    def get_all_restaurants(self) -> list[Restaurant]:
        return self._repo.find_all()

    def get_next_restaurant_id(self) -> int:
        return self._repo.get_next_id()

    def get_featured_recipes(self, restaurant_id: int, recipe_manager: RecipeManager) -> list[Recipe]:
        restaurant = self._repo.find_by_id(restaurant_id)
        if restaurant is None or not restaurant.featured_recipe_ids:
            return []
        # Ids of recipes deleted since they were featured are skipped.
        return recipe_manager.find_recipes_by_ids(restaurant.featured_recipe_ids)

    def find_restaurants_by_cuisine(self, cuisine_tag: str, recipe_manager: RecipeManager) -> list[Restaurant]:
        """Restaurants featuring at least one recipe tagged with `cuisine_tag` (case-insensitive)."""
        if not cuisine_tag:
            return []
        tagged_ids = {recipe.id for recipe in recipe_manager.find_recipes_by_tag(cuisine_tag)}
        if not tagged_ids:
            return []
        return [
            restaurant
            for restaurant in self._repo.find_all()
            if tagged_ids.intersection(restaurant.featured_recipe_ids)
        ]
