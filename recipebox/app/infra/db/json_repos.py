# recipebox/app/infra/db/json_repos.py
from __future__ import annotations

import copy
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from recipebox.app.domain.models import Recipe, Restaurant, User
from recipebox.app.infra.db.base import SAVE_FAILED, RecipeRepository, RestaurantRepository, UserRepository
from recipebox.app.infra.db.records import RecipeCodec, RestaurantCodec, UserCodec
from recipebox.app.infra.storage.json_store import JsonCollectionStore, T
from recipebox.services.text import normalize, normalize_all

logger = logging.getLogger(__name__)


def _advance_next_id(store: JsonCollectionStore[T]) -> None:
    # Only ever moves forward, so ids freed by remove() are not handed out again.
    store.set_next_id(max(store.get_next_id(), store.max_id() + 1))


def _save_record(store: JsonCollectionStore[T], record: T) -> int:
    if record.id <= 0:
        _advance_next_id(store)
        to_store = replace(record, id=store.get_next_id())
        is_new = True
    else:
        to_store = record
        is_new = not store.contains_id(record.id)

    if not store.upsert(to_store, is_new):
        return SAVE_FAILED

    _advance_next_id(store)
    return to_store.id


def _remove_record(store: JsonCollectionStore[T], record_id: int) -> bool:
    if not store.remove_internal(record_id):
        return False
    _advance_next_id(store)
    return True


def _load_store(store: JsonCollectionStore[T], repository_name: str) -> bool:
    loaded = store.load()
    if not loaded:
        logger.error("%s: failed to load %s, continuing with an empty collection", repository_name, store.path)
    return loaded


def _matches(wanted: list[str], available: list[str], match_all: bool) -> bool:
    present = set(available)
    if match_all:
        return all(item in present for item in wanted)
    return any(item in present for item in wanted)


class JsonRecipeRepository(RecipeRepository):
    ARRAY_KEY = "recipes"
    DEFAULT_FILE_NAME = "recipes.json"

    def __init__(self, path: Path | str, autoload: bool = True):
        self._store: JsonCollectionStore[Recipe] = JsonCollectionStore(path, self.ARRAY_KEY, RecipeCodec())
        self.load_succeeded = self.load() if autoload else True
        logger.debug("JsonRecipeRepository initialized: %s", self._store.path)

    @property
    def path(self) -> Path:
        return self._store.path

    def load(self) -> bool:
        return _load_store(self._store, type(self).__name__)

    def find_by_id(self, recipe_id: int) -> Optional[Recipe]:
        if recipe_id <= 0:
            return None
        return self._store.find_by_id_internal(recipe_id)

    def find_all(self) -> list[Recipe]:
        return self._store.find_all_internal()

    def save(self, recipe: Recipe) -> int:
        return _save_record(self._store, recipe)

    def remove(self, recipe_id: int) -> bool:
        return _remove_record(self._store, recipe_id)

    def get_next_id(self) -> int:
        return self._store.get_next_id()

    def set_next_id(self, next_id: int) -> None:
        self._store.set_next_id(next_id)

    def find_by_name(self, name: str, partial_match: bool = False) -> list[Recipe]:
        wanted = normalize(name)
        results = []
        for recipe in self._store.iter_items():
            current = normalize(recipe.name)
            if (partial_match and wanted in current) or current == wanted:
                results.append(copy.deepcopy(recipe))
        return results

    def find_by_tag(self, tag: str) -> list[Recipe]:
        if not tag:
            return []
        return self.find_by_tags([tag], match_all=True)

    def find_by_tags(self, tags: Sequence[str], match_all: bool) -> list[Recipe]:
        if not tags:
            return []
        wanted = normalize_all(tags)
        return [
            copy.deepcopy(recipe)
            for recipe in self._store.iter_items()
            if _matches(wanted, normalize_all(recipe.tags), match_all)
        ]

    def find_by_ingredients(self, names: Sequence[str], match_all: bool) -> list[Recipe]:
        if not names:
            return []
        wanted = normalize_all(names)
        return [
            copy.deepcopy(recipe)
            for recipe in self._store.iter_items()
            if _matches(wanted, normalize_all(recipe.ingredient_names()), match_all)
        ]

    def find_many_by_ids(self, ids: Sequence[int]) -> list[Recipe]:
        wanted = set(ids)
        if not wanted:
            return []
        return [copy.deepcopy(recipe) for recipe in self._store.iter_items() if recipe.id in wanted]


class JsonRestaurantRepository(RestaurantRepository):
    ARRAY_KEY = "restaurants"
    DEFAULT_FILE_NAME = "restaurants.json"

    def __init__(self, path: Path | str, autoload: bool = True):
        self._store: JsonCollectionStore[Restaurant] = JsonCollectionStore(
            path, self.ARRAY_KEY, RestaurantCodec()
        )
        self.load_succeeded = self.load() if autoload else True
        logger.debug("JsonRestaurantRepository initialized: %s", self._store.path)

    @property
    def path(self) -> Path:
        return self._store.path

    def load(self) -> bool:
        return _load_store(self._store, type(self).__name__)

    def find_by_id(self, restaurant_id: int) -> Optional[Restaurant]:
        if restaurant_id <= 0:
            return None
        return self._store.find_by_id_internal(restaurant_id)

    def find_all(self) -> list[Restaurant]:
        return self._store.find_all_internal()

    def save(self, restaurant: Restaurant) -> int:
        return _save_record(self._store, restaurant)

    def remove(self, restaurant_id: int) -> bool:
        return _remove_record(self._store, restaurant_id)

    def get_next_id(self) -> int:
        return self._store.get_next_id()

    def set_next_id(self, next_id: int) -> None:
        self._store.set_next_id(next_id)

    def find_by_name(self, name: str, partial_match: bool = False) -> list[Restaurant]:
        wanted = normalize(name)
        results = []
        for restaurant in self._store.iter_items():
            current = normalize(restaurant.name)
            if (partial_match and wanted in current) or current == wanted:
                results.append(copy.deepcopy(restaurant))
        return results


class JsonUserRepository(UserRepository):
    ARRAY_KEY = "users"
    DEFAULT_FILE_NAME = "users.json"

    def __init__(self, path: Path | str, autoload: bool = True):
        self._store: JsonCollectionStore[User] = JsonCollectionStore(path, self.ARRAY_KEY, UserCodec())
        self.load_succeeded = self.load() if autoload else True
        logger.debug("JsonUserRepository initialized: %s", self._store.path)

    @property
    def path(self) -> Path:
        return self._store.path

    def load(self) -> bool:
        return _load_store(self._store, type(self).__name__)

    def find_by_id(self, user_id: int) -> Optional[User]:
        if user_id <= 0:
            return None
        return self._store.find_by_id_internal(user_id)

    def find_all(self) -> list[User]:
        return self._store.find_all_internal()

    def save(self, user: User) -> int:
        return _save_record(self._store, user)

    def remove(self, user_id: int) -> bool:
        return _remove_record(self._store, user_id)

    def get_next_id(self) -> int:
        return self._store.get_next_id()

    def set_next_id(self, next_id: int) -> None:
        self._store.set_next_id(next_id)

    def find_by_username(self, username: str) -> Optional[User]:
        for user in self._store.iter_items():
            if user.username == username:
                return copy.deepcopy(user)
        return None
