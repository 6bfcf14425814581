# recipebox/app/services/recipe_manager.py
"""
Recipe management service.
Enforces unique recipe names and answers name/tag lookups from in-memory indexes.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from recipebox.app.domain.errors import DuplicateNameError, PersistenceError, RecordNotFoundError
from recipebox.app.domain.models import Recipe
from recipebox.app.infra.db.base import SAVE_FAILED, RecipeRepository
from recipebox.services.text import normalize

logger = logging.getLogger(__name__)


def describe_repository(repository: object) -> str:
    """Where a repository keeps its data, for error messages."""
    return str(getattr(repository, "path", type(repository).__name__))


class RecipeManager:
    """
    Service for managing recipes.

    Responsibilities:
    - Reject duplicate recipe names (case-insensitive)
    - Keep the name and tag indexes in step with the repository
    - Turn repository failures into PersistenceError
    """

    def __init__(self, repository: Optional[RecipeRepository] = None):
        if repository is None:
            from recipebox.app.config import get_settings
            from recipebox.app.infra.db.json_repos import JsonRecipeRepository

            repository = JsonRecipeRepository(get_settings().recipes_path)
        self._repo = repository
        self._name_index: dict[str, int] = {}
        self._tag_index: dict[str, set[int]] = {}
        self.rebuild_indexes()

    # -------------------------- indexes --------------------------
    def rebuild_indexes(self) -> None:
        self._name_index.clear()
        self._tag_index.clear()
        for recipe in self._repo.find_all():
            self._index(recipe)
        logger.debug("Indexed %d recipe names, %d tags", len(self._name_index), len(self._tag_index))

    def _index(self, recipe: Recipe) -> None:
        key = normalize(recipe.name)
        owner = self._name_index.setdefault(key, recipe.id)
        if owner != recipe.id:
            # Same-named records can come from bulk imports or hand-edited files.
            logger.warning("Recipe %d shares its name with recipe %d; only the first is indexed", recipe.id, owner)
        self._index_tags(recipe)

    def _index_tags(self, recipe: Recipe) -> None:
        for tag in recipe.tags:
            self._tag_index.setdefault(normalize(tag), set()).add(recipe.id)

    def _unindex(self, recipe: Recipe) -> None:
        key = normalize(recipe.name)
        if self._name_index.get(key) == recipe.id:
            del self._name_index[key]
            self._reclaim_name(key)
        for tag in recipe.tags:
            tag_key = normalize(tag)
            ids = self._tag_index.get(tag_key)
            if ids is None:
                continue
            ids.discard(recipe.id)
            if not ids:
                del self._tag_index[tag_key]

    def _reclaim_name(self, key: str) -> None:
        """Hand a freed name to another stored recipe carrying it, if any."""
        for recipe in self._repo.find_all():
            if normalize(recipe.name) == key:
                self._name_index[key] = recipe.id
                return

    def _stored_or_raise(self, saved_id: int, operation: str) -> Recipe:
        if saved_id == SAVE_FAILED:
            raise PersistenceError(operation, describe_repository(self._repo))
        stored = self._repo.find_by_id(saved_id)
        if stored is None:
            raise PersistenceError(operation, describe_repository(self._repo))
        return stored

    # -------------------------- mutations --------------------------
    def add_recipe(self, recipe: Recipe) -> Recipe:
        """
        Store a new recipe under a fresh id.

        Args:
            recipe: The recipe to add; its id is ignored

        Returns:
            The stored recipe with its assigned id

        Raises:
            DuplicateNameError: If another recipe already has this name
            PersistenceError: If the collection could not be saved
        """
        key = normalize(recipe.name)
        if key in self._name_index:
            raise DuplicateNameError("Recipe", recipe.name)

        stored = self._stored_or_raise(self._repo.save(replace(recipe, id=0)), "recipe")
        self._index(stored)
        logger.info("Recipe added: id=%d, name=%s", stored.id, stored.name)
        return stored

    def update_recipe(self, recipe: Recipe) -> Recipe:
        """
        Replace an existing recipe.

        Raises:
            RecordNotFoundError: If no recipe has this id
            DuplicateNameError: If the new name belongs to another recipe
            PersistenceError: If the collection could not be saved
        """
        previous = self._repo.find_by_id(recipe.id)
        if previous is None:
            raise RecordNotFoundError("Recipe", recipe.id)

        owner = self._name_index.get(normalize(recipe.name))
        if owner is not None and owner != recipe.id:
            raise DuplicateNameError("Recipe", recipe.name)

        stored = self._stored_or_raise(self._repo.save(recipe), "recipe")
        self._unindex(previous)
        self._index(stored)
        logger.info("Recipe updated: id=%d, name=%s", stored.id, stored.name)
        return stored

    def delete_recipe(self, recipe_id: int) -> None:
        existing = self._repo.find_by_id(recipe_id)
        if existing is None:
            raise RecordNotFoundError("Recipe", recipe_id)

        if not self._repo.remove(recipe_id):
            raise PersistenceError("recipe deletion", describe_repository(self._repo))

        self._unindex(existing)
        logger.info("Recipe deleted: id=%d", recipe_id)

    def add_recipe_from_persistence(self, recipe: Recipe) -> Recipe:
        """
        Store a recipe as-is, bypassing name checks (bulk import).

        A positive id is kept; id <= 0 gets the next free id. A name already
        owned by another recipe stays with that recipe.
        """
        previous = self._repo.find_by_id(recipe.id) if recipe.id > 0 else None
        stored = self._stored_or_raise(self._repo.save(recipe), "recipe")
        if previous is not None:
            self._unindex(previous)
        self._index(stored)
        return stored

    def set_next_recipe_id(self, next_id: int) -> None:
        self._repo.set_next_id(next_id)

    def get_next_recipe_id(self) -> int:
        return self._repo.get_next_id()

    # -------------------------- queries --------------------------
    def find_recipe_by_id(self, recipe_id: int) -> Optional[Recipe]:
        return self._repo.find_by_id(recipe_id)

    def get_all_recipes(self) -> list[Recipe]:
        return self._repo.find_all()

    def find_recipes_by_ids(self, ids: Sequence[int]) -> list[Recipe]:
        return self._repo.find_many_by_ids(ids)

    def find_recipes_by_name(self, name: str, partial_match: bool = False) -> list[Recipe]:
        term = normalize(name)
        if not partial_match:
            recipe_id = self._name_index.get(term)
            return [] if recipe_id is None else self._repo.find_many_by_ids([recipe_id])

        ids = [recipe_id for key, recipe_id in self._name_index.items() if term in key]
        if not ids:
            return []
        return self._repo.find_many_by_ids(ids)

    def find_recipes_by_tag(self, tag: str) -> list[Recipe]:
        return self.find_recipes_by_tags([tag], match_all=True)

    def find_recipes_by_tags(self, tags: Sequence[str], match_all: bool = True) -> list[Recipe]:
        """
        Find recipes by tags, ignoring case.

        Args:
            tags: Tags to look for; empty strings are ignored
            match_all: Recipes must carry every tag (True) or at least one (False)

        Returns:
            Matching recipes in collection order
        """
        keys = [normalize(tag) for tag in tags if tag]
        if not keys:
            return []

        id_sets = [self._tag_index.get(key, set()) for key in keys]
        if match_all:
            matched = set.intersection(*id_sets)
        else:
            matched = set.union(*id_sets)

        if not matched:
            return []
        return self._repo.find_many_by_ids(sorted(matched))

    def find_recipes_by_ingredients(self, names: Sequence[str], match_all: bool = True) -> list[Recipe]:
        wanted = [name for name in names if name]
        if not wanted:
            return []
        return self._repo.find_by_ingredients(wanted, match_all)
