# recipebox/app/services/encyclopedia_service.py
"""
Read-only recipe encyclopedia.
Loads a bundled JSON array of recipes and searches it by keyword.
"""
from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Optional

from recipebox.app.domain.errors import RecordValidationError
from recipebox.app.domain.models import Recipe
from recipebox.app.infra.db.records import RecipeCodec
from recipebox.services.text import contains_ignore_case

logger = logging.getLogger(__name__)


class EncyclopediaService:
    def __init__(self) -> None:
        self._codec = RecipeCodec()
        self._recipes: list[Recipe] = []

    def load(self, path: Path | str) -> bool:
        """
        Replace the catalogue with the recipes in `path`.

        Invalid elements are skipped.

        Returns:
            False if the file is missing, unreadable, malformed or not a JSON array
        """
        self._recipes = []
        path = Path(path)
        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except OSError as error:
            logger.error("Could not open encyclopedia file %s: %s", path, error)
            return False
        except json.JSONDecodeError as error:
            logger.error("Failed to parse encyclopedia file %s: %s", path, error)
            return False

        if not isinstance(document, list):
            logger.error("Encyclopedia file %s does not contain a JSON array", path)
            return False

        for element in document:
            try:
                self._recipes.append(self._codec.decode(element))
            except (RecordValidationError, ValueError, TypeError) as error:
                logger.warning("Skipping invalid encyclopedia recipe %r: %s", element, error)

        logger.info("Loaded %d encyclopedia recipes from %s", len(self._recipes), path)
        return True

    def get_all_recipes(self) -> list[Recipe]:
        return copy.deepcopy(self._recipes)

    def search(self, term: str) -> list[Recipe]:
        """Recipes whose name, an ingredient name or a tag contains `term` (case-insensitive)."""
        if not term:
            return self.get_all_recipes()
        return [
            copy.deepcopy(recipe)
            for recipe in self._recipes
            if contains_ignore_case(recipe.name, term)
            or any(contains_ignore_case(name, term) for name in recipe.ingredient_names())
            or any(contains_ignore_case(tag, term) for tag in recipe.tags)
        ]

    def get_recipe_by_id(self, recipe_id: int) -> Optional[Recipe]:
        for recipe in self._recipes:
            if recipe.id == recipe_id:
                return copy.deepcopy(recipe)
        return None
