from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from recipebox.app.domain.errors import DuplicateNameError, PersistenceError, RecordNotFoundError
from recipebox.app.domain.models import Recipe, Restaurant
from recipebox.app.infra.db.json_repos import JsonRecipeRepository, JsonRestaurantRepository
from recipebox.app.services.recipe_manager import RecipeManager
from recipebox.app.services.restaurant_manager import RestaurantManager


def _restaurant(name: str) -> Restaurant:
    return Restaurant(id=0, name=name, address="Main St 1", contact="555-0100")


def _managers(tmp_path: Path) -> tuple[RestaurantManager, RecipeManager]:
    restaurants = RestaurantManager(JsonRestaurantRepository(tmp_path / "restaurants.json"))
    recipes = RecipeManager(JsonRecipeRepository(tmp_path / "recipes.json"))
    return restaurants, recipes


class TestRestaurantCrud:
    def test_add_and_find(self, tmp_path: Path) -> None:
        restaurants, _ = _managers(tmp_path)

        stored = restaurants.add_restaurant(_restaurant("Bistro"))

        assert stored.id == 1
        assert restaurants.find_restaurant_by_id(1).name == "Bistro"
        assert [r.id for r in restaurants.find_restaurants_by_name("bistro")] == [1]
        assert restaurants.get_next_restaurant_id() == 2

    def test_duplicate_name(self, tmp_path: Path) -> None:
        restaurants, _ = _managers(tmp_path)
        restaurants.add_restaurant(_restaurant("Bistro"))

        with pytest.raises(DuplicateNameError):
            restaurants.add_restaurant(_restaurant("BISTRO"))

    def test_update_rename_frees_old_name(self, tmp_path: Path) -> None:
        restaurants, _ = _managers(tmp_path)
        bistro = restaurants.add_restaurant(_restaurant("Bistro"))

        restaurants.update_restaurant(replace(bistro, name="Brasserie"))

        assert restaurants.add_restaurant(_restaurant("Bistro")).id == 2
        with pytest.raises(DuplicateNameError):
            restaurants.update_restaurant(replace(bistro, name="bistro"))

    def test_update_and_delete_unknown(self, tmp_path: Path) -> None:
        restaurants, _ = _managers(tmp_path)

        with pytest.raises(RecordNotFoundError):
            restaurants.update_restaurant(Restaurant(id=9, name="Ghost", address="x", contact="y"))
        with pytest.raises(RecordNotFoundError):
            restaurants.delete_restaurant(9)

    def test_delete(self, tmp_path: Path) -> None:
        restaurants, _ = _managers(tmp_path)
        bistro = restaurants.add_restaurant(_restaurant("Bistro"))

        restaurants.delete_restaurant(bistro.id)

        assert restaurants.get_all_restaurants() == []
        assert restaurants.add_restaurant(_restaurant("Bistro")).id == 2

    def test_save_failure(self, tmp_path: Path) -> None:
        restaurants, _ = _managers(tmp_path)
        restaurants.add_restaurant(_restaurant("Bistro"))
        (tmp_path / "restaurants.json.tmp").mkdir()

        with pytest.raises(PersistenceError):
            restaurants.add_restaurant(_restaurant("Diner"))
        assert [r.name for r in restaurants.get_all_restaurants()] == ["Bistro"]


class TestFeaturedRecipes:
    def test_feature_and_list(self, tmp_path: Path) -> None:
        restaurants, recipes = _managers(tmp_path)
        bistro = restaurants.add_restaurant(_restaurant("Bistro"))
        soup = recipes.add_recipe(Recipe(id=0, name="Soup", tags=["French"]))

        restaurants.add_featured_recipe(bistro.id, soup.id, recipes)
        restaurants.add_featured_recipe(bistro.id, soup.id, recipes)

        assert restaurants.find_restaurant_by_id(bistro.id).featured_recipe_ids == [soup.id]
        assert [r.name for r in restaurants.get_featured_recipes(bistro.id, recipes)] == ["Soup"]

    def test_missing_records(self, tmp_path: Path) -> None:
        restaurants, recipes = _managers(tmp_path)
        bistro = restaurants.add_restaurant(_restaurant("Bistro"))

        with pytest.raises(RecordNotFoundError):
            restaurants.add_featured_recipe(bistro.id, 42, recipes)
        with pytest.raises(RecordNotFoundError):
            restaurants.add_featured_recipe(42, 1, recipes)
        assert restaurants.get_featured_recipes(42, recipes) == []

    def test_deleted_recipe_skipped(self, tmp_path: Path) -> None:
        restaurants, recipes = _managers(tmp_path)
        bistro = restaurants.add_restaurant(_restaurant("Bistro"))
        soup = recipes.add_recipe(Recipe(id=0, name="Soup"))
        pie = recipes.add_recipe(Recipe(id=0, name="Pie"))
        restaurants.add_featured_recipe(bistro.id, soup.id, recipes)
        restaurants.add_featured_recipe(bistro.id, pie.id, recipes)

        recipes.delete_recipe(soup.id)

        assert [r.name for r in restaurants.get_featured_recipes(bistro.id, recipes)] == ["Pie"]

    def test_remove_featured(self, tmp_path: Path) -> None:
        restaurants, recipes = _managers(tmp_path)
        bistro = restaurants.add_restaurant(_restaurant("Bistro"))
        soup = recipes.add_recipe(Recipe(id=0, name="Soup"))
        restaurants.add_featured_recipe(bistro.id, soup.id, recipes)

        restaurants.remove_featured_recipe(bistro.id, soup.id)

        assert restaurants.get_featured_recipes(bistro.id, recipes) == []

    def test_find_by_cuisine(self, tmp_path: Path) -> None:
        restaurants, recipes = _managers(tmp_path)
        bistro = restaurants.add_restaurant(_restaurant("Bistro"))
        trattoria = restaurants.add_restaurant(_restaurant("Trattoria"))
        restaurants.add_restaurant(_restaurant("Empty"))
        soup = recipes.add_recipe(Recipe(id=0, name="Onion Soup", tags=["French"]))
        tart = recipes.add_recipe(Recipe(id=0, name="Tarte", tags=["french", "dessert"]))
        pasta = recipes.add_recipe(Recipe(id=0, name="Pasta", tags=["Italian"]))
        restaurants.add_featured_recipe(bistro.id, soup.id, recipes)
        restaurants.add_featured_recipe(bistro.id, tart.id, recipes)
        restaurants.add_featured_recipe(trattoria.id, pasta.id, recipes)

        assert [r.name for r in restaurants.find_restaurants_by_cuisine("FRENCH", recipes)] == ["Bistro"]
        assert [r.name for r in restaurants.find_restaurants_by_cuisine("italian", recipes)] == ["Trattoria"]
        assert restaurants.find_restaurants_by_cuisine("thai", recipes) == []
