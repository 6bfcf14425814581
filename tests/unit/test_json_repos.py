from __future__ import annotations

import json
from pathlib import Path

from recipebox.app.domain.models import Ingredient, Recipe, Restaurant, User, UserRole
from recipebox.app.infra.db.base import SAVE_FAILED
from recipebox.app.infra.db.json_repos import JsonRecipeRepository, JsonRestaurantRepository, JsonUserRepository


def _recipe(name: str, tags: list[str] | None = None, ingredients: list[str] | None = None) -> Recipe:
    return Recipe(
        id=0,
        name=name,
        tags=tags or [],
        ingredients=[Ingredient(item) for item in ingredients or []],
    )


class TestJsonRecipeRepositoryIds:
    def test_assigns_increasing_ids(self, tmp_path: Path) -> None:
        repo = JsonRecipeRepository(tmp_path / "recipes.json")

        assert repo.save(_recipe("A")) == 1
        assert repo.save(_recipe("B")) == 2
        assert repo.get_next_id() == 3

    def test_ids_not_reused_after_remove(self, tmp_path: Path) -> None:
        repo = JsonRecipeRepository(tmp_path / "recipes.json")
        repo.save(_recipe("A"))
        second = repo.save(_recipe("B"))

        assert repo.remove(second)
        assert repo.save(_recipe("C")) == 3

    def test_explicit_id_inserted_as_is(self, tmp_path: Path) -> None:
        repo = JsonRecipeRepository(tmp_path / "recipes.json")

        assert repo.save(Recipe(id=10, name="Imported")) == 10
        assert repo.get_next_id() == 11
        assert repo.save(_recipe("Next")) == 11

    def test_existing_id_replaced_in_place(self, tmp_path: Path) -> None:
        repo = JsonRecipeRepository(tmp_path / "recipes.json")
        repo.save(_recipe("A"))
        repo.save(_recipe("B"))

        assert repo.save(Recipe(id=1, name="A2")) == 1
        assert [recipe.name for recipe in repo.find_all()] == ["A2", "B"]

    def test_load_recomputes_next_id(self, tmp_path: Path) -> None:
        path = tmp_path / "recipes.json"
        repo = JsonRecipeRepository(path)
        repo.save(Recipe(id=7, name="Seven"))

        assert JsonRecipeRepository(path).get_next_id() == 8

    def test_save_failure(self, tmp_path: Path) -> None:
        repo = JsonRecipeRepository(tmp_path / "recipes.json")
        repo.save(_recipe("A"))
        repo.path.with_name(repo.path.name + ".tmp").mkdir()

        assert repo.save(_recipe("B")) == SAVE_FAILED
        assert [recipe.name for recipe in repo.find_all()] == ["A"]
        assert repo.remove(1) is False

    def test_non_positive_lookup(self, tmp_path: Path) -> None:
        repo = JsonRecipeRepository(tmp_path / "recipes.json")
        repo.save(_recipe("A"))

        assert repo.find_by_id(0) is None
        assert repo.find_by_id(-1) is None
        assert repo.find_by_id(99) is None

    def test_malformed_file_reported(self, tmp_path: Path) -> None:
        path = tmp_path / "recipes.json"
        path.write_text("[broken", encoding="utf-8")

        repo = JsonRecipeRepository(path)

        assert repo.load_succeeded is False
        assert repo.find_all() == []


class TestJsonRecipeRepositoryQueries:
    def _repo(self, tmp_path: Path) -> JsonRecipeRepository:
        repo = JsonRecipeRepository(tmp_path / "recipes.json")
        repo.save(_recipe("Tomato Soup", tags=["Soup", "Vegan"], ingredients=["Tomato", "Water"]))
        repo.save(_recipe("Beef Stew", tags=["Stew"], ingredients=["Beef", "water"]))
        repo.save(_recipe("Apple Pie", tags=["dessert"], ingredients=["Apple", "Flour"]))
        return repo

    def test_find_by_name(self, tmp_path: Path) -> None:
        repo = self._repo(tmp_path)

        assert [r.name for r in repo.find_by_name("beef stew")] == ["Beef Stew"]
        assert repo.find_by_name("beef") == []
        assert [r.name for r in repo.find_by_name("P", partial_match=True)] == ["Tomato Soup", "Apple Pie"]

    def test_find_by_tags(self, tmp_path: Path) -> None:
        repo = self._repo(tmp_path)

        assert [r.name for r in repo.find_by_tag("soup")] == ["Tomato Soup"]
        assert [r.name for r in repo.find_by_tags(["soup", "vegan"], match_all=True)] == ["Tomato Soup"]
        assert repo.find_by_tags(["soup", "stew"], match_all=True) == []
        assert [r.name for r in repo.find_by_tags(["soup", "stew"], match_all=False)] == ["Tomato Soup", "Beef Stew"]
        assert repo.find_by_tags([], match_all=False) == []

    def test_find_by_ingredients(self, tmp_path: Path) -> None:
        repo = self._repo(tmp_path)

        assert [r.name for r in repo.find_by_ingredients(["WATER"], match_all=True)] == ["Tomato Soup", "Beef Stew"]
        assert [r.name for r in repo.find_by_ingredients(["beef", "water"], match_all=True)] == ["Beef Stew"]
        assert [r.name for r in repo.find_by_ingredients(["apple", "beef"], match_all=False)] == [
            "Beef Stew",
            "Apple Pie",
        ]

    def test_find_many_by_ids_in_collection_order(self, tmp_path: Path) -> None:
        repo = self._repo(tmp_path)

        assert [r.id for r in repo.find_many_by_ids([3, 1, 42])] == [1, 3]
        assert repo.find_many_by_ids([]) == []


class TestJsonRestaurantRepository:
    def test_save_and_find_by_name(self, tmp_path: Path) -> None:
        path = tmp_path / "restaurants.json"
        repo = JsonRestaurantRepository(path)
        restaurant_id = repo.save(
            Restaurant(id=0, name="Bistro Nord", address="Main St 1", contact="555", featured_recipe_ids=[2, 1])
        )

        reloaded = JsonRestaurantRepository(path)
        found = reloaded.find_by_id(restaurant_id)
        assert found.featured_recipe_ids == [2, 1]
        assert [r.id for r in reloaded.find_by_name("bistro", partial_match=True)] == [restaurant_id]

        document = json.loads(path.read_text(encoding="utf-8"))
        assert set(document["restaurants"][0]) == {
            "id",
            "name",
            "address",
            "contact",
            "openingHours",
            "featuredRecipeIds",
        }


class TestJsonUserRepository:
    def test_find_by_username_is_exact(self, tmp_path: Path) -> None:
        repo = JsonUserRepository(tmp_path / "users.json")
        repo.save(User(id=0, username="Alice", password="x", role=UserRole.ADMIN))

        assert repo.find_by_username("Alice").role == UserRole.ADMIN
        assert repo.find_by_username("alice") is None

    def test_unknown_role_loads_as_normal(self, tmp_path: Path) -> None:
        path = tmp_path / "users.json"
        path.write_text(
            json.dumps({"users": [{"id": 1, "username": "bob", "password": "pw", "role": "Superuser"}]}),
            encoding="utf-8",
        )

        repo = JsonUserRepository(path)

        assert repo.find_by_id(1).role == UserRole.NORMAL
