# recipebox/app/infra/db/records.py
"""
On-disk schema of the JSON data files.

Each model describes one element of the top-level array. Field names follow the
stored camelCase keys. Codecs translate between these records and the domain
dataclasses for JsonCollectionStore.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator

from recipebox.app.domain.models import Difficulty, Ingredient, Recipe, Restaurant, User, UserRole

logger = logging.getLogger(__name__)


def _strings_only(value: Any) -> Any:
    if not isinstance(value, list):
        return value
    return [item for item in value if isinstance(item, str)]


def _blank_to_none(value: Any) -> Any:
    if not isinstance(value, str) or not value:
        return None
    return value


class IngredientRecord(BaseModel):
    name: StrictStr
    quantity: StrictStr


class RecipeRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: StrictInt = Field(gt=0)
    name: StrictStr = Field(min_length=1)
    ingredients: list[IngredientRecord] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    cookingTime: StrictInt = Field(ge=0)
    difficulty: Difficulty
    tags: list[str] = Field(default_factory=list)
    nutritionalInfo: Optional[str] = None
    imageUrl: Optional[str] = None

    @field_validator("ingredients", mode="before")
    @classmethod
    def _drop_malformed_ingredients(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        kept = []
        for item in value:
            try:
                kept.append(IngredientRecord.model_validate(item))
            except ValueError:
                logger.debug("Dropping malformed ingredient %r", item)
        return kept

    @field_validator("steps", "tags", mode="before")
    @classmethod
    def _drop_non_strings(cls, value: Any) -> Any:
        return _strings_only(value)

    @field_validator("nutritionalInfo", "imageUrl", mode="before")
    @classmethod
    def _empty_optional(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @classmethod
    def from_domain(cls, recipe: Recipe) -> RecipeRecord:
        return cls(
            id=recipe.id,
            name=recipe.name,
            ingredients=[
                IngredientRecord(name=ingredient.name, quantity=ingredient.quantity)
                for ingredient in recipe.ingredients
            ],
            steps=list(recipe.steps),
            cookingTime=recipe.cooking_time,
            difficulty=recipe.difficulty,
            tags=list(recipe.tags),
            nutritionalInfo=recipe.nutritional_info,
            imageUrl=recipe.image_url,
        )

    def to_domain(self) -> Recipe:
        return Recipe(
            id=self.id,
            name=self.name,
            ingredients=[Ingredient(name=item.name, quantity=item.quantity) for item in self.ingredients],
            steps=list(self.steps),
            cooking_time=self.cookingTime,
            difficulty=self.difficulty,
            tags=list(self.tags),
            nutritional_info=self.nutritionalInfo,
            image_url=self.imageUrl,
        )


class RestaurantRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: StrictInt = Field(gt=0)
    name: StrictStr = Field(min_length=1)
    address: StrictStr = Field(min_length=1)
    contact: StrictStr = Field(min_length=1)
    openingHours: str = ""
    featuredRecipeIds: list[StrictInt] = Field(default_factory=list)

    @field_validator("openingHours", mode="before")
    @classmethod
    def _null_hours(cls, value: Any) -> Any:
        return "" if value is None else value

    @classmethod
    def from_domain(cls, restaurant: Restaurant) -> RestaurantRecord:
        return cls(
            id=restaurant.id,
            name=restaurant.name,
            address=restaurant.address,
            contact=restaurant.contact,
            openingHours=restaurant.opening_hours,
            featuredRecipeIds=list(restaurant.featured_recipe_ids),
        )

    def to_domain(self) -> Restaurant:
        return Restaurant(
            id=self.id,
            name=self.name,
            address=self.address,
            contact=self.contact,
            opening_hours=self.openingHours,
            featured_recipe_ids=list(self.featuredRecipeIds),
        )


class UserRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: StrictInt = Field(gt=0)
    username: StrictStr = Field(min_length=1)
    password: str = ""
    role: UserRole = UserRole.NORMAL

    @field_validator("role", mode="before")
    @classmethod
    def _unknown_role_is_normal(cls, value: Any) -> Any:
        # Anything but an explicit "Admin" is a normal account.
        return UserRole.ADMIN if value == UserRole.ADMIN.value else UserRole.NORMAL

    @classmethod
    def from_domain(cls, user: User) -> UserRecord:
        return cls(id=user.id, username=user.username, password=user.password, role=user.role)

    def to_domain(self) -> User:
        return User(id=self.id, username=self.username, password=self.password, role=self.role)


class RecipeCodec:
    def encode(self, record: Recipe) -> dict[str, Any]:
        return RecipeRecord.from_domain(record).model_dump(mode="json")

    def decode(self, data: Any) -> Recipe:
        return RecipeRecord.model_validate(data).to_domain()


class RestaurantCodec:
    def encode(self, record: Restaurant) -> dict[str, Any]:
        return RestaurantRecord.from_domain(record).model_dump(mode="json")

    def decode(self, data: Any) -> Restaurant:
        return RestaurantRecord.model_validate(data).to_domain()


class UserCodec:
    def encode(self, record: User) -> dict[str, Any]:
        return UserRecord.from_domain(record).model_dump(mode="json")

    def decode(self, data: Any) -> User:
        return UserRecord.model_validate(data).to_domain()
