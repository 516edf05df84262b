from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Constants
MAX_TITLE_LENGTH = 200
MAX_COMMENT_LENGTH = 2000
MIN_RATING = 1
MAX_RATING = 5

class CamelModel(BaseModel):
    """Snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

class Category(str, Enum):
    PASTA = "Pasta"
    SALADS = "Ensaladas"
    DESSERTS = "Postres"
    MEATS = "Carnes"
    STEWS = "Guisos"
    SOUPS = "Sopas"

class DifficultyLevel(str, Enum):
    EASY = "Fácil"
    MEDIUM = "Media"
    HARD = "Difícil"

class Unit(str, Enum):
    GRAMS = "gramos"
    KILOGRAMS = "kg"
    LITERS = "litros"
    MILLILITERS = "ml"
    CUPS = "tazas"
    TABLESPOONS = "cucharadas"
    TEASPOONS = "cucharaditas"
    UNITS = "unidades"
    PINCH = "pizca"

class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"

class Ingredient(CamelModel):
    name: str
    quantity: float = Field(ge=0)
    unit: Unit

class RecipeCreate(CamelModel):
    title: str = Field(min_length=1, max_length=MAX_TITLE_LENGTH)
    description: str = Field(min_length=1)
    category: Category
    difficulty: DifficultyLevel
    image: str = Field(min_length=1)
    ingredients: List[Ingredient] = Field(min_length=1)
    instructions: List[str] = Field(min_length=1)
    prep_time: str = ""
    cook_time: str = ""
    servings: int = Field(default=1, ge=1)
    chef: Optional[str] = None

    @field_validator("title", "description", "image", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("ingredients", mode="before")
    @classmethod
    def _drop_blank_ingredients(cls, value):
        if not isinstance(value, list):
            return value
        return [
            item
            for item in value
            if not (isinstance(item, dict) and not str(item.get("name") or "").strip())
        ]

    @field_validator("instructions", mode="before")
    @classmethod
    def _drop_blank_steps(cls, value):
        if not isinstance(value, list):
            return value
        return [s.strip() for s in value if not isinstance(s, str) or s.strip()]

    @field_validator("chef", mode="before")
    @classmethod
    def _empty_chef(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

class RecipeUpdate(RecipeCreate):
    """Full replacement of a recipe's editable fields."""

class Recipe(RecipeCreate):
    key: str
    created_at: datetime
    updated_at: Optional[datetime] = None

class RecipeStats(CamelModel):
    average_rating: float = 0.0
    total_ratings: int = 0
    total_comments: int = 0

class RecipeWithStats(Recipe, RecipeStats):
    pass

class RatingCreate(CamelModel):
    rating: int = Field(strict=True, ge=MIN_RATING, le=MAX_RATING)

class Rating(CamelModel):
    recipe_key: str
    user_id: str
    user_name: str
    rating: int = Field(ge=MIN_RATING, le=MAX_RATING)
    created_at: datetime

class CommentCreate(CamelModel):
    comment: str = Field(max_length=MAX_COMMENT_LENGTH)

class Comment(CamelModel):
    key: str
    recipe_key: str
    user_id: str
    user_name: str
    comment: str
    created_at: datetime

class Principal(CamelModel):
    """Identity resolved from a bearer token."""

    user_id: str
    display_name: str
    role: Role = Role.USER


class SignupRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    role: Role = Role.USER

class RoleUpdateRequest(CamelModel):
    user_id: Optional[str] = None
    role: Optional[Role] = None
