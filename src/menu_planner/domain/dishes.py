"""Domain models for dishes and ingredients."""

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID


class DishTexture(StrEnum):
    """Physical texture of a dish, ordered from firmest to softest."""

    REGULAR = "Regular"
    MINCED = "Minced"
    PUREED = "Pureed"

    @property
    def rank(self) -> int:
        """Position in the Regular -> Minced -> Pureed progression."""
        return _TEXTURE_ORDER.index(self)


_TEXTURE_ORDER = (DishTexture.REGULAR, DishTexture.MINCED, DishTexture.PUREED)


class IngredientUnit(StrEnum):
    """Unit an ingredient amount is expressed in."""

    GRAM = "g"
    MILLILITER = "ml"
    PIECE = "pcs"


@dataclass(frozen=True)
class MacroProfile:
    """Macronutrient profile, either per 100 units or absolute."""

    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float
    fiber_g: float = 0.0
    sodium_mg: float = 0.0

    def __add__(self, other: "MacroProfile") -> "MacroProfile":
        return MacroProfile(
            calories=self.calories + other.calories,
            protein_g=self.protein_g + other.protein_g,
            fat_g=self.fat_g + other.fat_g,
            carbs_g=self.carbs_g + other.carbs_g,
            fiber_g=self.fiber_g + other.fiber_g,
            sodium_mg=self.sodium_mg + other.sodium_mg,
        )

    def scaled(self, factor: float) -> "MacroProfile":
        """Return the profile multiplied by a factor."""
        return MacroProfile(
            calories=self.calories * factor,
            protein_g=self.protein_g * factor,
            fat_g=self.fat_g * factor,
            carbs_g=self.carbs_g * factor,
            fiber_g=self.fiber_g * factor,
            sodium_mg=self.sodium_mg * factor,
        )


ZERO_MACROS = MacroProfile(0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Ingredient:
    """Ingredient with macros expressed per 100 units."""

    id: UUID
    name: str
    unit: IngredientUnit
    macros: MacroProfile


@dataclass(frozen=True)
class DishIngredient:
    """An ingredient and the amount of it used in one serving of a dish."""

    ingredient: Ingredient
    amount: float

    @property
    def ingredient_id(self) -> UUID:
        return self.ingredient.id


@dataclass(frozen=True)
class Dish:
    """Snapshot of a dish with its ingredients populated."""

    id: UUID
    name: str
    texture: DishTexture = DishTexture.REGULAR
    is_blendable: bool = False
    sugar_adjustable: bool = False
    sodium_level: float | None = None
    dietary_flags: tuple[str, ...] = ()
    ingredients: tuple[DishIngredient, ...] = ()
    calories_per_100g: float = 0.0
    institution_id: UUID | None = None

    def has_flag(self, flag: str) -> bool:
        """Return True when the dish carries the dietary flag (case-insensitive)."""
        wanted = flag.lower()
        return any(existing.lower() == wanted for existing in self.dietary_flags)
