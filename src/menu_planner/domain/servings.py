"""Servings allocation results."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from menu_planner.domain.dishes import DishTexture, IngredientUnit
from menu_planner.domain.nutrition import NutritionSummary

SUGAR_REDUCTION_PERCENTAGE = 30
SODIUM_REDUCTION_PERCENTAGE = 50


@dataclass(frozen=True)
class ResidentRef:
    """Resident identity carried in breakdown buckets."""

    resident_id: UUID
    resident_name: str


@dataclass(frozen=True)
class AllergySafeResident:
    """Resident needing an allergen-free portion."""

    resident_id: UUID
    resident_name: str
    allergen_substances: list[str]
    excluded_ingredient_ids: list[UUID]


@dataclass(frozen=True)
class SoftTextureResident:
    """Resident needing a texture-modified portion."""

    resident_id: UUID
    resident_name: str
    required_texture: DishTexture


@dataclass(frozen=True)
class ResidentNote:
    """Resident plus the reason they were excluded or flagged."""

    resident_id: UUID
    resident_name: str
    reason: str


@dataclass(frozen=True)
class ExcludedIngredient:
    """Ingredient removed from allergy-safe portions."""

    ingredient_id: UUID
    ingredient_name: str
    reason: str


@dataclass(frozen=True)
class AdjustedIngredient:
    """Ingredient whose per-serving amount is reduced for a diet."""

    ingredient_id: UUID
    ingredient_name: str
    original_amount: float
    adjusted_amount: float
    unit: IngredientUnit
    reason: str


@dataclass(frozen=True)
class IngredientRequirement:
    """Total amount of an ingredient needed for a bucket."""

    ingredient_id: UUID
    ingredient_name: str
    total_amount: float
    unit: IngredientUnit


@dataclass(frozen=True)
class IngredientModification:
    """Ingredient changes applied to one special-servings bucket."""

    modification_type: str
    excluded_ingredients: list[ExcludedIngredient]
    adjusted_ingredients: list[AdjustedIngredient]


@dataclass(frozen=True)
class AllergySafeServings:
    residents: list[AllergySafeResident]
    excluded_ingredients: list[ExcludedIngredient]

    @property
    def count(self) -> int:
        return len(self.residents)


@dataclass(frozen=True)
class AdjustedServings:
    residents: list[ResidentRef]
    reduction_percentage: int

    @property
    def count(self) -> int:
        return len(self.residents)


@dataclass(frozen=True)
class SoftTextureServings:
    residents: list[SoftTextureResident]

    @property
    def minced(self) -> int:
        return sum(
            1 for r in self.residents if r.required_texture == DishTexture.MINCED
        )

    @property
    def pureed(self) -> int:
        return sum(
            1 for r in self.residents if r.required_texture == DishTexture.PUREED
        )


@dataclass(frozen=True)
class NutritionBreakdown:
    """Per-serving nutrition of each bucket's version of the dish."""

    regular: NutritionSummary
    allergy_safe: NutritionSummary
    low_sugar: NutritionSummary
    low_sodium: NutritionSummary


@dataclass(frozen=True)
class ServingsBreakdown:
    """Partition of a resident population for one dish.

    ``total_servings`` counts every resident not excluded as unsuitable.
    Allergy-safe residents are exclusive of every other bucket; the low-sugar,
    low-sodium and soft-texture buckets may overlap.
    """

    dish_id: UUID
    dish_name: str
    evaluated_on: date
    population: int
    total_servings: int
    regular: list[ResidentRef]
    allergy_safe: AllergySafeServings
    low_sugar: AdjustedServings
    low_sodium: AdjustedServings
    soft_texture: SoftTextureServings
    excluded: list[ResidentNote]
    adjustments: list[ResidentNote]
    nutrition: NutritionBreakdown
    regular_ingredients: list[IngredientRequirement]
    modifications: list[IngredientModification]

    @property
    def regular_servings(self) -> int:
        return len(self.regular)

    @property
    def minced(self) -> int:
        return self.soft_texture.minced

    @property
    def pureed(self) -> int:
        return self.soft_texture.pureed
