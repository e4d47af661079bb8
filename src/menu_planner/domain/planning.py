"""Results produced by the menu planning facade."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from menu_planner.domain.dishes import Dish
from menu_planner.domain.menus import MealSlot, WeeklyMenu
from menu_planner.domain.nutrition import NutritionSummary, WeeklyMenuNutritionReport
from menu_planner.domain.servings import ServingsBreakdown


@dataclass(frozen=True)
class MenuPlan:
    """Menu snapshot with resolved servings and its nutrition report."""

    menu: WeeklyMenu
    nutrition_report: WeeklyMenuNutritionReport
    auto_calculated: list[UUID]


@dataclass(frozen=True)
class DishServings:
    """Servings breakdown of one menu item."""

    dish_id: UUID
    dish_name: str
    meal_slot: MealSlot
    day_of_week: int
    servings: int
    breakdown: ServingsBreakdown
    nutrition_summary: NutritionSummary


@dataclass(frozen=True)
class ServingsTotals:
    """Partition totals summed over every menu item."""

    regular: int
    allergy_safe: int
    low_sugar: int
    low_sodium: int
    minced: int
    pureed: int
    nutrition: NutritionSummary


@dataclass(frozen=True)
class MenuServingsBreakdown:
    menu_id: UUID | None
    week_start_date: date
    total_residents: int
    dishes: list[DishServings]
    summary: ServingsTotals


@dataclass(frozen=True)
class SpecialPortions:
    """Portions that need special handling for a dish."""

    allergy_safe: int = 0
    low_sugar: int = 0
    low_sodium: int = 0
    soft_texture: int = 0
    pureed: int = 0


@dataclass(frozen=True)
class AffectedResident:
    resident_id: UUID
    resident_name: str
    allergen_substance: str


@dataclass(frozen=True)
class DishAlternative:
    dish_id: UUID
    dish_name: str
    reason: str


@dataclass(frozen=True)
class DishAllergyWarning:
    """Residents affected by a dish's allergens and suggested alternatives."""

    dish_id: UUID
    dish_name: str
    affected_residents: list[AffectedResident]
    special_portions: SpecialPortions
    suggested_alternatives: list[DishAlternative]

    @property
    def total_affected(self) -> int:
        return len(self.affected_residents)


@dataclass(frozen=True)
class DishSuggestion:
    """Dish ranked against a set of diet tags."""

    dish: Dish
    score: int
    reasons: list[str]
