"""Nutrition result models."""

from dataclasses import dataclass, field
from datetime import date

from menu_planner.domain.menus import MealSlot


@dataclass(frozen=True)
class NutritionSummary:
    """Rounded nutrition totals; calories are whole numbers."""

    calories: float
    protein: float
    fat: float
    carbs: float
    fiber: float | None = None
    sodium: float | None = None


@dataclass(frozen=True)
class MenuNutritionValidation:
    """Nutrition of one day/slot cell checked against slot guidelines."""

    day_of_week: int
    meal_slot: MealSlot
    summary: NutritionSummary
    warnings: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DailyNutritionSummary:
    """Totals for a single day with its slot validations."""

    day_of_week: int
    day_name: str
    total_calories: float
    total_protein: float
    total_fat: float
    total_carbs: float
    total_fiber: float
    total_sodium: float
    meal_slots: list[MenuNutritionValidation]


@dataclass(frozen=True)
class WeeklyMenuNutritionReport:
    """Full-week nutrition report with deduplicated warnings."""

    week_start_date: date
    week_end_date: date
    daily_summaries: list[DailyNutritionSummary]
    weekly_average: NutritionSummary
    warnings: list[str]
    recommendations: list[str]
