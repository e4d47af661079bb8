"""Meal slot nutrition validation and the weekly nutrition report."""

from collections.abc import Iterable
from dataclasses import dataclass

from menu_planner.domain.menus import (
    DAY_NAMES,
    DAYS_IN_WEEK,
    MealSlot,
    MenuItem,
    WeeklyMenu,
)
from menu_planner.domain.nutrition import (
    DailyNutritionSummary,
    MenuNutritionValidation,
    NutritionSummary,
    WeeklyMenuNutritionReport,
)
from menu_planner.services.nutrition import NutritionCalculator, round_half_up

SODIUM_LIMIT_MG = 1000


@dataclass(frozen=True)
class SlotGuideline:
    """Recommended nutrition range for a meal slot."""

    calories_min: int
    calories_max: int
    protein_min: int


SLOT_GUIDELINES: dict[MealSlot, SlotGuideline] = {
    MealSlot.BREAKFAST: SlotGuideline(
        calories_min=300, calories_max=500, protein_min=15
    ),
    MealSlot.LUNCH: SlotGuideline(
        calories_min=500, calories_max=800, protein_min=25
    ),
    MealSlot.AFTERNOON: SlotGuideline(
        calories_min=100, calories_max=300, protein_min=5
    ),
    MealSlot.DINNER: SlotGuideline(
        calories_min=400, calories_max=700, protein_min=20
    ),
}


@dataclass
class MealSlotValidator:
    """Sums the nutrition of a slot and checks it against its guideline."""

    calculator: NutritionCalculator

    def validate_slot(
        self, day_of_week: int, meal_slot: MealSlot, items: Iterable[MenuItem]
    ) -> MenuNutritionValidation:
        """Validate the items served in one day/slot cell."""
        summary = sum_summaries(
            self.calculator.dish_nutrition(item.dish, item.servings) for item in items
        )
        guideline = SLOT_GUIDELINES[meal_slot]
        warnings: list[str] = []
        recommendations: list[str] = []

        if summary.calories < guideline.calories_min:
            warnings.append(
                f"{meal_slot}: Calories too low "
                f"({_fmt(summary.calories)} < {guideline.calories_min})"
            )
            recommendations.append(
                f"Increase portion size or add more dishes for {meal_slot}"
            )
        if summary.calories > guideline.calories_max:
            warnings.append(
                f"{meal_slot}: Calories too high "
                f"({_fmt(summary.calories)} > {guideline.calories_max})"
            )
            recommendations.append(
                f"Reduce portion size or remove some dishes for {meal_slot}"
            )
        if summary.protein < guideline.protein_min:
            warnings.append(
                f"{meal_slot}: Protein too low "
                f"({_fmt(summary.protein)}g < {guideline.protein_min}g)"
            )
            recommendations.append(f"Add protein-rich dishes for {meal_slot}")
        if (summary.sodium or 0) > SODIUM_LIMIT_MG:
            warnings.append(
                f"{meal_slot}: Sodium too high "
                f"({_fmt(summary.sodium or 0)}mg > {SODIUM_LIMIT_MG}mg)"
            )
            recommendations.append(f"Reduce sodium content for {meal_slot}")

        return MenuNutritionValidation(
            day_of_week=day_of_week,
            meal_slot=meal_slot,
            summary=summary,
            warnings=warnings,
            recommendations=recommendations,
        )


@dataclass
class WeeklyNutritionAggregator:
    """Validates every day/slot cell of a menu and rolls up the week."""

    validator: MealSlotValidator

    def build_report(self, menu: WeeklyMenu) -> WeeklyMenuNutritionReport:
        daily_summaries = [
            self._summarize_day(menu, day) for day in range(DAYS_IN_WEEK)
        ]

        # dict.fromkeys keeps first-seen order while dropping duplicates.
        warnings = dict.fromkeys(
            warning
            for day in daily_summaries
            for slot in day.meal_slots
            for warning in slot.warnings
        )
        recommendations = dict.fromkeys(
            recommendation
            for day in daily_summaries
            for slot in day.meal_slots
            for recommendation in slot.recommendations
        )

        return WeeklyMenuNutritionReport(
            week_start_date=menu.week_start_date,
            week_end_date=menu.week_end_date,
            daily_summaries=daily_summaries,
            weekly_average=_weekly_average(daily_summaries),
            warnings=list(warnings),
            recommendations=list(recommendations),
        )

    def _summarize_day(self, menu: WeeklyMenu, day: int) -> DailyNutritionSummary:
        validations = [
            self.validator.validate_slot(day, slot, menu.items_for(day, slot))
            for slot in MealSlot
        ]
        total = sum_summaries(validation.summary for validation in validations)
        return DailyNutritionSummary(
            day_of_week=day,
            day_name=DAY_NAMES[day],
            total_calories=total.calories,
            total_protein=total.protein,
            total_fat=total.fat,
            total_carbs=total.carbs,
            total_fiber=total.fiber or 0.0,
            total_sodium=total.sodium or 0.0,
            meal_slots=validations,
        )


def sum_summaries(summaries: Iterable[NutritionSummary]) -> NutritionSummary:
    """Add summaries together, treating missing fiber/sodium as zero."""
    calories = protein = fat = carbs = fiber = sodium = 0.0
    for summary in summaries:
        calories += summary.calories
        protein += summary.protein
        fat += summary.fat
        carbs += summary.carbs
        fiber += summary.fiber or 0.0
        sodium += summary.sodium or 0.0
    return NutritionSummary(
        calories=round_half_up(calories),
        protein=round_half_up(protein, 1),
        fat=round_half_up(fat, 1),
        carbs=round_half_up(carbs, 1),
        fiber=round_half_up(fiber, 1),
        sodium=round_half_up(sodium, 1),
    )


def _weekly_average(days: list[DailyNutritionSummary]) -> NutritionSummary:
    def average(values: Iterable[float]) -> float:
        return sum(values) / DAYS_IN_WEEK

    return NutritionSummary(
        calories=round_half_up(average(day.total_calories for day in days)),
        protein=round_half_up(average(day.total_protein for day in days), 1),
        fat=round_half_up(average(day.total_fat for day in days), 1),
        carbs=round_half_up(average(day.total_carbs for day in days), 1),
        fiber=round_half_up(average(day.total_fiber for day in days), 1),
        sodium=round_half_up(average(day.total_sodium for day in days), 1),
    )


def _fmt(value: float) -> str:
    return f"{value:g}"
