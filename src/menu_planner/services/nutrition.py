"""Nutrition arithmetic over dish ingredients."""

import logging
from collections.abc import Collection
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from menu_planner.domain.dishes import (
    ZERO_MACROS,
    Dish,
    IngredientUnit,
    MacroProfile,
)
from menu_planner.domain.nutrition import NutritionSummary

PIECE_WEIGHT_G = 50.0
SERVING_WEIGHT_G = 100.0
CALORIES_PER_GRAM_SUGAR = 4.0

_logger = logging.getLogger(__name__)


@dataclass
class NutritionCalculator:
    """Computes dish nutrition from ingredient macros."""

    debug: bool = False

    def dish_nutrition(self, dish: Dish, servings: float = 1) -> NutritionSummary:
        """Return rounded nutrition for the given number of servings."""
        total = self.per_serving_macros(dish).scaled(servings)
        summary = round_summary(total)
        if self.debug:
            _logger.info(
                "Dish nutrition: dish=%s servings=%s calories=%s",
                dish.id,
                servings,
                summary.calories,
            )
        return summary

    def per_serving_macros(
        self, dish: Dish, excluded_ingredient_ids: Collection[UUID] = ()
    ) -> MacroProfile:
        """Return unrounded macros of one serving, skipping excluded ingredients.

        Dishes without ingredient records fall back to ``calories_per_100g``
        for a 100 g serving; every other macro is zero in that case.
        """
        if not dish.ingredients:
            return MacroProfile(
                calories=dish.calories_per_100g * SERVING_WEIGHT_G / 100,
                protein_g=0.0,
                fat_g=0.0,
                carbs_g=0.0,
            )
        total = ZERO_MACROS
        for dish_ingredient in dish.ingredients:
            if dish_ingredient.ingredient_id in excluded_ingredient_ids:
                continue
            ingredient = dish_ingredient.ingredient
            ratio = mass_equivalent(dish_ingredient.amount, ingredient.unit) / 100
            total = total + ingredient.macros.scaled(ratio)
        return total


def mass_equivalent(amount: float, unit: IngredientUnit) -> float:
    """Convert an ingredient amount to grams."""
    if unit == IngredientUnit.PIECE:
        return amount * PIECE_WEIGHT_G
    # 1 ml is taken as 1 g.
    return amount


def reduce_sugar(macros: MacroProfile, percentage: float) -> MacroProfile:
    """Scale carbs down and remove the energy of the removed carbs."""
    if percentage <= 0:
        return macros
    removed_carbs = macros.carbs_g * percentage / 100
    return MacroProfile(
        calories=macros.calories - removed_carbs * CALORIES_PER_GRAM_SUGAR,
        protein_g=macros.protein_g,
        fat_g=macros.fat_g,
        carbs_g=macros.carbs_g - removed_carbs,
        fiber_g=macros.fiber_g,
        sodium_mg=macros.sodium_mg,
    )


def reduce_sodium(macros: MacroProfile, percentage: float) -> MacroProfile:
    """Scale sodium down, leaving every other macro untouched."""
    if percentage <= 0:
        return macros
    return MacroProfile(
        calories=macros.calories,
        protein_g=macros.protein_g,
        fat_g=macros.fat_g,
        carbs_g=macros.carbs_g,
        fiber_g=macros.fiber_g,
        sodium_mg=macros.sodium_mg * (1 - percentage / 100),
    )


def round_half_up(value: float, places: int = 0) -> float:
    """Round like a person would: halves always go away from zero."""
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    if places == 0:
        return int(rounded)
    return float(rounded)


def round_summary(macros: MacroProfile) -> NutritionSummary:
    """Round calories to whole numbers and other macros to one decimal."""
    return NutritionSummary(
        calories=round_half_up(macros.calories),
        protein=round_half_up(macros.protein_g, 1),
        fat=round_half_up(macros.fat_g, 1),
        carbs=round_half_up(macros.carbs_g, 1),
        fiber=round_half_up(macros.fiber_g, 1),
        sodium=round_half_up(macros.sodium_mg, 1),
    )
