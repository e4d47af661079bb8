"""Partitioning of residents into servings buckets for a dish."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from menu_planner.domain.dishes import Dish
from menu_planner.domain.menus import MenuItem
from menu_planner.domain.residents import Resident
from menu_planner.domain.servings import (
    SODIUM_REDUCTION_PERCENTAGE,
    SUGAR_REDUCTION_PERCENTAGE,
    AdjustedIngredient,
    AdjustedServings,
    AllergySafeResident,
    AllergySafeServings,
    ExcludedIngredient,
    IngredientModification,
    IngredientRequirement,
    NutritionBreakdown,
    ResidentNote,
    ResidentRef,
    ServingsBreakdown,
    SoftTextureResident,
    SoftTextureServings,
)
from menu_planner.services.classifier import (
    LOW_SODIUM_THRESHOLD_MG,
    Classification,
    DietConstraintClassifier,
)
from menu_planner.services.nutrition import (
    NutritionCalculator,
    reduce_sodium,
    reduce_sugar,
    round_summary,
)

_logger = logging.getLogger(__name__)


@dataclass
class ServingsAllocator:
    """Routes each resident of a population into servings buckets."""

    classifier: DietConstraintClassifier
    calculator: NutritionCalculator
    debug: bool = False

    def allocate(
        self, dish: Dish, residents: list[Resident], on: date
    ) -> ServingsBreakdown:
        """Classify every resident once and build the dish's breakdown."""
        regular: list[ResidentRef] = []
        allergy_safe: list[AllergySafeResident] = []
        low_sugar: list[ResidentRef] = []
        low_sodium: list[ResidentRef] = []
        soft_texture: list[SoftTextureResident] = []
        excluded: list[ResidentNote] = []
        adjustments: list[ResidentNote] = []

        for resident in residents:
            ref = ResidentRef(resident_id=resident.id, resident_name=resident.name)
            classification = self.classifier.classify(dish, resident, on)

            conflict = classification.allergy_conflict
            if conflict is not None:
                allergy_safe.append(
                    AllergySafeResident(
                        resident_id=resident.id,
                        resident_name=resident.name,
                        allergen_substances=conflict.substances,
                        excluded_ingredient_ids=conflict.excluded_ingredient_ids,
                    )
                )
                continue

            if classification.is_unsuitable:
                excluded.append(_exclusion(ref, dish, classification))
                continue

            if classification.has_low_sugar_tag:
                low_sugar.append(ref)
            if classification.has_low_sodium_tag:
                low_sodium.append(ref)
            if classification.required_texture is not None:
                soft_texture.append(
                    SoftTextureResident(
                        resident_id=resident.id,
                        resident_name=resident.name,
                        required_texture=classification.required_texture,
                    )
                )
            adjustments.extend(_adjustment_notes(ref, classification))

            if not (
                classification.has_low_sugar_tag
                or classification.has_low_sodium_tag
                or classification.soft_texture_required
            ):
                regular.append(ref)

        excluded_ingredient_ids = _unique(
            ingredient_id
            for entry in allergy_safe
            for ingredient_id in entry.excluded_ingredient_ids
        )
        breakdown = ServingsBreakdown(
            dish_id=dish.id,
            dish_name=dish.name,
            evaluated_on=on,
            population=len(residents),
            total_servings=len(residents) - len(excluded),
            regular=regular,
            allergy_safe=AllergySafeServings(
                residents=allergy_safe,
                excluded_ingredients=_excluded_ingredients(
                    dish, excluded_ingredient_ids
                ),
            ),
            low_sugar=AdjustedServings(
                residents=low_sugar, reduction_percentage=SUGAR_REDUCTION_PERCENTAGE
            ),
            low_sodium=AdjustedServings(
                residents=low_sodium, reduction_percentage=SODIUM_REDUCTION_PERCENTAGE
            ),
            soft_texture=SoftTextureServings(residents=soft_texture),
            excluded=excluded,
            adjustments=adjustments,
            nutrition=self._nutrition_breakdown(dish, excluded_ingredient_ids),
            regular_ingredients=[
                IngredientRequirement(
                    ingredient_id=item.ingredient_id,
                    ingredient_name=item.ingredient.name,
                    total_amount=item.amount * len(regular),
                    unit=item.ingredient.unit,
                )
                for item in dish.ingredients
            ],
            modifications=_modifications(
                dish,
                excluded_ingredient_ids,
                has_low_sugar=bool(low_sugar),
                has_low_sodium=bool(low_sodium),
            ),
        )
        if self.debug:
            _logger.info(
                "Allocated dish=%s population=%s total=%s regular=%s allergy_safe=%s",
                dish.id,
                breakdown.population,
                breakdown.total_servings,
                breakdown.regular_servings,
                breakdown.allergy_safe.count,
            )
        return breakdown

    def resolve_servings(
        self, item: MenuItem, residents: list[Resident], on: date
    ) -> int:
        """Return explicit servings, or the allocated total when unset."""
        if item.servings > 0:
            return item.servings
        return self.allocate(item.dish, residents, on).total_servings

    def _nutrition_breakdown(
        self, dish: Dish, excluded_ingredient_ids: list[UUID]
    ) -> NutritionBreakdown:
        base = self.calculator.per_serving_macros(dish)
        allergy_safe = self.calculator.per_serving_macros(
            dish, set(excluded_ingredient_ids)
        )
        return NutritionBreakdown(
            regular=round_summary(base),
            allergy_safe=round_summary(allergy_safe),
            low_sugar=round_summary(reduce_sugar(base, SUGAR_REDUCTION_PERCENTAGE)),
            low_sodium=round_summary(reduce_sodium(base, SODIUM_REDUCTION_PERCENTAGE)),
        )


def _exclusion(
    ref: ResidentRef, dish: Dish, classification: Classification
) -> ResidentNote:
    if classification.low_sugar_violation:
        reason = (
            "Low-sugar diet: dish is neither sugar adjustable nor diabetic-friendly"
        )
    else:
        reason = (
            f"Low-sodium diet: dish sodium {dish.sodium_level} mg/100g "
            f"exceeds {LOW_SODIUM_THRESHOLD_MG}"
        )
    return ResidentNote(
        resident_id=ref.resident_id, resident_name=ref.resident_name, reason=reason
    )


def _adjustment_notes(
    ref: ResidentRef, classification: Classification
) -> list[ResidentNote]:
    reasons = []
    if classification.gluten_violation:
        reasons.append("Gluten-free diet: dish is not flagged gluten_free")
    if classification.lactose_violation:
        reasons.append("Lactose-free diet: dish is not flagged lactose_free")
    return [
        ResidentNote(
            resident_id=ref.resident_id, resident_name=ref.resident_name, reason=reason
        )
        for reason in reasons
    ]


def _unique(values: Iterable[UUID]) -> list[UUID]:
    return list(dict.fromkeys(values))


def _excluded_ingredients(
    dish: Dish, excluded_ingredient_ids: list[UUID]
) -> list[ExcludedIngredient]:
    excluded = set(excluded_ingredient_ids)
    return [
        ExcludedIngredient(
            ingredient_id=item.ingredient_id,
            ingredient_name=item.ingredient.name,
            reason="Allergen - must be excluded",
        )
        for item in dish.ingredients
        if item.ingredient_id in excluded
    ]


def _modifications(
    dish: Dish,
    excluded_ingredient_ids: list[UUID],
    *,
    has_low_sugar: bool,
    has_low_sodium: bool,
) -> list[IngredientModification]:
    modifications = []
    if excluded_ingredient_ids:
        modifications.append(
            IngredientModification(
                modification_type="allergy_safe",
                excluded_ingredients=_excluded_ingredients(
                    dish, excluded_ingredient_ids
                ),
                adjusted_ingredients=[],
            )
        )
    if has_low_sugar:
        sugar_factor = 1 - SUGAR_REDUCTION_PERCENTAGE / 100
        modifications.append(
            IngredientModification(
                modification_type="low_sugar",
                excluded_ingredients=[],
                adjusted_ingredients=[
                    AdjustedIngredient(
                        ingredient_id=item.ingredient_id,
                        ingredient_name=item.ingredient.name,
                        original_amount=item.amount,
                        adjusted_amount=item.amount * sugar_factor,
                        unit=item.ingredient.unit,
                        reason="Reduced sugar content for low-sugar diet",
                    )
                    for item in dish.ingredients
                    if item.ingredient.macros.carbs_g > 0
                ],
            )
        )
    if has_low_sodium:
        sodium_factor = 1 - SODIUM_REDUCTION_PERCENTAGE / 100
        modifications.append(
            IngredientModification(
                modification_type="low_sodium",
                excluded_ingredients=[],
                adjusted_ingredients=[
                    AdjustedIngredient(
                        ingredient_id=item.ingredient_id,
                        ingredient_name=item.ingredient.name,
                        original_amount=item.amount,
                        adjusted_amount=item.amount * sodium_factor,
                        unit=item.ingredient.unit,
                        reason="Reduced sodium content for low-sodium diet",
                    )
                    for item in dish.ingredients
                    if item.ingredient.macros.sodium_mg > 0
                ],
            )
        )
    return modifications
