"""Ranking of dishes against diet tags."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from menu_planner.domain.dishes import Dish, DishTexture
from menu_planner.domain.planning import DishSuggestion
from menu_planner.domain.residents import DietTagType, Resident
from menu_planner.services.classifier import (
    GLUTEN_FREE_FLAG,
    LACTOSE_FREE_FLAG,
    LOW_SODIUM_THRESHOLD_MG,
    LOW_SUGAR_FLAGS,
    allergen_matches,
)

BASE_SCORE = 5
MISSING_FLAG_PENALTY = -50
DEFAULT_LIMIT = 10


@dataclass
class DishSuggester:
    """Scores dishes for diet tags and filters out allergens."""

    limit: int = DEFAULT_LIMIT

    def suggest_by_tags(
        self,
        dishes: Iterable[Dish],
        diet_tags: Iterable[DietTagType],
        exclude_allergens: Iterable[str] = (),
    ) -> list[DishSuggestion]:
        """Return the best scoring dishes that carry none of the allergens."""
        return self._rank(
            dishes, set(diet_tags), list(exclude_allergens), blendable_bonus=True
        )

    def suggest_for_resident(
        self, dishes: Iterable[Dish], resident: Resident, on: date
    ) -> list[DishSuggestion]:
        """Rank dishes for a resident's active tags and allergies."""
        tags = {tag.tag_type for tag in resident.active_tags(on)}
        allergens = [allergy.substance for allergy in resident.allergies]
        return self._rank(dishes, tags, allergens, blendable_bonus=False)

    def _rank(
        self,
        dishes: Iterable[Dish],
        tags: set[DietTagType],
        allergens: list[str],
        *,
        blendable_bonus: bool,
    ) -> list[DishSuggestion]:
        scored = [
            _score(dish, tags, blendable_bonus=blendable_bonus)
            for dish in dishes
            if not _has_allergen(dish, allergens)
        ]
        # sorted() is stable, so ties keep the store's order.
        ranked = sorted(scored, key=lambda suggestion: suggestion.score, reverse=True)
        return ranked[: self.limit]


def _has_allergen(dish: Dish, allergens: list[str]) -> bool:
    return any(
        allergen_matches(allergen, flag)
        for allergen in allergens
        for flag in dish.dietary_flags
    )


def _score(  # noqa: PLR0912
    dish: Dish, tags: set[DietTagType], *, blendable_bonus: bool
) -> DishSuggestion:
    score = 0
    reasons: list[str] = []

    if DietTagType.LOW_SUGAR in tags:
        if dish.sugar_adjustable:
            score += 10
            reasons.append("Sugar adjustable")
        if any(dish.has_flag(flag) for flag in LOW_SUGAR_FLAGS):
            score += 20
            reasons.append("Diabetic-friendly")

    if DietTagType.LOW_SODIUM in tags:
        sodium = dish.sodium_level
        if sodium is not None and sodium < LOW_SODIUM_THRESHOLD_MG:
            score += 15
            reasons.append("Low sodium")
        if dish.has_flag("low_sodium"):
            score += 20
            reasons.append("Low sodium certified")

    if DietTagType.SOFT_TEXTURE in tags:
        if dish.texture != DishTexture.REGULAR:
            score += 15
            reasons.append("Soft texture")
        if blendable_bonus and dish.is_blendable:
            score += 10
            reasons.append("Blendable")

    if DietTagType.GLUTEN_FREE in tags:
        if dish.has_flag(GLUTEN_FREE_FLAG):
            score += 20
            reasons.append("Gluten-free")
        else:
            score += MISSING_FLAG_PENALTY

    if DietTagType.LACTOSE_FREE in tags:
        if dish.has_flag(LACTOSE_FREE_FLAG):
            score += 20
            reasons.append("Lactose-free")
        else:
            score += MISSING_FLAG_PENALTY

    return DishSuggestion(dish=dish, score=score + BASE_SCORE, reasons=reasons)
