"""Per-resident evaluation of a dish against allergies and diet tags."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from menu_planner.domain.dishes import Dish, DishTexture
from menu_planner.domain.residents import DietTagType, Resident
from menu_planner.services.textures import dysphagia_texture

LOW_SODIUM_THRESHOLD_MG = 500
LOW_SUGAR_FLAGS = ("diabetic", "low_sugar")
GLUTEN_FREE_FLAG = "gluten_free"
LACTOSE_FREE_FLAG = "lactose_free"


@dataclass(frozen=True)
class AllergyConflict:
    """Allergens of a resident found in a dish."""

    substances: list[str]
    matched_flags: list[str]
    excluded_ingredient_ids: list[UUID]

    @property
    def primary_substance(self) -> str:
        return self.substances[0]


@dataclass(frozen=True)
class Classification:
    """How a dish fits one resident on an evaluation date."""

    allergy_conflict: AllergyConflict | None
    soft_texture_required: bool
    required_texture: DishTexture | None
    has_low_sugar_tag: bool
    has_low_sodium_tag: bool
    low_sugar_violation: bool
    low_sodium_violation: bool
    gluten_violation: bool
    lactose_violation: bool
    active_tag_names: list[str]

    @property
    def is_unsuitable(self) -> bool:
        """Sugar or sodium rules exclude the dish for this resident."""
        return self.low_sugar_violation or self.low_sodium_violation


def allergen_matches(substance: str, token: str) -> bool:
    """Case-insensitive substring match in either direction."""
    left = substance.strip().lower()
    right = token.strip().lower()
    if not left or not right:
        return False
    return left in right or right in left


@dataclass
class DietConstraintClassifier:
    """Evaluates allergy and diet-tag rules for a resident and a dish."""

    def classify(self, dish: Dish, resident: Resident, on: date) -> Classification:
        """Classify a dish for a resident using tags active on ``on``."""
        active_tags = resident.active_tags(on)
        tag_types = {tag.tag_type for tag in active_tags}
        has_low_sugar = DietTagType.LOW_SUGAR in tag_types
        has_low_sodium = DietTagType.LOW_SODIUM in tag_types
        required_texture = self.required_texture(dish, resident, on)
        return Classification(
            allergy_conflict=self.find_allergy_conflict(dish, resident),
            soft_texture_required=required_texture is not None,
            required_texture=required_texture,
            has_low_sugar_tag=has_low_sugar,
            has_low_sodium_tag=has_low_sodium,
            low_sugar_violation=has_low_sugar and not _suits_low_sugar(dish),
            low_sodium_violation=has_low_sodium and not _suits_low_sodium(dish),
            gluten_violation=DietTagType.GLUTEN_FREE in tag_types
            and not dish.has_flag(GLUTEN_FREE_FLAG),
            lactose_violation=DietTagType.LACTOSE_FREE in tag_types
            and not dish.has_flag(LACTOSE_FREE_FLAG),
            active_tag_names=[tag.display_name for tag in active_tags],
        )

    def find_allergy_conflict(
        self, dish: Dish, resident: Resident
    ) -> AllergyConflict | None:
        """Match allergies against dish flags and ingredient names."""
        substances: list[str] = []
        matched_flags: list[str] = []
        excluded_ids: list[UUID] = []
        for allergy in resident.allergies:
            matched = False
            for flag in dish.dietary_flags:
                if allergen_matches(allergy.substance, flag):
                    matched = True
                    if flag not in matched_flags:
                        matched_flags.append(flag)
            for dish_ingredient in dish.ingredients:
                if allergen_matches(allergy.substance, dish_ingredient.ingredient.name):
                    matched = True
                    if dish_ingredient.ingredient_id not in excluded_ids:
                        excluded_ids.append(dish_ingredient.ingredient_id)
            if matched and allergy.substance not in substances:
                substances.append(allergy.substance)
        if not substances:
            return None
        return AllergyConflict(
            substances=substances,
            matched_flags=matched_flags,
            excluded_ingredient_ids=excluded_ids,
        )

    def required_texture(
        self, dish: Dish, resident: Resident, on: date
    ) -> DishTexture | None:
        """Return the softened texture a resident needs, or None.

        An active SoftTexture tag asks for Minced, dysphagia may ask for more;
        the dish's own texture is never downgraded.
        """
        need = dysphagia_texture(resident)
        if resident.has_active_tag(DietTagType.SOFT_TEXTURE, on):
            need = max(need, DishTexture.MINCED, key=lambda texture: texture.rank)
        if need == DishTexture.REGULAR:
            return None
        return max(need, dish.texture, key=lambda texture: texture.rank)


def _suits_low_sugar(dish: Dish) -> bool:
    return dish.sugar_adjustable or any(dish.has_flag(f) for f in LOW_SUGAR_FLAGS)


def _suits_low_sodium(dish: Dish) -> bool:
    return dish.sodium_level is None or dish.sodium_level <= LOW_SODIUM_THRESHOLD_MG
