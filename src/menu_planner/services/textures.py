"""Texture conversion of dishes into Minced and Pureed variants."""

import logging
import re
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID, uuid4

from menu_planner.domain.dishes import Dish, DishTexture
from menu_planner.domain.residents import Resident, Severity
from menu_planner.domain.variants import ResidentTextureRequirement, VariantResult

DYSPHAGIA_MARKERS = ("dysphagia", "khó nuốt")

_TEXTURE_SUFFIX = re.compile(r"\s*\((Regular|Minced|Pureed)\)", re.IGNORECASE)

_logger = logging.getLogger(__name__)


class DishProvider(Protocol):
    """Read/create interface over the dish store."""

    def get(self, dish_id: UUID) -> Dish | None:
        """Return a dish with its ingredients, if present."""

    def find_variant(
        self, base_name: str, texture: DishTexture, institution_id: UUID | None
    ) -> Dish | None:
        """Return the existing texture variant of a base dish, if any."""

    def create(self, dish: Dish) -> Dish:
        """Persist a new dish and return the stored copy."""

    def list_for_institution(self, institution_id: UUID) -> list[Dish]:
        """Return every dish of an institution."""


def variant_name(base_name: str, texture: DishTexture) -> str:
    """Name given to the texture variant of a dish."""
    return f"{base_name} ({texture})"


def base_dish_name(name: str) -> str:
    """Strip a texture suffix from a dish name."""
    return _TEXTURE_SUFFIX.sub("", name).strip()


def is_legal_transition(source: DishTexture, target: DishTexture) -> bool:
    """Regular -> Minced and Minced -> Pureed are the only single steps."""
    return target.rank == source.rank + 1


def dysphagia_texture(resident: Resident) -> DishTexture:
    """Texture a resident needs based on active dysphagia conditions.

    Any severe condition asks for Pureed, whatever order the records are in.
    """
    needs = [
        DishTexture.PUREED
        if disease.severity == Severity.SEVERE
        else DishTexture.MINCED
        for disease in resident.chronic_diseases
        if disease.is_active
        and any(marker in disease.name.lower() for marker in DYSPHAGIA_MARKERS)
    ]
    return max(needs, key=lambda texture: texture.rank, default=DishTexture.REGULAR)


@dataclass
class TextureVariantResolver:
    """Finds or creates texture variants following the texture state machine.

    Variant creation is a read-then-create against the dish store; callers
    that resolve the same dish concurrently must serialize on the variant
    name or rely on an upserting store.
    """

    dish_provider: DishProvider

    def resolve(self, dish: Dish, target: DishTexture) -> VariantResult:
        """Return the dish to serve for ``target``, creating it if needed."""
        original = dish.texture
        if original == DishTexture.PUREED and target != DishTexture.PUREED:
            return _failure(
                original, target, "Pureed dishes cannot be converted to other textures"
            )
        if original == target:
            return VariantResult(
                success=True,
                original_texture=original,
                target_texture=target,
                variant_dish_id=dish.id,
            )
        if not dish.is_blendable:
            return _failure(
                original,
                target,
                f'Dish "{dish.name}" is not blendable and cannot be converted '
                f"from {original} to {target}",
            )
        if not is_legal_transition(original, target):
            if target.rank > original.rank:
                message = (
                    f"Cannot convert {original} directly to {target}. "
                    f"Must convert to {DishTexture.MINCED} first."
                )
            else:
                message = f"Cannot convert {original} back to {target}"
            return _failure(original, target, message)

        existing = self.dish_provider.find_variant(
            dish.name, target, dish.institution_id
        )
        if existing is not None:
            variant_id = existing.id
        else:
            created = self.dish_provider.create(_derive_variant(dish, target))
            variant_id = created.id
            _logger.info(
                "Created %s variant %s for dish %s", target, variant_id, dish.id
            )
        return VariantResult(
            success=True,
            original_texture=original,
            target_texture=target,
            variant_dish_id=variant_id,
        )

    def check_group_requirements(
        self, dish: Dish, residents: list[Resident]
    ) -> list[ResidentTextureRequirement]:
        """Resolve the variant each resident needs because of dysphagia."""
        results = []
        for resident in residents:
            required = dysphagia_texture(resident)
            results.append(
                ResidentTextureRequirement(
                    resident_id=resident.id,
                    resident_name=resident.name,
                    required_texture=required,
                    variant_result=self.resolve(dish, required),
                )
            )
        return results

    def variant_family(self, dish: Dish) -> list[Dish]:
        """Return the base dish and all its texture variants."""
        if dish.institution_id is None:
            return [dish]
        base = base_dish_name(dish.name)
        return [
            candidate
            for candidate in self.dish_provider.list_for_institution(
                dish.institution_id
            )
            if base_dish_name(candidate.name) == base
        ]


def _failure(original: DishTexture, target: DishTexture, error: str) -> VariantResult:
    return VariantResult(
        success=False,
        original_texture=original,
        target_texture=target,
        error=error,
    )


def _derive_variant(dish: Dish, target: DishTexture) -> Dish:
    # Variants are terminal: they are never converted again.
    return replace(
        dish,
        id=uuid4(),
        name=variant_name(dish.name, target),
        texture=target,
        is_blendable=False,
    )
