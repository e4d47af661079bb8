"""Texture variant results."""

from dataclasses import dataclass
from uuid import UUID

from menu_planner.domain.dishes import DishTexture


@dataclass(frozen=True)
class VariantResult:
    """Outcome of a texture conversion request."""

    success: bool
    original_texture: DishTexture
    target_texture: DishTexture
    variant_dish_id: UUID | None = None
    error: str | None = None


@dataclass(frozen=True)
class ResidentTextureRequirement:
    """Texture a resident needs for a dish, and how it was resolved."""

    resident_id: UUID
    resident_name: str
    required_texture: DishTexture
    variant_result: VariantResult


@dataclass(frozen=True)
class ProductionInstruction:
    """Kitchen instruction for one dish/texture group."""

    dish_name: str
    texture: DishTexture
    servings: int
    instruction: str
    diet_tags: list[str]
