"""Supabase repository for dishes and their ingredients."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from menu_planner.domain.dishes import (
    Dish,
    DishIngredient,
    DishTexture,
    Ingredient,
    IngredientUnit,
    MacroProfile,
)
from menu_planner.services.textures import DishProvider, variant_name

DISH_SELECT = "*, dish_ingredients(amount, ingredient:ingredients(*))"


@dataclass
class SupabaseDishRepository(DishProvider):
    """Supabase-backed dish store."""

    client: Client

    def get(self, dish_id: UUID) -> Dish | None:
        """Return a dish with ingredients, if present."""
        response = (
            self.client.table("dishes")
            .select(DISH_SELECT)
            .eq("id", str(dish_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_dish_row(response.data[0])

    def find_variant(
        self, base_name: str, texture: DishTexture, institution_id: UUID | None
    ) -> Dish | None:
        """Return the variant named after the base dish and texture."""
        query = (
            self.client.table("dishes")
            .select(DISH_SELECT)
            .eq("name", variant_name(base_name, texture))
            .eq("texture", str(texture))
        )
        if institution_id is not None:
            query = query.eq("institution_id", str(institution_id))
        response = query.limit(1).execute()
        if not response.data:
            return None
        return parse_dish_row(response.data[0])

    def create(self, dish: Dish) -> Dish:
        """Insert a dish and its ingredient rows."""
        response = (
            self.client.table("dishes")
            .insert(
                {
                    "id": str(dish.id),
                    "institution_id": str(dish.institution_id)
                    if dish.institution_id
                    else None,
                    "name": dish.name,
                    "texture": str(dish.texture),
                    "is_blendable": dish.is_blendable,
                    "sugar_adjustable": dish.sugar_adjustable,
                    "sodium_level": dish.sodium_level,
                    "dietary_flags": list(dish.dietary_flags),
                    "calories_per_100g": dish.calories_per_100g,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create dish")
        created_id = UUID(response.data[0]["id"])
        if dish.ingredients:
            self.client.table("dish_ingredients").insert(
                [
                    {
                        "dish_id": str(created_id),
                        "ingredient_id": str(item.ingredient_id),
                        "amount": item.amount,
                    }
                    for item in dish.ingredients
                ]
            ).execute()
        created = parse_dish_row(response.data[0])
        return Dish(
            id=created.id,
            name=created.name,
            texture=created.texture,
            is_blendable=created.is_blendable,
            sugar_adjustable=created.sugar_adjustable,
            sodium_level=created.sodium_level,
            dietary_flags=created.dietary_flags,
            ingredients=dish.ingredients,
            calories_per_100g=created.calories_per_100g,
            institution_id=created.institution_id,
        )

    def list_for_institution(self, institution_id: UUID) -> list[Dish]:
        """Return all dishes of an institution ordered by name."""
        response = (
            self.client.table("dishes")
            .select(DISH_SELECT)
            .eq("institution_id", str(institution_id))
            .order("name", desc=False)
            .execute()
        )
        return [parse_dish_row(row) for row in response.data or []]


def parse_dish_row(row: dict[str, object]) -> Dish:
    """Parse a dish row, with embedded ingredient rows when selected."""
    institution_raw = row.get("institution_id")
    sodium_raw = row.get("sodium_level")
    flags_raw = row.get("dietary_flags") or []
    return Dish(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        texture=DishTexture(str(row.get("texture") or DishTexture.REGULAR)),
        is_blendable=bool(row.get("is_blendable", False)),
        sugar_adjustable=bool(row.get("sugar_adjustable", False)),
        sodium_level=float(sodium_raw) if sodium_raw is not None else None,
        dietary_flags=tuple(str(flag) for flag in flags_raw if flag),
        ingredients=tuple(
            _parse_dish_ingredient(item) for item in row.get("dish_ingredients") or []
        ),
        calories_per_100g=float(row.get("calories_per_100g") or 0.0),
        institution_id=UUID(str(institution_raw)) if institution_raw else None,
    )


def _parse_dish_ingredient(row: dict[str, object]) -> DishIngredient:
    ingredient = row.get("ingredient") or {}
    return DishIngredient(
        ingredient=Ingredient(
            id=UUID(str(ingredient["id"])),
            name=str(ingredient.get("name", "")),
            unit=IngredientUnit(str(ingredient.get("unit") or IngredientUnit.GRAM)),
            macros=MacroProfile(
                calories=float(ingredient.get("calories_per_100g") or 0.0),
                protein_g=float(ingredient.get("protein_per_100g") or 0.0),
                fat_g=float(ingredient.get("fat_per_100g") or 0.0),
                carbs_g=float(ingredient.get("carbs_per_100g") or 0.0),
                fiber_g=float(ingredient.get("fiber_per_100g") or 0.0),
                sodium_mg=float(ingredient.get("sodium_per_100g") or 0.0),
            ),
        ),
        amount=float(row.get("amount") or 0.0),
    )
