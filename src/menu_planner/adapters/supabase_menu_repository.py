"""Supabase repository for weekly menus."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from menu_planner.adapters.supabase_dish_repository import DISH_SELECT, parse_dish_row
from menu_planner.domain.dishes import DishTexture
from menu_planner.domain.menus import MealSlot, MenuItem, WeeklyMenu
from menu_planner.services.planner import MenuProvider


@dataclass
class SupabaseMenuRepository(MenuProvider):
    """Supabase-backed weekly menu store."""

    client: Client

    def get(self, menu_id: UUID) -> WeeklyMenu | None:
        """Return a menu with items and dishes, if present."""
        response = (
            self.client.table("weekly_menus")
            .select(f"*, weekly_menu_items(*, dish:dishes({DISH_SELECT}))")
            .eq("id", str(menu_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_menu(response.data[0])


def _parse_menu(row: dict[str, object]) -> WeeklyMenu:
    return WeeklyMenu(
        id=UUID(str(row["id"])),
        institution_id=UUID(str(row["institution_id"])),
        week_start_date=date.fromisoformat(str(row["week_start_date"])[:10]),
        week_end_date=date.fromisoformat(str(row["week_end_date"])[:10]),
        items=tuple(_parse_item(item) for item in row.get("weekly_menu_items") or []),
    )


def _parse_item(row: dict[str, object]) -> MenuItem:
    texture_raw = row.get("texture_variant")
    return MenuItem(
        dish=parse_dish_row(row["dish"]),
        day_of_week=int(row.get("day_of_week", 0)),
        meal_slot=MealSlot(str(row["meal_slot"])),
        servings=int(row.get("servings") or 0),
        texture_variant=DishTexture(str(texture_raw)) if texture_raw else None,
    )
