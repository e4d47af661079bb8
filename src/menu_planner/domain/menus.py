"""Domain models for weekly menus."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field

from menu_planner.domain.dishes import Dish, DishTexture

DAYS_IN_WEEK = 7
DAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


class MealSlot(StrEnum):
    """Meal slots served each day, in serving order."""

    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    AFTERNOON = "Afternoon"
    DINNER = "Dinner"


@dataclass(frozen=True)
class MenuItem:
    """A dish served in a meal slot on a day of the week."""

    dish: Dish
    day_of_week: int
    meal_slot: MealSlot
    servings: int = 0
    texture_variant: DishTexture | None = None

    @property
    def dish_id(self) -> UUID:
        return self.dish.id


@dataclass(frozen=True)
class WeeklyMenu:
    """A week of menu items for an institution."""

    id: UUID | None
    institution_id: UUID
    week_start_date: date
    week_end_date: date
    items: tuple[MenuItem, ...] = ()

    def items_for(self, day_of_week: int, meal_slot: MealSlot) -> list[MenuItem]:
        """Return the items served in one day/slot cell."""
        return [
            item
            for item in self.items
            if item.day_of_week == day_of_week and item.meal_slot == meal_slot
        ]


class MenuItemInput(BaseModel):
    """Incoming menu item before dishes are resolved and servings computed."""

    dish_id: UUID
    day_of_week: int = Field(ge=0, le=DAYS_IN_WEEK - 1)
    meal_slot: MealSlot
    servings: int = Field(default=0, ge=0)
    texture_variant: DishTexture | None = None
