"""Menu planning facade over the resident, dish and menu stores."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from uuid import UUID

from menu_planner.domain.dishes import Dish, DishTexture
from menu_planner.domain.errors import DishNotFound, MenuNotFound, ResidentNotFound
from menu_planner.domain.menus import MealSlot, MenuItem, MenuItemInput, WeeklyMenu
from menu_planner.domain.nutrition import WeeklyMenuNutritionReport
from menu_planner.domain.planning import (
    AffectedResident,
    DishAllergyWarning,
    DishAlternative,
    DishServings,
    DishSuggestion,
    MenuPlan,
    MenuServingsBreakdown,
    ServingsTotals,
    SpecialPortions,
)
from menu_planner.domain.residents import DietTagType, Resident
from menu_planner.domain.servings import ServingsBreakdown
from menu_planner.domain.variants import (
    ProductionInstruction,
    ResidentTextureRequirement,
    VariantResult,
)
from menu_planner.services.classifier import allergen_matches
from menu_planner.services.nutrition import NutritionCalculator
from menu_planner.services.servings import ServingsAllocator
from menu_planner.services.suggestions import DishSuggester
from menu_planner.services.textures import DishProvider, TextureVariantResolver
from menu_planner.services.validation import WeeklyNutritionAggregator, sum_summaries

MAX_ALTERNATIVES = 5

_logger = logging.getLogger(__name__)


class ResidentProvider(Protocol):
    """Read interface over the resident store."""

    def list_for_institution(self, institution_id: UUID, as_of: date) -> list[Resident]:
        """Return residents with allergies, diet tags and diseases populated."""


class MenuProvider(Protocol):
    """Read interface over the weekly menu store."""

    def get(self, menu_id: UUID) -> WeeklyMenu | None:
        """Return a menu with its items and their dishes populated."""


@dataclass
class MenuPlanningService:
    """Loads snapshots from the stores and runs the engine over them."""

    resident_provider: ResidentProvider
    dish_provider: DishProvider
    menu_provider: MenuProvider
    allocator: ServingsAllocator
    resolver: TextureVariantResolver
    aggregator: WeeklyNutritionAggregator
    suggester: DishSuggester = field(default_factory=DishSuggester)
    debug: bool = False

    @property
    def calculator(self) -> NutritionCalculator:
        return self.allocator.calculator

    def plan_menu(
        self,
        institution_id: UUID,
        week_start_date: date,
        items: Iterable[MenuItemInput | dict[str, object]],
    ) -> MenuPlan:
        """Resolve dishes, fill in missing servings and report on nutrition."""
        inputs = [
            item
            if isinstance(item, MenuItemInput)
            else MenuItemInput.model_validate(item)
            for item in items
        ]
        residents = self.resident_provider.list_for_institution(
            institution_id, week_start_date
        )
        menu_items: list[MenuItem] = []
        auto_calculated: list[UUID] = []
        for item in inputs:
            dish = self._get_dish(item.dish_id)
            menu_item = MenuItem(
                dish=dish,
                day_of_week=item.day_of_week,
                meal_slot=item.meal_slot,
                servings=item.servings,
                texture_variant=item.texture_variant,
            )
            if item.servings == 0:
                auto_calculated.append(dish.id)
            servings = self.allocator.resolve_servings(
                menu_item, residents, week_start_date
            )
            menu_items.append(replace(menu_item, servings=servings))
        menu = WeeklyMenu(
            id=None,
            institution_id=institution_id,
            week_start_date=week_start_date,
            week_end_date=week_start_date + timedelta(days=6),
            items=tuple(menu_items),
        )
        if self.debug:
            _logger.info(
                "Planned menu: institution=%s week=%s items=%s auto=%s",
                institution_id,
                week_start_date,
                len(menu_items),
                len(auto_calculated),
            )
        return MenuPlan(
            menu=menu,
            nutrition_report=self.aggregator.build_report(menu),
            auto_calculated=auto_calculated,
        )

    def allocate_dish(
        self, institution_id: UUID, dish_id: UUID, as_of: date | None = None
    ) -> ServingsBreakdown:
        """Return the servings breakdown of a dish for an institution."""
        dish = self._get_dish(dish_id)
        on = as_of or _today()
        residents = self.resident_provider.list_for_institution(institution_id, on)
        return self.allocator.allocate(dish, residents, on)

    def menu_servings_breakdown(
        self, menu_id: UUID, institution_id: UUID
    ) -> MenuServingsBreakdown:
        """Break down every menu item and total the partitions."""
        menu = self._get_menu(menu_id, institution_id)
        on = menu.week_start_date
        residents = self.resident_provider.list_for_institution(institution_id, on)
        dishes = [
            DishServings(
                dish_id=item.dish_id,
                dish_name=item.dish.name,
                meal_slot=item.meal_slot,
                day_of_week=item.day_of_week,
                servings=item.servings,
                breakdown=self.allocator.allocate(item.dish, residents, on),
                nutrition_summary=self.calculator.dish_nutrition(
                    item.dish, item.servings
                ),
            )
            for item in menu.items
        ]
        summary = ServingsTotals(
            regular=sum(d.breakdown.regular_servings for d in dishes),
            allergy_safe=sum(d.breakdown.allergy_safe.count for d in dishes),
            low_sugar=sum(d.breakdown.low_sugar.count for d in dishes),
            low_sodium=sum(d.breakdown.low_sodium.count for d in dishes),
            minced=sum(d.breakdown.minced for d in dishes),
            pureed=sum(d.breakdown.pureed for d in dishes),
            nutrition=sum_summaries(d.nutrition_summary for d in dishes),
        )
        return MenuServingsBreakdown(
            menu_id=menu.id,
            week_start_date=menu.week_start_date,
            total_residents=len(residents),
            dishes=dishes,
            summary=summary,
        )

    def weekly_report(self, menu_id: UUID) -> WeeklyMenuNutritionReport:
        return self.aggregator.build_report(self._get_menu(menu_id))

    def resolve_variant(self, dish_id: UUID, target: DishTexture) -> VariantResult:
        return self.resolver.resolve(self._get_dish(dish_id), target)

    def check_group_requirements(
        self,
        dish_id: UUID,
        resident_ids: Iterable[UUID],
        institution_id: UUID,
        as_of: date | None = None,
    ) -> list[ResidentTextureRequirement]:
        """Resolve texture variants for a selected group of residents."""
        dish = self._get_dish(dish_id)
        population = {
            resident.id: resident
            for resident in self.resident_provider.list_for_institution(
                institution_id, as_of or _today()
            )
        }
        selected = []
        for resident_id in resident_ids:
            if resident_id not in population:
                raise ResidentNotFound(resident_id)
            selected.append(population[resident_id])
        return self.resolver.check_group_requirements(dish, selected)

    def production_instructions(
        self,
        menu_id: UUID,
        day_of_week: int,
        meal_slot: MealSlot,
        institution_id: UUID,
    ) -> list[ProductionInstruction]:
        """Group each dish's servable residents by texture for the kitchen."""
        menu = self._get_menu(menu_id, institution_id)
        on = menu.week_start_date
        residents = self.resident_provider.list_for_institution(institution_id, on)
        classifier = self.allocator.classifier
        instructions = []
        for item in menu.items_for(day_of_week, meal_slot):
            dish = item.dish
            served = item.texture_variant or dish.texture
            groups: dict[DishTexture, tuple[list[UUID], dict[str, None]]] = {
                texture: ([], {}) for texture in DishTexture
            }
            for resident in residents:
                classification = classifier.classify(dish, resident, on)
                if classification.allergy_conflict or classification.is_unsuitable:
                    continue
                texture = max(
                    classification.required_texture or served,
                    served,
                    key=lambda candidate: candidate.rank,
                )
                members, tags = groups[texture]
                members.append(resident.id)
                tags.update(dict.fromkeys(classification.active_tag_names))
            for texture, (members, tags) in groups.items():
                if not members:
                    continue
                instructions.append(
                    ProductionInstruction(
                        dish_name=dish.name,
                        texture=texture,
                        servings=len(members),
                        instruction=_instruction(len(members), dish.name, texture),
                        diet_tags=list(tags),
                    )
                )
        return instructions

    def allergy_warnings(
        self, dish_id: UUID, institution_id: UUID, as_of: date | None = None
    ) -> DishAllergyWarning:
        """Report residents a dish endangers and portions needing care."""
        dish = self._get_dish(dish_id)
        on = as_of or _today()
        residents = self.resident_provider.list_for_institution(institution_id, on)
        classifier = self.allocator.classifier

        affected: list[AffectedResident] = []
        allergy_safe = low_sugar = low_sodium = soft_texture = pureed = 0
        for resident in residents:
            classification = classifier.classify(dish, resident, on)
            conflict = classification.allergy_conflict
            if conflict is not None:
                affected.append(
                    AffectedResident(
                        resident_id=resident.id,
                        resident_name=resident.name,
                        allergen_substance=conflict.primary_substance,
                    )
                )
                allergy_safe += 1
                continue
            if classification.low_sugar_violation:
                low_sugar += 1
            if classification.low_sodium_violation:
                low_sodium += 1
            if classification.required_texture == DishTexture.PUREED:
                pureed += 1
            elif classification.required_texture not in (None, dish.texture):
                soft_texture += 1

        substances = [entry.allergen_substance for entry in affected]
        alternatives = [
            DishAlternative(
                dish_id=candidate.id,
                dish_name=candidate.name,
                reason="Allergy-safe alternative",
            )
            for candidate in self._institution_dishes(dish, institution_id)
            if candidate.id != dish.id
            and not any(
                allergen_matches(substance, flag)
                for substance in substances
                for flag in candidate.dietary_flags
            )
        ][:MAX_ALTERNATIVES]

        return DishAllergyWarning(
            dish_id=dish.id,
            dish_name=dish.name,
            affected_residents=affected,
            special_portions=SpecialPortions(
                allergy_safe=allergy_safe,
                low_sugar=low_sugar,
                low_sodium=low_sodium,
                soft_texture=soft_texture,
                pureed=pureed,
            ),
            suggested_alternatives=alternatives,
        )

    def suggest_dishes_for_resident(
        self, institution_id: UUID, resident_id: UUID, as_of: date | None = None
    ) -> list[DishSuggestion]:
        on = as_of or _today()
        residents = self.resident_provider.list_for_institution(institution_id, on)
        resident = next((r for r in residents if r.id == resident_id), None)
        if resident is None:
            raise ResidentNotFound(resident_id)
        dishes = self.dish_provider.list_for_institution(institution_id)
        return self.suggester.suggest_for_resident(dishes, resident, on)

    def suggest_dishes_by_tags(
        self,
        institution_id: UUID,
        diet_tags: Iterable[DietTagType],
        exclude_allergens: Iterable[str] = (),
    ) -> list[DishSuggestion]:
        dishes = self.dish_provider.list_for_institution(institution_id)
        return self.suggester.suggest_by_tags(dishes, diet_tags, exclude_allergens)

    def allergen_tags(self, institution_id: UUID) -> list[str]:
        """Distinct allergy substances and dish flags, sorted."""
        tags: set[str] = set()
        for resident in self.resident_provider.list_for_institution(
            institution_id, _today()
        ):
            tags.update(a.substance for a in resident.allergies if a.substance)
        for dish in self.dish_provider.list_for_institution(institution_id):
            tags.update(flag for flag in dish.dietary_flags if flag)
        return sorted(tags)

    def _get_dish(self, dish_id: UUID) -> Dish:
        dish = self.dish_provider.get(dish_id)
        if dish is None:
            raise DishNotFound(dish_id)
        return dish

    def _get_menu(
        self, menu_id: UUID, institution_id: UUID | None = None
    ) -> WeeklyMenu:
        menu = self.menu_provider.get(menu_id)
        if menu is None:
            raise MenuNotFound(menu_id)
        if institution_id is not None and menu.institution_id != institution_id:
            # Menus of other institutions are reported as missing.
            raise MenuNotFound(menu_id)
        return menu

    def _institution_dishes(self, dish: Dish, institution_id: UUID) -> list[Dish]:
        return self.dish_provider.list_for_institution(
            dish.institution_id or institution_id
        )


def _instruction(servings: int, dish_name: str, texture: DishTexture) -> str:
    if texture == DishTexture.REGULAR:
        return f"{servings} x {dish_name}"
    return f"{servings} x {dish_name}, {texture} for Soft Texture"


def _today() -> date:
    return datetime.now(tz=UTC).date()
