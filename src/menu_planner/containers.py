"""Dependency container wiring for the engine."""

import logging
from dataclasses import dataclass

from supabase import create_client

from menu_planner.adapters.supabase_dish_repository import SupabaseDishRepository
from menu_planner.adapters.supabase_menu_repository import SupabaseMenuRepository
from menu_planner.adapters.supabase_resident_repository import (
    SupabaseResidentRepository,
)
from menu_planner.app_logging import configure_logging
from menu_planner.config import Settings
from menu_planner.services.classifier import DietConstraintClassifier
from menu_planner.services.diet_tags import DietTagAssigner
from menu_planner.services.nutrition import NutritionCalculator
from menu_planner.services.planner import (
    MenuPlanningService,
    MenuProvider,
    ResidentProvider,
)
from menu_planner.services.servings import ServingsAllocator
from menu_planner.services.textures import DishProvider, TextureVariantResolver
from menu_planner.services.validation import (
    MealSlotValidator,
    WeeklyNutritionAggregator,
)


@dataclass
class EngineContainer:
    """Holds engine-wide dependencies."""

    settings: Settings
    resident_provider: ResidentProvider
    dish_provider: DishProvider
    menu_provider: MenuProvider
    calculator: NutritionCalculator
    classifier: DietConstraintClassifier
    resolver: TextureVariantResolver
    allocator: ServingsAllocator
    validator: MealSlotValidator
    aggregator: WeeklyNutritionAggregator
    planning_service: MenuPlanningService
    diet_tag_assigner: DietTagAssigner


def build_container(settings: Settings | None = None) -> EngineContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(logging.DEBUG if resolved_settings.debug else logging.INFO)
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    resident_provider = SupabaseResidentRepository(supabase_client)
    dish_provider = SupabaseDishRepository(supabase_client)
    menu_provider = SupabaseMenuRepository(supabase_client)
    calculator = NutritionCalculator(debug=resolved_settings.debug)
    classifier = DietConstraintClassifier()
    resolver = TextureVariantResolver(dish_provider)
    allocator = ServingsAllocator(
        classifier=classifier,
        calculator=calculator,
        debug=resolved_settings.debug,
    )
    validator = MealSlotValidator(calculator)
    aggregator = WeeklyNutritionAggregator(validator)
    planning_service = MenuPlanningService(
        resident_provider=resident_provider,
        dish_provider=dish_provider,
        menu_provider=menu_provider,
        allocator=allocator,
        resolver=resolver,
        aggregator=aggregator,
        debug=resolved_settings.debug,
    )
    return EngineContainer(
        settings=resolved_settings,
        resident_provider=resident_provider,
        dish_provider=dish_provider,
        menu_provider=menu_provider,
        calculator=calculator,
        classifier=classifier,
        resolver=resolver,
        allocator=allocator,
        validator=validator,
        aggregator=aggregator,
        planning_service=planning_service,
        diet_tag_assigner=DietTagAssigner(),
    )
