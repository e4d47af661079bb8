"""Tests for the menu planning facade."""

from datetime import date
from uuid import uuid4

import pytest
from pydantic import ValidationError

from menu_planner.domain.dishes import DishTexture
from menu_planner.domain.errors import (
    DishNotFound,
    MenuNotFound,
    NotFoundError,
    ResidentNotFound,
)
from menu_planner.domain.menus import MealSlot, MenuItem, MenuItemInput, WeeklyMenu
from menu_planner.domain.residents import DietTagType, Severity
from tests.conftest import (
    EVALUATED_ON,
    INSTITUTION_ID,
    make_dish,
    make_ingredient,
    make_resident,
)


def _store_menu(menu_provider, *items: MenuItem, institution_id=INSTITUTION_ID):
    menu = WeeklyMenu(
        id=uuid4(),
        institution_id=institution_id,
        week_start_date=EVALUATED_ON,
        week_end_date=date(2026, 3, 8),
        items=items,
    )
    menu_provider.add(menu)
    return menu


def test_missing_dish_raises(planning_service) -> None:
    missing = uuid4()

    with pytest.raises(DishNotFound) as exc_info:
        planning_service.allocate_dish(INSTITUTION_ID, missing, EVALUATED_ON)

    assert exc_info.value.message == f"Dish not found: {missing}"
    assert exc_info.value.error_code == "DishNotFound"
    assert isinstance(exc_info.value, NotFoundError)


def test_missing_menu_raises(planning_service) -> None:
    with pytest.raises(MenuNotFound):
        planning_service.weekly_report(uuid4())


def test_menu_of_other_institution_is_not_found(
    planning_service, menu_provider
) -> None:
    menu = _store_menu(menu_provider, institution_id=uuid4())

    with pytest.raises(MenuNotFound):
        planning_service.menu_servings_breakdown(menu.id, INSTITUTION_ID)


def test_allocate_dish_with_no_residents_is_empty(
    planning_service, dish_provider
) -> None:
    dish = make_dish()
    dish_provider.add(dish)

    breakdown = planning_service.allocate_dish(INSTITUTION_ID, dish.id, EVALUATED_ON)

    assert breakdown.total_servings == 0
    assert breakdown.population == 0


def test_plan_menu_fills_missing_servings(
    planning_service, dish_provider, resident_provider
) -> None:
    congee = make_dish("Congee", calories_per_100g=350)
    salty = make_dish("Salted fish", sodium_level=800, calories_per_100g=300)
    dish_provider.add(congee, salty)
    resident_provider.residents.extend(
        [
            make_resident("A"),
            make_resident("B", tags=(DietTagType.LOW_SODIUM,)),
            make_resident("C"),
        ]
    )

    plan = planning_service.plan_menu(
        INSTITUTION_ID,
        EVALUATED_ON,
        [
            MenuItemInput(
                dish_id=congee.id, day_of_week=0, meal_slot=MealSlot.BREAKFAST
            ),
            {
                "dish_id": str(salty.id),
                "day_of_week": 0,
                "meal_slot": "Lunch",
            },
            {
                "dish_id": str(congee.id),
                "day_of_week": 1,
                "meal_slot": "Dinner",
                "servings": 12,
            },
        ],
    )

    assert [item.servings for item in plan.menu.items] == [3, 2, 12]
    assert plan.auto_calculated == [congee.id, salty.id]
    assert plan.menu.week_end_date == date(2026, 3, 8)
    monday = plan.nutrition_report.daily_summaries[0]
    assert monday.total_calories == 1650


def test_plan_menu_rejects_invalid_items(planning_service) -> None:
    with pytest.raises(ValidationError):
        planning_service.plan_menu(
            INSTITUTION_ID,
            EVALUATED_ON,
            [{"dish_id": str(uuid4()), "day_of_week": 7, "meal_slot": "Lunch"}],
        )


def test_menu_servings_breakdown_totals(
    planning_service, dish_provider, resident_provider, menu_provider
) -> None:
    dish = make_dish("Peanut noodles", dietary_flags=("peanut",), calories_per_100g=400)
    dish_provider.add(dish)
    resident_provider.residents.extend(
        [
            make_resident("A"),
            make_resident("B", allergies=("peanut",)),
            make_resident("C", tags=(DietTagType.SOFT_TEXTURE,)),
        ]
    )
    menu = _store_menu(
        menu_provider,
        MenuItem(dish=dish, day_of_week=0, meal_slot=MealSlot.LUNCH, servings=3),
        MenuItem(dish=dish, day_of_week=1, meal_slot=MealSlot.LUNCH, servings=3),
    )

    result = planning_service.menu_servings_breakdown(menu.id, INSTITUTION_ID)

    assert result.total_residents == 3
    assert len(result.dishes) == 2
    assert result.summary.regular == 2
    assert result.summary.allergy_safe == 2
    assert result.summary.minced == 2
    assert result.summary.nutrition.calories == 2400


def test_resolve_variant_through_service(planning_service, dish_provider) -> None:
    dish = make_dish("Braised pork")
    dish_provider.add(dish)

    result = planning_service.resolve_variant(dish.id, DishTexture.MINCED)

    assert result.success
    assert dish_provider.get(result.variant_dish_id).name == "Braised pork (Minced)"


def test_check_group_requirements_rejects_unknown_resident(
    planning_service, dish_provider, resident_provider
) -> None:
    dish = make_dish()
    dish_provider.add(dish)
    resident = make_resident(diseases=(("Dysphagia", Severity.MILD),))
    resident_provider.residents.append(resident)

    results = planning_service.check_group_requirements(
        dish.id, [resident.id], INSTITUTION_ID, EVALUATED_ON
    )
    assert results[0].required_texture == DishTexture.MINCED

    with pytest.raises(ResidentNotFound):
        planning_service.check_group_requirements(
            dish.id, [uuid4()], INSTITUTION_ID, EVALUATED_ON
        )


def test_production_instructions_group_by_texture(
    planning_service, dish_provider, resident_provider, menu_provider
) -> None:
    dish = make_dish("Steamed egg", dietary_flags=("egg",))
    dish_provider.add(dish)
    resident_provider.residents.extend(
        [
            make_resident("A"),
            make_resident("B"),
            make_resident("C", tags=(DietTagType.SOFT_TEXTURE,)),
            make_resident("D", diseases=(("Dysphagia", Severity.SEVERE),)),
            make_resident("E", allergies=("egg",)),
        ]
    )
    menu = _store_menu(
        menu_provider,
        MenuItem(dish=dish, day_of_week=2, meal_slot=MealSlot.DINNER, servings=5),
    )

    instructions = planning_service.production_instructions(
        menu.id, 2, MealSlot.DINNER, INSTITUTION_ID
    )

    assert [(i.texture, i.servings) for i in instructions] == [
        (DishTexture.REGULAR, 2),
        (DishTexture.MINCED, 1),
        (DishTexture.PUREED, 1),
    ]
    assert instructions[0].instruction == "2 x Steamed egg"
    assert instructions[1].instruction == "1 x Steamed egg, Minced for Soft Texture"
    assert instructions[1].diet_tags == ["SoftTexture"]


def test_allergy_warnings_count_portions_and_alternatives(
    planning_service, dish_provider, resident_provider
) -> None:
    shrimp = make_ingredient("Shrimp", calories=99, protein_g=24)
    dish = make_dish("Shrimp soup", ingredients=((shrimp, 80),), sodium_level=700)
    safe = make_dish("Tofu soup", dietary_flags=("soy",))
    unsafe = make_dish("Shrimp rolls", dietary_flags=("shrimp",))
    dish_provider.add(dish, safe, unsafe)
    resident_provider.residents.extend(
        [
            make_resident("A", allergies=("shrimp",)),
            make_resident("B", tags=(DietTagType.LOW_SODIUM,)),
            make_resident("C", diseases=(("Dysphagia", Severity.SEVERE),)),
            make_resident("D", tags=(DietTagType.SOFT_TEXTURE,)),
        ]
    )

    warning = planning_service.allergy_warnings(dish.id, INSTITUTION_ID, EVALUATED_ON)

    assert warning.total_affected == 1
    assert warning.affected_residents[0].allergen_substance == "shrimp"
    assert warning.special_portions.allergy_safe == 1
    assert warning.special_portions.low_sodium == 1
    assert warning.special_portions.pureed == 1
    assert warning.special_portions.soft_texture == 1
    assert [a.dish_name for a in warning.suggested_alternatives] == ["Tofu soup"]


def test_suggest_dishes_for_unknown_resident_raises(planning_service) -> None:
    with pytest.raises(ResidentNotFound):
        planning_service.suggest_dishes_for_resident(
            INSTITUTION_ID, uuid4(), EVALUATED_ON
        )


def test_suggest_dishes_for_resident_skips_allergens(
    planning_service, dish_provider, resident_provider
) -> None:
    resident = make_resident(allergies=("peanut",), tags=(DietTagType.LOW_SUGAR,))
    resident_provider.residents.append(resident)
    dish_provider.add(
        make_dish("Peanut candy", dietary_flags=("peanut",), sugar_adjustable=True),
        make_dish("Diabetic pudding", dietary_flags=("diabetic",)),
        make_dish("Plain rice"),
    )

    suggestions = planning_service.suggest_dishes_for_resident(
        INSTITUTION_ID, resident.id, EVALUATED_ON
    )

    assert [s.dish.name for s in suggestions] == ["Diabetic pudding", "Plain rice"]


def test_allergen_tags_are_distinct_and_sorted(
    planning_service, dish_provider, resident_provider
) -> None:
    resident_provider.residents.append(make_resident(allergies=("shrimp", "egg")))
    dish_provider.add(make_dish(dietary_flags=("egg", "gluten_free")))

    assert planning_service.allergen_tags(INSTITUTION_ID) == [
        "egg",
        "gluten_free",
        "shrimp",
    ]


def test_production_instructions_respect_texture_variant(
    planning_service, dish_provider, resident_provider, menu_provider
) -> None:
    dish = make_dish("Braised pork")
    dish_provider.add(dish)
    resident_provider.residents.extend(
        [
            make_resident("A"),
            make_resident("B", diseases=(("Dysphagia", Severity.SEVERE),)),
        ]
    )
    menu = _store_menu(
        menu_provider,
        MenuItem(
            dish=dish,
            day_of_week=0,
            meal_slot=MealSlot.LUNCH,
            servings=2,
            texture_variant=DishTexture.MINCED,
        ),
    )

    instructions = planning_service.production_instructions(
        menu.id, 0, MealSlot.LUNCH, INSTITUTION_ID
    )

    assert [(i.texture, i.servings) for i in instructions] == [
        (DishTexture.MINCED, 1),
        (DishTexture.PUREED, 1),
    ]


def test_allergy_warnings_skip_soft_texture_for_minced_dish(
    planning_service, dish_provider, resident_provider
) -> None:
    dish = make_dish("Minced pork", texture=DishTexture.MINCED)
    dish_provider.add(dish)
    resident_provider.residents.append(
        make_resident("A", tags=(DietTagType.SOFT_TEXTURE,))
    )

    warning = planning_service.allergy_warnings(dish.id, INSTITUTION_ID, EVALUATED_ON)

    assert warning.special_portions.soft_texture == 0
    assert warning.special_portions.pureed == 0
