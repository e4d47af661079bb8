"""Tests for texture variant resolution."""

from menu_planner.domain.dishes import DishTexture
from menu_planner.domain.residents import Severity
from menu_planner.services.textures import (
    TextureVariantResolver,
    base_dish_name,
    dysphagia_texture,
    is_legal_transition,
)
from tests.conftest import InMemoryDishProvider, make_dish, make_resident


def test_resolve_same_texture_is_noop() -> None:
    provider = InMemoryDishProvider()
    resolver = TextureVariantResolver(provider)
    for texture in DishTexture:
        dish = make_dish(texture=texture, is_blendable=False)

        result = resolver.resolve(dish, texture)

        assert result.success
        assert result.variant_dish_id == dish.id
    assert provider.created == []


def test_resolve_pureed_never_converts() -> None:
    resolver = TextureVariantResolver(InMemoryDishProvider())
    dish = make_dish(texture=DishTexture.PUREED, is_blendable=True)

    for target in (DishTexture.REGULAR, DishTexture.MINCED):
        result = resolver.resolve(dish, target)

        assert not result.success
        assert result.error == "Pureed dishes cannot be converted to other textures"


def test_resolve_regular_to_pureed_requires_minced_step() -> None:
    resolver = TextureVariantResolver(InMemoryDishProvider())

    result = resolver.resolve(make_dish(), DishTexture.PUREED)

    assert not result.success
    assert result.error == (
        "Cannot convert Regular directly to Pureed. Must convert to Minced first."
    )


def test_resolve_minced_never_reverts() -> None:
    resolver = TextureVariantResolver(InMemoryDishProvider())
    dish = make_dish(texture=DishTexture.MINCED)

    result = resolver.resolve(dish, DishTexture.REGULAR)

    assert not result.success
    assert result.error == "Cannot convert Minced back to Regular"


def test_resolve_rejects_non_blendable_dish() -> None:
    resolver = TextureVariantResolver(InMemoryDishProvider())
    dish = make_dish("Fried fish", is_blendable=False)

    result = resolver.resolve(dish, DishTexture.MINCED)

    assert not result.success
    assert result.error == (
        'Dish "Fried fish" is not blendable and cannot be converted '
        "from Regular to Minced"
    )


def test_resolve_creates_variant_once() -> None:
    provider = InMemoryDishProvider()
    resolver = TextureVariantResolver(provider)
    dish = make_dish("Braised pork")
    provider.add(dish)

    first = resolver.resolve(dish, DishTexture.MINCED)
    second = resolver.resolve(dish, DishTexture.MINCED)

    assert first.success
    assert first.variant_dish_id == second.variant_dish_id
    assert first.variant_dish_id != dish.id
    assert len(provider.created) == 1
    variant = provider.created[0]
    assert variant.name == "Braised pork (Minced)"
    assert variant.texture == DishTexture.MINCED
    assert not variant.is_blendable
    assert variant.ingredients == dish.ingredients


def test_resolve_minced_to_pureed_creates_variant() -> None:
    provider = InMemoryDishProvider()
    resolver = TextureVariantResolver(provider)
    dish = make_dish("Fish porridge", texture=DishTexture.MINCED)

    result = resolver.resolve(dish, DishTexture.PUREED)

    assert result.success
    assert provider.created[0].name == "Fish porridge (Pureed)"


def test_check_group_requirements_uses_dysphagia_severity() -> None:
    provider = InMemoryDishProvider()
    resolver = TextureVariantResolver(provider)
    dish = make_dish("Steamed egg")
    severe = make_resident("A", diseases=(("Dysphagia", Severity.SEVERE),))
    mild = make_resident("B", diseases=(("khó nuốt nhẹ", Severity.MILD),))
    healthy = make_resident("C")

    results = resolver.check_group_requirements(dish, [severe, mild, healthy])

    assert [r.required_texture for r in results] == [
        DishTexture.PUREED,
        DishTexture.MINCED,
        DishTexture.REGULAR,
    ]
    assert not results[0].variant_result.success
    assert results[1].variant_result.success
    assert results[2].variant_result.variant_dish_id == dish.id


def test_variant_family_groups_base_and_variants() -> None:
    provider = InMemoryDishProvider()
    resolver = TextureVariantResolver(provider)
    dish = make_dish("Braised pork")
    other = make_dish("Tofu soup")
    provider.add(dish, other)
    resolver.resolve(dish, DishTexture.MINCED)

    family = resolver.variant_family(dish)

    assert {d.name for d in family} == {"Braised pork", "Braised pork (Minced)"}


def test_texture_helpers() -> None:
    assert is_legal_transition(DishTexture.REGULAR, DishTexture.MINCED)
    assert is_legal_transition(DishTexture.MINCED, DishTexture.PUREED)
    assert not is_legal_transition(DishTexture.REGULAR, DishTexture.PUREED)
    assert not is_legal_transition(DishTexture.MINCED, DishTexture.REGULAR)
    assert base_dish_name("Braised pork (Minced)") == "Braised pork"
    assert dysphagia_texture(make_resident()) == DishTexture.REGULAR


def test_dysphagia_texture_prefers_severe_condition_in_any_order() -> None:
    resident = make_resident(
        diseases=(
            ("Dysphagia (mild episode)", Severity.MILD),
            ("Dysphagia", Severity.SEVERE),
        )
    )

    assert dysphagia_texture(resident) == DishTexture.PUREED
