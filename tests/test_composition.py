"""Tests for nutrient scaling and density derivation."""

from food_journal.domain.errors import DanglingReference
from food_journal.domain.items import Component, Density
from food_journal.services.composition import (
    ScaledNutrients,
    aggregate_components,
    density_for_weight,
    derive_density,
    round1,
    scale_nutrients,
)
from tests.conftest import make_item


def test_scale_by_one_hundred_is_identity() -> None:
    density = Density(calories=250, protein_g=12.5, fluid_ml=40.0)

    assert scale_nutrients(density, 100) == ScaledNutrients(250, 12.5, 40.0)


def test_scale_non_positive_amount_is_zero() -> None:
    density = Density(calories=250, protein_g=12.5, fluid_ml=40.0)

    assert scale_nutrients(density, 0) == ScaledNutrients(0, 0.0, 0.0)
    assert scale_nutrients(density, -20) == ScaledNutrients(0, 0.0, 0.0)


def test_scale_rounds_calories_half_up_and_keeps_fractions() -> None:
    scaled = scale_nutrients(Density(calories=155, protein_g=3.0, fluid_ml=0.0), 50)

    assert scaled.calories == 78
    assert scaled.protein_g == 1.5


def test_aggregate_and_derive_single_component_recipe() -> None:
    oats = make_item("a", calories=100, protein_g=5.0)
    lookup = {oats.id: oats}.get

    totals = aggregate_components([Component("a", 200)], lookup)

    assert (totals.calories, totals.protein_g, totals.fluid_ml, totals.weight) == (
        200,
        10.0,
        0.0,
        200,
    )
    assert derive_density(totals, 1.0) == Density(100, 5.0, 0.0)


def test_aggregate_skips_missing_components() -> None:
    oats = make_item("a", calories=100, protein_g=5.0)

    totals = aggregate_components(
        [Component("a", 100), Component("ghost", 50)], {oats.id: oats}.get
    )

    assert totals.weight == 100
    assert totals.missing == ("ghost",)
    assert totals.dangling("r") == [DanglingReference("r", "ghost")]


def test_derive_density_applies_cooked_weight_coefficient() -> None:
    rice = make_item("rice", calories=360, protein_g=7.0, fluid_ml=0.0)
    water = make_item("water", fluid_ml=100.0, item_type="liquid")
    lookup = {rice.id: rice, water.id: water}.get

    totals = aggregate_components(
        [Component("rice", 100), Component("water", 200)], lookup
    )
    # 300 g raw cooks down to 240 g.
    density = derive_density(totals, 0.8)

    assert density == Density(calories=150, protein_g=2.9, fluid_ml=83.3)


def test_zero_weight_falls_back_to_one_hundred() -> None:
    totals = aggregate_components([], {}.get)

    assert density_for_weight(totals, 0) == Density(0, 0.0, 0.0)
    assert derive_density(totals, None) == Density(0, 0.0, 0.0)


def test_round1_rounds_halves_up() -> None:
    assert round1(0.25) == 0.3
    assert round1(2.45) == 2.5
    assert round1(7.04) == 7.0
