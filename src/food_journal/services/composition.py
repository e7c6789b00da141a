"""Nutrient scaling, recipe aggregation and density derivation."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from food_journal.domain.errors import DanglingReference
from food_journal.domain.items import Component, Density, Item, round_half_up

FALLBACK_COOKED_WEIGHT = 100.0


@dataclass(frozen=True)
class ScaledNutrients:
    """Nutrients for a concrete amount of an item."""

    calories: int
    protein_g: float
    fluid_ml: float


@dataclass(frozen=True)
class CompositionTotals:
    """Raw totals of a component list."""

    calories: int
    protein_g: float
    fluid_ml: float
    weight: float
    missing: tuple[str, ...] = ()

    def dangling(self, recipe_id: str | None) -> list[DanglingReference]:
        """Return the unresolved components as dangling references."""
        return [DanglingReference(recipe_id, item_id) for item_id in self.missing]


def scale_nutrients(density: Density, amount: float) -> ScaledNutrients:
    """Scale a per-100-unit density to ``amount`` units."""
    if amount <= 0:
        return ScaledNutrients(calories=0, protein_g=0.0, fluid_ml=0.0)
    ratio = amount / 100
    return ScaledNutrients(
        calories=round_half_up(density.calories * ratio),
        protein_g=density.protein_g * ratio,
        fluid_ml=density.fluid_ml * ratio,
    )


def aggregate_components(
    components: Iterable[Component], lookup: Callable[[str], Item | None]
) -> CompositionTotals:
    """Sum the scaled contributions of each resolvable component.

    Nested recipes contribute through their stored density, so this never
    recurses into sub-components.
    """
    calories = 0
    protein_g = 0.0
    fluid_ml = 0.0
    weight = 0.0
    missing: list[str] = []
    for component in components:
        item = lookup(component.item_id)
        if item is None:
            missing.append(component.item_id)
            continue
        scaled = scale_nutrients(item.density, component.amount)
        calories += scaled.calories
        protein_g += scaled.protein_g
        fluid_ml += scaled.fluid_ml
        weight += component.amount
    return CompositionTotals(
        calories=calories,
        protein_g=protein_g,
        fluid_ml=fluid_ml,
        weight=weight,
        missing=tuple(missing),
    )


def cooked_weight(totals: CompositionTotals, coefficient: float | None) -> float:
    """Return the raw weight scaled by the cooked-weight coefficient."""
    return totals.weight * (coefficient if coefficient else 1.0)


def derive_density(
    totals: CompositionTotals, coefficient: float | None = 1.0
) -> Density:
    """Convert raw totals into a per-100-unit density of the cooked dish."""
    return density_for_weight(totals, cooked_weight(totals, coefficient))


def density_for_weight(totals: CompositionTotals, weight: float | None) -> Density:
    """Normalize totals to 100 units of a dish weighing ``weight``."""
    divisor = (weight or FALLBACK_COOKED_WEIGHT) / 100
    return Density(
        calories=round_half_up(totals.calories / divisor),
        protein_g=round1(totals.protein_g / divisor),
        fluid_ml=round1(totals.fluid_ml / divisor),
    )


def round1(value: float) -> float:
    """Round to one decimal place with halves going up."""
    return float(Decimal(repr(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
