"""Nutrition lookup domain models."""

from dataclasses import dataclass

from food_journal.domain.items import Density


@dataclass(frozen=True)
class FoodSummary:
    """Summary information about a food from FDC."""

    fdc_id: int
    description: str
    brand_owner: str | None
    data_type: str | None


@dataclass(frozen=True)
class FoodDetails:
    """Full food details with a per-100g density."""

    summary: FoodSummary
    density: Density
    serving_size_g: float | None
