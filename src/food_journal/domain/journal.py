"""Domain models for the daily consumption journal."""

from dataclasses import dataclass, field
from datetime import date, datetime

from food_journal.domain.items import Density


@dataclass(frozen=True)
class NutrientSnapshot:
    """Per-100-unit values of an item frozen at the moment it was eaten."""

    item_id: str | None
    name: str
    category: str
    density: Density
    portion_g: float | None = None


@dataclass(frozen=True)
class Entry:
    """A single consumption record."""

    id: str
    item_id: str | None
    snapshot: NutrientSnapshot
    amount: float
    created_at: datetime


@dataclass(frozen=True)
class NutrientTotals:
    """Summed nutrients and eaten weight."""

    calories: float
    protein_g: float
    fluid_ml: float
    weight: float


EMPTY_TOTALS = NutrientTotals(calories=0, protein_g=0.0, fluid_ml=0.0, weight=0.0)


@dataclass(frozen=True)
class DayLog:
    """Entries recorded for one calendar day."""

    day: date
    entries: tuple[Entry, ...] = ()
    finalized: bool = False
    notes: str = ""
    totals: NutrientTotals | None = None
    category_totals: dict[str, NutrientTotals] = field(default_factory=dict)
    updated_at: datetime | None = None


@dataclass(frozen=True)
class DaySummary:
    """Overall and per-category totals for a day."""

    day: date
    finalized: bool
    overall: NutrientTotals
    by_category: dict[str, NutrientTotals]
    entries: list[Entry]
