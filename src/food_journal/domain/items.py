"""Domain models for food items and recipes."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import uuid4

RECIPE = "recipe"
ITEM_TYPES = ("ingredient", "liquid", "snack", RECIPE)


def new_item_id(prefix: str = "m") -> str:
    """Return a fresh opaque item identifier."""
    return f"{prefix}-{uuid4()}"


@dataclass(frozen=True)
class Density:
    """Nutrient values per 100 units of an item."""

    calories: int
    protein_g: float
    fluid_ml: float


@dataclass(frozen=True)
class Component:
    """Reference from a recipe to another item with an amount."""

    item_id: str
    amount: float


@dataclass(frozen=True)
class Item:
    """An ingredient, liquid, snack or recipe with a per-100-unit density."""

    id: str
    name: str
    type: str
    category: str
    density: Density
    unit: str = "g"
    default_amount: float = 100.0
    portion_g: float | None = None
    usage_score: float = 0.0
    last_used_at: datetime | None = None
    components: tuple[Component, ...] = field(default_factory=tuple)
    weight_coefficient: float = 1.0
    short: str = ""
    prep: str = ""
    updated_at: datetime | None = None

    @property
    def is_recipe(self) -> bool:
        return self.type == RECIPE

    def references(self, item_id: str) -> bool:
        """Return whether the component list points at ``item_id``."""
        return any(component.item_id == item_id for component in self.components)


def item_to_payload(item: Item) -> dict[str, object]:
    """Serialize an item into a flat JSON-compatible row."""
    return {
        "id": item.id,
        "name": item.name,
        "type": item.type,
        "category": item.category,
        "unit": item.unit,
        "calories": item.density.calories,
        "protein_g": item.density.protein_g,
        "fluid_ml": item.density.fluid_ml,
        "default_amount": item.default_amount,
        "portion_g": item.portion_g,
        "usage_score": item.usage_score,
        "last_used_at": item.last_used_at.isoformat() if item.last_used_at else None,
        "components": [
            {"item_id": component.item_id, "amount": component.amount}
            for component in item.components
        ],
        "weight_coefficient": item.weight_coefficient,
        "short": item.short,
        "prep": item.prep,
        "updated_at": item.updated_at.isoformat() if item.updated_at else None,
    }


# Keys written by the browser client before rows were snake_cased.
_LEGACY_KEYS = {
    "protein_g": "proteinG",
    "fluid_ml": "fluidMl",
    "default_amount": "defaultAmount",
    "portion_g": "portionG",
    "usage_score": "usageScore",
    "last_used_at": "lastUsed",
    "weight_coefficient": "weightCoefficient",
    "updated_at": "updatedAt",
    "components": "ingredients",
}


def item_from_payload(row: dict[str, object]) -> Item:
    """Parse a stored row or bundle payload into an item."""

    def value(key: str) -> object:
        if key in row:
            return row[key]
        legacy = _LEGACY_KEYS.get(key)
        return row.get(legacy) if legacy else None

    raw_components = value("components")
    components = tuple(
        Component(
            item_id=str(entry.get("item_id") or entry.get("mealId") or ""),
            amount=to_float(entry.get("amount")),
        )
        for entry in (raw_components if isinstance(raw_components, list) else [])
        if isinstance(entry, dict)
    )
    portion = value("portion_g")
    return Item(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        type=str(row.get("type") or "ingredient"),
        category=str(row.get("category") or "snack"),
        unit=str(row.get("unit") or "g"),
        density=Density(
            calories=round_half_up(to_float(row.get("calories"))),
            protein_g=to_float(value("protein_g")),
            fluid_ml=to_float(value("fluid_ml")),
        ),
        default_amount=to_float(value("default_amount")) or 100.0,
        portion_g=to_float(portion) if portion not in (None, "") else None,
        usage_score=to_float(value("usage_score")),
        last_used_at=_parse_datetime(value("last_used_at")),
        components=components,
        weight_coefficient=to_float(value("weight_coefficient")) or 1.0,
        short=str(row.get("short") or ""),
        prep=str(row.get("prep") or ""),
        updated_at=_parse_datetime(value("updated_at")),
    )


def to_float(value: object) -> float:
    """Coerce numbers and numeric strings to float, anything else to zero."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, int | float):
        return float(value) if value == value else 0.0  # NaN
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return int((value + 0.5) // 1)


def _parse_datetime(raw: object) -> datetime | None:
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, str) and raw:
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None
