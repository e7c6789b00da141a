"""Pydantic request models and response serializers for the HTTP API."""

from pydantic import BaseModel, Field

from food_journal.domain.bundles import ImportAction, ImportResult, ResolutionEntry
from food_journal.domain.items import Item, item_to_payload
from food_journal.domain.journal import DayLog, DaySummary, Entry, NutrientTotals
from food_journal.services.graph import PropagationResult


class ItemPayload(BaseModel):
    """Fields accepted when creating or updating a plain item."""

    name: str | None = None
    type: str | None = None
    category: str | None = None
    unit: str | None = None
    calories: float | None = None
    protein_g: float | None = None
    fluid_ml: float | None = None
    default_amount: float | None = None
    portion_g: float | None = None
    short: str | None = None
    prep: str | None = None


class ComponentPayload(BaseModel):
    """One component line of a recipe."""

    item_id: str
    amount: float | None = Field(default=None, ge=0)


class RecipePayload(BaseModel):
    """A recipe saved from a component list and a cooked weight."""

    name: str
    category: str = "lunch"
    short: str = ""
    prep: str = ""
    components: list[ComponentPayload] = Field(default_factory=list)
    cooked_weight: float | None = Field(default=None, gt=0)


class FoodImportPayload(BaseModel):
    """Create an item from a FoodData Central record."""

    fdc_id: int
    category: str = "snack"
    type: str = "ingredient"


class BundleText(BaseModel):
    """Bundle text in any supported encoding."""

    text: str


class ResolutionOverride(BaseModel):
    """Per-item override applied to an analysis before commit."""

    action: ImportAction | None = None
    link: str | None = None


class ImportRequest(BaseModel):
    """Bundle text plus overrides keyed by imported item id."""

    text: str
    resolutions: dict[str, ResolutionOverride] = Field(default_factory=dict)


class EntryPayload(BaseModel):
    """A journal entry, either from a library item or a custom snapshot."""

    item_id: str | None = None
    amount: float | None = Field(default=None, gt=0)
    category: str | None = None
    name: str | None = None
    calories: float | None = None
    protein_g: float | None = None
    fluid_ml: float | None = None


class FinalizePayload(BaseModel):
    """Optional notes stored with a finalized day."""

    notes: str | None = None


def item_out(item: Item) -> dict[str, object]:
    return item_to_payload(item)


def propagation_out(result: PropagationResult) -> dict[str, object]:
    return {
        "changed_id": result.changed_id,
        "updated": result.updated,
        "failures": [
            {"item_id": failure.item_id, "message": failure.message}
            for failure in result.failures
        ],
        "dangling": [
            {"recipe_id": ref.recipe_id, "component_id": ref.component_id}
            for ref in result.dangling
        ],
        "cyclic": result.cyclic,
    }


def resolution_out(entry: ResolutionEntry) -> dict[str, object]:
    return {
        "imported_id": entry.item.id,
        "name": entry.item.name,
        "type": entry.item.type,
        "status": entry.status.value,
        "local_id": entry.local_id,
        "action": entry.action.value,
        "manual_link": entry.manual_link,
    }


def import_result_out(result: ImportResult) -> dict[str, object]:
    return {
        "ok": result.ok,
        "mapping": result.mapping,
        "created": result.created,
        "overwritten": result.overwritten,
        "reused": result.reused,
        "failures": [
            {
                "imported_id": failure.imported_id,
                "local_id": failure.local_id,
                "message": failure.message,
            }
            for failure in result.failures
        ],
    }


def totals_out(totals: NutrientTotals) -> dict[str, float]:
    return {
        "calories": totals.calories,
        "protein_g": round(totals.protein_g, 1),
        "fluid_ml": round(totals.fluid_ml, 1),
        "weight": round(totals.weight, 1),
    }


def entry_out(entry: Entry) -> dict[str, object]:
    snapshot = entry.snapshot
    return {
        "id": entry.id,
        "item_id": entry.item_id,
        "name": snapshot.name,
        "category": snapshot.category,
        "amount": entry.amount,
        "density": {
            "calories": snapshot.density.calories,
            "protein_g": snapshot.density.protein_g,
            "fluid_ml": snapshot.density.fluid_ml,
        },
        "created_at": entry.created_at.isoformat(),
    }


def summary_out(summary: DaySummary) -> dict[str, object]:
    return {
        "day": summary.day.isoformat(),
        "finalized": summary.finalized,
        "overall": totals_out(summary.overall),
        "by_category": {
            category: totals_out(totals)
            for category, totals in summary.by_category.items()
        },
        "entries": [entry_out(entry) for entry in summary.entries],
    }


def day_log_out(log: DayLog) -> dict[str, object]:
    return {
        "day": log.day.isoformat(),
        "finalized": log.finalized,
        "notes": log.notes,
        "totals": totals_out(log.totals) if log.totals else None,
        "entries": [entry_out(entry) for entry in log.entries],
    }
