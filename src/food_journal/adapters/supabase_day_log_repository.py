"""Supabase repository for day logs."""

from dataclasses import dataclass
from datetime import date, datetime

from supabase import Client

from food_journal.domain.items import Density, round_half_up, to_float
from food_journal.domain.journal import DayLog, Entry, NutrientSnapshot, NutrientTotals
from food_journal.services.journal import DayLogRepository

DAY_LOGS_TABLE = "day_logs"


@dataclass
class SupabaseDayLogRepository(DayLogRepository):
    """Supabase implementation for day logs; entries are stored as JSON."""

    client: Client

    def get_log(self, day: date) -> DayLog | None:
        """Return the log for a day, if present."""
        response = (
            self.client.table(DAY_LOGS_TABLE)
            .select("*")
            .eq("day", day.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_log(response.data[0])

    def put_log(self, log: DayLog) -> None:
        """Insert or replace a day log."""
        response = (
            self.client.table(DAY_LOGS_TABLE)
            .upsert(_serialize_log(log), on_conflict="day")
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to store day log {log.day.isoformat()}")

    def delete_log(self, day: date) -> None:
        """Delete the log for a day."""
        self.client.table(DAY_LOGS_TABLE).delete().eq("day", day.isoformat()).execute()

    def list_logs(self, limit: int) -> list[DayLog]:
        """Return the most recent logs."""
        response = (
            self.client.table(DAY_LOGS_TABLE)
            .select("*")
            .order("day", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_log(row) for row in response.data or []]


def _serialize_log(log: DayLog) -> dict[str, object]:
    return {
        "day": log.day.isoformat(),
        "entries": [_serialize_entry(entry) for entry in log.entries],
        "finalized": log.finalized,
        "notes": log.notes,
        "totals": _serialize_totals(log.totals) if log.totals else None,
        "category_totals": {
            category: _serialize_totals(totals)
            for category, totals in log.category_totals.items()
        },
        "updated_at": log.updated_at.isoformat() if log.updated_at else None,
    }


def _serialize_entry(entry: Entry) -> dict[str, object]:
    snapshot = entry.snapshot
    return {
        "id": entry.id,
        "item_id": entry.item_id,
        "amount": entry.amount,
        "created_at": entry.created_at.isoformat(),
        "snapshot": {
            "item_id": snapshot.item_id,
            "name": snapshot.name,
            "category": snapshot.category,
            "calories": snapshot.density.calories,
            "protein_g": snapshot.density.protein_g,
            "fluid_ml": snapshot.density.fluid_ml,
            "portion_g": snapshot.portion_g,
        },
    }


def _serialize_totals(totals: NutrientTotals) -> dict[str, float]:
    return {
        "calories": totals.calories,
        "protein_g": totals.protein_g,
        "fluid_ml": totals.fluid_ml,
        "weight": totals.weight,
    }


def _parse_log(row: dict[str, object]) -> DayLog:
    """Parse a day log row into a domain model."""
    raw_totals = row.get("totals")
    raw_categories = row.get("category_totals") or {}
    updated_raw = row.get("updated_at")
    return DayLog(
        day=date.fromisoformat(str(row["day"])),
        entries=tuple(_parse_entry(entry) for entry in row.get("entries") or []),
        finalized=bool(row.get("finalized", False)),
        notes=str(row.get("notes") or ""),
        totals=_parse_totals(raw_totals) if isinstance(raw_totals, dict) else None,
        category_totals={
            str(category): _parse_totals(totals)
            for category, totals in raw_categories.items()
        },
        updated_at=datetime.fromisoformat(updated_raw)
        if isinstance(updated_raw, str) and updated_raw
        else None,
    )


def _parse_entry(raw: dict[str, object]) -> Entry:
    snapshot = raw.get("snapshot") or {}
    portion = snapshot.get("portion_g")
    return Entry(
        id=str(raw["id"]),
        item_id=raw.get("item_id"),
        amount=to_float(raw.get("amount")),
        created_at=datetime.fromisoformat(str(raw["created_at"])),
        snapshot=NutrientSnapshot(
            item_id=snapshot.get("item_id"),
            name=str(snapshot.get("name") or ""),
            category=str(snapshot.get("category") or "snack"),
            density=Density(
                calories=round_half_up(to_float(snapshot.get("calories"))),
                protein_g=to_float(snapshot.get("protein_g")),
                fluid_ml=to_float(snapshot.get("fluid_ml")),
            ),
            portion_g=to_float(portion) if portion is not None else None,
        ),
    )


def _parse_totals(raw: dict[str, object]) -> NutrientTotals:
    return NutrientTotals(
        calories=to_float(raw.get("calories")),
        protein_g=to_float(raw.get("protein_g")),
        fluid_ml=to_float(raw.get("fluid_ml")),
        weight=to_float(raw.get("weight")),
    )
