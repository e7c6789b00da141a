"""Daily journal of consumption entries."""

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from typing import Protocol

from food_journal.domain.errors import DayLogFinalizedError, ItemNotFoundError
from food_journal.domain.items import new_item_id
from food_journal.domain.journal import (
    EMPTY_TOTALS,
    DayLog,
    DaySummary,
    Entry,
    NutrientSnapshot,
    NutrientTotals,
)
from food_journal.services.composition import scale_nutrients
from food_journal.services.library import ItemService


def new_entry_id() -> str:
    """Return a fresh journal entry identifier."""
    return new_item_id("e")


class DayLogRepository(Protocol):
    """Persistence interface for day logs."""

    def get_log(self, day: date) -> DayLog | None:
        """Return the log for a day, if present."""

    def put_log(self, log: DayLog) -> None:
        """Insert or replace a day log."""

    def delete_log(self, day: date) -> None:
        """Delete the log for a day."""

    def list_logs(self, limit: int) -> list[DayLog]:
        """Return the most recent logs, newest first."""


@dataclass
class JournalService:
    """Records entries with frozen nutrient snapshots and finalizes days."""

    repository: DayLogRepository
    item_service: ItemService
    id_factory: Callable[[], str] = new_entry_id

    def get_log(self, day: date) -> DayLog:
        """Return the log for a day, or an empty open one."""
        return self.repository.get_log(day) or DayLog(day=day)

    def add_entry(
        self,
        day: date,
        item_id: str,
        amount: float | None = None,
        category: str | None = None,
    ) -> Entry:
        """Record that an amount of a library item was eaten."""
        item = self.item_service.catalog.get(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        snapshot = NutrientSnapshot(
            item_id=item.id,
            name=item.name,
            category=category or item.category,
            density=item.density,
            portion_g=item.portion_g,
        )
        if amount is not None:
            resolved = amount
        else:
            resolved = item.portion_g or item.default_amount or 100.0
        entry = self._append(day, item.id, snapshot, resolved)
        self.item_service.record_use(item.id, today=day)
        return entry

    def add_snapshot_entry(
        self, day: date, snapshot: NutrientSnapshot, amount: float | None = None
    ) -> Entry:
        """Record a one-off entry that is not backed by a library item."""
        resolved = amount if amount is not None else snapshot.portion_g or 100.0
        return self._append(day, snapshot.item_id, snapshot, resolved)

    def delete_entry(self, day: date, entry_id: str) -> DayLog:
        """Remove an entry from an open day."""
        log = self._open_log(day)
        updated = replace(
            log,
            entries=tuple(entry for entry in log.entries if entry.id != entry_id),
            updated_at=datetime.now(tz=UTC),
        )
        self.repository.put_log(updated)
        return updated

    def summarize(self, day: date) -> DaySummary:
        """Return overall and per-category totals computed from snapshots."""
        log = self.get_log(day)
        by_category: dict[str, NutrientTotals] = {}
        for entry in log.entries:
            category = entry.snapshot.category
            by_category[category] = _add(
                by_category.get(category, EMPTY_TOTALS), entry
            )
        overall = EMPTY_TOTALS
        for entry in log.entries:
            overall = _add(overall, entry)
        return DaySummary(
            day=day,
            finalized=log.finalized,
            overall=overall,
            by_category=by_category,
            entries=list(log.entries),
        )

    def finalize_day(self, day: date, notes: str | None = None) -> DayLog:
        """Freeze a day with its totals; later edits require a reset."""
        log = self._open_log(day)
        summary = self.summarize(day)
        finalized = replace(
            log,
            finalized=True,
            notes=notes if notes is not None else log.notes,
            totals=summary.overall,
            category_totals=summary.by_category,
            updated_at=datetime.now(tz=UTC),
        )
        self.repository.put_log(finalized)
        return finalized

    def reset_day(self, day: date) -> None:
        """Drop a day's log entirely, finalized or not."""
        self.repository.delete_log(day)

    def history(self, limit: int = 10) -> list[DayLog]:
        """Return recent day logs."""
        return self.repository.list_logs(limit)

    def _append(
        self, day: date, item_id: str | None, snapshot: NutrientSnapshot, amount: float
    ) -> Entry:
        log = self._open_log(day)
        entry = Entry(
            id=self.id_factory(),
            item_id=item_id,
            snapshot=snapshot,
            amount=amount,
            created_at=datetime.now(tz=UTC),
        )
        self.repository.put_log(
            replace(
                log,
                entries=(*log.entries, entry),
                updated_at=datetime.now(tz=UTC),
            )
        )
        return entry

    def _open_log(self, day: date) -> DayLog:
        log = self.get_log(day)
        if log.finalized:
            raise DayLogFinalizedError(f"Day {day.isoformat()} is finalized")
        return log


def entry_nutrients(entry: Entry) -> NutrientTotals:
    """Scale an entry's frozen snapshot to the eaten amount."""
    scaled = scale_nutrients(entry.snapshot.density, entry.amount)
    return NutrientTotals(
        calories=scaled.calories,
        protein_g=scaled.protein_g,
        fluid_ml=scaled.fluid_ml,
        weight=entry.amount,
    )


def _add(totals: NutrientTotals, entry: Entry) -> NutrientTotals:
    nutrients = entry_nutrients(entry)
    return NutrientTotals(
        calories=totals.calories + nutrients.calories,
        protein_g=totals.protein_g + nutrients.protein_g,
        fluid_ml=totals.fluid_ml + nutrients.fluid_ml,
        weight=totals.weight + nutrients.weight,
    )
