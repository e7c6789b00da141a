"""Daily journal endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status

from food_journal.api.auth import get_container, require_token
from food_journal.api.schemas import (
    EntryPayload,
    FinalizePayload,
    day_log_out,
    entry_out,
    summary_out,
)
from food_journal.containers import AppContainer
from food_journal.domain.items import Density, round_half_up
from food_journal.domain.journal import NutrientSnapshot

router = APIRouter(
    prefix="/journal", tags=["journal"], dependencies=[Depends(require_token)]
)


@router.get("")
async def history(
    limit: int = 10, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Return recent day logs."""
    logs = container.journal_service.history(limit)
    return {"days": [day_log_out(log) for log in logs]}


@router.get("/{day}")
async def day_summary(
    day: date, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Return a day's entries with overall and per-category totals."""
    return summary_out(container.journal_service.summarize(day))


@router.post("/{day}/entries", status_code=status.HTTP_201_CREATED)
async def add_entry(
    day: date,
    payload: EntryPayload,
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Record an entry from a library item or a custom snapshot."""
    journal = container.journal_service
    if payload.item_id:
        entry = journal.add_entry(
            day, payload.item_id, amount=payload.amount, category=payload.category
        )
        return entry_out(entry)
    if not payload.name:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="item_id or name is required",
        )
    snapshot = NutrientSnapshot(
        item_id=None,
        name=payload.name,
        category=payload.category or "snack",
        density=Density(
            calories=round_half_up(payload.calories or 0),
            protein_g=payload.protein_g or 0.0,
            fluid_ml=payload.fluid_ml or 0.0,
        ),
    )
    return entry_out(journal.add_snapshot_entry(day, snapshot, payload.amount))


@router.delete("/{day}/entries/{entry_id}")
async def delete_entry(
    day: date, entry_id: str, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Remove an entry from an open day."""
    return day_log_out(container.journal_service.delete_entry(day, entry_id))


@router.post("/{day}/finalize")
async def finalize_day(
    day: date,
    payload: FinalizePayload | None = None,
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Freeze a day with its totals."""
    notes = payload.notes if payload else None
    return day_log_out(container.journal_service.finalize_day(day, notes))


@router.post("/{day}/reset")
async def reset_day(
    day: date, container: AppContainer = Depends(get_container)
) -> dict[str, str]:
    """Drop a day's log so it can be recorded again."""
    container.journal_service.reset_day(day)
    return {"status": "ok"}
