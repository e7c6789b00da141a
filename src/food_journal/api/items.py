"""Item library, recipe and food lookup endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx
from fastapi import APIRouter, Depends, HTTPException, status

from food_journal.api.auth import get_container, require_token
from food_journal.api.schemas import (
    FoodImportPayload,
    ItemPayload,
    RecipePayload,
    item_out,
    propagation_out,
)
from food_journal.containers import AppContainer
from food_journal.domain.errors import ItemNotFoundError

if TYPE_CHECKING:
    from food_journal.services.recipes import RecipeDraft

router = APIRouter(tags=["items"], dependencies=[Depends(require_token)])
_logger = logging.getLogger(__name__)


@router.get("/items")
async def list_items(
    type: str | None = None,  # noqa: A002
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return items ranked by usage, optionally filtered by type."""
    items = container.item_service.list_items(type)
    return {"items": [item_out(item) for item in items]}


@router.get("/items/search")
async def search_items(
    q: str | None = None,
    limit: int = 5,
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Search items by name."""
    items = container.item_service.search(q, limit=limit)
    return {"items": [item_out(item) for item in items]}


@router.post("/items", status_code=status.HTTP_201_CREATED)
async def create_item(
    payload: ItemPayload, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Create a plain (non-recipe) item."""
    if not payload.name:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="name is required"
        )
    item = container.item_service.create_item(payload.model_dump(exclude_none=True))
    return item_out(item)


@router.post("/items/from-food", status_code=status.HTTP_201_CREATED)
async def create_item_from_food(
    payload: FoodImportPayload, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Create an item from a FoodData Central record."""
    try:
        details = await container.nutrition_service.get_food(payload.fdc_id)
    except httpx.HTTPError as exc:
        _logger.exception("FDC lookup failed for %s", payload.fdc_id)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Food lookup failed"
        ) from exc
    item = container.item_service.create_from_food(
        details, category=payload.category, item_type=payload.type
    )
    return item_out(item)


@router.get("/items/{item_id}")
async def get_item(
    item_id: str, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Return one item."""
    return item_out(container.item_service.get(item_id))


@router.put("/items/{item_id}")
async def update_item(
    item_id: str,
    payload: ItemPayload,
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Update an item and refresh every recipe that uses it."""
    item, propagation = container.item_service.update_item(
        item_id, payload.model_dump(exclude_none=True)
    )
    return {"item": item_out(item), "propagation": propagation_out(propagation)}


@router.delete("/items/{item_id}")
async def delete_item(
    item_id: str, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Delete an item; recipes that used it report it as dangling."""
    propagation = container.item_service.delete_item(item_id)
    return {"propagation": propagation_out(propagation)}


@router.post("/recipes", status_code=status.HTTP_201_CREATED)
async def create_recipe(
    payload: RecipePayload, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Save a new recipe from a component list."""
    builder = container.recipe_builder
    draft = _fill_draft(container, builder.open_draft(None), payload)
    saved = builder.save(draft)
    return {
        "item": item_out(saved.recipe),
        "propagation": propagation_out(saved.propagation),
    }


@router.put("/recipes/{recipe_id}")
async def update_recipe(
    recipe_id: str,
    payload: RecipePayload,
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Replace a recipe's components and refresh recipes that contain it."""
    builder = container.recipe_builder
    draft = builder.open_draft(recipe_id)
    draft.components.clear()
    saved = builder.save(_fill_draft(container, draft, payload))
    return {
        "item": item_out(saved.recipe),
        "propagation": propagation_out(saved.propagation),
    }


@router.get("/recipes/{recipe_id}/closure")
async def recipe_closure(
    recipe_id: str, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Return a recipe followed by everything it depends on."""
    closure = container.graph.transitive_closure(recipe_id)
    if not closure:
        raise ItemNotFoundError(recipe_id)
    return {"items": [item_out(item) for item in closure]}


@router.get("/foods/search")
async def search_foods(
    q: str, limit: int = 5, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Search FoodData Central."""
    try:
        foods = await container.nutrition_service.search(q, limit=limit)
    except httpx.HTTPError as exc:
        _logger.exception("FDC search failed for %s", q)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Food search failed"
        ) from exc
    return {
        "foods": [
            {
                "fdc_id": food.fdc_id,
                "description": food.description,
                "brand_owner": food.brand_owner,
                "data_type": food.data_type,
            }
            for food in foods
        ]
    }


def _fill_draft(
    container: AppContainer, draft: RecipeDraft, payload: RecipePayload
) -> RecipeDraft:
    draft.name = payload.name
    draft.category = payload.category
    draft.short = payload.short
    draft.prep = payload.prep
    draft.cooked_weight = payload.cooked_weight
    for component in payload.components:
        container.recipe_builder.add_component(
            draft, component.item_id, component.amount
        )
    return draft
