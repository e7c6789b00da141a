"""Food lookups against USDA FoodData Central."""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from food_journal.adapters.fdc_client import FdcClient
from food_journal.domain.items import Density, round_half_up, to_float
from food_journal.domain.nutrition import FoodDetails, FoodSummary
from food_journal.services.cache import Cache
from food_journal.services.composition import round1

_NUTRIENT_IDS = {
    "calories": 1008,
    "protein": 1003,
    "water": 1051,
}
_NUTRIENT_NUMBERS = {
    "calories": "208",
    "protein": "203",
    "water": "255",
}

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@dataclass
class NutritionService:
    """Cached FDC search and detail lookups returning item densities."""

    fdc_client: FdcClient
    cache: Cache
    search_ttl_seconds: int = 3600
    food_ttl_seconds: int = 86400
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search(self, query: str, limit: int = 5) -> list[FoodSummary]:
        """Search FDC foods with caching."""
        cache_key = f"fdc:search:{query.strip().lower()}:{limit}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        payload = await self._call_with_retry(
            lambda: self.fdc_client.search_foods(query, page_size=limit),
            action="search",
        )
        foods = [_parse_summary(food) for food in payload.get("foods", [])]
        self.cache.set(cache_key, foods, ttl_seconds=self.search_ttl_seconds)
        _logger.debug("FDC search: query=%s results=%s", query, len(foods))
        return foods

    async def get_food(self, fdc_id: int) -> FoodDetails:
        """Retrieve one food with its per-100g density."""
        cache_key = f"fdc:food:{fdc_id}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, FoodDetails):
            return cached

        payload = await self._call_with_retry(
            lambda: self.fdc_client.get_food(fdc_id),
            action=f"get_food:{fdc_id}",
        )
        serving = payload.get("servingSize")
        details = FoodDetails(
            summary=_parse_summary(payload),
            density=extract_density(payload.get("foodNutrients", [])),
            serving_size_g=float(serving) if isinstance(serving, int | float) else None,
        )
        self.cache.set(cache_key, details, ttl_seconds=self.food_ttl_seconds)
        return details

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "FDC %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    _status_code_from_exception(exc),
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def _status_code_from_exception(exc: Exception) -> str:
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _parse_summary(food: dict[str, object]) -> FoodSummary:
    return FoodSummary(
        fdc_id=int(food["fdcId"]),
        description=str(food.get("description", "")),
        brand_owner=food.get("brandOwner"),
        data_type=food.get("dataType"),
    )


def extract_density(food_nutrients: list[dict[str, object]]) -> Density:
    """Extract calories, protein and water per 100g from FDC nutrients.

    Detail responses nest the nutrient under ``nutrient``; search results
    carry flat ``nutrientId``/``nutrientNumber`` keys. Water grams map 1:1 to
    fluid milliliters.
    """
    values = {"calories": 0.0, "protein": 0.0, "water": 0.0}
    for nutrient in food_nutrients:
        info = nutrient.get("nutrient") or {}
        nutrient_id = info.get("id") or nutrient.get("nutrientId")
        number = str(info.get("number") or nutrient.get("nutrientNumber") or "")
        amount = nutrient.get("amount", nutrient.get("value"))
        if amount is None:
            continue
        for key in values:
            if nutrient_id == _NUTRIENT_IDS[key] or number == _NUTRIENT_NUMBERS[key]:
                values[key] = to_float(amount)
    return Density(
        calories=round_half_up(values["calories"]),
        protein_g=round1(values["protein"]),
        fluid_ml=round1(values["water"]),
    )
