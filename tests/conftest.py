"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from itertools import count

import pytest

from food_journal.adapters.fdc_client import FdcClient
from food_journal.config import Settings
from food_journal.containers import AppContainer, assemble_container
from food_journal.domain.items import Component, Density, Item
from food_journal.domain.journal import DayLog
from food_journal.services.cache import InMemoryCache
from food_journal.services.catalog import ItemCatalog, ItemRepository
from food_journal.services.graph import DependencyGraph
from food_journal.services.journal import DayLogRepository
from food_journal.services.nutrition import NutritionService


@dataclass
class InMemoryItemRepository(ItemRepository):
    """In-memory item repository for tests."""

    items: dict[str, Item] = field(default_factory=dict)
    writes: list[str] = field(default_factory=list)
    failing_ids: set[str] = field(default_factory=set)

    def get_item(self, item_id: str) -> Item | None:
        return self.items.get(item_id)

    def list_items(self) -> list[Item]:
        return list(self.items.values())

    def put_item(self, item: Item) -> None:
        if item.id in self.failing_ids:
            raise RuntimeError(f"Failed to store item {item.id}")
        self.writes.append(item.id)
        self.items[item.id] = item

    def delete_item(self, item_id: str) -> None:
        self.items.pop(item_id, None)

    def bulk_put_items(self, items: list[Item]) -> None:
        for item in items:
            self.put_item(item)

    def clear_items(self) -> None:
        self.items.clear()


@dataclass
class InMemoryDayLogRepository(DayLogRepository):
    """In-memory day log repository for tests."""

    logs: dict[date, DayLog] = field(default_factory=dict)

    def get_log(self, day: date) -> DayLog | None:
        return self.logs.get(day)

    def put_log(self, log: DayLog) -> None:
        self.logs[log.day] = log

    def delete_log(self, day: date) -> None:
        self.logs.pop(day, None)

    def list_logs(self, limit: int) -> list[DayLog]:
        return [self.logs[day] for day in sorted(self.logs, reverse=True)][:limit]


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client with in-memory responses."""

    search_payload: dict[str, object] = field(
        default_factory=lambda: {
            "foods": [
                {
                    "fdcId": 171077,
                    "description": "Chicken breast, raw",
                    "dataType": "SR Legacy",
                }
            ]
        }
    )
    food_payload: dict[str, object] = field(
        default_factory=lambda: {
            "fdcId": 171077,
            "description": "Chicken breast, raw",
            "dataType": "SR Legacy",
            "foodNutrients": [
                {"nutrient": {"id": 1008, "number": "208"}, "amount": 120},
                {"nutrient": {"id": 1003, "number": "203"}, "amount": 22.5},
                {"nutrient": {"id": 1051, "number": "255"}, "amount": 75.8},
            ],
        }
    )

    async def search_foods(self, query: str, page_size: int = 10) -> dict[str, object]:
        return self.search_payload

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        return self.food_payload


def sequential_ids(prefix: str = "new") -> Callable[[], str]:
    """Return an id factory yielding ``<prefix>-1``, ``<prefix>-2``, ..."""
    counter = count(1)
    return lambda: f"{prefix}-{next(counter)}"


def make_item(  # noqa: PLR0913
    item_id: str,
    name: str | None = None,
    calories: int = 0,
    protein_g: float = 0.0,
    fluid_ml: float = 0.0,
    item_type: str = "ingredient",
    category: str = "snack",
    default_amount: float = 100.0,
    usage_score: float = 0.0,
) -> Item:
    return Item(
        id=item_id,
        name=name or item_id,
        type=item_type,
        category=category,
        density=Density(calories=calories, protein_g=protein_g, fluid_ml=fluid_ml),
        default_amount=default_amount,
        usage_score=usage_score,
    )


def make_recipe(
    recipe_id: str,
    components: list[tuple[str, float]],
    name: str | None = None,
    coefficient: float = 1.0,
    calories: int = 0,
    protein_g: float = 0.0,
) -> Item:
    return Item(
        id=recipe_id,
        name=name or recipe_id,
        type="recipe",
        category="lunch",
        density=Density(calories=calories, protein_g=protein_g, fluid_ml=0.0),
        components=tuple(Component(item_id, amount) for item_id, amount in components),
        weight_coefficient=coefficient,
    )


def build_graph(*items: Item) -> tuple[InMemoryItemRepository, DependencyGraph]:
    repository = InMemoryItemRepository({item.id: item for item in items})
    return repository, DependencyGraph(ItemCatalog(repository))


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        api_token="api-token",
        fdc_api_key="fdc-key",
        share_base_url="https://journal.test/share",
    )


@pytest.fixture
def item_repository() -> InMemoryItemRepository:
    return InMemoryItemRepository()


@pytest.fixture
def day_log_repository() -> InMemoryDayLogRepository:
    return InMemoryDayLogRepository()


@pytest.fixture
def container(
    settings: Settings,
    item_repository: InMemoryItemRepository,
    day_log_repository: InMemoryDayLogRepository,
) -> AppContainer:
    nutrition_service = NutritionService(
        fdc_client=FakeFdcClient(),
        cache=InMemoryCache(),
    )

    async def close_resources() -> None:
        return None

    return assemble_container(
        settings,
        item_repository=item_repository,
        day_log_repository=day_log_repository,
        nutrition_service=nutrition_service,
        close_resources=close_resources,
    )
