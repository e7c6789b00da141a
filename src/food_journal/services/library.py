"""Services for managing the item library."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime

from food_journal.domain.errors import ItemNotFoundError
from food_journal.domain.items import (
    ITEM_TYPES,
    RECIPE,
    Item,
    item_from_payload,
    item_to_payload,
    new_item_id,
)
from food_journal.domain.nutrition import FoodDetails
from food_journal.services.catalog import ItemCatalog
from food_journal.services.composition import (
    aggregate_components,
    cooked_weight,
    derive_density,
)
from food_journal.services.graph import DependencyGraph, PropagationResult

_logger = logging.getLogger(__name__)


@dataclass
class ItemService:
    """Application service for item library operations."""

    catalog: ItemCatalog
    graph: DependencyGraph
    decay_factor: float = 0.9
    id_factory: Callable[[], str] = new_item_id
    _last_decay_day: date | None = field(default=None, init=False, repr=False)

    def get(self, item_id: str) -> Item:
        """Return an item or raise ``ItemNotFoundError``."""
        item = self.catalog.get(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    def create_item(self, payload: dict[str, object]) -> Item:
        """Create a plain item from a field payload."""
        row = {**payload, "id": self.id_factory(), "components": []}
        if row.get("type") not in ITEM_TYPES or row.get("type") == RECIPE:
            row["type"] = "ingredient"
        item = replace(item_from_payload(row), updated_at=datetime.now(tz=UTC))
        self.catalog.put(item)
        return item

    def create_from_food(
        self,
        details: FoodDetails,
        category: str = "snack",
        item_type: str = "ingredient",
    ) -> Item:
        """Create an ingredient from a FoodData Central record."""
        item = Item(
            id=self.id_factory(),
            name=details.summary.description,
            type=item_type,
            category=category,
            density=details.density,
            default_amount=details.serving_size_g or 100.0,
            portion_g=details.serving_size_g,
            updated_at=datetime.now(tz=UTC),
        )
        self.catalog.put(item)
        return item

    def update_item(
        self, item_id: str, payload: dict[str, object]
    ) -> tuple[Item, PropagationResult]:
        """Update an item's own fields and refresh every recipe using it.

        Component lists are edited through the recipe builder only.
        """
        current = self.get(item_id)
        row = {**item_to_payload(current), **payload}
        row["id"] = current.id
        row["components"] = item_to_payload(current)["components"]
        updated = replace(item_from_payload(row), updated_at=datetime.now(tz=UTC))
        if current.is_recipe:
            # Recipe density always follows its components.
            totals = aggregate_components(updated.components, self.catalog.get)
            updated = replace(
                updated,
                type=RECIPE,
                density=derive_density(totals, updated.weight_coefficient),
                portion_g=cooked_weight(totals, updated.weight_coefficient) or None,
            )
        self.catalog.put(updated)
        if updated.density == current.density:
            return updated, PropagationResult(changed_id=item_id)
        return updated, self.graph.propagate_update(item_id)

    def delete_item(self, item_id: str) -> PropagationResult:
        """Delete an item; parents now see it as a missing component."""
        self.get(item_id)
        self.catalog.delete(item_id)
        return self.graph.propagate_update(item_id)

    def search(self, query: str | None, limit: int = 5) -> list[Item]:
        """Search items by name, falling back to top items when query is empty."""
        items = self.catalog.all()
        if query:
            needle = query.strip().lower()
            items = [item for item in items if needle in item.name.lower()]
        return self.rank(items)[:limit]

    def list_items(self, item_type: str | None = None) -> list[Item]:
        """Return ranked items, optionally of one type."""
        items = self.catalog.all()
        if item_type:
            items = [item for item in items if item.type == item_type]
        return self.rank(items)

    def record_use(self, item_id: str, today: date | None = None) -> None:
        """Bump usage scores for an item and, for recipes, its components."""
        self.apply_decay(today or datetime.now(tz=UTC).date())
        self._bump(item_id, visited=set())

    def _bump(self, item_id: str, visited: set[str]) -> None:
        if item_id in visited:
            return
        visited.add(item_id)
        item = self.catalog.get(item_id)
        if item is None:
            return
        self.catalog.put(
            replace(
                item,
                usage_score=item.usage_score + 1,
                last_used_at=datetime.now(tz=UTC),
            )
        )
        for component in item.components:
            self._bump(component.item_id, visited)

    def apply_decay(self, today: date) -> None:
        """Decay every usage score by ``decay_factor`` per elapsed day."""
        if self._last_decay_day is None:
            self._last_decay_day = today
            return
        days = (today - self._last_decay_day).days
        if days <= 0:
            return
        multiplier = self.decay_factor**days
        decayed = [
            replace(item, usage_score=item.usage_score * multiplier)
            for item in self.catalog.all()
            if item.usage_score
        ]
        self.catalog.put_many(decayed)
        self._last_decay_day = today
        _logger.info("Applied usage decay: days=%s items=%s", days, len(decayed))

    @staticmethod
    def rank(items: list[Item]) -> list[Item]:
        """Rank items by usage score, then alphabetically."""
        return sorted(items, key=lambda item: (-item.usage_score, item.name.lower()))

