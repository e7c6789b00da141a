"""Item store interface and the in-memory item catalog."""

from dataclasses import dataclass, field
from typing import Protocol

from food_journal.domain.items import Item


class ItemRepository(Protocol):
    """Persistence interface for the ``items`` collection."""

    def get_item(self, item_id: str) -> Item | None:
        """Return an item by id, if present."""

    def list_items(self) -> list[Item]:
        """Return every stored item."""

    def put_item(self, item: Item) -> None:
        """Insert or replace an item."""

    def delete_item(self, item_id: str) -> None:
        """Delete an item by id."""

    def bulk_put_items(self, items: list[Item]) -> None:
        """Insert or replace several items."""

    def clear_items(self) -> None:
        """Delete every item."""


@dataclass
class ItemCatalog:
    """Write-through cache of the item store used for graph lookups."""

    repository: ItemRepository
    _items: dict[str, Item] = field(default_factory=dict, init=False, repr=False)
    _loaded: bool = field(default=False, init=False, repr=False)

    def refresh(self) -> None:
        """Reload every item from the store."""
        self._items = {item.id: item for item in self.repository.list_items()}
        self._loaded = True

    def get(self, item_id: str) -> Item | None:
        """Return a cached item by id."""
        self._ensure_loaded()
        return self._items.get(item_id)

    def all(self) -> list[Item]:
        """Return all cached items in store order."""
        self._ensure_loaded()
        return list(self._items.values())

    def put(self, item: Item) -> None:
        """Persist an item, then cache it."""
        self._ensure_loaded()
        self.repository.put_item(item)
        self._items[item.id] = item

    def put_many(self, items: list[Item]) -> None:
        """Persist several items in one store call, then cache them."""
        self._ensure_loaded()
        if not items:
            return
        self.repository.bulk_put_items(items)
        for item in items:
            self._items[item.id] = item

    def delete(self, item_id: str) -> None:
        """Delete an item from the store and the cache."""
        self._ensure_loaded()
        self.repository.delete_item(item_id)
        self._items.pop(item_id, None)

    def clear(self) -> None:
        """Delete every item from the store and the cache."""
        self.repository.clear_items()
        self._items = {}
        self._loaded = True

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.refresh()
