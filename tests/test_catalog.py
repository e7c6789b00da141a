"""Tests for the write-through item catalog."""

from food_journal.services.catalog import ItemCatalog
from tests.conftest import InMemoryItemRepository, make_item


def test_catalog_loads_lazily_and_writes_through() -> None:
    repository = InMemoryItemRepository({"a": make_item("a")})
    catalog = ItemCatalog(repository)

    catalog.put(make_item("b"))

    assert [item.id for item in catalog.all()] == ["a", "b"]
    assert "b" in repository.items


def test_catalog_refresh_picks_up_external_writes() -> None:
    repository = InMemoryItemRepository()
    catalog = ItemCatalog(repository)
    assert catalog.get("a") is None

    repository.items["a"] = make_item("a")

    assert catalog.get("a") is None
    catalog.refresh()
    assert catalog.get("a") is not None


def test_catalog_put_many_delete_and_clear() -> None:
    repository = InMemoryItemRepository()
    catalog = ItemCatalog(repository)

    catalog.put_many([make_item("a"), make_item("b")])
    catalog.delete("a")

    assert [item.id for item in catalog.all()] == ["b"]
    catalog.clear()
    assert catalog.all() == []
    assert repository.items == {}
