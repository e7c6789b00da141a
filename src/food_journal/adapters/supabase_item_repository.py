"""Supabase implementation of the item store."""

from dataclasses import dataclass

from supabase import Client

from food_journal.domain.items import Item, item_from_payload, item_to_payload
from food_journal.services.catalog import ItemRepository

ITEMS_TABLE = "items"


@dataclass
class SupabaseItemRepository(ItemRepository):
    """Supabase-backed ``items`` collection."""

    client: Client
    page_size: int = 1000

    def get_item(self, item_id: str) -> Item | None:
        """Return an item by id, if present."""
        response = (
            self.client.table(ITEMS_TABLE)
            .select("*")
            .eq("id", item_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return item_from_payload(response.data[0])

    def list_items(self) -> list[Item]:
        """Return every item, paging through the table."""
        items: list[Item] = []
        start = 0
        while True:
            response = (
                self.client.table(ITEMS_TABLE)
                .select("*")
                .order("id")
                .range(start, start + self.page_size - 1)
                .execute()
            )
            rows = response.data or []
            items.extend(item_from_payload(row) for row in rows)
            if len(rows) < self.page_size:
                return items
            start += self.page_size

    def put_item(self, item: Item) -> None:
        """Insert or replace an item."""
        response = (
            self.client.table(ITEMS_TABLE).upsert(item_to_payload(item)).execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to store item {item.id}")

    def delete_item(self, item_id: str) -> None:
        """Delete an item by id."""
        self.client.table(ITEMS_TABLE).delete().eq("id", item_id).execute()

    def bulk_put_items(self, items: list[Item]) -> None:
        """Insert or replace several items in one request."""
        if not items:
            return
        response = (
            self.client.table(ITEMS_TABLE)
            .upsert([item_to_payload(item) for item in items])
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to store items")

    def clear_items(self) -> None:
        """Delete every item."""
        self.client.table(ITEMS_TABLE).delete().neq("id", "").execute()
