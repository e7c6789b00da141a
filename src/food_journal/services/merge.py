"""Classification of imported items against the local library."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from food_journal.domain.bundles import (
    ALLOWED_ACTIONS,
    DEFAULT_ACTIONS,
    Bundle,
    ImportAction,
    MatchStatus,
    ResolutionEntry,
)
from food_journal.domain.errors import InvalidResolutionError, ItemNotFoundError
from food_journal.domain.items import Item
from food_journal.services.catalog import ItemCatalog
from food_journal.services.library import ItemService


@dataclass
class ImportAnalysis:
    """Resolution entries plus the mutable imported-id to local-id mapping."""

    bundle: Bundle
    entries: list[ResolutionEntry]
    mapping: dict[str, str | None] = field(default_factory=dict)

    def entry(self, imported_id: str) -> ResolutionEntry:
        """Return the entry for an imported id."""
        for entry in self.entries:
            if entry.item.id == imported_id:
                return entry
        raise InvalidResolutionError(f"Item {imported_id} is not part of the bundle")

    def choose(self, imported_id: str, action: ImportAction | str) -> ResolutionEntry:
        """Select an action, enforcing what the entry's status allows."""
        entry = self.entry(imported_id)
        try:
            resolved = ImportAction(action)
        except ValueError as exc:
            raise InvalidResolutionError(f"Unknown import action: {action}") from exc
        if resolved not in ALLOWED_ACTIONS[entry.status]:
            raise InvalidResolutionError(
                f"{resolved} is not allowed for {entry.status} item {imported_id}"
            )
        entry.action = resolved
        entry.manual_link = None
        if resolved is ImportAction.CREATE_NEW:
            self.mapping[imported_id] = None
        else:
            self.mapping[imported_id] = entry.local_id
        return entry

    def link(self, imported_id: str, local_id: str) -> ResolutionEntry:
        """Pin an imported item to an arbitrary local item."""
        entry = self.entry(imported_id)
        entry.manual_link = local_id
        self.mapping[imported_id] = local_id
        return entry

    def counts(self) -> dict[str, int]:
        """Return how many entries fall into each status."""
        result = {status.value: 0 for status in MatchStatus}
        for entry in self.entries:
            result[entry.status.value] += 1
        return result


@dataclass
class MergeResolver:
    """Builds import analyses against the catalog."""

    catalog: ItemCatalog

    def analyze(self, bundle: Bundle) -> ImportAnalysis:
        """Classify every bundle item and seed default actions."""
        return analyze(bundle, self.catalog.all())

    def link(self, analysis: ImportAnalysis, imported_id: str, local_id: str) -> None:
        """Manually link an imported item to an existing local item."""
        if self.catalog.get(local_id) is None:
            raise ItemNotFoundError(local_id)
        analysis.link(imported_id, local_id)

    def search_candidates(
        self, query: str | None, item_type: str | None = None, limit: int = 10
    ) -> list[Item]:
        """Return local items an imported item could be linked to, best first."""
        items = self.catalog.all()
        if item_type:
            items = [item for item in items if item.type == item_type]
        if query:
            needle = query.strip().lower()
            items = [item for item in items if needle in item.name.lower()]
        return ItemService.rank(items)[:limit]


def analyze(bundle: Bundle, local_items: Iterable[Item]) -> ImportAnalysis:
    """Classify bundle items as exact matches, name conflicts or new items."""
    locals_by_key: dict[tuple[str, str], list[Item]] = {}
    for local in local_items:
        locals_by_key.setdefault((local.type, local.name), []).append(local)

    analysis = ImportAnalysis(bundle=bundle, entries=[])
    for imported in bundle.items:
        candidates = locals_by_key.get((imported.type, imported.name), [])
        exact = next(
            (local for local in candidates if _same_density(local, imported)), None
        )
        if exact is not None:
            status, local_id = MatchStatus.MATCH_EXACT, exact.id
        elif candidates:
            status, local_id = MatchStatus.MATCH_NAME, candidates[0].id
        else:
            status, local_id = MatchStatus.NEW, None
        analysis.entries.append(
            ResolutionEntry(
                item=imported,
                status=status,
                local_id=local_id,
                action=DEFAULT_ACTIONS[status],
            )
        )
        analysis.mapping[imported.id] = local_id
    return analysis


def _same_density(local: Item, imported: Item) -> bool:
    return (
        local.density.calories == imported.density.calories
        and local.density.protein_g == imported.density.protein_g
    )
