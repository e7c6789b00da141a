"""Committing a resolved bundle into the local item store."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime

from food_journal.domain.bundles import (
    ImportAction,
    ImportFailure,
    ImportResult,
    MatchStatus,
    ResolutionEntry,
)
from food_journal.domain.errors import CyclicCompositionError
from food_journal.domain.items import Component, Item, new_item_id
from food_journal.services.catalog import ItemCatalog
from food_journal.services.graph import DependencyGraph, PropagationResult
from food_journal.services.merge import ImportAnalysis

_logger = logging.getLogger(__name__)


@dataclass
class ImportExecutor:
    """Applies an import analysis: allocates ids, remaps and writes items."""

    catalog: ItemCatalog
    graph: DependencyGraph
    copy_suffix: str = " (import)"
    id_factory: Callable[[], str] = new_item_id

    def execute(self, analysis: ImportAnalysis) -> ImportResult:
        """Write the bundle's items according to their resolution entries."""
        bundle = analysis.bundle
        mapping = analysis.mapping
        entries = {entry.item.id: entry for entry in analysis.entries}

        # Ids are allocated up front so sibling recipes remap consistently.
        creating: set[str] = set()
        for imported in bundle.items:
            entry = entries.get(imported.id)
            if not mapping.get(imported.id) or (entry is not None and entry.creates):
                creating.add(imported.id)
                if not mapping.get(imported.id):
                    mapping[imported.id] = self.id_factory()

        result = ImportResult(mapping={})
        written_recipes: list[str] = []
        plain = [item for item in bundle.items if not item.is_recipe]
        recipes = [item for item in bundle.items if item.is_recipe]
        for imported in plain:
            self._commit(imported, entries.get(imported.id), creating, mapping, result)
        for imported in recipes:
            remapped = replace(
                imported,
                components=tuple(
                    Component(
                        item_id=mapping.get(component.item_id) or component.item_id,
                        amount=component.amount,
                    )
                    for component in imported.components
                ),
            )
            if self._commit(
                remapped, entries.get(imported.id), creating, mapping, result
            ):
                written_recipes.append(str(mapping[imported.id]))

        self.catalog.refresh()
        # Remapped components can carry different densities than the sender's.
        self._collect_failures(self.graph.recompute_recipes(written_recipes), result)
        for local_id in result.overwritten:
            self._collect_failures(self.graph.propagate_update(local_id), result)
        result.mapping = {key: value for key, value in mapping.items() if value}
        _logger.info(
            "Bundle %s imported: created=%s overwritten=%s reused=%s failed=%s",
            bundle.root_id,
            len(result.created),
            len(result.overwritten),
            len(result.reused),
            len(result.failures),
        )
        return result

    def _commit(  # noqa: PLR0913
        self,
        imported: Item,
        entry: ResolutionEntry | None,
        creating: set[str],
        mapping: dict[str, str | None],
        result: ImportResult,
    ) -> bool:
        local_id = mapping.get(imported.id)
        now = datetime.now(tz=UTC)
        try:
            if imported.id in creating:
                if self._closes_cycle(imported, str(local_id), result):
                    return False
                name = imported.name
                if entry is not None and entry.status is not MatchStatus.NEW:
                    name += self.copy_suffix
                self.catalog.put(
                    replace(
                        imported,
                        id=str(local_id),
                        name=name,
                        usage_score=0.0,
                        last_used_at=None,
                        updated_at=now,
                    )
                )
                result.created.append(str(local_id))
                return True
            if (
                entry is not None
                and entry.manual_link is None
                and entry.action is ImportAction.OVERWRITE
            ):
                existing = self.catalog.get(local_id or "")
                if existing is None:
                    raise LookupError(f"Local item {local_id} no longer exists")
                if self._closes_cycle(imported, existing.id, result):
                    return False
                self.catalog.put(
                    replace(
                        imported,
                        id=existing.id,
                        usage_score=existing.usage_score,
                        last_used_at=existing.last_used_at,
                        updated_at=now,
                    )
                )
                result.overwritten.append(existing.id)
                return True
            if local_id:
                result.reused.append(local_id)
        except Exception as exc:
            _logger.exception("Failed to import item %s", imported.id)
            result.failures.append(ImportFailure(imported.id, local_id, str(exc)))
        return False

    def _closes_cycle(
        self, imported: Item, local_id: str, result: ImportResult
    ) -> bool:
        for component in imported.components:
            if self.graph.detect_cycle(component.item_id, local_id):
                error = CyclicCompositionError(component.item_id, local_id)
                _logger.warning("Skipped imported item %s: %s", imported.id, error)
                result.failures.append(
                    ImportFailure(imported.id, local_id, str(error))
                )
                return True
        return False

    @staticmethod
    def _collect_failures(propagation: PropagationResult, result: ImportResult) -> None:
        result.failures.extend(
            ImportFailure(None, failure.item_id, failure.message)
            for failure in propagation.failures
        )
