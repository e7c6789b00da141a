"""Traversal and propagation over the recipe composition graph.

Items live in a flat id-keyed catalog; edges are component references. Every
traversal keeps an explicit visited set so that cyclic data written by an older
client or imported from elsewhere cannot loop forever.
"""

import logging
from collections import deque
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from food_journal.domain.errors import DanglingReference
from food_journal.domain.items import Item
from food_journal.services.catalog import ItemCatalog
from food_journal.services.composition import (
    aggregate_components,
    cooked_weight,
    derive_density,
)

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PropagationFailure:
    """An ancestor recipe whose recomputed density could not be stored."""

    item_id: str
    message: str


@dataclass
class PropagationResult:
    """Outcome of one propagation pass."""

    changed_id: str
    updated: list[str] = field(default_factory=list)
    failures: list[PropagationFailure] = field(default_factory=list)
    dangling: list[DanglingReference] = field(default_factory=list)
    cyclic: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass
class DependencyGraph:
    """Cycle detection, closure and density propagation over the catalog."""

    catalog: ItemCatalog

    def detect_cycle(self, candidate_id: str, into_recipe_id: str | None) -> bool:
        """Return True if adding ``candidate_id`` to the recipe would close a loop."""
        if not candidate_id or not into_recipe_id:
            return False
        if candidate_id == into_recipe_id:
            return True
        visited: set[str] = set()
        stack = [candidate_id]
        while stack:
            current_id = stack.pop()
            if current_id in visited:
                continue
            visited.add(current_id)
            current = self.catalog.get(current_id)
            if current is None or not current.is_recipe:
                continue
            for component in current.components:
                if component.item_id == into_recipe_id:
                    return True
                stack.append(component.item_id)
        return False

    def transitive_closure(self, root_id: str) -> list[Item]:
        """Return the root followed by every item it reaches, in first-seen order."""
        closure: list[Item] = []
        visited: set[str] = set()
        self._collect(root_id, visited, closure)
        return closure

    def _collect(self, item_id: str, visited: set[str], closure: list[Item]) -> None:
        if item_id in visited:
            return
        item = self.catalog.get(item_id)
        if item is None:
            return
        visited.add(item_id)
        closure.append(item)
        if item.is_recipe:
            for component in item.components:
                self._collect(component.item_id, visited, closure)

    def find_parents(self, item_id: str) -> list[Item]:
        """Return recipes that list ``item_id`` as a direct component."""
        return [
            item
            for item in self.catalog.all()
            if item.is_recipe and item.references(item_id)
        ]

    def find_ancestors(self, item_id: str) -> list[Item]:
        """Return every recipe that reaches ``item_id``, nearest first."""
        ancestors: list[Item] = []
        visited: set[str] = {item_id}
        queue = deque([item_id])
        while queue:
            current = queue.popleft()
            for parent in self.find_parents(current):
                if parent.id in visited:
                    continue
                visited.add(parent.id)
                ancestors.append(parent)
                queue.append(parent.id)
        return ancestors

    def propagate_update(self, changed_id: str) -> PropagationResult:
        """Recompute and persist the density of every ancestor of ``changed_id``.

        A recipe is recomputed only once all of its affected descendants are
        current, so diamonds settle in a single pass. Recipes caught in a cycle
        never become ready; they are recomputed once each, in discovery order,
        and reported in ``cyclic``.
        """
        result = PropagationResult(changed_id=changed_id)
        if not changed_id:
            return result
        ancestors = self.find_ancestors(changed_id)
        if not ancestors:
            return result

        affected = {item.id for item in ancestors}
        pending = {
            item.id: sum(
                1
                for other_id in {c.item_id for c in item.components}
                if other_id in affected
            )
            for item in ancestors
        }
        ready = deque(
            item.id for item in ancestors if pending[item.id] == 0
        )
        order: list[str] = []
        while ready:
            current = ready.popleft()
            order.append(current)
            for parent in self.find_parents(current):
                if parent.id not in pending:
                    continue
                pending[parent.id] -= 1
                if pending[parent.id] == 0:
                    ready.append(parent.id)

        leftovers = [item.id for item in ancestors if item.id not in order]
        if leftovers:
            _logger.warning(
                "Cyclic composition detected while propagating %s: %s",
                changed_id,
                ", ".join(leftovers),
            )
            result.cyclic.extend(leftovers)

        for recipe_id in order + leftovers:
            self.recompute(recipe_id, result)
        return result

    def recompute_recipes(self, recipe_ids: list[str]) -> PropagationResult:
        """Recompute the given recipes from their components, leaves first."""
        result = PropagationResult(changed_id=",".join(recipe_ids))
        wanted = set(recipe_ids)
        order: list[str] = []
        visited: set[str] = set()
        for recipe_id in recipe_ids:
            self._order_within(recipe_id, wanted, visited, order)
        for recipe_id in order:
            self.recompute(recipe_id, result)
        return result

    def _order_within(
        self, item_id: str, wanted: set[str], visited: set[str], order: list[str]
    ) -> None:
        if item_id in visited:
            return
        visited.add(item_id)
        item = self.catalog.get(item_id)
        if item is None:
            return
        for component in item.components:
            if component.item_id in wanted:
                self._order_within(component.item_id, wanted, visited, order)
        if item.is_recipe:
            order.append(item_id)

    def recompute(self, recipe_id: str, result: PropagationResult) -> None:
        """Derive and store a recipe's density from its current components."""
        recipe = self.catalog.get(recipe_id)
        if recipe is None:
            return
        totals = aggregate_components(recipe.components, self.catalog.get)
        if totals.missing:
            _logger.warning(
                "Recipe %s has dangling components: %s",
                recipe_id,
                ", ".join(totals.missing),
            )
            result.dangling.extend(totals.dangling(recipe_id))
        weight = cooked_weight(totals, recipe.weight_coefficient)
        updated = replace(
            recipe,
            density=derive_density(totals, recipe.weight_coefficient),
            portion_g=weight or None,
            updated_at=datetime.now(tz=UTC),
        )
        try:
            self.catalog.put(updated)
        except Exception as exc:
            _logger.exception("Failed to persist recomputed recipe %s", recipe_id)
            result.failures.append(PropagationFailure(recipe_id, str(exc)))
            return
        result.updated.append(recipe_id)
