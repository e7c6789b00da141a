"""Recipe builder working on explicit draft objects."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from food_journal.domain.errors import CyclicCompositionError, ItemNotFoundError
from food_journal.domain.items import RECIPE, Component, Item, new_item_id
from food_journal.domain.journal import NutrientSnapshot
from food_journal.services.catalog import ItemCatalog
from food_journal.services.composition import (
    CompositionTotals,
    aggregate_components,
    density_for_weight,
)
from food_journal.services.graph import DependencyGraph, PropagationResult

_logger = logging.getLogger(__name__)


@dataclass
class RecipeDraft:
    """Working copy of a recipe while it is being edited."""

    recipe_id: str | None
    name: str = ""
    category: str = "lunch"
    short: str = ""
    prep: str = ""
    components: list[Component] = field(default_factory=list)
    cooked_weight: float | None = None
    usage_score: float = 0.0


@dataclass(frozen=True)
class SavedRecipe:
    """A persisted recipe with the propagation it triggered."""

    recipe: Item
    propagation: PropagationResult


@dataclass
class RecipeBuilder:
    """Operations that turn drafts into stored recipes."""

    catalog: ItemCatalog
    graph: DependencyGraph
    id_factory: Callable[[], str] = new_item_id

    def open_draft(self, recipe_id: str | None = None) -> RecipeDraft:
        """Start a draft, copying an existing recipe when an id is given."""
        if recipe_id is None:
            return RecipeDraft(recipe_id=None)
        recipe = self.catalog.get(recipe_id)
        if recipe is None or not recipe.is_recipe:
            raise ItemNotFoundError(recipe_id)
        components = list(recipe.components)
        totals = aggregate_components(components, self.catalog.get)
        return RecipeDraft(
            recipe_id=recipe.id,
            name=recipe.name,
            category=recipe.category,
            short=recipe.short,
            prep=recipe.prep,
            components=components,
            cooked_weight=recipe.portion_g or totals.weight or None,
            usage_score=recipe.usage_score,
        )

    def add_component(
        self, draft: RecipeDraft, item_id: str, amount: float | None = None
    ) -> RecipeDraft:
        """Append a component after checking it cannot close a cycle."""
        item = self.catalog.get(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        if self.graph.detect_cycle(item_id, draft.recipe_id):
            _logger.info(
                "Rejected cyclic component: item=%s recipe=%s", item_id, draft.recipe_id
            )
            raise CyclicCompositionError(item_id, draft.recipe_id or "")
        resolved = amount if amount is not None else item.default_amount or 100.0
        draft.components.append(Component(item_id=item_id, amount=resolved))
        return draft

    def set_amount(self, draft: RecipeDraft, index: int, amount: float) -> RecipeDraft:
        """Change the amount of the component at ``index``."""
        current = draft.components[index]
        draft.components[index] = Component(item_id=current.item_id, amount=amount)
        return draft

    def set_multiplier(
        self, draft: RecipeDraft, index: int, multiplier: float
    ) -> RecipeDraft:
        """Set a component amount as a multiple of its item's default amount."""
        item = self.catalog.get(draft.components[index].item_id)
        default = item.default_amount if item and item.default_amount > 0 else 100.0
        return self.set_amount(draft, index, round(default * multiplier, 2))

    def remove_component(self, draft: RecipeDraft, index: int) -> RecipeDraft:
        """Drop the component at ``index``."""
        del draft.components[index]
        return draft

    def totals(self, draft: RecipeDraft) -> CompositionTotals:
        """Return raw totals of the draft's components."""
        return aggregate_components(draft.components, self.catalog.get)

    def save(self, draft: RecipeDraft) -> SavedRecipe:
        """Persist the draft as a recipe and refresh recipes that contain it."""
        for component in draft.components:
            if self.graph.detect_cycle(component.item_id, draft.recipe_id):
                raise CyclicCompositionError(component.item_id, draft.recipe_id or "")
        totals = self.totals(draft)
        cooked = draft.cooked_weight or totals.weight or 100.0
        coefficient = cooked / totals.weight if totals.weight > 0 else 1.0
        existing = draft.recipe_id is not None and self.catalog.get(draft.recipe_id)
        recipe = Item(
            id=draft.recipe_id or self.id_factory(),
            name=draft.name.strip() or "New recipe",
            type=RECIPE,
            category=draft.category,
            density=density_for_weight(totals, cooked),
            default_amount=100.0,
            portion_g=cooked,
            usage_score=round(draft.usage_score, 2),
            components=tuple(draft.components),
            weight_coefficient=coefficient,
            short=draft.short.strip(),
            prep=draft.prep.strip(),
            updated_at=datetime.now(tz=UTC),
        )
        self.catalog.put(recipe)
        draft.recipe_id = recipe.id
        if not existing:
            return SavedRecipe(recipe, PropagationResult(changed_id=recipe.id))
        return SavedRecipe(recipe, self.graph.propagate_update(recipe.id))

    def delete(self, recipe_id: str) -> PropagationResult:
        """Delete a recipe; parents now see it as a missing component."""
        recipe = self.catalog.get(recipe_id)
        if recipe is None or not recipe.is_recipe:
            raise ItemNotFoundError(recipe_id)
        self.catalog.delete(recipe_id)
        return self.graph.propagate_update(recipe_id)

    def snapshot(self, draft: RecipeDraft, category: str) -> NutrientSnapshot:
        """Freeze the draft's density for a one-off journal entry."""
        totals = self.totals(draft)
        cooked = draft.cooked_weight or totals.weight or 100.0
        return NutrientSnapshot(
            item_id=None,
            name=draft.name.strip() or "New recipe",
            category=category,
            density=density_for_weight(totals, cooked),
            portion_g=cooked,
        )
