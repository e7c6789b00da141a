"""Domain errors for the food journal."""

from dataclasses import dataclass


class FoodJournalError(Exception):
    """Base class for domain errors."""


class InvalidBundleFormatError(FoodJournalError):
    """Bundle text could not be decoded by any supported strategy."""


class UnsupportedBundleVersionError(FoodJournalError):
    """Bundle decoded but carries an unknown version."""

    def __init__(self, version: object) -> None:
        super().__init__(f"Unsupported bundle version: {version!r}")
        self.version = version


class CyclicCompositionError(FoodJournalError):
    """Adding a component would make a recipe contain itself."""

    def __init__(self, candidate_id: str, recipe_id: str) -> None:
        super().__init__(
            f"Item {candidate_id} cannot be added to recipe {recipe_id}: "
            "it would create a cycle"
        )
        self.candidate_id = candidate_id
        self.recipe_id = recipe_id


class InvalidResolutionError(FoodJournalError):
    """Requested import action is not allowed for the entry's status."""


class ItemNotFoundError(FoodJournalError):
    """Referenced item does not exist in the store."""

    def __init__(self, item_id: str) -> None:
        super().__init__(f"Item not found: {item_id}")
        self.item_id = item_id


class DayLogFinalizedError(FoodJournalError):
    """The day log is finalized and only accepts an explicit reset."""


@dataclass(frozen=True)
class DanglingReference:
    """A recipe component pointing at an item that no longer exists."""

    recipe_id: str | None
    component_id: str
