"""Domain models for recipe bundle exchange."""

from dataclasses import dataclass, field
from enum import StrEnum

from food_journal.domain.items import Item

BUNDLE_VERSION = 2


@dataclass(frozen=True)
class Bundle:
    """A recipe with its full dependency closure."""

    root_id: str
    items: list[Item]
    version: int = BUNDLE_VERSION

    @property
    def root(self) -> Item | None:
        return next((item for item in self.items if item.id == self.root_id), None)


class MatchStatus(StrEnum):
    """How an imported item relates to the local library."""

    MATCH_EXACT = "MATCH_EXACT"
    MATCH_NAME = "MATCH_NAME"
    NEW = "NEW"


class ImportAction(StrEnum):
    """What to do with an imported item on commit."""

    USE_LOCAL = "USE_LOCAL"
    CREATE_NEW = "CREATE_NEW"
    OVERWRITE = "OVERWRITE"


ALLOWED_ACTIONS: dict[MatchStatus, frozenset[ImportAction]] = {
    MatchStatus.NEW: frozenset({ImportAction.CREATE_NEW}),
    MatchStatus.MATCH_NAME: frozenset(
        {ImportAction.USE_LOCAL, ImportAction.CREATE_NEW, ImportAction.OVERWRITE}
    ),
    MatchStatus.MATCH_EXACT: frozenset(
        {ImportAction.USE_LOCAL, ImportAction.CREATE_NEW}
    ),
}

DEFAULT_ACTIONS: dict[MatchStatus, ImportAction] = {
    MatchStatus.NEW: ImportAction.CREATE_NEW,
    MatchStatus.MATCH_NAME: ImportAction.USE_LOCAL,
    MatchStatus.MATCH_EXACT: ImportAction.USE_LOCAL,
}


@dataclass
class ResolutionEntry:
    """Resolution state for one imported item."""

    item: Item
    status: MatchStatus
    local_id: str | None
    action: ImportAction
    manual_link: str | None = None

    @property
    def creates(self) -> bool:
        return self.manual_link is None and self.action is ImportAction.CREATE_NEW


@dataclass(frozen=True)
class ImportFailure:
    """An imported item, or a local parent it refreshes, that could not be stored."""

    imported_id: str | None
    local_id: str | None
    message: str


@dataclass
class ImportResult:
    """Outcome of committing a bundle."""

    mapping: dict[str, str]
    created: list[str] = field(default_factory=list)
    overwritten: list[str] = field(default_factory=list)
    reused: list[str] = field(default_factory=list)
    failures: list[ImportFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures
