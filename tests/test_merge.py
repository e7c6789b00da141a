"""Tests for import analysis and resolution choices."""

import pytest

from food_journal.domain.bundles import Bundle, ImportAction, MatchStatus
from food_journal.domain.errors import InvalidResolutionError, ItemNotFoundError
from food_journal.services.catalog import ItemCatalog
from food_journal.services.merge import MergeResolver, analyze
from tests.conftest import InMemoryItemRepository, make_item, make_recipe


def _bundle() -> Bundle:
    return Bundle(
        root_id="x-r",
        items=[
            make_recipe("x-r", [("x-oats", 60), ("x-milk", 200)], name="Porridge"),
            make_item("x-oats", name="Oats", calories=380, protein_g=13.0),
            make_item("x-milk", name="Milk", calories=64, protein_g=3.3),
        ],
    )


def _locals() -> list:
    return [
        make_item("oats", name="Oats", calories=380, protein_g=13.0),
        make_item("milk", name="Milk", calories=52, protein_g=2.8),
        make_item("porridge-liquid", name="Porridge", item_type="liquid"),
    ]


def test_analyze_classifies_items() -> None:
    analysis = analyze(_bundle(), _locals())

    statuses = {entry.item.id: entry.status for entry in analysis.entries}
    assert statuses == {
        "x-r": MatchStatus.NEW,
        "x-oats": MatchStatus.MATCH_EXACT,
        "x-milk": MatchStatus.MATCH_NAME,
    }
    assert analysis.mapping == {"x-r": None, "x-oats": "oats", "x-milk": "milk"}


def test_analyze_defaults_actions() -> None:
    analysis = analyze(_bundle(), _locals())

    actions = {entry.item.id: entry.action for entry in analysis.entries}
    assert actions == {
        "x-r": ImportAction.CREATE_NEW,
        "x-oats": ImportAction.USE_LOCAL,
        "x-milk": ImportAction.USE_LOCAL,
    }
    assert analysis.counts() == {"MATCH_EXACT": 1, "MATCH_NAME": 1, "NEW": 1}


def test_choose_create_new_clears_mapping_and_use_local_restores_it() -> None:
    analysis = analyze(_bundle(), _locals())

    analysis.choose("x-milk", ImportAction.CREATE_NEW)
    assert analysis.mapping["x-milk"] is None
    assert analysis.entry("x-milk").creates

    analysis.choose("x-milk", "USE_LOCAL")
    assert analysis.mapping["x-milk"] == "milk"


def test_choose_overwrite_keeps_local_target() -> None:
    analysis = analyze(_bundle(), _locals())

    entry = analysis.choose("x-milk", ImportAction.OVERWRITE)

    assert entry.action is ImportAction.OVERWRITE
    assert analysis.mapping["x-milk"] == "milk"


@pytest.mark.parametrize(
    ("imported_id", "action"),
    [
        ("x-r", ImportAction.USE_LOCAL),
        ("x-r", ImportAction.OVERWRITE),
        ("x-oats", ImportAction.OVERWRITE),
        ("x-milk", "MERGE"),
        ("not-in-bundle", ImportAction.CREATE_NEW),
    ],
)
def test_choose_rejects_disallowed_actions(imported_id: str, action: str) -> None:
    analysis = analyze(_bundle(), _locals())

    with pytest.raises(InvalidResolutionError):
        analysis.choose(imported_id, action)


def test_resolver_link_pins_existing_local_item() -> None:
    catalog = ItemCatalog(
        InMemoryItemRepository({item.id: item for item in _locals()})
    )
    resolver = MergeResolver(catalog)
    analysis = resolver.analyze(_bundle())

    resolver.link(analysis, "x-r", "porridge-liquid")

    entry = analysis.entry("x-r")
    assert entry.manual_link == "porridge-liquid"
    assert not entry.creates
    assert analysis.mapping["x-r"] == "porridge-liquid"


def test_resolver_link_requires_existing_local_item() -> None:
    resolver = MergeResolver(ItemCatalog(InMemoryItemRepository()))
    analysis = resolver.analyze(_bundle())

    with pytest.raises(ItemNotFoundError):
        resolver.link(analysis, "x-r", "nope")


def test_choose_after_link_drops_manual_link() -> None:
    analysis = analyze(_bundle(), _locals())
    analysis.link("x-milk", "oats")

    analysis.choose("x-milk", ImportAction.USE_LOCAL)

    assert analysis.entry("x-milk").manual_link is None
    assert analysis.mapping["x-milk"] == "milk"


def test_search_candidates_filters_by_name_and_type() -> None:
    catalog = ItemCatalog(
        InMemoryItemRepository({item.id: item for item in _locals()})
    )
    resolver = MergeResolver(catalog)

    by_name = resolver.search_candidates("PORR")
    by_type = resolver.search_candidates(None, item_type="ingredient")

    assert [item.id for item in by_name] == ["porridge-liquid"]
    assert [item.id for item in by_type] == ["milk", "oats"]
