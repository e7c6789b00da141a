"""Tests for committing analyzed bundles."""

from food_journal.domain.bundles import Bundle, ImportAction
from food_journal.domain.items import Density
from food_journal.services.catalog import ItemCatalog
from food_journal.services.graph import DependencyGraph
from food_journal.services.imports import ImportExecutor
from food_journal.services.merge import MergeResolver
from tests.conftest import (
    InMemoryItemRepository,
    make_item,
    make_recipe,
    sequential_ids,
)


def _setup(*local_items):  # type: ignore[no-untyped-def]
    repository = InMemoryItemRepository({item.id: item for item in local_items})
    catalog = ItemCatalog(repository)
    graph = DependencyGraph(catalog)
    executor = ImportExecutor(catalog, graph, id_factory=sequential_ids())
    return repository, MergeResolver(catalog), executor


def _bundle() -> Bundle:
    return Bundle(
        root_id="x-r",
        items=[
            make_recipe("x-r", [("x-oats", 60)], name="Porridge", calories=380),
            make_item("x-oats", name="Oats", calories=380, protein_g=13.0),
        ],
    )


def test_import_into_empty_library_creates_everything() -> None:
    repository, resolver, executor = _setup()

    result = executor.execute(resolver.analyze(_bundle()))

    assert result.ok
    assert result.mapping == {"x-r": "new-1", "x-oats": "new-2"}
    assert sorted(result.created) == ["new-1", "new-2"]
    recipe = repository.items["new-1"]
    assert recipe.name == "Porridge"
    assert recipe.components[0].item_id == "new-2"
    assert repository.items["new-2"].name == "Oats"


def test_exact_match_reuses_local_item_without_duplicates() -> None:
    local_oats = make_item("oats", name="Oats", calories=380, protein_g=13.0)
    repository, resolver, executor = _setup(local_oats)

    result = executor.execute(resolver.analyze(_bundle()))

    assert result.mapping["x-oats"] == "oats"
    assert result.reused == ["oats"]
    assert len(repository.items) == 2
    assert repository.items["new-1"].components[0].item_id == "oats"


def test_create_new_on_name_match_adds_copy_suffix() -> None:
    local_oats = make_item("oats", name="Oats", calories=350, protein_g=11.0)
    repository, resolver, executor = _setup(local_oats)
    analysis = resolver.analyze(_bundle())
    analysis.choose("x-oats", ImportAction.CREATE_NEW)

    result = executor.execute(analysis)

    created_oats = repository.items[result.mapping["x-oats"]]
    assert created_oats.name == "Oats (import)"
    assert created_oats.density == Density(380, 13.0, 0.0)
    assert repository.items["oats"].density == Density(350, 11.0, 0.0)


def test_overwrite_updates_local_item_and_its_parents() -> None:
    local_oats = make_item(
        "oats", name="Oats", calories=350, protein_g=11.0, usage_score=4.0
    )
    local_recipe = make_recipe("bowl", [("oats", 100)], name="Bowl", calories=350)
    repository, resolver, executor = _setup(local_oats, local_recipe)
    analysis = resolver.analyze(_bundle())
    analysis.choose("x-oats", ImportAction.OVERWRITE)

    result = executor.execute(analysis)

    assert result.overwritten == ["oats"]
    overwritten = repository.items["oats"]
    assert overwritten.density == Density(380, 13.0, 0.0)
    assert overwritten.usage_score == 4.0
    assert repository.items["bowl"].density.calories == 380


def test_manual_link_remaps_recipe_components() -> None:
    local_flakes = make_item("flakes", name="Flakes", calories=360)
    repository, resolver, executor = _setup(local_flakes)
    analysis = resolver.analyze(_bundle())
    resolver.link(analysis, "x-oats", "flakes")

    result = executor.execute(analysis)

    assert result.mapping["x-oats"] == "flakes"
    assert repository.items[result.mapping["x-r"]].components[0].item_id == "flakes"
    assert len(repository.items) == 2


def test_failed_item_does_not_abort_the_rest() -> None:
    repository, resolver, executor = _setup()
    repository.failing_ids.add("new-2")

    result = executor.execute(resolver.analyze(_bundle()))

    assert not result.ok
    assert [failure.imported_id for failure in result.failures] == ["x-oats"]
    assert result.created == ["new-1"]
    assert "new-1" in repository.items
    assert "new-2" not in repository.items


def test_custom_copy_suffix() -> None:
    local_oats = make_item("oats", name="Oats", calories=350)
    repository = InMemoryItemRepository({"oats": local_oats})
    catalog = ItemCatalog(repository)
    executor = ImportExecutor(
        catalog,
        DependencyGraph(catalog),
        copy_suffix=" (Импорт)",
        id_factory=sequential_ids(),
    )
    analysis = MergeResolver(catalog).analyze(_bundle())
    analysis.choose("x-oats", ImportAction.CREATE_NEW)

    result = executor.execute(analysis)

    assert repository.items[result.mapping["x-oats"]].name == "Oats (Импорт)"


def test_remapped_recipe_density_follows_local_components() -> None:
    local_oats = make_item("oats", name="Oats", calories=100, protein_g=5.0)
    repository, resolver, executor = _setup(local_oats)
    bundle = Bundle(
        root_id="x-r",
        items=[
            make_recipe(
                "x-r", [("x-oats", 100)], name="Porridge", calories=400, protein_g=13.0
            ),
            make_item("x-oats", name="Oats", calories=400, protein_g=13.0),
        ],
    )

    result = executor.execute(resolver.analyze(bundle))

    assert result.ok
    recipe = repository.items[result.mapping["x-r"]]
    assert recipe.components[0].item_id == "oats"
    assert recipe.density == Density(100, 5.0, 0.0)


def test_overwrite_that_would_close_a_cycle_is_skipped() -> None:
    local_soup = make_recipe("soup", [], name="Soup")
    local_stock = make_recipe("stock", [("soup", 100)], name="Stock")
    repository, resolver, executor = _setup(local_soup, local_stock)
    bundle = Bundle(
        root_id="x-soup",
        items=[
            make_recipe("x-soup", [("x-stock", 100)], name="Soup", calories=50),
            make_recipe("x-stock", [], name="Stock"),
        ],
    )
    analysis = resolver.analyze(bundle)
    analysis.choose("x-soup", ImportAction.OVERWRITE)

    result = executor.execute(analysis)

    assert not result.ok
    assert [failure.imported_id for failure in result.failures] == ["x-soup"]
    assert result.overwritten == []
    assert repository.items["soup"].components == ()
    assert result.reused == ["stock"]


def test_parent_refresh_failures_are_reported() -> None:
    local_oats = make_item("oats", name="Oats", calories=350, protein_g=11.0)
    local_recipe = make_recipe("bowl", [("oats", 100)], name="Bowl", calories=350)
    repository, resolver, executor = _setup(local_oats, local_recipe)
    repository.failing_ids.add("bowl")
    analysis = resolver.analyze(_bundle())
    analysis.choose("x-oats", ImportAction.OVERWRITE)

    result = executor.execute(analysis)

    assert result.overwritten == ["oats"]
    assert not result.ok
    assert [(f.imported_id, f.local_id) for f in result.failures] == [(None, "bowl")]
    assert repository.items["bowl"].density.calories == 350


def test_cleared_mapping_creates_the_item() -> None:
    local_oats = make_item("oats", name="Oats", calories=380, protein_g=13.0)
    repository, resolver, executor = _setup(local_oats)
    analysis = resolver.analyze(_bundle())
    analysis.mapping["x-oats"] = None

    result = executor.execute(analysis)

    assert result.reused == []
    assert sorted(result.created) == ["new-1", "new-2"]
    assert repository.items["new-1"].components[0].item_id == "new-2"
    assert repository.items["new-2"].name == "Oats (import)"
