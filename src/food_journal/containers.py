"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from food_journal.adapters.fdc_client import HttpxFdcClient
from food_journal.adapters.supabase_day_log_repository import (
    SupabaseDayLogRepository,
)
from food_journal.adapters.supabase_item_repository import SupabaseItemRepository
from food_journal.config import Settings
from food_journal.services.bundles import BundleCodec
from food_journal.services.cache import InMemoryCache
from food_journal.services.catalog import ItemCatalog, ItemRepository
from food_journal.services.graph import DependencyGraph
from food_journal.services.imports import ImportExecutor
from food_journal.services.journal import DayLogRepository, JournalService
from food_journal.services.library import ItemService
from food_journal.services.merge import MergeResolver
from food_journal.services.nutrition import NutritionService
from food_journal.services.recipes import RecipeBuilder


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    catalog: ItemCatalog
    graph: DependencyGraph
    item_service: ItemService
    recipe_builder: RecipeBuilder
    codec: BundleCodec
    merge_resolver: MergeResolver
    import_executor: ImportExecutor
    journal_service: JournalService
    nutrition_service: NutritionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key,
        base_url=resolved_settings.fdc_base_url,
    )
    nutrition_service = NutritionService(fdc_client=fdc_client, cache=InMemoryCache())

    async def close_resources() -> None:
        await fdc_client.close()

    return assemble_container(
        resolved_settings,
        item_repository=SupabaseItemRepository(supabase_client),
        day_log_repository=SupabaseDayLogRepository(supabase_client),
        nutrition_service=nutrition_service,
        close_resources=close_resources,
    )


def assemble_container(
    settings: Settings,
    *,
    item_repository: ItemRepository,
    day_log_repository: DayLogRepository,
    nutrition_service: NutritionService,
    close_resources: Callable[[], Awaitable[None]],
) -> AppContainer:
    """Wire services around already-built repositories and clients."""
    catalog = ItemCatalog(item_repository)
    graph = DependencyGraph(catalog)
    item_service = ItemService(
        catalog=catalog,
        graph=graph,
        decay_factor=settings.usage_decay_factor,
    )
    return AppContainer(
        settings=settings,
        catalog=catalog,
        graph=graph,
        item_service=item_service,
        recipe_builder=RecipeBuilder(catalog, graph),
        codec=BundleCodec(graph),
        merge_resolver=MergeResolver(catalog),
        import_executor=ImportExecutor(
            catalog=catalog,
            graph=graph,
            copy_suffix=settings.import_copy_suffix,
        ),
        journal_service=JournalService(day_log_repository, item_service),
        nutrition_service=nutrition_service,
        close_resources=close_resources,
    )
