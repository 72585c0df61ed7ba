"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from calorize.adapters.supabase_food_repository import SupabaseFoodRepository
from calorize.adapters.supabase_log_repository import SupabaseLogRepository
from calorize.adapters.supabase_recipe_repository import SupabaseRecipeRepository
from calorize.adapters.supabase_user_repository import SupabaseUserRepository
from calorize.config import Settings
from calorize.services.catalog import CatalogService
from calorize.services.ledger import LedgerService
from calorize.services.recipes import RecipeService
from calorize.services.stats import StatsService
from calorize.services.users import UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    user_service: UserService
    catalog_service: CatalogService
    recipe_service: RecipeService
    ledger_service: LedgerService
    stats_service: StatsService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    food_repository = SupabaseFoodRepository(supabase_client)
    recipe_service = RecipeService(
        repository=SupabaseRecipeRepository(supabase_client),
        food_repository=food_repository,
    )
    log_repository = SupabaseLogRepository(supabase_client)

    return AppContainer(
        settings=resolved_settings,
        user_service=UserService(SupabaseUserRepository(supabase_client)),
        catalog_service=CatalogService(
            repository=food_repository,
            recipe_service=recipe_service,
            version_conflict_retries=resolved_settings.version_conflict_retries,
        ),
        recipe_service=recipe_service,
        ledger_service=LedgerService(
            repository=log_repository,
            food_repository=food_repository,
            timezone_name=resolved_settings.timezone,
        ),
        stats_service=StatsService(
            log_repository=log_repository,
            food_repository=food_repository,
            timezone_name=resolved_settings.timezone,
        ),
    )
