"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from nutrisync.adapters.supabase_score_repository import SupabaseScoreRepository
from nutrisync.config import Settings
from nutrisync.services.cache import InMemoryCache
from nutrisync.services.scores import ScoreService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    score_service: ScoreService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    score_service = ScoreService(
        repository=SupabaseScoreRepository(supabase_client),
        cache=InMemoryCache(),
        default_weight_kg=resolved_settings.default_weight_kg,
        weekly_ttl_seconds=resolved_settings.weekly_cache_ttl_seconds,
        debug=resolved_settings.score_debug,
    )

    return AppContainer(
        settings=resolved_settings,
        score_service=score_service,
    )
