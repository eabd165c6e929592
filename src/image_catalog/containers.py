"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from image_catalog.adapters.image_fetch_client import HttpxImageFetcher
from image_catalog.adapters.openai_embedding_client import OpenAIEmbeddingClient
from image_catalog.adapters.supabase_contribution_repository import (
    SupabaseContributionRepository,
)
from image_catalog.adapters.supabase_identity_provider import (
    SupabaseIdentityProvider,
)
from image_catalog.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from image_catalog.adapters.supabase_storage import SupabaseObjectStorage
from image_catalog.config import Settings
from image_catalog.services.contributions import ContributionService
from image_catalog.services.identity import IdentityResolver
from image_catalog.services.profiles import ProfileService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    identity_resolver: IdentityResolver
    profile_service: ProfileService
    contribution_service: ContributionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    identity_provider = SupabaseIdentityProvider(supabase_client)
    identity_resolver = IdentityResolver.default(identity_provider)
    profile_service = ProfileService(
        repository=SupabaseProfileRepository(supabase_client),
        identity_provider=identity_provider,
    )
    image_fetcher = HttpxImageFetcher.create(
        timeout=resolved_settings.image_fetch_timeout_seconds
    )
    embedding_client = OpenAIEmbeddingClient.create(resolved_settings.openai_api_key)
    contribution_service = ContributionService(
        identity_resolver=identity_resolver,
        profile_service=profile_service,
        image_fetcher=image_fetcher,
        storage=SupabaseObjectStorage(
            client=supabase_client,
            bucket=resolved_settings.storage_bucket,
            cache_control=resolved_settings.storage_cache_control,
        ),
        embedding_client=embedding_client,
        repository=SupabaseContributionRepository(supabase_client),
        embedding_model=resolved_settings.openai_embedding_model,
        embedding_dimensions=resolved_settings.embedding_dimensions,
        cookie_prefix=resolved_settings.session_cookie_prefix,
        cookie_suffix=resolved_settings.session_cookie_suffix,
    )

    async def close_resources() -> None:
        await image_fetcher.close()
        await embedding_client.close()

    return AppContainer(
        settings=resolved_settings,
        identity_resolver=identity_resolver,
        profile_service=profile_service,
        contribution_service=contribution_service,
        close_resources=close_resources,
    )
