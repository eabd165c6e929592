"""Supabase Auth-backed identity provider."""

from dataclasses import dataclass

from supabase import AuthApiError, Client

from image_catalog.domain.identity import IdentityUser
from image_catalog.services.identity import IdentityProvider

# Statuses with which Supabase Auth refuses a token it could evaluate.
REJECTED_TOKEN_STATUSES = frozenset({400, 401, 403, 404})


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Identity provider using a service-role Supabase client."""

    client: Client

    def get_user(self, access_token: str) -> IdentityUser | None:
        """Validate an access token with Supabase Auth."""
        try:
            response = self.client.auth.get_user(access_token)
        except AuthApiError as exc:
            if exc.status in REJECTED_TOKEN_STATUSES:
                return None
            raise
        return _to_identity_user(getattr(response, "user", None))

    def get_user_by_id(self, user_id: str) -> IdentityUser | None:
        """Fetch a user through the Supabase Auth admin API."""
        response = self.client.auth.admin.get_user_by_id(user_id)
        return _to_identity_user(getattr(response, "user", None))


def _to_identity_user(user: object | None) -> IdentityUser | None:
    """Map a Supabase user object to the domain type."""
    if user is None:
        return None
    user_id = getattr(user, "id", None)
    if not user_id:
        return None
    metadata = getattr(user, "user_metadata", None)
    return IdentityUser(
        id=str(user_id),
        email=getattr(user, "email", None),
        user_metadata=metadata if isinstance(metadata, dict) else {},
    )
