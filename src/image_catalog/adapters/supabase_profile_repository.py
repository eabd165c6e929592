"""Supabase-backed profile repository."""

from dataclasses import dataclass

from postgrest.exceptions import APIError
from supabase import Client

from image_catalog.domain.errors import ProfileAlreadyExistsError
from image_catalog.domain.models import ProfileRecord
from image_catalog.services.profiles import ProfileRepository

UNIQUE_VIOLATION = "23505"


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for profile persistence."""

    client: Client

    def get_profile(self, profile_id: str) -> ProfileRecord | None:
        """Return the profile for an id, if present."""
        response = (
            self.client.table("profiles")
            .select("id, display_name, avatar_url")
            .eq("id", profile_id)
            .limit(1)
            .execute()
        )
        if response.data:
            row = response.data[0]
            return ProfileRecord(
                id=str(row["id"]),
                display_name=row.get("display_name"),
                avatar_url=row.get("avatar_url"),
            )
        return None

    def create_profile(
        self, profile_id: str, display_name: str | None, avatar_url: str | None
    ) -> None:
        """Insert a profile row, reporting duplicate ids distinctly."""
        try:
            self.client.table("profiles").insert(
                {
                    "id": profile_id,
                    "display_name": display_name,
                    "avatar_url": avatar_url,
                }
            ).execute()
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                raise ProfileAlreadyExistsError(profile_id) from exc
            raise

    def fill_missing(
        self,
        profile_id: str,
        display_name: str | None,
        avatar_url: str | None,
    ) -> None:
        """Set columns that are still null, leaving existing values alone."""
        for column, value in (
            ("display_name", display_name),
            ("avatar_url", avatar_url),
        ):
            if value is None:
                continue
            self.client.table("profiles").update({column: value}).eq(
                "id", profile_id
            ).is_(column, "null").execute()
