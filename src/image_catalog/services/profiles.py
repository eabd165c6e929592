"""Profile provisioning for authenticated contributors."""

import logging
from dataclasses import dataclass
from typing import Protocol

from image_catalog.domain.errors import ProfileAlreadyExistsError, ProvisioningError
from image_catalog.domain.identity import ProfileSeed, ResolvedIdentity
from image_catalog.domain.models import ProfileRecord
from image_catalog.services.identity import IdentityProvider

logger = logging.getLogger(__name__)


class ProfileRepository(Protocol):
    """Persistence interface for profiles."""

    def get_profile(self, profile_id: str) -> ProfileRecord | None:
        """Return the profile for an id, if present."""

    def create_profile(
        self, profile_id: str, display_name: str | None, avatar_url: str | None
    ) -> None:
        """Create a profile row.

        Raises ProfileAlreadyExistsError when the id is already taken.
        """

    def fill_missing(
        self,
        profile_id: str,
        display_name: str | None,
        avatar_url: str | None,
    ) -> None:
        """Set display name and avatar only where they are currently null."""


@dataclass
class ProfileService:
    """Application service that guarantees a profile exists for a user."""

    repository: ProfileRepository
    identity_provider: IdentityProvider

    def ensure_profile(self, identity: ResolvedIdentity) -> ProfileRecord:
        """Ensure a profile exists for the identity and return it."""
        existing = self._read_profile(identity.user_id)
        if existing:
            return self._fill_missing(existing, identity.seed)

        seed = self._lookup_seed(identity)
        try:
            self.repository.create_profile(
                identity.user_id,
                display_name=seed.display_name,
                avatar_url=seed.avatar_url,
            )
            logger.info("Created profile", extra={"user_id": identity.user_id})
        except ProfileAlreadyExistsError:
            logger.info(
                "Profile created concurrently", extra={"user_id": identity.user_id}
            )
        except Exception as exc:
            logger.exception(
                "Failed to create profile", extra={"user_id": identity.user_id}
            )
            raise ProvisioningError("Profile not found") from exc

        created = self._read_profile(identity.user_id)
        if created is None:
            logger.error(
                "Profile missing after provisioning",
                extra={"user_id": identity.user_id},
            )
            raise ProvisioningError("Profile not found")
        return created

    def _read_profile(self, user_id: str) -> ProfileRecord | None:
        try:
            return self.repository.get_profile(user_id)
        except Exception as exc:
            logger.exception("Failed to read profile", extra={"user_id": user_id})
            raise ProvisioningError("Profile not found") from exc

    def _lookup_seed(self, identity: ResolvedIdentity) -> ProfileSeed:
        """Return canonical provider metadata, falling back to the identity."""
        fallback = identity.seed or ProfileSeed()
        try:
            user = self.identity_provider.get_user_by_id(identity.user_id)
        except Exception:
            logger.exception(
                "Identity provider lookup failed",
                extra={"user_id": identity.user_id},
            )
            return fallback
        if user is None:
            return fallback
        seed = user.profile_seed()
        return ProfileSeed(
            display_name=seed.display_name or fallback.display_name,
            avatar_url=seed.avatar_url or fallback.avatar_url,
        )

    def _fill_missing(
        self, profile: ProfileRecord, seed: ProfileSeed | None
    ) -> ProfileRecord:
        if seed is None:
            return profile
        display_name = seed.display_name if profile.display_name is None else None
        avatar_url = seed.avatar_url if profile.avatar_url is None else None
        if display_name is None and avatar_url is None:
            return profile
        try:
            self.repository.fill_missing(
                profile.id, display_name=display_name, avatar_url=avatar_url
            )
        except Exception:
            logger.exception(
                "Failed to backfill profile", extra={"user_id": profile.id}
            )
            return profile
        return ProfileRecord(
            id=profile.id,
            display_name=profile.display_name or display_name,
            avatar_url=profile.avatar_url or avatar_url,
        )
