"""Identity provider users and the identities resolved from them."""

from collections.abc import Mapping
from dataclasses import dataclass, field

_DISPLAY_NAME_KEYS = (
    "display_name",
    "full_name",
    "name",
    "user_name",
    "preferred_username",
)
_AVATAR_KEYS = ("avatar_url", "picture")


@dataclass(frozen=True)
class ProfileSeed:
    """Best-effort profile values sourced from the identity provider."""

    display_name: str | None = None
    avatar_url: str | None = None


@dataclass(frozen=True)
class IdentityUser:
    """User as reported by the identity provider."""

    id: str
    email: str | None = None
    user_metadata: Mapping[str, object] = field(default_factory=dict)

    def profile_seed(self) -> ProfileSeed:
        """Derive display name and avatar from provider metadata."""
        return build_profile_seed(self.user_metadata, self.email)


@dataclass(frozen=True)
class ResolvedIdentity:
    """Authenticated user for the current request."""

    user_id: str
    seed: ProfileSeed | None = None
    source: str = "unknown"


def build_profile_seed(
    metadata: Mapping[str, object] | None, email: str | None
) -> ProfileSeed:
    """Pick a display name and avatar in priority order."""
    values = metadata or {}
    display_name = _first_text(values, _DISPLAY_NAME_KEYS)
    if display_name is None and email:
        local_part = email.split("@", maxsplit=1)[0].strip()
        display_name = local_part or None
    return ProfileSeed(
        display_name=display_name,
        avatar_url=_first_text(values, _AVATAR_KEYS),
    )


def _first_text(values: Mapping[str, object], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = values.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None
