"""Domain models for the image catalog."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProfileRecord:
    """Represents a user profile stored in the database."""

    id: str
    display_name: str | None = None
    avatar_url: str | None = None
