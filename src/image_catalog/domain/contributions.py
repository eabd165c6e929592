"""Models for contributed images."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ContributionRequest(BaseModel):
    """Validated body of a contribution request."""

    model_config = ConfigDict(extra="ignore")

    image_url: str = Field(alias="imageUrl", min_length=1)
    prompt: str = Field(min_length=1)

    @field_validator("image_url", "prompt")
    @classmethod
    def _reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


@dataclass(frozen=True)
class FetchedImage:
    """Raw image bytes downloaded from the source URL."""

    content: bytes
    content_type: str | None = None


@dataclass(frozen=True)
class NewContribution:
    """Contribution ready to be persisted."""

    owner_id: str | None
    prompt: str
    image_url: str
    embedding: list[float]


@dataclass(frozen=True)
class ContributionRecord:
    """Contribution stored in the catalog."""

    id: str
    owner_id: str | None
    prompt: str
    image_url: str
    embedding: list[float]


@dataclass(frozen=True)
class ContributionResult:
    """Outcome returned to the caller after a successful contribution."""

    image_url: str
