"""Contribution ingestion pipeline."""

import logging
import secrets
import time
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from image_catalog.domain.contributions import (
    ContributionRecord,
    ContributionRequest,
    ContributionResult,
    FetchedImage,
    NewContribution,
)
from image_catalog.domain.errors import (
    AuthenticationError,
    UpstreamError,
    ValidationError,
)
from image_catalog.services.credentials import (
    DEFAULT_COOKIE_PREFIX,
    DEFAULT_COOKIE_SUFFIX,
    extract_credentials,
)
from image_catalog.services.identity import IdentityResolver
from image_catalog.services.profiles import ProfileService

logger = logging.getLogger(__name__)

IMAGE_CONTENT_TYPE = "image/png"
IMAGE_EXTENSION = "png"


class ImageFetcher(Protocol):
    """Interface for downloading source images."""

    async def fetch(self, url: str) -> FetchedImage:
        """Download an image and return its bytes."""


class ObjectStorage(Protocol):
    """Interface for the public object store."""

    def upload(self, path: str, content: bytes, content_type: str) -> None:
        """Store bytes under a path."""

    def get_public_url(self, path: str) -> str:
        """Return the public URL for a stored path."""

    def remove(self, path: str) -> None:
        """Delete a stored path."""


class EmbeddingClient(Protocol):
    """Interface for text embedding generation."""

    async def embed(self, text: str, *, model: str, dimensions: int) -> list[float]:
        """Return an embedding vector for the text."""


class ContributionRepository(Protocol):
    """Persistence interface for contributions."""

    def insert_contribution(self, contribution: NewContribution) -> ContributionRecord:
        """Persist a contribution and return the stored record."""


@dataclass
class ContributionService:
    """Service that validates, authenticates and ingests contributed images."""

    identity_resolver: IdentityResolver
    profile_service: ProfileService
    image_fetcher: ImageFetcher
    storage: ObjectStorage
    embedding_client: EmbeddingClient
    repository: ContributionRepository
    embedding_model: str
    embedding_dimensions: int
    cookie_prefix: str = DEFAULT_COOKIE_PREFIX
    cookie_suffix: str = DEFAULT_COOKIE_SUFFIX

    async def contribute(
        self,
        payload: object,
        *,
        cookie_header: str | None = None,
        authorization_header: str | None = None,
    ) -> ContributionResult:
        """Run the full contribution pipeline for one request."""
        request = parse_contribution_request(payload)

        credentials = extract_credentials(
            cookie_header,
            authorization_header,
            cookie_prefix=self.cookie_prefix,
            cookie_suffix=self.cookie_suffix,
        )
        identity = self.identity_resolver.resolve(credentials)
        if identity is None:
            raise AuthenticationError("Unauthorized")
        profile = self.profile_service.ensure_profile(identity)

        try:
            image = await self.image_fetcher.fetch(request.image_url)
        except Exception as exc:
            logger.exception(
                "Failed to download image", extra={"image_url": request.image_url}
            )
            raise UpstreamError("Failed to download image") from exc
        if _media_type(image.content_type) not in (None, IMAGE_CONTENT_TYPE):
            logger.warning(
                "Source image is not PNG, storing it as PNG",
                extra={"content_type": image.content_type},
            )

        file_name = generate_file_name()
        try:
            self.storage.upload(file_name, image.content, IMAGE_CONTENT_TYPE)
        except Exception as exc:
            logger.exception("Failed to upload image", extra={"file_name": file_name})
            raise UpstreamError("Failed to upload image to storage") from exc

        try:
            public_url = self.storage.get_public_url(file_name)
        except Exception as exc:
            logger.exception(
                "Failed to resolve public URL", extra={"file_name": file_name}
            )
            self._discard_upload(file_name)
            raise UpstreamError("Failed to resolve public image URL") from exc

        try:
            embedding = await self._embed(request.prompt)
        except Exception as exc:
            logger.exception("Failed to embed prompt", extra={"file_name": file_name})
            self._discard_upload(file_name)
            raise UpstreamError("Failed to embed prompt") from exc

        try:
            record = self.repository.insert_contribution(
                NewContribution(
                    owner_id=profile.id,
                    prompt=request.prompt,
                    image_url=public_url,
                    embedding=embedding,
                )
            )
        except Exception as exc:
            logger.exception(
                "Failed to save contribution", extra={"file_name": file_name}
            )
            self._discard_upload(file_name)
            raise UpstreamError("Failed to save contribution") from exc

        logger.info(
            "Stored contribution",
            extra={"contribution_id": record.id, "user_id": profile.id},
        )
        return ContributionResult(image_url=public_url)

    async def _embed(self, prompt: str) -> list[float]:
        embedding = await self.embedding_client.embed(
            prompt, model=self.embedding_model, dimensions=self.embedding_dimensions
        )
        if len(embedding) != self.embedding_dimensions:
            raise ValueError(
                f"Expected {self.embedding_dimensions} dimensions, "
                f"got {len(embedding)}"
            )
        return embedding

    def _discard_upload(self, file_name: str) -> None:
        """Remove an uploaded object whose contribution was not saved."""
        try:
            self.storage.remove(file_name)
        except Exception:
            logger.exception(
                "Failed to remove orphaned upload", extra={"file_name": file_name}
            )


def parse_contribution_request(payload: object) -> ContributionRequest:
    """Validate the request body, requiring a non-empty image URL and prompt."""
    if not isinstance(payload, dict):
        raise ValidationError("imageUrl and prompt are required")
    try:
        return ContributionRequest.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError("imageUrl and prompt are required") from exc


def generate_file_name() -> str:
    """Return a collision-resistant object name for an uploaded image."""
    return f"{time.time_ns() // 1_000_000}_{secrets.token_hex(6)}.{IMAGE_EXTENSION}"


def _media_type(content_type: str | None) -> str | None:
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower() or None
