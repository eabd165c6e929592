"""Identity resolution from request credentials."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from jose import jwt
from jose.exceptions import JOSEError

from image_catalog.domain.credentials import ExtractedCredentials
from image_catalog.domain.identity import (
    IdentityUser,
    ResolvedIdentity,
    build_profile_seed,
)

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    """Interface for the external identity provider."""

    def get_user(self, access_token: str) -> IdentityUser | None:
        """Validate an access token and return its user.

        Returns None when the provider rejects the token. Raises when the
        provider could not be reached or answered with an unexpected error.
        """

    def get_user_by_id(self, user_id: str) -> IdentityUser | None:
        """Look up a user by id with privileged access."""


@dataclass
class ResolutionAttempt:
    """Credentials being resolved and the tokens the provider rejected."""

    credentials: ExtractedCredentials
    rejected_tokens: set[str] = field(default_factory=set)

    def unrejected_tokens(self) -> list[str]:
        return [
            token
            for token in self.credentials.candidate_tokens()
            if token not in self.rejected_tokens
        ]


class IdentityStrategy(Protocol):
    """One way of turning request credentials into an identity."""

    name: str

    def resolve(self, attempt: ResolutionAttempt) -> ResolvedIdentity | None:
        """Return an identity, or None to let the next strategy try."""


def _utc_timestamp() -> float:
    return datetime.now(tz=UTC).timestamp()


@dataclass
class IntrospectionStrategy(IdentityStrategy):
    """Validate candidate tokens against the identity provider."""

    provider: IdentityProvider
    name: str = "introspection"

    def resolve(self, attempt: ResolutionAttempt) -> ResolvedIdentity | None:
        """Return the provider's user for the first token it accepts.

        Tokens the provider refuses are recorded on the attempt so later
        strategies never trust them. Tokens that could not be checked stay
        available to the fallbacks.
        """
        for token in attempt.credentials.candidate_tokens():
            try:
                user = self.provider.get_user(token)
            except Exception:
                logger.exception("Token introspection failed")
                continue
            if user is None or not user.id:
                logger.info("Identity provider rejected token")
                attempt.rejected_tokens.add(token)
                continue
            return ResolvedIdentity(
                user_id=user.id, seed=user.profile_seed(), source=self.name
            )
        return None


@dataclass
class UnverifiedClaimsStrategy(IdentityStrategy):
    """Read the subject claim from a token without checking its signature."""

    clock: Callable[[], float] = _utc_timestamp
    name: str = "unverified_claims"

    def resolve(self, attempt: ResolutionAttempt) -> ResolvedIdentity | None:
        """Return the subject of the first unexpired, unrejected token."""
        for token in attempt.unrejected_tokens():
            claims = _unverified_claims(token)
            if claims is None:
                continue
            subject = claims.get("sub")
            if not isinstance(subject, str) or not subject:
                continue
            expires_at = claims.get("exp")
            if isinstance(expires_at, int | float) and expires_at <= self.clock():
                logger.info("Skipping expired token", extra={"user_id": subject})
                continue
            metadata = claims.get("user_metadata")
            email = claims.get("email")
            seed = build_profile_seed(
                metadata if isinstance(metadata, dict) else None,
                email if isinstance(email, str) else None,
            )
            return ResolvedIdentity(user_id=subject, seed=seed, source=self.name)
        return None


@dataclass
class EmbeddedUserStrategy(IdentityStrategy):
    """Use the user id stored in the session cookie itself."""

    clock: Callable[[], float] = _utc_timestamp
    name: str = "embedded_user"

    def resolve(self, attempt: ResolutionAttempt) -> ResolvedIdentity | None:
        """Return the embedded user id of a live session with a usable token."""
        session = attempt.credentials.session
        if session is None or session.is_expired(self.clock()):
            return None
        token = session.resolved_access_token
        if not token or token in attempt.rejected_tokens:
            return None
        user_id = session.embedded_user_id
        if not user_id:
            return None
        return ResolvedIdentity(user_id=user_id, source=self.name)


@dataclass
class IdentityResolver:
    """Evaluate identity strategies in priority order."""

    strategies: Sequence[IdentityStrategy]

    @classmethod
    def default(cls, provider: IdentityProvider) -> "IdentityResolver":
        """Build the standard introspection, claims, cookie chain."""
        return cls(
            strategies=[
                IntrospectionStrategy(provider),
                UnverifiedClaimsStrategy(),
                EmbeddedUserStrategy(),
            ]
        )

    def resolve(self, credentials: ExtractedCredentials) -> ResolvedIdentity | None:
        """Return the identity from the first strategy that succeeds."""
        attempt = ResolutionAttempt(credentials)
        for strategy in self.strategies:
            identity = strategy.resolve(attempt)
            if identity is not None:
                logger.info(
                    "Resolved request identity",
                    extra={"user_id": identity.user_id, "source": strategy.name},
                )
                return identity
        return None


def _unverified_claims(token: str) -> dict[str, object] | None:
    """Decode the payload segment of a three-part token."""
    if token.count(".") != 2:
        return None
    try:
        claims = jwt.get_unverified_claims(token)
    except JOSEError:
        logger.warning("Failed to decode token claims")
        return None
    return claims if isinstance(claims, dict) else None
