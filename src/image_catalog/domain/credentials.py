"""Models for session credentials carried by a request."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


class SessionUser(BaseModel):
    """User reference embedded in a session payload."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str | None = None


class SessionPayload(BaseModel):
    """Token fields shared by the flat and nested session shapes."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    access_token: str | None = None
    refresh_token: str | None = None
    expires_at: float | None = None
    user: SessionUser | None = None


class SessionCredential(SessionPayload):
    """Structured session credential parsed from the auth cookie."""

    current_session: SessionPayload | None = Field(
        default=None, alias="currentSession"
    )

    @property
    def resolved_access_token(self) -> str | None:
        """Return the access token from the flat or nested shape."""
        if self.access_token:
            return self.access_token
        if self.current_session and self.current_session.access_token:
            return self.current_session.access_token
        return None

    @property
    def embedded_user_id(self) -> str | None:
        """Return the user id embedded in the flat or nested shape."""
        if self.user and self.user.id:
            return self.user.id
        nested = self.current_session
        if nested and nested.user and nested.user.id:
            return nested.user.id
        return None

    def is_expired(self, now: float) -> bool:
        """Return true when the credential carries an expiry in the past."""
        expires_at = self.expires_at
        if expires_at is None and self.current_session:
            expires_at = self.current_session.expires_at
        return expires_at is not None and expires_at <= now


@dataclass(frozen=True)
class ExtractedCredentials:
    """Credentials found on a request, kept apart by source."""

    session: SessionCredential | None = None
    bearer_token: str | None = None

    def candidate_tokens(self) -> list[str]:
        """Return access tokens in priority order, bearer first."""
        tokens: list[str] = []
        if self.bearer_token:
            tokens.append(self.bearer_token)
        cookie_token = self.session.resolved_access_token if self.session else None
        if cookie_token and cookie_token not in tokens:
            tokens.append(cookie_token)
        return tokens
