"""Errors raised by the contribution pipeline."""


class ContributionError(Exception):
    """Base error that maps to an HTTP status and a client-facing message."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ContributionError):
    """The request body is missing required fields."""

    status_code = 400


class AuthenticationError(ContributionError):
    """No identity could be resolved for the request."""

    status_code = 401


class ProvisioningError(ContributionError):
    """The caller's profile could not be confirmed to exist."""

    status_code = 404


class UpstreamError(ContributionError):
    """An external service failed during the pipeline."""

    status_code = 500


class ProfileAlreadyExistsError(Exception):
    """A profile with the same id was created by another request."""
