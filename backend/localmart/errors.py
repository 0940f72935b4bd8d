from __future__ import annotations


class DiscoveryError(Exception):
    """Base class for errors raised by the discovery core."""


class ValidationError(DiscoveryError):
    """Malformed criteria. Carries the name of the offending field."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class NotFoundError(DiscoveryError):
    """The provider answered, but there is no matching address or route."""


class ProviderUnavailableError(DiscoveryError):
    """The geocoding/routing provider is unreachable or not configured."""


class RepositoryError(DiscoveryError):
    """The business data store failed."""
