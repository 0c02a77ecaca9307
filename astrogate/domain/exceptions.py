from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class ConfigurationError(DomainError):
    """Deployment configuration is unusable."""


class UnauthenticatedError(DomainError):
    """No valid session for the request."""


class InvalidCredentialsError(UnauthenticatedError):
    """Username or password did not match."""


class ForbiddenError(DomainError):
    """Authenticated, but not allowed to perform the action."""


class AdminForbiddenError(ForbiddenError):
    """Admin role is insufficient for the action."""


class EntitlementDeniedError(ForbiddenError):
    """Current plan does not include the requested feature or quota."""


class UserNotFoundError(DomainError):
    """User referenced by the request does not exist."""


class BillingError(DomainError):
    """Billing provider call failed."""


class BillingUnavailableError(BillingError):
    """No billing provider is configured for this deployment."""


class BillingCustomerMissingError(BillingError):
    """User has never been linked to a billing customer."""
