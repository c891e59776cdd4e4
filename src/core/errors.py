from __future__ import annotations


class RuntimeParametersError(Exception):
    """Base error for runtime parameter resolution."""


class ValidationError(RuntimeParametersError):
    """Raised when a fetched or cached payload is malformed."""


class ExternalServiceError(RuntimeParametersError):
    """Raised when an external service (AMP CDN) fails."""
