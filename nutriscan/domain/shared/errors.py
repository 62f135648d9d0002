"""
Domain exceptions.

Typed exceptions for explicit error handling. Only
MalformedEstimateError is meant to reach callers of the resolution
pipeline; the others are caught at the component that produced them
and turned into lookup misses.
"""

from __future__ import annotations


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class DomainError(Exception):
    """
    Base exception for all domain errors.

    Allows catching all domain errors with single except clause.
    """

    pass


# ═══════════════════════════════════════════════════════════
# RECOGNITION EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class RecognitionError(DomainError):
    """Base exception for vision estimate handling."""

    pass


class MalformedEstimateError(RecognitionError):
    """
    Vision output did not contain a usable estimate.

    Raised when:
    - No JSON object found in the raw model text
    - Required fields missing
    - Fields of the wrong type or out of range

    Fatal to the current request, never retried.

    Example:
        >>> raise MalformedEstimateError("No JSON object found in vision output")
    """

    def __init__(self, reason: str, raw_text: str | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.raw_text = raw_text


# ═══════════════════════════════════════════════════════════
# EXTERNAL SERVICE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ExternalServiceError(DomainError):
    """
    External service call failed.

    Base class for all external service errors.
    """

    pass


class TransientSourceError(ExternalServiceError):
    """
    Network, timeout or unexpected-shape failure from a data source.

    Raised when:
    - OpenFoodFacts request times out
    - Connection refused or reset
    - Response body is not the expected JSON shape

    Always converted to a lookup miss by the client that raised it.

    Example:
        >>> raise TransientSourceError("OpenFoodFacts search timed out")
    """

    pass


# ═══════════════════════════════════════════════════════════
# INFRASTRUCTURE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class InfrastructureError(DomainError):
    """
    Infrastructure layer error.

    Base class for database, cache, etc. errors.
    """

    pass


class CacheError(InfrastructureError):
    """
    Cache operation failed.

    Raised when:
    - Cache store unavailable
    - Stored document cannot be decoded

    Example:
        >>> raise CacheError("MongoDB connection lost")
    """

    pass


class PersistenceWriteError(CacheError):
    """
    Writing a cache entry failed.

    Logged and swallowed by NutritionCache.put; never changes the
    result returned to the caller.

    Example:
        >>> raise PersistenceWriteError("Upsert failed for 'jollof rice'")
    """

    pass
