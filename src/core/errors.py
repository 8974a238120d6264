"""Custom exception types for the dependency audit pipeline.

Two failure kinds matter to callers: a dependency graph that cannot be
resolved for one root, and an audit request that cannot be executed. The
first is recovered where it happens; the second always reaches the caller.
"""
from typing import Optional


class AuditPipelineError(Exception):
    """Base exception for dependency-audit errors."""

    pass


class ResolutionError(AuditPipelineError):
    """
    Raised when the dependency graph of a root artifact cannot be collected.

    Resolver adapters raise this internally and turn it into a
    ``ResolutionFailed`` outcome; it is never surfaced by ``DependencyAuditor.add``.
    """

    def __init__(self, coordinates: str, reason: str):
        """
        Initialize ResolutionError.

        Args:
            coordinates: ``group:artifact:version`` of the root being resolved
            reason: Why resolution failed (missing artifact, network, conflict)
        """
        self.coordinates = coordinates
        self.reason = reason
        super().__init__(f"Dependency resolution failed for {coordinates}: {reason}")


class AuditIOError(AuditPipelineError):
    """
    Raised when the batch audit request cannot be executed.

    There is no partial result set to fall back to, so this propagates out of
    ``DependencyAuditor.run`` unchanged.
    """

    def __init__(self, service: str, status_code: Optional[int] = None, message: Optional[str] = None):
        """
        Initialize AuditIOError.

        Args:
            service: Name of the audit service (e.g., 'OSS Index')
            status_code: HTTP status code (if applicable)
            message: Optional additional error details
        """
        self.service = service
        self.status_code = status_code
        self.message = message

        msg = f"Audit request failed: {service}"
        if status_code:
            msg += f" (HTTP {status_code})"
        if message:
            msg += f": {message}"

        super().__init__(msg)


class DataValidationError(AuditPipelineError, ValueError):
    """
    Raised when artifact coordinates or exclusions are malformed.

    Input is rejected outright; nothing is registered for it.
    """

    def __init__(self, field: str, value: str, reason: str):
        """
        Initialize DataValidationError.

        Args:
            field: Name of the field that failed validation
            value: The invalid value
            reason: Why the value is invalid
        """
        self.field = field
        self.value = value
        self.reason = reason
        msg = f"Data validation error: {field}={value!r}. Reason: {reason}"
        super().__init__(msg)
