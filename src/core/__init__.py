"""Core dependency-audit logic: graph collection, coordinates and errors."""

# Error handling
from src.core.errors import (
    AuditIOError,
    AuditPipelineError,
    DataValidationError,
    ResolutionError,
)

__all__ = [
    "AuditPipelineError",
    "ResolutionError",
    "AuditIOError",
    "DataValidationError",
]
