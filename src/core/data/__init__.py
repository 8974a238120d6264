"""Data serialization utilities for audit results."""

from src.core.data.audit_report import serialize_audit_report, serialize_package_report

__all__ = [
    "serialize_audit_report",
    "serialize_package_report",
]
