"""Parsing helpers for ``group:artifact[:version]`` coordinates."""
import re
from typing import NamedTuple, Optional

from src.core.errors import DataValidationError

# Maven group/artifact ids: letters, digits, dots, dashes and underscores.
_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]+$")


class ArtifactCoordinates(NamedTuple):
    group_id: str
    artifact_id: str
    version: Optional[str]


def _validate_id(field: str, value: str, raw: str) -> str:
    value = value.strip()
    if not value:
        raise DataValidationError(field, raw, f"{field} is empty")
    if not _ID_PATTERN.match(value):
        raise DataValidationError(field, raw, f"{field} contains invalid characters")
    return value


def parse_artifact(raw: str) -> ArtifactCoordinates:
    """
    Parse ``group:artifact:version`` (the version part may be omitted or empty).

    Raises:
        DataValidationError: wrong number of parts or invalid characters
    """
    parts = raw.strip().split(":")
    if len(parts) not in (2, 3):
        raise DataValidationError("artifact", raw, "expected group:artifact[:version]")

    group_id = _validate_id("group_id", parts[0], raw)
    artifact_id = _validate_id("artifact_id", parts[1], raw)
    version = parts[2].strip() if len(parts) == 3 else ""
    if any(ch.isspace() for ch in version):
        raise DataValidationError("version", raw, "version contains whitespace")
    return ArtifactCoordinates(group_id, artifact_id, version or None)


def parse_exclusion(raw: str) -> str:
    """
    Normalize a version-agnostic ``group:artifact`` exclusion key.

    Raises:
        DataValidationError: not exactly two parts or invalid characters
    """
    parts = raw.strip().split(":")
    if len(parts) != 2:
        raise DataValidationError("exclusion", raw, "expected group:artifact")
    group_id = _validate_id("group_id", parts[0], raw)
    artifact_id = _validate_id("artifact_id", parts[1], raw)
    return f"{group_id}:{artifact_id}"
