"""의존성 해석 데이터 모델(Dependency resolution data models)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Union

from pydantic import BaseModel


class ResolvedArtifact(BaseModel):
    """해석된 아티팩트(Artifact returned by a resolver)."""

    group_id: str
    artifact_id: str
    version: str

    @property
    def key(self) -> str:
        """버전 무관 키(Version-agnostic ``group:artifact`` key)."""

        return f"{self.group_id}:{self.artifact_id}"

    @property
    def coordinates(self) -> str:
        return f"{self.key}:{self.version}"


class DependencySpec(BaseModel):
    """해석 요청 루트(Root dependency to resolve)."""

    group_id: str
    artifact_id: str
    version: Optional[str] = None
    scope: str = "compile"
    exclusions: FrozenSet[str] = frozenset()

    @property
    def key(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    @property
    def coordinates(self) -> str:
        return f"{self.key}:{self.version or ''}"


@dataclass(frozen=True)
class ResolvedDependencies:
    """해석 성공 결과, 전위 순회 순서(Successful resolution in pre-order).

    The root artifact itself may be the first entry.
    """

    artifacts: List[ResolvedArtifact] = field(default_factory=list)


@dataclass(frozen=True)
class ResolutionFailed:
    """해석 실패 결과(Resolution failed; no partial data)."""

    reason: str


ResolutionOutcome = Union[ResolvedDependencies, ResolutionFailed]
