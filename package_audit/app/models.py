"""패키지 감사 데이터 모델(Package audit data models)."""
from __future__ import annotations

from typing import List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field


class PackageIdentity(NamedTuple):
    """중복 제거 키(Deduplication key)."""

    ecosystem: str
    group_id: str
    artifact_id: str
    version: Optional[str]


class PackageDescriptor(BaseModel):
    """감사 요청에 등록된 패키지 핸들(Handle for a package registered for audit)."""

    model_config = ConfigDict(frozen=True)

    ecosystem: str = Field(default="maven", description="패키지 생태계(Ecosystem)")
    group_id: str
    artifact_id: str
    version: Optional[str] = None

    @property
    def identity(self) -> PackageIdentity:
        return PackageIdentity(self.ecosystem, self.group_id, self.artifact_id, self.version)

    @property
    def key(self) -> str:
        """버전 무관 키(Version-agnostic ``group:artifact`` key)."""

        return f"{self.group_id}:{self.artifact_id}"

    @property
    def coordinates(self) -> str:
        return f"{self.key}:{self.version or ''}"

    @property
    def purl(self) -> str:
        """Package URL 변환(Convert to a Package URL)."""

        purl = f"pkg:{self.ecosystem}/{self.group_id}/{self.artifact_id}"
        if self.version:
            purl += f"@{self.version}"
        return purl

    def __str__(self) -> str:
        return self.coordinates


class Vulnerability(BaseModel):
    """취약점 정보(Vulnerability reported by the audit service)."""

    id: str
    title: str = ""
    description: str = ""
    cvss_score: Optional[float] = None
    cvss_vector: Optional[str] = None
    cve: Optional[str] = None
    cwe: Optional[str] = None
    reference: Optional[str] = None


class PackageReport(BaseModel):
    """패키지별 감사 결과(Per-package audit result record)."""

    package: PackageDescriptor
    reference: Optional[str] = None
    description: Optional[str] = None
    vulnerabilities: List[Vulnerability] = Field(default_factory=list)
    audited: bool = Field(default=True, description="실제 서비스 조회 여부(False when lookups were skipped)")
    parent: Optional[PackageDescriptor] = Field(
        default=None,
        description="이 패키지를 처음 끌어온 루트(Root that first introduced this package)",
    )

    @property
    def is_vulnerable(self) -> bool:
        return len(self.vulnerabilities) > 0
