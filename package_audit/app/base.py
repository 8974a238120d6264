"""감사 배치 요청 인터페이스 정의(Interface definition for audit batch requests)."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from .models import PackageDescriptor, PackageReport


class IPackageRequest(ABC):
    """감사 배치 요청 공통 인터페이스(Common interface for audit batch requests).

    Implementations do not deduplicate; callers must not add the same identity
    twice.
    """

    @abstractmethod
    def add(
        self, ecosystem: str, group_id: str, artifact_id: str, version: Optional[str]
    ) -> PackageDescriptor:
        """패키지 등록(Register one package identity for audit)."""

    @abstractmethod
    def run(self) -> List[PackageReport]:
        """등록된 패키지 감사 실행(Audit every registered package).

        Raises:
            AuditIOError: the audit service could not be queried
        """

    def close(self) -> None:
        """보유 자원 해제(Release held resources)."""
