"""의존성 해석기 인터페이스 정의(Interface definition for dependency resolvers)."""
from __future__ import annotations

from abc import ABC, abstractmethod

from .models import DependencySpec, ResolutionOutcome


class IDependencyResolver(ABC):
    """의존성 해석기 공통 인터페이스(Common interface for dependency resolvers).

    ``resolve`` returns artifacts in stable depth-first pre-order (a parent
    before its children, each artifact once). First-seen parent attribution in
    the auditor relies on that order. Failures are returned as
    ``ResolutionFailed``, never raised.

    ``spec.exclusions`` may be applied with Maven semantics, dropping the
    excluded artifact together with everything reachable only through it;
    ``DepsDevResolver`` does so. The auditor only guarantees that artifacts
    whose ``group:artifact`` is excluded are never registered, so a resolver
    that returns the dependencies below an excluded node gets them audited.
    """

    @abstractmethod
    def resolve(self, spec: DependencySpec) -> ResolutionOutcome:
        """전이 의존성 해석(Resolve the transitive dependencies of ``spec``)."""

    def close(self) -> None:
        """보유 자원 해제(Release held resources)."""
