"""Dependency graph collection for package audits.

Gathers the transitive dependencies of requested artifacts, remembers which
root first introduced each package, and assembles the batch request that is
run against the audit service.
"""
from typing import Dict, Iterable, List, Optional

from dependency_resolver.app.base import IDependencyResolver
from dependency_resolver.app.models import DependencySpec, ResolutionFailed
from dependency_resolver.app.service import DepsDevResolver
from package_audit.app.base import IPackageRequest
from package_audit.app.models import PackageDescriptor, PackageIdentity, PackageReport
from package_audit.app.service import PackageRequest

from common_lib.config import get_settings
from common_lib.logger import get_logger

logger = get_logger(__name__)


class DependencyAuditor:
    """
    Collects deduplicated, parent-tracked packages for one audit session.

    The seen map and parent map live for the whole session: call ``add`` any
    number of times, then ``run``. A package keeps the parent it was first
    seen with, whichever root later reaches it again.

    Not safe for concurrent use. ``add`` checks and then updates the seen map
    without locking, so callers sharing an instance across threads must
    synchronize externally.
    """

    def __init__(
        self,
        resolver: Optional[IDependencyResolver] = None,
        request: Optional[IPackageRequest] = None,
        ecosystem: Optional[str] = None,
    ) -> None:
        self._resolver = resolver or DepsDevResolver()
        self._request = request or PackageRequest()
        self._ecosystem = ecosystem or get_settings().ecosystem
        self._seen: Dict[PackageIdentity, PackageDescriptor] = {}
        self._parents: Dict[PackageDescriptor, Optional[PackageDescriptor]] = {}

    def __enter__(self) -> "DependencyAuditor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def add(
        self,
        group_id: str,
        artifact_id: str,
        version: Optional[str],
        exclusions: Optional[Iterable[str]] = None,
    ) -> None:
        """
        Add an artifact and its transitive dependencies to the request.

        Args:
            group_id: Artifact group ID
            artifact_id: Artifact ID
            version: Version; None lets the resolver pick one
            exclusions: ``group:artifact`` keys dropped from this artifact's walk
        """
        excluded = frozenset(exclusions or ())
        root = self._register_root(group_id, artifact_id, version)

        spec = DependencySpec(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            scope="compile",
            exclusions=excluded,
        )
        outcome = self._resolver.resolve(spec)
        if isinstance(outcome, ResolutionFailed):
            # The root stays registered with no children.
            logger.warning("Dependencies of %s not collected: %s", root, outcome.reason)
            return

        added = 0
        for artifact in outcome.artifacts:
            if artifact.key in excluded:
                continue
            identity = PackageIdentity(self._ecosystem, artifact.group_id, artifact.artifact_id, artifact.version)
            if identity in self._seen:
                continue
            descriptor = self._request.add(*identity)
            self._seen[identity] = descriptor
            self._parents[descriptor] = root
            added += 1

        logger.info(
            "Collected %s (resolved=%d, new=%d, excluded=%d)",
            root,
            len(outcome.artifacts),
            added,
            len(excluded),
        )

    def run(self) -> List[PackageReport]:
        """
        Execute the batch request and attach each package's introducing parent.

        Raises:
            AuditIOError: the audit service could not be queried
        """
        reports = self._request.run()
        for report in reports:
            parent = self._parents.get(report.package)
            if parent is not None:
                report.parent = parent
        return reports

    def get_parent(self, package: PackageDescriptor) -> Optional[PackageDescriptor]:
        """Return the root that introduced ``package``; None for roots and unknown packages."""
        return self._parents.get(package)

    @property
    def packages(self) -> List[PackageDescriptor]:
        """Every package registered so far, in registration order."""
        return list(self._seen.values())

    def close(self) -> None:
        """Release the request's cache and the resolver. Safe to call more than once."""
        self._request.close()
        self._resolver.close()

    def _register_root(self, group_id: str, artifact_id: str, version: Optional[str]) -> PackageDescriptor:
        # A requested root is always recorded as a root, but an identity is
        # never registered with the request twice.
        identity = PackageIdentity(self._ecosystem, group_id, artifact_id, version)
        descriptor = self._seen.get(identity)
        if descriptor is None:
            descriptor = self._request.add(*identity)
            self._seen[identity] = descriptor
        elif self._parents.get(descriptor) is not None:
            logger.info("%s requested directly; no longer attributed to %s", descriptor, self._parents[descriptor])
        self._parents[descriptor] = None
        return descriptor
