"""Pytest configuration and shared fixtures."""
from typing import Dict, Iterable, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest

from common_lib.config import get_settings
from dependency_resolver.app.base import IDependencyResolver
from dependency_resolver.app.models import (
    DependencySpec,
    ResolutionFailed,
    ResolutionOutcome,
    ResolvedArtifact,
    ResolvedDependencies,
)
from package_audit.app.base import IPackageRequest
from package_audit.app.models import PackageDescriptor, PackageReport
from src.core.auditor import DependencyAuditor

Triple = Tuple[str, str, str]


class StubResolver(IDependencyResolver):
    """Resolver answering from a fixed ``coordinates -> pre-order list`` table."""

    def __init__(self, graphs: Dict[str, List[Triple]], failures: Iterable[str] = ()) -> None:
        self.graphs = graphs
        self.failures = set(failures)
        self.calls: List[DependencySpec] = []
        self.closed = False

    def resolve(self, spec: DependencySpec) -> ResolutionOutcome:
        self.calls.append(spec)
        if spec.coordinates in self.failures or spec.coordinates not in self.graphs:
            return ResolutionFailed(f"cannot collect {spec.coordinates}")
        return ResolvedDependencies(
            [ResolvedArtifact(group_id=g, artifact_id=a, version=v) for g, a, v in self.graphs[spec.coordinates]]
        )

    def close(self) -> None:
        self.closed = True


class RecordingRequest(IPackageRequest):
    """Batch request that records registrations and returns one empty report each."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.added: List[PackageDescriptor] = []
        self.pending: List[PackageDescriptor] = []
        self.error = error
        self.closed = False

    def add(self, ecosystem: str, group_id: str, artifact_id: str, version: Optional[str]) -> PackageDescriptor:
        descriptor = PackageDescriptor(
            ecosystem=ecosystem, group_id=group_id, artifact_id=artifact_id, version=version
        )
        self.added.append(descriptor)
        self.pending.append(descriptor)
        return descriptor

    def run(self) -> List[PackageReport]:
        if self.error is not None:
            raise self.error
        batch, self.pending = self.pending, []
        return [PackageReport(package=descriptor) for descriptor in batch]

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Offline-safe settings: no redis, single HTTP attempt."""
    monkeypatch.setenv("DA_ENABLE_CACHE", "false")
    monkeypatch.setenv("DA_RETRY_ATTEMPTS", "1")
    monkeypatch.setenv("DA_ALLOW_EXTERNAL_CALLS", "true")
    monkeypatch.setenv("DA_OSSINDEX_USERNAME", "")
    monkeypatch.setenv("DA_OSSINDEX_TOKEN", "")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def recording_request() -> RecordingRequest:
    return RecordingRequest()


@pytest.fixture
def make_auditor(recording_request):
    """Build an auditor over a StubResolver with the given graphs."""

    def _make(graphs: Dict[str, List[Triple]], failures: Iterable[str] = ()) -> DependencyAuditor:
        return DependencyAuditor(
            resolver=StubResolver(graphs, failures),
            request=recording_request,
            ecosystem="maven",
        )

    return _make


def descriptor(coordinates: str) -> PackageDescriptor:
    """``g:a:v`` -> maven PackageDescriptor."""
    group_id, artifact_id, version = coordinates.split(":")
    return PackageDescriptor(ecosystem="maven", group_id=group_id, artifact_id=artifact_id, version=version)


def mock_http_client(mock_class: MagicMock) -> MagicMock:
    """Configure a patched ``httpx.Client`` class to hand out one context-managed mock."""
    client = MagicMock()
    client.__enter__.return_value = client
    client.__exit__.return_value = None
    mock_class.return_value = client
    return client


def json_response(payload) -> MagicMock:
    response = MagicMock()  # MagicMock for synchronous .json()
    response.status_code = 200
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response
