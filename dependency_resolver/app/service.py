"""deps.dev 기반 의존성 해석 서비스(Dependency resolution backed by deps.dev)."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Set
from urllib.parse import quote

import httpx

from common_lib.config import get_settings
from common_lib.logger import get_logger
from common_lib.retry_config import get_retry_decorator
from src.core.errors import ResolutionError

from .base import IDependencyResolver
from .models import (
    DependencySpec,
    ResolutionFailed,
    ResolutionOutcome,
    ResolvedArtifact,
    ResolvedDependencies,
)

logger = get_logger(__name__)


class DepsDevResolver(IDependencyResolver):
    """deps.dev 해석 그래프 조회기(Resolver reading resolved Maven graphs from deps.dev).

    deps.dev already performs Maven version mediation and returns the graph
    as ``nodes`` plus ``edges``; node 0 is the requested artifact. The graph
    covers the compile/runtime dependency set, which is what the auditor asks
    for.
    """

    SYSTEM = "maven"

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None) -> None:
        settings = get_settings()
        self._base_url = (base_url or settings.deps_dev_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.http_timeout
        self._retry_attempts = settings.retry_attempts
        self._allow_external = settings.allow_external_calls

    def resolve(self, spec: DependencySpec) -> ResolutionOutcome:
        """전이 의존성 해석(Resolve the transitive dependencies of ``spec``)."""

        if not self._allow_external:
            logger.info("외부 해석 비활성화됨(External resolution disabled) for %s", spec.coordinates)
            return ResolutionFailed("external calls disabled")

        if spec.scope != "compile":
            logger.debug("deps.dev graphs are compile/runtime only; ignoring scope=%s", spec.scope)

        try:
            with httpx.Client(timeout=self._timeout, follow_redirects=True) as client:
                version = spec.version or self._default_version(client, spec)
                graph = self._get_json(client, self._dependencies_url(spec.key, version))
            artifacts = self._flatten(graph, spec)
        except ResolutionError as exc:
            logger.info("의존성 해석 실패(Resolution failed): %s", exc)
            return ResolutionFailed(exc.reason)
        except httpx.HTTPStatusError as exc:
            logger.info(
                "deps.dev HTTP 오류(HTTP %d) for %s",
                exc.response.status_code,
                spec.coordinates,
            )
            logger.debug("deps.dev failure details", exc_info=exc)
            return ResolutionFailed(f"deps.dev HTTP {exc.response.status_code}")
        except httpx.HTTPError as exc:
            logger.info("deps.dev 네트워크 오류(Network error) for %s: %s", spec.coordinates, exc)
            return ResolutionFailed(f"deps.dev network error: {exc}")
        except (TypeError, ValueError) as exc:
            logger.warning("deps.dev 응답 파싱 실패(Failed to parse response) for %s: %s", spec.coordinates, exc)
            return ResolutionFailed(f"invalid deps.dev response: {exc}")

        logger.info(
            "의존성 해석 성공(Resolved %d artifacts for %s)",
            len(artifacts),
            spec.coordinates,
        )
        return ResolvedDependencies(artifacts)

    def _package_url(self, name: str) -> str:
        return f"{self._base_url}/systems/{self.SYSTEM}/packages/{quote(name, safe='')}"

    def _dependencies_url(self, name: str, version: str) -> str:
        return f"{self._package_url(name)}/versions/{quote(version, safe='')}:dependencies"

    def _get_json(self, client: httpx.Client, url: str) -> Dict[str, Any]:
        def fetch() -> Any:
            response = client.get(url)
            response.raise_for_status()
            return response.json()

        data = get_retry_decorator(self._retry_attempts)(fetch)()
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        return data

    def _default_version(self, client: httpx.Client, spec: DependencySpec) -> str:
        """버전 미지정 시 기본 버전 선택(Pick the default version when none was given)."""

        data = self._get_json(client, self._package_url(spec.key))
        versions = [item for item in data.get("versions") or [] if isinstance(item, dict)]
        if not versions:
            raise ResolutionError(spec.coordinates, "no published versions")

        chosen = next((item for item in versions if item.get("isDefault")), versions[-1])
        version = _version_key(chosen).get("version")
        if not version:
            raise ResolutionError(spec.coordinates, "default version missing")
        logger.debug("Using default version %s for %s", version, spec.key)
        return str(version)

    @staticmethod
    def _flatten(graph: Dict[str, Any], spec: DependencySpec) -> List[ResolvedArtifact]:
        """그래프를 전위 순회 목록으로 변환(Flatten the graph in depth-first pre-order).

        Each node is emitted once, at its first visit. The subtree below an
        excluded ``group:artifact`` is not walked, though nodes it shares with
        other branches are still reached through those.
        """

        error = graph.get("error")
        if error:
            raise ResolutionError(spec.coordinates, str(error))

        nodes = graph.get("nodes")
        if not isinstance(nodes, list) or not nodes:
            raise ResolutionError(spec.coordinates, "empty dependency graph")

        children: Dict[int, List[int]] = {index: [] for index in range(len(nodes))}
        edges = graph.get("edges") or []
        if not isinstance(edges, list):
            raise ValueError("edges must be a list")
        for edge in edges:
            if not isinstance(edge, dict):
                raise ValueError(f"malformed edge: {edge!r}")
            source, target = edge.get("fromNode", 0), edge.get("toNode")
            if target is None or source not in children or target not in children:
                raise ValueError(f"edge references unknown node: {edge}")
            children[source].append(target)

        artifacts: List[ResolvedArtifact] = []
        visited: Set[int] = set()
        stack = [0]
        while stack:
            index = stack.pop()
            if index in visited:
                continue
            visited.add(index)

            version_key = _version_key(nodes[index])
            name = str(version_key.get("name", ""))
            group_id, _, artifact_id = name.partition(":")
            if not group_id or not artifact_id:
                raise ValueError(f"malformed maven package name: {name!r}")
            if index != 0 and name in spec.exclusions:
                continue

            artifacts.append(
                ResolvedArtifact(
                    group_id=group_id,
                    artifact_id=artifact_id,
                    version=str(version_key.get("version", "")),
                )
            )
            stack.extend(reversed(children[index]))
        return artifacts


def _version_key(node: Any) -> Dict[str, Any]:
    """노드의 versionKey 추출(Return a node's ``versionKey`` mapping)."""

    if not isinstance(node, dict):
        raise ValueError(f"malformed graph node: {node!r}")
    version_key = node.get("versionKey") or {}
    if not isinstance(version_key, dict):
        raise ValueError(f"malformed versionKey: {version_key!r}")
    return version_key
