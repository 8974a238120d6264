"""Unit tests for the deps.dev resolver adapter."""
from unittest.mock import patch

import httpx
import pytest

from common_lib.config import get_settings
from dependency_resolver.app.models import DependencySpec, ResolutionFailed, ResolvedDependencies
from dependency_resolver.app.service import DepsDevResolver
from src.core.auditor import DependencyAuditor
from tests.conftest import RecordingRequest, json_response, mock_http_client


def _node(name: str, version: str, relation: str = "INDIRECT") -> dict:
    return {
        "versionKey": {"system": "MAVEN", "name": name, "version": version},
        "bundled": False,
        "relation": relation,
        "errors": [],
    }


# app -> (web, json); web -> (core, json); json -> (core); core -> (log)
DIAMOND_GRAPH = {
    "nodes": [
        _node("com.example:app", "1.0", "SELF"),
        _node("com.example:web", "2.0", "DIRECT"),
        _node("com.example:json", "3.0", "DIRECT"),
        _node("com.example:core", "4.0"),
        _node("com.example:log", "5.0"),
    ],
    "edges": [
        {"fromNode": 0, "toNode": 1, "requirement": "2.0"},
        {"fromNode": 0, "toNode": 2, "requirement": "3.0"},
        {"fromNode": 1, "toNode": 3, "requirement": "4.0"},
        {"fromNode": 1, "toNode": 2, "requirement": "3.0"},
        {"fromNode": 2, "toNode": 3, "requirement": "4.0"},
        {"fromNode": 3, "toNode": 4, "requirement": "5.0"},
    ],
    "error": "",
}


@pytest.fixture
def resolver() -> DepsDevResolver:
    return DepsDevResolver(base_url="https://deps.test/v3")


def _coordinates(outcome) -> list:
    assert isinstance(outcome, ResolvedDependencies)
    return [artifact.coordinates for artifact in outcome.artifacts]


def test_graph_flattened_in_preorder(resolver):
    spec = DependencySpec(group_id="com.example", artifact_id="app", version="1.0")

    with patch("httpx.Client") as MockClient:
        client = mock_http_client(MockClient)
        client.get.return_value = json_response(DIAMOND_GRAPH)
        outcome = resolver.resolve(spec)

    client.get.assert_called_once_with(
        "https://deps.test/v3/systems/maven/packages/com.example%3Aapp/versions/1.0:dependencies"
    )
    assert _coordinates(outcome) == [
        "com.example:app:1.0",
        "com.example:web:2.0",
        "com.example:core:4.0",
        "com.example:log:5.0",
        "com.example:json:3.0",
    ]


def test_excluded_subtree_not_walked(resolver):
    spec = DependencySpec(
        group_id="com.example",
        artifact_id="app",
        version="1.0",
        exclusions=frozenset({"com.example:core"}),
    )

    with patch("httpx.Client") as MockClient:
        client = mock_http_client(MockClient)
        client.get.return_value = json_response(DIAMOND_GRAPH)
        outcome = resolver.resolve(spec)

    assert _coordinates(outcome) == [
        "com.example:app:1.0",
        "com.example:web:2.0",
        "com.example:json:3.0",
    ]


def test_default_version_used_when_missing(resolver):
    spec = DependencySpec(group_id="com.example", artifact_id="app")
    package_info = {
        "versions": [
            {"versionKey": {"system": "MAVEN", "name": "com.example:app", "version": "0.9"}, "isDefault": False},
            {"versionKey": {"system": "MAVEN", "name": "com.example:app", "version": "1.0"}, "isDefault": True},
        ]
    }

    with patch("httpx.Client") as MockClient:
        client = mock_http_client(MockClient)
        client.get.side_effect = [json_response(package_info), json_response(DIAMOND_GRAPH)]
        outcome = resolver.resolve(spec)

    assert client.get.call_args_list[1].args[0].endswith("/versions/1.0:dependencies")
    assert _coordinates(outcome)[0] == "com.example:app:1.0"


def test_graph_error_is_resolution_failure(resolver):
    spec = DependencySpec(group_id="com.example", artifact_id="app", version="1.0")
    graph = dict(DIAMOND_GRAPH, error="could not resolve com.example:missing")

    with patch("httpx.Client") as MockClient:
        client = mock_http_client(MockClient)
        client.get.return_value = json_response(graph)
        outcome = resolver.resolve(spec)

    assert isinstance(outcome, ResolutionFailed)
    assert "com.example:missing" in outcome.reason


def test_not_found_is_resolution_failure(resolver):
    spec = DependencySpec(group_id="com.example", artifact_id="ghost", version="1.0")
    request = httpx.Request("GET", "https://deps.test/v3")
    not_found = httpx.HTTPStatusError(
        "Not Found", request=request, response=httpx.Response(404, request=request)
    )

    with patch("httpx.Client") as MockClient:
        client = mock_http_client(MockClient)
        client.get.side_effect = not_found
        outcome = resolver.resolve(spec)

    assert outcome == ResolutionFailed("deps.dev HTTP 404")


def test_network_error_is_resolution_failure(resolver):
    spec = DependencySpec(group_id="com.example", artifact_id="app", version="1.0")

    with patch("httpx.Client") as MockClient:
        client = mock_http_client(MockClient)
        client.get.side_effect = httpx.ConnectError("unreachable")
        outcome = resolver.resolve(spec)

    assert isinstance(outcome, ResolutionFailed)


def test_malformed_payload_is_resolution_failure(resolver):
    spec = DependencySpec(group_id="com.example", artifact_id="app", version="1.0")
    graph = {"nodes": [_node("not-a-maven-name", "1.0", "SELF")], "edges": []}

    with patch("httpx.Client") as MockClient:
        client = mock_http_client(MockClient)
        client.get.return_value = json_response(graph)
        outcome = resolver.resolve(spec)

    assert isinstance(outcome, ResolutionFailed)


@pytest.mark.parametrize(
    "graph",
    [
        {"nodes": [_node("com.example:app", "1.0", "SELF"), None], "edges": [{"fromNode": 0, "toNode": 1}]},
        {"nodes": [_node("com.example:app", "1.0", "SELF")], "edges": ["oops"]},
        {"nodes": [_node("com.example:app", "1.0", "SELF")], "edges": "oops"},
        {"nodes": [{"versionKey": "com.example:app:1.0"}], "edges": []},
        {"nodes": [_node("com.example:app", "1.0", "SELF")], "edges": [{"fromNode": [0], "toNode": 0}]},
    ],
    ids=["null-node", "string-edge", "edges-not-list", "string-version-key", "unhashable-node-ref"],
)
def test_wrongly_shaped_graph_is_resolution_failure(resolver, graph):
    spec = DependencySpec(group_id="com.example", artifact_id="app", version="1.0")

    with patch("httpx.Client") as MockClient:
        client = mock_http_client(MockClient)
        client.get.return_value = json_response(graph)
        outcome = resolver.resolve(spec)

    assert isinstance(outcome, ResolutionFailed)
    assert outcome.reason.startswith("invalid deps.dev response")


def test_wrongly_shaped_default_version_is_resolution_failure(resolver):
    spec = DependencySpec(group_id="com.example", artifact_id="app")
    package_info = {"versions": [{"versionKey": "1.0", "isDefault": True}]}

    with patch("httpx.Client") as MockClient:
        client = mock_http_client(MockClient)
        client.get.return_value = json_response(package_info)
        outcome = resolver.resolve(spec)

    assert isinstance(outcome, ResolutionFailed)


def test_auditor_keeps_root_when_graph_is_wrongly_shaped(resolver):
    request = RecordingRequest()
    auditor = DependencyAuditor(resolver=resolver, request=request, ecosystem="maven")
    graph = {"nodes": [_node("com.example:app", "1.0", "SELF"), None], "edges": [{"fromNode": 0, "toNode": 1}]}

    with patch("httpx.Client") as MockClient:
        client = mock_http_client(MockClient)
        client.get.return_value = json_response(graph)
        auditor.add("com.example", "app", "1.0")

    assert [package.coordinates for package in request.added] == ["com.example:app:1.0"]
    assert auditor.get_parent(request.added[0]) is None


def test_external_calls_disabled(monkeypatch):
    monkeypatch.setenv("DA_ALLOW_EXTERNAL_CALLS", "false")
    get_settings.cache_clear()
    resolver = DepsDevResolver()

    with patch("httpx.Client") as MockClient:
        outcome = resolver.resolve(DependencySpec(group_id="g", artifact_id="a", version="1"))

    MockClient.assert_not_called()
    assert outcome == ResolutionFailed("external calls disabled")
