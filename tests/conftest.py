"""
Shared fixtures for operator-elasticsearch tests.

- MockTransport replays canned HTTP responses and records every request
- FakeCluster is an in-memory ClusterStateReader + RemoteSettingsStore that
  applies settings writes, for tests that need state across calls
"""

import json
from typing import Any

import httpx
import pytest

from operator_elasticsearch.es_client import ElasticsearchClient
from operator_elasticsearch.models import (
    IndexReplicas,
    ShardRecord,
    ShardRecovery,
)


class MockTransport(httpx.AsyncBaseTransport):
    """Mock transport for testing HTTP responses."""

    def __init__(self, responses: dict[tuple[str, str], Any]):
        """
        Initialize with mapping of (method, path) to response data.

        Args:
            responses: Each value is a dict with optional 'status_code' and
                'json' or 'text' keys, or a list of such dicts served in
                order (the last one repeats).
        """
        self._responses = {
            key: list(value) if isinstance(value, list) else [value]
            for key, value in responses.items()
        }
        self.requests: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        """Handle an async request by returning mocked response."""
        self.requests.append(request)
        queue = self._responses.get((request.method, request.url.path))
        if not queue:
            # Return 404 for unknown paths
            return httpx.Response(status_code=404, request=request)

        resp_data = queue.pop(0) if len(queue) > 1 else queue[0]
        status_code = resp_data.get("status_code", 200)
        if "text" in resp_data:
            return httpx.Response(status_code, text=resp_data["text"], request=request)
        return httpx.Response(status_code, json=resp_data.get("json", {}), request=request)

    def sent_bodies(self, method: str = "PUT") -> list[Any]:
        """JSON bodies of recorded requests with the given method."""
        return [json.loads(r.content) for r in self.requests if r.method == method]


@pytest.fixture
def make_client():
    """Build an ElasticsearchClient over a MockTransport."""

    def _make(responses: dict[tuple[str, str], Any]) -> tuple[ElasticsearchClient, MockTransport]:
        transport = MockTransport(responses)
        http = httpx.AsyncClient(transport=transport, base_url="http://es:9200")
        return ElasticsearchClient(http=http), transport

    return _make


def _flat_items(node: dict[str, Any], prefix: str = ""):
    for key, value in node.items():
        full_key = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            yield from _flat_items(value, full_key)
        else:
            yield full_key, value


class FakeCluster:
    """In-memory cluster that stores settings flat and echoes writes."""

    def __init__(
        self,
        transient: dict[str, str] | None = None,
        persistent: dict[str, str] | None = None,
        shards: list[ShardRecord] | None = None,
        indices: list[IndexReplicas] | None = None,
        recoveries: list[ShardRecovery] | None = None,
    ):
        self.transient = dict(transient or {})
        self.persistent = dict(persistent or {})
        self.shards = list(shards or [])
        self.indices = list(indices or [])
        self.recoveries = list(recoveries or [])
        self.puts: list[dict[str, Any]] = []

    async def get_shards(self) -> list[ShardRecord]:
        return list(self.shards)

    async def get_indices(self) -> list[IndexReplicas]:
        return list(self.indices)

    async def get_raw_settings(self) -> dict[str, Any]:
        return {"persistent": dict(self.persistent), "transient": dict(self.transient)}

    async def get_recoveries(self, active_only: bool = True) -> list[ShardRecovery]:
        return list(self.recoveries)

    async def put(self, path: str, body: dict[str, Any]) -> tuple[int, str]:
        self.puts.append(body)
        echoed = {}
        for key, value in _flat_items(body.get("transient", {})):
            if value is None:
                # null resets to default and is left out of the echo
                self.transient.pop(key, None)
            else:
                self.transient[key] = value
                echoed[key] = value
        return 200, json.dumps({"acknowledged": True, "persistent": {}, "transient": echoed})


@pytest.fixture
def fake_cluster():
    """Create a FakeCluster factory with optional initial state."""
    return FakeCluster
