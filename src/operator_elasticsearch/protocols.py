"""
Capability protocols for talking to an Elasticsearch cluster.

Operations in this package depend on two narrow interfaces instead of one
broad client:

- ClusterStateReader: read-only listings of shards, indices, recoveries and
  the raw cluster settings document
- RemoteSettingsStore: key/value writes to the cluster settings endpoint

ElasticsearchClient implements both. Tests and alternative transports can
implement either one on its own.
"""

from typing import Any, Protocol, runtime_checkable

from operator_elasticsearch.models import IndexReplicas, ShardRecord, ShardRecovery


@runtime_checkable
class ClusterStateReader(Protocol):
    """
    Protocol for reading cluster state.

    Every method issues exactly one request and raises
    operator_elasticsearch.errors exceptions on failure.
    """

    async def get_shards(self) -> list[ShardRecord]:
        """Return every shard copy in the cluster, assigned or not."""
        ...

    async def get_indices(self) -> list[IndexReplicas]:
        """Return every index with its configured replica count."""
        ...

    async def get_raw_settings(self) -> dict[str, Any]:
        """
        Return the cluster settings document.

        The document has top-level "persistent" and "transient" objects,
        each either nested or flat.
        """
        ...

    async def get_recoveries(self, active_only: bool = True) -> list[ShardRecovery]:
        """Return shard recoveries, optionally only those still running."""
        ...


@runtime_checkable
class RemoteSettingsStore(Protocol):
    """
    Protocol for writing cluster settings.

    put() reports the status instead of raising on a non-2xx response so the
    caller decides how to surface the raw body. There is no version token or
    compare-and-swap: the last write wins.
    """

    async def put(self, path: str, body: dict[str, Any]) -> tuple[int, str]:
        """
        Send a JSON body with PUT.

        Args:
            path: Request path relative to the cluster base URL.
            body: JSON-serializable request body.

        Returns:
            Tuple of (status_code, raw response body text).
        """
        ...
