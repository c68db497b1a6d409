"""
Factory functions for creating an Elasticsearch client and its operations.

This module wires an ElasticsearchClient into the operation classes so
callers do not have to pass the same client as reader and store to each
one.
"""

from dataclasses import dataclass

import httpx

from operator_elasticsearch.cluster_settings import ClusterSettingsManager
from operator_elasticsearch.config import ElasticsearchConfig
from operator_elasticsearch.es_client import ElasticsearchClient
from operator_elasticsearch.exclusions import ExclusionManager
from operator_elasticsearch.overlap import ShardOverlapAnalyzer
from operator_elasticsearch.recovery import RecoveryEstimator


@dataclass
class ClusterOperations:
    """All operations against one cluster, sharing one client."""

    client: ElasticsearchClient
    exclusions: ExclusionManager
    settings: ClusterSettingsManager
    overlap: ShardOverlapAnalyzer
    recovery: RecoveryEstimator


def create_elasticsearch_client(
    config: ElasticsearchConfig | None = None,
    http: httpx.AsyncClient | None = None,
) -> ElasticsearchClient:
    """
    Create an ElasticsearchClient.

    Args:
        config: Connection configuration. If None, it is read from
            ES_OPERATOR_* environment variables.
        http: Optional pre-configured httpx client. If None, a new client is
            created with config.base_url and config.timeout_seconds.

    Returns:
        ElasticsearchClient ready for use. The caller owns the httpx client
        and should close it with `await client.http.aclose()`.

    Example:
        client = create_elasticsearch_client(
            ElasticsearchConfig(host="es-master-0", port=9200)
        )
        shards = await client.get_shards()
    """
    if config is None:
        config = ElasticsearchConfig()
    if http is None:
        http = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            headers={"Accept": "application/json"},
        )
    return ElasticsearchClient(http=http, timeout=config.timeout_seconds)


def create_cluster_operations(
    config: ElasticsearchConfig | None = None,
    http: httpx.AsyncClient | None = None,
) -> ClusterOperations:
    """
    Create every operation class bound to one ElasticsearchClient.

    Example:
        ops = create_cluster_operations(ElasticsearchConfig(host="es-master-0"))
        overlap = await ops.overlap.get_shard_overlap(["es-data-7"])
        if all(entry.safe_to_remove for entry in overlap.values()):
            await ops.exclusions.drain("es-data-7")
    """
    client = create_elasticsearch_client(config, http)
    return ClusterOperations(
        client=client,
        exclusions=ExclusionManager(reader=client, store=client),
        settings=ClusterSettingsManager(reader=client, store=client),
        overlap=ShardOverlapAnalyzer(reader=client),
        recovery=RecoveryEstimator(reader=client),
    )
