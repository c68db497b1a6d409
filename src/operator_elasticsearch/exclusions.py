"""
Shard allocation exclusion management for draining and filling nodes.

Excluding a node by name makes Elasticsearch migrate its shards elsewhere
(drain); removing the exclusion lets shards move back (fill). Exclusions are
kept in the transient cluster.routing.allocation.exclude settings:

- exclude._name: comma-joined node names
- exclude._ip: comma-joined node IPs
- exclude._host: comma-joined host names

Relevant Elasticsearch documentation:
https://www.elastic.co/guide/en/elasticsearch/reference/current/modules-cluster.html#cluster-shard-allocation-filtering

Concurrency:
    drain() and fill() read the current names, then write the whole list
    back. There is no compare-and-swap, so two overlapping calls against the
    same cluster can lose one of the changes (last write wins). Callers must
    run at most one mutating call per cluster at a time.
"""

import logging
from dataclasses import dataclass
from typing import Any

from operator_elasticsearch.cluster_settings import put_cluster_settings
from operator_elasticsearch.errors import MalformedResponseError
from operator_elasticsearch.flatten import flatten_json, lookup, scope
from operator_elasticsearch.models import ExclusionSettings
from operator_elasticsearch.protocols import ClusterStateReader, RemoteSettingsStore

logger = logging.getLogger(__name__)

EXCLUDE_PREFIX = "cluster.routing.allocation.exclude"
EXCLUDE_NAME_KEY = f"{EXCLUDE_PREFIX}._name"
EXCLUDE_IP_KEY = f"{EXCLUDE_PREFIX}._ip"
EXCLUDE_HOST_KEY = f"{EXCLUDE_PREFIX}._host"


def exclusions_from_json(document: dict[str, Any]) -> ExclusionSettings:
    """
    Extract the transient exclusion lists from a settings document.

    Unset or empty categories decode to empty lists.

    Raises:
        MalformedResponseError: If the "transient" group is missing.
    """
    transient = scope(document, "transient")
    return ExclusionSettings(
        names=ExclusionSettings.split(lookup(transient, EXCLUDE_NAME_KEY)),
        ips=ExclusionSettings.split(lookup(transient, EXCLUDE_IP_KEY)),
        hosts=ExclusionSettings.split(lookup(transient, EXCLUDE_HOST_KEY)),
    )


@dataclass
class ExclusionManager:
    """
    Reads and edits the node exclusion lists.

    Attributes:
        reader: Source of the current settings document.
        store: Destination for settings writes.

    Example:
        manager = ExclusionManager(reader=client, store=client)
        await manager.drain("es-data-7")    # shards start moving off
        ...                                 # maintenance
        await manager.fill("es-data-7")     # shards may move back
    """

    reader: ClusterStateReader
    store: RemoteSettingsStore

    async def read(self) -> ExclusionSettings:
        """
        Get the current exclusion lists.

        Raises:
            TransportError: On connection failure or timeout.
            BadStatusError: On non-2xx responses.
            MalformedResponseError: If the "transient" group is missing.
        """
        return exclusions_from_json(await self.reader.get_raw_settings())

    async def drain(self, node_name: str) -> ExclusionSettings:
        """
        Exclude a node by name so its shards migrate away.

        The name is appended as given; draining the same node twice lists it
        twice.

        Args:
            node_name: Node name to exclude.

        Returns:
            Exclusion lists as confirmed by the write. The write only echoes
            names, so ips and hosts come from the preceding read unless the
            response carries them.

        Raises:
            TransportError: On connection failure or timeout.
            BadStatusError: On non-2xx responses.
            MalformedResponseError: If the response does not echo the names.
        """
        current = await self.read()
        names = current.names + [node_name]

        response = await put_cluster_settings(
            self.store,
            {"transient": {EXCLUDE_NAME_KEY: ExclusionSettings.joined(names)}},
        )
        transient = scope(response, "transient")
        # an empty echoed value is a valid (empty) list; only a missing key is malformed
        echoed_names = flatten_json(transient).get(EXCLUDE_NAME_KEY)
        if echoed_names is None:
            raise MalformedResponseError(f"response does not echo {EXCLUDE_NAME_KEY}")

        ips = lookup(transient, EXCLUDE_IP_KEY)
        hosts = lookup(transient, EXCLUDE_HOST_KEY)
        updated = ExclusionSettings(
            names=ExclusionSettings.split(echoed_names),
            ips=ExclusionSettings.split(ips) if ips is not None else current.ips,
            hosts=ExclusionSettings.split(hosts) if hosts is not None else current.hosts,
        )

        logger.info("Drained node %s; excluded names: %s", node_name, updated.names)
        return updated

    async def fill(self, node_name: str) -> ExclusionSettings:
        """
        Remove a node name from the exclusions so it can receive shards.

        Every entry equal to the stripped name is removed. The write is sent
        even if the name was not excluded.

        Args:
            node_name: Node name to stop excluding.

        Returns:
            Exclusion lists re-read after the write.

        Raises:
            TransportError: On connection failure or timeout.
            BadStatusError: On non-2xx responses.
            MalformedResponseError: If the "transient" group is missing.
        """
        current = await self.read()
        target = node_name.strip()
        names = [name for name in current.names if name != target]

        await put_cluster_settings(
            self.store,
            {"transient": {EXCLUDE_NAME_KEY: ExclusionSettings.joined(names)}},
        )

        refreshed = await self.read()
        logger.info("Filled node %s; excluded names: %s", target, refreshed.names)
        return refreshed

    async def fill_all(self) -> ExclusionSettings:
        """
        Remove every name, IP and host exclusion in a single write.

        Returns:
            Exclusion lists parsed from the response (all empty).

        Raises:
            TransportError: On connection failure or timeout.
            BadStatusError: On non-2xx responses.
            MalformedResponseError: If the "transient" group is missing.
        """
        response = await put_cluster_settings(
            self.store,
            {"transient": {EXCLUDE_PREFIX: {"_name": "", "_ip": "", "_host": ""}}},
        )
        cleared = exclusions_from_json(response)
        logger.info("Cleared all allocation exclusions")
        return cleared
