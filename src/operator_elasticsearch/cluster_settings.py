"""
Read-modify-write access to arbitrary cluster settings.

ClusterSettingsManager reads persistent and transient settings as sorted
dot-path lists and writes single transient settings, reporting the value
before and after the write.

Concurrency:
    set() reads the current value, then writes the new one. Elasticsearch
    offers no version token on cluster settings, so two overlapping writers
    can interleave and the old value reported by one of them may already be
    stale. Callers must serialize mutating calls per cluster.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from operator_elasticsearch.errors import MalformedResponseError
from operator_elasticsearch.es_client import CLUSTER_SETTINGS_PATH, check_status
from operator_elasticsearch.flatten import lookup, scope, settings_from_json
from operator_elasticsearch.models import ClusterSettings, SettingChange
from operator_elasticsearch.protocols import ClusterStateReader, RemoteSettingsStore

logger = logging.getLogger(__name__)

ALLOCATION_ENABLE_KEY = "cluster.routing.allocation.enable"


async def put_cluster_settings(
    store: RemoteSettingsStore, body: dict[str, Any]
) -> dict[str, Any]:
    """
    PUT a cluster settings body and return the parsed response.

    Raises:
        TransportError: On connection failure or timeout.
        BadStatusError: On non-2xx responses, with the raw body.
        MalformedResponseError: If the response is not a JSON object.
    """
    status_code, text = await store.put(CLUSTER_SETTINGS_PATH, body)
    check_status(status_code, text)
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise MalformedResponseError(
            f"{CLUSTER_SETTINGS_PATH}: invalid JSON ({exc})"
        ) from exc
    if not isinstance(data, dict):
        raise MalformedResponseError(f"{CLUSTER_SETTINGS_PATH}: expected a JSON object")
    return data


@dataclass
class ClusterSettingsManager:
    """
    Generic getter/setter for cluster settings.

    Attributes:
        reader: Source of the current settings document.
        store: Destination for settings writes.

    Example:
        manager = ClusterSettingsManager(reader=client, store=client)
        change = await manager.set(
            "cluster.routing.allocation.cluster_concurrent_rebalance", "100"
        )
        print(f"{change.key}: {change.old_value} -> {change.new_value}")
    """

    reader: ClusterStateReader
    store: RemoteSettingsStore

    async def get(self) -> ClusterSettings:
        """
        Get all persistent and transient cluster settings.

        Each group is flattened to dot-path keys, empty values are dropped,
        and entries are sorted by key.

        Raises:
            MalformedResponseError: If either group is missing.
        """
        document = await self.reader.get_raw_settings()
        return ClusterSettings(
            persistent=settings_from_json(scope(document, "persistent")),
            transient=settings_from_json(scope(document, "transient")),
        )

    async def set(self, key: str, value: str | None) -> SettingChange:
        """
        Set a transient cluster setting.

        The old value is the transient value if set, otherwise the
        persistent value, otherwise None. Passing value=None sends JSON null,
        which resets the setting so Elasticsearch falls back to its default.

        Args:
            key: Dotted setting name, e.g. "cluster.routing.allocation.enable".
            value: New value, or None to reset.

        Returns:
            SettingChange with old and new values.

        Raises:
            TransportError: On connection failure or timeout.
            BadStatusError: If Elasticsearch rejects the value; the error
                carries the raw response body.
            MalformedResponseError: If a settings group is missing.
        """
        document = await self.reader.get_raw_settings()
        old_value = lookup(scope(document, "transient"), key) or lookup(
            scope(document, "persistent"), key
        )

        response = await put_cluster_settings(self.store, {"transient": {key: value}})
        # Elasticsearch omits a reset setting from the echo entirely
        transient = response.get("transient")
        new_value = lookup(transient, key) if isinstance(transient, dict) else None

        logger.info("Set transient %s: %r -> %r", key, old_value, new_value)
        return SettingChange(key=key, old_value=old_value, new_value=new_value)

    async def set_allocation(self, enabled: bool) -> str:
        """
        Enable or disable shard allocation cluster-wide.

        Disabling stops Elasticsearch from relocating shards while nodes drop
        in and out; enabling lets it rebalance again.

        Args:
            enabled: True for "all", False for "none".

        Returns:
            The allocation value echoed by Elasticsearch.

        Raises:
            MalformedResponseError: If the response does not echo the value.
        """
        setting = "all" if enabled else "none"
        response = await put_cluster_settings(
            self.store, {"transient": {ALLOCATION_ENABLE_KEY: setting}}
        )
        echoed = lookup(scope(response, "transient"), ALLOCATION_ENABLE_KEY)
        if echoed is None:
            raise MalformedResponseError(f"response does not echo {ALLOCATION_ENABLE_KEY}")

        logger.info("Shard allocation set to %s", echoed)
        return echoed
