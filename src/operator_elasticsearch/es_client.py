"""
Elasticsearch REST client for cluster state observation and settings writes.

This module provides the ElasticsearchClient class, which implements both
ClusterStateReader and RemoteSettingsStore over the Elasticsearch HTTP API.

ElasticsearchClient receives an injected httpx.AsyncClient with base_url set
to the cluster. Every request carries a bounded timeout and is sent exactly
once; there is no automatic retry. asyncio cancellation is never caught, so a
cancelled caller cancels the in-flight request.

Elasticsearch API Documentation:
- https://www.elastic.co/guide/en/elasticsearch/reference/current/cluster-update-settings.html
- https://www.elastic.co/guide/en/elasticsearch/reference/current/cat.html
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from operator_elasticsearch.errors import (
    BadStatusError,
    MalformedResponseError,
    TransportError,
)
from operator_elasticsearch.models import (
    IndexReplicas,
    ShardRecord,
    ShardRecovery,
    ShardRole,
)
from operator_elasticsearch.types import CatIndexRow, CatRecoveryRow, CatShardRow

logger = logging.getLogger(__name__)

CLUSTER_SETTINGS_PATH = "/_cluster/settings"

DEFAULT_TIMEOUT_SECONDS = 60.0


def check_status(status_code: int, body: str) -> None:
    """
    Raise BadStatusError for any non-2xx status.

    Args:
        status_code: HTTP status code of the response.
        body: Raw response body, kept verbatim in the error.

    Raises:
        BadStatusError: If status_code is outside 200-299.
    """
    if not 200 <= status_code < 300:
        raise BadStatusError(status_code, body)


def _parse_rows(model: type[BaseModel], data: Any, path: str) -> list[Any]:
    if not isinstance(data, list):
        raise MalformedResponseError(f"{path}: expected a JSON array")
    try:
        return [model.model_validate(row) for row in data]
    except ValidationError as exc:
        raise MalformedResponseError(f"{path}: {exc}") from exc


@dataclass
class ElasticsearchClient:
    """
    Elasticsearch API client with injected httpx client.

    Reads cluster state from the _cat APIs and reads/writes cluster
    settings. Converts Elasticsearch response types to domain types.

    Attributes:
        http: Pre-configured httpx.AsyncClient with base_url set to the cluster.
        timeout: Per-request timeout in seconds.

    Example:
        async with httpx.AsyncClient(base_url="http://es:9200") as http:
            client = ElasticsearchClient(http=http)
            shards = await client.get_shards()
            for shard in shards:
                print(f"{shard.index}/{shard.shard_number} on {shard.node}")
    """

    http: httpx.AsyncClient
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    async def _send(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        logger.debug("%s %s params=%s", method, path, params)
        try:
            return await self.http.request(
                method, path, params=params, json=json, timeout=self.timeout
            )
        except httpx.TransportError as exc:
            raise TransportError(method, path, str(exc) or type(exc).__name__) from exc

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        response = await self._send("GET", path, params=params)
        check_status(response.status_code, response.text)
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(f"{path}: invalid JSON ({exc})") from exc

    async def get_shards(self) -> list[ShardRecord]:
        """
        Get every shard copy in the cluster.

        Calls GET /_cat/shards?format=json and converts each row to a
        ShardRecord.

        Returns:
            List of ShardRecord objects, unassigned copies included.

        Raises:
            TransportError: On connection failure or timeout.
            BadStatusError: On non-2xx responses.
            MalformedResponseError: On rows that fail validation or an
                unknown prirep code.

        Note:
            A RELOCATING copy's node is the composite
            "source -> ip id target" string; it is not split here.
        """
        path = "/_cat/shards"
        rows = _parse_rows(
            CatShardRow, await self._get_json(path, {"format": "json"}), path
        )

        records = []
        for row in rows:
            try:
                role = ShardRole(row.prirep)
            except ValueError as exc:
                raise MalformedResponseError(
                    f"{path}: unknown prirep {row.prirep!r}"
                ) from exc
            records.append(
                ShardRecord(
                    index=row.index,
                    shard_number=row.shard,
                    role=role,
                    state=row.state,
                    node=row.node or "",
                )
            )
        return records

    async def get_indices(self) -> list[IndexReplicas]:
        """
        Get every index with its configured replica count.

        Calls GET /_cat/indices?format=json.

        Raises:
            TransportError: On connection failure or timeout.
            BadStatusError: On non-2xx responses.
            MalformedResponseError: On rows missing the index or rep column.
        """
        path = "/_cat/indices"
        rows = _parse_rows(
            CatIndexRow, await self._get_json(path, {"format": "json"}), path
        )
        # a closed index reports "rep": null; count it as no replicas
        return [
            IndexReplicas(name=row.index, replica_count=row.rep or 0) for row in rows
        ]

    async def get_raw_settings(self) -> dict[str, Any]:
        """
        Get the cluster settings document.

        Calls GET /_cluster/settings. The document is returned as parsed;
        callers pick out the "persistent" and "transient" groups.

        Raises:
            TransportError: On connection failure or timeout.
            BadStatusError: On non-2xx responses.
            MalformedResponseError: If the body is not a JSON object.
        """
        data = await self._get_json(CLUSTER_SETTINGS_PATH)
        if not isinstance(data, dict):
            raise MalformedResponseError(
                f"{CLUSTER_SETTINGS_PATH}: expected a JSON object"
            )
        return data

    async def get_recoveries(self, active_only: bool = True) -> list[ShardRecovery]:
        """
        Get shard recoveries.

        Calls GET /_cat/recovery?format=json&bytes=b, adding
        active_only=true when requested.

        Args:
            active_only: Only return recoveries that are still running.

        Raises:
            TransportError: On connection failure or timeout.
            BadStatusError: On non-2xx responses.
            MalformedResponseError: On rows that fail validation.
        """
        path = "/_cat/recovery"
        params = {"format": "json", "bytes": "b"}
        if active_only:
            params["active_only"] = "true"

        rows = _parse_rows(CatRecoveryRow, await self._get_json(path, params), path)
        return [
            ShardRecovery(
                index=row.index,
                shard_number=row.shard,
                time=row.time,
                type=row.type,
                stage=row.stage,
                source_host=row.source_host or "",
                source_node=row.source_node or "",
                target_host=row.target_host or "",
                target_node=row.target_node,
                bytes_total=row.bytes_total,
                bytes_recovered=row.bytes_recovered,
                bytes_percent=row.bytes_percent,
                files_total=row.files_total,
                files_recovered=row.files_recovered,
                files_percent=row.files_percent,
            )
            for row in rows
        ]

    # -------------------------------------------------------------------------
    # Settings writes
    # -------------------------------------------------------------------------

    async def put(self, path: str, body: dict[str, Any]) -> tuple[int, str]:
        """
        PUT a JSON body and report the raw outcome.

        Args:
            path: Request path, e.g. "/_cluster/settings".
            body: JSON-serializable request body.

        Returns:
            Tuple of (status_code, raw response body text). Non-2xx statuses
            are returned, not raised; pass them through check_status().

        Raises:
            TransportError: On connection failure or timeout.
        """
        response = await self._send("PUT", path, json=body)
        return response.status_code, response.text
