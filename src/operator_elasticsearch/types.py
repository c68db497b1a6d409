"""
Elasticsearch-specific Pydantic response types.

This module provides Pydantic models for parsing rows returned by the _cat
APIs with format=json:
- _cat/shards: Shard copies and the node holding each
- _cat/indices: Index metadata including configured replica count
- _cat/recovery: In-flight and completed shard recoveries

These are API response types for external data validation. Internal
types (ShardRecord, ShardOverlap, etc.) are dataclasses in
operator_elasticsearch.models.

Notes:
- _cat APIs return every value as a string, including numbers ("rep": "1");
  pydantic coerces them to int
- Unassigned shards have "node": null
- Dotted column names ("docs.count") are mapped with aliases
"""

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# _cat/shards
# =============================================================================
# Based on: https://www.elastic.co/guide/en/elasticsearch/reference/current/cat-shards.html


class CatShardRow(BaseModel):
    """
    Single row from GET /_cat/shards?format=json.

    Example row:
        {"index": "logs", "shard": "1", "prirep": "p", "state": "RELOCATING",
         "docs": "0", "store": "162b", "ip": "10.0.0.1",
         "node": "node-a -> 10.0.0.2 bDke_wlKn4Lk node-b"}
    """

    model_config = ConfigDict(extra="ignore")

    index: str
    shard: int
    prirep: str  # "p" or "r"
    state: str  # STARTED, RELOCATING, INITIALIZING, UNASSIGNED
    node: str | None = None


# =============================================================================
# _cat/indices
# =============================================================================
# Based on: https://www.elastic.co/guide/en/elasticsearch/reference/current/cat-indices.html


class CatIndexRow(BaseModel):
    """
    Single row from GET /_cat/indices?format=json.

    Example row:
        {"health": "green", "status": "open", "index": "logs", "pri": "5",
         "rep": "1", "store.size": "3.6kb", "docs.count": "1500"}
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    index: str
    rep: int | None  # null for a closed index
    pri: int | None = None
    health: str | None = None
    status: str | None = None
    store_size: str | None = Field(default=None, alias="store.size")
    docs_count: int | None = Field(default=None, alias="docs.count")


# =============================================================================
# _cat/recovery
# =============================================================================
# Based on: https://www.elastic.co/guide/en/elasticsearch/reference/current/cat-recovery.html
# Requested with bytes=b so byte counters are plain integers.


class CatRecoveryRow(BaseModel):
    """
    Single row from GET /_cat/recovery?format=json&bytes=b.

    Example row:
        {"index": "logs", "shard": "0", "time": "2h", "type": "peer",
         "stage": "index", "source_host": "10.0.0.1", "source_node": "node-0",
         "target_host": "10.0.0.2", "target_node": "node-1",
         "bytes_total": "400", "bytes_recovered": "100", "bytes_percent": "25%"}
    """

    model_config = ConfigDict(extra="ignore")

    index: str
    shard: int
    time: str
    type: str
    stage: str
    source_host: str | None = None
    source_node: str | None = None
    target_host: str | None = None
    target_node: str
    bytes_total: int
    bytes_recovered: int
    bytes_percent: str = ""
    files_total: int = 0
    files_recovered: int = 0
    files_percent: str = ""
