"""
Domain types for Elasticsearch cluster operations.

These are internal result types returned by the operations in this package,
not API models. Pydantic models for raw Elasticsearch responses live in
operator_elasticsearch.types.

Per project patterns:
- @dataclass for internal types
- str enum for values that round-trip to the wire
- Explicit None instead of sentinel empty strings for "unset"
"""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum


class ShardRole(str, Enum):
    """Shard copy role, using the _cat/shards "prirep" codes."""

    PRIMARY = "p"
    """The authoritative copy; exactly one per shard."""

    REPLICA = "r"
    """A redundant copy of the primary."""


LIVE_SHARD_STATES = frozenset({"STARTED", "RELOCATING"})
"""Shard states that hold a complete, serving copy of the data."""


@dataclass
class ExclusionSettings:
    """
    The cluster.routing.allocation.exclude rules of a cluster.

    Exists only as the return value of a read or write; nothing is persisted.

    Attributes:
        names: Excluded node names (exclude._name).
        ips: Excluded node IP addresses (exclude._ip).
        hosts: Excluded node host names (exclude._host).
    """

    names: list[str] = field(default_factory=list)
    ips: list[str] = field(default_factory=list)
    hosts: list[str] = field(default_factory=list)

    @staticmethod
    def split(value: str | None) -> list[str]:
        """Split a comma-joined upstream value; "" and None give []."""
        if not value:
            return []
        return value.split(",")

    @staticmethod
    def joined(values: list[str]) -> str:
        """Re-serialize a list for the wire."""
        return ",".join(values)


@dataclass
class Setting:
    """
    A single cluster setting in collapsed dot-path form.

    A setting of:

        {"indices": {"recovery": {"max_bytes_per_sec": "10mb"}}}

    is represented by:

        Setting(key="indices.recovery.max_bytes_per_sec", value="10mb")
    """

    key: str
    value: str


@dataclass
class ClusterSettings:
    """Persistent and transient cluster settings, each sorted by key."""

    persistent: list[Setting] = field(default_factory=list)
    transient: list[Setting] = field(default_factory=list)


@dataclass
class SettingChange:
    """
    Result of setting a transient cluster setting.

    Attributes:
        key: Dotted setting name.
        old_value: Value before the write (transient first, then persistent),
            or None when the setting was at its default.
        new_value: Transient value echoed by Elasticsearch, or None when the
            setting was reset to its default.
    """

    key: str
    old_value: str | None
    new_value: str | None


@dataclass
class ShardRecord:
    """
    One shard copy as listed by _cat/shards.

    Attributes:
        index: Index name.
        shard_number: Shard number within the index.
        role: Primary or replica.
        state: STARTED, RELOCATING, INITIALIZING, UNASSIGNED, ...
        node: Node name holding the copy. While RELOCATING this is the
            composite "source -> ip id target" descriptor. Empty when
            unassigned.
    """

    index: str
    shard_number: int
    role: ShardRole
    state: str
    node: str = ""

    @property
    def is_live_primary(self) -> bool:
        return self.role is ShardRole.PRIMARY and self.state in LIVE_SHARD_STATES

    @property
    def is_live_replica(self) -> bool:
        return self.role is ShardRole.REPLICA and self.state in LIVE_SHARD_STATES


@dataclass
class IndexReplicas:
    """An index and its configured number of replicas."""

    name: str
    replica_count: int


@dataclass
class ShardOverlap:
    """
    How much of one shard lives on a matched set of nodes.

    Attributes:
        index: Index name.
        shard_number: Shard number within the index.
        primary_found: A live primary copy is on the matched nodes.
        replicas_found: Number of live replica copies on the matched nodes.
        replicas_total: Replica count configured for the index.
    """

    index: str
    shard_number: int
    primary_found: bool = False
    replicas_found: int = 0
    replicas_total: int = 0

    @property
    def key(self) -> str:
        return f"{self.index}_{self.shard_number}"

    @property
    def safe_to_remove(self) -> bool:
        """
        Whether the matched nodes can be removed without losing this shard.

        Unsafe exactly when the primary and at least every configured
        replica are all on the matched nodes.
        """
        return not (self.primary_found and self.replicas_found >= self.replicas_total)


@dataclass
class RecoverySample:
    """
    A single throughput observation of an in-flight shard recovery.

    Attributes:
        elapsed: Time spent so far, as reported by _cat/recovery (e.g. "2h").
        bytes_total: Bytes the recovery has to copy.
        bytes_recovered: Bytes copied so far.
    """

    elapsed: str
    bytes_total: int
    bytes_recovered: int


@dataclass
class ShardRecovery:
    """
    One shard recovery as listed by _cat/recovery.

    Only the fields used for filtering and estimation are typed; the
    percentages are kept as reported.
    """

    index: str
    shard_number: int
    time: str
    type: str
    stage: str
    source_host: str
    source_node: str
    target_host: str
    target_node: str
    bytes_total: int
    bytes_recovered: int
    bytes_percent: str = ""
    files_total: int = 0
    files_recovered: int = 0
    files_percent: str = ""

    @property
    def sample(self) -> RecoverySample:
        return RecoverySample(
            elapsed=self.time,
            bytes_total=self.bytes_total,
            bytes_recovered=self.bytes_recovered,
        )


@dataclass
class RecoveryEstimate:
    """
    Estimated time remaining for one recovery.

    Exactly one of eta and reason is set: eta when the estimate is known,
    reason when it is unknown.
    """

    recovery: ShardRecovery
    eta: timedelta | None = None
    reason: str | None = None

    @property
    def known(self) -> bool:
        return self.eta is not None
