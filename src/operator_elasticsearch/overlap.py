"""
Shard overlap analysis for deciding whether nodes can be removed safely.

Given a set of node-name patterns, ShardOverlapAnalyzer reports, per shard,
whether the live primary and how many live replicas sit on the matched
nodes. A shard is unsafe to remove when the primary and at least every
configured replica are all on the matched nodes, since removing them would
drop the last live copy.

Node patterns:
- Each pattern is compiled as an unanchored regular expression and matched
  with re.search, so "node-1" also matches "node-10"
- Names containing regex metacharacters ("." in "es.data.1") can match
  unintended nodes; escape them with re.escape() for a literal match
- A RELOCATING shard's node is "source -> ip id target"; a pattern matching
  either half selects it
"""

import logging
import re
from dataclasses import dataclass

from operator_elasticsearch.models import ShardOverlap, ShardRecord
from operator_elasticsearch.protocols import ClusterStateReader

logger = logging.getLogger(__name__)


def compile_patterns(patterns: list[str]) -> list[re.Pattern[str]]:
    """
    Compile node-name patterns.

    Raises:
        re.error: If any pattern is not a valid regular expression.
    """
    return [re.compile(pattern) for pattern in patterns]


def matches_any(node: str, compiled: list[re.Pattern[str]]) -> bool:
    """Whether any pattern matches anywhere in the node descriptor."""
    return any(pattern.search(node) for pattern in compiled)


def filter_shards(
    shards: list[ShardRecord], compiled: list[re.Pattern[str]]
) -> list[ShardRecord]:
    """
    Keep shards whose node matches at least one pattern.

    Each shard is kept once, however many patterns match it. With no
    patterns every shard is kept.
    """
    if not compiled:
        return list(shards)
    return [shard for shard in shards if matches_any(shard.node, compiled)]


def fold_overlap(
    shards: list[ShardRecord], replica_counts: dict[str, int]
) -> dict[str, ShardOverlap]:
    """
    Fold shard copies into one ShardOverlap per index/shard.

    Args:
        shards: Shard copies on the nodes under consideration.
        replica_counts: Configured replica count per index. Indices missing
            from the mapping count as 0 replicas.

    Returns:
        Mapping of "{index}_{shard_number}" to ShardOverlap.
    """
    overlap: dict[str, ShardOverlap] = {}

    for shard in shards:
        key = f"{shard.index}_{shard.shard_number}"
        entry = overlap.get(key)
        if entry is None:
            entry = ShardOverlap(
                index=shard.index,
                shard_number=shard.shard_number,
                replicas_total=replica_counts.get(shard.index, 0),
            )
            overlap[key] = entry

        if shard.is_live_primary:
            entry.primary_found = True
        elif shard.is_live_replica:
            entry.replicas_found += 1

    return overlap


@dataclass
class ShardOverlapAnalyzer:
    """
    Computes shard placement overlap for a set of nodes.

    Attributes:
        reader: Source of shard and index listings.

    Example:
        analyzer = ShardOverlapAnalyzer(reader=client)
        overlap = await analyzer.get_shard_overlap(["es-data-7", "es-data-8"])
        unsafe = [o.key for o in overlap.values() if not o.safe_to_remove]
        if unsafe:
            print(f"Removing these nodes would lose: {unsafe}")
    """

    reader: ClusterStateReader

    async def get_shards(self, patterns: list[str] | None = None) -> list[ShardRecord]:
        """
        Get shard copies on nodes matching any pattern.

        Args:
            patterns: Node-name regular expressions. None or empty returns
                every shard.

        Raises:
            re.error: On an invalid pattern, before any request is sent.
            TransportError, BadStatusError, MalformedResponseError: From the
                shard listing.
        """
        compiled = compile_patterns(patterns or [])
        shards = filter_shards(await self.reader.get_shards(), compiled)
        logger.debug("%d shard copies match %s", len(shards), patterns)
        return shards

    async def get_shard_overlap(
        self, patterns: list[str] | None = None
    ) -> dict[str, ShardOverlap]:
        """
        Get per-shard overlap for nodes matching any pattern.

        Fetches all shards and all indices (two requests), keeps the shard
        copies on matched nodes and folds them per index/shard. Read
        ShardOverlap.safe_to_remove on each entry to judge the removal.

        Args:
            patterns: Node-name regular expressions. None or empty considers
                every node.

        Returns:
            Mapping of "{index}_{shard_number}" to ShardOverlap. Shards with
            no copy on a matched node are absent.

        Raises:
            re.error: On an invalid pattern, before any request is sent.
            TransportError, BadStatusError, MalformedResponseError: From
                either listing.
        """
        shards = await self.get_shards(patterns)
        indices = await self.reader.get_indices()
        replica_counts = {index.name: index.replica_count for index in indices}

        overlap = fold_overlap(shards, replica_counts)
        unsafe = sum(1 for entry in overlap.values() if not entry.safe_to_remove)
        logger.debug("%d shards overlap %s, %d unsafe to remove", len(overlap), patterns, unsafe)
        return overlap
