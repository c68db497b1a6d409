"""
Shard recovery progress and time-remaining estimates.

The estimate assumes the throughput seen so far continues unchanged:

    rate      = bytes_recovered / elapsed_seconds
    remaining = bytes_total - bytes_recovered
    eta       = remaining / rate

It comes from one sample per recovery, so early estimates are noisy. When the
rate is undefined (nothing elapsed) or zero (nothing recovered), the estimate
is reported as unknown instead of a number.
"""

import logging
import re
from dataclasses import dataclass
from datetime import timedelta

from operator_elasticsearch.errors import DegenerateComputationError
from operator_elasticsearch.models import RecoveryEstimate, RecoverySample, ShardRecovery
from operator_elasticsearch.overlap import compile_patterns, matches_any
from operator_elasticsearch.protocols import ClusterStateReader

logger = logging.getLogger(__name__)

# Seconds per unit. Covers Elasticsearch time units ("1.2m", "850micros")
# and Go-style units ("1h30m", "250us").
_UNIT_SECONDS = {
    "d": 86400.0,
    "h": 3600.0,
    "m": 60.0,
    "s": 1.0,
    "ms": 1e-3,
    "micros": 1e-6,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "nanos": 1e-9,
    "ns": 1e-9,
}

# Longer units first so "ms" is not read as "m" followed by garbage
_UNIT_PATTERN = "|".join(sorted(_UNIT_SECONDS, key=len, reverse=True))
_COMPONENT = re.compile(rf"(\d+(?:\.\d*)?|\.\d+)({_UNIT_PATTERN})")
_DURATION = re.compile(rf"(?:(?:\d+(?:\.\d*)?|\.\d+)(?:{_UNIT_PATTERN}))+")


def parse_duration(text: str) -> timedelta:
    """
    Parse an elapsed-time string such as "2h", "17.2s" or "1h30m".

    A bare "0" is accepted as zero.

    Raises:
        DegenerateComputationError: If the text is not a duration.
    """
    value = text.strip()
    if value == "0":
        return timedelta(0)
    if not _DURATION.fullmatch(value):
        raise DegenerateComputationError(f"unparseable elapsed time {text!r}")

    seconds = sum(
        float(number) * _UNIT_SECONDS[unit]
        for number, unit in _COMPONENT.findall(value)
    )
    return timedelta(seconds=seconds)


def time_remaining(sample: RecoverySample) -> timedelta:
    """
    Estimate the time left for a recovery from one throughput sample.

    The result is truncated to whole seconds.

    Args:
        sample: Elapsed time and byte counters of the recovery.

    Returns:
        Estimated time remaining.

    Raises:
        DegenerateComputationError: If elapsed time is zero or unparseable,
            nothing has been recovered yet, or more bytes were recovered
            than the total.

    Example:
        >>> time_remaining(RecoverySample("2h", bytes_total=400, bytes_recovered=100))
        datetime.timedelta(seconds=21600)
    """
    elapsed = parse_duration(sample.elapsed).total_seconds()
    if elapsed <= 0:
        raise DegenerateComputationError("no time has elapsed, rate is undefined")
    if sample.bytes_recovered <= 0:
        raise DegenerateComputationError("no bytes recovered yet, rate is zero")

    remaining = sample.bytes_total - sample.bytes_recovered
    if remaining < 0:
        raise DegenerateComputationError(
            f"recovered {sample.bytes_recovered} of {sample.bytes_total} bytes"
        )

    # remaining / (recovered / elapsed), ordered to avoid rounding the rate
    return timedelta(seconds=int(remaining * elapsed / sample.bytes_recovered))


def estimate(recovery: ShardRecovery) -> RecoveryEstimate:
    """Estimate one recovery, recording the reason when it is unknown."""
    try:
        return RecoveryEstimate(recovery=recovery, eta=time_remaining(recovery.sample))
    except DegenerateComputationError as exc:
        return RecoveryEstimate(recovery=recovery, reason=exc.reason)


@dataclass
class RecoveryEstimator:
    """
    Lists shard recoveries and estimates their remaining time.

    Attributes:
        reader: Source of the recovery listing.

    Example:
        estimator = RecoveryEstimator(reader=client)
        for est in await estimator.estimate(["es-data-7"]):
            shown = est.eta if est.known else f"unknown ({est.reason})"
            print(f"{est.recovery.index}/{est.recovery.shard_number}: {shown}")
    """

    reader: ClusterStateReader

    async def get_recoveries(
        self, patterns: list[str] | None = None, active_only: bool = True
    ) -> list[ShardRecovery]:
        """
        Get recoveries whose source or target node matches any pattern.

        Args:
            patterns: Node-name regular expressions. None or empty returns
                every recovery.
            active_only: Only include recoveries that are still running.

        Raises:
            re.error: On an invalid pattern, before any request is sent.
        """
        compiled = compile_patterns(patterns or [])
        recoveries = await self.reader.get_recoveries(active_only=active_only)
        if not compiled:
            return recoveries
        return [
            recovery
            for recovery in recoveries
            if matches_any(recovery.source_node, compiled)
            or matches_any(recovery.target_node, compiled)
        ]

    async def estimate(
        self, patterns: list[str] | None = None, active_only: bool = True
    ) -> list[RecoveryEstimate]:
        """
        Estimate time remaining for each matching recovery.

        Recoveries whose estimate is degenerate get eta=None and a reason;
        they never get a numeric value.
        """
        estimates = [
            estimate(recovery)
            for recovery in await self.get_recoveries(patterns, active_only)
        ]
        unknown = sum(1 for est in estimates if not est.known)
        logger.debug("Estimated %d recoveries, %d unknown", len(estimates), unknown)
        return estimates
