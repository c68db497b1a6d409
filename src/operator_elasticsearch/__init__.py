"""
Elasticsearch cluster operations for the operator.

This package provides the decision-support core for draining, filling and
decommissioning Elasticsearch nodes. It includes:

- ElasticsearchClient: httpx-based reader and settings store
- ExclusionManager: drain/fill nodes via allocation exclusion rules
- ClusterSettingsManager: read-modify-write of arbitrary cluster settings
- ShardOverlapAnalyzer: whether removing a set of nodes risks data loss
- RecoveryEstimator: time remaining for in-flight shard recoveries
- Elasticsearch _cat response types for API parsing
"""

__version__ = "0.1.0"

from operator_elasticsearch.cluster_settings import ClusterSettingsManager
from operator_elasticsearch.config import ElasticsearchConfig
from operator_elasticsearch.errors import (
    BadStatusError,
    DegenerateComputationError,
    ElasticsearchOperatorError,
    MalformedResponseError,
    TransportError,
)
from operator_elasticsearch.es_client import ElasticsearchClient, check_status
from operator_elasticsearch.exclusions import ExclusionManager
from operator_elasticsearch.factory import (
    ClusterOperations,
    create_cluster_operations,
    create_elasticsearch_client,
)
from operator_elasticsearch.flatten import flatten_json, settings_from_json
from operator_elasticsearch.models import (
    ClusterSettings,
    ExclusionSettings,
    IndexReplicas,
    RecoveryEstimate,
    RecoverySample,
    Setting,
    SettingChange,
    ShardOverlap,
    ShardRecord,
    ShardRecovery,
    ShardRole,
)
from operator_elasticsearch.overlap import ShardOverlapAnalyzer
from operator_elasticsearch.protocols import ClusterStateReader, RemoteSettingsStore
from operator_elasticsearch.recovery import (
    RecoveryEstimator,
    parse_duration,
    time_remaining,
)
from operator_elasticsearch.types import CatIndexRow, CatRecoveryRow, CatShardRow

__all__ = [
    "__version__",
    # Client and protocols
    "ElasticsearchClient",
    "ClusterStateReader",
    "RemoteSettingsStore",
    "check_status",
    # Configuration and factory
    "ElasticsearchConfig",
    "ClusterOperations",
    "create_elasticsearch_client",
    "create_cluster_operations",
    # Operations
    "ExclusionManager",
    "ClusterSettingsManager",
    "ShardOverlapAnalyzer",
    "RecoveryEstimator",
    "parse_duration",
    "time_remaining",
    # JSON helpers
    "flatten_json",
    "settings_from_json",
    # Domain types
    "ExclusionSettings",
    "Setting",
    "ClusterSettings",
    "SettingChange",
    "ShardRole",
    "ShardRecord",
    "IndexReplicas",
    "ShardOverlap",
    "RecoverySample",
    "ShardRecovery",
    "RecoveryEstimate",
    # Errors
    "ElasticsearchOperatorError",
    "TransportError",
    "BadStatusError",
    "MalformedResponseError",
    "DegenerateComputationError",
    # _cat API types
    "CatShardRow",
    "CatIndexRow",
    "CatRecoveryRow",
]
