"""Spawn ephemeral, fully peered LND regtest clusters for integration tests."""

from lncluster.core.cluster.cluster import Cluster
from lncluster.core.cluster.node import ChainFacade, Node
from lncluster.core.cluster.orchestrator import (
    ClusterOrchestrator,
    ClusterRequest,
    aspawn_cluster,
    spawn_cluster,
)
from lncluster.core.cluster.ports import PortGroup
from lncluster.core.errors import (
    ConnectionFailure,
    LNClusterError,
    MaturityTimeout,
    ProvisioningFailure,
    ResourceContention,
    RetryExhausted,
    TeardownFailure,
    UserError,
)

__all__ = [
    "ChainFacade",
    "Cluster",
    "ClusterOrchestrator",
    "ClusterRequest",
    "ConnectionFailure",
    "LNClusterError",
    "MaturityTimeout",
    "Node",
    "PortGroup",
    "ProvisioningFailure",
    "ResourceContention",
    "RetryExhausted",
    "TeardownFailure",
    "UserError",
    "aspawn_cluster",
    "spawn_cluster",
]
