# ============================================================================
# KUBE INFRASTRUCTURE MODULE
# ============================================================================
# STATUS: Infrastructure - Cluster API access
# PURPOSE: Per-resource async clients and per-context factory
# CREATED: 17 OCT 2026
# ============================================================================
"""
Kubernetes access layer.

Usage:
    from infrastructure.kube import KubeClientFactory

    clients = KubeClientFactory().for_context("kind-cluster-a")
    lease = await clients.leases.read("net1", "deployment-lease")
"""

from .errors import (
    KubeApiError,
    ResourceNotFoundError,
    ResourceConflictError,
    KubeUnavailableError,
    translate_api_exception,
)
from .leases import LeaseClient, to_lease_body, from_v1_lease, format_micro_time
from .config_maps import ConfigMapClient, ConfigMapRecord
from .factory import KubeClientFactory, KubeClients

__all__ = [
    "KubeApiError",
    "ResourceNotFoundError",
    "ResourceConflictError",
    "KubeUnavailableError",
    "translate_api_exception",
    "LeaseClient",
    "to_lease_body",
    "from_v1_lease",
    "format_micro_time",
    "ConfigMapClient",
    "ConfigMapRecord",
    "KubeClientFactory",
    "KubeClients",
]
