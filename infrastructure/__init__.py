# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# STATUS: Infrastructure - Cluster access
# PURPOSE: Kubernetes resource clients for leases and config maps
# CREATED: 17 OCT 2026
# ============================================================================
"""
Infrastructure module for the deployer.

Provides:
- KubeClientFactory: per-context bundles of resource clients
- LeaseClient / ConfigMapClient: one async client per resource kind
- KubeApiError family: translated cluster API failures

Usage:
    from infrastructure import KubeClientFactory

    clients = KubeClientFactory(kubeconfig_path).for_context("kind-cluster-a")
    record = await clients.config_maps.read("net1", "solo-remote-config")
"""

from infrastructure.kube import (
    KubeApiError,
    ResourceNotFoundError,
    ResourceConflictError,
    KubeUnavailableError,
    LeaseClient,
    ConfigMapClient,
    ConfigMapRecord,
    KubeClientFactory,
    KubeClients,
)

__all__ = [
    # Errors
    'KubeApiError',
    'ResourceNotFoundError',
    'ResourceConflictError',
    'KubeUnavailableError',
    # Resource clients
    'LeaseClient',
    'ConfigMapClient',
    'ConfigMapRecord',
    # Factory
    'KubeClientFactory',
    'KubeClients',
]
