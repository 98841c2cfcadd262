# ============================================================================
# SERVICES MODULE
# ============================================================================
# STATUS: Core - Lease and topology logic
# PURPOSE: Lease manager, remote config manager and node derivation
# CREATED: 17 OCT 2026
# ============================================================================
"""
Services Module

The deployment core: the namespace lease and the topology view every
command agrees on.

Usage:
    from services import LeaseManager, RemoteConfigManager, derive_consensus_nodes

    lease = await LeaseManager(clients.leases).acquire("net1", holder, 20)
    await remote_config_manager.load("net1")
    nodes = derive_consensus_nodes(remote_config_manager, local_config)
"""

from .lease_manager import (
    LeaseManager,
    LeaseRenewer,
    acquire_with_retry,
    release_quietly,
    lease_state,
)
from .remote_config_manager import (
    RemoteConfigManager,
    parse_remote_config,
    dump_remote_config,
)
from .consensus_nodes import (
    derive_consensus_nodes,
    distinct_contexts,
    distinct_cluster_refs,
    find_consensus_node,
)

__all__ = [
    "LeaseManager",
    "LeaseRenewer",
    "acquire_with_retry",
    "release_quietly",
    "lease_state",
    "RemoteConfigManager",
    "parse_remote_config",
    "dump_remote_config",
    "derive_consensus_nodes",
    "distinct_contexts",
    "distinct_cluster_refs",
    "find_consensus_node",
]
