# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Core type aliases and enums
# PURPOSE: Names shared by the lease, remote config and derivation layers
# LAST_REVIEWED: 17 OCT 2026
# EXPORTS: ClusterRef, ContextName, NodeAlias, ClusterRefs, LeaseState
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the deployment core.

The same logical names cross three boundaries:
- Cluster (lease and config map resources)
- Operator workstation (local config YAML)
- Python (derived consensus node identities)
"""

from enum import Enum
from typing import Dict, Optional


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Stable logical name of a target cluster (independent of kube context)
ClusterRef = str

# Kubernetes context name from the operator's kubeconfig
ContextName = str

# Consensus node alias, e.g. "node1"
NodeAlias = str

# clusterRef -> context (None when the operator has no mapping)
ClusterRefs = Dict[ClusterRef, Optional[ContextName]]


# ============================================================================
# STATUS ENUMS
# ============================================================================

class LeaseState(str, Enum):
    """
    Observed state of a namespace lease.

    State transitions:
        ABSENT -> HELD          (acquire)
        HELD -> HELD            (renew)
        HELD -> EXPIRED         (no renewal within the window)
        EXPIRED -> HELD         (transfer to a new holder)
        HELD/EXPIRED -> ABSENT  (release)
    """
    ABSENT = "absent"        # No lease resource in the namespace
    HELD = "held"            # Lease resource exists and is live
    EXPIRED = "expired"      # Lease resource exists but renewTime is stale

    def is_available(self) -> bool:
        """Check if a new holder may take the lease in this state."""
        return self in (LeaseState.ABSENT, LeaseState.EXPIRED)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ClusterRef",
    "ContextName",
    "NodeAlias",
    "ClusterRefs",
    "LeaseState",
]
