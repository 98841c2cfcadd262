# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export core contracts, models and errors
# LAST_REVIEWED: 17 OCT 2026
# ============================================================================

from core.contracts import ClusterRef, ContextName, NodeAlias, ClusterRefs, LeaseState
from core.errors import (
    DeploymentError,
    LeaseError,
    LeaseAcquisitionError,
    LeaseRenewalError,
    LeaseTransferError,
    LeaseReleaseError,
    RemoteConfigError,
    RemoteConfigNotFoundError,
    RemoteConfigConflictError,
    RemoteConfigValidationError,
    ConfigurationError,
    CommandError,
)
from core.models import (
    Lease,
    LeaseHolder,
    RemoteConfig,
    ClusterMetadata,
    ConsensusNodeComponent,
    ConsensusNode,
)

__all__ = [
    # Contracts
    "ClusterRef",
    "ContextName",
    "NodeAlias",
    "ClusterRefs",
    "LeaseState",
    # Errors
    "DeploymentError",
    "LeaseError",
    "LeaseAcquisitionError",
    "LeaseRenewalError",
    "LeaseTransferError",
    "LeaseReleaseError",
    "RemoteConfigError",
    "RemoteConfigNotFoundError",
    "RemoteConfigConflictError",
    "RemoteConfigValidationError",
    "ConfigurationError",
    "CommandError",
    # Models
    "Lease",
    "LeaseHolder",
    "RemoteConfig",
    "ClusterMetadata",
    "ConsensusNodeComponent",
    "ConsensusNode",
]
