# ============================================================================
# MODELS MODULE
# ============================================================================
# STATUS: Model exports
# PURPOSE: Central export point for all Pydantic models
# LAST_REVIEWED: 17 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

All Pydantic models for the deployment core:
    - Lease / LeaseHolder: namespace mutual exclusion handle
    - RemoteConfig: cluster-persisted topology record
    - ConsensusNode: derived node identity
"""

from core.models.lease import Lease, LeaseHolder, DEFAULT_LEASE_NAME, utc_now
from core.models.remote_config import (
    RemoteConfig,
    RemoteConfigMetadata,
    RemoteConfigComponents,
    ClusterMetadata,
    ConsensusNodeComponent,
)
from core.models.consensus_node import ConsensusNode

__all__ = [
    # Lease
    "Lease",
    "LeaseHolder",
    "DEFAULT_LEASE_NAME",
    "utc_now",
    # Remote config
    "RemoteConfig",
    "RemoteConfigMetadata",
    "RemoteConfigComponents",
    "ClusterMetadata",
    "ConsensusNodeComponent",
    # Derived
    "ConsensusNode",
]
