# ============================================================================
# CONSENSUS NODE MODEL
# ============================================================================
# STATUS: Core model - Derived node identity (never persisted)
# PURPOSE: Join of remote topology and operator-local context mapping
# LAST_REVIEWED: 17 OCT 2026
# EXPORTS: ConsensusNode
# DEPENDENCIES: pydantic
# ============================================================================
"""
Consensus Node Model

A ConsensusNode is recomputed on every request from the loaded
RemoteConfig and the operator's LocalConfig. It is immutable once built.

context is None when the operator's local config has no entry for the
node's cluster reference.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ConsensusNode(BaseModel):
    """Fully resolved identity of one consensus node."""

    name: str = Field(..., description="Node alias")
    node_id: int = Field(..., ge=0)
    namespace: str
    cluster: str = Field(..., description="Cluster reference")
    context: Optional[str] = Field(
        default=None,
        description="Kube context resolved through local config"
    )
    dns_base_domain: str
    dns_consensus_node_pattern: str
    full_qualified_domain_name: str

    model_config = {"frozen": True}


__all__ = ["ConsensusNode"]
