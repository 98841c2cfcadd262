# ============================================================================
# REMOTE CONFIG MODEL
# ============================================================================
# STATUS: Core model - Cluster-persisted deployment topology
# PURPOSE: Clusters + consensus node components, the topology source of truth
# LAST_REVIEWED: 17 OCT 2026
# EXPORTS: RemoteConfig, RemoteConfigMetadata, RemoteConfigComponents,
#          ClusterMetadata, ConsensusNodeComponent
# DEPENDENCIES: pydantic
# ============================================================================
"""
Remote Config Model

The RemoteConfig is the authoritative record of a deployment's topology.
It is stored as a YAML document inside a config map in the deployment
namespace and loaded once per command invocation.

Document shape (camelCase, as stored):

    metadata:
      namespace: net1
      deploymentName: net1-deployment
      lastUpdatedAt: 2026-10-17T12:00:00+00:00
      lastUpdatedBy: ops@laptop:4242:9f1c2a7e
      commandHistory: ["deployment create"]
      version: 1
    clusters:
      cluster-a:
        name: cluster-a
        namespace: net1
        deployment: net1-deployment
        dnsBaseDomain: cluster.local
        dnsConsensusNodePattern: network-${nodeAlias}-svc.${namespace}.svc
    components:
      consensusNodes:
        node1: {name: node1, nodeId: 0, namespace: net1, cluster: cluster-a}

Absence of components.consensusNodes is valid and means zero nodes.
"""

from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, Field

from __version__ import REMOTE_CONFIG_SCHEMA_VERSION
from core.models.lease import utc_now

MAX_COMMAND_HISTORY = 50


class ClusterMetadata(BaseModel):
    """
    Per-cluster metadata recorded in the remote config.

    DNS fields are optional; consumers fall back to defaults when absent.
    """

    name: str = Field(..., min_length=1, description="Cluster reference")
    namespace: Optional[str] = Field(default=None)
    deployment: Optional[str] = Field(default=None)
    dns_base_domain: Optional[str] = Field(
        default=None,
        alias="dnsBaseDomain",
        description="DNS base domain of the cluster (e.g. cluster.local)"
    )
    dns_consensus_node_pattern: Optional[str] = Field(
        default=None,
        alias="dnsConsensusNodePattern",
        description="FQDN pattern with ${nodeAlias}/${namespace} placeholders"
    )

    model_config = {"populate_by_name": True}


class ConsensusNodeComponent(BaseModel):
    """A consensus node as recorded in the remote config."""

    name: str = Field(..., min_length=1, description="Node alias, e.g. node1")
    node_id: int = Field(..., ge=0, alias="nodeId")
    namespace: str = Field(..., min_length=1)
    cluster: str = Field(..., min_length=1, description="Owning cluster reference")

    model_config = {"populate_by_name": True}


class RemoteConfigComponents(BaseModel):
    """Deployed components. Only consensus nodes are modelled here."""

    consensus_nodes: Optional[Dict[str, ConsensusNodeComponent]] = Field(
        default=None,
        alias="consensusNodes",
    )

    model_config = {"populate_by_name": True, "extra": "allow"}


class RemoteConfigMetadata(BaseModel):
    """Bookkeeping about the record itself."""

    namespace: str = Field(..., min_length=1)
    deployment_name: Optional[str] = Field(default=None, alias="deploymentName")
    last_updated_at: datetime = Field(default_factory=utc_now, alias="lastUpdatedAt")
    last_updated_by: Optional[str] = Field(default=None, alias="lastUpdatedBy")
    command_history: List[str] = Field(default_factory=list, alias="commandHistory")
    version: int = Field(default=REMOTE_CONFIG_SCHEMA_VERSION, ge=1)

    model_config = {"populate_by_name": True}


class RemoteConfig(BaseModel):
    """
    Cluster-persisted topology record for one deployment namespace.

    Lifecycle:
        1. Created by deployment-time commands
        2. Loaded lazily, once per command invocation
        3. Mutated by node add/delete/upgrade (while holding the lease)
        4. Never mutated by read-only commands
    """

    __config_map_name__: ClassVar[str] = "solo-remote-config"
    __data_key__: ClassVar[str] = "remote-config-data"

    metadata: RemoteConfigMetadata
    clusters: Dict[str, ClusterMetadata] = Field(default_factory=dict)
    components: Optional[RemoteConfigComponents] = Field(default=None)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "RemoteConfig":
        """Build from the stored camelCase document."""
        return cls.model_validate(document)

    def to_document(self) -> Dict[str, Any]:
        """Serialise to the stored camelCase document."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def add_command(self, command: str, max_history: int = MAX_COMMAND_HISTORY) -> None:
        """Append a command to the history, keeping only the most recent."""
        history = self.metadata.command_history
        history.append(command)
        if len(history) > max_history:
            del history[: len(history) - max_history]


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "RemoteConfig",
    "RemoteConfigMetadata",
    "RemoteConfigComponents",
    "ClusterMetadata",
    "ConsensusNodeComponent",
    "MAX_COMMAND_HISTORY",
]
