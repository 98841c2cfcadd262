# ============================================================================
# LOCAL CONFIG
# ============================================================================
# STATUS: Core - Operator-local cluster reference mapping
# PURPOSE: Map logical cluster references to kube contexts on this machine
# CREATED: 17 OCT 2026
# ============================================================================
"""
Local Config

Per-operator YAML file (never stored in the cluster) that maps each
cluster reference to the kube context this operator uses to reach it.

File shape:

    userEmailAddress: ops@example.com
    soloVersion: 0.4.1
    clusterRefs:
      cluster-a: kind-cluster-a
      cluster-b: gke_project_zone_cluster-b
    deployments:
      net1-deployment:
        namespace: net1
        clusters: [cluster-a, cluster-b]

The deployment core only reads it; save() exists for operator tooling.
"""

import logging
import os
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from core.errors import ConfigurationError

logger = logging.getLogger(__name__)


class LocalDeployment(BaseModel):
    """A deployment known to this operator."""

    namespace: str = Field(..., min_length=1)
    clusters: List[str] = Field(default_factory=list)


class LocalConfig(BaseModel):
    """Operator-local configuration."""

    user_email_address: Optional[str] = Field(default=None, alias="userEmailAddress")
    solo_version: Optional[str] = Field(default=None, alias="soloVersion")
    cluster_ref_map: Dict[str, str] = Field(default_factory=dict, alias="clusterRefs")
    deployments: Dict[str, LocalDeployment] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}

    @property
    def cluster_refs(self) -> Mapping[str, str]:
        """Read-only clusterRef -> context mapping."""
        return MappingProxyType(self.cluster_ref_map)

    def get_context(self, cluster_ref: str) -> Optional[str]:
        """Context for cluster_ref, or None if this operator has no mapping."""
        return self.cluster_ref_map.get(cluster_ref)

    def set_cluster_ref(self, cluster_ref: str, context: str) -> None:
        """Map cluster_ref to context (operator tooling only)."""
        self.cluster_ref_map[cluster_ref] = context

    @classmethod
    def load(cls, path: str) -> "LocalConfig":
        """
        Load local config from a YAML file.

        A missing file yields an empty config (fresh workstation).

        Args:
            path: Path to the YAML file

        Returns:
            LocalConfig instance

        Raises:
            ConfigurationError: If the file is not valid YAML or has wrong types
        """
        path = os.path.expanduser(path)
        if not os.path.exists(path):
            logger.debug(f"Local config not found at {path}, using empty config")
            return cls()

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Local config {path} is not valid YAML: {e}", cause=e) from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Local config {path} must be a mapping")

        try:
            config = cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Local config {path} is invalid: {e}", cause=e) from e

        logger.debug(f"Loaded local config from {path} ({len(config.cluster_ref_map)} cluster refs)")
        return config

    def save(self, path: str) -> None:
        """Write local config to a YAML file."""
        path = os.path.expanduser(path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(
                self.model_dump(mode="json", by_alias=True, exclude_none=True),
                f,
                sort_keys=False,
            )
        logger.info(f"Saved local config to {path}")


__all__ = ["LocalConfig", "LocalDeployment"]
