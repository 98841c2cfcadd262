# ============================================================================
# PROCESS SETTINGS
# ============================================================================
# STATUS: Core - Environment-based process configuration
# PURPOSE: Kubeconfig, local config location and logging settings
# CREATED: 17 OCT 2026
# ============================================================================
"""
Process Settings

Loads configuration from environment variables with sensible defaults.
Command-line options override these in main.py.

Environment Variables:
    KUBECONFIG: Path to the kubeconfig file (kubernetes client default otherwise)
    DEPLOY_KUBE_CONTEXT: Kube context used for the lease and remote config
    DEPLOY_LOCAL_CONFIG: Path to the operator's local config YAML
    DEPLOY_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR)
    DEPLOY_LOG_FORMAT: "json" for structured output
"""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_LOCAL_CONFIG_PATH = os.path.join("~", ".solo", "local-config.yaml")


@dataclass
class DeploySettings:
    """Configuration for one deployer process."""

    # Cluster access
    kubeconfig_path: Optional[str] = None
    kube_context: Optional[str] = None

    # Operator-local state
    local_config_path: str = DEFAULT_LOCAL_CONFIG_PATH

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "DeploySettings":
        """Load configuration from environment variables."""
        return cls(
            kubeconfig_path=os.environ.get("KUBECONFIG") or None,
            kube_context=os.environ.get("DEPLOY_KUBE_CONTEXT") or None,
            local_config_path=os.environ.get("DEPLOY_LOCAL_CONFIG", DEFAULT_LOCAL_CONFIG_PATH),
            log_level=os.environ.get("DEPLOY_LOG_LEVEL", "INFO"),
            json_logs=os.environ.get("DEPLOY_LOG_FORMAT", "").lower() == "json",
        )

    @property
    def resolved_local_config_path(self) -> str:
        """Local config path with ~ expanded."""
        return os.path.expanduser(self.local_config_path)


__all__ = ["DeploySettings", "DEFAULT_LOCAL_CONFIG_PATH"]
