# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 17 OCT 2026
# ============================================================================
"""
Configuration Module

Provides defaults, process settings, the operator-local config and the
per-command usage-tracking config.
"""

from core.config.defaults import (
    LeaseDefaults,
    RemoteConfigDefaults,
    DnsDefaults,
    Defaults,
    get_defaults,
    reset_defaults,
)
from core.config.settings import DeploySettings
from core.config.local_config import LocalConfig, LocalDeployment
from core.config.command_config import CommandConfig

__all__ = [
    "LeaseDefaults",
    "RemoteConfigDefaults",
    "DnsDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
    "DeploySettings",
    "LocalConfig",
    "LocalDeployment",
    "CommandConfig",
]
