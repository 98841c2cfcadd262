# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for leases, remote config and DNS naming
# CREATED: 17 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides sensible defaults for lease timing, remote config storage and
consensus node DNS naming. These can be overridden via environment
variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from core.models.lease import DEFAULT_LEASE_NAME
from core.models.remote_config import MAX_COMMAND_HISTORY, RemoteConfig
from core.templates import DEFAULT_DNS_BASE_DOMAIN, DEFAULT_DNS_CONSENSUS_NODE_PATTERN


@dataclass(frozen=True)
class LeaseDefaults:
    """
    Defaults for the namespace lease.

    Controls liveness window, renewal cadence and the caller-side
    acquire retry loop.
    """
    lease_name: str = DEFAULT_LEASE_NAME

    # Liveness window (seconds)
    duration_seconds: int = 20

    # Renewal cadence; None means half the duration
    renew_interval_seconds: Optional[float] = None

    # Acquire retry loop (caller policy)
    acquire_timeout_seconds: float = 600.0  # 10 min
    acquire_poll_seconds: float = 5.0
    acquire_backoff_max_seconds: float = 30.0

    def get_renew_interval(self, duration_seconds: Optional[int] = None) -> float:
        """Renewal interval, always strictly inside the liveness window."""
        duration = duration_seconds or self.duration_seconds
        interval = self.renew_interval_seconds or duration / 2
        return min(interval, duration * 0.9)

    @classmethod
    def from_env(cls) -> "LeaseDefaults":
        """Create from environment variables."""
        renew = os.getenv("DEPLOY_LEASE_RENEW_SEC")
        return cls(
            lease_name=os.getenv("DEPLOY_LEASE_NAME", DEFAULT_LEASE_NAME),
            duration_seconds=int(os.getenv("DEPLOY_LEASE_DURATION_SEC", 20)),
            renew_interval_seconds=float(renew) if renew else None,
            acquire_timeout_seconds=float(os.getenv("DEPLOY_LEASE_ACQUIRE_TIMEOUT_SEC", 600)),
            acquire_poll_seconds=float(os.getenv("DEPLOY_LEASE_POLL_SEC", 5)),
            acquire_backoff_max_seconds=float(os.getenv("DEPLOY_LEASE_BACKOFF_MAX_SEC", 30)),
        )


@dataclass(frozen=True)
class RemoteConfigDefaults:
    """
    Defaults for the cluster-resident remote config record.
    """
    config_map_name: str = RemoteConfig.__config_map_name__
    data_key: str = RemoteConfig.__data_key__
    max_command_history: int = MAX_COMMAND_HISTORY

    # Labels applied to the config map on create
    labels: tuple = (
        ("app.kubernetes.io/managed-by", "consensus-deployer"),
        ("app.kubernetes.io/component", "remote-config"),
    )

    @classmethod
    def from_env(cls) -> "RemoteConfigDefaults":
        """Create from environment variables."""
        return cls(
            config_map_name=os.getenv(
                "DEPLOY_REMOTE_CONFIG_NAME", RemoteConfig.__config_map_name__
            ),
            max_command_history=int(
                os.getenv("DEPLOY_REMOTE_CONFIG_HISTORY", MAX_COMMAND_HISTORY)
            ),
        )


@dataclass(frozen=True)
class DnsDefaults:
    """
    Fallback DNS values used when a cluster entry omits them.
    """
    dns_base_domain: str = DEFAULT_DNS_BASE_DOMAIN
    dns_consensus_node_pattern: str = DEFAULT_DNS_CONSENSUS_NODE_PATTERN


# ============================================================================
# GLOBAL DEFAULTS INSTANCE
# ============================================================================

@dataclass
class Defaults:
    """Container for all default configurations."""
    lease: LeaseDefaults = field(default_factory=LeaseDefaults)
    remote_config: RemoteConfigDefaults = field(default_factory=RemoteConfigDefaults)
    dns: DnsDefaults = field(default_factory=DnsDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            lease=LeaseDefaults.from_env(),
            remote_config=RemoteConfigDefaults.from_env(),
            dns=DnsDefaults(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "LeaseDefaults",
    "RemoteConfigDefaults",
    "DnsDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
