# ============================================================================
# KUBE CLIENT FACTORY
# ============================================================================
# STATUS: Infrastructure - Per-context client construction
# PURPOSE: Build and cache resource clients keyed by kube context
# CREATED: 17 OCT 2026
# ============================================================================
"""
Kube Client Factory

One KubeClients bundle per kube context. Each bundle holds one small
client per resource kind instead of a single object exposing every
resource.

Usage:
    factory = KubeClientFactory(kubeconfig_path="~/.kube/config")
    clients = factory.for_context("kind-cluster-a")
    lease = await clients.leases.read("net1", "deployment-lease")
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException

from core.errors import ConfigurationError

from .config_maps import ConfigMapClient
from .leases import LeaseClient

logger = logging.getLogger(__name__)

# Key used in the cache for "the kubeconfig's current context"
_CURRENT_CONTEXT = "__current__"


@dataclass(frozen=True)
class KubeClients:
    """Resource clients bound to one kube context."""
    context: Optional[str]
    leases: LeaseClient
    config_maps: ConfigMapClient


class KubeClientFactory:
    """
    Builds KubeClients per kube context.

    Clients are cached, so repeated lookups for the same context share
    one ApiClient connection pool.
    """

    def __init__(
        self,
        kubeconfig_path: Optional[str] = None,
        api_client_builder: Optional[Callable[[Optional[str]], Any]] = None,
    ):
        """
        Args:
            kubeconfig_path: kubeconfig file (kubernetes client default if None)
            api_client_builder: Override for ApiClient construction (tests)
        """
        self.kubeconfig_path = os.path.expanduser(kubeconfig_path) if kubeconfig_path else None
        self._api_client_builder = api_client_builder or self._build_api_client
        self._cache: Dict[str, KubeClients] = {}

    def _build_api_client(self, context: Optional[str]) -> client.ApiClient:
        try:
            return config.new_client_from_config(
                config_file=self.kubeconfig_path,
                context=context,
            )
        except ConfigException as e:
            raise ConfigurationError(
                f"Cannot load kubeconfig for context {context or '(current)'}: {e}",
                cause=e,
            ) from e

    def for_context(self, context: Optional[str] = None) -> KubeClients:
        """
        Clients for context (None = kubeconfig current context).
        """
        key = context or _CURRENT_CONTEXT
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        api_client = self._api_client_builder(context)
        clients = KubeClients(
            context=context,
            leases=LeaseClient(client.CoordinationV1Api(api_client)),
            config_maps=ConfigMapClient(client.CoreV1Api(api_client)),
        )
        self._cache[key] = clients
        logger.debug(f"Created kube clients for context {context or '(current)'}")
        return clients

    def default(self) -> KubeClients:
        """Clients for the kubeconfig's current context."""
        return self.for_context(None)

    def list_contexts(self) -> list:
        """Context names defined in the kubeconfig."""
        try:
            contexts, _ = config.list_kube_config_contexts(config_file=self.kubeconfig_path)
        except ConfigException as e:
            raise ConfigurationError(f"Cannot read kubeconfig: {e}", cause=e) from e
        return [c["name"] for c in contexts or []]


__all__ = ["KubeClientFactory", "KubeClients"]
