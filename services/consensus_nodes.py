# ============================================================================
# CONSENSUS NODE DERIVATION
# ============================================================================
# STATUS: Service - Topology join
# PURPOSE: Resolve consensus node identities from remote + local config
# CREATED: 17 OCT 2026
# ============================================================================
"""
Consensus Node Derivation

Joins the loaded remote config (which nodes exist, in which cluster, under
which DNS naming) with the operator's local config (which kube context
reaches each cluster) into ConsensusNode records.

Resolution per node:
    context          local_config.clusterRefs[cluster]       (None if absent)
    dns_base_domain  clusters[cluster].dnsBaseDomain         (cluster.local)
    dns pattern      clusters[cluster].dnsConsensusNodePattern
                     (network-${nodeAlias}-svc.${namespace}.svc)

Fallbacks and unresolved contexts are logged at WARNING, once per cluster
reference per derivation. Output order is the insertion order of the
consensusNodes mapping. Results are never cached.
"""

from typing import Dict, Iterable, List, Optional, Set

from core.config.defaults import DnsDefaults
from core.config.local_config import LocalConfig
from core.contracts import ClusterRefs, ContextName
from core.errors import ConfigurationError
from core.logging import ComponentType, get_logger
from core.models.consensus_node import ConsensusNode
from core.models.remote_config import ClusterMetadata, ConsensusNodeComponent
from core.templates import render_consensus_node_fqdn
from services.remote_config_manager import RemoteConfigManager

logger = get_logger(__name__, ComponentType.TOPOLOGY)


def _consensus_node_records(
    remote_config_manager: RemoteConfigManager,
) -> Dict[str, ConsensusNodeComponent]:
    """Node mapping of the loaded record; empty when absent."""
    try:
        components = remote_config_manager.components
        return dict((components and components.consensus_nodes) or {})
    except (AttributeError, KeyError, TypeError) as e:
        logger.debug(f"No consensus nodes in remote config: {e}")
        return {}


def derive_consensus_nodes(
    remote_config_manager: RemoteConfigManager,
    local_config: LocalConfig,
    dns_defaults: Optional[DnsDefaults] = None,
) -> List[ConsensusNode]:
    """
    Resolve every consensus node of the loaded remote config.

    Args:
        remote_config_manager: Manager with the remote config loaded
        local_config: Operator-local clusterRef -> context mapping
        dns_defaults: Fallback DNS values

    Returns:
        ConsensusNode list in node-mapping order (empty for a fresh deployment)

    Raises:
        ConfigurationError: Remote config not loaded
    """
    if not remote_config_manager.is_loaded():
        raise ConfigurationError(
            "Remote config must be loaded before deriving consensus nodes"
        )

    dns = dns_defaults or DnsDefaults()
    clusters = remote_config_manager.clusters
    warned: Set[str] = set()
    nodes: List[ConsensusNode] = []

    for record in _consensus_node_records(remote_config_manager).values():
        cluster_ref = record.cluster
        context = local_config.get_context(cluster_ref)
        cluster: Optional[ClusterMetadata] = clusters.get(cluster_ref)

        dns_base_domain = cluster.dns_base_domain if cluster else None
        dns_pattern = cluster.dns_consensus_node_pattern if cluster else None

        if cluster_ref not in warned:
            if context is None:
                logger.warning(
                    f"Cluster reference '{cluster_ref}' has no context in local config; "
                    f"nodes in it have no context"
                )
            if dns_base_domain is None or dns_pattern is None:
                logger.warning(
                    f"Cluster reference '{cluster_ref}' is missing DNS settings in "
                    f"remote config; using defaults"
                )
            warned.add(cluster_ref)

        if dns_base_domain is None:
            dns_base_domain = dns.dns_base_domain
        if dns_pattern is None:
            dns_pattern = dns.dns_consensus_node_pattern

        nodes.append(ConsensusNode(
            name=record.name,
            node_id=record.node_id,
            namespace=record.namespace,
            cluster=cluster_ref,
            context=context,
            dns_base_domain=dns_base_domain,
            dns_consensus_node_pattern=dns_pattern,
            full_qualified_domain_name=render_consensus_node_fqdn(
                node_alias=record.name,
                node_id=record.node_id,
                namespace=record.namespace,
                cluster_ref=cluster_ref,
                dns_base_domain=dns_base_domain,
                dns_consensus_node_pattern=dns_pattern,
            ),
        ))

    return nodes


def distinct_contexts(nodes: Iterable[ConsensusNode]) -> List[Optional[ContextName]]:
    """Contexts of nodes, de-duplicated in first-seen order."""
    seen = set()
    contexts: List[Optional[ContextName]] = []
    for node in nodes:
        if node.context not in seen:
            seen.add(node.context)
            contexts.append(node.context)
    return contexts


def distinct_cluster_refs(nodes: Iterable[ConsensusNode]) -> ClusterRefs:
    """clusterRef -> context; the first context seen for a reference wins."""
    refs: ClusterRefs = {}
    for node in nodes:
        if node.cluster not in refs:
            refs[node.cluster] = node.context
    return refs


def find_consensus_node(
    nodes: Iterable[ConsensusNode],
    alias: str,
) -> Optional[ConsensusNode]:
    """Node with the given alias, or None."""
    for node in nodes:
        if node.name == alias:
            return node
    return None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "derive_consensus_nodes",
    "distinct_contexts",
    "distinct_cluster_refs",
    "find_consensus_node",
]
