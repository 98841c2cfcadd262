# ============================================================================
# DNS NAME TEMPLATES
# ============================================================================
# STATUS: Core - Placeholder rendering for consensus node FQDNs
# PURPOSE: Resolve ${...} expressions in per-cluster DNS patterns
# CREATED: 17 OCT 2026
# ============================================================================
"""
DNS Name Templates

Renders the fully-qualified domain name of a consensus node from the
cluster's DNS pattern.

Supported placeholders:
- ${nodeAlias}     - node alias (e.g. node1)
- ${nodeId}        - numeric node id
- ${namespace}     - node namespace
- ${clusterRef}    - owning cluster reference
- ${dnsBaseDomain} - resolved DNS base domain of the cluster

Unknown placeholders are left verbatim. Substitution is single pass, so a
value containing "${...}" is never expanded again.

Examples:
    network-${nodeAlias}-svc.${namespace}.svc
        -> network-node1-svc.ns1.svc
    ${nodeAlias}.${namespace}.svc.${dnsBaseDomain}
        -> node1.ns1.svc.cluster.local
"""

import re

DEFAULT_DNS_BASE_DOMAIN = "cluster.local"
DEFAULT_DNS_CONSENSUS_NODE_PATTERN = "network-${nodeAlias}-svc.${namespace}.svc"

_PLACEHOLDER = re.compile(r"\$\{(\w+)\}")


def render_template(pattern: str, **values) -> str:
    """
    Substitute ${name} placeholders in pattern.

    Only the braced form is a placeholder; a bare $name or $$ is literal
    text.

    Args:
        pattern: Template string
        **values: Placeholder values (converted with str())

    Returns:
        Rendered string; unknown placeholders are kept as-is
    """
    def replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in values:
            return match.group(0)
        return str(values[name])

    return _PLACEHOLDER.sub(replace, pattern)


def render_consensus_node_fqdn(
    node_alias: str,
    node_id: int,
    namespace: str,
    cluster_ref: str,
    dns_base_domain: str = DEFAULT_DNS_BASE_DOMAIN,
    dns_consensus_node_pattern: str = DEFAULT_DNS_CONSENSUS_NODE_PATTERN,
) -> str:
    """
    Render the fully-qualified domain name of a consensus node.

    Args:
        node_alias: Node alias
        node_id: Numeric node id
        namespace: Namespace the node runs in
        cluster_ref: Owning cluster reference
        dns_base_domain: Resolved DNS base domain
        dns_consensus_node_pattern: Resolved pattern

    Returns:
        The rendered FQDN
    """
    return render_template(
        dns_consensus_node_pattern,
        nodeAlias=node_alias,
        nodeId=node_id,
        namespace=namespace,
        clusterRef=cluster_ref,
        dnsBaseDomain=dns_base_domain,
    )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "DEFAULT_DNS_BASE_DOMAIN",
    "DEFAULT_DNS_CONSENSUS_NODE_PATTERN",
    "render_template",
    "render_consensus_node_fqdn",
]
