# ============================================================================
# CONSENSUS NODE DERIVATION TESTS
# ============================================================================
# STATUS: Tests - Topology join and DNS rendering
# PURPOSE: Verify node derivation, fallbacks and de-duplicated views
# CREATED: 17 OCT 2026
# ============================================================================
"""
Consensus Node Derivation Tests

Covers:
1. FQDN rendering with known and unknown placeholders
2. derive: loaded guard, empty topology, ordering, purity
3. DNS fallbacks and missing local contexts (values and warnings)
4. distinct_contexts / distinct_cluster_refs first-seen semantics

Run with:
    pytest tests/test_consensus_nodes.py -v
"""

import logging
from unittest.mock import MagicMock

import pytest

from core.config.local_config import LocalConfig
from core.errors import ConfigurationError
from core.models.consensus_node import ConsensusNode
from core.models.remote_config import (
    ClusterMetadata,
    ConsensusNodeComponent,
    RemoteConfig,
    RemoteConfigComponents,
    RemoteConfigMetadata,
)
from core.templates import render_consensus_node_fqdn, render_template
from services.consensus_nodes import (
    derive_consensus_nodes,
    distinct_cluster_refs,
    distinct_contexts,
    find_consensus_node,
)
from services.remote_config_manager import RemoteConfigManager


# ============================================================================
# FIXTURES
# ============================================================================

def _loaded(remote_config: RemoteConfig) -> RemoteConfigManager:
    """A manager holding remote_config as if load() had succeeded."""
    manager = RemoteConfigManager(MagicMock())
    manager._namespace = remote_config.metadata.namespace
    manager._remote_config = remote_config
    manager._resource_version = "1"
    return manager


def _node(name, cluster, context, node_id=0):
    return ConsensusNode(
        name=name,
        node_id=node_id,
        namespace="ns1",
        cluster=cluster,
        context=context,
        dns_base_domain="cluster.local",
        dns_consensus_node_pattern="network-${nodeAlias}-svc.${namespace}.svc",
        full_qualified_domain_name=f"network-{name}-svc.ns1.svc",
    )


# ============================================================================
# TEMPLATES
# ============================================================================

class TestFqdnRendering:
    """Tests for placeholder substitution."""

    def test_default_pattern(self):
        fqdn = render_consensus_node_fqdn("node1", 0, "ns1", "cluster-a")

        assert fqdn == "network-node1-svc.ns1.svc"

    def test_all_placeholders(self):
        fqdn = render_consensus_node_fqdn(
            "node2", 1, "ns1", "cluster-a",
            dns_base_domain="example.com",
            dns_consensus_node_pattern="${nodeAlias}-${nodeId}.${clusterRef}.${namespace}.${dnsBaseDomain}",
        )

        assert fqdn == "node2-1.cluster-a.ns1.example.com"

    def test_unknown_placeholders_are_kept(self):
        fqdn = render_consensus_node_fqdn(
            "node1", 0, "ns1", "cluster-a",
            dns_consensus_node_pattern="${nodeAlias}.${region}.svc",
        )

        assert fqdn == "node1.${region}.svc"

    def test_substitution_is_single_pass(self):
        assert render_template("${a}-${b}", a="${b}", b="x") == "${b}-x"

    def test_bare_dollar_names_are_literal(self):
        fqdn = render_consensus_node_fqdn(
            "node1", 0, "ns1", "cluster-a",
            dns_consensus_node_pattern="n-$nodeAlias.${namespace}",
        )

        assert fqdn == "n-$nodeAlias.ns1"

    def test_double_dollar_is_literal(self):
        assert render_template("a$$b-${nodeAlias}", nodeAlias="node1") == "a$$b-node1"


# ============================================================================
# DERIVATION
# ============================================================================

class TestDeriveConsensusNodes:
    """Tests for derive_consensus_nodes()."""

    def test_not_loaded_guard(self, local_config):
        manager = RemoteConfigManager(MagicMock())

        with pytest.raises(ConfigurationError):
            derive_consensus_nodes(manager, local_config)

    def test_resolves_every_node_in_mapping_order(self, remote_config, local_config):
        nodes = derive_consensus_nodes(_loaded(remote_config), local_config)

        assert [n.name for n in nodes] == ["node1", "node2", "node3"]
        assert [n.node_id for n in nodes] == [0, 1, 2]
        assert [n.context for n in nodes] == ["kind-a", "kind-b", "kind-a"]

    def test_cluster_dns_settings_are_used(self, remote_config, local_config):
        node1 = derive_consensus_nodes(_loaded(remote_config), local_config)[0]

        assert node1.dns_base_domain == "a.example.com"
        assert node1.full_qualified_domain_name == "node1.ns1.svc.a.example.com"

    def test_missing_dns_settings_fall_back(self, remote_config, local_config):
        node2 = derive_consensus_nodes(_loaded(remote_config), local_config)[1]

        assert node2.dns_base_domain == "cluster.local"
        assert node2.dns_consensus_node_pattern == "network-${nodeAlias}-svc.${namespace}.svc"
        assert node2.full_qualified_domain_name == "network-node2-svc.ns1.svc"

    def test_missing_cluster_entry_falls_back(self, remote_config, local_config):
        del remote_config.clusters["cluster-b"]

        node2 = derive_consensus_nodes(_loaded(remote_config), local_config)[1]

        assert node2.dns_base_domain == "cluster.local"
        assert node2.full_qualified_domain_name == "network-node2-svc.ns1.svc"

    def test_empty_dns_base_domain_is_kept(self, remote_config, local_config, caplog):
        remote_config.clusters["cluster-a"].dns_base_domain = ""

        with caplog.at_level(logging.WARNING, logger="services.consensus_nodes"):
            node1 = derive_consensus_nodes(_loaded(remote_config), local_config)[0]

        assert node1.dns_base_domain == ""
        assert node1.full_qualified_domain_name == "node1.ns1.svc."
        assert not any("cluster-a" in r.getMessage() for r in caplog.records)

    def test_fallback_warns_once_per_cluster(self, remote_config, local_config, caplog):
        remote_config.components.consensus_nodes["node4"] = ConsensusNodeComponent(
            name="node4", node_id=3, namespace="ns1", cluster="cluster-b",
        )

        with caplog.at_level(logging.WARNING, logger="services.consensus_nodes"):
            derive_consensus_nodes(_loaded(remote_config), local_config)

        dns_warnings = [r for r in caplog.records if "DNS settings" in r.getMessage()]
        assert len(dns_warnings) == 1
        assert "cluster-b" in dns_warnings[0].getMessage()

    def test_unmapped_cluster_has_no_context(self, remote_config, caplog):
        local_config = LocalConfig(cluster_ref_map={"cluster-a": "kind-a"})

        with caplog.at_level(logging.WARNING, logger="services.consensus_nodes"):
            nodes = derive_consensus_nodes(_loaded(remote_config), local_config)

        assert nodes[1].context is None
        assert any("no context" in r.getMessage() for r in caplog.records)

    def test_absent_components_is_empty(self, local_config):
        config = RemoteConfig(metadata=RemoteConfigMetadata(namespace="ns1"))

        assert derive_consensus_nodes(_loaded(config), local_config) == []

    def test_absent_consensus_nodes_is_empty(self, local_config):
        config = RemoteConfig(
            metadata=RemoteConfigMetadata(namespace="ns1"),
            components=RemoteConfigComponents(),
        )

        assert derive_consensus_nodes(_loaded(config), local_config) == []

    def test_derivation_is_pure(self, remote_config, local_config):
        manager = _loaded(remote_config)

        first = derive_consensus_nodes(manager, local_config)
        second = derive_consensus_nodes(manager, local_config)

        assert first == second
        assert first is not second
        assert list(remote_config.components.consensus_nodes) == ["node1", "node2", "node3"]

    def test_example_fqdn(self, local_config):
        config = RemoteConfig(
            metadata=RemoteConfigMetadata(namespace="ns1"),
            clusters={"c1": ClusterMetadata(
                name="c1",
                dns_consensus_node_pattern="network-${nodeAlias}-svc.${namespace}.svc",
            )},
            components=RemoteConfigComponents(consensus_nodes={
                "node1": ConsensusNodeComponent(name="node1", node_id=0, namespace="ns1", cluster="c1"),
            }),
        )

        node = derive_consensus_nodes(_loaded(config), local_config)[0]

        assert node.full_qualified_domain_name == "network-node1-svc.ns1.svc"
        assert node.dns_base_domain == "cluster.local"


# ============================================================================
# VIEWS
# ============================================================================

class TestDistinctViews:
    """Tests for distinct_contexts / distinct_cluster_refs / find."""

    def test_distinct_contexts_first_seen_order(self):
        nodes = [
            _node("node1", "c1", "ctx-b"),
            _node("node2", "c2", "ctx-a"),
            _node("node3", "c1", "ctx-b"),
            _node("node4", "c3", None),
        ]

        assert distinct_contexts(nodes) == ["ctx-b", "ctx-a", None]

    def test_cluster_ref_keeps_first_context(self):
        nodes = [
            _node("node1", "c1", "ctx-1"),
            _node("node2", "c1", "ctx-2"),
            _node("node3", "c2", "ctx-3"),
        ]

        assert distinct_cluster_refs(nodes) == {"c1": "ctx-1", "c2": "ctx-3"}

    def test_views_of_empty_topology(self):
        assert distinct_contexts([]) == []
        assert distinct_cluster_refs([]) == {}

    def test_views_from_derivation(self, remote_config, local_config):
        nodes = derive_consensus_nodes(_loaded(remote_config), local_config)

        assert distinct_contexts(nodes) == ["kind-a", "kind-b"]
        assert distinct_cluster_refs(nodes) == {"cluster-a": "kind-a", "cluster-b": "kind-b"}

    def test_find_consensus_node(self):
        nodes = [_node("node1", "c1", "ctx"), _node("node2", "c1", "ctx")]

        assert find_consensus_node(nodes, "node2").name == "node2"
        assert find_consensus_node(nodes, "node9") is None
