# ============================================================================
# CONFIGURATION TESTS
# ============================================================================
# STATUS: Tests - Defaults, settings, local config, command config
# PURPOSE: Verify environment overrides and local config loading
# CREATED: 17 OCT 2026
# ============================================================================
"""
Configuration Tests

Covers:
1. LeaseDefaults renewal interval and env overrides
2. DeploySettings.from_env
3. LocalConfig load/save and error handling
4. CommandConfig usage tracking
5. LeaseHolder identity format and Lease liveness

Run with:
    pytest tests/test_config.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest
import yaml

from core.config.command_config import CommandConfig
from core.config.defaults import (
    LeaseDefaults,
    RemoteConfigDefaults,
    get_defaults,
    reset_defaults,
)
from core.config.local_config import LocalConfig
from core.config.settings import DeploySettings
from core.errors import ConfigurationError
from core.models.lease import Lease, LeaseHolder

T0 = datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def fresh_defaults():
    reset_defaults()
    yield
    reset_defaults()


# ============================================================================
# DEFAULTS
# ============================================================================

class TestDefaults:
    """Tests for defaults and their environment overrides."""

    def test_lease_defaults(self):
        defaults = LeaseDefaults()

        assert defaults.lease_name == "deployment-lease"
        assert defaults.duration_seconds == 20
        assert defaults.get_renew_interval() == 10
        assert defaults.get_renew_interval(60) == 30

    def test_renew_interval_stays_inside_window(self):
        defaults = LeaseDefaults(renew_interval_seconds=100)

        assert defaults.get_renew_interval() == 18

    def test_lease_env_overrides(self, monkeypatch):
        monkeypatch.setenv("DEPLOY_LEASE_DURATION_SEC", "45")
        monkeypatch.setenv("DEPLOY_LEASE_ACQUIRE_TIMEOUT_SEC", "120")
        monkeypatch.setenv("DEPLOY_LEASE_POLL_SEC", "2")

        defaults = get_defaults().lease

        assert defaults.duration_seconds == 45
        assert defaults.acquire_timeout_seconds == 120
        assert defaults.acquire_poll_seconds == 2

    def test_get_defaults_is_cached(self):
        assert get_defaults() is get_defaults()

    def test_remote_config_defaults(self, monkeypatch):
        assert RemoteConfigDefaults().config_map_name == "solo-remote-config"
        assert RemoteConfigDefaults().data_key == "remote-config-data"

        monkeypatch.setenv("DEPLOY_REMOTE_CONFIG_NAME", "custom-config")
        assert RemoteConfigDefaults.from_env().config_map_name == "custom-config"

    def test_dns_defaults(self):
        dns = get_defaults().dns

        assert dns.dns_base_domain == "cluster.local"
        assert dns.dns_consensus_node_pattern == "network-${nodeAlias}-svc.${namespace}.svc"


# ============================================================================
# SETTINGS
# ============================================================================

class TestDeploySettings:
    """Tests for DeploySettings.from_env()."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("KUBECONFIG", "/tmp/kubeconfig")
        monkeypatch.setenv("DEPLOY_KUBE_CONTEXT", "kind-a")
        monkeypatch.setenv("DEPLOY_LOCAL_CONFIG", "/tmp/local.yaml")
        monkeypatch.setenv("DEPLOY_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("DEPLOY_LOG_FORMAT", "json")

        settings = DeploySettings.from_env()

        assert settings.kubeconfig_path == "/tmp/kubeconfig"
        assert settings.kube_context == "kind-a"
        assert settings.local_config_path == "/tmp/local.yaml"
        assert settings.log_level == "DEBUG"
        assert settings.json_logs

    def test_defaults(self, monkeypatch):
        for name in ("KUBECONFIG", "DEPLOY_KUBE_CONTEXT", "DEPLOY_LOCAL_CONFIG", "DEPLOY_LOG_FORMAT"):
            monkeypatch.delenv(name, raising=False)

        settings = DeploySettings.from_env()

        assert settings.kubeconfig_path is None
        assert settings.kube_context is None
        assert settings.resolved_local_config_path.endswith("local-config.yaml")
        assert not settings.resolved_local_config_path.startswith("~")
        assert not settings.json_logs


# ============================================================================
# LOCAL CONFIG
# ============================================================================

class TestLocalConfig:
    """Tests for LocalConfig."""

    def test_missing_file_is_empty(self, tmp_path):
        config = LocalConfig.load(str(tmp_path / "absent.yaml"))

        assert config.cluster_refs == {}
        assert config.get_context("cluster-a") is None

    def test_load(self, tmp_path):
        path = tmp_path / "local-config.yaml"
        path.write_text(
            "userEmailAddress: ops@example.com\n"
            "soloVersion: 0.31.0\n"
            "clusterRefs:\n"
            "  cluster-a: kind-a\n"
            "  cluster-b: kind-b\n"
            "deployments:\n"
            "  deploy1:\n"
            "    namespace: ns1\n"
            "    clusters: [cluster-a, cluster-b]\n"
        )

        config = LocalConfig.load(str(path))

        assert config.user_email_address == "ops@example.com"
        assert config.get_context("cluster-b") == "kind-b"
        assert config.deployments["deploy1"].clusters == ["cluster-a", "cluster-b"]

    def test_cluster_refs_are_read_only(self):
        config = LocalConfig(cluster_ref_map={"cluster-a": "kind-a"})

        with pytest.raises(TypeError):
            config.cluster_refs["cluster-b"] = "kind-b"

    @pytest.mark.parametrize("content", [
        "clusterRefs: [unclosed",
        "- a\n- b\n",
        "clusterRefs: not-a-mapping\n",
    ])
    def test_invalid_files(self, tmp_path, content):
        path = tmp_path / "local-config.yaml"
        path.write_text(content)

        with pytest.raises(ConfigurationError):
            LocalConfig.load(str(path))

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "nested" / "local-config.yaml"
        config = LocalConfig()
        config.set_cluster_ref("cluster-a", "kind-a")

        config.save(str(path))

        assert yaml.safe_load(path.read_text())["clusterRefs"] == {"cluster-a": "kind-a"}
        assert LocalConfig.load(str(path)).get_context("cluster-a") == "kind-a"


# ============================================================================
# COMMAND CONFIG
# ============================================================================

class TestCommandConfig:
    """Tests for CommandConfig usage tracking."""

    def test_unused_in_declaration_order(self):
        config = CommandConfig("node add", {"a": 1, "b": 2, "c": 3})

        config.get("b")

        assert config.unused() == ["a", "c"]

    def test_item_access_counts(self):
        config = CommandConfig("node add", {"a": 1})

        assert config["a"] == 1
        assert config["a"] == 1
        assert config.read_count("a") == 2
        assert config.unused() == []

    def test_extra_properties(self):
        config = CommandConfig("node add", {"a": 1}, extra_properties=["pod"])

        config.set("pod", "p-0")

        assert config.declared == ["a", "pod"]
        assert config.unused() == ["a", "pod"]
        assert config.get("pod") == "p-0"

    def test_attribute_access_counts(self):
        config = CommandConfig("node add", {"node_alias": "node1", "force": False})

        assert config.node_alias == "node1"
        assert config.read_count("node_alias") == 1
        assert config.unused() == ["force"]

    def test_unknown_attribute(self):
        config = CommandConfig("node add", {"a": 1})

        with pytest.raises(ConfigurationError):
            config.missing
        with pytest.raises(AttributeError):
            config._private

    def test_unknown_field(self):
        config = CommandConfig("node add", {"a": 1})

        with pytest.raises(ConfigurationError):
            config.get("b")
        with pytest.raises(ConfigurationError):
            config.set("b", 1)


# ============================================================================
# LEASE MODEL
# ============================================================================

class TestLeaseModel:
    """Tests for Lease liveness and LeaseHolder identity."""

    def test_liveness_boundary(self):
        lease = Lease(
            namespace="net1", holder_identity="h1", duration_seconds=20,
            acquire_time=T0, renew_time=T0,
        )

        assert lease.is_live(T0 + timedelta(seconds=19, microseconds=999999))
        assert lease.is_expired(T0 + timedelta(seconds=20))
        assert lease.expires_at == T0 + timedelta(seconds=20)
        assert lease.is_held_by("h1")
        assert not lease.is_held_by("h2")

    def test_holder_identity_round_trip(self):
        holder = LeaseHolder(username="ops", hostname="laptop.local", process_id=4242, suffix="9f1c2a7e")

        identity = str(holder)

        assert identity == "ops@laptop.local:4242:9f1c2a7e"
        assert LeaseHolder.parse(identity) == holder

    @pytest.mark.parametrize("identity", [None, "", "h1", "ops@host", "ops@host:pid:x"])
    def test_foreign_identities(self, identity):
        assert LeaseHolder.parse(identity) is None

    def test_default_holders_are_unique(self):
        first, second = LeaseHolder.default(), LeaseHolder.default()

        assert first.process_id == second.process_id
        assert str(first) != str(second)
