# ============================================================================
# CLI TESTS
# ============================================================================
# STATUS: Tests - Command line entry point
# PURPOSE: Verify argument handling, output and exit codes
# CREATED: 17 OCT 2026
# ============================================================================
"""
CLI Tests

Dependencies are built from the in-memory fakes and patched into main.

Run with:
    pytest tests/test_cli.py -v
"""

import json
import logging
from unittest.mock import patch

import pytest

import main
from core.config.defaults import Defaults
from core.models.lease import Lease, LeaseHolder
from orchestrator.command import CommandDependencies
from services.lease_manager import LeaseManager
from services.remote_config_manager import RemoteConfigManager, dump_remote_config


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def deps(lease_client, config_map_client, clock, local_config, remote_config):
    config_map_client.put(
        "ns1", "solo-remote-config", {"remote-config-data": dump_remote_config(remote_config)}
    )
    return CommandDependencies(
        lease_manager=LeaseManager(lease_client, clock=clock),
        remote_config_manager=RemoteConfigManager(config_map_client, clock=clock),
        local_config=local_config,
        defaults=Defaults(),
        holder_identity="ops@laptop:1:aa",
    )


def _main(deps, *argv):
    with patch("main.build_dependencies", return_value=deps):
        return main.main(list(argv))


def _put_lease(lease_client, clock, holder):
    lease_client.put(Lease(
        namespace="ns1", holder_identity=holder, duration_seconds=20,
        acquire_time=clock.now, renew_time=clock.now,
    ))


class TestLeaseCommands:
    """Tests for `lease show` / `lease release`."""

    def test_show_without_lease(self, deps, capsys):
        assert _main(deps, "lease", "show", "-n", "ns1") == 0

        assert "No lease in ns1" in capsys.readouterr().out

    def test_show_json(self, deps, lease_client, clock, capsys):
        _put_lease(lease_client, clock, "ops@laptop:1:aa")

        assert _main(deps, "lease", "show", "-n", "ns1", "-o", "json") == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload["lease"]["holder_identity"] == "ops@laptop:1:aa"
        assert payload["lease"]["transition_count"] == 0
        assert payload["state"] in ("held", "expired")

    def test_release_foreign_lease_refused(self, deps, lease_client, clock, capsys):
        _put_lease(lease_client, clock, "someone@elsewhere-host-xyz:7:bb")

        assert _main(deps, "lease", "release", "-n", "ns1") == 1

        assert "pass --holder" in capsys.readouterr().err
        assert lease_client.leases

    def test_release_with_holder(self, deps, lease_client, clock, capsys):
        _put_lease(lease_client, clock, "someone@elsewhere:7:bb")

        assert _main(deps, "lease", "release", "-n", "ns1", "--holder", "someone@elsewhere:7:bb") == 0

        assert not lease_client.leases
        assert "Released lease in ns1" in capsys.readouterr().out

    def test_release_own_leftover_lease(self, deps, lease_client, clock):
        me = LeaseHolder.default()
        leftover = LeaseHolder(
            username=me.username, hostname=me.hostname, process_id=me.process_id + 1, suffix="dead",
        )
        _put_lease(lease_client, clock, str(leftover))

        assert _main(deps, "lease", "release", "-n", "ns1") == 0

        assert not lease_client.leases


class TestNodeCommands:
    """Tests for `nodes ...`."""

    def test_list_json(self, deps, capsys):
        assert _main(deps, "nodes", "list", "-n", "ns1", "--output", "json") == 0

        nodes = json.loads(capsys.readouterr().out)
        assert [n["name"] for n in nodes] == ["node1", "node2", "node3"]
        assert nodes[1]["full_qualified_domain_name"] == "network-node2-svc.ns1.svc"

    def test_list_text(self, deps, capsys):
        assert _main(deps, "nodes", "list", "-n", "ns1") == 0

        out = capsys.readouterr().out
        assert "node1" in out
        assert "node1.ns1.svc.a.example.com" in out

    def test_contexts(self, deps, capsys):
        assert _main(deps, "nodes", "contexts", "-n", "ns1") == 0

        assert capsys.readouterr().out.split() == ["kind-a", "kind-b"]

    def test_cluster_refs_json(self, deps, capsys):
        assert _main(deps, "nodes", "cluster-refs", "-n", "ns1", "-o", "json") == 0

        assert json.loads(capsys.readouterr().out) == {"cluster-a": "kind-a", "cluster-b": "kind-b"}

    def test_missing_remote_config_exits_1(self, deps, capsys):
        assert _main(deps, "nodes", "list", "-n", "other-ns") == 1

        assert "ERROR" in capsys.readouterr().err

    def test_read_only_commands_take_no_lease(self, deps, lease_client):
        _main(deps, "nodes", "list", "-n", "ns1")

        assert not [call for call in lease_client.calls if call[0] == "create"]


class TestArguments:
    """Tests for parsing and settings overrides."""

    def test_namespace_is_required(self, deps):
        with pytest.raises(SystemExit) as exc_info:
            _main(deps, "lease", "show")

        assert exc_info.value.code == 2

    def test_options_override_environment(self, monkeypatch):
        monkeypatch.setenv("DEPLOY_KUBE_CONTEXT", "from-env")
        args = main.build_parser().parse_args([
            "--context", "kind-a",
            "--kubeconfig", "/tmp/kubeconfig",
            "--local-config", "/tmp/local.yaml",
            "--log-level", "DEBUG",
            "--json-logs",
            "nodes", "list", "-n", "ns1",
        ])

        settings = main.settings_from_args(args)

        assert settings.kube_context == "kind-a"
        assert settings.kubeconfig_path == "/tmp/kubeconfig"
        assert settings.local_config_path == "/tmp/local.yaml"
        assert settings.log_level == "DEBUG"
        assert settings.json_logs
