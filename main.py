#!/usr/bin/env python3
# ============================================================================
# CONSENSUS DEPLOYER - COMMAND LINE
# ============================================================================
# STATUS: Tool - Operator entry point
# PURPOSE: Inspect the namespace lease and the consensus node topology
# CREATED: 17 OCT 2026
# ============================================================================
"""
Consensus Deployer CLI

Thin command line over the deployment core.

Usage:
    # Who holds the lock on net1?
    python main.py lease show -n net1

    # Release a lease this workstation left behind
    python main.py lease release -n net1

    # Resolved consensus nodes (alias, id, cluster, context, FQDN)
    python main.py nodes list -n net1 --output json

    # Kube contexts / cluster references the deployment spans
    python main.py nodes contexts -n net1
    python main.py nodes cluster-refs -n net1

Exit codes:
    0  success
    1  deployment error (lease, remote config, cluster API)
    2  usage error
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from __version__ import BUILD_DATE, __version__
from core.config.settings import DeploySettings
from core.errors import DeploymentError, LeaseReleaseError
from core.logging import ComponentType, configure_logging, get_logger
from core.models.lease import Lease, LeaseHolder, utc_now
from infrastructure.kube.errors import KubeApiError
from orchestrator.command import (
    CommandDependencies,
    CommandRunContext,
    CommandTask,
    build_dependencies,
    get_cluster_refs,
    get_consensus_nodes,
    get_contexts,
    run_command,
)
from services.lease_manager import lease_state

logger = get_logger(__name__, ComponentType.CLI)


# ============================================================================
# LEASE COMMANDS
# ============================================================================

async def lease_show(deps: CommandDependencies, args: argparse.Namespace) -> None:
    """Print the current lease of a namespace."""
    lease = await deps.lease_manager.read_current(args.namespace)
    state = lease_state(lease, utc_now())

    if args.output == "json":
        payload = {"namespace": args.namespace, "state": state.value}
        if lease is not None:
            payload["lease"] = lease.model_dump(mode="json", exclude={"resource_version"})
        print(json.dumps(payload, indent=2))
        return

    if lease is None:
        print(f"No lease in {args.namespace}")
        return

    print(f"Lease {args.namespace}/{lease.lease_name}")
    print(f"  state:       {state.value}")
    print(f"  holder:      {lease.holder_identity or '(nobody)'}")
    print(f"  duration:    {lease.duration_seconds}s")
    print(f"  acquired:    {lease.acquire_time.isoformat()}")
    print(f"  renewed:     {lease.renew_time.isoformat()}")
    print(f"  expires:     {lease.expires_at.isoformat()}")
    print(f"  transitions: {lease.transition_count}")


async def lease_release(deps: CommandDependencies, args: argparse.Namespace) -> None:
    """
    Release a namespace lease.

    Without --holder only a lease taken by this user on this host is
    released.
    """
    current = await deps.lease_manager.read_current(args.namespace)
    if current is None:
        print(f"No lease in {args.namespace}")
        return

    holder_identity = args.holder
    if holder_identity is None:
        owner = LeaseHolder.parse(current.holder_identity)
        me = LeaseHolder.default()
        if owner is None or (owner.username, owner.hostname) != (me.username, me.hostname):
            raise LeaseReleaseError(
                f"Lease in {args.namespace} is held by {current.holder_identity}; "
                f"pass --holder to release it",
                namespace=args.namespace,
                holder_identity=str(me),
            )
        holder_identity = current.holder_identity

    await deps.lease_manager.release(
        Lease(
            namespace=current.namespace,
            lease_name=current.lease_name,
            holder_identity=holder_identity,
            duration_seconds=current.duration_seconds,
        )
    )
    print(f"Released lease in {args.namespace} (holder {holder_identity})")


# ============================================================================
# NODE COMMANDS
# ============================================================================

async def _read_topology(
    deps: CommandDependencies,
    args: argparse.Namespace,
    name: str,
    view,
):
    async def derive(ctx: CommandRunContext):
        return view(ctx.deps)

    ctx = await run_command(
        deps,
        name,
        args.namespace,
        [CommandTask("Derive consensus nodes", derive)],
        mutating=False,
    )
    return ctx.results["Derive consensus nodes"]


async def nodes_list(deps: CommandDependencies, args: argparse.Namespace) -> None:
    """Print the resolved consensus nodes of a namespace."""
    nodes = await _read_topology(deps, args, "nodes list", get_consensus_nodes)

    if args.output == "json":
        print(json.dumps([node.model_dump(mode="json") for node in nodes], indent=2))
        return

    if not nodes:
        print(f"No consensus nodes in {args.namespace}")
        return

    for node in nodes:
        print(
            f"{node.name:<12} id={node.node_id:<4} cluster={node.cluster:<16} "
            f"context={node.context or '-':<20} {node.full_qualified_domain_name}"
        )


async def nodes_contexts(deps: CommandDependencies, args: argparse.Namespace) -> None:
    """Print the distinct kube contexts of a namespace's nodes."""
    contexts = await _read_topology(deps, args, "nodes contexts", get_contexts)
    if args.output == "json":
        print(json.dumps(contexts))
        return
    for context in contexts:
        print(context or "(unmapped)")


async def nodes_cluster_refs(deps: CommandDependencies, args: argparse.Namespace) -> None:
    """Print clusterRef -> context for a namespace's nodes."""
    refs = await _read_topology(deps, args, "nodes cluster-refs", get_cluster_refs)
    if args.output == "json":
        print(json.dumps(refs))
        return
    for cluster_ref, context in refs.items():
        print(f"{cluster_ref}: {context or '(unmapped)'}")


# ============================================================================
# PARSER
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="consensus-deployer",
        description="Inspect the deployment lease and consensus node topology",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s lease show -n net1
  %(prog)s lease release -n net1 --holder ops@laptop:4242:9f1c2a7e
  %(prog)s nodes list -n net1 --output json
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__} ({BUILD_DATE})")
    parser.add_argument("--kubeconfig", help="kubeconfig file (default: $KUBECONFIG)")
    parser.add_argument(
        "--context",
        help="Kube context holding the lease and remote config",
    )
    parser.add_argument("--local-config", help="Local config YAML path")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: $DEPLOY_LOG_LEVEL or INFO)",
    )
    parser.add_argument("--json-logs", action="store_true", help="JSON log lines on stderr")

    groups = parser.add_subparsers(dest="group", required=True)

    def add_command(subparsers, name, handler, help_text):
        command = subparsers.add_parser(name, help=help_text)
        command.add_argument("--namespace", "-n", required=True, help="Deployment namespace")
        command.add_argument(
            "--output", "-o",
            choices=["text", "json"],
            default="text",
            help="Output format (default: text)",
        )
        command.set_defaults(handler=handler)
        return command

    lease = groups.add_parser("lease", help="Namespace lease").add_subparsers(
        dest="command", required=True
    )
    add_command(lease, "show", lease_show, "Show the current lease")
    release = add_command(lease, "release", lease_release, "Release a lease")
    release.add_argument("--holder", help="Holder identity to release as")

    nodes = groups.add_parser("nodes", help="Consensus node topology").add_subparsers(
        dest="command", required=True
    )
    add_command(nodes, "list", nodes_list, "List resolved consensus nodes")
    add_command(nodes, "contexts", nodes_contexts, "List distinct kube contexts")
    add_command(nodes, "cluster-refs", nodes_cluster_refs, "List cluster references")

    return parser


def settings_from_args(args: argparse.Namespace) -> DeploySettings:
    """Environment settings overridden by command-line options."""
    settings = DeploySettings.from_env()
    if args.kubeconfig:
        settings.kubeconfig_path = args.kubeconfig
    if args.context:
        settings.kube_context = args.context
    if args.local_config:
        settings.local_config_path = args.local_config
    if args.log_level:
        settings.log_level = args.log_level
    if args.json_logs:
        settings.json_logs = True
    return settings


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = settings_from_args(args)
    configure_logging(level=settings.log_level, json_output=settings.json_logs)

    try:
        deps = build_dependencies(settings)
        asyncio.run(args.handler(deps, args))
    except (DeploymentError, KubeApiError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
