# ============================================================================
# ORCHESTRATOR MODULE
# ============================================================================
# STATUS: Core - Command execution
# PURPOSE: Run command pipelines under the namespace lease
# CREATED: 17 OCT 2026
# ============================================================================
"""
Orchestrator Module

Lease-scoped execution of command task pipelines.

Usage:
    from orchestrator import build_dependencies, run_command, CommandTask

    deps = build_dependencies(settings)
    await run_command(deps, "node add", "net1", tasks)
"""

from .command import (
    CommandDependencies,
    build_dependencies,
    CommandRunContext,
    CommandTask,
    run_command,
    get_consensus_nodes,
    get_contexts,
    get_cluster_refs,
)

__all__ = [
    "CommandDependencies",
    "build_dependencies",
    "CommandRunContext",
    "CommandTask",
    "run_command",
    "get_consensus_nodes",
    "get_contexts",
    "get_cluster_refs",
]
