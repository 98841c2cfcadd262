# ============================================================================
# COMMAND ORCHESTRATOR
# ============================================================================
# STATUS: Orchestrator - Lease-scoped command execution
# PURPOSE: Run a command's task pipeline under the namespace lease
# CREATED: 17 OCT 2026
# ============================================================================
"""
Command Orchestrator

Runs one command: acquire the namespace lease (mutating commands only),
keep it renewed, load the remote config, run the tasks in order, and
release the lease on every exit path.

There is no command base class and no global container. Everything a
command needs is in a CommandDependencies bundle built once at process
start and passed in explicitly.

Failure handling:
    - Any exception from the pipeline is logged and re-raised as a single
      CommandError carrying the command name and namespace (__cause__ is
      the original)
    - The renewer is stopped and the lease released exactly once, after
      the pipeline and before the CommandError propagates
    - Release failures are logged, never raised
    - A lease lost mid-command fails the command before the next task

Usage:
    deps = build_dependencies(DeploySettings.from_env())

    async def scale(ctx: CommandRunContext):
        nodes = get_consensus_nodes(ctx.deps)
        ...

    await run_command(deps, "node add", "net1", [CommandTask("Scale", scale)])
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from core.config.command_config import CommandConfig
from core.config.defaults import Defaults, get_defaults
from core.config.local_config import LocalConfig
from core.config.settings import DeploySettings
from core.contracts import ClusterRefs, ContextName
from core.errors import CommandError, LeaseRenewalError
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.models.consensus_node import ConsensusNode
from core.models.lease import Lease, LeaseHolder
from infrastructure.kube.factory import KubeClientFactory
from services.consensus_nodes import (
    derive_consensus_nodes,
    distinct_cluster_refs,
    distinct_contexts,
)
from services.lease_manager import (
    LeaseManager,
    LeaseRenewer,
    acquire_with_retry,
    release_quietly,
)
from services.remote_config_manager import RemoteConfigManager

logger = get_logger(__name__, ComponentType.COMMAND)


# ============================================================================
# DEPENDENCIES
# ============================================================================

@dataclass
class CommandDependencies:
    """Fully formed collaborators for one process."""
    lease_manager: LeaseManager
    remote_config_manager: RemoteConfigManager
    local_config: LocalConfig
    defaults: Defaults
    holder_identity: str
    kube_factory: Optional[KubeClientFactory] = None
    context: Optional[str] = None


def build_dependencies(
    settings: DeploySettings,
    context: Optional[str] = None,
    defaults: Optional[Defaults] = None,
    kube_factory: Optional[KubeClientFactory] = None,
    holder: Optional[LeaseHolder] = None,
) -> CommandDependencies:
    """
    Build the dependency bundle at process start.

    Args:
        settings: Process settings
        context: Kube context of the cluster holding the lease and remote
            config (default: settings.kube_context, then kubeconfig current)
        defaults: Defaults bundle (default: get_defaults())
        kube_factory: Client factory (default: from settings.kubeconfig_path)
        holder: Lease holder identity (default: this process)

    Raises:
        ConfigurationError: Local config file is invalid
    """
    defaults = defaults or get_defaults()
    kube_factory = kube_factory or KubeClientFactory(settings.kubeconfig_path)
    context = context or settings.kube_context
    clients = kube_factory.for_context(context)

    return CommandDependencies(
        lease_manager=LeaseManager(clients.leases, lease_name=defaults.lease.lease_name),
        remote_config_manager=RemoteConfigManager(clients.config_maps, defaults.remote_config),
        local_config=LocalConfig.load(settings.local_config_path),
        defaults=defaults,
        holder_identity=str(holder or LeaseHolder.default()),
        kube_factory=kube_factory,
        context=context,
    )


# ============================================================================
# TASKS
# ============================================================================

@dataclass
class CommandRunContext:
    """State of one command run, handed to every task."""
    deps: CommandDependencies
    command: str
    namespace: str
    config: CommandConfig
    lease: Optional[Lease] = None
    renewer: Optional[LeaseRenewer] = None
    results: Dict[str, Any] = field(default_factory=dict)
    completed_tasks: List[str] = field(default_factory=list)
    released: bool = False

    @property
    def current_lease(self) -> Optional[Lease]:
        """Latest renewed lease (None for read-only commands)."""
        if self.renewer is not None:
            return self.renewer.lease
        return self.lease

    def check_lease(self) -> None:
        """
        Raises:
            LeaseRenewalError: The renewer reported the lease lost
        """
        if self.renewer is not None and self.renewer.lost:
            error = self.renewer.error
            if isinstance(error, LeaseRenewalError):
                raise error
            raise LeaseRenewalError(
                f"Lease for {self.namespace} lost: {error}",
                namespace=self.namespace,
                holder_identity=self.deps.holder_identity,
                cause=error,
            )

    async def persist_remote_config(self) -> None:
        """Persist the loaded remote config under this run's lease."""
        self.check_lease()
        await self.deps.remote_config_manager.persist(
            lease=self.current_lease,
            command=self.command,
        )


@dataclass
class CommandTask:
    """One step of a command's pipeline."""
    title: str
    run: Callable[[CommandRunContext], Awaitable[Any]]
    skip: Optional[Callable[[CommandRunContext], bool]] = None


# ============================================================================
# RUN
# ============================================================================

async def run_command(
    deps: CommandDependencies,
    name: str,
    namespace: str,
    tasks: Sequence[CommandTask],
    mutating: bool = True,
    config: Optional[CommandConfig] = None,
    load_remote_config: bool = True,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> CommandRunContext:
    """
    Run tasks for command name against namespace.

    Args:
        deps: Dependency bundle
        name: Command name (logged and recorded in the remote config history)
        namespace: Deployment namespace
        tasks: Pipeline, run sequentially
        mutating: Hold the namespace lease for the run
        config: Command configuration (usage-tracked)
        load_remote_config: Load the remote config before the tasks
        sleep: Sleep used by the acquire retry loop

    Returns:
        The run context (task results, unused configuration)

    Raises:
        CommandError: Anything in the pipeline failed
    """
    ctx = CommandRunContext(
        deps=deps,
        command=name,
        namespace=namespace,
        config=config or CommandConfig(name),
    )

    with log_context(
        command=name,
        namespace=namespace,
        holder_identity=deps.holder_identity,
        component=ComponentType.COMMAND.value,
    ):
        started = time.monotonic()
        try:
            if mutating:
                await _acquire(ctx, sleep)

            if load_remote_config:
                await deps.remote_config_manager.load(namespace)

            for task in tasks:
                ctx.check_lease()
                if task.skip is not None and task.skip(ctx):
                    logger.info(f"Task skipped: {task.title}")
                    continue
                logger.info(f"Task started: {task.title}")
                task_started = time.monotonic()
                ctx.results[task.title] = await task.run(ctx)
                ctx.completed_tasks.append(task.title)
                logger.info(
                    f"Task finished: {task.title} ({time.monotonic() - task_started:.2f}s)"
                )

            ctx.check_lease()

        except CommandError:
            raise
        except Exception as e:
            logger.error(f"Command {name} failed: {e}")
            raise CommandError(
                f"{name} failed: {e}",
                command=name,
                namespace=namespace,
                cause=e,
            ) from e
        finally:
            await _release(ctx)

        unused = ctx.config.unused()
        if unused:
            logger.debug(f"Unused configuration: {', '.join(unused)}")
        log_checkpoint("command_completed", {
            "tasks": len(ctx.completed_tasks),
            "elapsed_seconds": round(time.monotonic() - started, 3),
        })

    return ctx


async def _acquire(ctx: CommandRunContext, sleep: Callable[[float], Awaitable[None]]) -> None:
    lease_defaults = ctx.deps.defaults.lease
    ctx.lease = await acquire_with_retry(
        ctx.deps.lease_manager,
        ctx.namespace,
        ctx.deps.holder_identity,
        lease_defaults.duration_seconds,
        timeout_seconds=lease_defaults.acquire_timeout_seconds,
        poll_seconds=lease_defaults.acquire_poll_seconds,
        backoff_max_seconds=lease_defaults.acquire_backoff_max_seconds,
        sleep=sleep,
    )
    ctx.renewer = LeaseRenewer(
        ctx.deps.lease_manager,
        ctx.lease,
        lease_defaults.get_renew_interval(),
    )
    ctx.renewer.start()


async def _release(ctx: CommandRunContext) -> None:
    """Stop renewing and release the lease, at most once."""
    if ctx.released:
        return
    ctx.released = True
    if ctx.renewer is not None:
        await ctx.renewer.stop()
    if ctx.lease is not None:
        await release_quietly(ctx.deps.lease_manager, ctx.current_lease)


# ============================================================================
# TOPOLOGY VIEWS
# ============================================================================

def get_consensus_nodes(deps: CommandDependencies) -> List[ConsensusNode]:
    """Consensus nodes of the loaded remote config, derived fresh."""
    return derive_consensus_nodes(
        deps.remote_config_manager,
        deps.local_config,
        deps.defaults.dns,
    )


def get_contexts(deps: CommandDependencies) -> List[Optional[ContextName]]:
    """Distinct kube contexts the deployment's nodes run in."""
    return distinct_contexts(get_consensus_nodes(deps))


def get_cluster_refs(deps: CommandDependencies) -> ClusterRefs:
    """Distinct cluster references, each mapped to its first-seen context."""
    return distinct_cluster_refs(get_consensus_nodes(deps))


# ============================================================================
# EXPORTS
# ============================================================================

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
