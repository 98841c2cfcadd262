# ============================================================================
# LEASE MANAGER
# ============================================================================
# STATUS: Service - Namespace mutual exclusion
# PURPOSE: Acquire, renew, transfer and release the namespace lease
# CREATED: 17 OCT 2026
# ============================================================================
"""
Lease Manager

Distributed execution lock for a deployment namespace, built on the
cluster-native Lease resource.

Protocol:
    - acquire: create if absent, re-acquire if ours, transfer if expired,
      otherwise LeaseAcquisitionError
    - renew: read, verify holder, bump renewTime, write with the read's
      resourceVersion
    - transfer: read, require expiry, swap holder, transitions += 1
    - release: read, verify holder, delete with a resourceVersion
      precondition; absent is a no-op

Every write carries the resourceVersion of the read immediately before it.
The API server answers a write based on stale state with 409, which is
reported as the same error kind as the semantic failure of that call, so a
caller treats both as "this attempt failed".

The manager never retries. acquire_with_retry() is the caller-side poll
loop with exponential backoff and a deadline.

Usage:
    manager = LeaseManager(clients.leases)

    async with manager.hold("net1", holder, 20) as renewer:
        await do_mutating_work()
        if renewer.lost:
            ...
"""

import asyncio
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Awaitable, Callable, Optional

from core.contracts import LeaseState
from core.errors import (
    LeaseError,
    LeaseAcquisitionError,
    LeaseRenewalError,
    LeaseTransferError,
    LeaseReleaseError,
)
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.models.lease import DEFAULT_LEASE_NAME, Lease, utc_now
from infrastructure.kube.errors import (
    KubeApiError,
    KubeUnavailableError,
    ResourceConflictError,
    ResourceNotFoundError,
)
from infrastructure.kube.leases import LeaseClient

logger = get_logger(__name__, ComponentType.LEASE)

Clock = Callable[[], datetime]


def lease_state(lease: Optional[Lease], now: datetime) -> LeaseState:
    """Classify a stored lease (None = no resource)."""
    if lease is None:
        return LeaseState.ABSENT
    if not lease.holder_identity or lease.is_expired(now):
        return LeaseState.EXPIRED
    return LeaseState.HELD


class LeaseManager:
    """
    Sole writer of the namespace lease.

    One manager serves one lease name; the namespace is passed per call.
    """

    def __init__(
        self,
        lease_client: LeaseClient,
        lease_name: str = DEFAULT_LEASE_NAME,
        clock: Clock = utc_now,
    ):
        """
        Args:
            lease_client: Lease resource client for the target cluster
            lease_name: metadata.name of the lease
            clock: Source of timezone-aware UTC "now"
        """
        self.lease_client = lease_client
        self.lease_name = lease_name
        self.clock = clock

    # =========================================================================
    # READ
    # =========================================================================

    async def read_current(self, namespace: str) -> Optional[Lease]:
        """Current stored lease of namespace, or None. Never writes."""
        return await self.lease_client.read(namespace, self.lease_name)

    async def state(self, namespace: str) -> LeaseState:
        """Observed LeaseState of namespace."""
        return lease_state(await self.read_current(namespace), self.clock())

    # =========================================================================
    # ACQUIRE
    # =========================================================================

    async def acquire(
        self,
        namespace: str,
        holder_identity: str,
        duration_seconds: int,
    ) -> Lease:
        """
        Acquire the namespace lease for holder_identity.

        - No lease: create it
        - Live and ours: re-acquire (renewTime bumped, duration updated)
        - Live and someone else's: LeaseAcquisitionError
        - Expired: transfer to holder_identity

        Raises:
            LeaseAcquisitionError: Held live by another holder, or a
                concurrent acquire won the race
            KubeUnavailableError: Cluster API unreachable (transient)
        """
        now = self.clock()
        current = await self.read_current(namespace)
        state = lease_state(current, now)

        if state == LeaseState.ABSENT:
            return await self._create(namespace, holder_identity, duration_seconds, now)

        if state == LeaseState.HELD:
            if not current.is_held_by(holder_identity):
                raise LeaseAcquisitionError(
                    f"Lease {namespace}/{self.lease_name} is held by "
                    f"{current.holder_identity} until {current.expires_at.isoformat()}",
                    namespace=namespace,
                    holder_identity=holder_identity,
                    current_holder=current.holder_identity,
                    expires_at=current.expires_at,
                )
            updated = current.model_copy(
                update={"renew_time": now, "duration_seconds": duration_seconds}
            )
            lease = await self._replace(updated, LeaseAcquisitionError, "re-acquire")
            logger.info(f"Re-acquired lease {namespace}/{self.lease_name}")
            return lease

        lease = await self._take_over(
            current, holder_identity, now, LeaseAcquisitionError,
            duration_seconds=duration_seconds,
        )
        with log_context(namespace=namespace, holder_identity=holder_identity):
            log_checkpoint("lease_acquired", {
                "lease_name": self.lease_name,
                "transition_count": lease.transition_count,
                "previous_holder": current.holder_identity or None,
            })
        return lease

    async def _create(
        self,
        namespace: str,
        holder_identity: str,
        duration_seconds: int,
        now: datetime,
    ) -> Lease:
        lease = Lease(
            namespace=namespace,
            lease_name=self.lease_name,
            holder_identity=holder_identity,
            duration_seconds=duration_seconds,
            acquire_time=now,
            renew_time=now,
            transition_count=0,
        )
        try:
            created = await self.lease_client.create(lease)
        except ResourceConflictError as e:
            raise LeaseAcquisitionError(
                f"Lease {namespace}/{self.lease_name} was created concurrently by another holder",
                namespace=namespace,
                holder_identity=holder_identity,
                cause=e,
            ) from e

        logger.info(
            f"Acquired lease {namespace}/{self.lease_name} "
            f"(holder={holder_identity}, duration={duration_seconds}s)"
        )
        with log_context(namespace=namespace, holder_identity=holder_identity):
            log_checkpoint("lease_acquired", {
                "lease_name": self.lease_name,
                "transition_count": 0,
            })
        return created

    # =========================================================================
    # RENEW
    # =========================================================================

    async def renew(self, lease: Lease) -> Lease:
        """
        Renew a lease held by lease.holder_identity.

        Raises:
            LeaseRenewalError: The lease vanished, changed holder, or was
                written concurrently
            KubeUnavailableError: Cluster API unreachable (transient)
        """
        now = self.clock()
        current = await self.lease_client.read(lease.namespace, lease.lease_name)

        if current is None:
            raise LeaseRenewalError(
                f"Lease {lease.namespace}/{lease.lease_name} no longer exists",
                namespace=lease.namespace,
                holder_identity=lease.holder_identity,
            )
        if not current.is_held_by(lease.holder_identity):
            raise LeaseRenewalError(
                f"Lease {lease.namespace}/{lease.lease_name} was taken over by "
                f"{current.holder_identity or '(nobody)'}",
                namespace=lease.namespace,
                holder_identity=lease.holder_identity,
            )

        renewed = await self._replace(
            current.model_copy(update={"renew_time": now}),
            LeaseRenewalError,
            "renew",
        )
        logger.debug(
            f"Renewed lease {lease.namespace}/{lease.lease_name} "
            f"(expires {renewed.expires_at.isoformat()})"
        )
        return renewed

    # =========================================================================
    # TRANSFER
    # =========================================================================

    async def transfer(self, lease: Lease, new_holder_identity: str) -> Lease:
        """
        Transfer an expired lease to new_holder_identity.

        The stored lease is re-read; the liveness check runs against it,
        not against the (possibly stale) argument.

        Raises:
            LeaseTransferError: Still live, vanished, or written concurrently
            KubeUnavailableError: Cluster API unreachable (transient)
        """
        now = self.clock()
        current = await self.lease_client.read(lease.namespace, lease.lease_name)

        if current is None:
            raise LeaseTransferError(
                f"Lease {lease.namespace}/{lease.lease_name} no longer exists",
                namespace=lease.namespace,
                holder_identity=new_holder_identity,
            )
        if lease_state(current, now) == LeaseState.HELD:
            raise LeaseTransferError(
                f"Lease {lease.namespace}/{lease.lease_name} is still held by "
                f"{current.holder_identity} until {current.expires_at.isoformat()}",
                namespace=lease.namespace,
                holder_identity=new_holder_identity,
            )

        return await self._take_over(current, new_holder_identity, now, LeaseTransferError)

    async def _take_over(
        self,
        current: Lease,
        new_holder_identity: str,
        now: datetime,
        error_cls: type,
        duration_seconds: Optional[int] = None,
    ) -> Lease:
        """Write new_holder_identity over an expired stored lease."""
        changed = not current.is_held_by(new_holder_identity)
        update = {
            "holder_identity": new_holder_identity,
            "acquire_time": now,
            "renew_time": now,
            "transition_count": current.transition_count + (1 if changed else 0),
        }
        if duration_seconds is not None:
            update["duration_seconds"] = duration_seconds

        lease = await self._replace(current.model_copy(update=update), error_cls, "transfer")
        logger.info(
            f"Transferred lease {current.namespace}/{current.lease_name} from "
            f"{current.holder_identity or '(nobody)'} to {new_holder_identity} "
            f"(transitions={lease.transition_count})"
        )
        return lease

    # =========================================================================
    # RELEASE
    # =========================================================================

    async def release(self, lease: Lease) -> None:
        """
        Release a lease held by lease.holder_identity.

        Already absent is a no-op.

        Raises:
            LeaseReleaseError: Held by someone else, or changed between
                the read and the delete
            KubeUnavailableError: Cluster API unreachable (transient)
        """
        current = await self.lease_client.read(lease.namespace, lease.lease_name)
        if current is None:
            logger.debug(f"Lease {lease.namespace}/{lease.lease_name} already released")
            return

        if not current.is_held_by(lease.holder_identity):
            raise LeaseReleaseError(
                f"Cannot release lease {lease.namespace}/{lease.lease_name}: "
                f"held by {current.holder_identity or '(nobody)'}, not {lease.holder_identity}",
                namespace=lease.namespace,
                holder_identity=lease.holder_identity,
            )

        try:
            await self.lease_client.delete(
                current.namespace,
                current.lease_name,
                resource_version=current.resource_version,
            )
        except ResourceNotFoundError:
            logger.debug(f"Lease {lease.namespace}/{lease.lease_name} deleted concurrently")
            return
        except ResourceConflictError as e:
            raise LeaseReleaseError(
                f"Lease {lease.namespace}/{lease.lease_name} changed before it could be released",
                namespace=lease.namespace,
                holder_identity=lease.holder_identity,
                cause=e,
            ) from e

        logger.info(f"Released lease {lease.namespace}/{lease.lease_name}")
        with log_context(namespace=lease.namespace, holder_identity=lease.holder_identity):
            log_checkpoint("lease_released", {"lease_name": lease.lease_name})

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _replace(self, lease: Lease, error_cls: type, action: str) -> Lease:
        """Replace with optimistic concurrency, mapping conflicts to error_cls."""
        try:
            return await self.lease_client.replace(lease)
        except (ResourceConflictError, ResourceNotFoundError) as e:
            reason = "was modified concurrently" if isinstance(e, ResourceConflictError) else "vanished"
            raise error_cls(
                f"Lease {lease.namespace}/{lease.lease_name} {reason} during {action}",
                namespace=lease.namespace,
                holder_identity=lease.holder_identity,
                cause=e,
            ) from e

    @asynccontextmanager
    async def hold(
        self,
        namespace: str,
        holder_identity: str,
        duration_seconds: int,
        renew_interval_seconds: Optional[float] = None,
    ) -> AsyncIterator["LeaseRenewer"]:
        """
        Acquire, keep renewed for the body, release on exit.

        Yields the LeaseRenewer; renewer.lease is the latest lease and
        renewer.lost reports a lost lease. Release failures are logged and
        never replace an exception raised by the body.
        """
        lease = await self.acquire(namespace, holder_identity, duration_seconds)
        renewer = LeaseRenewer(self, lease, renew_interval_seconds)
        renewer.start()
        try:
            yield renewer
        finally:
            await renewer.stop()
            await release_quietly(self, renewer.lease)


async def release_quietly(manager: LeaseManager, lease: Lease) -> bool:
    """
    Release lease, logging instead of raising.

    Returns:
        True if the release call completed
    """
    try:
        await manager.release(lease)
        return True
    except LeaseError as e:
        logger.warning(f"Lease release refused: {e}")
    except KubeApiError as e:
        logger.error(f"Lease release failed: {e}")
    return False


# ============================================================================
# RENEWAL SCHEDULING
# ============================================================================

class LeaseRenewer:
    """
    Background renewal of a held lease.

    Renews every interval_seconds (default half the duration, always
    inside the liveness window). A transient API failure is retried on
    the next tick. A LeaseRenewalError means the lease is lost: the
    renewer stops and records it in lost/error. Nothing is raised into
    the event loop.
    """

    def __init__(
        self,
        manager: LeaseManager,
        lease: Lease,
        interval_seconds: Optional[float] = None,
    ):
        self.manager = manager
        self._lease = lease
        duration = max(lease.duration_seconds, 1)
        interval = interval_seconds or duration / 2
        self.interval_seconds = min(interval, duration * 0.9)
        self.lost = False
        self.error: Optional[BaseException] = None
        self.renewal_count = 0
        self._stop_event: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def lease(self) -> Lease:
        """Latest successfully renewed lease."""
        return self._lease

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start renewing. Must be called from a running event loop."""
        if self._task is not None:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(
            self._run(),
            name=f"lease-renewer-{self._lease.namespace}",
        )

    async def stop(self) -> None:
        """Stop renewing and wait for the task. Safe to call repeatedly."""
        task = self._task
        if task is None or self._stop_event is None:
            return
        self._stop_event.set()
        if not task.done():
            try:
                await asyncio.wait_for(task, timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                logger.warning("Lease renewer did not stop in time, cancelled")
            except asyncio.CancelledError:
                pass

    async def _run(self) -> None:
        lease = self._lease
        logger.debug(
            f"Lease renewer started for {lease.namespace}/{lease.lease_name} "
            f"(interval={self.interval_seconds}s)"
        )

        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
                break
            except asyncio.TimeoutError:
                pass

            try:
                self._lease = await self.manager.renew(self._lease)
                self.renewal_count += 1
            except LeaseRenewalError as e:
                self.lost = True
                self.error = e
                logger.error(f"Lease lost: {e}")
                break
            except KubeUnavailableError as e:
                logger.warning(f"Lease renewal failed (transient), retrying: {e}")
            except Exception as e:
                self.lost = True
                self.error = e
                logger.error(f"Lease renewal failed: {e}")
                break

        logger.debug(f"Lease renewer stopped after {self.renewal_count} renewals")


# ============================================================================
# CALLER-SIDE RETRY
# ============================================================================

async def acquire_with_retry(
    manager: LeaseManager,
    namespace: str,
    holder_identity: str,
    duration_seconds: int,
    timeout_seconds: float = 600.0,
    poll_seconds: float = 5.0,
    backoff_max_seconds: float = 30.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Lease:
    """
    Poll acquire() until it succeeds or timeout_seconds elapses.

    The delay starts at poll_seconds and doubles up to backoff_max_seconds.
    Both a held lease and an unreachable API are retried; they are logged
    differently so an operator can tell "locked" from "cluster down".

    Raises:
        LeaseAcquisitionError: Still held when the deadline passed
        KubeUnavailableError: Cluster API never answered before the deadline
    """
    deadline = clock() + timeout_seconds
    delay = poll_seconds
    attempt = 0
    held_error: Optional[LeaseAcquisitionError] = None
    unavailable_error: Optional[KubeUnavailableError] = None

    while True:
        attempt += 1
        try:
            return await manager.acquire(namespace, holder_identity, duration_seconds)
        except LeaseAcquisitionError as e:
            held_error = e
            logger.info(
                f"Lease {namespace} busy (holder={e.current_holder}), "
                f"attempt {attempt}"
            )
        except KubeUnavailableError as e:
            unavailable_error = e
            logger.warning(f"Cluster API unavailable acquiring lease {namespace}: {e}")

        remaining = deadline - clock()
        if remaining <= 0:
            logger.error(f"Gave up acquiring lease {namespace} after {attempt} attempts")
            raise held_error or unavailable_error

        await sleep(min(delay, remaining))
        delay = min(delay * 2, backoff_max_seconds)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "LeaseManager",
    "LeaseRenewer",
    "acquire_with_retry",
    "release_quietly",
    "lease_state",
]
