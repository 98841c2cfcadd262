# ============================================================================
# LEASE RESOURCE CLIENT
# ============================================================================
# STATUS: Infrastructure - coordination.k8s.io/v1 Lease access
# PURPOSE: CRUD for the namespace lease with optimistic concurrency
# CREATED: 17 OCT 2026
# ============================================================================
"""
Lease Resource Client

Reads and writes the namespace Lease. Reads arrive as V1Lease; writes
are sent as camelCase dict bodies. Writes go through replace (PUT)
carrying the resourceVersion of the last read, so the API server rejects
a write based on stale state with 409, surfaced as ResourceConflictError.

Field mapping:
    metadata.name             <-> Lease.lease_name
    metadata.namespace        <-> Lease.namespace
    metadata.resourceVersion  <-> Lease.resource_version
    spec.holderIdentity       <-> Lease.holder_identity
    spec.leaseDurationSeconds <-> Lease.duration_seconds
    spec.acquireTime          <-> Lease.acquire_time
    spec.renewTime            <-> Lease.renew_time
    spec.leaseTransitions     <-> Lease.transition_count
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from kubernetes import client

from core.models.lease import Lease
from .base import KubeResourceClient
from .errors import ResourceNotFoundError

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def format_micro_time(value: datetime) -> str:
    """
    Render a datetime as a Kubernetes MicroTime string.

    MicroTime requires exactly six fractional digits, which
    datetime.isoformat() omits when microsecond == 0.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _as_utc(value) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_lease_body(lease: Lease) -> Dict[str, Any]:
    """
    Build the request body for a create or replace.

    A camelCase dict rather than a V1Lease: the V1LeaseSpec setters parse
    MicroTime strings back into datetimes, and the client then serialises
    those without the fractional digits.
    """
    metadata = {"name": lease.lease_name, "namespace": lease.namespace}
    if lease.resource_version:
        metadata["resourceVersion"] = lease.resource_version
    return {
        "apiVersion": "coordination.k8s.io/v1",
        "kind": "Lease",
        "metadata": metadata,
        "spec": {
            "holderIdentity": lease.holder_identity,
            "leaseDurationSeconds": lease.duration_seconds,
            "acquireTime": format_micro_time(lease.acquire_time),
            "renewTime": format_micro_time(lease.renew_time),
            "leaseTransitions": lease.transition_count,
        },
    }


def from_v1_lease(v1_lease: client.V1Lease) -> Lease:
    """Convert a V1Lease read from the cluster into a Lease."""
    metadata = v1_lease.metadata
    spec = v1_lease.spec or client.V1LeaseSpec()
    acquire_time = _as_utc(spec.acquire_time)
    renew_time = _as_utc(spec.renew_time) or acquire_time or _EPOCH
    return Lease(
        namespace=metadata.namespace,
        lease_name=metadata.name,
        holder_identity=spec.holder_identity or "",
        duration_seconds=spec.lease_duration_seconds or 0,
        acquire_time=acquire_time or renew_time,
        renew_time=renew_time,
        transition_count=spec.lease_transitions or 0,
        resource_version=metadata.resource_version,
    )


class LeaseClient(KubeResourceClient):
    """Namespace lease access over CoordinationV1Api."""

    resource = "lease"

    def __init__(self, api: client.CoordinationV1Api):
        super().__init__(api)

    async def read(self, namespace: str, name: str) -> Optional[Lease]:
        """
        Read the lease.

        Returns:
            Lease or None if it does not exist
        """
        try:
            v1_lease = await self._call(
                self.api.read_namespaced_lease, name, namespace, name=name
            )
        except ResourceNotFoundError:
            return None
        return from_v1_lease(v1_lease)

    async def create(self, lease: Lease) -> Lease:
        """
        Create the lease.

        Raises:
            ResourceConflictError: A lease with this name already exists
        """
        body = to_lease_body(lease.model_copy(update={"resource_version": None}))
        created = await self._call(
            self.api.create_namespaced_lease, lease.namespace, body, name=lease.lease_name
        )
        self.logger.debug(f"Created lease {lease.namespace}/{lease.lease_name}")
        return from_v1_lease(created)

    async def replace(self, lease: Lease) -> Lease:
        """
        Replace the lease, guarded by lease.resource_version.

        Raises:
            ResourceConflictError: The stored lease changed since it was read
            ResourceNotFoundError: The lease was deleted
        """
        replaced = await self._call(
            self.api.replace_namespaced_lease,
            lease.lease_name,
            lease.namespace,
            to_lease_body(lease),
            name=lease.lease_name,
        )
        return from_v1_lease(replaced)

    async def delete(
        self,
        namespace: str,
        name: str,
        resource_version: Optional[str] = None,
    ) -> None:
        """
        Delete the lease.

        When resource_version is given the delete is a precondition-guarded
        delete (409 if the lease changed since it was read).

        Raises:
            ResourceNotFoundError: The lease does not exist
        """
        body = None
        if resource_version:
            body = client.V1DeleteOptions(
                preconditions=client.V1Preconditions(resource_version=resource_version)
            )
        await self._call(
            self.api.delete_namespaced_lease, name, namespace, body=body, name=name
        )
        self.logger.debug(f"Deleted lease {namespace}/{name}")


__all__ = ["LeaseClient", "to_lease_body", "from_v1_lease", "format_micro_time"]
