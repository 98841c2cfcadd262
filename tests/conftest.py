# ============================================================================
# SHARED TEST FIXTURES
# ============================================================================
# STATUS: Tests - In-memory cluster stand-ins
# PURPOSE: Fake lease / config map stores and a controllable clock
# CREATED: 17 OCT 2026
# ============================================================================
"""
Shared fixtures.

The fake clients keep resources in dicts and behave like the API server
where it matters to the lease protocol:
- every write bumps resourceVersion
- replace/delete with a stale resourceVersion raises ResourceConflictError
- create on an existing name raises ResourceConflictError
- missing resources raise ResourceNotFoundError (read returns None)

Failures can be injected per operation with fail_next(op, exc).
"""

import dataclasses
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import pytest

from core.config.local_config import LocalConfig
from core.models.lease import Lease
from core.models.remote_config import (
    ClusterMetadata,
    ConsensusNodeComponent,
    RemoteConfig,
    RemoteConfigComponents,
    RemoteConfigMetadata,
)
from infrastructure.kube.config_maps import ConfigMapRecord
from infrastructure.kube.errors import ResourceConflictError, ResourceNotFoundError


class FakeClock:
    """Wall clock and monotonic clock that only move when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc)
        self.elapsed = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)
        self.elapsed += seconds

    def monotonic(self) -> float:
        return self.elapsed

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(seconds)


class _FakeStore:
    resource = "resource"

    def __init__(self):
        self._version = 0
        self._failures: Dict[str, List[Exception]] = {}
        self.calls: List[Tuple[str, str, str]] = []

    def fail_next(self, op: str, exc: Exception) -> None:
        self._failures.setdefault(op, []).append(exc)

    def _enter(self, op: str, namespace: str, name: str) -> None:
        self.calls.append((op, namespace, name))
        pending = self._failures.get(op)
        if pending:
            raise pending.pop(0)

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    def _not_found(self, name: str):
        return ResourceNotFoundError(f"{self.resource}/{name}: 404", status=404, name=name)

    def _conflict(self, name: str):
        return ResourceConflictError(f"{self.resource}/{name}: 409", status=409, name=name)


class FakeLeaseClient(_FakeStore):
    """In-memory LeaseClient."""

    resource = "lease"

    def __init__(self):
        super().__init__()
        self.leases: Dict[Tuple[str, str], Lease] = {}

    async def read(self, namespace: str, name: str) -> Optional[Lease]:
        self._enter("read", namespace, name)
        lease = self.leases.get((namespace, name))
        return lease.model_copy() if lease else None

    async def create(self, lease: Lease) -> Lease:
        self._enter("create", lease.namespace, lease.lease_name)
        key = (lease.namespace, lease.lease_name)
        if key in self.leases:
            raise self._conflict(lease.lease_name)
        stored = lease.model_copy(update={"resource_version": self._next_version()})
        self.leases[key] = stored
        return stored.model_copy()

    async def replace(self, lease: Lease) -> Lease:
        self._enter("replace", lease.namespace, lease.lease_name)
        key = (lease.namespace, lease.lease_name)
        current = self.leases.get(key)
        if current is None:
            raise self._not_found(lease.lease_name)
        if lease.resource_version != current.resource_version:
            raise self._conflict(lease.lease_name)
        stored = lease.model_copy(update={"resource_version": self._next_version()})
        self.leases[key] = stored
        return stored.model_copy()

    async def delete(self, namespace: str, name: str, resource_version: Optional[str] = None) -> None:
        self._enter("delete", namespace, name)
        current = self.leases.get((namespace, name))
        if current is None:
            raise self._not_found(name)
        if resource_version and resource_version != current.resource_version:
            raise self._conflict(name)
        del self.leases[(namespace, name)]

    def put(self, lease: Lease) -> Lease:
        """Store a lease directly, as another process would have."""
        stored = lease.model_copy(update={"resource_version": self._next_version()})
        self.leases[(lease.namespace, lease.lease_name)] = stored
        return stored


class FakeConfigMapClient(_FakeStore):
    """In-memory ConfigMapClient."""

    resource = "configmap"

    def __init__(self):
        super().__init__()
        self.records: Dict[Tuple[str, str], ConfigMapRecord] = {}

    async def read(self, namespace: str, name: str) -> Optional[ConfigMapRecord]:
        self._enter("read", namespace, name)
        record = self.records.get((namespace, name))
        return dataclasses.replace(record, data=dict(record.data)) if record else None

    async def create(self, record: ConfigMapRecord) -> ConfigMapRecord:
        self._enter("create", record.namespace, record.name)
        key = (record.namespace, record.name)
        if key in self.records:
            raise self._conflict(record.name)
        stored = dataclasses.replace(record, resource_version=self._next_version())
        self.records[key] = stored
        return dataclasses.replace(stored)

    async def replace(self, record: ConfigMapRecord) -> ConfigMapRecord:
        self._enter("replace", record.namespace, record.name)
        key = (record.namespace, record.name)
        current = self.records.get(key)
        if current is None:
            raise self._not_found(record.name)
        if record.resource_version != current.resource_version:
            raise self._conflict(record.name)
        stored = dataclasses.replace(record, resource_version=self._next_version())
        self.records[key] = stored
        return dataclasses.replace(stored)

    async def delete(self, namespace: str, name: str) -> None:
        self._enter("delete", namespace, name)
        if (namespace, name) not in self.records:
            raise self._not_found(name)
        del self.records[(namespace, name)]

    def put(self, namespace: str, name: str, data: Dict[str, str]) -> ConfigMapRecord:
        """Store a config map directly, as another writer would have."""
        record = ConfigMapRecord(
            namespace=namespace,
            name=name,
            data=dict(data),
            resource_version=self._next_version(),
        )
        self.records[(namespace, name)] = record
        return record


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def lease_client():
    return FakeLeaseClient()


@pytest.fixture
def config_map_client():
    return FakeConfigMapClient()


@pytest.fixture
def remote_config():
    """Two clusters, three nodes; cluster-b has no DNS settings."""
    return RemoteConfig(
        metadata=RemoteConfigMetadata(namespace="ns1", deployment_name="deploy1"),
        clusters={
            "cluster-a": ClusterMetadata(
                name="cluster-a",
                namespace="ns1",
                deployment="deploy1",
                dns_base_domain="a.example.com",
                dns_consensus_node_pattern="${nodeAlias}.${namespace}.svc.${dnsBaseDomain}",
            ),
            "cluster-b": ClusterMetadata(name="cluster-b", namespace="ns1", deployment="deploy1"),
        },
        components=RemoteConfigComponents(
            consensus_nodes={
                "node1": ConsensusNodeComponent(name="node1", node_id=0, namespace="ns1", cluster="cluster-a"),
                "node2": ConsensusNodeComponent(name="node2", node_id=1, namespace="ns1", cluster="cluster-b"),
                "node3": ConsensusNodeComponent(name="node3", node_id=2, namespace="ns1", cluster="cluster-a"),
            }
        ),
    )


@pytest.fixture
def local_config():
    return LocalConfig(cluster_ref_map={"cluster-a": "kind-a", "cluster-b": "kind-b"})
