# ============================================================================
# CONFIG MAP RESOURCE CLIENT
# ============================================================================
# STATUS: Infrastructure - core/v1 ConfigMap access
# PURPOSE: Storage for the remote config document
# CREATED: 17 OCT 2026
# ============================================================================
"""
Config Map Resource Client

Minimal config map CRUD used to persist the remote config record. Reads
return a ConfigMapRecord carrying the resourceVersion; replace() sends it
back so a concurrent writer's change is detected as a 409.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from kubernetes import client

from .base import KubeResourceClient
from .errors import ResourceNotFoundError


@dataclass
class ConfigMapRecord:
    """Config map contents plus its optimistic-concurrency token."""
    namespace: str
    name: str
    data: Dict[str, str] = field(default_factory=dict)
    labels: Dict[str, str] = field(default_factory=dict)
    resource_version: Optional[str] = None

    @classmethod
    def from_v1(cls, v1_config_map: client.V1ConfigMap) -> "ConfigMapRecord":
        metadata = v1_config_map.metadata
        return cls(
            namespace=metadata.namespace,
            name=metadata.name,
            data=dict(v1_config_map.data or {}),
            labels=dict(metadata.labels or {}),
            resource_version=metadata.resource_version,
        )

    def to_v1(self) -> client.V1ConfigMap:
        return client.V1ConfigMap(
            api_version="v1",
            kind="ConfigMap",
            metadata=client.V1ObjectMeta(
                name=self.name,
                namespace=self.namespace,
                labels=self.labels or None,
                resource_version=self.resource_version,
            ),
            data=self.data,
        )


class ConfigMapClient(KubeResourceClient):
    """Config map access over CoreV1Api."""

    resource = "configmap"

    def __init__(self, api: client.CoreV1Api):
        super().__init__(api)

    async def read(self, namespace: str, name: str) -> Optional[ConfigMapRecord]:
        """Read a config map, or None if it does not exist."""
        try:
            v1_config_map = await self._call(
                self.api.read_namespaced_config_map, name, namespace, name=name
            )
        except ResourceNotFoundError:
            return None
        return ConfigMapRecord.from_v1(v1_config_map)

    async def create(self, record: ConfigMapRecord) -> ConfigMapRecord:
        """
        Create a config map.

        Raises:
            ResourceConflictError: It already exists
        """
        record = ConfigMapRecord(
            namespace=record.namespace,
            name=record.name,
            data=record.data,
            labels=record.labels,
        )
        created = await self._call(
            self.api.create_namespaced_config_map,
            record.namespace,
            record.to_v1(),
            name=record.name,
        )
        self.logger.debug(f"Created configmap {record.namespace}/{record.name}")
        return ConfigMapRecord.from_v1(created)

    async def replace(self, record: ConfigMapRecord) -> ConfigMapRecord:
        """
        Replace a config map, guarded by record.resource_version.

        Raises:
            ResourceConflictError: It changed since it was read
            ResourceNotFoundError: It was deleted
        """
        replaced = await self._call(
            self.api.replace_namespaced_config_map,
            record.name,
            record.namespace,
            record.to_v1(),
            name=record.name,
        )
        return ConfigMapRecord.from_v1(replaced)

    async def delete(self, namespace: str, name: str) -> None:
        """
        Delete a config map.

        Raises:
            ResourceNotFoundError: It does not exist
        """
        await self._call(
            self.api.delete_namespaced_config_map, name, namespace, name=name
        )
        self.logger.debug(f"Deleted configmap {namespace}/{name}")


__all__ = ["ConfigMapClient", "ConfigMapRecord"]
