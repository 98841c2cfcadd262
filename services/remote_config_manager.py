# ============================================================================
# REMOTE CONFIG MANAGER
# ============================================================================
# STATUS: Service - Cluster-persisted topology record
# PURPOSE: Load, inspect and persist the remote config of a namespace
# CREATED: 17 OCT 2026
# ============================================================================
"""
Remote Config Manager

Loads the topology record (clusters + consensus nodes) from the remote
config map once per command and keeps it for the command's lifetime. The
loaded flag is explicit: accessors raise ConfigurationError until load()
has succeeded, and nothing is re-read implicitly.

The config map has no exclusivity of its own. Writers must hold the
namespace lease; persist() verifies that when given the lease, and the
config map's resourceVersion catches a writer that did not.
"""

from datetime import datetime
from typing import Callable, Dict, Optional

import yaml
from pydantic import ValidationError

from core.config.defaults import RemoteConfigDefaults
from core.errors import (
    ConfigurationError,
    LeaseError,
    RemoteConfigConflictError,
    RemoteConfigNotFoundError,
    RemoteConfigValidationError,
)
from core.logging import ComponentType, get_logger, log_checkpoint
from core.models.lease import Lease, utc_now
from core.models.remote_config import (
    ClusterMetadata,
    RemoteConfig,
    RemoteConfigComponents,
)
from infrastructure.kube.config_maps import ConfigMapClient, ConfigMapRecord
from infrastructure.kube.errors import ResourceConflictError, ResourceNotFoundError

logger = get_logger(__name__, ComponentType.REMOTE_CONFIG)


def parse_remote_config(namespace: str, data: Optional[str]) -> RemoteConfig:
    """
    Parse the stored YAML document.

    Raises:
        RemoteConfigValidationError: Empty, not YAML, or wrong shape
    """
    if not data:
        raise RemoteConfigValidationError(
            f"Remote config in {namespace} has no document", namespace=namespace
        )
    try:
        document = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise RemoteConfigValidationError(
            f"Remote config in {namespace} is not valid YAML: {e}",
            namespace=namespace,
            cause=e,
        ) from e
    if not isinstance(document, dict):
        raise RemoteConfigValidationError(
            f"Remote config in {namespace} is not a mapping", namespace=namespace
        )
    try:
        return RemoteConfig.from_document(document)
    except ValidationError as e:
        raise RemoteConfigValidationError(
            f"Remote config in {namespace} is invalid: {e.error_count()} error(s)",
            namespace=namespace,
            cause=e,
        ) from e


def dump_remote_config(remote_config: RemoteConfig) -> str:
    """Serialise to the stored YAML document."""
    return yaml.safe_dump(remote_config.to_document(), sort_keys=False)


class RemoteConfigManager:
    """
    Holder of one namespace's remote config for a command's lifetime.
    """

    def __init__(
        self,
        config_map_client: ConfigMapClient,
        defaults: Optional[RemoteConfigDefaults] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            config_map_client: Config map client for the cluster holding the record
            defaults: Config map name, data key and labels
            clock: Source of "now" for lastUpdatedAt
        """
        self.config_map_client = config_map_client
        self.defaults = defaults or RemoteConfigDefaults()
        self.clock = clock
        self._namespace: Optional[str] = None
        self._remote_config: Optional[RemoteConfig] = None
        self._resource_version: Optional[str] = None

    # =========================================================================
    # STATE
    # =========================================================================

    def is_loaded(self) -> bool:
        """True only after a successful load() (or create())."""
        return self._remote_config is not None

    @property
    def namespace(self) -> Optional[str]:
        return self._namespace

    @property
    def resource_version(self) -> Optional[str]:
        return self._resource_version

    @property
    def remote_config(self) -> RemoteConfig:
        """
        The loaded record.

        Raises:
            ConfigurationError: Not loaded
        """
        if self._remote_config is None:
            raise ConfigurationError("Remote config is not loaded")
        return self._remote_config

    @property
    def clusters(self) -> Dict[str, ClusterMetadata]:
        """Cluster entries of the loaded record."""
        return self.remote_config.clusters

    @property
    def components(self) -> Optional[RemoteConfigComponents]:
        """Components of the loaded record (None for a fresh deployment)."""
        return self.remote_config.components

    # =========================================================================
    # LOAD
    # =========================================================================

    async def load(self, namespace: str) -> RemoteConfig:
        """
        Read the remote config of namespace.

        Raises:
            RemoteConfigNotFoundError: No record in namespace
            RemoteConfigValidationError: Record does not parse
            KubeUnavailableError: Cluster API unreachable
        """
        record = await self.config_map_client.read(namespace, self.defaults.config_map_name)
        if record is None:
            raise RemoteConfigNotFoundError(
                f"Remote config {self.defaults.config_map_name} not found in {namespace}",
                namespace=namespace,
            )

        remote_config = parse_remote_config(namespace, record.data.get(self.defaults.data_key))

        self._namespace = namespace
        self._remote_config = remote_config
        self._resource_version = record.resource_version

        node_count = len((remote_config.components and remote_config.components.consensus_nodes) or {})
        logger.info(
            f"Loaded remote config for {namespace} "
            f"({len(remote_config.clusters)} clusters, {node_count} consensus nodes)"
        )
        log_checkpoint("remote_config_loaded", {
            "namespace": namespace,
            "resource_version": record.resource_version,
        })
        return remote_config

    async def reload(self) -> RemoteConfig:
        """Discard the loaded record and read it again."""
        if self._namespace is None:
            raise ConfigurationError("Remote config is not loaded")
        namespace = self._namespace
        self.unload()
        return await self.load(namespace)

    def unload(self) -> None:
        """Back to not-loaded."""
        self._namespace = None
        self._remote_config = None
        self._resource_version = None

    async def is_stale(self) -> bool:
        """
        True if the stored record changed (or vanished) since it was loaded.
        """
        if self._namespace is None:
            raise ConfigurationError("Remote config is not loaded")
        record = await self.config_map_client.read(
            self._namespace, self.defaults.config_map_name
        )
        return record is None or record.resource_version != self._resource_version

    # =========================================================================
    # WRITE
    # =========================================================================

    async def create(self, namespace: str, remote_config: RemoteConfig) -> None:
        """
        First write of the record for a new deployment. Leaves it loaded.

        Raises:
            RemoteConfigConflictError: A record already exists
        """
        record = ConfigMapRecord(
            namespace=namespace,
            name=self.defaults.config_map_name,
            data={self.defaults.data_key: dump_remote_config(remote_config)},
            labels=dict(self.defaults.labels),
        )
        try:
            stored = await self.config_map_client.create(record)
        except ResourceConflictError as e:
            raise RemoteConfigConflictError(
                f"Remote config already exists in {namespace}",
                namespace=namespace,
                cause=e,
            ) from e

        self._namespace = namespace
        self._remote_config = remote_config
        self._resource_version = stored.resource_version
        logger.info(f"Created remote config in {namespace}")

    async def persist(
        self,
        remote_config: Optional[RemoteConfig] = None,
        lease: Optional[Lease] = None,
        command: Optional[str] = None,
    ) -> None:
        """
        Write the record back to the cluster.

        Args:
            remote_config: Record to write (default: the loaded one)
            lease: The writer's lease; must be live when given
            command: Command line appended to the history

        Raises:
            ConfigurationError: Nothing loaded and no record given
            LeaseError: lease is expired or not for this namespace
            RemoteConfigConflictError: Stored record changed since load
        """
        remote_config = remote_config or self.remote_config
        namespace = self._namespace or remote_config.metadata.namespace
        now = self.clock()

        if lease is not None and (lease.namespace != namespace or lease.is_expired(now)):
            raise LeaseError(
                f"Refusing to persist remote config in {namespace} without a live lease",
                namespace=namespace,
                holder_identity=lease.holder_identity,
            )

        # Stamped on a copy; the held record only changes once the write lands
        updated = remote_config.model_copy(deep=True)
        if lease is not None:
            updated.metadata.last_updated_by = lease.holder_identity
        updated.metadata.last_updated_at = now
        if command:
            updated.add_command(command, self.defaults.max_command_history)

        if self._resource_version is None:
            await self.create(namespace, updated)
            return

        record = ConfigMapRecord(
            namespace=namespace,
            name=self.defaults.config_map_name,
            data={self.defaults.data_key: dump_remote_config(updated)},
            labels=dict(self.defaults.labels),
            resource_version=self._resource_version,
        )
        try:
            stored = await self.config_map_client.replace(record)
        except (ResourceConflictError, ResourceNotFoundError) as e:
            raise RemoteConfigConflictError(
                f"Remote config in {namespace} changed since it was loaded",
                namespace=namespace,
                cause=e,
            ) from e

        self._namespace = namespace
        self._remote_config = updated
        self._resource_version = stored.resource_version
        logger.info(f"Persisted remote config in {namespace}")
        log_checkpoint("remote_config_persisted", {
            "namespace": namespace,
            "resource_version": stored.resource_version,
            "command": command,
        })


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "RemoteConfigManager",
    "parse_remote_config",
    "dump_remote_config",
]
