# ============================================================================
# ERROR TAXONOMY
# ============================================================================
# STATUS: Core - Exceptions surfaced to the command orchestrator
# PURPOSE: Distinguish lock contention, topology and configuration failures
# CREATED: 17 OCT 2026
# ============================================================================
"""
Error Taxonomy

Every failure the lease and topology core can raise derives from
DeploymentError. The command orchestrator catches DeploymentError, logs it
with the command's context, and re-raises it wrapped in a CommandError.

Hierarchy:
    DeploymentError
    ├── LeaseError
    │   ├── LeaseAcquisitionError   (lease held live by another holder)
    │   ├── LeaseRenewalError       (holder mismatch / lease vanished)
    │   ├── LeaseTransferError      (transfer attempted while live)
    │   └── LeaseReleaseError       (release by a non-holder)
    ├── RemoteConfigError
    │   ├── RemoteConfigNotFoundError
    │   ├── RemoteConfigConflictError
    │   └── RemoteConfigValidationError
    ├── ConfigurationError
    └── CommandError

Transient cluster-API failures are NOT part of this tree; they are raised
as infrastructure.kube.errors.KubeUnavailableError so a retrying caller
never confuses "the lock is held" with "the API server is down".
"""

from datetime import datetime
from typing import Any, Dict, Optional


class DeploymentError(Exception):
    """Base exception for all deployment core failures."""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.cause = cause
        self.context = dict(context or {})
        super().__init__(message)


# ============================================================================
# LEASE ERRORS
# ============================================================================

class LeaseError(DeploymentError):
    """Base exception for lease operations."""

    def __init__(
        self,
        message: str,
        namespace: Optional[str] = None,
        holder_identity: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.namespace = namespace
        self.holder_identity = holder_identity
        super().__init__(
            message,
            cause=cause,
            context={"namespace": namespace, "holder_identity": holder_identity},
        )


class LeaseAcquisitionError(LeaseError):
    """
    Raised when the lease is held live by a different holder.

    Also raised when a concurrent acquire won the create/replace race.
    """

    def __init__(
        self,
        message: str,
        namespace: Optional[str] = None,
        holder_identity: Optional[str] = None,
        current_holder: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        cause: Optional[BaseException] = None,
    ):
        self.current_holder = current_holder
        self.expires_at = expires_at
        super().__init__(message, namespace, holder_identity, cause)


class LeaseRenewalError(LeaseError):
    """Raised when the renewing holder no longer owns the lease."""


class LeaseTransferError(LeaseError):
    """Raised when a transfer is attempted against a live lease."""


class LeaseReleaseError(LeaseError):
    """Raised when a release is attempted by someone other than the holder."""


# ============================================================================
# REMOTE CONFIG ERRORS
# ============================================================================

class RemoteConfigError(DeploymentError):
    """Base exception for remote config operations."""

    def __init__(
        self,
        message: str,
        namespace: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.namespace = namespace
        super().__init__(message, cause=cause, context={"namespace": namespace})


class RemoteConfigNotFoundError(RemoteConfigError):
    """Raised when no remote config record exists for a namespace."""


class RemoteConfigConflictError(RemoteConfigError):
    """Raised when a persist lost an optimistic-concurrency race."""


class RemoteConfigValidationError(RemoteConfigError):
    """Raised when the stored remote config document cannot be parsed."""


# ============================================================================
# CONFIGURATION / COMMAND ERRORS
# ============================================================================

class ConfigurationError(DeploymentError):
    """Raised for misuse of configuration (e.g. reading before load)."""


class CommandError(DeploymentError):
    """
    The single reported failure of a command.

    Wraps the original error (also available as __cause__) together with
    the command's identifying context.
    """

    def __init__(
        self,
        message: str,
        command: str,
        namespace: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.command = command
        self.namespace = namespace
        super().__init__(
            message,
            cause=cause,
            context={"command": command, "namespace": namespace},
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "DeploymentError",
    "LeaseError",
    "LeaseAcquisitionError",
    "LeaseRenewalError",
    "LeaseTransferError",
    "LeaseReleaseError",
    "RemoteConfigError",
    "RemoteConfigNotFoundError",
    "RemoteConfigConflictError",
    "RemoteConfigValidationError",
    "ConfigurationError",
    "CommandError",
]
