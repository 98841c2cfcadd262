# ============================================================================
# DEPLOYMENT LEASE MODEL
# ============================================================================
# STATUS: Core - Lease-based mutual exclusion per namespace
# PURPOSE: In-memory handle for the namespace-scoped coordination lease
# CREATED: 17 OCT 2026
# ============================================================================
"""
Deployment Lease Model

Handle for the cluster-native Lease resource that serialises mutating
commands against one deployment namespace.

Key properties:
- At most one live holder per namespace
- Liveness is purely a function of wall-clock time:
  now - renew_time < duration_seconds
- An expired lease can be transferred to a new holder, which bumps
  transition_count
- resource_version is the store's optimistic-concurrency token; every
  renew/transfer writes with the latest one
"""

import getpass
import os
import secrets
import socket
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, Field, computed_field

DEFAULT_LEASE_NAME = "deployment-lease"


def utc_now() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class LeaseHolder(BaseModel):
    """
    Structured identity of a lease holder process.

    Rendered into the opaque holderIdentity string as
    "<username>@<hostname>:<pid>:<suffix>".
    """

    username: str = Field(..., min_length=1, max_length=64)
    hostname: str = Field(..., min_length=1, max_length=253)
    process_id: int = Field(..., ge=0)
    suffix: str = Field(..., min_length=1, max_length=16)

    model_config = {"frozen": True}

    @classmethod
    def default(cls) -> "LeaseHolder":
        """Identity for the current process (random suffix per invocation)."""
        try:
            username = getpass.getuser()
        except (KeyError, OSError):
            username = "unknown"
        return cls(
            username=username or "unknown",
            hostname=socket.gethostname() or "localhost",
            process_id=os.getpid(),
            suffix=secrets.token_hex(4),
        )

    @classmethod
    def parse(cls, identity: Optional[str]) -> Optional["LeaseHolder"]:
        """
        Parse a holderIdentity string produced by str(LeaseHolder).

        Returns None for identities written by other tools.
        """
        if not identity or "@" not in identity:
            return None
        username, _, rest = identity.partition("@")
        parts = rest.rsplit(":", 2)
        if len(parts) != 3 or not parts[1].isdigit():
            return None
        try:
            return cls(
                username=username,
                hostname=parts[0],
                process_id=int(parts[1]),
                suffix=parts[2],
            )
        except ValueError:
            return None

    def __str__(self) -> str:
        return f"{self.username}@{self.hostname}:{self.process_id}:{self.suffix}"


class Lease(BaseModel):
    """
    Namespace lease handle.

    Only one process can hold the lease of a namespace at a time.
    The holder must renew before duration_seconds elapses, otherwise
    another process may transfer the lease to itself.

    Resource: coordination.k8s.io/v1 Lease (one per namespace)
    """

    namespace: str = Field(
        ...,
        min_length=1,
        max_length=63,
        description="Namespace the lease guards (metadata.namespace)"
    )
    lease_name: str = Field(
        default=DEFAULT_LEASE_NAME,
        max_length=253,
        description="Lease identifier (metadata.name)"
    )
    holder_identity: str = Field(
        ...,
        description="Opaque id of the owning process instance (spec.holderIdentity)"
    )
    duration_seconds: int = Field(
        ...,
        ge=0,
        description="Liveness window in seconds (spec.leaseDurationSeconds)"
    )
    acquire_time: datetime = Field(
        default_factory=utc_now,
        description="When the current holder took ownership (spec.acquireTime)"
    )
    renew_time: datetime = Field(
        default_factory=utc_now,
        description="Most recent renewal (spec.renewTime)"
    )
    transition_count: int = Field(
        default=0,
        ge=0,
        description="Cumulative holder changes (spec.leaseTransitions)"
    )
    resource_version: Optional[str] = Field(
        default=None,
        description="Optimistic-concurrency token of the stored resource"
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "namespace": "net1",
                    "lease_name": "deployment-lease",
                    "holder_identity": "ops@laptop:4242:9f1c2a7e",
                    "duration_seconds": 20,
                    "acquire_time": "2026-10-17T12:00:00Z",
                    "renew_time": "2026-10-17T12:00:10Z",
                    "transition_count": 0,
                    "resource_version": "18342",
                }
            ]
        }
    }

    @computed_field
    @property
    def expires_at(self) -> datetime:
        """Instant after which the lease is no longer live."""
        return self.renew_time + timedelta(seconds=self.duration_seconds)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """
        Check if the lease has expired.

        Args:
            now: Current time (defaults to utc_now)

        Returns:
            True if now - renew_time >= duration_seconds
        """
        if now is None:
            now = utc_now()
        return now - self.renew_time >= timedelta(seconds=self.duration_seconds)

    def is_live(self, now: Optional[datetime] = None) -> bool:
        """Check if the lease is still within its validity window."""
        return not self.is_expired(now)

    def is_held_by(self, holder_identity: str) -> bool:
        """Check if holder_identity is the current holder."""
        return self.holder_identity == holder_identity


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["Lease", "LeaseHolder", "DEFAULT_LEASE_NAME", "utc_now"]
