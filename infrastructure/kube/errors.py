# ============================================================================
# KUBERNETES API ERRORS
# ============================================================================
# STATUS: Infrastructure - Cluster API error mapping
# PURPOSE: Translate ApiException into errors callers can branch on
# CREATED: 17 OCT 2026
# ============================================================================
"""
Kubernetes API Errors

The kubernetes client raises ApiException for every non-2xx response and
urllib3 errors for transport failures. Callers only care about four cases:

- ResourceNotFoundError  (404)
- ResourceConflictError  (409: already exists, or stale resourceVersion)
- KubeUnavailableError   (transport failure, 429, 5xx) - transient
- KubeApiError           (anything else)
"""

from typing import Optional

from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError as Urllib3HTTPError

TRANSIENT_STATUSES = frozenset({0, 429, 500, 502, 503, 504})


class KubeApiError(Exception):
    """Base exception for cluster API failures."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        reason: Optional[str] = None,
        resource: Optional[str] = None,
        name: Optional[str] = None,
    ):
        self.status = status
        self.reason = reason
        self.resource = resource
        self.name = name
        super().__init__(message)


class ResourceNotFoundError(KubeApiError):
    """The addressed resource does not exist."""


class ResourceConflictError(KubeApiError):
    """Create on an existing resource, or write with a stale resourceVersion."""


class KubeUnavailableError(KubeApiError):
    """The API server could not be reached or is overloaded (retryable)."""


def translate_api_exception(
    exc: BaseException,
    resource: str,
    name: Optional[str] = None,
) -> KubeApiError:
    """
    Map a kubernetes client exception to a KubeApiError subclass.

    Args:
        exc: ApiException or urllib3 transport error
        resource: Resource kind for the message (e.g. "lease")
        name: Resource name for the message

    Returns:
        The KubeApiError to raise (caller chains it with `from exc`)
    """
    target = f"{resource}/{name}" if name else resource

    if isinstance(exc, ApiException):
        status = exc.status or 0
        reason = exc.reason
        if status == 404:
            cls = ResourceNotFoundError
        elif status == 409:
            cls = ResourceConflictError
        elif status in TRANSIENT_STATUSES:
            cls = KubeUnavailableError
        else:
            cls = KubeApiError
        return cls(
            f"{target}: {status} {reason}",
            status=status,
            reason=reason,
            resource=resource,
            name=name,
        )

    if isinstance(exc, Urllib3HTTPError):
        return KubeUnavailableError(
            f"{target}: cluster API unreachable: {exc}",
            resource=resource,
            name=name,
        )

    return KubeApiError(f"{target}: {exc}", resource=resource, name=name)


__all__ = [
    "KubeApiError",
    "ResourceNotFoundError",
    "ResourceConflictError",
    "KubeUnavailableError",
    "translate_api_exception",
]
