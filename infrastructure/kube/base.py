# ============================================================================
# BASE RESOURCE CLIENT
# ============================================================================
# STATUS: Infrastructure - Async wrapper over the blocking kubernetes client
# PURPOSE: Common executor dispatch, error translation and logging
# CREATED: 17 OCT 2026
# ============================================================================
"""
Base Resource Client

The official kubernetes client is blocking. Every call is dispatched to
the default executor so the event loop stays free while the round trip
is in flight; to the caller each cluster API call is one await.

Subclasses (one per resource kind) call self._call() and receive
KubeApiError subclasses instead of ApiException.
"""

import asyncio
import functools
from typing import Any, Callable, Optional

from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from core.logging import ComponentType, get_logger

from .errors import translate_api_exception


class KubeResourceClient:
    """Async base for per-resource-kind clients."""

    resource: str = "resource"

    def __init__(self, api: Any):
        """
        Args:
            api: Generated kubernetes API object (CoreV1Api, CoordinationV1Api, ...)
        """
        self.api = api
        self.logger = get_logger(self.__class__.__name__, ComponentType.INFRASTRUCTURE)

    async def _call(
        self,
        fn: Callable[..., Any],
        *args: Any,
        name: Optional[str] = None,
        **kwargs: Any,
    ) -> Any:
        """
        Run a blocking API call on the default executor.

        Args:
            fn: Bound API method
            *args: Positional arguments for fn
            name: Resource name (error messages only)
            **kwargs: Keyword arguments for fn

        Raises:
            KubeApiError: Translated from ApiException / transport errors
        """
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, functools.partial(fn, *args, **kwargs))
        except (ApiException, Urllib3HTTPError) as e:
            error = translate_api_exception(e, self.resource, name)
            self.logger.debug(f"{getattr(fn, '__name__', 'call')} failed: {error}")
            raise error from e


__all__ = ["KubeResourceClient"]
