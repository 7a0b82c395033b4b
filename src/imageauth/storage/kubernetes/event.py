"""Storage layer for warning ``Event`` objects about hosts."""

from __future__ import annotations

import secrets
from datetime import timedelta

from kubernetes_asyncio import client
from kubernetes_asyncio.client import (
    ApiClient,
    ApiException,
    CoreV1Event,
    V1EventSource,
    V1ObjectMeta,
    V1ObjectReference,
)
from safir.datetime import current_datetime
from structlog.stdlib import BoundLogger

from ...constants import KUBERNETES_REQUEST_TIMEOUT
from ...models.domain.host import Host
from ...models.domain.imageauth import ImageAuthNotice

__all__ = ["EventStorage"]


class EventStorage:
    """Publish warnings about hosts as Kubernetes events.

    Publishing is best-effort. Failures are logged and otherwise ignored so
    that a broken event sink never changes the outcome of a validation.

    Parameters
    ----------
    api_client
        Kubernetes API client.
    component
        Name of the component reported as the source of the events.
    host_kind
        Kubernetes kind of the host objects.
    host_api_version
        API version (``group/version``) of the host objects.
    logger
        Logger to use.
    timeout
        Timeout for each Kubernetes API call.
    """

    def __init__(
        self,
        api_client: ApiClient,
        *,
        component: str,
        host_kind: str,
        host_api_version: str,
        logger: BoundLogger,
        timeout: timedelta = KUBERNETES_REQUEST_TIMEOUT,
    ) -> None:
        self._api = client.CoreV1Api(api_client)
        self._component = component
        self._kind = host_kind
        self._api_version = host_api_version
        self._logger = logger
        self._timeout = timeout

    async def publish_warning(
        self, host: Host, notice: ImageAuthNotice
    ) -> None:
        """Record a warning event on a host.

        Parameters
        ----------
        host
            Host the warning is about.
        notice
            Reason and message of the warning.
        """
        now = current_datetime()
        name = f"{host.name}.{secrets.token_hex(8)}"
        event = CoreV1Event(
            metadata=V1ObjectMeta(name=name, namespace=host.namespace),
            involved_object=V1ObjectReference(
                api_version=self._api_version,
                kind=self._kind,
                name=host.name,
                namespace=host.namespace,
                uid=host.uid,
            ),
            type="Warning",
            reason=notice.reason.value,
            message=notice.message,
            source=V1EventSource(component=self._component),
            reporting_component=self._component,
            first_timestamp=now,
            last_timestamp=now,
            count=1,
        )
        self._logger.warning(
            notice.message,
            host=host.name,
            namespace=host.namespace,
            reason=notice.reason.value,
        )
        try:
            await self._api.create_namespaced_event(
                host.namespace,
                event,
                _request_timeout=self._timeout.total_seconds(),
            )
        except ApiException as e:
            self._logger.warning(
                "Unable to record event",
                host=host.name,
                namespace=host.namespace,
                reason=notice.reason.value,
                status=e.status,
                error=e.body if e.body else e.reason,
            )
