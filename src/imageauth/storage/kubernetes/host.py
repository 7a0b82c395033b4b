"""Storage layer for host custom objects."""

from __future__ import annotations

from typing import Any

from kubernetes_asyncio import client
from kubernetes_asyncio.client import ApiClient, ApiException
from pydantic import ValidationError
from structlog.stdlib import BoundLogger

from ...exceptions import InvalidHostError, KubernetesError
from ...models.domain.host import Host

__all__ = ["HostStorage"]


class HostStorage:
    """Storage layer for the custom objects describing hosts.

    Parameters
    ----------
    api_client
        Kubernetes API client.
    group
        API group of the host custom objects.
    version
        API version of the host custom objects.
    plural
        API plural under which the host custom objects are managed.
    kind
        Name of the custom object kind, used for error reporting.
    logger
        Logger to use.
    """

    def __init__(
        self,
        api_client: ApiClient,
        *,
        group: str,
        version: str,
        plural: str,
        kind: str,
        logger: BoundLogger,
    ) -> None:
        self._api = client.CustomObjectsApi(api_client)
        self._group = group
        self._version = version
        self._plural = plural
        self._kind = kind
        self._logger = logger

    async def list(self, namespace: str) -> list[Host]:
        """List the hosts in a namespace.

        Hosts that cannot be parsed are logged and skipped.

        Parameters
        ----------
        namespace
            Namespace in which to list hosts.

        Returns
        -------
        list of Host
            Hosts found.

        Raises
        ------
        KubernetesError
            Raised for exceptions from the Kubernetes API server.
        """
        try:
            objs = await self._api.list_namespaced_custom_object(
                self._group, self._version, namespace, self._plural
            )
        except ApiException as e:
            raise KubernetesError.from_exception(
                "Error listing objects",
                e,
                kind=self._kind,
                namespace=namespace,
            ) from e
        hosts = []
        for obj in objs["items"]:
            try:
                hosts.append(self._parse(obj, namespace))
            except InvalidHostError as e:
                self._logger.warning(
                    "Ignoring invalid host", error=e.error, namespace=namespace
                )
        return hosts

    async def read(self, name: str, namespace: str) -> Host | None:
        """Read a host.

        Parameters
        ----------
        name
            Name of the host.
        namespace
            Namespace of the host.

        Returns
        -------
        Host or None
            Host, or `None` if it does not exist.

        Raises
        ------
        InvalidHostError
            Raised if the host object could not be parsed.
        KubernetesError
            Raised for exceptions from the Kubernetes API server.
        """
        try:
            obj = await self._api.get_namespaced_custom_object(
                self._group, self._version, namespace, self._plural, name
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise KubernetesError.from_exception(
                "Error reading object",
                e,
                kind=self._kind,
                namespace=namespace,
                name=name,
            ) from e
        return self._parse(obj, namespace)

    def _parse(self, obj: dict[str, Any], namespace: str) -> Host:
        """Parse a custom object into a host."""
        name = obj.get("metadata", {}).get("name", "<unknown>")
        try:
            return Host.from_custom_object(obj)
        except ValidationError as e:
            raise InvalidHostError.from_exception(name, namespace, e) from e
