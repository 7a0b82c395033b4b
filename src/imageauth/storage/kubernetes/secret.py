"""Storage layer for ``Secret`` objects."""

from __future__ import annotations

from datetime import timedelta

from kubernetes_asyncio import client
from kubernetes_asyncio.client import ApiClient, ApiException
from structlog.stdlib import BoundLogger

from ...constants import KUBERNETES_REQUEST_TIMEOUT
from ...exceptions import KubernetesError
from ...models.domain.secret import AuthSecret

__all__ = ["SecretStorage"]


class SecretStorage:
    """Storage layer for ``Secret`` objects.

    Parameters
    ----------
    api_client
        Kubernetes API client.
    logger
        Logger to use.
    timeout
        Timeout for each Kubernetes API call.
    """

    def __init__(
        self,
        api_client: ApiClient,
        logger: BoundLogger,
        timeout: timedelta = KUBERNETES_REQUEST_TIMEOUT,
    ) -> None:
        self._api = client.CoreV1Api(api_client)
        self._logger = logger
        self._timeout = timeout

    async def read(self, name: str, namespace: str) -> AuthSecret | None:
        """Read a secret.

        Parameters
        ----------
        name
            Name of the secret.
        namespace
            Namespace of the secret.

        Returns
        -------
        AuthSecret or None
            Secret with decoded data, or `None` if it does not exist.

        Raises
        ------
        KubernetesError
            Raised for exceptions from the Kubernetes API server other than
            the secret not existing.
        """
        self._logger.debug("Reading Secret", name=name, namespace=namespace)
        try:
            secret = await self._api.read_namespaced_secret(
                name, namespace, _request_timeout=self._timeout.total_seconds()
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise KubernetesError.from_exception(
                "Error reading object",
                e,
                kind="Secret",
                namespace=namespace,
                name=name,
            ) from e
        return AuthSecret.from_kubernetes(secret)
