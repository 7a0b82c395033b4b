"""Validation of image authentication for hosts stored in Kubernetes."""

from __future__ import annotations

from safir.slack.blockkit import SlackException
from safir.slack.webhook import SlackWebhookClient
from structlog.stdlib import BoundLogger

from ..models.domain.host import Host, find_hosts_for_secret
from ..models.domain.imageauth import ImageAuthResult
from ..storage.kubernetes.host import HostStorage
from .validator import ImageAuthValidator

__all__ = ["ImageAuthService"]


class ImageAuthService:
    """Validate the image authentication of hosts by name.

    Parameters
    ----------
    host_storage
        Storage used to read host objects.
    validator
        Validator for a single host.
    slack_client
        If given, used to report hosts that could not be validated during
        revalidation.
    logger
        Logger to use.
    """

    def __init__(
        self,
        *,
        host_storage: HostStorage,
        validator: ImageAuthValidator,
        slack_client: SlackWebhookClient | None,
        logger: BoundLogger,
    ) -> None:
        self._hosts = host_storage
        self._validator = validator
        self._slack = slack_client
        self._logger = logger

    async def validate_host(
        self, name: str, namespace: str
    ) -> tuple[Host, ImageAuthResult] | None:
        """Validate the image authentication of one host.

        Parameters
        ----------
        name
            Name of the host.
        namespace
            Namespace of the host.

        Returns
        -------
        tuple of Host and ImageAuthResult, or None
            The host and its validation result, or `None` if the host does
            not exist.

        Raises
        ------
        InvalidHostError
            Raised if the host object could not be parsed.
        KubernetesError
            Raised if Kubernetes could not be queried.
        """
        host = await self._hosts.read(name, namespace)
        if not host:
            return None
        return host, await self._validator.validate(host)

    async def revalidate_for_secret(
        self, secret_name: str, namespace: str
    ) -> dict[str, ImageAuthResult]:
        """Revalidate every host that references a secret.

        Intended to be called when a secret is created, changed, or deleted,
        such as after credential rotation. A host that cannot be validated is
        logged and reported to Slack, and the remaining hosts are still
        processed.

        Parameters
        ----------
        secret_name
            Name of the secret that changed.
        namespace
            Namespace of the secret.

        Returns
        -------
        dict of ImageAuthResult
            Validation results by host name, for hosts that could be
            validated.

        Raises
        ------
        KubernetesError
            Raised if the hosts could not be listed.
        """
        hosts = await self._hosts.list(namespace)
        affected = find_hosts_for_secret(hosts, secret_name, namespace)
        self._logger.info(
            "Revalidating hosts for secret",
            secret=secret_name,
            namespace=namespace,
            hosts=[h.name for h in affected],
        )
        results = {}
        for host in affected:
            try:
                results[host.name] = await self._validator.validate(host)
            except SlackException as e:
                self._logger.exception(
                    "Unable to validate host",
                    host=host.name,
                    namespace=namespace,
                    error=str(e),
                )
                if self._slack:
                    await self._slack.post_exception(e)
        return results
