"""Component factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import aclosing, asynccontextmanager
from typing import Self

import structlog
from kubernetes_asyncio.client.api_client import ApiClient
from safir.slack.webhook import SlackWebhookClient
from structlog.stdlib import BoundLogger

from .config import Config
from .services.imageauth import ImageAuthService
from .services.validator import ImageAuthValidator
from .storage.kubernetes.event import EventStorage
from .storage.kubernetes.host import HostStorage
from .storage.kubernetes.secret import SecretStorage

__all__ = ["Factory"]


class Factory:
    """Build image authentication components.

    Parameters
    ----------
    config
        Application configuration.
    kubernetes_client
        Shared Kubernetes API client.
    logger
        Logger to use for messages.
    """

    @classmethod
    @asynccontextmanager
    async def standalone(cls, config: Config) -> AsyncIterator[Self]:
        """Async context manager for image authentication components.

        Intended for the command-line interface or the test suite. The
        Kubernetes client configuration must already have been loaded.

        Parameters
        ----------
        config
            Application configuration.

        Yields
        ------
        Factory
            Newly-created factory. Must be used as a context manager.
        """
        logger = structlog.get_logger(__name__)
        factory = cls(config, ApiClient(), logger)
        async with aclosing(factory):
            yield factory

    def __init__(
        self, config: Config, kubernetes_client: ApiClient, logger: BoundLogger
    ) -> None:
        self._config = config
        self._kubernetes_client = kubernetes_client
        self._logger = logger

    async def aclose(self) -> None:
        """Shut down the factory.

        After this method is called, the factory object is no longer valid and
        must not be used.
        """
        await self._kubernetes_client.close()

    def create_event_storage(self) -> EventStorage:
        """Create Kubernetes storage for warning events about hosts.

        Returns
        -------
        EventStorage
            Newly-created event storage.
        """
        return EventStorage(
            self._kubernetes_client,
            component=self._config.event_component,
            host_kind=self._config.hosts.kind,
            host_api_version=self._config.hosts.api_version,
            logger=self._logger,
        )

    def create_host_storage(self) -> HostStorage:
        """Create Kubernetes storage for host objects.

        Returns
        -------
        HostStorage
            Newly-created host storage.
        """
        hosts = self._config.hosts
        return HostStorage(
            self._kubernetes_client,
            group=hosts.group,
            version=hosts.version,
            plural=hosts.plural,
            kind=hosts.kind,
            logger=self._logger,
        )

    def create_image_auth_service(self) -> ImageAuthService:
        """Create service to validate the image authentication of hosts.

        Returns
        -------
        ImageAuthService
            Newly-created service.
        """
        return ImageAuthService(
            host_storage=self.create_host_storage(),
            validator=self.create_image_auth_validator(),
            slack_client=self.create_slack_client(),
            logger=self._logger,
        )

    def create_image_auth_validator(self) -> ImageAuthValidator:
        """Create validator for the image authentication of one host.

        Returns
        -------
        ImageAuthValidator
            Newly-created validator.
        """
        return ImageAuthValidator(
            secret_storage=self.create_secret_storage(),
            event_storage=self.create_event_storage(),
            logger=self._logger,
        )

    def create_secret_storage(self) -> SecretStorage:
        """Create Kubernetes storage for authentication secrets.

        Returns
        -------
        SecretStorage
            Newly-created secret storage.
        """
        return SecretStorage(self._kubernetes_client, self._logger)

    def create_slack_client(self) -> SlackWebhookClient | None:
        """Create a client for sending messages to Slack.

        Returns
        -------
        SlackWebhookClient or None
            Configured Slack client if a Slack webhook was configured,
            otherwise `None`.
        """
        if not self._config.slack_webhook:
            return None
        return SlackWebhookClient(
            self._config.slack_webhook.get_secret_value(),
            self._config.name,
            self._logger,
        )
