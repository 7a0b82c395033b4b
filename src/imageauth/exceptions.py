"""Exceptions for image registry authentication."""

from __future__ import annotations

from typing import Self, override

from kubernetes_asyncio.client import ApiException
from pydantic import ValidationError
from safir.slack.blockkit import (
    SlackCodeBlock,
    SlackException,
    SlackMessage,
    SlackTextBlock,
    SlackTextField,
)

__all__ = [
    "CredentialDecodeError",
    "CredentialError",
    "CredentialParseError",
    "InvalidHostError",
    "InvalidImageReferenceError",
    "KubernetesError",
    "MissingDockerConfigError",
    "RegistryEntryMissingError",
]


class CredentialError(Exception):
    """Registry credentials could not be resolved from a secret.

    Base class for every failure of credential resolution. These are expected
    conditions that are turned into validation results rather than propagated
    to the reconciler.
    """


class InvalidImageReferenceError(CredentialError):
    """The image URL is not a usable ``oci://`` reference."""


class MissingDockerConfigError(CredentialError):
    """The secret holds neither of the Docker configuration keys."""


class CredentialParseError(CredentialError):
    """The Docker configuration document could not be parsed."""


class CredentialDecodeError(CredentialError):
    """The matching entry does not yield a username and password."""


class RegistryEntryMissingError(CredentialError):
    """No entry in the Docker configuration matches the registry host.

    Parameters
    ----------
    host
        Registry host, possibly including a port, that was looked up.
    """

    def __init__(self, host: str) -> None:
        super().__init__(f"registry {host} not found in auth config")
        self.host = host


class InvalidHostError(SlackException):
    """A host object could not be parsed.

    Parameters
    ----------
    message
        Summary error message.
    error
        Detailed error message, possibly multi-line.
    """

    @classmethod
    def from_exception(
        cls, name: str, namespace: str, exc: ValidationError
    ) -> Self:
        """Create an exception from a Pydantic parse failure.

        Parameters
        ----------
        name
            Name of the host object.
        namespace
            Namespace of the host object.
        exc
            Pydantic exception.

        Returns
        -------
        InvalidHostError
            Constructed exception.
        """
        error = f"{type(exc).__name__}: {exc!s}"
        return cls(f"Unable to parse host {namespace}/{name}", error)

    def __init__(self, message: str, error: str) -> None:
        super().__init__(message)
        self.error = error

    @override
    def to_slack(self) -> SlackMessage:
        """Convert to a Slack message for Slack alerting.

        Returns
        -------
        safir.slack.blockkit.SlackMessage
            Slack message suitable for posting as an alert.
        """
        message = super().to_slack()
        block = SlackCodeBlock(heading="Error", code=self.error)
        message.blocks.append(block)
        return message


class KubernetesError(SlackException):
    """An API call to Kubernetes failed.

    Parameters
    ----------
    message
        Summary of error.
    kind
        Kind of object being acted on.
    namespace
        Namespace of object being acted on.
    name
        Name of object being acted on.
    status
        Status code of failure, if any.
    body
        Body of failure message, if any.
    """

    @classmethod
    def from_exception(
        cls,
        message: str,
        exc: ApiException,
        *,
        kind: str | None = None,
        namespace: str | None = None,
        name: str | None = None,
    ) -> Self:
        """Create an exception from a Kubernetes API exception.

        Parameters
        ----------
        message
            Brief explanation of what was being attempted.
        exc
            Kubernetes API exception.
        kind
            Kind of object being acted on.
        namespace
            Namespace of object being acted on.
        name
            Name of object being acted on.

        Returns
        -------
        KubernetesError
            Newly-created exception.
        """
        return cls(
            message,
            kind=kind,
            namespace=namespace,
            name=name,
            status=exc.status,
            body=exc.body if exc.body else exc.reason,
        )

    def __init__(
        self,
        message: str,
        *,
        kind: str | None = None,
        namespace: str | None = None,
        name: str | None = None,
        status: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.namespace = namespace
        self.name = name
        self.status = status
        self.body = body

    @override
    def __str__(self) -> str:
        result = self._summary()
        if self.body:
            result += f": {self.body}"
        return result

    @override
    def to_slack(self) -> SlackMessage:
        """Convert to a Slack message for Slack alerting.

        Returns
        -------
        safir.slack.blockkit.SlackMessage
            Slack message suitable for posting as an alert.
        """
        message = super().to_slack()
        message.message = self._summary()
        if self.status:
            field = SlackTextField(heading="Status", text=str(self.status))
            message.fields.append(field)
        if self.name:
            kind = f"{self.kind} " if self.kind else ""
            if self.namespace:
                obj = f"{kind}{self.namespace}/{self.name}"
            else:
                obj = f"{kind}{self.name}"
            message.blocks.append(SlackTextBlock(heading="Object", text=obj))
        if self.body:
            code = SlackCodeBlock(heading="Error", code=self.body)
            message.blocks.append(code)
        return message

    def _summary(self) -> str:
        """Summarize the exception in a single line."""
        result = self.message
        if self.name or self.kind or self.status:
            details = []
            if self.name:
                kind = f"{self.kind} " if self.kind else ""
                if self.namespace:
                    details.append(f"{kind}{self.namespace}/{self.name}")
                else:
                    details.append(f"{kind}{self.name}")
            elif self.kind:
                details.append(self.kind)
            if self.status:
                details.append(f"status {self.status}")
            result += f" ({', '.join(details)})"
        return result
