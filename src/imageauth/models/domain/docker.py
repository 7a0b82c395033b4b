"""Domain models for Docker credentials and OCI image references."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import Enum
from typing import Any, Self
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, RootModel, model_validator

from ...constants import (
    DOCKER_CONFIG_JSON_KEY,
    DOCKERCFG_KEY,
    OCI_SCHEME,
    SECRET_TYPE_DOCKER_CONFIG_JSON,
    SECRET_TYPE_DOCKERCFG,
)
from ...exceptions import CredentialDecodeError, InvalidImageReferenceError

__all__ = [
    "DockerAuthEntry",
    "DockerConfig",
    "DockerConfigJSON",
    "DockerConfigKind",
    "DockerCredentials",
    "OCIReference",
]


class DockerConfigKind(Enum):
    """Supported serializations of a Docker credential store.

    The value is the key under which the document is stored in the data of a
    Kubernetes secret.
    """

    DOCKER_CONFIG_JSON = DOCKER_CONFIG_JSON_KEY
    DOCKERCFG = DOCKERCFG_KEY

    @property
    def secret_type(self) -> str:
        """Kubernetes secret type that normally carries this document."""
        if self == DockerConfigKind.DOCKER_CONFIG_JSON:
            return SECRET_TYPE_DOCKER_CONFIG_JSON
        return SECRET_TYPE_DOCKERCFG


class DockerAuthEntry(BaseModel):
    """Credentials for one registry as stored in a Docker configuration."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    username: str | None = Field(None, title="Registry username")

    password: str | None = Field(None, title="Registry password")

    auth: str | None = Field(
        None,
        title="Combined credentials",
        description="Base64-encoded ``username:password``",
    )

    email: str | None = Field(
        None,
        title="Email address",
        description="Recorded by older Docker clients, not used here",
    )


class DockerConfigJSON(BaseModel):
    """Contents of a ``.dockerconfigjson`` document."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    auths: dict[str, DockerAuthEntry] | None = Field(
        default_factory=dict,
        title="Credentials by registry key",
        description="An explicit null is treated as an empty mapping",
    )

    @model_validator(mode="before")
    @classmethod
    def _validate_null(cls, data: Any) -> Any:
        """Treat a document of ``null`` as an empty configuration."""
        return {} if data is None else data


class DockerConfig(RootModel[dict[str, DockerAuthEntry] | None]):
    """Contents of a legacy ``.dockercfg`` document.

    The document is a bare mapping of registry keys to entries, without the
    ``auths`` wrapper. A document of ``null`` holds no entries.
    """


@dataclass(frozen=True)
class DockerCredentials:
    """Holds the credentials for one Docker API server."""

    username: str
    """Authentication username."""

    password: str
    """Authentication password."""

    @property
    def credentials(self) -> str:
        """Credentials in the encoded ``username:password`` form."""
        auth_data = f"{self.username}:{self.password}".encode()
        return base64.b64encode(auth_data).decode()

    @classmethod
    def from_entry(cls, entry: DockerAuthEntry) -> Self:
        """Extract the username and password from a Docker config entry.

        Explicit ``username`` and ``password`` fields win over the combined
        ``auth`` field when both are set. The combined field is split at the
        first colon, so the password may itself contain colons.

        Parameters
        ----------
        entry
            The entry for one registry in the configuration.

        Returns
        -------
        DockerCredentials
            The resulting credentials.

        Raises
        ------
        CredentialDecodeError
            Raised if the entry contains no usable credentials.
        """
        if entry.username and entry.password:
            return cls(username=entry.username, password=entry.password)
        if entry.auth:
            try:
                basic_auth = base64.b64decode(entry.auth, validate=True)
                decoded = basic_auth.decode()
            except UnicodeDecodeError as e:
                # Never include the decoded bytes in the message.
                msg = "failed to decode auth field: not valid UTF-8"
                raise CredentialDecodeError(msg) from e
            except ValueError as e:
                msg = f"failed to decode auth field: {e!s}"
                raise CredentialDecodeError(msg) from e
            username, sep, password = decoded.partition(":")
            if not sep:
                msg = "invalid auth format: expected username:password"
                raise CredentialDecodeError(msg)
            return cls(username=username, password=password)
        raise CredentialDecodeError("no credentials found in auth config")


@dataclass(frozen=True)
class OCIReference:
    """Parsed ``oci://`` image reference."""

    hostname: str
    """Registry host name, with the casing of the original URL."""

    port: str | None
    """Registry port, if one was given."""

    path: str
    """Repository path, tag and digest (unused for authentication)."""

    bracketed: bool = False
    """Whether the host name is an IPv6 literal written in brackets."""

    @property
    def host(self) -> str:
        """Registry host as used to look up credentials.

        Includes the port when one was given.
        """
        if not self.port:
            return self.hostname
        if self.bracketed:
            return f"[{self.hostname}]:{self.port}"
        return f"{self.hostname}:{self.port}"

    @classmethod
    def from_url(cls, url: str) -> Self:
        """Parse an ``oci://`` image URL.

        Parameters
        ----------
        url
            Image URL, such as ``oci://registry.example.com/repo/image:tag``.

        Returns
        -------
        OCIReference
            Parsed reference.

        Raises
        ------
        InvalidImageReferenceError
            Raised if the URL does not start with ``oci://``, has no host, or
            has an invalid port.
        """
        if not url.startswith(OCI_SCHEME):
            msg = f"image URL does not have {OCI_SCHEME} scheme: {url}"
            raise InvalidImageReferenceError(msg)

        # Reuse the generic URL parser by swapping in a scheme it knows.
        remainder = url.removeprefix(OCI_SCHEME)
        try:
            parsed = urlsplit("http://" + remainder)
        except ValueError as e:
            msg = f"failed to parse image URL {url}: {e!s}"
            raise InvalidImageReferenceError(msg) from e

        # urlsplit lowercases hostname, so split the network location by hand
        # to keep the original casing.
        hostport = parsed.netloc.rpartition("@")[2]
        bracketed = hostport.startswith("[")
        if bracketed:
            hostname, _, rest = hostport[1:].partition("]")
            sep, port = rest[:1], rest[1:]
        else:
            hostname, sep, port = hostport.partition(":")

        # Any run of ASCII digits is accepted as a port, without a range check.
        valid_port = port.isascii() and port.isdigit()
        if (sep and sep != ":") or (port and not valid_port):
            msg = f"invalid port in image URL: {url}"
            raise InvalidImageReferenceError(msg)
        if not hostname:
            msg = f"failed to extract hostname from image URL: {url}"
            raise InvalidImageReferenceError(msg)

        return cls(
            hostname=hostname,
            port=port or None,
            path=parsed.path,
            bracketed=bracketed,
        )

    def __str__(self) -> str:
        return f"{OCI_SCHEME}{self.host}{self.path}"
