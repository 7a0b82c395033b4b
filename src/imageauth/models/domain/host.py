"""Models for the hosts whose image authentication is validated."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

__all__ = [
    "Host",
    "HostImage",
    "auth_secret_index",
    "find_hosts_for_secret",
]


class HostImage(BaseModel):
    """The image section of a host specification."""

    model_config = ConfigDict(
        alias_generator=to_camel, extra="ignore", populate_by_name=True
    )

    url: str | None = Field(
        None,
        title="Image URL",
        examples=["oci://registry.example.com/os/image:1.0"],
    )

    auth_secret_name: str | None = Field(
        None,
        title="Authentication secret",
        description=(
            "Name of a Docker configuration secret in the namespace of the"
            " host, used to authenticate to the registry of an OCI image"
        ),
        examples=["registry-credentials"],
    )


class Host(BaseModel):
    """The parts of a host object relevant to image authentication."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., title="Name of the host object")

    namespace: str = Field(..., title="Namespace of the host object")

    uid: str | None = Field(None, title="UID of the host object")

    image: HostImage | None = Field(None, title="Image to provision")

    @classmethod
    def from_custom_object(cls, obj: dict[str, Any]) -> Self:
        """Parse a host from a Kubernetes custom object.

        Parameters
        ----------
        obj
            Custom object as returned by the Kubernetes API.

        Returns
        -------
        Host
            Parsed host.

        Raises
        ------
        pydantic.ValidationError
            Raised if the object is missing required metadata or its image
            section is malformed.
        """
        metadata = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        return cls.model_validate(
            {
                "name": metadata.get("name"),
                "namespace": metadata.get("namespace"),
                "uid": metadata.get("uid"),
                "image": spec.get("image"),
            }
        )


def auth_secret_index(host: Host) -> list[str]:
    """Return the secrets a host depends on for image authentication.

    Used to find the hosts to revalidate when a secret changes.

    Parameters
    ----------
    host
        Host to index.

    Returns
    -------
    list of str
        The name of the authentication secret, or an empty list if the host
        has no image or no authentication secret.
    """
    if not host.image or not host.image.auth_secret_name:
        return []
    return [host.image.auth_secret_name]


def find_hosts_for_secret(
    hosts: Iterable[Host], secret_name: str, namespace: str
) -> list[Host]:
    """Find the hosts referencing a given authentication secret.

    Parameters
    ----------
    hosts
        Candidate hosts.
    secret_name
        Name of the secret that changed.
    namespace
        Namespace of the secret. Only hosts in the same namespace can
        reference it.

    Returns
    -------
    list of Host
        Hosts whose image authentication depends on that secret.
    """
    return [
        h
        for h in hosts
        if h.namespace == namespace and secret_name in auth_secret_index(h)
    ]
