"""Domain model for a pull secret referenced by a host."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any, Self

from kubernetes_asyncio.client import V1Secret

from .docker import DockerConfigKind

__all__ = ["AuthSecret"]


@dataclass(frozen=True)
class AuthSecret:
    """A Kubernetes secret that may hold registry credentials."""

    name: str
    """Name of the secret."""

    namespace: str
    """Namespace of the secret."""

    type: str
    """Kubernetes type of the secret, such as ``Opaque``."""

    data: dict[str, bytes] = field(default_factory=dict)
    """Decoded secret data."""

    @property
    def is_docker_config(self) -> bool:
        """Whether the secret type is one of the Docker configuration types."""
        return any(self.type == k.secret_type for k in DockerConfigKind)

    @classmethod
    def from_kubernetes(cls, secret: V1Secret) -> Self:
        """Convert a Kubernetes ``Secret`` object.

        Parameters
        ----------
        secret
            Secret as returned by the Kubernetes API, with base64-encoded data.

        Returns
        -------
        AuthSecret
            Secret with decoded data.
        """
        data = secret.data or {}
        return cls(
            name=secret.metadata.name,
            namespace=secret.metadata.namespace,
            type=secret.type or "Opaque",
            data={k: base64.b64decode(v) for k, v in data.items()},
        )

    @classmethod
    def from_manifest(cls, manifest: dict[str, Any]) -> Self:
        """Convert a ``Secret`` manifest as written in YAML or JSON.

        Both ``data`` (base64-encoded) and ``stringData`` are honored, with
        ``stringData`` taking precedence as it does when applied to a cluster.

        Parameters
        ----------
        manifest
            Parsed manifest.

        Returns
        -------
        AuthSecret
            Secret with decoded data.

        Raises
        ------
        ValueError
            Raised if a value in ``data`` is not valid base64.
        """
        metadata = manifest.get("metadata") or {}
        data = {
            k: base64.b64decode(v, validate=True)
            for k, v in (manifest.get("data") or {}).items()
        }
        for key, value in (manifest.get("stringData") or {}).items():
            data[key] = value.encode()
        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", "default"),
            type=manifest.get("type", "Opaque"),
            data=data,
        )
