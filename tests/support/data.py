"""Utilities for building and reading test data."""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any

from kubernetes_asyncio.client import V1ObjectMeta, V1Secret

from imageauth.config import Config
from imageauth.constants import (
    DOCKER_CONFIG_JSON_KEY,
    DOCKERCFG_KEY,
    SECRET_TYPE_DOCKER_CONFIG_JSON,
    SECRET_TYPE_DOCKERCFG,
)

__all__ = [
    "config_path",
    "data_path",
    "make_docker_secret",
    "make_host_object",
]


def data_path(filename: str) -> Path:
    """Return the path to a file in the test data directory.

    Parameters
    ----------
    filename
        Path relative to ``tests/data``.

    Returns
    -------
    pathlib.Path
        Full path to the file.
    """
    return Path(__file__).parent.parent / "data" / filename


def config_path(name: str) -> Path:
    """Return the path to a test configuration.

    Parameters
    ----------
    name
        Name of the configuration (a file under ``tests/data/config`` without
        the ``.yaml`` extension).

    Returns
    -------
    pathlib.Path
        Path to the configuration file.
    """
    return data_path(f"config/{name}.yaml")


def make_docker_secret(
    name: str,
    auths: dict[str, dict[str, str]],
    *,
    namespace: str = "default",
    legacy: bool = False,
    secret_type: str | None = None,
) -> V1Secret:
    """Build a Docker configuration secret as the Kubernetes API returns it.

    Parameters
    ----------
    name
        Name of the secret.
    auths
        Entries by registry key.
    namespace
        Namespace of the secret.
    legacy
        Whether to use the legacy ``.dockercfg`` format.
    secret_type
        Type of the secret, overriding the one matching the format.

    Returns
    -------
    kubernetes_asyncio.client.V1Secret
        Secret with base64-encoded data.
    """
    if legacy:
        key = DOCKERCFG_KEY
        document = json.dumps(auths)
        default_type = SECRET_TYPE_DOCKERCFG
    else:
        key = DOCKER_CONFIG_JSON_KEY
        document = json.dumps({"auths": auths})
        default_type = SECRET_TYPE_DOCKER_CONFIG_JSON
    return V1Secret(
        metadata=V1ObjectMeta(name=name, namespace=namespace),
        type=secret_type or default_type,
        data={key: base64.b64encode(document.encode()).decode()},
    )


def make_host_object(
    config: Config,
    name: str,
    *,
    namespace: str = "default",
    url: str | None = None,
    auth_secret_name: str | None = None,
) -> dict[str, Any]:
    """Build a host custom object.

    Parameters
    ----------
    config
        Configuration, used for the API version and kind of the object.
    name
        Name of the host.
    namespace
        Namespace of the host.
    url
        Image URL. If not given, the host has no image.
    auth_secret_name
        Name of the authentication secret for the image, if any.

    Returns
    -------
    dict
        Custom object suitable for the Kubernetes API.
    """
    spec: dict[str, Any] = {"online": True}
    if url is not None:
        spec["image"] = {"url": url, "checksumType": "auto"}
        if auth_secret_name is not None:
            spec["image"]["authSecretName"] = auth_secret_name
    return {
        "apiVersion": config.hosts.api_version,
        "kind": config.hosts.kind,
        "metadata": {
            "name": name,
            "namespace": namespace,
            "uid": f"{name}-uid",
        },
        "spec": spec,
    }
