"""Global constants."""

from datetime import timedelta
from pathlib import Path

__all__ = [
    "CONFIGURATION_PATH",
    "CONFIGURATION_PATH_ENV_VAR",
    "DOCKERCFG_KEY",
    "DOCKER_CONFIG_JSON_KEY",
    "DOCKER_HUB_DOMAIN",
    "DOCKER_HUB_HOSTS",
    "KUBERNETES_REQUEST_TIMEOUT",
    "OCI_SCHEME",
    "ROOT_LOGGER",
    "SECRET_TYPE_DOCKERCFG",
    "SECRET_TYPE_DOCKER_CONFIG_JSON",
]

CONFIGURATION_PATH = Path("/etc/imageauth/config.yaml")
"""Default path to the configuration file."""

CONFIGURATION_PATH_ENV_VAR = "IMAGEAUTH_CONFIG_PATH"
"""Environment variable that overrides the configuration path."""

DOCKER_CONFIG_JSON_KEY = ".dockerconfigjson"
"""Secret data key holding a current-format Docker configuration."""

DOCKERCFG_KEY = ".dockercfg"
"""Secret data key holding a legacy-format Docker configuration."""

DOCKER_HUB_DOMAIN = "docker.io"
"""Canonical domain of the public Docker registry."""

DOCKER_HUB_HOSTS = (DOCKER_HUB_DOMAIN, f"index.{DOCKER_HUB_DOMAIN}")
"""Host names under which the public Docker registry is queried.

Either may be followed by a port.
"""

KUBERNETES_REQUEST_TIMEOUT = timedelta(seconds=30)
"""How long to wait for a single Kubernetes API call."""

OCI_SCHEME = "oci://"
"""URL prefix marking an image as an OCI artifact reference."""

ROOT_LOGGER = "imageauth"
"""Name of the root logger for the application."""

SECRET_TYPE_DOCKER_CONFIG_JSON = "kubernetes.io/dockerconfigjson"
"""Kubernetes secret type for the current Docker configuration format."""

SECRET_TYPE_DOCKERCFG = "kubernetes.io/dockercfg"
"""Kubernetes secret type for the legacy Docker configuration format."""
