"""Resolution of registry credentials from Docker configuration secrets."""

from __future__ import annotations

from collections.abc import Callable, Mapping

from pydantic import ValidationError

from ..constants import DOCKER_HUB_DOMAIN, DOCKER_HUB_HOSTS
from ..exceptions import (
    CredentialParseError,
    MissingDockerConfigError,
    RegistryEntryMissingError,
)
from ..models.domain.docker import (
    DockerAuthEntry,
    DockerConfig,
    DockerConfigJSON,
    DockerConfigKind,
    DockerCredentials,
    OCIReference,
)

__all__ = [
    "extract_registry_host",
    "find_auth_entry",
    "parse_docker_config",
    "resolve_registry_credentials",
]

_KEY_TRANSFORMS: list[Callable[[str], str]] = [
    lambda h: h,
    lambda h: f"https://{h}",
    lambda h: f"http://{h}",
    lambda h: f"{h}/v1/",
    lambda h: f"{h}/v2/",
    lambda h: f"https://{h}/v1/",
    lambda h: f"https://{h}/v2/",
]
"""Ways a registry host may be written as a key, in order of preference."""

_DOCKER_HUB_KEYS = [
    f"https://index.{DOCKER_HUB_DOMAIN}/v1/",
    f"index.{DOCKER_HUB_DOMAIN}",
    DOCKER_HUB_DOMAIN,
    f"https://{DOCKER_HUB_DOMAIN}",
    f"https://index.{DOCKER_HUB_DOMAIN}",
]
"""Historical keys for the public Docker registry, in order of preference."""


def extract_registry_host(url: str) -> str:
    """Extract the registry host from an ``oci://`` image URL.

    Parameters
    ----------
    url
        Image URL, such as ``oci://registry.example.com:5000/repo/image:tag``.

    Returns
    -------
    str
        Registry host, including the port if present, such as
        ``registry.example.com:5000``.

    Raises
    ------
    InvalidImageReferenceError
        Raised if the URL is not a valid ``oci://`` reference.
    """
    return OCIReference.from_url(url).host


def _is_docker_hub(host: str) -> bool:
    return any(host == h or host.startswith(f"{h}:") for h in DOCKER_HUB_HOSTS)


def find_auth_entry(
    auths: Mapping[str, DockerAuthEntry], host: str
) -> DockerAuthEntry:
    """Find the entry for a registry host in a Docker configuration.

    Tools record registries inconsistently, with or without a scheme and with
    or without an API version suffix, so each variation is tried in turn and
    the first match wins. The public Docker registry is additionally matched
    under all of its historical names.

    Parameters
    ----------
    auths
        Entries by registry key, as written in the configuration.
    host
        Registry host, possibly including a port.

    Returns
    -------
    DockerAuthEntry
        Matching entry.

    Raises
    ------
    RegistryEntryMissingError
        Raised if no key matches the host.
    """
    candidates = [transform(host) for transform in _KEY_TRANSFORMS]
    if _is_docker_hub(host):
        candidates.extend(_DOCKER_HUB_KEYS)
    for key in candidates:
        if key in auths:
            return auths[key]
    raise RegistryEntryMissingError(host)


def parse_docker_config(
    data: bytes, kind: DockerConfigKind, host: str
) -> DockerAuthEntry:
    """Parse a Docker configuration and find the entry for a host.

    Parameters
    ----------
    data
        Serialized Docker configuration.
    kind
        Serialization of the configuration.
    host
        Registry host, possibly including a port.

    Returns
    -------
    DockerAuthEntry
        Matching entry.

    Raises
    ------
    CredentialParseError
        Raised if the document is not valid for its kind.
    RegistryEntryMissingError
        Raised if no key matches the host.
    """
    try:
        match kind:
            case DockerConfigKind.DOCKER_CONFIG_JSON:
                auths = DockerConfigJSON.model_validate_json(data).auths
            case DockerConfigKind.DOCKERCFG:
                auths = DockerConfig.model_validate_json(data).root
    except ValidationError as e:
        msg = f"failed to parse {kind.value}: {_describe_errors(e)}"
        raise CredentialParseError(msg) from e
    return find_auth_entry(auths or {}, host)


def _describe_errors(exc: ValidationError) -> str:
    """Summarize a parse failure without any of the parsed input.

    The document holds credentials, so only the location and type of each
    error are reported.
    """
    errors = []
    for error in exc.errors(include_url=False, include_input=False):
        location = ".".join(str(p) for p in error["loc"]) or "document"
        errors.append(f"{location}: {error['type']}")
    return "; ".join(errors)


def resolve_registry_credentials(data: Mapping[str, bytes], url: str) -> str:
    """Resolve the registry credentials for an image from secret data.

    Parameters
    ----------
    data
        Decoded data of a Docker configuration secret. If both a current and a
        legacy configuration are present, the current one is used.
    url
        Image URL, which must be an ``oci://`` reference.

    Returns
    -------
    str
        Base64-encoded ``username:password`` for the image registry.

    Raises
    ------
    CredentialError
        Raised if the credentials cannot be resolved. The subclass indicates
        the reason, and `RegistryEntryMissingError` means the configuration
        is valid but has no entry for the registry of the image.
    """
    host = extract_registry_host(url)
    for kind in DockerConfigKind:
        if kind.value in data:
            entry = parse_docker_config(data[kind.value], kind, host)
            break
    else:
        keys = " or ".join(k.value for k in DockerConfigKind)
        raise MissingDockerConfigError(f"secret does not contain {keys} key")
    return DockerCredentials.from_entry(entry).credentials
