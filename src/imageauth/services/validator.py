"""Validation of the image authentication configured for a host."""

from __future__ import annotations

from structlog.stdlib import BoundLogger

from ..constants import (
    OCI_SCHEME,
    SECRET_TYPE_DOCKER_CONFIG_JSON,
    SECRET_TYPE_DOCKERCFG,
)
from ..exceptions import CredentialError, RegistryEntryMissingError
from ..models.domain.host import Host
from ..models.domain.imageauth import (
    ImageAuthEvaluation,
    ImageAuthEventReason,
    ImageAuthNotice,
    ImageAuthReason,
    ImageAuthResult,
)
from ..models.domain.secret import AuthSecret
from ..storage.kubernetes.event import EventStorage
from ..storage.kubernetes.secret import SecretStorage
from .credentials import resolve_registry_credentials

__all__ = [
    "ImageAuthValidator",
    "evaluate_image_auth",
    "irrelevant_secret_notice",
    "is_oci",
]


def is_oci(url: str) -> bool:
    """Whether an image URL is an OCI artifact reference.

    Unlike credential resolution, this check ignores the case of the scheme.
    """
    return url.lower().startswith(OCI_SCHEME)


def irrelevant_secret_notice(host: Host) -> ImageAuthNotice | None:
    """Warn about an authentication secret that cannot apply to the image.

    Parameters
    ----------
    host
        Host to check.

    Returns
    -------
    ImageAuthNotice or None
        Warning if the host names an authentication secret but its image is
        not an ``oci://`` reference, otherwise `None`.
    """
    image = host.image
    if not image or not image.url or not image.auth_secret_name:
        return None
    if is_oci(image.url):
        return None
    msg = (
        f'authSecretName="{image.auth_secret_name}" is set but image URL is'
        f" not {OCI_SCHEME} ({image.url})"
    )
    return ImageAuthNotice(ImageAuthEventReason.IRRELEVANT, msg)


def evaluate_image_auth(
    host: Host, secret: AuthSecret | None
) -> ImageAuthEvaluation:
    """Evaluate the image authentication of a host.

    Parameters
    ----------
    host
        Host whose image and authentication secret should be checked.
    secret
        The authentication secret named by the host, or `None` if it does not
        exist or the host names none.

    Returns
    -------
    ImageAuthEvaluation
        Validation result and any warnings to report on the host.
    """
    image = host.image
    if not image or not image.url:
        result = ImageAuthResult(message="image URL not set")
        return ImageAuthEvaluation(result=result)
    url = image.url
    oci_relevant = is_oci(url)

    secret_name = image.auth_secret_name
    if not secret_name:
        result = ImageAuthResult(
            reason=ImageAuthReason.NOT_REQUIRED,
            message="no per-host auth secret referenced",
            oci_relevant=oci_relevant,
        )
        return ImageAuthEvaluation(result=result)

    # The secret is still checked for a non-OCI image, but only warned about.
    notices = []
    irrelevant = irrelevant_secret_notice(host)
    if irrelevant:
        notices.append(irrelevant)

    if not secret:
        result = ImageAuthResult(
            reason=ImageAuthReason.SECRET_NOT_FOUND,
            message=(
                f'secret "{secret_name}" not found in namespace'
                f' "{host.namespace}"'
            ),
            oci_relevant=oci_relevant,
        )
        return ImageAuthEvaluation(result=result, notices=notices)

    if not secret.is_docker_config:
        result = ImageAuthResult(
            reason=ImageAuthReason.WRONG_TYPE,
            message=(
                f'secret "{secret_name}" has unsupported type "{secret.type}";'
                f' expected "{SECRET_TYPE_DOCKER_CONFIG_JSON}" or'
                f' "{SECRET_TYPE_DOCKERCFG}"'
            ),
            oci_relevant=oci_relevant,
        )
        msg = f'Secret "{secret_name}" has unsupported type "{secret.type}"'
        reason = ImageAuthEventReason.FORMAT_UNSUPPORTED
        notices.append(ImageAuthNotice(reason, msg))
        return ImageAuthEvaluation(result=result, notices=notices)

    credentials = None
    if oci_relevant:
        try:
            credentials = resolve_registry_credentials(secret.data, url)
        except CredentialError as e:
            msg = f'Failed to extract credentials from secret "{secret_name}"'
            reason = ImageAuthEventReason.PARSE_ERROR
            notices.append(ImageAuthNotice(reason, f"{msg}: {e!s}"))
            if isinstance(e, RegistryEntryMissingError):
                result = ImageAuthResult(
                    reason=ImageAuthReason.REGISTRY_ENTRY_MISSING,
                    message=(
                        f'secret "{secret_name}" does not contain credentials'
                        f' for registry {e.host} in "{url}"'
                    ),
                    oci_relevant=oci_relevant,
                )
            else:
                result = ImageAuthResult(
                    reason=ImageAuthReason.PARSE_ERROR,
                    message=(
                        "failed to extract credentials from secret"
                        f' "{secret_name}": {e!s}'
                    ),
                    oci_relevant=oci_relevant,
                )
            return ImageAuthEvaluation(result=result, notices=notices)

    result = ImageAuthResult(
        valid=True,
        reason=ImageAuthReason.VALID,
        message="auth secret present and of a supported type",
        oci_relevant=oci_relevant,
        secret=secret,
        credentials=credentials,
    )
    return ImageAuthEvaluation(result=result, notices=notices)


class ImageAuthValidator:
    """Validate the image authentication of hosts against Kubernetes.

    Parameters
    ----------
    secret_storage
        Storage used to read authentication secrets.
    event_storage
        Storage used to publish warnings about hosts.
    logger
        Logger to use.
    """

    def __init__(
        self,
        *,
        secret_storage: SecretStorage,
        event_storage: EventStorage,
        logger: BoundLogger,
    ) -> None:
        self._secrets = secret_storage
        self._events = event_storage
        self._logger = logger

    async def validate(self, host: Host) -> ImageAuthResult:
        """Validate the image authentication of a host.

        Parameters
        ----------
        host
            Host to validate.

        Returns
        -------
        ImageAuthResult
            Outcome of the validation. Any expected problem with the secret
            is reported here rather than raised.

        Raises
        ------
        KubernetesError
            Raised if the secret could not be read for any reason other than
            not existing.
        """
        # This warning must be published even if reading the secret fails.
        irrelevant = irrelevant_secret_notice(host)
        if irrelevant:
            await self._events.publish_warning(host, irrelevant)

        secret = None
        image = host.image
        if image and image.url and image.auth_secret_name:
            secret = await self._secrets.read(
                image.auth_secret_name, host.namespace
            )

        evaluation = evaluate_image_auth(host, secret)
        for notice in evaluation.notices:
            if notice != irrelevant:
                await self._events.publish_warning(host, notice)

        result = evaluation.result
        self._logger.debug(
            "Validated image authentication",
            host=host.name,
            namespace=host.namespace,
            valid=result.valid,
            reason=result.reason.value,
            oci_relevant=result.oci_relevant,
        )
        return result
