"""Externally-visible report of the image authentication of a host."""

from __future__ import annotations

from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..domain.conditions import Condition, build_image_auth_conditions
from ..domain.host import Host
from ..domain.imageauth import ImageAuthReason, ImageAuthResult

__all__ = ["ImageAuthStatus"]


class ImageAuthStatus(BaseModel):
    """Image authentication status of a host.

    The resolved credentials themselves are never included.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    host: Annotated[str, Field(title="Name of the host")]

    namespace: Annotated[str, Field(title="Namespace of the host")]

    secret_name: Annotated[
        str | None, Field(title="Authentication secret named by the host")
    ] = None

    valid: Annotated[bool, Field(title="Whether the secret is usable")]

    reason: Annotated[ImageAuthReason, Field(title="Reason code")]

    message: Annotated[str, Field(title="Explanation of the outcome")]

    oci_relevant: Annotated[
        bool, Field(title="Whether the image is an ``oci://`` reference")
    ]

    credentials_resolved: Annotated[
        bool,
        Field(title="Whether registry credentials were resolved"),
    ]

    conditions: Annotated[
        list[Condition], Field(title="Status conditions for the host")
    ]

    @classmethod
    def from_result(cls, host: Host, result: ImageAuthResult) -> Self:
        """Build the status of a host from its validation result.

        Parameters
        ----------
        host
            Host that was validated.
        result
            Result of validation.

        Returns
        -------
        ImageAuthStatus
            Corresponding status.
        """
        return cls(
            host=host.name,
            namespace=host.namespace,
            secret_name=host.image.auth_secret_name if host.image else None,
            valid=result.valid,
            reason=result.reason,
            message=result.message,
            oci_relevant=result.oci_relevant,
            credentials_resolved=result.credentials is not None,
            conditions=build_image_auth_conditions(result),
        )
