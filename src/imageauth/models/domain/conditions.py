"""Status conditions derived from image authentication results."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from safir.datetime import current_datetime

from .imageauth import ImageAuthReason, ImageAuthResult

__all__ = [
    "Condition",
    "ConditionStatus",
    "ImageAuthConditionType",
    "build_image_auth_conditions",
    "set_condition",
]


class ConditionStatus(str, Enum):
    """Possible statuses of a Kubernetes condition."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class ImageAuthConditionType(str, Enum):
    """Condition types reported for image authentication."""

    VALID = "ImageAuthValid"
    IN_USE = "ImageAuthInUse"


class Condition(BaseModel):
    """A status condition in the standard Kubernetes shape."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    type: str = Field(..., title="Condition type")

    status: ConditionStatus = Field(..., title="Condition status")

    reason: str = Field(..., title="Machine-readable reason")

    message: str = Field("", title="Human-readable message")

    last_transition_time: datetime = Field(
        ..., title="When the status last changed"
    )

    observed_generation: int | None = Field(
        None, title="Object generation the condition was computed for"
    )


def build_image_auth_conditions(
    result: ImageAuthResult,
    *,
    generation: int | None = None,
    now: datetime | None = None,
) -> list[Condition]:
    """Build the ``ImageAuthValid`` and ``ImageAuthInUse`` conditions.

    Parameters
    ----------
    result
        Result of validating the image authentication of a host.
    generation
        Generation of the host object, if known.
    now
        Transition time to use, defaulting to the current time.

    Returns
    -------
    list of Condition
        The two conditions, validity first.
    """
    now = now or current_datetime()
    valid = Condition(
        type=ImageAuthConditionType.VALID.value,
        status=ConditionStatus.TRUE if result.valid else ConditionStatus.FALSE,
        reason=result.reason.value,
        message=result.message,
        last_transition_time=now,
        observed_generation=generation,
    )
    if result.valid and result.credentials:
        secret = result.secret.name if result.secret else "unknown"
        in_use = Condition(
            type=ImageAuthConditionType.IN_USE.value,
            status=ConditionStatus.TRUE,
            reason=ImageAuthReason.CREDENTIALS_INJECTED.value,
            message=f"registry credentials from secret {secret} are in use",
            last_transition_time=now,
            observed_generation=generation,
        )
    else:
        in_use = Condition(
            type=ImageAuthConditionType.IN_USE.value,
            status=ConditionStatus.FALSE,
            reason=ImageAuthReason.NO_OCI_IMAGE.value,
            message="no registry credentials are in use",
            last_transition_time=now,
            observed_generation=generation,
        )
    return [valid, in_use]


def set_condition(
    conditions: list[Condition], condition: Condition
) -> list[Condition]:
    """Merge a condition into a list of conditions.

    An existing condition of the same type is replaced. If its status is
    unchanged, its transition time is kept.

    Parameters
    ----------
    conditions
        Existing conditions. Not modified.
    condition
        New condition.

    Returns
    -------
    list of Condition
        Updated list of conditions.
    """
    result = []
    found = False
    for existing in conditions:
        if existing.type != condition.type:
            result.append(existing)
            continue
        found = True
        if existing.status == condition.status:
            update = {"last_transition_time": existing.last_transition_time}
            result.append(condition.model_copy(update=update))
        else:
            result.append(condition)
    if not found:
        result.append(condition)
    return result
