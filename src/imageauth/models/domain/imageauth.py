"""Results of validating the image authentication of a host."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .secret import AuthSecret

__all__ = [
    "ImageAuthEvaluation",
    "ImageAuthEventReason",
    "ImageAuthNotice",
    "ImageAuthReason",
    "ImageAuthResult",
]


class ImageAuthReason(str, Enum):
    """Reason codes reported for image authentication."""

    UNKNOWN = "Unknown"
    NOT_REQUIRED = "NotRequired"
    VALID = "Valid"
    SECRET_NOT_FOUND = "SecretNotFound"
    WRONG_TYPE = "WrongType"
    PARSE_ERROR = "ParseError"
    REGISTRY_ENTRY_MISSING = "RegistryEntryMissing"
    CREDENTIALS_INJECTED = "CredentialsInjected"
    NO_OCI_IMAGE = "NoOCIImage"


class ImageAuthEventReason(str, Enum):
    """Reasons of the warning events emitted while validating."""

    IRRELEVANT = "ImageAuthIrrelevant"
    FORMAT_UNSUPPORTED = "ImageAuthFormatUnsupported"
    PARSE_ERROR = "ParseError"


@dataclass(frozen=True)
class ImageAuthNotice:
    """A non-fatal warning about the image authentication of a host."""

    reason: ImageAuthEventReason
    """Short reason token for the event."""

    message: str
    """Human-readable message."""


@dataclass(frozen=True)
class ImageAuthResult:
    """Outcome of validating the image authentication of a host."""

    valid: bool = False
    """Whether the referenced secret is present and usable."""

    reason: ImageAuthReason = ImageAuthReason.UNKNOWN
    """Reason code for the outcome."""

    message: str = ""
    """Human-readable explanation of the outcome."""

    oci_relevant: bool = False
    """Whether the image URL is an ``oci://`` reference."""

    secret: AuthSecret | None = None
    """The validated secret, set only when the result is valid."""

    credentials: str | None = None
    """Base64-encoded ``username:password`` for the image registry.

    Only set when the result is valid and the image is an OCI reference.
    """


@dataclass(frozen=True)
class ImageAuthEvaluation:
    """Result of validation plus the warnings it produced."""

    result: ImageAuthResult
    """Validation result."""

    notices: list[ImageAuthNotice] = field(default_factory=list)
    """Warnings to publish as events on the host."""
