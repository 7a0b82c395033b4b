"""Global configuration parsing."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Self

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict
from safir.logging import LogLevel, Profile

__all__ = [
    "Config",
    "HostResourceConfig",
]


class HostResourceConfig(BaseModel):
    """Location of the host custom resources in the Kubernetes API."""

    model_config = ConfigDict(
        alias_generator=to_camel, extra="forbid", populate_by_name=True
    )

    group: Annotated[
        str,
        Field(
            title="API group",
            description="API group of the host custom resource",
            examples=["metal3.io"],
        ),
    ] = "metal3.io"

    version: Annotated[
        str,
        Field(
            title="API version",
            description="API version of the host custom resource",
            examples=["v1alpha1"],
        ),
    ] = "v1alpha1"

    plural: Annotated[
        str,
        Field(
            title="Plural name",
            description="Plural under which the host objects are managed",
            examples=["baremetalhosts"],
        ),
    ] = "baremetalhosts"

    kind: Annotated[
        str,
        Field(
            title="Kind",
            description="Kind of the host objects, used in events and errors",
            examples=["BareMetalHost"],
        ),
    ] = "BareMetalHost"

    @property
    def api_version(self) -> str:
        """Combined ``group/version`` used in object references."""
        return f"{self.group}/{self.version}"


class Config(BaseSettings):
    """Image authentication validator configuration."""

    model_config = SettingsConfigDict(
        alias_generator=to_camel, extra="forbid", populate_by_name=True
    )

    event_component: Annotated[
        str,
        Field(
            title="Event source component",
            description=(
                "Component name reported as the source of warning events"
                " recorded on hosts"
            ),
        ),
    ] = "imageauth"

    hosts: Annotated[
        HostResourceConfig,
        Field(
            title="Host resources",
            description="Custom resource holding the hosts to validate",
            default_factory=HostResourceConfig,
        ),
    ]

    log_level: Annotated[
        LogLevel,
        Field(
            title="Log level",
            description="Python logging level",
            examples=[LogLevel.INFO],
        ),
    ] = LogLevel.INFO

    name: Annotated[
        str,
        Field(
            title="Name of application",
            description="Used when reporting problems to Slack",
        ),
    ] = "imageauth"

    profile: Annotated[
        Profile,
        Field(
            title="Application logging profile",
            description=(
                "``production`` uses JSON logging. ``development`` uses"
                " logging that may be easier for humans to read but that"
                " cannot be easily parsed by computers."
            ),
            examples=[Profile.development],
        ),
    ] = Profile.production

    slack_webhook: Annotated[
        SecretStr | None,
        Field(
            title="Slack webhook for alerts",
            description=(
                "If set, hosts that could not be validated during"
                " revalidation will be reported to Slack via this webhook"
            ),
            validation_alias="IMAGEAUTH_SLACK_WEBHOOK",
        ),
    ] = None

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load the configuration from a YAML file.

        Settings taken from the environment, such as the Slack webhook, are
        merged with the contents of the file.

        Parameters
        ----------
        path
            Path to the configuration file.
        """
        with path.open("r") as f:
            return cls(**(yaml.safe_load(f) or {}))
