"""Image authentication command-line interface."""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from pathlib import Path

import click
import yaml
from safir.asyncio import run_with_asyncio
from safir.click import display_help
from safir.kubernetes import initialize_kubernetes
from safir.logging import LogLevel, configure_logging
from safir.slack.webhook import SlackWebhookClient
from structlog.stdlib import get_logger

from .config import Config
from .constants import (
    CONFIGURATION_PATH,
    CONFIGURATION_PATH_ENV_VAR,
    ROOT_LOGGER,
)
from .exceptions import CredentialError
from .factory import Factory
from .models.domain.secret import AuthSecret
from .models.v1.imageauth import ImageAuthStatus
from .services.credentials import resolve_registry_credentials

__all__ = [
    "help",
    "main",
    "resolve",
    "revalidate",
    "validate",
]


def _cluster_command[**P, R](
    async_func: Callable[P, Awaitable[R]],
) -> Callable[P, R]:
    """Add common options and error reporting to a cluster command.

    The wrapped command receives the loaded configuration as its ``config``
    keyword argument instead of the path options.
    """

    @click.option(
        "--config-path",
        "-c",
        type=click.Path(path_type=Path),
        envvar=CONFIGURATION_PATH_ENV_VAR,
        default=CONFIGURATION_PATH,
        help="Application configuration file",
    )
    @click.option(
        "--debug",
        "-d",
        is_flag=True,
        envvar="DEBUG",
        help="Enable debug logging",
    )
    @run_with_asyncio
    @functools.wraps(async_func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        config_path = kwargs.pop("config_path")
        debug = kwargs.pop("debug")
        if config_path.exists():
            config = Config.from_file(config_path)
        else:
            config = Config()
        if debug:
            config.log_level = LogLevel.DEBUG
        configure_logging(
            name=ROOT_LOGGER,
            profile=config.profile,
            log_level=config.log_level,
        )
        kwargs["config"] = config

        # Report any uncaught exceptions to Slack if it is configured.
        logger = get_logger(ROOT_LOGGER)
        slack_client = None
        if config.slack_webhook:
            webhook = config.slack_webhook.get_secret_value()
            slack_client = SlackWebhookClient(webhook, config.name, logger)
        try:
            await initialize_kubernetes()
            return await async_func(*args, **kwargs)
        except Exception as exc:
            if slack_client:
                await slack_client.post_exception(exc)
            raise

    return wrapper


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(message="%(version)s")
def main() -> None:
    """Command-line interface for image authentication validation."""


@main.command()
@click.argument("topic", default=None, required=False, nargs=1)
@click.argument("subtopic", default=None, required=False, nargs=1)
@click.pass_context
def help(ctx: click.Context, topic: str | None, subtopic: str | None) -> None:
    """Show help for any command."""
    display_help(main, ctx, topic, subtopic)


@main.command()
@click.argument(
    "secret_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.argument("image_url")
def resolve(secret_file: Path, image_url: str) -> None:
    """Print the registry credentials for IMAGE_URL from a Secret manifest.

    SECRET_FILE is a Kubernetes Secret manifest in YAML or JSON holding a
    Docker configuration. The output is the base64-encoded username:password
    pair for the registry of IMAGE_URL, which must be an oci:// reference.
    """
    with secret_file.open("r") as f:
        manifest = yaml.safe_load(f)
    if not isinstance(manifest, dict):
        raise click.ClickException(f"{secret_file} is not a Secret manifest")
    try:
        secret = AuthSecret.from_manifest(manifest)
    except ValueError as e:
        msg = f"{secret_file} has invalid Secret data: {e!s}"
        raise click.ClickException(msg) from e
    try:
        credentials = resolve_registry_credentials(secret.data, image_url)
    except CredentialError as e:
        raise click.ClickException(str(e)) from e
    click.echo(credentials)


@main.command()
@click.option(
    "--namespace", "-n", default="default", help="Namespace of the host"
)
@click.argument("host")
@_cluster_command
async def validate(*, namespace: str, host: str, config: Config) -> None:
    """Validate the image authentication of HOST and print its status."""
    async with Factory.standalone(config) as factory:
        service = factory.create_image_auth_service()
        validation = await service.validate_host(host, namespace)
    if not validation:
        raise click.ClickException(f"Host {namespace}/{host} not found")
    status = ImageAuthStatus.from_result(*validation)
    click.echo(status.model_dump_json(by_alias=True, indent=2))


@main.command()
@click.option(
    "--namespace", "-n", default="default", help="Namespace of the secret"
)
@click.argument("secret")
@_cluster_command
async def revalidate(*, namespace: str, secret: str, config: Config) -> None:
    """Revalidate every host that references SECRET."""
    async with Factory.standalone(config) as factory:
        service = factory.create_image_auth_service()
        results = await service.revalidate_for_secret(secret, namespace)
    for name, result in sorted(results.items()):
        valid = "valid" if result.valid else "invalid"
        click.echo(f"{namespace}/{name}: {valid} ({result.reason.value})")
