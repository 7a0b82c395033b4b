"""Test fixtures for image authentication tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from contextlib import contextmanager

import pytest
import pytest_asyncio
import respx
from pydantic import SecretStr
from safir.testing.kubernetes import MockKubernetesApi, patch_kubernetes
from safir.testing.slack import MockSlackWebhook, mock_slack_webhook

from imageauth.config import Config
from imageauth.factory import Factory

from .support.data import config_path


@pytest.fixture
def config() -> Config:
    """Construct default configuration for tests."""
    return Config.from_file(config_path("standard"))


@pytest_asyncio.fixture
async def factory(
    config: Config, mock_kubernetes: MockKubernetesApi
) -> AsyncIterator[Factory]:
    """Create a component factory for tests."""
    async with Factory.standalone(config) as factory:
        yield factory


@pytest.fixture
def mock_kubernetes() -> Iterator[MockKubernetesApi]:
    with contextmanager(patch_kubernetes)() as mock:
        yield mock


@pytest.fixture
def mock_slack(
    config: Config, respx_mock: respx.Router
) -> Iterator[MockSlackWebhook]:
    config.slack_webhook = SecretStr("https://slack.example.com/webhook")
    yield mock_slack_webhook(
        config.slack_webhook.get_secret_value(), respx_mock
    )
    config.slack_webhook = None
