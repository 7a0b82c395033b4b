"""Tests for exceptions."""

from __future__ import annotations

import pytest
from anys import AnyContains
from kubernetes_asyncio.client import ApiException
from pydantic import ValidationError

from imageauth.exceptions import (
    InvalidHostError,
    KubernetesError,
    RegistryEntryMissingError,
)
from imageauth.models.domain.host import HostImage


def test_kubernetes_error_slack() -> None:
    error = KubernetesError(
        message="whatever",
        kind="kind",
        namespace="namespace",
        name="name",
        status=503,
        body="Some response body",
    )
    assert str(error) == (
        "whatever (kind namespace/name, status 503): Some response body"
    )

    slack = error.to_slack().to_slack()

    assert slack == {
        "blocks": [
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": "whatever (kind namespace/name, status 503)",
                    "verbatim": True,
                },
            },
            {
                "type": "section",
                "fields": [
                    {
                        "type": "mrkdwn",
                        "text": "*Exception type*\nKubernetesError",
                        "verbatim": True,
                    },
                    {
                        "type": "mrkdwn",
                        "text": AnyContains("*Failed at*"),
                        "verbatim": True,
                    },
                    {
                        "type": "mrkdwn",
                        "text": "*Status*\n503",
                        "verbatim": True,
                    },
                ],
            },
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": "*Object*\nkind namespace/name",
                    "verbatim": True,
                },
            },
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": "*Error*\n```\nSome response body\n```",
                    "verbatim": True,
                },
            },
            {"type": "divider"},
        ]
    }


def test_kubernetes_error_from_exception() -> None:
    exc = ApiException(status=403, reason="Forbidden")
    error = KubernetesError.from_exception(
        "Error listing objects", exc, kind="BareMetalHost", namespace="hosts"
    )
    assert error.status == 403
    assert error.body == "Forbidden"
    assert str(error) == (
        "Error listing objects (BareMetalHost, status 403): Forbidden"
    )

    error = KubernetesError("Error reading object", name="creds")
    assert str(error) == "Error reading object (creds)"


def test_invalid_host_error() -> None:
    with pytest.raises(ValidationError) as excinfo:
        HostImage.model_validate({"url": 7})
    error = InvalidHostError.from_exception("node-1", "hosts", excinfo.value)
    assert str(error) == "Unable to parse host hosts/node-1"
    assert error.error.startswith("ValidationError: ")

    slack = error.to_slack().to_slack()
    assert slack["blocks"][0]["text"]["text"] == str(error)
    assert slack["blocks"][2]["text"]["text"].startswith(
        "*Error*\n```\nValidationError: "
    )


def test_registry_entry_missing_error() -> None:
    error = RegistryEntryMissingError("registry.example.com:5000")
    assert error.host == "registry.example.com:5000"
    assert str(error) == (
        "registry registry.example.com:5000 not found in auth config"
    )
