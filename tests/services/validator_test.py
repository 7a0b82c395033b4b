"""Tests for validation of the image authentication of a host."""

from __future__ import annotations

import base64
import json
from typing import Any

import pytest
from kubernetes_asyncio.client import ApiException
from safir.testing.kubernetes import MockKubernetesApi

from imageauth.config import Config
from imageauth.exceptions import KubernetesError
from imageauth.factory import Factory
from imageauth.models.domain.host import Host, HostImage
from imageauth.models.domain.imageauth import (
    ImageAuthEventReason,
    ImageAuthReason,
)
from imageauth.models.domain.secret import AuthSecret
from imageauth.services.validator import evaluate_image_auth, is_oci

from ..support.data import make_docker_secret

URL = "oci://registry.example.com:5000/os/image:1.0"


def make_host(
    url: str | None = URL, auth_secret_name: str | None = "creds"
) -> Host:
    image = None
    if url is not None:
        image = HostImage(url=url, auth_secret_name=auth_secret_name)
    return Host(name="node-1", namespace="hosts", uid="abcd", image=image)


def make_secret(
    auths: dict[str, Any], secret_type: str = "kubernetes.io/dockerconfigjson"
) -> AuthSecret:
    document = json.dumps({"auths": auths}).encode()
    return AuthSecret(
        name="creds",
        namespace="hosts",
        type=secret_type,
        data={".dockerconfigjson": document},
    )


def test_is_oci() -> None:
    assert is_oci("oci://registry.example.com/image")
    assert is_oci("OCI://registry.example.com/image")
    assert not is_oci("https://example.com/image.qcow2")
    assert not is_oci("")


def test_no_image() -> None:
    for host in (make_host(url=None), make_host(url="")):
        evaluation = evaluate_image_auth(host, None)
        assert not evaluation.result.valid
        assert evaluation.result.reason == ImageAuthReason.UNKNOWN
        assert evaluation.result.message == "image URL not set"
        assert evaluation.notices == []


def test_not_required() -> None:
    for url in (URL, "https://example.com/image.qcow2"):
        evaluation = evaluate_image_auth(make_host(url, None), None)
        result = evaluation.result
        assert not result.valid
        assert result.reason == ImageAuthReason.NOT_REQUIRED
        assert result.message == "no per-host auth secret referenced"
        assert result.oci_relevant == is_oci(url)
        assert evaluation.notices == []


def test_secret_not_found() -> None:
    evaluation = evaluate_image_auth(make_host(), None)
    result = evaluation.result
    assert not result.valid
    assert result.reason == ImageAuthReason.SECRET_NOT_FOUND
    assert result.message == 'secret "creds" not found in namespace "hosts"'
    assert result.oci_relevant
    assert evaluation.notices == []


def test_wrong_type() -> None:
    secret = make_secret({}, secret_type="Opaque")
    evaluation = evaluate_image_auth(make_host(), secret)
    result = evaluation.result
    assert not result.valid
    assert result.reason == ImageAuthReason.WRONG_TYPE
    assert result.message == (
        'secret "creds" has unsupported type "Opaque"; expected'
        ' "kubernetes.io/dockerconfigjson" or "kubernetes.io/dockercfg"'
    )
    assert len(evaluation.notices) == 1
    notice = evaluation.notices[0]
    assert notice.reason == ImageAuthEventReason.FORMAT_UNSUPPORTED
    assert notice.message == 'Secret "creds" has unsupported type "Opaque"'


def test_valid() -> None:
    credentials = base64.b64encode(b"robot:pass").decode()
    secret = make_secret({"registry.example.com:5000": {"auth": credentials}})
    evaluation = evaluate_image_auth(make_host(), secret)
    result = evaluation.result
    assert result.valid
    assert result.reason == ImageAuthReason.VALID
    assert result.message == "auth secret present and of a supported type"
    assert result.oci_relevant
    assert result.secret == secret
    assert result.credentials == credentials
    assert evaluation.notices == []


def test_registry_entry_missing() -> None:
    credentials = base64.b64encode(b"robot:pass").decode()
    secret = make_secret({"other.example.com": {"auth": credentials}})
    evaluation = evaluate_image_auth(make_host(), secret)
    result = evaluation.result
    assert not result.valid
    assert result.reason == ImageAuthReason.REGISTRY_ENTRY_MISSING
    assert result.message == (
        'secret "creds" does not contain credentials for registry'
        f' registry.example.com:5000 in "{URL}"'
    )
    assert result.credentials is None
    assert len(evaluation.notices) == 1
    assert evaluation.notices[0].reason == ImageAuthEventReason.PARSE_ERROR


def test_parse_error() -> None:
    secret = AuthSecret(
        name="creds",
        namespace="hosts",
        type="kubernetes.io/dockerconfigjson",
        data={".dockerconfigjson": b"{not json"},
    )
    evaluation = evaluate_image_auth(make_host(), secret)
    result = evaluation.result
    assert not result.valid
    assert result.reason == ImageAuthReason.PARSE_ERROR
    assert result.message.startswith(
        'failed to extract credentials from secret "creds": failed to parse'
    )
    assert len(evaluation.notices) == 1
    notice = evaluation.notices[0]
    assert notice.reason == ImageAuthEventReason.PARSE_ERROR
    assert notice.message.startswith(
        'Failed to extract credentials from secret "creds": '
    )

    # A secret of the right type missing both keys is also a parse error.
    secret = AuthSecret(
        name="creds", namespace="hosts", type="kubernetes.io/dockercfg"
    )
    result = evaluate_image_auth(make_host(), secret).result
    assert result.reason == ImageAuthReason.PARSE_ERROR
    assert "does not contain .dockerconfigjson or .dockercfg" in result.message


def test_not_oci() -> None:
    url = "https://example.com/image.qcow2"
    host = make_host(url=url)
    irrelevant = (
        f'authSecretName="creds" is set but image URL is not oci:// ({url})'
    )

    # The secret is still checked but credentials are not resolved.
    secret = make_secret({})
    evaluation = evaluate_image_auth(host, secret)
    result = evaluation.result
    assert result.valid
    assert result.reason == ImageAuthReason.VALID
    assert not result.oci_relevant
    assert result.credentials is None
    assert [n.reason for n in evaluation.notices] == [
        ImageAuthEventReason.IRRELEVANT
    ]
    assert evaluation.notices[0].message == irrelevant

    evaluation = evaluate_image_auth(host, None)
    assert evaluation.result.reason == ImageAuthReason.SECRET_NOT_FOUND
    assert [n.message for n in evaluation.notices] == [irrelevant]

    secret = make_secret({}, secret_type="Opaque")
    evaluation = evaluate_image_auth(host, secret)
    assert evaluation.result.reason == ImageAuthReason.WRONG_TYPE
    assert [n.reason for n in evaluation.notices] == [
        ImageAuthEventReason.IRRELEVANT,
        ImageAuthEventReason.FORMAT_UNSUPPORTED,
    ]


@pytest.mark.asyncio
async def test_validate(
    config: Config, factory: Factory, mock_kubernetes: MockKubernetesApi
) -> None:
    credentials = base64.b64encode(b"robot:pass").decode()
    secret = make_docker_secret(
        "creds",
        {"https://registry.example.com:5000/v2/": {"auth": credentials}},
        namespace="hosts",
    )
    await mock_kubernetes.create_namespaced_secret("hosts", secret)
    validator = factory.create_image_auth_validator()

    result = await validator.validate(make_host())
    assert result.valid
    assert result.credentials == credentials
    assert result.secret
    assert result.secret.name == "creds"
    events = await mock_kubernetes.list_namespaced_event("hosts")
    assert events.items == []

    result = await validator.validate(make_host(auth_secret_name="missing"))
    assert result.reason == ImageAuthReason.SECRET_NOT_FOUND


@pytest.mark.asyncio
async def test_validate_events(
    config: Config, factory: Factory, mock_kubernetes: MockKubernetesApi
) -> None:
    secret = make_docker_secret("creds", {}, namespace="hosts", legacy=True)
    secret.type = "Opaque"
    await mock_kubernetes.create_namespaced_secret("hosts", secret)
    validator = factory.create_image_auth_validator()

    result = await validator.validate(make_host())
    assert result.reason == ImageAuthReason.WRONG_TYPE
    events = await mock_kubernetes.list_namespaced_event("hosts")
    assert len(events.items) == 1
    event = events.items[0]
    assert event.type == "Warning"
    assert event.reason == "ImageAuthFormatUnsupported"
    assert event.message == 'Secret "creds" has unsupported type "Opaque"'
    assert event.involved_object.kind == config.hosts.kind
    assert event.involved_object.api_version == config.hosts.api_version
    assert event.involved_object.name == "node-1"
    assert event.involved_object.uid == "abcd"
    assert event.source.component == config.event_component


@pytest.mark.asyncio
async def test_validate_event_failure(
    factory: Factory, mock_kubernetes: MockKubernetesApi
) -> None:
    def callback(method: str, *args: Any) -> None:
        if method == "create_namespaced_event":
            raise ApiException(status=500, reason="Something bad happened")

    mock_kubernetes.error_callback = callback
    validator = factory.create_image_auth_validator()

    # Failing to record the warning does not change the result.
    host = make_host(url="https://example.com/image.qcow2")
    result = await validator.validate(host)
    assert result.reason == ImageAuthReason.SECRET_NOT_FOUND


@pytest.mark.asyncio
async def test_validate_kubernetes_error(
    factory: Factory, mock_kubernetes: MockKubernetesApi
) -> None:
    def callback(method: str, *args: Any) -> None:
        if method == "read_namespaced_secret":
            raise ApiException(status=500, reason="Something bad happened")

    mock_kubernetes.error_callback = callback
    validator = factory.create_image_auth_validator()

    with pytest.raises(KubernetesError) as excinfo:
        await validator.validate(make_host())
    assert excinfo.value.status == 500
    assert excinfo.value.kind == "Secret"
    assert str(excinfo.value) == (
        "Error reading object (Secret hosts/creds, status 500):"
        " Something bad happened"
    )

    # No secret is read if the host names none.
    result = await validator.validate(make_host(auth_secret_name=None))
    assert result.reason == ImageAuthReason.NOT_REQUIRED


@pytest.mark.asyncio
async def test_validate_kubernetes_error_not_oci(
    factory: Factory, mock_kubernetes: MockKubernetesApi
) -> None:
    def callback(method: str, *args: Any) -> None:
        if method == "read_namespaced_secret":
            raise ApiException(status=500, reason="Something bad happened")

    mock_kubernetes.error_callback = callback
    validator = factory.create_image_auth_validator()

    # The warning about an unused secret is recorded before the read fails.
    host = make_host(url="https://example.com/image.qcow2")
    with pytest.raises(KubernetesError):
        await validator.validate(host)
    events = await mock_kubernetes.list_namespaced_event("hosts")
    assert [e.reason for e in events.items] == ["ImageAuthIrrelevant"]


@pytest.mark.asyncio
async def test_validate_events_not_duplicated(
    factory: Factory, mock_kubernetes: MockKubernetesApi
) -> None:
    secret = make_docker_secret("creds", {}, namespace="hosts")
    secret.type = "Opaque"
    await mock_kubernetes.create_namespaced_secret("hosts", secret)
    validator = factory.create_image_auth_validator()

    host = make_host(url="https://example.com/image.qcow2")
    result = await validator.validate(host)
    assert result.reason == ImageAuthReason.WRONG_TYPE
    events = await mock_kubernetes.list_namespaced_event("hosts")
    assert [e.reason for e in events.items] == [
        "ImageAuthIrrelevant",
        "ImageAuthFormatUnsupported",
    ]


def test_parse_error_hides_secrets() -> None:
    for document in (
        b'{"auths": {"registry.example.com:5000": {"password": "Sup3rS3cret"}}'
        b',}',
        b'{"auths": {"registry.example.com:5000": "bob:Sup3rS3cret"}}',
    ):
        secret = AuthSecret(
            name="creds",
            namespace="hosts",
            type="kubernetes.io/dockerconfigjson",
            data={".dockerconfigjson": document},
        )
        evaluation = evaluate_image_auth(make_host(), secret)
        assert evaluation.result.reason == ImageAuthReason.PARSE_ERROR
        assert "Sup3rS3cret" not in evaluation.result.message
        assert len(evaluation.notices) == 1
        assert "Sup3rS3cret" not in evaluation.notices[0].message
