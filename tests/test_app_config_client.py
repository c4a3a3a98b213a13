import asyncio
import base64
import hashlib

import httpx
import pytest

from configmanager.client.app_config import AppConfigurationClient
from configmanager.client.auth import HmacCredentialAuth, parse_connection_string
from configmanager.common.config import ClientSettings, ConfigFilter, SentinelConfigKey
from configmanager.common.exceptions import (
    ConnectionStringError,
    RemoteConfigError,
    SettingNotFoundError,
)
from configmanager.manager.builder import ConfigManagerBuilder

from conftest import RecordingLogger

SECRET = base64.b64encode(b"super-secret-key").decode()
CONNECTION_STRING = f"Endpoint=https://example.azconfig.io/;Id=cred-1;Secret={SECRET}"
EMPTY_SHA256 = base64.b64encode(hashlib.sha256(b"").digest()).decode()


def make_client(handler):
    return AppConfigurationClient.from_connection_string(
        CONNECTION_STRING,
        transport=httpx.MockTransport(handler),
    )


def test_parse_connection_string_keeps_padding_in_secret():
    credentials = parse_connection_string(CONNECTION_STRING)

    assert credentials.endpoint == "https://example.azconfig.io"
    assert credentials.credential_id == "cred-1"
    assert credentials.secret == SECRET
    assert credentials.secret.endswith("=")


@pytest.mark.parametrize(
    "value",
    ["", "Endpoint=https://x.io;Id=abc", "Endpoint=https://x.io;Id=abc;Secret=", "garbage"],
)
def test_parse_connection_string_rejects_incomplete(value):
    with pytest.raises(ConnectionStringError):
        parse_connection_string(value)


def test_invalid_secret_is_rejected():
    with pytest.raises(ConnectionStringError):
        HmacCredentialAuth("cred", "not base64 !!")


def test_from_settings_requires_credentials():
    with pytest.raises(ConnectionStringError):
        AppConfigurationClient.from_settings(ClientSettings())


def test_get_setting_signs_request():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"key": "app:sentinel", "label": "prod", "value": "7", "etag": "abc"})

    async def scenario():
        async with make_client(handler) as client:
            return await client.get_setting("app:sentinel", "prod")

    result = asyncio.run(scenario())

    assert result.key == "app:sentinel"
    assert result.value == "7"
    assert result.etag == "abc"

    request = seen[0]
    assert request.url.path == "/kv/app:sentinel"
    assert request.url.params["label"] == "prod"
    assert request.url.params["api-version"] == "1.0"
    assert request.headers["x-ms-content-sha256"] == EMPTY_SHA256

    auth = HmacCredentialAuth("cred-1", SECRET)
    expected = auth.sign(
        "GET",
        request.url.raw_path.decode(),
        request.headers["x-ms-date"],
        "example.azconfig.io",
        EMPTY_SHA256,
    )
    assert request.headers["Authorization"] == (
        "HMAC-SHA256 Credential=cred-1"
        f"&SignedHeaders=x-ms-date;host;x-ms-content-sha256&Signature={expected}"
    )


def test_get_setting_not_found():
    def handler(request):
        return httpx.Response(404, json={"title": "Not Found"})

    async def scenario():
        async with make_client(handler) as client:
            await client.get_setting("missing")

    with pytest.raises(SettingNotFoundError) as excinfo:
        asyncio.run(scenario())

    assert excinfo.value.status_code == 404
    assert excinfo.value.key == "missing"


def test_get_setting_server_error():
    def handler(request):
        return httpx.Response(503, text="unavailable")

    async def scenario():
        async with make_client(handler) as client:
            await client.get_setting("key")

    with pytest.raises(RemoteConfigError) as excinfo:
        asyncio.run(scenario())

    assert excinfo.value.status_code == 503
    assert not isinstance(excinfo.value, SettingNotFoundError)


def test_transport_error_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async def scenario():
        async with make_client(handler) as client:
            await client.get_setting("key")

    with pytest.raises(RemoteConfigError) as excinfo:
        asyncio.run(scenario())

    assert excinfo.value.status_code is None


def test_list_settings_follows_next_link():
    seen = []

    def handler(request):
        seen.append(request)
        if "after" not in request.url.params:
            return httpx.Response(200, json={
                "items": [{"key": "app:a", "value": "1"}, {"key": "app:b", "value": "x"}],
                "@nextLink": "/kv?key=app%3A%2A&label=prod&after=page2&api-version=1.0",
            })
        return httpx.Response(200, json={"items": [{"key": "app:c", "value": None}]})

    async def scenario():
        async with make_client(handler) as client:
            return [s async for s in client.list_settings("app:*", "prod")]

    settings = asyncio.run(scenario())

    assert [s.key for s in settings] == ["app:a", "app:b", "app:c"]
    assert seen[0].url.params["key"] == "app:*"
    assert seen[0].url.params["label"] == "prod"
    assert seen[1].url.params["after"] == "page2"
    assert "Authorization" in seen[1].headers


def test_manager_over_http_client_warns_on_missing_sentinel():
    logger = RecordingLogger()

    def handler(request):
        if request.url.path.startswith("/kv/"):
            return httpx.Response(404)
        return httpx.Response(200, json={"items": [{"key": "key", "value": '{"something": true}'}]})

    async def scenario():
        async with make_client(handler) as client:
            return await (
                ConfigManagerBuilder.create_config_manager(client)
                .set_filters([ConfigFilter("key", "label")])
                .set_sentinel_config_key(SentinelConfigKey("sentinel", "label"))
                .set_logger(logger)
                .start("http")
            )

    manager = asyncio.run(scenario())

    assert manager.get_configurations() == []
    assert logger.messages["warn"] == [
        "http: sentinel configuration was declared but not found on config server, "
        "skipping configurations update"
    ]


def test_manager_over_http_client_loads_settings():
    def handler(request):
        return httpx.Response(200, json={"items": [{"key": "key", "value": '{"something": true}'}]})

    async def scenario():
        async with make_client(handler) as client:
            return await (
                ConfigManagerBuilder.create_config_manager(client)
                .set_filters([ConfigFilter("key", "label")])
                .start("http")
            )

    manager = asyncio.run(scenario())

    assert [e.to_dict() for e in manager.get_configurations()] == [
        {"key": "key", "value": {"something": True}}
    ]


def test_invalid_secret_keeps_decode_error_as_cause():
    with pytest.raises(ConnectionStringError) as excinfo:
        HmacCredentialAuth("cred", "not base64 !!")

    assert excinfo.value.__cause__ is not None
