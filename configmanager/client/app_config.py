"""
App Configuration Client

Talks to an Azure App Configuration compatible REST endpoint.

- Reuses a single HTTP client (no connection overhead per request)
- Signs every request with HMAC-SHA256
- Follows @nextLink pages lazily while listing
"""

from typing import Any, AsyncIterator
from urllib.parse import quote

import httpx

from configmanager.common.config import ClientSettings
from configmanager.common.exceptions import (
    ConnectionStringError,
    RemoteConfigError,
    SettingNotFoundError,
)

from .auth import HmacCredentialAuth, parse_connection_string
from .models import ConfigurationSetting

API_VERSION = "1.0"
KV_ACCEPT = "application/vnd.microsoft.appconfig.kv+json, application/problem+json"
KVSET_ACCEPT = "application/vnd.microsoft.appconfig.kvset+json, application/problem+json"


class AppConfigurationClient:
    """
    Async client for key/value settings.

    Usage:
        async with AppConfigurationClient.from_connection_string(conn) as client:
            setting = await client.get_setting("app:sentinel")
            async for s in client.list_settings("app:*", "prod"):
                ...
    """

    def __init__(
        self,
        endpoint: str,
        credential_id: str,
        secret: str,
        api_version: str = API_VERSION,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.api_version = api_version
        self.timeout = timeout
        self._auth = HmacCredentialAuth(credential_id, secret)
        self._transport = transport
        # Reusable HTTP client - created lazily inside the running loop
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_connection_string(cls, connection_string: str, **kwargs: Any) -> "AppConfigurationClient":
        credentials = parse_connection_string(connection_string)
        return cls(credentials.endpoint, credentials.credential_id, credentials.secret, **kwargs)

    @classmethod
    def from_settings(cls, settings: ClientSettings, **kwargs: Any) -> "AppConfigurationClient":
        kwargs.setdefault("timeout", settings.timeout_s)
        if settings.connection_string:
            return cls.from_connection_string(settings.connection_string, **kwargs)
        if not settings.has_credentials:
            raise ConnectionStringError("no connection string or endpoint credentials configured")
        return cls(settings.endpoint, settings.credential_id, settings.secret, **kwargs)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create reusable HTTP client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.endpoint,
                auth=self._auth,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client"""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AppConfigurationClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def get_setting(self, key: str, label: str | None = None) -> ConfigurationSetting:
        """
        Fetch a single setting.

        Raises:
            SettingNotFoundError: the key/label does not exist (404)
            RemoteConfigError: any other HTTP or transport failure
        """
        params = {"api-version": self.api_version}
        if label is not None:
            params["label"] = label

        response = await self._get(
            f"/kv/{quote(key, safe='')}",
            params=params,
            accept=KV_ACCEPT,
            key=key,
        )
        if response.status_code == 404:
            raise SettingNotFoundError(key, label)
        self._raise_for_status(response, key)

        return ConfigurationSetting.from_api(response.json())

    async def list_settings(
        self,
        key_filter: str,
        label_filter: str | None = None,
    ) -> AsyncIterator[ConfigurationSetting]:
        """Yield every setting matching the filters, one page at a time."""
        params: dict[str, str] | None = {"key": key_filter, "api-version": self.api_version}
        if label_filter is not None:
            params["label"] = label_filter

        url: str | None = "/kv"
        while url:
            response = await self._get(url, params=params, accept=KVSET_ACCEPT, key=key_filter)
            self._raise_for_status(response, key_filter)
            data = response.json()

            for item in data.get("items") or []:
                yield ConfigurationSetting.from_api(item)

            # nextLink already carries the query string
            url = data.get("@nextLink")
            params = None

    async def _get(
        self,
        url: str,
        params: dict[str, str] | None,
        accept: str,
        key: str,
    ) -> httpx.Response:
        client = await self._get_client()
        try:
            return await client.get(url, params=params, headers={"Accept": accept})
        except httpx.HTTPError as e:
            raise RemoteConfigError(f"request for '{key}' failed: {e}", key=key) from e

    def _raise_for_status(self, response: httpx.Response, key: str) -> None:
        if response.is_success:
            return
        raise RemoteConfigError(
            f"HTTP {response.status_code} for '{key}': {response.text[:200]}",
            status_code=response.status_code,
            key=key,
        )
