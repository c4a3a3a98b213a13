"""
Fluent builder for ConfigManager.

Each setter returns a new builder, so a partially configured builder can
be shared and specialised safely:

    base = ConfigManagerBuilder.create_config_manager(client).set_logger(log)
    flags = await base.set_filters([ConfigFilter("flags:*")]).start("flags")
"""

import asyncio
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping

from configmanager.client.models import RemoteConfigClient
from configmanager.common.config import ConfigFilter, SentinelConfigKey
from configmanager.common.scheduler import Sleep

from .manager import ConfigManager
from .options import ManagerOptions, UpdateListener, create_manager_options


@dataclass(frozen=True)
class ConfigManagerBuilder:
    client: RemoteConfigClient
    filters: tuple[ConfigFilter | Mapping[str, Any], ...] | None = ()
    polling_interval_s: float | None = None
    sentinel_key: SentinelConfigKey | Mapping[str, Any] | None = None
    logger: Any = None
    on_update: UpdateListener | None = None

    @classmethod
    def create_config_manager(cls, client: RemoteConfigClient) -> "ConfigManagerBuilder":
        return cls(client=client)

    def set_filters(self, filters: Iterable[ConfigFilter | Mapping[str, Any]] | None) -> "ConfigManagerBuilder":
        # None is left for create_manager_options to reject
        return replace(self, filters=None if filters is None else tuple(filters))

    def set_polling_interval(self, seconds: float | None) -> "ConfigManagerBuilder":
        return replace(self, polling_interval_s=seconds)

    def set_sentinel_config_key(
        self,
        sentinel_key: SentinelConfigKey | Mapping[str, Any] | None,
    ) -> "ConfigManagerBuilder":
        return replace(self, sentinel_key=sentinel_key)

    def set_logger(self, logger: Any) -> "ConfigManagerBuilder":
        return replace(self, logger=logger)

    def set_on_update_listener(self, listener: UpdateListener | None) -> "ConfigManagerBuilder":
        return replace(self, on_update=listener)

    def build_options(self, name: str) -> ManagerOptions:
        return create_manager_options(
            name=name,
            filters=self.filters,
            polling_interval_s=self.polling_interval_s,
            sentinel_key=self.sentinel_key,
            logger=self.logger,
            on_update=self.on_update,
        )

    async def start(self, name: str, sleep: Sleep = asyncio.sleep) -> ConfigManager:
        """Build options and return a manager whose first refresh has completed."""
        return await ConfigManager.create(self.build_options(name), self.client, sleep=sleep)
