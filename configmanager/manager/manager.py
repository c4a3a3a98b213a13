"""
Configuration Manager

Pulls key/value settings from the remote service, keeps the latest
snapshot, and notifies a listener after every completed refresh.

Refresh cycle:
1. If a sentinel key is configured, fetch it and skip the refresh when
   its value has not changed (or when it does not exist).
2. Fetch every filter concurrently and parse each setting.
3. Replace the snapshot with the concatenated results (filter order).
4. Fire the update listener.
"""

import asyncio
import copy
from typing import Any

from configmanager.client.models import RemoteConfigClient
from configmanager.common.config import ConfigFilter
from configmanager.common.logging_setup import PrefixedLogger
from configmanager.common.scheduler import PollingLoop, Sleep

from .options import ManagerOptions
from .parser import ParsedEntry, parse_configuration_setting

# Marks the sentinel as never observed, so the first check always refreshes
_UNSET = object()


class ConfigManager:
    """
    Holds the current configuration snapshot for one set of filters.

    Create with `await ConfigManager.create(options, client)`; the first
    refresh has completed by the time it returns.
    """

    def __init__(
        self,
        options: ManagerOptions,
        client: RemoteConfigClient,
        sleep: Sleep = asyncio.sleep,
    ):
        self.options = options
        self.client = client
        self.logger = PrefixedLogger(options.name, options.logger)
        self._sleep = sleep

        self._entries: list[ParsedEntry] = []
        self._sentinel_value: Any = _UNSET
        self._polling: PollingLoop | None = None
        self._refresh_count = 0
        self._skipped_count = 0
        # Serialises scheduled ticks and direct refresh() calls
        self._refresh_lock = asyncio.Lock()

    @classmethod
    async def create(
        cls,
        options: ManagerOptions,
        client: RemoteConfigClient,
        sleep: Sleep = asyncio.sleep,
    ) -> "ConfigManager":
        manager = cls(options, client, sleep)
        await manager.start()
        return manager

    @property
    def name(self) -> str:
        return self.options.name

    @property
    def is_polling(self) -> bool:
        return self._polling is not None and self._polling.is_running

    def get_configurations(self) -> list[ParsedEntry]:
        """Current snapshot; mutating the result never affects the manager."""
        return copy.deepcopy(self._entries)

    def get_value(self, key: str, default: Any = None) -> Any:
        """Value of the last entry with this key, or default."""
        for entry in reversed(self._entries):
            if entry.key == key:
                return copy.deepcopy(entry.value)
        return default

    async def start(self) -> None:
        self.logger.debug("initializing configuration manager")
        await self.refresh()

        if self.options.polling_enabled:
            await self._start_polling()

    async def stop(self) -> None:
        """Stop polling. The snapshot stays readable."""
        if self._polling is None:
            return
        await self._polling.stop()
        self._polling = None
        self.logger.debug("configuration manager polling stopped")

    async def __aenter__(self) -> "ConfigManager":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    async def refresh(self) -> bool:
        """
        Run one refresh cycle.

        Returns:
            True if the snapshot was replaced, False if the cycle was skipped

        Raises:
            Any non-404 error from the sentinel fetch, any list failure, and
            any exception raised by the update listener.
        """
        async with self._refresh_lock:
            return await self._refresh_locked()

    async def _refresh_locked(self) -> bool:
        if self.options.sentinel_key and not await self._sentinel_changed():
            self._skipped_count += 1
            return False

        self.logger.debug("starting to update configurations")
        results = await asyncio.gather(
            *(self._fetch_filter(f) for f in self.options.filters)
        )

        self._entries = [entry for entries in results for entry in entries]
        self._refresh_count += 1
        self.logger.debug(f"finished updating configurations with {len(self._entries)} values")

        if self.options.on_update:
            self.logger.debug("firing update listener with updated configurations")
            self.options.on_update(self.get_configurations())

        return True

    async def _sentinel_changed(self) -> bool:
        sentinel = self.options.sentinel_key
        current = None if self._sentinel_value is _UNSET else self._sentinel_value
        self.logger.debug("checking if configurations should be updated")
        self.logger.debug(f"sentinel current value is {current}")

        try:
            setting = await self.client.get_setting(sentinel.key, sentinel.label)
        except Exception as e:
            if getattr(e, "status_code", None) != 404:
                raise
            self.logger.warn(
                "sentinel configuration was declared but not found on config server, "
                "skipping configurations update"
            )
            return False

        if self._sentinel_value is not _UNSET and setting.value == self._sentinel_value:
            self.logger.debug("sentinel value did not change, skipping configurations update")
            return False

        self.logger.debug("sentinel value changed, updating configurations")
        self._sentinel_value = setting.value
        return True

    async def _fetch_filter(self, config_filter: ConfigFilter) -> list[ParsedEntry]:
        return [
            parse_configuration_setting(setting)
            async for setting in self.client.list_settings(
                config_filter.key_filter,
                config_filter.label_filter,
            )
        ]

    async def _start_polling(self) -> None:
        interval = self.options.polling_interval_s
        self.logger.debug(f"configuration manager polling initializing with {interval}s interval")
        self._polling = PollingLoop(
            interval,
            self.refresh,
            name=self.options.name,
            logger=self.logger,
            sleep=self._sleep,
        )
        await self._polling.start()

    def get_stats(self) -> dict:
        """Refresh counters plus polling loop statistics."""
        return {
            "name": self.options.name,
            "entries": len(self._entries),
            "refresh_count": self._refresh_count,
            "skipped_count": self._skipped_count,
            "polling": self._polling.get_stats() if self._polling else None,
        }
