"""
configmanager - poll remote key/value configuration and feature flags.

Usage:
    from configmanager import AppConfigurationClient, ConfigFilter, ConfigManagerBuilder

    client = AppConfigurationClient.from_connection_string(conn)
    manager = await (
        ConfigManagerBuilder.create_config_manager(client)
        .set_filters([ConfigFilter("app:*", "prod")])
        .set_polling_interval(30)
        .start("app")
    )
    manager.get_configurations()
"""

from configmanager.client import AppConfigurationClient, ConfigurationSetting
from configmanager.common import (
    ConfigFilter,
    ConfigManagerError,
    RemoteConfigError,
    SentinelConfigKey,
    SettingNotFoundError,
)
from configmanager.manager import (
    ConfigManager,
    ConfigManagerBuilder,
    ManagerOptions,
    ParsedEntry,
    ValueKind,
    create_manager_options,
)

__all__ = [
    "AppConfigurationClient",
    "ConfigFilter",
    "ConfigManager",
    "ConfigManagerBuilder",
    "ConfigManagerError",
    "ConfigurationSetting",
    "ManagerOptions",
    "ParsedEntry",
    "RemoteConfigError",
    "SentinelConfigKey",
    "SettingNotFoundError",
    "ValueKind",
    "create_manager_options",
]

__version__ = "0.1.0"
