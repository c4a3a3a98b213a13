"""
Common Utilities

Shared modules used across the package:
- config.py - Configuration dataclasses and YAML loading
- exceptions.py - Custom exception classes
- logging_setup.py - Structured logging setup and manager logger channels
- scheduler.py - Self-rescheduling polling loop
"""

from .config import (
    ConfigFilter,
    SentinelConfigKey,
    ClientSettings,
    LoggingSettings,
    ManagerConfig,
    load_manager_config,
    load_config_file,
    find_config_path,
)
from .exceptions import (
    ConfigManagerError,
    OptionsError,
    ConfigFileError,
    ConnectionStringError,
    RemoteConfigError,
    SettingNotFoundError,
)
from .logging_setup import (
    setup_logging,
    get_service_logger,
    ManagerLogger,
    NullLogger,
    StdlibLogger,
    ChannelLogger,
    PrefixedLogger,
    resolve_manager_logger,
)
from .scheduler import PollingLoop

__all__ = [
    # Config
    "ConfigFilter",
    "SentinelConfigKey",
    "ClientSettings",
    "LoggingSettings",
    "ManagerConfig",
    "load_manager_config",
    "load_config_file",
    "find_config_path",
    # Exceptions
    "ConfigManagerError",
    "OptionsError",
    "ConfigFileError",
    "ConnectionStringError",
    "RemoteConfigError",
    "SettingNotFoundError",
    # Logging
    "setup_logging",
    "get_service_logger",
    "ManagerLogger",
    "NullLogger",
    "StdlibLogger",
    "ChannelLogger",
    "PrefixedLogger",
    "resolve_manager_logger",
    # Scheduling
    "PollingLoop",
]
