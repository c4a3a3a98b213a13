"""
Configuration Dataclasses

Type-safe configuration structures for the manager and the runner.
Loaded from a local YAML file, with environment overrides for secrets.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigFileError

# Environment variable names
ENV_CONFIG_PATH = "CONFIGMANAGER_CONFIG"
ENV_CONNECTION_STRING = "CONFIGMANAGER_CONNECTION_STRING"

DEFAULT_CONFIG_PATHS = (
    "/etc/configmanager/config.yaml",
    "./config.yaml",
)


@dataclass(frozen=True)
class ConfigFilter:
    """Selects remote settings by key and label filter"""
    key_filter: str
    label_filter: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ConfigFilter":
        """Accepts snake_case or camelCase keys"""
        key_filter = data.get("key_filter", data.get("keyFilter"))
        if not isinstance(key_filter, str) or not key_filter:
            raise ValueError(f"filter is missing key_filter: {dict(data)}")
        label_filter = data.get("label_filter", data.get("labelFilter"))
        return cls(key_filter=key_filter, label_filter=label_filter)


@dataclass(frozen=True)
class SentinelConfigKey:
    """Remote setting whose value change triggers a full refresh"""
    key: str
    label: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SentinelConfigKey":
        key = data.get("key")
        if not isinstance(key, str) or not key:
            raise ValueError(f"sentinel is missing key: {dict(data)}")
        return cls(key=key, label=data.get("label"))


@dataclass
class ClientSettings:
    """Remote service credentials"""
    connection_string: str = ""
    endpoint: str = ""
    credential_id: str = ""
    secret: str = ""
    timeout_s: float = 30.0

    @property
    def has_credentials(self) -> bool:
        return bool(self.connection_string) or bool(
            self.endpoint and self.credential_id and self.secret
        )


@dataclass
class LoggingSettings:
    """Runner log output"""
    level: str = "INFO"
    json_format: bool = True


@dataclass
class ManagerConfig:
    """Complete runner configuration"""
    name: str
    filters: list[ConfigFilter] = field(default_factory=list)
    polling_interval_s: float | None = None
    sentinel: SentinelConfigKey | None = None
    client: ClientSettings = field(default_factory=ClientSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


def load_manager_config(data: dict, environ: Mapping[str, str] | None = None) -> ManagerConfig:
    """Load ManagerConfig from dictionary (e.g., parsed YAML)"""
    environ = os.environ if environ is None else environ
    manager_data = data.get("manager") or {}

    name = manager_data.get("name")
    if not name:
        raise ConfigFileError("manager.name is required")

    try:
        filters = [ConfigFilter.from_mapping(f) for f in data.get("filters") or []]
        sentinel_data = manager_data.get("sentinel")
        sentinel = SentinelConfigKey.from_mapping(sentinel_data) if sentinel_data else None
    except (ValueError, AttributeError) as e:
        raise ConfigFileError(str(e)) from e

    interval = manager_data.get("polling_interval_s")
    if interval is not None:
        try:
            interval = float(interval)
        except (TypeError, ValueError) as e:
            raise ConfigFileError(f"polling_interval_s must be a number, got {interval!r}") from e

    client_data = data.get("client") or {}
    client = ClientSettings(
        connection_string=client_data.get("connection_string", ""),
        endpoint=client_data.get("endpoint", ""),
        credential_id=client_data.get("credential_id", ""),
        secret=client_data.get("secret", ""),
        timeout_s=float(client_data.get("timeout_s", 30.0)),
    )
    # Secrets from the environment win over the file
    if environ.get(ENV_CONNECTION_STRING):
        client.connection_string = environ[ENV_CONNECTION_STRING]

    logging_data = data.get("logging") or {}
    logging_settings = LoggingSettings(
        level=logging_data.get("level", "INFO"),
        json_format=logging_data.get("json_format", True),
    )

    return ManagerConfig(
        name=name,
        filters=filters,
        polling_interval_s=interval,
        sentinel=sentinel,
        client=client,
        logging=logging_settings,
    )


def find_config_path(environ: Mapping[str, str] | None = None) -> str:
    """Find configuration file"""
    environ = os.environ if environ is None else environ
    if environ.get(ENV_CONFIG_PATH):
        return environ[ENV_CONFIG_PATH]

    for path in DEFAULT_CONFIG_PATHS:
        if Path(path).exists():
            return path

    return DEFAULT_CONFIG_PATHS[0]


def load_config_file(path: str | Path, environ: Mapping[str, str] | None = None) -> ManagerConfig:
    """Read a YAML file and load it into a ManagerConfig"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ConfigFileError(f"config file not found: {path}", path=str(path)) from e
    except yaml.YAMLError as e:
        raise ConfigFileError(f"error parsing {path}: {e}", path=str(path)) from e

    if not isinstance(data, dict):
        raise ConfigFileError(f"{path} must contain a mapping", path=str(path))

    return load_manager_config(data, environ)
