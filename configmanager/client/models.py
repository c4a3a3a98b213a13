"""
Remote setting model and the client protocol the manager consumes.
"""

from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Protocol, runtime_checkable

FEATURE_FLAG_CONTENT_TYPE = "application/vnd.microsoft.appconfig.ff+json"
FEATURE_FLAG_PREFIX = ".appconfig.featureflag/"


@dataclass
class ConfigurationSetting:
    """One key/value as stored on the remote service"""
    key: str
    value: str | None = None
    label: str | None = None
    content_type: str | None = None
    etag: str | None = None
    last_modified: str | None = None
    locked: bool = False
    tags: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ConfigurationSetting":
        return cls(
            key=data["key"],
            value=data.get("value"),
            label=data.get("label"),
            content_type=data.get("content_type"),
            etag=data.get("etag"),
            last_modified=data.get("last_modified"),
            locked=data.get("locked", False),
            tags=data.get("tags") or {},
        )

    @property
    def is_feature_flag(self) -> bool:
        if self.content_type and self.content_type.startswith(FEATURE_FLAG_CONTENT_TYPE):
            return True
        return self.key.startswith(FEATURE_FLAG_PREFIX)


@runtime_checkable
class RemoteConfigClient(Protocol):
    """
    What the manager needs from a remote configuration service.

    get_setting must raise an exception carrying status_code == 404 when
    the setting does not exist.
    """

    async def get_setting(self, key: str, label: str | None = None) -> ConfigurationSetting: ...

    def list_settings(
        self,
        key_filter: str,
        label_filter: str | None = None,
    ) -> AsyncIterator[ConfigurationSetting]: ...
