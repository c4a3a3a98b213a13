"""
Manager Options

Immutable option set for a ConfigManager, built through a validating
factory.
"""

import math
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Callable, Iterable, Mapping

from configmanager.common.config import ConfigFilter, SentinelConfigKey
from configmanager.common.exceptions import OptionsError
from configmanager.common.logging_setup import ManagerLogger, NullLogger, resolve_manager_logger

from .parser import ParsedEntry

UpdateListener = Callable[[list[ParsedEntry]], Any]


@dataclass(frozen=True)
class ManagerOptions:
    """Everything a ConfigManager needs besides the client"""
    name: str
    filters: tuple[ConfigFilter, ...] = ()
    polling_interval_s: float | None = None
    sentinel_key: SentinelConfigKey | None = None
    logger: ManagerLogger = field(default_factory=NullLogger)
    on_update: UpdateListener | None = None

    @property
    def polling_enabled(self) -> bool:
        return bool(self.polling_interval_s)


def _coerce_filter(item: Any) -> ConfigFilter:
    if isinstance(item, ConfigFilter):
        return item
    if isinstance(item, Mapping):
        try:
            return ConfigFilter.from_mapping(item)
        except ValueError as e:
            raise OptionsError(str(e)) from e
    raise OptionsError(f"filters must be ConfigFilter or mapping, got {type(item).__name__}")


def _coerce_sentinel(item: Any) -> SentinelConfigKey | None:
    if item is None or isinstance(item, SentinelConfigKey):
        return item
    if isinstance(item, Mapping):
        try:
            return SentinelConfigKey.from_mapping(item)
        except ValueError as e:
            raise OptionsError(str(e)) from e
    raise OptionsError(f"sentinel key must be SentinelConfigKey or mapping, got {type(item).__name__}")


def create_manager_options(
    name: str,
    filters: Iterable[ConfigFilter | Mapping[str, Any]] = (),
    polling_interval_s: float | None = None,
    sentinel_key: SentinelConfigKey | Mapping[str, Any] | None = None,
    logger: Any = None,
    on_update: UpdateListener | None = None,
) -> ManagerOptions:
    """
    Validate and freeze manager options.

    Args:
        name: Manager name, prefixed to every log line
        filters: Ordered key/label filters (may be empty)
        polling_interval_s: Seconds between refreshes; None or 0 disables polling
        sentinel_key: Optional change-signal setting
        logger: None, a stdlib logger, or an object with debug/info/warn/error
        on_update: Called with the new snapshot after every completed refresh

    Raises:
        OptionsError: on any invalid option
    """
    if not isinstance(name, str) or not name.strip():
        raise OptionsError("manager name must be a non-empty string")

    if isinstance(filters, (str, bytes, Mapping)) or filters is None:
        raise OptionsError("filters must be a sequence of filters")
    coerced_filters = tuple(_coerce_filter(f) for f in filters)

    if polling_interval_s is not None:
        if isinstance(polling_interval_s, bool) or not isinstance(polling_interval_s, Real):
            raise OptionsError(f"polling interval must be a number, got {polling_interval_s!r}")
        if not math.isfinite(polling_interval_s):
            raise OptionsError(f"polling interval must be finite, got {polling_interval_s}")
        if polling_interval_s < 0:
            raise OptionsError(f"polling interval must not be negative, got {polling_interval_s}")
        polling_interval_s = float(polling_interval_s) or None

    if on_update is not None and not callable(on_update):
        raise OptionsError("update listener must be callable")

    return ManagerOptions(
        name=name,
        filters=coerced_filters,
        polling_interval_s=polling_interval_s,
        sentinel_key=_coerce_sentinel(sentinel_key),
        logger=resolve_manager_logger(logger),
        on_update=on_update,
    )
