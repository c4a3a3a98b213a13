"""
Configuration Manager

Responsibilities:
- Fetch settings for a list of key/label filters
- Skip refreshes while the sentinel value is unchanged
- Poll on a fixed interval until stopped
- Notify a listener after each completed refresh
"""

from .builder import ConfigManagerBuilder
from .manager import ConfigManager
from .options import ManagerOptions, create_manager_options
from .parser import ParsedEntry, ValueKind, parse_configuration_setting, parse_setting

__all__ = [
    "ConfigManager",
    "ConfigManagerBuilder",
    "ManagerOptions",
    "ParsedEntry",
    "ValueKind",
    "create_manager_options",
    "parse_configuration_setting",
    "parse_setting",
]
