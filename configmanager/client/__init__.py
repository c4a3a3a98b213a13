"""
Remote configuration client.
"""

from .app_config import AppConfigurationClient
from .auth import Credentials, HmacCredentialAuth, parse_connection_string
from .models import ConfigurationSetting, RemoteConfigClient

__all__ = [
    "AppConfigurationClient",
    "ConfigurationSetting",
    "Credentials",
    "HmacCredentialAuth",
    "RemoteConfigClient",
    "parse_connection_string",
]
