"""
Custom Exception Classes for the Configuration Manager

Hierarchical exception structure shared by the client, manager and runner.
"""


class ConfigManagerError(Exception):
    """Base exception for all configuration manager errors"""

    def __init__(self, message: str, recoverable: bool = True):
        self.message = message
        self.recoverable = recoverable
        super().__init__(message)


class OptionsError(ConfigManagerError):
    """Invalid manager options (builder / factory validation)"""

    def __init__(self, message: str):
        super().__init__(f"Options Error: {message}", recoverable=False)


class ConfigFileError(ConfigManagerError):
    """Local configuration file could not be read or is malformed"""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(f"Config Error: {message}", recoverable=False)


class ConnectionStringError(ConfigFileError):
    """Connection string is missing a required segment"""

    def __init__(self, message: str):
        super().__init__(f"Connection string: {message}")


class RemoteConfigError(ConfigManagerError):
    """Remote configuration service request failed"""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        key: str | None = None,
    ):
        self.status_code = status_code
        self.key = key
        super().__init__(f"Remote Error: {message}", recoverable=True)


class SettingNotFoundError(RemoteConfigError):
    """Requested setting does not exist on the remote service"""

    def __init__(self, key: str, label: str | None = None):
        self.label = label
        where = f"{key} (label: {label})" if label else key
        super().__init__(f"setting not found: {where}", status_code=404, key=key)
