"""
Custom exceptions for configuration module.
"""

# Message prefixes used when logging configuration failures
CONFIG_INIT_FAIL = "Configuration file initialization failed: "
CONFIG_RELOAD_FAIL = "Configuration file reload failed: "


class ConfigError(Exception):
    """Base exception for configuration errors."""
    pass


class ConfigInitError(ConfigError):
    """Exception raised when a configuration file cannot be read."""
    pass


class ConfigFileNotFoundError(ConfigInitError):
    """Exception raised when no configuration file matches the configured name."""
    pass


class ConfigParseError(ConfigInitError):
    """Exception raised when a configuration file is not a valid YAML mapping."""
    pass


class TypeMismatchError(ConfigError, TypeError):
    """
    Exception raised when a cached value is requested as a different type
    than the one it was cached with.
    """

    def __init__(self, key: str, cached_kind, requested_kind):
        self.key = key
        self.cached_kind = cached_kind
        self.requested_kind = requested_kind
        super().__init__(
            f"Config key '{key}' is cached as {cached_kind.value}, "
            f"cannot read it as {requested_kind.value}"
        )
