"""
Configuration core modules.

Contains the main configuration components:
- create_config: Factory loading a file into a cached accessor
- ConfigAccessor: Typed, cached access with reload on file change
- YamlSource: Reads and watches a YAML file
- ChangeGate: Debounces duplicate change notifications
"""

from configcache.config.core.exceptions import (
    ConfigError,
    ConfigInitError,
    ConfigFileNotFoundError,
    ConfigParseError,
    TypeMismatchError,
)
from configcache.config.core.values import ConfigValue, ValueKind
from configcache.config.core.gate import (
    DEFAULT_DEBOUNCE_SECONDS,
    ChangeGate,
    ChangeOp,
    get_change_gate,
    set_change_gate,
)
from configcache.config.core.loader import YamlSource
from configcache.config.core.accessor import CONFIG_KEY_PREFIX, ConfigAccessor
from configcache.config.core.factory import create_config, get_config_dir

__all__ = [
    'ConfigError',
    'ConfigInitError',
    'ConfigFileNotFoundError',
    'ConfigParseError',
    'TypeMismatchError',
    'ConfigValue',
    'ValueKind',
    'DEFAULT_DEBOUNCE_SECONDS',
    'ChangeGate',
    'ChangeOp',
    'get_change_gate',
    'set_change_gate',
    'YamlSource',
    'CONFIG_KEY_PREFIX',
    'ConfigAccessor',
    'create_config',
    'get_config_dir',
]
