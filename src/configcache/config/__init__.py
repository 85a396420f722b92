"""
Configuration package.

Provides typed, cached access to a YAML configuration file.

Main entry point:
    from configcache.config import create_config

    config = create_config()
    port = config.get_int('server.port')
"""

# Re-export main components for convenience
from configcache.config.core import (
    ConfigError,
    ConfigInitError,
    TypeMismatchError,
    ChangeGate,
    ChangeOp,
    YamlSource,
    ConfigAccessor,
    create_config,
)

__all__ = [
    'ConfigError',
    'ConfigInitError',
    'TypeMismatchError',
    'ChangeGate',
    'ChangeOp',
    'YamlSource',
    'ConfigAccessor',
    'create_config',
]
