"""
Typed, cached access to YAML configuration files with live reload.
"""

from configcache.config import (
    ConfigError,
    ConfigInitError,
    TypeMismatchError,
    ChangeGate,
    ChangeOp,
    YamlSource,
    ConfigAccessor,
    create_config,
)
from configcache.container import ContainerRegistry, create_container_factory

__version__ = '0.1.0'

__all__ = [
    'ConfigError',
    'ConfigInitError',
    'TypeMismatchError',
    'ChangeGate',
    'ChangeOp',
    'YamlSource',
    'ConfigAccessor',
    'create_config',
    'ContainerRegistry',
    'create_container_factory',
]
