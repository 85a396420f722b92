"""
Configuration factory module.

Creates configuration accessors over files in the configuration directory.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from configcache.config.core.accessor import ConfigAccessor
from configcache.config.core.exceptions import CONFIG_INIT_FAIL, ConfigError
from configcache.config.core.gate import ChangeGate
from configcache.config.core.loader import YamlSource
from configcache.container import ContainerRegistry

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = 'config'
CONFIG_DIR_NAME = 'configs'


def get_base_path() -> Path:
    """Get the application base path (CONFIGCACHE_BASE_PATH, or the working directory)."""
    return Path(os.getenv('CONFIGCACHE_BASE_PATH', os.getcwd()))


def get_config_dir() -> Path:
    """Get the directory configuration files are loaded from."""
    return get_base_path() / CONFIG_DIR_NAME


def create_config(file_name: Optional[str] = None,
                  config_dir=None,
                  container: Optional[ContainerRegistry] = None,
                  gate: Optional[ChangeGate] = None) -> ConfigAccessor:
    """
    Load a configuration file and wrap it in a cached accessor.

    A configuration that cannot be loaded is fatal: the error is logged and
    the process exits.

    Args:
        file_name: File name without extension (defaults to "config")
        config_dir: Directory to load from (defaults to <base path>/configs)
        container: Container for cached values (process-wide by default)
        gate: Debounce gate for change notifications (process-wide by default)

    Returns:
        ConfigAccessor over the loaded file

    Raises:
        SystemExit: If the file cannot be read or parsed
    """
    source = YamlSource(config_dir if config_dir is not None else get_config_dir(),
                        file_name or DEFAULT_CONFIG_NAME)
    try:
        source.read_in_config()
    except ConfigError as e:
        logger.critical(f"{CONFIG_INIT_FAIL}{e}")
        raise SystemExit(f"{CONFIG_INIT_FAIL}{e}") from e

    return ConfigAccessor(source, container=container, gate=gate)
