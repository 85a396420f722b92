"""
Configuration accessor module.

Provides typed, cached access to configuration values. Every typed lookup is
memoized in the process-wide container under CONFIG_KEY_PREFIX; a write to
the configuration file evicts the whole prefix so the next lookups read the
reloaded file.
"""

import copy
import logging
import threading
from datetime import timedelta
from typing import Any, List, Optional

from configcache.config.core.exceptions import CONFIG_INIT_FAIL, ConfigError
from configcache.config.core.gate import ChangeGate, ChangeOp, get_change_gate
from configcache.config.core.loader import YamlSource
from configcache.config.core.values import ConfigValue, ValueKind
from configcache.container import ContainerRegistry, create_container_factory

logger = logging.getLogger(__name__)

# Container namespace for cached configuration keys
CONFIG_KEY_PREFIX = 'config_yaml_'


def _detach(value: Any) -> Any:
    """Copy lists and mappings so callers never share the cached object."""
    if isinstance(value, (dict, list)):
        return copy.deepcopy(value)
    return value


class ConfigAccessor:
    """
    Read-through cache over a YAML configuration source.

    The cache namespace is shared by every accessor in the process: two
    accessors over different files that read the same key observe whichever
    value was cached first.
    """

    def __init__(self, source: YamlSource,
                 container: Optional[ContainerRegistry] = None,
                 gate: Optional[ChangeGate] = None):
        """
        Initialize the accessor.

        Args:
            source: Configuration source, already read
            container: Container holding cached values (process-wide by default)
            gate: Debounce gate for change notifications (process-wide by default)
        """
        self._source = source
        self._container = container if container is not None else create_container_factory()
        self._gate = gate if gate is not None else get_change_gate()
        self._lock = threading.Lock()
        self._watching = False

    @property
    def source(self) -> YamlSource:
        return self._source

    # Cache
    def _key_is_cached(self, key: str) -> bool:
        _, exists = self._container.key_exists(CONFIG_KEY_PREFIX + key)
        return exists

    def _cache(self, key: str, value: ConfigValue) -> bool:
        # Only the check-then-set is serialized, so two callers missing the
        # same key never both register it.
        with self._lock:
            if self._key_is_cached(key):
                return True
            return self._container.set(CONFIG_KEY_PREFIX + key, value)

    def _get_value_from_cache(self, key: str) -> Optional[ConfigValue]:
        return self._container.get(CONFIG_KEY_PREFIX + key)

    def _clear_cache(self) -> int:
        return self._container.fuzzy_delete(CONFIG_KEY_PREFIX)

    def _get_typed(self, key: str, kind: ValueKind) -> Any:
        """
        Get a value of the given kind, reading through the cache.

        Raises:
            TypeMismatchError: If the key is cached as another kind
        """
        if self._key_is_cached(key):
            cached = self._get_value_from_cache(key)
            # Evicted between the check and the read
            if cached is not None:
                return _detach(cached.as_kind(kind, key))

        value = self._source.get_typed(key, kind)
        self._cache(key, ConfigValue(kind, value))
        return _detach(value)

    # Typed getters
    def get(self, key: str) -> Any:
        """Get the raw value."""
        return self._get_typed(key, ValueKind.ANY)

    def get_string(self, key: str) -> str:
        """Get a value as a string."""
        return self._get_typed(key, ValueKind.STRING)

    def get_bool(self, key: str) -> bool:
        """Get a value as a bool."""
        return self._get_typed(key, ValueKind.BOOL)

    def get_int(self, key: str) -> int:
        """Get a value as an integer."""
        return self._get_typed(key, ValueKind.INT)

    def get_int32(self, key: str) -> int:
        """Get a value as a 32-bit integer."""
        return self._get_typed(key, ValueKind.INT32)

    def get_int64(self, key: str) -> int:
        """Get a value as a 64-bit integer."""
        return self._get_typed(key, ValueKind.INT64)

    def get_float64(self, key: str) -> float:
        """Get a value as a float."""
        return self._get_typed(key, ValueKind.FLOAT64)

    def get_duration(self, key: str) -> timedelta:
        """Get a value as a duration ("300ms", "1h30m", or nanoseconds)."""
        return self._get_typed(key, ValueKind.DURATION)

    def get_string_slice(self, key: str) -> List[str]:
        """Get a value as a list of strings."""
        return self._get_typed(key, ValueKind.STRING_SLICE)

    # Watching
    def start_watching(self):
        """
        Start evicting the cache when the configuration file is written.

        Calling this again on the same accessor does nothing.
        """
        if self._watching and self._source.is_watching:
            logger.debug(f"Already watching {self._source.config_file}")
            return
        if not self._watching:
            self._source.on_config_change(self._on_config_change)
            self._watching = True
        self._source.watch()

    def stop_watching(self):
        self._source.stop_watching()

    def _on_config_change(self, op: ChangeOp):
        try:
            if self._gate.accept(op, self._clear_cache):
                logger.info(f"Configuration file {self._source.config_file} changed, cache cleared")
        except Exception:
            # Watching continues after a failed eviction
            logger.exception("Failed to clear configuration cache")

    # Cloning
    def clone(self, file_name: str) -> 'ConfigAccessor':
        """
        Create an accessor over another file in the same directory.

        The parsed tree is deep-copied before the copy is pointed at the new
        file, so reloading the clone never touches this accessor's tree. The
        lock, container and gate are shared. If the new file cannot be read,
        the error is logged and the clone keeps the copied tree without a
        file, so it cannot be watched.

        Args:
            file_name: File name without extension

        Returns:
            The cloned accessor, not yet watching
        """
        cloned = copy.copy(self)
        cloned._source = copy.deepcopy(self._source)
        cloned._watching = False

        cloned._source.set_config_name(file_name)
        try:
            cloned._source.read_in_config()
        except ConfigError as e:
            # The copied path still names this accessor's file
            cloned._source.config_file = None
            logger.error(f"{CONFIG_INIT_FAIL}{e}")
        return cloned
