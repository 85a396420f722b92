"""
Process-wide key-value container.

Holds arbitrary values under string keys. Used by the configuration cache to
memoize typed lookups, and open to any other consumer that keeps its keys
under its own prefix.
"""

import logging
import threading
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class ContainerRegistry:
    """
    Thread-safe mapping from string keys to registered values.

    A key can only be registered once; it must be deleted before it can be
    registered again.
    """

    def __init__(self):
        self._items: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def set(self, key: str, value: Any) -> bool:
        """
        Register a value under a key.

        Args:
            key: Key to register
            value: Value to store

        Returns:
            True if the value was stored, False if the key was already registered
        """
        with self._lock:
            if key in self._items:
                logger.warning(f"Key already registered in container, ignoring set: {key}")
                return False
            self._items[key] = value
            return True

    def get(self, key: str) -> Optional[Any]:
        """Get the value registered under a key, or None."""
        with self._lock:
            return self._items.get(key)

    def key_exists(self, key: str) -> Tuple[Any, bool]:
        """
        Check whether a key is registered.

        Returns:
            Tuple of (value, exists); value is None when the key is absent
        """
        with self._lock:
            if key in self._items:
                return self._items[key], True
            return None, False

    def fuzzy_delete(self, prefix: str) -> int:
        """
        Delete every key starting with a prefix.

        Args:
            prefix: Key prefix to evict

        Returns:
            Number of keys deleted
        """
        with self._lock:
            doomed = [key for key in self._items if key.startswith(prefix)]
            for key in doomed:
                del self._items[key]
        logger.debug(f"Evicted {len(doomed)} container keys with prefix '{prefix}'")
        return len(doomed)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


# Module-level container shared by the whole process
_container: Optional[ContainerRegistry] = None
_container_lock = threading.Lock()


def create_container_factory() -> ContainerRegistry:
    """Get the process-wide container, creating it on first use."""
    global _container
    with _container_lock:
        if _container is None:
            _container = ContainerRegistry()
        return _container
