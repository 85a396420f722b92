"""
Configuration loader module.

Reads a single YAML configuration file, resolves dotted keys against it and
watches the file for changes.
"""

import copy
import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import yaml
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from configcache.config.core.exceptions import (
    CONFIG_RELOAD_FAIL,
    ConfigError,
    ConfigFileNotFoundError,
    ConfigParseError,
)
from configcache.config.core.gate import ChangeOp
from configcache.config.core.values import CONVERTERS, ValueKind

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ('yaml', 'yml')


def _lower_keys(node: Any) -> Any:
    """Recursively lower-case mapping keys so lookups are case-insensitive."""
    if isinstance(node, dict):
        return {str(key).lower(): _lower_keys(value) for key, value in node.items()}
    if isinstance(node, list):
        return [_lower_keys(item) for item in node]
    return node


class _ConfigFileEventHandler(FileSystemEventHandler):
    """Maps filesystem events on the configuration file to change ops."""

    def __init__(self, source: 'YamlSource'):
        self.source = source

    def _is_config_file(self, path) -> bool:
        return self.source.matches(os.fsdecode(path))

    def on_modified(self, event: FileSystemEvent):
        if not event.is_directory and self._is_config_file(event.src_path):
            self.source.handle_change(ChangeOp.WRITE)

    def on_created(self, event: FileSystemEvent):
        if not event.is_directory and self._is_config_file(event.src_path):
            self.source.handle_change(ChangeOp.CREATE)

    def on_moved(self, event: FileSystemEvent):
        if event.is_directory:
            return
        if self._is_config_file(event.dest_path):
            self.source.handle_change(ChangeOp.CREATE)
        elif self._is_config_file(event.src_path):
            self.source.handle_change(ChangeOp.RENAME)

    def on_deleted(self, event: FileSystemEvent):
        if not event.is_directory and self._is_config_file(event.src_path):
            self.source.handle_change(ChangeOp.REMOVE)


class YamlSource:
    """
    A parsed YAML configuration file.

    Looks up raw values by dotted key and converts them with the typed getters.
    Keys are matched case-insensitively. Missing keys are not an error; they
    yield the zero value of the requested type.
    """

    def __init__(self, config_dir, config_name: str = 'config'):
        """
        Initialize the source. Nothing is read until read_in_config().

        Args:
            config_dir: Directory containing configuration files
            config_name: File name without extension
        """
        self.config_dir = Path(config_dir)
        self.config_name = config_name
        self.config_file: Optional[Path] = None
        self._tree: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[ChangeOp], None]] = []
        self._observer: Optional[Observer] = None

    def set_config_name(self, config_name: str):
        """Point the source at another file in the same directory."""
        self.config_name = config_name

    def find_config_file(self) -> Path:
        """
        Find the configuration file for the current name.

        Raises:
            ConfigFileNotFoundError: If no file with a supported extension exists
        """
        for extension in SUPPORTED_EXTENSIONS:
            candidate = self.config_dir / f'{self.config_name}.{extension}'
            if candidate.is_file():
                return candidate
        raise ConfigFileNotFoundError(
            f"Config file \"{self.config_name}\" not found in {self.config_dir}"
        )

    def read_in_config(self):
        """
        Read and parse the configuration file, replacing the current tree.

        The current tree is kept when reading fails.

        Raises:
            ConfigFileNotFoundError: If the file does not exist
            ConfigParseError: If the file is not valid YAML or not a mapping
        """
        file_path = self.find_config_file()
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigParseError(f"Error parsing YAML file {file_path}: {e}") from e
        except OSError as e:
            raise ConfigParseError(f"Error reading configuration file {file_path}: {e}") from e

        if content is None:
            content = {}
        if not isinstance(content, dict):
            raise ConfigParseError(
                f"Configuration root in {file_path} must be a mapping, "
                f"got {type(content).__name__}"
            )

        tree = _lower_keys(content)
        with self._lock:
            self._tree = tree
            self.config_file = file_path
        logger.debug(f"Loaded configuration from {file_path}")

    def get(self, key: str) -> Any:
        """
        Get the raw value at a dotted key.

        Args:
            key: Dotted key such as "server.port"

        Returns:
            The raw value, or None when any part of the path is missing
        """
        with self._lock:
            node: Any = self._tree
        for part in key.lower().split('.'):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        # The parsed tree is never handed out
        if isinstance(node, (dict, list)):
            return copy.deepcopy(node)
        return node

    def get_typed(self, key: str, kind: ValueKind) -> Any:
        """Get the value at a dotted key converted to the given kind."""
        return CONVERTERS[kind](self.get(key))

    def get_string(self, key: str) -> str:
        return self.get_typed(key, ValueKind.STRING)

    def get_bool(self, key: str) -> bool:
        return self.get_typed(key, ValueKind.BOOL)

    def get_int(self, key: str) -> int:
        return self.get_typed(key, ValueKind.INT)

    def get_int32(self, key: str) -> int:
        return self.get_typed(key, ValueKind.INT32)

    def get_int64(self, key: str) -> int:
        return self.get_typed(key, ValueKind.INT64)

    def get_float64(self, key: str) -> float:
        return self.get_typed(key, ValueKind.FLOAT64)

    def get_duration(self, key: str):
        return self.get_typed(key, ValueKind.DURATION)

    def get_string_slice(self, key: str) -> List[str]:
        return self.get_typed(key, ValueKind.STRING_SLICE)

    # Watching
    def on_config_change(self, callback: Callable[[ChangeOp], None]):
        """Register a callback run after the file changes."""
        self._callbacks.append(callback)

    @property
    def is_watching(self) -> bool:
        return self._observer is not None

    def matches(self, path: str) -> bool:
        """Check whether a path refers to the loaded configuration file."""
        if self.config_file is None:
            return False
        return os.path.realpath(path) == os.path.realpath(self.config_file)

    def watch(self):
        """
        Start watching the configuration file in a background observer thread.

        Raises:
            ConfigError: If the file has not been read yet
        """
        if self._observer is not None:
            return
        if self.config_file is None:
            raise ConfigError("Cannot watch a configuration that has not been read")

        observer = Observer()
        observer.schedule(_ConfigFileEventHandler(self), str(self.config_file.parent), recursive=False)
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.info(f"Watching configuration file {self.config_file}")

    def stop_watching(self, timeout: float = 5.0):
        """Stop the observer thread."""
        observer = self._observer
        if observer is None:
            return
        self._observer = None
        observer.stop()
        if observer is not threading.current_thread():
            observer.join(timeout=timeout)

    def handle_change(self, op: ChangeOp):
        """
        React to a change of the configuration file.

        Writes and creations reload the file before the callbacks run; a
        failed reload is logged and the previous tree is kept. Removal of the
        file ends the watch without notifying callbacks.
        """
        if op is ChangeOp.REMOVE:
            logger.warning(f"Configuration file {self.config_file} was removed, stopping watch")
            self.stop_watching()
            return

        if op in (ChangeOp.WRITE, ChangeOp.CREATE):
            try:
                self.read_in_config()
            except ConfigError as e:
                logger.error(f"{CONFIG_RELOAD_FAIL}{e}")

        for callback in list(self._callbacks):
            callback(op)

    def __deepcopy__(self, memo):
        """Copy file settings and the parsed tree; watchers are not copied."""
        clone = self.__class__.__new__(self.__class__)
        clone.config_dir = self.config_dir
        clone.config_name = self.config_name
        clone.config_file = self.config_file
        with self._lock:
            clone._tree = copy.deepcopy(self._tree, memo)
        clone._lock = threading.Lock()
        clone._callbacks = []
        clone._observer = None
        return clone
