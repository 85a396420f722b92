"""
Unit tests for the YAML configuration source.
"""

import copy
import os
from datetime import timedelta

import pytest
from watchdog.events import (
    DirModifiedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from configcache.config.core.exceptions import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigParseError,
)
from configcache.config.core.gate import ChangeOp
from configcache.config.core.loader import YamlSource, _ConfigFileEventHandler


@pytest.fixture
def source(temp_config_dir):
    _, config_dir = temp_config_dir
    source = YamlSource(config_dir, 'config')
    source.read_in_config()
    return source


@pytest.mark.unit
class TestReadInConfig:
    """Loading configuration files."""

    def test_reads_yaml_file(self, source, temp_config_dir):
        _, config_dir = temp_config_dir
        assert str(source.config_file) == os.path.join(config_dir, 'config.yaml')
        assert source.get('server.port') == 8080

    def test_finds_yml_extension(self, temp_config_dir):
        _, config_dir = temp_config_dir
        with open(os.path.join(config_dir, 'legacy.yml'), 'w') as f:
            f.write('feature:\n  enabled: true\n')

        source = YamlSource(config_dir, 'legacy')
        source.read_in_config()
        assert source.get_bool('feature.enabled') is True

    def test_missing_file_raises(self, temp_config_dir):
        _, config_dir = temp_config_dir
        source = YamlSource(config_dir, 'nope')
        with pytest.raises(ConfigFileNotFoundError):
            source.read_in_config()

    def test_invalid_yaml_raises(self, temp_config_dir):
        _, config_dir = temp_config_dir
        with open(os.path.join(config_dir, 'broken.yaml'), 'w') as f:
            f.write('server: [unclosed\n')

        with pytest.raises(ConfigParseError):
            YamlSource(config_dir, 'broken').read_in_config()

    def test_non_mapping_root_raises(self, temp_config_dir):
        _, config_dir = temp_config_dir
        with open(os.path.join(config_dir, 'list.yaml'), 'w') as f:
            f.write('- a\n- b\n')

        with pytest.raises(ConfigParseError):
            YamlSource(config_dir, 'list').read_in_config()

    def test_empty_file_is_empty_tree(self, temp_config_dir):
        _, config_dir = temp_config_dir
        open(os.path.join(config_dir, 'empty.yaml'), 'w').close()

        source = YamlSource(config_dir, 'empty')
        source.read_in_config()
        assert source.get('anything') is None

    def test_failed_reload_keeps_tree(self, source, temp_config_dir):
        _, config_dir = temp_config_dir
        with open(os.path.join(config_dir, 'config.yaml'), 'w') as f:
            f.write('server: [unclosed\n')

        with pytest.raises(ConfigParseError):
            source.read_in_config()
        assert source.get_int('server.port') == 8080


@pytest.mark.unit
class TestLookup:
    """Dotted key lookup and typed getters."""

    def test_nested_lookup(self, source):
        assert source.get('server')['name'] == 'svc'
        assert source.get_string('server.name') == 'svc'
        assert source.get_int('workers') == 4

    def test_returned_mapping_is_a_copy(self, source):
        source.get('server')['port'] = 1
        source.get('server.hosts').append('c.example.com')

        assert source.get_int('server.port') == 8080
        assert source.get('server.hosts') == ['a.example.com', 'b.example.com']

    def test_lookup_is_case_insensitive(self, source):
        assert source.get_string('server.region') == 'EU'
        assert source.get_string('SERVER.Region') == 'EU'

    def test_missing_key_is_none(self, source):
        assert source.get('server.missing') is None
        assert source.get('server.port.deeper') is None
        assert source.get_int('server.missing') == 0
        assert source.get_string_slice('server.missing') == []

    def test_typed_getters(self, source):
        assert source.get_bool('server.debug') is True
        assert source.get_float64('server.ratio') == 0.75
        assert source.get_duration('server.timeout') == timedelta(seconds=90)
        assert source.get_string_slice('server.hosts') == ['a.example.com', 'b.example.com']
        assert source.get_int32('server.port') == 8080
        assert source.get_int64('server.port') == 8080
        assert source.get_string('server.port') == '8080'


@pytest.mark.unit
class TestEventHandler:
    """Mapping of filesystem events to change ops."""

    @pytest.fixture
    def recorded(self, source, monkeypatch):
        ops = []
        monkeypatch.setattr(source, 'handle_change', ops.append)
        return ops

    def test_event_mapping(self, source, recorded, temp_config_dir):
        _, config_dir = temp_config_dir
        path = os.path.join(config_dir, 'config.yaml')
        elsewhere = os.path.join(config_dir, 'config.yaml.swp')
        handler = _ConfigFileEventHandler(source)

        handler.on_modified(FileModifiedEvent(path))
        handler.on_created(FileCreatedEvent(path))
        handler.on_moved(FileMovedEvent(elsewhere, path))
        handler.on_moved(FileMovedEvent(path, elsewhere))
        handler.on_deleted(FileDeletedEvent(path))

        assert recorded == [
            ChangeOp.WRITE,
            ChangeOp.CREATE,
            ChangeOp.CREATE,
            ChangeOp.RENAME,
            ChangeOp.REMOVE,
        ]

    def test_ignores_other_files_and_directories(self, source, recorded, temp_config_dir):
        _, config_dir = temp_config_dir
        handler = _ConfigFileEventHandler(source)

        handler.on_modified(FileModifiedEvent(os.path.join(config_dir, 'other.yaml')))
        handler.on_modified(DirModifiedEvent(config_dir))

        assert recorded == []


@pytest.mark.unit
class TestHandleChange:
    """Reload and callback behaviour on change notifications."""

    def test_write_reloads_before_callbacks(self, source, write_config):
        seen = []
        source.on_config_change(lambda op: seen.append((op, source.get_int('server.port'))))

        write_config('config', {'server': {'port': 9000}})
        source.handle_change(ChangeOp.WRITE)

        assert seen == [(ChangeOp.WRITE, 9000)]

    def test_rename_notifies_without_reload(self, source, write_config):
        seen = []
        source.on_config_change(seen.append)

        write_config('config', {'server': {'port': 9000}})
        source.handle_change(ChangeOp.RENAME)

        assert seen == [ChangeOp.RENAME]
        assert source.get_int('server.port') == 8080

    def test_failed_reload_still_notifies(self, source, temp_config_dir, caplog):
        _, config_dir = temp_config_dir
        seen = []
        source.on_config_change(seen.append)
        with open(os.path.join(config_dir, 'config.yaml'), 'w') as f:
            f.write('server: [unclosed\n')

        source.handle_change(ChangeOp.WRITE)

        assert seen == [ChangeOp.WRITE]
        assert source.get_int('server.port') == 8080
        assert 'reload failed' in caplog.text

    def test_remove_stops_without_notifying(self, source):
        seen = []
        source.on_config_change(seen.append)

        source.handle_change(ChangeOp.REMOVE)

        assert seen == []
        assert source.is_watching is False

    def test_watch_requires_loaded_file(self, temp_config_dir):
        _, config_dir = temp_config_dir
        with pytest.raises(ConfigError):
            YamlSource(config_dir, 'config').watch()


@pytest.mark.unit
def test_deepcopy_isolates_tree(source, write_config):
    source.on_config_change(lambda op: None)
    copied = copy.deepcopy(source)

    write_config('other_port', {'server': {'port': 1}})
    copied.set_config_name('other_port')
    copied.read_in_config()

    assert copied.get_int('server.port') == 1
    assert source.get_int('server.port') == 8080
    assert source.config_name == 'config'
    assert copied._callbacks == []
    assert copied.is_watching is False
