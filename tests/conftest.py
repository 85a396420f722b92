"""
Shared pytest fixtures for all tests.

Provides reusable fixtures for:
- Temporary configuration directories
- Isolated containers and change gates
- A controllable clock
"""

import os
import shutil
import tempfile

import pytest
import yaml

from configcache.config import ChangeGate, create_config
from configcache.config.core.accessor import CONFIG_KEY_PREFIX
from configcache.container import ContainerRegistry, create_container_factory


SAMPLE_CONFIG = {
    'server': {
        'port': 8080,
        'name': 'svc',
        'debug': True,
        'timeout': '1m30s',
        'ratio': 0.75,
        'hosts': ['a.example.com', 'b.example.com'],
        'Region': 'EU',
    },
    'workers': 4,
}

OTHER_CONFIG = {
    'server': {
        'port': 9090,
        'name': 'other',
    },
    'database': {
        'host': 'db.internal',
    },
}


class FakeClock:
    """Manually advanced clock for ChangeGate tests."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def write_yaml(path, content):
    """Write a dict as YAML."""
    with open(path, 'w') as f:
        yaml.dump(content, f)


@pytest.fixture
def temp_config_dir():
    """
    Temporary base directory with configs/config.yaml and configs/other.yaml.

    Yields (base_dir, config_dir).
    """
    temp_dir = tempfile.mkdtemp()
    config_dir = os.path.join(temp_dir, 'configs')
    os.makedirs(config_dir)

    write_yaml(os.path.join(config_dir, 'config.yaml'), SAMPLE_CONFIG)
    write_yaml(os.path.join(config_dir, 'other.yaml'), OTHER_CONFIG)

    yield temp_dir, config_dir

    shutil.rmtree(temp_dir)


@pytest.fixture
def container():
    """Fresh container, isolated from the process-wide one."""
    return ContainerRegistry()


@pytest.fixture
def clock():
    """Fake clock starting well before t=0."""
    return FakeClock(start=-10.0)


@pytest.fixture
def gate(clock):
    """Change gate driven by the fake clock."""
    return ChangeGate(window=1.0, clock=clock)


@pytest.fixture
def config(temp_config_dir, container, gate):
    """Accessor over config.yaml with an isolated container and gate."""
    _, config_dir = temp_config_dir
    return create_config('config', config_dir=config_dir, container=container, gate=gate)


@pytest.fixture
def write_config(temp_config_dir):
    """Write a dict as <config_dir>/<name>.yaml and return the path."""
    _, config_dir = temp_config_dir

    def _write(name: str, content: dict) -> str:
        path = os.path.join(config_dir, f'{name}.yaml')
        write_yaml(path, content)
        return path

    return _write


@pytest.fixture(autouse=True)
def clear_process_container():
    """Evict cached configuration keys from the process-wide container."""
    yield
    create_container_factory().fuzzy_delete(CONFIG_KEY_PREFIX)
