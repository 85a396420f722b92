"""
Shared key-value container.
"""

from configcache.container.registry import ContainerRegistry, create_container_factory

__all__ = [
    'ContainerRegistry',
    'create_container_factory',
]
