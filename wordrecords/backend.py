"""
Pluggable storage backend factory.

Creates the key-value store based on configuration. Built-in backends are
``sqlite`` (a file in the store directory) and ``memory``. External backends
register via the ``wordrecords.backends`` entry point group.

External backend packages provide a factory function::

    def create_store(config: StoreConfig) -> KeyValueStoreProtocol:
        ...

and register it in their pyproject.toml::

    [project.entry-points."wordrecords.backends"]
    my-backend = "my_package.backend:create_store"
"""

from .config import StoreConfig
from .protocol import KeyValueStoreProtocol

SQLITE_FILENAME = "records.db"


def create_store(config: StoreConfig) -> KeyValueStoreProtocol:
    """Create the key-value store named by ``config.backend``."""
    if config.backend == "sqlite":
        from .sqlite_store import SqliteKeyValueStore
        return SqliteKeyValueStore(config.path / SQLITE_FILENAME)
    if config.backend == "memory":
        from .memory_store import MemoryKeyValueStore
        return MemoryKeyValueStore()
    return _load_backend(config.backend, config)


def _load_backend(name: str, config: StoreConfig) -> KeyValueStoreProtocol:
    """Load a backend by entry point name."""
    from importlib.metadata import entry_points

    eps = entry_points(group="wordrecords.backends")
    for ep in eps:
        if ep.name == name:
            factory = ep.load()
            return factory(config)

    available = [ep.name for ep in eps]
    if available:
        raise ValueError(
            f"Unknown backend: {name!r}. Available: sqlite, memory, {', '.join(available)}"
        )
    raise ValueError(
        f"Unknown backend: {name!r}. Available: sqlite, memory"
    )
