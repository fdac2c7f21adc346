"""
Configuration management for word record stores.

The configuration is stored as a TOML file in the store directory.
It specifies the storage backend and the rollover/eviction limits.
"""

import os
import tomllib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import tomli_w

from .types import MAX_RECORD_SETS, ROLLOVER_WORD_COUNT


CONFIG_FILENAME = "wordrecords.toml"
CONFIG_VERSION = 1

DEFAULT_BACKEND = "sqlite"

STORE_PATH_ENV = "WORDRECORDS_STORE_PATH"


def get_default_store_path() -> Path:
    """Store directory from WORDRECORDS_STORE_PATH, else ~/.wordrecords."""
    env_path = os.environ.get(STORE_PATH_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".wordrecords"


@dataclass
class Limits:
    """When to roll over to a new RecordSet and how many sets to keep."""
    rollover_word_count: int = ROLLOVER_WORD_COUNT
    max_record_sets: int = MAX_RECORD_SETS

    def __post_init__(self):
        for name in ("rollover_word_count", "max_record_sets"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")


@dataclass
class StoreConfig:
    """Complete store configuration."""
    path: Path
    version: int = CONFIG_VERSION
    created: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    backend: str = DEFAULT_BACKEND
    limits: Limits = field(default_factory=Limits)

    @property
    def config_path(self) -> Path:
        """Path to the TOML config file."""
        return self.path / CONFIG_FILENAME

    def exists(self) -> bool:
        """Check if config file exists."""
        return self.config_path.exists()


def load_config(store_path: Path) -> StoreConfig:
    """
    Load configuration from a store directory.

    Raises:
        FileNotFoundError: If config doesn't exist
        ValueError: If config is invalid
    """
    config_path = store_path / CONFIG_FILENAME

    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid config {config_path}: {e}") from e

    store = data.get("store", {})
    version = store.get("version", 1)
    if version > CONFIG_VERSION:
        raise ValueError(f"Config version {version} is newer than supported ({CONFIG_VERSION})")

    limits = data.get("limits", {})
    return StoreConfig(
        path=store_path,
        version=version,
        created=store.get("created", ""),
        backend=store.get("backend", DEFAULT_BACKEND),
        limits=Limits(
            rollover_word_count=limits.get("rollover_word_count", ROLLOVER_WORD_COUNT),
            max_record_sets=limits.get("max_record_sets", MAX_RECORD_SETS),
        ),
    )


def save_config(config: StoreConfig) -> None:
    """
    Save configuration to the store directory.

    Creates the directory if it doesn't exist.
    """
    config.path.mkdir(parents=True, exist_ok=True)

    data = {
        "store": {
            "version": config.version,
            "created": config.created,
            "backend": config.backend,
        },
        "limits": {
            "rollover_word_count": config.limits.rollover_word_count,
            "max_record_sets": config.limits.max_record_sets,
        },
    }

    with open(config.config_path, "wb") as f:
        tomli_w.dump(data, f)


def load_or_create_config(
    store_path: Optional[Path] = None,
    *,
    backend: Optional[str] = None,
) -> StoreConfig:
    """
    Load existing config or create a new one with defaults.

    This is the main entry point for config management. ``backend`` only
    applies when the config is created.
    """
    store_path = Path(store_path) if store_path is not None else get_default_store_path()

    if (store_path / CONFIG_FILENAME).exists():
        return load_config(store_path)

    config = StoreConfig(path=store_path, backend=backend or DEFAULT_BACKEND)
    save_config(config)
    return config
