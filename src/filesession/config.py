"""Record store configuration models and utilities.

This module provides the configuration surface of the store: where records
live, how long they survive without access, and which cleanup policies
are active.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from filesession.models import DEFAULT_MAX_INACTIVE_INTERVAL_SECONDS

ENV_PREFIX = "FILESESSION_"


def default_storage_directory() -> Path:
    """Default storage root: ``sess`` inside the system temporary directory."""
    return Path(tempfile.gettempdir()) / "sess"


class StoreConfig(BaseModel):
    """Configuration for a RecordStore.

    Attributes:
        storage_directory: Directory holding one file per record
        default_timeout_seconds: Inactivity timeout for new records
            (negative means records never expire)
        clean_expired_on_startup: Sweep the directory on first access and
            again once per timeout window
        clean_unreadable: Delete files that cannot be decoded as records

    Example:
        >>> config = StoreConfig(
        ...     storage_directory=Path("/var/lib/app/sessions"),
        ...     default_timeout_seconds=900,
        ...     clean_expired_on_startup=True,
        ... )
    """

    model_config = ConfigDict(frozen=True)

    storage_directory: Path = Field(
        default_factory=default_storage_directory, description="Record file directory"
    )
    default_timeout_seconds: int = Field(
        default=DEFAULT_MAX_INACTIVE_INTERVAL_SECONDS,
        description="Inactivity timeout in seconds (negative = never expire)",
    )
    clean_expired_on_startup: bool = Field(
        default=False, description="Opportunistically sweep expired records"
    )
    clean_unreadable: bool = Field(default=True, description="Delete unreadable record files")


def get_default_config() -> StoreConfig:
    """Get the default store configuration.

    Returns:
        StoreConfig with default values
    """
    return StoreConfig()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config_from_env(env_file: Optional[Path] = None) -> StoreConfig:
    """Load store configuration from environment variables.

    Loads a ``.env`` file first (if present) and then reads:
        - FILESESSION_STORAGE_DIRECTORY
        - FILESESSION_DEFAULT_TIMEOUT_SECONDS
        - FILESESSION_CLEAN_EXPIRED_ON_STARTUP
        - FILESESSION_CLEAN_UNREADABLE

    Args:
        env_file: Optional path to a .env file (defaults to dotenv discovery)

    Returns:
        StoreConfig built from the environment, with defaults for unset values

    Raises:
        ValueError: If FILESESSION_DEFAULT_TIMEOUT_SECONDS is not an integer

    Example:
        >>> os.environ["FILESESSION_DEFAULT_TIMEOUT_SECONDS"] = "600"
        >>> load_config_from_env().default_timeout_seconds
        600
    """
    load_dotenv(dotenv_path=env_file)

    directory = os.getenv(f"{ENV_PREFIX}STORAGE_DIRECTORY")
    timeout = os.getenv(f"{ENV_PREFIX}DEFAULT_TIMEOUT_SECONDS")

    return StoreConfig(
        storage_directory=Path(directory) if directory else default_storage_directory(),
        default_timeout_seconds=(
            int(timeout) if timeout else DEFAULT_MAX_INACTIVE_INTERVAL_SECONDS
        ),
        clean_expired_on_startup=_env_bool(f"{ENV_PREFIX}CLEAN_EXPIRED_ON_STARTUP", False),
        clean_unreadable=_env_bool(f"{ENV_PREFIX}CLEAN_UNREADABLE", True),
    )
