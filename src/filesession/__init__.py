"""filesession - durable file-backed store for expiring session-like records."""

from filesession.config import StoreConfig, get_default_config, load_config_from_env
from filesession.errors import (
    CorruptRecordError,
    RecordStoreError,
    StorageConfigurationError,
    StorageWriteError,
)
from filesession.models import Record
from filesession.store import ReadOutcome, RecordStore, SweepResult

__version__ = "0.1.0"

__all__ = [
    "Record",
    "RecordStore",
    "ReadOutcome",
    "SweepResult",
    "StoreConfig",
    "get_default_config",
    "load_config_from_env",
    "RecordStoreError",
    "StorageConfigurationError",
    "StorageWriteError",
    "CorruptRecordError",
]
