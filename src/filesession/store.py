"""File-backed record store with lazy expiry and opportunistic cleanup.

Each record lives in its own file named after the record id. Reading a
record is also where expiry and corruption are enforced: a record that is
expired, unreadable, or stored under the wrong name is deleted and reported
as missing. The sweep simply applies that same read to every file in the
storage directory.
"""

import os
import tempfile
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from filesession.codec import decode_record, encode_record
from filesession.config import StoreConfig, default_storage_directory
from filesession.errors import CorruptRecordError, StorageConfigurationError, StorageWriteError
from filesession.models import DEFAULT_MAX_INACTIVE_INTERVAL_SECONDS, Record, utc_now
from filesession.observability.logging import get_logger, operation_context
from filesession.observability.metrics import get_metrics_collector

logger = get_logger(__name__)

Clock = Callable[[], datetime]
Timeout = Union[int, float, timedelta]

STAGING_DIRECTORY_NAME = ".staging"


class ReadOutcome(str, Enum):
    """Internal result of loading a record file.

    Callers of RecordStore.read only ever see a record or None; the
    distinction between the three non-found outcomes is kept for logging
    and metrics.
    """

    FOUND = "found"
    NOT_FOUND = "not_found"
    CORRUPT = "corrupt"
    EXPIRED = "expired"


@dataclass
class SweepResult:
    """Summary of a sweep over the storage directory.

    Attributes:
        kept: Records that are still valid
        expired: Expired records that were deleted
        corrupt: Unreadable or mismatched files that were found
        skipped: Entries that were not regular files or vanished mid-sweep
    """

    kept: int = 0
    expired: int = 0
    corrupt: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        return self.kept + self.expired + self.corrupt + self.skipped

    def add(self, outcome: ReadOutcome) -> None:
        if outcome is ReadOutcome.FOUND:
            self.kept += 1
        elif outcome is ReadOutcome.EXPIRED:
            self.expired += 1
        elif outcome is ReadOutcome.CORRUPT:
            self.corrupt += 1
        else:
            self.skipped += 1


def _as_timedelta(timeout: Timeout) -> timedelta:
    if isinstance(timeout, timedelta):
        return timeout
    return timedelta(seconds=timeout)


class RecordStore:
    """Durable key-value store for expiring session-like records.

    Records are stored one per file inside the storage directory. All work,
    including sweeps, runs synchronously on the calling thread.

    Concurrency: the opportunistic sweep deadline is guarded by a lock so
    only one caller per timeout window triggers a sweep. Read-modify-write
    sequences on the same record id are not coordinated: a write racing with
    an expiry-triggered delete of the same id is settled by whichever
    filesystem operation happens last.

    Attributes:
        clean_expired_on_startup: Sweep on first directory access and then
            at most once per timeout window
        clean_unreadable: Delete record files that cannot be decoded

    Example:
        >>> store = RecordStore("/var/lib/app/sessions", default_timeout=900)
        >>> record = store.create()
        >>> record.set_attribute("user_id", "u-42")
        >>> store.write(record)
        >>> store.read(record.id).get_attribute("user_id")
        'u-42'
    """

    def __init__(
        self,
        storage_directory: Optional[Union[str, Path]] = None,
        default_timeout: Timeout = DEFAULT_MAX_INACTIVE_INTERVAL_SECONDS,
        clean_expired_on_startup: bool = False,
        clean_unreadable: bool = True,
        clock: Optional[Clock] = None,
    ) -> None:
        """Initialize the record store.

        Args:
            storage_directory: Directory for record files; validated when given,
                otherwise ``sess`` under the system temp directory is used
            default_timeout: Inactivity timeout for new records (seconds or timedelta)
            clean_expired_on_startup: Enable the opportunistic sweep
            clean_unreadable: Delete files that fail to decode
            clock: Zero-argument callable returning the current aware UTC time

        Raises:
            StorageConfigurationError: If storage_directory is given and unusable
        """
        self._clock: Clock = clock or utc_now
        self._default_timeout = _as_timedelta(default_timeout)
        self.clean_expired_on_startup = clean_expired_on_startup
        self.clean_unreadable = clean_unreadable

        self._sweep_lock = threading.Lock()
        self._next_sweep_deadline = self._clock()
        self._storage_directory = default_storage_directory().absolute()

        if storage_directory is not None:
            self.set_storage_directory(storage_directory)

    @classmethod
    def from_config(cls, config: StoreConfig, clock: Optional[Clock] = None) -> "RecordStore":
        """Create a store from a StoreConfig.

        Args:
            config: Store configuration
            clock: Optional clock override

        Returns:
            Configured RecordStore
        """
        return cls(
            storage_directory=config.storage_directory,
            default_timeout=config.default_timeout_seconds,
            clean_expired_on_startup=config.clean_expired_on_startup,
            clean_unreadable=config.clean_unreadable,
            clock=clock,
        )

    @property
    def default_timeout(self) -> timedelta:
        return self._default_timeout

    @default_timeout.setter
    def default_timeout(self, value: Timeout) -> None:
        self._default_timeout = _as_timedelta(value)

    def create(self) -> Record:
        """Create a new record without touching the filesystem.

        Returns:
            Unpersisted Record accessed "now" with the default timeout
        """
        return Record(creation_time=self._clock(), max_inactive_interval=self._default_timeout)

    def set_storage_directory(self, path: Union[str, Path]) -> None:
        """Point the store at a new storage directory.

        The directory is created if missing. A successful change schedules
        a sweep on the next directory access when the sweep policy is on.

        Args:
            path: Storage directory path

        Raises:
            StorageConfigurationError: If the path is empty, not a directory,
                cannot be created or is not writable
        """
        if path is None or str(path) == "":
            raise StorageConfigurationError(str(path), "path is empty")

        directory = Path(path).expanduser().absolute()
        if not directory.is_dir():
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageConfigurationError(directory, f"cannot create directory: {e}") from e

        if not os.access(directory, os.W_OK):
            raise StorageConfigurationError(directory, "directory is not writable")

        with self._sweep_lock:
            self._storage_directory = directory
            self._next_sweep_deadline = self._clock()

    @property
    def storage_directory(self) -> Path:
        """Storage directory, recreated if missing.

        When the sweep policy is enabled and the sweep deadline has passed,
        this also runs a sweep before returning.
        """
        directory = self._ensure_directory()
        if self.clean_expired_on_startup and self._claim_sweep():
            self._sweep(directory)
        return directory

    @property
    def configured_directory(self) -> Path:
        """Configured storage directory, without creating it or triggering a sweep."""
        return self._storage_directory

    def _ensure_directory(self) -> Path:
        directory = self._storage_directory
        if not directory.is_dir():
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.warning("storage_directory_unavailable", path=str(directory), error=str(e))
        return directory

    def _claim_sweep(self) -> bool:
        """Atomically check the sweep deadline and advance it when due."""
        with self._sweep_lock:
            now = self._clock()
            if self._next_sweep_deadline > now:
                return False
            cooldown = self._default_timeout
            if cooldown <= timedelta(0):
                cooldown = timedelta(seconds=DEFAULT_MAX_INACTIVE_INTERVAL_SECONDS)
            self._next_sweep_deadline = now + cooldown
            return True

    def sweep(self) -> SweepResult:
        """Apply the read-time expiry and corruption checks to every record file.

        Returns:
            Counts of kept, expired, corrupt and skipped entries
        """
        return self._sweep(self._ensure_directory())

    def _sweep(self, directory: Path) -> SweepResult:
        result = SweepResult()
        started = time.perf_counter()

        with operation_context("sweep", directory=str(directory)):
            try:
                entries = list(directory.iterdir())
            except OSError as e:
                logger.warning("sweep_listing_failed", path=str(directory), error=str(e))
                return result

            for entry in entries:
                if not entry.is_file():
                    result.skipped += 1
                    continue
                outcome, _ = self._load(directory, entry.name)
                result.add(outcome)

            duration = time.perf_counter() - started
            logger.info(
                "sweep_completed",
                kept=result.kept,
                expired=result.expired,
                corrupt=result.corrupt,
                skipped=result.skipped,
                duration_seconds=round(duration, 4),
            )

        get_metrics_collector().record_sweep(duration)
        return result

    def list_ids(self) -> list[str]:
        """List ids of all record files without reading them.

        Returns:
            Sorted list of file names of regular files in the storage directory
        """
        directory = self.storage_directory
        try:
            return sorted(entry.name for entry in directory.iterdir() if entry.is_file())
        except OSError as e:
            logger.warning("storage_listing_failed", path=str(directory), error=str(e))
            return []

    def write(self, record: Record) -> None:
        """Persist a record, replacing any existing file with the same id.

        If the record's id was rotated since it was created or loaded, the
        file stored under the previous id is removed after the write.

        Args:
            record: Record to persist

        Raises:
            StorageWriteError: If the record cannot be serialized or written
        """
        directory = self.storage_directory
        target = directory / record.id
        metrics = get_metrics_collector()

        try:
            payload = encode_record(record)
        except (TypeError, ValueError) as e:
            logger.error("record_serialize_failed", record_id=record.id, error=str(e))
            metrics.record_write("failed")
            raise StorageWriteError(record.id, target, f"serialization failed: {e}") from e

        try:
            self._write_file_atomic(directory, target, payload)
        except OSError as e:
            logger.error(
                "record_write_failed", record_id=record.id, path=str(target), exc_info=True
            )
            metrics.record_write("failed")
            raise StorageWriteError(record.id, target, str(e)) from e

        metrics.record_write("success")
        if record.original_id != record.id:
            self._remove(directory / record.original_id, record.original_id)
        record.mark_persisted()

    def _write_file_atomic(self, directory: Path, target_path: Path, content: bytes) -> None:
        """Write file atomically using a staging file + rename.

        The staging file lives in a sub-directory of the storage directory so
        the rename stays on one filesystem and sweeps never see partial files.

        Raises:
            OSError: If write or rename operation fails
        """
        staging = directory / STAGING_DIRECTORY_NAME
        staging.mkdir(exist_ok=True)

        temp_fd = None
        temp_path = None

        try:
            temp_fd = tempfile.NamedTemporaryFile(
                mode="wb",
                dir=staging,
                delete=False,
                prefix=f"{target_path.name}.",
                suffix=".tmp",
            )
            temp_path = Path(temp_fd.name)

            temp_fd.write(content)
            temp_fd.flush()
            os.fsync(temp_fd.fileno())

            temp_fd.close()
            temp_fd = None

            temp_path.replace(target_path)
            temp_path = None

        finally:
            if temp_fd is not None:
                try:
                    temp_fd.close()
                except OSError:
                    pass

            if temp_path is not None and temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    pass  # Best effort cleanup

    def read(self, record_id: str) -> Optional[Record]:
        """Read a record by id.

        Expired, unreadable and mismatched records are deleted and reported
        as missing. A found record has its last access time refreshed in
        memory only; call write() to persist the refreshed time.

        Args:
            record_id: Record identifier

        Returns:
            The record if present and valid, None otherwise
        """
        _, record = self._load(self.storage_directory, record_id)
        if record is None:
            return None
        record.last_accessed_time = self._clock()
        return record

    def _load(self, directory: Path, record_id: str) -> tuple[ReadOutcome, Optional[Record]]:
        outcome, record = self._load_file(directory, record_id)
        get_metrics_collector().record_read(outcome.value)
        return outcome, record

    def _load_file(self, directory: Path, record_id: str) -> tuple[ReadOutcome, Optional[Record]]:
        path = directory / record_id
        try:
            is_file = path.is_file()
        except OSError as e:
            # e.g. ENAMETOOLONG for oversized ids
            logger.warning(
                "record_unreadable", record_id=record_id[:64], path=str(directory), error=str(e)
            )
            return ReadOutcome.NOT_FOUND, None
        if not is_file:
            logger.warning("record_not_a_file", record_id=record_id, path=str(path))
            return ReadOutcome.NOT_FOUND, None

        try:
            record = decode_record(path.read_bytes())
        except FileNotFoundError:
            # Deleted between the check and the read
            return ReadOutcome.NOT_FOUND, None
        except (OSError, CorruptRecordError) as e:
            logger.warning("record_unreadable", record_id=record_id, path=str(path), error=str(e))
            if self.clean_unreadable:
                self._remove(path, record_id)
            return ReadOutcome.CORRUPT, None

        if record.id != record_id:
            logger.warning(
                "record_id_mismatch", record_id=record_id, stored_id=record.id, path=str(path)
            )
            self._remove(path, record_id)
            return ReadOutcome.CORRUPT, None

        if record.is_expired(self._clock()):
            logger.debug("record_expired", record_id=record_id)
            self._remove(path, record_id)
            return ReadOutcome.EXPIRED, None

        return ReadOutcome.FOUND, record

    def delete(self, record_id: str) -> None:
        """Delete a record file; a missing file is not an error.

        Args:
            record_id: Record identifier
        """
        self._remove(self.storage_directory / record_id, record_id)

    def _remove(self, path: Path, record_id: str) -> None:
        metrics = get_metrics_collector()
        try:
            path.unlink()
        except FileNotFoundError:
            metrics.record_delete("missing")
            return
        except OSError as e:
            logger.warning(
                "record_delete_failed",
                record_id=record_id,
                path=str(path),
                error=str(e),
            )
            metrics.record_delete("failed")
            return
        metrics.record_delete("deleted")
