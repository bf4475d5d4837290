"""Tests for Prometheus metrics collection."""

from pathlib import Path

import pytest

from conftest import FakeClock
from filesession.errors import StorageWriteError
from filesession.observability.metrics import (
    get_metrics_collector,
    record_deletes_total,
    record_reads_total,
    record_writes_total,
    sweeps_total,
)
from filesession.store import RecordStore


def counter_value(counter, **labels) -> float:  # type: ignore[no-untyped-def]
    """Read the current value of a (labelled) counter."""
    target = counter.labels(**labels) if labels else counter
    return target._value.get()  # type: ignore[attr-defined]


class TestMetricsCollector:
    """Tests for MetricsCollector class."""

    def test_get_metrics_collector_returns_singleton(self) -> None:
        """get_metrics_collector should return same instance each time."""
        assert get_metrics_collector() is get_metrics_collector()

    def test_record_read_increments_counter(self) -> None:
        """record_read should increment the counter for the outcome."""
        before = counter_value(record_reads_total, outcome="corrupt")

        get_metrics_collector().record_read("corrupt")

        assert counter_value(record_reads_total, outcome="corrupt") == before + 1

    def test_generate_metrics_exposes_store_metrics(self) -> None:
        """generate_metrics should include the store's metric names."""
        get_metrics_collector().record_write("success")

        output = get_metrics_collector().generate_metrics().decode("utf-8")

        assert "filesession_writes_total" in output
        assert "filesession_sweep_duration_seconds" in output


class TestStoreMetrics:
    """Tests for metrics emitted by RecordStore operations."""

    def test_read_outcomes_are_counted(self, store: RecordStore, clock: FakeClock) -> None:
        """Found and expired reads should be counted separately."""
        found_before = counter_value(record_reads_total, outcome="found")
        expired_before = counter_value(record_reads_total, outcome="expired")

        record = store.create()
        store.write(record)
        store.read(record.id)
        clock.advance(61)
        store.read(record.id)

        assert counter_value(record_reads_total, outcome="found") == found_before + 1
        assert counter_value(record_reads_total, outcome="expired") == expired_before + 1

    def test_failed_write_is_counted(self, store: RecordStore) -> None:
        """A failed write should increment the failed counter."""
        before = counter_value(record_writes_total, status="failed")
        record = store.create()
        record.set_attribute("bad", object())

        with pytest.raises(StorageWriteError):
            store.write(record)

        assert counter_value(record_writes_total, status="failed") == before + 1

    def test_delete_statuses_are_counted(self, store: RecordStore, storage_dir: Path) -> None:
        """Deletes should be counted as deleted, missing or failed."""
        deleted_before = counter_value(record_deletes_total, status="deleted")
        missing_before = counter_value(record_deletes_total, status="missing")
        failed_before = counter_value(record_deletes_total, status="failed")

        record = store.create()
        store.write(record)
        store.delete(record.id)
        store.delete(record.id)
        (storage_dir / "stuck").mkdir()
        store.delete("stuck")

        assert counter_value(record_deletes_total, status="deleted") == deleted_before + 1
        assert counter_value(record_deletes_total, status="missing") == missing_before + 1
        assert counter_value(record_deletes_total, status="failed") == failed_before + 1

    def test_sweep_is_counted(self, store: RecordStore) -> None:
        """Each sweep should increment the sweep counter."""
        before = counter_value(sweeps_total)

        store.sweep()

        assert counter_value(sweeps_total) == before + 1
