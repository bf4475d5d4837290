"""Versioned on-disk document format for records.

Each record is stored as a UTF-8 JSON document tagged with a format name
and a schema version. Anything that does not decode into a supported
document is reported as a CorruptRecordError so the store can apply its
corruption policy.
"""

import json
from datetime import datetime, timedelta
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError

from filesession.errors import CorruptRecordError
from filesession.models import Record

FORMAT_NAME = "filesession.record"
FORMAT_VERSION = 1


class RecordDocument(BaseModel):
    """Schema of a stored record document (version 1).

    Attributes:
        format: Fixed document tag identifying a record file
        version: Schema version; any other version is treated as corrupt
        id: Record identifier, must match the file name
        attributes: Record attributes
        creation_time: Record creation timestamp
        last_accessed_time: Last access timestamp
        max_inactive_interval_seconds: Inactivity timeout in seconds
    """

    model_config = ConfigDict(extra="forbid")

    format: Literal["filesession.record"]
    version: Literal[1]
    id: str
    attributes: dict[str, Any]
    creation_time: datetime
    last_accessed_time: datetime
    max_inactive_interval_seconds: float

    @classmethod
    def from_record(cls, record: Record) -> "RecordDocument":
        assert record.last_accessed_time is not None
        return cls(
            format=FORMAT_NAME,
            version=FORMAT_VERSION,
            id=record.id,
            attributes=record.attributes,
            creation_time=record.creation_time,
            last_accessed_time=record.last_accessed_time,
            max_inactive_interval_seconds=record.max_inactive_interval.total_seconds(),
        )

    def to_record(self) -> Record:
        return Record(
            id=self.id,
            attributes=self.attributes,
            creation_time=self.creation_time,
            last_accessed_time=self.last_accessed_time,
            max_inactive_interval=timedelta(seconds=self.max_inactive_interval_seconds),
        )


def encode_record(record: Record) -> bytes:
    """Serialize a record into its on-disk representation.

    Args:
        record: Record to serialize

    Returns:
        UTF-8 encoded JSON document

    Raises:
        TypeError: If an attribute value is not JSON-serializable
        ValueError: If an attribute value cannot be encoded (e.g. circular)
    """
    document = RecordDocument.from_record(record)
    payload = document.model_dump(mode="python")
    payload["creation_time"] = document.creation_time.isoformat()
    payload["last_accessed_time"] = document.last_accessed_time.isoformat()
    return json.dumps(payload, allow_nan=False, sort_keys=True).encode("utf-8")


def decode_record(data: bytes) -> Record:
    """Reconstruct a record from its on-disk representation.

    Args:
        data: Raw file content

    Returns:
        The decoded Record

    Raises:
        CorruptRecordError: If the content is not a supported record document
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CorruptRecordError(f"not valid UTF-8: {e}") from e

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise CorruptRecordError(f"not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise CorruptRecordError(f"expected a JSON object, got {type(raw).__name__}")

    try:
        document = RecordDocument.model_validate(raw)
        return document.to_record()
    except ValidationError as e:
        raise CorruptRecordError(
            f"invalid record document ({e.error_count()} validation errors)"
        ) from e
    except (ValueError, OverflowError) as e:
        raise CorruptRecordError(f"invalid record values: {e}") from e
