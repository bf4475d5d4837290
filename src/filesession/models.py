"""Record model for the file-backed session store.

A Record is an expiring, session-like entry: an identifier, a mapping of
application attributes, and the two timestamps that decide whether it is
still alive. Expiry is always computed from those fields, never stored.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

DEFAULT_MAX_INACTIVE_INTERVAL_SECONDS = 1800


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def generate_record_id() -> str:
    """Generate a random record identifier safe to use as a file name."""
    return str(uuid4())


class Record(BaseModel):
    """An expiring record with arbitrary attributes.

    Attributes:
        id: Identifier, also used as the record's file name on disk
        attributes: Application data keyed by attribute name
        creation_time: When the record was created
        last_accessed_time: When the record was last successfully read
        max_inactive_interval: Inactivity allowed before the record expires;
            a negative interval means the record never expires

    Example:
        >>> record = Record(max_inactive_interval=timedelta(minutes=30))
        >>> record.set_attribute("user_id", "u-42")
        >>> record.get_attribute("user_id")
        'u-42'
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=generate_record_id, min_length=1)
    attributes: dict[str, Any] = Field(default_factory=dict)
    creation_time: datetime = Field(default_factory=utc_now)
    last_accessed_time: Optional[datetime] = None
    max_inactive_interval: timedelta = Field(
        default=timedelta(seconds=DEFAULT_MAX_INACTIVE_INTERVAL_SECONDS)
    )

    _original_id: str = PrivateAttr(default="")

    def model_post_init(self, __context: Any) -> None:
        if self.last_accessed_time is None:
            self.last_accessed_time = self.creation_time
        self._original_id = self.id

    @field_validator("id")
    @classmethod
    def validate_id_is_path_segment(cls, value: str) -> str:
        """Validate that the id can be used as a single file name.

        Args:
            value: The id to validate

        Returns:
            The validated id

        Raises:
            ValueError: If the id contains a path separator or is a dot name
        """
        if "/" in value or "\\" in value or value in (".", ".."):
            raise ValueError(f"Record id '{value}' is not a valid file name")
        return value

    @field_validator("creation_time", "last_accessed_time")
    @classmethod
    def ensure_aware(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Treat naive timestamps as UTC so expiry arithmetic never mixes kinds."""
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def original_id(self) -> str:
        """Id the record was created or loaded under, before any change_id()."""
        return self._original_id

    @property
    def attribute_names(self) -> set[str]:
        return set(self.attributes)

    def get_attribute(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    def set_attribute(self, name: str, value: Any) -> None:
        """Set an attribute value; setting None removes the attribute."""
        if value is None:
            self.remove_attribute(name)
        else:
            self.attributes[name] = value

    def remove_attribute(self, name: str) -> None:
        self.attributes.pop(name, None)

    def change_id(self) -> str:
        """Rotate the record id to a fresh random value.

        The previous id stays available as ``original_id`` until the record
        is written, so the store can remove the file stored under it.

        Returns:
            The new id
        """
        self.id = generate_record_id()
        return self.id

    def mark_persisted(self) -> None:
        """Forget the previous id once the record is stored under its current one."""
        self._original_id = self.id

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check whether the record has been inactive for too long.

        Args:
            now: Reference time (defaults to the current UTC time)

        Returns:
            True if ``now - last_accessed_time`` exceeds the inactivity interval
        """
        if self.max_inactive_interval < timedelta(0):
            return False
        now = now or utc_now()
        assert self.last_accessed_time is not None
        return now - self.last_accessed_time > self.max_inactive_interval
