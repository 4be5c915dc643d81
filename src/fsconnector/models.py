"""Core connector data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import BinaryIO, Dict, Tuple, Union


@dataclass(frozen=True, slots=True)
class Document:
    """A filesystem item as seen by the repository host."""

    id: str
    name: str
    created: datetime
    modified: datetime
    mime_type: str
    size: int
    parent_path: str


@dataclass(slots=True)
class BinaryDetails:
    """Binary content of one document paired with its MIME type."""

    document_id: str
    stream: BinaryIO
    mime_type: str


@dataclass(frozen=True, slots=True)
class StringValue:
    value: str


@dataclass(frozen=True, slots=True)
class LargeStringValue:
    value: str


@dataclass(frozen=True, slots=True)
class IntegerValue:
    value: int


@dataclass(frozen=True, slots=True)
class LongValue:
    value: int


@dataclass(frozen=True, slots=True)
class DoubleValue:
    value: float


@dataclass(frozen=True, slots=True)
class DecimalValue:
    """Single precision float, as carried on the wire."""

    value: float


@dataclass(frozen=True, slots=True)
class BooleanValue:
    value: bool


@dataclass(frozen=True, slots=True)
class BinaryValue:
    value: bytes


@dataclass(frozen=True, slots=True)
class StringArrayValue:
    values: Tuple[str, ...]


@dataclass(frozen=True, slots=True)
class TimestampValue:
    """Instant expressed as epoch seconds plus nanoseconds."""

    seconds: int
    nanos: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.nanos < 1_000_000_000:
            raise ValueError(f"nanos must be in [0, 999999999], got {self.nanos}")

    @classmethod
    def from_datetime(cls, moment: datetime) -> "TimestampValue":
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        delta = moment - datetime(1970, 1, 1, tzinfo=timezone.utc)
        seconds = delta.days * 86400 + delta.seconds
        return cls(seconds=seconds, nanos=delta.microseconds * 1000)

    def to_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.seconds, tz=timezone.utc).replace(
            microsecond=self.nanos // 1000
        )


MetadataValue = Union[
    StringValue,
    LargeStringValue,
    IntegerValue,
    LongValue,
    DoubleValue,
    DecimalValue,
    BooleanValue,
    BinaryValue,
    StringArrayValue,
    TimestampValue,
]

# ``None`` stands for an entry whose variant was never populated.
Metadata = Dict[str, Union[MetadataValue, None]]
