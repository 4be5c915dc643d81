"""Conversion of typed metadata values into their sidecar string form."""

from __future__ import annotations

import logging
from typing import Dict

import numpy as np

from fsconnector.models import (
    BinaryValue,
    BooleanValue,
    DecimalValue,
    DoubleValue,
    IntegerValue,
    LargeStringValue,
    LongValue,
    Metadata,
    MetadataValue,
    StringArrayValue,
    StringValue,
    TimestampValue,
)

LOGGER = logging.getLogger(__name__)


def _quote(item: str) -> str:
    return '"' + item.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n") + '"'


def format_string_array(values: tuple[str, ...]) -> str:
    return "\n".join(f"values: {_quote(item)}" for item in values)


def format_timestamp(timestamp: TimestampValue) -> str:
    """Render an instant as ISO-8601 UTC, e.g. ``2021-10-01T00:00:00Z``.

    Fractional seconds are omitted when zero and otherwise printed in groups
    of three digits (milli, micro or nano precision).
    """
    base = timestamp.to_datetime().strftime("%Y-%m-%dT%H:%M:%S")
    nanos = timestamp.nanos
    if nanos == 0:
        fraction = ""
    elif nanos % 1_000_000 == 0:
        fraction = f".{nanos // 1_000_000:03d}"
    elif nanos % 1_000 == 0:
        fraction = f".{nanos // 1_000:06d}"
    else:
        fraction = f".{nanos:09d}"
    return f"{base}{fraction}Z"


def format_java_float(number: np.floating) -> str:
    """Render a float the way ``Double.toString`` / ``Float.toString`` do.

    Magnitudes in ``[1e-3, 1e7)`` are plain decimals with at least one
    fractional digit; everything else uses ``<d.ddd>E<exp>``. The digits are
    the shortest that round-trip at the value's own precision.
    """
    if np.isnan(number):
        return "NaN"
    if np.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number == 0:
        return "-0.0" if np.signbit(number) else "0.0"
    if 1e-3 <= abs(float(number)) < 1e7:
        return np.format_float_positional(number, unique=True, trim="0")
    text = np.format_float_scientific(number, unique=True, trim="0")
    mantissa, exponent = text.split("e")
    return f"{mantissa}E{int(exponent)}"


def encode_value(key: str, value: MetadataValue | None) -> str | None:
    """Encode one metadata value; ``None`` means the key should be skipped."""
    match value:
        case StringArrayValue(values=values):
            return format_string_array(values)
        case BinaryValue(value=raw):
            return bytes(raw).hex()
        case BooleanValue(value=flag):
            return "true" if flag else "false"
        case DoubleValue(value=number):
            return format_java_float(np.float64(number))
        case DecimalValue(value=number):
            return format_java_float(np.float32(number))
        case TimestampValue():
            return format_timestamp(value)
        case IntegerValue(value=number) | LongValue(value=number):
            return str(int(number))
        case LargeStringValue(value=text) | StringValue(value=text):
            return text
        case None:
            LOGGER.warning("Incompatible type. No value found for metadata key %s", key)
            return None
        case _:
            raise TypeError(f"Unsupported metadata value for key {key}: {value!r}")


def encode_metadata(metadata: Metadata) -> Dict[str, str]:
    """Encode every entry, dropping keys that have no value."""
    encoded: Dict[str, str] = {}
    for key, value in metadata.items():
        text = encode_value(key, value)
        if text is not None:
            encoded[key] = text
    return encoded
