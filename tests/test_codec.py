"""Tests for the metadata value codec."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from fsconnector.metadata.codec import (
    encode_metadata,
    encode_value,
    format_java_float,
    format_timestamp,
)
from fsconnector.models import (
    BinaryValue,
    BooleanValue,
    DecimalValue,
    DoubleValue,
    IntegerValue,
    LargeStringValue,
    LongValue,
    StringArrayValue,
    StringValue,
    TimestampValue,
)


class TestEncodeValue:
    """Test encode_value for every variant."""

    def test_array(self) -> None:
        """Arrays render one values line per element."""
        value = StringArrayValue(("val1", "val2"))

        assert encode_value("arrayKey", value) == 'values: "val1"\nvalues: "val2"'

    def test_array_escapes_quotes(self) -> None:
        """Quotes and backslashes inside items are escaped."""
        value = StringArrayValue(('say "hi"', "a\\b"))

        assert encode_value("arrayKey", value) == 'values: "say \\"hi\\""\nvalues: "a\\\\b"'

    def test_empty_array(self) -> None:
        """An empty array encodes to an empty string, not to no value."""
        assert encode_value("arrayKey", StringArrayValue(())) == ""

    def test_binary(self) -> None:
        """Binary values encode as lowercase hex."""
        assert encode_value("binaryKey", BinaryValue(bytes.fromhex("AC89"))) == "ac89"

    def test_boolean(self) -> None:
        assert encode_value("booleanKey", BooleanValue(True)) == "true"
        assert encode_value("booleanKey", BooleanValue(False)) == "false"

    def test_double(self) -> None:
        assert encode_value("doubleKey", DoubleValue(123.456)) == "123.456"

    def test_decimal(self) -> None:
        """Decimals are single precision and print their shortest form."""
        assert encode_value("decimalKey", DecimalValue(789.01)) == "789.01"

    def test_timestamp(self) -> None:
        value = TimestampValue(seconds=1633046400, nanos=0)

        assert encode_value("dateTimeKey", value) == "2021-10-01T00:00:00Z"

    def test_integer(self) -> None:
        assert encode_value("integerKey", IntegerValue(42)) == "42"

    def test_large_string(self) -> None:
        value = LargeStringValue("This is a large string")

        assert encode_value("largeStringKey", value) == "This is a large string"

    def test_long(self) -> None:
        assert encode_value("longKey", LongValue(123456789)) == "123456789"

    def test_string(self) -> None:
        assert encode_value("stringKey", StringValue("simpleString")) == "simpleString"

    def test_empty_entry(self, caplog: pytest.LogCaptureFixture) -> None:
        """An entry without a variant yields no value and a warning."""
        with caplog.at_level(logging.WARNING):
            assert encode_value("emptyKey", None) is None

        assert "emptyKey" in caplog.text

    def test_unsupported_type(self) -> None:
        """Values outside the union are rejected."""
        with pytest.raises(TypeError, match="oddKey"):
            encode_value("oddKey", 3.5)  # type: ignore[arg-type]


class TestFormatJavaFloat:
    """Test the Java-style float rendering."""

    @pytest.mark.parametrize(
        ("number", "expected"),
        [
            (1e16, "1.0E16"),
            (1e7, "1.0E7"),
            (1e-5, "1.0E-5"),
            (9999999.0, "9999999.0"),
            (0.001, "0.001"),
            (5.0, "5.0"),
            (-2.5, "-2.5"),
            (0.0, "0.0"),
            (-0.0, "-0.0"),
            (float("nan"), "NaN"),
            (float("inf"), "Infinity"),
            (float("-inf"), "-Infinity"),
        ],
    )
    def test_double(self, number: float, expected: str) -> None:
        assert format_java_float(np.float64(number)) == expected

    def test_single_precision_digits(self) -> None:
        """Single precision values print the digits of the 32-bit value."""
        assert format_java_float(np.float32(0.1)) == "0.1"
        assert format_java_float(np.float32(1.5e10)) == "1.5E10"

    def test_large_values_through_encode(self) -> None:
        assert encode_value("doubleKey", DoubleValue(1e16)) == "1.0E16"
        assert encode_value("decimalKey", DecimalValue(1e7)) == "1.0E7"


class TestFormatTimestamp:
    """Test ISO-8601 rendering of timestamps."""

    @pytest.mark.parametrize(
        ("nanos", "expected"),
        [
            (0, "2021-10-01T00:00:00Z"),
            (500_000_000, "2021-10-01T00:00:00.500Z"),
            (1_500_000, "2021-10-01T00:00:00.001500Z"),
            (123, "2021-10-01T00:00:00.000000123Z"),
        ],
    )
    def test_fraction_precision(self, nanos: int, expected: str) -> None:
        """Fractions are printed in groups of three digits."""
        assert format_timestamp(TimestampValue(1633046400, nanos)) == expected

    def test_epoch(self) -> None:
        assert format_timestamp(TimestampValue(0)) == "1970-01-01T00:00:00Z"


class TestEncodeMetadata:
    """Test encode_metadata."""

    def test_drops_empty_entries(self) -> None:
        """Keys whose value encodes to nothing are skipped."""
        metadata = {
            "fileNumber": IntegerValue(5),
            "fileCreator": StringValue("user1"),
            "empty": None,
        }

        assert encode_metadata(metadata) == {"fileNumber": "5", "fileCreator": "user1"}

    def test_empty_mapping(self) -> None:
        assert encode_metadata({}) == {}
