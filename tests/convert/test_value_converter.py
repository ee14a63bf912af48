from __future__ import annotations

import datetime as dt
import math
import uuid
from decimal import Decimal
from enum import Enum

import pytest

from recordloader.domain.convert.converter import ValueConverter, split_elements
from recordloader.domain.field_types import FieldKind, FieldType
from recordloader.domain.models import FormatConfig
from recordloader.errors import ConfigurationError, ConversionError


class Color(Enum):
    RED = "r"
    GREEN = "g"


def _converter() -> ValueConverter:
    return ValueConverter(
        FormatConfig(
            delimiter=",",
            date_pattern="yyyy-MM-dd",
            datetime_pattern="yyyy-MM-dd HH:mm:ss",
            time_pattern="HH:mm",
        )
    )


def _t(kind: FieldKind) -> FieldType:
    return FieldType(kind=kind)


@pytest.mark.parametrize("kind", list(FieldKind))
def test_empty_cell_is_none_for_every_kind(kind):
    converter = _converter()
    assert converter.convert(_t(kind), "") is None
    assert converter.convert(_t(kind), None) is None


def test_signed_integer_widths():
    converter = _converter()
    assert converter.convert(_t(FieldKind.INT8), "127") == 127
    assert converter.convert(_t(FieldKind.INT8), "-128") == -128
    assert converter.convert(_t(FieldKind.INT16), "-32768") == -32768
    assert converter.convert(_t(FieldKind.INT32), "+42") == 42
    assert converter.convert(_t(FieldKind.INT64), "9223372036854775807") == 2**63 - 1


@pytest.mark.parametrize(
    "kind,raw",
    [
        (FieldKind.INT8, "128"),
        (FieldKind.INT16, "40000"),
        (FieldKind.INT32, "2147483648"),
        (FieldKind.INT64, "9223372036854775808"),
        (FieldKind.INT32, "4.2"),
        (FieldKind.INT32, "1_000"),
        (FieldKind.INT32, "abc"),
    ],
)
def test_integer_rejects_out_of_range_and_garbage(kind, raw):
    with pytest.raises(ConversionError) as exc_info:
        _converter().convert(_t(kind), raw)
    assert exc_info.value.raw_value == raw
    assert exc_info.value.target_type == kind.value


def test_bigint_is_unbounded():
    value = _converter().convert(_t(FieldKind.BIGINT), "123456789012345678901234567890")
    assert value == 123456789012345678901234567890


def test_floats():
    converter = _converter()
    assert converter.convert(_t(FieldKind.FLOAT64), "1.5") == 1.5
    assert converter.convert(_t(FieldKind.FLOAT64), "1e3") == 1000.0
    assert converter.convert(_t(FieldKind.FLOAT64), "-.5") == -0.5
    assert math.isnan(converter.convert(_t(FieldKind.FLOAT64), "NaN"))
    assert converter.convert(_t(FieldKind.FLOAT64), "-Infinity") == -math.inf


def test_float32_is_rounded_to_single_precision():
    value = _converter().convert(_t(FieldKind.FLOAT32), "0.1")
    assert value != 0.1
    assert abs(value - 0.1) < 1e-7
    assert _converter().convert(_t(FieldKind.FLOAT32), "1e39") == math.inf
    assert _converter().convert(_t(FieldKind.FLOAT32), "-1e39") == -math.inf


def test_float_rejects_garbage():
    with pytest.raises(ConversionError):
        _converter().convert(_t(FieldKind.FLOAT64), "1.2.3")


@pytest.mark.parametrize("raw", ["yes", "1", "garbage", "false", "FALSE", "tru"])
def test_bool_never_fails_and_defaults_to_false(raw):
    result = _converter().try_convert(_t(FieldKind.BOOL), raw)
    assert result.ok
    assert result.value is False


@pytest.mark.parametrize("raw", ["true", "TRUE", "True"])
def test_bool_true_is_case_insensitive(raw):
    assert _converter().convert(_t(FieldKind.BOOL), raw) is True


def test_char_takes_first_character():
    assert _converter().convert(_t(FieldKind.CHAR), "hello") == "h"


def test_decimal_is_exact():
    converter = _converter()
    assert converter.convert(_t(FieldKind.DECIMAL), "1.10") == Decimal("1.10")
    assert str(converter.convert(_t(FieldKind.DECIMAL), "1.10")) == "1.10"
    assert converter.convert(_t(FieldKind.DECIMAL), "2.5E+3") == Decimal("2500")
    for raw in ("NaN", "1,5", "abc"):
        with pytest.raises(ConversionError):
            converter.convert(_t(FieldKind.DECIMAL), raw)


def test_temporal_kinds_use_configured_patterns():
    converter = _converter()
    assert converter.convert(_t(FieldKind.DATE), "2024-02-29") == dt.date(2024, 2, 29)
    assert converter.convert(_t(FieldKind.DATETIME), "2024-01-02 03:04:05") == dt.datetime(2024, 1, 2, 3, 4, 5)
    assert converter.convert(_t(FieldKind.TIME), "07:30") == dt.time(7, 30)


def test_malformed_date_fails():
    with pytest.raises(ConversionError) as exc_info:
        _converter().convert(_t(FieldKind.DATE), "not-a-date")
    assert exc_info.value.raw_value == "not-a-date"
    assert exc_info.value.target_type == "date"
    assert isinstance(exc_info.value.cause, ValueError)


def test_date_in_other_format_fails():
    with pytest.raises(ConversionError):
        _converter().convert(_t(FieldKind.DATE), "29.02.2024")


def test_instant_uses_fixed_iso_format():
    converter = _converter()
    utc = dt.timezone.utc
    assert converter.convert(_t(FieldKind.INSTANT), "2024-01-02T03:04:05Z") == dt.datetime(
        2024, 1, 2, 3, 4, 5, tzinfo=utc
    )
    shifted = converter.convert(_t(FieldKind.INSTANT), "2024-01-02T05:04:05.123+02:00")
    assert shifted == dt.datetime(2024, 1, 2, 3, 4, 5, 123000, tzinfo=utc)
    assert shifted.tzinfo == utc
    nanos = converter.convert(_t(FieldKind.INSTANT), "2024-01-02T03:04:05.123456789Z")
    assert nanos.microsecond == 123456


@pytest.mark.parametrize("raw", ["2024-01-02 03:04:05", "2024-01-02T03:04:05", "2024-13-02T03:04:05Z"])
def test_instant_rejects_non_iso_or_missing_offset(raw):
    with pytest.raises(ConversionError):
        _converter().convert(_t(FieldKind.INSTANT), raw)


def test_uuid_canonical_only():
    converter = _converter()
    raw = "123e4567-e89b-12d3-a456-426614174000"
    assert converter.convert(_t(FieldKind.UUID), raw) == uuid.UUID(raw)
    for bad in ("123e4567e89b12d3a456426614174000", "{123e4567-e89b-12d3-a456-426614174000}", "xyz"):
        with pytest.raises(ConversionError):
            converter.convert(_t(FieldKind.UUID), bad)


def test_enum_matches_names_case_sensitively():
    converter = _converter()
    assert converter.convert(FieldType.enum_of(Color), "RED") is Color.RED
    with pytest.raises(ConversionError) as exc_info:
        converter.convert(FieldType.enum_of(Color), "red")
    assert "No enum constant Color.red" in str(exc_info.value)
    assert exc_info.value.target_type == "Color"


def test_enum_does_not_match_values():
    with pytest.raises(ConversionError):
        _converter().convert(FieldType.enum_of(Color), "r")


def test_string_array_split():
    converter = _converter()
    strings = FieldType.array_of(FieldKind.STRING)
    assert converter.convert(strings, "a;b") == ["a", "b"]
    assert converter.convert(strings, "a;;b") == ["a", "", "b"]
    assert converter.convert(strings, "a;b;") == ["a", "b"]
    assert converter.convert(strings, "single") == ["single"]


def test_integer_array():
    converter = _converter()
    assert converter.convert(FieldType.array_of(FieldKind.INT32), "1;2;3") == [1, 2, 3]


def test_integer_array_bad_segment_fails_whole_field():
    with pytest.raises(ConversionError) as exc_info:
        _converter().convert(FieldType.array_of(FieldKind.INT32), "1;x;3")
    error = exc_info.value
    assert error.raw_value == "1;x;3"
    assert error.target_type == "list[int32]"
    assert "'x'" in str(error.cause)


def test_float_array():
    converter = _converter()
    assert converter.convert(FieldType.array_of(FieldKind.FLOAT64), "1.5;2;-3e1") == [1.5, 2.0, -30.0]
    with pytest.raises(ConversionError):
        converter.convert(FieldType.array_of(FieldKind.FLOAT64), "1.5;;2")


def test_passthrough_returns_raw_string():
    converter = _converter()
    assert converter.convert(_t(FieldKind.PASSTHROUGH), "raw value") == "raw value"
    assert converter.convert(_t(FieldKind.STRING), "text") == "text"


def test_try_convert_returns_error_instead_of_raising():
    result = _converter().try_convert(_t(FieldKind.INT32), "nope")
    assert not result.ok
    assert result.value is None
    assert isinstance(result.error, ConversionError)
    assert isinstance(result.error, ValueError)
    assert result.error.to_dict()["code"] == "CONVERSION_FAILED"
    assert result.error.details["raw_value"] == "nope"


def test_converter_requires_complete_config():
    with pytest.raises(ConfigurationError):
        ValueConverter(FormatConfig(delimiter=","))


def test_split_elements_drops_trailing_empty_segments():
    assert split_elements(";") == []
    assert split_elements("a;;") == ["a"]
    assert split_elements(";a") == ["", "a"]


def _temporal_converter(date: str, datetime: str = "yyyy-MM-dd HH:mm:ss", time: str = "HH:mm") -> ValueConverter:
    return ValueConverter(
        FormatConfig(delimiter=",", date_pattern=date, datetime_pattern=datetime, time_pattern=time)
    )


@pytest.mark.parametrize("raw", ["2024-1-5", "2024-01-5", "24-01-05", "2024-01-05 ", "2024-001-05"])
def test_date_with_wrong_field_width_fails(raw):
    with pytest.raises(ConversionError) as exc_info:
        _converter().convert(_t(FieldKind.DATE), raw)
    assert exc_info.value.raw_value == raw


def test_single_letter_fields_accept_one_or_two_digits():
    converter = _temporal_converter("d.M.yyyy")
    assert converter.convert(_t(FieldKind.DATE), "5.1.2024") == dt.date(2024, 1, 5)
    assert converter.convert(_t(FieldKind.DATE), "15.12.2024") == dt.date(2024, 12, 15)


def test_two_digit_year_falls_into_current_century():
    converter = _temporal_converter("dd.MM.yy")
    assert converter.convert(_t(FieldKind.DATE), "01.01.99") == dt.date(2099, 1, 1)
    assert converter.convert(_t(FieldKind.DATE), "29.02.96") == dt.date(2096, 2, 29)


def test_datetime_pattern_without_hour_fails():
    converter = _temporal_converter("yyyy-MM-dd", datetime="yyyy-MM-dd")
    with pytest.raises(ConversionError) as exc_info:
        converter.convert(_t(FieldKind.DATETIME), "2024-01-05")
    assert "hour" in str(exc_info.value)
    assert converter.convert(_t(FieldKind.DATETIME), "") is None


def test_date_pattern_without_day_fails():
    converter = _temporal_converter("yyyy-MM")
    with pytest.raises(ConversionError):
        converter.convert(_t(FieldKind.DATE), "2024-01")


def test_time_fraction_width_is_checked():
    converter = _temporal_converter("yyyy-MM-dd", time="HH:mm:ss.SSS")
    assert converter.convert(_t(FieldKind.TIME), "07:30:15.250") == dt.time(7, 30, 15, 250000)
    with pytest.raises(ConversionError):
        converter.convert(_t(FieldKind.TIME), "07:30:15.25")
