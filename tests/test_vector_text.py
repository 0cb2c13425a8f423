import math

import pytest

from roadroute.vector_text import (
    DataType,
    escape_string,
    format_values,
    parse_values,
    unescape_string,
)


def test_escape_string_example():
    assert escape_string("a\\b\nc") == "a\\\\b\\nc"


@pytest.mark.parametrize("text", ["plain", "two\nlines", "back\\slash", ""])
def test_escape_round_trip(text):
    escaped = escape_string(text)
    assert "\n" not in escaped
    assert unescape_string(escaped) == text


def test_string_values_round_trip():
    values = ["first", "multi\nline", "x\\y"]
    text = format_values(DataType.STRING, values)
    assert text.count("\n") == len(values)
    assert parse_values("string", text.splitlines()) == values


def test_int8_limits():
    assert parse_values(DataType.INT8, ["-128", "127"]) == [-128, 127]
    with pytest.raises(ValueError, match="too large"):
        parse_values(DataType.INT8, ["128"])
    with pytest.raises(ValueError, match="too small"):
        parse_values(DataType.INT8, ["-129"])


def test_unsigned_rejects_negative():
    with pytest.raises(ValueError, match="too small"):
        parse_values("uint8", ["-1"])


def test_uint64_maximum():
    assert parse_values("uint64", [str(2**64 - 1)]) == [2**64 - 1]
    with pytest.raises(ValueError):
        parse_values("uint64", [str(2**64)])


def test_int64_overflow():
    with pytest.raises(ValueError):
        parse_values("int64", [str(2**63)])


def test_int_parse_is_lenient_about_whitespace_and_suffix():
    assert parse_values("int32", ["  7", "8 ", "9abc", "5\n"]) == [7, 8, 9, 5]


def test_unparsable_number_raises():
    with pytest.raises(ValueError):
        parse_values("int32", ["abc"])
    with pytest.raises(ValueError):
        parse_values("float64", ["abc"])


def test_format_ints():
    assert format_values("int32", [1, -2]) == "1\n-2\n"


def test_ints_round_trip():
    values = [0, -5, 2**31 - 1, -(2**31)]
    assert parse_values("int32", format_values("int32", values).splitlines()) == values


def test_float32_short_output():
    value = parse_values("float32", ["0.1"])
    assert format_values("float32", value) == "0.1\n"


def test_float64_round_trip():
    values = parse_values("float64", ["0.1", "-2.5", "1e300", "0.3333333333333333"])
    again = parse_values("float64", format_values("float64", values).splitlines())
    assert again == values


def test_float_special_values():
    values = parse_values("float64", ["inf", "-inf", "nan"])
    assert values[0] == math.inf
    assert values[1] == -math.inf
    assert math.isnan(values[2])


def test_float32_overflow_becomes_infinity():
    assert parse_values("float32", ["1e300"]) == [math.inf]


def test_unknown_data_type():
    with pytest.raises(ValueError, match="Unknown data type"):
        parse_values("int128", ["1"])
    with pytest.raises(ValueError, match="Unknown data type"):
        format_values("int128", [1])