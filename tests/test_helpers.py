import datetime

import pytest

from modelmap.helpers import (
    MISSING,
    format_date,
    get_nested_value,
    is_composite_value,
    is_date_string,
    is_falsy,
    is_sequence,
    parse_date_string,
    set_nested_value,
    split_nested_path,
)


@pytest.mark.parametrize("value", [
    "2023-05-01T12:30",
    "2023-05-01T12:30:00",
    "2023-05-01T12:30:00.123",
    "2023-05-01T12:30:00.123456789",
    "2023-19-39T29:59",
])
def test_date_string_accepted(value):
    assert is_date_string(value)


@pytest.mark.parametrize("value", [
    "2023-05-01",
    "2023-05-01T12:30:00Z",
    "2023-05-01T12:30:00.123+02:00",
    "meeting at 2023-05-01T12:30",
    "12:30",
    20230501,
    None,
])
def test_date_string_rejected(value):
    assert not is_date_string(value)


def test_parse_date_string():
    assert parse_date_string("2023-05-01T12:30") == datetime.datetime(2023, 5, 1, 12, 30)
    assert parse_date_string("2023-05-01T12:30:15.5") == datetime.datetime(2023, 5, 1, 12, 30, 15, 500000)
    assert parse_date_string("2023-05-01T12:30:15.123456789") == datetime.datetime(2023, 5, 1, 12, 30, 15, 123456)


def test_parse_impossible_date_keeps_string():
    assert parse_date_string("2023-19-39T10:00") == "2023-19-39T10:00"


def test_format_date():
    naive = datetime.datetime(2023, 5, 1, 12, 30, 0, 123000)
    assert format_date(naive) == "2023-05-01T12:30:00.123"
    assert format_date(naive, "microseconds") == "2023-05-01T12:30:00.123000"
    assert format_date(datetime.date(2023, 5, 1)) == "2023-05-01"


def test_format_date_keeps_sub_millisecond_digits():
    precise = datetime.datetime(2023, 5, 1, 12, 30, 0, 123456)
    assert format_date(precise) == "2023-05-01T12:30:00.123456"
    assert format_date(precise, "milliseconds") == "2023-05-01T12:30:00.123"


def test_format_aware_date_as_utc():
    aware = datetime.datetime(2023, 5, 1, 14, 30, tzinfo=datetime.timezone(datetime.timedelta(hours=2)))
    assert format_date(aware) == "2023-05-01T12:30:00.000"


@pytest.mark.parametrize("value, expected", [
    (None, True),
    (MISSING, True),
    (False, True),
    (0, True),
    (0.0, True),
    (float("nan"), True),
    ("", True),
    ("0", False),
    (True, False),
    (-1, False),
    ([], False),
    ({}, False),
])
def test_is_falsy(value, expected):
    assert is_falsy(value) is expected


def test_composite_and_sequence_predicates():
    assert is_composite_value({})
    assert is_composite_value(lambda: 1)
    assert is_composite_value(datetime.datetime.now())
    assert not is_composite_value(None)
    assert not is_composite_value("text")
    assert not is_composite_value(1.5)
    assert is_sequence([1])
    assert is_sequence((1,))
    assert not is_sequence("abc")


def test_split_nested_path():
    assert split_nested_path("address.city") == ["address", "city"]
    assert split_nested_path("name") == ["name"]
    assert split_nested_path("a..b") == ["a", "b"]


def test_get_nested_value():
    data = {"a": {"b": {"c": 42}}, "flat": "x"}
    assert get_nested_value(data, ["a", "b", "c"]) == 42
    assert get_nested_value(data, ["a", "missing", "c"]) is MISSING
    assert get_nested_value(data, ["flat", "c"]) is MISSING
    assert get_nested_value({"a": {"b": None}}, ["a", "b"]) is None
    assert get_nested_value({"a": {"b": None}}, ["a", "b", "c"]) is MISSING


def test_set_nested_value():
    data = {"a": {"keep": 1}}
    set_nested_value(data, ["a", "b", "c"], 42)
    set_nested_value(data, ["top"], "x")
    assert data == {"a": {"keep": 1, "b": {"c": 42}}, "top": "x"}
