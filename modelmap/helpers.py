import datetime
import logging
import math
import re
from typing import Any, Mapping, MutableMapping, Sequence

logger = logging.getLogger(__name__)

# Restricted ISO 8601: minutes are mandatory, seconds and fraction are not.
# No timezone designator and no calendar validation (a 19th month still matches).
DATE_STRING_REGEX = re.compile(
    r"(?P<year>\d{4})-(?P<month>[01]\d)-(?P<day>[0-3]\d)"
    r"T(?P<hour>[0-2]\d):(?P<minute>[0-5]\d)"
    r"(?::(?P<second>[0-5]\d)(?:\.(?P<fraction>\d+))?)?"
)

NESTED_PATH_SEPARATOR = "."

PRIMITIVE_TYPES = (str, bytes, int, float, bool)


class _Missing:
    """Marker for a key absent from the raw data, as opposed to an explicit null"""
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_composite_value(value: Any) -> bool:
    """Anything that is neither None nor a primitive, callables included"""
    return value is not None and not isinstance(value, PRIMITIVE_TYPES)


def is_date_value(value: Any) -> bool:
    return isinstance(value, datetime.date)


def is_date_string(value: Any) -> bool:
    return isinstance(value, str) and DATE_STRING_REGEX.fullmatch(value) is not None


def is_falsy(value: Any) -> bool:
    """
    Truthiness of a decoded wire value as the original JSON runtime sees it:
    None, False, zero, NaN and "" are falsy, empty containers are not.
    """
    if value is None or value is False or value is MISSING:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (int, float)):
        return value == 0 or (isinstance(value, float) and math.isnan(value))
    return False


def parse_date_string(value: str) -> datetime.datetime | str:
    """
    Convert a date string into a naive datetime.
    Fractions finer than microseconds are truncated. A string that matches
    the pattern but names an impossible date is returned unchanged.
    """
    match = DATE_STRING_REGEX.fullmatch(value)
    if match is None:
        return value
    fraction = (match["fraction"] or "")[:6].ljust(6, "0")
    try:
        return datetime.datetime(
            int(match["year"]), int(match["month"]), int(match["day"]),
            int(match["hour"]), int(match["minute"]), int(match["second"] or 0),
            int(fraction),
        )
    except ValueError as e:
        logger.debug(f"Keeping {value!r} as a string: {e}")
        return value


def format_date(value: datetime.date, timespec: str = "auto") -> str:
    """
    ISO string without a timezone designator, aware values are shifted to UTC first.
    "auto" writes milliseconds, or microseconds when the value carries sub-millisecond digits.
    """
    if not isinstance(value, datetime.datetime):
        return value.isoformat()
    if value.tzinfo is not None and value.utcoffset() is not None:
        value = value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    if timespec == "auto":
        timespec = "milliseconds" if value.microsecond % 1000 == 0 else "microseconds"
    return value.isoformat(timespec=timespec)


def split_nested_path(path: str) -> list[str]:
    return [segment for segment in path.split(NESTED_PATH_SEPARATOR) if segment]


def get_nested_value(data: Mapping[str, Any], segments: Sequence[str]) -> Any:
    """Value under the path, MISSING when any segment is absent or not a mapping"""
    value: Any = data
    for segment in segments:
        if not isinstance(value, Mapping) or segment not in value:
            return MISSING
        value = value[segment]
    return value


def set_nested_value(data: MutableMapping[str, Any], segments: Sequence[str], value: Any) -> None:
    target = data
    for segment in segments[:-1]:
        child = target.get(segment)
        if not isinstance(child, MutableMapping):
            child = {}
            target[segment] = child
        target = child
    target[segments[-1]] = value
