import json
import logging
from typing import Annotated

import pytest

from modelmap import Mapped, MappedModel, RequiredFieldMissingError, from_json, parse_json, to_json


class Reading(MappedModel):
    sensor: Annotated[str, Mapped("sensorId", required=True)]
    value: float
    taken_at: Annotated[object, Mapped("takenAt")]


READING_JSON = '{"sensorId": "s-1", "value": 21.5, "takenAt": "2024-03-01T10:00:00.000", "unit": "C"}'


def test_from_json():
    reading = from_json(Reading, READING_JSON)

    assert reading.sensor == "s-1"
    assert reading.value == 21.5
    assert reading.taken_at.year == 2024


def test_from_json_array():
    readings = from_json(Reading, f"[{READING_JSON}, {READING_JSON}]")
    assert len(readings) == 2


def test_to_json_drops_unknown_fields():
    text = to_json(from_json(Reading, READING_JSON))
    assert json.loads(text) == {"sensorId": "s-1", "value": 21.5, "takenAt": "2024-03-01T10:00:00.000"}


def test_to_json_list_and_indent():
    reading = from_json(Reading, READING_JSON)
    text = to_json([reading], indent=2)

    assert "\n" in text
    assert json.loads(text)[0]["sensorId"] == "s-1"


def test_from_json_propagates_mapping_errors():
    with pytest.raises(RequiredFieldMissingError):
        from_json(Reading, '{"value": 1}')


def test_parse_json_malformed(caplog):
    with caplog.at_level(logging.ERROR, logger="modelmap.codec"):
        assert parse_json(Reading, "{not json") is None
    assert "Error decoding JSON" in caplog.text


def test_parse_json_not_an_object(caplog):
    with caplog.at_level(logging.ERROR, logger="modelmap.codec"):
        assert parse_json(Reading, "42") is None


def test_parse_json_missing_required(caplog):
    with caplog.at_level(logging.ERROR, logger="modelmap.codec"):
        assert parse_json(Reading, '{"value": 1}') is None
    assert "sensorId" in caplog.text


def test_parse_json_valid():
    assert parse_json(Reading, READING_JSON).sensor == "s-1"
