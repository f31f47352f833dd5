"""Tests for event bus core types."""

from dataclasses import fields

import pytest
from pydantic import ValidationError

from offline_eventbus.event_bus.core import BusConfig, ListenerOptions, ListenerRecord, merge_options, same_callback


@pytest.mark.parametrize(
    "options,expected_count,expected_repeat",
    [
        (None, -1, False),
        ({}, -1, False),
        ({"count": 3}, 3, False),
        ({"count": 0}, 0, False),
        ({"count": -5}, -5, False),
        ({"count": 2.0}, 2, False),
        ({"count": 2.5}, -1, False),
        ({"count": "3"}, -1, False),
        ({"count": True}, -1, False),
        ({"count": None}, -1, False),
        ({"repeat": 1}, -1, True),
        ({"repeat": ""}, -1, False),
        ({"repeat": "yes", "count": 1}, 1, True),
        ("count=3", -1, False),
        (7, -1, False),
        (["count", 3], -1, False),
    ],
)
def test_merge_options(options, expected_count: int, expected_repeat: bool):
    result = merge_options(options)
    assert isinstance(result, ListenerOptions)
    assert result.count == expected_count
    assert result.repeat is expected_repeat


def test_merge_options_from_model():
    result = merge_options(ListenerOptions(count=4, repeat=True))
    assert result == ListenerOptions(count=4, repeat=True)


def test_merge_options_ignores_unknown_keys():
    result = merge_options({"count": 2, "priority": 10})
    assert result.model_dump() == {"count": 2, "repeat": False}


def test_bus_config_defaults():
    assert BusConfig().offline is False


def test_bus_config_is_frozen():
    config = BusConfig(offline=True)
    with pytest.raises(ValidationError):
        config.offline = False


def test_listener_record_identity_equality():
    def callback():
        return None

    first = ListenerRecord(callback=callback, count=1)
    second = ListenerRecord(callback=callback, count=1)
    assert first != second
    assert first == first


def test_listener_record_unlimited():
    assert ListenerRecord(callback=print).unlimited is True
    assert ListenerRecord(callback=print, count=2).unlimited is False


def test_listener_record_fields():
    assert [f.name for f in fields(ListenerRecord)] == ["callback", "count", "removed"]


class Handler:
    def __init__(self, tag: str):
        self.tag = tag

    def __eq__(self, other):
        return isinstance(other, Handler) and other.tag == self.tag

    def __hash__(self):
        return hash(self.tag)

    def __call__(self):
        return self.tag

    def method(self):
        return self.tag


def test_same_callback_identity():
    first = Handler("x")
    assert same_callback(first, first) is True
    assert same_callback(first, Handler("x")) is False


def test_same_callback_bound_methods():
    first, second = Handler("x"), Handler("x")
    assert same_callback(first.method, first.method) is True
    assert same_callback(first.method, second.method) is False
    assert same_callback(first.method, first) is False
