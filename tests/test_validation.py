"""Tests for event body validation."""

import math
import sys

import pytest

from collector.app.services.validation import EventRecord, is_valid_body


def make_body(**overrides):
    body = {"type": "click", "page": "/x", "ts": 123}
    body.update(overrides)
    return body


class TestBodyShape:
    """Tests for the top-level body type."""

    @pytest.mark.parametrize("data", [None, [], [make_body()], "click", 42, 1.5, True])
    def test_non_object_rejected(self, data):
        assert is_valid_body(data) is None

    def test_minimal_body_accepted(self):
        event = is_valid_body(make_body())
        assert isinstance(event, EventRecord)
        assert event.type == "click"
        assert event.page == "/x"
        assert event.ts == 123
        assert event.payload is None

    @pytest.mark.parametrize("missing", ["type", "page", "ts"])
    def test_required_fields(self, missing):
        body = make_body()
        del body[missing]
        assert is_valid_body(body) is None

    def test_extra_keys_ignored(self):
        assert is_valid_body(make_body(referrer="/home")) is not None


class TestTypeField:
    """Tests for the event type field."""

    @pytest.mark.parametrize(("length", "valid"), [(1, False), (2, True), (64, True), (65, False)])
    def test_length_boundaries(self, length, valid):
        result = is_valid_body(make_body(type="t" * length))
        assert (result is not None) is valid

    def test_empty_rejected(self):
        assert is_valid_body(make_body(type="")) is None

    @pytest.mark.parametrize("value", [12, None, ["click"], {"name": "click"}])
    def test_non_string_rejected(self, value):
        assert is_valid_body(make_body(type=value)) is None

    def test_not_trimmed(self):
        event = is_valid_body(make_body(type=" click "))
        assert event.type == " click "


class TestPageField:
    """Tests for the page path field."""

    def test_must_start_with_slash(self):
        assert is_valid_body(make_body(page="x")) is None
        assert is_valid_body(make_body(page="")) is None
        assert is_valid_body(make_body(page="https://example.com/x")) is None

    def test_root_accepted(self):
        assert is_valid_body(make_body(page="/")) is not None

    def test_length_boundary(self):
        assert is_valid_body(make_body(page="/" + "a" * 255)) is not None
        assert is_valid_body(make_body(page="/" + "a" * 256)) is None

    def test_non_string_rejected(self):
        assert is_valid_body(make_body(page=1)) is None


class TestTsField:
    """Tests for the client timestamp field."""

    def test_integer_kept_as_integer(self):
        event = is_valid_body(make_body(ts=1_700_000_000_000))
        assert event.ts == 1_700_000_000_000
        assert isinstance(event.ts, int)

    def test_float_accepted(self):
        assert is_valid_body(make_body(ts=1.5)).ts == 1.5

    def test_negative_and_zero_accepted(self):
        assert is_valid_body(make_body(ts=0)) is not None
        assert is_valid_body(make_body(ts=-1)) is not None

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_rejected(self, value):
        assert is_valid_body(make_body(ts=value)) is None

    @pytest.mark.parametrize("value", [10 ** 400, -(10 ** 400)])
    def test_integer_beyond_double_range_rejected(self, value):
        assert is_valid_body(make_body(ts=value)) is None

    def test_largest_double_sized_integer_accepted(self):
        value = int(sys.float_info.max)
        assert is_valid_body(make_body(ts=value)).ts == value

    @pytest.mark.parametrize("value", ["123", None, True, False, [123]])
    def test_non_number_rejected(self, value):
        assert is_valid_body(make_body(ts=value)) is None


class TestPayloadField:
    """Tests for the optional payload object."""

    def test_omitted_accepted(self):
        assert is_valid_body(make_body()) is not None

    def test_object_accepted(self):
        event = is_valid_body(make_body(payload={"a": 1}))
        assert event.payload == {"a": 1}

    def test_empty_object_accepted(self):
        assert is_valid_body(make_body(payload={})).payload == {}

    def test_nested_content_not_checked(self):
        payload = {"items": [1, None, {"deep": [True]}], "n": None}
        assert is_valid_body(make_body(payload=payload)).payload == payload

    @pytest.mark.parametrize("value", [None, [], [1, 2], "x", 1, True])
    def test_non_object_rejected(self, value):
        assert is_valid_body(make_body(payload=value)) is None
