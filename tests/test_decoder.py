# ===============================================
# tests/test_decoder.py
# Raw model text -> JSON object, or MalformedResponse
# ===============================================

import json

import pytest

from evplan.errors import MalformedResponse
from evplan.plan.decoder import decode_response
from evplan.plan.schema import REQUIRED_FIELDS


def test_valid_plan_round_trips_unchanged(plan_body, plan_text):
    body = decode_response(plan_text)
    assert body == plan_body
    for key in REQUIRED_FIELDS:
        assert key in body


def test_code_fence_is_stripped(plan_body, plan_text):
    fenced = f"```json\n{plan_text}\n```"
    assert decode_response(fenced) == plan_body


@pytest.mark.parametrize("text", ["", "   ", None, '{"summary": "cut off', "not json at all"])
def test_unparseable_text_raises(text):
    with pytest.raises(MalformedResponse):
        decode_response(text)


@pytest.mark.parametrize("text", ["[1, 2, 3]", '"just a string"', "42", "null"])
def test_non_object_json_raises(text):
    with pytest.raises(MalformedResponse):
        decode_response(text)


@pytest.mark.parametrize(
    "text",
    [
        '{"summary": "x", "cost": {"parts": 1, "labor": 1, "total": NaN}}',
        '{"laborHours": Infinity}',
        '{"laborHours": -Infinity}',
        '{"laborHours": 1e999}',
    ],
)
def test_non_finite_numbers_raise(text):
    with pytest.raises(MalformedResponse):
        decode_response(text)


def test_no_partial_object_on_failure(plan_text):
    truncated = plan_text[: len(plan_text) // 2]
    result = None
    with pytest.raises(MalformedResponse):
        result = decode_response(truncated)
    assert result is None
    assert json.loads(plan_text)  # sanity: the full text was fine
