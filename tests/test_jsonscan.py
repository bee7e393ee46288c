import sys

import pytest

from services.common.jsonscan import extract_json_array, extract_json_object, find_balanced


def test_object_extracted_from_prose_and_fences():
    text = 'Sure! Here you go:\n```json\n{"maxPrice": 2000, "housingType": "house"}\n```\nAnything else?'
    assert extract_json_object(text) == {"maxPrice": 2000, "housingType": "house"}


def test_nested_braces_and_braces_inside_strings():
    text = 'prefix {"a": {"b": [1, 2, {"c": "}{"}]}, "d": "quote \\" }"} suffix }'
    assert extract_json_object(text) == {"a": {"b": [1, 2, {"c": "}{"}]}, "d": 'quote " }'}


def test_array_extracted_after_non_json_bracket():
    text = 'Scores [see below]:\n[{"index": 1, "score": 80, "reason": "quiet [calm]"}]'
    assert extract_json_array(text) == [{"index": 1, "score": 80, "reason": "quiet [calm]"}]


def test_missing_or_unbalanced_json_returns_none():
    assert extract_json_object("no json here") is None
    assert extract_json_object('{"open": 1') is None
    assert extract_json_array("") is None
    assert extract_json_array(None) is None


def test_find_balanced_returns_raw_span():
    assert find_balanced('x {"a": 1} y {"b": 2}', "{") == '{"a": 1}'
    with pytest.raises(ValueError):
        find_balanced("text", "(")


@pytest.mark.skipif(not hasattr(sys, "set_int_max_str_digits"), reason="integer digit limit not enforced")
def test_oversized_integer_literal_is_skipped():
    huge = "9" * 5000
    assert extract_json_object('{"maxPrice": %s}' % huge) is None
    assert extract_json_object('{"maxPrice": %s} then {"maxPrice": 1500}' % huge) == {"maxPrice": 1500}