import pytest

from burgscribe.exceptions import NoJSONFoundError
from burgscribe.utils.llm_response_cleaner import extract_json_substring, match_json_pattern


def test_fenced_json_object_keeps_nested_braces():
    raw = 'Here you go:\n```json\n{"tavern": {"name": "The Gilded Goose"}}\n```\nEnjoy!'
    assert extract_json_substring(raw) == '{"tavern": {"name": "The Gilded Goose"}}'
    assert match_json_pattern(raw)[0] == "fenced-json-object"


def test_untagged_fence_is_used_when_no_json_tag():
    raw = '```\n{"a": 1}\n```'
    assert match_json_pattern(raw) == ("fenced-object", '{"a": 1}')


def test_bare_object_is_cut_out_of_prose():
    raw = 'Sure! {"x": 1} Hope this helps.'
    assert extract_json_substring(raw) == '{"x": 1}'


def test_objects_win_over_arrays():
    raw = 'list [1, 2] and then {"k": [3]}'
    assert extract_json_substring(raw) == '{"k": [3]}'


def test_array_without_objects():
    raw = "values: [1, 2, 3] end"
    assert match_json_pattern(raw) == ("bare-array", "[1, 2, 3]")


def test_mismatched_span_falls_back_to_any_bracket_span():
    raw = 'prefix { "a": 1 ] suffix'
    assert match_json_pattern(raw) is None
    assert extract_json_substring(raw) == '{ "a": 1 ]'


@pytest.mark.parametrize("raw", ["", "no structure here at all", "only an opener {"])
def test_extraction_fails_without_any_span(raw):
    with pytest.raises(NoJSONFoundError):
        extract_json_substring(raw)
