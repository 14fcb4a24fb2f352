import json

import pytest

from burgscribe.utils.repair_passes import (
    REPAIR_PASSES,
    escape_string_control_whitespace,
    escape_stray_quotes,
    insert_missing_commas,
    normalize_typography,
    strip_control_characters,
    strip_control_characters_aggressive,
    strip_non_printable,
)

VALID = '{"name": "Old Mill", "tags": ["a", "b"], "n": 3, "ok": true, "none": null}'


def test_passes_run_from_least_to_most_destructive():
    assert [repair.name for repair in REPAIR_PASSES] == [
        "none",
        "escape-stray-quotes",
        "insert-missing-commas",
        "escape-string-control-whitespace",
        "normalize-typography",
        "strip-control-chars",
        "strip-control-chars-aggressive",
        "strip-non-printable",
    ]


@pytest.mark.parametrize("repair", REPAIR_PASSES, ids=lambda repair: repair.name)
def test_valid_json_is_left_alone(repair):
    assert repair.transform(VALID) == VALID


def test_escape_stray_quotes_inside_value():
    raw = '{"description": "The sign reads "Welcome" here"}'
    fixed = escape_stray_quotes(raw)
    assert fixed == '{"description": "The sign reads \\"Welcome\\" here"}'
    assert json.loads(fixed)["description"] == 'The sign reads "Welcome" here'


def test_escape_stray_quotes_keeps_existing_escapes():
    raw = '{"a": "say \\"hi\\"", "b": "x"}'
    assert escape_stray_quotes(raw) == raw


def test_insert_missing_commas_between_array_objects():
    raw = '[{"a": 1}\n{"b": 2}]'
    fixed = insert_missing_commas(raw)
    assert fixed == '[{"a": 1},\n{"b": 2}]'
    assert json.loads(fixed) == [{"a": 1}, {"b": 2}]


def test_insert_missing_commas_between_members():
    raw = '{"a": "x" "b": true "c": 1}'
    assert json.loads(insert_missing_commas(raw)) == {"a": "x", "b": True, "c": 1}


def test_insert_missing_commas_ignores_string_content():
    raw = '{"a": "x} {y"}'
    assert insert_missing_commas(raw) == raw


def test_escape_string_control_whitespace_only_inside_strings():
    raw = '{\n"d": "line one\nline\ttwo"\n}'
    fixed = escape_string_control_whitespace(raw)
    assert fixed == '{\n"d": "line one\\nline\\ttwo"\n}'
    assert json.loads(fixed)["d"] == "line one\nline\ttwo"


def test_normalize_typography():
    raw = "{\u201cname\u201d: \u201cBob\u2019s Inn \u2014 est. 900\u2026\u201d}"
    assert normalize_typography(raw) == '{"name": "Bob\'s Inn - est. 900..."}'


def test_normalize_typography_drops_zero_width_and_c1():
    assert normalize_typography('{"a":\u200b "b\x85"}') == '{"a": "b"}'


def test_strip_control_characters_escapes_line_breaks_first():
    raw = '{"a": "b\x07c\nd"}'
    fixed = strip_control_characters(raw)
    assert fixed == '{"a": "bc\\nd"}'
    assert json.loads(fixed) == {"a": "bc\nd"}


def test_aggressive_strip_flattens_line_breaks():
    raw = '{"a":\n"b\t\tc\x01"}'
    assert strip_control_characters_aggressive(raw) == '{"a": "b c"}'


def test_strip_non_printable_drops_non_ascii():
    assert strip_non_printable('{"name": "Café Ørn"}') == '{"name": "Caf rn"}'


def test_strip_non_printable_collapses_backslash_runs():
    assert strip_non_printable('{"a": "x\\\\\\\\n"}') == '{"a": "x\\n"}'


def test_strip_non_printable_collapses_escaped_backslash():
    fixed = strip_non_printable('{"path": "C:\\\\mill"}')
    assert fixed == '{"path": "C:\\mill"}'
    with pytest.raises(json.JSONDecodeError):
        json.loads(fixed)


def test_insert_missing_commas_leaves_leading_value_alone():
    for raw in ('{"a": 1}', '[1, 2]', '"text"'):
        assert insert_missing_commas(raw) == raw
