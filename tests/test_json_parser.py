import logging

import pytest

from burgscribe.exceptions import AllRepairsFailedError, JSONParseError, NoJSONFoundError
from burgscribe.utils.emergency_extraction import ContentKind
from burgscribe.utils.json_parser import is_structured, parse_json_response, parse_with_repairs


def _passes_logged(caplog):
    return [
        record.fields["repair_pass"]
        for record in caplog.records
        if record.getMessage() == "Parsed JSON response"
    ]


def test_fenced_response_parses_without_repair(caplog):
    text = (
        'Sure! ```json\n{"tavern":{"name":"The Rusty Anchor","innkeeper":"Finn",'
        '"signature":"spiced rum","description":"A dock-side haunt"}}\n```'
    )
    with caplog.at_level(logging.DEBUG, logger="burgscribe"):
        value = parse_json_response(text, ContentKind.TAVERN)
    assert value == {
        "tavern": {
            "name": "The Rusty Anchor",
            "innkeeper": "Finn",
            "signature": "spiced rum",
            "description": "A dock-side haunt",
        }
    }
    assert _passes_logged(caplog) == ["none"]


def test_stray_quotes_are_repaired(caplog):
    text = '{"tavern": {"name": "The Lantern", "description": "The sign reads "Welcome" in faded paint"}}'
    with caplog.at_level(logging.DEBUG, logger="burgscribe"):
        value = parse_json_response(text, ContentKind.TAVERN)
    assert value["tavern"]["description"] == 'The sign reads "Welcome" in faded paint'
    assert _passes_logged(caplog) == ["escape-stray-quotes"]


def test_literal_newlines_inside_strings_are_repaired(caplog):
    text = '{"landmark": {"name": "Old Mill", "description": "Grinds grain.\nStill turning."}}'
    with caplog.at_level(logging.DEBUG, logger="burgscribe"):
        value = parse_json_response(text, "landmark")
    assert value == {"landmark": {"name": "Old Mill", "description": "Grinds grain.\nStill turning."}}
    assert _passes_logged(caplog) == ["escape-string-control-whitespace"]


def test_missing_commas_are_repaired(caplog):
    text = '```json\n{"taverns": [{"name": "A"}\n{"name": "B"}]}\n```'
    with caplog.at_level(logging.DEBUG, logger="burgscribe"):
        value = parse_json_response(text, ContentKind.TAVERNS_BATCH)
    assert value == {"taverns": [{"name": "A"}, {"name": "B"}]}
    assert _passes_logged(caplog) == ["insert-missing-commas"]


def test_missing_comma_between_members_is_repaired(caplog):
    text = '{"leader": {"name": "Edda Voss" "title": "Reeve", "description": "Keeps the peace."}}'
    with caplog.at_level(logging.DEBUG, logger="burgscribe"):
        value = parse_json_response(text, ContentKind.LEADER)
    assert value["leader"] == {"name": "Edda Voss", "title": "Reeve", "description": "Keeps the peace."}
    assert _passes_logged(caplog) == ["insert-missing-commas"]


def test_unbalanced_landmark_falls_back_to_emergency_extraction(caplog):
    text = 'The landmark you asked for: {"landmark": {"name": "Old Mill", "description": "Grinds grain for the valley"}'
    with caplog.at_level(logging.WARNING, logger="burgscribe"):
        value = parse_json_response(text, "generateLandmarkJSON")
    assert value == {"landmark": {"name": "Old Mill", "description": "Grinds grain for the valley"}}
    assert any(record.getMessage() == "Emergency extraction produced partial content" for record in caplog.records)


def test_unrecoverable_response_raises_all_repairs_failed(caplog):
    text = '{"foo": "bar" oops}'
    with caplog.at_level(logging.ERROR, logger="burgscribe"):
        with pytest.raises(AllRepairsFailedError) as excinfo:
            parse_json_response(text, ContentKind.LANDMARK)
    assert excinfo.value.caller == "landmark"
    assert excinfo.value.raw_excerpt == text
    assert any(record.getMessage() == "All JSON parsing methods failed" for record in caplog.records)


def test_unknown_caller_has_no_emergency_profile():
    with pytest.raises(AllRepairsFailedError) as excinfo:
        parse_json_response('{"name": "Old Mill" "oops}', "random_event")
    assert excinfo.value.caller == "random_event"


def test_response_without_json_raises_no_json_found():
    with pytest.raises(NoJSONFoundError):
        parse_json_response("I'm sorry, I cannot help with that.", ContentKind.EVENTS)


def test_parse_errors_share_a_base_class():
    assert issubclass(NoJSONFoundError, JSONParseError)
    assert issubclass(AllRepairsFailedError, JSONParseError)


def test_scalars_are_never_accepted():
    with pytest.raises(AllRepairsFailedError):
        parse_with_repairs("42", ContentKind.EVENTS)


def test_empty_containers_are_accepted():
    assert parse_with_repairs("[]", ContentKind.EVENTS) == []
    assert parse_with_repairs("{}", ContentKind.EVENTS) == {}


def test_failed_passes_report_position(caplog):
    with caplog.at_level(logging.WARNING, logger="burgscribe"):
        with pytest.raises(AllRepairsFailedError):
            parse_with_repairs('{"a": 1,, "b": 2}', "random_event")
    failures = [record for record in caplog.records if record.getMessage() == "Repair pass failed to parse"]
    assert failures[0].fields["repair_pass"] == "none"
    assert failures[0].fields["char"] == ","
    assert failures[0].fields["line"] == 1


@pytest.mark.parametrize("value, expected", [({}, True), ([1], True), ("x", False), (3, False), (None, False)])
def test_is_structured(value, expected):
    assert is_structured(value) is expected
