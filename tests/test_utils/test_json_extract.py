"""
Unit tests for JSON extraction from LLM output.
"""

from reviewsense.utils.json_extract import extract_json_object, find_first_object_span


def test_plain_object():
    assert find_first_object_span('{"a": 1}') == '{"a": 1}'


def test_object_surrounded_by_prose():
    text = 'Sure! Here you go:\n```json\n{"summary": "ok"}\n```\nAnything else?'
    assert find_first_object_span(text) == '{"summary": "ok"}'


def test_nested_object_returns_outer_span():
    text = 'x {"a": {"b": [1, {"c": 2}]}} y {"d": 3}'
    assert find_first_object_span(text) == '{"a": {"b": [1, {"c": 2}]}}'


def test_braces_inside_strings_are_ignored():
    text = '{"summary": "use } and { freely", "q": "say \\"}\\""} trailing'
    assert find_first_object_span(text) == '{"summary": "use } and { freely", "q": "say \\"}\\""}'


def test_unclosed_brace_falls_through_to_next_span():
    text = 'partial { never closed {"ok": true}'
    assert find_first_object_span(text) == '{"ok": true}'


def test_no_braces():
    assert find_first_object_span("no json here") is None
    assert find_first_object_span("") is None
    assert find_first_object_span(None) is None


def test_extract_decodes_object():
    assert extract_json_object('prefix {"summary": "好评", "n": [1, 2]} suffix') == {
        "summary": "好评",
        "n": [1, 2]
    }


def test_extract_invalid_json_returns_none():
    assert extract_json_object("{not: valid}") is None


def test_extract_first_span_only():
    # The first balanced span is invalid JSON; later spans are not tried
    assert extract_json_object('{bad} {"good": 1}') is None


def test_extract_deeply_nested_returns_none():
    text = '{"summary": "x", "keyPoints": ' + "[" * 100000 + "]" * 100000 + "}"
    assert extract_json_object(text) is None
