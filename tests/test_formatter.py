"""End-to-end tests for the scan-and-replace driver."""

import json

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from AnsibleFormatter import formatter
from AnsibleFormatter.errors import FormatError
from AnsibleFormatter.formatter import FormatOptions, format_document, format_document_with_stats


class TestMarkedItem:
    def test_python_item_is_pretty_printed(self):
        out = format_document("(item={'x': 1, 'y': 'two'})")
        assert out == '(item=\n{\n  "x": 1,\n  "y": "two"\n}\n)'

    def test_item_inside_task_line(self):
        text = "ok: [web1] => (item={'name': 'nginx', 'enabled': True}) done"
        out = format_document(text)
        assert out == (
            'ok: [web1] => (item=\n{\n  "name": "nginx",\n  "enabled": true\n}\n) done'
        )

    def test_whitespace_between_marker_brace_and_paren(self):
        out = format_document("(item=\n   {'a': None}  \n)")
        assert out == '(item=\n{\n  "a": null\n}\n)'

    def test_continuation_in_item_value(self):
        expected = '(item=\n{\n  "msg": "line1\\nline2"\n}\n)'
        assert format_document("(item={'msg': 'line1\\\n     line2'})") == expected
        assert format_document("(item={'msg': 'line1\\\nline2'})") == expected

    def test_unparseable_item_left_alone(self):
        text = "(item={'a': })"
        assert format_document(text) == text

    def test_item_without_closing_paren_left_alone(self):
        text = "(item={'a': 1}, extra)"
        assert format_document(text) == text

    def test_plain_item_label_left_alone(self):
        text = "changed: [web1] => (item=nginx)"
        assert format_document(text) == text

    def test_falls_back_to_raw_json(self, monkeypatch):
        monkeypatch.setattr(formatter, "python_to_json", lambda fragment, **kw: "not json")
        out = format_document('(item={"a": [1]})')
        assert out == '(item=\n{\n  "a": [\n    1\n  ]\n}\n)'

    def test_keywords_in_strings_option(self):
        text = "(item={'msg': 'None'})"
        assert '"msg": "None"' in format_document(text)
        legacy = format_document(text, options=FormatOptions(keywords_in_strings=True))
        assert '"msg": "null"' in legacy


class TestArrow:
    def test_object_after_arrow(self):
        out = format_document('result => {"ok": true, "n": 3}')
        assert out == 'result =>\n{\n  "ok": true,\n  "n": 3\n}'

    def test_array_after_arrow_on_next_line(self):
        out = format_document('ok: [db] =>\n  [1, "two"]\nnext')
        assert out == 'ok: [db] =>\n[\n  1,\n  "two"\n]\nnext'

    def test_unbalanced_is_untouched(self):
        text = 'result => {"ok": true, "n": 3'
        assert format_document(text) == text

    def test_invalid_json_keeps_arrow_and_whitespace(self):
        text = "result =>   {ok: yes}\nrest"
        assert format_document(text) == text

    def test_arrow_without_structure(self):
        text = "a => b"
        assert format_document(text) == text

    def test_double_escaped_quotes_repaired(self):
        out = format_document('ok => {"msg": "say \\\\"hi\\\\""}')
        assert out == 'ok =>\n{\n  "msg": "say \\"hi\\""\n}'

    def test_literal_newline_escape_in_string(self):
        out = format_document('ok => {"msg": "a\\nb"}')
        assert out == 'ok =>\n{\n  "msg": "a\\nb"\n}'

    def test_continuation_in_string(self):
        expected = 'ok =>\n{\n  "msg": "line1\\nline2"\n}'
        assert format_document('ok => {"msg": "line1\\\n     line2"}') == expected
        assert format_document('ok => {"msg": "line1\\\nline2"}') == expected

    def test_integer_beyond_64_bits_kept_exact(self):
        out = format_document('r => {"n": 18446744073709551616}')
        assert out == 'r =>\n{\n  "n": 18446744073709551616\n}'


class TestBareRegion:
    def test_own_line(self):
        text = 'line one\n{"a": [1, 2]}\nline two'
        out = format_document(text)
        assert out == 'line one\n{\n  "a": [\n    1,\n    2\n  ]\n}\nline two'

    def test_after_colon_gets_leading_newline(self):
        assert format_document('msg: {"a":1}') == 'msg: \n{\n  "a": 1\n}'

    def test_guard_leaves_incidental_braces(self):
        text = 'foo {"a":1} bar'
        assert format_document(text) == text

    def test_host_list_is_not_json(self):
        text = "ok: [web1]\nTASK [setup] ****"
        assert format_document(text) == text

    def test_invalid_json_on_own_line(self):
        text = "{not json}\n[1, 2"
        assert format_document(text) == text

    def test_integer_beyond_64_bits_kept_exact(self):
        out = format_document('{"n": 123456789012345678901234567890}')
        assert out == '{\n  "n": 123456789012345678901234567890\n}'

    def test_deeply_nested_list(self):
        text = "[" * 300 + "1" + "]" * 300
        assert format_document(text) == json.dumps(json.loads(text), indent=2)

    def test_nesting_too_deep_to_render_left_alone(self):
        text = "x\n" + "[" * 5000 + "]" * 5000 + "\ny"
        result = format_document_with_stats(text)
        assert result.text == text
        assert result.stats.fallback["bare"] == 1


def test_log_lines_untouched():
    text = "PLAY [all] ***\n\nTASK [Gathering Facts] ***\nok: [web1]\n\nPLAY RECAP ***\n"
    assert format_document(text) == text


def test_stats_count_each_trigger():
    text = "\n".join(
        [
            "(item={'a': 1})",
            'x => {"b": 2}',
            '{"c": 3}',
            "ok: [web1]",
            'y => {"broken": }',
        ]
    )
    result = format_document_with_stats(text)
    assert result.stats.formatted == {"item": 1, "arrow": 1, "bare": 1}
    assert result.stats.fallback["arrow"] == 1
    assert result.stats.total_formatted == 3
    assert result.stats.as_dict()["arrow_formatted"] == 1


def test_rejects_non_text():
    with pytest.raises(FormatError):
        format_document(b"{}")  # type: ignore[arg-type]


# --- Idempotence over generated Ansible-like output ---

_SAFE = "abc XYZ_-:.{}[]()=>'\"\\\n"


def _text(max_size: int):
    # A backslash before "n" or a newline reads as a wrapped line escape, and a
    # trailing backslash collides with the doubled-quote repair
    return st.text(_SAFE, max_size=max_size).filter(
        lambda s: "\\n" not in s and "\\\n" not in s and not s.endswith("\\")
    )


_scalars = st.none() | st.booleans() | st.integers(-(10**6), 10**6) | _text(10)
_values = st.recursive(
    _scalars,
    lambda children: st.lists(children, max_size=3)
    | st.dictionaries(_text(6), children, max_size=3),
    max_leaves=8,
)
_objects = st.dictionaries(_text(6), _values, max_size=4)
_log_lines = st.sampled_from(
    ["TASK [setup] ****", "PLAY RECAP", "foo {bar} baz", "ok: [web1]", "", "  skipping: [db]"]
)
_pieces = st.one_of(
    _log_lines,
    _objects.map(lambda o: f"ok: [web1] => (item={o!r})"),
    _objects.map(lambda o: f"changed: [web1] => {json.dumps(o)}"),
    _objects.map(json.dumps),
)


@settings(max_examples=200)
@given(st.lists(_pieces, max_size=6))
def test_formatting_is_idempotent(pieces):
    once = format_document("\n".join(pieces))
    assert format_document(once) == once


def test_bare_region_with_escaped_newline_is_repaired():
    out = format_document('msg:\n{"a": "x\\ny"}')
    assert out == 'msg:\n{\n  "a": "x\\ny"\n}'
    assert format_document(out) == out
