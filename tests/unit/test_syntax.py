import json

import pytest

import json_syntax as js
from json_syntax import Outcome


# ---------------------------------------------------------------------------
# string escapes
# ---------------------------------------------------------------------------
def test_invalid_hex_escape_reports_offset():
    bad = '["\\u123g"]'
    with pytest.raises(SyntaxError) as ei:
        js.parse(bad)
    assert "invalid hex escape \\u123g at offset 2" in str(ei.value)


def test_short_unicode_escape_reports_offset():
    bad = '["\\u12"]'
    with pytest.raises(SyntaxError) as ei:
        js.parse(bad)
    assert "short unicode escape" in str(ei.value)


def test_invalid_single_escape_reports_offset():
    bad = '["\\q"]'
    with pytest.raises(SyntaxError) as ei:
        js.parse(bad)
    assert "invalid escape \\q" in str(ei.value)


def test_unpaired_surrogate_detected():
    with pytest.raises(SyntaxError) as ei:
        js.parse('["\\uD800"]')
    assert "unpaired surrogate" in str(ei.value)
    with pytest.raises(SyntaxError):
        js.parse('["\\uDE00\\uD83D"]')


def test_surrogate_pair_decodes_to_one_code_point():
    assert js.parse('["\\ud83d\\ude00"]') == ["\U0001F600"]


def test_escapes_and_non_ascii_decode():
    assert js.parse('"café \\"q\\" \\\\ \\/ \\t"') == 'café "q" \\ / \t'


def test_trailing_backslash_direct_call():
    with pytest.raises(SyntaxError) as ei:
        js._validate_string('"\\', 0)
    assert "trailing backslash in string" in str(ei.value)


def test_raw_control_character_in_string_is_syntax_error():
    assert js.classify('["a\nb"]') is Outcome.SYNTAX_ERROR


# ---------------------------------------------------------------------------
# structure
# ---------------------------------------------------------------------------
def test_extra_data_reports_offset():
    with pytest.raises(SyntaxError) as ei:
        js.parse("[1] 2")
    assert "extra data after root value at offset 4" in str(ei.value)


def test_scalars_are_accepted_at_root():
    assert js.parse("true") is True
    assert js.parse(" -1.5e3 ") == -1500.0
    assert js.parse('"x"') == "x"


def test_duplicate_keys_last_wins_by_default():
    assert js.parse('{"a":1,"a":2}') == {"a": 2}


def test_duplicate_key_rejected_on_request():
    with pytest.raises(SyntaxError) as ei:
        js.parse('{"a":1,"a":2}', allow_dup=False)
    assert "duplicate key 'a'" in str(ei.value)


def test_missing_comma_in_object_reports_expected():
    with pytest.raises(SyntaxError) as ei:
        js.parse('{"a":1 "b":2}')
    assert "expected COMMA" in str(ei.value)


def test_missing_closing_bracket_is_unexpected_end():
    with pytest.raises(js.UnexpectedEndError) as ei:
        js.parse("[1,2")
    assert "unexpected end of input" in str(ei.value)


def test_depth_limit():
    with pytest.raises(SyntaxError) as ei:
        js.parse("[[[1]]]", max_depth=1)
    assert "depth limit exceeded" in str(ei.value)
    with pytest.raises(SyntaxError):
        js.parse("[[[1]]]", max_depth=3)
    assert js.parse("[[[1]]]", max_depth=4) == [[[1]]]


def test_default_depth_allows_127_nested_containers():
    assert js.classify("[" * 127 + "]" * 127) is Outcome.VALID
    assert js.classify('{"a":' * 127 + "1" + "}" * 127) is Outcome.VALID


def test_default_depth_rejects_128_nested_containers():
    assert js.classify("[" * 128 + "]" * 128) is Outcome.SYNTAX_ERROR
    assert js.classify('{"a":' * 128 + "1" + "}" * 128) is Outcome.SYNTAX_ERROR


def test_scalars_do_not_count_toward_depth():
    assert js.parse("[" * 3 + "1" + "]" * 3, max_depth=4) == [[[1]]]


def test_form_feed_is_not_json_whitespace():
    assert js.classify("[1,\f2]") is Outcome.SYNTAX_ERROR


# ---------------------------------------------------------------------------
# classification
# ---------------------------------------------------------------------------
def test_valid_document_classifies_valid():
    assert js.diagnose('{\n    "a": [1, 2.5, null]\n}\n') == (Outcome.VALID, None)


@pytest.mark.parametrize("text", [
    '{"a": }',
    "[1,]",
    '{"a" 1}',
    "[01]",
    "[1.]",
    "[1.e5]",
    "[trux]",
    "'single'",
    "\ufeff{}",
    "[" * 200 + "]" * 200,
    '{"a": 1} t',
    "[1] -",
    '{} "abc',
    "[1]n",
    "[1 tru",
    "{tru",
    '{"a": 1 "b',
])
def test_syntax_errors(text):
    outcome, detail = js.diagnose(text)
    assert outcome is Outcome.SYNTAX_ERROR
    assert detail


@pytest.mark.parametrize("text", [
    "",
    "   \n",
    "{",
    '{"a": 1',
    '{"a":',
    "[1,",
    '["abc',
    '["ab\\',
    '["\\u12',
    "[tru",
    "[nul",
    "[f",
    "[1.",
    "[1.5e",
    "[1e-",
    "-",
    "[1, tru",
    '{"a": 1, "b',
    '{"a',
    "[-0.",
])
def test_truncated_input_is_unexpected_end(text):
    assert js.classify(text) is Outcome.UNEXPECTED_END


def test_partial_token_after_root_reports_extra_data():
    with pytest.raises(SyntaxError) as ei:
        js.parse('{"a": 1} t')
    assert not isinstance(ei.value, js.UnexpectedEndError)
    assert "extra data after root value at offset 9" in str(ei.value)


# Inputs both grammars agree on; json.loads extras (NaN, lone surrogates)
# are left out on purpose.
AGREEMENT_CASES = [
    "{}", "[]", "0", "-0.5e+7", '"a\\u00e9"', '{"a": [true, false, null]}',
    ' \t\r\n[1, 2]\n', '{"a": 1, "a": 2}', '["\\ud83d\\ude00"]',
    "", "[", "[1,]", "[01]", "1.", ".5", "+1", "[1 2]", '{"a" 1}', "{1: 2}",
    "'a'", "tru", "[1] 2", '["\\x41"]', '["a\tb"]', "[1,\v2]", "\ufeff[]",
    '{"a": 1} t', "[1] -",
]


@pytest.mark.parametrize("text", AGREEMENT_CASES)
def test_acceptance_matches_stdlib_json(text):
    try:
        json.loads(text)
        stdlib_ok = True
    except ValueError:
        stdlib_ok = False
    assert (js.classify(text) is Outcome.VALID) == stdlib_ok


def test_bytes_are_decoded_before_parsing():
    assert js.classify('{"k": "café"}'.encode("utf-8")) is Outcome.VALID


def test_undecodable_bytes_are_unrecoverable():
    with pytest.raises(js.UnrecoverableError):
        js.classify(b'{"k": "\xff"}')
