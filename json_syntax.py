# json_syntax.py
# Hand-rolled JSON lexer, parser and syntax classifier for the layout gate
#
# =============================================================================
#  SYNTAX STAGE: RECURSIVE DESCENT OVER A SINGLE-REGEX LEXER
# =============================================================================
#
# A file must parse as JSON before its layout is looked at. This module owns
# that first stage and sorts every failure into one of three buckets:
#
# 1. SyntaxError          - bad character, bad escape, structural mismatch,
#                           extra data after the root value, depth overflow.
# 2. UnexpectedEndError   - the text stopped before a value or structure was
#                           complete (unclosed bracket, unterminated string,
#                           truncated literal or number, empty input).
# 3. UnrecoverableError   - the input is not text at all (undecodable bytes)
#                           or the interpreter ran out of stack. Not a
#                           per-file issue: the caller aborts the batch.
#
# The lexer is one compiled regex with named groups. Coverage gaps are
# errors, except a tail of the input that is the start of a legal token: it
# becomes a PARTIAL token, and the parser reports an unexpected end only when
# that token kind was acceptable at that point ("[1, tru"), otherwise a
# syntax error ("[1 tru", "[1] tru").
#
# The parser is hand-rolled rather than the stdlib json module because the
# stdlib cannot tell truncation from other syntax errors and accepts NaN,
# Infinity and lone surrogates. Outcomes follow serde_json's classification;
# tests cross-check acceptance against json.loads on inputs where the two
# grammars agree.
#
# =============================================================================

import enum
import re
from typing import Iterator, List, Optional, Tuple, Union

# ---------------------------------------------------------------------------
# CONSTANTS AND TUNABLES
# ---------------------------------------------------------------------------
DEPTH_LIMIT_DEFAULT = 128   # Containers nest at most 127 deep, as in serde_json

# ---------------------------------------------------------------------------
# REGEX BLUEPRINT
# ---------------------------------------------------------------------------
_WHITESPACE = r"[ \t\n\r]+"
_NUMBER     = r'-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?'
_ESCAPE     = r'\\.'
_STRING     = r'"(?:[^"\\\x00-\x1F]|' + _ESCAPE + r')*"'
_LITERAL    = r"true|false|null"

_TOKEN_RE = re.compile(
    rf"(?P<STRING>{_STRING})|"
    rf"(?P<NUMBER>{_NUMBER})|"
    rf"(?P<LITERAL>{_LITERAL})|"
    r"(?P<BRACE>[{}])|"          # { or }
    r"(?P<BRACKET>[\[\]])|"      # [ or ]
    r"(?P<COMMA>,)|"
    r"(?P<COLON>:)|"
    rf"(?P<WHITESPACE>{_WHITESPACE})",
)

# Proper prefixes of legal tokens, anchored at end of input.
_TRUNCATED_RE = re.compile(
    r"(?:"
    r"-|-?(?:0|[1-9]\d*)(?:\.|(?:\.\d+)?[eE][+-]?)|"
    r"t(?:r(?:u)?)?|f(?:a(?:l(?:s)?)?)?|n(?:u(?:l)?)?|"
    r'"(?:[^"\\\x00-\x1F]|\\["\\/bfnrt]|\\u[0-9a-fA-F]{4})*(?:\\(?:u[0-9a-fA-F]{0,3})?)?'
    r")\Z"
)

_SIMPLE_ESCAPES = {
    '"': '"', "\\": "\\", "/": "/",
    "b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t",
}

# ---------------------------------------------------------------------------
# ERRORS AND OUTCOMES
# ---------------------------------------------------------------------------
class UnexpectedEndError(SyntaxError):
    """Input ended before the current value or structure was closed."""


class UnrecoverableError(Exception):
    """Failure that is not a content syntax problem; aborts the whole run."""


class Outcome(enum.Enum):
    VALID          = "Valid"
    SYNTAX_ERROR   = "SyntaxError"
    UNEXPECTED_END = "UnexpectedEnd"

# ---------------------------------------------------------------------------
# TOKEN RECORD
# ---------------------------------------------------------------------------
class Token(Tuple[str, object, int]):
    """
    Immutable token record: (kind, value, absolute_offset).

    Offsets are retained so every SyntaxError can say where it happened.
    """
    pass

# ---------------------------------------------------------------------------
# LOOKAHEAD RING
# ---------------------------------------------------------------------------
class LookAhead:
    """
    One-slot pushback iterator.

    JSON is LL(1), so a single token of lookahead is all the parser needs.
    """
    def __init__(self, iterable: Iterator[Token]):
        self._iter = iter(iterable)
        self._buf: List[Token] = []

    def __iter__(self):
        return self

    def __next__(self):
        if self._buf:
            return self._buf.pop()
        return next(self._iter)

    def peek(self) -> Token:
        if not self._buf:
            self._buf.append(next(self._iter))
        return self._buf[-1]

# ---------------------------------------------------------------------------
# STRING VALIDATION
# ---------------------------------------------------------------------------
def _validate_string(raw: str, token_start: int) -> str:
    """
    Unescape a JSON string literal and reject invalid escapes.

    Handles three classes of errors with precise offsets:
    1) Structural issues - unterminated string or trailing backslash before a missing quote.
    2) Escape syntax - invalid single escape, short unicode escape, invalid hex digits.
    3) Unicode correctness - surrogate escapes that do not form a pair.
    """
    if len(raw) < 2 or raw[0] != '"' or raw[-1] != '"':
        if len(raw) > 0 and raw[-1] == "\\":
            raise SyntaxError(f"trailing backslash in string at offset {token_start + len(raw) - 1}")
        raise SyntaxError(f"unterminated string starting at offset {token_start}")

    inner = raw[1:-1]
    out: List[str] = []
    i = 0
    n = len(inner)
    while i < n:
        ch = inner[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        if i + 1 >= n:
            raise SyntaxError(f"trailing backslash in string at offset {token_start + 1 + i}")
        esc = inner[i + 1]
        if esc == "u":
            if i + 6 > n:
                raise SyntaxError(f"short unicode escape at offset {token_start + 1 + i}")
            hexpart = inner[i + 2:i + 6]
            if not all(c in "0123456789abcdefABCDEF" for c in hexpart):
                seq = inner[i:i + 6]
                raise SyntaxError(f"invalid hex escape {seq} at offset {token_start + 1 + i}")
            out.append(chr(int(hexpart, 16)))
            i += 6
        elif esc in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[esc])
            i += 2
        else:
            raise SyntaxError(f"invalid escape \\{esc} at offset {token_start + 1 + i}")

    # Round-trip through UTF-16: a surrogate pair collapses into one code
    # point, a lone half fails to decode.
    try:
        return "".join(out).encode("utf-16", "surrogatepass").decode("utf-16")
    except UnicodeDecodeError:
        raise SyntaxError(f"unpaired surrogate in string at offset {token_start}") from None

# ---------------------------------------------------------------------------
# LEXER
# ---------------------------------------------------------------------------
def lex(text: str) -> Iterator[Token]:
    """
    Single-pass generator producing tokens. Rejects any gap in regex coverage.

    A tail of the input that is only the beginning of a token comes out as a
    final PARTIAL token carrying the raw text; whether that means the input
    was cut short depends on what the parser expected there.

    Values are converted to Python natives here so the parser only has to
    deal with structure.
    """
    pos = 0
    for m in _TOKEN_RE.finditer(text):
        kind  = m.lastgroup
        value = m.group()
        start = m.start()

        if start != pos:
            break
        # "1." matches NUMBER "1"; look at the whole tail before trusting it.
        if kind == "NUMBER" and _TRUNCATED_RE.match(text, start):
            yield Token(("PARTIAL", text[start:], start))
            return
        pos = m.end()

        if kind == "WHITESPACE":
            continue
        if kind == "STRING":
            value = _validate_string(value, start)
        elif kind == "NUMBER":
            value = float(value) if any(c in value for c in ".eE") else int(value)
        elif kind == "LITERAL":
            value = {"true": True, "false": False, "null": None}[value]

        yield Token((kind, value, start))

    if pos != len(text):
        if _TRUNCATED_RE.match(text, pos):
            yield Token(("PARTIAL", text[pos:], pos))
            return
        raise SyntaxError(f"invalid character at offset {pos}")

# ---------------------------------------------------------------------------
# PARSER UTILITY
# ---------------------------------------------------------------------------
def _peek(tokens: LookAhead) -> Token:
    try:
        return tokens.peek()
    except StopIteration:
        raise UnexpectedEndError("unexpected end of input") from None


def _expect(tokens: LookAhead, expected_kind: str, expected_value=None):
    """
    Consume and verify the next token. Raises a precise error with expected and actual.
    """
    try:
        kind, value, pos = next(tokens)
    except StopIteration:
        raise UnexpectedEndError("unexpected end of input") from None
    if kind == "PARTIAL" and expected_kind == "STRING" and value.startswith('"'):
        raise UnexpectedEndError(f"unexpected end of input in string at offset {pos}")
    if kind != expected_kind or (expected_value is not None and value != expected_value):
        exp = expected_kind if expected_value is None else f"{expected_kind} '{expected_value}'"
        raise SyntaxError(f"unexpected token {kind} '{value}' at offset {pos} - expected {exp}")
    return value

# ---------------------------------------------------------------------------
# CORE VALUE PARSER
# ---------------------------------------------------------------------------
def _parse_value(tokens: LookAhead, depth: int, max_depth: int, allow_dup: bool):
    """
    Dispatch based on token type. ``depth`` counts the enclosing containers;
    opening the one that would reach ``max_depth`` is a hard stop.
    """
    try:
        kind, value, pos = next(tokens)
    except StopIteration:
        raise UnexpectedEndError("unexpected end of input") from None

    if kind in {"STRING", "NUMBER", "LITERAL"}:
        return value
    if kind == "PARTIAL":
        raise UnexpectedEndError(f"unexpected end of input in token at offset {pos}")
    if (kind, value) in {("BRACE", "{"), ("BRACKET", "[")} and depth + 1 >= max_depth:
        raise SyntaxError(f"depth limit exceeded at offset {pos}")
    if kind == "BRACE" and value == "{":
        return _parse_object(tokens, depth + 1, max_depth, allow_dup)
    if kind == "BRACKET" and value == "[":
        return _parse_array(tokens, depth + 1, max_depth, allow_dup)

    raise SyntaxError(f"unexpected token {kind} '{value}' at offset {pos} - value expected")

# ---------------------------------------------------------------------------
# ARRAY PARSER
# ---------------------------------------------------------------------------
def _parse_array(tokens: LookAhead, depth: int, max_depth: int, allow_dup: bool):
    items: List = []
    pk = _peek(tokens)
    if pk[0] == "BRACKET" and pk[1] == "]":
        next(tokens)
        return items

    while True:
        items.append(_parse_value(tokens, depth, max_depth, allow_dup))
        pk = _peek(tokens)
        if pk[0] == "BRACKET" and pk[1] == "]":
            next(tokens)
            break
        _expect(tokens, "COMMA", ",")
    return items

# ---------------------------------------------------------------------------
# OBJECT PARSER
# ---------------------------------------------------------------------------
def _parse_object(tokens: LookAhead, depth: int, max_depth: int, allow_dup: bool):
    """
    Parse a JSON object. Duplicate keys are accepted (last one wins) unless
    ``allow_dup`` is off.
    """
    obj = {}
    pk = _peek(tokens)
    if pk[0] == "BRACE" and pk[1] == "}":
        next(tokens)
        return obj

    while True:
        key = _expect(tokens, "STRING")
        _expect(tokens, "COLON", ":")
        if not allow_dup and key in obj:
            raise SyntaxError(f"duplicate key '{key}'")
        obj[key] = _parse_value(tokens, depth, max_depth, allow_dup)
        pk = _peek(tokens)
        if pk[0] == "BRACE" and pk[1] == "}":
            next(tokens)
            break
        _expect(tokens, "COMMA", ",")
    return obj

# ---------------------------------------------------------------------------
# PUBLIC API
# ---------------------------------------------------------------------------
def parse(text: str, *, max_depth: int = DEPTH_LIMIT_DEFAULT, allow_dup: bool = True):
    """
    Parses JSON text into Python structures.

    Any JSON value is accepted at the root. Trailing tokens after the root
    value are rejected so the whole input is accounted for.
    """
    tokens = LookAhead(lex(text))
    result = _parse_value(tokens, 0, max_depth, allow_dup)
    try:
        _, _, p2 = next(tokens)
    except StopIteration:
        return result
    raise SyntaxError(f"extra data after root value at offset {p2}")


def diagnose(contents: Union[str, bytes], *, max_depth: int = DEPTH_LIMIT_DEFAULT,
             allow_dup: bool = True) -> Tuple[Outcome, Optional[str]]:
    """
    Classify ``contents`` and return the outcome with the parser's message.

    Raises UnrecoverableError when the input cannot be treated as text or the
    parser cannot finish for reasons unrelated to the content's syntax.
    """
    if isinstance(contents, bytes):
        try:
            contents = contents.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise UnrecoverableError(f"contents are not valid UTF-8: {exc}") from exc
    try:
        parse(contents, max_depth=max_depth, allow_dup=allow_dup)
    except UnexpectedEndError as exc:
        return Outcome.UNEXPECTED_END, str(exc)
    except SyntaxError as exc:
        return Outcome.SYNTAX_ERROR, str(exc)
    except RecursionError as exc:
        raise UnrecoverableError("recursion limit reached while parsing") from exc
    return Outcome.VALID, None


def classify(contents: Union[str, bytes], **kwargs) -> Outcome:
    """Return only the Outcome of :func:`diagnose`."""
    return diagnose(contents, **kwargs)[0]
