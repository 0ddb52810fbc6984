# format_grammar.py
# Line-oriented layout checker for canonically pretty-printed JSON
#
# =============================================================================
#  LAYOUT GRAMMAR: ORDERED ALTERNATION OVER PHYSICAL LINES
# =============================================================================
#
# Runs only on text that already parsed as JSON. Each physical line must hold
# exactly one structural token:
#
#   open line    INDENT [KEY ": "] ("{" | "[")             EOL
#   close line   INDENT ("}" | "]")          ( [","] EOL | end of input )
#   value line   INDENT [KEY ": "] SCALAR    ( [","] EOL | end of input )
#
# The three rules are tried in that order from the start of the line; the
# first one that matches the whole line wins. SCALAR alternatives are tried
# in order too (string, number, null, true, false, {}, []) and the first
# lexeme that matches is kept.
#
# A second pass walks the (indent, kind) records and checks that every line
# sits at 4 x the current nesting depth. Without ``strict`` the pass does not
# require depth to return to zero and does not pair close kinds with their
# openers; both hold for any document that also passed the syntax stage.
#
# =============================================================================

import re
from typing import Iterator, List, Optional, Tuple

# ---------------------------------------------------------------------------
# CONSTANTS
# ---------------------------------------------------------------------------
INDENT_WIDTH = 4

OBJECT_OPEN  = "OBJECT_OPEN"
OBJECT_CLOSE = "OBJECT_CLOSE"
ARRAY_OPEN   = "ARRAY_OPEN"
ARRAY_CLOSE  = "ARRAY_CLOSE"
SCALAR_VALUE = "SCALAR_VALUE"

_OPENERS = {"{": OBJECT_OPEN, "[": ARRAY_OPEN}
_CLOSERS = {"}": OBJECT_CLOSE, "]": ARRAY_CLOSE}
_CLOSER_FOR = {OBJECT_OPEN: OBJECT_CLOSE, ARRAY_OPEN: ARRAY_CLOSE}

# ---------------------------------------------------------------------------
# REGEX BLUEPRINT
# ---------------------------------------------------------------------------
# Strings never cross a line break; a backslash always takes the next char.
_STRING = r'"(?:[^"\\\r\n]|\\[^\r\n])*"'
_NUMBER = r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?"

_INDENT_RE     = re.compile(r" *")
_MEMBER_KEY_RE = re.compile(_STRING + r": ")
_EOL_RE        = re.compile(r"\r?\n")

_SCALAR_RES = tuple(re.compile(p) for p in (
    _STRING,
    _NUMBER,
    r"null",
    r"true",
    r"false",
    r"\{\}",
    r"\[\]",
))

# ---------------------------------------------------------------------------
# RECORDS AND ERRORS
# ---------------------------------------------------------------------------
class Line(Tuple[int, str, int]):
    """
    Immutable layout record: (indent, kind, absolute_offset of line start).
    """
    pass


class FormatError(ValueError):
    """Text departs from the canonical layout at ``lineno`` (1-based)."""

    def __init__(self, message: str, lineno: int):
        super().__init__(f"line {lineno}: {message}")
        self.lineno = lineno

# ---------------------------------------------------------------------------
# LEXICAL PIECES
# ---------------------------------------------------------------------------
# Each helper takes (text, pos) and returns the position after what it
# recognized, or None.

def _indentation(text: str, pos: int) -> Tuple[int, int]:
    end = _INDENT_RE.match(text, pos).end()
    return end - pos, end


def _member_key(text: str, pos: int) -> Optional[int]:
    m = _MEMBER_KEY_RE.match(text, pos)
    return m.end() if m else None


def _line_end(text: str, pos: int) -> Optional[int]:
    m = _EOL_RE.match(text, pos)
    return m.end() if m else None


def _value_end(text: str, pos: int) -> Optional[int]:
    """Optional ',' then EOL, or end of input with no comma."""
    if pos == len(text):
        return pos
    if text.startswith(",", pos):
        pos += 1
    return _line_end(text, pos)


def _scalar(text: str, pos: int) -> Optional[int]:
    for rx in _SCALAR_RES:
        m = rx.match(text, pos)
        if m:
            return m.end()
    return None

# ---------------------------------------------------------------------------
# LINE RULES
# ---------------------------------------------------------------------------
def _open_line(text: str, pos: int) -> Optional[Tuple[int, Line]]:
    indent, cur = _indentation(text, pos)
    key_end = _member_key(text, cur)
    if key_end is not None:
        cur = key_end
    kind = _OPENERS.get(text[cur:cur + 1])
    if kind is None:
        return None
    end = _line_end(text, cur + 1)
    if end is None:
        return None
    return end, Line((indent, kind, pos))


def _close_line(text: str, pos: int) -> Optional[Tuple[int, Line]]:
    indent, cur = _indentation(text, pos)
    kind = _CLOSERS.get(text[cur:cur + 1])
    if kind is None:
        return None
    end = _value_end(text, cur + 1)
    if end is None:
        return None
    return end, Line((indent, kind, pos))


def _value_line(text: str, pos: int) -> Optional[Tuple[int, Line]]:
    indent, cur = _indentation(text, pos)
    key_end = _member_key(text, cur)
    if key_end is not None:
        cur = key_end
    cur = _scalar(text, cur)
    if cur is None:
        return None
    end = _value_end(text, cur)
    if end is None:
        return None
    return end, Line((indent, SCALAR_VALUE, pos))


_LINE_RULES = (_open_line, _close_line, _value_line)


def iter_lines(text: str) -> Iterator[Line]:
    """
    Yield one Line per physical line of ``text``.

    Raises FormatError at the first line no rule accepts, including empty
    input and anything left over after the last accepted line.
    """
    pos = 0
    lineno = 1
    while True:
        for rule in _LINE_RULES:
            hit = rule(text, pos)
            if hit is not None:
                break
        else:
            raise FormatError("no layout rule matches", lineno)
        pos, line = hit
        yield line
        if pos == len(text):
            return
        lineno += 1

# ---------------------------------------------------------------------------
# NESTING PASS
# ---------------------------------------------------------------------------
def _expect_indent(indent: int, depth: int, lineno: int) -> None:
    if indent != INDENT_WIDTH * depth:
        raise FormatError(f"indented {indent} spaces, expected {INDENT_WIDTH * depth}", lineno)


def _check_nesting(lines: List[Line], strict: bool) -> None:
    depth = 0
    open_kinds: List[str] = []
    for lineno, (indent, kind, _) in enumerate(lines, 1):
        if kind in (OBJECT_OPEN, ARRAY_OPEN):
            _expect_indent(indent, depth, lineno)
            depth += 1
            open_kinds.append(kind)
        elif kind in (OBJECT_CLOSE, ARRAY_CLOSE):
            depth -= 1
            if depth < 0:
                raise FormatError("closing bracket without an open one", lineno)
            opener = open_kinds.pop()
            if strict and _CLOSER_FOR[opener] != kind:
                raise FormatError(f"{kind} closes {opener}", lineno)
            _expect_indent(indent, depth, lineno)
        else:
            _expect_indent(indent, depth, lineno)

    if strict and depth:
        raise FormatError(f"{depth} bracket(s) still open at end of input", len(lines))

# ---------------------------------------------------------------------------
# PUBLIC API
# ---------------------------------------------------------------------------
def validate_layout(text: str, *, strict: bool = False) -> List[Line]:
    """
    Parse ``text`` into Line records and run the nesting pass.

    Returns the records on success; raises FormatError naming the first
    offending line otherwise.
    """
    lines = list(iter_lines(text))
    _check_nesting(lines, strict)
    return lines


def check_format(text: str, *, strict: bool = False) -> bool:
    """True iff ``text`` is laid out canonically."""
    try:
        validate_layout(text, strict=strict)
    except FormatError:
        return False
    return True
