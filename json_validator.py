# json_validator.py
# CI gate: every candidate .json file must parse and be canonically laid out
#
# =============================================================================
#  DRIVER
# =============================================================================
#
# Candidate paths arrive one per line on stdin (typically the output of
# `git diff --name-only`) or as positional arguments. Paths that are not
# regular files ending in ".json" are skipped without comment.
#
# For each remaining file the syntax stage runs first; only text that parses
# is handed to the layout grammar. Per-file issues are counted and never stop
# the batch. Undecodable or unreadable files do stop it.
#
# Exit codes:
#   0   no issues
#   65  at least one issue (EX_DATAERR)
#   1   fatal condition, batch aborted
#
# =============================================================================

import argparse
import sys
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, TextIO, Tuple

import format_grammar
import json_syntax
from json_syntax import DEPTH_LIMIT_DEFAULT, Outcome, UnrecoverableError

# ---------------------------------------------------------------------------
# CONSTANTS AND TUNABLES
# ---------------------------------------------------------------------------
JSON_EXTENSION = ".json"
EXIT_ISSUES    = 65
EXIT_FATAL     = 1
GROUP_NAME     = "errors_and_warnings"

SYNTAX_ERROR   = Outcome.SYNTAX_ERROR.value
UNEXPECTED_END = Outcome.UNEXPECTED_END.value
WRONG_FORMAT   = "WrongFormat"

# ---------------------------------------------------------------------------
# INPUT
# ---------------------------------------------------------------------------
def candidate_paths(lines: Iterable[str]) -> Iterator[Path]:
    """Yield the entries of ``lines`` that name existing .json files."""
    for raw in lines:
        path = Path(raw.rstrip("\r\n"))
        if path.suffix != JSON_EXTENSION or not path.is_file():
            continue
        yield path


def read_contents(path: Path) -> str:
    # newline="" keeps \r\n intact so the layout grammar sees the real bytes
    with open(path, "r", encoding="utf-8", newline="") as fh:
        return fh.read()

# ---------------------------------------------------------------------------
# PER-FILE CHECK
# ---------------------------------------------------------------------------
def check_contents(contents: str, *, strict: bool = False,
                   max_depth: int = DEPTH_LIMIT_DEFAULT,
                   allow_dup: bool = True) -> Tuple[Optional[str], Optional[str]]:
    """
    Return ``(issue, detail)`` for one file's text.

    ``issue`` is None for a clean file, otherwise SyntaxError, UnexpectedEnd
    or WrongFormat. The layout grammar never sees text that failed to parse.
    """
    outcome, detail = json_syntax.diagnose(contents, max_depth=max_depth, allow_dup=allow_dup)
    if outcome is not Outcome.VALID:
        return outcome.value, detail
    try:
        format_grammar.validate_layout(contents, strict=strict)
    except format_grammar.FormatError as exc:
        return WRONG_FORMAT, str(exc)
    return None, None

# ---------------------------------------------------------------------------
# BATCH RUN
# ---------------------------------------------------------------------------
def run(lines: Iterable[str], out: TextIO, *, strict: bool = False, verbose: bool = False,
        max_depth: int = DEPTH_LIMIT_DEFAULT, allow_dup: bool = True) -> int:
    """
    Check every candidate in ``lines``, write the grouped report to ``out``
    and return the exit code. Fatal errors propagate to the caller.
    """
    json_err = 0
    format_err = 0

    print(f"::group::{GROUP_NAME}", file=out)
    for path in candidate_paths(lines):
        issue, detail = check_contents(read_contents(path), strict=strict,
                                       max_depth=max_depth, allow_dup=allow_dup)
        if issue is None:
            continue
        print(f'"{path}" {issue}', file=out)
        if verbose and detail:
            print(f"    {detail}", file=out)
        if issue == WRONG_FORMAT:
            format_err += 1
        else:
            json_err += 1
    print("::endgroup::", file=out)

    if json_err + format_err == 0:
        return 0
    print("Found", file=out)
    print(f"     {json_err} JSON encoding errors and", file=out)
    print(f"     {format_err} format errors.", file=out)
    return EXIT_ISSUES


def dump_layout(lines: Iterable[str], out: TextIO) -> int:
    """
    Print the Line records of every candidate; stop a file at its first bad
    line. Returns EXIT_ISSUES when any file stopped early.
    """
    failed = 0
    for path in candidate_paths(lines):
        print(f'"{path}"', file=out)
        try:
            for line in format_grammar.iter_lines(read_contents(path)):
                print(f"    {line}", file=out)
        except format_grammar.FormatError as exc:
            print(f"FormatError: {path}: {exc}", file=sys.stderr)
            failed += 1
    return EXIT_ISSUES if failed else 0

# ---------------------------------------------------------------------------
# CLI ENTRYPOINT
# ---------------------------------------------------------------------------
def _cli(argv: List[str], stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> int:
    ap = argparse.ArgumentParser(description="Check JSON syntax and canonical 4-space layout")
    ap.add_argument("paths", nargs="*",
                    help="candidate files; read one per line from stdin when omitted")
    ap.add_argument("--strict", action="store_true",
                    help="also require balanced bracket kinds and depth 0 at end of file")
    ap.add_argument("-v", "--verbose", action="store_true", help="print the reason under each issue")
    ap.add_argument("--debug", action="store_true", help="dump layout lines of each file and exit")
    ap.add_argument("--max-depth", type=int, default=DEPTH_LIMIT_DEFAULT,
                    help="reject files whose containers nest this deep")
    ap.add_argument("--reject-dup-keys", action="store_true")
    args = ap.parse_args(argv)

    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout
    lines = args.paths if args.paths else stdin

    try:
        if args.debug:
            return dump_layout(lines, stdout)
        return run(lines, stdout, strict=args.strict, verbose=args.verbose,
                   max_depth=args.max_depth, allow_dup=not args.reject_dup_keys)
    except (UnrecoverableError, OSError, UnicodeDecodeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FATAL


def main() -> None:
    sys.exit(_cli(sys.argv[1:]))

# ---------------------------------------------------------------------------
# MAIN GUARD
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    main()
