# json_parser.py
# JSON grammar assembled from parser combinators, plus the parse() entry
# point and a small command-line wrapper.
#
# =============================================================================
#  PARSER IMPLEMENTATION: COMBINATOR DESCENT
# =============================================================================
#
# Each JSON production is a parser built from the lexical primitives in
# lexer.py and the combinators in combinators.py. Parsing a value is a
# recursive descent over one production at a time; there is no global
# position or state, only composition.
#
# Design Rationale:
# 1. JSON alternatives are disjoint on their first character, so ordered
#    choice never needs more than a failed literal match to move on and the
#    unbounded backtracking of either() stays linear in practice.
# 2. Once an opening '[', '{', ',' or ':' has been consumed no other rule can
#    match, so the grammar commits there with expect(). A failure past that
#    point is a located ParseError instead of a silent backtrack.
# 3. Diagnostics re-run the primitive that should have matched at the
#    failing position. Parsers are referentially transparent, so the second
#    run reproduces the first and points at the exact offending character.
#
# Depth guard defaults to 19 (mirroring JSON_checker). The recursion of the
# combinators costs Python stack frames per nesting level, so the guard also
# keeps deep documents clear of the interpreter recursion limit [RFC 8259].
#
# =============================================================================

import argparse
import logging
import sys
from functools import lru_cache
from typing import List, NamedTuple, Optional, Tuple

from combinators import (
    Failure,
    Input,
    Parser,
    ParseResult,
    either,
    expect,
    lazy,
    left,
    pair,
    position,
    pred,
    pure,
    right,
    zero_or_more,
    zero_or_one,
)
from errors import ErrorKind, ParseError
from lexer import (
    SIMPLE_ESCAPES,
    any_char,
    decimal,
    int_,
    is_high_surrogate,
    is_low_surrogate,
    match_literal,
    quoted_string,
    space0,
    trim,
    uint,
)
from value import Array, Bool, Null, Number, Object, String, Value

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# CONSTANTS AND TUNABLES
# ---------------------------------------------------------------------------
DEPTH_LIMIT_DEFAULT = 19          # Matches JSON_checker - stops unbounded nesting
NUMBER_CHARS        = "0123456789+-.eE"
NUMBER_START        = "0123456789+-."
LITERAL_WORDS       = {"n": "null", "t": "true", "f": "false"}
PARSER_CACHE_SIZE   = 256         # Built json_value parsers kept across parse() calls


class ParseOptions(NamedTuple):
    max_depth: int = DEPTH_LIMIT_DEFAULT
    allow_dup: bool = True


DEFAULT_OPTIONS = ParseOptions()

# ---------------------------------------------------------------------------
# DIAGNOSTICS
# ---------------------------------------------------------------------------
def _skip_ws(at: Input) -> Input:
    return space0().parse(at).remaining


def _escape_error(at: Input) -> ParseError:
    """Explain why the escape sequence starting at the backslash is bad."""
    after = at.advance()
    esc = after.peek()
    if esc is None:
        return ParseError(ErrorKind.UNTERMINATED_STRING, "trailing backslash in string", at)
    if esc == "u":
        hexpart = at.text[at.offset + 2:at.offset + 6]
        run = len(hexpart) - len(hexpart.lstrip("0123456789abcdefABCDEF"))
        if run < 4:
            stop = hexpart[run] if run < len(hexpart) else None
            if stop is None or stop == '"':
                return ParseError(ErrorKind.INVALID_ESCAPE, "short unicode escape", at)
            seq = at.text[at.offset:at.offset + 2 + run + 1]
            return ParseError(ErrorKind.INVALID_ESCAPE, f"invalid hex escape {seq}", at)
        code = int(hexpart, 16)
        if is_high_surrogate(code) or is_low_surrogate(code):
            return ParseError(ErrorKind.INVALID_ESCAPE, "unpaired surrogate in string", at)
    elif esc not in SIMPLE_ESCAPES:
        return ParseError(ErrorKind.INVALID_ESCAPE, f"invalid escape \\{esc}", at)
    return ParseError(ErrorKind.INVALID_ESCAPE, "bad escape sequence", at)


def _string_error(at: Input) -> ParseError:
    """at points at an opening quote whose string did not parse."""
    res = quoted_string().parse(at)
    if not isinstance(res, Failure):
        return ParseError(ErrorKind.UNEXPECTED_TOKEN, "unexpected string", at)
    stop = res.remaining
    ch = stop.peek()
    if ch is None:
        return ParseError(ErrorKind.UNTERMINATED_STRING, "unterminated string", at)
    if ch == "\\":
        return _escape_error(stop)
    return ParseError(
        ErrorKind.CONTROL_CHARACTER,
        f"unescaped control character U+{ord(ch):04X} in string",
        stop,
    )


def _value_error(at: Input, eof_kind: ErrorKind, eof_message: str) -> ParseError:
    """A value was required at `at` and none of the value rules matched."""
    at = _skip_ws(at)
    ch = at.peek()
    if ch is None:
        return ParseError(eof_kind, eof_message, at)
    if ch == '"':
        return _string_error(at)
    if ch in NUMBER_START:
        return ParseError(ErrorKind.MALFORMED_NUMBER, "malformed number", at)
    if ch in LITERAL_WORDS:
        return ParseError(
            ErrorKind.MALFORMED_LITERAL,
            f"malformed literal - expected '{LITERAL_WORDS[ch]}'",
            at,
        )
    if ch in ",:]}[{":
        return ParseError(ErrorKind.UNEXPECTED_TOKEN, f"unexpected '{ch}' - value expected", at)
    return ParseError(ErrorKind.UNRECOGNIZED_CHARACTER, f"invalid character {ch!r}", at)


def _unclosed(kind: ErrorKind, closer: str, at: Input) -> ParseError:
    return ParseError(kind, f"unexpected end of input - expected '{closer}'", at)


# ---------------------------------------------------------------------------
# PRIMITIVE VALUES
# ---------------------------------------------------------------------------
def true_value() -> Parser:
    return match_literal("true").map(lambda _: Bool(True))


def false_value() -> Parser:
    return match_literal("false").map(lambda _: Bool(False))


def bool_value() -> Parser:
    return either(true_value(), false_value())


def null_value() -> Parser:
    return match_literal("null").map(lambda _: Null())


def string_value() -> Parser:
    return quoted_string().map(String)


def _number_end() -> Parser:
    # succeeds, consuming nothing, unless another number character follows
    follower = zero_or_one(pred(any_char, lambda c: c in NUMBER_CHARS))
    return pred(follower, lambda c: c is None)


def number_value() -> Parser:
    """
    Floating literals first, so "1.5" is never read as the integer 1.
    Signed 64-bit integers next, then unsigned 64-bit for the top half.
    """
    return left(either(decimal(), either(int_(), uint())), _number_end()).map(Number)


def primitive_value() -> Parser:
    return either(null_value(), either(bool_value(), either(string_value(), number_value())))


# ---------------------------------------------------------------------------
# ARRAY PARSER
# ---------------------------------------------------------------------------
def array_value(depth: int = 0, opts: ParseOptions = DEFAULT_OPTIONS) -> Parser:
    """
    '[' then an optional first element, then ',' element pairs only when a
    first element exists, then ']'. The split is what rejects both [,1]
    and [1,].
    """
    element = lazy(lambda: json_value(depth + 1, opts))

    def after_comma(at: Input) -> ParseError:
        at = _skip_ws(at)
        if at.peek() == "]":
            return ParseError(ErrorKind.TRAILING_COMMA, "trailing comma in array", at)
        return _value_error(at, ErrorKind.UNCLOSED_ARRAY, "unexpected end of input - expected value")

    rest = zero_or_more(right(match_literal(","), expect(element, after_comma)))

    def elements(first: Optional[Value]) -> Parser:
        if first is None:
            return pure([])
        return rest.map(lambda more: [first] + more)

    def close(items: List[Value]) -> Parser:
        def close_error(at: Input) -> ParseError:
            at = _skip_ws(at)
            ch = at.peek()
            if ch is None:
                return _unclosed(ErrorKind.UNCLOSED_ARRAY, "]", at)
            if items:
                return ParseError(ErrorKind.MISSING_COMMA, "expected ',' or ']'", at)
            if ch == ",":
                return ParseError(ErrorKind.LEADING_COMMA, "leading comma in array", at)
            return _value_error(at, ErrorKind.UNCLOSED_ARRAY, "unexpected end of input")

        closer = expect(right(space0(), match_literal("]")), close_error)
        return closer.map(lambda _: Array(items))

    return right(match_literal("["), zero_or_one(element).and_then(elements).and_then(close))


# ---------------------------------------------------------------------------
# OBJECT PARSER
# ---------------------------------------------------------------------------
def _key_error(at: Input, message: str) -> ParseError:
    at = _skip_ws(at)
    ch = at.peek()
    if ch is None:
        return _unclosed(ErrorKind.UNCLOSED_OBJECT, "}", at)
    if ch == '"':
        return _string_error(at)
    return ParseError(ErrorKind.EXPECTED_KEY, message, at)


def object_pair(depth: int = 0, opts: ParseOptions = DEFAULT_OPTIONS) -> Parser:
    """
    "key" ':' value. Output is (key position, key, value); the position
    is kept for duplicate-key reporting.
    """
    element = lazy(lambda: json_value(depth + 1, opts))
    key = right(space0(), pair(position, quoted_string()))

    def colon_error(at: Input) -> ParseError:
        at = _skip_ws(at)
        if at.at_end():
            return _unclosed(ErrorKind.UNCLOSED_OBJECT, "}", at)
        return ParseError(ErrorKind.MISSING_COLON, "expected ':' after object key", at)

    colon = expect(right(space0(), match_literal(":")), colon_error)
    member_value = expect(
        element,
        lambda at: _value_error(at, ErrorKind.UNCLOSED_OBJECT, "unexpected end of input - expected value"),
    )

    def after_key(found: Tuple[Input, str]) -> Parser:
        key_at, name = found
        return right(colon, member_value).map(lambda val: (key_at, name, val))

    return key.and_then(after_key)


def object_value(depth: int = 0, opts: ParseOptions = DEFAULT_OPTIONS) -> Parser:
    """
    '{' then an optional first member, then ',' member pairs, then '}'.
    Duplicate keys resolve last-write-wins unless opts.allow_dup is off.
    """
    member = object_pair(depth, opts)

    def after_comma(at: Input) -> ParseError:
        at = _skip_ws(at)
        if at.peek() == "}":
            return ParseError(ErrorKind.TRAILING_COMMA, "trailing comma in object", at)
        return _key_error(at, "expected string key")

    rest = zero_or_more(right(match_literal(","), expect(member, after_comma)))

    def members(first) -> Parser:
        if first is None:
            return pure([])
        return rest.map(lambda more: [first] + more)

    def build(entries) -> Object:
        obj = {}
        for key_at, key, val in entries:
            if not opts.allow_dup and key in obj:
                raise ParseError(ErrorKind.DUPLICATE_KEY, f"duplicate key {key!r}", key_at)
            obj[key] = val
        return Object(obj)

    def close(entries) -> Parser:
        def close_error(at: Input) -> ParseError:
            at = _skip_ws(at)
            ch = at.peek()
            if ch is None:
                return _unclosed(ErrorKind.UNCLOSED_OBJECT, "}", at)
            if entries:
                return ParseError(ErrorKind.MISSING_COMMA, "expected ',' or '}'", at)
            if ch == ",":
                return ParseError(ErrorKind.LEADING_COMMA, "leading comma in object", at)
            return _key_error(at, "expected string key or '}'")

        closer = expect(right(space0(), match_literal("}")), close_error)
        return closer.map(lambda _: build(entries))

    return right(match_literal("{"), zero_or_one(member).and_then(members).and_then(close))


# ---------------------------------------------------------------------------
# CORE VALUE PARSER
# ---------------------------------------------------------------------------
def _depth_exceeded(max_depth: int) -> Parser:
    def run(inp: Input) -> ParseResult:
        if inp.peek() in ("[", "{"):
            raise ParseError(ErrorKind.NESTING_TOO_DEEP, f"depth limit exceeded ({max_depth})", inp)
        return Failure(inp)

    return Parser(run)


def nonprimitive_value(depth: int = 0, opts: ParseOptions = DEFAULT_OPTIONS) -> Parser:
    if depth >= opts.max_depth:
        return _depth_exceeded(opts.max_depth)
    return either(array_value(depth, opts), object_value(depth, opts))


@lru_cache(maxsize=PARSER_CACHE_SIZE)
def json_value(depth: int = 0, opts: ParseOptions = DEFAULT_OPTIONS) -> Parser:
    """
    Any JSON value with the whitespace around it discarded. One parser is
    built per (depth, options); the most recently used ones are kept for
    later parses, older ones are rebuilt on demand.
    """
    return trim(either(primitive_value(), nonprimitive_value(depth, opts)))


# ---------------------------------------------------------------------------
# PUBLIC API
# ---------------------------------------------------------------------------
def parse(text: str, *, max_depth: int = DEPTH_LIMIT_DEFAULT, allow_dup: bool = True) -> Value:
    """
    Parse a complete JSON document into a Value tree.

    Any non-whitespace after the root value is rejected. Raises ParseError
    carrying the kind of failure and its offset, line and column.
    """
    doc = Input(text)
    try:
        res = json_value(0, ParseOptions(max_depth, allow_dup)).parse(doc)
    except RecursionError:
        raise ParseError(
            ErrorKind.NESTING_TOO_DEEP,
            "maximum recursion depth exceeded - lower max_depth",
            doc,
        ) from None

    if isinstance(res, Failure):
        raise _value_error(doc, ErrorKind.EARLY_END_OF_INPUT, "unexpected end of input")
    if not res.remaining.at_end():
        raise ParseError(ErrorKind.TRAILING_CHARACTERS, "extra data after root value", res.remaining)

    log.debug("parsed %d characters into %s", len(text), type(res.output).__name__)
    return res.output


# ---------------------------------------------------------------------------
# CLI ENTRYPOINT
# ---------------------------------------------------------------------------
def _read_source(args) -> str:
    if args.text is not None:
        return args.text
    if args.file == "-":
        return sys.stdin.read()
    with open(args.file, "r", encoding="utf-8") as fh:
        return fh.read()


def _cli(argv: List[str]) -> int:
    """
    Command-line interface: parse a file, stdin or --text and print the
    result. Exit code 0 on success, 1 on ParseError, 2 on usage or I/O errors.
    """
    ap = argparse.ArgumentParser(description="Combinator JSON parser")
    ap.add_argument("file", nargs="?", help="JSON file to parse, '-' for stdin")
    ap.add_argument("--text", help="parse this text instead of a file")
    ap.add_argument("--check", action="store_true", help="print OK instead of the parsed value")
    ap.add_argument("--debug", action="store_true", help="print the Value tree repr and log at DEBUG")
    ap.add_argument("--python", action="store_true", help="print the value as native Python data")
    ap.add_argument("--max-depth", type=int, default=DEPTH_LIMIT_DEFAULT)
    ap.add_argument("--reject-dup-keys", action="store_true")
    ap.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = ap.parse_args(argv)

    if (args.file is None) == (args.text is None):
        ap.error("give exactly one of FILE or --text")

    logging.basicConfig(
        level=logging.DEBUG if args.debug else args.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        data = _read_source(args)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"error: cannot read {args.file}: {exc}", file=sys.stderr)
        return 2

    try:
        value = parse(data, max_depth=args.max_depth, allow_dup=not args.reject_dup_keys)
    except ParseError as exc:
        log.debug("parse failed with %s", exc.kind.value)
        print(f"ParseError: {exc}", file=sys.stderr)
        return 1

    if args.check:
        print("OK")
    elif args.debug:
        print(repr(value))
    elif args.python:
        print(repr(value.to_python()))
    else:
        print(value)
    return 0


def main() -> None:
    sys.exit(_cli(sys.argv[1:]))


# ---------------------------------------------------------------------------
# MAIN GUARD
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    main()
