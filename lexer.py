"""
lexer.py - Lexical primitives built from the combinator core.

These recognize raw characters as literals, strings, numbers and
whitespace. They know nothing about the shape of a JSON tree.
"""

import math

from combinators import (
    Failure,
    Input,
    Parser,
    ParseResult,
    Success,
    either,
    left,
    one_or_more,
    pair,
    parser,
    pred,
    pure,
    right,
    zero_or_more,
    zero_or_one,
)

# ---------------------------------------------------------------------------
# CONSTANTS
# ---------------------------------------------------------------------------
WHITESPACE  = " \t\n\r"                # RFC 8259 insignificant whitespace
HEX_DIGITS  = "0123456789abcdefABCDEF"
UINT_MAX    = 2 ** 64 - 1
INT_MIN     = -(2 ** 63)
INT_MAX     = 2 ** 63 - 1

SIMPLE_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


# ---------------------------------------------------------------------------
# CHARACTERS AND LITERALS
# ---------------------------------------------------------------------------
@parser
def any_char(inp: Input) -> ParseResult:
    ch = inp.peek()
    if ch is None:
        return Failure(inp)
    return Success(inp.advance(), ch)


def match_literal(expected: str) -> Parser:
    """Exact, case-sensitive prefix match. Output is the literal itself."""
    def run(inp: Input) -> ParseResult:
        if inp.startswith(expected):
            return Success(inp.advance(len(expected)), expected)
        return Failure(inp)

    return Parser(run)


def is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def digit() -> Parser:
    return pred(any_char, is_digit)


def digits() -> Parser:
    return one_or_more(digit()).map("".join)


# ---------------------------------------------------------------------------
# WHITESPACE
# ---------------------------------------------------------------------------
def whitespace_char() -> Parser:
    return pred(any_char, lambda c: c in WHITESPACE)


def space0() -> Parser:
    return zero_or_more(whitespace_char())


def space1() -> Parser:
    return one_or_more(whitespace_char())


def trim(p) -> Parser:
    """Run p with whitespace discarded on both sides."""
    return right(space0(), left(p, space0()))


# ---------------------------------------------------------------------------
# STRINGS
# ---------------------------------------------------------------------------
def _hex4() -> Parser:
    hex_digit = pred(any_char, lambda c: c in HEX_DIGITS)
    quad = pair(pair(hex_digit, hex_digit), pair(hex_digit, hex_digit))
    return quad.map(lambda q: int(q[0][0] + q[0][1] + q[1][0] + q[1][1], 16))


def is_high_surrogate(code: int) -> bool:
    return 0xD800 <= code <= 0xDBFF


def is_low_surrogate(code: int) -> bool:
    return 0xDC00 <= code <= 0xDFFF


def _unicode_escape() -> Parser:
    """
    \\uXXXX, where a high surrogate must be followed by an escaped low
    surrogate. Lone surrogates of either half are rejected.
    """
    hex4 = _hex4()
    low = right(match_literal("\\u"), pred(hex4, is_low_surrogate))

    def after_first(code: int) -> Parser:
        if is_high_surrogate(code):
            return low.map(lambda lo: chr(0x10000 + ((code - 0xD800) << 10) + (lo - 0xDC00)))
        return pure(chr(code))

    return right(match_literal("u"), pred(hex4, lambda c: not is_low_surrogate(c))).and_then(after_first)


def escape_sequence() -> Parser:
    simple = pred(any_char, lambda c: c in SIMPLE_ESCAPES).map(SIMPLE_ESCAPES.get)
    return right(match_literal("\\"), either(simple, _unicode_escape()))


def string_char() -> Parser:
    """A raw character other than the quote, backslash or a control code."""
    return pred(any_char, lambda c: c not in '"\\' and c >= " ")


def quoted_string() -> Parser:
    """
    Double-quoted string with standard escapes decoded.

    On failure the position is where decoding stopped: the end of input for
    an unterminated string, the backslash of a bad escape, or the raw
    control character.
    """
    body = zero_or_more(either(string_char(), escape_sequence())).map("".join)
    return right(match_literal('"'), left(body, match_literal('"')))


# ---------------------------------------------------------------------------
# NUMBERS
# ---------------------------------------------------------------------------
def _bounded_digits() -> Parser:
    # int() counts leading zeros against its digit limit, so they are
    # stripped here and only the significant digits reach the conversion
    return digits().map(lambda d: d.lstrip("0") or "0").pred(lambda d: len(d) <= 20)


def uint() -> Parser:
    return _bounded_digits().map(int).pred(lambda n: n <= UINT_MAX)


def int_() -> Parser:
    signed = pair(zero_or_one(match_literal("-")), _bounded_digits())
    return signed.map(lambda s: int((s[0] or "") + s[1])).pred(lambda n: INT_MIN <= n <= INT_MAX)


def _exponent() -> Parser:
    marker = either(match_literal("e"), match_literal("E"))
    sign = zero_or_one(either(match_literal("+"), match_literal("-")))
    return pair(pair(marker, sign), digits()).map(lambda e: "e" + (e[0][1] or "") + e[1])


def _decimal_text() -> Parser:
    fraction = right(match_literal("."), digits()).map(lambda d: "." + d)
    mantissa = pair(zero_or_one(match_literal("-")), digits())
    return pair(pair(mantissa, zero_or_one(fraction)), zero_or_one(_exponent()))


def _has_float_part(parts) -> bool:
    return parts[0][1] is not None or parts[1] is not None


def _to_float(parts) -> float:
    (sign, whole), frac = parts[0]
    return float((sign or "") + whole + (frac or "") + (parts[1] or ""))


def decimal() -> Parser:
    """
    Floating literal: -?digits(.digits)?([eE][+-]?digits)?, where a
    fraction or an exponent must be present. Infinite results fail.
    """
    return _decimal_text().pred(_has_float_part).map(_to_float).pred(math.isfinite)
