# combinators.py
# Generic parser combinators. Nothing in here knows about JSON.
#
# =============================================================================
#  DESIGN
# =============================================================================
#
# A parser is any callable taking an Input and returning either
# Success(remaining, output) or Failure(remaining). Combinators build new
# parsers out of existing ones, so a grammar is written as a composition of
# small rules instead of a hand-coded state machine per production.
#
# Input is an (text, offset) view. Advancing creates a new view; the source
# text is never sliced during parsing, only when a literal is materialized.
#
# Two kinds of failure exist:
# 1. Soft failure - a returned Failure. either() backtracks over these and
#    retries the next alternative at the original position.
# 2. Hard failure - an exception raised through expect(). Used once a rule
#    has consumed an opening delimiter and no other alternative could match,
#    so the error keeps the precise position instead of being discarded by
#    an enclosing either().
#
# =============================================================================

from typing import Any, Callable, Generic, List, NamedTuple, Optional, Tuple, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")

# ---------------------------------------------------------------------------
# INPUT VIEW
# ---------------------------------------------------------------------------
class Input(NamedTuple):
    """
    Immutable position inside the original document.

    Equality is positional: two views are equal when they point at the same
    offset of the same text.
    """
    text: str
    offset: int = 0

    def peek(self) -> Optional[str]:
        if self.offset < len(self.text):
            return self.text[self.offset]
        return None

    def at_end(self) -> bool:
        return self.offset >= len(self.text)

    def startswith(self, prefix: str) -> bool:
        return self.text.startswith(prefix, self.offset)

    def advance(self, count: int = 1) -> "Input":
        return Input(self.text, min(self.offset + count, len(self.text)))

    def rest(self) -> str:
        """Copy of the unconsumed text. For diagnostics and tests only."""
        return self.text[self.offset:]

    def location(self) -> Tuple[int, int]:
        """1-based (line, column) of this offset."""
        line = self.text.count("\n", 0, self.offset) + 1
        line_start = self.text.rfind("\n", 0, self.offset) + 1
        return line, self.offset - line_start + 1

    def __repr__(self):
        return f"Input({self.offset}, {self.rest()!r})"


# ---------------------------------------------------------------------------
# PARSE OUTCOMES
# ---------------------------------------------------------------------------
class Success(NamedTuple):
    remaining: Input
    output: Any


class Failure(NamedTuple):
    remaining: Input


ParseResult = Union[Success, Failure]
ParseFn = Callable[[Input], ParseResult]


# ---------------------------------------------------------------------------
# PARSER WRAPPER
# ---------------------------------------------------------------------------
class Parser(Generic[T]):
    """
    Boxed parser. Wraps any parse function so it can be stored, referenced
    recursively, and composed with the methods and operators below:

        p | q    either(p, q)
        p & q    pair(p, q)
        p >> q   right(p, q)
        p << q   left(p, q)
    """
    __slots__ = ("_fn",)

    def __init__(self, fn: ParseFn):
        self._fn = fn

    def parse(self, inp: Union[Input, str]) -> ParseResult:
        if isinstance(inp, str):
            inp = Input(inp)
        return self._fn(inp)

    __call__ = parse

    def map(self, f: Callable[[T], U]) -> "Parser[U]":
        def run(inp: Input) -> ParseResult:
            res = self._fn(inp)
            if isinstance(res, Failure):
                return res
            return Success(res.remaining, f(res.output))

        return Parser(run)

    def and_then(self, f: Callable[[T], "ParserLike"]) -> "Parser[U]":
        return and_then(self, f)

    def pred(self, predicate: Callable[[T], bool]) -> "Parser[T]":
        return pred(self, predicate)

    def __or__(self, other):
        return either(self, other)

    def __and__(self, other):
        return pair(self, other)

    def __rshift__(self, other):
        return right(self, other)

    def __lshift__(self, other):
        return left(self, other)


ParserLike = Union[Parser, ParseFn]


def parser(fn: ParseFn) -> Parser:
    """Decorator turning a plain parse function into a Parser."""
    return Parser(fn)


def _fn(p: ParserLike) -> ParseFn:
    # combinators call the bare function to keep one stack frame per rule
    return p._fn if isinstance(p, Parser) else p


# ---------------------------------------------------------------------------
# COMBINATORS
# ---------------------------------------------------------------------------
def and_then(p: ParserLike, f: Callable[[Any], ParserLike]) -> Parser:
    """
    Monadic bind. The continuation is chosen from what was just parsed and
    runs on the remaining input.
    """
    run_p = _fn(p)

    def run(inp: Input) -> ParseResult:
        res = run_p(inp)
        if isinstance(res, Failure):
            return res
        return _fn(f(res.output))(res.remaining)

    return Parser(run)


def pair(p1: ParserLike, p2: ParserLike) -> Parser:
    run1, run2 = _fn(p1), _fn(p2)

    def run(inp: Input) -> ParseResult:
        res1 = run1(inp)
        if isinstance(res1, Failure):
            return res1
        res2 = run2(res1.remaining)
        if isinstance(res2, Failure):
            return res2
        return Success(res2.remaining, (res1.output, res2.output))

    return Parser(run)


def left(p1: ParserLike, p2: ParserLike) -> Parser:
    return pair(p1, p2).map(lambda both: both[0])


def right(p1: ParserLike, p2: ParserLike) -> Parser:
    return pair(p1, p2).map(lambda both: both[1])


def either(p1: ParserLike, p2: ParserLike) -> Parser:
    """
    Ordered choice. p2 always sees the original input, never what p1 may
    have partially consumed. The failure of an abandoned p1 is discarded.
    """
    run1, run2 = _fn(p1), _fn(p2)

    def run(inp: Input) -> ParseResult:
        res = run1(inp)
        if isinstance(res, Failure):
            return run2(inp)
        return res

    return Parser(run)


def zero_or_one(p: ParserLike) -> Parser:
    run_p = _fn(p)

    def run(inp: Input) -> ParseResult:
        res = run_p(inp)
        if isinstance(res, Failure):
            return Success(inp, None)
        return res

    return Parser(run)


def _repeat(run_p: ParseFn, inp: Input, vals: List[Any]) -> Input:
    cur = inp
    while True:
        res = run_p(cur)
        if isinstance(res, Failure):
            return cur
        vals.append(res.output)
        # a match that consumed nothing would repeat forever
        if res.remaining.offset == cur.offset:
            return cur
        cur = res.remaining


def zero_or_more(p: ParserLike) -> Parser:
    run_p = _fn(p)

    def run(inp: Input) -> ParseResult:
        vals: List[Any] = []
        return Success(_repeat(run_p, inp, vals), vals)

    return Parser(run)


def one_or_more(p: ParserLike) -> Parser:
    run_p = _fn(p)

    def run(inp: Input) -> ParseResult:
        vals: List[Any] = []
        cur = _repeat(run_p, inp, vals)
        if not vals:
            return Failure(inp)
        return Success(cur, vals)

    return Parser(run)


def pred(p: ParserLike, predicate: Callable[[Any], bool]) -> Parser:
    """Rejected matches fail at the original position, consuming nothing."""
    run_p = _fn(p)

    def run(inp: Input) -> ParseResult:
        res = run_p(inp)
        if isinstance(res, Success) and predicate(res.output):
            return res
        return Failure(inp)

    return Parser(run)


# ---------------------------------------------------------------------------
# HELPERS
# ---------------------------------------------------------------------------
def pure(value: Any) -> Parser:
    return Parser(lambda inp: Success(inp, value))


@parser
def position(inp: Input) -> ParseResult:
    return Success(inp, inp)


def lazy(factory: Callable[[], ParserLike]) -> Parser:
    """
    Indirection for self-referencing rules. The factory runs on first use
    and its parser is kept for every later call.
    """
    resolved: List[ParseFn] = []

    def run(inp: Input) -> ParseResult:
        if not resolved:
            resolved.append(_fn(factory()))
        return resolved[0](inp)

    return Parser(run)


def expect(p: ParserLike, on_failure: Callable[[Input], Exception]) -> Parser:
    """
    Commit point. When p fails, on_failure is called with the position p
    was tried at and the exception it returns is raised, aborting the
    whole parse. on_failure is expected to work out the precise cause.
    """
    run_p = _fn(p)

    def run(inp: Input) -> ParseResult:
        res = run_p(inp)
        if isinstance(res, Failure):
            raise on_failure(inp)
        return res

    return Parser(run)
