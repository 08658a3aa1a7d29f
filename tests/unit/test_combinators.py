import pytest

from combinators import (
    Failure,
    Input,
    Parser,
    Success,
    and_then,
    either,
    expect,
    lazy,
    left,
    one_or_more,
    pair,
    parser,
    position,
    pred,
    pure,
    right,
    zero_or_more,
    zero_or_one,
)
from lexer import any_char, match_literal, quoted_string


def test_input_location_counts_lines_and_columns():
    text = "ab\ncd"
    assert Input(text, 0).location() == (1, 1)
    assert Input(text, 2).location() == (1, 3)
    assert Input(text, 4).location() == (2, 2)


def test_input_peek_and_advance():
    inp = Input("xy")
    assert inp.peek() == "x"
    assert inp.advance().peek() == "y"
    assert inp.advance(5).at_end()
    assert inp.advance(5).peek() is None
    assert inp.advance().rest() == "y"


def test_left_combinator():
    p = left(quoted_string(), match_literal("{"))
    text = '"test"{}'
    assert p.parse(text) == Success(Input(text, 7), "test")
    assert p.parse("bad") == Failure(Input("bad", 0))
    text = '"bad"}'
    assert p.parse(text) == Failure(Input(text, 5))


def test_right_combinator():
    p = right(match_literal("{"), quoted_string())
    text = '{"test"}'
    assert p.parse(text) == Success(Input(text, 7), "test")
    assert p.parse("bad") == Failure(Input("bad", 0))
    text = "{!bad"
    assert p.parse(text) == Failure(Input(text, 1))


def test_pair_combinator():
    p = pair(any_char, any_char)
    assert p.parse("xyz") == Success(Input("xyz", 2), ("x", "y"))
    assert p.parse("x") == Failure(Input("x", 1))


def test_map_transforms_output_only():
    p = match_literal("7").map(int)
    assert p.parse("78") == Success(Input("78", 1), 7)
    assert p.parse("8") == Failure(Input("8", 0))


def test_and_then_picks_continuation_from_output():
    repeat_char = and_then(any_char, lambda c: match_literal(c))
    assert repeat_char.parse("aa!") == Success(Input("aa!", 2), "a")
    assert repeat_char.parse("ab") == Failure(Input("ab", 1))


def test_either_first_success_wins():
    p = either(match_literal("a"), match_literal("ab"))
    assert p.parse("ab") == Success(Input("ab", 1), "a")


def test_either_retries_second_from_original_input():
    consumes_then_fails = pair(match_literal("ab"), match_literal("X"))
    p = either(consumes_then_fails, match_literal("abc"))
    assert p.parse("abc") == Success(Input("abc", 3), "abc")


def test_either_reports_second_failure():
    p = either(match_literal("a"), right(match_literal("b"), match_literal("c")))
    assert p.parse("bx") == Failure(Input("bx", 1))


def test_zero_or_one_combinator():
    p = zero_or_one(match_literal("yeet"))
    assert p.parse("") == Success(Input("", 0), None)
    assert p.parse("teey") == Success(Input("teey", 0), None)
    assert p.parse("yeet") == Success(Input("yeet", 4), "yeet")
    assert p.parse("yeetyeet") == Success(Input("yeetyeet", 4), "yeet")


def test_zero_or_more_combinator():
    p = zero_or_more(match_literal("ha"))
    assert p.parse("hahaha") == Success(Input("hahaha", 6), ["ha", "ha", "ha"])
    assert p.parse("ahah") == Success(Input("ahah", 0), [])
    assert p.parse("") == Success(Input("", 0), [])


def test_zero_or_more_stops_on_empty_match():
    res = zero_or_more(pure(1)).parse("abc")
    assert res.remaining == Input("abc", 0)


def test_one_or_more_combinator():
    p = one_or_more(match_literal("ha"))
    assert p.parse("hahaha") == Success(Input("hahaha", 6), ["ha", "ha", "ha"])
    assert p.parse("ahah") == Failure(Input("ahah", 0))
    assert p.parse("") == Failure(Input("", 0))


def test_predicate_combinator():
    p = pred(any_char, lambda c: c == "o")
    assert p.parse("omg") == Success(Input("omg", 1), "o")
    assert p.parse("lol") == Failure(Input("lol", 0))


def test_pred_rejection_consumes_nothing():
    p = match_literal("abc").pred(lambda _: False)
    assert p.parse("abcd") == Failure(Input("abcd", 0))


def test_operators_match_functions():
    bracketed = match_literal("[") >> any_char << match_literal("]")
    assert bracketed.parse("[x]") == Success(Input("[x]", 3), "x")
    assert (match_literal("a") | match_literal("b")).parse("b") == Success(Input("b", 1), "b")
    assert (any_char & any_char).parse("xy") == Success(Input("xy", 2), ("x", "y"))


def test_plain_functions_compose_like_parsers():
    def exclaim(inp):
        if inp.peek() == "!":
            return Success(inp.advance(), "!")
        return Failure(inp)

    p = pair(match_literal("hi"), exclaim)
    assert p.parse("hi!") == Success(Input("hi!", 3), ("hi", "!"))


def test_parser_decorator():
    @parser
    def upper(inp):
        ch = inp.peek()
        if ch is not None and ch.isupper():
            return Success(inp.advance(), ch)
        return Failure(inp)

    assert isinstance(upper, Parser)
    assert one_or_more(upper).map("".join).parse("ABc") == Success(Input("ABc", 2), "AB")


def test_position_does_not_consume():
    p = right(match_literal("ab"), position)
    assert p.parse("abc") == Success(Input("abc", 2), Input("abc", 2))


def test_lazy_supports_recursive_rules():
    def nested() -> Parser:
        inner = right(match_literal("("), left(lazy(nested), match_literal(")")))
        return either(inner.map(lambda n: n + 1), pure(0))

    assert nested().parse("((()))") == Success(Input("((()))", 6), 3)


def test_lazy_builds_parser_once():
    calls = []

    def factory():
        calls.append(1)
        return any_char

    p = lazy(factory)
    p.parse("a")
    p.parse("b")
    assert len(calls) == 1


def test_expect_raises_with_start_position():
    p = right(match_literal("a"), expect(match_literal("b"), lambda at: ValueError(f"at {at.offset}")))
    with pytest.raises(ValueError) as ei:
        p.parse("ac")
    assert str(ei.value) == "at 1"
    assert p.parse("ab") == Success(Input("ab", 2), "b")


def test_parsers_are_reusable():
    p = zero_or_more(any_char)
    assert p.parse("abc") == p.parse("abc")
    assert p.parse("xy") == Success(Input("xy", 2), ["x", "y"])
