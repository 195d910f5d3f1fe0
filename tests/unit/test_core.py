import sys

import pytest

import parser_core as pc


def test_lift_consumes_nothing():
    assert pc.run_partial(pc.lift(42), "abc") == ("abc", 42)


def test_fail_never_succeeds():
    assert pc.run_partial(pc.fail(), "abc") is None
    assert pc.run_partial(pc.fail(), "") is None


def test_sequence_feeds_value_and_leftovers():
    p = pc.sequence(pc.consume_char, lambda c: pc.literal(c))
    assert pc.run_partial(p, "aab") == ("b", "a")
    assert pc.run_partial(p, "abb") is None


def test_literal_matches_prefix_only():
    assert pc.run_partial(pc.literal("bla"), "blabla") == ("bla", "bla")
    assert pc.run_partial(pc.literal("bla"), "bl") is None
    assert pc.run_partial(pc.literal("bla"), "xbla") is None


def test_span_never_fails():
    assert pc.run_partial(pc.span(str.isalpha), "ab12") == ("12", "ab")
    assert pc.run_partial(pc.span(str.isalpha), "12") == ("12", "")
    assert pc.run_partial(pc.span(str.isalpha), "") == ("", "")


def test_shortest_prefix_picks_first_match():
    p = pc.shortest_prefix(lambda s: s.endswith("b"))
    assert pc.run_partial(p, "aabab") == ("ab", "aab")


def test_shortest_prefix_tries_empty_and_whole_input():
    assert pc.run_partial(pc.shortest_prefix(lambda s: True), "xyz") == ("xyz", "")
    assert pc.run_partial(pc.shortest_prefix(lambda s: s == "xyz"), "xyz") == ("", "xyz")
    assert pc.run_partial(pc.shortest_prefix(lambda s: s == "nope"), "xyz") is None


def test_or_else_retries_from_original_input():
    p = pc.or_else(pc.literal("ab"), pc.literal("ac"))
    assert pc.run_partial(p, "acd") == ("d", "ac")


def test_or_else_is_first_match():
    # The shorter branch wins even though the longer one would finish the input
    p = pc.or_else(pc.literal("a"), pc.literal("ab"))
    assert pc.run_partial(p, "ab") == ("b", "a")
    assert pc.run_complete(p, "ab") is None


def test_pipe_operator_is_or_else():
    p = pc.literal("x") | pc.literal("y")
    assert pc.run_complete(p, "y") == "y"


def test_zero_or_more_collects_in_order():
    p = pc.zero_or_more(pc.literal("bla"))
    assert pc.run_partial(p, "blablably") == ("bly", ["bla", "bla"])
    assert pc.run_partial(p, "xyz") == ("xyz", [])


def test_zero_or_more_stops_on_empty_match():
    p = pc.zero_or_more(pc.span(str.isdigit))
    assert pc.run_partial(p, "abc") == ("abc", [""])


def test_first_of():
    p = pc.first_of([pc.literal("a"), pc.literal("b"), pc.literal("c")])
    assert pc.run_complete(p, "c") == "c"
    assert pc.run_complete(p, "d") is None
    assert pc.run_complete(pc.first_of([]), "") is None


def test_peeks_do_not_consume():
    assert pc.run_partial(pc.peek_char, "bla") == ("bla", "b")
    assert pc.run_partial(pc.peek_second_char, "bla") == ("bla", "l")
    assert pc.run_partial(pc.peek_char, "") == ("", "")
    assert pc.run_partial(pc.peek_second_char, "b") == ("b", "")


def test_consume_char():
    assert pc.run_partial(pc.consume_char, "bla") == ("la", "b")
    assert pc.run_partial(pc.consume_char, "") is None


def test_skip_whitespace():
    assert pc.run_partial(pc.skip_whitespace, " \t\n x") == ("x", " \t\n ")
    assert pc.run_partial(pc.skip_whitespace, "x")[0] == "x"


@pytest.mark.parametrize("text,expected", [
    ("1", 1),
    ("42", 42),
    ("007", 7),
])
def test_positive_int_accepts(text, expected):
    assert pc.run_complete(pc.positive_int, text) == expected


@pytest.mark.parametrize("text", ["", "0", "000", "-1", "x1", "²"])
def test_positive_int_rejects(text):
    assert pc.run_complete(pc.positive_int, text) is None


def test_generate_sequences_steps():
    @pc.generate
    def pair():
        a = yield pc.positive_int
        yield pc.literal("+")
        b = yield pc.positive_int
        return a + b

    assert pc.run_complete(pair, "1+2") == 3
    assert pc.run_complete(pair, "1-2") is None


number_list = pc.delimited_list("[", "]", pc.positive_int)


@pytest.mark.parametrize("text,expected", [
    ("[1, 2]", [1, 2]),
    ("[ 1  ,2 ]", [1, 2]),
    ("[]", []),
    ("[  ]", []),
    ("[\n1\n]", [1]),
])
def test_delimited_list_accepts(text, expected):
    assert pc.run_complete(number_list, text) == expected


@pytest.mark.parametrize("text", ["[1,]", "[1 2]", "[1, 2", "[", "1, 2]", "[,]"])
def test_delimited_list_rejects(text):
    assert pc.run_complete(number_list, text) is None


def test_delimited_list_other_brackets():
    angle = pc.delimited_list("<", ">", pc.positive_int)
    assert pc.run_complete(angle, "<3,4>") == [3, 4]


def test_run_complete_requires_all_input():
    assert pc.run_partial(pc.literal("a"), "ab") == ("b", "a")
    assert pc.run_complete(pc.literal("a"), "ab") is None


@pytest.mark.skipif(not hasattr(sys, "get_int_max_str_digits"), reason="no int conversion limit")
def test_positive_int_huge_run_fails_without_raising():
    assert pc.run_complete(pc.positive_int, "1" * 5000) is None
    assert pc.run_complete(pc.positive_int, "0" * 5000) is None


def test_first_of_stops_at_first_success():
    seen = []

    def tracking(tag):
        return pc.literal(tag).map(lambda v: seen.append(v) or v)

    p = pc.first_of([tracking("a"), tracking("a")])
    assert pc.run_complete(p, "a") == "a"
    assert seen == ["a"]
