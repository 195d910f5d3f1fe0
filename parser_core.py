# parser_core.py
# Parser combinator engine shared by the JSON and quiz-key grammars
#
# =============================================================================
#  ENGINE OVERVIEW
# =============================================================================
#
# A parser is a value wrapping a function
#
#     (text, pos) -> Optional[(new_pos, value)]
#
# The input string is never copied or mutated; parsers only move an index
# forward over it. Failure is a bare None with no cause attached, which is
# what lets ordered alternation retry the next branch from the same index.
#
# Alternation is PEG-style: the first branch that succeeds wins and later
# branches are never tried, even if a later step of an enclosing sequence
# fails. Grammars built on this module rely on branch order.
#
# Recursion depth grows with nesting of the input. Callers that accept
# untrusted text should bound nesting (see json_parser.DEPTH_LIMIT_DEFAULT).
# =============================================================================

from functools import reduce
from typing import Any, Callable, Generic, Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")
U = TypeVar("U")

Result = Optional[Tuple[int, Any]]

# ---------------------------------------------------------------------------
# PARSER VALUE
# ---------------------------------------------------------------------------
class Parser(Generic[T]):
    """
    First-class parser. Call it with ``(text, pos)`` to run it.

    ``p | q`` is ``or_else(p, q)``, ``p.bind(k)`` is ``sequence(p, k)`` and
    ``p.map(f)`` is ``mapping(p, f)``.
    """
    __slots__ = ("_run",)

    def __init__(self, run: Callable[[str, int], Result]):
        self._run = run

    def __call__(self, text: str, pos: int = 0) -> Result:
        return self._run(text, pos)

    def bind(self, continuation: Callable[[T], "Parser[U]"]) -> "Parser[U]":
        return sequence(self, continuation)

    def map(self, fn: Callable[[T], U]) -> "Parser[U]":
        return mapping(self, fn)

    def __or__(self, other: "Parser[T]") -> "Parser[T]":
        return or_else(self, other)


# ---------------------------------------------------------------------------
# PRIMITIVES
# ---------------------------------------------------------------------------
def fail() -> Parser[Any]:
    """Never succeeds, consumes nothing."""
    return _FAIL


def lift(value: T) -> Parser[T]:
    """Succeeds with ``value`` without consuming input."""
    return Parser(lambda text, pos: (pos, value))


def sequence(parser: Parser[T], continuation: Callable[[T], Parser[U]]) -> Parser[U]:
    """
    Run ``parser``, hand its value to ``continuation`` and run the parser it
    returns on the leftovers. Fails as soon as either step fails.
    """
    def run(text: str, pos: int) -> Result:
        res = parser(text, pos)
        if res is None:
            return None
        pos, value = res
        return continuation(value)(text, pos)
    return Parser(run)


def mapping(parser: Parser[T], fn: Callable[[T], U]) -> Parser[U]:
    return sequence(parser, lambda value: lift(fn(value)))


def literal(expected: str) -> Parser[str]:
    """Consume ``expected`` verbatim or fail without consuming."""
    def run(text: str, pos: int) -> Result:
        if text.startswith(expected, pos):
            return pos + len(expected), expected
        return None
    return Parser(run)


def span(predicate: Callable[[str], bool]) -> Parser[str]:
    """Longest prefix whose characters all satisfy ``predicate``. Never fails."""
    def run(text: str, pos: int) -> Result:
        end = pos
        size = len(text)
        while end < size and predicate(text[end]):
            end += 1
        return end, text[pos:end]
    return Parser(run)


def shortest_prefix(predicate: Callable[[str], bool]) -> Parser[str]:
    """
    Shortest prefix of the remaining input (the empty one first, the whole
    remainder last) that satisfies ``predicate`` as a whole string.
    """
    def run(text: str, pos: int) -> Result:
        for end in range(pos, len(text) + 1):
            candidate = text[pos:end]
            if predicate(candidate):
                return end, candidate
        return None
    return Parser(run)


def or_else(first: Parser[T], second: Parser[T]) -> Parser[T]:
    """Behave like ``first`` unless it fails, then retry ``second`` from the same spot."""
    def run(text: str, pos: int) -> Result:
        res = first(text, pos)
        if res is None:
            return second(text, pos)
        return res
    return Parser(run)


def zero_or_more(parser: Parser[T]) -> Parser[List[T]]:
    """
    Apply ``parser`` until it fails and collect the results in order.

    Never fails. Stops early if ``parser`` succeeds without consuming
    anything, since it would then succeed forever.
    """
    def run(text: str, pos: int) -> Result:
        found: List[T] = []
        while True:
            res = parser(text, pos)
            if res is None:
                return pos, found
            new_pos, value = res
            found.append(value)
            if new_pos == pos:
                return pos, found
            pos = new_pos
    return Parser(run)


def first_of(parsers: Iterable[Parser[T]]) -> Parser[T]:
    """Left-to-right ``or_else`` over ``parsers``; fails only when all of them fail."""
    return reduce(or_else, parsers, fail())


def defer(factory: Callable[[], Parser[T]]) -> Parser[T]:
    """Build the parser on first use. Needed for recursive grammars."""
    def run(text: str, pos: int) -> Result:
        return factory()(text, pos)
    return Parser(run)


def generate(fn: Callable[[], Any]) -> Parser[Any]:
    """
    Decorator turning a generator function into a parser.

    Each ``yield p`` runs ``p`` on the leftovers of the previous step and
    evaluates to its value; ``return v`` ends the parse with ``v``. This is
    ``sequence`` written top to bottom instead of as nested continuations:

        @generate
        def pair():
            key = yield string
            yield literal(":")
            value = yield data
            return key, value
    """
    def run(text: str, pos: int) -> Result:
        steps = fn()
        value = None
        while True:
            try:
                step = steps.send(value)
            except StopIteration as stop:
                return pos, stop.value
            res = step(text, pos)
            if res is None:
                steps.close()
                return None
            pos, value = res
    return Parser(run)


# ---------------------------------------------------------------------------
# CHARACTER-LEVEL PARSERS
# ---------------------------------------------------------------------------
def _peek_char(text: str, pos: int) -> Result:
    return pos, text[pos:pos + 1]


def _peek_second_char(text: str, pos: int) -> Result:
    return pos, text[pos + 1:pos + 2]


def _consume_char(text: str, pos: int) -> Result:
    if pos < len(text):
        return pos + 1, text[pos]
    return None


def _end_of_input(text: str, pos: int) -> Result:
    if pos >= len(text):
        return pos, ""
    return None


def is_digit(ch: str) -> bool:
    # ASCII only; str.isdigit also accepts superscripts and other scripts
    return "0" <= ch <= "9"


_FAIL: Parser[Any] = Parser(lambda text, pos: None)

# One-character lookahead; "" at end of input.
peek_char: Parser[str] = Parser(_peek_char)
# Two-character lookahead; "" when fewer than two characters remain.
peek_second_char: Parser[str] = Parser(_peek_second_char)
consume_char: Parser[str] = Parser(_consume_char)
end_of_input: Parser[str] = Parser(_end_of_input)
skip_whitespace: Parser[str] = span(str.isspace)
digits: Parser[str] = span(is_digit)


@generate
def positive_int():
    """Non-empty run of digits whose value is at least 1."""
    text = yield digits
    if not text.strip("0"):
        yield fail()
    try:
        value = int(text)
    except ValueError:
        # longer than the interpreter's int conversion limit
        yield fail()
    return value


# ---------------------------------------------------------------------------
# LISTS
# ---------------------------------------------------------------------------
def delimited_list(open_char: str, close_char: str, element: Parser[T]) -> Parser[List[T]]:
    """
    ``open_char``-``close_char`` delimited, comma separated list of ``element``.

    Whitespace is allowed after the opener, before the closer and around
    commas. Trailing commas, missing commas and a missing closer all fail.
    """
    @generate
    def padded():
        yield skip_whitespace
        value = yield element
        yield skip_whitespace
        return value

    more = zero_or_more(literal(",").bind(lambda _: padded))

    @generate
    def parser():
        yield literal(open_char)
        yield skip_whitespace
        ahead = yield peek_char
        if not ahead:
            yield fail()
        if ahead == close_char:
            yield consume_char
            return []
        head = yield padded
        tail = yield more
        yield literal(close_char)
        return [head] + tail
    return parser


# ---------------------------------------------------------------------------
# RUNNERS
# ---------------------------------------------------------------------------
def run_partial(parser: Parser[T], text: str) -> Optional[Tuple[str, T]]:
    """
    Raw ``(leftovers, value)`` result. Meant for composing and testing;
    grammar entry points go through ``run_complete``.
    """
    res = parser(text, 0)
    if res is None:
        return None
    pos, value = res
    return text[pos:], value


def run_complete(parser: Parser[T], text: str) -> Optional[T]:
    """Value of ``parser`` if it succeeds and consumes all of ``text``, else None."""
    res = parser(text, 0)
    if res is None or res[0] != len(text):
        return None
    return res[1]
