# quiz_key.py
# Reader and writer for the line-oriented quiz key format
#
# =============================================================================
#  FORMAT
# =============================================================================
#
#   2024-03-01 17:00:00          deadline, 24h clock
#   1|radio|2                    number|type|correct answers
#   2|checkbox|1, 3              answers separated by ", " exactly
#
# Question numbers start at 1 and go up by one per line. Any line that breaks
# this, names an unknown type, or carries an empty or non-positive answer
# rejects the whole key. End of input ends the question list.
# =============================================================================

import enum
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from parser_core import (
    consume_char,
    digits,
    end_of_input,
    fail,
    first_of,
    generate,
    lift,
    literal,
    or_else,
    peek_char,
    positive_int,
    run_partial,
    span,
    zero_or_more,
)

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# CONSTANTS
# ---------------------------------------------------------------------------
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
_TIME_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2} [0-9]{2}:[0-9]{2}:[0-9]{2}")

# ---------------------------------------------------------------------------
# TIMESTAMPS
# ---------------------------------------------------------------------------
def to_time(text: str) -> Optional[datetime]:
    """
    Read ``YYYY-MM-DD HH:MM:SS`` (naive, taken as UTC). Surrounding
    whitespace is ignored; anything else off-pattern gives None.
    """
    text = text.strip()
    if not _TIME_RE.fullmatch(text):
        return None
    try:
        return datetime.strptime(text, TIME_FORMAT)
    except ValueError:
        return None


def time_to_str(moment: datetime) -> str:
    return moment.isoformat(sep=" ", timespec="seconds")

# ---------------------------------------------------------------------------
# DOMAIN TYPES
# ---------------------------------------------------------------------------
class QuestionType(enum.Enum):
    RADIO = "radio"
    CHECKBOX = "checkbox"


@dataclass(frozen=True)
class Question:
    number: int
    qtype: QuestionType
    correct: Tuple[int, ...]


@dataclass(frozen=True)
class Quiz:
    deadline: datetime
    questions: Tuple[Question, ...] = ()

# ---------------------------------------------------------------------------
# GRAMMAR
# ---------------------------------------------------------------------------
question_type = first_of([
    literal(QuestionType.RADIO.value).map(lambda _: QuestionType.RADIO),
    literal(QuestionType.CHECKBOX.value).map(lambda _: QuestionType.CHECKBOX),
])

line_end = or_else(literal("\n"), end_of_input)


@generate
def correct_answers():
    """``1, 2, 3`` up to and including the end of the line."""
    head = yield positive_int
    tail = yield zero_or_more(literal(", ").bind(lambda _: positive_int))
    yield line_end
    return (head,) + tuple(tail)


def question(expected: int):
    """One ``number|type|answers`` line numbered exactly ``expected`` (no leading zeros)."""
    @generate
    def parser():
        label = yield digits
        if label != str(expected):
            yield fail()
        yield literal("|")
        qtype = yield question_type
        yield literal("|")
        correct = yield correct_answers
        return Question(expected, qtype, correct)
    return parser


@generate
def questions():
    """Consecutively numbered question lines until input runs out."""
    found: List[Question] = []
    while True:
        ahead = yield peek_char
        if not ahead:
            return found
        nxt = yield or_else(question(len(found) + 1), lift(None))
        if nxt is None:
            return found
        found.append(nxt)


@generate
def quiz():
    first_line = yield span(lambda c: c != "\n")
    deadline = to_time(first_line)
    if deadline is None:
        yield fail()
    yield consume_char
    body = yield questions
    return Quiz(deadline, tuple(body))

# ---------------------------------------------------------------------------
# SERIALIZATION
# ---------------------------------------------------------------------------
def question_to_str(q: Question) -> str:
    return f"{q.number}|{q.qtype.value}|" + ", ".join(str(c) for c in q.correct)


def dumps(key: Quiz) -> str:
    """Quiz key text, newline after every line."""
    lines = [time_to_str(key.deadline)] + [question_to_str(q) for q in key.questions]
    return "".join(line + "\n" for line in lines)

# ---------------------------------------------------------------------------
# PUBLIC API
# ---------------------------------------------------------------------------
def load_quiz(text: str) -> Quiz:
    """
    Parse a quiz key. Raises SyntaxError naming the first line that could
    not be read.
    """
    result = run_partial(quiz, text)
    if result is None:
        raise SyntaxError("bad deadline on line 1 of quiz key")
    rest, parsed = result
    if rest:
        offset = len(text) - len(rest)
        line_no = text.count("\n", 0, offset) + 1
        raise SyntaxError(
            f"bad question on line {line_no} of quiz key - expected question {len(parsed.questions) + 1}")
    log.debug("quiz key: deadline %s, %d questions", parsed.deadline, len(parsed.questions))
    return parsed


def parse_quiz(text: str) -> Optional[Quiz]:
    """Like ``load_quiz`` but returns None instead of raising."""
    try:
        return load_quiz(text)
    except SyntaxError:
        return None
