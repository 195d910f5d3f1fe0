# submissions.py
# Conversion between parsed JSON objects and quiz submissions
#
# A submissions file is one JSON object mapping an identifier (a student id,
# usually) to a submission object:
#
#   {"z1234567": {"session": "24T1", "quiz_name": "quiz01",
#                 "student": "Ada Lovelace", "answers": [[1], [2, 3]],
#                 "time": "2024-03-01 16:59:59"}}
#
# Extra keys are ignored. When a key repeats, its first occurrence is used.
# One bad submission rejects the whole file.

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from json_parser import Array, JsonObject, JsonValue, Number, Text
from quiz_key import time_to_str, to_time

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# DOMAIN TYPE
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Submission:
    session: str
    quiz_name: str
    student: str
    answers: Tuple[Tuple[int, ...], ...]
    time: datetime

# ---------------------------------------------------------------------------
# FIELD READERS
# ---------------------------------------------------------------------------
def _field(obj: JsonObject, key: str) -> JsonValue:
    value = obj.get(key)
    if value is None:
        raise ValueError(f"missing key '{key}'")
    return value


def _string_field(obj: JsonObject, key: str) -> str:
    value = _field(obj, key)
    if not isinstance(value, Text):
        raise ValueError(f"key '{key}' must hold a string")
    return value.value


def _positive_whole(value: JsonValue, where: str) -> int:
    if not isinstance(value, Number):
        raise ValueError(f"{where} must be a number")
    n = value.value
    if not n.is_integer() or n <= 0:
        raise ValueError(f"{where} must be a positive whole number, got {n!r}")
    return int(n)


def _answers(obj: JsonObject) -> Tuple[Tuple[int, ...], ...]:
    value = _field(obj, "answers")
    if not isinstance(value, Array):
        raise ValueError("key 'answers' must hold a list of lists")
    rows = []
    for i, row in enumerate(value.items):
        if not isinstance(row, Array):
            raise ValueError(f"answers[{i}] must be a list")
        rows.append(tuple(_positive_whole(item, f"answers[{i}][{j}]")
                          for j, item in enumerate(row.items)))
    return tuple(rows)

# ---------------------------------------------------------------------------
# CONVERSION
# ---------------------------------------------------------------------------
def convert_submission(obj: JsonObject) -> Submission:
    """
    Build a Submission from one submission object.

    Raises ValueError when a required key is missing, holds the wrong kind of
    value, ``time`` is not a valid timestamp, or an answer is not a positive
    whole number.
    """
    session = _string_field(obj, "session")
    quiz_name = _string_field(obj, "quiz_name")
    student = _string_field(obj, "student")
    raw_time = _string_field(obj, "time")
    moment = to_time(raw_time)
    if moment is None:
        raise ValueError(f"key 'time' holds an invalid timestamp {raw_time!r}")
    return Submission(
        session=session,
        quiz_name=quiz_name,
        student=student,
        answers=_answers(obj),
        time=moment,
    )


def convert_submissions(obj: JsonObject) -> List[Tuple[str, Submission]]:
    """
    Convert every ``identifier: submission`` pair, keeping file order.
    Raises ValueError naming the first identifier that fails.
    """
    converted: List[Tuple[str, Submission]] = []
    for ident, value in obj.items():
        if not isinstance(value, JsonObject):
            raise ValueError(f"submission '{ident}' is not an object")
        try:
            converted.append((ident, convert_submission(value)))
        except ValueError as exc:
            raise ValueError(f"submission '{ident}': {exc}") from None
    log.debug("converted %d submissions", len(converted))
    return converted


def to_submission(obj: JsonObject) -> Optional[Submission]:
    try:
        return convert_submission(obj)
    except ValueError:
        return None


def to_submissions(obj: JsonObject) -> Optional[List[Tuple[str, Submission]]]:
    try:
        return convert_submissions(obj)
    except ValueError:
        return None

# ---------------------------------------------------------------------------
# BACK TO JSON
# ---------------------------------------------------------------------------
def submission_to_json(sub: Submission) -> JsonObject:
    answers = Array(tuple(Array(tuple(Number(float(a)) for a in row)) for row in sub.answers))
    return JsonObject((
        ("session", Text(sub.session)),
        ("quiz_name", Text(sub.quiz_name)),
        ("student", Text(sub.student)),
        ("answers", answers),
        ("time", Text(time_to_str(sub.time))),
    ))


def submissions_to_json(subs: Sequence[Tuple[str, Submission]]) -> JsonObject:
    return JsonObject(tuple((ident, submission_to_json(sub)) for ident, sub in subs))
