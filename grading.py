# grading.py
# Marking rules for quiz submissions

import logging
from typing import Sequence

from quiz_key import Question, QuestionType, Quiz
from submissions import Submission

log = logging.getLogger(__name__)


def _unique(values: Sequence[int]) -> list:
    return list(dict.fromkeys(values))


def mark_radio(question: Question, given: Sequence[int]) -> float:
    """1 for exactly one distinct answer that is correct, else 0."""
    answers = _unique(given)
    if len(answers) == 1 and answers[0] in question.correct:
        return 1.0
    return 0.0


def mark_checkbox(question: Question, given: Sequence[int]) -> float:
    """max(0, (right - wrong) / correct), duplicates ignored on both sides."""
    correct = set(question.correct)
    answers = _unique(given)
    right = sum(1 for a in answers if a in correct)
    wrong = len(answers) - right
    return max(0.0, (right - wrong) / len(correct))


def mark_question(question: Question, given: Sequence[int]) -> float:
    if question.qtype is QuestionType.RADIO:
        return mark_radio(question, given)
    return mark_checkbox(question, given)


def mark_submission(quiz: Quiz, submission: Submission) -> float:
    """
    Sum of question marks, pairing questions and answer lists by position.
    Whichever side is longer has its extra entries ignored. A submission made
    after the deadline gets 0.
    """
    if submission.time > quiz.deadline:
        log.debug("late submission by %s at %s", submission.student, submission.time)
        return 0.0
    return sum((mark_question(q, given) for q, given in zip(quiz.questions, submission.answers)), 0.0)
