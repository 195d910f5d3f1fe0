# quiz_marker.py
# Marks a batch of quiz submissions against a quiz key
#
# =============================================================================
#  PIPELINE
# =============================================================================
#
#   quiz key text   -> quiz_key.load_quiz        -> Quiz
#   submissions     -> json_parser.loads         -> JsonObject
#                   -> submissions.convert_submissions -> [(id, Submission)]
#   Quiz + each submission -> grading.mark_submission -> mark
#   marks           -> format_report             -> "id|quiz_name|mark" lines
#
# Any failure along the way rejects the whole batch; no partial report is
# ever produced.
# =============================================================================

import argparse
import logging
import sys
from typing import Iterable, List, Optional, Tuple

from grading import mark_submission
from json_parser import DEPTH_LIMIT_DEFAULT, loads
from quiz_key import Quiz, load_quiz
from submissions import Submission, convert_submissions

log = logging.getLogger(__name__)

GENERIC_FAILURE = "Something went wrong."

# ---------------------------------------------------------------------------
# REPORT
# ---------------------------------------------------------------------------
def format_report(rows: Iterable[Tuple[str, str, float]]) -> str:
    """
    One ``identifier|quiz_name|mark`` line per row, each ending in a newline.
    Leading and trailing whitespace of the report as a whole is dropped.
    """
    body = "".join(f"{ident}|{quiz_name}|{mark!r}\n" for ident, quiz_name, mark in rows)
    body = body.strip()
    return body + "\n" if body else ""


def grade_all(quiz: Quiz, subs: Iterable[Tuple[str, Submission]]) -> List[Tuple[str, str, float]]:
    rows = []
    for ident, sub in subs:
        mark = mark_submission(quiz, sub)
        log.debug("%s|%s scored %r", ident, sub.quiz_name, mark)
        rows.append((ident, sub.quiz_name, mark))
    return rows

# ---------------------------------------------------------------------------
# PUBLIC API
# ---------------------------------------------------------------------------
def mark(quiz_text: str, submissions_text: str, *, max_depth: Optional[int] = DEPTH_LIMIT_DEFAULT) -> str:
    """
    Report text for ``submissions_text`` marked against ``quiz_text``.

    Raises SyntaxError for an unreadable quiz key or submissions file and
    ValueError for a submission with missing or ill-typed fields.
    """
    quiz = load_quiz(quiz_text)
    subs = convert_submissions(loads(submissions_text, max_depth=max_depth))
    return format_report(grade_all(quiz, subs))


def marker(quiz_text: str, submissions_text: str, *, max_depth: Optional[int] = DEPTH_LIMIT_DEFAULT) -> Optional[str]:
    """Like ``mark`` but returns None on any failure."""
    try:
        return mark(quiz_text, submissions_text, max_depth=max_depth)
    except (SyntaxError, ValueError):
        return None

# ---------------------------------------------------------------------------
# CLI ENTRYPOINT
# ---------------------------------------------------------------------------
def _read(path: str) -> str:
    with open(path, "r", encoding="utf-8") as fh:
        return fh.read()


def _cli(argv: List[str]):
    """
    Mark a submissions file against a quiz key.

    0 and the report on success; 1 with the generic failure line and its
    cause on stderr otherwise.
    """
    ap = argparse.ArgumentParser(description="Quiz submission marker")
    ap.add_argument("quiz", help="quiz key file")
    ap.add_argument("submissions", help="submissions JSON file")
    ap.add_argument("-o", "--output", help="write the report here instead of stdout")
    ap.add_argument("--max-depth", type=int, default=DEPTH_LIMIT_DEFAULT)
    ap.add_argument("--debug", action="store_true", help="dump the parsed quiz and submissions and exit")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    quiz_text = _read(args.quiz)
    submissions_text = _read(args.submissions)

    try:
        if args.debug:
            print(load_quiz(quiz_text))
            for ident, sub in convert_submissions(loads(submissions_text, max_depth=args.max_depth)):
                print(ident, sub)
            return 0
        report = mark(quiz_text, submissions_text, max_depth=args.max_depth)
    except (SyntaxError, ValueError) as exc:
        print(GENERIC_FAILURE, file=sys.stderr)
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        return 1

    if args.output:
        with open(args.output, "w", encoding="utf-8") as fh:
            fh.write(report)
    else:
        sys.stdout.write(report)
    log.info("marked %d submissions", report.count("\n"))
    return 0

# ---------------------------------------------------------------------------
# MAIN GUARD
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    sys.exit(_cli(sys.argv[1:]))
