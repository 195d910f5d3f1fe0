import os
import subprocess
import sys

import pytest

TEST_DIR = os.path.dirname(__file__)
REPO_ROOT = os.path.abspath(os.path.join(TEST_DIR, "..", ".."))

json_files = sorted(f for f in os.listdir(TEST_DIR) if f.endswith(".json"))
VALID_FILES = [f for f in json_files if f.startswith("pass")]
INVALID_FILES = [f for f in json_files if f.startswith("fail")]

# Hard fail if fixtures are missing
if not VALID_FILES:
    raise RuntimeError("No pass*.json files found in tests/cli")
if not INVALID_FILES:
    raise RuntimeError("No fail*.json files found in tests/cli")


def run(script, *args):
    cmd = [sys.executable, script] + [str(a) for a in args]
    return subprocess.run(cmd, capture_output=True, text=True, cwd=REPO_ROOT)


def fixture(name):
    return os.path.join(TEST_DIR, name)


@pytest.mark.parametrize("filename", VALID_FILES)
def test_valid_json_returns_0(filename):
    result = run("json_parser.py", fixture(filename))
    assert result.returncode == 0, f"Expected 0 from {filename}, got {result.returncode}"
    assert result.stdout.strip() == "OK"


@pytest.mark.parametrize("filename", INVALID_FILES)
def test_invalid_json_returns_1(filename):
    result = run("json_parser.py", fixture(filename))
    assert result.returncode == 1, f"Expected 1 from {filename}, got {result.returncode}"
    assert result.stderr.startswith("SyntaxError: ")


def test_json_debug_dumps_value():
    result = run("json_parser.py", fixture("pass3.json"), "--debug")
    assert result.returncode == 0
    assert "JsonObject" in result.stdout


def test_json_max_depth_flag():
    assert run("json_parser.py", fixture("pass2.json"), "--max-depth", "4").returncode == 0
    assert run("json_parser.py", fixture("pass2.json"), "--max-depth", "3").returncode == 1


def test_marker_matches_expected_upload():
    result = run("quiz_marker.py", fixture("quiz1.txt"), fixture("pass1.json"))
    assert result.returncode == 0
    with open(fixture("upload1.txt"), encoding="utf-8") as fh:
        expected = fh.read()
    assert sorted(result.stdout.splitlines()) == sorted(expected.splitlines())
    assert result.stdout.endswith("\n") and not result.stdout.endswith("\n\n")


def test_marker_writes_output_file(tmp_path):
    out = tmp_path / "upload.txt"
    result = run("quiz_marker.py", fixture("quiz1.txt"), fixture("pass1.json"), "-o", out)
    assert result.returncode == 0
    assert result.stdout == ""
    assert "z1234567|quiz01|3.0" in out.read_text(encoding="utf-8")


def test_marker_failure_is_reported(tmp_path):
    result = run("quiz_marker.py", fixture("quiz1.txt"), fixture("pass2.json"))
    assert result.returncode == 1
    assert "Something went wrong." in result.stderr
    assert "ValueError" in result.stderr


def test_marker_rejects_bad_quiz(tmp_path):
    quiz = tmp_path / "quiz.txt"
    quiz.write_text("2024-03-01 17:00:00\n2|radio|1\n", encoding="utf-8")
    result = run("quiz_marker.py", quiz, fixture("pass1.json"))
    assert result.returncode == 1
    assert "SyntaxError: bad question on line 2" in result.stderr


def test_marker_debug_dump():
    result = run("quiz_marker.py", fixture("quiz1.txt"), fixture("pass1.json"), "--debug")
    assert result.returncode == 0
    assert result.stdout.startswith("Quiz(")
    assert "z3456789 Submission(" in result.stdout


def test_marker_verbose_logs_to_stderr():
    result = run("quiz_marker.py", fixture("quiz1.txt"), fixture("pass1.json"), "-v")
    assert result.returncode == 0
    assert "DEBUG" in result.stderr
