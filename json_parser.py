# json_parser.py
# Combinator-based JSON reader and writer for quiz submissions
#
# =============================================================================
#  GRAMMAR
# =============================================================================
#
#   data     := number | string | array | bool | object | null
#   number   := '-'? digit+ ('.' digit+)?          (no exponent form)
#   string   := '"' (char | '\' escape)* '"'
#   array    := '[' ws (']' | data (ws ',' ws data)* ws ']')
#   object   := '{' ws ('}' | pair (',' pair)* '}')
#   pair     := ws string ws ':' ws data ws
#   document := ws object ws
#
# Alternatives are tried in the order above and the first match wins. A
# number is tried first so "-" and digits never reach the other branches.
#
# Objects keep every pair in input order, duplicates included. Lookups return
# the first pair with a matching key.
#
# Nesting is unbounded unless a max_depth is given. Deeply nested input can
# exhaust the interpreter stack; loads() reports that as a depth error.
# =============================================================================

import argparse
import sys
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from typing import Iterator, List, Optional, Tuple, Union

from parser_core import (
    Parser,
    defer,
    delimited_list,
    digits,
    fail,
    first_of,
    generate,
    is_digit,
    lift,
    literal,
    or_else,
    peek_char,
    peek_second_char,
    consume_char,
    run_complete,
    run_partial,
    shortest_prefix,
    skip_whitespace,
)

# ---------------------------------------------------------------------------
# CONSTANTS AND TUNABLES
# ---------------------------------------------------------------------------
DEPTH_LIMIT_DEFAULT = None   # Unbounded; pass an int to cap nested arrays/objects

_SIMPLE_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}
_HEX = "0123456789abcdefABCDEF"

# ---------------------------------------------------------------------------
# VALUE TYPES
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Array:
    items: Tuple["JsonValue", ...] = ()


@dataclass(frozen=True)
class Bool:
    value: bool


@dataclass(frozen=True)
class Null:
    pass


@dataclass(frozen=True)
class JsonObject:
    """
    Ordered key/value pairs. Keys may repeat; ``get`` sees only the first.
    """
    pairs: Tuple[Tuple[str, "JsonValue"], ...] = ()

    def get(self, key: str, default=None):
        for k, v in self.pairs:
            if k == key:
                return v
        return default

    def __contains__(self, key: str) -> bool:
        return any(k == key for k, _ in self.pairs)

    def keys(self) -> List[str]:
        return [k for k, _ in self.pairs]

    def items(self) -> Iterator[Tuple[str, "JsonValue"]]:
        return iter(self.pairs)

    def __len__(self) -> int:
        return len(self.pairs)


JsonValue = Union[Number, Text, Array, Bool, Null, JsonObject]

# ---------------------------------------------------------------------------
# NUMBERS
# ---------------------------------------------------------------------------
@generate
def number():
    """
    Optional '-', digits, then an optional fraction. A '.' is only taken when
    a digit follows it, so "1." leaves the dot behind.
    """
    sign = yield or_else(literal("-"), lift(""))
    whole = yield digits
    if not whole:
        yield fail()
    dot = yield peek_char
    after = yield peek_second_char
    if dot != "." or not is_digit(after):
        return Number(float(sign + whole))
    yield consume_char
    frac = yield digits
    return Number(float(f"{sign}{whole}.{frac}"))


# ---------------------------------------------------------------------------
# STRINGS
# ---------------------------------------------------------------------------
def _is_quoted(raw: str) -> bool:
    """
    True when ``raw`` is exactly one well-formed quoted string: opening and
    closing quote, no bare quote or control character in between, and every
    backslash followed by a known escape.
    """
    if len(raw) < 2 or raw[0] != '"' or raw[-1] != '"':
        return False
    end = len(raw) - 1
    i = 1
    while i < end:
        ch = raw[i]
        if ch == '"' or ch < " ":
            return False
        if ch == "\\":
            if i + 1 >= end:
                return False   # the backslash escapes the closing quote
            esc = raw[i + 1]
            if esc == "u":
                hexpart = raw[i + 2:i + 6]
                if i + 6 > end or not all(c in _HEX for c in hexpart):
                    return False
                i += 6
                continue
            if esc not in _SIMPLE_ESCAPES:
                return False
            i += 2
            continue
        i += 1
    return True


def _unescape(body: str) -> Optional[str]:
    """Decode the escapes of a string body already accepted by ``_is_quoted``."""
    out: List[str] = []
    i = 0
    n = len(body)
    while i < n:
        ch = body[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        esc = body[i + 1]
        if esc != "u":
            out.append(_SIMPLE_ESCAPES[esc])
            i += 2
            continue
        code = int(body[i + 2:i + 6], 16)
        i += 6
        if 0xD800 <= code <= 0xDBFF and body[i:i + 2] == "\\u":
            low = int(body[i + 2:i + 6], 16)
            if 0xDC00 <= low <= 0xDFFF:
                code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
                i += 6
        if 0xD800 <= code <= 0xDFFF:
            return None   # unpaired surrogate
        out.append(chr(code))
    return "".join(out)


@generate
def string():
    """Shortest well-formed quoted prefix, with its escapes decoded."""
    first = yield peek_char
    if first != '"':
        yield fail()
    raw = yield shortest_prefix(_is_quoted)
    decoded = _unescape(raw[1:-1])
    if decoded is None:
        yield fail()
    return Text(decoded)


# ---------------------------------------------------------------------------
# KEYWORDS
# ---------------------------------------------------------------------------
boolean: Parser[Bool] = or_else(
    literal("true").map(lambda _: Bool(True)),
    literal("false").map(lambda _: Bool(False)),
)
null: Parser[Null] = literal("null").map(lambda _: Null())

# ---------------------------------------------------------------------------
# ARRAYS, OBJECTS AND VALUES
# ---------------------------------------------------------------------------
def _allowed(level: int, max_depth: Optional[int]) -> bool:
    return max_depth is None or level <= max_depth


@lru_cache(maxsize=None)
def array_parser(level: int = 1, max_depth: Optional[int] = DEPTH_LIMIT_DEFAULT) -> Parser[Array]:
    """Array nested ``level`` containers deep (the outermost container is level 1)."""
    if not _allowed(level, max_depth):
        return fail()
    element = defer(lambda: data_parser(level, max_depth))
    return delimited_list("[", "]", element).map(lambda items: Array(tuple(items)))


@lru_cache(maxsize=None)
def object_parser(level: int = 1, max_depth: Optional[int] = DEPTH_LIMIT_DEFAULT) -> Parser[JsonObject]:
    if not _allowed(level, max_depth):
        return fail()
    value = defer(lambda: data_parser(level, max_depth))

    @generate
    def pair():
        yield skip_whitespace
        key = yield string
        yield skip_whitespace
        yield literal(":")
        yield skip_whitespace
        item = yield value
        yield skip_whitespace
        return key.value, item

    return delimited_list("{", "}", pair).map(lambda pairs: JsonObject(tuple(pairs)))


@lru_cache(maxsize=None)
def data_parser(level: int = 0, max_depth: Optional[int] = DEPTH_LIMIT_DEFAULT) -> Parser[JsonValue]:
    """Any JSON value found inside ``level`` enclosing containers."""
    return first_of([
        number,
        string,
        array_parser(level + 1, max_depth),
        boolean,
        object_parser(level + 1, max_depth),
        null,
    ])


def document_parser(max_depth: Optional[int] = DEPTH_LIMIT_DEFAULT) -> Parser[JsonObject]:
    """An object with optional surrounding whitespace."""
    body = object_parser(1, max_depth)

    @generate
    def document():
        yield skip_whitespace
        obj = yield body
        yield skip_whitespace
        return obj

    return document


data: Parser[JsonValue] = data_parser()
json_object: Parser[JsonObject] = object_parser()

# ---------------------------------------------------------------------------
# SERIALIZATION
# ---------------------------------------------------------------------------
def _dump_number(value: float) -> str:
    # Fixed-point only: the reader has no exponent form
    return format(Decimal(repr(value)), "f")


def _dump_string(value: str) -> str:
    out = ['"']
    for ch in value:
        if ch == '"':
            out.append('\\"')
        elif ch == "\\":
            out.append("\\\\")
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\r":
            out.append("\\r")
        elif ch == "\t":
            out.append("\\t")
        elif ch == "\b":
            out.append("\\b")
        elif ch == "\f":
            out.append("\\f")
        elif ch < " ":
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


def dumps(value: JsonValue) -> str:
    """Serialize ``value`` in a form ``data`` reads back to an equal value."""
    if isinstance(value, Number):
        return _dump_number(value.value)
    if isinstance(value, Text):
        return _dump_string(value.value)
    if isinstance(value, Array):
        return "[" + ", ".join(dumps(item) for item in value.items) + "]"
    if isinstance(value, Bool):
        return "true" if value.value else "false"
    if isinstance(value, Null):
        return "null"
    if isinstance(value, JsonObject):
        return "{" + ", ".join(f"{_dump_string(k)}: {dumps(v)}" for k, v in value.pairs) + "}"
    raise TypeError(f"not a JSON value: {value!r}")


# ---------------------------------------------------------------------------
# PUBLIC API
# ---------------------------------------------------------------------------
def loads(text: str, *, max_depth: Optional[int] = DEPTH_LIMIT_DEFAULT) -> JsonObject:
    """
    Parse a JSON document whose root is an object.

    Raises SyntaxError when the text is not an object, when data follows the
    closing brace, or when nesting exceeds ``max_depth`` or the stack.
    """
    try:
        result = run_partial(document_parser(max_depth), text)
    except RecursionError:
        raise SyntaxError("depth limit exceeded") from None
    if result is None:
        start = len(text) - len(text.lstrip())
        raise SyntaxError(f"malformed JSON object starting at offset {start}")
    rest, obj = result
    if rest:
        raise SyntaxError(f"extra data after root value at offset {len(text) - len(rest)}")
    return obj


def parse_json(text: str, *, max_depth: Optional[int] = DEPTH_LIMIT_DEFAULT) -> Optional[JsonObject]:
    """Like ``loads`` but returns None instead of raising."""
    try:
        return loads(text, max_depth=max_depth)
    except SyntaxError:
        return None


def parse_value(text: str) -> Optional[JsonValue]:
    """Any single JSON value occupying all of ``text``; None if nesting exhausts the stack."""
    try:
        return run_complete(data, text)
    except RecursionError:
        return None


# ---------------------------------------------------------------------------
# CLI ENTRYPOINT
# ---------------------------------------------------------------------------
def _cli(argv: List[str]):
    """
    Validate a JSON object file: 0 and "OK" when it parses, 1 and the
    SyntaxError on stderr when it does not.
    """
    ap = argparse.ArgumentParser(description="JSON object validator")
    ap.add_argument("file", help="JSON file to verify")
    ap.add_argument("--debug", action="store_true", help="dump the parsed value and exit")
    ap.add_argument("--max-depth", type=int, default=DEPTH_LIMIT_DEFAULT)
    args = ap.parse_args(argv)

    with open(args.file, "r", encoding="utf-8") as fh:
        text = fh.read()

    try:
        obj = loads(text, max_depth=args.max_depth)
    except SyntaxError as exc:
        print(f"SyntaxError: {exc}", file=sys.stderr)
        return 1

    if args.debug:
        print(obj)
        return 0
    print("OK")
    return 0

# ---------------------------------------------------------------------------
# MAIN GUARD
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    sys.exit(_cli(sys.argv[1:]))
