"""Pattern compiler — coerced pattern string -> PathMatcher.

Grammar (the subset of path-to-regexp that masks use):

| Syntax               | Meaning                                         |
|----------------------|-------------------------------------------------|
| ``:name``            | named parameter, one segment                    |
| ``:name?``           | optional parameter                              |
| ``:name*``/``:name+``| zero-or-more / one-or-more segments             |
| ``(regex)``          | unnamed parameter with a custom pattern         |
| ``{pre:name(re)suf}``| explicit group with prefix and suffix           |
| ``\\c``              | literal character ``c``                         |

Compiled regexes run on ``google-re2``, which guarantees linear-time
matching. That makes the plain lazy segment pattern safe against ReDoS, so
no lookahead-based "safe pattern" is needed (RE2 has no lookaround anyway).

Regex masks are used as-is: unanchored search, capture groups become
parameters keyed by group name or by a running index for unnamed groups.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal
from urllib.parse import unquote

import re2

if TYPE_CHECKING:
    from urlmask._types import Mask, PathParams

logger = logging.getLogger("urlmask.compiler")

DEFAULT_DELIMITER = "/#?"
DEFAULT_PREFIXES = "./"


class MaskError(Exception):
    """Base class for mask errors."""


class MaskCompilationError(MaskError):
    """A coerced pattern could not be compiled into a matcher."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"cannot compile mask pattern {pattern!r}: {reason}")


# ═══════════════════════════════════════════════════════════════════════════════
# Lexer
# ═══════════════════════════════════════════════════════════════════════════════

type TokenType = Literal[
    "OPEN", "CLOSE", "PATTERN", "NAME", "CHAR", "ESCAPED_CHAR", "MODIFIER", "END"
]


@dataclass(frozen=True, slots=True)
class LexToken:
    type: TokenType
    index: int
    value: str


def _is_name_char(char: str) -> bool:
    return char.isascii() and (char.isalnum() or char == "_")


def lex(pattern: str) -> list[LexToken]:
    """Tokenize a pattern string.

    Raises:
        ValueError: On a missing parameter name or a malformed group.
    """
    tokens: list[LexToken] = []
    i = 0
    n = len(pattern)

    while i < n:
        char = pattern[i]

        if char in "*+?":
            tokens.append(LexToken("MODIFIER", i, char))
            i += 1
            continue

        if char == "\\":
            if i + 1 >= n:
                msg = f"Trailing escape at {i}"
                raise ValueError(msg)
            tokens.append(LexToken("ESCAPED_CHAR", i, pattern[i + 1]))
            i += 2
            continue

        if char == "{":
            tokens.append(LexToken("OPEN", i, char))
            i += 1
            continue

        if char == "}":
            tokens.append(LexToken("CLOSE", i, char))
            i += 1
            continue

        if char == ":":
            j = i + 1
            while j < n and _is_name_char(pattern[j]):
                j += 1
            name = pattern[i + 1 : j]
            if not name:
                msg = f"Missing parameter name at {i}"
                raise ValueError(msg)
            tokens.append(LexToken("NAME", i, name))
            i = j
            continue

        if char == "(":
            value, j = _lex_group(pattern, i)
            tokens.append(LexToken("PATTERN", i, value))
            i = j
            continue

        tokens.append(LexToken("CHAR", i, char))
        i += 1

    tokens.append(LexToken("END", i, ""))
    return tokens


def _lex_group(pattern: str, start: int) -> tuple[str, int]:
    """Read a balanced ``(...)`` group. Returns (inner pattern, next index)."""
    count = 1
    j = start + 1
    n = len(pattern)
    buf: list[str] = []

    if j < n and pattern[j] == "?":
        msg = f'Pattern cannot start with "?" at {j}'
        raise ValueError(msg)

    while j < n:
        char = pattern[j]
        if char == "\\":
            buf.append(pattern[j : j + 2])
            j += 2
            continue
        if char == ")":
            count -= 1
            if count == 0:
                j += 1
                break
        elif char == "(":
            count += 1
            if j + 1 >= n or pattern[j + 1] != "?":
                msg = f"Capturing groups are not allowed at {j}"
                raise ValueError(msg)
        buf.append(char)
        j += 1

    if count:
        msg = f"Unbalanced pattern at {start}"
        raise ValueError(msg)
    if not buf:
        msg = f"Missing pattern at {start}"
        raise ValueError(msg)
    return "".join(buf), j


# ═══════════════════════════════════════════════════════════════════════════════
# Parser
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Key:
    """A parameter slot in a parsed pattern.

    Unnamed parameters are keyed by their running index ("0", "1", ...).
    An empty pattern marks a non-capturing literal group (``{...}``).
    """

    name: str
    prefix: str = ""
    suffix: str = ""
    pattern: str = ""
    modifier: str = ""

    @property
    def repeated(self) -> bool:
        return self.modifier in ("*", "+")


type Token = str | Key


class _TokenStream:
    def __init__(self, tokens: list[LexToken]) -> None:
        self._tokens = tokens
        self._i = 0

    def __bool__(self) -> bool:
        return self._i < len(self._tokens)

    def try_consume(self, type_: TokenType) -> str | None:
        if self._i < len(self._tokens) and self._tokens[self._i].type == type_:
            value = self._tokens[self._i].value
            self._i += 1
            return value
        return None

    def must_consume(self, type_: TokenType) -> str:
        value = self.try_consume(type_)
        if value is not None:
            return value
        token = self._tokens[self._i]
        msg = f"Unexpected {token.type} at {token.index}, expected {type_}"
        raise ValueError(msg)

    def consume_text(self) -> str:
        buf: list[str] = []
        while True:
            value = self.try_consume("CHAR") or self.try_consume("ESCAPED_CHAR")
            if not value:
                return "".join(buf)
            buf.append(value)


def parse(
    pattern: str,
    *,
    prefixes: str = DEFAULT_PREFIXES,
    delimiter: str = DEFAULT_DELIMITER,
) -> list[Token]:
    """Parse a pattern string into literal strings and parameter keys.

    Raises:
        ValueError: If the pattern is malformed.
    """
    stream = _TokenStream(lex(pattern))
    default_pattern = f"[^{escape_string(delimiter)}]+?"
    result: list[Token] = []
    path = ""
    key = 0

    def safe_pattern(prefix: str) -> str:
        prev = result[-1] if result else None
        prev_text = prefix or (prev if isinstance(prev, str) else "")
        if isinstance(prev, Key) and not prev_text:
            msg = f'Must have text between two parameters, missing text after "{prev.name}"'
            raise ValueError(msg)
        return default_pattern

    while stream:
        char = stream.try_consume("CHAR")
        name = stream.try_consume("NAME")
        custom = stream.try_consume("PATTERN")

        if name or custom:
            prefix = char or ""
            if prefix not in prefixes:
                path += prefix
                prefix = ""
            if path:
                result.append(path)
                path = ""
            if not name:
                name = str(key)
                key += 1
            result.append(
                Key(
                    name=name,
                    prefix=prefix,
                    pattern=custom or safe_pattern(prefix),
                    modifier=stream.try_consume("MODIFIER") or "",
                )
            )
            continue

        value = char or stream.try_consume("ESCAPED_CHAR")
        if value:
            path += value
            continue

        if path:
            result.append(path)
            path = ""

        if stream.try_consume("OPEN") is not None:
            prefix = stream.consume_text()
            name = stream.try_consume("NAME") or ""
            custom = stream.try_consume("PATTERN") or ""
            suffix = stream.consume_text()
            stream.must_consume("CLOSE")
            if not name and custom:
                name = str(key)
                key += 1
            result.append(
                Key(
                    name=name,
                    prefix=prefix,
                    suffix=suffix,
                    pattern=safe_pattern(prefix) if name and not custom else custom,
                    modifier=stream.try_consume("MODIFIER") or "",
                )
            )
            continue

        stream.must_consume("END")

    return result


# ═══════════════════════════════════════════════════════════════════════════════
# Regex construction
# ═══════════════════════════════════════════════════════════════════════════════

_ESCAPE_CHARS = frozenset(".+*?=^!:${}()[]|/\\")


def escape_string(value: str) -> str:
    """Escape regex metacharacters (and ``/``, ``:``, ``=``, ``!``)."""
    return "".join("\\" + c if c in _ESCAPE_CHARS else c for c in value)


def tokens_to_regex(
    tokens: list[Token],
    *,
    delimiter: str = DEFAULT_DELIMITER,
    strict: bool = False,
    sensitive: bool = False,
) -> str:
    """Build the regex source for a parsed pattern.

    The regex is anchored at both ends. Unless strict, a single trailing
    delimiter is allowed. Unless sensitive, matching ignores case.

    Raises:
        ValueError: If a repeated parameter has neither prefix nor suffix.
    """
    parts = [] if sensitive else ["(?i)"]
    parts.append("^")

    for token in tokens:
        if isinstance(token, str):
            parts.append(escape_string(token))
            continue

        prefix = escape_string(token.prefix)
        suffix = escape_string(token.suffix)

        if not token.pattern:
            parts.append(f"(?:{prefix}{suffix}){token.modifier}")
        elif prefix or suffix:
            if token.repeated:
                mod = "?" if token.modifier == "*" else ""
                parts.append(
                    f"(?:{prefix}((?:{token.pattern})(?:{suffix}{prefix}"
                    f"(?:{token.pattern}))*){suffix}){mod}"
                )
            else:
                parts.append(f"(?:{prefix}({token.pattern}){suffix}){token.modifier}")
        else:
            if token.repeated:
                msg = f'Can not repeat "{token.name}" without a prefix and suffix'
                raise ValueError(msg)
            parts.append(f"({token.pattern}){token.modifier}")

    if not strict:
        parts.append(f"[{escape_string(delimiter)}]?")
    parts.append("$")
    return "".join(parts)


# ═══════════════════════════════════════════════════════════════════════════════
# PathMatcher
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PathMatcher:
    """A compiled mask. Call it with a canonical URL string.

    Returns the decoded parameter mapping on a match, None otherwise.
    Groups that did not participate in the match are left out.
    """

    regex: Any
    keys: tuple[Key, ...]
    decode: Callable[[str], str] = unquote

    def __call__(self, url: str, /) -> PathParams | None:
        m = self.regex.search(url)
        if m is None:
            return None

        params: PathParams = {}
        for index, key in enumerate(self.keys, start=1):
            value = m.group(index)
            if value is None:
                continue
            if key.repeated:
                params[key.name] = tuple(
                    self.decode(part) for part in value.split(key.prefix + key.suffix)
                )
            else:
                params[key.name] = self.decode(value)
        return params


def compile_pattern(
    pattern: Mask,
    decode: Callable[[str], str] = unquote,
) -> PathMatcher:
    """Compile a coerced pattern string, or wrap a regex mask, into a PathMatcher.

    Raises:
        MaskCompilationError: If the pattern is malformed or RE2 rejects it.
    """
    if not isinstance(pattern, str):
        return PathMatcher(regex=pattern, keys=_regex_keys(pattern), decode=decode)

    try:
        tokens = parse(pattern)
        source = tokens_to_regex(tokens)
    except ValueError as e:
        raise MaskCompilationError(pattern, str(e)) from e

    try:
        regex = re2.compile(source)
    except re2.error as e:
        raise MaskCompilationError(pattern, str(e)) from e

    keys = tuple(t for t in tokens if isinstance(t, Key) and t.pattern)
    logger.debug("compiled mask pattern %r -> %r", pattern, source)
    return PathMatcher(regex=regex, keys=keys, decode=decode)


def _regex_keys(regex: Any) -> tuple[Key, ...]:
    """Derive parameter keys from a regex's capture groups."""
    names = {index: name for name, index in regex.groupindex.items()}
    keys: list[Key] = []
    unnamed = 0
    for index in range(1, regex.groups + 1):
        if index in names:
            keys.append(Key(name=names[index]))
        else:
            keys.append(Key(name=str(unnamed)))
            unnamed += 1
    return tuple(keys)
