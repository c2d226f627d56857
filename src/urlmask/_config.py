"""Config types for handler table construction.

Config-driven construction path:
  dict → parse_handler_config() → HandlerTableConfig → load_handler_table() → HandlerTable

Relationship to runtime types:

| Config type          | Runtime type   |
|----------------------|----------------|
| HandlerTableConfig   | HandlerTable   |
| HandlerConfig        | HttpHandler    |
| PathMaskConfig       | str mask       |
| RegexMaskConfig      | re2 mask       |

The dict shape (JSON or YAML)::

    base_url: https://api.example.com
    handlers:
      - method: GET
        path: /user/:id
        action: get-user
      - regex: "^https://cdn\\."
        action: cdn
    on_no_match: passthrough
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import re2

from urlmask._cache import PatternCache
from urlmask._compiler import MaskCompilationError, MaskError
from urlmask._handlers import HandlerTable, HttpHandler

# ═══════════════════════════════════════════════════════════════════════════════
# Limits
# ═══════════════════════════════════════════════════════════════════════════════

MAX_MASK_LENGTH = 8192
MAX_REGEX_PATTERN_LENGTH = 4096


class MaskTooLongError(MaskError):
    """A mask exceeds its length limit."""

    def __init__(self, length: int, max_: int) -> None:
        self.length = length
        self.max = max_
        super().__init__(f"mask length {length} exceeds maximum {max_}")


class ConfigParseError(Exception):
    """Error parsing a config dict into config types."""


# ═══════════════════════════════════════════════════════════════════════════════
# Config types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PathMaskConfig:
    """A literal mask: URL or path with wildcards and named parameters."""

    value: str


@dataclass(frozen=True, slots=True)
class RegexMaskConfig:
    """A regular-expression mask, compiled with RE2 at load time."""

    pattern: str


type MaskConfig = PathMaskConfig | RegexMaskConfig


@dataclass(frozen=True, slots=True)
class HandlerConfig[A]:
    """One handler: optional method, exactly one mask, and an action."""

    mask: MaskConfig
    action: A
    method: str | None = None


@dataclass(frozen=True, slots=True)
class HandlerTableConfig[A]:
    """Configuration for a HandlerTable."""

    handlers: tuple[HandlerConfig[A], ...]
    base_url: str | None = None
    on_no_match: A | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Parsing (dict → config types)
# ═══════════════════════════════════════════════════════════════════════════════


def parse_handler_config(data: dict[str, Any]) -> HandlerTableConfig[Any]:
    """Parse a dict into a HandlerTableConfig.

    Raises:
        ConfigParseError: If the dict is malformed.
    """
    if not isinstance(data, dict):
        msg = f"expected dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    raw_handlers = data.get("handlers")
    if raw_handlers is None:
        msg = "missing required field 'handlers'"
        raise ConfigParseError(msg)
    if not isinstance(raw_handlers, list):
        msg = f"'handlers' must be a list, got {type(raw_handlers).__name__}"
        raise ConfigParseError(msg)

    base_url = data.get("base_url")
    if base_url is not None and not isinstance(base_url, str):
        msg = f"'base_url' must be a string, got {type(base_url).__name__}"
        raise ConfigParseError(msg)

    return HandlerTableConfig(
        handlers=tuple(_parse_handler(h) for h in raw_handlers),
        base_url=base_url,
        on_no_match=data.get("on_no_match"),
    )


def _parse_handler(data: dict[str, Any]) -> HandlerConfig[Any]:
    """Parse a handler config dict.

    Enforces oneof: exactly one of path or regex.
    """
    if not isinstance(data, dict):
        msg = f"handler must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    if "action" not in data:
        msg = "handler missing required field 'action'"
        raise ConfigParseError(msg)

    has_path = "path" in data
    has_regex = "regex" in data
    if has_path and has_regex:
        msg = "exactly one of 'path' or 'regex' must be set, got both"
        raise ConfigParseError(msg)
    if not has_path and not has_regex:
        msg = "one of 'path' or 'regex' is required"
        raise ConfigParseError(msg)

    field_name = "path" if has_path else "regex"
    value = data[field_name]
    if not isinstance(value, str):
        msg = f"handler {field_name} must be a string, got {type(value).__name__}"
        raise ConfigParseError(msg)

    method = data.get("method")
    if method is not None and not isinstance(method, str):
        msg = f"handler method must be a string, got {type(method).__name__}"
        raise ConfigParseError(msg)

    mask: MaskConfig = PathMaskConfig(value) if has_path else RegexMaskConfig(value)
    return HandlerConfig(mask=mask, action=data["action"], method=method)


# ═══════════════════════════════════════════════════════════════════════════════
# Loading (config types → runtime types)
# ═══════════════════════════════════════════════════════════════════════════════


def load_handler_table(
    config: HandlerTableConfig[Any],
    cache: PatternCache | None = None,
) -> HandlerTable[Any]:
    """Build a HandlerTable from config.

    Every mask is compiled here, so malformed masks fail at load time
    rather than on the first request.

    Raises:
        TooManyHandlersError: More than MAX_HANDLERS handlers.
        MaskTooLongError: A mask exceeds its length limit.
        MaskCompilationError: A mask does not compile.
    """
    handlers = tuple(_load_handler(h, config.base_url) for h in config.handlers)
    table: HandlerTable[Any] = HandlerTable(
        handlers,
        config.on_no_match,
        cache if cache is not None else PatternCache(),
    )
    for handler in handlers:
        handler.compile(table.cache)
    return table


def _load_handler(config: HandlerConfig[Any], base_url: str | None) -> HttpHandler[Any]:
    match config.mask:
        case PathMaskConfig(value=value):
            if len(value) > MAX_MASK_LENGTH:
                raise MaskTooLongError(len(value), MAX_MASK_LENGTH)
            return HttpHandler(value, config.action, config.method, base_url)
        case RegexMaskConfig(pattern=pattern):
            return HttpHandler(_compile_regex(pattern), config.action, config.method)
    msg = f"unknown mask config: {config.mask!r}"  # pragma: no cover
    raise ConfigParseError(msg)  # pragma: no cover


def _compile_regex(pattern: str) -> Any:
    if len(pattern) > MAX_REGEX_PATTERN_LENGTH:
        raise MaskTooLongError(len(pattern), MAX_REGEX_PATTERN_LENGTH)
    try:
        return re2.compile(pattern)
    except re2.error as e:
        raise MaskCompilationError(pattern, str(e)) from e
