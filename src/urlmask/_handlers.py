"""Request handlers — method + mask pairs with first-match-wins lookup.

An HttpHandler matches a request when its method matches and its mask
matches the request URL. A HandlerTable evaluates handlers in order and
returns the first hit:
- Handlers evaluated in declaration order (first-match-wins)
- A method mismatch skips the URL match entirely
- on_no_match is the table-level fallback
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from re import Pattern
from typing import TYPE_CHECKING

from urlmask._cache import PatternCache
from urlmask._compiler import MaskError
from urlmask._matcher import compile_mask, match_request_url
from urlmask._types import MatchResult

if TYPE_CHECKING:
    from urlmask._compiler import PathMatcher
    from urlmask._types import Mask, PathParams

logger = logging.getLogger("urlmask.handlers")

MAX_HANDLERS = 256

# None matches any method.
type MethodMask = str | Pattern[str] | None


class TooManyHandlersError(MaskError):
    """Handler table exceeds MAX_HANDLERS (width-based limit)."""

    def __init__(self, count: int, max_: int) -> None:
        self.count = count
        self.max = max_
        super().__init__(f"too many handlers: {count} exceeds maximum {max_}")


@dataclass(frozen=True, slots=True)
class HttpHandler[A]:
    """A request handler: method, URL mask and the action it resolves to.

    String methods compare case-insensitively; regex methods are searched.
    """

    mask: Mask
    action: A
    method: MethodMask = None
    base_url: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.mask, str) and "?" in self.mask.rstrip("?"):
            logger.warning(
                'Found a redundant usage of query parameters in the request handler URL for "%s %s". '
                "Query parameters are ignored when matching; match against a path instead.",
                self.method_label,
                self.mask,
            )

    @property
    def method_label(self) -> str:
        match self.method:
            case None:
                return "*"
            case str(m):
                return m.upper()
            case _:
                return self.method.pattern

    def matches_method(self, method: str) -> bool:
        match self.method:
            case None:
                return True
            case str(m):
                return m.casefold() == method.casefold()
            case _:
                return self.method.search(method) is not None

    def compile(self, cache: PatternCache | None = None) -> PathMatcher:
        """Compile this handler's mask, through cache when given."""
        return compile_mask(self.mask, self.base_url, cache=cache)

    def test(
        self, method: str, url: object, *, cache: PatternCache | None = None
    ) -> MatchResult:
        """Match a request against this handler."""
        if not self.matches_method(method):
            return MatchResult(matches=False, params={})
        return match_request_url(url, self.mask, self.base_url, cache=cache)


@dataclass(frozen=True, slots=True)
class HandlerMatch[A]:
    """The outcome of a table lookup.

    handler is None when the result came from on_no_match.
    """

    action: A
    params: PathParams
    handler: HttpHandler[A] | None = None


@dataclass(frozen=True, slots=True)
class HandlerTable[A]:
    """Ordered handlers with first-match-wins semantics.

    Width validation runs at construction time: more than MAX_HANDLERS
    handlers raises TooManyHandlersError.
    """

    handlers: tuple[HttpHandler[A], ...]
    on_no_match: A | None = None
    cache: PatternCache = field(default_factory=PatternCache, compare=False, repr=False)

    def __post_init__(self) -> None:
        if len(self.handlers) > MAX_HANDLERS:
            raise TooManyHandlersError(len(self.handlers), MAX_HANDLERS)

    def evaluate(self, method: str, url: object) -> HandlerMatch[A] | None:
        """Return the first matching handler's action and params.

        Falls back to on_no_match (with empty params) when nothing matches,
        or None when there is no fallback.
        """
        for handler in self.handlers:
            result = handler.test(method, url, cache=self.cache)
            if result.matches:
                return HandlerMatch(handler.action, result.params, handler)
        if self.on_no_match is not None:
            return HandlerMatch(self.on_no_match, {})
        return None
