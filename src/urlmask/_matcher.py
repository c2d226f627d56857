"""Matcher — decide whether a mask matches a request URL.

Pipeline::

    (mask, base_url) -> normalize_path -> coerce_path (string masks only)
                     -> compile_pattern -> PathMatcher
    url              -> get_clean_url   -> PathMatcher(url) -> MatchResult

No state is kept between calls. Pass a PatternCache to reuse compiled
patterns across calls.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from urlmask._coerce import coerce_path
from urlmask._compiler import compile_pattern
from urlmask._types import MatchResult
from urlmask._url import get_clean_url, normalize_path

if TYPE_CHECKING:
    from urlmask._cache import PatternCache
    from urlmask._compiler import PathMatcher
    from urlmask._types import Mask


def match_request_url(
    url: object,
    mask: Mask,
    base_url: str | None = None,
    *,
    cache: PatternCache | None = None,
) -> MatchResult:
    """Match a request URL against a mask.

    >>> match_request_url("https://api.example.com/user/abc-123", "https://api.example.com/user/:id")
    MatchResult(matches=True, params={'id': 'abc-123'})

    Raises:
        MaskCompilationError: If the coerced mask is not a valid pattern.
    """
    params = compile_mask(mask, base_url, cache=cache)(get_clean_url(url))

    if params is None:
        return MatchResult(matches=False, params={})
    return MatchResult(matches=True, params=params)


def compile_mask(
    mask: Mask,
    base_url: str | None = None,
    *,
    cache: PatternCache | None = None,
) -> PathMatcher:
    """Normalize, coerce and compile a mask into a PathMatcher.

    Raises:
        MaskCompilationError: If the coerced mask is not a valid pattern.
    """
    normalized = normalize_path(mask, base_url)
    pattern = coerce_path(normalized) if isinstance(normalized, str) else normalized
    if cache is not None:
        return cache.get(pattern)
    return compile_pattern(pattern)
