"""Core types for urlmask.

- Mask is the user-declared pattern: a literal string or a compiled regex
- PathParams is the decoded parameter mapping produced by a match
- MatchResult is the uniform outcome of matching a URL against a mask
"""

from __future__ import annotations

from dataclasses import dataclass, field
from re import Pattern

# A literal mask string, or a compiled regular expression used as-is.
# re2 patterns are accepted too: anything exposing search/groups/groupindex.
type Mask = str | Pattern[str]

# Repeated parameters (":name*", ":name+") decode to a tuple of strings.
type PathParams = dict[str, str | tuple[str, ...]]


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Result of matching a request URL against a mask.

    INV: matches is False implies params is empty.
    """

    matches: bool
    params: PathParams = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.matches and self.params:
            msg = f"a non-matching result cannot carry params, got {self.params!r}"
            raise ValueError(msg)

    def __bool__(self) -> bool:
        return self.matches
