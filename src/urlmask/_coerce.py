"""Mask coercion — turn a mask string into a pattern the compiler accepts.

The pattern grammar uses ``:`` for named parameters, so every structural
colon in the mask (scheme separator, bracketed IPv6 colons, port separator)
has to be escaped before compilation. Bare wildcards are rewritten into
unnamed capture groups because the grammar has no wildcard of its own.

Two passes, applied in order:

1. Wildcard rewrite::

       /user/*         ->  /user/(.*)
       /us*            ->  /us(.*)
       /foo/:name*     ->  /foo/:name*        (parameter modifier kept)

2. Structural colon escaping::

       http://[::1]:3000/:aaa/:bbb                  ->  http\\://[\\:\\:1]\\:3000/:aaa/:bbb
       http://:subdomain.example.com:3000/:aaa      ->  http\\://:subdomain.example.com\\:3000/:aaa

Coercion is a pure text transform and never raises. It is not idempotent:
coerce each mask exactly once.
"""

from __future__ import annotations

import re

# An optional parameter-name prefix glued to a run of wildcards.
_WILDCARD = re.compile(r"([:a-zA-Z_-]*)(\*+)")

_CAPTURE_ANY = "(.*)"

# stdlib re only takes fixed-width lookbehind, so "the address does not end
# in :<1-5 digits>" is spelled as one lookbehind per width.
_NOT_PORT_SUFFIX = "".join(rf"(?<!:[0-9]{{{n}}})" for n in range(1, 6))

_STRUCTURE = re.compile(
    r"(?P<scheme>^(?://|[^/\s]+:(?=//)//))?"
    r"(?P<addr>"
    r"(?P<bracketed>\[(?P<ip6addr>[0-9a-f:]+?)\])"
    r"|(?P<unbracketed>[^/\[\]\s]+)" + _NOT_PORT_SUFFIX + r")"
    r"(?=/|:[0-9]{1,5}|\Z)"
    r"(?P<port>:[0-9]{1,5})?"
    r"(?P<path>/\Z|(?:/[^/\s]+)+?\Z)?"
    r"\Z"
)


def coerce_path(path: str) -> str:
    """Coerce a mask string into a pattern string for compile_pattern().

    >>> coerce_path("https://example.com/user/*")
    'https\\\\://example.com/user/(.*)'
    """
    return _escape_structural_colons(_WILDCARD.sub(_replace_wildcard, path))


def _replace_wildcard(m: re.Match[str]) -> str:
    parameter_name, wildcard = m.group(1), m.group(2)
    if not parameter_name:
        return _CAPTURE_ANY
    if parameter_name.startswith(":"):
        return parameter_name + wildcard
    return parameter_name + _CAPTURE_ANY


def _escape_structural_colons(path: str) -> str:
    return _STRUCTURE.sub(_replace_structure, path, count=1)


def _replace_structure(m: re.Match[str]) -> str:
    scheme = m.group("scheme")
    bracketed = m.group("bracketed")
    port = m.group("port")
    return "".join(
        (
            scheme.replace(":", "\\:", 1) if scheme else "",
            bracketed.replace(":", "\\:") if bracketed else m.group("unbracketed"),
            "\\" + port if port else "",
            m.group("path") or "",
        )
    )
