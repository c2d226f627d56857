"""URL helpers: mask normalization and request URL canonicalization."""

from __future__ import annotations

import re
from urllib.parse import quote, unquote, urljoin, urlsplit

from urlmask._types import Mask

_ABSOLUTE_URL = re.compile(r"^([a-z][a-z\d+\-.]*:)?//", re.IGNORECASE)
_REDUNDANT_CHARACTERS = re.compile(r"[?#].*\Z", re.DOTALL)

# Characters left unescaped when quoting a mask, besides ASCII alphanumerics and "_.-~".
_URI_SAFE = ";,/?:@&=+$!*'()#"

# Escapes of reserved characters (";/?:@&=+$,#") are never decoded after resolution.
_RESERVED_ESCAPE = re.compile(r"(%(?:2[346BCF]|3[ABDF]|40))", re.IGNORECASE)

_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}


def is_absolute_url(url: str) -> bool:
    """Whether the URL has a scheme or is protocol-relative (``//host``)."""
    return _ABSOLUTE_URL.match(url) is not None


def get_absolute_url(path: str, base_url: str | None = None) -> str:
    """Resolve a relative mask against base_url.

    Absolute URLs and masks starting with a wildcard are returned as is,
    and so is any mask when no base_url is given. Percent-escapes in the
    mask survive the resolution.
    """
    if is_absolute_url(path):
        return path
    if path.startswith("*"):
        return path
    if not base_url:
        return path
    return _unquote_unreserved(urljoin(base_url, quote(path, safe=_URI_SAFE)))


def _unquote_unreserved(url: str) -> str:
    # Odd indices hold the reserved escapes captured by split().
    parts = _RESERVED_ESCAPE.split(url)
    return "".join(part if i % 2 else unquote(part) for i, part in enumerate(parts))


def clean_url(path: str) -> str:
    """Drop the query string and fragment from a mask.

    A mask ending in ``?`` ends with an optional parameter, not an empty
    query, and is returned untouched.
    """
    if path.endswith("?"):
        return path
    return _REDUNDANT_CHARACTERS.sub("", path)


def normalize_path(path: Mask, base_url: str | None = None) -> Mask:
    """Normalize a mask: resolve against base_url, then clean it.

    Regex masks pass through unchanged.
    """
    if not isinstance(path, str):
        return path
    return clean_url(get_absolute_url(path, base_url))


def get_clean_url(url: object) -> str:
    """Reduce a request URL to the ``origin + path`` string used for matching.

    Accepts a string or any URL object whose str() is the URL. Query,
    fragment and userinfo are dropped; scheme and host are lowercased and
    a default port is omitted. A URL without an origin yields its path.

    Raises:
        ValueError: If the port is not a valid number.
    """
    parts = urlsplit(str(url))
    path = parts.path or "/"
    if not parts.scheme or not parts.netloc:
        return path

    scheme = parts.scheme.lower()
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"

    port = parts.port
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        host = f"{host}:{port}"

    return f"{scheme}://{host}{path}"
