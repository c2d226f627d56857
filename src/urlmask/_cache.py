"""PatternCache — thread-safe memo of compiled mask patterns.

Keys are pattern sources: coerced mask strings or regex objects.
Compilation runs outside the lock. Two threads racing on the same new
pattern may both compile it; the first stored matcher wins and both
results are equivalent.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Callable
from typing import TYPE_CHECKING
from urllib.parse import unquote

from urlmask._compiler import PathMatcher, compile_pattern

if TYPE_CHECKING:
    from urlmask._types import Mask

logger = logging.getLogger("urlmask.cache")

DEFAULT_CACHE_SIZE = 1024


class PatternCache:
    """Bounded map from pattern source to compiled PathMatcher.

    Entries are evicted oldest-inserted first once maxsize is reached.
    Compilation errors propagate and are never cached.
    """

    def __init__(
        self,
        maxsize: int = DEFAULT_CACHE_SIZE,
        decode: Callable[[str], str] = unquote,
    ) -> None:
        if maxsize < 1:
            msg = f"maxsize must be positive, got {maxsize}"
            raise ValueError(msg)
        self.maxsize = maxsize
        self._decode = decode
        self._lock = threading.Lock()
        self._entries: OrderedDict[Mask, PathMatcher] = OrderedDict()

    def get(self, pattern: Mask) -> PathMatcher:
        """Return the compiled matcher for pattern, compiling on first use."""
        with self._lock:
            cached = self._entries.get(pattern)
        if cached is not None:
            return cached

        compiled = compile_pattern(pattern, self._decode)

        with self._lock:
            existing = self._entries.get(pattern)
            if existing is not None:
                return existing
            self._entries[pattern] = compiled
            while len(self._entries) > self.maxsize:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("evicted mask pattern %r", evicted)
        return compiled

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, pattern: object) -> bool:
        with self._lock:
            return pattern in self._entries
