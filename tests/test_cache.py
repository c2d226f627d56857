"""Tests for PatternCache."""

from __future__ import annotations

import re
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from urlmask import MaskCompilationError, PatternCache, coerce_path, match_request_url


class TestPatternCache:
    def test_compiles_on_first_use(self) -> None:
        cache = PatternCache()
        assert "/user/:id" not in cache
        matcher = cache.get("/user/:id")
        assert "/user/:id" in cache
        assert matcher("/user/1") == {"id": "1"}

    def test_returns_same_matcher(self) -> None:
        cache = PatternCache()
        assert cache.get("/a") is cache.get("/a")

    def test_regex_keys(self) -> None:
        cache = PatternCache()
        pattern = re.compile(r"/a/(\d+)")
        assert cache.get(pattern)("/a/5") == {"0": "5"}
        assert pattern in cache

    def test_evicts_oldest(self) -> None:
        cache = PatternCache(maxsize=2)
        cache.get("/a")
        cache.get("/b")
        cache.get("/c")
        assert len(cache) == 2
        assert "/a" not in cache
        assert "/b" in cache
        assert "/c" in cache

    def test_clear(self) -> None:
        cache = PatternCache()
        cache.get("/a")
        cache.clear()
        assert len(cache) == 0

    def test_custom_decode(self) -> None:
        cache = PatternCache(decode=str.upper)
        assert cache.get("/x/:v")("/x/abc") == {"v": "ABC"}

    def test_errors_propagate_and_are_not_stored(self) -> None:
        cache = PatternCache()
        with pytest.raises(MaskCompilationError):
            cache.get("/:")
        assert "/:" not in cache

    def test_invalid_maxsize(self) -> None:
        with pytest.raises(ValueError, match="maxsize must be positive"):
            PatternCache(maxsize=0)


class TestConcurrency:
    def test_concurrent_first_use_converges(self) -> None:
        cache = PatternCache()
        pattern = coerce_path("http://[::1]:62588/user/:user_id")
        barrier = threading.Barrier(8)

        def worker(_: int):  # noqa: ANN202
            barrier.wait()
            return cache.get(pattern)

        with ThreadPoolExecutor(max_workers=8) as pool:
            matchers = list(pool.map(worker, range(8)))

        assert len(cache) == 1
        stored = cache.get(pattern)
        assert all(m("http://[::1]:62588/user/7") == {"user_id": "7"} for m in matchers)
        assert stored in matchers

    def test_concurrent_matching_agrees(self) -> None:
        cache = PatternCache(maxsize=4)
        masks = [f"https://a.com/r{i}/:id" for i in range(16)]

        def worker(i: int) -> bool:
            mask = masks[i % len(masks)]
            result = match_request_url(f"https://a.com/r{i % len(masks)}/x", mask, cache=cache)
            return result.matches and result.params == {"id": "x"}

        with ThreadPoolExecutor(max_workers=8) as pool:
            assert all(pool.map(worker, range(200)))
