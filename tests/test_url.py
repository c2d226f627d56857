"""Tests for mask normalization and request URL canonicalization."""

from __future__ import annotations

import re

import pytest

from urlmask import (
    clean_url,
    get_absolute_url,
    get_clean_url,
    is_absolute_url,
    normalize_path,
)


class TestIsAbsoluteUrl:
    @pytest.mark.parametrize(
        "url", ["https://example.com", "HTTP://EXAMPLE.COM", "//example.com", "ws+unix://sock"]
    )
    def test_absolute(self, url: str) -> None:
        assert is_absolute_url(url) is True

    @pytest.mark.parametrize("url", ["/user", "user/:id", "*", "example.com", "1http://x"])
    def test_relative(self, url: str) -> None:
        assert is_absolute_url(url) is False


class TestGetAbsoluteUrl:
    def test_absolute_unchanged(self) -> None:
        assert get_absolute_url("https://a.com/x", "https://b.com") == "https://a.com/x"

    def test_wildcard_unchanged(self) -> None:
        assert get_absolute_url("*/user", "https://b.com") == "*/user"

    def test_relative_without_base_unchanged(self) -> None:
        assert get_absolute_url("/user/:id") == "/user/:id"

    def test_resolves_against_origin(self) -> None:
        assert get_absolute_url("/user/:id", "https://api.com") == "https://api.com/user/:id"

    def test_resolves_against_base_path(self) -> None:
        assert get_absolute_url("user", "https://api.com/v1/") == "https://api.com/v1/user"

    def test_escapes_survive(self) -> None:
        assert get_absolute_url("/a%2Fb", "https://api.com") == "https://api.com/a%2Fb"

    def test_spaces_survive(self) -> None:
        assert get_absolute_url("/a b", "https://api.com") == "https://api.com/a b"

    @pytest.mark.parametrize("escape", ["%2F", "%3F", "%23", "%3a"])
    def test_reserved_escapes_in_base_url_survive(self, escape: str) -> None:
        base_url = f"https://api.com/a{escape}b/"
        assert get_absolute_url("c", base_url) == f"https://api.com/a{escape}b/c"

    def test_unreserved_escapes_in_base_url_decode(self) -> None:
        assert get_absolute_url("c", "https://api.com/a%20b/") == "https://api.com/a b/c"

    def test_escaped_query_delimiter_is_not_cleaned(self) -> None:
        assert normalize_path("c", "https://api.com/a%3Fb/") == "https://api.com/a%3Fb/c"


class TestCleanUrl:
    def test_drops_query(self) -> None:
        assert clean_url("/search?q=1") == "/search"

    def test_drops_fragment(self) -> None:
        assert clean_url("/docs#intro") == "/docs"

    def test_keeps_trailing_optional_parameter(self) -> None:
        assert clean_url("/user/:id?") == "/user/:id?"

    def test_plain_path_unchanged(self) -> None:
        assert clean_url("/user/:id") == "/user/:id"


class TestNormalizePath:
    def test_regex_passes_through(self) -> None:
        pattern = re.compile(r"/user/\d+")
        assert normalize_path(pattern, "https://api.com") is pattern

    def test_resolves_and_cleans(self) -> None:
        assert normalize_path("/user?x=1", "https://api.com") == "https://api.com/user"


class TestGetCleanUrl:
    def test_adds_root_path(self) -> None:
        assert get_clean_url("https://test.mswjs.io") == "https://test.mswjs.io/"

    def test_drops_query_and_fragment(self) -> None:
        assert get_clean_url("https://a.com/p?q=1#h") == "https://a.com/p"

    def test_lowercases_scheme_and_host(self) -> None:
        assert get_clean_url("HTTPS://Example.COM/Path") == "https://example.com/Path"

    def test_drops_default_port(self) -> None:
        assert get_clean_url("http://a.com:80/") == "http://a.com/"
        assert get_clean_url("https://a.com:443/") == "https://a.com/"

    def test_keeps_other_port(self) -> None:
        assert get_clean_url("http://a.com:8080/x") == "http://a.com:8080/x"

    def test_drops_userinfo(self) -> None:
        assert get_clean_url("https://user:pw@a.com/x") == "https://a.com/x"

    def test_brackets_ipv6(self) -> None:
        assert get_clean_url("http://[::1]:62588/user") == "http://[::1]:62588/user"

    def test_keeps_percent_escapes(self) -> None:
        assert get_clean_url("https://a.com/x/a%2Fb") == "https://a.com/x/a%2Fb"

    def test_path_only(self) -> None:
        assert get_clean_url("/user?x=1") == "/user"

    def test_accepts_url_objects(self) -> None:
        class Url:
            def __str__(self) -> str:
                return "https://a.com/x?y"

        assert get_clean_url(Url()) == "https://a.com/x"

    def test_invalid_port_raises(self) -> None:
        with pytest.raises(ValueError):
            get_clean_url("http://a.com:99999999/")
