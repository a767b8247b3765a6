"""Tests for URL and header helpers."""

import pytest

from curlmux._internal.http import final_location, normalize_headers, origin, resolve_location
from curlmux.exceptions import CurlmuxValidationError


class TestOrigin:
    """Tests for origin()."""

    def test_fills_default_port(self):
        """Should fill in the scheme's default port."""
        assert origin("http://example.com/feed") == ("http", "example.com", 80)
        assert origin("https://example.com/") == ("https", "example.com", 443)

    def test_explicit_default_port_matches(self):
        """Explicit default port should equal the implicit one."""
        assert origin("http://example.com:80/a") == origin("http://example.com/b")

    def test_host_is_case_insensitive(self):
        """Should lower-case scheme and host."""
        assert origin("HTTP://Example.COM/x") == ("http", "example.com", 80)

    def test_non_default_port(self):
        """Should keep an explicit port."""
        assert origin("http://example.com:8080/") == ("http", "example.com", 8080)


class TestResolveLocation:
    """Tests for resolve_location() and final_location()."""

    def test_absolute_location_replaces(self):
        """Absolute locations should replace the base."""
        assert resolve_location("http://a.test/x", "https://b.test/y") == "https://b.test/y"

    def test_relative_location_joins(self):
        """Relative locations should resolve against the base."""
        assert resolve_location("http://a.test/dir/x", "y") == "http://a.test/dir/y"
        assert resolve_location("http://a.test/dir/x", "/root") == "http://a.test/root"

    def test_folds_oldest_first(self):
        """Should fold each hop against the previous result."""
        locations = ["http://b.test/one/", "two", "/three"]
        assert final_location("http://a.test/", locations) == "http://b.test/three"

    def test_no_locations(self):
        """Should return the original URL when nothing redirected."""
        assert final_location("http://a.test/", []) == "http://a.test/"


class TestNormalizeHeaders:
    """Tests for normalize_headers()."""

    def test_none(self):
        """None should mean no headers."""
        assert normalize_headers(None) == ()

    def test_mapping_keeps_order(self):
        """Mappings should become ordered pairs."""
        assert normalize_headers({"A": "1", "B": "2"}) == (("A", "1"), ("B", "2"))

    def test_pairs(self):
        """Pair sequences should be kept, including repeated names."""
        assert normalize_headers([("A", "1"), ["A", "2"]]) == (("A", "1"), ("A", "2"))

    @pytest.mark.parametrize(
        "headers",
        [
            "Accept: */*",
            [("Bad:Name", "x")],
            [("", "x")],
            [("A", "line\nbreak")],
            [("only-one",)],
        ],
    )
    def test_rejects_malformed(self, headers):
        """Should reject malformed headers."""
        with pytest.raises(CurlmuxValidationError):
            normalize_headers(headers)
