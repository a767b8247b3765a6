"""Tests for request consolidation."""

from curlmux._internal.transfer.consolidate import compatibility_key, consolidate
from curlmux._internal.transfer.models import build_request


def noop(ok, result):
    pass


def urls_of(batches):
    return [batch.urls for batch in batches]


class TestCompatibilityKey:
    """Tests for compatibility_key()."""

    def test_key_fields(self):
        """Key should be scheme, host, port and headers."""
        request = build_request("https://a.test/x", noop, {"Accept": "*/*"})
        assert compatibility_key(request) == ("https", "a.test", 443, (("accept", "*/*"),))

    def test_list_keyed_by_first_url(self):
        """A list target should be keyed by its first URL."""
        request = build_request(["http://a.test/1", "http://b.test/2"], noop)
        assert compatibility_key(request)[:3] == ("http", "a.test", 80)


class TestConsolidate:
    """Tests for consolidate()."""

    def test_same_host_grouped(self):
        """Compatible requests should share a batch in submission order."""
        requests = [build_request(f"http://a.test/{i}", noop) for i in range(20)]
        batches = consolidate(requests)
        assert len(batches) == 1
        assert batches[0].urls == [f"http://a.test/{i}" for i in range(20)]

    def test_groups_in_first_seen_order(self):
        """Batches should follow the order their key first appeared."""
        requests = [
            build_request("http://b.test/1", noop),
            build_request("http://a.test/1", noop),
            build_request("http://b.test/2", noop),
            build_request("http://a.test/2", noop),
        ]
        assert urls_of(consolidate(requests)) == [
            ["http://b.test/1", "http://b.test/2"],
            ["http://a.test/1", "http://a.test/2"],
        ]

    def test_incompatible_requests_split(self):
        """Scheme, port and header differences should prevent sharing."""
        requests = [
            build_request("http://a.test/1", noop),
            build_request("https://a.test/2", noop),
            build_request("http://a.test:8080/3", noop),
            build_request("http://a.test/4", noop, {"Accept": "text/html"}),
            build_request("http://a.test/5", noop, {"Accept": "text/xml"}),
            build_request("http://a.test/6", noop, {"Accept": "text/html"}),
        ]
        assert urls_of(consolidate(requests)) == [
            ["http://a.test/1"],
            ["https://a.test/2"],
            ["http://a.test:8080/3"],
            ["http://a.test/4", "http://a.test/6"],
            ["http://a.test/5"],
        ]

    def test_header_order_and_case_ignored(self):
        """The same headers in another order or case should share a batch."""
        requests = [
            build_request("http://a.test/1", noop, {"A": "1", "B": "2"}),
            build_request("http://a.test/2", noop, {"B": "2", "A": "1"}),
            build_request("http://a.test/3", noop, [("b", "2"), ("a", "1")]),
        ]
        [batch] = consolidate(requests)
        assert batch.urls == ["http://a.test/1", "http://a.test/2", "http://a.test/3"]
        assert batch.headers == (("A", "1"), ("B", "2"))

    def test_list_target_not_split(self):
        """A list target should stay whole and in its own order."""
        requests = [
            build_request("http://a.test/0", noop),
            build_request(["http://a.test/2", "http://a.test/1"], noop),
        ]
        [batch] = consolidate(requests)
        assert batch.urls == ["http://a.test/0", "http://a.test/2", "http://a.test/1"]

    def test_idempotent(self):
        """Consolidating already consolidated requests should not change grouping."""
        requests = [
            build_request(url, noop)
            for url in ["http://b.test/1", "http://a.test/1", "http://b.test/2", "http://c.test/"]
        ]
        first = consolidate(requests)
        again = consolidate([request for batch in first for request in batch.requests])
        assert urls_of(again) == urls_of(first)
        assert [batch.key for batch in again] == [batch.key for batch in first]

    def test_empty(self):
        """No requests should mean no batches."""
        assert consolidate([]) == []
