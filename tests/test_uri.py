from __future__ import annotations

from traffic_organizer.core.uri import QueryString, domain_of, path_of


def test_domain_of_strips_leading_www_and_path() -> None:
    assert domain_of("http://www.google.com/search?q=shoes") == "google.com"
    assert domain_of("https://news.ycombinator.com/item?id=1") == "news.ycombinator.com"


def test_domain_of_strips_www_only_once() -> None:
    assert domain_of("http://www.www.example.com/") == "www.example.com"
    assert domain_of("http://example.www.com/") == "example.www.com"


def test_domain_of_without_path_or_with_query_only() -> None:
    assert domain_of("https://WWW.Example.COM") == "example.com"
    assert domain_of("http://example.com?x=1") == "example.com"
    assert domain_of("http://example.com#top") == "example.com"


def test_domain_of_degrades_on_empty_and_malformed_input() -> None:
    assert domain_of("") == ""
    assert domain_of("/relative/path") == ""
    assert domain_of("example.org/page") == "example.org"


def test_path_of_stops_at_query_string() -> None:
    assert path_of("http://www.google.com/search?q=shoes") == "/search"
    assert path_of("http://example.com/a/b.html#top") == "/a/b.html"
    assert path_of("http://example.com/") == "/"


def test_path_of_is_empty_without_path() -> None:
    assert path_of("") == ""
    assert path_of("http://example.com") == ""
    assert path_of("http://example.com?q=1") == ""


def test_query_string_decodes_and_keeps_first_value() -> None:
    query = QueryString.from_url("http://x.com/?q=red+shoes&q=other&empty=&pct=a%7Cb")
    assert query.get("q") == "red shoes"
    assert query.get("empty") == ""
    assert "empty" in query
    assert query.get("pct") == "a|b"
    assert query.get("missing") == ""


def test_query_string_first_of_skips_empty_values() -> None:
    query = QueryString.from_url("http://search.aol.com/aol/search?query=&encquery=Boots")
    assert query.first_of(["query", "encquery"]) == "Boots"
    assert query.first_of(["nope"]) == ""


def test_query_string_without_query_component() -> None:
    assert QueryString.from_url("http://example.com/page").get("q") == ""
    assert QueryString.from_url("").get("q") == ""
    assert QueryString.parse("utm_source=news&utm_medium=email").get("utm_medium") == "email"
    assert QueryString.from_url("http://x.com/?a=1#frag=2").get("a") == "1"
