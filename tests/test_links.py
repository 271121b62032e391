from unittest.mock import patch

from bs4 import ParserRejectedMarkup

from linkcrawler.errors import InvalidBaseURLError, ParseError, URLParseError
from linkcrawler.links import get_links, get_urls_from_html, parse_html

BASE = "https://example.com/b/"


def test_get_links_walks_document_in_order():
    html = """
    <html><body>
      <a href="/one">1</a>
      <div><p><a href="/two">2</a></p><span><a href="/three">3</a></span></div>
      <a name="no-href">x</a>
      <a href="/four">4</a>
    </body></html>
    """
    assert get_links(parse_html(html)) == ["/one", "/two", "/three", "/four"]


def test_get_links_ignores_non_anchor_hrefs():
    html = '<link href="/style"><area href="/map"><a href="/page">p</a>'
    assert get_links(parse_html(html)) == ["/page"]


def test_absolute_and_relative_links():
    html = '<a href="/a">a</a><a href="c">c</a><a href="https://other.com/x">x</a>'
    urls, error = get_urls_from_html(html, BASE)
    assert urls == ["https://example.com/a", "https://example.com/b/c", "https://other.com/x"]
    assert error is None


def test_duplicates_are_kept():
    html = '<a href="/a">1</a><a href="/a">2</a>'
    urls, _ = get_urls_from_html(html, BASE)
    assert urls == ["https://example.com/a", "https://example.com/a"]


def test_href_whitespace_is_stripped():
    urls, _ = get_urls_from_html('<a href="  /a \n">a</a>', BASE)
    assert urls == ["https://example.com/a"]


def test_scheme_relative_link_takes_base_scheme():
    urls, _ = get_urls_from_html('<a href="//example.com/x">x</a>', BASE)
    assert urls == ["https://example.com/x"]


def test_document_without_links():
    assert get_urls_from_html("", BASE) == ([], None)
    assert get_urls_from_html("<html><body><p>Nothing here</p></body></html>", BASE) == ([], None)


def test_invalid_href_is_skipped():
    html = '<a href="http://[::1/bad">bad</a><a href="/ok">ok</a>'
    urls, error = get_urls_from_html(html, BASE)
    assert urls == ["https://example.com/ok"]
    assert isinstance(error, URLParseError)
    assert error.invalid_links == ["http://[::1/bad"]
    assert not error.base_invalid


def test_invalid_base_keeps_absolute_links():
    html = '<a href="https://example.com/x">x</a><a href="/relative">r</a>'
    urls, error = get_urls_from_html(html, "http://[::1")
    assert urls == ["https://example.com/x"]
    assert isinstance(error, InvalidBaseURLError)
    assert error.base_invalid


def test_hostless_base_is_invalid():
    urls, error = get_urls_from_html('<a href="/relative">r</a>', "not a url")
    assert urls == []
    assert isinstance(error, InvalidBaseURLError)


def test_invalid_base_without_links_is_not_an_error():
    assert get_urls_from_html("<p>text</p>", "not a url") == ([], None)


def test_rejected_markup_yields_no_links():
    with patch("linkcrawler.links.BeautifulSoup", side_effect=ParserRejectedMarkup("boom")):
        urls, error = get_urls_from_html('<a href="/a">a</a>', BASE)
    assert urls == []
    assert isinstance(error, ParseError)
