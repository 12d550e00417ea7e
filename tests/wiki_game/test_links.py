import pytest

from wiki_game.links import canonicalize, collect_links, expand_internal_link, find_links

BASE = "https://wiki.example/A"

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("href,expected", [
    ("//wiki.example/B", "https://wiki.example/B"),
    ("/C", "https://wiki.example/C"),
    ("/E?x=1#f", "https://wiki.example/E"),
    ("https://wiki.example/F#Section", "https://wiki.example/F"),
    ("http://wiki.example/G", "http://wiki.example/G"),
    ("/wiki/Graph_theory", "https://wiki.example/wiki/Graph_theory"),
    ("//WIKI.Example/C", "https://wiki.example/C"),
    ("HTTPS://Wiki.Example/C", "https://wiki.example/C"),
    ("https://wiki.example:8443/P", "https://wiki.example:8443/P"),
])
def test_accepted_links(href, expected):
    assert canonicalize(href, BASE) == expected


@pytest.mark.parametrize("href", [
    "https://other.example/D",       # external host
    "//other.example/D",             # external, protocol-relative
    "/Category:Foo",                 # namespace page
    "/wiki/File:Picture.png",        # namespace page
    "relative/page",                 # not absolute after expansion
    "#top",                          # fragment only
    "mailto:someone@wiki.example",   # not http(s)
    "javascript:void(0)",
    "http://[broken",                # unparseable
    "",
])
def test_rejected_links(href):
    assert canonicalize(href, BASE) is None


def test_query_and_fragment_are_stripped_before_namespace_check():
    # the ':' lives in the query, not the path
    assert canonicalize("/H?title=Special:Search", BASE) == "https://wiki.example/H"


def test_host_case_does_not_split_identity():
    spellings = ["/C", "//wiki.example/C", "//WIKI.Example/C", "https://Wiki.Example/C#top"]
    assert {canonicalize(href, BASE) for href in spellings} == {"https://wiki.example/C"}


def test_path_case_is_kept():
    assert canonicalize("/Graph_Theory", BASE) == "https://wiki.example/Graph_Theory"


def test_expand_internal_link():
    assert expand_internal_link("//wiki.example/B", "https", "wiki.example") == "https://wiki.example/B"
    assert expand_internal_link("/C", "https", "wiki.example") == "https://wiki.example/C"
    assert expand_internal_link("https://x.org/D", "https", "wiki.example") == "https://x.org/D"


def test_find_links_yields_hrefs_of_anchor_elements():
    html = """
        <p><a href="/B" class="mw-redirect">B</a> and <a
            title="C" href="//wiki.example/C">C</a></p>
        <a name="anchor-without-href">nothing</a>
        <link href="/style.css">
        <a href="/B">B again</a>
    """
    assert list(find_links(html)) == ["/B", "//wiki.example/C", "/B"]


def test_find_links_is_restartable():
    html = '<a href="/B">B</a>'
    assert list(find_links(html)) == list(find_links(html)) == ["/B"]


def test_collect_links_deduplicates():
    html = '<a href="/B">B</a><a href="/B#x">B</a><a href="//wiki.example/B?y=1">B</a><a href="/Talk:B">t</a>'
    assert collect_links(html, BASE) == {"https://wiki.example/B"}
