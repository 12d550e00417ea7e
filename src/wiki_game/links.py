"""
Helper functions for finding hyperlinks in article markup and reducing them to
canonical, same-site article URLs.
"""

import re
from typing import Iterable, Iterator, Optional, Set
from urllib.parse import urlsplit, urlunsplit

_A_TAG_RE = re.compile(r"(<a.*?>.*?</a>)", re.DOTALL)
_HREF_RE = re.compile(r'href="(.*?)"', re.DOTALL)

_SUPPORTED_SCHEMES = ("http", "https")

# Marks non-article pages, e.g. "Category:Foo" or "File:Bar.png"
NAMESPACE_SEPARATOR = ":"


def find_links(html: str) -> Iterator[str]:
    """Yields the raw `href` value of every `<a>` element in the markup.

    Args:
      html: The document body.

    Returns:
      An iterator over raw href strings, in document order, duplicates included.

    Examples:
      '<a href="/wiki/B">B</a>'        =>   "/wiki/B"
      '<a name="top">no link</a>'     =>   (nothing)
    """
    for tag_match in _A_TAG_RE.finditer(html):
        href_match = _HREF_RE.search(tag_match.group(1))
        if href_match:
            yield href_match.group(1)


def expand_internal_link(href: str, scheme: str, host: str) -> str:
    """Turns protocol-relative and root-relative hrefs into absolute URLs.

    Examples:
      "//wiki.example/B"   =>   "https://wiki.example/B"
      "/C"                 =>   "https://wiki.example/C"
      "https://x.org/D"    =>   "https://x.org/D"
    """
    if href.startswith("//"):
        return f"{scheme}:{href}"
    if href.startswith("/"):
        return f"{scheme}://{host}{href}"
    return href


def canonicalize(href: str, base_url: str) -> Optional[str]:
    """Returns the canonical form of a link found on `base_url`, or None if rejected.

    A link is rejected when it cannot be parsed as an absolute http(s) URL,
    when it points to another host, or when its path contains a namespace
    separator. Query string, fragment and user info are always stripped, and
    scheme and host are lowercased so one article has exactly one identity.

    Examples (base "https://wiki.example/A"):
      "//wiki.example/B"           =>   "https://wiki.example/B"
      "/C"                         =>   "https://wiki.example/C"
      "//WIKI.Example/C"           =>   "https://wiki.example/C"
      "https://other.example/D"    =>   None
      "/Category:Foo"              =>   None
      "/E?x=1#f"                   =>   "https://wiki.example/E"
    """
    if not href:
        return None
    try:
        base = urlsplit(base_url)
        link = urlsplit(expand_internal_link(href.strip(), base.scheme, base.netloc))
        host = link.hostname
        port = link.port
    except ValueError:
        return None

    if link.scheme not in _SUPPORTED_SCHEMES or not host:
        return None
    if host != base.hostname:
        return None
    if NAMESPACE_SEPARATOR in link.path:
        return None

    netloc = host if port is None else f"{host}:{port}"
    return urlunsplit((link.scheme, netloc, link.path or "/", "", ""))


def canonicalize_all(hrefs: Iterable[str], base_url: str) -> Set[str]:
    """Canonicalizes every href and returns the deduplicated set of accepted links."""
    links = set()
    for href in hrefs:
        link = canonicalize(href, base_url)
        if link is not None:
            links.add(link)
    return links


def collect_links(html: str, base_url: str) -> Set[str]:
    """All canonical same-site article links found in `html`."""
    return canonicalize_all(find_links(html), base_url)
