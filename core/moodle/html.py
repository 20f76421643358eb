"""lxml helpers shared by the LMS page parsers."""

import copy
import re
from html import escape

from lxml import html as lxml_html
from lxml.html import HtmlElement

from .urls import to_absolute

_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")

# (tag, attribute) pairs rewritten to absolute URLs inside extracted content
URL_ATTRIBUTES = [
    ("img", "src"),
    ("a", "href"),
    ("source", "src"),
    ("audio", "src"),
    ("video", "src"),
]


def parse_html(html: str) -> HtmlElement:
    """Parse a page into its <html> root. Empty input gives an empty document."""
    html = _XML_DECLARATION.sub("", html or "")
    if not html.strip():
        return lxml_html.document_fromstring("<html><body></body></html>")
    return lxml_html.document_fromstring(html)


def has_class(name: str) -> str:
    """XPath predicate matching elements carrying a CSS class."""
    return f"contains(concat(' ', normalize-space(@class), ' '), ' {name} ')"


def first(root: HtmlElement, xpath: str) -> HtmlElement | None:
    """First element matching xpath, in document order."""
    matches = root.xpath(xpath)
    return matches[0] if matches else None


def text_of(el: HtmlElement | None) -> str:
    """Stripped text content of an element ("" for None)."""
    if el is None:
        return ""
    return el.text_content().strip()


def joined_text(root: HtmlElement, xpath: str) -> str:
    """Concatenated text of every match, stripped as a whole."""
    return "".join(el.text_content() for el in root.xpath(xpath)).strip()


def first_attr(root: HtmlElement, xpath: str, attr: str) -> str:
    """Attribute of the first match carrying it, or ""."""
    el = first(root, xpath)
    if el is None:
        return ""
    return el.get(attr) or ""


def text_without(el: HtmlElement, xpath: str) -> str:
    """Text content of el with the subtrees matching xpath removed."""
    clone = copy.deepcopy(el)
    for hidden in clone.xpath(xpath):
        hidden.drop_tree()
    return clone.text_content().strip()


def inner_html(el: HtmlElement) -> str:
    """Serialize an element's children (not the element itself)."""
    parts = [escape(el.text, quote=False)] if el.text else []
    for child in el:
        parts.append(lxml_html.tostring(child, encoding="unicode"))
    return "".join(parts)


def absolutize_urls(el: HtmlElement) -> None:
    """Rewrite media and link URLs below el to absolute form, in place."""
    for tag, attr in URL_ATTRIBUTES:
        for node in el.iter(tag):
            value = node.get(attr)
            if value:
                node.set(attr, to_absolute(value))


def extract_content_html(root: HtmlElement, xpath: str) -> str:
    """Inner HTML of the first match, with its URLs made absolute.

    Only the selected subtree is rewritten; navigation chrome elsewhere in
    the document is left alone. Returns "" when nothing matches.
    """
    el = first(root, xpath)
    if el is None:
        return ""
    absolutize_urls(el)
    return inner_html(el)
