"""Tests for content extraction helpers."""

from core.moodle.html import extract_content_html, has_class, parse_html, text_without

PAGE = """
<html><body>
<nav><a href="/my/">Dashboard</a><img src="/theme/logo.png"></nav>
<div id="region-main">
  <div class="box generalbox">Intro &amp; welcome
    <img src="/pluginfile.php/1/mod_page/content/pic.jpg">
    <a href="lesson2.html">Next</a>
    <audio src="//media.example.com/a.mp3"><source src="/pluginfile.php/1/a.ogg"></audio>
    <video><source src="https://cdn.example.com/v.mp4"></video>
  </div>
</div>
</body></html>
"""


def test_extract_content_rewrites_urls_inside_selection():
    tree = parse_html(PAGE)
    html = extract_content_html(tree, f"//*[{has_class('generalbox')}]")

    assert html.startswith("Intro &amp; welcome")
    assert 'src="https://lms.example.edu/pluginfile.php/1/mod_page/content/pic.jpg"' in html
    assert 'href="https://lms.example.edu/lesson2.html"' in html
    assert 'src="https://media.example.com/a.mp3"' in html
    assert 'src="https://lms.example.edu/pluginfile.php/1/a.ogg"' in html
    assert 'src="https://cdn.example.com/v.mp4"' in html
    assert "generalbox" not in html


def test_extract_content_leaves_rest_of_document_alone():
    tree = parse_html(PAGE)
    extract_content_html(tree, f"//*[{has_class('generalbox')}]")

    assert tree.xpath("//nav/a/@href") == ["/my/"]
    assert tree.xpath("//nav/img/@src") == ["/theme/logo.png"]


def test_extract_content_no_match_is_empty():
    assert extract_content_html(parse_html(PAGE), '//*[@id="missing"]') == ""


def test_parse_html_tolerates_empty_and_xml_declaration():
    assert parse_html("").xpath("//body")
    tree = parse_html('<?xml version="1.0" encoding="UTF-8"?><html><body><h2>T</h2></body></html>')
    assert tree.xpath("//h2/text()") == ["T"]


def test_text_without_keeps_tail_text():
    node = parse_html(
        '<p>Lesson <span class="accesshide">hidden</span>One</p>'
    ).xpath("//p")[0]
    assert text_without(node, f".//*[{has_class('accesshide')}]") == "Lesson One"
