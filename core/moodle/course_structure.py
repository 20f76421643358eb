"""
Reconstruct a course's section/activity tree from its server-rendered pages.

Moodle renders course pages differently depending on theme and course
format (classic topics, the flexsections plugin, JS-driven accordions), so
no single selector set works everywhere. Sections are found by an ordered
list of strategies, from most structured to most heuristic; the first one
that yields more than one section wins.

All fetches for one course are sequential.
"""

import logging
import re
from typing import Awaitable, Callable

from lxml.html import HtmlElement

from core.config import get_lessons_tab_label
from .activities import activity_from_link, parse_activities
from .fetcher import fetch_page
from .html import first, has_class, parse_html, text_of
from .types import CourseFull, Section
from .urls import course_url, query_param, to_absolute

logger = logging.getLogger(__name__)

PageFetcher = Callable[[str, str], Awaitable[str]]
SectionStrategy = Callable[[HtmlElement], list[Section]]

INTRO_SECTION_NAME = "Intro"

SECTION_NAME = (
    f"(.//h3[{has_class('sectionname')}]"
    f" | .//span[{has_class('sectionname')}]"
    f" | .//*[{has_class('section-title')}])[1]"
)

# "3 - Lesson Name", "12 Lesson Name"
LEADING_NUMERAL = re.compile(r"^\d+[-\s]")
SECTION_PARAM = re.compile(r"[?&]section(?:id)?=")


def _is_section_link(href: str) -> bool:
    return "/course/view.php" in href and bool(SECTION_PARAM.search(href))


# --- Course page chrome ---


def find_lessons_section_id(tree: HtmlElement, label: str) -> str | None:
    """sectionid of the course tab labelled `label`, if the course has one."""
    for link in tree.xpath('//a[contains(@href, "sectionid=")]'):
        if text_of(link) == label:
            section_id = query_param(link.get("href") or "", "sectionid")
            if section_id:
                return section_id
    return None


def parse_tabs(tree: HtmlElement) -> list[str]:
    """Labels of the course navigation tabs."""
    links = tree.xpath(
        f"//*[{has_class('nav-tabs')}]//a | //*[{has_class('tabrow')}]//a"
    )
    return [text for text in (text_of(a) for a in links) if text]


def parse_intro_section(tree: HtmlElement) -> Section:
    """Activities of the first section on the default course page."""
    node = first(tree, f"//li[{has_class('section')}]")
    activities = parse_activities(node) if node is not None else []
    return Section(name=INTRO_SECTION_NAME, activities=activities)


# --- Section strategies ---


def _parse_section(node: HtmlElement) -> Section | None:
    name = text_of(first(node, SECTION_NAME))
    if not name:
        return None
    return Section(name=name, activities=parse_activities(node))


def parse_listed_sections(tree: HtmlElement) -> list[Section]:
    """Server-rendered li.section elements inside the course content."""
    nodes = tree.xpath(
        f"//*[{has_class('course-content')}]//li[{has_class('section')}]"
    )
    return [s for s in (_parse_section(n) for n in nodes) if s]


def parse_all_sections(tree: HtmlElement) -> list[Section]:
    """Every li.section on the page (used on the expand-all view)."""
    nodes = tree.xpath(f"//li[{has_class('section')}]")
    return [s for s in (_parse_section(n) for n in nodes) if s]


def parse_numbered_section_stubs(tree: HtmlElement) -> list[Section]:
    """Accordion-style lists: "<n> - Name" links to a section page.

    Any links to /mod/ pages nested below become the stub's activities.
    Stubs without nested links are filled later from their own page.
    """
    sections = []
    for item in tree.xpath("//ul/li"):
        link = first(item, "./a")
        if link is None:
            continue
        name = text_of(link)
        href = link.get("href") or ""
        if not name or not LEADING_NUMERAL.match(name) or not _is_section_link(href):
            continue

        activities = []
        for sub in item.xpath(".//ul//a"):
            activity = activity_from_link(sub.get("href") or "", text_of(sub))
            if activity:
                activities.append(activity)

        sections.append(
            Section(name=name, activities=activities, url=to_absolute(href))
        )
    return sections


def parse_navigation_section_stubs(tree: HtmlElement) -> list[Section]:
    """Section links in the navigation sidebar / block."""
    links = tree.xpath(
        f'//ul[@role="tree"]//a | //*[{has_class("block_navigation")}]//a'
    )
    sections = []
    for link in links:
        name = text_of(link)
        href = link.get("href") or ""
        if name and _is_section_link(href):
            sections.append(Section(name=name, url=to_absolute(href)))
    return sections


def parse_section_stubs(tree: HtmlElement) -> list[Section]:
    """Numbered accordion stubs, plus sidebar sections they did not cover."""
    sections = parse_numbered_section_stubs(tree)
    known = {s.url for s in sections}
    for section in parse_navigation_section_stubs(tree):
        if section.url not in known:
            known.add(section.url)
            sections.append(section)
    return sections


SECTION_STRATEGIES: list[SectionStrategy] = [
    parse_listed_sections,
    parse_section_stubs,
]


def _usable_count(sections: list[Section]) -> int:
    """Sections with something to show or a page to load it from."""
    return sum(1 for s in sections if s.activities or s.url)


def select_sections(
    tree: HtmlElement, strategies: list[SectionStrategy] = SECTION_STRATEGIES
) -> list[Section]:
    """Run strategies in order and return the first non-degenerate result.

    A result is non-degenerate with more than one section, at least one of
    them usable. Otherwise the result with the most usable sections wins, later
    strategies winning ties, so a lone empty listed section gives way to
    a single linked lesson stub.
    """
    best: list[Section] = []
    for strategy in strategies:
        sections = strategy(tree)
        usable = _usable_count(sections)
        if len(sections) > 1 and usable:
            logger.debug(f"{strategy.__name__} found {len(sections)} sections")
            return sections
        if sections and usable >= _usable_count(best):
            best = sections
    return best


# --- Resolver ---


async def fill_section_stubs(
    sections: list[Section], cookie: str, fetch: PageFetcher = fetch_page
) -> list[Section]:
    """Load activities for linked sections that have none yet.

    Stub parsing only recovers links; the section's own page carries the
    full li.activity metadata.
    """
    filled = []
    for section in sections:
        if section.activities or not section.url:
            filled.append(section)
            continue
        html = await fetch(section.url, cookie)
        activities = parse_activities(parse_html(html))
        filled.append(Section(name=section.name, activities=activities, url=section.url))
    return filled


async def resolve_course_full(
    course_id: int | str, cookie: str, fetch: PageFetcher = fetch_page
) -> CourseFull:
    """Scrape the full section/activity tree of a course."""
    course_tree = parse_html(await fetch(course_url(course_id), cookie))

    # The default view omits lesson content unless the Lessons tab is requested
    lessons_tree = course_tree
    section_id = find_lessons_section_id(course_tree, get_lessons_tab_label())
    if section_id:
        html = await fetch(course_url(course_id, sectionid=section_id), cookie)
        lessons_tree = parse_html(html)

    sections = select_sections(lessons_tree)
    sections = await fill_section_stubs(sections, cookie, fetch)

    if not any(s.activities for s in sections):
        logger.debug(f"Course {course_id}: no activities found, trying expandall")
        html = await fetch(course_url(course_id, expandall=1), cookie)
        expanded = parse_all_sections(parse_html(html))
        if expanded:
            sections = expanded

    return CourseFull(
        course_id=course_id,
        tabs=parse_tabs(course_tree),
        intro=parse_intro_section(course_tree),
        sections=sections,
    )
