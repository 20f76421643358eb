"""
Extract the content of a single activity page, by module type.

Each Moodle module renders its view page differently, so each content
type has its own parser. Missing elements yield empty fields, never
errors: the client treats an empty field as "nothing to show".
"""

import logging
import re
from dataclasses import asdict, dataclass, field
from typing import Callable, Literal

from lxml.html import HtmlElement

from .fetcher import fetch_page
from .html import (
    extract_content_html,
    first,
    first_attr,
    has_class,
    joined_text,
    parse_html,
    text_of,
)
from .urls import to_absolute

logger = logging.getLogger(__name__)

MAIN = '//*[@id="region-main"]'
GENERALBOX = f"*[{has_class('box')} and {has_class('generalbox')}]"
ROLE_MAIN = '*[@role="main"]'


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


@dataclass
class ActivityContent:
    """Base for all content variants; `type` is the discriminator."""

    type: str
    title: str

    def to_dict(self) -> dict:
        return {_camel(key): value for key, value in asdict(self).items()}


@dataclass
class PageContent(ActivityContent):
    type: Literal["page"] = "page"
    title: str = ""
    html: str = ""
    audio_sources: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    iframes: list[str] = field(default_factory=list)


@dataclass
class Chapter:
    name: str
    url: str


@dataclass
class BookContent(ActivityContent):
    type: Literal["book"] = "book"
    title: str = ""
    html: str = ""
    chapters: list[Chapter] = field(default_factory=list)


@dataclass
class QuizContent(ActivityContent):
    """Quiz overview only. Questions are never scraped."""

    type: Literal["quiz"] = "quiz"
    title: str = ""
    description: str = ""
    attempts_html: str = ""


@dataclass
class AssignmentContent(ActivityContent):
    type: Literal["assignment"] = "assignment"
    title: str = ""
    html: str = ""
    status: str = ""


@dataclass
class Discussion:
    subject: str
    author: str
    date: str
    content: str


@dataclass
class ForumContent(ActivityContent):
    type: Literal["forum"] = "forum"
    title: str = ""
    discussions: list[Discussion] = field(default_factory=list)


@dataclass
class UrlContent(ActivityContent):
    type: Literal["url"] = "url"
    title: str = ""
    external_url: str = ""


@dataclass
class ResourceContent(ActivityContent):
    type: Literal["resource"] = "resource"
    title: str = ""
    download_url: str = ""


@dataclass
class VideoContent(ActivityContent):
    type: Literal["video"] = "video"
    title: str = ""
    video_url: str = ""
    iframe_src: str = ""
    vimeo_url: str = ""


@dataclass
class InteractiveContent(ActivityContent):
    type: Literal["interactive"] = "interactive"
    title: str = ""
    iframe_src: str = ""


@dataclass
class AttendanceContent(ActivityContent):
    type: Literal["attendance"] = "attendance"
    title: str = ""
    html: str = ""


@dataclass
class FeedbackContent(ActivityContent):
    type: Literal["feedback"] = "feedback"
    title: str = ""
    description: str = ""


@dataclass
class GenericContent(ActivityContent):
    """Fallback for module types without a dedicated parser.

    `type` carries the requested module type (or "unknown").
    """

    type: str = "unknown"
    title: str = ""
    html: str = ""


# --- Shared bits ---


def _heading(tree: HtmlElement) -> str:
    return text_of(first(tree, "//h2"))


def _title(tree: HtmlElement) -> str:
    """First h2, then the page header, then <title> up to its first colon."""
    return (
        _heading(tree)
        or joined_text(tree, f"//*[{has_class('page-header-headings')}]//h1")
        or re.sub(r":.*$", "", joined_text(tree, "//title"), flags=re.S).strip()
    )


def _srcs(tree: HtmlElement, xpath: str, skip: str | None = None) -> list[str]:
    urls = []
    for src in tree.xpath(xpath):
        if src and not (skip and skip in src):
            urls.append(to_absolute(src))
    return urls


# --- Parsers ---


def parse_page(tree: HtmlElement, activity_url: str) -> PageContent:
    # Media is listed separately so the client can special-case players
    return PageContent(
        title=_heading(tree)
        or joined_text(tree, f"//*[{has_class('page-header-headings')}]//h1"),
        html=extract_content_html(
            tree,
            f"({MAIN}//{GENERALBOX} | {MAIN}//{ROLE_MAIN}"
            f" | {MAIN}//*[{has_class('content')}])[1]",
        ),
        audio_sources=_srcs(tree, "//audio//source/@src | //audio/@src"),
        images=_srcs(
            tree,
            f"//{GENERALBOX}//img/@src | //{ROLE_MAIN}//img/@src",
            skip="theme/image",
        ),
        iframes=_srcs(
            tree, f"//{GENERALBOX}//iframe/@src | //{ROLE_MAIN}//iframe/@src"
        ),
    )


def parse_book(tree: HtmlElement, activity_url: str) -> BookContent:
    chapters = []
    toc = tree.xpath(
        f"//*[{has_class('book_toc')}]//a | //*[{has_class('book_toc_numbered')}]//a"
    )
    for link in toc:
        name, href = text_of(link), link.get("href") or ""
        if name and href:
            chapters.append(Chapter(name=name, url=to_absolute(href)))

    return BookContent(
        title=_heading(tree),
        html=extract_content_html(
            tree,
            f"({MAIN}//{GENERALBOX} | {MAIN}//*[{has_class('book_content')}]"
            f" | {MAIN}//{ROLE_MAIN})[1]",
        ),
        chapters=chapters,
    )


def parse_quiz(tree: HtmlElement, activity_url: str) -> QuizContent:
    return QuizContent(
        title=_title(tree),
        description=joined_text(
            tree,
            f"//*[{has_class('quizinfo')}]"
            f' | //*[@id="intro"]//{GENERALBOX}',
        ),
        attempts_html=extract_content_html(
            tree,
            f"(//*[{has_class('quizattemptsummary')}]"
            f" | //*[{has_class('generaltable')}])[1]",
        ),
    )


def parse_assignment(tree: HtmlElement, activity_url: str) -> AssignmentContent:
    return AssignmentContent(
        title=_title(tree),
        html=extract_content_html(
            tree,
            f'(//*[@id="intro"]//{GENERALBOX}'
            f" | //*[{has_class('submissionstatustable')}]"
            f" | //*[{has_class('assignsubmission')}])[1]",
        ),
        status=joined_text(tree, f"//*[{has_class('submissionstatustable')}]"),
    )


def parse_forum(tree: HtmlElement, activity_url: str) -> ForumContent:
    discussions = []
    nodes = tree.xpath(
        f"//*[{has_class('discussion')}] | //*[{has_class('forumpost')}]"
    )
    for node in nodes:
        subject = text_of(
            first(
                node,
                f"(.//*[{has_class('subject')}]//a | .//*[{has_class('topic')}]//a)[1]",
            )
        )
        if not subject:
            continue
        discussions.append(
            Discussion(
                subject=subject,
                author=text_of(first(node, f".//*[{has_class('author')}]")),
                date=text_of(first(node, f".//*[{has_class('lastpost')}]")),
                content=text_of(
                    first(
                        node,
                        f"(.//*[{has_class('posting')}] | .//*[{has_class('content')}])[1]",
                    )
                ),
            )
        )
    return ForumContent(title=_title(tree), discussions=discussions)


def parse_url(tree: HtmlElement, activity_url: str) -> UrlContent:
    external = first_attr(
        tree,
        f"(//*[{has_class('urlworkaround')}]//a[@href] | {MAIN}//a[@href])[1]",
        "href",
    )
    return UrlContent(
        title=_heading(tree), external_url=to_absolute(external or activity_url)
    )


def parse_resource(tree: HtmlElement, activity_url: str) -> ResourceContent:
    download = first_attr(
        tree,
        f"(//*[{has_class('resourceworkaround')}]//a[@href]"
        f" | //{GENERALBOX}//a[@href]"
        f' | {MAIN}//a[contains(@href, "pluginfile")])[1]',
        "href",
    )
    return ResourceContent(title=_heading(tree), download_url=to_absolute(download))


def parse_video(tree: HtmlElement, activity_url: str) -> VideoContent:
    # The last player on the page wins
    videos = _srcs(tree, "//video//source/@src | //video/@src")
    iframes = _srcs(tree, "//iframe/@src")
    player = first(tree, "//*[@data-vimeo-url or @data-video-url]")
    vimeo = ""
    if player is not None:
        vimeo = player.get("data-vimeo-url") or player.get("data-video-url") or ""
    return VideoContent(
        title=_heading(tree),
        video_url=videos[-1] if videos else "",
        iframe_src=iframes[-1] if iframes else "",
        vimeo_url=to_absolute(vimeo),
    )


def parse_interactive(tree: HtmlElement, activity_url: str) -> InteractiveContent:
    return InteractiveContent(
        title=_heading(tree),
        iframe_src=to_absolute(first_attr(tree, "//iframe", "src")),
    )


def parse_attendance(tree: HtmlElement, activity_url: str) -> AttendanceContent:
    return AttendanceContent(
        title=_heading(tree),
        html=extract_content_html(
            tree,
            f"(//*[{has_class('generaltable')}] | //*[{has_class('attlist')}]"
            f" | {MAIN}//table)[1]",
        ),
    )


def parse_feedback(tree: HtmlElement, activity_url: str) -> FeedbackContent:
    return FeedbackContent(
        title=_heading(tree),
        description=text_of(first(tree, f"//{GENERALBOX}")),
    )


def parse_generic(
    tree: HtmlElement, activity_url: str, mod_type: str | None = None
) -> GenericContent:
    return GenericContent(
        type=mod_type or "unknown",
        title=_heading(tree),
        html=extract_content_html(tree, MAIN),
    )


ContentParser = Callable[[HtmlElement, str], ActivityContent]

# Moodle module type -> content parser
CONTENT_PARSERS: dict[str, ContentParser] = {
    "page": parse_page,
    "book": parse_book,
    "quiz": parse_quiz,
    "assign": parse_assignment,
    "forum": parse_forum,
    "url": parse_url,
    "resource": parse_resource,
    "videotime": parse_video,
    "video": parse_video,
    "hvp": parse_interactive,
    "h5pactivity": parse_interactive,
    "attendance": parse_attendance,
    "feedback": parse_feedback,
}


def extract_activity_content(
    html: str, activity_url: str, mod_type: str | None
) -> ActivityContent:
    """Parse an already-fetched activity page."""
    tree = parse_html(html)
    parser = CONTENT_PARSERS.get(mod_type or "")
    if parser is None:
        return parse_generic(tree, activity_url, mod_type)
    return parser(tree, activity_url)


async def resolve_activity_content(
    activity_url: str, mod_type: str | None, cookie: str
) -> ActivityContent:
    """Fetch an activity page once and extract its content."""
    html = await fetch_page(activity_url, cookie)
    content = extract_activity_content(html, activity_url, mod_type)
    logger.debug(f"Extracted {content.type} content from {activity_url}")
    return content
