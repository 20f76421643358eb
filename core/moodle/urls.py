"""Turn URLs scraped from LMS pages into absolute, externally fetchable URLs."""

import re
from urllib.parse import urlparse

from core.config import get_moodle_base_url


def to_absolute(url: str | None) -> str:
    """Make a scraped src/href absolute against the LMS origin.

    Rules, in order:
    - empty -> ""
    - starts with "http" -> unchanged
    - protocol-relative ("//cdn/x") -> "https:" prefix
    - site-relative ("/a/b") -> origin prefix
    - anything else ("a/b") -> origin + "/" prefix
    """
    if not url:
        return ""
    if url.startswith("http"):
        return url
    if url.startswith("//"):
        return f"https:{url}"
    base = get_moodle_base_url()
    if url.startswith("/"):
        return f"{base}{url}"
    return f"{base}/{url}"


def is_lms_url(url: str) -> bool:
    """True if an absolute URL points at the LMS host."""
    return urlparse(url).netloc == urlparse(get_moodle_base_url()).netloc


def course_url(course_id: int | str, **params) -> str:
    """Build the course-view URL, with any extra query parameters appended."""
    url = f"{get_moodle_base_url()}/course/view.php?id={course_id}"
    for key, value in params.items():
        url += f"&{key}={value}"
    return url


def query_param(url: str, name: str) -> str | None:
    """Pull a numeric query parameter out of a URL, e.g. id=123."""
    match = re.search(rf"[?&]{re.escape(name)}=(\d+)", url)
    return match.group(1) if match else None
