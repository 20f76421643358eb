"""Parse the LMS dashboard (/my/): enrolled courses and the logged-in user."""

from .html import first, has_class, parse_html, text_of
from .types import Course
from .urls import query_param, to_absolute

DASHBOARD_PATH = "/my/"


class InvalidCredentialsError(Exception):
    """Raised when the LMS still shows its login form after logging in."""

    pass


def is_login_page(html: str) -> bool:
    """True if the page still contains the login form marker."""
    return first(parse_html(html), '//*[@id="login"]') is not None


def parse_user_full_name(html: str, fallback: str) -> str:
    """Display name from the user menu, or fallback when absent."""
    name = text_of(first(parse_html(html), f"//*[{has_class('usertext')}]"))
    return name or fallback


def check_logged_in(html: str, username: str) -> str:
    """Return the user's full name, or raise if the login did not take.

    Raises:
        InvalidCredentialsError: If the dashboard still shows the login form
    """
    if is_login_page(html):
        raise InvalidCredentialsError(f"LMS rejected credentials for {username}")
    return parse_user_full_name(html, username)


def parse_courses(html: str) -> list[Course]:
    """Collect enrolled courses from course links on the dashboard.

    Courses are deduplicated by id; the first link seen wins.
    """
    tree = parse_html(html)
    courses = []
    seen: set[int] = set()

    for link in tree.xpath('//a[contains(@href, "/course/view.php")]'):
        text = text_of(link)
        if len(text) <= 3:
            continue
        href = link.get("href") or ""
        course_id = int(query_param(href, "id") or 0)
        if course_id <= 0 or course_id in seen:
            continue
        seen.add(course_id)
        courses.append(
            Course(
                id=course_id,
                fullname=text,
                shortname=text.split(" - ")[0] or text,
                url=to_absolute(href),
            )
        )

    return courses
