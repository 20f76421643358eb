"""Moodle scraping proxy: LMS sessions, page fetching and HTML parsing."""

from .activities import activity_from_link, parse_activities, parse_activity
from .activity_content import (
    ActivityContent,
    CONTENT_PARSERS,
    extract_activity_content,
    resolve_activity_content,
)
from .course_structure import (
    SECTION_STRATEGIES,
    resolve_course_full,
    select_sections,
)
from .courses import (
    DASHBOARD_PATH,
    InvalidCredentialsError,
    check_logged_in,
    parse_courses,
)
from .fetcher import MediaResponse, fetch_media, fetch_page
from .html import extract_content_html, parse_html
from .session import (
    SessionManager,
    clear_session_manager,
    get_session,
    get_session_manager,
    set_session_manager,
)
from .session_cache import MoodleSession, SessionCache
from .types import Activity, Course, CourseFull, Section
from .urls import is_lms_url, to_absolute

__all__ = [
    "activity_from_link",
    "parse_activities",
    "parse_activity",
    "ActivityContent",
    "CONTENT_PARSERS",
    "extract_activity_content",
    "resolve_activity_content",
    "SECTION_STRATEGIES",
    "resolve_course_full",
    "select_sections",
    "DASHBOARD_PATH",
    "InvalidCredentialsError",
    "check_logged_in",
    "parse_courses",
    "MediaResponse",
    "fetch_media",
    "fetch_page",
    "extract_content_html",
    "parse_html",
    "SessionManager",
    "clear_session_manager",
    "get_session",
    "get_session_manager",
    "set_session_manager",
    "MoodleSession",
    "SessionCache",
    "Activity",
    "Course",
    "CourseFull",
    "Section",
    "is_lms_url",
    "to_absolute",
]
