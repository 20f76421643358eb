"""
Moodle scraping proxy routes.

Endpoints:
- POST /api/moodle/login - Log in and return the user's display name
- POST /api/moodle/courses - List enrolled courses
- POST /api/moodle/course-full - Full section/activity tree of a course
- POST /api/moodle/activity-content - Content of a single activity
- GET /api/moodle/proxy-media - Stream LMS media past CORS

Scrape failures are logged and reported server-side only; clients get a
generic 500 so LMS internals are never leaked.
"""

import logging

import sentry_sdk
from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel

from core.moodle import (
    DASHBOARD_PATH,
    InvalidCredentialsError,
    check_logged_in,
    fetch_media,
    fetch_page,
    get_session,
    get_session_manager,
    is_lms_url,
    parse_courses,
    resolve_activity_content,
    resolve_course_full,
    to_absolute,
)
from web_api.rate_limit import login_limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/moodle", tags=["moodle"])

MEDIA_CACHE_CONTROL = "public, max-age=86400"


# --- Pydantic models ---
# Fields are optional so missing ones produce a 400, not FastAPI's 422.


class CredentialsRequest(BaseModel):
    """Request body carrying LMS credentials."""

    username: str | None = None
    password: str | None = None


class CourseFullRequest(CredentialsRequest):
    """Request body for the full course structure."""

    courseId: int | str | None = None


class ActivityContentRequest(CredentialsRequest):
    """Request body for a single activity's content."""

    activityUrl: str | None = None
    modType: str | None = None


def _report(error: Exception, message: str) -> None:
    logger.exception(f"{message}: {error}")
    sentry_sdk.capture_exception(error)


# --- Endpoints ---


@router.post("/login")
async def login(body: CredentialsRequest, request: Request):
    """
    Log in to the LMS with username/password.

    Credentials are checked by loading the dashboard: if it still shows
    the login form, the LMS rejected them.
    """
    login_limiter.check(request)
    if not body.username or not body.password:
        raise HTTPException(status_code=400, detail="Username and password required")

    try:
        cookie = await get_session(body.username, body.password)
        html = await fetch_page(DASHBOARD_PATH, cookie)
        full_name = check_logged_in(html, body.username)
    except InvalidCredentialsError:
        get_session_manager().invalidate(body.username)
        raise HTTPException(status_code=401, detail="Invalid username or password")
    except Exception as e:
        _report(e, "Moodle login error")
        raise HTTPException(status_code=500, detail="Failed to connect to Moodle")

    return {
        "success": True,
        "sessionCookie": cookie,
        "user": {"username": body.username, "fullName": full_name},
    }


@router.post("/courses")
async def list_courses(body: CredentialsRequest):
    """List the user's enrolled courses from the dashboard."""
    if not body.username or not body.password:
        raise HTTPException(status_code=400, detail="Credentials required")

    try:
        cookie = await get_session(body.username, body.password)
        html = await fetch_page(DASHBOARD_PATH, cookie)
        courses = parse_courses(html)
    except Exception as e:
        _report(e, "Moodle courses error")
        raise HTTPException(status_code=500, detail="Failed to fetch courses")

    return {"courses": [c.to_dict() for c in courses]}


@router.post("/course-full")
async def course_full(body: CourseFullRequest):
    """Get the full section/activity tree of a course."""
    if not body.username or not body.password or not body.courseId:
        raise HTTPException(
            status_code=400, detail="Credentials and courseId required"
        )
    if isinstance(body.courseId, str) and not body.courseId.isdigit():
        raise HTTPException(status_code=400, detail="courseId must be numeric")

    try:
        cookie = await get_session(body.username, body.password)
        course = await resolve_course_full(body.courseId, cookie)
    except Exception as e:
        _report(e, "Moodle course-full error")
        raise HTTPException(status_code=500, detail="Failed to fetch course contents")

    logger.info(
        f"Course {body.courseId}: {course.total_sections} sections, "
        f"{course.total_activities} activities"
    )
    return course.to_dict()


@router.post("/activity-content")
async def activity_content(body: ActivityContentRequest):
    """Get the content of one activity, parsed according to its module type."""
    if not body.username or not body.password or not body.activityUrl:
        raise HTTPException(
            status_code=400, detail="Credentials and activityUrl required"
        )
    if not is_lms_url(to_absolute(body.activityUrl)):
        raise HTTPException(
            status_code=400, detail="activityUrl must point to the LMS"
        )

    try:
        cookie = await get_session(body.username, body.password)
        content = await resolve_activity_content(
            body.activityUrl, body.modType, cookie
        )
    except Exception as e:
        _report(e, "Moodle activity content error")
        raise HTTPException(
            status_code=500, detail="Failed to fetch activity content"
        )

    return content.to_dict()


@router.get("/proxy-media")
async def proxy_media(
    url: str | None = None,
    username: str | None = None,
    password: str | None = None,
):
    """
    Proxy an image or media file from the LMS (to bypass CORS).

    Credentials are optional; without them the file is fetched anonymously.
    """
    if not url:
        raise HTTPException(status_code=400, detail="URL required")

    try:
        cookie = None
        if username and password:
            cookie = await get_session(username, password)
        media = await fetch_media(url, cookie)
    except Exception as e:
        _report(e, "Moodle proxy media error")
        raise HTTPException(status_code=500, detail="Failed to proxy media")

    return Response(
        content=media.content,
        media_type=media.content_type,
        headers={"Cache-Control": MEDIA_CACHE_CONTROL},
    )
