"""Cookie-authenticated GETs against LMS pages and media."""

import logging
from dataclasses import dataclass

from .http import get_client
from .urls import to_absolute

logger = logging.getLogger(__name__)


@dataclass
class MediaResponse:
    """Raw bytes of a proxied media file."""

    content: bytes
    content_type: str


async def fetch_page(url: str, cookie: str) -> str:
    """Fetch an LMS page and return its HTML.

    Exactly one GET (redirects followed like a browser). The status code is
    not checked: Moodle error and guest-access pages still carry partial
    content worth parsing.
    """
    absolute = to_absolute(url)
    async with get_client(cookie=cookie, follow_redirects=True) as client:
        response = await client.get(absolute)
    if response.status_code != 200:
        logger.debug(f"LMS returned HTTP {response.status_code} for {absolute}")
    return response.text


async def fetch_media(url: str, cookie: str | None = None) -> MediaResponse:
    """Fetch a media file for the proxy endpoint.

    The session cookie is only sent to the LMS host itself, never to
    third-party hosts that course pages embed.
    """
    absolute = to_absolute(url)
    async with get_client(cookie=cookie, follow_redirects=True) as client:
        response = await client.get(absolute)
    return MediaResponse(
        content=response.content,
        content_type=response.headers.get("content-type")
        or "application/octet-stream",
    )
