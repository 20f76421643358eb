"""Tests for cookie-authenticated page and media fetches."""

import httpx
import pytest

from core.moodle.fetcher import fetch_media, fetch_page
from core.moodle.http import set_transport


class Recorder:
    def __init__(self, response: httpx.Response):
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


@pytest.mark.asyncio
async def test_fetch_page_sends_cookie_to_absolute_url():
    recorder = Recorder(httpx.Response(200, html="<html>ok</html>"))
    set_transport(httpx.MockTransport(recorder))

    html = await fetch_page("/course/view.php?id=5", "abc")

    assert html == "<html>ok</html>"
    (request,) = recorder.requests
    assert str(request.url) == "https://lms.example.edu/course/view.php?id=5"
    assert request.headers["cookie"] == "MoodleSession=abc"


@pytest.mark.asyncio
async def test_fetch_page_returns_error_pages_too():
    recorder = Recorder(httpx.Response(403, html="<html>Guest access</html>"))
    set_transport(httpx.MockTransport(recorder))

    assert await fetch_page("/course/view.php?id=5", "abc") == "<html>Guest access</html>"


@pytest.mark.asyncio
async def test_fetch_page_keeps_cookie_across_redirects():
    requests = []

    def handler(request):
        requests.append(request)
        if request.url.path == "/course/view.php":
            return httpx.Response(303, headers={"location": "/course/view.php/final"})
        return httpx.Response(200, html="<html>final</html>")

    set_transport(httpx.MockTransport(handler))

    assert await fetch_page("/course/view.php?id=5", "abc") == "<html>final</html>"
    assert [r.headers.get("cookie") for r in requests] == [
        "MoodleSession=abc",
        "MoodleSession=abc",
    ]


@pytest.mark.asyncio
async def test_fetch_media_passes_content_type():
    recorder = Recorder(
        httpx.Response(200, content=b"\x89PNG", headers={"content-type": "image/png"})
    )
    set_transport(httpx.MockTransport(recorder))

    media = await fetch_media("/pluginfile.php/1/a.png", "abc")

    assert media.content == b"\x89PNG"
    assert media.content_type == "image/png"
    assert recorder.requests[0].headers["cookie"] == "MoodleSession=abc"


@pytest.mark.asyncio
async def test_fetch_media_defaults_content_type():
    recorder = Recorder(httpx.Response(200, content=b"data"))
    set_transport(httpx.MockTransport(recorder))

    media = await fetch_media("/pluginfile.php/1/blob")
    assert media.content_type == "application/octet-stream"
    assert "cookie" not in recorder.requests[0].headers


@pytest.mark.asyncio
async def test_fetch_media_never_sends_cookie_off_site():
    recorder = Recorder(httpx.Response(200, content=b"x", headers={"content-type": "image/jpeg"}))
    set_transport(httpx.MockTransport(recorder))

    await fetch_media("//i.vimeocdn.com/video/1.jpg", "abc")

    request = recorder.requests[0]
    assert request.url.host == "i.vimeocdn.com"
    assert "cookie" not in request.headers


@pytest.mark.asyncio
async def test_fetch_page_drops_cookie_on_off_site_redirect():
    """mod/url pages redirect to the external link; the session stays home."""
    requests = []

    def handler(request):
        requests.append(request)
        if request.url.host == "lms.example.edu":
            return httpx.Response(303, headers={"location": "https://elsewhere.example.org/x"})
        return httpx.Response(200, html="<html>external</html>")

    set_transport(httpx.MockTransport(handler))

    assert await fetch_page("/mod/url/view.php?id=3", "secret-session") == "<html>external</html>"
    lms_request, external_request = requests
    assert lms_request.headers["cookie"] == "MoodleSession=secret-session"
    assert "cookie" not in external_request.headers
