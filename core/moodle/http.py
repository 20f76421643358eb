"""Shared httpx client factory for talking to the LMS."""

import httpx

from core.config import get_http_timeout, get_session_cookie_name

from .urls import is_lms_url

# Transport override (used by tests to stub the LMS)
_transport: httpx.AsyncBaseTransport | None = None


def set_transport(transport: httpx.AsyncBaseTransport) -> None:
    """Route all LMS traffic through a custom transport."""
    global _transport
    _transport = transport


def clear_transport() -> None:
    """Restore the default network transport."""
    global _transport
    _transport = None


def session_headers(cookie: str) -> dict[str, str]:
    """Headers that attach an LMS session cookie to a single request."""
    return {"Cookie": f"{get_session_cookie_name()}={cookie}"}


def attach_session(cookie: str):
    """Request hook that sends the session cookie to the LMS host only.

    Runs for every request the client makes, including each redirect hop,
    so redirects to external links or CDNs never carry the session.
    """

    async def hook(request: httpx.Request) -> None:
        if is_lms_url(str(request.url)):
            request.headers.update(session_headers(cookie))
        else:
            request.headers.pop("Cookie", None)

    return hook


def get_client(cookie: str | None = None, **kwargs) -> httpx.AsyncClient:
    """Create a short-lived client for one LMS operation.

    Args:
        cookie: Session cookie value to send with every request to the LMS
            host (including redirects back to it)
        **kwargs: Passed through to httpx.AsyncClient
    """
    event_hooks = {"request": [attach_session(cookie)]} if cookie else None
    return httpx.AsyncClient(
        transport=_transport,
        timeout=get_http_timeout(),
        event_hooks=event_hooks,
        **kwargs,
    )
