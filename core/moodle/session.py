"""
LMS session management.

Logs in through Moodle's HTML login form (not the web-service token API)
and caches the resulting browser session cookie per username.

Concurrency: two near-simultaneous requests for the same username can both
miss the cache and log in twice; the later login overwrites the earlier
cache entry. Both cookies stay valid on the LMS side, so this only costs a
redundant login.
"""

import hashlib
import hmac
import logging
import re
import secrets

import httpx

from core.config import (
    get_max_sessions,
    get_moodle_base_url,
    get_session_cookie_name,
    get_session_ttl_seconds,
)
from .html import parse_html
from .http import get_client, session_headers
from .session_cache import SessionCache
from .urls import is_lms_url, to_absolute

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login/index.php"


def extract_session_cookie(response: httpx.Response) -> str | None:
    """Return the session cookie value from a response's Set-Cookie headers."""
    pattern = re.compile(rf"{re.escape(get_session_cookie_name())}=([^;]+)")
    value = None
    for header in response.headers.get_list("set-cookie"):
        match = pattern.search(header)
        if match:
            value = match.group(1)
    return value


def extract_login_token(html: str) -> str:
    """Return the anti-CSRF logintoken from the login form, or ""."""
    values = parse_html(html).xpath('//input[@name="logintoken"]/@value')
    return values[0] if values else ""


class SessionManager:
    """Hands out LMS session cookies, logging in only on a cache miss.

    A cached session is only reused for the password it was created with;
    the password is kept as a keyed hash, never in plain text.
    """

    def __init__(self, cache: SessionCache, ttl_seconds: float):
        self.cache = cache
        self.ttl_seconds = ttl_seconds
        self._hash_key = secrets.token_bytes(32)

    def _password_hash(self, password: str) -> str:
        return hmac.new(self._hash_key, password.encode(), hashlib.sha256).hexdigest()

    async def get_session(self, username: str, password: str) -> str:
        """Return a session cookie for username.

        A cached session created with a different password counts as a miss.
        Network errors propagate uncaught; there is no retry.
        """
        self.cache.sweep()
        password_hash = self._password_hash(password)
        cached = self.cache.get(username)
        if cached and hmac.compare_digest(cached.password_hash, password_hash):
            return cached.cookie

        cookie = await self._login(username, password)
        self.cache.put(username, cookie, self.ttl_seconds, password_hash)
        return cookie

    def invalidate(self, username: str) -> None:
        """Drop a cached session (e.g. after a failed credential check)."""
        self.cache.invalidate(username)

    async def _login(self, username: str, password: str) -> str:
        base = get_moodle_base_url()
        login_url = f"{base}{LOGIN_PATH}"

        async with get_client() as client:
            # Step 1: login page gives us the logintoken and a pre-auth cookie
            page = await client.get(login_url)
            token = extract_login_token(page.text)
            cookie = extract_session_cookie(page) or ""

            # Step 2: submit the form without following the redirect
            response = await client.post(
                login_url,
                data={
                    "username": username,
                    "password": password,
                    "logintoken": token,
                    "anchor": "",
                },
                headers=session_headers(cookie),
            )
            cookie = extract_session_cookie(response) or cookie

            # Step 3: Moodle issues a fresh session id after authentication,
            # on the redirect target
            location = to_absolute(response.headers.get("location"))
            if location and is_lms_url(location):
                follow = await client.get(location, headers=session_headers(cookie))
                cookie = extract_session_cookie(follow) or cookie

        logger.info(f"Logged in to LMS as {username}")
        return cookie


# Global session manager singleton
_manager: SessionManager | None = None


def get_session_manager() -> SessionManager:
    """Get the process-wide session manager, creating it on first use."""
    global _manager
    if _manager is None:
        _manager = SessionManager(
            SessionCache(max_entries=get_max_sessions()),
            ttl_seconds=get_session_ttl_seconds(),
        )
    return _manager


def set_session_manager(manager: SessionManager) -> None:
    """Set the session manager (used by tests)."""
    global _manager
    _manager = manager


def clear_session_manager() -> None:
    """Forget the session manager; the next call builds a fresh one."""
    global _manager
    _manager = None


async def get_session(username: str, password: str) -> str:
    """Shortcut for get_session_manager().get_session(...)."""
    return await get_session_manager().get_session(username, password)
