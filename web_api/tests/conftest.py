# web_api/tests/conftest.py
"""Pytest fixtures for web API tests.

Points the app at a fake LMS origin and resets the shared session cache,
HTTP transport and login rate limiter between tests, so each test can
install its own stub LMS with set_transport().
"""

import pytest

from core.moodle.http import clear_transport
from core.moodle.session import clear_session_manager
from web_api.rate_limit import login_limiter


@pytest.fixture(autouse=True)
def api_test_lms(monkeypatch):
    """Reset LMS-facing state around every API test.

    This fixture runs automatically for all tests in web_api/tests/.
    """
    monkeypatch.setenv("MOODLE_BASE_URL", "https://lms.example.edu")
    monkeypatch.delenv("MOODLE_SESSION_COOKIE", raising=False)
    login_limiter.reset()

    yield

    clear_transport()
    clear_session_manager()
    login_limiter.reset()
