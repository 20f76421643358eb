"""Pytest fixtures for Moodle scraping tests."""

import pytest

from core.moodle.http import clear_transport
from core.moodle.session import clear_session_manager

LMS_BASE_URL = "https://lms.example.edu"


@pytest.fixture(autouse=True)
def lms_env(monkeypatch):
    """Point every test at a fake LMS origin and reset shared state."""
    monkeypatch.setenv("MOODLE_BASE_URL", LMS_BASE_URL)
    monkeypatch.delenv("MOODLE_SESSION_COOKIE", raising=False)
    yield
    clear_transport()
    clear_session_manager()
