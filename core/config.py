"""
Centralized configuration for the Moodle scraping proxy.

Every setting is read from the environment on access, so tests can
override values with patch.dict(os.environ, ...).
"""

import os

DEFAULT_MOODLE_BASE_URL = "https://nilecenter.online"


def is_dev_mode() -> bool:
    """Check if running in development mode (--dev flag or DEV_MODE env)."""
    return os.getenv("DEV_MODE", "").lower() in ("true", "1", "yes")


def get_api_port() -> int:
    """Get API server port from env or default."""
    return int(os.getenv("API_PORT", "8000"))


def get_moodle_base_url() -> str:
    """Get the LMS origin, without a trailing slash."""
    return os.getenv("MOODLE_BASE_URL", DEFAULT_MOODLE_BASE_URL).rstrip("/")


def get_session_cookie_name() -> str:
    """Get the name of the LMS session cookie."""
    return os.getenv("MOODLE_SESSION_COOKIE", "MoodleSession")


def get_session_ttl_seconds() -> int:
    """How long a cached LMS session is reused (default: 30 minutes)."""
    return int(os.getenv("MOODLE_SESSION_TTL_SECONDS", str(30 * 60)))


def get_max_sessions() -> int:
    """Maximum number of cached LMS sessions."""
    return int(os.getenv("MOODLE_MAX_SESSIONS", "100"))


def get_lessons_tab_label() -> str:
    """Visible label of the course tab that holds the lesson sections."""
    return os.getenv("MOODLE_LESSONS_TAB", "Lessons")


def get_http_timeout() -> float | None:
    """Per-request timeout for LMS fetches, or None for no timeout."""
    value = os.getenv("MOODLE_HTTP_TIMEOUT")
    if not value:
        return None
    return float(value)


def get_login_rate_limit() -> int:
    """Maximum login requests per client IP per minute."""
    return int(os.getenv("LOGIN_RATE_LIMIT", "20"))


def get_allowed_origins() -> list[str]:
    """
    Get list of allowed CORS origins.

    The mobile client does not send an Origin header, so this only matters
    for the web build of the app and for local development.
    """
    origins = []
    if is_dev_mode():
        hosts = ["localhost", "127.0.0.1"]
        ports = [8081, 19006, get_api_port()]
        origins = [f"http://{host}:{port}" for host in hosts for port in ports]

    env_frontend = os.environ.get("FRONTEND_URL")
    if env_frontend and env_frontend not in origins:
        origins.append(env_frontend.rstrip("/"))

    return origins


# Environment variables worth knowing about at startup
# Format: (name, description)
OPTIONAL_ENV_VARS = [
    ("MOODLE_BASE_URL", f"LMS origin (default {DEFAULT_MOODLE_BASE_URL})"),
    ("SENTRY_DSN", "Sentry error reporting"),
]


def check_required_env_vars() -> list[str]:
    """
    Check optional environment variables.

    Returns:
        List of warning messages for variables that are not set
    """
    warnings = []
    for name, description in OPTIONAL_ENV_VARS:
        if not os.environ.get(name):
            warnings.append(f"  ⚠ {name}: Not set ({description})")
    return warnings
