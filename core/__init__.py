"""
Core business logic - platform-agnostic.
Used by the web API; LMS scraping lives in core.moodle.
"""
