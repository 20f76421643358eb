"""Tests for URL normalization."""

from core.moodle.urls import course_url, is_lms_url, query_param, to_absolute


class TestToAbsolute:
    def test_empty_stays_empty(self):
        assert to_absolute("") == ""
        assert to_absolute(None) == ""

    def test_absolute_url_unchanged(self):
        assert to_absolute("http://x/y") == "http://x/y"
        assert to_absolute("https://cdn.example.com/a.png") == "https://cdn.example.com/a.png"

    def test_protocol_relative_gets_https(self):
        assert to_absolute("//cdn/z") == "https://cdn/z"

    def test_site_relative_gets_origin(self):
        assert to_absolute("/a/b") == "https://lms.example.edu/a/b"

    def test_page_relative_gets_origin_and_slash(self):
        assert to_absolute("a/b") == "https://lms.example.edu/a/b"

    def test_trailing_slash_in_config_is_ignored(self, monkeypatch):
        monkeypatch.setenv("MOODLE_BASE_URL", "https://lms.example.edu/")
        assert to_absolute("/a/b") == "https://lms.example.edu/a/b"


def test_is_lms_url():
    assert is_lms_url("https://lms.example.edu/pluginfile.php/1/a.png")
    assert not is_lms_url("https://player.vimeo.com/video/1")


def test_course_url_appends_params():
    assert course_url(5) == "https://lms.example.edu/course/view.php?id=5"
    assert (
        course_url(5, sectionid="77")
        == "https://lms.example.edu/course/view.php?id=5&sectionid=77"
    )


def test_query_param():
    assert query_param("/mod/page/view.php?id=42", "id") == "42"
    assert query_param("/course/view.php?id=5&sectionid=9", "sectionid") == "9"
    assert query_param("/course/view.php?courseid=5", "id") is None
