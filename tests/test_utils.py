"""Tests for modernfeed/utils.py."""

from datetime import UTC, datetime, timedelta, timezone

from modernfeed.utils import (
    extract_summary,
    favicon_url,
    isoformat_z,
    normalize_url,
    strip_tags,
    struct_time_to_datetime,
    xml_escape,
)


class TestNormalizeUrl:
    """Tests for normalize_url()."""

    def test_adds_https_scheme(self):
        assert normalize_url("example.com") == "https://example.com"

    def test_keeps_http_scheme(self):
        assert normalize_url("http://example.com/feed") == "http://example.com/feed"

    def test_keeps_https_scheme(self):
        assert normalize_url("https://example.com") == "https://example.com"

    def test_scheme_match_is_case_insensitive(self):
        assert normalize_url("HTTPS://Example.com") == "HTTPS://Example.com"

    def test_strips_whitespace(self):
        assert normalize_url("  example.com/rss \n") == "https://example.com/rss"

    def test_strips_zero_width_spaces(self):
        assert normalize_url("\u200bexample.com\u200b") == "https://example.com"

    def test_idempotent(self):
        once = normalize_url(" example.com ")
        assert normalize_url(once) == once

    def test_other_scheme_gets_prefixed(self):
        assert normalize_url("ftp://example.com") == "https://ftp://example.com"

    def test_empty_input_does_not_raise(self):
        assert normalize_url("") == "https://"


class TestStripTags:
    def test_removes_tags_and_unescapes(self):
        assert strip_tags("<p>Fish &amp; <b>chips</b></p>") == "Fish & chips"

    def test_trims(self):
        assert strip_tags("  <br/> text  ") == "text"


class TestExtractSummary:
    """Tests for extract_summary()."""

    def test_none_for_empty(self):
        assert extract_summary(None) is None
        assert extract_summary("") is None

    def test_short_text_verbatim(self):
        assert extract_summary("<p>Short text</p>") == "Short text"

    def test_exactly_max_length_not_truncated(self):
        text = "a" * 200
        assert extract_summary(text) == text

    def test_truncates_at_word_boundary(self):
        text = ("word " * 60).strip()
        summary = extract_summary(text)
        assert summary.endswith("...")
        body = summary[:-3]
        assert len(body) <= 200
        assert not body.endswith(" ")
        assert text.startswith(body)
        assert text[len(body)] == " "

    def test_hard_cut_without_whitespace(self):
        text = "x" * 250
        assert extract_summary(text) == "x" * 200 + "..."

    def test_strips_markup_before_measuring(self):
        text = "<div>" + "<span>ab</span>" * 50 + "</div>"
        assert extract_summary(text) == "ab" * 50


class TestXmlEscape:
    def test_escapes_all_special_chars(self):
        assert xml_escape("""<a href="x">&'</a>""") == (
            "&lt;a href=&quot;x&quot;&gt;&amp;&apos;&lt;/a&gt;"
        )

    def test_plain_text_unchanged(self):
        assert xml_escape("Example Blog") == "Example Blog"


class TestFaviconUrl:
    def test_uses_host(self):
        assert favicon_url("https://blog.example.com/posts") == (
            "https://www.google.com/s2/favicons?domain=blog.example.com&sz=32"
        )

    def test_none_without_host(self):
        assert favicon_url("not a url") is None


class TestIsoformatZ:
    def test_millisecond_precision(self):
        dt = datetime(2024, 1, 15, 10, 30, 45, 123456, tzinfo=UTC)
        assert isoformat_z(dt) == "2024-01-15T10:30:45.123Z"

    def test_converts_to_utc(self):
        dt = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert isoformat_z(dt) == "2024-01-15T10:00:00.000Z"

    def test_naive_treated_as_utc(self):
        assert isoformat_z(datetime(2024, 1, 15)) == "2024-01-15T00:00:00.000Z"


class TestStructTimeToDatetime:
    def test_none(self):
        assert struct_time_to_datetime(None) is None

    def test_converts(self):
        st = datetime(2024, 1, 15, 10, 0, 0).timetuple()
        assert struct_time_to_datetime(st) == datetime(2024, 1, 15, 10, 0, 0, tzinfo=UTC)
