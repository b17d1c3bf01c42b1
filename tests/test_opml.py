"""Tests for OPML export and import scanning."""

from datetime import UTC, datetime

from modernfeed.opml import OutlineRef, render_opml, scan_outlines

CREATED = datetime(2024, 1, 15, 10, 30, 0, 250000, tzinfo=UTC)

HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<opml version="2.0">\n'
    "  <head>\n"
    "    <title>ModernFeed RSS Subscriptions</title>\n"
    "    <dateCreated>2024-01-15T10:30:00.250Z</dateCreated>\n"
    "  </head>\n"
    "  <body>"
)
FOOTER = "\n  </body>\n</opml>"


class TestRenderOpml:
    def test_empty(self):
        assert render_opml([], [], CREATED) == HEADER + FOOTER

    def test_categorized_and_uncategorized(self):
        categories = [{"id": "c1", "name": "Tech"}]
        feeds = [
            {"title": "Blog", "url": "https://example.com/feed", "site_url": "https://example.com/", "category_id": "c1"},
            {"title": "News", "url": "https://news.example.com/rss", "site_url": None, "category_id": None},
        ]
        expected = (
            HEADER
            + '\n    <outline text="Tech" title="Tech">'
            + '\n      <outline type="rss" text="Blog" title="Blog" xmlUrl="https://example.com/feed" htmlUrl="https://example.com/" />'
            + "\n    </outline>"
            + '\n    <outline type="rss" text="News" title="News" xmlUrl="https://news.example.com/rss" />'
            + FOOTER
        )
        assert render_opml(feeds, categories, CREATED) == expected

    def test_empty_categories_are_omitted(self):
        categories = [{"id": "c1", "name": "Empty"}]
        assert "Empty" not in render_opml([], categories, CREATED)

    def test_categories_in_given_order(self):
        categories = [{"id": "c2", "name": "Zeta"}, {"id": "c1", "name": "Alpha"}]
        feeds = [
            {"title": "A", "url": "https://a.example.com", "category_id": "c1"},
            {"title": "Z", "url": "https://z.example.com", "category_id": "c2"},
        ]
        out = render_opml(feeds, categories, CREATED)
        assert out.index('text="Zeta"') < out.index('text="Alpha"')

    def test_unknown_category_treated_as_uncategorized(self):
        feeds = [{"title": "Orphan", "url": "https://o.example.com", "category_id": "gone"}]
        out = render_opml(feeds, [], CREATED)
        assert '\n    <outline type="rss" text="Orphan"' in out

    def test_escapes_attribute_values(self):
        categories = [{"id": "c1", "name": "R&D <lab>"}]
        feeds = [{"title": 'Say "hi"', "url": "https://e.com/?a=1&b=2", "category_id": "c1"}]
        out = render_opml(feeds, categories, CREATED)
        assert 'text="R&amp;D &lt;lab&gt;"' in out
        assert 'title="Say &quot;hi&quot;"' in out
        assert 'xmlUrl="https://e.com/?a=1&amp;b=2"' in out

    def test_no_trailing_newline(self):
        assert render_opml([], [], CREATED).endswith("</opml>")

    def test_default_timestamp(self):
        assert "<dateCreated>" in render_opml([], [])


class TestScanOutlines:
    def test_nested_document(self, sample_opml):
        assert scan_outlines(sample_opml) == [
            OutlineRef("https://example.com/feed.xml", "Example Feed", "Tech"),
            OutlineRef("https://other.example.com/rss", "Other", "Tech"),
        ]

    def test_title_falls_back_to_text(self):
        refs = scan_outlines('<outline text="Only text" xmlUrl="https://a.example.com/rss"/>')
        assert refs == [OutlineRef("https://a.example.com/rss", "Only text", None)]

    def test_attribute_order_and_quotes(self):
        refs = scan_outlines("<outline xmlUrl='https://a.example.com/rss' title='Single'   type='rss'>")
        assert refs == [OutlineRef("https://a.example.com/rss", "Single", None)]

    def test_html_url_not_mistaken_for_xml_url(self):
        refs = scan_outlines('<outline text="Folder"><outline htmlUrl="https://site" text="x" type="link"/>')
        assert refs == []

    def test_unescapes_values(self):
        refs = scan_outlines('<outline text="A &amp; B" xmlUrl="https://e.com/?a=1&amp;b=2"/>')
        assert refs[0].url == "https://e.com/?a=1&b=2"
        assert refs[0].title == "A & B"

    def test_folder_sticks_to_later_top_level_feeds(self):
        text = """
        <body>
          <outline text="Tech">
            <outline text="A" xmlUrl="https://a.example.com/rss"/>
          </outline>
          <outline text="B" xmlUrl="https://b.example.com/rss"/>
          <outline text="News">
            <outline text="C" xmlUrl="https://c.example.com/rss"/>
          </outline>
        </body>
        """
        assert [(r.url, r.category) for r in scan_outlines(text)] == [
            ("https://a.example.com/rss", "Tech"),
            ("https://b.example.com/rss", "Tech"),
            ("https://c.example.com/rss", "News"),
        ]

    def test_malformed_markup_is_tolerated(self):
        text = '<opml><body><outline text="Tech"><outline text="A" xmlUrl="https://a.example.com/rss">'
        assert scan_outlines(text) == [OutlineRef("https://a.example.com/rss", "A", "Tech")]

    def test_no_outlines(self):
        assert scan_outlines("not xml at all") == []

    def test_exported_document_scans_back(self):
        categories = [{"id": "c1", "name": "R&D"}]
        feeds = [
            {"title": "Blog", "url": "https://example.com/feed?a=1&b=2", "site_url": "https://example.com", "category_id": "c1"},
        ]
        refs = scan_outlines(render_opml(feeds, categories, CREATED))
        assert refs == [OutlineRef("https://example.com/feed?a=1&b=2", "Blog", "R&D")]
