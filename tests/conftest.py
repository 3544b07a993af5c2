"""Shared fixtures: sample feed documents and an in-memory database."""

import pytest

from lightfeed.storage.database import DatabaseManager

RSS_DOCUMENT = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/">
<channel>
  <title>Example &amp; Co</title>
  <link>https://example.com/</link>
  <image><url>/logo.png</url></image>
  <item>
    <title>Older post</title>
    <link>https://example.com/older</link>
    <guid>older-guid</guid>
    <pubDate>Mon, 15 Jan 2024 08:00:00 GMT</pubDate>
    <description><![CDATA[<p>Older <b>summary</b></p><img src="/img/older.jpg">]]></description>
  </item>
  <item>
    <title>Newer post</title>
    <link>/newer</link>
    <pubDate>Mon, 15 Jan 2024 10:00:00 GMT</pubDate>
    <media:content url="https://cdn.example.com/newer.jpg" medium="image"/>
    <description>Plain text</description>
  </item>
</channel>
</rss>
"""

ATOM_DOCUMENT = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title type="text">Atom Example</title>
  <link href="https://atom.example.org/"/>
  <icon>/favicon.ico</icon>
  <entry>
    <title>First entry</title>
    <link rel="alternate" href="https://atom.example.org/posts/1?a=1&amp;b=2"/>
    <link rel="enclosure" type="image/png" href="/images/1.png"/>
    <id>tag:atom.example.org,2024:1</id>
    <updated>2024-01-15T09:00:00Z</updated>
    <summary>Short &lt;em&gt;summary&lt;/em&gt;</summary>
  </entry>
  <entry>
    <link href="/posts/2"/>
    <published>2024-01-14T09:00:00Z</published>
  </entry>
</feed>
"""


def build_rss(items: list[dict], title: str = "Generated Feed") -> str:
    """Build a minimal RSS document from item dictionaries."""
    blocks = []
    for item in items:
        parts = [f"<{key}>{value}</{key}>" for key, value in item.items()]
        blocks.append("<item>" + "".join(parts) + "</item>")
    return f"<rss><channel><title>{title}</title>{''.join(blocks)}</channel></rss>"


@pytest.fixture
def rss_document() -> str:
    return RSS_DOCUMENT


@pytest.fixture
def atom_document() -> str:
    return ATOM_DOCUMENT


@pytest.fixture
def make_rss():
    """Factory building RSS documents from item dictionaries."""
    return build_rss


@pytest.fixture
def db_manager():
    """Create a test database manager."""
    manager = DatabaseManager(":memory:")
    manager.init_db()
    yield manager
    manager.close()
