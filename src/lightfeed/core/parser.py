"""
Feed document parser.

Detects RSS (``<item>``) vs Atom (``<entry>``) documents and extracts a
normalized article list plus feed-level title and image. Extraction is
tolerant: every field is looked up through an ordered list of candidate
tags and the first non-empty match wins.
"""

from dataclasses import dataclass, field, replace
from typing import Optional

from lightfeed.config import get_config
from lightfeed.core.text import (
    decode_entities,
    extract_image_from_html,
    resolve_article_url,
    resolve_url,
    to_plain_text,
    truncate,
)
from lightfeed.core.timeutil import format_published_label, now_ms as current_ms, parse_published_at
from lightfeed.core.xml_reader import Element, XmlReader
from lightfeed.logger import get_logger

logger = get_logger(__name__)

MAX_ITEMS_PER_FEED = 30
UNTITLED_ARTICLE = "Untitled article"


def _is_image_type(attrs: dict) -> bool:
    return (attrs.get("type") or "").strip().lower().startswith("image/")


def _is_enclosure_image(attrs: dict) -> bool:
    return (attrs.get("rel") or "").strip().lower() == "enclosure" and _is_image_type(attrs)


_RSS_IMAGE_TAGS = (
    ("media:content", "url", None),
    ("media:thumbnail", "url", None),
    ("enclosure", "url", _is_image_type),
    ("itunes:image", "href", None),
)

_ATOM_IMAGE_TAGS = (
    ("media:content", "url", None),
    ("media:thumbnail", "url", None),
    ("link", "href", _is_enclosure_image),
)

_RSS_DATE_TAGS = ("pubdate", "dc:date", "published", "updated")
_ATOM_DATE_TAGS = ("updated", "published")


@dataclass(frozen=True)
class FeedSource:
    """One feed of a mix: identifier, display title and URL."""

    feed_id: str
    title: str
    url: str


@dataclass
class Article:
    """A normalized feed item."""

    id: str
    title: str
    link: str
    summary: str = ""
    image_url: Optional[str] = None
    published_at: Optional[str] = None
    published_at_ms: int = 0
    published_label: str = ""

    # Set once the article is blended with other feeds
    source_feed_id: Optional[str] = None
    source_title: Optional[str] = None
    source_url: Optional[str] = None
    source_image: Optional[str] = None

    def with_source(
        self,
        feed_id: str,
        title: str,
        url: str,
        image: Optional[str] = None,
    ) -> "Article":
        """Return a copy tagged with its originating feed."""
        return replace(
            self,
            source_feed_id=feed_id,
            source_title=title,
            source_url=url,
            source_image=image,
        )


@dataclass
class ParsedFeed:
    """Parser output for one feed document."""

    feed_title: str
    feed_image: Optional[str] = None
    items: list[Article] = field(default_factory=list)


class FeedDocumentParser:
    """Parser turning raw RSS/Atom text into a ParsedFeed."""

    def __init__(
        self,
        max_items: Optional[int] = None,
        summary_max_length: Optional[int] = None,
    ):
        """Initialize feed document parser.

        Args:
            max_items: Maximum number of item/entry blocks considered per feed
            summary_max_length: Maximum summary length, ellipsis included
        """
        config = get_config()

        self.max_items = max_items or config.fetcher.max_items_per_feed
        self.summary_max_length = summary_max_length or config.fetcher.summary_max_length

    def parse(
        self,
        xml_text: Optional[str],
        source: FeedSource,
        now_ms: Optional[int] = None,
    ) -> ParsedFeed:
        """Parse a feed document.

        Args:
            xml_text: Raw document text
            source: Feed the document was fetched from
            now_ms: Reference time for published labels (defaults to the clock)

        Returns:
            ParsedFeed with items sorted newest first
        """
        reference_ms = current_ms() if now_ms is None else now_ms
        reader = XmlReader(xml_text)

        blocks = reader.elements("item")
        if blocks:
            parse_block = self._parse_rss_item
            metadata = reader.first("channel")
            is_rss = True
        else:
            blocks = reader.elements("entry")
            parse_block = self._parse_atom_entry
            if blocks:
                metadata = reader.first("feed")
                is_rss = False
            else:
                metadata = reader.first("channel")
                is_rss = metadata is not None
                if metadata is None:
                    metadata = reader.first("feed")

        candidates = [
            parse_block(block, source, index, reference_ms)
            for index, block in enumerate(blocks[: self.max_items])
        ]
        items = [article for article in candidates if article is not None]

        dropped = len(candidates) - len(items)
        if dropped:
            logger.debug(f"Dropped {dropped} items without a usable link from {source.url}")

        items.sort(key=lambda article: article.published_at_ms, reverse=True)

        if is_rss:
            feed_image = self._extract_rss_feed_image(metadata, source.url)
        else:
            feed_image = self._extract_atom_feed_image(metadata, source.url)

        return ParsedFeed(
            feed_title=self._extract_feed_title(metadata) or source.title,
            feed_image=feed_image,
            items=items,
        )

    def _parse_rss_item(
        self,
        block: Element,
        source: FeedSource,
        index: int,
        reference_ms: int,
    ) -> Optional[Article]:
        reader = block.reader()

        link = resolve_article_url(to_plain_text(reader.first_text("link", "guid")), source.url)
        if not link:
            return None

        description_raw = reader.first_text("description")
        content_raw = reader.first_text("content:encoded", "content")
        seed = to_plain_text(reader.first_text("guid", "link", "title"))

        return self._build_article(
            reader=reader,
            source=source,
            index=index,
            reference_ms=reference_ms,
            link=link,
            summary_raw=description_raw or content_raw,
            image_url=self._extract_item_image(
                reader, _RSS_IMAGE_TAGS, source.url, (content_raw, description_raw)
            ),
            date_tags=_RSS_DATE_TAGS,
            seed=seed,
        )

    def _parse_atom_entry(
        self,
        block: Element,
        source: FeedSource,
        index: int,
        reference_ms: int,
    ) -> Optional[Article]:
        reader = block.reader()

        link = self._extract_atom_link(reader, source.url)
        if not link:
            return None

        summary_raw = reader.first_text("summary")
        content_raw = reader.first_text("content")
        seed = to_plain_text(reader.first_text("id", "title"))

        return self._build_article(
            reader=reader,
            source=source,
            index=index,
            reference_ms=reference_ms,
            link=link,
            summary_raw=summary_raw or content_raw,
            image_url=self._extract_item_image(
                reader, _ATOM_IMAGE_TAGS, source.url, (content_raw, summary_raw)
            ),
            date_tags=_ATOM_DATE_TAGS,
            seed=seed,
        )

    def _build_article(
        self,
        reader: XmlReader,
        source: FeedSource,
        index: int,
        reference_ms: int,
        link: str,
        summary_raw: str,
        image_url: Optional[str],
        date_tags: tuple,
        seed: str,
    ) -> Article:
        title = to_plain_text(reader.first_text("title"))
        published_at, published_at_ms = parse_published_at(
            to_plain_text(reader.first_text(*date_tags))
        )

        return Article(
            id=f"{source.feed_id}-{seed or index}",
            title=title or UNTITLED_ARTICLE,
            link=link,
            summary=truncate(to_plain_text(summary_raw), self.summary_max_length),
            image_url=image_url,
            published_at=published_at,
            published_at_ms=published_at_ms,
            published_label=format_published_label(published_at_ms, now=reference_ms),
        )

    @staticmethod
    def _extract_atom_link(reader: XmlReader, feed_url: str) -> Optional[str]:
        """Alternate link, else the first link, else the entry id."""
        links = reader.tags("link")
        chosen = next(
            (tag for tag in links if (tag.attrs.get("rel") or "").lower() == "alternate"),
            links[0] if links else None,
        )

        if chosen is not None and chosen.attrs.get("href"):
            return resolve_article_url(decode_entities(chosen.attrs["href"]), feed_url)

        return resolve_article_url(to_plain_text(reader.first_text("id")), feed_url)

    @staticmethod
    def _extract_item_image(
        reader: XmlReader,
        tag_candidates: tuple,
        feed_url: str,
        html_candidates: tuple,
    ) -> Optional[str]:
        """Media tags first, then the first ``<img>`` of the item's HTML."""
        tag_image = decode_entities(reader.first_attr(tag_candidates))
        if tag_image:
            image_url = resolve_url(tag_image, feed_url)
            if image_url != feed_url:
                return image_url

        for html in html_candidates:
            image_url = extract_image_from_html(html, feed_url)
            if image_url != feed_url:
                return image_url

        return None

    @staticmethod
    def _extract_feed_title(metadata: Optional[Element]) -> str:
        if metadata is None:
            return ""
        return to_plain_text(metadata.reader().first_text("title"))

    @staticmethod
    def _extract_rss_feed_image(metadata: Optional[Element], feed_url: str) -> Optional[str]:
        if metadata is None:
            return None

        reader = metadata.reader()

        image = reader.first("image")
        if image is not None:
            image_url = to_plain_text(image.reader().first_text("url"))
            if image_url:
                return resolve_url(image_url, feed_url)

        tag_image = reader.first_attr(
            (
                ("itunes:image", "href", None),
                ("googleplay:image", "href", None),
                ("media:thumbnail", "url", None),
            )
        )
        if tag_image:
            return resolve_url(decode_entities(tag_image), feed_url)

        logo = to_plain_text(reader.first_text("logo"))
        if logo:
            return resolve_url(logo, feed_url)

        return None

    @staticmethod
    def _extract_atom_feed_image(metadata: Optional[Element], feed_url: str) -> Optional[str]:
        if metadata is None:
            return None

        reader = metadata.reader()
        image_url = to_plain_text(reader.first_text("icon")) or to_plain_text(reader.first_text("logo"))
        if image_url:
            return resolve_url(image_url, feed_url)

        return None
