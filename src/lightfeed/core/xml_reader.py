"""
Tolerant tag reader for RSS/Atom documents.

Feeds in the wild are frequently not well-formed XML, so instead of a strict
parser this module tokenizes the raw text into tags and offers
first-match-wins lookups over them. Markup inside CDATA sections and
comments never produces tags; everything else is taken at face value.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Sequence

_TOKEN_RE = re.compile(
    r"<!\[CDATA\[.*?(?:\]\]>|\Z)"
    r"|<!--.*?(?:-->|\Z)"
    r"|<[!?][^>]*>"
    r"|<(?P<closing>/?)(?P<name>[A-Za-z_][\w:.\-]*)(?P<attrs>(?:[^<>\"']|\"[^\"]*\"|'[^']*')*)>",
    re.DOTALL,
)
_ATTR_RE = re.compile(r"([A-Za-z_][\w:.\-]*)\s*=\s*(?:\"([^\"]*)\"|'([^']*)')")

AttrPredicate = Callable[[dict], bool]


@dataclass(frozen=True)
class Tag:
    """A single opening, closing or self-closing tag."""

    name: str
    attrs: dict = field(default_factory=dict)
    closing: bool = False
    self_closing: bool = False
    start: int = 0
    end: int = 0


@dataclass(frozen=True)
class Element:
    """An opening tag paired with the next closing tag of the same name."""

    name: str
    attrs: dict
    inner: str

    def reader(self) -> "XmlReader":
        """Reader scoped to the element's content."""
        return XmlReader(self.inner)


def _parse_attrs(raw: str) -> dict:
    attrs = {}
    for match in _ATTR_RE.finditer(raw):
        key = match.group(1).lower()
        if key not in attrs:
            value = match.group(2) if match.group(2) is not None else match.group(3)
            attrs[key] = value
    return attrs


def iter_tags(source: str) -> Iterator[Tag]:
    """Tokenize ``source`` into tags, skipping CDATA, comments and declarations."""
    for match in _TOKEN_RE.finditer(source or ""):
        name = match.group("name")
        if name is None:
            continue

        raw_attrs = match.group("attrs") or ""
        self_closing = raw_attrs.rstrip().endswith("/")
        yield Tag(
            name=name.lower(),
            attrs=_parse_attrs(raw_attrs),
            closing=bool(match.group("closing")),
            self_closing=self_closing,
            start=match.start(),
            end=match.end(),
        )


class XmlReader:
    """First-match-wins lookups over a tokenized feed fragment."""

    def __init__(self, source: Optional[str]):
        self.source = source or ""
        self._tags: Optional[list[Tag]] = None

    @property
    def all_tags(self) -> list[Tag]:
        if self._tags is None:
            self._tags = list(iter_tags(self.source))
        return self._tags

    def elements(self, name: str, limit: Optional[int] = None) -> list[Element]:
        """Collect non-overlapping elements named ``name`` in document order.

        Each opening tag is paired with the next closing tag of the same
        name; nesting is not tracked. Self-closing tags and opening tags
        without a closing tag produce nothing.

        Args:
            name: Tag name, case-insensitive, namespace prefix included
            limit: Stop after this many elements

        Returns:
            List of Element instances
        """
        name = name.lower()
        tags = self.all_tags
        found: list[Element] = []
        index = 0

        while index < len(tags):
            if limit is not None and len(found) >= limit:
                break

            tag = tags[index]
            if tag.name != name or tag.closing or tag.self_closing:
                index += 1
                continue

            close_index = self._find_closing(name, index + 1)
            if close_index is None:
                break

            close_tag = tags[close_index]
            found.append(
                Element(
                    name=name,
                    attrs=tag.attrs,
                    inner=self.source[tag.end:close_tag.start],
                )
            )
            index = close_index + 1

        return found

    def _find_closing(self, name: str, start_index: int) -> Optional[int]:
        tags = self.all_tags
        for index in range(start_index, len(tags)):
            tag = tags[index]
            if tag.closing and tag.name == name:
                return index
        return None

    def first(self, name: str) -> Optional[Element]:
        """First element named ``name``, or None."""
        elements = self.elements(name, limit=1)
        return elements[0] if elements else None

    def first_text(self, *names: str) -> str:
        """Raw content of the first non-empty element among ``names``.

        Names are tried in priority order; only the first element of each
        name is considered.
        """
        for name in names:
            element = self.first(name)
            if element is not None and element.inner:
                return element.inner
        return ""

    def tags(self, name: str) -> list[Tag]:
        """Opening and self-closing tags named ``name``."""
        name = name.lower()
        return [tag for tag in self.all_tags if tag.name == name and not tag.closing]

    def first_attr(
        self,
        candidates: Sequence[tuple[str, str, Optional[AttrPredicate]]],
    ) -> str:
        """Attribute value from the first matching candidate.

        Args:
            candidates: ``(tag_name, attribute, predicate)`` triples in
                priority order. A tag matches when the attribute is present
                and non-empty and the predicate (if any) accepts its
                attributes.

        Returns:
            The raw attribute value, or an empty string
        """
        for tag_name, attribute, predicate in candidates:
            attribute = attribute.lower()
            for tag in self.tags(tag_name):
                value = tag.attrs.get(attribute)
                if not value:
                    continue
                if predicate is not None and not predicate(tag.attrs):
                    continue
                return value
        return ""
