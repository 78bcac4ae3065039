"""
Lightweight tag scanner for Mule XML fragments.

Flow bodies are cut out of whole configuration files by text search, so they
are rarely well-formed documents on their own. Instead of a strict XML parser
this module walks the raw text and yields open, close and self-closing tag
events with their attributes. Comments, CDATA sections, processing
instructions and declarations are skipped as opaque spans.
"""
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

TAG_NAME_PATTERN = re.compile(r"[A-Za-z_][\w:.\-]*")
ATTRIBUTE_PATTERN = re.compile(r"""([\w:.\-]+)\s*=\s*(?:"([^"]*)"|'([^']*)')""")

# Opaque spans: (opening marker, closing marker)
_OPAQUE_SPANS = (
    ("<!--", "-->"),
    ("<![CDATA[", "]]>"),
    ("<?", "?>"),
)


class TagEventKind(Enum):
    OPEN = "open"
    CLOSE = "close"
    SELF_CLOSE = "self-close"


@dataclass
class TagEvent:
    kind: TagEventKind
    name: str
    attributes: Dict[str, str] = field(default_factory=dict)

    @property
    def self_closing(self) -> bool:
        return self.kind == TagEventKind.SELF_CLOSE

    @property
    def is_opening(self) -> bool:
        return self.kind in (TagEventKind.OPEN, TagEventKind.SELF_CLOSE)


def parse_attributes(segment: Optional[str]) -> Dict[str, str]:
    """
    Extracts `key="value"` and `key='value'` pairs from a tag's attribute segment.

    Namespaced keys such as `doc:name` are kept verbatim. When a key repeats,
    the last value wins.

    Args:
        segment (Optional[str]): The text between the tag name and the closing `>`.

    Returns:
        Dict[str, str]: Attribute names mapped to their raw (unescaped) values.
    """
    attributes: Dict[str, str] = {}
    if not segment:
        return attributes
    for match in ATTRIBUTE_PATTERN.finditer(segment):
        double_quoted, single_quoted = match.group(2), match.group(3)
        attributes[match.group(1)] = double_quoted if double_quoted is not None else single_quoted
    return attributes


def find_tag_end(text: str, start: int) -> int:
    """
    Returns the index of the `>` closing the tag that starts at `start`,
    ignoring any `>` inside quoted attribute values, or -1 if the tag never ends.
    """
    quote = None
    for index in range(start, len(text)):
        char = text[index]
        if quote:
            if char == quote:
                quote = None
        elif char in ('"', "'"):
            quote = char
        elif char == ">":
            return index
    return -1


class TagScanner:
    """
    Iterator over the tag events of a markup string.

    Each scanner owns its cursor, so independent scans never share state.
    Scanning stops quietly at the first unterminated tag.
    """

    def __init__(self, text: Optional[str]) -> None:
        self.text = text or ""
        self.position = 0

    def __iter__(self) -> Iterator[TagEvent]:
        return self

    def __next__(self) -> TagEvent:
        event = self._next_event()
        if event is None:
            raise StopIteration
        return event

    def _skip_opaque_span(self, start: int) -> Optional[int]:
        """Returns the index after an opaque span starting at `start`, or None if there is none."""
        text = self.text
        for opener, closer in _OPAQUE_SPANS:
            if text.startswith(opener, start):
                end = text.find(closer, start + len(opener))
                return len(text) if end == -1 else end + len(closer)
        if text.startswith("<!", start):
            # DOCTYPE and other declarations
            end = find_tag_end(text, start + 2)
            return len(text) if end == -1 else end + 1
        return None

    def _next_event(self) -> Optional[TagEvent]:
        text = self.text
        while self.position < len(text):
            start = text.find("<", self.position)
            if start == -1:
                self.position = len(text)
                return None

            after_span = self._skip_opaque_span(start)
            if after_span is not None:
                self.position = after_span
                continue

            end = find_tag_end(text, start + 1)
            if end == -1:
                logger.debug(f"Unterminated tag at offset {start}; stopping scan.")
                self.position = len(text)
                return None
            self.position = end + 1

            inner = text[start + 1:end]
            closing = inner.startswith("/")
            if closing:
                inner = inner[1:]

            name_match = TAG_NAME_PATTERN.match(inner.lstrip())
            if not name_match:
                # A stray '<' in text content or a tag without a name.
                continue
            name = name_match.group(0).strip().lower()

            if closing:
                return TagEvent(TagEventKind.CLOSE, name)

            rest = inner.lstrip()[name_match.end():]
            self_closing = rest.rstrip().endswith("/")
            if self_closing:
                rest = rest.rstrip()[:-1]
            kind = TagEventKind.SELF_CLOSE if self_closing else TagEventKind.OPEN
            return TagEvent(kind, name, parse_attributes(rest))
        return None


def scan_tags(text: Optional[str]) -> List[TagEvent]:
    """Scans `text` and returns all tag events in document order. Empty input yields []."""
    if not text:
        return []
    return list(TagScanner(text))
