"""Streaming XML primitives shared by the result codecs.

`XmlWriter` emits elements as they are visited, `XmlCursor` hands back
start/end events one at a time. Neither builds a whole document in memory,
so a session with thousands of packages can be written and read back in
bounded space.

Character data is passed through `escape_unsafe` on the way out and
`unescape_unsafe` on the way in, so any `str`, including control characters
and CR, round-trips through a well-formed document.
"""

from __future__ import annotations

import io
import re
import xml.etree.ElementTree as ET
from collections import deque
from typing import IO, Any, Deque, List, Mapping, Optional, Tuple
from xml.sax.saxutils import XMLGenerator

from cts_harness.errors import MalformedResultError

START_TAG = "start_tag"
END_TAG = "end_tag"
END_DOCUMENT = "end_document"

DEFAULT_CHUNK_SIZE = 64 * 1024

_INDENT = "  "

# Code points XML 1.0 cannot carry, plus CR, which parsers normalize to LF.
# Each is written as `\uXXXX`. A backslash that already starts such a
# sequence is escaped too, so decoding is exact.
_UNSAFE_RE = re.compile(
    r"[\x00-\x08\x0b\x0c\r\x0e-\x1f\ud800-\udfff\ufffe\uffff]|\\(?=u[0-9a-fA-F]{4})"
)
_ESCAPE_RE = re.compile(r"\\u([0-9a-fA-F]{4})")


def escape_unsafe(value: str) -> str:
    """Make `value` safe to store in XML text or an attribute."""
    return _UNSAFE_RE.sub(lambda m: f"\\u{ord(m.group()):04x}", value)


def unescape_unsafe(value: str) -> str:
    """Reverse `escape_unsafe`."""
    return _ESCAPE_RE.sub(lambda m: chr(int(m.group(1), 16)), value)


class XmlWriter:
    def __init__(self, out: IO[Any], *, encoding: str = "utf-8") -> None:
        self._gen = XMLGenerator(out, encoding=encoding, short_empty_elements=True)
        # One entry per open element: whether it has child elements.
        self._open: List[bool] = []
        self._wrote_element = False

    def start_document(self) -> None:
        self._gen.startDocument()

    def start(self, tag: str, attrs: Optional[Mapping[str, Optional[str]]] = None) -> None:
        if self._open:
            self._open[-1] = True
        if self._wrote_element:
            self._gen.ignorableWhitespace("\n" + _INDENT * len(self._open))
        kept = {k: escape_unsafe(v) for k, v in (attrs or {}).items() if v is not None}
        self._gen.startElement(tag, kept)
        self._open.append(False)
        self._wrote_element = True

    def text(self, content: str) -> None:
        self._gen.characters(escape_unsafe(content))

    def end(self, tag: str) -> None:
        if not self._open:
            raise ValueError(f"end({tag!r}) without a matching start")
        has_children = self._open.pop()
        if has_children:
            self._gen.ignorableWhitespace("\n" + _INDENT * len(self._open))
        self._gen.endElement(tag)

    def end_document(self) -> None:
        if self._open:
            raise ValueError(f"{len(self._open)} element(s) still open at end of document")
        self._gen.ignorableWhitespace("\n")
        self._gen.endDocument()


class XmlCursor:
    """Forward-only pull cursor over an XML byte or text stream.

    The cursor starts before the first event; call `next()` or `next_tag()`
    to move it. Components that parse one element expect the cursor to sit
    on that element's start tag and leave it on the matching end tag, so a
    parent loop can keep calling `next()` afterwards.
    """

    def __init__(self, stream: IO[Any], *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self._stream = stream
        self._chunk_size = chunk_size
        self._parser = ET.XMLPullParser(events=("start", "end"))
        self._events: Deque[Tuple[str, ET.Element]] = deque()
        self._open: List[ET.Element] = []
        self._eof = False
        self.event: Optional[str] = None
        self._element: Optional[ET.Element] = None

    @classmethod
    def from_string(cls, text: str) -> "XmlCursor":
        return cls(io.StringIO(text))

    @property
    def name(self) -> Optional[str]:
        return None if self._element is None else self._element.tag

    @property
    def text(self) -> Optional[str]:
        """Character content of the current element; complete only on its end tag."""
        if self._element is None or self._element.text is None:
            return None
        return unescape_unsafe(self._element.text)

    def attr(self, key: str) -> Optional[str]:
        value = None if self._element is None else self._element.get(key)
        return None if value is None else unescape_unsafe(value)

    def at_start(self, tag: str) -> bool:
        return self.event == START_TAG and self.name == tag

    def at_end(self, tag: str) -> bool:
        return self.event == END_TAG and self.name == tag

    def next(self) -> str:
        if self.event == END_DOCUMENT:
            return END_DOCUMENT
        self._release_current()
        while not self._events:
            if self._eof:
                self.event = END_DOCUMENT
                self._element = None
                return END_DOCUMENT
            self._fill()

        kind, element = self._events.popleft()
        if kind == "start":
            self.event = START_TAG
            self._open.append(element)
        else:
            self.event = END_TAG
            self._open.pop()
        self._element = element
        return self.event

    def next_tag(self) -> str:
        """Advance to the next start tag (or the end of the document)."""
        while True:
            event = self.next()
            if event in (START_TAG, END_DOCUMENT):
                return event

    def _release_current(self) -> None:
        # Detach finished elements from their parent so memory stays bounded.
        if self.event == END_TAG and self._element is not None and self._open:
            parent = self._open[-1]
            parent.remove(self._element)

    def _fill(self) -> None:
        chunk = self._stream.read(self._chunk_size)
        try:
            if chunk:
                self._parser.feed(chunk)
            else:
                self._eof = True
                self._parser.close()
            # Errors from feed() are queued and only raised while reading events.
            self._events.extend(self._parser.read_events())
        except ET.ParseError as e:
            raise MalformedResultError(f"invalid XML: {e}") from e
