"""
Output sinks for the normalized event stream.

Any EventHandler can be passed to HTMLFrontend.parse() as the output sink;
these cover the common needs: plain text, body-only text, an lxml tree /
serialized markup, and a raw event log.
"""

import re
from typing import Optional

from lxml import etree

from .handlers import EventHandler
from .matching import parse_selector
from .routing import FilteredRouter, Binding
from .schemas import StructuralEvent, ElementStart, ElementEnd, Characters

XML_NS = "http://www.w3.org/XML/1998/namespace"

# Characters XML 1.0 cannot carry; lenient HTML parsing lets them through
XML_INVALID_CHARS = re.compile("[^\x09\x0A\x0D\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")


class EventRecorder(EventHandler):
    """Keeps every event it receives, in order."""

    def __init__(self):
        self.events: list[StructuralEvent] = []

    def handle(self, event: StructuralEvent) -> None:
        self.events.append(event)


class WriteOutHandler(EventHandler):
    """Concatenates the text of every Characters event."""

    def __init__(self):
        self._chunks: list[str] = []

    def handle(self, event: StructuralEvent) -> None:
        if isinstance(event, Characters):
            self._chunks.append(event.text)

    def __str__(self) -> str:
        return "".join(self._chunks)


class BodyContentHandler(EventHandler):
    """
    Collects only the text inside html/body of the output stream.

    The synthesized title and meta elements in the head are skipped.
    """

    BODY_TEXT = parse_selector("/html/body//text()")

    def __init__(self):
        self.writer = WriteOutHandler()
        self._router = FilteredRouter([Binding(self.writer, self.BODY_TEXT)])

    def handle(self, event: StructuralEvent) -> None:
        self._router.handle(event)

    def __str__(self) -> str:
        return str(self.writer)


class TreeBuilderHandler(EventHandler):
    """Builds an lxml element tree from the event stream."""

    def __init__(self):
        self._builder = etree.TreeBuilder()
        self.root: Optional[etree._Element] = None

    def handle(self, event: StructuralEvent) -> None:
        if isinstance(event, ElementStart):
            attributes = {}
            for key, value in event.attributes:
                if key.startswith("xml:"):
                    key = f"{{{XML_NS}}}{key[4:]}"
                elif ":" in key:
                    continue
                attributes[key] = _xml_safe(value)
            self._builder.start(self._tag(event.name, event.namespace), attributes)
        elif isinstance(event, ElementEnd):
            element = self._builder.end(self._tag(event.name, event.namespace))
            if element.getparent() is None:
                self.root = element
        elif isinstance(event, Characters):
            text = _xml_safe(event.text)
            if text:
                self._builder.data(text)

    def to_string(self, method: str = "xml") -> str:
        """Serialize the built tree ("xml" or "html"); empty if nothing was built."""
        if self.root is None:
            return ""
        return etree.tostring(self.root, encoding="unicode", method=method)

    @staticmethod
    def _tag(name: str, namespace: str) -> str:
        return f"{{{namespace}}}{name}" if namespace else name


def _xml_safe(text: str) -> str:
    """Drop control characters lxml refuses to put in a tree."""
    return XML_INVALID_CHARS.sub("", text)
