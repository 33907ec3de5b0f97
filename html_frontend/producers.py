"""
Lenient-parser collaborators.

An EventProducer reads (possibly malformed) HTML bytes and pushes a
well-formed StructuralEvent stream into a handler.  Error correction, tag
inference and encoding sniffing all happen inside the third-party parser;
this module only adapts each parser's output to our events.

Backends:
  html5lib    : BeautifulSoup + html5lib, the full WHATWG algorithm.
                Always produces html/head/body.  Default.
  lxml        : libxml2's HTML parser driven through a SAX-style target,
                fed in chunks so events stream while the input is read.
                Empty input is an error here: libxml2 raises
                lxml.etree.XMLSyntaxError after DocumentStart.
  html.parser : BeautifulSoup + Python's built-in parser.  Least tolerant,
                and it does NOT synthesize html/head/body, so documents
                missing those tags yield no body projection or metadata.

Both BeautifulSoup backends turn empty input into an empty document
(DocumentStart, DocumentEnd and, for html5lib, the bare html/head/body).
"""

from abc import ABC, abstractmethod
from typing import BinaryIO, Optional

from bs4 import BeautifulSoup, Tag
from bs4.element import CData, PreformattedString
from lxml import etree

from .handlers import EventHandler
from .schemas import (
    ParseOptions, DocumentStart, DocumentEnd,
    ElementStart, ElementEnd, Characters,
)
from .exceptions import ConfigurationError
from .logger import get_module_logger

logger = get_module_logger("producers")


class EventProducer(ABC):
    """Abstract base class for lenient HTML parsers."""

    @abstractmethod
    def produce(
        self,
        stream: BinaryIO,
        handler: EventHandler,
        encoding: Optional[str] = None
    ) -> None:
        """
        Parse *stream* and push structural events into *handler*.

        Args:
            stream: Binary input.  Must be read, never closed.
            handler: Receives DocumentStart, the element/text events, DocumentEnd
            encoding: Optional character-encoding hint

        Raises:
            Whatever the parser or the handler raises, unchanged
        """
        pass


class SoupEventProducer(EventProducer):
    """Builds a BeautifulSoup tree, then walks it into events."""

    def __init__(self, features: str = "html5lib"):
        self.features = features

    def produce(
        self,
        stream: BinaryIO,
        handler: EventHandler,
        encoding: Optional[str] = None
    ) -> None:
        data = stream.read()
        # multi_valued_attributes=None keeps class="a b" as one string
        soup = BeautifulSoup(
            data,
            self.features,
            from_encoding=encoding,
            multi_valued_attributes=None,
        )
        logger.debug(
            f"{self.features} parsed {len(data)} bytes "
            f"(encoding: {soup.original_encoding or encoding or 'unknown'})"
        )

        handler.handle(DocumentStart())
        self._walk(soup, handler)
        handler.handle(DocumentEnd())

    def _walk(self, root: Tag, handler: EventHandler) -> None:
        # Iterative depth-first walk: deeply nested garbage must not hit
        # the recursion limit
        children = [iter(root.contents)]
        open_tags: list[Tag] = []

        while children:
            child = next(children[-1], None)
            if child is None:
                children.pop()
                if open_tags:
                    handler.handle(ElementEnd(name=open_tags.pop().name))
                continue

            if isinstance(child, Tag):
                attributes = tuple((str(key), str(value)) for key, value in child.attrs.items())
                handler.handle(ElementStart(name=child.name, attributes=attributes))
                open_tags.append(child)
                children.append(iter(child.contents))
            elif isinstance(child, PreformattedString) and not isinstance(child, CData):
                # Comments, doctypes, declarations, processing instructions
                continue
            else:
                handler.handle(Characters(text=str(child)))


class _SaxTarget:
    """lxml parser target translating callbacks into structural events."""

    def __init__(self, handler: EventHandler):
        self.handler = handler

    def start(self, tag, attrib):
        self.handler.handle(ElementStart(name=tag, attributes=tuple(attrib.items())))

    def end(self, tag):
        self.handler.handle(ElementEnd(name=tag))

    def data(self, data):
        self.handler.handle(Characters(text=data))

    def close(self):
        return None


class LxmlEventProducer(EventProducer):
    """
    Streams the input through lxml's HTML parser in fixed-size chunks.

    libxml2 refuses an empty document, so empty input propagates
    lxml.etree.XMLSyntaxError from parser.close().
    """

    def __init__(self, chunk_size: int = 65536):
        self.chunk_size = chunk_size

    def produce(
        self,
        stream: BinaryIO,
        handler: EventHandler,
        encoding: Optional[str] = None
    ) -> None:
        parser = etree.HTMLParser(target=_SaxTarget(handler), encoding=encoding)

        handler.handle(DocumentStart())
        total = 0
        while True:
            chunk = stream.read(self.chunk_size)
            if not chunk:
                break
            total += len(chunk)
            # Exceptions raised by the handler inside a callback are
            # re-raised here by lxml
            parser.feed(chunk)
        parser.close()
        logger.debug(f"lxml parsed {total} bytes")
        handler.handle(DocumentEnd())


def get_event_producer(options: ParseOptions) -> EventProducer:
    """
    Create the producer selected by *options.backend*.

    Raises:
        ConfigurationError: if the backend name is unknown
    """
    backend = options.backend
    if backend == "html5lib":
        return SoupEventProducer("html5lib")
    if backend == "html.parser":
        return SoupEventProducer("html.parser")
    if backend == "lxml":
        return LxmlEventProducer(chunk_size=options.chunk_size)
    raise ConfigurationError(
        f"Unknown parser backend: {backend!r}",
        details={"available": ["html5lib", "lxml", "html.parser"]}
    )
