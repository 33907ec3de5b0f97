"""
HTML front-end

Turns (possibly malformed) HTML bytes into a normalized XHTML event stream and
extracts document metadata along the way.
- Producers: lenient parsers (html5lib, lxml, html.parser) emitting events
- Router: fans one event stream out to handlers by element path
- Extractors: title and <meta> values into a Metadata store
- XHTML stages: body projection, document wrapper, namespace downgrade

Public API surface:
  Facade               — HTMLFrontend, parse_html, parse_html_file
  Events & options     — DocumentStart, DocumentEnd, ElementStart, ElementEnd,
                         Characters, ParseOptions, ParseResult
  Metadata             — Metadata, TITLE, CONTENT_ENCODING, CONTENT_TYPE
  Routing              — Selector, parse_selector, FilteredRouter, Binding
  Handlers & sinks     — EventHandler, TeeHandler, TextCollector, TitleExtractor,
                         MetaTagExtractor, EventRecorder, WriteOutHandler,
                         BodyContentHandler, TreeBuilderHandler
  Error types          — HTMLFrontendError and subclasses
"""

# --- Facade ---
from .main import HTMLFrontend, parse_html, parse_html_file

# --- Data models ---
from .schemas import (
    StructuralEvent, DocumentStart, DocumentEnd, ElementStart, ElementEnd,
    Characters, ParseOptions, ParseResult,
)
from .metadata import Metadata, TITLE, CONTENT_ENCODING, CONTENT_TYPE, CONTENT_LANGUAGE

# --- Routing and handlers ---
from .matching import Selector, parse_selector
from .routing import FilteredRouter, Binding
from .handlers import EventHandler, TeeHandler
from .collectors import TextCollector, TitleExtractor, MetaTagExtractor
from .sinks import EventRecorder, WriteOutHandler, BodyContentHandler, TreeBuilderHandler
from .producers import EventProducer, SoupEventProducer, LxmlEventProducer

# --- Exceptions (callers should catch these for error handling) ---
from .exceptions import (
    HTMLFrontendError, EventStreamError, DowngradeError,
    SelectorError, ConfigurationError,
)

__version__ = "0.3.0"
__all__ = [
    "HTMLFrontend",
    "parse_html",
    "parse_html_file",
    "StructuralEvent",
    "DocumentStart",
    "DocumentEnd",
    "ElementStart",
    "ElementEnd",
    "Characters",
    "ParseOptions",
    "ParseResult",
    "Metadata",
    "TITLE",
    "CONTENT_ENCODING",
    "CONTENT_TYPE",
    "CONTENT_LANGUAGE",
    "Selector",
    "parse_selector",
    "FilteredRouter",
    "Binding",
    "EventHandler",
    "TeeHandler",
    "TextCollector",
    "TitleExtractor",
    "MetaTagExtractor",
    "EventRecorder",
    "WriteOutHandler",
    "BodyContentHandler",
    "TreeBuilderHandler",
    "EventProducer",
    "SoupEventProducer",
    "LxmlEventProducer",
    "HTMLFrontendError",
    "EventStreamError",
    "DowngradeError",
    "SelectorError",
    "ConfigurationError",
]
