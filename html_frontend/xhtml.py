"""
Body projection and XHTML output normalization.

Three stages sit between the router and the caller's sink:

  BodyProjector   — keeps the body elements we know how to represent,
                    renamed through SAFE_ELEMENTS, and drops scripts/styles.
  XHTMLNormalizer — puts the projected body inside a synthesized
                    html/head/title/body wrapper in the XHTML namespace.
  DowngradeHandler — strips namespaces again for sinks that expect plain
                    HTML element and attribute names.
"""

from typing import Optional

from .handlers import EventHandler
from .metadata import Metadata, TITLE, CONTENT_LANGUAGE
from .schemas import (
    StructuralEvent, DocumentStart, DocumentEnd,
    ElementStart, ElementEnd, Characters,
)
from .exceptions import DowngradeError

XHTML_NS = "http://www.w3.org/1999/xhtml"

# HTML body elements that survive projection, mapped to their XHTML name.
# Presentational synonyms collapse onto one canonical element.
SAFE_ELEMENTS = {
    "h1": "h1", "h2": "h2", "h3": "h3", "h4": "h4", "h5": "h5", "h6": "h6",
    "p": "p", "pre": "pre", "blockquote": "blockquote", "q": "q",
    "address": "address", "div": "div", "br": "br", "hr": "hr",
    "ul": "ul", "ol": "ol", "li": "li", "menu": "ul", "dir": "ul",
    "dl": "dl", "dt": "dt", "dd": "dd",
    "table": "table", "caption": "caption", "colgroup": "colgroup", "col": "col",
    "thead": "thead", "tbody": "tbody", "tfoot": "tfoot",
    "tr": "tr", "th": "th", "td": "td",
    "a": "a", "img": "img",
    "b": "b", "strong": "strong", "i": "i", "em": "em", "cite": "cite",
    "code": "code", "tt": "code", "kbd": "kbd", "samp": "samp", "var": "var",
    "sub": "sub", "sup": "sup",
}

# Attributes kept per (XHTML) element; everything else is dropped
SAFE_ATTRIBUTES = {
    "a": ("href", "name", "title", "rel"),
    "img": ("src", "alt", "title", "width", "height"),
    "th": ("colspan", "rowspan", "headers"),
    "td": ("colspan", "rowspan", "headers"),
    "col": ("span",),
    "colgroup": ("span",),
    "ol": ("start", "type"),
    "blockquote": ("cite",),
    "q": ("cite",),
}

# Elements dropped together with everything inside them
DISCARD_ELEMENTS = frozenset({
    "script", "style", "noscript", "template", "object", "applet",
    "embed", "frameset", "title",
})

# Block elements followed by a newline in the output, so text sinks keep
# paragraphs apart
ENDLINE_ELEMENTS = frozenset({
    "p", "h1", "h2", "h3", "h4", "h5", "h6", "div", "pre", "blockquote",
    "address", "ul", "ol", "li", "dl", "dt", "dd", "table", "thead",
    "tbody", "tfoot", "tr", "caption", "br", "hr",
})

# Namespaced attributes the downgrade step can express in plain HTML
DOWNGRADE_ATTRIBUTES = {
    "xml:lang": "lang",
}


class BodyProjector(EventHandler):
    """
    Projects body-subtree events onto the safe XHTML vocabulary.

    Unknown elements (html, head and body included) are unwrapped: their
    tags disappear but their content passes through.
    """

    def __init__(self, handler: EventHandler):
        self.handler = handler
        self._open: list[Optional[str]] = []  # Output name per open element, None if unwrapped
        self._discard_depth = 0

    def handle(self, event: StructuralEvent) -> None:
        if isinstance(event, (DocumentStart, DocumentEnd)):
            self.handler.handle(event)
        elif isinstance(event, ElementStart):
            name = event.name.lower()
            if self._discard_depth or name in DISCARD_ELEMENTS:
                self._discard_depth += 1
                return
            mapped = SAFE_ELEMENTS.get(name)
            self._open.append(mapped)
            if mapped:
                allowed = SAFE_ATTRIBUTES.get(mapped, ())
                attributes = tuple(
                    (key.lower(), value) for key, value in event.attributes
                    if key.lower() in allowed
                )
                self.handler.handle(ElementStart(name=mapped, attributes=attributes))
        elif isinstance(event, ElementEnd):
            if self._discard_depth:
                self._discard_depth -= 1
                return
            mapped = self._open.pop()
            if mapped:
                self.handler.handle(ElementEnd(name=mapped))
        elif isinstance(event, Characters):
            if not self._discard_depth:
                self.handler.handle(event)


class XHTMLNormalizer(EventHandler):
    """
    Wraps body content into a complete XHTML document.

    The html/head/title wrapper is written lazily, just before the first
    body content (or at document end for an empty body).  By then the head
    of the input has been seen, so the title and meta values collected into
    *metadata* can be written into the synthesized head.
    """

    def __init__(self, handler: EventHandler, metadata: Metadata):
        self.handler = handler
        self.metadata = metadata
        self._body_started = False

    def handle(self, event: StructuralEvent) -> None:
        if isinstance(event, DocumentStart):
            self.handler.handle(event)
        elif isinstance(event, DocumentEnd):
            self._start_body()
            self._end("body")
            self._end("html")
            self.handler.handle(event)
        elif isinstance(event, ElementStart):
            self._start_body()
            self._start(event.name, event.attributes)
        elif isinstance(event, ElementEnd):
            self._end(event.name)
            if event.name in ENDLINE_ELEMENTS:
                self._characters("\n")
        elif isinstance(event, Characters):
            self._start_body()
            self._characters(event.text)

    def _start_body(self) -> None:
        if self._body_started:
            return
        self._body_started = True

        language = self.metadata.get(CONTENT_LANGUAGE)
        self._start("html", (("xml:lang", language),) if language else ())
        self._start("head")

        self._start("title")
        self._characters(self.metadata.get(TITLE, ""))
        self._end("title")

        for name in self.metadata.names():
            if name == TITLE:
                continue
            for value in self.metadata.get_values(name):
                self._start("meta", (("name", name), ("content", value)))
                self._end("meta")

        self._end("head")
        self._start("body")

    def _start(self, name: str, attributes: tuple = ()) -> None:
        self.handler.handle(ElementStart(name=name, attributes=attributes, namespace=XHTML_NS))

    def _end(self, name: str) -> None:
        self.handler.handle(ElementEnd(name=name, namespace=XHTML_NS))

    def _characters(self, text: str) -> None:
        if text:
            self.handler.handle(Characters(text=text))


class DowngradeHandler(EventHandler):
    """
    Downgrades XHTML events to plain HTML events.

    The XHTML namespace is removed from elements, prefixed attributes are
    renamed through DOWNGRADE_ATTRIBUTES or dropped.  Elements from any other
    namespace have no plain-HTML form and raise DowngradeError.
    """

    def __init__(self, handler: EventHandler):
        self.handler = handler

    def handle(self, event: StructuralEvent) -> None:
        if isinstance(event, ElementStart):
            self._check_namespace(event.name, event.namespace)
            attributes = []
            for key, value in event.attributes:
                if ":" in key:
                    key = DOWNGRADE_ATTRIBUTES.get(key)
                    if key is None:
                        continue
                attributes.append((key, value))
            self.handler.handle(ElementStart(name=event.name, attributes=tuple(attributes)))
        elif isinstance(event, ElementEnd):
            self._check_namespace(event.name, event.namespace)
            self.handler.handle(ElementEnd(name=event.name))
        else:
            self.handler.handle(event)

    def _check_namespace(self, name: str, namespace: str) -> None:
        if namespace not in ("", XHTML_NS):
            raise DowngradeError(
                f"Cannot downgrade element {name!r} from namespace {namespace!r}",
                namespace=namespace,
                details={"element": name}
            )
