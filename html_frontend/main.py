"""
Main orchestrator for the HTML front-end.

Wires the pipeline for one document:

  bytes → CloseShieldStream → EventProducer (lenient parser)
        → FilteredRouter ─┬→ BodyProjector → XHTMLNormalizer → DowngradeHandler → sink
                          ├→ TitleExtractor   → metadata[TITLE]
                          └→ MetaTagExtractor → metadata[name / http-equiv]

Everything is built fresh per call, so one HTMLFrontend can be reused for
any number of documents.
"""

import io
import warnings
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .collectors import TitleExtractor, MetaTagExtractor
from .handlers import EventHandler, TeeHandler
from .matching import parse_selector
from .metadata import Metadata, CONTENT_ENCODING
from .producers import EventProducer, get_event_producer
from .routing import FilteredRouter, Binding
from .schemas import ParseOptions, ParseResult
from .sinks import BodyContentHandler, TreeBuilderHandler
from .streams import CloseShieldStream
from .xhtml import BodyProjector, XHTMLNormalizer, DowngradeHandler
from .logger import get_module_logger, setup_logger

logger = get_module_logger("main")

# Document regions routed to each handler
BODY_SELECTOR = "/HTML/BODY//node()"
TITLE_SELECTOR = "/HTML/HEAD/TITLE//node()"
META_SELECTOR = "/HTML/HEAD/META//node()"


class HTMLFrontend:
    """
    Metadata-extracting HTML parser front-end.

    Hands the raw bytes to a lenient parser, then fans its event stream out:
    1. BodyProjector: body content, normalized to XHTML, into the caller's sink
    2. TitleExtractor: the document title into the metadata store
    3. MetaTagExtractor: <meta> name/http-equiv values into the metadata store
    """

    def __init__(
        self,
        producer: Optional[EventProducer] = None,
        log_level: int = None
    ):
        if log_level is not None:
            setup_logger(level=log_level)

        # None means "pick from ParseOptions.backend on every call"
        self.producer = producer

    def parse(
        self,
        stream: BinaryIO,
        handler: EventHandler,
        metadata: Metadata,
        options: Optional[ParseOptions] = None
    ) -> None:
        """
        Parse one HTML document.

        Args:
            stream: Binary input stream.  It is never closed; the caller keeps it.
            handler: Sink for the normalized output events
            metadata: Store receiving the title and meta values.  Its
                      Content-Encoding value, if any, is used as encoding hint.
            options: Per-call options.  Omitting them is deprecated.

        Raises:
            Any fault from the stream, the parser or a handler, unchanged.
            Output and metadata written before the fault are kept.
        """
        if options is None:
            warnings.warn(
                "HTMLFrontend.parse() without options is deprecated; pass ParseOptions()",
                DeprecationWarning,
                stacklevel=2
            )
            options = ParseOptions()

        shielded = CloseShieldStream(stream)

        # Explicit option first, then whatever the caller already knows
        encoding = options.encoding or metadata.get(CONTENT_ENCODING)

        output = XHTMLNormalizer(DowngradeHandler(handler), metadata)
        router = self._build_router(output, metadata)
        producer = self.producer or get_event_producer(options)

        logger.debug(f"Parsing with {type(producer).__name__} (encoding hint: {encoding})")
        try:
            producer.produce(shielded, router, encoding=encoding)
        finally:
            shielded.close()

        logger.info(f"Parsed document: {len(metadata)} metadata field(s)")

    def _build_router(self, output: EventHandler, metadata: Metadata) -> FilteredRouter:
        # Binding order matters: the body projector's synthesized head reads
        # the metadata the extractors stored for earlier events
        return FilteredRouter([
            Binding(BodyProjector(output), parse_selector(BODY_SELECTOR)),
            Binding(TitleExtractor(metadata), parse_selector(TITLE_SELECTOR)),
            Binding(MetaTagExtractor(metadata), parse_selector(META_SELECTOR)),
        ])


def _collect(stream: BinaryIO, options: ParseOptions) -> ParseResult:
    metadata = Metadata()
    text = BodyContentHandler()
    tree = TreeBuilderHandler()
    HTMLFrontend().parse(stream, TeeHandler(text, tree), metadata, options)
    return ParseResult(metadata=metadata.to_dict(), text=str(text), xhtml=tree.to_string())


def parse_html(html: Union[bytes, str], options: Optional[ParseOptions] = None) -> ParseResult:
    """Convenience function to parse an HTML document held in memory."""
    options = options or ParseOptions()
    if isinstance(html, str):
        # Already decoded: re-encode and tell the parser exactly how
        html = html.encode("utf-8")
        options = options.model_copy(update={"encoding": "utf-8"})
    return _collect(io.BytesIO(html), options)


def parse_html_file(file_path: Union[str, Path], options: Optional[ParseOptions] = None) -> ParseResult:
    """Convenience function to parse an HTML file."""
    with open(Path(file_path), "rb") as stream:
        return _collect(stream, options or ParseOptions())
