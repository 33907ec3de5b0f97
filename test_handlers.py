"""
Tests for the individual pipeline stages: extractors, XHTML stages, sinks,
the metadata store, the stream wrapper and the producers.
"""

import io

import pytest
from pydantic import ValidationError

from html_frontend import (
    Metadata, TITLE, CONTENT_LANGUAGE, ParseOptions,
    TextCollector, TitleExtractor, MetaTagExtractor,
    EventRecorder, WriteOutHandler, BodyContentHandler, TreeBuilderHandler,
    SoupEventProducer, LxmlEventProducer,
    DocumentStart, DocumentEnd, ElementStart, ElementEnd, Characters,
    DowngradeError, ConfigurationError,
)
from html_frontend.producers import get_event_producer
from html_frontend.streams import CloseShieldStream
from html_frontend.xhtml import XHTML_NS, BodyProjector, XHTMLNormalizer, DowngradeHandler


def _feed(handler, events):
    for event in events:
        handler.handle(event)


# --- TextCollector / TitleExtractor ---

def test_text_collector_concatenates_chunks_across_nested_markup():
    completed = []
    collector = TextCollector(completed.append)

    _feed(collector, [
        ElementStart(name="title"),
        Characters(text="Hello "),
        ElementStart(name="b"),
        Characters(text="big"),
        ElementEnd(name="b"),
        Characters(text="  world"),
    ])
    assert completed == []
    assert collector.text == "Hello big  world"

    collector.handle(ElementEnd(name="title"))

    assert completed == ["Hello big  world"]
    assert collector.text == ""


def test_text_collector_resets_on_new_scope():
    completed = []
    collector = TextCollector(completed.append)

    _feed(collector, [
        ElementStart(name="title"), Characters(text="one"), ElementEnd(name="title"),
        ElementStart(name="title"), Characters(text="two"), ElementEnd(name="title"),
    ])

    assert completed == ["one", "two"]


def test_text_collector_flushes_loose_text_at_document_end():
    completed = []
    collector = TextCollector(completed.append)

    _feed(collector, [DocumentStart(), Characters(text="a"), Characters(text="b"), DocumentEnd()])

    assert completed == ["ab"]


def test_text_collector_without_text_completes_empty():
    completed = []
    collector = TextCollector(completed.append)

    _feed(collector, [ElementStart(name="title"), ElementEnd(name="title"), DocumentEnd()])

    assert completed == [""]


def test_title_extractor_last_title_wins():
    metadata = Metadata()
    extractor = TitleExtractor(metadata)

    _feed(extractor, [
        ElementStart(name="title"), Characters(text="First"), ElementEnd(name="title"),
        ElementStart(name="title"), Characters(text="Second"), ElementEnd(name="title"),
    ])

    assert metadata.get(TITLE) == "Second"
    assert metadata.get_values(TITLE) == ["Second"]


# --- MetaTagExtractor ---

def _meta(*attributes):
    return ElementStart(name="meta", attributes=attributes)


def test_meta_extractor_stores_both_attributes():
    metadata = Metadata()

    MetaTagExtractor(metadata).handle(
        _meta(("http-equiv", "X-UA-Compatible"), ("name", "viewport"), ("content", "v"))
    )

    assert metadata.to_dict() == {"X-UA-Compatible": ["v"], "viewport": ["v"]}


def test_meta_extractor_attribute_lookup_is_case_insensitive():
    metadata = Metadata()

    MetaTagExtractor(metadata).handle(_meta(("NAME", "Author"), ("Content", "Ann")))

    # The key is stored exactly as written
    assert metadata.get("Author") == "Ann"
    assert "author" not in metadata


def test_meta_extractor_missing_content_stores_empty_value():
    metadata = Metadata()

    MetaTagExtractor(metadata).handle(_meta(("name", "generator")))

    assert "generator" in metadata
    assert metadata.get("generator") == ""


def test_meta_extractor_does_not_strip_values():
    metadata = Metadata()

    MetaTagExtractor(metadata).handle(_meta(("name", " spaced "), ("content", "  c  ")))

    assert metadata.get(" spaced ") == "  c  "


def test_meta_extractor_ignores_empty_names_and_other_events():
    metadata = Metadata()
    extractor = MetaTagExtractor(metadata)

    _feed(extractor, [
        _meta(("name", ""), ("http-equiv", ""), ("content", "x")),
        _meta(("charset", "utf-8")),
        Characters(text="name"),
        ElementEnd(name="meta"),
    ])

    assert len(metadata) == 0


# --- BodyProjector ---

def test_body_projector_filters_vocabulary():
    recorder = EventRecorder()
    projector = BodyProjector(recorder)

    _feed(projector, [
        DocumentStart(),
        ElementStart(name="body", attributes=(("onload", "x()"),)),
        ElementStart(name="MENU"),
        ElementStart(name="li"),
        ElementStart(name="span"),
        Characters(text="item"),
        ElementEnd(name="span"),
        ElementEnd(name="li"),
        ElementEnd(name="MENU"),
        ElementStart(name="a", attributes=(("HREF", "/x"), ("onclick", "evil()"))),
        Characters(text="link"),
        ElementEnd(name="a"),
        ElementStart(name="script"),
        Characters(text="alert(1)"),
        ElementStart(name="p"),
        ElementEnd(name="p"),
        ElementEnd(name="script"),
        ElementEnd(name="body"),
        DocumentEnd(),
    ])

    assert recorder.events == [
        DocumentStart(),
        ElementStart(name="ul"),
        ElementStart(name="li"),
        Characters(text="item"),
        ElementEnd(name="li"),
        ElementEnd(name="ul"),
        ElementStart(name="a", attributes=(("href", "/x"),)),
        Characters(text="link"),
        ElementEnd(name="a"),
        DocumentEnd(),
    ]


# --- XHTMLNormalizer ---

def test_normalizer_synthesizes_head_from_metadata():
    metadata = Metadata({TITLE: "T", "author": "A", CONTENT_LANGUAGE: "en"})
    recorder = EventRecorder()
    normalizer = XHTMLNormalizer(recorder, metadata)

    _feed(normalizer, [
        DocumentStart(),
        ElementStart(name="p"),
        Characters(text="x"),
        ElementEnd(name="p"),
        DocumentEnd(),
    ])

    def start(name, *attributes):
        return ElementStart(name=name, attributes=attributes, namespace=XHTML_NS)

    def end(name):
        return ElementEnd(name=name, namespace=XHTML_NS)

    assert recorder.events == [
        DocumentStart(),
        start("html", ("xml:lang", "en")),
        start("head"),
        start("title"), Characters(text="T"), end("title"),
        start("meta", ("name", "author"), ("content", "A")), end("meta"),
        start("meta", ("name", CONTENT_LANGUAGE), ("content", "en")), end("meta"),
        end("head"),
        start("body"),
        start("p"), Characters(text="x"), end("p"), Characters(text="\n"),
        end("body"),
        end("html"),
        DocumentEnd(),
    ]


def test_normalizer_writes_wrapper_for_empty_body():
    recorder = EventRecorder()

    _feed(XHTMLNormalizer(recorder, Metadata()), [DocumentStart(), DocumentEnd()])

    names = [e.name for e in recorder.events if isinstance(e, ElementStart)]
    assert names == ["html", "head", "title", "body"]
    assert not any(isinstance(e, Characters) for e in recorder.events)


# --- DowngradeHandler ---

def test_downgrade_strips_namespaces():
    recorder = EventRecorder()
    downgrade = DowngradeHandler(recorder)

    _feed(downgrade, [
        ElementStart(
            name="html",
            attributes=(("xml:lang", "en"), ("xlink:href", "#"), ("id", "top")),
            namespace=XHTML_NS,
        ),
        Characters(text="t"),
        ElementEnd(name="html", namespace=XHTML_NS),
    ])

    assert recorder.events == [
        ElementStart(name="html", attributes=(("lang", "en"), ("id", "top"))),
        Characters(text="t"),
        ElementEnd(name="html"),
    ]


def test_downgrade_rejects_foreign_namespace():
    downgrade = DowngradeHandler(EventRecorder())

    with pytest.raises(DowngradeError) as excinfo:
        downgrade.handle(ElementStart(name="svg", namespace="http://www.w3.org/2000/svg"))

    assert excinfo.value.namespace == "http://www.w3.org/2000/svg"


# --- Sinks ---

DOCUMENT = [
    DocumentStart(),
    ElementStart(name="html"),
    ElementStart(name="head"),
    ElementStart(name="title"), Characters(text="Head"), ElementEnd(name="title"),
    ElementEnd(name="head"),
    ElementStart(name="body"),
    ElementStart(name="p"), Characters(text="Body & soul"), ElementEnd(name="p"),
    ElementEnd(name="body"),
    ElementEnd(name="html"),
    DocumentEnd(),
]


def test_write_out_handler_collects_all_text():
    writer = WriteOutHandler()

    _feed(writer, DOCUMENT)

    assert str(writer) == "HeadBody & soul"


def test_body_content_handler_skips_head_text():
    body = BodyContentHandler()

    _feed(body, DOCUMENT)

    assert str(body) == "Body & soul"


def test_tree_builder_serializes():
    tree = TreeBuilderHandler()

    _feed(tree, DOCUMENT)

    assert tree.to_string() == (
        "<html><head><title>Head</title></head>"
        "<body><p>Body &amp; soul</p></body></html>"
    )


def test_tree_builder_keeps_namespaces():
    tree = TreeBuilderHandler()

    _feed(tree, [
        ElementStart(name="html", attributes=(("xml:lang", "en"),), namespace=XHTML_NS),
        ElementEnd(name="html", namespace=XHTML_NS),
    ])

    assert tree.root.tag == f"{{{XHTML_NS}}}html"
    assert tree.root.get("{http://www.w3.org/XML/1998/namespace}lang") == "en"


def test_tree_builder_without_events_is_empty():
    assert TreeBuilderHandler().to_string() == ""


def test_tree_builder_drops_characters_xml_cannot_hold():
    tree = TreeBuilderHandler()

    _feed(tree, [
        ElementStart(name="p", attributes=(("title", "x\x0by"),)),
        Characters(text="a\x01b\x0cc"),
        Characters(text="\x00"),
        ElementEnd(name="p"),
    ])

    assert tree.to_string() == '<p title="xy">abc</p>'


# --- Metadata ---

def test_metadata_set_overwrites_and_add_appends():
    metadata = Metadata()
    metadata.set("k", "a")
    metadata.add("k", "b")
    assert metadata.get_values("k") == ["a", "b"]

    metadata.set("k", "c")
    assert metadata.get_values("k") == ["c"]

    metadata.set("none", None)
    assert metadata.get("none") == ""
    assert metadata.get("missing", "fallback") == "fallback"

    metadata.remove("none")
    assert metadata.names() == ["k"]


def test_metadata_names_are_case_sensitive():
    metadata = Metadata({"Author": "x"})

    assert "Author" in metadata
    assert "author" not in metadata
    assert Metadata({"Author": "x"}) == metadata
    assert Metadata({"author": "x"}) != metadata


# --- CloseShieldStream ---

def test_close_shield_leaves_wrapped_stream_open():
    raw = io.BytesIO(b"abcdef")
    shielded = CloseShieldStream(raw)

    assert shielded.read(2) == b"ab"
    assert shielded.read() == b"cdef"
    shielded.close()

    assert shielded.closed
    assert not raw.closed
    with pytest.raises(ValueError):
        shielded.read()


def test_close_shield_supports_buffered_reads():
    shielded = CloseShieldStream(io.BytesIO(b"0123456789"))

    assert io.BufferedReader(shielded, buffer_size=4).read() == b"0123456789"


# --- Producers ---

def test_soup_producer_skips_comments_and_doctype():
    recorder = EventRecorder()
    html = b"<!DOCTYPE html><html><head></head><body><!-- hidden --><p>x</p></body></html>"

    SoupEventProducer("html5lib").produce(io.BytesIO(html), recorder)

    assert recorder.events[0] == DocumentStart()
    assert recorder.events[-1] == DocumentEnd()
    assert [e.text for e in recorder.events if isinstance(e, Characters)] == ["x"]
    starts = [e.name for e in recorder.events if isinstance(e, ElementStart)]
    ends = [e.name for e in recorder.events if isinstance(e, ElementEnd)]
    assert starts == ["html", "head", "body", "p"]
    assert sorted(starts) == sorted(ends)


def test_soup_producer_keeps_multi_valued_attributes_as_text():
    recorder = EventRecorder()

    SoupEventProducer("html.parser").produce(io.BytesIO(b'<p class="a b">x</p>'), recorder)

    assert recorder.events[1] == ElementStart(name="p", attributes=(("class", "a b"),))


def test_soup_producer_handles_deep_nesting():
    depth = 1500
    html = b"<div>" * depth + b"deep" + b"</div>" * depth
    recorder = EventRecorder()

    SoupEventProducer("html.parser").produce(io.BytesIO(html), recorder)

    assert Characters(text="deep") in recorder.events


def test_lxml_producer_emits_balanced_events():
    recorder = EventRecorder()

    LxmlEventProducer(chunk_size=4).produce(
        io.BytesIO(b"<html><body><p>one<br>two</p></body></html>"), recorder
    )

    starts = [e.name for e in recorder.events if isinstance(e, ElementStart)]
    assert starts == ["html", "body", "p", "br"]
    assert recorder.events[-1] == DocumentEnd()
    assert "".join(e.text for e in recorder.events if isinstance(e, Characters)) == "onetwo"


@pytest.mark.parametrize("backend, producer_type, features", [
    ("html5lib", SoupEventProducer, "html5lib"),
    ("html.parser", SoupEventProducer, "html.parser"),
    ("lxml", LxmlEventProducer, None),
])
def test_get_event_producer(backend, producer_type, features):
    producer = get_event_producer(ParseOptions(backend=backend))

    assert isinstance(producer, producer_type)
    if features:
        assert producer.features == features


def test_get_event_producer_rejects_unknown_backend():
    with pytest.raises(ConfigurationError):
        get_event_producer(ParseOptions.model_construct(backend="tagsoup", chunk_size=1))


# --- ParseOptions ---

def test_parse_options_validate_backend():
    with pytest.raises(ValidationError):
        ParseOptions(backend="tagsoup")
    with pytest.raises(ValidationError):
        ParseOptions(chunk_size=0)


def test_parse_options_from_env(monkeypatch):
    monkeypatch.setenv("HTML_FRONTEND_BACKEND", "lxml")
    monkeypatch.setenv("HTML_FRONTEND_ENCODING", "latin-1")
    monkeypatch.setenv("HTML_FRONTEND_CHUNK_SIZE", "1024")

    options = ParseOptions.from_env()

    assert options == ParseOptions(backend="lxml", encoding="latin-1", chunk_size=1024)


def test_parse_options_from_env_defaults(monkeypatch):
    for name in ("HTML_FRONTEND_BACKEND", "HTML_FRONTEND_ENCODING", "HTML_FRONTEND_CHUNK_SIZE"):
        monkeypatch.delenv(name, raising=False)

    assert ParseOptions.from_env() == ParseOptions()
