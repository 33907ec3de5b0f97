"""
Metadata extractors.

These handlers sit behind a FilteredRouter, so they only ever see the events
of the document region their selector picks out (the TITLE subtree, or a META
element).  Each keeps just the state it needs and writes its findings into
the caller's Metadata store.
"""

from functools import partial
from typing import Callable

from .handlers import EventHandler
from .metadata import Metadata, TITLE
from .schemas import StructuralEvent, DocumentEnd, ElementStart, ElementEnd, Characters


class TextCollector(EventHandler):
    """
    Accumulates text and hands it to a callback at the end of its scope.

    The scope is the outermost element this collector receives: its start
    clears the buffer and its end fires ``on_complete``.  Elements nested
    inside it only move the depth counter, their text is kept.
    """

    def __init__(self, on_complete: Callable[[str], None]):
        self.on_complete = on_complete
        self._chunks: list[str] = []
        self._depth = 0

    @property
    def text(self) -> str:
        """Text accumulated so far in the current scope."""
        return "".join(self._chunks)

    def handle(self, event: StructuralEvent) -> None:
        if isinstance(event, ElementStart):
            if self._depth == 0:
                self._chunks = []
            self._depth += 1
        elif isinstance(event, Characters):
            self._chunks.append(event.text)
        elif isinstance(event, ElementEnd):
            # Child-axis selectors can deliver an end without its start
            if self._depth > 0:
                self._depth -= 1
            if self._depth == 0:
                self._complete()
        elif isinstance(event, DocumentEnd):
            # Text-only selectors never deliver an enclosing end event
            if self._depth == 0 and self._chunks:
                self._complete()

    def _complete(self) -> None:
        text = self.text
        self._chunks = []
        self.on_complete(text)


class TitleExtractor(TextCollector):
    """Stores the collected TITLE text under the TITLE metadata name."""

    def __init__(self, metadata: Metadata):
        super().__init__(partial(metadata.set, TITLE))


class MetaTagExtractor(EventHandler):
    """
    Copies <meta> tags into the metadata store.

    http-equiv/content and name/content pairs are both recorded, so a tag
    carrying both attributes produces two entries.
    """

    def __init__(self, metadata: Metadata):
        self.metadata = metadata

    def handle(self, event: StructuralEvent) -> None:
        if not isinstance(event, ElementStart):
            return

        content = event.get("content")
        http_equiv = event.get("http-equiv")
        if http_equiv:
            self.metadata.set(http_equiv, content)
        name = event.get("name")
        if name:
            self.metadata.set(name, content)
