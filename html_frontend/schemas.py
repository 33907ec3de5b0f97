"""
Pydantic schemas defining the contracts between stages.

StructuralEvent: one unit of the streaming markup representation passed from
the lenient parser through the router to every handler and sink.
ParseOptions: per-call configuration of the front-end.
ParseResult: output of the convenience functions in main.py.

Data flow through the pipeline:
  EventProducer → StructuralEvent stream → FilteredRouter → handlers
  BodyProjector → XHTMLNormalizer → DowngradeHandler → caller's sink
"""

import os
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Structural events ---
# Events are immutable so one instance can be fanned out to several handlers
# without any of them being able to change what the others see.

class StructuralEvent(BaseModel):
    """Base class of every event in the stream."""
    model_config = ConfigDict(frozen=True)


class DocumentStart(StructuralEvent):
    """Start of the document. Always the first event."""


class DocumentEnd(StructuralEvent):
    """End of the document. Always the last event of a complete stream."""


class ElementStart(StructuralEvent):
    """An element was opened."""
    name: str
    # Ordered (name, value) pairs, as they appeared in the markup
    attributes: tuple[tuple[str, str], ...] = ()
    namespace: str = ""

    def get(self, name: str) -> Optional[str]:
        """Return the value of attribute *name* (case-insensitive), or None."""
        wanted = name.lower()
        for key, value in self.attributes:
            if key.lower() == wanted:
                return value
        return None


class ElementEnd(StructuralEvent):
    """An element was closed."""
    name: str
    namespace: str = ""


class Characters(StructuralEvent):
    """A chunk of text content."""
    text: str


# --- Configuration ---

BackendName = Literal["html5lib", "lxml", "html.parser"]


class ParseOptions(BaseModel):
    """Options for a single HTMLFrontend.parse() call."""
    encoding: Optional[str] = None      # Hint only; detection stays with the parser
    backend: BackendName = "html5lib"   # Which lenient parser produces the events
    chunk_size: int = Field(default=65536, gt=0)  # Read size for streaming backends

    @classmethod
    def from_env(cls) -> "ParseOptions":
        """
        Build options from environment variables.

        HTML_FRONTEND_BACKEND, HTML_FRONTEND_ENCODING and
        HTML_FRONTEND_CHUNK_SIZE override the defaults when set.
        """
        values = {}
        if os.getenv("HTML_FRONTEND_BACKEND"):
            values["backend"] = os.getenv("HTML_FRONTEND_BACKEND")
        if os.getenv("HTML_FRONTEND_ENCODING"):
            values["encoding"] = os.getenv("HTML_FRONTEND_ENCODING")
        if os.getenv("HTML_FRONTEND_CHUNK_SIZE"):
            values["chunk_size"] = os.getenv("HTML_FRONTEND_CHUNK_SIZE")
        return cls(**values)


# --- Convenience output ---

class ParseResult(BaseModel):
    """Output from the parse_html() helpers."""
    metadata: dict[str, list[str]] = Field(default_factory=dict)
    text: str = ""      # Body text only, head-region text excluded
    xhtml: str = ""     # Serialized XHTML view of the document
