"""
Structural path selectors.

A Selector decides whether an event at a given element path belongs to the
document region a handler is interested in.  Selectors are written in a small
XPath subset:

    /HTML/BODY          the BODY element itself
    /HTML/BODY/node()   direct children of BODY (elements and text)
    /HTML/BODY/text()   text directly inside BODY
    /HTML/BODY//node()  BODY together with every node beneath it
    /HTML/BODY//text()  every text node beneath BODY

Names compare case-insensitively and "*" matches any element name.

Note that "//node()" keeps the anchor element: the META start event has to
reach the meta handler, and the TITLE end event is what tells the title
handler its text is complete.
"""

import re
from typing import Literal, Sequence

from pydantic import BaseModel, ConfigDict, field_validator

from .exceptions import SelectorError

# Element name or wildcard
SEGMENT_PATTERN = re.compile(r"^(\*|[A-Za-z_][\w.\-]*)$")

# Trailing node tests, longest first so "//node()" wins over "/node()"
_TAILS = (
    ("//node()", "subtree", "node"),
    ("//text()", "subtree", "text"),
    ("/node()", "child", "node"),
    ("/text()", "child", "text"),
)


class Selector(BaseModel):
    """Immutable selector over element paths. Safe to share between parses."""
    model_config = ConfigDict(frozen=True)

    segments: tuple[str, ...] = ()
    axis: Literal["self", "child", "subtree"] = "subtree"
    node_test: Literal["node", "text"] = "node"

    @field_validator("segments")
    @classmethod
    def _lowercase_segments(cls, segments: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(segment.lower() for segment in segments)

    def matches(self, path: Sequence[str], text: bool = False) -> bool:
        """
        Check whether an event at *path* is selected.

        Args:
            path: Open element names, outermost first.  For element events
                  the path ends with the element itself; for text events it
                  is the stack of elements enclosing the text.
            text: True when evaluating a text event

        Returns:
            True if the event belongs to the selected region
        """
        depth = len(self.segments)
        if len(path) < depth:
            return False
        for segment, name in zip(self.segments, path):
            if segment != "*" and segment != name.lower():
                return False

        if text:
            # A text node sits one level below the innermost open element
            if self.axis == "self":
                return False
            if self.axis == "child":
                return len(path) == depth
            return True

        if self.node_test == "text":
            return False
        if self.axis == "self":
            return len(path) == depth
        if self.axis == "child":
            return len(path) == depth + 1
        return True

    def __str__(self) -> str:
        base = "".join(f"/{segment}" for segment in self.segments)
        if self.axis == "self":
            return base
        separator = "//" if self.axis == "subtree" else "/"
        return f"{base}{separator}{self.node_test}()"


def parse_selector(expression: str) -> Selector:
    """
    Parse an absolute selector expression.

    Args:
        expression: e.g. "/HTML/HEAD/TITLE//node()"

    Returns:
        The immutable Selector

    Raises:
        SelectorError: if the expression is outside the supported subset
    """
    expr = expression.strip()
    if not expr.startswith("/"):
        raise SelectorError("Selector must be an absolute path", expression)

    axis, node_test = "self", "node"
    for suffix, tail_axis, tail_test in _TAILS:
        if expr.endswith(suffix):
            expr = expr[: -len(suffix)]
            axis, node_test = tail_axis, tail_test
            break

    segments = expr.split("/")[1:] if expr else []
    if axis == "self" and not segments:
        raise SelectorError("Selector does not name any element", expression)

    for segment in segments:
        if not SEGMENT_PATTERN.match(segment):
            raise SelectorError(
                f"Unsupported path segment: {segment!r}",
                expression,
                details={"segment": segment}
            )

    return Selector(segments=tuple(segments), axis=axis, node_test=node_test)
