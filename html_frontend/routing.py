"""
Filtered fan-out of one event stream into several handlers.

The FilteredRouter tracks the path of open elements and, for every event,
forwards it to each bound handler whose selector accepts the current path.
Handlers never see each other; the only ordering guarantee between them is
the order the bindings were given in.
"""

from dataclasses import dataclass

from .handlers import EventHandler
from .matching import Selector
from .schemas import (
    StructuralEvent, DocumentStart, DocumentEnd,
    ElementStart, ElementEnd, Characters,
)
from .exceptions import EventStreamError
from .logger import get_module_logger

logger = get_module_logger("routing")


@dataclass(frozen=True)
class Binding:
    """A handler paired with the selector that gates its events."""
    handler: EventHandler
    selector: Selector


class FilteredRouter(EventHandler):
    """
    Routes structural events to handlers by element path.

    Document start/end reach every binding.  Element and text events reach
    a binding only when its selector matches.  If a handler raises, the
    exception propagates at once and the remaining bindings do not see that
    event.
    """

    def __init__(self, bindings: list[Binding]):
        self.bindings = list(bindings)
        self._path: list[str] = []

    @property
    def path(self) -> tuple[str, ...]:
        """Names of the currently open elements, outermost first."""
        return tuple(self._path)

    def handle(self, event: StructuralEvent) -> None:
        if isinstance(event, (DocumentStart, DocumentEnd)):
            if isinstance(event, DocumentEnd) and self._path:
                raise EventStreamError(
                    f"Document ended with {len(self._path)} open element(s)",
                    path=self.path
                )
            for binding in self.bindings:
                binding.handler.handle(event)
            return

        if isinstance(event, ElementStart):
            # The element is part of its own path
            self._path.append(event.name)
            self._dispatch(event, text=False)
        elif isinstance(event, ElementEnd):
            if not self._path or self._path[-1].lower() != event.name.lower():
                raise EventStreamError(
                    f"Unexpected end of element {event.name!r}",
                    path=self.path,
                    details={"expected": self._path[-1] if self._path else None}
                )
            # Matched while the element is still open, so the end event sees
            # the same path as its start event did
            self._dispatch(event, text=False)
            self._path.pop()
        elif isinstance(event, Characters):
            self._dispatch(event, text=True)
        else:
            logger.debug(f"Ignoring unsupported event {type(event).__name__}")

    def _dispatch(self, event: StructuralEvent, text: bool) -> None:
        for binding in self.bindings:
            if binding.selector.matches(self._path, text=text):
                binding.handler.handle(event)
