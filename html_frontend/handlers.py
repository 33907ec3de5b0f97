"""
The event handler capability shared by every stage of the pipeline.

Routers, extractors, the XHTML stages and output sinks all implement
EventHandler, so any of them can be plugged in wherever a handler is expected.
"""

from abc import ABC, abstractmethod

from .schemas import StructuralEvent


class EventHandler(ABC):
    """Abstract base class for structural event consumers."""

    @abstractmethod
    def handle(self, event: StructuralEvent) -> None:
        """
        Process one structural event.

        Args:
            event: The next event in document order

        Raises:
            Any exception; the caller propagates it unchanged
        """
        pass


class TeeHandler(EventHandler):
    """Forwards every event to several handlers, in order."""

    def __init__(self, *handlers: EventHandler):
        self.handlers = list(handlers)

    def handle(self, event: StructuralEvent) -> None:
        for handler in self.handlers:
            handler.handle(event)
