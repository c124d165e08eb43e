"""
Diagnostic Sink Module.

Matching and grouping decisions (why a label won, why a slip was left
unmatched) are reported to a ``DiagnosticSink`` passed in by the caller
instead of being written to a global stream. The default sink forwards
to the package logger; tests use ``RecordingSink`` to assert on the
emitted decisions.

Example:
    >>> sink = RecordingSink()
    >>> engine = GroupingEngine(sink=sink)
    >>> engine.group(pages)
    >>> sink.events_named("slip_unmatched")
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from slipmatch.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


@dataclass(frozen=True)
class DiagnosticEvent:
    """
    A single decision emitted by the pipeline.

    Attributes:
        name: Machine-readable event name (e.g. "label_claimed").
        message: Human-readable description.
        data: Structured event payload.
    """
    name: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)


class DiagnosticSink:
    """Observer interface for pipeline decisions. The base sink discards events."""

    def emit(self, name: str, message: str, **data: Any) -> None:
        pass


class LoggingSink(DiagnosticSink):
    """Forwards events to a logger at a fixed level."""

    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.DEBUG) -> None:
        self.log = log or logger
        self.level = level

    def emit(self, name: str, message: str, **data: Any) -> None:
        self.log.log(self.level, f"[{name}] {message}")


class RecordingSink(DiagnosticSink):
    """Keeps every event in memory."""

    def __init__(self) -> None:
        self.events: List[DiagnosticEvent] = []

    def emit(self, name: str, message: str, **data: Any) -> None:
        self.events.append(DiagnosticEvent(name=name, message=message, data=dict(data)))

    def events_named(self, name: str) -> List[DiagnosticEvent]:
        return [e for e in self.events if e.name == name]

    def clear(self) -> None:
        self.events.clear()


def resolve_sink(sink: Optional[DiagnosticSink]) -> DiagnosticSink:
    """Return ``sink`` or the default logging sink."""
    return sink if sink is not None else LoggingSink()
