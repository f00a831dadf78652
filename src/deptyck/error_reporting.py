"""Error reporting and tracing for deptyck.

This module provides:
- Error categories and the context attached to every checker error
- Plain-text error formatting with suggestions for common mistakes
- A structured trace of checking steps for verbose mode
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional
from enum import Enum, auto

from .syntax import SourceLocation


class ErrorKind(Enum):
    """Categories of errors."""
    UNIFICATION_FAILURE = auto()
    UNBOUND_REFERENCE = auto()
    DUPLICATE_REWRITE = auto()
    SELF_REFERENTIAL_REWRITE = auto()
    INVALID_REWRITE_TARGET = auto()
    UNSUPPORTED_CONSTRUCT = auto()
    PROGRAM_FORMAT = auto()


@dataclass
class ErrorContext:
    """Context information for an error."""
    filename: Optional[str] = None
    location: Optional[SourceLocation] = None
    kind: Optional[ErrorKind] = None
    expected: Optional[str] = None
    actual: Optional[str] = None
    similar_names: Optional[List[str]] = None


@dataclass
class TraceEvent:
    """One step of the checking algorithm."""
    phase: str
    message: str
    depth: int = 0


class CheckTrace:
    """Accumulates checking steps for verbose output."""

    def __init__(self, enabled: bool = False):
        self.events: List[TraceEvent] = []
        self.enabled = enabled
        self.depth = 0

    def emit(self, phase: str, message: str) -> None:
        """Record a single event."""
        if self.enabled:
            self.events.append(TraceEvent(phase, message, self.depth))

    def begin(self, phase: str, message: str) -> None:
        self.emit(phase, message)
        self.depth += 1

    def end(self, phase: str, message: str) -> None:
        self.depth = max(0, self.depth - 1)
        self.emit(phase, message)

    def unwind(self) -> None:
        """Close every open phase after an aborted check."""
        self.depth = 0

    def phases(self) -> List[str]:
        return [event.phase for event in self.events]

    def format(self) -> str:
        """Format the trace for display."""
        return "\n".join(
            f"{'  ' * event.depth}{event.phase:<20} {event.message}"
            for event in self.events
        )


class NullTrace(CheckTrace):
    """Trace sink that records nothing."""

    def emit(self, phase: str, message: str) -> None:
        pass


# Global trace instance
_trace = CheckTrace()


def get_trace() -> CheckTrace:
    """Get the global check trace."""
    return _trace


def enable_trace():
    """Enable tracing."""
    _trace.enabled = True


def disable_trace():
    """Disable tracing."""
    _trace.enabled = False


def clear_trace():
    """Clear the recorded trace."""
    _trace.events = []
    _trace.depth = 0


def format_location(location: Optional[SourceLocation]) -> str:
    """Format a source location for display."""
    if not location:
        return "<unknown location>"

    parts = []
    if location.filename:
        parts.append(location.filename)
    parts.append(f"{location.line}:{location.column}")

    return ":".join(parts)


def suggest_similar_names(name: str, available_names: List[str], max_suggestions: int = 3) -> List[str]:
    """Find similar names using edit distance."""
    suggestions = []

    for available in available_names:
        distance = edit_distance(name, available)
        if 0 < distance <= 2:
            suggestions.append((distance, available))

    suggestions.sort(key=lambda x: x[0])
    return [name for _, name in suggestions[:max_suggestions]]


def edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        return edit_distance(s2, s1)

    if len(s2) == 0:
        return len(s1)

    previous_row = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current_row = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


def generate_suggestion(error_context: ErrorContext) -> Optional[str]:
    """Generate a helpful suggestion based on the error context."""
    if not error_context.kind:
        return None

    suggestions = []

    if error_context.kind == ErrorKind.UNBOUND_REFERENCE:
        if error_context.similar_names:
            names = ", ".join(f"'{name}'" for name in error_context.similar_names[:3])
            suggestions.append(f"Did you mean: {names}?")
        suggestions.append("Names must be assumed, defined or bound by an enclosing abstraction before use")

    elif error_context.kind == ErrorKind.UNIFICATION_FAILURE:
        if error_context.actual and error_context.expected and "->" in error_context.actual:
            if "->" not in error_context.expected:
                suggestions.append("A non-function value is being applied to an argument")

    elif error_context.kind == ErrorKind.SELF_REFERENTIAL_REWRITE:
        suggestions.append("The inferred type would be infinite; check for a function applied to itself")

    elif error_context.kind == ErrorKind.INVALID_REWRITE_TARGET:
        suggestions.append("A name can only be declared primitive or given a signature once")

    elif error_context.kind == ErrorKind.UNSUPPORTED_CONSTRUCT:
        suggestions.append("Module grouping is not supported; declare the statements at top level")

    if suggestions:
        return "\n".join(f"Hint: {s}" for s in suggestions)

    return None


class DeptyckError(Exception):
    """Base class for all deptyck errors."""

    def __init__(self, message: str, context: Optional[ErrorContext] = None):
        super().__init__(message)
        self.context = context or ErrorContext()
        self._formatted_message = None

    def format_error(self) -> str:
        """Format the error with location and suggestions."""
        if self._formatted_message:
            return self._formatted_message

        parts = [f"Error: {self}"]
        if self.context.location:
            parts.append(f"at {format_location(self.context.location)}")
        elif self.context.filename:
            parts.append(f"in {self.context.filename}")

        suggestion = generate_suggestion(self.context)
        if suggestion:
            parts.append("")
            parts.append(suggestion)

        self._formatted_message = '\n'.join(parts)
        return self._formatted_message
