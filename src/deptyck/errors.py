"""Error types for deptyck.

Checker errors are raised internally and turned into a ``Diagnostic`` by
``check_program``; callers of the entry point never see the exceptions.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .syntax import SourceLocation
from .error_reporting import (
    DeptyckError,
    ErrorContext,
    ErrorKind,
    get_trace,
    enable_trace,
    disable_trace,
    clear_trace,
)


@dataclass(frozen=True)
class Diagnostic:
    """Terminating outcome of a failed check."""
    kind: ErrorKind
    message: str
    operands: Tuple[str, ...] = ()
    location: Optional[SourceLocation] = None

    def __str__(self) -> str:
        return f"{self.kind.name.lower()}: {self.message}"


class TypeCheckError(DeptyckError):
    """Type checking error carrying its kind and operands."""
    kind = ErrorKind.UNIFICATION_FAILURE

    def __init__(self, message: str, operands: Sequence[object] = (),
                 location: Optional[SourceLocation] = None,
                 context: Optional[ErrorContext] = None):
        if context is None:
            context = ErrorContext(location=location)
        context.kind = self.kind
        super().__init__(message, context)
        self.operands = tuple(operands)
        self.location = location

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(
            kind=self.kind,
            message=str(self),
            operands=tuple(str(op) for op in self.operands),
            location=self.location,
        )


class UnificationFailure(TypeCheckError):
    """Two type-variables cannot be reconciled."""
    kind = ErrorKind.UNIFICATION_FAILURE

    def __init__(self, left, right):
        context = ErrorContext(expected=str(left), actual=str(right))
        super().__init__(f"unable to unify bound types: {left} , {right}",
                         operands=(left, right), context=context)
        self.left = left
        self.right = right


class UnboundReference(TypeCheckError):
    """No declaration exists for a term."""
    kind = ErrorKind.UNBOUND_REFERENCE

    def __init__(self, expr, similar_names: Optional[Sequence[str]] = None):
        location = getattr(getattr(expr, "name", None), "location", None)
        context = ErrorContext(location=location, actual=str(expr),
                               similar_names=list(similar_names or []))
        super().__init__(f"no declaration found for expr: {expr}",
                         operands=(expr,), location=location, context=context)
        self.expr = expr


class DuplicateRewrite(TypeCheckError):
    """More than one rewrite for the same metavariable."""
    kind = ErrorKind.DUPLICATE_REWRITE

    def __init__(self, name):
        super().__init__(f"multiple rewrites of same free name: {name}", operands=(name,))
        self.name = name


class SelfReferentialRewrite(TypeCheckError):
    """Occurs-check failure."""
    kind = ErrorKind.SELF_REFERENTIAL_REWRITE

    def __init__(self, rewrite):
        super().__init__(f"self-referential rewrite: {rewrite}", operands=(rewrite,))
        self.rewrite = rewrite


class InvalidRewriteTarget(TypeCheckError):
    """Attempt to rewrite something that is not an unresolved name."""
    kind = ErrorKind.INVALID_REWRITE_TARGET

    def __init__(self, name, target):
        super().__init__(f"rewrite of non-free name: {name} (resolves to {target})",
                         operands=(name, target))
        self.name = name
        self.target = target


class UnsupportedConstruct(TypeCheckError):
    """Statement the checker deliberately does not handle."""
    kind = ErrorKind.UNSUPPORTED_CONSTRUCT

    def __init__(self, construct):
        name = getattr(construct, "name", None)
        location = getattr(name, "location", None)
        super().__init__(f"unsupported construct: {construct}",
                         operands=(construct,), location=location)
        self.construct = construct


class ProgramFormatError(DeptyckError):
    """Malformed serialized program."""

    def __init__(self, message: str, filename: Optional[str] = None):
        super().__init__(message, ErrorContext(filename=filename, kind=ErrorKind.PROGRAM_FORMAT))


__all__ = [
    "Diagnostic",
    "DeptyckError",
    "TypeCheckError",
    "UnificationFailure",
    "UnboundReference",
    "DuplicateRewrite",
    "SelfReferentialRewrite",
    "InvalidRewriteTarget",
    "UnsupportedConstruct",
    "ProgramFormatError",
    "ErrorContext",
    "ErrorKind",
    "get_trace",
    "enable_trace",
    "disable_trace",
    "clear_trace",
]
