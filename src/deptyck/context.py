"""Type context: the mutable state of one checking session.

The context holds the fresh-name counter, the rewrites (substitution
store) and the declarations (typing judgments), plus a stack of nested
scopes. Leaving a scope restores rewrites and declarations to what they
were on entry; whatever the caller kept in local variables survives.
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from .syntax import (
    Expr, FunctionType, IndexedType, Name, PrimitiveType, Type, TypeApplication,
    TypeName, UniversalType, Var,
)
from .typevars import (
    Bound, Declaration, FreeAppl, FreeCons, FreeFunc, FreeName, FreeProd, Rewrite,
    TypeVar, free_names, ground_type,
)
from .equality import syneq_expr, syneq_name
from .errors import (
    DuplicateRewrite, InvalidRewriteTarget, SelfReferentialRewrite, UnboundReference,
)
from .error_reporting import CheckTrace, get_trace, suggest_similar_names
from .reduction import DEFAULT_FUEL
from .unify import unify


@dataclass
class CheckerOptions:
    """Options for a checking session."""
    # False: reject only replacements with more than one free name occurrence
    strict_occurs_check: bool = False
    # True: restore the fresh-name counter on scope exit too
    rollback_counter: bool = False
    reduction_fuel: int = DEFAULT_FUEL


@dataclass
class Scope:
    """A nested scope and the parameter names its binder introduces."""
    label: str
    binders: Tuple[Name, ...] = ()


class TypeContext:
    """Inference state threaded through a whole program check."""

    def __init__(self, options: Optional[CheckerOptions] = None,
                 trace: Optional[CheckTrace] = None):
        self.options = options or CheckerOptions()
        self.trace = trace if trace is not None else get_trace()
        self.free_type_var_counter = 0
        self.rewrites: List[Rewrite] = []
        self.declarations: List[Declaration] = []
        self.scopes: List[Scope] = []

    @property
    def fuel(self) -> int:
        return self.options.reduction_fuel

    # Scopes

    @contextmanager
    def nested_scope(self, label: str, binders: Sequence[Name] = ()) -> Iterator[Scope]:
        """Check something in a temporary sub-state.

        Rewrites and declarations made inside are discarded on exit,
        including exit by exception.
        """
        saved_rewrites = list(self.rewrites)
        saved_declarations = list(self.declarations)
        saved_counter = self.free_type_var_counter
        scope = Scope(label, tuple(binders))
        self.scopes.append(scope)
        self.trace.begin("Open Scope", label)
        try:
            yield scope
        finally:
            self.scopes.pop()
            self.rewrites = saved_rewrites
            self.declarations = saved_declarations
            if self.options.rollback_counter:
                self.free_type_var_counter = saved_counter
            self.trace.end("Close Scope", label)

    def is_bound(self, name: Name) -> bool:
        """Is ``name`` a parameter of an enclosing abstraction?"""
        return any(syneq_name(name, binder)
                   for scope in self.scopes for binder in scope.binders)

    # Substitution store

    def new_free_name(self) -> FreeName:
        """Create a new metavariable of the form ``t#``."""
        i = self.free_type_var_counter
        self.free_type_var_counter = i + 1
        fn = FreeName(Name(f"t{i}"))
        self.trace.emit("FreeName", str(fn))
        return fn

    def get_rewritten(self, tv: TypeVar) -> TypeVar:
        """Dereference a type-variable through the current rewrites."""
        return self._rewritten(tv, frozenset())

    def _rewritten(self, tv: TypeVar, resolving: frozenset) -> TypeVar:
        if isinstance(tv, Bound):
            return tv
        if isinstance(tv, FreeName):
            return self._rewritten_free_name(tv.name, resolving)
        if isinstance(tv, FreeFunc):
            return FreeFunc(self._rewritten(tv.domain, resolving),
                            self._rewritten(tv.codomain, resolving))
        if isinstance(tv, FreeAppl):
            return FreeAppl(self._rewritten(tv.head, resolving),
                            self._rewritten(tv.argument, resolving))
        if isinstance(tv, FreeProd):
            return FreeProd(tv.bound, self._rewritten(tv.body, resolving))
        if isinstance(tv, FreeCons):
            return FreeCons(self._rewritten(tv.head, resolving), tv.index)
        raise TypeError(f"Unknown type variable: {tv!r}")

    def _rewritten_free_name(self, name: Name, resolving: frozenset) -> TypeVar:
        matches = [r for r in self.rewrites if syneq_name(name, r.name)]
        if not matches:
            return FreeName(name)
        if len(matches) > 1:
            raise DuplicateRewrite(name)
        if name.value in resolving:
            # only reachable when the lenient occurs check let a cycle in
            raise SelfReferentialRewrite(matches[0])
        return self._rewritten(matches[0].replacement, resolving | {name.value})

    def get_rewritten_type(self, t: Type) -> TypeVar:
        """Convert a surface type to a type-variable, applying rewrites."""
        if isinstance(t, TypeName):
            return self.get_rewritten(FreeName(t.name))
        if isinstance(t, PrimitiveType):
            return Bound(t)
        if isinstance(t, FunctionType):
            return FreeFunc(self.get_rewritten_type(t.domain),
                            self.get_rewritten_type(t.codomain))
        if isinstance(t, TypeApplication):
            return FreeAppl(self.get_rewritten_type(t.head),
                            self.get_rewritten_type(t.argument))
        if isinstance(t, UniversalType):
            return FreeProd(t.bound, self.get_rewritten_type(t.body))
        if isinstance(t, IndexedType):
            return FreeCons(self.get_rewritten_type(t.head), t.index)
        raise TypeError(f"Unknown type: {t!r}")

    def rewrite(self, name: Name, replacement: TypeVar) -> None:
        """Bind ``name := replacement``; ``name`` must still be free."""
        target = self.get_rewritten(FreeName(name))
        replacement = self.get_rewritten(replacement)
        if not isinstance(target, FreeName):
            raise InvalidRewriteTarget(name, target)
        entry = Rewrite(target.name, replacement)
        self.trace.emit("Rewrite", str(entry))
        occurrences = free_names(replacement)
        occurs = any(syneq_name(target.name, n) for n in occurrences)
        if occurs and (self.options.strict_occurs_check or len(occurrences) > 1):
            raise SelfReferentialRewrite(entry)
        self.rewrites.append(entry)

    def bind_primitive(self, name: Name) -> None:
        """Make ``name`` a ground base type."""
        self.trace.emit("Primitive", str(name))
        self.rewrite(name, Bound(TypeName(name)))

    # Declaration store

    def declare(self, expr: Expr, tv: TypeVar) -> None:
        """Record ``expr : tv``, unifying with any earlier judgment of ``expr``."""
        tv = self.get_rewritten(tv)
        self.trace.emit("Declare", f"{expr} : {tv}")
        has_unified = False
        for existing in list(self.declarations):
            if syneq_expr(expr, existing.expr):
                unify(self, tv, existing.type)
                has_unified = True
        if not has_unified:
            self.declarations.insert(0, Declaration(expr, tv))

    def get_declaration(self, expr: Expr) -> TypeVar:
        """Dereferenced type of the most recent judgment for ``expr``."""
        for declaration in self.declarations:
            if syneq_expr(expr, declaration.expr):
                return self.get_rewritten(declaration.type)
        raise UnboundReference(expr, self._similar_names(expr))

    def _similar_names(self, expr: Expr) -> List[str]:
        if not isinstance(expr, Var):
            return []
        declared = [d.expr.name.value for d in self.declarations if isinstance(d.expr, Var)]
        return suggest_similar_names(expr.name.value, declared)

    def lookup_type(self, expr: Expr) -> Optional[Type]:
        """Ground surface type of a declared term, None if not fully resolved."""
        return ground_type(self.get_declaration(expr))

    def __str__(self) -> str:
        lines = ["rewrites:"]
        lines.extend(f" - {r}" for r in self.rewrites)
        lines.append("declarations:")
        lines.extend(f" - {d}" for d in self.declarations)
        return "\n".join(lines)
