"""Unification of type-variables.

Asserts that two type-variables are equal and makes it so by adding
rewrites to the context. Quantifiers and indexed types are reconciled
through the declared types of their bound names and index terms, never
by comparing the names or terms themselves.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from .syntax import FunctionType, IndexedType, TypeApplication, UniversalType, Var
from .typevars import Bound, FreeAppl, FreeCons, FreeFunc, FreeName, FreeProd, TypeVar
from .equality import syneq_type, syneq_typevar
from .errors import UnificationFailure

if TYPE_CHECKING:
    from .context import TypeContext


def unify(ctx: TypeContext, tv1: TypeVar, tv2: TypeVar) -> None:
    """Unify two type-variables; may add rewrites to ``ctx``."""
    tv1 = ctx.get_rewritten(tv1)
    tv2 = ctx.get_rewritten(tv2)
    if syneq_typevar(tv1, tv2, ctx.fuel):
        return

    ctx.trace.begin("Begin Unify", f"{tv1} <~> {tv2}")

    # Bound on left
    if isinstance(tv1, Bound):
        t = tv1.type
        if isinstance(tv2, FreeName):
            ctx.rewrite(tv2.name, tv1)
        elif isinstance(tv2, Bound):
            if not syneq_type(t, tv2.type, ctx.fuel):
                raise UnificationFailure(tv1, tv2)
        elif isinstance(t, FunctionType) and isinstance(tv2, FreeFunc):
            unify(ctx, Bound(t.domain), tv2.domain)
            unify(ctx, Bound(t.codomain), tv2.codomain)
        elif isinstance(t, TypeApplication) and isinstance(tv2, FreeAppl):
            unify(ctx, Bound(t.head), tv2.head)
            unify(ctx, Bound(t.argument), tv2.argument)
        elif isinstance(t, UniversalType) and isinstance(tv2, FreeProd):
            n_type = ctx.get_declaration(Var(t.bound))
            m_type = ctx.get_declaration(Var(tv2.bound))
            unify(ctx, n_type, m_type)
            unify(ctx, Bound(t.body), tv2.body)
        elif isinstance(t, IndexedType) and isinstance(tv2, FreeCons):
            unify(ctx, Bound(t.head), tv2.head)
            unify(ctx, ctx.get_declaration(t.index), ctx.get_declaration(tv2.index))
        else:
            raise UnificationFailure(tv1, tv2)

    # Free on left
    elif isinstance(tv1, FreeName):
        ctx.rewrite(tv1.name, tv2)
    elif isinstance(tv1, FreeFunc) and isinstance(tv2, FreeFunc):
        unify(ctx, tv1.domain, tv2.domain)
        unify(ctx, tv1.codomain, tv2.codomain)
    elif isinstance(tv1, FreeAppl) and isinstance(tv2, FreeAppl):
        unify(ctx, tv1.head, tv2.head)
        unify(ctx, tv1.argument, tv2.argument)
    elif isinstance(tv1, FreeCons) and isinstance(tv2, FreeCons):
        unify(ctx, tv1.head, tv2.head)
        unify(ctx, ctx.get_declaration(tv1.index), ctx.get_declaration(tv2.index))

    # Symmetric cases; two mismatched composites would only swap back
    elif (isinstance(tv1, (FreeFunc, FreeAppl, FreeCons))
          and not isinstance(tv2, (FreeFunc, FreeAppl, FreeCons))):
        unify(ctx, tv2, tv1)

    else:
        raise UnificationFailure(tv1, tv2)

    ctx.trace.end("End Unify", f"{tv1} <~> {tv2}")
