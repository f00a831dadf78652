"""Syntactic equality over names, types, terms and type-variables.

Index terms inside indexed types are the exception: they are compared
semantically, via reduction to normal form.
"""

from __future__ import annotations

from .syntax import (
    App, Expr, FunctionType, IndexedType, Lambda, Literal, Name, PrimitiveType,
    RecLambda, Type, TypeApplication, TypeName, UniversalType, Var,
)
from .typevars import Bound, FreeAppl, FreeCons, FreeFunc, FreeName, FreeProd, TypeVar
from . import reduction


def syneq_name(n: Name, m: Name) -> bool:
    """Names are equal when they spell the same identifier."""
    return n.value == m.value


def syneq_expr(e: Expr, f: Expr) -> bool:
    """Structural equality of terms."""
    if isinstance(e, Var) and isinstance(f, Var):
        return syneq_name(e.name, f.name)
    if isinstance(e, Literal) and isinstance(f, Literal):
        return type(e.value) is type(f.value) and e.value == f.value
    if isinstance(e, Lambda) and isinstance(f, Lambda):
        return syneq_name(e.param, f.param) and syneq_expr(e.body, f.body)
    if isinstance(e, App) and isinstance(f, App):
        return syneq_expr(e.function, f.function) and syneq_expr(e.argument, f.argument)
    if isinstance(e, RecLambda) and isinstance(f, RecLambda):
        return (syneq_name(e.self_name, f.self_name)
                and syneq_name(e.param, f.param)
                and syneq_expr(e.body, f.body))
    return False


def syneq_index(e: Expr, f: Expr, fuel: int = reduction.DEFAULT_FUEL) -> bool:
    """Equality of type indices, up to normalization."""
    return syneq_expr(e, f) or reduction.equivalent(e, f, fuel)


def syneq_type(t: Type, s: Type, fuel: int = reduction.DEFAULT_FUEL) -> bool:
    """Structural equality of surface types."""
    if isinstance(t, TypeName) and isinstance(s, TypeName):
        return syneq_name(t.name, s.name)
    if isinstance(t, PrimitiveType) and isinstance(s, PrimitiveType):
        return t.kind == s.kind
    if isinstance(t, FunctionType) and isinstance(s, FunctionType):
        return syneq_type(t.domain, s.domain, fuel) and syneq_type(t.codomain, s.codomain, fuel)
    if isinstance(t, TypeApplication) and isinstance(s, TypeApplication):
        return syneq_type(t.head, s.head, fuel) and syneq_type(t.argument, s.argument, fuel)
    if isinstance(t, UniversalType) and isinstance(s, UniversalType):
        return syneq_name(t.bound, s.bound) and syneq_type(t.body, s.body, fuel)
    if isinstance(t, IndexedType) and isinstance(s, IndexedType):
        return syneq_type(t.head, s.head, fuel) and syneq_index(t.index, s.index, fuel)
    return False


def syneq_typevar(a: TypeVar, b: TypeVar, fuel: int = reduction.DEFAULT_FUEL) -> bool:
    """Structural equality of type-variables (no dereferencing)."""
    if isinstance(a, Bound) and isinstance(b, Bound):
        return syneq_type(a.type, b.type, fuel)
    if isinstance(a, FreeName) and isinstance(b, FreeName):
        return syneq_name(a.name, b.name)
    if isinstance(a, FreeFunc) and isinstance(b, FreeFunc):
        return syneq_typevar(a.domain, b.domain, fuel) and syneq_typevar(a.codomain, b.codomain, fuel)
    if isinstance(a, FreeAppl) and isinstance(b, FreeAppl):
        return syneq_typevar(a.head, b.head, fuel) and syneq_typevar(a.argument, b.argument, fuel)
    if isinstance(a, FreeProd) and isinstance(b, FreeProd):
        return syneq_name(a.bound, b.bound) and syneq_typevar(a.body, b.body, fuel)
    if isinstance(a, FreeCons) and isinstance(b, FreeCons):
        return syneq_typevar(a.head, b.head, fuel) and syneq_index(a.index, b.index, fuel)
    return False
