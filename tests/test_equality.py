"""Tests for syntactic equality."""

import pytest
from deptyck.syntax import *
from deptyck.typevars import Bound, FreeAppl, FreeCons, FreeFunc, FreeName, FreeProd
from deptyck.equality import syneq_expr, syneq_name, syneq_type, syneq_typevar


NAT = TypeName(Name("Nat"))
VEC = TypeName(Name("Vec"))


def var(s):
    return Var(Name(s))


def identity_applied_to(e):
    return App(Lambda(Name("x"), Var(Name("x"))), e)


def test_names_ignore_location():
    assert syneq_name(Name("x", SourceLocation(1, 1)), Name("x", SourceLocation(3, 7)))
    assert not syneq_name(Name("x"), Name("y"))


def test_expr_equality_is_structural():
    assert syneq_expr(Lambda(Name("x"), var("x")), Lambda(Name("x"), var("x")))
    # no alpha-renaming for declarations
    assert not syneq_expr(Lambda(Name("x"), var("x")), Lambda(Name("y"), var("y")))
    assert not syneq_expr(var("x"), Literal(1))
    assert not syneq_expr(Literal(True), Literal(1))
    assert syneq_expr(App(var("f"), Literal(2)), App(var("f"), Literal(2)))


def test_type_equality():
    assert syneq_type(FunctionType(NAT, NAT), FunctionType(NAT, NAT))
    assert not syneq_type(FunctionType(NAT, NAT), TypeApplication(NAT, NAT))
    assert syneq_type(PrimitiveType(PrimitiveKind.NAT), PrimitiveType(PrimitiveKind.NAT))
    assert not syneq_type(PrimitiveType(PrimitiveKind.NAT), NAT)
    assert syneq_type(UniversalType(Name("n"), NAT), UniversalType(Name("n"), NAT))
    assert not syneq_type(UniversalType(Name("n"), NAT), UniversalType(Name("m"), NAT))


def test_indexed_type_indices_compare_after_reduction():
    """Two differently written indices with the same value are the same index."""
    written = IndexedType(VEC, identity_applied_to(var("k")))
    plain = IndexedType(VEC, var("k"))
    assert syneq_type(written, plain)
    assert not syneq_type(plain, IndexedType(VEC, var("j")))


def test_typevar_equality():
    t0, t1 = FreeName(Name("t0")), FreeName(Name("t1"))
    assert syneq_typevar(Bound(NAT), Bound(NAT))
    assert syneq_typevar(t0, FreeName(Name("t0")))
    assert not syneq_typevar(t0, t1)
    assert not syneq_typevar(Bound(NAT), FreeName(Name("Nat")))
    assert syneq_typevar(FreeFunc(t0, Bound(NAT)), FreeFunc(t0, Bound(NAT)))
    assert not syneq_typevar(FreeFunc(t0, t1), FreeAppl(t0, t1))
    assert syneq_typevar(FreeProd(Name("n"), t0), FreeProd(Name("n"), t0))


def test_free_cons_uses_reduction():
    head = Bound(VEC)
    assert syneq_typevar(FreeCons(head, identity_applied_to(Literal(2))), FreeCons(head, Literal(2)))
    assert not syneq_typevar(FreeCons(head, Literal(2)), FreeCons(head, Literal(3)))
