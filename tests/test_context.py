"""Tests for the type context: rewrites, declarations and scopes."""

import pytest
from deptyck.syntax import *
from deptyck.typevars import (
    Bound, FreeAppl, FreeCons, FreeFunc, FreeName, FreeProd, Rewrite,
)
from deptyck.context import CheckerOptions, TypeContext
from deptyck.error_reporting import CheckTrace, NullTrace
from deptyck.errors import (
    DuplicateRewrite, InvalidRewriteTarget, SelfReferentialRewrite,
    UnboundReference, UnificationFailure,
)


NAT = Bound(TypeName(Name("Nat")))
BOOL = Bound(TypeName(Name("Bool")))


def fn(s):
    return FreeName(Name(s))


def var(s):
    return Var(Name(s))


def make_context(**options):
    return TypeContext(CheckerOptions(**options), NullTrace())


class TestFreshNames:
    """Fresh metavariables."""

    def test_names_count_up(self):
        ctx = make_context()
        assert [ctx.new_free_name() for _ in range(3)] == [fn("t0"), fn("t1"), fn("t2")]

    def test_counter_survives_scope_exit(self):
        ctx = make_context()
        with ctx.nested_scope("inner"):
            ctx.new_free_name()
            ctx.new_free_name()
        assert ctx.new_free_name() == fn("t2")

    def test_counter_rollback_option(self):
        ctx = make_context(rollback_counter=True)
        with ctx.nested_scope("inner"):
            ctx.new_free_name()
        assert ctx.new_free_name() == fn("t0")


class TestRewriting:
    """Substitution store."""

    def test_unresolved_name_dereferences_to_itself(self):
        ctx = make_context()
        assert ctx.get_rewritten(fn("a")) == fn("a")
        assert ctx.get_rewritten(NAT) == NAT

    def test_chains_are_followed(self):
        ctx = make_context()
        ctx.rewrite(Name("a"), fn("b"))
        ctx.rewrite(Name("b"), NAT)
        assert ctx.get_rewritten(fn("a")) == NAT
        assert ctx.get_rewritten(FreeFunc(fn("a"), fn("c"))) == FreeFunc(NAT, fn("c"))

    def test_rewrite_dereferences_its_target(self):
        """Rewriting an already rewritten name binds the name it resolves to."""
        ctx = make_context()
        ctx.rewrite(Name("a"), fn("b"))
        ctx.rewrite(Name("a"), NAT)
        assert ctx.rewrites[-1] == Rewrite(Name("b"), NAT)
        assert ctx.get_rewritten(fn("a")) == NAT

    def test_dereference_is_idempotent(self):
        ctx = make_context()
        ctx.rewrite(Name("a"), FreeFunc(fn("b"), NAT))
        ctx.rewrite(Name("b"), FreeAppl(BOOL, fn("c")))
        ctx.rewrite(Name("d"), fn("a"))
        samples = [
            fn("a"), fn("d"), fn("z"), NAT,
            FreeFunc(fn("d"), fn("b")),
            FreeAppl(fn("a"), fn("c")),
            FreeProd(Name("n"), fn("a")),
            FreeCons(fn("b"), var("k")),
        ]
        for tv in samples:
            once = ctx.get_rewritten(tv)
            assert ctx.get_rewritten(once) == once

    def test_cannot_rewrite_ground_name(self):
        ctx = make_context()
        ctx.bind_primitive(Name("Nat"))
        with pytest.raises(InvalidRewriteTarget):
            ctx.rewrite(Name("Nat"), BOOL)

    def test_cannot_rewrite_structural_name(self):
        ctx = make_context()
        ctx.rewrite(Name("a"), FreeFunc(fn("b"), fn("c")))
        with pytest.raises(InvalidRewriteTarget):
            ctx.rewrite(Name("a"), NAT)

    def test_duplicate_rewrites_are_detected(self):
        ctx = make_context()
        ctx.rewrites.append(Rewrite(Name("a"), NAT))
        ctx.rewrites.append(Rewrite(Name("a"), BOOL))
        with pytest.raises(DuplicateRewrite):
            ctx.get_rewritten(fn("a"))


class TestOccursCheck:
    """Self-referential rewrites."""

    def test_two_occurrences_are_rejected(self):
        ctx = make_context()
        with pytest.raises(SelfReferentialRewrite):
            ctx.rewrite(Name("a"), FreeFunc(fn("a"), fn("b")))
        assert ctx.rewrites == []

    def test_repeated_target_is_rejected(self):
        ctx = make_context()
        with pytest.raises(SelfReferentialRewrite):
            ctx.rewrite(Name("a"), FreeFunc(fn("a"), fn("a")))

    def test_single_occurrence_threshold(self):
        """A replacement whose only free name is the target is let through.

        Dereferencing the resulting cycle is then reported instead of looping.
        """
        ctx = make_context()
        ctx.rewrite(Name("a"), FreeFunc(fn("a"), NAT))
        assert len(ctx.rewrites) == 1
        with pytest.raises(SelfReferentialRewrite):
            ctx.get_rewritten(fn("a"))

    def test_bare_target_threshold(self):
        ctx = make_context()
        ctx.rewrite(Name("a"), fn("a"))
        with pytest.raises(SelfReferentialRewrite):
            ctx.get_rewritten(fn("a"))

    def test_strict_occurs_check(self):
        ctx = make_context(strict_occurs_check=True)
        with pytest.raises(SelfReferentialRewrite):
            ctx.rewrite(Name("a"), FreeFunc(fn("a"), NAT))
        with pytest.raises(SelfReferentialRewrite):
            ctx.rewrite(Name("a"), fn("a"))
        assert ctx.rewrites == []

    def test_occurs_check_sees_through_rewrites(self):
        ctx = make_context(strict_occurs_check=True)
        ctx.rewrite(Name("b"), FreeAppl(fn("a"), NAT))
        with pytest.raises(SelfReferentialRewrite):
            ctx.rewrite(Name("a"), FreeFunc(fn("b"), NAT))


class TestDeclarations:
    """Declaration store."""

    def test_declare_and_lookup(self):
        ctx = make_context()
        ctx.declare(var("x"), NAT)
        assert ctx.get_declaration(var("x")) == NAT

    def test_lookup_dereferences(self):
        ctx = make_context()
        ctx.declare(var("x"), fn("a"))
        ctx.rewrite(Name("a"), NAT)
        assert ctx.get_declaration(var("x")) == NAT

    def test_redeclaring_unifies_instead_of_duplicating(self):
        ctx = make_context()
        ctx.declare(var("x"), fn("a"))
        ctx.declare(var("x"), FreeFunc(NAT, fn("b")))
        ctx.declare(var("x"), FreeFunc(fn("c"), BOOL))
        assert len(ctx.declarations) == 1
        assert ctx.get_declaration(var("x")) == FreeFunc(NAT, BOOL)
        assert ctx.get_rewritten(fn("c")) == NAT

    def test_conflicting_redeclaration_fails(self):
        ctx = make_context()
        ctx.declare(var("x"), NAT)
        with pytest.raises(UnificationFailure):
            ctx.declare(var("x"), FreeFunc(NAT, NAT))

    def test_most_recent_declaration_first(self):
        ctx = make_context()
        ctx.declare(var("x"), NAT)
        ctx.declare(var("y"), BOOL)
        assert [str(d.expr) for d in ctx.declarations] == ["y", "x"]

    def test_missing_declaration(self):
        ctx = make_context()
        ctx.declare(var("count"), NAT)
        with pytest.raises(UnboundReference) as exc_info:
            ctx.get_declaration(var("cont"))
        assert "no declaration found for expr: cont" in str(exc_info.value)
        assert exc_info.value.context.similar_names == ["count"]

    def test_lookup_type_grounds_result(self):
        ctx = make_context()
        ctx.declare(var("f"), FreeFunc(NAT, fn("a")))
        assert ctx.lookup_type(var("f")) is None
        ctx.rewrite(Name("a"), NAT)
        nat = TypeName(Name("Nat"))
        assert ctx.lookup_type(var("f")) == FunctionType(nat, nat)


class TestScopes:
    """Nested scopes."""

    def test_scope_discards_inner_state(self):
        ctx = make_context()
        ctx.declare(var("x"), fn("a"))
        with ctx.nested_scope("inner"):
            ctx.declare(var("y"), NAT)
            ctx.rewrite(Name("a"), BOOL)
            assert ctx.get_declaration(var("x")) == BOOL
            extracted = ctx.get_declaration(var("y"))
        assert extracted == NAT
        assert ctx.rewrites == []
        assert ctx.get_declaration(var("x")) == fn("a")
        with pytest.raises(UnboundReference):
            ctx.get_declaration(var("y"))

    def test_scope_restores_on_error(self):
        ctx = make_context()
        with pytest.raises(UnboundReference):
            with ctx.nested_scope("inner", (Name("p"),)):
                ctx.declare(var("y"), NAT)
                ctx.get_declaration(var("missing"))
        assert ctx.declarations == []
        assert ctx.scopes == []

    def test_binders(self):
        ctx = make_context()
        assert not ctx.is_bound(Name("p"))
        with ctx.nested_scope("outer", (Name("p"),)):
            with ctx.nested_scope("inner", (Name("q"),)):
                assert ctx.is_bound(Name("p"))
                assert ctx.is_bound(Name("q"))
            assert not ctx.is_bound(Name("q"))
        assert not ctx.is_bound(Name("p"))


class TestSurfaceTypes:
    """Conversion of surface types."""

    def test_type_names_resolve_through_rewrites(self):
        ctx = make_context()
        assert ctx.get_rewritten_type(TypeName(Name("Nat"))) == fn("Nat")
        ctx.bind_primitive(Name("Nat"))
        assert ctx.get_rewritten_type(TypeName(Name("Nat"))) == NAT

    def test_composite_types(self):
        ctx = make_context()
        ctx.bind_primitive(Name("Nat"))
        nat = TypeName(Name("Nat"))
        assert ctx.get_rewritten_type(FunctionType(nat, nat)) == FreeFunc(NAT, NAT)
        assert ctx.get_rewritten_type(UniversalType(Name("n"), nat)) == FreeProd(Name("n"), NAT)
        assert ctx.get_rewritten_type(IndexedType(nat, var("k"))) == FreeCons(NAT, var("k"))
        prim = PrimitiveType(PrimitiveKind.BOOL)
        assert ctx.get_rewritten_type(prim) == Bound(prim)


def test_trace_records_steps():
    trace = CheckTrace(enabled=True)
    ctx = TypeContext(trace=trace)
    ctx.bind_primitive(Name("Nat"))
    ctx.declare(var("x"), ctx.new_free_name())
    assert trace.phases() == ["Primitive", "Rewrite", "FreeName", "Declare"]
    assert "Nat := {Nat}" in trace.format()
