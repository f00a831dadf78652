"""Type checker for deptyck programs.

Statements are checked strictly in program order against one shared
``TypeContext``. Every expression node gets exactly one declaration;
function and recursion bodies are checked in nested scopes whose
rewrites and declarations are thrown away once the few type-variables
the enclosing judgment needs have been extracted.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .syntax import (
    App, Assumption, Definition, Expr, Fixpoint, Lambda, Literal, ModuleDecl,
    Primitive, PrimitiveType, Program, RecLambda, Signature, Stmt, Var,
)
from .typevars import Bound, FreeFunc, TypeVar
from .context import CheckerOptions, TypeContext
from .unify import unify
from .errors import Diagnostic, TypeCheckError, UnsupportedConstruct
from .error_reporting import CheckTrace


@dataclass
class CheckResult:
    """Outcome of checking a program: a context or a diagnostic."""
    context: Optional[TypeContext] = None
    diagnostic: Optional[Diagnostic] = None

    @property
    def ok(self) -> bool:
        return self.diagnostic is None


class TypeChecker:
    """Syntax-directed checker over one type context."""

    def __init__(self, context: Optional[TypeContext] = None,
                 options: Optional[CheckerOptions] = None,
                 trace: Optional[CheckTrace] = None):
        self.context = context or TypeContext(options, trace)

    @property
    def trace(self) -> CheckTrace:
        return self.context.trace

    def check_program(self, program: Program) -> None:
        self.trace.begin("Begin Check", "Prgm ...")
        for stmt in program.statements:
            self.check_stmt(stmt)
        self.trace.end("End Check", "Prgm ...")

    def check_stmt(self, stmt: Stmt) -> None:
        ctx = self.context
        self.trace.begin("Begin Check", str(stmt))

        if isinstance(stmt, Definition):
            # definition n : t := e
            t = ctx.get_rewritten_type(stmt.type)
            with ctx.nested_scope(f"definition {stmt.name}"):
                s = self.check_expr(stmt.body)
            unify(ctx, t, s)
            ctx.declare(Var(stmt.name), t)

        elif isinstance(stmt, Fixpoint):
            # fix n : t := e; n is declared first so the body can refer to it
            t = ctx.get_rewritten_type(stmt.type)
            ctx.declare(Var(stmt.name), t)
            with ctx.nested_scope(f"fix {stmt.name}"):
                s = self.check_expr(stmt.body)
            unify(ctx, t, s)

        elif isinstance(stmt, Assumption):
            ctx.declare(Var(stmt.name), ctx.get_rewritten_type(stmt.type))

        elif isinstance(stmt, Signature):
            ctx.rewrite(stmt.name, ctx.get_rewritten_type(stmt.type))

        elif isinstance(stmt, Primitive):
            ctx.bind_primitive(stmt.name)

        elif isinstance(stmt, ModuleDecl):
            raise UnsupportedConstruct(stmt)

        else:
            raise TypeError(f"Unknown statement: {stmt!r}")

        self.trace.end("End Check", str(stmt))

    def check_expr(self, expr: Expr) -> TypeVar:
        """Check an expression and return its (dereferenced) declared type."""
        ctx = self.context
        self.trace.begin("Begin Check", str(expr))

        if isinstance(expr, Var):
            if not ctx.is_bound(expr.name):
                # free names must already be assumed or defined
                ctx.get_declaration(expr)
            ctx.declare(expr, ctx.new_free_name())

        elif isinstance(expr, Literal):
            ctx.declare(expr, Bound(PrimitiveType(expr.kind)))

        elif isinstance(expr, Lambda):
            param = Var(expr.param)
            with ctx.nested_scope(f"abstraction {expr.param}", (expr.param,)):
                b = self.check_expr(expr.body)
                a = self.check_expr(param)
            ctx.declare(expr, FreeFunc(a, b))

        elif isinstance(expr, App):
            a = self.check_expr(expr.function)
            b = self.check_expr(expr.argument)
            c = ctx.new_free_name()
            unify(ctx, a, FreeFunc(b, c))
            ctx.declare(expr, c)

        elif isinstance(expr, RecLambda):
            param, self_ref = Var(expr.param), Var(expr.self_name)
            with ctx.nested_scope(f"recursion {expr.self_name}",
                                  (expr.self_name, expr.param)):
                b = self.check_expr(expr.body)
                a = self.check_expr(param)
                c = self.check_expr(self_ref)
            unify(ctx, b, c)
            ctx.declare(expr, FreeFunc(a, b))

        else:
            raise TypeError(f"Unknown expression: {expr!r}")

        result = ctx.get_declaration(expr)
        self.trace.end("End Check", f"{expr} : {result}")
        return result

    def infer(self, expr: Expr) -> TypeVar:
        """Type of ``expr`` against the current context, leaving it unchanged."""
        with self.context.nested_scope(f"infer {expr}"):
            return self.check_expr(expr)


def check_program(program: Program, options: Optional[CheckerOptions] = None,
                  trace: Optional[CheckTrace] = None) -> CheckResult:
    """Check a whole program.

    Stops at the first failure. Returns the final context on success and
    a diagnostic otherwise; checker errors are never raised from here.
    """
    checker = TypeChecker(options=options, trace=trace)
    try:
        checker.check_program(program)
    except TypeCheckError as e:
        checker.trace.unwind()
        return CheckResult(diagnostic=e.to_diagnostic())
    return CheckResult(context=checker.context)
