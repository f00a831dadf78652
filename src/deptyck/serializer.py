"""JSON interchange for deptyck programs and check results.

A parser front end hands programs to the checker in this format. Every
node is an object with a ``kind`` tag; names are plain strings.

    {"statements": [
        {"kind": "primitive", "name": "Nat"},
        {"kind": "assume", "name": "x", "type": {"kind": "name", "name": "Nat"}}
    ]}
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from .syntax import (
    App, Assumption, Definition, Expr, Fixpoint, FunctionType, IndexedType, Lambda,
    Literal, ModuleDecl, Name, Primitive, PrimitiveKind, PrimitiveType, Program,
    RecLambda, Signature, Stmt, Type, TypeApplication, TypeName, UniversalType, Var,
)
from .errors import ProgramFormatError
from .typechecker import CheckResult


def program_from_json(payload: str, filename: Optional[str] = None) -> Program:
    """Deserialize a program."""
    try:
        return _Decoder(filename).program(json.loads(payload))
    except json.JSONDecodeError as e:
        raise ProgramFormatError(f"invalid JSON: {e}", filename) from e
    except RecursionError as e:
        raise ProgramFormatError("program is nested too deeply", filename) from e


def load_program(path: str) -> Program:
    with open(path, "r", encoding="utf-8") as f:
        return program_from_json(f.read(), filename=path)


def program_to_json(program: Program) -> str:
    """Serialize a program."""
    payload = {"statements": [_encode_stmt(stmt) for stmt in program.statements]}
    return json.dumps(payload, indent=2)


def result_to_json(result: CheckResult) -> str:
    """Serialize a check result for machine consumption."""
    if not result.ok:
        diagnostic = result.diagnostic
        payload: Dict[str, Any] = {
            "ok": False,
            "diagnostic": {
                "kind": diagnostic.kind.name.lower(),
                "message": diagnostic.message,
                "operands": list(diagnostic.operands),
            },
        }
    else:
        ctx = result.context
        payload = {
            "ok": True,
            "declarations": [
                {"expr": str(d.expr), "type": str(ctx.get_rewritten(d.type))}
                for d in ctx.declarations
            ],
            "rewrites": [str(r) for r in ctx.rewrites],
        }
    return json.dumps(payload, indent=2)


# ---------------------------------------------------------------------------
# Decoding


class _Decoder:
    def __init__(self, filename: Optional[str]):
        self.filename = filename

    def fail(self, message: str) -> ProgramFormatError:
        return ProgramFormatError(message, self.filename)

    def field(self, node: Any, key: str) -> Any:
        if not isinstance(node, dict):
            raise self.fail(f"expected an object, got {node!r}")
        if key not in node:
            raise self.fail(f"missing field '{key}' in {node.get('kind', 'node')}")
        return node[key]

    def name(self, node: Any, key: str = "name") -> Name:
        value = self.field(node, key)
        if not isinstance(value, str) or not value:
            raise self.fail(f"field '{key}' must be a non-empty string")
        return Name(value)

    def program(self, raw: Any) -> Program:
        statements = self.field(raw, "statements")
        if not isinstance(statements, list):
            raise self.fail("'statements' must be a list")
        return Program(tuple(self.stmt(s) for s in statements))

    def stmt(self, node: Any) -> Stmt:
        kind = self.field(node, "kind")
        if kind == "definition":
            return Definition(self.name(node), self.type(self.field(node, "type")),
                              self.expr(self.field(node, "body")))
        if kind == "fix":
            return Fixpoint(self.name(node), self.type(self.field(node, "type")),
                            self.expr(self.field(node, "body")))
        if kind == "assume":
            return Assumption(self.name(node), self.type(self.field(node, "type")))
        if kind == "signature":
            return Signature(self.name(node), self.type(self.field(node, "type")))
        if kind == "primitive":
            return Primitive(self.name(node))
        if kind == "module":
            body = node.get("statements", [])
            return ModuleDecl(self.name(node), tuple(self.stmt(s) for s in body))
        raise self.fail(f"unknown statement kind: {kind!r}")

    def type(self, node: Any) -> Type:
        kind = self.field(node, "kind")
        if kind == "name":
            return TypeName(self.name(node))
        if kind == "function":
            return FunctionType(self.type(self.field(node, "domain")),
                                self.type(self.field(node, "codomain")))
        if kind == "application":
            return TypeApplication(self.type(self.field(node, "head")),
                                   self.type(self.field(node, "argument")))
        if kind == "forall":
            return UniversalType(self.name(node, "bound"), self.type(self.field(node, "body")))
        if kind == "indexed":
            return IndexedType(self.type(self.field(node, "head")),
                               self.expr(self.field(node, "index")))
        if kind == "primitive":
            value = self.field(node, "primitive")
            try:
                return PrimitiveType(PrimitiveKind(value))
            except ValueError:
                raise self.fail(f"unknown primitive type: {value!r}") from None
        raise self.fail(f"unknown type kind: {kind!r}")

    def expr(self, node: Any) -> Expr:
        kind = self.field(node, "kind")
        if kind == "var":
            return Var(self.name(node))
        if kind == "literal":
            value = self.field(node, "value")
            if not isinstance(value, (bool, int, str)) or (isinstance(value, int) and value < 0):
                raise self.fail(f"unsupported literal: {value!r}")
            return Literal(value)
        if kind == "lambda":
            return Lambda(self.name(node, "param"), self.expr(self.field(node, "body")))
        if kind == "app":
            return App(self.expr(self.field(node, "function")),
                       self.expr(self.field(node, "argument")))
        if kind == "rec":
            return RecLambda(self.name(node, "self"), self.name(node, "param"),
                             self.expr(self.field(node, "body")))
        raise self.fail(f"unknown expression kind: {kind!r}")


# ---------------------------------------------------------------------------
# Encoding


def _encode_stmt(stmt: Stmt) -> Dict[str, Any]:
    if isinstance(stmt, Definition):
        return {"kind": "definition", "name": stmt.name.value,
                "type": _encode_type(stmt.type), "body": _encode_expr(stmt.body)}
    if isinstance(stmt, Fixpoint):
        return {"kind": "fix", "name": stmt.name.value,
                "type": _encode_type(stmt.type), "body": _encode_expr(stmt.body)}
    if isinstance(stmt, Assumption):
        return {"kind": "assume", "name": stmt.name.value, "type": _encode_type(stmt.type)}
    if isinstance(stmt, Signature):
        return {"kind": "signature", "name": stmt.name.value, "type": _encode_type(stmt.type)}
    if isinstance(stmt, Primitive):
        return {"kind": "primitive", "name": stmt.name.value}
    if isinstance(stmt, ModuleDecl):
        return {"kind": "module", "name": stmt.name.value,
                "statements": [_encode_stmt(s) for s in stmt.statements]}
    raise TypeError(f"Unknown statement: {stmt!r}")


def _encode_type(t: Type) -> Dict[str, Any]:
    if isinstance(t, TypeName):
        return {"kind": "name", "name": t.name.value}
    if isinstance(t, FunctionType):
        return {"kind": "function", "domain": _encode_type(t.domain),
                "codomain": _encode_type(t.codomain)}
    if isinstance(t, TypeApplication):
        return {"kind": "application", "head": _encode_type(t.head),
                "argument": _encode_type(t.argument)}
    if isinstance(t, UniversalType):
        return {"kind": "forall", "bound": t.bound.value, "body": _encode_type(t.body)}
    if isinstance(t, IndexedType):
        return {"kind": "indexed", "head": _encode_type(t.head), "index": _encode_expr(t.index)}
    if isinstance(t, PrimitiveType):
        return {"kind": "primitive", "primitive": t.kind.value}
    raise TypeError(f"Unknown type: {t!r}")


def _encode_expr(expr: Expr) -> Dict[str, Any]:
    if isinstance(expr, Var):
        return {"kind": "var", "name": expr.name.value}
    if isinstance(expr, Literal):
        return {"kind": "literal", "value": expr.value}
    if isinstance(expr, Lambda):
        return {"kind": "lambda", "param": expr.param.value, "body": _encode_expr(expr.body)}
    if isinstance(expr, App):
        return {"kind": "app", "function": _encode_expr(expr.function),
                "argument": _encode_expr(expr.argument)}
    if isinstance(expr, RecLambda):
        return {"kind": "rec", "self": expr.self_name.value, "param": expr.param.value,
                "body": _encode_expr(expr.body)}
    raise TypeError(f"Unknown expression: {expr!r}")
