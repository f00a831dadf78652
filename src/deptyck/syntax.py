"""Abstract syntax for deptyck programs.

These nodes are produced by an external parser (or the JSON loader in
``serializer``) and consumed by the type checker.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple, Union
from enum import Enum


@dataclass(frozen=True)
class SourceLocation:
    """Source code location information."""
    line: int
    column: int
    filename: Optional[str] = None


@dataclass(frozen=True)
class Name:
    """Variable, type or statement name."""
    value: str
    location: Optional[SourceLocation] = None

    def __str__(self) -> str:
        return self.value


# Type expressions

class PrimitiveKind(Enum):
    """Built-in base types."""
    NAT = "Nat"
    BOOL = "Bool"
    STRING = "String"


@dataclass(frozen=True)
class TypeName:
    """Named base type (or type alias / type variable)."""
    name: Name

    def __str__(self) -> str:
        return str(self.name)


@dataclass(frozen=True)
class FunctionType:
    """Function type ``A -> B``."""
    domain: Type
    codomain: Type

    def __str__(self) -> str:
        return f"({self.domain} -> {self.codomain})"


@dataclass(frozen=True)
class TypeApplication:
    """Type application ``F A``."""
    head: Type
    argument: Type

    def __str__(self) -> str:
        return f"({self.head} {self.argument})"


@dataclass(frozen=True)
class UniversalType:
    """Universal quantification ``forall n, T``."""
    bound: Name
    body: Type

    def __str__(self) -> str:
        return f"(forall {self.bound}, {self.body})"


@dataclass(frozen=True)
class IndexedType:
    """Type indexed by a term, e.g. ``Vec n``."""
    head: Type
    index: Expr

    def __str__(self) -> str:
        return f"({self.head} {self.index})"


@dataclass(frozen=True)
class PrimitiveType:
    """One of the built-in base types."""
    kind: PrimitiveKind

    def __str__(self) -> str:
        return self.kind.value


Type = Union[TypeName, FunctionType, TypeApplication, UniversalType, IndexedType, PrimitiveType]


# Expressions

@dataclass(frozen=True)
class Var:
    """Variable reference."""
    name: Name

    def __str__(self) -> str:
        return str(self.name)


@dataclass(frozen=True)
class Literal:
    """Primitive literal value."""
    value: Union[int, bool, str]

    @property
    def kind(self) -> PrimitiveKind:
        # bool first: True is an int too
        if isinstance(self.value, bool):
            return PrimitiveKind.BOOL
        if isinstance(self.value, int):
            return PrimitiveKind.NAT
        if isinstance(self.value, str):
            return PrimitiveKind.STRING
        raise TypeError(f"Unsupported literal value: {self.value!r}")

    def __str__(self) -> str:
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        if isinstance(self.value, str):
            return f'"{self.value}"'
        return str(self.value)


@dataclass(frozen=True)
class Lambda:
    """Abstraction ``(param => body)``."""
    param: Name
    body: Expr

    def __str__(self) -> str:
        return f"({self.param} => {self.body})"


@dataclass(frozen=True)
class App:
    """Application ``(function argument)``."""
    function: Expr
    argument: Expr

    def __str__(self) -> str:
        return f"({self.function} {self.argument})"


@dataclass(frozen=True)
class RecLambda:
    """Recursive abstraction ``(rec self of param => body)``."""
    self_name: Name
    param: Name
    body: Expr

    def __str__(self) -> str:
        return f"(rec {self.self_name} of {self.param} => {self.body})"


Expr = Union[Var, Literal, Lambda, App, RecLambda]


# Statements

@dataclass(frozen=True)
class Definition:
    """Value definition ``definition name : type := body``."""
    name: Name
    type: Type
    body: Expr

    def __str__(self) -> str:
        return f"definition {self.name} : {self.type} := {self.body}."


@dataclass(frozen=True)
class Fixpoint:
    """Fixed-point definition ``fix name : type := body``."""
    name: Name
    type: Type
    body: Expr

    def __str__(self) -> str:
        return f"fix {self.name} : {self.type} := {self.body}."


@dataclass(frozen=True)
class Assumption:
    """Axiom ``assume name : type``."""
    name: Name
    type: Type

    def __str__(self) -> str:
        return f"assume {self.name} : {self.type}."


@dataclass(frozen=True)
class Signature:
    """Type alias ``name := type``."""
    name: Name
    type: Type

    def __str__(self) -> str:
        return f"{self.name} := {self.type}."


@dataclass(frozen=True)
class Primitive:
    """Primitive base type declaration ``primitive name``."""
    name: Name

    def __str__(self) -> str:
        return f"primitive {self.name}."


@dataclass(frozen=True)
class ModuleDecl:
    """Module grouping. Parsed but not supported by the checker."""
    name: Name
    statements: Tuple[Stmt, ...] = ()

    def __str__(self) -> str:
        return f"module {self.name} ..."


Stmt = Union[Definition, Fixpoint, Assumption, Signature, Primitive, ModuleDecl]


@dataclass(frozen=True)
class Program:
    """A whole program: statements checked in order."""
    statements: Tuple[Stmt, ...]

    def __str__(self) -> str:
        return "\n".join(str(stmt) for stmt in self.statements)
