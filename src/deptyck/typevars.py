"""Type-variables: the internal universe of unification.

A type-variable is either a ground surface type (``Bound``), an unresolved
metavariable (``FreeName``), or a composite mirroring a surface type shape
whose components may still be unresolved.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Union

from .syntax import (
    Expr, FunctionType, IndexedType, Name, Type, TypeApplication, UniversalType,
)


@dataclass(frozen=True)
class Bound:
    """A fully ground type, opaque to rewriting."""
    type: Type

    def __str__(self) -> str:
        return f"{{{self.type}}}"


@dataclass(frozen=True)
class FreeName:
    """An unresolved metavariable."""
    name: Name

    def __str__(self) -> str:
        return str(self.name)


@dataclass(frozen=True)
class FreeFunc:
    domain: TypeVar
    codomain: TypeVar

    def __str__(self) -> str:
        return f"({self.domain} -> {self.codomain})"


@dataclass(frozen=True)
class FreeAppl:
    head: TypeVar
    argument: TypeVar

    def __str__(self) -> str:
        return f"({self.head} {self.argument})"


@dataclass(frozen=True)
class FreeProd:
    """Quantifier; the bound name's own type lives in a declaration."""
    bound: Name
    body: TypeVar

    def __str__(self) -> str:
        return f"(forall {self.bound}, {self.body})"


@dataclass(frozen=True)
class FreeCons:
    """Type indexed by a term."""
    head: TypeVar
    index: Expr

    def __str__(self) -> str:
        return f"({self.head} {self.index})"


TypeVar = Union[Bound, FreeName, FreeFunc, FreeAppl, FreeProd, FreeCons]


@dataclass(frozen=True)
class Rewrite:
    """Substitution entry ``name := replacement``."""
    name: Name
    replacement: TypeVar

    def __str__(self) -> str:
        return f"{self.name} := {self.replacement}"


@dataclass(frozen=True)
class Declaration:
    """Typing judgment ``expr : type``."""
    expr: Expr
    type: TypeVar

    def __str__(self) -> str:
        return f"{self.expr} : {self.type}"


def free_names(tv: TypeVar) -> List[Name]:
    """Metavariable occurrences in a type-variable, duplicates included."""
    if isinstance(tv, Bound):
        return []
    if isinstance(tv, FreeName):
        return [tv.name]
    if isinstance(tv, FreeFunc):
        return free_names(tv.domain) + free_names(tv.codomain)
    if isinstance(tv, FreeAppl):
        return free_names(tv.head) + free_names(tv.argument)
    if isinstance(tv, FreeProd):
        return free_names(tv.body)
    if isinstance(tv, FreeCons):
        return free_names(tv.head)
    raise TypeError(f"Unknown type variable: {tv!r}")


def ground_type(tv: TypeVar) -> Optional[Type]:
    """Convert a resolved type-variable back to a surface type.

    Returns None if any metavariable is left unresolved. Callers should
    dereference first.
    """
    if isinstance(tv, Bound):
        return tv.type
    if isinstance(tv, FreeName):
        return None
    if isinstance(tv, FreeFunc):
        domain, codomain = ground_type(tv.domain), ground_type(tv.codomain)
        if domain is None or codomain is None:
            return None
        return FunctionType(domain, codomain)
    if isinstance(tv, FreeAppl):
        head, argument = ground_type(tv.head), ground_type(tv.argument)
        if head is None or argument is None:
            return None
        return TypeApplication(head, argument)
    if isinstance(tv, FreeProd):
        body = ground_type(tv.body)
        return None if body is None else UniversalType(tv.bound, body)
    if isinstance(tv, FreeCons):
        head = ground_type(tv.head)
        return None if head is None else IndexedType(head, tv.index)
    raise TypeError(f"Unknown type variable: {tv!r}")
