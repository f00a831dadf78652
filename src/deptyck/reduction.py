"""Term reduction for deptyck.

Index terms of indexed types are compared up to normalization: two indices
are the same index when they reduce to alpha-equivalent normal forms.
Reduction is normal-order and fuel-bounded, so a divergent term stops
reducing once the budget is spent and is compared as far as it got.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Set, Tuple

from .syntax import App, Expr, Lambda, Literal, Name, RecLambda, Var


DEFAULT_FUEL = 1000


def free_vars(expr: Expr) -> Set[str]:
    """Names occurring free in a term."""
    if isinstance(expr, Var):
        return {expr.name.value}
    if isinstance(expr, Literal):
        return set()
    if isinstance(expr, Lambda):
        return free_vars(expr.body) - {expr.param.value}
    if isinstance(expr, App):
        return free_vars(expr.function) | free_vars(expr.argument)
    if isinstance(expr, RecLambda):
        return free_vars(expr.body) - {expr.self_name.value, expr.param.value}
    raise TypeError(f"Unknown expression: {expr!r}")


def _fresh(base: str, avoid: Set[str]) -> str:
    i = 1
    while f"{base}'{i}" in avoid:
        i += 1
    return f"{base}'{i}"


def substitute(expr: Expr, mapping: Dict[str, Expr]) -> Expr:
    """Simultaneous capture-avoiding substitution."""
    if not mapping:
        return expr
    if isinstance(expr, Var):
        return mapping.get(expr.name.value, expr)
    if isinstance(expr, Literal):
        return expr
    if isinstance(expr, App):
        return App(substitute(expr.function, mapping), substitute(expr.argument, mapping))
    if isinstance(expr, Lambda):
        inner = {k: v for k, v in mapping.items() if k != expr.param.value}
        param, inner = _rename_binder(expr.param, expr.body, inner)
        return Lambda(param, substitute(expr.body, inner))
    if isinstance(expr, RecLambda):
        inner = {k: v for k, v in mapping.items()
                 if k not in (expr.self_name.value, expr.param.value)}
        self_name, inner = _rename_binder(expr.self_name, expr.body, inner)
        param, inner = _rename_binder(expr.param, expr.body, inner, taken={self_name.value})
        return RecLambda(self_name, param, substitute(expr.body, inner))
    raise TypeError(f"Unknown expression: {expr!r}")


def _rename_binder(binder: Name, body: Expr, mapping: Dict[str, Expr],
                   taken: Optional[Set[str]] = None):
    """Rename ``binder`` if substituting ``mapping`` under it would capture."""
    incoming: Set[str] = set()
    for name, replacement in mapping.items():
        if name in free_vars(body):
            incoming |= free_vars(replacement)
    if binder.value not in incoming:
        return binder, mapping
    avoid = incoming | free_vars(body) | set(mapping) | (taken or set())
    renamed = Name(_fresh(binder.value, avoid), binder.location)
    return renamed, {**mapping, binder.value: Var(renamed)}


def _unwind(expr: Expr) -> Tuple[Expr, List[Expr]]:
    """Split an application spine into its head and arguments, last applied first."""
    args: List[Expr] = []
    while isinstance(expr, App):
        args.append(expr.argument)
        expr = expr.function
    return expr, args


def _rebuild(head: Expr, args: List[Expr]) -> Expr:
    for arg in reversed(args):
        head = App(head, arg)
    return head


class Normalizer:
    """Normal-order reducer with a step budget.

    Pending subterms live on explicit work stacks, never on the Python
    call stack, however many steps are taken.
    """

    def __init__(self, fuel: int = DEFAULT_FUEL):
        self.fuel = fuel
        self.steps = 0

    @property
    def exhausted(self) -> bool:
        return self.steps >= self.fuel

    def normalize(self, expr: Expr) -> Expr:
        """Reduce a term to normal form (or as far as the fuel allows)."""
        results: List[Expr] = []
        work: List[Tuple[str, Any]] = [("eval", expr)]
        while work:
            op, item = work.pop()
            if op == "eval":
                term = self.whnf(item)
                if isinstance(term, (Lambda, RecLambda)):
                    work.append(("close", term))
                    work.append(("eval", term.body))
                    continue
                head, args = _unwind(term)
                if not args:
                    results.append(term)
                    continue
                work.append(("apply", len(args)))
                # popped head first, then arguments in application order
                work.extend(("eval", arg) for arg in args)
                work.append(("eval", head))
            elif op == "close":
                body = results.pop()
                if isinstance(item, Lambda):
                    results.append(Lambda(item.param, body))
                else:
                    results.append(RecLambda(item.self_name, item.param, body))
            else:
                values = results[-(item + 1):]
                del results[-(item + 1):]
                term = values[0]
                for arg in values[1:]:
                    term = App(term, arg)
                results.append(term)
        return results.pop()

    def whnf(self, expr: Expr) -> Expr:
        """Reduce the head of a term until it is no longer a redex."""
        head, args = _unwind(expr)
        while args and not self.exhausted:
            if isinstance(head, Lambda):
                self.steps += 1
                reduced = substitute(head.body, {head.param.value: args.pop()})
            elif isinstance(head, RecLambda):
                # unroll once: self is replaced by the whole recursive abstraction
                self.steps += 1
                reduced = substitute(head.body, {
                    head.self_name.value: head,
                    head.param.value: args.pop(),
                })
            else:
                break
            head, more = _unwind(reduced)
            args.extend(more)
        return _rebuild(head, args)


def normalize(expr: Expr, fuel: int = DEFAULT_FUEL) -> Expr:
    """Normalize a term with a fresh step budget."""
    return Normalizer(fuel).normalize(expr)


def alpha_equivalent(e: Expr, f: Expr) -> bool:
    """Structural equality up to renaming of bound names."""
    pending: List[Tuple[Expr, Expr, Dict[str, int], Dict[str, int], int]] = [(e, f, {}, {}, 0)]
    while pending:
        e, f, left, right, depth = pending.pop()
        if isinstance(e, Var) and isinstance(f, Var):
            a, b = left.get(e.name.value), right.get(f.name.value)
            if a is None and b is None:
                if e.name.value != f.name.value:
                    return False
            elif a != b:
                return False
        elif isinstance(e, Literal) and isinstance(f, Literal):
            if type(e.value) is not type(f.value) or e.value != f.value:
                return False
        elif isinstance(e, App) and isinstance(f, App):
            pending.append((e.argument, f.argument, left, right, depth))
            pending.append((e.function, f.function, left, right, depth))
        elif isinstance(e, Lambda) and isinstance(f, Lambda):
            pending.append((e.body, f.body,
                            {**left, e.param.value: depth},
                            {**right, f.param.value: depth}, depth + 1))
        elif isinstance(e, RecLambda) and isinstance(f, RecLambda):
            pending.append((e.body, f.body,
                            {**left, e.self_name.value: depth, e.param.value: depth + 1},
                            {**right, f.self_name.value: depth, f.param.value: depth + 1},
                            depth + 2))
        else:
            return False
    return True


def equivalent(e: Expr, f: Expr, fuel: int = DEFAULT_FUEL) -> bool:
    """Semantic equality of terms: alpha-equivalent normal forms."""
    if alpha_equivalent(e, f):
        return True
    return alpha_equivalent(normalize(e, fuel), normalize(f, fuel))
