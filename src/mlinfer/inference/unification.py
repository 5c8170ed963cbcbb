"""
Unification Engine for mlinfer.

Solves a list of equality constraints into a substitution, or fails with a
structured error if no consistent solution exists. Solving runs in rounds:
each round unifies the current constraint list left to right, the rules it
discovers are merged into the accumulated substitution, and every constraint
is rewritten with the merged result. A round that discovers nothing ends the
process.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Optional

from mlinfer.inference.types import (
    FunctionType,
    PolymorphicType,
    PrimitiveType,
    Substitution,
    Type,
    TypeVariable,
    substitute,
)
from mlinfer.utils.errors import OccursCheckError, SourceLocation, UnificationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Constraint:
    """
    An assertion that two types must be equal.

    ``origin`` is the location of the expression that introduced the
    constraint; it is carried along for error reporting and ignored by
    equality.
    """

    left: Type
    right: Type
    origin: Optional[SourceLocation] = field(default=None, compare=False)

    def substitute(self, replacement: Type, name: str) -> Constraint:
        return Constraint(
            substitute(replacement, name, self.left),
            substitute(replacement, name, self.right),
            self.origin,
        )

    def apply(self, substitution: Substitution) -> Constraint:
        return Constraint(
            substitution.apply(self.left),
            substitution.apply(self.right),
            self.origin,
        )

    def __str__(self) -> str:
        return f"{self.left} = {self.right}"


def occurs_check(name: str, type_: Type) -> bool:
    """
    Check whether the placeholder ``name`` appears anywhere in ``type_``.

    A polymorphic node quantifying ``name`` counts as an occurrence even
    though the quantified variable is a different one.
    """
    if isinstance(type_, PrimitiveType):
        return False
    if isinstance(type_, TypeVariable):
        return type_.name == name
    if isinstance(type_, FunctionType):
        return occurs_check(name, type_.domain) or occurs_check(name, type_.codomain)
    if isinstance(type_, PolymorphicType):
        if name in type_.bound:
            return True
        return occurs_check(name, type_.body)
    return False


def unify_constraints(constraints: Iterable[Constraint]) -> list[tuple[str, Type]]:
    """
    Run one unification pass over ``constraints``, left to right.

    Returns the rules discovered, oldest first. Each rule has already been
    applied to every constraint after the one that produced it.

    Raises:
        OccursCheckError: a placeholder would have to contain itself
        UnificationError: two types have incompatible shapes
    """
    pending = deque(constraints)
    rules: list[tuple[str, Type]] = []

    while pending:
        constraint = pending.popleft()
        left, right = constraint.left, constraint.right

        if isinstance(left, PrimitiveType) and left == right:
            continue

        if isinstance(left, FunctionType) and isinstance(right, FunctionType):
            pending.appendleft(Constraint(left.codomain, right.codomain, constraint.origin))
            pending.appendleft(Constraint(left.domain, right.domain, constraint.origin))
            continue

        if isinstance(left, TypeVariable):
            name, resolved = left.name, right
        elif isinstance(right, TypeVariable):
            name, resolved = right.name, left
        else:
            raise UnificationError(left, right, constraint.origin)

        if resolved == TypeVariable(name):
            continue
        if occurs_check(name, resolved):
            raise OccursCheckError(name, resolved, constraint.origin)

        pending = deque(remaining.substitute(resolved, name) for remaining in pending)
        rules.append((name, resolved))

    return rules


def unify_substitutions(
    accumulated: Substitution,
    constraints: Iterable[Constraint],
) -> Substitution:
    """
    Solve ``constraints`` to a fixed point, starting from ``accumulated``.

    Every round merges its new rules into the accumulated substitution and
    rewrites the constraints with it; the round that produces no rule
    returns the accumulated substitution.
    """
    current = list(constraints)
    rounds = 0

    while True:
        new_rules = unify_constraints(current)
        rounds += 1
        if not new_rules:
            logger.debug("unification settled after %d round(s)", rounds)
            return accumulated

        for name, resolved in new_rules:
            accumulated = accumulated.extend(name, resolved)

        current = [_rewrite(constraint, accumulated) for constraint in current]


def _rewrite(constraint: Constraint, substitution: Substitution) -> Constraint:
    # Newest rule first.
    for name, resolved in substitution:
        constraint = constraint.substitute(resolved, name)
    return constraint


def unify(constraints: Iterable[Constraint]) -> Substitution:
    """Solve ``constraints`` into a substitution."""
    return unify_substitutions(Substitution.empty(), constraints)
