"""
Type-annotated expression trees.

A ``TypedExpression`` decorates a node of the plain expression tree with the
type computed for it. Its children decorate the node's own children in the
same order, so the annotated tree always mirrors the plain tree.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from mlinfer.inference.ast_nodes import Expression
from mlinfer.inference.types import Substitution, Type


@dataclass(frozen=True)
class TypedExpression:
    """
    An expression node paired with its type.

    Attributes:
        expression: The plain node being annotated
        type_: Its type; a placeholder until a substitution is applied
        children: Annotations of ``expression.children()``, in order
    """

    expression: Expression
    type_: Type
    children: tuple[TypedExpression, ...] = ()

    def __post_init__(self) -> None:
        if len(self.children) != len(self.expression.children()):
            raise ValueError(
                f"{type(self.expression).__name__} has "
                f"{len(self.expression.children())} children, "
                f"got {len(self.children)} annotations"
            )

    def apply_substitution(self, substitution: Substitution) -> TypedExpression:
        """Return a new tree with ``substitution`` applied to every node's type."""
        return TypedExpression(
            self.expression,
            substitution.apply(self.type_),
            tuple(child.apply_substitution(substitution) for child in self.children),
        )

    def walk(self) -> Iterator[TypedExpression]:
        """Yield this node and all descendants, pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()
