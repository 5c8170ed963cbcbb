"""
Type Inference Driver for mlinfer.

Ties the pieces together: generate constraints from an empty environment,
solve them, and apply the resulting substitution to the top-level type (and,
on request, to every node of the annotated tree).

Each ``TypeInferrer`` owns its placeholder supply and resets it at the start
of every run, so repeated runs produce identical names and separate inferrers
never hand out each other's placeholders.
"""

from __future__ import annotations

import logging
import sys
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import ContextManager, Iterator, Optional

from mlinfer.inference.annotated import TypedExpression
from mlinfer.inference.ast_nodes import Expression
from mlinfer.inference.constraints import ConstraintGenerator
from mlinfer.inference.environment import TypeEnvironment
from mlinfer.inference.types import Substitution, Type, TypeVariableSupply
from mlinfer.inference.unification import Constraint, unify

logger = logging.getLogger(__name__)


@dataclass
class InferenceConfig:
    """Configuration for a type inference run."""

    # Minimum interpreter recursion limit while a run is active. Generation
    # recurses once per tree level, so this bounds the accepted tree depth.
    recursion_limit: int = 10_000
    # Resolve the type of every node, not just the top-level one.
    annotate: bool = False


@dataclass
class InferenceResult:
    """
    Complete result of inferring the type of an expression.

    Attributes:
        type_: The resolved top-level type
        substitution: The solution of the constraint list
        constraints: Every constraint generated, in generation order
        annotated: The annotated tree with resolved types, if requested
    """

    type_: Type
    substitution: Substitution
    constraints: list[Constraint] = field(default_factory=list)
    annotated: Optional[TypedExpression] = None


class _SharedRecursionLimit:
    """
    Reference-counted raise of the interpreter recursion limit.

    The limit is process-wide, so overlapping runs (nested or in other
    threads) share one raise: each entry may only raise the limit, and the
    limit seen before the first entry is restored when the last one exits.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active = 0
        self._saved: Optional[int] = None

    @contextmanager
    def raised(self, minimum: int) -> Iterator[None]:
        with self._lock:
            if self._active == 0:
                self._saved = sys.getrecursionlimit()
            self._active += 1
            if minimum > sys.getrecursionlimit():
                sys.setrecursionlimit(minimum)
        try:
            yield
        finally:
            with self._lock:
                self._active -= 1
                if self._active == 0 and self._saved is not None:
                    sys.setrecursionlimit(self._saved)
                    self._saved = None


_shared_limit = _SharedRecursionLimit()


def raised_recursion_limit(minimum: int) -> ContextManager[None]:
    """
    Keep the interpreter recursion limit at least ``minimum`` inside the block.

    Usage:
        with raised_recursion_limit(50_000):
            expression = from_json(text)
    """
    return _shared_limit.raised(minimum)


class TypeInferrer:
    """
    Infers types of expressions.

    Usage:
        inferrer = TypeInferrer()
        result = inferrer.run(expression)
        print(result.type_)
    """

    def __init__(self, config: Optional[InferenceConfig] = None) -> None:
        self.config = config or InferenceConfig()
        self.supply = TypeVariableSupply()

    def run(self, expression: Expression) -> InferenceResult:
        """
        Infer the type of ``expression``.

        Raises:
            UnboundVariableError: an identifier has no binding
            OccursCheckError: the expression needs an infinite type
            UnificationError: two types can never be made equal
        """
        self.supply.reset()
        with raised_recursion_limit(self.config.recursion_limit):
            generator = ConstraintGenerator(self.supply)
            node, type_, constraints = generator.generate(TypeEnvironment.empty(), expression)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "generated %d constraint(s):\n%s",
                    len(constraints),
                    "\n".join(str(constraint) for constraint in constraints),
                )

            substitution = unify(constraints)
            logger.debug("allocated %d placeholder(s)", self.supply.counter)
            logger.debug("substitution: %s", substitution)

            annotated = None
            if self.config.annotate:
                annotated = node.apply_substitution(substitution)

        return InferenceResult(
            type_=substitution.apply(type_),
            substitution=substitution,
            constraints=constraints,
            annotated=annotated,
        )

    def infer(self, expression: Expression) -> Type:
        """Infer the resolved top-level type of ``expression``."""
        return self.run(expression).type_


def infer(expression: Expression, config: Optional[InferenceConfig] = None) -> Type:
    """
    Convenience function to infer the type of an expression.

    Args:
        expression: The expression to infer
        config: Optional inference configuration

    Returns:
        The resolved type
    """
    return TypeInferrer(config).infer(expression)


def infer_annotated(
    expression: Expression,
    config: Optional[InferenceConfig] = None,
) -> InferenceResult:
    """Infer the type of ``expression`` and of every node inside it."""
    config = replace(config or InferenceConfig(), annotate=True)
    return TypeInferrer(config).run(expression)
