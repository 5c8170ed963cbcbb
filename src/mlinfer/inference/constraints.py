"""
Constraint Generation for mlinfer.

Walks an expression tree, assigns a type (a base type or a fresh placeholder)
to every node and collects the equality constraints implied by the shape of
each expression. Constraints from sub-expressions are listed before the ones
introduced by the node itself.

Let bindings are where polymorphism enters: the bound expression's
constraints are solved on the spot, the environment is refined with the
result, and a non-recursive binding is generalized before the body sees it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from mlinfer.inference.annotated import TypedExpression
from mlinfer.inference.ast_nodes import (
    BinaryExpression,
    BooleanLiteral,
    CallExpression,
    ConditionalExpression,
    Expression,
    ExpressionVisitor,
    FunctionExpression,
    Identifier,
    IntegerLiteral,
    LetExpression,
    NotExpression,
    OperatorCategory,
    StringLiteral,
)
from mlinfer.inference.environment import TypeEnvironment
from mlinfer.inference.generalization import generalize, instantiate
from mlinfer.inference.types import (
    BOOLEAN_TYPE,
    NUMERIC_TYPE,
    STRING_TYPE,
    FunctionType,
    Type,
    TypeVariableSupply,
)
from mlinfer.inference.unification import Constraint, unify
from mlinfer.utils.errors import UnboundVariableError

logger = logging.getLogger(__name__)


# Operand and result types for operators whose operands have a fixed type
_OPERAND_TYPES: dict[OperatorCategory, Type] = {
    OperatorCategory.ARITHMETIC: NUMERIC_TYPE,
    OperatorCategory.CONCATENATION: STRING_TYPE,
    OperatorCategory.LOGICAL: BOOLEAN_TYPE,
}


@dataclass
class GenerationResult:
    """
    The outcome of generating constraints for one expression.

    Attributes:
        node: The annotated tree for the expression
        type_: The expression's type (before any substitution)
        constraints: Constraints from sub-expressions first, then the node's own
    """

    node: TypedExpression
    type_: Type
    constraints: list[Constraint] = field(default_factory=list)

    def __iter__(self) -> Iterator[Any]:
        return iter((self.node, self.type_, self.constraints))


class ConstraintGenerator(ExpressionVisitor):
    """
    Assigns types to expressions and collects equality constraints.

    Usage:
        generator = ConstraintGenerator(TypeVariableSupply())
        node, type_, constraints = generator.generate(TypeEnvironment.empty(), expr)
    """

    def __init__(self, supply: TypeVariableSupply) -> None:
        self.supply = supply
        self._environment = TypeEnvironment.empty()

    def generate(self, environment: TypeEnvironment, expression: Expression) -> GenerationResult:
        """Generate constraints for ``expression`` under ``environment``."""
        saved = self._environment
        self._environment = environment
        try:
            return expression.accept(self)
        finally:
            self._environment = saved

    # -------------------------------------------------------------------------
    # Literals
    # -------------------------------------------------------------------------

    def visit_integer_literal(self, node: IntegerLiteral) -> GenerationResult:
        return GenerationResult(TypedExpression(node, NUMERIC_TYPE), NUMERIC_TYPE)

    def visit_boolean_literal(self, node: BooleanLiteral) -> GenerationResult:
        return GenerationResult(TypedExpression(node, BOOLEAN_TYPE), BOOLEAN_TYPE)

    def visit_string_literal(self, node: StringLiteral) -> GenerationResult:
        return GenerationResult(TypedExpression(node, STRING_TYPE), STRING_TYPE)

    # -------------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------------

    def visit_identifier(self, node: Identifier) -> GenerationResult:
        scheme = self._environment.lookup(node.name)
        if scheme is None:
            raise UnboundVariableError(node.name, node.location)
        type_ = instantiate(scheme, self.supply)
        return GenerationResult(TypedExpression(node, type_), type_)

    def visit_function(self, node: FunctionExpression) -> GenerationResult:
        parameter_type = self.supply.fresh()
        result_type = self.supply.fresh()
        body = self.generate(
            self._environment.extend(node.parameter, parameter_type), node.body
        )
        type_ = FunctionType(parameter_type, result_type)
        constraints = body.constraints + [
            Constraint(body.type_, result_type, node.location),
        ]
        return GenerationResult(TypedExpression(node, type_, (body.node,)), type_, constraints)

    def visit_not(self, node: NotExpression) -> GenerationResult:
        operand = self.visit(node.operand)
        constraints = operand.constraints + [
            Constraint(operand.type_, BOOLEAN_TYPE, node.location),
        ]
        return GenerationResult(
            TypedExpression(node, BOOLEAN_TYPE, (operand.node,)), BOOLEAN_TYPE, constraints
        )

    def visit_binary_expression(self, node: BinaryExpression) -> GenerationResult:
        left = self.visit(node.left)
        right = self.visit(node.right)
        category = node.operator.category

        if category is OperatorCategory.COMPARISON:
            # Comparison is polymorphic: only the operands must agree.
            result_type: Type = BOOLEAN_TYPE
            operator_constraints = [Constraint(left.type_, right.type_, node.location)]
        else:
            result_type = _OPERAND_TYPES[category]
            operator_constraints = [
                Constraint(left.type_, result_type, node.location),
                Constraint(right.type_, result_type, node.location),
            ]

        constraints = left.constraints + right.constraints + operator_constraints
        return GenerationResult(
            TypedExpression(node, result_type, (left.node, right.node)),
            result_type,
            constraints,
        )

    def visit_conditional(self, node: ConditionalExpression) -> GenerationResult:
        condition = self.visit(node.condition)
        then_branch = self.visit(node.then_expr)
        else_branch = self.visit(node.else_expr)

        constraints = (
            condition.constraints
            + then_branch.constraints
            + else_branch.constraints
            + [
                Constraint(condition.type_, BOOLEAN_TYPE, node.location),
                Constraint(then_branch.type_, else_branch.type_, node.location),
            ]
        )
        type_ = then_branch.type_
        return GenerationResult(
            TypedExpression(node, type_, (condition.node, then_branch.node, else_branch.node)),
            type_,
            constraints,
        )

    def visit_call(self, node: CallExpression) -> GenerationResult:
        callee = self.visit(node.callee)
        argument = self.visit(node.argument)
        result_type = self.supply.fresh()

        constraints = (
            callee.constraints
            + argument.constraints
            + [Constraint(callee.type_, FunctionType(argument.type_, result_type), node.location)]
        )
        return GenerationResult(
            TypedExpression(node, result_type, (callee.node, argument.node)),
            result_type,
            constraints,
        )

    def visit_let(self, node: LetExpression) -> GenerationResult:
        environment = self._environment

        if node.is_recursive:
            self_type = self.supply.fresh()
            value = self.generate(environment.extend(node.name, self_type), node.value)
        else:
            value = self.visit(node.value)

        partial = unify(value.constraints)
        refined = environment.map_types(partial.apply)
        value_type = partial.apply(value.type_)

        if node.is_recursive:
            scheme = value_type
        else:
            scheme = generalize(refined, value_type)
        logger.debug("let %s : %s", node.name, scheme)

        body = self.generate(environment.extend(node.name, scheme), node.body)
        return GenerationResult(
            TypedExpression(node, body.type_, (value.node, body.node)),
            body.type_,
            value.constraints + body.constraints,
        )


def generate(
    environment: TypeEnvironment,
    expression: Expression,
    supply: Optional[TypeVariableSupply] = None,
) -> GenerationResult:
    """
    Convenience function to generate constraints for an expression.

    Args:
        environment: Bindings in scope
        expression: The expression to annotate
        supply: Source of fresh placeholders (a new one if omitted)

    Returns:
        The annotated tree, the expression's type and its constraints
    """
    generator = ConstraintGenerator(supply or TypeVariableSupply())
    return generator.generate(environment, expression)
