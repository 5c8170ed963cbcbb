"""
Expression tree node definitions for mlinfer.

This module defines the node types of an already-parsed program in the
expression language. Every construct is an expression: literals, identifiers,
single-parameter functions, negation, binary operations, conditionals,
application and (possibly recursive) let bindings. Each node is immutable and
may carry source location information for error reporting.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional

from mlinfer.utils.errors import SourceLocation


class Expression(ABC):
    """Base class for all expressions."""

    location: Optional[SourceLocation]

    @abstractmethod
    def accept(self, visitor: "ExpressionVisitor") -> Any:
        """Accept a visitor for tree traversal."""
        pass

    @abstractmethod
    def children(self) -> tuple["Expression", ...]:
        """Direct sub-expressions, in evaluation order."""
        pass


class ExpressionVisitor(ABC):
    """
    Visitor pattern base class for expression traversal.

    Implement this to create expression processors (constraint generators,
    formatters, serializers, etc.).
    """

    def visit(self, node: Expression) -> Any:
        """Dispatch to the appropriate visit method."""
        return node.accept(self)

    @abstractmethod
    def visit_integer_literal(self, node: IntegerLiteral) -> Any: ...

    @abstractmethod
    def visit_boolean_literal(self, node: BooleanLiteral) -> Any: ...

    @abstractmethod
    def visit_string_literal(self, node: StringLiteral) -> Any: ...

    @abstractmethod
    def visit_identifier(self, node: Identifier) -> Any: ...

    @abstractmethod
    def visit_function(self, node: FunctionExpression) -> Any: ...

    @abstractmethod
    def visit_not(self, node: NotExpression) -> Any: ...

    @abstractmethod
    def visit_binary_expression(self, node: BinaryExpression) -> Any: ...

    @abstractmethod
    def visit_conditional(self, node: ConditionalExpression) -> Any: ...

    @abstractmethod
    def visit_call(self, node: CallExpression) -> Any: ...

    @abstractmethod
    def visit_let(self, node: LetExpression) -> Any: ...


# -----------------------------------------------------------------------------
# Operators
# -----------------------------------------------------------------------------


class OperatorCategory(Enum):
    """How a binary operator constrains its operands."""

    ARITHMETIC = auto()
    CONCATENATION = auto()
    COMPARISON = auto()
    LOGICAL = auto()


class BinaryOperator(Enum):
    """Binary operator types."""

    # Arithmetic
    ADD = auto()
    SUB = auto()
    MULT = auto()
    DIV = auto()

    # String
    CONCAT = auto()

    # Comparison
    GREATER = auto()
    LESS = auto()
    GREATER_EQUAL = auto()
    LESS_EQUAL = auto()
    EQUAL = auto()
    NOT_EQUAL = auto()

    # Logical
    AND = auto()
    OR = auto()

    @property
    def category(self) -> OperatorCategory:
        return OPERATOR_CATEGORIES[self]


OPERATOR_CATEGORIES: dict[BinaryOperator, OperatorCategory] = {
    BinaryOperator.ADD: OperatorCategory.ARITHMETIC,
    BinaryOperator.SUB: OperatorCategory.ARITHMETIC,
    BinaryOperator.MULT: OperatorCategory.ARITHMETIC,
    BinaryOperator.DIV: OperatorCategory.ARITHMETIC,
    BinaryOperator.CONCAT: OperatorCategory.CONCATENATION,
    BinaryOperator.GREATER: OperatorCategory.COMPARISON,
    BinaryOperator.LESS: OperatorCategory.COMPARISON,
    BinaryOperator.GREATER_EQUAL: OperatorCategory.COMPARISON,
    BinaryOperator.LESS_EQUAL: OperatorCategory.COMPARISON,
    BinaryOperator.EQUAL: OperatorCategory.COMPARISON,
    BinaryOperator.NOT_EQUAL: OperatorCategory.COMPARISON,
    BinaryOperator.AND: OperatorCategory.LOGICAL,
    BinaryOperator.OR: OperatorCategory.LOGICAL,
}


# -----------------------------------------------------------------------------
# Literals
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class IntegerLiteral(Expression):
    """An integer literal."""

    value: int
    location: Optional[SourceLocation] = None

    def accept(self, visitor: ExpressionVisitor) -> Any:
        return visitor.visit_integer_literal(self)

    def children(self) -> tuple[Expression, ...]:
        return ()


@dataclass(frozen=True, slots=True)
class BooleanLiteral(Expression):
    """A boolean literal (true or false)."""

    value: bool
    location: Optional[SourceLocation] = None

    def accept(self, visitor: ExpressionVisitor) -> Any:
        return visitor.visit_boolean_literal(self)

    def children(self) -> tuple[Expression, ...]:
        return ()


@dataclass(frozen=True, slots=True)
class StringLiteral(Expression):
    """A string literal."""

    value: str
    location: Optional[SourceLocation] = None

    def accept(self, visitor: ExpressionVisitor) -> Any:
        return visitor.visit_string_literal(self)

    def children(self) -> tuple[Expression, ...]:
        return ()


# -----------------------------------------------------------------------------
# Expressions
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Identifier(Expression):
    """
    An identifier expression.

    Example:
        x, my_function
    """

    name: str
    location: Optional[SourceLocation] = None

    def accept(self, visitor: ExpressionVisitor) -> Any:
        return visitor.visit_identifier(self)

    def children(self) -> tuple[Expression, ...]:
        return ()


@dataclass(frozen=True, slots=True)
class FunctionExpression(Expression):
    """
    An anonymous single-parameter function.

    Functions of several arguments are written curried.

    Example:
        fun x -> x + 1
    """

    parameter: str
    body: Expression
    location: Optional[SourceLocation] = None

    def accept(self, visitor: ExpressionVisitor) -> Any:
        return visitor.visit_function(self)

    def children(self) -> tuple[Expression, ...]:
        return (self.body,)


@dataclass(frozen=True, slots=True)
class NotExpression(Expression):
    """
    Logical negation.

    Example:
        not flag
    """

    operand: Expression
    location: Optional[SourceLocation] = None

    def accept(self, visitor: ExpressionVisitor) -> Any:
        return visitor.visit_not(self)

    def children(self) -> tuple[Expression, ...]:
        return (self.operand,)


@dataclass(frozen=True, slots=True)
class BinaryExpression(Expression):
    """
    A binary operation expression.

    Example:
        a + b, s ^ "!", x <> y
    """

    operator: BinaryOperator
    left: Expression
    right: Expression
    location: Optional[SourceLocation] = None

    def accept(self, visitor: ExpressionVisitor) -> Any:
        return visitor.visit_binary_expression(self)

    def children(self) -> tuple[Expression, ...]:
        return (self.left, self.right)


@dataclass(frozen=True, slots=True)
class ConditionalExpression(Expression):
    """
    A conditional expression.

    Example:
        if n = 0 then 1 else n
    """

    condition: Expression
    then_expr: Expression
    else_expr: Expression
    location: Optional[SourceLocation] = None

    def accept(self, visitor: ExpressionVisitor) -> Any:
        return visitor.visit_conditional(self)

    def children(self) -> tuple[Expression, ...]:
        return (self.condition, self.then_expr, self.else_expr)


@dataclass(frozen=True, slots=True)
class CallExpression(Expression):
    """
    Application of a function to a single argument.

    Example:
        f 5
    """

    callee: Expression
    argument: Expression
    location: Optional[SourceLocation] = None

    def accept(self, visitor: ExpressionVisitor) -> Any:
        return visitor.visit_call(self)

    def children(self) -> tuple[Expression, ...]:
        return (self.callee, self.argument)


@dataclass(frozen=True, slots=True)
class LetExpression(Expression):
    """
    A let binding, optionally recursive.

    Example:
        let id = fun x -> x in id 5
        let rec f = fun n -> if n = 0 then 1 else n * f (n - 1) in f 5
    """

    name: str
    is_recursive: bool
    value: Expression
    body: Expression
    location: Optional[SourceLocation] = None

    def accept(self, visitor: ExpressionVisitor) -> Any:
        return visitor.visit_let(self)

    def children(self) -> tuple[Expression, ...]:
        return (self.value, self.body)
